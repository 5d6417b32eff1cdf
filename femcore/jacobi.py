"""Jacobi polynomials with exact coefficients, and Gauss-Jacobi quadrature."""

from .constants import NEWTON_MAX_ITERATIONS, NEWTON_TOLERANCE
from .exceptions import InvalidParameter
from fractions import Fraction
from math import comb, copysign, factorial, inf, ldexp
import logging
import numpy as np
import sys

logger = logging.getLogger(__name__)


def _scaled_float(value: int, exponent: int) -> float:
    """The correctly rounded float nearest value / 2**exponent.

    Quotients at the edge of the float range or beyond become signed
    infinities.
    """
    if abs(value).bit_length() - exponent >= sys.float_info.max_exp:
        return copysign(inf, value)
    return value / 2**exponent


def binomial(n: int, k: int) -> int:
    """The generalised binomial coefficient for integer n and non-negative k.

    For negative n this is (-1)^k C(k - n - 1, k), so that C(-1, 0) == 1.

    :param n: The upper argument, possibly negative.
    :param k: The lower argument.

    :returns: The exact binomial coefficient.
    """
    if k < 0:
        return 0
    if n >= 0:
        return comb(n, k)
    return (-1) ** k * comb(k - n - 1, k)


class Jacobi:
    """The Jacobi polynomial P_n^(alpha, beta) of a given degree.

    The polynomial is stored in the form

        P(x) = 2^-n sum_k C(n + alpha, k) C(n + beta, n - k) (x - 1)^(n - k) (x + 1)^k

    with the binomial coefficients held as exact Python integers, so that no
    cancellation occurs while building them however large the degree.
    """

    def __init__(self, degree: int, alpha: int, beta: int):
        """Initialise the polynomial.

        :param degree: The polynomial degree.
        :param alpha: The first parameter, must be at least -1.
        :param beta: The second parameter, must be at least -1.

        :raises InvalidParameter: If any of the arguments is out of range.
        """
        if int(degree) != degree or degree < 0:
            raise InvalidParameter(
                f"degree must be a non-negative integer, got {degree}"
            )
        if int(alpha) != alpha or int(beta) != beta:
            raise InvalidParameter(
                f"alpha and beta must be integers, got alpha={alpha}, beta={beta}"
            )
        if alpha < -1 or beta < -1:
            raise InvalidParameter(
                f"alpha and beta must be at least -1, got alpha={alpha}, beta={beta}"
            )

        self._degree = int(degree)
        self._alpha = int(alpha)
        self._beta = int(beta)

        n = self._degree
        self._coefficients = tuple(
            binomial(n + self._alpha, k) * binomial(n + self._beta, n - k)
            for k in range(n + 1)
        )
        # 2^-n underflows to 0.0 past the float range
        self._normalizer = ldexp(1.0, -n)
        # Coefficients with the normalizer folded in, exact up to rounding
        self._scaled = tuple(_scaled_float(c, n) for c in self._coefficients)

    @property
    def degree(self) -> int:
        """The polynomial degree n."""
        return self._degree

    @property
    def alpha(self) -> int:
        """The exponent of (1 - x) in the weight function."""
        return self._alpha

    @property
    def beta(self) -> int:
        """The exponent of (1 + x) in the weight function."""
        return self._beta

    @property
    def normalizer(self) -> float:
        """The factor 2^-n in front of the coefficient sum."""
        return self._normalizer

    def get_degree(self) -> int:
        """Return the degree of the polynomial."""
        return self._degree

    def get_alpha(self) -> int:
        """Return the alpha parameter of the polynomial."""
        return self._alpha

    def get_beta(self) -> int:
        """Return the beta parameter of the polynomial."""
        return self._beta

    def get_coefficients(self) -> tuple[int, ...]:
        """Return the exact coefficients, ordered by the power of (x + 1)."""
        return self._coefficients

    def evaluate(self, x):
        """Evaluate the polynomial.

        Each coefficient is divided by 2^n exactly once, as integers, and the
        terms are summed in increasing order of the power of (x + 1). Very
        high degrees never raise: terms outside the float range give inf or
        nan instead.

        :param x: A real number or an array of real numbers.

        :returns: The value of P_n^(alpha, beta) at x, with the shape of x.
        """
        if np.isscalar(x):
            x = np.float64(x)
        else:
            x = np.asarray(x, dtype=np.float64)

        n = self._degree
        total = 0.0
        for k, coeff in enumerate(self._scaled):
            total = total + (x - 1.0) ** (n - k) * (x + 1.0) ** k * coeff
        return total

    __call__ = evaluate

    def __eq__(self, other):
        if not isinstance(other, Jacobi):
            return NotImplemented
        return (self._degree, self._alpha, self._beta) == (
            other._degree,
            other._alpha,
            other._beta,
        )

    def __hash__(self):
        return hash((Jacobi, self._degree, self._alpha, self._beta))

    def __repr__(self):
        return f"Jacobi(degree={self._degree}, alpha={self._alpha}, beta={self._beta})"


def jacobi_derivative(poly: Jacobi, order: int = 1) -> tuple[float, Jacobi]:
    """Express a derivative of a Jacobi polynomial as another Jacobi polynomial.

    Uses d/dx P_n^(a, b) = (n + a + b + 1) / 2 P_(n-1)^(a+1, b+1).

    :param poly: The polynomial to differentiate.
    :param order: The order of the derivative.

    :returns: A tuple (scale, q) such that the derivative equals scale * q.
    """
    n, a, b = poly.degree, poly.alpha, poly.beta
    scale = Fraction(1)
    for _ in range(order):
        if n == 0:
            return 0.0, Jacobi(0, a, b)
        scale *= Fraction(n + a + b + 1, 2)
        n, a, b = n - 1, a + 1, b + 1
    return float(scale), Jacobi(n, a, b)


def _jacobi_recurrence(x, degree: int, alpha: int, beta: int):
    """Evaluate P_degree^(alpha, beta) by the three-term recurrence.

    Stable for large degrees where the expanded form of :class:`Jacobi`
    cancels badly. Needs alpha, beta >= 0.
    """
    a, b = alpha, beta
    p_prev = np.ones_like(x)
    if degree == 0:
        return p_prev
    p = ((a + b + 2) * x + (a - b)) / 2.0
    for n in range(1, degree):
        c = 2 * n + a + b
        p_prev, p = p, (
            (c + 1) * ((c + 2) * c * x + a * a - b * b) * p
            - 2 * (n + a) * (n + b) * (c + 2) * p_prev
        ) / (2 * (n + 1) * (n + a + b + 1) * c)
    return p


def gauss_jacobi(
    npoints: int, alpha: int = 0, beta: int = 0
) -> tuple[np.ndarray, np.ndarray]:
    """Compute the Gauss-Jacobi quadrature points and weights on [-1, 1].

    The rule integrates (1 - x)^alpha (1 + x)^beta f(x) exactly for every
    polynomial f of degree at most 2 * npoints - 1. The points are the roots of
    P_npoints^(alpha, beta), found by Newton iteration with deflation of the
    roots already located.

    :param npoints: The number of quadrature points.
    :param alpha: The exponent of (1 - x) in the weight function.
    :param beta: The exponent of (1 + x) in the weight function.

    :returns: A tuple containing the increasing points and their weights.
    """
    if npoints < 1:
        raise ValueError(f"Need at least one quadrature point, got {npoints}")
    if alpha <= -1 or beta <= -1:
        raise InvalidParameter(
            "Gauss-Jacobi weights need alpha, beta > -1, "
            f"got alpha={alpha}, beta={beta}"
        )

    poly = Jacobi(npoints, alpha, beta)
    scale, dpoly = jacobi_derivative(poly)

    # Newton needs accurate values near the roots, so the polynomial and its
    # derivative are evaluated by recurrence rather than the expanded form
    def value(x):
        return _jacobi_recurrence(x, npoints, alpha, beta)

    def slope(x):
        return scale * _jacobi_recurrence(x, dpoly.degree, dpoly.alpha, dpoly.beta)

    logger.debug("Computing %d Gauss-Jacobi points for %r", npoints, poly)

    points = np.zeros(npoints)
    for k in range(npoints):
        # Chebyshev-Gauss points make a good initial guess
        r = -np.cos((2 * k + 1) * np.pi / (2 * npoints))
        if k > 0:
            r = (r + points[k - 1]) / 2.0

        for _ in range(NEWTON_MAX_ITERATIONS):
            deflation = np.sum(1.0 / (r - points[:k]))
            p = value(r)
            delta = -p / (slope(r) - p * deflation)
            r += delta
            if abs(delta) < NEWTON_TOLERANCE:
                break
        else:
            logger.warning(
                "Newton iteration for root %d of %r stopped at step %.3e",
                k,
                poly,
                delta,
            )
        points[k] = r

    # 2^(a+b+1) (n+a)! (n+b)! / ((n+a+b)! n!), kept exact until the end
    constant = float(
        Fraction(
            2 ** (alpha + beta + 1)
            * factorial(npoints + alpha)
            * factorial(npoints + beta),
            factorial(npoints + alpha + beta) * factorial(npoints),
        )
    )
    weights = constant / ((1.0 - points**2) * slope(points) ** 2)

    return points, weights
