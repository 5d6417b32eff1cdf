"""Tests for the exact Jacobi polynomials and Gauss-Jacobi quadrature."""

from femcore.exceptions import ConstructionError, InvalidParameter
from femcore.jacobi import Jacobi, binomial, gauss_jacobi, jacobi_derivative
from math import comb
import logging
import numpy as np
import pytest
from scipy.special import binom, eval_jacobi, roots_jacobi

PARAMETERS = [
    (n, a, b) for n in range(0, 9) for a in range(-1, 4) for b in range(-1, 4)
]


def test_new():
    """Test the accessors of a new polynomial."""
    jac = Jacobi(1, 2, 3)

    assert jac.get_degree() == 1
    assert jac.get_alpha() == 2
    assert jac.get_beta() == 3
    assert jac.normalizer == 0.5


@pytest.mark.parametrize("alpha, beta", [(-2, 3), (2, -3), (-2, -2), (-5, 0)])
def test_invalid_parameters(alpha, beta):
    """Test that parameters below -1 are rejected."""
    with pytest.raises(InvalidParameter):
        Jacobi(1, alpha, beta)


def test_invalid_parameter_is_recoverable():
    """Test that the construction failure is a catchable ValueError."""
    with pytest.raises(ConstructionError):
        Jacobi(2, -2, 0)
    with pytest.raises(ValueError):
        Jacobi(2, 0, -2)


@pytest.mark.parametrize("degree", [-1, 1.5])
def test_invalid_degree(degree):
    """Test that the degree must be a non-negative integer."""
    with pytest.raises(InvalidParameter):
        Jacobi(degree, 0, 0)


@pytest.mark.parametrize("alpha, beta", [(-1, -1), (-1, 0), (0, -1), (-1, 5)])
def test_boundary_parameters(alpha, beta):
    """Test that -1 is an admissible parameter."""
    jac = Jacobi(3, alpha, beta)

    assert jac.get_alpha() == alpha
    assert jac.get_beta() == beta


def test_coefficients_are_exact():
    """Test that coefficients are exact integers at high degree."""
    n, a, b = 80, 3, 1
    jac = Jacobi(n, a, b)

    coefficients = jac.get_coefficients()
    assert len(coefficients) == n + 1
    assert all(isinstance(c, int) for c in coefficients)
    assert coefficients == tuple(
        comb(n + a, k) * comb(n + b, n - k) for k in range(n + 1)
    )


def test_generalised_binomial():
    """Test the binomial coefficient for negative upper arguments."""
    assert binomial(-1, 0) == 1
    assert binomial(-1, 3) == -1
    assert binomial(-3, 2) == 6
    assert binomial(4, 5) == 0
    assert binomial(4, -1) == 0


def test_1_1_1():
    """Test the degree 1 polynomial with alpha = beta = 1."""
    jac = Jacobi(1, 1, 1)

    assert jac.evaluate(-1.0) == pytest.approx(-2.0)
    assert jac.evaluate(1.0) == pytest.approx(2.0)
    assert jac.evaluate(0.0) == pytest.approx(0.0)


@pytest.mark.parametrize(
    "degree, alpha, beta, x, expected",
    [
        (2, 1, 1, -1.0, 3.0),
        (2, 1, 1, 1.0, 3.0),
        (2, 1, 1, -0.2, -0.6),
        (2, 1, 1, 0.2, -0.6),
        (2, 2, 1, -1.0, 3.0),
        (2, 2, 1, 1.0, 6.0),
        (2, 2, 1, -0.2, -0.84),
        (2, 2, 1, 0.2, -0.24),
        (2, 1, 2, -1.0, 6.0),
        (2, 1, 2, 1.0, 3.0),
        (2, 1, 2, -0.2, -0.24),
        (2, 1, 2, 0.2, -0.84),
        (3, 2, 3, -1.0, -20.0),
        (3, 2, 3, 1.0, 10.0),
        (3, 2, 3, -0.2, 1.36),
        (3, 2, 3, 0.2, -0.56),
        (3, 2, 3, 0.0, 0.625),
        (6, 3, 1, -1.0, 7.0),
        (6, 3, 1, -0.2, -0.756672),
        (6, 3, 1, 0.0, -0.21875),
        (6, 3, 1, 1.0, 84.0),
    ],
)
def test_values(degree, alpha, beta, x, expected):
    """Test evaluation against known values."""
    assert Jacobi(degree, alpha, beta).evaluate(x) == pytest.approx(
        expected, abs=1e-8
    )


@pytest.mark.parametrize("degree, alpha, beta", PARAMETERS)
def test_endpoints(degree, alpha, beta):
    """Test the closed forms of the polynomial at x = 1 and x = -1."""
    jac = Jacobi(degree, alpha, beta)

    assert jac.evaluate(1.0) == pytest.approx(binom(degree + alpha, degree), abs=1e-12)
    assert jac.evaluate(-1.0) == pytest.approx(
        (-1) ** degree * binom(degree + beta, degree), abs=1e-12
    )


@pytest.mark.parametrize("degree, alpha, beta", PARAMETERS)
def test_symmetry(degree, alpha, beta):
    """Test that P(-x; alpha, beta) = (-1)^n P(x; beta, alpha)."""
    x = np.linspace(-1.0, 1.0, 17)

    lhs = Jacobi(degree, alpha, beta).evaluate(-x)
    rhs = (-1) ** degree * Jacobi(degree, beta, alpha).evaluate(x)

    assert np.allclose(lhs, rhs, rtol=1e-10, atol=1e-10)


@pytest.mark.parametrize(
    "degree, alpha, beta",
    [(n, a, b) for n in range(11) for a in range(3) for b in range(3)],
)
def test_against_scipy(degree, alpha, beta):
    """Test evaluation against an independent implementation."""
    x = np.linspace(-1.0, 1.0, 23)

    assert np.allclose(
        Jacobi(degree, alpha, beta)(x), eval_jacobi(degree, alpha, beta, x), atol=1e-9
    )


def test_scalar_and_array_evaluation():
    """Test that arrays are evaluated elementwise."""
    jac = Jacobi(4, 1, 2)
    x = np.array([-0.5, 0.1, 0.9])

    assert np.allclose(jac.evaluate(x), [jac.evaluate(xi) for xi in x])
    assert np.isscalar(jac.evaluate(0.3))


def test_equality():
    """Test that polynomials compare by their parameters."""
    assert Jacobi(3, 1, 0) == Jacobi(3, 1, 0)
    assert Jacobi(3, 1, 0) != Jacobi(3, 0, 1)
    assert len({Jacobi(2, 0, 0), Jacobi(2, 0, 0)}) == 1
    assert repr(Jacobi(2, 1, 0)) == "Jacobi(degree=2, alpha=1, beta=0)"


@pytest.mark.parametrize(
    "degree, alpha, beta", [(1, 0, 0), (3, 1, 2), (5, 0, 3), (7, 2, 2)]
)
def test_derivative(degree, alpha, beta):
    """Test the derivative against central differences."""
    jac = Jacobi(degree, alpha, beta)
    scale, djac = jacobi_derivative(jac)
    x = np.linspace(-0.9, 0.9, 11)
    h = 1e-6

    fd = (jac(x + h) - jac(x - h)) / (2 * h)

    assert np.allclose(scale * djac(x), fd, atol=1e-5)


def test_second_derivative():
    """Test a second derivative against the known polynomial."""
    # P_2^(0,0) = (3x^2 - 1) / 2
    scale, djac = jacobi_derivative(Jacobi(2, 0, 0), order=2)

    assert scale * djac(0.4) == pytest.approx(3.0)


def test_derivative_of_constant():
    """Test that the derivative of a constant vanishes."""
    scale, _ = jacobi_derivative(Jacobi(0, 1, 1))

    assert scale == 0.0


@pytest.mark.parametrize(
    "npoints, alpha, beta",
    [(n, a, b) for n in range(1, 11) for a in range(3) for b in range(3)],
)
def test_gauss_jacobi(npoints, alpha, beta):
    """Test the Gauss-Jacobi rule against an independent implementation."""
    points, weights = gauss_jacobi(npoints, alpha, beta)
    expected_points, expected_weights = roots_jacobi(npoints, alpha, beta)

    assert np.allclose(points, expected_points, atol=1e-12)
    assert np.allclose(weights, expected_weights, rtol=1e-10)


def test_gauss_jacobi_exactness():
    """Test that the rule integrates polynomials of degree 2n - 1 exactly."""
    points, weights = gauss_jacobi(4, 1, 0)

    # The integral of (1 - x) x^k over [-1, 1]
    for k in range(8):
        exact = (1 - (-1) ** (k + 1)) / (k + 1) - (1 - (-1) ** (k + 2)) / (k + 2)
        assert np.dot(weights, points**k) == pytest.approx(exact, abs=1e-13)


def test_gauss_jacobi_invalid():
    """Test that the weight function must be integrable."""
    with pytest.raises(InvalidParameter):
        gauss_jacobi(3, -1, 0)
    with pytest.raises(ValueError):
        gauss_jacobi(0)


@pytest.mark.parametrize("degree, alpha, beta", [(600, 0, 0), (600, 2, 1), (701, 1, 3)])
def test_endpoints_at_high_degree(degree, alpha, beta):
    """Test the endpoint values once the coefficients exceed the float range."""
    jac = Jacobi(degree, alpha, beta)

    assert jac.evaluate(1.0) == pytest.approx(float(comb(degree + alpha, degree)))
    assert jac.evaluate(-1.0) == pytest.approx(
        (-1) ** degree * float(comb(degree + beta, degree))
    )


def test_legendre_at_one_is_exact():
    """Test that P_600(1) evaluates to exactly one."""
    assert Jacobi(600, 0, 0).evaluate(1.0) == 1.0


def test_construct_beyond_float_exponent():
    """Test that degrees past the float exponent range still construct."""
    jac = Jacobi(1100, 0, 0)

    assert jac.normalizer == 0.0
    assert len(jac.get_coefficients()) == 1101
    assert jac.get_coefficients()[550] == comb(1100, 550) ** 2
    with np.errstate(all="ignore"):
        assert np.isscalar(jac.evaluate(0.3))


@pytest.mark.parametrize("npoints", [30, 40, 60])
@pytest.mark.parametrize("alpha, beta", [(0, 0), (2, 0), (1, 3)])
def test_gauss_jacobi_many_points(npoints, alpha, beta, caplog):
    """Test that Newton iteration stays accurate for many points."""
    with caplog.at_level(logging.WARNING, logger="femcore.jacobi"):
        points, weights = gauss_jacobi(npoints, alpha, beta)
    expected_points, expected_weights = roots_jacobi(npoints, alpha, beta)

    assert not caplog.records
    assert np.allclose(points, expected_points, rtol=0.0, atol=1e-12)
    assert np.allclose(weights, expected_weights, rtol=1e-9, atol=0.0)
