"""Quadrature rules for reference elements."""

from .jacobi import gauss_jacobi
from .reference_elements import ReferenceCell
from abc import ABC, abstractmethod
import numpy as np


class IntegrationRule(ABC):
    """Weights and points for discrete integration.

    Discrete integration is a dot product between the weights and the values of
    the integrand at the points. Weight i belongs to point i.
    """

    @abstractmethod
    def get_dimension(self) -> int:
        """The dimension of the point space."""

    @abstractmethod
    def get_weights(self) -> np.ndarray:
        """The weights, one per point."""

    @abstractmethod
    def get_points(self) -> np.ndarray:
        """The points in AOS order, dimension coordinates per point."""

    @abstractmethod
    def get_number_of_points(self) -> int:
        """The number of points (and of weights)."""

    def integrate(self, values):
        """Integrate a function given by its values at the points.

        :param values: An array of shape (P,) with the integrand at each point.

        :returns: The dot product of the weights and the values.
        """
        values = np.asarray(values)
        assert values.shape == (self.get_number_of_points(),), (
            f"Expected {self.get_number_of_points()} values, got shape {values.shape}"
        )
        return np.dot(self.get_weights(), values)


class QuadratureRule(IntegrationRule):
    """An immutable set of quadrature points and weights."""

    def __init__(self, points: np.ndarray, weights: np.ndarray, degree: int = None):
        """Initialise the rule.

        :param points: An array of shape (P, dim) containing the points, or of
            shape (P,) for a rule on an interval.
        :param weights: An array of shape (P,) containing the weights.
        :param degree: The polynomial degree the rule integrates exactly, if known.
        """
        points = np.array(points, dtype=np.float64)
        if points.ndim == 1:
            # Points on an interval
            points = points.reshape(-1, 1)
        weights = np.array(weights, dtype=np.float64).reshape(-1)
        if points.shape[0] != weights.shape[0]:
            raise ValueError(
                f"Got {points.shape[0]} points but {weights.shape[0]} weights"
            )

        points.flags.writeable = False
        weights.flags.writeable = False

        self.points = points
        self.weights = weights
        self.degree = degree

    def get_dimension(self) -> int:
        return self.points.shape[1]

    def get_weights(self) -> np.ndarray:
        return self.weights

    def get_points(self) -> np.ndarray:
        return self.points.reshape(-1)

    def get_number_of_points(self) -> int:
        return self.weights.shape[0]

    def __repr__(self):
        return (
            f"QuadratureRule(dim={self.get_dimension()}, "
            f"npoints={self.get_number_of_points()}, degree={self.degree})"
        )


def _unit_gauss_jacobi(npoints: int, alpha: int) -> tuple[np.ndarray, np.ndarray]:
    """Gauss-Jacobi rule on [0, 1] for the weight (1 - x)^alpha."""
    points, weights = gauss_jacobi(npoints, alpha, 0)
    return (points + 1.0) / 2.0, weights / 2.0 ** (alpha + 1)


def gauss_quadrature(cell: ReferenceCell, degree: int) -> QuadratureRule:
    """Compute the collapsed Gauss quadrature rule on a reference simplex.

    The unit cube is mapped onto the simplex by the Duffy transform

        x_i = xi_i (1 - xi_1) ... (1 - xi_(i-1)),

    whose Jacobian (1 - xi_1)^(n-1) ... (1 - xi_(n-1)) is absorbed into a
    Gauss-Jacobi rule in each collapsed direction.

    :param cell: The :class:`~reference_elements.ReferenceCell` on which to
        compute the quadrature points.
    :param degree: The total polynomial degree the rule must integrate exactly.

    :returns: The :class:`QuadratureRule`, with weights summing to the volume of
        the cell.
    """
    if degree < 0:
        raise ValueError(f"Quadrature degree must be non-negative, got {degree}")

    n = cell.dim
    npoints = (degree + 2) // 2

    rules = [_unit_gauss_jacobi(npoints, n - 1 - i) for i in range(n)]

    # Tensor product over the cube, first direction varying slowest
    xi = np.stack(
        [g.ravel() for g in np.meshgrid(*[p for p, _ in rules], indexing="ij")],
        axis=-1,
    )
    weights = np.prod(
        np.stack(
            [g.ravel() for g in np.meshgrid(*[w for _, w in rules], indexing="ij")],
            axis=-1,
        ),
        axis=-1,
    )

    # Collapse the cube onto the simplex
    scale = np.cumprod(
        np.hstack([np.ones((xi.shape[0], 1)), 1.0 - xi[:, :-1]]), axis=1
    )
    points = xi * scale

    return QuadratureRule(points, weights, degree)
