"""Shape bases and finite elements on reference cells."""

from .jacobi import Jacobi, jacobi_derivative
from .reference_elements import ReferenceCell
from abc import ABC, abstractmethod
from typing import Callable
import numpy as np


class ShapeBasis(ABC):
    """A finite set of shape functions over a reference coordinate space.

    Fields inside an element are encoded by weighting each shape function. A
    shape basis interpolates its functions, and their derivatives, at any
    coordinate of the element.
    """

    @abstractmethod
    def get_dimension(self) -> int:
        """The dimension of the space the shapes are defined on."""

    def get_derivative_order(self) -> int:
        """The number of values describing one shape function derivative."""
        return self.get_dimension()

    @abstractmethod
    def get_number_of_bases(self) -> int:
        """The number of shape functions B."""

    @abstractmethod
    def interpolate_basis(self, coord) -> np.ndarray:
        """The B shape function values at a coordinate."""

    @abstractmethod
    def interpolate_basis_derivative(self, coord) -> np.ndarray:
        """The B * D shape function derivatives at a coordinate, basis-major."""

    def _check_coord(self, coord) -> np.ndarray:
        coord = np.asarray(coord, dtype=np.float64)
        assert coord.shape == (self.get_dimension(),), (
            f"Expected a coordinate with {self.get_dimension()} components, "
            f"got shape {coord.shape}"
        )
        return coord

    def _check_values(self, values) -> np.ndarray:
        values = np.asarray(values)
        assert values.shape == (self.get_number_of_bases(),), (
            f"Expected {self.get_number_of_bases()} values, got shape {values.shape}"
        )
        return values

    def interpolate(self, coord, values):
        """Evaluate the field with basis weights `values` at `coord`.

        :param coord: A coordinate in the reference cell.
        :param values: An array of shape (B,) of basis weights.

        :returns: The dot product of the basis values at `coord` and `values`.
        """
        values = self._check_values(values)
        return np.dot(self.interpolate_basis(self._check_coord(coord)), values)

    def interpolate_derivative(self, coord, values) -> np.ndarray:
        """Evaluate the derivative of the field with basis weights `values`.

        :param coord: A coordinate in the reference cell.
        :param values: An array of shape (B,) of basis weights.

        :returns: An array of shape (D,), the row `values` times the (B, D)
            matrix of basis derivatives.
        """
        values = self._check_values(values)
        derivs = self.interpolate_basis_derivative(self._check_coord(coord)).reshape(
            self.get_number_of_bases(), self.get_derivative_order()
        )
        return np.dot(values, derivs)


def _compositions(total: int, parts: int):
    """Yield the tuples of `parts` non-negative integers summing to `total`,
    with the first entry decreasing fastest."""
    if parts == 1:
        yield (total,)
        return
    for first in range(total, -1, -1):
        for rest in _compositions(total - first, parts - 1):
            yield (first,) + rest


def monomial_powers(dim: int, degree: int) -> np.ndarray:
    """The exponents of the monomials of total degree at most `degree`.

    :param dim: The number of variables.
    :param degree: The maximal total degree.

    :returns: An array of shape (dim, n) where column j holds the exponents of
        the j-th monomial, in graded order.
    """
    powers = [p for d in range(degree + 1) for p in _compositions(d, dim)]
    return np.array(powers, dtype=np.int64).T.reshape(dim, -1)


def lagrange_points(cell: ReferenceCell, degree: int) -> np.ndarray:
    """Construct the locations of the equispaced Lagrange points for polynomials
    of the specified degree.

    Adapted from an implementation of `fe_utils
        <https://github.com/Imperial-MATH60022/finite-element-2022-NiallOswald>`.

    :param cell: The :class:`~reference_elements.ReferenceCell` to use.
    :param degree: The degree of the polynomials.

    :returns: An array of shape (n, cell.dim) containing the coordinates of the
        Lagrange points.
    """
    if degree == 0:
        # A single node at the barycentre
        return np.mean(cell.vertices, axis=0, keepdims=True)

    cube = np.indices([degree + 1] * cell.dim)[::-1]
    coords_sum = np.sum(cube, axis=0)
    return np.stack(cube, axis=-1)[coords_sum <= degree] / degree


def vandermonde_matrix(
    cell: ReferenceCell, degree: int, points, grad: bool = False
) -> np.ndarray:
    """Construct the generalised Vandermonde matrix for monomials of the
    specified degree.

    Adapted from an implementation of `fe_utils
        <https://github.com/Imperial-MATH60022/finite-element-2022-NiallOswald>`.

    :param cell: The :class:`~reference_elements.ReferenceCell` to use.
    :param degree: The degree of the polynomials.
    :param points: An array of shape (m, cell.dim) containing the coordinates of
        the points at which to evaluate the Vandermonde matrix.
    :param grad: If True, return the gradient of the Vandermonde matrix.

    :returns: If grad is False, an array of shape (m, n) containing the Vandermonde
        matrix. If grad is True, an array of shape (m, n, cell.dim)
    """
    points = np.array(points, dtype=np.float64).reshape(-1, cell.dim)

    # Matrix of powers present in the Vandermonde matrix
    i_p = monomial_powers(cell.dim, degree)

    if grad:
        # Lower the power of each coordinate in turn, clipping at zero since the
        # derivative of a constant vanishes through the factor i_p below
        d_p = np.maximum(i_p[:, np.newaxis, :] - np.eye(cell.dim)[:, :, np.newaxis], 0)
        # Repeat grid points into a new axis
        point_mat = np.repeat(points[:, :, np.newaxis], cell.dim, axis=2)
        # 'Outer-product'-like tensor power to compute all elements
        vand_grad = np.prod(point_mat[:, :, :, np.newaxis] ** d_p, axis=1)
        # Multiply by the powers of the coordinates to complete the derivatives
        return np.einsum("ikj,kj->ijk", vand_grad, i_p, optimize=True)

    # 'Outer-product'-like tensor power to compute all elements
    return np.prod(points[:, :, np.newaxis] ** i_p, axis=1)


class FiniteElement(ShapeBasis):
    """A nodal finite element on a reference cell."""

    def __init__(self, cell: ReferenceCell, degree: int, nodes: np.ndarray):
        """Initialise the finite element.

        :param cell: The :class:`~reference_elements.ReferenceCell` of the finite
            element.
        :param degree: The degree of the finite element.
        :param nodes: An array of shape (n, cell.dim) containing the coordinates
            of the nodes of the finite element.
        """
        self.cell = cell
        self.degree = degree
        self.nodes = nodes

        # Compute the coefficients of the basis functions
        self.basis_coefs = np.linalg.inv(vandermonde_matrix(cell, degree, nodes))

    def get_dimension(self) -> int:
        return self.cell.dim

    def get_number_of_bases(self) -> int:
        return self.nodes.shape[0]

    def tabulate(self, points, grad: bool = False) -> np.ndarray:
        """Tabulate the basis functions at the specified points.

        Adapted from an implementation of `fe_utils
            <https://github.com/Imperial-MATH60022/finite-element-2022-NiallOswald>`.

        :param points: An array of shape (m, cell.dim) containing the coordinates
            of the points at which to evaluate the basis functions.
        :param grad: If True, return the gradient of the basis functions.

        :returns: If grad is False, an array of shape (m, n) containing the
            basis functions. If grad is True, an array of shape (m, n, cell.dim)
            containing the gradients of the basis functions.
        """
        return np.einsum(
            "ib...,bj->ij...",
            vandermonde_matrix(self.cell, self.degree, points, grad),
            self.basis_coefs,
            optimize=True,
        )

    def interpolate_basis(self, coord) -> np.ndarray:
        return self.tabulate([self._check_coord(coord)])[0]

    def interpolate_basis_derivative(self, coord) -> np.ndarray:
        return self.tabulate([self._check_coord(coord)], grad=True)[0].reshape(-1)

    def interpolate_function(self, fn: Callable) -> np.ndarray:
        """Interpolate the specified function onto the nodes of a finite element.

        :param fn: A function that takes a point and returns a scalar value.

        :returns: An array of shape (n,) containing the basis function coefficients.
        """
        return np.array([fn(node) for node in self.nodes])


class LagrangeElement(FiniteElement):
    """An equispaced Lagrange finite element on a reference cell."""

    def __init__(self, cell: ReferenceCell, degree: int):
        """Initialise the finite element.

        :param cell: The :class:`~reference_elements.ReferenceCell` of the finite
            element.
        :param degree: The degree of the finite element.
        """
        nodes = lagrange_points(cell, degree)

        super(LagrangeElement, self).__init__(cell, degree, nodes)

    def __repr__(self):
        return f"LagrangeElement({self.cell!r}, {self.degree})"


class OrthogonalElement(ShapeBasis):
    """The modal basis of polynomials orthogonal on a reference cell.

    On the interval the basis functions are the Legendre polynomials
    P_p(2x - 1). On the triangle they are the Dubiner polynomials

        psi_pq = P_p(a) ((1 - b) / 2)^p P_q^(2p+1, 0)(b)

    in the collapsed coordinates a = 2(1 + r)/(1 - s) - 1, b = s of the
    square [-1, 1]^2, where r = 2x - 1 and s = 2y - 1. Functions are ordered by
    total degree p + q, with p decreasing within a degree.
    """

    def __init__(self, cell: ReferenceCell, degree: int):
        """Initialise the basis.

        :param cell: The reference interval or triangle.
        :param degree: The maximal polynomial degree.
        """
        if cell.dim not in (1, 2):
            raise ValueError(f"No orthogonal basis on cells of dimension {cell.dim}")

        self.cell = cell
        self.degree = degree
        self.indices = [tuple(p) for p in monomial_powers(cell.dim, degree).T]

        # Each basis function is a product of Jacobi polynomials in the
        # collapsed coordinates, kept with their derivatives
        self._factors = []
        for index in self.indices:
            polys = [Jacobi(index[0], 0, 0)]
            if cell.dim == 2:
                polys.append(Jacobi(index[1], 2 * index[0] + 1, 0))
            self._factors.append([(poly, *jacobi_derivative(poly)) for poly in polys])

    def get_dimension(self) -> int:
        return self.cell.dim

    def get_number_of_bases(self) -> int:
        return len(self.indices)

    def tabulate(self, points, grad: bool = False) -> np.ndarray:
        """Tabulate the basis functions at the specified points.

        :param points: An array of shape (m, cell.dim) of points in the cell.
        :param grad: If True, return the gradient of the basis functions.

        :returns: An array of shape (m, n), or (m, n, cell.dim) if grad is True.
        """
        points = np.array(points, dtype=np.float64).reshape(-1, self.cell.dim)
        if self.cell.dim == 1:
            return self._tabulate_interval(2.0 * points[:, 0] - 1.0, grad)
        return self._tabulate_triangle(
            2.0 * points[:, 0] - 1.0, 2.0 * points[:, 1] - 1.0, grad
        )

    def _tabulate_interval(self, r: np.ndarray, grad: bool) -> np.ndarray:
        if grad:
            # d/dx = 2 d/dr
            return np.stack(
                [2.0 * scale * dpoly(r) for [(_, scale, dpoly)] in self._factors],
                axis=1,
            )[:, :, np.newaxis]
        return np.stack([poly(r) for [(poly, _, _)] in self._factors], axis=1)

    def _tabulate_triangle(
        self, r: np.ndarray, s: np.ndarray, grad: bool
    ) -> np.ndarray:
        denom = 1.0 - s
        # The collapsed coordinate is undefined at the top vertex, take a = -1
        a = np.full_like(r, -1.0)
        np.divide(2.0 * (1.0 + r), denom, out=a, where=denom != 0.0)
        a = np.where(denom != 0.0, a - 1.0, -1.0)
        h = denom / 2.0

        values = []
        for (p, q), [(pa, sa, dpa), (qb, sb, dqb)] in zip(self.indices, self._factors):
            pa_val = pa(a)
            qb_val = qb(s)
            if not grad:
                values.append(pa_val * h**p * qb_val)
                continue

            dqb_val = sb * dqb(s)
            ds = pa_val * h**p * dqb_val
            if p > 0:
                dpa_val = sa * dpa(a)
                dr = dpa_val * h ** (p - 1) * qb_val
                ds = ds + (dpa_val * (1.0 + a) / 2.0 - pa_val * p / 2.0) * h ** (
                    p - 1
                ) * qb_val
            else:
                dr = np.zeros_like(r)
            # d/dx = 2 d/dr and d/dy = 2 d/ds
            values.append(2.0 * np.stack([dr, ds], axis=-1))

        return np.stack(values, axis=1)

    def interpolate_basis(self, coord) -> np.ndarray:
        return self.tabulate([self._check_coord(coord)])[0]

    def interpolate_basis_derivative(self, coord) -> np.ndarray:
        return self.tabulate([self._check_coord(coord)], grad=True)[0].reshape(-1)

    def __repr__(self):
        return f"OrthogonalElement({self.cell!r}, {self.degree})"
