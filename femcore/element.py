"""Reference elements combining a quadrature rule and a shape basis."""

from .finite_elements import LagrangeElement, ShapeBasis
from .quadrature import IntegrationRule, gauss_quadrature
from .reference_elements import ReferenceCell
import logging
import numpy as np

logger = logging.getLogger(__name__)


class ReferenceElement:
    """The reference element of the finite element method.

    A reference element is a shape basis together with an integration rule on
    the same reference cell. The values and derivatives of the shape functions
    at the quadrature points are computed once, when the element is built, and
    stored flat in AOS order:

    * shapes: logical shape (P, B, S), with S = 1 for scalar shape functions,
    * shape derivatives: logical shape (P, B, D),

    where P is the number of quadrature points, B the number of shape functions
    and D their derivative order.
    """

    def __init__(self, integrator: IntegrationRule, shape_basis: ShapeBasis):
        """Initialise the reference element.

        :param integrator: The :class:`~quadrature.IntegrationRule` of the element.
        :param shape_basis: The :class:`~finite_elements.ShapeBasis` of the element.
        """
        assert integrator.get_dimension() == shape_basis.get_dimension(), (
            f"Integration rule of dimension {integrator.get_dimension()} does not "
            f"match shape basis of dimension {shape_basis.get_dimension()}"
        )
        self._integrator = integrator
        self._shape_basis = shape_basis

        points = integrator.get_points().reshape(-1, integrator.get_dimension())
        shapes = np.concatenate(
            [shape_basis.interpolate_basis(point) for point in points]
        )
        shape_derivatives = np.concatenate(
            [shape_basis.interpolate_basis_derivative(point) for point in points]
        )
        shapes.flags.writeable = False
        shape_derivatives.flags.writeable = False
        self._shapes = shapes
        self._shape_derivatives = shape_derivatives

        logger.debug(
            "Tabulated %d shape functions at %d quadrature points",
            shape_basis.get_number_of_bases(),
            integrator.get_number_of_points(),
        )

    @classmethod
    def lagrange(
        cls, cell: ReferenceCell, degree: int, quadrature_degree: int = None
    ) -> "ReferenceElement":
        """Build a Lagrange reference element.

        :param cell: The :class:`~reference_elements.ReferenceCell` to use.
        :param degree: The degree of the Lagrange element.
        :param quadrature_degree: The degree of the quadrature rule, by default
            enough to integrate the product of two shape functions exactly.

        :returns: The reference element.
        """
        if quadrature_degree is None:
            quadrature_degree = 2 * degree
        return cls(
            gauss_quadrature(cell, quadrature_degree), LagrangeElement(cell, degree)
        )

    @property
    def number_of_points(self) -> int:
        """The number of quadrature points P."""
        return self._integrator.get_number_of_points()

    @property
    def number_of_bases(self) -> int:
        """The number of shape functions B."""
        return self._shape_basis.get_number_of_bases()

    @property
    def derivative_order(self) -> int:
        """The number of values D per shape function derivative."""
        return self._shape_basis.get_derivative_order()

    def get_integrator(self) -> IntegrationRule:
        """Return the integration rule."""
        return self._integrator

    def get_shape_basis(self) -> ShapeBasis:
        """Return the shape basis."""
        return self._shape_basis

    def get_shapes_for_integration(self) -> np.ndarray:
        """The shape function values at the quadrature points, shape (P, B, S)."""
        return self._shapes

    def get_shape_derivatives_for_integration(self) -> np.ndarray:
        """The shape function derivatives at the quadrature points, shape (P, B, D)."""
        return self._shape_derivatives

    def get_geometry_derivatives_for_integration(self, coords) -> np.ndarray:
        """The Jacobian of the geometric map at each quadrature point.

        The physical cell is described by the coordinates of its nodes, one node
        per shape function, and is mapped from the reference cell through the
        shape basis.

        :param coords: The physical coordinates of the B nodes, flat in AOS
            order or as an array of shape (B, m).

        :returns: A flat array of logical shape (P, m, D) where entry (q, i, d)
            is the derivative of physical coordinate i with respect to
            reference coordinate d at quadrature point q.
        """
        coords = np.asarray(coords)
        nbases = self.number_of_bases
        assert coords.size % nbases == 0, (
            f"Expected the coordinates of {nbases} nodes, got {coords.size} values"
        )
        coords = coords.reshape(nbases, -1)
        derivs = self._shape_derivatives.reshape(
            self.number_of_points, nbases, self.derivative_order
        )
        return np.einsum("bi,qbd->qid", coords, derivs, optimize=True).reshape(-1)

    def integrate(self, values):
        """Integrate a field over the reference cell.

        :param values: An array of shape (B,) with the weight of each shape
            function.

        :returns: The integral of the field.
        """
        values = np.asarray(values)
        assert values.shape == (self.number_of_bases,), (
            f"Expected {self.number_of_bases} values, got shape {values.shape}"
        )
        shapes = self._shapes.reshape(self.number_of_points, self.number_of_bases)
        return self._integrator.integrate(shapes @ values)

    def __repr__(self):
        return f"ReferenceElement({self._integrator!r}, {self._shape_basis!r})"
