"""Local discrete operators on a single cell."""

from .element import ReferenceElement
from .finite_elements import FiniteElement
from .geometry import Geometry
from abc import ABC, abstractmethod
from typing import Mapping
import numpy as np


class Operator(ABC):
    """Computes the local matrix of a discretised operator on one cell.

    An operator is called with the geometry of a cell and the data attached to
    the cell, a mapping from field names to nodal values, and returns the
    flattened (row-major) local matrix. Subclasses name the type of reference
    element they describe the cell with in `element_type`.
    """

    element_type = ReferenceElement

    def __init__(self, element: ReferenceElement):
        """Initialise the operator.

        :param element: The reference element describing the cell.
        """
        if not isinstance(element, self.element_type):
            raise TypeError(
                f"{type(self).__name__} needs a {self.element_type.__name__}, "
                f"got {type(element).__name__}"
            )
        self.element = element

    @abstractmethod
    def __call__(self, geometry, data: Mapping[str, np.ndarray]) -> np.ndarray:
        """Compute the flattened local matrix.

        :param geometry: The physical coordinates of the cell nodes, or a
            :class:`~geometry.Geometry` describing the cell.
        :param data: The nodal values of each field on the cell.

        :returns: An array of shape (B * B,).
        """

    def node_coordinates(self, geometry) -> np.ndarray:
        """The physical coordinates of the element nodes, shape (B, m).

        A :class:`~geometry.Geometry` only provides the vertices, so the nodes
        of a nodal element are placed by the affine map of the cell.
        """
        if not isinstance(geometry, Geometry):
            return np.asarray(geometry, dtype=np.float64).reshape(
                self.element.number_of_bases, -1
            )

        vertices = np.asarray(geometry.get_coordinates(), dtype=np.float64).reshape(
            geometry.get_dimension() + 1, geometry.get_embedding_dimension()
        )
        basis = self.element.get_shape_basis()
        if not isinstance(basis, FiniteElement):
            raise TypeError(
                f"Cannot place the nodes of {type(basis).__name__} from a Geometry"
            )
        return vertices[0] + basis.nodes @ (vertices[1:] - vertices[0])

    def field_at_points(self, data: Mapping[str, np.ndarray], name: str) -> np.ndarray:
        """Interpolate a field to the quadrature points, or 1 if it is absent."""
        element = self.element
        if data is None or name not in data:
            return np.ones(element.number_of_points)
        shapes = element.get_shapes_for_integration().reshape(
            element.number_of_points, element.number_of_bases
        )
        return shapes @ np.asarray(data[name])

    def pullback(self, geometry) -> tuple[np.ndarray, np.ndarray]:
        """The measure and pseudo-inverse Jacobian at every quadrature point.

        For a Jacobian J of shape (m, D) the measure is sqrt(det(J^T J)) and
        the pseudo-inverse (J^T J)^-1 J^T, which reduce to |det J| and J^-1 when
        m == D.

        :returns: Arrays of shape (P,) and (P, D, m).
        """
        element = self.element
        J = element.get_geometry_derivatives_for_integration(
            self.node_coordinates(geometry)
        ).reshape(element.number_of_points, -1, element.derivative_order)

        G = np.einsum("qid,qie->qde", J, J, optimize=True)
        det_J = np.sqrt(np.linalg.det(G))
        J_pinv = np.linalg.solve(G, J.transpose(0, 2, 1))
        return det_J, J_pinv


class MassOperator(Operator):
    """The mass matrix, weighted by the optional field "coefficient"."""

    def __call__(self, geometry, data: Mapping[str, np.ndarray] = None) -> np.ndarray:
        element = self.element
        phi = element.get_shapes_for_integration().reshape(
            element.number_of_points, element.number_of_bases
        )
        weights = element.get_integrator().get_weights()
        det_J, _ = self.pullback(geometry)
        c = self.field_at_points(data, "coefficient")

        return np.einsum(
            "qi,qj,q,q,q->ij", phi, phi, c, weights, det_J, optimize=True
        ).reshape(-1)


class StiffnessOperator(Operator):
    """The Laplacian stiffness matrix, weighted by the optional field "diffusivity"."""

    def __call__(self, geometry, data: Mapping[str, np.ndarray] = None) -> np.ndarray:
        element = self.element
        grad_phi = element.get_shape_derivatives_for_integration().reshape(
            element.number_of_points, element.number_of_bases, element.derivative_order
        )
        weights = element.get_integrator().get_weights()
        det_J, J_pinv = self.pullback(geometry)
        kappa = self.field_at_points(data, "diffusivity")

        # Gradients in physical coordinates: (P, B, m)
        grad_x = np.einsum("qbd,qdi->qbi", grad_phi, J_pinv, optimize=True)

        return np.einsum(
            "qai,qbi,q,q,q->ab", grad_x, grad_x, kappa, weights, det_J, optimize=True
        ).reshape(-1)
