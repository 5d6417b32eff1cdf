"""Geometries and the topology of simplices."""

from .exceptions import (
    ConnectivityUnavailable,
    DimensionOutOfRange,
    IncoherentDimensions,
)
from abc import ABC, abstractmethod
from itertools import combinations
from math import comb
import logging
import numpy as np

logger = logging.getLogger(__name__)


def simplex_faces(n: int, k: int) -> np.ndarray:
    """Enumerate the k-dimensional faces of the n-simplex.

    Each face is the increasing tuple of its k + 1 vertex indices, and the faces
    are listed in lexicographic order, which fixes the index of every face.

    :param n: The dimension of the simplex.
    :param k: The dimension of the faces.

    :returns: An integer array of shape (C(n + 1, k + 1), k + 1).
    """
    if k < 0 or k > n:
        return np.empty((0, max(k + 1, 0)), dtype=np.int64)
    return np.array(list(combinations(range(n + 1), k + 1)), dtype=np.int64).reshape(
        -1, k + 1
    )


class Geometry(ABC):
    """Coordinates and ordering describing a geometry.

    Connectivity is queried per element: the element of dimension
    `element_dimension` with index `element_index` is described through its
    sub-elements of dimension `target_dimension`.
    """

    @abstractmethod
    def get_dimension(self) -> int:
        """The topological dimension of the geometry."""

    @abstractmethod
    def get_embedding_dimension(self) -> int:
        """The dimension of the space the geometry is embedded in."""

    @abstractmethod
    def get_number_of_elements(self, dimension: int) -> int:
        """The number of elements of topological dimension `dimension`."""

    @abstractmethod
    def get_coordinates(self):
        """The embedding coordinates of the vertices, in AOS order."""

    @abstractmethod
    def get_connectivity(
        self, target_dimension: int, element_dimension: int, element_index: int
    ) -> np.ndarray:
        """The connectivity of one element in terms of lower dimensional elements."""


class Simplex(Geometry):
    """A single n-simplex embedded in an m-dimensional space.

    The simplex does not own its coordinates: `points` is held by reference and
    must outlive the simplex. Nothing in this class copies or modifies it.

    The connectivity of every pair of dimensions is computed when the simplex is
    built. The table for the key (e, t) stores, for each e-face in lexicographic
    order, the vertex tuples of its t-faces, also in lexicographic order. Vertex
    indices always refer to the numbering 0..n of the simplex itself.
    """

    def __init__(self, dimension: int, embedding_dimension: int, points):
        """Initialise the simplex.

        :param dimension: The topological dimension n.
        :param embedding_dimension: The dimension m of the coordinate space.
        :param points: The (n + 1) * m vertex coordinates, either flat in AOS
            order or as an (n + 1, m) array.

        :raises IncoherentDimensions: If m < n or the number of coordinates does
            not match (n + 1) vertices of width m.
        """
        if dimension < 0 or embedding_dimension < dimension:
            raise IncoherentDimensions(
                f"Cannot embed a {dimension}-simplex in "
                f"{embedding_dimension} dimensions"
            )
        if np.size(points) != (dimension + 1) * embedding_dimension:
            raise IncoherentDimensions(
                f"A {dimension}-simplex in {embedding_dimension} dimensions needs "
                f"{(dimension + 1) * embedding_dimension} coordinates, "
                f"got {np.size(points)}"
            )

        self.dimension = dimension
        self.embedding_dimension = embedding_dimension
        self.points = points

        # (element_dim, target_dim) -> (stride, flattened vertex indices)
        self._connectivity = {}
        for element_dim in range(dimension + 1):
            for target_dim in range(dimension + 1):
                self._compute_connectivity(element_dim, target_dim)

        logger.debug(
            "Built %d connectivity tables for a %d-simplex",
            len(self._connectivity),
            dimension,
        )

    def _compute_connectivity(self, element_dim: int, target_dim: int) -> None:
        """Fill the connectivity table of the (element_dim, target_dim) pair."""
        rows = [
            sub_face
            for face in simplex_faces(self.dimension, element_dim)
            for sub_face in combinations(face, target_dim + 1)
        ]
        conn = np.array(rows, dtype=np.int64).reshape(-1)
        conn.flags.writeable = False
        self._connectivity[(element_dim, target_dim)] = (target_dim + 1, conn)

    def get_dimension(self) -> int:
        return self.dimension

    def get_embedding_dimension(self) -> int:
        return self.embedding_dimension

    def get_coordinates(self):
        """Return the vertex coordinates exactly as given at construction."""
        return self.points

    def get_number_of_elements(self, dimension: int) -> int:
        """The number of faces of a given dimension, C(n + 1, dimension + 1).

        Dimensions outside 0..n have no faces and give 0.
        """
        if dimension < 0 or dimension > self.dimension:
            return 0
        return comb(self.dimension + 1, dimension + 1)

    def faces(self, dimension: int) -> np.ndarray:
        """The vertex tuples of all faces of a given dimension, one per row."""
        return simplex_faces(self.dimension, dimension)

    def get_connectivity(
        self, target_dimension: int, element_dimension: int, element_index: int
    ) -> np.ndarray:
        """The connectivity of one face expressed through its sub-faces.

        :param target_dimension: The dimension t of the sub-faces.
        :param element_dimension: The dimension e of the face.
        :param element_index: The lexicographic index of the face.

        :returns: A read-only view of C(e + 1, t + 1) * (t + 1) vertex indices:
            the vertices of each t-face of the face, one t-face after another.
            The view is empty when t > e.

        :raises DimensionOutOfRange: If t or e is outside 0..n.
        :raises ConnectivityUnavailable: If the table has not been computed.
        :raises IndexError: If there is no e-face with that index.
        """
        if not (0 <= target_dimension <= self.dimension) or not (
            0 <= element_dimension <= self.dimension
        ):
            raise DimensionOutOfRange(
                f"Connectivity ({element_dimension}, {target_dimension}) requested "
                f"on a {self.dimension}-simplex"
            )
        try:
            stride, conn = self._connectivity[(element_dimension, target_dimension)]
        except KeyError:
            raise ConnectivityUnavailable(
                f"Connectivity ({element_dimension}, {target_dimension}) has not "
                "been computed"
            ) from None

        n_elements = self.get_number_of_elements(element_dimension)
        if not 0 <= element_index < n_elements:
            raise IndexError(
                f"Face index {element_index} out of range for {n_elements} "
                f"faces of dimension {element_dimension}"
            )

        row = comb(element_dimension + 1, target_dimension + 1) * stride
        return conn[element_index * row : (element_index + 1) * row]
