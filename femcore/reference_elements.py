"""Reference cells for finite elements."""

from .geometry import simplex_faces
from functools import lru_cache
from math import factorial
import numpy as np


class ReferenceCell:
    """A reference cell."""

    def __init__(self, vertices: np.ndarray, cell_normals: np.ndarray):
        """Initialise the reference cell.

        :param vertices: An array of shape (n, d) containing the vertices of the cell.
        :param cell_normals: An array of shape (n, d) containing the outward unit
            normals to the cell facets, in the lexicographic order of the facets.
        """
        self.vertices = vertices
        self.cell_normals = cell_normals
        self.dim = self.vertices.shape[1]

    @property
    def volume(self) -> float:
        """The measure of the cell, 1 / dim! for a reference simplex."""
        return 1.0 / factorial(self.dim)

    def __repr__(self):
        return f"ReferenceCell(dim={self.dim})"


def _simplex_normals(n: int) -> np.ndarray:
    """Outward unit normals to the facets of the reference n-simplex."""
    normals = np.zeros((n + 1, n))
    for f, facet in enumerate(simplex_faces(n, n - 1)):
        # The facet opposite vertex j
        (j,) = set(range(n + 1)) - set(facet)
        if j == 0:
            normals[f] = 1.0 / np.sqrt(n)
        else:
            normals[f, j - 1] = -1.0
    return normals


@lru_cache(maxsize=None)
def reference_simplex(n: int) -> ReferenceCell:
    """The reference n-simplex, with vertices at the origin and the unit vectors.

    :param n: The dimension of the simplex, at least one.

    :returns: The (unique) :class:`ReferenceCell` of that dimension.
    """
    if n < 1:
        raise ValueError(f"A reference simplex needs dimension at least 1, got {n}")
    vertices = np.vstack([np.zeros((1, n)), np.eye(n)])
    return ReferenceCell(vertices, _simplex_normals(n))


ReferenceInterval = reference_simplex(1)
ReferenceTriangle = reference_simplex(2)
ReferenceTetrahedron = reference_simplex(3)
