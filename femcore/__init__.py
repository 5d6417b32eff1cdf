from .element import ReferenceElement  # noqa: F401
from .exceptions import (  # noqa: F401
    ConnectivityUnavailable,
    ConstructionError,
    DimensionOutOfRange,
    FEMError,
    IncoherentDimensions,
    InvalidParameter,
)
from .finite_elements import (  # noqa: F401
    FiniteElement,
    LagrangeElement,
    OrthogonalElement,
    ShapeBasis,
)
from .geometry import Geometry, Simplex, simplex_faces  # noqa: F401
from .jacobi import Jacobi, gauss_jacobi, jacobi_derivative  # noqa: F401
from .operators import MassOperator, Operator, StiffnessOperator  # noqa: F401
from .quadrature import IntegrationRule, QuadratureRule, gauss_quadrature  # noqa: F401
from .reference_elements import (  # noqa: F401
    ReferenceCell,
    ReferenceInterval,
    ReferenceTetrahedron,
    ReferenceTriangle,
    reference_simplex,
)
