"""Exceptions raised by femcore."""


class FEMError(Exception):
    """Base class for all femcore errors."""


class ConstructionError(FEMError, ValueError):
    """An object could not be built from the arguments it was given."""


class InvalidParameter(ConstructionError):
    """A polynomial parameter lies outside its admissible range."""


class IncoherentDimensions(ConstructionError):
    """The dimensions or the point buffer of a geometry do not agree."""


class DimensionOutOfRange(FEMError, ValueError):
    """A requested topological dimension exceeds that of the geometry."""


class ConnectivityUnavailable(FEMError, LookupError):
    """A connectivity table was requested but has not been computed."""
