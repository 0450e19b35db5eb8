class SkywatchError(Exception):
    """Base exception for Skywatch errors."""


class InvalidInputError(ValueError, SkywatchError):
    """Raised when an argument violates the documented input contract."""


class OrbitError(SkywatchError):
    """Raised when orbital elements cannot be propagated."""


class UnsupportedEccentricityError(OrbitError):
    """Raised for parabolic or hyperbolic orbits (e >= 1)."""


class InvalidElementsError(OrbitError):
    """Raised for malformed orbital elements (q <= 0, e < 0, non-finite)."""


class BackendError(SkywatchError):
    """Raised for external collaborator failures or invalid backend state."""
