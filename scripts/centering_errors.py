class CenteringError(ValueError):
    """Base class for failures of the center-cluster reduction."""


class DimensionMismatch(CenteringError):
    """Raised when mu, pro, sigmasq, z and groups disagree on ngroups."""


class InvalidThreshold(CenteringError):
    """Raised when min_center is not a number in [0, 1]."""


class DegenerateMass(CenteringError):
    """Raised when two components with zero total proportion must be merged."""
