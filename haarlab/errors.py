"""Error types raised by the Haar basis, transform and reconstruction layers.

All errors derive from ValueError so code that already guards numeric
calls with ``except ValueError`` keeps working.
"""


class HaarError(ValueError):
    """Base class for haarlab errors."""


class InvalidDimension(HaarError):
    """Requested basis size is not a power of two >= 2."""


class DimensionMismatch(HaarError):
    """Input length or shape does not match the basis dimension."""


class InvalidBasis(HaarError):
    """Matrix is not a square, dyadic, orthonormal Haar basis."""
