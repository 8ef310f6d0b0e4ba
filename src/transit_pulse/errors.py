"""
Core Errors
===========

Typed failures raised by the scoring and classification core.

Every error is scoped to a single request. The core holds no shared
state, so raising never leaves anything half-updated.
"""


class TransitPulseError(Exception):
    """Base class for all core failures."""
    pass


class InvalidInput(TransitPulseError, ValueError):
    """
    Raised for input the core refuses to score.

    Covers malformed coordinates, non-positive capacity, negative
    percentages and identical origin/destination pairs.
    """
    pass


class DivisionError(TransitPulseError, ZeroDivisionError):
    """Raised when a zero or negative capacity reaches the risk assessor."""
    pass
