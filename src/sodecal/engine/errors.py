"""Error taxonomy and result statuses for the probability-calendar engine.

Two conditions are raised: caller contract violations (`InvalidRange`) and
convolutions whose folded mass is zero (`NormalizationFailure`). Empty range
intersections and degenerate interval queries are expected outcomes and are
reported through status enums on the result objects instead.
"""

from __future__ import annotations

from enum import Enum


class SodeError(Exception):
    """Base class for engine errors."""


class InvalidRange(SodeError, ValueError):
    """A gestation-age range violates 1 <= min_day <= max_day <= bound."""


class NormalizationFailure(SodeError, ArithmeticError):
    """The folded calendar has (near) zero total mass and cannot be normalized."""


class CombineStatus(str, Enum):
    """Outcome of combining entries."""

    OK = "ok"
    EMPTY_INTERSECTION = "empty_intersection"


class IntervalStatus(str, Enum):
    """Outcome of an interval analysis."""

    OK = "ok"
    DEGENERATE_QUERY = "degenerate_query"
