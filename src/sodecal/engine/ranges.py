"""Gestation-age ranges and day-of-year intervals."""

from __future__ import annotations

from dataclasses import dataclass

from sodecal.engine.cycle_mapper import YEAR_LENGTH


@dataclass(frozen=True)
class GestationAgeRange:
    """Plausible span of elapsed gestation days, inclusive on both ends.

    A range with min_day > max_day is representable so that an empty
    intersection can be reported; `is_valid` is False for it.
    """

    min_day: int
    max_day: int

    def __post_init__(self) -> None:
        # ints only; numpy integers are normalized
        object.__setattr__(self, "min_day", int(self.min_day))
        object.__setattr__(self, "max_day", int(self.max_day))

    @property
    def is_valid(self) -> bool:
        return 1 <= self.min_day <= self.max_day

    @property
    def days(self) -> int:
        """Number of gestation ages in the range (0 when invalid)."""
        return max(0, self.max_day - self.min_day + 1)

    def intersect(self, *others: "GestationAgeRange") -> "GestationAgeRange":
        """Return [max of mins, min of maxes] over self and others."""
        ranges = (self, *others)
        return GestationAgeRange(
            min_day=max(r.min_day for r in ranges),
            max_day=min(r.max_day for r in ranges),
        )

    def to_dict(self) -> dict[str, int]:
        return {"min_day": self.min_day, "max_day": self.max_day}

    def __str__(self) -> str:
        return f"{self.min_day} - {self.max_day}"


@dataclass(frozen=True)
class Interval:
    """Day-of-year interval [start_day, end_day] on the 365-day ring.

    Non-wrapping when start_day <= end_day (so start == end is a single
    day), wrapping through Dec 31 -> Jan 1 otherwise.
    """

    start_day: int
    end_day: int

    def __post_init__(self) -> None:
        for name in ("start_day", "end_day"):
            value = int(getattr(self, name))
            if not 1 <= value <= YEAR_LENGTH:
                raise ValueError(f"{name} must be in 1..{YEAR_LENGTH}, got {value}")
            object.__setattr__(self, name, value)

    @property
    def wraps(self) -> bool:
        return self.start_day > self.end_day

    @property
    def is_full_year(self) -> bool:
        return self.start_day == 1 and self.end_day == YEAR_LENGTH

    def days(self) -> list[int]:
        """1-based days in traversal order (start .. 365, 1 .. end when wrapping)."""
        if not self.wraps:
            return list(range(self.start_day, self.end_day + 1))
        return list(range(self.start_day, YEAR_LENGTH + 1)) + list(range(1, self.end_day + 1))

    def pieces(self) -> list[tuple[int, int]]:
        """Non-wrapping (start, end) pieces covering the interval."""
        if not self.wraps:
            return [(self.start_day, self.end_day)]
        return [(self.start_day, YEAR_LENGTH), (1, self.end_day)]

    @classmethod
    def full_year(cls) -> "Interval":
        return cls(1, YEAR_LENGTH)
