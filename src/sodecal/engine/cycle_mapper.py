"""
Extended reproductive cycle -> day-of-year mapping.

The extended cycle starts on June 1 (the first day of the conception window)
and runs 579 days, through December 31 of the following year. Positions are
1-based:

  cycle   1..214  -> DOY 152..365  (Jun 1 .. Dec 31, first year)
  cycle 215..365  -> DOY   1..151  (Jan 1 .. May 31)
  cycle 366..579  -> DOY 152..365  (Jun 1 .. Dec 31, second year)

DOY 152..365 therefore receive two contributions when a cycle-long array is
folded onto the 365-day ring. The tables are built once at import.
"""

from __future__ import annotations

import numpy as np

CYCLE_LENGTH = 579
YEAR_LENGTH = 365
CYCLE_START_DOY = 152  # June 1 in a 365-day year

# (month, days) in cycle order; February has no leap day.
CYCLE_MONTHS: list[tuple[str, int]] = [
    ("Jun", 30), ("Jul", 31), ("Aug", 31), ("Sep", 30), ("Oct", 31), ("Nov", 30), ("Dec", 31),
    ("Jan", 31), ("Feb", 28), ("Mar", 31), ("Apr", 30), ("May", 31),
    ("Jun", 30), ("Jul", 31), ("Aug", 31), ("Sep", 30), ("Oct", 31), ("Nov", 30), ("Dec", 31),
]


def _build_tables() -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    months: list[str] = []
    dates: list[int] = []
    for name, n_days in CYCLE_MONTHS:
        months.extend([name] * n_days)
        dates.extend(range(1, n_days + 1))
    if len(months) != CYCLE_LENGTH:
        raise RuntimeError(f"cycle month table has {len(months)} days, expected {CYCLE_LENGTH}")

    position = np.arange(CYCLE_LENGTH)  # 0-based
    doy = (position + CYCLE_START_DOY - 1) % YEAR_LENGTH + 1
    return doy.astype(np.int64), np.array(months), np.array(dates, dtype=np.int64)


# Per cycle position (0-based index): calendar DOY (1..365), month name, day of month.
CYCLE_DOY, CYCLE_MONTH, CYCLE_DATE = _build_tables()
for _arr in (CYCLE_DOY, CYCLE_MONTH, CYCLE_DATE):
    _arr.flags.writeable = False

# The 365-day calendar starts on Jan 1 = cycle position 215.
_YEAR_SLICE = slice(YEAR_LENGTH - CYCLE_START_DOY + 1, CYCLE_LENGTH)
YEAR_MONTH = CYCLE_MONTH[_YEAR_SLICE]
YEAR_DATE = CYCLE_DATE[_YEAR_SLICE]


def fold(extended: np.ndarray) -> np.ndarray:
    """Fold a cycle-length array onto the 365-day ring.

    Each calendar day receives the sum of every cycle position that maps to
    it, accumulated in cycle order.

    Args:
        extended: 1-D array of length CYCLE_LENGTH.

    Returns:
        New float array of length YEAR_LENGTH.

    Raises:
        ValueError: If the array does not have the cycle length.
    """
    extended = np.asarray(extended, dtype=float)
    if extended.shape != (CYCLE_LENGTH,):
        raise ValueError(f"extended cycle array must have shape ({CYCLE_LENGTH},), got {extended.shape}")
    folded = np.zeros(YEAR_LENGTH, dtype=float)
    np.add.at(folded, CYCLE_DOY - 1, extended)
    return folded


def cycle_positions_for_day(day: int) -> list[int]:
    """Return the 1-based cycle positions that map to calendar `day`."""
    _check_day(day)
    return [int(p) + 1 for p in np.flatnonzero(CYCLE_DOY == day)]


def doy_label(day: int) -> str:
    """Return 'Mon D' for a 1-based day of year, e.g. doy_label(1) == 'Jan 1'."""
    _check_day(day)
    return f"{YEAR_MONTH[day - 1]} {int(YEAR_DATE[day - 1])}"


def doy_labels() -> list[str]:
    """Return the 365 'Mon D' labels in day-of-year order."""
    return [f"{m} {int(d)}" for m, d in zip(YEAR_MONTH, YEAR_DATE)]


def month_bands() -> list[tuple[str, int, int]]:
    """Return (month, first_doy, last_doy) for Jan..Dec."""
    bands: list[tuple[str, int, int]] = []
    start = 1
    for name, n_days in CYCLE_MONTHS[7:12] + CYCLE_MONTHS[:7]:
        bands.append((name, start, start + n_days - 1))
        start += n_days
    return bands


def _check_day(day: int) -> None:
    if not 1 <= int(day) <= YEAR_LENGTH:
        raise ValueError(f"day must be in 1..{YEAR_LENGTH}, got {day}")
