"""
Conception calendars for modern bison herds.

Each calendar is a 245-day vector indexed by offset from June 1 (offset 0 is
June 1, offset 244 is January 31). Counts reported in multi-day bins are
spread evenly over the days of the bin. Every series is normalized to sum to
1; smoothed variants use a 21-day Gaussian window.

Herd data:
  - Niobrara Valley bull fights (Wolff 1998).
  - National Bison Range copulations (Lott 1981).
  - Wind Cave / Custer / Fort Niobrara fetal conception estimates in 5-day
    bins (Haugen 1974).
  - Yellowstone northern and western herd births in weekly bins,
    back-calculated to conception (Gogan et al. 2005).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Mapping, Sequence

import numpy as np
import pandas as pd

from sodecal.engine.convolver import PRIOR_LENGTH, as_conception_prior
from sodecal.engine.cycle_mapper import CYCLE_DATE, CYCLE_MONTH
from sodecal.utils.logging import get_logger

logger = get_logger(__name__)

SMOOTH_WINDOW = 21
SMOOTH_ALPHA = 2.5

CITATIONS: dict[str, str] = {
    "gogan": (
        "Gogan PJP, Podruzny KM, Olexa EM, Pac HI, Frey KL (2005) Yellowstone bison "
        "fetal development and phenology of parturition. J Wildl Manag 69:1716-1730"
    ),
    "haugen": "Haugen AO (1974) Reproduction in the Plains bison. Iowa State J Res 49:1-8",
    "wolff": (
        "Wolff JO (1998) Breeding strategies, mate choice, and reproductive success "
        "in American bison. Oikos 83:529-544"
    ),
    "lott": (
        "Lott DF (1981) Sexual behavior and intersexual strategies in American bison. "
        "Z Tierpsychol 56:97-114"
    ),
}


# -----------------------------------------------------------------------------
# Herd tables (1-based day from June 1 -> count)
# -----------------------------------------------------------------------------

NIOBRARA_BULL_FIGHTS: dict[int, int] = {
    53: 3, 54: 1, 56: 1, 57: 7, 58: 2, 60: 7, 61: 7, 62: 3, 63: 13, 64: 9,
    65: 43, 66: 8, 67: 25, 68: 17, 69: 14, 70: 17, 71: 33, 72: 24, 73: 24,
    74: 33, 75: 25, 76: 18, 77: 28, 78: 23, 79: 6, 80: 9, 81: 17, 82: 11,
    83: 4, 84: 5, 85: 10, 86: 9, 87: 3, 88: 4, 92: 1, 95: 2, 96: 1, 98: 2,
}

NBR_COPULATIONS: dict[int, int] = {
    56: 1, 58: 1, 59: 2, 60: 4, 61: 4, 62: 4, 63: 5, 64: 2, 65: 3, 66: 1,
    68: 2, 70: 1, 71: 5, 72: 1, 73: 1,
}

# 5-day bins: first day of bin -> conceptions in the bin
HAUGEN_BIN_DAYS = 5
HAUGEN_CONCEPTIONS: dict[int, int] = {
    31: 1, 36: 1, 41: 1, 46: 2, 51: 8, 56: 20, 61: 32, 66: 20, 71: 15,
    76: 5, 81: 1, 86: 10, 91: 7, 96: 3, 101: 2, 106: 1, 111: 1, 121: 1,
}

# Weekly bins. Weeks 1..20 are contiguous; weeks 21 and 22 are detached.
YNP_BIN_DAYS = 7
YNP_WEEK_STARTS: tuple[int, ...] = tuple(27 + 7 * w for w in range(20)) + (174, 202)
# 1941 conceptions are back-calculated with the shorter historic gestation
YNP_1941_SHIFT = 7

YNP_NORTH_BIRTHS: dict[str, tuple[int, ...]] = {
    "1941": (1, 13, 11, 7, 9, 8, 10, 5, 4, 2, 1, 0, 0, 2, 1, 0, 0, 0, 0, 0, 0, 0),
    "1989": (1, 3, 3, 9, 11, 2, 4, 4, 4, 3, 0, 1, 1, 1, 0, 1, 0, 1, 0, 0, 0, 0),
    "1997": (0, 0, 1, 3, 7, 21, 15, 9, 6, 3, 2, 0, 0, 1, 0, 1, 0, 0, 0, 0, 0, 0),
}

YNP_WEST_BIRTHS: dict[str, tuple[int, ...]] = {
    "1995": (0, 0, 0, 0, 1, 1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0),
    "1996": (0, 0, 0, 0, 0, 2, 2, 2, 1, 0, 2, 0, 0, 1, 0, 0, 0, 0, 0, 0, 0, 0),
    "1997": (0, 0, 0, 0, 1, 2, 4, 5, 4, 10, 2, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0),
    "1999": (0, 0, 1, 4, 1, 10, 7, 2, 0, 3, 0, 0, 1, 0, 1, 1, 0, 0, 0, 0, 0, 0),
    "2002": (0, 0, 1, 3, 3, 4, 2, 6, 1, 1, 0, 1, 0, 1, 0, 1, 2, 0, 1, 1, 1, 1),
}


# -----------------------------------------------------------------------------
# Vector builders
# -----------------------------------------------------------------------------


def daily_counts(counts: Mapping[int, float]) -> np.ndarray:
    """Place per-day counts (1-based day from June 1) into a 245-day vector."""
    out = np.zeros(PRIOR_LENGTH, dtype=float)
    for day, count in counts.items():
        out[day - 1] += count
    return out


def binned_counts(starts: Sequence[int], counts: Sequence[float], width: int) -> np.ndarray:
    """Spread each bin's count evenly over `width` days starting at `starts[i]`."""
    if len(starts) != len(counts):
        raise ValueError(f"got {len(starts)} bin starts for {len(counts)} counts")
    out = np.zeros(PRIOR_LENGTH, dtype=float)
    for start, count in zip(starts, counts):
        out[start - 1 : start - 1 + width] += count / width
    return out


def normalize(values: np.ndarray) -> np.ndarray:
    """Scale `values` to sum to 1."""
    total = float(np.sum(values))
    if total <= 0:
        raise ValueError("cannot normalize a series with no mass")
    return np.asarray(values, dtype=float) / total


def gaussian_weights(window: int = SMOOTH_WINDOW, alpha: float = SMOOTH_ALPHA) -> np.ndarray:
    """Normalized Gaussian kernel, exp(-0.5 * (alpha * n / (window / 2))**2)."""
    half = (window - 1) // 2
    n = np.arange(-half, half + 1, dtype=float)
    w = np.exp(-0.5 * (alpha * n / (window / 2.0)) ** 2)
    return w / w.sum()


def gaussian_smooth(
    values: np.ndarray, window: int = SMOOTH_WINDOW, alpha: float = SMOOTH_ALPHA
) -> np.ndarray:
    """Centered Gaussian moving average, renormalized.

    Days without a full window (the first and last `window // 2` days) are
    set to 0 before renormalizing.
    """
    values = np.asarray(values, dtype=float)
    half = (window - 1) // 2
    smoothed = np.zeros_like(values)
    smoothed[half : len(values) - half] = np.convolve(
        values, gaussian_weights(window, alpha), mode="valid"
    )
    return normalize(smoothed)


def ynp_herd_vector(births: Mapping[str, Sequence[int]], *, north: bool) -> np.ndarray:
    """Sum the per-year weekly series of one Yellowstone herd (unnormalized)."""
    total = np.zeros(PRIOR_LENGTH, dtype=float)
    for year, counts in births.items():
        shift = YNP_1941_SHIFT if north and year == "1941" else 0
        starts = [s + shift for s in YNP_WEEK_STARTS]
        total += binned_counts(starts, counts, YNP_BIN_DAYS)
    return total


# -----------------------------------------------------------------------------
# Calendar catalog
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class ConceptionCalendar:
    """One selectable conception calendar."""

    index: int  # 1-based catalog position
    key: str
    description: str
    sample_size: int
    smoothed: bool
    citations: tuple[str, ...]
    values: np.ndarray = field(repr=False)

    @property
    def label(self) -> str:
        kind = "3 week smooth" if self.smoothed else "sample data"
        return f"[{self.index}] {self.description} (n = {self.sample_size}) [{kind}]"

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "key": self.key,
            "description": self.description,
            "sample_size": self.sample_size,
            "smoothed": self.smoothed,
            "citations": list(self.citations),
        }


# (key, description, sample size, citation keys)
_SERIES_INFO: tuple[tuple[str, str, int, tuple[str, ...]], ...] = (
    (
        "aggregate",
        "Aggregated YNP, Custer State Park, and Wind Cave herds, based on fetal data",
        428,
        ("gogan", "haugen"),
    ),
    ("ynp", "YNP western and northern herds, based on fetal metrics", 297, ("gogan",)),
    ("ynp_north", "YNP northern herd, based on fetal metrics", 192, ("gogan",)),
    ("ynp_west", "YNP western herd, based on fetal metrics", 105, ("gogan",)),
    ("assorted", "Custer State Park and Wind Cave, based on fetal metrics", 131, ("haugen",)),
    ("niobrara", "Niobrara bull fights", 1088, ("wolff",)),
    ("nbr", "National Bison Range copulations", 37, ("lott",)),
)


def raw_series() -> dict[str, np.ndarray]:
    """Normalized raw series keyed as in the catalog."""
    niobrara = normalize(daily_counts(NIOBRARA_BULL_FIGHTS))
    nbr = normalize(daily_counts(NBR_COPULATIONS))
    haugen_starts = sorted(HAUGEN_CONCEPTIONS)
    assorted = normalize(
        binned_counts(
            haugen_starts, [HAUGEN_CONCEPTIONS[s] for s in haugen_starts], HAUGEN_BIN_DAYS
        )
    )

    north = ynp_herd_vector(YNP_NORTH_BIRTHS, north=True)
    west = ynp_herd_vector(YNP_WEST_BIRTHS, north=False)
    ynp_north = normalize(north)
    ynp_west = normalize(west)
    ynp = normalize(north + west)

    # the assorted data come from two herds and are weighted twice
    aggregate = (2.0 * assorted + ynp_north + ynp_west) / 4.0

    return {
        "aggregate": aggregate,
        "ynp": ynp,
        "ynp_north": ynp_north,
        "ynp_west": ynp_west,
        "assorted": assorted,
        "niobrara": niobrara,
        "nbr": nbr,
    }


@lru_cache(maxsize=1)
def calendar_catalog() -> tuple[ConceptionCalendar, ...]:
    """The 14 selectable calendars: each series raw, then smoothed."""
    series = raw_series()
    out: list[ConceptionCalendar] = []
    for key, description, n, cite_keys in _SERIES_INFO:
        raw = series[key]
        citations = tuple(CITATIONS[c] for c in cite_keys)
        for smoothed, values in ((False, raw), (True, gaussian_smooth(raw))):
            out.append(
                ConceptionCalendar(
                    index=len(out) + 1,
                    key=f"{key}_smooth" if smoothed else key,
                    description=description,
                    sample_size=n,
                    smoothed=smoothed,
                    citations=citations,
                    values=as_conception_prior(values),
                )
            )
    logger.debug(f"built {len(out)} conception calendars")
    return tuple(out)


def get_calendar(index: int) -> ConceptionCalendar:
    """Return catalog entry `index` (1..14).

    Raises:
        ValueError: If index is outside the catalog.
    """
    catalog = calendar_catalog()
    if not 1 <= int(index) <= len(catalog):
        raise ValueError(f"calendar index must be in 1..{len(catalog)}, got {index}")
    return catalog[int(index) - 1]


def conception_prior(index: int) -> np.ndarray:
    """Read-only 245-day prior for catalog entry `index`."""
    return get_calendar(index).values


def calendar_frame() -> pd.DataFrame:
    """All calendars as columns, one row per day from June 1."""
    catalog = calendar_catalog()
    df = pd.DataFrame(
        {
            "offset": np.arange(PRIOR_LENGTH),
            "month": CYCLE_MONTH[:PRIOR_LENGTH],
            "date": CYCLE_DATE[:PRIOR_LENGTH],
        }
    )
    for cal in catalog:
        df[cal.key] = cal.values
    return df
