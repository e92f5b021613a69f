"""
Simulated fetal bison long-bone growth over a 320-day gestation.

Pipeline
--------
1. Fetal weights (g) for male/female x historic/modern bison (Gogan et al.
   2005), cube of a log-logistic cube-root weight curve.
2. Crown-rump length (CRL) per lineage, CRL = (k * weight) ** (1 / 2.95),
   averaged over both sexes. Lineage "a" uses historic weights, "b", "ce"
   and "d" modern weights.
3. Cow tibia / radius tolerance limits (Richardson et al. 1990), widened
   from 95% to 3-sd limits and fitted with weighted logistic curves. A
   logistic CRL curve is fitted to the same ages.
4. Cow ratios (max/avg, min/avg, avg/CRL) are rescaled from a 280-day cow
   gestation to 265 (historic) and 272 (modern) bison days with
   fifth-degree polynomials.
5. Per lineage: length = CRL * (avg/CRL ratio) * (max or min ratio). The
   per-day min and max over the 4 lineages x {max, min} curves give the
   tibia and radius envelopes. Femur and humerus are zero-intercept
   regressions on tibia and radius lengths of paired adult-size specimens.

The optional antiquus adjustment multiplies each element's max curve by the
median antiquus / modern length ratio.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional

import numpy as np
import pandas as pd
from scipy.optimize import curve_fit

from sodecal.resolvers.specimens import Element
from sodecal.utils.logging import get_logger

logger = get_logger(__name__)

GESTATION_DAYS = 320
DAYS = np.arange(1, GESTATION_DAYS + 1, dtype=float)

COW_GESTATION = 280.0
HISTORIC_GESTATION = 265.0
MODERN_GESTATION = 272.0

CRL_EXPONENT = 2.95

# (form, sex) -> (a, b, c) for weight = (a / (1 + (day / b) ** -c)) ** 3
WEIGHT_PARAMS: dict[tuple[str, str], tuple[float, float, float]] = {
    ("modern", "female"): (57.26, 275.71, 2.05),
    ("modern", "male"): (66.79, 300.66, 2.04),
    ("historic", "female"): (67.54, 302.53, 2.04),
    ("historic", "male"): (80.82, 334.26, 2.03),
}

# lineage -> (weight form, CRL scale k)
CRL_LINEAGES: dict[str, tuple[str, float]] = {
    "a": ("historic", 11893.0),
    "b": ("modern", 15193.0),
    "ce": ("modern", 13859.0),
    "d": ("modern", 15416.0),
}

# Richardson et al. (1990) cow tolerance table
COW_TOLERANCES = pd.DataFrame(
    {
        "day": [100, 140, 160, 180, 220, 260],
        "n": [6, 7, 7, 7, 9, 11],
        "crl": [192, 334, 411, 495, 670, 845],
        "tibia_max95": [20.8, 43.3, 56.8, 79.2, 123.8, 173.4],
        "tibia_avg": [18.5, 41.0, 54.3, 73.2, 116.2, 164.2],
        "tibia_min95": [16.2, 38.6, 51.9, 67.4, 108.8, 155.3],
        "radius_max95": [18.3, 36.6, 47.2, 65.3, 100.3, 135.3],
        "radius_avg": [16.3, 34.6, 45.2, 59.2, 93.1, 126.7],
        "radius_min95": [14.4, 32.7, 43.2, 53.5, 86.0, 118.4],
    }
)

LOGISTIC_START = (500.0, 500.0, 0.02)
CRL_LOGISTIC_START = (900.0, 20.0, 0.018)
POLY_DEGREE = 5

# Paired adult-size lengths (mm): humerus, radius, femur, tibia. NaN = not measurable.
_NA = np.nan
PAIRED_LENGTHS = pd.DataFrame(
    {
        "humerus": [
            114.67, 123.08, 88.78, _NA, 120.65, _NA, 118.93, 88.70, 128.66, 132.79,
            119.47, 110.28, 115.51, _NA, 132.97, 151.00, 130.61, 119.10, 130.15,
            115.48, 144.63, 113.85, 123.05, 88.56, 133.90, 120.80, _NA, 119.96,
            88.92, 127.13, 134.29, 120.11, 111.11, 115.03, 133.67, 132.33, 148.10,
            130.96, 119.38, 131.19, 114.54, 144.98, _NA, _NA,
        ],
        "radius": [
            113.37, 119.33, 89.54, _NA, 116.53, _NA, 118.40, 90.30, 123.19, 134.10,
            118.42, 107.75, 114.40, _NA, 132.23, 141.57, 122.77, 114.21, 130.25,
            112.02, 139.61, 113.36, 118.79, 89.79, 131.07, 117.55, _NA, 118.11,
            90.13, 122.53, 134.37, 117.65, 107.94, 113.24, 132.49, 132.53, 140.15,
            122.17, 115.69, 130.17, 113.49, 139.11, _NA, _NA,
        ],
        "femur": [
            128.57, 140.29, 103.99, _NA, 137.04, _NA, 136.77, 102.96, 146.74, 155.00,
            136.64, 125.30, 130.05, 153.00, 154.00, 159.62, 147.72, 134.77, 153.00,
            132.11, 158.00, 127.94, 140.63, 103.07, _NA, 138.00, _NA, 137.63, 103.66,
            144.58, 155.00, 136.21, 124.06, 130.01, 155.0, 155.0, 159.35, 147.03,
            132.68, 152.00, 133.76, 159.00, _NA, 91.19,
        ],
        "tibia": [
            142.13, 151.00, 116.50, 169.00, 151.00, _NA, 156.00, 116.95, 165.00,
            157.00, 145.41, 139.01, 146.78, 169.00, 167.00, 178.00, 163.00, 147.88,
            172.00, 147.25, 171.00, 141.26, 153.00, 115.34, 167.00, 149.34, _NA,
            153.00, 116.05, 165.00, 163.00, 144.20, 138.77, 147.43, _NA, 165.00,
            180.00, 161.00, 149.33, 170.00, 147.37, 170.00, 102.61, 106.04,
        ],
    }
)


# -----------------------------------------------------------------------------
# Building blocks
# -----------------------------------------------------------------------------


def fetal_weight(days: np.ndarray, a: float, b: float, c: float) -> np.ndarray:
    """Gogan et al. weight curve in grams."""
    return (a / (1.0 + (days / b) ** -c)) ** 3


def crown_rump_length(days: np.ndarray, form: str, k: float) -> np.ndarray:
    """Sex-averaged CRL for one lineage."""
    male = (k * fetal_weight(days, *WEIGHT_PARAMS[(form, "male")])) ** (1.0 / CRL_EXPONENT)
    female = (k * fetal_weight(days, *WEIGHT_PARAMS[(form, "female")])) ** (1.0 / CRL_EXPONENT)
    return (male + female) / 2.0


def three_sd_limits(avg, max95, min95) -> tuple[np.ndarray, np.ndarray]:
    """Widen 95% (1.96 sd) tolerance limits to 3 sd. Returns (max, min)."""
    avg = np.asarray(avg, dtype=float)
    upper = 3.0 * (np.asarray(max95, dtype=float) - avg) / 1.96 + avg
    lower = avg - 3.0 * (avg - np.asarray(min95, dtype=float)) / 1.96
    return upper, lower


def logistic(t, p1, p2, p3):
    return p1 / (1.0 + p2 * np.exp(-p3 * t))


def fit_logistic(days, values, weights, p0=LOGISTIC_START) -> np.ndarray:
    """Weighted least-squares logistic fit; weights act like sample sizes."""
    sigma = 1.0 / np.sqrt(np.asarray(weights, dtype=float))
    popt, _ = curve_fit(
        logistic,
        np.asarray(days, dtype=float),
        np.asarray(values, dtype=float),
        p0=p0,
        sigma=sigma,
        maxfev=20000,
    )
    return popt


def rescaled_ratio(ratio: np.ndarray, gestation: float) -> np.ndarray:
    """Refit a cow ratio series on bison-scaled days, evaluated on days 1..320."""
    scaled_days = DAYS / COW_GESTATION * gestation
    poly = np.polynomial.Polynomial.fit(scaled_days, ratio, POLY_DEGREE)
    return poly(DAYS)


def zero_intercept_slope(y, x) -> float:
    """Least-squares slope of y ~ 0 + x over rows where both are present."""
    y = np.asarray(y, dtype=float)
    x = np.asarray(x, dtype=float)
    ok = ~(np.isnan(x) | np.isnan(y))
    return float(np.sum(x[ok] * y[ok]) / np.sum(x[ok] ** 2))


# -----------------------------------------------------------------------------
# Growth curves
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class LengthRatio:
    """Antiquus / modern length ratio summary for one element."""

    lb: float
    mean: float
    ub: float


@dataclass(frozen=True)
class GrowthCurves:
    """Per-day min/max diaphysis length (mm) for each element.

    `frame` has a `day` column (1..320) and `<element>_min` / `<element>_max`
    columns. `bands` holds the lb/ub scaled max curves and the unadjusted max
    when the antiquus adjustment has been applied.
    """

    frame: pd.DataFrame = field(repr=False)
    antiquus_adjusted: bool = False
    bands: Optional[pd.DataFrame] = field(default=None, repr=False)

    @property
    def days(self) -> np.ndarray:
        return self.frame["day"].to_numpy()

    def min_curve(self, element) -> np.ndarray:
        return self.frame[f"{Element.parse(element).value}_min"].to_numpy()

    def max_curve(self, element) -> np.ndarray:
        return self.frame[f"{Element.parse(element).value}_max"].to_numpy()

    def with_antiquus_adjustment(self, ratios: dict) -> "GrowthCurves":
        """Scale every max curve by the element's median ratio.

        Args:
            ratios: Element (or name) -> LengthRatio for all four elements.
        """
        if self.antiquus_adjusted:
            raise ValueError("growth curves are already adjusted for antiquus")
        by_element = {Element.parse(k): v for k, v in ratios.items()}
        missing = [e.value for e in Element if e not in by_element]
        if missing:
            raise ValueError(f"length ratios missing for {missing}")

        frame = self.frame.copy()
        bands = pd.DataFrame({"day": frame["day"]})
        for element, ratio in by_element.items():
            col = f"{element.value}_max"
            bands[f"{element.value}_max_unadjusted"] = frame[col]
            bands[f"{element.value}_max_lb"] = frame[col] * ratio.lb
            bands[f"{element.value}_max_ub"] = frame[col] * ratio.ub
            frame[col] = frame[col] * ratio.mean
        logger.info("growth curves adjusted for antiquus body size")
        return GrowthCurves(frame=frame, antiquus_adjusted=True, bands=bands)


def _lineage_envelopes() -> dict[str, tuple[np.ndarray, np.ndarray]]:
    """Per-day (min, max) envelopes for tibia and radius."""
    tol = COW_TOLERANCES
    crl_params = fit_logistic(tol["day"], tol["crl"], tol["n"], CRL_LOGISTIC_START)
    crl_cow = logistic(DAYS, *crl_params)

    envelopes: dict[str, tuple[np.ndarray, np.ndarray]] = {}
    for bone in ("tibia", "radius"):
        upper, lower = three_sd_limits(
            tol[f"{bone}_avg"], tol[f"{bone}_max95"], tol[f"{bone}_min95"]
        )
        sim_max = logistic(DAYS, *fit_logistic(tol["day"], upper, tol["n"]))
        sim_min = logistic(DAYS, *fit_logistic(tol["day"], lower, tol["n"]))
        sim_avg = (sim_max + sim_min) / 2.0

        pmax = sim_max / sim_avg
        pmin = sim_min / sim_avg
        to_crl = sim_avg / crl_cow

        columns: list[np.ndarray] = []
        for form, k in CRL_LINEAGES.values():
            gestation = HISTORIC_GESTATION if form == "historic" else MODERN_GESTATION
            crl = crown_rump_length(DAYS, form, k)
            base = crl * rescaled_ratio(to_crl, gestation)
            columns.append(base * rescaled_ratio(pmax, gestation))
            columns.append(base * rescaled_ratio(pmin, gestation))
        stacked = np.vstack(columns)
        envelopes[bone] = (stacked.min(axis=0), stacked.max(axis=0))
    return envelopes


@lru_cache(maxsize=1)
def simulate_growth_curves() -> GrowthCurves:
    """Modern-bison growth envelopes for all four elements (cached)."""
    envelopes = _lineage_envelopes()
    tib_min, tib_max = envelopes["tibia"]
    rad_min, rad_max = envelopes["radius"]

    femur_per_tibia = zero_intercept_slope(PAIRED_LENGTHS["femur"], PAIRED_LENGTHS["tibia"])
    humerus_per_radius = zero_intercept_slope(PAIRED_LENGTHS["humerus"], PAIRED_LENGTHS["radius"])

    frame = pd.DataFrame(
        {
            "day": DAYS.astype(int),
            "tibia_min": tib_min,
            "tibia_max": tib_max,
            "femur_min": femur_per_tibia * tib_min,
            "femur_max": femur_per_tibia * tib_max,
            "radius_min": rad_min,
            "radius_max": rad_max,
            "humerus_min": humerus_per_radius * rad_min,
            "humerus_max": humerus_per_radius * rad_max,
        }
    )
    logger.debug(
        f"simulated growth curves: femur/tibia={femur_per_tibia:.4f} "
        f"humerus/radius={humerus_per_radius:.4f}"
    )
    return GrowthCurves(frame=frame)
