"""
Diaphysis depth -> length quantile regressions.

Per element, log(length) = a + b * log(depth) is fitted at the 2.5% (lower),
50% (median) and 97.5% (upper) quantiles. Coefficients either come from a
metrics table (columns element, length, depth) fitted with statsmodels
quantile regression, or from a saved coefficient table (element, tau, a, b).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Union

import numpy as np
import pandas as pd
import statsmodels.formula.api as smf

from sodecal.resolvers.specimens import Element
from sodecal.utils.logging import get_logger

logger = get_logger(__name__)

TAU_LOWER = 0.025
TAU_MEDIAN = 0.5
TAU_UPPER = 0.975
DEFAULT_TAUS = (TAU_LOWER, TAU_MEDIAN, TAU_UPPER)

METRICS_COLUMNS = ("element", "length", "depth")
COEFFICIENT_COLUMNS = ("element", "tau", "a", "b")


@dataclass(frozen=True)
class DepthLengthModel:
    """One fitted quantile line on the log-log scale."""

    element: Element
    tau: float
    a: float
    b: float

    def length(self, depth):
        """Predicted diaphysis length (mm) for `depth` (mm)."""
        return np.exp(self.a + self.b * np.log(depth))

    def depth(self, length):
        """Depth (mm) whose predicted length equals `length`."""
        return np.exp((np.log(length) - self.a) / self.b)

    def to_dict(self) -> dict:
        return {"element": self.element.value, "tau": self.tau, "a": self.a, "b": self.b}


class DepthLengthCoefficients:
    """Fitted lower / median / upper models for each element."""

    def __init__(self, models: Iterable[DepthLengthModel]) -> None:
        self._models: dict[tuple[Element, float], DepthLengthModel] = {}
        for m in models:
            self._models[(m.element, round(float(m.tau), 6))] = m

    def __len__(self) -> int:
        return len(self._models)

    def model(self, element, tau: float) -> DepthLengthModel:
        key = (Element.parse(element), round(float(tau), 6))
        try:
            return self._models[key]
        except KeyError:
            raise KeyError(f"no depth-length model for {key[0].value} at tau={tau}") from None

    def lower(self, element) -> DepthLengthModel:
        return self.model(element, TAU_LOWER)

    def upper(self, element) -> DepthLengthModel:
        return self.model(element, TAU_UPPER)

    def median(self, element) -> DepthLengthModel:
        return self.model(element, TAU_MEDIAN)

    def has_bounds(self, element) -> bool:
        element = Element.parse(element)
        return all((element, t) in self._models for t in (TAU_LOWER, TAU_UPPER))

    def to_frame(self) -> pd.DataFrame:
        rows = [m.to_dict() for m in self._models.values()]
        return pd.DataFrame(rows, columns=list(COEFFICIENT_COLUMNS))

    def save_csv(self, path: Union[str, Path]) -> None:
        self.to_frame().to_csv(path, index=False)
        logger.info(f"saved depth-length coefficients to {path}")

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "DepthLengthCoefficients":
        """Build from a table with columns element, tau, a, b."""
        missing = [c for c in COEFFICIENT_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(f"coefficient table is missing columns {missing}")
        models = [
            DepthLengthModel(Element.parse(r.element), float(r.tau), float(r.a), float(r.b))
            for r in df.itertuples(index=False)
        ]
        return cls(models)

    @classmethod
    def read_csv(cls, path: Union[str, Path]) -> "DepthLengthCoefficients":
        return cls.from_frame(pd.read_csv(path))


def fit_quantile_models(
    metrics: pd.DataFrame, taus: Iterable[float] = DEFAULT_TAUS
) -> DepthLengthCoefficients:
    """Fit log(length) ~ log(depth) per element and quantile.

    Args:
        metrics: Table with columns element, length, depth (mm).
        taus: Quantiles to fit.

    Returns:
        DepthLengthCoefficients for every element present in `metrics`.

    Raises:
        ValueError: If required columns are missing or an element has fewer
            than three usable rows.
    """
    missing = [c for c in METRICS_COLUMNS if c not in metrics.columns]
    if missing:
        raise ValueError(f"metrics table is missing columns {missing}")

    df = metrics.loc[:, list(METRICS_COLUMNS)].copy()
    df["element"] = df["element"].astype(str).str.strip().str.lower()
    df["length"] = pd.to_numeric(df["length"], errors="coerce")
    df["depth"] = pd.to_numeric(df["depth"], errors="coerce")
    df = df[(df["length"] > 0) & (df["depth"] > 0)]
    df["llength"] = np.log(df["length"])
    df["ldepth"] = np.log(df["depth"])

    models: list[DepthLengthModel] = []
    for name, group in df.groupby("element"):
        element = Element.parse(name)
        if len(group) < 3:
            raise ValueError(f"need at least 3 {element.value} rows to fit, got {len(group)}")
        for tau in taus:
            res = smf.quantreg("llength ~ ldepth", group).fit(q=tau)
            a = float(res.params["Intercept"])
            b = float(res.params["ldepth"])
            models.append(DepthLengthModel(element, float(tau), a, b))
            logger.debug(f"{element.value} tau={tau}: a={a:.4f} b={b:.4f}")
    logger.info(f"fitted {len(models)} depth-length models")
    return DepthLengthCoefficients(models)


def read_metrics_csv(path: Union[str, Path]) -> pd.DataFrame:
    """Load a fetal metrics table (element, length, depth)."""
    df = pd.read_csv(path)
    df["element"] = df["element"].astype(str).str.strip().str.lower()
    return df


def measurement_bounds(depth_mm: float, error_mm: float) -> tuple[float, float]:
    """Depth +/- measurement error; the lower bound must stay positive."""
    lo = depth_mm - error_mm
    if not math.isfinite(depth_mm) or lo <= 0:
        raise ValueError(f"depth {depth_mm} mm is too small for error {error_mm} mm")
    return lo, depth_mm + error_mm
