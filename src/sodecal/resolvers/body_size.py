"""
Antiquus / modern long-bone length ratios.

For each element the adult table is reduced to its most abundant side, the
mean metric is bootstrapped for each sex x form (modern, antiq), and the
per-resample antiq / modern ratios of both sexes are pooled. The 2.5%, 50%
and 97.5% quantiles are reported as lb, mean and ub.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import numpy as np
import pandas as pd

from sodecal.resolvers.growth_curves import LengthRatio
from sodecal.resolvers.specimens import Element
from sodecal.utils.logging import get_logger

logger = get_logger(__name__)

BOOT_RESAMPLES = 10_000
BOOT_SEED = 10
RATIO_QUANTILES = (0.025, 0.5, 0.975)

ADULT_COLUMNS = ("element", "side", "sex", "form", "metric")
RATIO_ORDER = (Element.HUMERUS, Element.RADIUS, Element.FEMUR, Element.TIBIA)


def bootstrap_means(
    values, n_resamples: int, rng: np.random.Generator
) -> np.ndarray:
    """Means of `n_resamples` resamples (with replacement) of `values`."""
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        raise ValueError("cannot bootstrap an empty sample")
    idx = rng.integers(0, values.size, size=(n_resamples, values.size))
    return values[idx].mean(axis=1)


def _group(etb: pd.DataFrame, sex: str, form: str) -> np.ndarray:
    values = etb.loc[(etb["sex"] == sex) & (etb["form"] == form), "metric"].to_numpy(dtype=float)
    if values.size == 0:
        element = etb["element"].iloc[0] if len(etb) else "?"
        raise ValueError(f"no {sex} {form} measurements for {element}")
    return values


def bootstrap_length_ratios(
    adult: pd.DataFrame,
    *,
    n_resamples: int = BOOT_RESAMPLES,
    seed: Optional[int] = BOOT_SEED,
) -> dict[Element, LengthRatio]:
    """Bootstrap antiquus / modern length ratios per element.

    Args:
        adult: Table with columns element, side, sex (male/female), form
            (modern/antiq) and metric.
        n_resamples: Bootstrap resamples per sex x form group.
        seed: Seed for numpy's default_rng; None for a fresh stream.

    Returns:
        Element -> LengthRatio for humerus, radius, femur and tibia.

    Raises:
        ValueError: On missing columns or an empty sex x form group.
    """
    missing = [c for c in ADULT_COLUMNS if c not in adult.columns]
    if missing:
        raise ValueError(f"adult bison table is missing columns {missing}")

    tb = adult.copy()
    for col in ("element", "side", "sex", "form"):
        tb[col] = tb[col].astype(str).str.strip().str.lower()
    tb["metric"] = pd.to_numeric(tb["metric"], errors="coerce")
    tb = tb.dropna(subset=["metric"])

    rng = np.random.default_rng(seed)
    out: dict[Element, LengthRatio] = {}
    for element in RATIO_ORDER:
        etb = tb[tb["element"] == element.value]
        if etb.empty:
            raise ValueError(f"no adult measurements for {element.value}")
        side = etb["side"].value_counts().idxmax()
        etb = etb[etb["side"] == side]

        boot = {
            (sex, form): bootstrap_means(_group(etb, sex, form), n_resamples, rng)
            for sex in ("male", "female")
            for form in ("modern", "antiq")
        }
        ratios = np.concatenate(
            [
                boot[("male", "antiq")] / boot[("male", "modern")],
                boot[("female", "antiq")] / boot[("female", "modern")],
            ]
        )
        lb, mid, ub = np.quantile(ratios, RATIO_QUANTILES)
        out[element] = LengthRatio(lb=float(lb), mean=float(mid), ub=float(ub))
        logger.debug(f"{element.value} ({side}): ratio {mid:.4f} [{lb:.4f}, {ub:.4f}]")
    return out


def ratio_frame(ratios: dict) -> pd.DataFrame:
    """Ratios as a table (elements, lb, mean, ub) in humerus, radius, femur, tibia order."""
    by_element = {Element.parse(k): v for k, v in ratios.items()}
    rows = [
        {"elements": e.value, "lb": by_element[e].lb, "mean": by_element[e].mean, "ub": by_element[e].ub}
        for e in RATIO_ORDER
        if e in by_element
    ]
    return pd.DataFrame(rows, columns=["elements", "lb", "mean", "ub"])


def save_length_ratios(ratios: dict, path: Union[str, Path]) -> None:
    ratio_frame(ratios).to_csv(path, index=False)
    logger.info(f"saved length ratios to {path}")


def read_length_ratios(path: Union[str, Path]) -> dict[Element, LengthRatio]:
    """Read a ratio table; accepts an `elements` or `element` name column."""
    df = pd.read_csv(path)
    name_col = "elements" if "elements" in df.columns else "element"
    missing = [c for c in (name_col, "lb", "mean", "ub") if c not in df.columns]
    if missing:
        raise ValueError(f"length ratio table {path} is missing columns {missing}")
    return {
        Element.parse(r[name_col]): LengthRatio(float(r["lb"]), float(r["mean"]), float(r["ub"]))
        for _, r in df.iterrows()
    }


def load_or_bootstrap_ratios(
    cache_path: Union[str, Path], adult_csv: Optional[Union[str, Path]] = None
) -> dict[Element, LengthRatio]:
    """Read cached ratios, or bootstrap them from `adult_csv` and write the cache.

    Raises:
        FileNotFoundError: If the cache is missing and no adult table is given.
    """
    cache_path = Path(cache_path)
    if cache_path.exists():
        return read_length_ratios(cache_path)
    if adult_csv is None:
        raise FileNotFoundError(f"no length ratio cache at {cache_path} and no adult bison table")
    ratios = bootstrap_length_ratios(pd.read_csv(adult_csv))
    save_length_ratios(ratios, cache_path)
    return ratios
