"""
Gestation-age resolver: element + measured depth -> GestationAgeRange.

The depth is widened by the measurement error, converted to a length range
with the lower / upper quantile models, and located on the growth curves:

  min_day = first day whose MAX curve reaches the lower length
  max_day = last day whose MIN curve stays at or below the upper length

Valid depths per element lie strictly between the depth the upper model
gives for the min curve on day 1 and the depth the lower model gives for the
max curve on the last simulated day.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

import numpy as np

from sodecal.engine.ranges import GestationAgeRange
from sodecal.engine.session import SpecimenInfo
from sodecal.resolvers.depth_length import (
    DepthLengthCoefficients,
    fit_quantile_models,
    measurement_bounds,
    read_metrics_csv,
)
from sodecal.resolvers.growth_curves import GrowthCurves, simulate_growth_curves
from sodecal.resolvers.specimens import Element, Specimen, SpecimenError
from sodecal.utils.logging import get_logger

logger = get_logger(__name__)

MEASUREMENT_ERROR_MM = 0.225


@dataclass(frozen=True)
class DepthLimits:
    """Open interval of depths (mm) the growth model can resolve."""

    element: Element
    min_depth: float
    max_depth: float

    def contains(self, depth: float) -> bool:
        return self.min_depth < depth < self.max_depth


@dataclass(frozen=True)
class ResolvedSpecimen:
    """A specimen with its estimated length and gestation-age ranges."""

    specimen: Specimen
    length_min_mm: float
    length_max_mm: float
    age_range: GestationAgeRange

    def specimen_info(self) -> SpecimenInfo:
        return SpecimenInfo(
            element=self.specimen.element.value,
            depth_mm=self.specimen.depth_mm,
            length_min_mm=self.length_min_mm,
            length_max_mm=self.length_max_mm,
        )


class GestationAgeResolver:
    """Resolve measured depths against growth curves and depth-length models."""

    def __init__(
        self,
        curves: GrowthCurves,
        coefficients: DepthLengthCoefficients,
        *,
        measurement_error: float = MEASUREMENT_ERROR_MM,
    ) -> None:
        self.curves = curves
        self.coefficients = coefficients
        self.measurement_error = float(measurement_error)

    @classmethod
    def from_sources(
        cls,
        *,
        metrics_csv: Optional[Union[str, Path]] = None,
        coefficients_csv: Optional[Union[str, Path]] = None,
        length_ratios: Optional[dict] = None,
    ) -> "GestationAgeResolver":
        """Build from a metrics table (fitted) or a saved coefficient table.

        Raises:
            ValueError: If neither source is given.
        """
        if coefficients_csv is not None:
            coefficients = DepthLengthCoefficients.read_csv(coefficients_csv)
        elif metrics_csv is not None:
            coefficients = fit_quantile_models(read_metrics_csv(metrics_csv))
        else:
            raise ValueError("a metrics table or a coefficient table is required")

        curves = simulate_growth_curves()
        if length_ratios:
            curves = curves.with_antiquus_adjustment(length_ratios)
        return cls(curves, coefficients)

    @property
    def antiquus_adjusted(self) -> bool:
        return self.curves.antiquus_adjusted

    def elements(self) -> list[Element]:
        """Elements with both lower and upper depth-length models."""
        return [e for e in Element if self.coefficients.has_bounds(e)]

    def depth_limits(self, element) -> DepthLimits:
        element = Element.parse(element)
        self._require_models(element)
        min_depth = float(self.coefficients.upper(element).depth(self.curves.min_curve(element)[0]))
        max_depth = float(self.coefficients.lower(element).depth(self.curves.max_curve(element)[-1]))
        return DepthLimits(element, min_depth, max_depth)

    def length_range(self, element, depth_mm: float) -> tuple[float, float]:
        """Estimated diaphysis length range (mm) for a measured depth."""
        element = Element.parse(element)
        self._require_models(element)
        try:
            lo_depth, hi_depth = measurement_bounds(float(depth_mm), self.measurement_error)
        except ValueError as e:
            raise SpecimenError(f"{element.value}: {e}") from e
        lo = float(self.coefficients.lower(element).length(lo_depth))
        hi = float(self.coefficients.upper(element).length(hi_depth))
        return lo, hi

    def resolve(self, element, depth_mm: float) -> ResolvedSpecimen:
        """Resolve one measurement to a gestation-age range.

        Raises:
            SpecimenError: Unknown element, depth outside the modelled
                limits, or no day on the growth curves matches.
        """
        element = Element.parse(element)
        try:
            depth = float(depth_mm)
        except (TypeError, ValueError):
            raise SpecimenError(f"depth must be numeric, got {depth_mm!r}") from None
        if not math.isfinite(depth):
            raise SpecimenError(f"depth must be finite, got {depth_mm!r}")

        limits = self.depth_limits(element)
        if not limits.contains(depth):
            raise SpecimenError(
                f"{element.value} depth must fall between {limits.min_depth:.2f} "
                f"and {limits.max_depth:.2f} mm, got {depth}"
            )

        lo, hi = self.length_range(element, depth)
        reaches = np.flatnonzero(self.curves.max_curve(element) >= lo)
        below = np.flatnonzero(self.curves.min_curve(element) <= hi)
        if reaches.size == 0 or below.size == 0:
            raise SpecimenError(
                f"no gestation day matches {element.value} length {lo:.2f} - {hi:.2f} mm"
            )
        age_range = GestationAgeRange(int(reaches[0]) + 1, int(below[-1]) + 1)
        if not age_range.is_valid:
            raise SpecimenError(
                f"{element.value} length {lo:.2f} - {hi:.2f} mm gives an empty age range"
            )

        logger.info(
            f"{element.value} depth {depth} mm -> length {lo:.2f}-{hi:.2f} mm, days {age_range}"
        )
        return ResolvedSpecimen(Specimen(element, depth), lo, hi, age_range)

    def resolve_all(self, specimens: Iterable[Specimen]) -> list[ResolvedSpecimen]:
        """Resolve every specimen; the first failure names its row.

        Raises:
            SpecimenError: With the 1-based row of the offending specimen.
        """
        out: list[ResolvedSpecimen] = []
        for row, spec in enumerate(specimens, start=1):
            try:
                out.append(self.resolve(spec.element, spec.depth_mm))
            except SpecimenError as e:
                raise SpecimenError(f"row {row}: {e}") from e
        return out

    def _require_models(self, element: Element) -> None:
        if not self.coefficients.has_bounds(element):
            raise SpecimenError(f"no depth-length models for {element.value}")
