"""Resolvers: conception calendars and specimen -> gestation-age ranges."""

from sodecal.resolvers.body_size import (
    bootstrap_length_ratios,
    load_or_bootstrap_ratios,
    read_length_ratios,
    save_length_ratios,
)
from sodecal.resolvers.conception_priors import (
    ConceptionCalendar,
    calendar_catalog,
    conception_prior,
    get_calendar,
)
from sodecal.resolvers.depth_length import (
    DepthLengthCoefficients,
    DepthLengthModel,
    fit_quantile_models,
)
from sodecal.resolvers.gestation_age import (
    MEASUREMENT_ERROR_MM,
    DepthLimits,
    GestationAgeResolver,
    ResolvedSpecimen,
)
from sodecal.resolvers.growth_curves import GrowthCurves, LengthRatio, simulate_growth_curves
from sodecal.resolvers.specimens import Element, Specimen, SpecimenError, read_specimen_table

__all__ = [
    "MEASUREMENT_ERROR_MM",
    "ConceptionCalendar",
    "DepthLengthCoefficients",
    "DepthLengthModel",
    "DepthLimits",
    "Element",
    "GestationAgeResolver",
    "GrowthCurves",
    "LengthRatio",
    "ResolvedSpecimen",
    "Specimen",
    "SpecimenError",
    "bootstrap_length_ratios",
    "calendar_catalog",
    "conception_prior",
    "fit_quantile_models",
    "get_calendar",
    "load_or_bootstrap_ratios",
    "read_length_ratios",
    "read_specimen_table",
    "save_length_ratios",
    "simulate_growth_curves",
]
