"""Pytest configuration and fixtures shared by all sodecal tests."""
from __future__ import annotations

import math
import sys
from pathlib import Path

import pytest


def pytest_configure(config) -> None:
    # Ensure sodecal is importable when running tests from the repo root without installing.
    repo_root = Path(__file__).resolve().parents[1]
    src_dir = repo_root / "src"
    if src_dir.exists() and str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))


@pytest.fixture
def linear_coefficients():
    """length = 7x, 8x, 9x depth for the lower, median and upper quantiles."""
    from sodecal.resolvers.depth_length import (
        TAU_LOWER,
        TAU_MEDIAN,
        TAU_UPPER,
        DepthLengthCoefficients,
        DepthLengthModel,
    )
    from sodecal.resolvers.specimens import Element

    models = []
    for element in Element:
        for tau, scale in ((TAU_LOWER, 7.0), (TAU_MEDIAN, 8.0), (TAU_UPPER, 9.0)):
            models.append(DepthLengthModel(element, tau, math.log(scale), 1.0))
    return DepthLengthCoefficients(models)


@pytest.fixture(scope="session")
def growth_curves():
    from sodecal.resolvers.growth_curves import simulate_growth_curves

    return simulate_growth_curves()


@pytest.fixture
def resolver(growth_curves, linear_coefficients):
    from sodecal.resolvers.gestation_age import GestationAgeResolver

    return GestationAgeResolver(growth_curves, linear_coefficients)
