"""Fixtures for controller and widget tests."""

from __future__ import annotations

import pytest

from sodecal.sode_widget.controller import SodeController


@pytest.fixture
def controller(resolver) -> SodeController:
    return SodeController(resolver)


@pytest.fixture
def bare_controller() -> SodeController:
    """Controller without depth-length models."""
    return SodeController()


@pytest.fixture
def tibia_depth(resolver) -> float:
    """A tibia depth resolving around gestation day 150."""
    return float(resolver.curves.max_curve("tibia")[149] / 8.0)
