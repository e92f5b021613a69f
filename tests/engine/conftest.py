"""Fixtures for engine tests."""

from __future__ import annotations

import numpy as np
import pytest

from sodecal.engine.convolver import PRIOR_LENGTH
from sodecal.engine.session import Session


@pytest.fixture
def uniform_prior() -> np.ndarray:
    """Flat conception prior, 1/245 on every day."""
    return np.full(PRIOR_LENGTH, 1.0 / PRIOR_LENGTH)


@pytest.fixture
def rut_prior() -> np.ndarray:
    """Prior concentrated on a 20-day rut starting Aug 1 (offset 61)."""
    prior = np.zeros(PRIOR_LENGTH)
    prior[61:81] = 1.0
    return prior / prior.sum()


@pytest.fixture
def session(rut_prior: np.ndarray) -> Session:
    """Empty session over the rut prior."""
    return Session(rut_prior, prior_name="rut")
