"""Fixtures for reporting tests."""

from __future__ import annotations

import numpy as np
import pytest

from sodecal.engine.convolver import PRIOR_LENGTH
from sodecal.engine.cycle_mapper import YEAR_LENGTH
from sodecal.engine.session import Session


@pytest.fixture
def session() -> Session:
    """Session over a 20-day rut prior (Aug 1 - Aug 20 conceptions)."""
    prior = np.zeros(PRIOR_LENGTH)
    prior[61:81] = 1.0
    return Session(prior / prior.sum(), prior_name="rut")


@pytest.fixture
def two_run_calendar() -> np.ndarray:
    """Mass 0.75 on Jan 10 - Jan 12 and 0.25 on Apr 10 - Apr 11."""
    cal = np.zeros(YEAR_LENGTH)
    cal[9:12] = 0.25
    cal[99:101] = 0.125
    return cal
