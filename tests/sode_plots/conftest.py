"""Fixtures for figure tests."""

from __future__ import annotations

import numpy as np
import pytest

from sodecal.engine.convolver import PRIOR_LENGTH
from sodecal.engine.ranges import GestationAgeRange
from sodecal.engine.session import Session


@pytest.fixture
def session() -> Session:
    """Session with two overlapping measured entries."""
    prior = np.zeros(PRIOR_LENGTH)
    prior[61:81] = 1.0
    s = Session(prior / prior.sum(), prior_name="rut")
    s.add_measured(GestationAgeRange(1, 5))
    s.add_measured(GestationAgeRange(3, 10))
    return s
