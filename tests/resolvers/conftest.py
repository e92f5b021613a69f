"""Fixtures for resolver tests.

`linear_coefficients`, `growth_curves` and `resolver` live in tests/conftest.py.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from sodecal.resolvers.specimens import Element


@pytest.fixture
def metrics_table() -> pd.DataFrame:
    """Synthetic fetal metrics: log(length) = 2.0 + 1.1 * log(depth) + noise."""
    rng = np.random.default_rng(3)
    rows = []
    for element in Element:
        depth = rng.uniform(1.0, 15.0, size=80)
        noise = rng.normal(0.0, 0.05, size=80)
        length = np.exp(2.0 + 1.1 * np.log(depth) + noise)
        rows.append(pd.DataFrame({"element": element.value, "length": length, "depth": depth}))
    return pd.concat(rows, ignore_index=True)
