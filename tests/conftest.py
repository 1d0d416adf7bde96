"""Shared fixtures: synthetic loan data and a non-interactive matplotlib backend."""

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


@pytest.fixture
def loans() -> pd.DataFrame:
    """200 loans with a numeric rate (10 missing), income, a grade and an integer term."""
    rng = np.random.default_rng(0)
    n = 200

    status = np.where(rng.random(n) < 0.3, "Charged Off", "Fully Paid")
    status[0] = "Fully Paid"
    status[1] = "Charged Off"

    int_rate = np.round(rng.uniform(5, 25, n), 2) + (status == "Charged Off") * 6.0
    int_rate[5::20] = np.nan

    return pd.DataFrame({
        "int_rate": int_rate,
        "annual_inc": rng.lognormal(11, 0.5, n),
        "grade": rng.choice(list("ABCDE"), n),
        "term": rng.choice([36, 60], n),
        "loan_status": status,
    })


@pytest.fixture
def tiny() -> pd.DataFrame:
    return pd.DataFrame({
        "inq": [0.0, 2.0, 5.0, 0.0],
        "loan_status": ["A", "B", "A", "B"],
    })
