"""Shared pytest fixtures for the portfolio analytics test suite.

Provides synthetic monthly price histories with fixed random seeds.
All fixtures are independent of external data files.
"""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest


def make_price_frame(prices, start="2015-01-01"):
    """Yahoo!-style frame (Date, Close, Adj Close) from a list of prices."""
    prices = np.asarray(prices, dtype=float)
    dates = pd.date_range(start=start, periods=len(prices), freq="MS")
    return pd.DataFrame({
        "Date": dates,
        "Close": prices,
        "Adj Close": prices,
    })


def make_gbm_prices(n=61, start_price=100.0, drift=0.008, vol=0.05, seed=0):
    """Monthly geometric Brownian motion price path."""
    rng = np.random.default_rng(seed)
    log_returns = rng.normal(drift, vol, n - 1)
    return start_price * np.exp(np.concatenate([[0.0], np.cumsum(log_returns)]))


# ---------------------------------------------------------------------------
# Scenario fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def small_prices():
    """Three short histories with nonzero return variance."""
    return {
        "A": make_price_frame([100, 101, 102, 103]),
        "B": make_price_frame([50, 50, 51, 51]),
        "C": make_price_frame([10, 10, 10, 11]),
    }


@pytest.fixture
def zero_risk_free():
    """Risk-free series of 0% in every period."""
    return make_price_frame([0.0, 0.0, 0.0, 0.0])


# ---------------------------------------------------------------------------
# Realistic monthly data
# ---------------------------------------------------------------------------

@pytest.fixture
def monthly_prices():
    """Four assets with 61 monthly prices (60 returns) each."""
    specs = {
        "AAPL": (0.015, 0.08, 1),
        "MSFT": (0.012, 0.06, 2),
        "GOOGL": (0.010, 0.07, 3),
        "AMZN": (0.014, 0.09, 4),
    }
    return {
        name: make_price_frame(make_gbm_prices(61, 100.0, drift, vol, seed))
        for name, (drift, vol, seed) in specs.items()
    }


@pytest.fixture
def uneven_prices():
    """Three assets with 61, 49 and 37 monthly prices."""
    return {
        "LONG": make_price_frame(make_gbm_prices(61, 80.0, 0.01, 0.05, 11)),
        "MID": make_price_frame(make_gbm_prices(49, 40.0, 0.008, 0.04, 12)),
        "SHORT": make_price_frame(make_gbm_prices(37, 20.0, 0.012, 0.07, 13)),
    }


@pytest.fixture
def monthly_risk_free():
    """61 months of a T-bill yield in percent, drifting between 1% and 3%."""
    rates = 2.0 + np.sin(np.linspace(0, 3, 61))
    return make_price_frame(rates)


@pytest.fixture
def aligned_dataset():
    """Small aligned dataset with a missing observation in column B."""
    return pd.DataFrame({
        "A": [0.01, -0.02, 0.03, 0.00, 0.015],
        "B": [0.02, 0.01, np.nan, -0.01, 0.005],
        "C": [-0.01, 0.00, 0.02, 0.01, -0.005],
    })
