"""
Return Series Construction and Alignment
========================================

This module turns raw adjusted-close prices into excess log-returns and
reconciles series of different lengths into one rectangular dataset.

Conventions:
------------
- Prices are monthly observations, so the annualized risk-free rate is
  divided by 12 to get a per-period rate.
- Risk-free rates arrive as percentages (e.g. 4.5 for 4.5%), so they are
  also divided by 100.
- Missing observations are represented by NaN and are never dropped from
  the row count.

Excess log-return for period i:

    r_i = ln(p_{i+1} / p_i) - rf_i / 100 / 12
"""

import logging
import warnings
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from portfolio_analytics.core.errors import InvalidInputError

logger = logging.getLogger(__name__)

PERIODS_PER_YEAR = 12
PERCENT = 100.0


def build_excess_returns(
    prices: Sequence[float],
    risk_free: Optional[Sequence[float]] = None
) -> np.ndarray:
    """
    Convert a price series into a series of excess log-returns.

    A missing price (NaN) marks a period with no observation: the two
    returns that touch it come out as NaN and every other period keeps its
    place.

    The risk-free series is read by position: entry i of the result uses
    risk_free[i]. When the risk-free series is shorter than the return
    series, the uncovered periods come out as NaN.

    Args:
        prices: Adjusted-close prices in chronological order, NaN for a
            missing observation
        risk_free: Annualized risk-free rate in percent, aligned by position
            (None means a zero rate in every period)

    Returns:
        Array of length len(prices) - 1

    Raises:
        InvalidInputError: If fewer than two prices are given or a price is
            neither missing nor a positive finite number
    """
    try:
        prices = np.asarray(prices, dtype=float).ravel()
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Prices must be numeric: {e}") from e

    if len(prices) < 2:
        raise InvalidInputError(
            f"At least 2 prices are needed to compute returns, got {len(prices)}"
        )
    observed = prices[~np.isnan(prices)]
    if not np.all(np.isfinite(observed)) or np.any(observed <= 0):
        raise InvalidInputError("Prices must be positive finite numbers")

    n_returns = len(prices) - 1
    log_returns = np.log(prices[1:] / prices[:-1])

    rf_per_period = np.full(n_returns, np.nan)
    if risk_free is None:
        rf_per_period[:] = 0.0
    else:
        rf = np.asarray(risk_free, dtype=float).ravel()[:n_returns]
        rf_per_period[:len(rf)] = rf / PERCENT / PERIODS_PER_YEAR

    return log_returns - rf_per_period


def compute_min_length(price_lengths: Sequence[int]) -> int:
    """
    Common length of the aligned dataset.

    Governed by the shortest price history: one return is lost to
    differencing, so the result is min(lengths) - 1.
    """
    if len(price_lengths) == 0:
        raise InvalidInputError("At least one price series is required")
    return int(min(price_lengths)) - 1


def align_returns(
    returns: Dict[str, np.ndarray],
    min_length: int,
    index: Optional[pd.Index] = None
) -> pd.DataFrame:
    """
    Trim or pad each return series to exactly ``min_length`` entries.

    Shorter series are right-padded with NaN so that the real observations
    keep their place at the start; longer series keep their first
    ``min_length`` entries and lose the tail.

    Args:
        returns: Mapping of asset name to return series, in column order
        min_length: Target length for every column
        index: Optional row index (length must equal min_length)

    Returns:
        DataFrame with one float column per asset
    """
    if min_length < 0:
        raise InvalidInputError(f"min_length must be non-negative, got {min_length}")

    columns = {}
    for name, series in returns.items():
        series = np.asarray(series, dtype=float).ravel()
        aligned = np.full(min_length, np.nan)

        n_keep = min(len(series), min_length)
        aligned[:n_keep] = series[:n_keep]

        if len(series) < min_length:
            warnings.warn(
                f"Return series for '{name}' has {len(series)} observations; "
                f"padded with {min_length - len(series)} missing values"
            )
        elif len(series) > min_length:
            logger.debug(
                "Truncated '%s' from %d to %d returns", name, len(series), min_length
            )

        columns[name] = aligned

    return pd.DataFrame(columns, index=index, columns=list(returns.keys()))


def trailing_risk_free(risk_free: Sequence[float], min_length: int) -> np.ndarray:
    """
    Last ``min_length`` risk-free observations, the window used when the
    rate is subtracted from each asset's returns.
    """
    rf = np.asarray(risk_free, dtype=float).ravel()
    if min_length == 0:
        return rf[:0]
    return rf[-min_length:]


def excess_risk_free_rate(risk_free: Optional[Sequence[float]]) -> float:
    """
    Per-period risk-free rate averaged over the whole history (ERF).

    Formula: ERF = mean(rf / 100) / 12

    Missing values are ignored. None means a zero rate.
    """
    if risk_free is None:
        return 0.0

    rf = np.asarray(risk_free, dtype=float).ravel()
    if not np.any(np.isfinite(rf)):
        raise InvalidInputError("Risk-free series has no valid observations")

    return float(np.nanmean(rf / PERCENT) / PERIODS_PER_YEAR)


def returns_index(frame: pd.DataFrame, min_length: int, date_column: str = "Date") -> pd.Index:
    """
    Period-end dates for the aligned dataset taken from one price frame.

    Return i covers prices i and i+1, so it is labelled with the date of
    price i+1. Frames without dates get a plain RangeIndex.
    """
    if date_column in frame.columns:
        dates = pd.to_datetime(frame[date_column], errors="coerce")
        labels: List = list(dates.iloc[1:min_length + 1])
    elif isinstance(frame.index, pd.DatetimeIndex):
        labels = list(frame.index[1:min_length + 1])
    else:
        return pd.RangeIndex(min_length)

    return pd.DatetimeIndex(labels, name=date_column)
