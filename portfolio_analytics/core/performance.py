"""
Weighted Portfolio Performance
==============================

Historical behaviour of a fixed allocation over the aligned dataset:
the weighted return series, the value of $100 invested, summary moments,
compound annual growth, and two normality tests of the return series.

Formulas:
    r_t     = sum_i w_i * R_t,i
    V_t     = 100 * prod_{s<=t} (1 + r_s)
    CAGR    = (V_T / 100) ^ (1 / years) - 1,   years = T / periods_per_year
    Sharpe  = (mean(r) - ERF) / std(r)
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd
from scipy import stats

from portfolio_analytics.core.errors import DegenerateInputError, InvalidInputError
from portfolio_analytics.core.returns import PERIODS_PER_YEAR
from portfolio_analytics.core.statistics import ZERO_STD_TOL


@dataclass(frozen=True)
class PerformanceReport:
    """Results of analyze_weighted_returns."""

    weights: pd.Series
    returns: pd.Series
    value: pd.Series
    average: float
    std_dev: float
    sharpe: float
    skewness: float
    kurtosis: float
    cagr: float
    shapiro_statistic: float
    shapiro_pvalue: float
    ks_statistic: float
    ks_pvalue: float

    def summary(self) -> dict:
        return {
            'average': self.average,
            'std_dev': self.std_dev,
            'sharpe': self.sharpe,
            'skewness': self.skewness,
            'kurtosis': self.kurtosis,
            'cagr': self.cagr,
            'shapiro_pvalue': self.shapiro_pvalue,
            'ks_pvalue': self.ks_pvalue,
        }


def analyze_weighted_returns(
    dataset: pd.DataFrame,
    weights: Sequence[float],
    erf: float,
    periods_per_year: int = PERIODS_PER_YEAR
) -> PerformanceReport:
    """
    Analyze the historical returns of a fixed weight vector.

    Periods with a missing observation for any asset are dropped.

    Args:
        dataset: Aligned dataset, one column per asset
        weights: One weight per asset, in column order
        erf: Excess risk-free rate per period
        periods_per_year: Observations per year (12 for monthly data)

    Returns:
        PerformanceReport

    Raises:
        InvalidInputError: If the weights don't match the assets or fewer
            than 3 complete periods are available
        DegenerateInputError: If the weighted series has zero variance
    """
    try:
        w = np.asarray(weights, dtype=float).ravel()
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Weights must be numeric: {e}") from e

    if len(w) != dataset.shape[1]:
        raise InvalidInputError(
            f"Expected {dataset.shape[1]} weights, got {len(w)}"
        )
    if not np.all(np.isfinite(w)):
        raise InvalidInputError("Weights must be finite numbers")
    if periods_per_year <= 0:
        raise InvalidInputError(f"periods_per_year must be positive, got {periods_per_year}")

    weighted = pd.Series(dataset.to_numpy(dtype=float) @ w, index=dataset.index,
                         name="Weighted Return").dropna()

    if len(weighted) < 3:
        raise InvalidInputError(
            f"At least 3 complete periods are needed, got {len(weighted)}"
        )

    average = float(weighted.mean())
    std_dev = float(weighted.std(ddof=0))
    if std_dev <= ZERO_STD_TOL:
        raise DegenerateInputError("Weighted return series has zero standard deviation")

    value = 100 * (1 + weighted).cumprod()
    value.name = "Value"

    years = len(value) / periods_per_year
    cagr = float((value.iloc[-1] / 100) ** (1 / years) - 1)

    shapiro = stats.shapiro(weighted.to_numpy())
    ks = stats.kstest(weighted.to_numpy(), 'norm', args=(average, std_dev))

    return PerformanceReport(
        weights=pd.Series(w, index=list(dataset.columns), name="Weight"),
        returns=weighted,
        value=value,
        average=average,
        std_dev=std_dev,
        sharpe=(average - erf) / std_dev,
        skewness=float(stats.skew(weighted.to_numpy())),
        kurtosis=float(stats.kurtosis(weighted.to_numpy())),
        cagr=cagr,
        shapiro_statistic=float(shapiro[0]),
        shapiro_pvalue=float(shapiro[1]),
        ks_statistic=float(ks[0]),
        ks_pvalue=float(ks[1])
    )
