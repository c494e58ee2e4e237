"""
Asset Statistics
================

Per-asset summary statistics and the covariance / correlation structure
of an aligned return dataset.

All dispersion figures use the population convention (divide by N, not
N-1), the same one used when sampling the frontier, so that Sharpe ratios
of single assets and of sampled portfolios are comparable.

Missing values (NaN) are skipped per column for the summary statistics and
per pair of columns for the covariance and correlation matrices.
"""

import logging
from typing import Tuple

import numpy as np
import pandas as pd

from portfolio_analytics.core.errors import DegenerateInputError

logger = logging.getLogger(__name__)

STATISTICS_COLUMNS = ["Average", "GeoMean", "StdDev", "Sharpe", "Count"]

# Standard deviations at or below this are treated as zero
ZERO_STD_TOL = 1e-12


def compute_statistics(dataset: pd.DataFrame, erf: float) -> pd.DataFrame:
    """
    Compute Average, GeoMean, StdDev, Sharpe and Count for every asset.

    Formulas (over the valid observations r of one column):
        Average = mean(r)
        GeoMean = exp(mean(ln(1 + r))) - 1
        StdDev  = sqrt(mean((r - Average)^2))
        Sharpe  = (Average - ERF) / StdDev

    Args:
        dataset: Aligned dataset, one column per asset
        erf: Excess risk-free rate per period

    Returns:
        DataFrame indexed by asset name with STATISTICS_COLUMNS

    Raises:
        DegenerateInputError: If an asset has no valid observations or a
            zero standard deviation
    """
    rows = np.full((dataset.shape[1], len(STATISTICS_COLUMNS)), np.nan)

    for i, name in enumerate(dataset.columns):
        values = dataset[name].to_numpy(dtype=float)
        valid = values[~np.isnan(values)]

        if len(valid) == 0:
            raise DegenerateInputError(
                f"Asset '{name}' has no valid return observations", asset=name
            )

        average = valid.mean()
        std = valid.std(ddof=0)
        if std <= ZERO_STD_TOL:
            raise DegenerateInputError(
                f"Asset '{name}' has zero standard deviation; "
                f"its Sharpe ratio is undefined",
                asset=name
            )

        with np.errstate(invalid="ignore", divide="ignore"):
            geo_mean = np.exp(np.mean(np.log1p(valid))) - 1

        rows[i] = [average, geo_mean, std, (average - erf) / std, len(valid)]

    stats = pd.DataFrame(rows, index=list(dataset.columns), columns=STATISTICS_COLUMNS)
    stats["Count"] = stats["Count"].astype(int)
    logger.debug("Computed statistics for %d assets (ERF=%.6f)", len(stats), erf)
    return stats


def _pairwise_moments(x: np.ndarray, y: np.ndarray) -> Tuple[float, float, float]:
    """
    Population covariance and the two variances over jointly-valid rows.

    Returns NaN for all three when the pair shares no observation.
    """
    mask = ~(np.isnan(x) | np.isnan(y))
    if not mask.any():
        return np.nan, np.nan, np.nan

    dx = x[mask] - x[mask].mean()
    dy = y[mask] - y[mask].mean()
    n = mask.sum()
    return (dx * dy).sum() / n, (dx * dx).sum() / n, (dy * dy).sum() / n


def covariance_matrix(dataset: pd.DataFrame) -> pd.DataFrame:
    """
    Population covariance matrix using pairwise-complete observations.

    Only the upper triangle is computed; the lower one is mirrored, so the
    result is exactly symmetric.
    """
    values = dataset.to_numpy(dtype=float)
    n_assets = values.shape[1]
    cov = np.full((n_assets, n_assets), np.nan)

    for i in range(n_assets):
        for j in range(i, n_assets):
            cov_ij, _, _ = _pairwise_moments(values[:, i], values[:, j])
            cov[i, j] = cov[j, i] = cov_ij

    names = list(dataset.columns)
    return pd.DataFrame(cov, index=names, columns=names)


def correlation_matrix(dataset: pd.DataFrame) -> pd.DataFrame:
    """
    Pearson correlation matrix using pairwise-complete observations.

    Each coefficient is normalised by the variances of the same jointly
    valid rows used for the covariance. Assets with nonzero variance get an
    exact 1.0 on the diagonal.
    """
    values = dataset.to_numpy(dtype=float)
    n_assets = values.shape[1]
    corr = np.full((n_assets, n_assets), np.nan)

    for i in range(n_assets):
        for j in range(i, n_assets):
            cov_ij, var_i, var_j = _pairwise_moments(values[:, i], values[:, j])
            denom = np.sqrt(var_i * var_j)
            if denom > 0:
                corr[i, j] = corr[j, i] = np.clip(cov_ij / denom, -1.0, 1.0)

        if not np.isnan(corr[i, i]):
            corr[i, i] = 1.0

    names = list(dataset.columns)
    return pd.DataFrame(corr, index=names, columns=names)
