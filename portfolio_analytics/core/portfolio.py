"""
Portfolio - Statistical Profile and Monte Carlo Frontier
========================================================

The Portfolio class is the entry point of the package. It takes raw
adjusted-close price histories and a risk-free rate history, and at
construction time:

1. Converts each price series into excess log-returns
2. Aligns the return series to a common length (shortest history wins)
3. Computes per-asset statistics and the covariance / correlation matrices
4. Simulates random long-only portfolios to approximate the frontier
5. Selects the Minimum Variance Portfolio (MVP) and the Mean-Variance
   Efficient Portfolio (MVEP, maximum Sharpe ratio)

Everything is computed once. The object is read-only afterwards: build a
new Portfolio for new inputs or a different number of draws.

Example:
    >>> port = Portfolio({"AAPL": aapl_df, "MSFT": msft_df}, risk_free=irx_df,
    ...                  num_ports=6000, seed=42)
    >>> port.statistics()
    >>> port.max_sharpe_portfolio().as_series()
"""

import collections.abc
import dataclasses
import logging
from typing import Dict, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from portfolio_analytics.core.errors import InvalidInputError
from portfolio_analytics.core.performance import PerformanceReport, analyze_weighted_returns
from portfolio_analytics.core.returns import (
    PERIODS_PER_YEAR,
    align_returns,
    build_excess_returns,
    compute_min_length,
    excess_risk_free_rate,
    returns_index,
    trailing_risk_free,
)
from portfolio_analytics.core.sampler import (
    RandomSource,
    SampledPortfolio,
    sample_frontier,
    select_max_sharpe,
    select_min_variance,
    validate_num_ports,
)
from portfolio_analytics.core.statistics import (
    compute_statistics,
    correlation_matrix,
    covariance_matrix,
)

logger = logging.getLogger(__name__)

ADJ_CLOSE_COLUMN = "Adj Close"
DATE_COLUMN = "Date"
DEFAULT_NUM_PORTS = 5000

PriceInput = Union[Mapping[str, pd.DataFrame], Sequence[pd.DataFrame]]


class Portfolio:
    """
    Immutable statistical profile of a set of assets.

    Attributes:
        asset_names (List[str]): Asset names in input order
        min_length (int): Number of rows in the aligned return dataset
        erf (float): Excess risk-free rate per period
        num_ports (int): Number of simulated portfolios
    """

    def __init__(
        self,
        prices: PriceInput,
        risk_free: Optional[pd.DataFrame] = None,
        names: Optional[List[str]] = None,
        num_ports: int = DEFAULT_NUM_PORTS,
        seed: RandomSource = None,
        workers: int = 1,
        price_column: str = ADJ_CLOSE_COLUMN
    ):
        """
        Validate the inputs and run the full pipeline.

        Args:
            prices: Mapping of asset name to price DataFrame, or a sequence of
                price DataFrames (named by ``names``)
            risk_free: DataFrame whose price column holds the annualized
                risk-free rate in percent (None for a zero rate)
            names: Asset names for a sequence of price frames
                (default: Asset_1, Asset_2, ...)
            num_ports: Number of Monte Carlo portfolios to simulate
            seed: Seed or numpy Generator for the weight draws
            workers: Threads used to evaluate the simulated portfolios
            price_column: Name of the adjusted-close column

        Raises:
            InvalidInputError: If any input is malformed
            DegenerateInputError: If an asset or sampled portfolio has zero risk
        """
        frames, asset_names = self._validate_inputs(prices, risk_free, names, price_column)
        num_ports = validate_num_ports(num_ports)

        min_length = compute_min_length([len(df) for df in frames])
        logger.info(
            "Building portfolio of %d assets: %s (min_length=%d)",
            len(asset_names), ", ".join(asset_names), min_length
        )

        if risk_free is None:
            rf_window = None
            erf = 0.0
        else:
            rf_values = self._numeric_column(risk_free, price_column, "risk-free series")
            rf_window = trailing_risk_free(rf_values, min_length)
            erf = excess_risk_free_rate(rf_values)
        logger.info("Excess risk-free rate per period: %.6f", erf)

        returns: Dict[str, np.ndarray] = {}
        for name, df in zip(asset_names, frames):
            prices_arr = self._numeric_column(df, price_column, f"asset '{name}'")
            try:
                returns[name] = build_excess_returns(prices_arr, rf_window)
            except InvalidInputError as e:
                raise InvalidInputError(f"Asset '{name}': {e}") from e

        dataset = align_returns(returns, min_length, index=returns_index(frames[0], min_length, DATE_COLUMN))

        stats = compute_statistics(dataset, erf)
        cov = covariance_matrix(dataset)
        corr = correlation_matrix(dataset)

        frontier = sample_frontier(dataset, erf, num_ports, rng=seed, workers=workers)
        mvp = select_min_variance(frontier)
        mvep = select_max_sharpe(frontier)

        logger.info(
            "MVP: return=%.6f risk=%.6f sharpe=%.4f", mvp.ret, mvp.risk, mvp.sharpe
        )
        logger.info(
            "MVEP: return=%.6f risk=%.6f sharpe=%.4f", mvep.ret, mvep.risk, mvep.sharpe
        )

        self._asset_names = asset_names
        self._min_length = min_length
        self._erf = erf
        self._num_ports = num_ports
        self._dataset = dataset
        self._stats = stats
        self._cov = cov
        self._corr = corr
        self._frontier = frontier
        self._mvp = mvp
        self._mvep = mvep
        self._frozen = True

    def __setattr__(self, name, value):
        if getattr(self, "_frozen", False):
            raise AttributeError(f"Portfolio is read-only; cannot set '{name}'")
        super().__setattr__(name, value)

    def __repr__(self) -> str:
        return (
            f"Portfolio(assets={self._asset_names}, min_length={self._min_length}, "
            f"num_ports={self._num_ports})"
        )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_inputs(prices, risk_free, names, price_column):
        """Check input shapes and names; return (frames, asset_names)."""
        if isinstance(prices, pd.DataFrame):
            raise InvalidInputError(
                "prices must be a mapping or a sequence of DataFrames, not a single DataFrame"
            )

        if isinstance(prices, collections.abc.Mapping):
            if names is not None:
                raise InvalidInputError("names cannot be given together with a mapping of prices")
            asset_names = list(prices.keys())
            frames = list(prices.values())
        elif isinstance(prices, collections.abc.Sequence) and not isinstance(prices, str):
            frames = list(prices)
            if names is None:
                asset_names = [f"Asset_{i+1}" for i in range(len(frames))]
            elif isinstance(names, str):
                raise InvalidInputError("names must be a list of strings, not a single string")
            else:
                asset_names = list(names)
        else:
            raise InvalidInputError(
                f"prices must be a mapping or a sequence of DataFrames, got {type(prices).__name__}"
            )

        if len(frames) == 0:
            raise InvalidInputError("At least one price series is required")

        for i, name in enumerate(asset_names):
            if not isinstance(name, str):
                raise InvalidInputError(
                    f"All asset names must be strings; name #{i+1} is {name!r}"
                )
        if len(asset_names) != len(frames):
            raise InvalidInputError(
                f"Got {len(asset_names)} names for {len(frames)} price series"
            )
        duplicates = sorted({n for n in asset_names if asset_names.count(n) > 1})
        if duplicates:
            raise InvalidInputError(f"Asset names must be distinct; duplicated: {duplicates}")

        for name, df in zip(asset_names, frames):
            if not isinstance(df, pd.DataFrame):
                raise InvalidInputError(
                    f"Price series for '{name}' must be a DataFrame, got {type(df).__name__}"
                )
            if price_column not in df.columns:
                raise InvalidInputError(
                    f"Price series for '{name}' has no '{price_column}' column"
                )

        if risk_free is not None:
            if not isinstance(risk_free, pd.DataFrame):
                raise InvalidInputError(
                    f"risk_free must be a DataFrame, got {type(risk_free).__name__}"
                )
            if price_column not in risk_free.columns:
                raise InvalidInputError(f"Risk-free series has no '{price_column}' column")

        return frames, asset_names

    @staticmethod
    def _numeric_column(df: pd.DataFrame, column: str, label: str) -> np.ndarray:
        try:
            return pd.to_numeric(df[column], errors="raise").to_numpy(dtype=float)
        except (ValueError, TypeError) as e:
            raise InvalidInputError(f"Column '{column}' of {label} is not numeric: {e}") from e

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def asset_names(self) -> List[str]:
        return list(self._asset_names)

    @property
    def min_length(self) -> int:
        return self._min_length

    @property
    def erf(self) -> float:
        return self._erf

    @property
    def num_ports(self) -> int:
        return self._num_ports

    @property
    def returns(self) -> pd.DataFrame:
        """Aligned excess-return dataset, one column per asset."""
        return self._dataset.copy()

    def statistics(self) -> pd.DataFrame:
        """Average, GeoMean, StdDev, Sharpe and Count per asset."""
        return self._stats.copy()

    def covariance(self) -> pd.DataFrame:
        return self._cov.copy()

    def correlation(self) -> pd.DataFrame:
        return self._corr.copy()

    def minimum_variance_portfolio(self) -> SampledPortfolio:
        """The simulated portfolio with the lowest risk."""
        return dataclasses.replace(self._mvp, weights=self._mvp.weights.copy())

    def max_sharpe_portfolio(self) -> SampledPortfolio:
        """The simulated portfolio with the highest Sharpe ratio (MVEP)."""
        return dataclasses.replace(self._mvep, weights=self._mvep.weights.copy())

    def simulated_frontier(self) -> pd.DataFrame:
        """Every simulated portfolio: asset weights, Return, Risk, Sharpe."""
        return self._frontier.to_frame()

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def weighted_performance(
        self,
        weights: Union[Sequence[float], pd.Series, SampledPortfolio],
        periods_per_year: int = PERIODS_PER_YEAR
    ) -> PerformanceReport:
        """
        Historical performance of a fixed allocation.

        Args:
            weights: One weight per asset in ``asset_names`` order, a Series
                indexed by asset name, or a SampledPortfolio
            periods_per_year: Observations per year (12 for monthly data)
        """
        if isinstance(weights, SampledPortfolio):
            weights = weights.weights
        if isinstance(weights, pd.Series):
            missing = [n for n in self._asset_names if n not in weights.index]
            if missing:
                raise InvalidInputError(f"Weights missing for assets: {missing}")
            weights = weights.reindex(self._asset_names).to_numpy(dtype=float)

        return analyze_weighted_returns(self._dataset, weights, self._erf, periods_per_year)

    def summary_report(self) -> str:
        """
        Generate a text report of the statistics and selected portfolios.

        Returns:
            Formatted string report
        """
        lines = []
        lines.append("=" * 70)
        lines.append("PORTFOLIO PROFILE SUMMARY REPORT")
        lines.append("=" * 70)
        lines.append(f"Assets: {', '.join(self._asset_names)}")
        lines.append(f"Periods: {self._min_length}   Simulated portfolios: {self._num_ports}")
        lines.append(f"Excess risk-free rate: {self._erf:.6f} ({self._erf*100:.4f}% per period)")

        lines.append("\n--- Individual Asset Statistics ---")
        lines.append(f"{'Asset':<12} {'Average':>10} {'Geo Mean':>10} {'Std Dev':>10} "
                     f"{'Sharpe':>10} {'Count':>7}")
        lines.append("-" * 64)
        for name, row in self._stats.iterrows():
            lines.append(
                f"{name:<12} {row['Average']*100:>9.2f}% {row['GeoMean']*100:>9.2f}% "
                f"{row['StdDev']*100:>9.2f}% {row['Sharpe']:>10.4f} {int(row['Count']):>7d}"
            )

        lines.append("\n--- Correlation Matrix ---")
        lines.append(self._corr.round(4).to_string())

        for title, port in [
            ("Minimum Variance Portfolio (MVP)", self._mvp),
            ("Mean-Variance Efficient Portfolio (MVEP)", self._mvep),
        ]:
            lines.append(f"\n--- {title} ---")
            lines.append("Weights:")
            for name, w in port.weights.items():
                lines.append(f"  {name}: {w:.6f} ({w*100:.2f}%)")
            lines.append(f"Return: {port.ret:.6f} ({port.ret*100:.2f}%)")
            lines.append(f"Risk: {port.risk:.6f} ({port.risk*100:.2f}%)")
            lines.append(f"Sharpe Ratio: {port.sharpe:.6f}")

        lines.append("\n" + "=" * 70)

        return "\n".join(lines)
