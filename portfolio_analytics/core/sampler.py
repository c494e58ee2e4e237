"""
Monte Carlo Frontier Sampling
=============================

The efficient frontier is approximated by drawing random long-only,
fully-invested weight vectors and evaluating each resulting portfolio
against the historical return dataset.

Sampling:
---------
Each draw takes N independent uniforms on [0, 1) and divides them by
their sum. This is not a uniform sampler of the simplex (it favours
interior points) but it is the standard way to populate the
risk-return plane for frontier exploration.

Evaluation:
-----------
For weights w, the portfolio return series is the row-wise weighted sum
R @ w. A row with a missing observation stays missing for that row only.

    Return = mean(R @ w)
    Risk   = std(R @ w)            (population convention)
    Sharpe = (Return - ERF) / Risk

Selection:
----------
- Minimum Variance Portfolio (MVP): the draw with the lowest Risk
- Mean-Variance Efficient Portfolio (MVEP): the draw with the highest Sharpe
Ties go to the first draw.
"""

import logging
import numbers
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from portfolio_analytics.core.errors import (
    DegenerateInputError,
    EmptyInputError,
    InvalidInputError,
)
from portfolio_analytics.core.statistics import ZERO_STD_TOL

logger = logging.getLogger(__name__)

FRONTIER_COLUMNS = ["Return", "Risk", "Sharpe"]

# Draws evaluated per task when the work is split across threads
CHUNK_SIZE = 1000

RandomSource = Union[None, int, np.random.Generator]


@dataclass(frozen=True)
class SampledPortfolio:
    """
    One Monte Carlo draw: asset weights and the realized statistics.

    Attributes:
        weights: Weight per asset (non-negative, summing to 1)
        ret: Mean of the weighted return series
        risk: Standard deviation of the weighted return series
        sharpe: (ret - ERF) / risk
    """

    weights: pd.Series
    ret: float
    risk: float
    sharpe: float

    def as_series(self) -> pd.Series:
        """Weights followed by Return, Risk and Sharpe as one record."""
        stats = pd.Series([self.ret, self.risk, self.sharpe], index=FRONTIER_COLUMNS)
        return pd.concat([self.weights, stats]).rename(self.weights.name)

    def as_dict(self):
        return self.as_series().to_dict()


@dataclass(frozen=True)
class FrontierSample:
    """
    The full collection of Monte Carlo draws in draw order.

    Attributes:
        asset_names: Column order of the weight matrix
        weights: Array of shape (num_ports, n_assets)
        returns: Portfolio return per draw
        risks: Portfolio risk per draw
        sharpes: Portfolio Sharpe ratio per draw
    """

    asset_names: Tuple[str, ...]
    weights: np.ndarray
    returns: np.ndarray
    risks: np.ndarray
    sharpes: np.ndarray

    def __len__(self) -> int:
        return len(self.returns)

    def portfolio(self, i: int, label: Optional[str] = None) -> SampledPortfolio:
        """Return draw ``i`` as a SampledPortfolio."""
        weights = pd.Series(self.weights[i].copy(), index=list(self.asset_names), name=label)
        return SampledPortfolio(
            weights=weights,
            ret=float(self.returns[i]),
            risk=float(self.risks[i]),
            sharpe=float(self.sharpes[i])
        )

    def to_frame(self) -> pd.DataFrame:
        """One row per draw: asset weights, then Return, Risk, Sharpe."""
        frame = pd.DataFrame(self.weights.copy(), columns=list(self.asset_names))
        frame["Return"] = self.returns.copy()
        frame["Risk"] = self.risks.copy()
        frame["Sharpe"] = self.sharpes.copy()
        return frame


def validate_num_ports(num_ports) -> int:
    """Check that the number of draws is a positive integer."""
    if isinstance(num_ports, bool) or not isinstance(num_ports, numbers.Integral):
        raise InvalidInputError(
            f"num_ports must be a positive integer, got {num_ports!r}"
        )
    if num_ports <= 0:
        raise InvalidInputError(
            f"num_ports must be a positive integer, got {num_ports}"
        )
    return int(num_ports)


def make_rng(random_state: RandomSource = None) -> np.random.Generator:
    """Build a Generator from a seed, pass a Generator through unchanged."""
    if isinstance(random_state, np.random.Generator):
        return random_state
    return np.random.default_rng(random_state)


def random_weights(n_assets: int, num_ports: int, rng: np.random.Generator) -> np.ndarray:
    """
    Draw ``num_ports`` long-only weight vectors summing to 1.

    Returns:
        Array of shape (num_ports, n_assets), one draw per row
    """
    raw = rng.random((num_ports, n_assets))
    return raw / raw.sum(axis=1, keepdims=True)


def evaluate_portfolios(
    values: np.ndarray,
    weights: np.ndarray,
    erf: float
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Return, risk and Sharpe ratio for a block of weight vectors.

    Args:
        values: Return dataset, shape (n_periods, n_assets), NaN for missing
        weights: Weight vectors, shape (n_draws, n_assets)
        erf: Excess risk-free rate per period

    Returns:
        Tuple of (returns, risks, sharpes), each of length n_draws
    """
    # NaN in any asset makes the whole row NaN in the product
    port_series = values @ weights.T
    valid_rows = ~np.isnan(port_series[:, 0]) if port_series.size else np.zeros(0, bool)

    if not valid_rows.any():
        raise DegenerateInputError(
            "No period has observations for every asset; "
            "portfolio risk is undefined"
        )

    port_series = port_series[valid_rows]
    returns = port_series.mean(axis=0)
    risks = port_series.std(axis=0, ddof=0)

    if np.any(risks <= ZERO_STD_TOL):
        first = int(np.argmax(risks <= ZERO_STD_TOL))
        raise DegenerateInputError(
            f"Sampled portfolio with weights {np.round(weights[first], 6).tolist()} "
            f"has zero risk; its Sharpe ratio is undefined"
        )

    sharpes = (returns - erf) / risks
    return returns, risks, sharpes


def sample_frontier(
    dataset: pd.DataFrame,
    erf: float,
    num_ports: int,
    rng: RandomSource = None,
    workers: int = 1
) -> FrontierSample:
    """
    Simulate ``num_ports`` random portfolios over the aligned dataset.

    All weights are drawn up front from a single generator, in draw order,
    so a fixed seed reproduces the same sample regardless of ``workers``.
    With ``workers > 1`` the draws are evaluated in chunks on a thread pool
    and concatenated back in order.

    Args:
        dataset: Aligned dataset, one column per asset
        erf: Excess risk-free rate per period
        num_ports: Number of draws (positive integer)
        rng: Seed, Generator, or None for fresh entropy
        workers: Number of threads used for evaluation

    Returns:
        FrontierSample with every draw

    Raises:
        InvalidInputError: If num_ports or workers is not a positive integer
        DegenerateInputError: If a sampled portfolio has zero risk
    """
    num_ports = validate_num_ports(num_ports)
    if isinstance(workers, bool) or not isinstance(workers, numbers.Integral) or workers < 1:
        raise InvalidInputError(f"workers must be a positive integer, got {workers!r}")

    values = dataset.to_numpy(dtype=float)
    n_assets = values.shape[1]
    if n_assets == 0:
        raise InvalidInputError("Cannot sample a frontier without assets")

    weights = random_weights(n_assets, num_ports, make_rng(rng))

    if workers == 1 or num_ports <= CHUNK_SIZE:
        returns, risks, sharpes = evaluate_portfolios(values, weights, erf)
    else:
        chunks: List[np.ndarray] = [
            weights[start:start + CHUNK_SIZE] for start in range(0, num_ports, CHUNK_SIZE)
        ]
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # map() yields results in submission order
            results = list(executor.map(lambda w: evaluate_portfolios(values, w, erf), chunks))
        returns, risks, sharpes = (np.concatenate(parts) for parts in zip(*results))

    logger.info("Simulated %d portfolios over %d assets", num_ports, n_assets)

    for arr in (weights, returns, risks, sharpes):
        arr.setflags(write=False)

    return FrontierSample(
        asset_names=tuple(dataset.columns),
        weights=weights,
        returns=returns,
        risks=risks,
        sharpes=sharpes
    )


def select_min_variance(sample: FrontierSample) -> SampledPortfolio:
    """
    Minimum Variance Portfolio: the draw with the lowest risk.

    The first draw wins a tie.
    """
    if len(sample) == 0:
        raise EmptyInputError("Cannot select a minimum variance portfolio from zero draws")
    return sample.portfolio(int(np.argmin(sample.risks)), label="MVP")


def select_max_sharpe(sample: FrontierSample) -> SampledPortfolio:
    """
    Mean-Variance Efficient Portfolio: the draw with the highest Sharpe ratio.

    The first draw wins a tie.
    """
    if len(sample) == 0:
        raise EmptyInputError("Cannot select a maximum Sharpe portfolio from zero draws")
    return sample.portfolio(int(np.argmax(sample.sharpes)), label="MVEP")
