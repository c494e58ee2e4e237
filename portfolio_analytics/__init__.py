"""
Portfolio Analytics - Statistical Profile and Monte Carlo Frontier
==================================================================

Per-asset risk/return statistics, covariance and correlation structure,
and the minimum variance / maximum Sharpe portfolios of a set of assets,
computed from historical adjusted-close prices.

Usage:
    from portfolio_analytics import Portfolio, PriceLoader
    from portfolio_analytics.visualization import plot_efficient_frontier

Classes:
    Portfolio - Builds the full profile once, read-only afterwards
    SampledPortfolio - One simulated allocation (weights, return, risk, Sharpe)
    PriceLoader - Loads Yahoo! Finance style CSV / Excel price files

Functions:
    load_price_files - Load asset prices and the risk-free series in one call
"""

from portfolio_analytics.core.errors import (
    PortfolioError,
    InvalidInputError,
    DegenerateInputError,
    EmptyInputError,
)
from portfolio_analytics.core.portfolio import Portfolio
from portfolio_analytics.core.sampler import SampledPortfolio
from portfolio_analytics.core.performance import PerformanceReport
from portfolio_analytics.core.loader import PriceLoader, load_price_files

__version__ = "1.0.0"

__all__ = [
    "Portfolio",
    "SampledPortfolio",
    "PerformanceReport",
    "PriceLoader",
    "load_price_files",
    "PortfolioError",
    "InvalidInputError",
    "DegenerateInputError",
    "EmptyInputError",
]
