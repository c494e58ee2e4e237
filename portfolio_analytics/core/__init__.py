"""Core computational modules for portfolio profiling."""

from portfolio_analytics.core.errors import (
    PortfolioError,
    InvalidInputError,
    DegenerateInputError,
    EmptyInputError,
)
from portfolio_analytics.core.portfolio import Portfolio
from portfolio_analytics.core.sampler import SampledPortfolio, FrontierSample
from portfolio_analytics.core.performance import PerformanceReport
from portfolio_analytics.core.loader import PriceLoader, load_price_files

__all__ = [
    "Portfolio",
    "SampledPortfolio",
    "FrontierSample",
    "PerformanceReport",
    "PriceLoader",
    "load_price_files",
    "PortfolioError",
    "InvalidInputError",
    "DegenerateInputError",
    "EmptyInputError",
]
