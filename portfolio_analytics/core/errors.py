"""Exceptions raised while building a portfolio profile."""

from typing import Optional


class PortfolioError(Exception):
    """Base class for all portfolio analytics errors."""


class InvalidInputError(PortfolioError, ValueError):
    """
    A construction parameter is malformed or out of range.

    Raised for non-tabular price input, a missing adjusted-close column,
    non-string or duplicate asset names, short price histories and a
    non-positive or non-integer number of Monte Carlo draws.
    """


class DegenerateInputError(PortfolioError, ValueError):
    """
    The Sharpe ratio is undefined because a standard deviation is zero.

    Attributes:
        asset: Name of the offending asset, or None when the failure comes
            from a sampled portfolio rather than a single asset.
    """

    def __init__(self, message: str, asset: Optional[str] = None):
        super().__init__(message)
        self.asset = asset


class EmptyInputError(PortfolioError, ValueError):
    """There are no sampled portfolios to select from."""
