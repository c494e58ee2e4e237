"""Visualization modules for portfolio analysis."""

from portfolio_analytics.visualization.plots import (
    plot_efficient_frontier,
    plot_portfolio_weights,
    plot_weighted_returns
)

__all__ = [
    "plot_efficient_frontier",
    "plot_portfolio_weights",
    "plot_weighted_returns",
]
