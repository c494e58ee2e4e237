"""
Plotting Module for Portfolio Profiles
======================================

This module provides the charts for a built Portfolio:
- Simulated efficient frontier (risk vs. return, coloured by Sharpe ratio)
  with the MVP and MVEP highlighted
- Weight bar charts for a selected portfolio
- Weighted return history, growth of $100, and a return histogram with
  the fitted normal curve

Every function returns the matplotlib Figure and optionally saves it.
"""

import logging
from typing import List, Optional, Tuple

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from scipy import stats

from portfolio_analytics.core.performance import PerformanceReport
from portfolio_analytics.core.portfolio import Portfolio
from portfolio_analytics.core.sampler import SampledPortfolio

logger = logging.getLogger(__name__)


def _save(fig: Figure, save_path: Optional[str]) -> None:
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info("Figure saved to: %s", save_path)


def plot_efficient_frontier(
    portfolio: Portfolio,
    figsize: Tuple[int, int] = (12, 8),
    save_path: Optional[str] = None,
    title: str = "Portfolio Optimization & Efficient Frontier"
) -> Figure:
    """
    Scatter every simulated portfolio on the risk-return plane.

    Points are coloured by Sharpe ratio. The Minimum Variance Portfolio is
    marked in red and the Mean-Variance Efficient Portfolio in green.

    Args:
        portfolio: Built Portfolio instance
        figsize: Figure size (width, height)
        save_path: If provided, save the figure to this path
        title: Plot title

    Returns:
        matplotlib Figure object
    """
    frontier = portfolio.simulated_frontier()
    mvp = portfolio.minimum_variance_portfolio()
    mvep = portfolio.max_sharpe_portfolio()

    fig, ax = plt.subplots(figsize=figsize)

    points = ax.scatter(frontier['Risk'] * 100, frontier['Return'] * 100,
                        c=frontier['Sharpe'], cmap='viridis', s=8, alpha=0.7, zorder=2)
    fig.colorbar(points, ax=ax, label='Sharpe Ratio')

    ax.scatter([mvp.risk * 100], [mvp.ret * 100],
               c='red', s=200, marker='*', edgecolors='black',
               label=f"MVP (Sharpe={mvp.sharpe:.4f})", zorder=5)
    ax.scatter([mvep.risk * 100], [mvep.ret * 100],
               c='green', s=200, marker='D', edgecolors='black',
               label=f"MVEP (Sharpe={mvep.sharpe:.4f})", zorder=5)

    ax.set_xlabel('Risk %', fontsize=12)
    ax.set_ylabel('Return %', fontsize=12)
    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.legend(loc='upper left', fontsize=10)
    ax.grid(True, alpha=0.3)

    fig.tight_layout()
    _save(fig, save_path)

    return fig


def plot_portfolio_weights(
    sampled: SampledPortfolio,
    title: str = "Portfolio Weights",
    figsize: Tuple[int, int] = (10, 6),
    save_path: Optional[str] = None
) -> Figure:
    """
    Create a bar chart of portfolio weights annotated with the
    portfolio's return, risk and Sharpe ratio.

    Args:
        sampled: Selected portfolio (e.g. the MVP or MVEP)
        title: Plot title
        figsize: Figure size
        save_path: Optional path to save figure

    Returns:
        matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)

    names = list(sampled.weights.index)
    weights = sampled.weights.to_numpy()
    bars = ax.bar(names, weights * 100, color='skyblue', edgecolor='black')

    for bar, w in zip(bars, weights):
        ax.annotate(f'{w*100:.1f}%',
                    xy=(bar.get_x() + bar.get_width() / 2, bar.get_height()),
                    xytext=(0, 3), textcoords='offset points',
                    ha='center', va='bottom', fontsize=10, fontweight='bold')

    info = (f"Return: {sampled.ret*100:.2f}%\n"
            f"Risk: {sampled.risk*100:.2f}%\n"
            f"Sharpe: {sampled.sharpe:.4f}")
    ax.text(0.98, 0.97, info, transform=ax.transAxes, ha='right', va='top', fontsize=10,
            bbox=dict(boxstyle='round', facecolor='white', alpha=0.8))

    ax.set_xlabel('Asset', fontsize=12)
    ax.set_ylabel('Weight %', fontsize=12)
    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.grid(True, axis='y', alpha=0.3)

    fig.tight_layout()
    _save(fig, save_path)

    return fig


def plot_weighted_returns(
    report: PerformanceReport,
    figsize: Tuple[int, int] = (12, 6),
    save_prefix: Optional[str] = None,
    bins: int = 30
) -> List[Figure]:
    """
    Plot the history of a fixed allocation.

    Produces three figures:
    1. Weighted returns over time
    2. Value of $100 invested over time, with the CAGR
    3. Histogram of weighted returns with the fitted normal curve

    Args:
        report: Result of Portfolio.weighted_performance
        figsize: Size of each figure
        save_prefix: If provided, figures are saved as
            <prefix>_returns.png, <prefix>_value.png, <prefix>_histogram.png
        bins: Number of histogram bins

    Returns:
        List of the three matplotlib Figure objects
    """
    weights_label = "\n".join(
        f"{name}: {w*100:.1f}%" for name, w in report.weights.items()
    )
    moments_label = (f"Average: {report.average*100:.2f}%\n"
                     f"Standard Deviation: {report.std_dev*100:.2f}%\n"
                     f"Skewness: {report.skewness:.4f}\n"
                     f"Kurtosis: {report.kurtosis:.4f}\n"
                     f"Sharpe Ratio: {report.sharpe:.4f}")
    box = dict(boxstyle='round', facecolor='white', alpha=0.8)

    # 1. Returns over time
    fig1, ax1 = plt.subplots(figsize=figsize)
    ax1.plot(report.returns.index, report.returns.to_numpy() * 100, color='blue')
    ax1.axhline(y=0, color='black', linestyle='--', linewidth=1)
    ax1.text(0.01, 0.98, weights_label, transform=ax1.transAxes, va='top', fontsize=9, bbox=box)
    ax1.text(0.99, 0.02, moments_label, transform=ax1.transAxes, ha='right', va='bottom',
             fontsize=9, bbox=box)
    ax1.set_xlabel('Date', fontsize=12)
    ax1.set_ylabel('Weighted Returns (%)', fontsize=12)
    ax1.set_title('Weighted Returns over Time', fontsize=14, fontweight='bold')
    ax1.grid(True, alpha=0.3)
    fig1.tight_layout()

    # 2. Value of $100
    fig2, ax2 = plt.subplots(figsize=figsize)
    ax2.plot(report.value.index, report.value.to_numpy(), color='blue')
    ax2.text(0.01, 0.98, weights_label, transform=ax2.transAxes, va='top', fontsize=9, bbox=box)
    ax2.text(0.99, 0.02, f"CAGR: {report.cagr*100:.2f}%", transform=ax2.transAxes,
             ha='right', va='bottom', fontsize=10, bbox=box)
    ax2.set_xlabel('Date', fontsize=12)
    ax2.set_ylabel('Value ($)', fontsize=12)
    ax2.set_title('Weighted Value over Time ($100 Invested)', fontsize=14, fontweight='bold')
    ax2.grid(True, alpha=0.3)
    fig2.tight_layout()

    # 3. Histogram with normal curve scaled to counts
    values = report.returns.to_numpy() * 100
    fig3, ax3 = plt.subplots(figsize=figsize)
    counts, edges, _ = ax3.hist(values, bins=bins, color='skyblue', edgecolor='black')
    x = np.linspace(values.min(), values.max(), 200)
    bin_width = edges[1] - edges[0]
    y = stats.norm.pdf(x, loc=report.average * 100, scale=report.std_dev * 100) \
        * len(values) * bin_width
    ax3.plot(x, y, color='red', linewidth=2, label='Normal')
    ax3.text(0.01, 0.98, moments_label, transform=ax3.transAxes, va='top', fontsize=9, bbox=box)
    ax3.text(0.99, 0.98, weights_label, transform=ax3.transAxes, ha='right', va='top',
             fontsize=9, bbox=box)
    ax3.set_xlabel('Return %', fontsize=12)
    ax3.set_ylabel('Frequency', fontsize=12)
    ax3.set_title('Histogram of Weighted Returns', fontsize=14, fontweight='bold')
    ax3.legend(loc='center right')
    ax3.grid(True, alpha=0.3)
    fig3.tight_layout()

    figures = [fig1, fig2, fig3]
    if save_prefix:
        for fig, suffix in zip(figures, ['returns', 'value', 'histogram']):
            _save(fig, f"{save_prefix}_{suffix}.png")

    return figures
