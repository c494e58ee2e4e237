"""
Main Runner Script for Portfolio Profiling
==========================================

This script runs the full workflow:
1. Loading price histories (Yahoo! Finance CSV or Excel)
2. Building the portfolio profile (statistics, covariance, correlation)
3. Simulating the efficient frontier and selecting the MVP and MVEP
4. Visualizing results
5. Generating reports

Usage:
    pa-analyze --prices AAPL.csv MSFT.csv GOOGL.csv AMZN.csv
    pa-analyze --prices AAPL.csv MSFT.csv --risk-free IRX.csv --num-ports 6000
    pa-analyze --prices AAPL.csv MSFT.csv --weights 0.6 0.4 --seed 42
    pa-analyze --prices AAPL.csv MSFT.csv --no-plots
"""

import sys
import argparse
import logging
import traceback
from datetime import datetime
from typing import Dict, List, Optional
from pathlib import Path

import pandas as pd
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from portfolio_analytics.core.loader import load_price_files
from portfolio_analytics.core.portfolio import ADJ_CLOSE_COLUMN, DEFAULT_NUM_PORTS, Portfolio
from portfolio_analytics.visualization import (
    plot_efficient_frontier,
    plot_portfolio_weights,
    plot_weighted_returns
)


# =============================================================================
# LOGGING SETUP
# =============================================================================

def setup_logger(
    script_name: str = "portfolio_analytics",
    log_dir: Optional[Path] = None
) -> logging.Logger:
    """
    Sets up a logger that writes to both file and console.

    The named logger is also used as the parent of the package loggers so
    that pipeline messages from the library end up in the same log file.

    Args:
        script_name: Name of the script (used in log filename)
        log_dir: Directory for the log file (default: ./logs)

    Returns:
        Configured logger instance
    """
    log_dir = Path(log_dir) if log_dir is not None else Path.cwd() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y_%m_%d_%H%M")
    log_filename = log_dir / f"log_{script_name}_{timestamp}.txt"

    formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_handler = logging.FileHandler(log_filename, encoding='utf-8')
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)

    for name in (script_name, "portfolio_analytics"):
        logger = logging.getLogger(name)
        logger.setLevel(logging.INFO)
        logger.propagate = False

        # Clear existing handlers (prevent duplicates)
        if logger.hasHandlers():
            logger.handlers.clear()

        logger.addHandler(file_handler)
        logger.addHandler(console_handler)

    return logging.getLogger(script_name)


def get_output_dir(output_dir: Optional[str] = None) -> Path:
    """Get (and create) the output directory path."""
    path = Path(output_dir) if output_dir else Path.cwd() / "output"
    path.mkdir(parents=True, exist_ok=True)
    return path


# =============================================================================
# MAIN ANALYSIS FUNCTION
# =============================================================================

def run_full_analysis(
    prices: Dict[str, pd.DataFrame],
    risk_free: Optional[pd.DataFrame] = None,
    num_ports: int = DEFAULT_NUM_PORTS,
    seed: Optional[int] = None,
    workers: int = 1,
    price_column: str = ADJ_CLOSE_COLUMN,
    weights: Optional[List[float]] = None,
    save_plots: bool = True,
    output_dir: Optional[str] = None,
    logger: Optional[logging.Logger] = None
) -> dict:
    """
    Build a portfolio profile and report on it.

    This function performs:
    1. Portfolio construction (returns, statistics, frontier simulation)
    2. Logging of the statistics, matrices, MVP and MVEP
    3. Optional performance analysis of a user-supplied allocation
    4. Plot generation

    Args:
        prices: Mapping of asset name to price DataFrame
        risk_free: Risk-free rate DataFrame (None for a zero rate)
        num_ports: Number of simulated portfolios
        seed: Random seed for reproducible draws
        workers: Threads used to evaluate simulated portfolios
        price_column: Adjusted-close column name
        weights: Optional allocation to analyze (default: the MVEP)
        save_plots: If True, save plots to files
        output_dir: Directory for output files
        logger: Logger instance

    Returns:
        Dictionary containing all analysis results
    """
    if logger is None:
        logger = setup_logger()

    results = {}

    logger.info("=" * 70)
    logger.info("  PORTFOLIO PROFILE ANALYSIS")
    logger.info("=" * 70)
    logger.info(f"  Assets: {', '.join(prices.keys())}")
    logger.info(f"  Simulated portfolios: {num_ports}")
    logger.info(f"  Risk-free series: {'provided' if risk_free is not None else 'none (0%)'}")
    logger.info("=" * 70)

    portfolio = Portfolio(
        prices, risk_free,
        num_ports=num_ports, seed=seed, workers=workers, price_column=price_column
    )
    results['portfolio'] = portfolio

    for line in portfolio.summary_report().splitlines():
        logger.info(line)

    results['statistics'] = portfolio.statistics()
    results['covariance'] = portfolio.covariance()
    results['correlation'] = portfolio.correlation()
    results['mvp'] = portfolio.minimum_variance_portfolio()
    results['mvep'] = portfolio.max_sharpe_portfolio()

    if weights is not None:
        performance = portfolio.weighted_performance(weights)
        label = "custom"
    else:
        performance = portfolio.weighted_performance(results['mvep'])
        label = "mvep"
    results['performance'] = performance

    logger.info(f"\n--- Weighted Performance ({label}) ---")
    logger.info(f"Average: {performance.average*100:.4f}%")
    logger.info(f"Standard Deviation: {performance.std_dev*100:.4f}%")
    logger.info(f"Sharpe Ratio: {performance.sharpe:.4f}")
    logger.info(f"Skewness: {performance.skewness:.4f}   Kurtosis: {performance.kurtosis:.4f}")
    logger.info(f"CAGR: {performance.cagr*100:.2f}%")
    logger.info(f"Shapiro-Wilk: W={performance.shapiro_statistic:.4f} "
                f"p={performance.shapiro_pvalue:.4f}")
    logger.info(f"Kolmogorov-Smirnov: D={performance.ks_statistic:.4f} "
                f"p={performance.ks_pvalue:.4f}")

    if save_plots:
        out = get_output_dir(output_dir)

        plot_efficient_frontier(portfolio, save_path=str(out / "efficient_frontier.png"))
        plot_portfolio_weights(
            results['mvp'], title="Minimum Variance Portfolio Weights",
            save_path=str(out / "mvp_weights.png")
        )
        plot_portfolio_weights(
            results['mvep'], title="Mean-Variance Efficient Portfolio Weights",
            save_path=str(out / "mvep_weights.png")
        )
        plot_weighted_returns(performance, save_prefix=str(out / f"{label}_performance"))
        logger.info(f"Plots saved to: {out}")

    return results


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Portfolio statistics and Monte Carlo efficient frontier',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pa-analyze --prices AAPL.csv MSFT.csv GOOGL.csv AMZN.csv
  pa-analyze --prices AAPL.csv MSFT.csv --risk-free IRX.csv --num-ports 6000
  pa-analyze --prices AAPL.csv MSFT.csv --names Apple Microsoft --seed 42
  pa-analyze --prices AAPL.csv MSFT.csv --weights 0.6 0.4
        """
    )

    parser.add_argument(
        '--prices', '-p',
        nargs='+',
        required=True,
        help='Price files (CSV or Excel), one per asset'
    )
    parser.add_argument(
        '--names', '-n',
        nargs='+',
        help='Asset names (default: file names without extension)'
    )
    parser.add_argument(
        '--risk-free', '-r',
        type=str,
        help='Risk-free rate file, annualized percent in the price column'
    )
    parser.add_argument(
        '--num-ports',
        type=int,
        default=DEFAULT_NUM_PORTS,
        help=f'Number of simulated portfolios (default: {DEFAULT_NUM_PORTS})'
    )
    parser.add_argument(
        '--seed',
        type=int,
        help='Random seed for reproducible draws'
    )
    parser.add_argument(
        '--workers',
        type=int,
        default=1,
        help='Threads used to evaluate simulated portfolios (default: 1)'
    )
    parser.add_argument(
        '--price-column',
        default=ADJ_CLOSE_COLUMN,
        help=f'Adjusted-close column name (default: {ADJ_CLOSE_COLUMN})'
    )
    parser.add_argument(
        '--weights', '-w',
        nargs='+',
        type=float,
        help='Allocation to analyze, one weight per asset (default: the MVEP)'
    )
    parser.add_argument(
        '--output-dir', '-o',
        help='Directory for plots (default: ./output)'
    )
    parser.add_argument(
        '--no-plots',
        action='store_true',
        help='Disable plot generation'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the portfolio analysis script."""
    args = build_parser().parse_args(argv)

    logger = setup_logger("portfolio_analysis")

    try:
        prices, risk_free = load_price_files(
            args.prices, args.risk_free, names=args.names, price_column=args.price_column
        )

        run_full_analysis(
            prices, risk_free,
            num_ports=args.num_ports,
            seed=args.seed,
            workers=args.workers,
            price_column=args.price_column,
            weights=args.weights,
            save_plots=not args.no_plots,
            output_dir=args.output_dir,
            logger=logger
        )

        plt.close('all')
        logger.info("Analysis completed successfully!")
        return 0

    except Exception as e:
        logger.error(f"Analysis failed: {e}")
        logger.error(traceback.format_exc())
        return 1


if __name__ == "__main__":
    sys.exit(main())
