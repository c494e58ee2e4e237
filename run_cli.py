"""
CLI entry point for portfolio analysis.

Usage:
    python run_cli.py --prices AAPL.csv MSFT.csv          # Analyze two assets
    python run_cli.py --prices *.csv --risk-free IRX.csv  # With a risk-free series
    python run_cli.py --prices *.csv --no-plots           # Skip plot generation

For installed package, use: pa-analyze
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from portfolio_analytics.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
