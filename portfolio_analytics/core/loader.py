"""
Price Data Loader
=================

This module reads historical price files into the DataFrame shape the
Portfolio class consumes:

- CSV downloads from Yahoo! Finance (Date, Open, High, Low, Close,
  Adj Close, Volume)
- Excel workbooks with the same columns on one sheet
- A risk-free proxy (e.g. ^IRX, 13-week T-bill yield in percent) in the
  same format

Rows are sorted chronologically. A price that is missing or
non-numeric (Yahoo writes "null" on some holidays) becomes NaN: the row
stays so that every file keeps one row per period, and a warning reports
the gap.
"""

import logging
import warnings
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from portfolio_analytics.core.errors import InvalidInputError
from portfolio_analytics.core.portfolio import ADJ_CLOSE_COLUMN, DATE_COLUMN

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class PriceLoader:
    """
    Load adjusted-close price histories from files.

    Example:
        >>> loader = PriceLoader()
        >>> prices = loader.load_many(["AAPL.csv", "MSFT.csv"])
        >>> irx = loader.load_csv("IRX.csv")
    """

    def __init__(self, price_column: str = ADJ_CLOSE_COLUMN, date_column: str = DATE_COLUMN):
        """
        Initialize the PriceLoader.

        Args:
            price_column: Column holding the adjusted close
            date_column: Column holding the observation date
        """
        self.price_column = price_column
        self.date_column = date_column

    def load_csv(self, file_path: PathLike) -> pd.DataFrame:
        """
        Load one price history from a CSV file.

        Args:
            file_path: Path to the CSV file

        Returns:
            Cleaned DataFrame sorted by date
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"Price file not found: {file_path}")

        df = pd.read_csv(file_path)
        return self._clean(df, file_path.name)

    def load_excel(self, file_path: PathLike, sheet: Union[str, int] = 0) -> pd.DataFrame:
        """
        Load one price history from an Excel sheet.

        Args:
            file_path: Path to the .xlsx workbook
            sheet: Sheet name or position (default: first sheet)

        Returns:
            Cleaned DataFrame sorted by date
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"Price file not found: {file_path}")

        df = pd.read_excel(file_path, sheet_name=sheet, engine="openpyxl")
        return self._clean(df, f"{file_path.name}[{sheet}]")

    def load(self, file_path: PathLike) -> pd.DataFrame:
        """Load a CSV or Excel file, chosen by extension."""
        suffix = Path(file_path).suffix.lower()
        if suffix in (".xlsx", ".xlsm"):
            return self.load_excel(file_path)
        return self.load_csv(file_path)

    def load_many(
        self,
        file_paths: Sequence[PathLike],
        names: Optional[List[str]] = None
    ) -> Dict[str, pd.DataFrame]:
        """
        Load several price histories keyed by asset name.

        Args:
            file_paths: Paths to the price files
            names: Asset names (default: file stems, e.g. AAPL for AAPL.csv)

        Returns:
            Dictionary of asset name to DataFrame, in file order
        """
        if names is None:
            names = [Path(p).stem for p in file_paths]
        if len(names) != len(file_paths):
            raise InvalidInputError(
                f"Got {len(names)} names for {len(file_paths)} price files"
            )
        if len(set(names)) != len(names):
            raise InvalidInputError(f"Asset names must be distinct: {list(names)}")

        frames = {}
        for name, path in zip(names, file_paths):
            frames[name] = self.load(path)
            logger.info("Loaded %s: %d rows from %s", name, len(frames[name]), path)
        return frames

    def _clean(self, df: pd.DataFrame, source: str) -> pd.DataFrame:
        """Validate columns, coerce prices to float (NaN when missing), sort by date."""
        df.columns = [str(c).strip() for c in df.columns]

        if self.price_column not in df.columns:
            raise InvalidInputError(
                f"{source} has no '{self.price_column}' column "
                f"(columns: {list(df.columns)})"
            )

        df = df.copy()
        df[self.price_column] = pd.to_numeric(df[self.price_column], errors="coerce")

        if self.date_column in df.columns:
            df[self.date_column] = pd.to_datetime(df[self.date_column], errors="coerce")
            df = df.sort_values(self.date_column, kind="mergesort")

        invalid = df[self.price_column].isna() | ~np.isfinite(df[self.price_column])
        if invalid.any():
            warnings.warn(
                f"{source}: {int(invalid.sum())} rows have no '{self.price_column}' "
                f"value and are kept as missing observations"
            )
            df.loc[invalid, self.price_column] = np.nan

        return df.reset_index(drop=True)


def load_price_files(
    file_paths: Sequence[PathLike],
    risk_free_path: Optional[PathLike] = None,
    names: Optional[List[str]] = None,
    price_column: str = ADJ_CLOSE_COLUMN
):
    """
    Convenience function to load asset prices and the risk-free series.

    Args:
        file_paths: Paths to the asset price files
        risk_free_path: Optional path to the risk-free rate file
        names: Optional asset names
        price_column: Column holding the adjusted close

    Returns:
        Tuple of (prices_by_name, risk_free_frame_or_None)
    """
    loader = PriceLoader(price_column=price_column)
    prices = loader.load_many(file_paths, names)
    risk_free = loader.load(risk_free_path) if risk_free_path is not None else None
    return prices, risk_free
