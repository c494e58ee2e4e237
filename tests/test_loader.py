"""Tests for portfolio_analytics.core.loader -- reading price files."""

import numpy as np
import pandas as pd
import pytest

from portfolio_analytics import InvalidInputError, Portfolio, PriceLoader, load_price_files

from conftest import make_gbm_prices, make_price_frame


def _write_csv(path, prices, start="2019-01-01"):
    make_price_frame(prices, start=start).to_csv(path, index=False)
    return path


class TestPriceLoader:

    def test_load_csv(self, tmp_path):
        path = _write_csv(tmp_path / "AAPL.csv", [100, 101, 99, 104])
        df = PriceLoader().load_csv(path)
        assert df["Adj Close"].tolist() == [100, 101, 99, 104]
        assert pd.api.types.is_datetime64_any_dtype(df["Date"])

    def test_rows_sorted_by_date(self, tmp_path):
        frame = make_price_frame([1.0, 2.0, 3.0]).iloc[::-1]
        frame.to_csv(tmp_path / "rev.csv", index=False)
        df = PriceLoader().load_csv(tmp_path / "rev.csv")
        assert df["Adj Close"].tolist() == [1.0, 2.0, 3.0]
        assert df["Date"].is_monotonic_increasing

    def test_null_rows_kept_as_missing(self, tmp_path):
        path = tmp_path / "gap.csv"
        path.write_text(
            "Date,Open,High,Low,Close,Adj Close,Volume\n"
            "2020-01-01,10,11,9,10,10,100\n"
            "2020-02-01,null,null,null,null,null,null\n"
            "2020-03-01,11,12,10,11,11,100\n"
        )
        with pytest.warns(UserWarning, match="1 rows have no"):
            df = PriceLoader().load_csv(path)
        assert len(df) == 3
        assert df["Adj Close"].iloc[0] == 10.0
        assert np.isnan(df["Adj Close"].iloc[1])
        assert df["Adj Close"].iloc[2] == 11.0

    def test_missing_column(self, tmp_path):
        path = tmp_path / "bad.csv"
        pd.DataFrame({"Date": ["2020-01-01"], "Close": [1.0]}).to_csv(path, index=False)
        with pytest.raises(InvalidInputError, match="Adj Close"):
            PriceLoader().load_csv(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PriceLoader().load_csv(tmp_path / "nope.csv")

    def test_load_excel(self, tmp_path):
        path = tmp_path / "MSFT.xlsx"
        make_price_frame([50.0, 51.0, 52.5]).to_excel(path, index=False)
        df = PriceLoader().load(path)
        assert df["Adj Close"].tolist() == [50.0, 51.0, 52.5]

    def test_load_many_uses_file_stems(self, tmp_path):
        paths = [_write_csv(tmp_path / f"{t}.csv", [1, 2, 3]) for t in ("AAPL", "MSFT")]
        frames = PriceLoader().load_many(paths)
        assert list(frames) == ["AAPL", "MSFT"]

    def test_load_many_name_mismatch(self, tmp_path):
        paths = [_write_csv(tmp_path / "A.csv", [1, 2, 3])]
        with pytest.raises(InvalidInputError):
            PriceLoader().load_many(paths, names=["A", "B"])

    def test_load_many_duplicate_names(self, tmp_path):
        paths = [_write_csv(tmp_path / f"{t}.csv", [1, 2, 3]) for t in ("A", "B")]
        with pytest.raises(InvalidInputError, match="distinct"):
            PriceLoader().load_many(paths, names=["X", "X"])

    def test_custom_price_column(self, tmp_path):
        path = _write_csv(tmp_path / "A.csv", [5, 6, 7])
        df = PriceLoader(price_column="Close").load_csv(path)
        assert df["Close"].tolist() == [5, 6, 7]


class TestLoadPriceFiles:

    def test_files_feed_portfolio(self, tmp_path):
        paths = [
            _write_csv(tmp_path / f"{name}.csv", make_gbm_prices(25, 100.0, 0.01, 0.05, seed))
            for seed, name in enumerate(["AAPL", "MSFT", "GOOGL"])
        ]
        rf_path = _write_csv(tmp_path / "IRX.csv", np.full(25, 1.5))

        prices, risk_free = load_price_files(paths, rf_path)
        port = Portfolio(prices, risk_free, num_ports=100, seed=0)

        assert port.asset_names == ["AAPL", "MSFT", "GOOGL"]
        assert port.min_length == 24
        assert port.erf == pytest.approx(0.015 / 12)

    def test_without_risk_free(self, tmp_path):
        paths = [_write_csv(tmp_path / "A.csv", [1, 2, 3])]
        prices, risk_free = load_price_files(paths)
        assert risk_free is None
        assert list(prices) == ["A"]

    def test_missing_price_keeps_dates_aligned(self, tmp_path):
        header = "Date,Open,High,Low,Close,Adj Close,Volume\n"
        dates = ["2020-01-01", "2020-02-01", "2020-03-01", "2020-04-01", "2020-05-01"]
        a_prices = ["10", "10.2", "null", "10.4", "10.6"]
        b_prices = ["20", "20.4", "20.8", "21.2", "21.0"]
        for name, column in (("A", a_prices), ("B", b_prices)):
            rows = "".join(f"{d},{p},{p},{p},{p},{p},100\n" for d, p in zip(dates, column))
            (tmp_path / f"{name}.csv").write_text(header + rows)

        with pytest.warns(UserWarning, match="kept as missing"):
            prices, _ = load_price_files([tmp_path / "A.csv", tmp_path / "B.csv"])
        port = Portfolio(prices, num_ports=20, seed=0)
        returns = port.returns

        assert port.min_length == 4
        assert np.isnan(returns.loc[pd.Timestamp("2020-03-01"), "A"])
        assert np.isnan(returns.loc[pd.Timestamp("2020-04-01"), "A"])
        assert returns.loc[pd.Timestamp("2020-04-01"), "B"] == pytest.approx(np.log(21.2 / 20.8))
        assert returns.loc[pd.Timestamp("2020-05-01"), "A"] == pytest.approx(np.log(10.6 / 10.4))
        assert port.statistics().loc["A", "Count"] == 2
        assert port.statistics().loc["B", "Count"] == 4
