"""Tests for portfolio_analytics.core.returns -- excess returns, alignment, ERF."""

import numpy as np
import pandas as pd
import pytest

from portfolio_analytics.core.errors import InvalidInputError
from portfolio_analytics.core.returns import (
    align_returns,
    build_excess_returns,
    compute_min_length,
    excess_risk_free_rate,
    returns_index,
    trailing_risk_free,
)

from conftest import make_price_frame


# ---------------------------------------------------------------------------
# Excess log-returns
# ---------------------------------------------------------------------------

class TestBuildExcessReturns:

    def test_length_is_one_less_than_prices(self):
        r = build_excess_returns([100, 101, 102, 103], [0, 0, 0])
        assert len(r) == 3

    def test_log_return_without_risk_free(self):
        r = build_excess_returns([100, 110, 99])
        np.testing.assert_allclose(r, [np.log(1.1), np.log(99 / 110)])

    def test_risk_free_is_monthly_percentage(self):
        r = build_excess_returns([100, 100, 100], [12.0, 6.0])
        # 12% a year -> 1% a month; 6% -> 0.5%
        np.testing.assert_allclose(r, [-0.01, -0.005])

    def test_risk_free_read_by_position(self):
        r = build_excess_returns([100, 101], [2.4, 99.0, 99.0])
        assert r[0] == pytest.approx(np.log(1.01) - 0.002)

    def test_short_risk_free_leaves_missing_tail(self):
        r = build_excess_returns([100, 101, 102, 103], [0.0])
        assert not np.isnan(r[0])
        assert np.isnan(r[1:]).all()

    def test_single_price_rejected(self):
        with pytest.raises(InvalidInputError, match="At least 2 prices"):
            build_excess_returns([100])

    def test_empty_prices_rejected(self):
        with pytest.raises(InvalidInputError):
            build_excess_returns([])

    def test_non_positive_price_rejected(self):
        with pytest.raises(InvalidInputError, match="positive"):
            build_excess_returns([100, 0, 101])

    def test_missing_price_blanks_adjacent_returns(self):
        r = build_excess_returns([100, 110, np.nan, 121, 133.1])
        assert len(r) == 4
        assert r[0] == pytest.approx(np.log(1.1))
        assert np.isnan(r[1]) and np.isnan(r[2])
        assert r[3] == pytest.approx(np.log(1.1))

    def test_infinite_price_rejected(self):
        with pytest.raises(InvalidInputError, match="positive finite"):
            build_excess_returns([100, np.inf, 101])

    def test_non_numeric_price_rejected(self):
        with pytest.raises(InvalidInputError, match="numeric"):
            build_excess_returns(["a", "b"])


# ---------------------------------------------------------------------------
# Alignment
# ---------------------------------------------------------------------------

class TestAlignment:

    def test_min_length_governed_by_shortest_history(self):
        assert compute_min_length([61, 49, 37]) == 36

    def test_min_length_requires_input(self):
        with pytest.raises(InvalidInputError):
            compute_min_length([])

    def test_every_column_has_min_length(self):
        returns = {"A": np.arange(10.0), "B": np.arange(4.0), "C": np.arange(6.0)}
        with pytest.warns(UserWarning):
            df = align_returns(returns, 6)
        assert df.shape == (6, 3)
        assert all(len(df[c]) == 6 for c in df.columns)

    def test_longer_series_keeps_head(self):
        df = align_returns({"A": np.array([1.0, 2.0, 3.0, 4.0])}, 2)
        assert df["A"].tolist() == [1.0, 2.0]

    def test_shorter_series_right_padded(self):
        with pytest.warns(UserWarning, match="padded with 2 missing"):
            df = align_returns({"A": np.array([1.0, 2.0])}, 4)
        assert df["A"].iloc[:2].tolist() == [1.0, 2.0]
        assert df["A"].iloc[2:].isna().all()

    def test_column_order_follows_input(self):
        df = align_returns({"Z": np.ones(3), "A": np.ones(3), "M": np.ones(3)}, 3)
        assert list(df.columns) == ["Z", "A", "M"]

    def test_custom_index(self):
        idx = pd.date_range("2020-01-01", periods=3, freq="MS")
        df = align_returns({"A": np.ones(5)}, 3, index=idx)
        assert df.index.equals(idx)

    def test_negative_length_rejected(self):
        with pytest.raises(InvalidInputError):
            align_returns({"A": np.ones(3)}, -1)


# ---------------------------------------------------------------------------
# Risk-free handling
# ---------------------------------------------------------------------------

class TestRiskFree:

    def test_erf_is_monthly_mean(self):
        assert excess_risk_free_rate([1, 2, 3, 6, 12]) == pytest.approx(0.048 / 12)

    def test_erf_ignores_missing(self):
        assert excess_risk_free_rate([3.0, np.nan, 3.0]) == pytest.approx(0.0025)

    def test_erf_none_is_zero(self):
        assert excess_risk_free_rate(None) == 0.0

    def test_erf_all_missing_rejected(self):
        with pytest.raises(InvalidInputError):
            excess_risk_free_rate([np.nan, np.nan])

    def test_trailing_window(self):
        np.testing.assert_array_equal(trailing_risk_free([1, 2, 3, 6, 12], 3), [3, 6, 12])

    def test_trailing_window_zero_length(self):
        assert len(trailing_risk_free([1, 2, 3], 0)) == 0


# ---------------------------------------------------------------------------
# Dataset index
# ---------------------------------------------------------------------------

class TestReturnsIndex:

    def test_labels_with_period_end_dates(self):
        frame = make_price_frame([1, 2, 3, 4, 5], start="2020-01-01")
        idx = returns_index(frame, 3)
        assert list(idx) == list(pd.to_datetime(["2020-02-01", "2020-03-01", "2020-04-01"]))

    def test_datetime_index_used_when_no_date_column(self):
        frame = make_price_frame([1, 2, 3]).set_index("Date")
        idx = returns_index(frame, 2)
        assert isinstance(idx, pd.DatetimeIndex)
        assert len(idx) == 2

    def test_range_index_without_dates(self):
        frame = pd.DataFrame({"Adj Close": [1.0, 2.0, 3.0]})
        assert returns_index(frame, 2).equals(pd.RangeIndex(2))
