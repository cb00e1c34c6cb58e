"""
Tests for out-of-sample portfolio tracking.
"""

import numpy as np
import pandas as pd
import pytest

from stochmatch.config import TrackingConfig
from stochmatch.exceptions import ConfigurationError, DimensionError, InvalidInputError
from stochmatch.finance import PortfolioTracker


@pytest.fixture
def window():
    return TrackingConfig("2015-01-02", "2015-12-31")


@pytest.fixture
def allocation():
    return np.array([10000.0, 5000.0, 2500.0])


class TestPortfolioTracker:
    """Test buy-and-hold tracking."""

    def test_first_value_equals_invested(self, price_panel, window, allocation):
        tracker = PortfolioTracker(allocation, price_panel, window)
        first_date, first_value = next(iter(tracker))

        assert first_date == pd.Timestamp("2015-01-02")
        assert first_value == pytest.approx(allocation.sum())
        assert tracker.invested == pytest.approx(17500.0)

    def test_shares(self, price_panel, window, allocation):
        tracker = PortfolioTracker(allocation, price_panel, window)
        start = price_panel.prices_on_or_after("2015-01-02").to_numpy()

        np.testing.assert_allclose(tracker.shares, allocation / start)
        np.testing.assert_allclose(tracker.start_prices, start)

    def test_values_mark_to_market(self, price_panel, window, allocation):
        tracker = PortfolioTracker(allocation, price_panel, window)
        prices = price_panel.window(window.start, window.end)

        expected = prices.to_numpy() @ tracker.shares
        values = np.array([value for _, value in tracker])

        np.testing.assert_allclose(values, expected)
        assert len(tracker) == len(prices)

    def test_restartable(self, price_panel, window, allocation):
        """Each iteration starts again from the beginning of the window."""
        tracker = PortfolioTracker(allocation, price_panel, window)

        first = list(tracker)
        second = list(tracker)

        assert first == second
        assert len(first) == len(tracker)

    def test_partial_iteration_does_not_consume(self, price_panel, window, allocation):
        tracker = PortfolioTracker(allocation, price_panel, window)
        iterator = iter(tracker)
        next(iterator)
        next(iterator)

        assert next(iter(tracker))[1] == pytest.approx(allocation.sum())

    def test_to_series(self, price_panel, window, allocation):
        tracker = PortfolioTracker(allocation, price_panel, window)
        series = tracker.to_series()

        assert series.name == "portfolio_value"
        assert series.index[0] == pd.Timestamp("2015-01-02")
        np.testing.assert_allclose(series.to_numpy(), [v for _, v in tracker])

    def test_zero_allocation(self, price_panel, window):
        tracker = PortfolioTracker(np.zeros(3), price_panel, window)
        assert all(value == 0.0 for _, value in tracker)

    def test_negative_allocation(self, price_panel, window):
        with pytest.raises(InvalidInputError):
            PortfolioTracker(np.array([100.0, -1.0, 0.0]), price_panel, window)

    def test_wrong_dimension(self, price_panel, window):
        with pytest.raises(DimensionError):
            PortfolioTracker(np.array([100.0, 1.0]), price_panel, window)

    def test_empty_window(self, price_panel, allocation):
        with pytest.raises(ConfigurationError, match="tracking window"):
            PortfolioTracker(allocation, price_panel, TrackingConfig("2030-01-01", "2030-12-31"))
