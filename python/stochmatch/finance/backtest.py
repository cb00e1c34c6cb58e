"""
Out-of-Sample Tracking
======================

Buy-and-hold valuation of a first-stage allocation over a tracking
window: shares are bought at the first observed prices of the window
and marked to market at every later observation.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Tuple

import numpy as np
import pandas as pd

from ..config import TrackingConfig
from ..exceptions import ConfigurationError, DimensionError, InvalidInputError
from .panel import AssetPanel


class PortfolioTracker:
    """
    Realized value of a buy-and-hold allocation.

    Iterating yields ``(date, value)`` pairs computed on demand; every
    new iteration starts again from the beginning of the window.

    Args:
        allocation: Currency amount per asset (n,), non-negative
        panel: Price panel covering the tracking window
        window: Tracking window

    Example:
        >>> tracker = PortfolioTracker(result.x, panel, config.tracking)
        >>> for date, value in tracker:
        ...     print(date.date(), round(value, 2))
    """

    def __init__(
        self,
        allocation: np.ndarray,
        panel: AssetPanel,
        window: TrackingConfig,
    ) -> None:
        allocation = np.asarray(allocation, dtype=np.float64).ravel()

        if allocation.shape != (panel.n_assets,):
            raise DimensionError(
                f"allocation has {allocation.size} entries, panel has {panel.n_assets} assets"
            )
        if np.any(allocation < 0):
            raise InvalidInputError("allocation must be non-negative")

        prices = panel.window(window.start, window.end)
        if prices.empty:
            raise ConfigurationError(
                f"no prices observed in tracking window "
                f"{window.start.date()} -> {window.end.date()}"
            )

        self.allocation = allocation
        self.window = window
        self._prices = prices
        self.start_prices = prices.iloc[0].to_numpy()
        self.shares = allocation / self.start_prices

    @property
    def invested(self) -> float:
        """Total amount invested at the start of the window."""
        return float(self.allocation.sum())

    def __len__(self) -> int:
        return len(self._prices)

    def __iter__(self) -> Iterator[Tuple[pd.Timestamp, float]]:
        for date, row in zip(self._prices.index, self._prices.to_numpy()):
            yield date, float(row @ self.shares)

    def to_series(self) -> pd.Series:
        """Tracked values as a Series indexed by date."""
        values = self._prices.to_numpy() @ self.shares
        return pd.Series(values, index=self._prices.index, name="portfolio_value")

    def __repr__(self) -> str:
        return (
            f"PortfolioTracker(invested={self.invested:.2f}, "
            f"{self.window.start.date()} -> {self.window.end.date()}, "
            f"n_dates={len(self)})"
        )
