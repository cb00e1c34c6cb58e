"""
Asset Price Panel
=================

Read-only container for the historical prices the core consumes, plus
a CSV reader standing in for the Data Loader collaborator.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Union

import numpy as np
import pandas as pd
from loguru import logger

from ..exceptions import ConfigurationError
from .utils import compute_returns


class AssetPanel:
    """
    Ordered (date, price-vector) observations for a fixed set of assets.

    Invariants (checked on construction):
        - dates strictly increasing
        - at least one asset, no missing prices
        - every price > 0

    Args:
        prices: DataFrame indexed by date with one column per ticker

    Raises:
        ConfigurationError: If any invariant is violated

    Example:
        >>> panel = AssetPanel(prices_df)
        >>> panel.tickers
        ['AAPL', 'MSFT']
        >>> panel.returns().shape
        (103, 2)
    """

    def __init__(self, prices: pd.DataFrame) -> None:
        if not isinstance(prices, pd.DataFrame):
            raise ConfigurationError("prices must be a pandas DataFrame")

        frame = prices.copy()
        try:
            frame.index = pd.DatetimeIndex(frame.index)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError("price index cannot be interpreted as dates") from exc
        frame.columns = [str(c) for c in frame.columns]

        try:
            frame = frame.astype(np.float64)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError("prices must be numeric") from exc

        if frame.shape[1] == 0:
            raise ConfigurationError("price panel has no assets")
        if not frame.index.is_monotonic_increasing or not frame.index.is_unique:
            raise ConfigurationError("price dates must be strictly increasing")
        if frame.isna().to_numpy().any():
            raise ConfigurationError("price panel contains missing values")
        if (frame.to_numpy() <= 0).any():
            raise ConfigurationError("all prices must be positive")

        self._prices = frame

    @property
    def prices(self) -> pd.DataFrame:
        """Copy of the underlying price frame."""
        return self._prices.copy()

    @property
    def tickers(self) -> List[str]:
        """Asset identifiers in column order."""
        return list(self._prices.columns)

    @property
    def dates(self) -> pd.DatetimeIndex:
        """Observation dates."""
        return self._prices.index

    @property
    def n_assets(self) -> int:
        """Number of assets n."""
        return self._prices.shape[1]

    def __len__(self) -> int:
        return len(self._prices)

    def __repr__(self) -> str:
        if len(self) == 0:
            return f"AssetPanel(n_assets={self.n_assets}, empty)"
        return (
            f"AssetPanel(n_assets={self.n_assets}, n_dates={len(self)}, "
            f"{self.dates[0].date()} -> {self.dates[-1].date()})"
        )

    def returns(self) -> pd.DataFrame:
        """
        Per-period simple returns.

        Each return is labelled with the end date of its period, so the
        first observation has no return.
        """
        returns = compute_returns(self._prices.to_numpy())
        return pd.DataFrame(returns, index=self.dates[1:], columns=self.tickers)

    def window(self, start: Any, end: Any) -> pd.DataFrame:
        """Prices observed in ``[start, end]`` (inclusive)."""
        start, end = pd.Timestamp(start), pd.Timestamp(end)
        mask = (self.dates >= start) & (self.dates <= end)
        return self._prices.loc[mask].copy()

    def prices_on_or_before(self, date: Any) -> pd.Series:
        """Last observed price vector at or before ``date``."""
        date = pd.Timestamp(date)
        observed = self._prices.loc[self.dates <= date]
        if observed.empty:
            raise ConfigurationError(f"no prices observed on or before {date.date()}")
        return observed.iloc[-1]

    def prices_on_or_after(self, date: Any) -> pd.Series:
        """First observed price vector at or after ``date``."""
        date = pd.Timestamp(date)
        observed = self._prices.loc[self.dates >= date]
        if observed.empty:
            raise ConfigurationError(f"no prices observed on or after {date.date()}")
        return observed.iloc[0]


def read_price_csv(
    path: Union[str, Path],
    date_column: str = "Date",
) -> AssetPanel:
    """
    Load a price panel from CSV.

    The file holds a date column followed by one column per ticker, e.g.::

        Date,AAPL,MSFT
        2014-01-03,77.28,36.91
        2014-01-10,76.13,36.04

    Args:
        path: CSV file
        date_column: Name of the date column

    Returns:
        AssetPanel sorted by date
    """
    frame = pd.read_csv(path)
    if date_column not in frame.columns:
        raise ConfigurationError(f"{path} has no '{date_column}' column")

    frame[date_column] = pd.to_datetime(frame[date_column])
    frame = frame.set_index(date_column).sort_index()

    logger.info("Loaded {} price rows for {} assets from {}", len(frame), frame.shape[1], path)
    return AssetPanel(frame)
