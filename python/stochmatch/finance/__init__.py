"""
stochmatch Finance Module
=========================

Price data, return calibration and out-of-sample tracking.

Calibration
-----------
>>> from stochmatch.finance import read_price_csv, calibrate
>>> from stochmatch.config import CalibrationConfig
>>>
>>> panel = read_price_csv("price_data.csv")
>>> stats = calibrate(panel, CalibrationConfig.one_year("2014-01-03"))
>>> print(stats.summary())

Tracking
--------
>>> from stochmatch.finance import PortfolioTracker
>>>
>>> tracker = PortfolioTracker(allocation, panel, config.tracking)
>>> values = tracker.to_series()

Classes
-------
AssetPanel
    Validated (date, price-vector) observations
ReturnStatistics
    Annualized mean returns and covariance
PortfolioTracker
    Buy-and-hold value of an allocation over a window
"""

from .backtest import PortfolioTracker
from .calibration import ReturnStatistics, calibrate
from .panel import AssetPanel, read_price_csv
from .utils import (
    cholesky_lower,
    compute_covariance,
    compute_returns,
    correlation_from_covariance,
    geometric_mean_return,
)

__all__ = [
    # Data
    "AssetPanel",
    "read_price_csv",
    # Calibration
    "ReturnStatistics",
    "calibrate",
    # Tracking
    "PortfolioTracker",
    # Utilities
    "compute_returns",
    "compute_covariance",
    "geometric_mean_return",
    "correlation_from_covariance",
    "cholesky_lower",
]
