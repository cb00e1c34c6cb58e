"""
Return Calibration
==================

Annualized return statistics estimated over a historical window.

The mean uses the geometric average of gross returns because returns
compound multiplicatively across periods:

    mu_i  = k * (gmean(1 + r_i) - 1)
    Sigma = k * cov(r)

with ``k`` the number of periods per year.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import numpy as np
import pandas as pd
from loguru import logger

from ..config import CalibrationConfig
from ..exceptions import ConfigurationError
from .panel import AssetPanel
from .utils import annualize_mean_return, compute_covariance, geometric_mean_return


@dataclass(frozen=True, eq=False)
class ReturnStatistics:
    """
    Calibrated return statistics.

    Attributes:
        mu: Annualized mean return per asset (n,)
        cov: Annualized covariance matrix (n, n)
        tickers: Asset identifiers
        start: First return date in the window
        end: Last return date in the window
        n_observations: Number of returns used
        annualization_factor: Periods per year
    """

    mu: np.ndarray
    cov: np.ndarray
    tickers: List[str]
    start: pd.Timestamp
    end: pd.Timestamp
    n_observations: int
    annualization_factor: float

    @property
    def n_assets(self) -> int:
        return len(self.mu)

    @property
    def volatility(self) -> np.ndarray:
        """Annualized standard deviation per asset."""
        return np.sqrt(np.diag(self.cov))

    def summary(self) -> str:
        """Formatted summary."""
        lines = [
            "=" * 50,
            "Calibrated Return Statistics",
            "=" * 50,
            f"Window:        {self.start.date()} -> {self.end.date()}",
            f"Observations:  {self.n_observations}",
            f"Periods/year:  {self.annualization_factor:g}",
            "-" * 50,
            f"{'Asset':<12}{'Mean':>12}{'Volatility':>14}",
        ]
        for ticker, m, v in zip(self.tickers, self.mu, self.volatility):
            lines.append(f"{ticker:<12}{m:>12.4%}{v:>14.4%}")
        lines.append("=" * 50)
        return "\n".join(lines)


def calibrate(panel: AssetPanel, config: CalibrationConfig) -> ReturnStatistics:
    """
    Estimate annualized mean returns and covariance over a window.

    Args:
        panel: Historical prices
        config: Calibration window and annualization factor

    Returns:
        ReturnStatistics

    Raises:
        ConfigurationError: If the window holds fewer than two returns
    """
    returns = panel.returns()
    in_window = (returns.index >= config.start) & (returns.index <= config.end)
    window = returns.loc[in_window]

    if len(window) < 2:
        raise ConfigurationError(
            f"calibration window {config.start.date()} -> {config.end.date()} "
            f"contains {len(window)} return observation(s); at least 2 are required"
        )

    values = window.to_numpy()
    k = config.annualization_factor

    mu = np.asarray(annualize_mean_return(geometric_mean_return(values), k))
    cov = k * compute_covariance(values)

    logger.info(
        "Calibrated {} assets on {} returns ({} -> {})",
        panel.n_assets, len(window), window.index[0].date(), window.index[-1].date(),
    )
    logger.debug("mu = {}", np.array2string(mu, precision=6))

    return ReturnStatistics(
        mu=mu,
        cov=cov,
        tickers=panel.tickers,
        start=window.index[0],
        end=window.index[-1],
        n_observations=len(window),
        annualization_factor=k,
    )
