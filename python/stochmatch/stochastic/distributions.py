"""
Probability Distributions for Scenario Generation
=================================================

Distribution classes drawing from an explicit ``numpy.random.Generator``
so that each scenario can own an independent, reproducible substream.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import numpy as np

from ..finance.utils import cholesky_lower, correlation_from_covariance


class Distribution(ABC):
    """Base class for distributions."""

    @abstractmethod
    def sample(self, rng: np.random.Generator):
        """Draw one realization."""

    @abstractmethod
    def mean(self):
        """Distribution mean."""


@dataclass
class NormalDistribution(Distribution):
    """
    Univariate normal distribution shifted by a constant.

    A draw is ``shift + Normal(mean_, std)``; the liability model uses
    the tuition baseline as the shift.

    Example:
        >>> dist = NormalDistribution(mean_=500.0, std=200.0, shift=17000.0)
        >>> dist.mean()
        17500.0
    """

    mean_: float
    std: float
    shift: float = 0.0

    def __post_init__(self):
        if self.std < 0:
            raise ValueError(f"std must be non-negative, got {self.std}")

    def sample(self, rng: np.random.Generator) -> float:
        return float(self.shift + rng.normal(self.mean_, self.std))

    def mean(self) -> float:
        return float(self.shift + self.mean_)


@dataclass
class GeometricBrownianMotion(Distribution):
    """
    Correlated single-step geometric Brownian motion.

    For correlated shocks eps = L z with L the lower Cholesky factor of
    the correlation matrix, the terminal price is

        p_i = p0_i * exp((mu_i - sigma_i^2 / 2) dt + sqrt(dt) sigma_i eps_i)

    with ``sigma_i^2 = cov[i, i]``.

    Args:
        mu: Annualized drift (n,)
        cov: Annualized covariance (n, n)
        initial_prices: Current prices p0 (n,)
        dt: Time step in years

    Raises:
        DegenerateCovarianceError: If the correlation matrix has no
            Cholesky factor
    """

    mu: np.ndarray
    cov: np.ndarray
    initial_prices: np.ndarray
    dt: float
    chol: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        self.mu = np.asarray(self.mu, dtype=np.float64).ravel()
        self.cov = np.atleast_2d(np.asarray(self.cov, dtype=np.float64))
        self.initial_prices = np.asarray(self.initial_prices, dtype=np.float64).ravel()

        n = len(self.mu)
        if self.cov.shape != (n, n) or self.initial_prices.shape != (n,):
            raise ValueError(
                f"mu {self.mu.shape}, cov {self.cov.shape} and initial_prices "
                f"{self.initial_prices.shape} must describe the same assets"
            )
        if np.any(self.initial_prices <= 0):
            raise ValueError("initial prices must be positive")

        self.chol = cholesky_lower(correlation_from_covariance(self.cov))

    @property
    def dim(self) -> int:
        return len(self.mu)

    @property
    def sigma(self) -> np.ndarray:
        return np.sqrt(np.diag(self.cov))

    def terminal_prices(self, shocks: np.ndarray) -> np.ndarray:
        """Terminal prices for a vector of correlated shocks."""
        drift = (self.mu - 0.5 * np.diag(self.cov)) * self.dt
        diffusion = np.sqrt(self.dt) * self.sigma * shocks
        return self.initial_prices * np.exp(drift + diffusion)

    def sample(self, rng: np.random.Generator) -> np.ndarray:
        """Draw terminal prices (n,)."""
        z = rng.standard_normal(self.dim)
        return self.terminal_prices(self.chol @ z)

    def mean(self) -> np.ndarray:
        """Expected terminal prices."""
        return self.initial_prices * np.exp(self.mu * self.dt)
