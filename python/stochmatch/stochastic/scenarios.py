"""
Scenario Management
===================

Scenarios of asset returns and liabilities, and their generation.

Every scenario ``s`` is drawn from its own RNG substream
``SeedSequence(seed, spawn_key=(s,))`` (the ``s``-th child of
``SeedSequence(seed).spawn``), so a scenario's draws depend only on the
seed and its index, never on how many scenarios are generated or in
which order.
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
from loguru import logger

from .distributions import GeometricBrownianMotion, NormalDistribution


@dataclass
class Scenario:
    """
    A single joint realization of asset returns and the liability.

    Args:
        index: Position of the scenario in its set
        returns: Simple asset returns over the horizon (n,)
        liability: Liability to be met
        probability: Scenario probability
        prices: Simulated terminal prices (n,), if generated from prices
        name: Optional scenario identifier

    Example:
        >>> scenario = Scenario(
        ...     index=0,
        ...     returns=np.array([0.10, 0.05]),
        ...     liability=120.0,
        ...     probability=0.5,
        ... )
    """

    index: int
    returns: np.ndarray
    liability: float
    probability: float
    prices: Optional[np.ndarray] = None
    name: Optional[str] = None

    def __post_init__(self):
        """Validate and convert arrays."""
        self.returns = np.asarray(self.returns, dtype=np.float64).ravel()
        self.liability = float(self.liability)
        if self.prices is not None:
            self.prices = np.asarray(self.prices, dtype=np.float64).ravel()
        if self.name is None:
            self.name = f"scenario_{self.index}"

        self._validate()

    def _validate(self):
        if not (0 <= self.probability <= 1):
            raise ValueError(f"Probability must be in [0,1], got {self.probability}")
        if not np.all(np.isfinite(self.returns)) or not math.isfinite(self.liability):
            raise ValueError(f"{self.name}: returns and liability must be finite")
        if np.any(self.returns <= -1):
            raise ValueError(f"{self.name}: returns must exceed -100%")
        if self.prices is not None and self.prices.shape != self.returns.shape:
            raise ValueError(f"{self.name}: prices and returns must have the same shape")

    @property
    def n_assets(self) -> int:
        return len(self.returns)

    @property
    def gross_returns(self) -> np.ndarray:
        """Payoff per currency unit invested, ``1 + r``."""
        return 1.0 + self.returns

    def payoff(self, allocation: np.ndarray) -> float:
        """Portfolio value at the horizon for a first-stage allocation."""
        return float(self.gross_returns @ np.asarray(allocation, dtype=np.float64))


class ScenarioSet:
    """
    Equally weighted collection of scenarios.

    Every scenario carries probability ``1/S``; the weights are a
    modelling choice, and validation only requires that they sum to 1.

    Args:
        scenarios: Scenarios in index order

    Example:
        >>> scenarios = ScenarioSet.from_arrays(
        ...     returns=[[0.10, 0.05], [-0.05, 0.02]],
        ...     liabilities=[120.0, 90.0],
        ... )
        >>> scenarios.probabilities
        array([0.5, 0.5])
    """

    def __init__(self, scenarios: Sequence[Scenario]) -> None:
        self._scenarios: List[Scenario] = list(scenarios)
        self.validate()

    @classmethod
    def from_arrays(
        cls,
        returns: np.ndarray,
        liabilities: np.ndarray,
        prices: Optional[np.ndarray] = None,
    ) -> ScenarioSet:
        """
        Build a uniformly weighted set from return and liability arrays.

        Args:
            returns: Scenario returns (S, n)
            liabilities: Scenario liabilities (S,)
            prices: Optional simulated prices (S, n)
        """
        returns = np.atleast_2d(np.asarray(returns, dtype=np.float64))
        liabilities = np.asarray(liabilities, dtype=np.float64).ravel()

        if returns.shape[0] != liabilities.shape[0]:
            raise ValueError(
                f"{returns.shape[0]} return rows but {liabilities.shape[0]} liabilities"
            )

        n_s = len(liabilities)
        prob = 1.0 / n_s if n_s else 0.0
        scenarios = [
            Scenario(
                index=i,
                returns=returns[i],
                liability=liabilities[i],
                probability=prob,
                prices=None if prices is None else prices[i],
            )
            for i in range(n_s)
        ]
        return cls(scenarios)

    @property
    def n_scenarios(self) -> int:
        """Number of scenarios."""
        return len(self._scenarios)

    @property
    def n_assets(self) -> int:
        return self._scenarios[0].n_assets

    @property
    def probabilities(self) -> np.ndarray:
        """Array of scenario probabilities."""
        return np.array([s.probability for s in self._scenarios])

    @property
    def total_probability(self) -> float:
        """Sum of probabilities."""
        return math.fsum(s.probability for s in self._scenarios)

    @property
    def returns(self) -> np.ndarray:
        """Scenario returns (S, n)."""
        return np.vstack([s.returns for s in self._scenarios])

    @property
    def liabilities(self) -> np.ndarray:
        """Scenario liabilities (S,)."""
        return np.array([s.liability for s in self._scenarios])

    @property
    def price_grid(self) -> np.ndarray:
        """Simulated prices as an asset × scenario matrix (n, S)."""
        if any(s.prices is None for s in self._scenarios):
            raise ValueError("scenarios were not generated from prices")
        return np.column_stack([s.prices for s in self._scenarios])

    def mean_returns(self) -> np.ndarray:
        """Probability-weighted mean return per asset."""
        return self.probabilities @ self.returns

    def mean_liability(self) -> float:
        """Probability-weighted mean liability."""
        return float(self.probabilities @ self.liabilities)

    def __len__(self) -> int:
        return len(self._scenarios)

    def __iter__(self) -> Iterator[Scenario]:
        return iter(self._scenarios)

    def __getitem__(self, idx: int) -> Scenario:
        return self._scenarios[idx]

    def __repr__(self) -> str:
        return f"ScenarioSet(n_scenarios={self.n_scenarios})"

    def validate(self) -> bool:
        """
        Validate scenario set.

        Checks:
        1. At least one scenario
        2. Probabilities sum to 1 (within 1e-9)
        3. All scenarios cover the same number of assets

        Returns:
            True if valid

        Raises:
            ValueError: If invalid
        """
        if len(self._scenarios) == 0:
            raise ValueError("No scenarios defined")

        total = self.total_probability
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"Probabilities sum to {total}, not 1.0")

        n = self._scenarios[0].n_assets
        for s in self._scenarios[1:]:
            if s.n_assets != n:
                raise ValueError(f"{s.name}: {s.n_assets} assets, expected {n}")

        return True


class ScenarioGenerator:
    """
    Generate scenarios of correlated GBM asset returns and Gaussian liabilities.

    Scenario ``s`` draws first the ``n`` standard normal asset shocks and
    then the liability noise, both from substream ``s`` of ``seed``.

    Args:
        asset_model: Correlated GBM over the horizon
        liability_model: Liability distribution
        seed: Root seed

    Example:
        >>> gen = ScenarioGenerator(
        ...     GeometricBrownianMotion(mu, cov, p0, dt=1 / 252),
        ...     NormalDistribution(mean_=500.0, std=200.0, shift=17000.0),
        ...     seed=1,
        ... )
        >>> scenarios = gen.generate(n_scenarios=5)
    """

    def __init__(
        self,
        asset_model: GeometricBrownianMotion,
        liability_model: NormalDistribution,
        seed: int = 1,
    ) -> None:
        self.asset_model = asset_model
        self.liability_model = liability_model
        self.seed = int(seed)

    def substream(self, index: int) -> np.random.Generator:
        """Independent generator for scenario ``index``."""
        return np.random.default_rng(np.random.SeedSequence(self.seed, spawn_key=(index,)))

    def draw(self, index: int, probability: float = 1.0) -> Scenario:
        """Draw scenario ``index`` in isolation."""
        rng = self.substream(index)
        p0 = self.asset_model.initial_prices

        prices = self.asset_model.sample(rng)
        liability = self.liability_model.sample(rng)

        return Scenario(
            index=index,
            returns=(prices - p0) / p0,
            liability=liability,
            probability=probability,
            prices=prices,
        )

    def generate(
        self,
        n_scenarios: int,
        max_workers: Optional[int] = None,
    ) -> ScenarioSet:
        """
        Generate scenarios.

        Args:
            n_scenarios: Number of scenarios to generate
            max_workers: Draw scenarios on a thread pool of this size;
                results are identical to sequential generation

        Returns:
            ScenarioSet with equally weighted scenarios
        """
        if n_scenarios < 1:
            raise ValueError(f"n_scenarios must be positive, got {n_scenarios}")

        prob = 1.0 / n_scenarios
        indices = range(n_scenarios)

        if max_workers and max_workers > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                scenarios = list(executor.map(lambda i: self.draw(i, prob), indices))
        else:
            scenarios = [self.draw(i, prob) for i in indices]

        logger.info("Generated {} scenarios (seed={})", n_scenarios, self.seed)
        return ScenarioSet(scenarios)
