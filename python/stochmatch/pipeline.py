"""
Liability Matching Pipeline
===========================

End-to-end run: calibrate on the history, generate scenarios, solve the
three programs, compute the VSS and track the stochastic allocation out
of sample.

The solves form a small task graph::

    deterministic -> recourse --+
                                +--> vss
    stochastic -----------------+

With ``config.parallel`` the stochastic solve runs on a worker thread
while the deterministic/recourse chain runs on the caller's thread.
Every solve is a pure function of its inputs, so both schedules return
identical results.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from loguru import logger

from .config import MatchingConfig
from .exceptions import StochMatchError
from .finance.backtest import PortfolioTracker
from .finance.calibration import ReturnStatistics, calibrate
from .finance.panel import AssetPanel
from .stochastic.distributions import GeometricBrownianMotion, NormalDistribution
from .stochastic.evaluation import VSSResult, value_of_stochastic_solution
from .stochastic.problem import LiabilityMatchingLP, TwoStageResult
from .stochastic.scenarios import ScenarioGenerator, ScenarioSet


@dataclass
class MatchingResult:
    """
    Everything produced by one run.

    Attributes:
        config: Configuration of the run
        statistics: Calibrated return statistics
        initial_prices: Prices at the end of the calibration window
        scenarios: Generated scenarios
        stochastic: Solution of the stochastic program
        deterministic: Solution of the deterministic program
        recourse: Solution of the recourse program at the deterministic allocation
        vss: Value of the stochastic solution
        tracker: Out-of-sample tracker of the stochastic allocation
            (None when no tracking window is configured)
    """

    config: MatchingConfig
    statistics: ReturnStatistics
    initial_prices: np.ndarray
    scenarios: ScenarioSet
    stochastic: TwoStageResult
    deterministic: TwoStageResult
    recourse: TwoStageResult
    vss: VSSResult
    tracker: Optional[PortfolioTracker] = None

    @property
    def allocation(self) -> np.ndarray:
        """First-stage allocation of the stochastic program."""
        return self.stochastic.x

    def summary(self) -> str:
        """Formatted summary of every stage."""
        tickers = self.statistics.tickers
        parts = [
            self.statistics.summary(),
            self.stochastic.summary(tickers),
            self.deterministic.summary(tickers),
            self.recourse.summary(tickers),
            self.vss.summary(),
        ]
        if self.tracker is not None:
            values = self.tracker.to_series()
            parts.append(
                f"Tracked {len(values)} observations: "
                f"{values.iloc[0]:.2f} -> {values.iloc[-1]:.2f}"
            )
        return "\n\n".join(parts)


def build_generator(
    statistics: ReturnStatistics,
    initial_prices: np.ndarray,
    config: MatchingConfig,
) -> ScenarioGenerator:
    """Scenario generator for calibrated statistics and the configured liability."""
    asset_model = GeometricBrownianMotion(
        mu=statistics.mu,
        cov=statistics.cov,
        initial_prices=initial_prices,
        dt=config.scenarios.dt,
    )
    liability = config.liability
    liability_model = NormalDistribution(
        mean_=liability.noise_mean,
        std=liability.noise_std,
        shift=liability.baseline,
    )
    return ScenarioGenerator(asset_model, liability_model, seed=config.scenarios.seed)


def expected_returns(
    statistics: ReturnStatistics,
    scenarios: ScenarioSet,
    config: MatchingConfig,
) -> np.ndarray:
    """Return vector of the deterministic program."""
    if config.expected_value_source == "sample":
        return scenarios.mean_returns()
    return statistics.mu


def solve_programs(
    lp: LiabilityMatchingLP,
    scenarios: ScenarioSet,
    expected_return: np.ndarray,
    expected_liability: float,
    parallel: bool = False,
) -> Tuple[TwoStageResult, TwoStageResult, TwoStageResult]:
    """
    Solve the stochastic, deterministic and recourse programs.

    Returns:
        (stochastic, deterministic, recourse)
    """

    def deterministic_chain() -> Tuple[TwoStageResult, TwoStageResult]:
        deterministic = lp.solve_deterministic(expected_return, expected_liability)
        logger.info("Deterministic objective: {:.6f}", deterministic.objective)
        recourse = lp.solve_recourse(scenarios, deterministic.x)
        logger.info("Recourse objective: {:.6f}", recourse.objective)
        return deterministic, recourse

    if parallel:
        with ThreadPoolExecutor(max_workers=1) as executor:
            pending = executor.submit(lp.solve_stochastic, scenarios)
            deterministic, recourse = deterministic_chain()
            stochastic = pending.result()
    else:
        stochastic = lp.solve_stochastic(scenarios)
        deterministic, recourse = deterministic_chain()

    logger.info("Stochastic objective: {:.6f}", stochastic.objective)
    return stochastic, deterministic, recourse


def run_matching(
    panel: AssetPanel,
    config: Optional[MatchingConfig] = None,
) -> MatchingResult:
    """
    Run the full liability-matching study.

    Args:
        panel: Historical prices covering calibration and tracking
        config: Run configuration (default: ``MatchingConfig.default()``)

    Returns:
        MatchingResult

    Raises:
        ConfigurationError: Bad windows or insufficient data
        DegenerateCovarianceError: Calibrated correlation has no Cholesky factor
        InfeasibleError, UnboundedError, NumericalError: Solver failures,
            tagged with the failing program

    Example:
        >>> panel = read_price_csv("price_data.csv")
        >>> result = run_matching(panel, MatchingConfig.default())
        >>> print(result.vss.vss)
    """
    config = config or MatchingConfig.default()

    try:
        statistics = calibrate(panel, config.calibration)
        initial_prices = panel.prices_on_or_before(config.calibration.end).to_numpy()

        generator = build_generator(statistics, initial_prices, config)
        scenarios = generator.generate(config.scenarios.n_scenarios)

        lp = LiabilityMatchingLP(
            budget=config.budget,
            costs=config.costs,
            solver_params=config.solver_params,
        )
        stochastic, deterministic, recourse = solve_programs(
            lp,
            scenarios,
            expected_returns(statistics, scenarios, config),
            config.liability.expected,
            parallel=config.parallel,
        )
        vss = value_of_stochastic_solution(
            stochastic, deterministic, recourse, tolerance=config.solver_tolerance
        )

        tracker = None
        if config.tracking is not None:
            tracker = PortfolioTracker(stochastic.x, panel, config.tracking)
            logger.info(
                "Tracking {} observations from {}", len(tracker), config.tracking.start.date()
            )
    except StochMatchError as exc:
        logger.error("Liability matching failed: {}", exc)
        raise

    return MatchingResult(
        config=config,
        statistics=statistics,
        initial_prices=initial_prices,
        scenarios=scenarios,
        stochastic=stochastic,
        deterministic=deterministic,
        recourse=recourse,
        vss=vss,
        tracker=tracker,
    )
