"""
Solution Evaluation for Liability Matching
==========================================

- VSS: Value of the Stochastic Solution
- Sampling stability of the stochastic objective across seeds
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
from loguru import logger
from scipy import stats

from ..exceptions import NumericalError
from .problem import LiabilityMatchingLP, TwoStageResult
from .scenarios import ScenarioGenerator, ScenarioSet


@dataclass
class VSSResult:
    """
    Value of the Stochastic Solution.

    VSS = EEV - RP where

    - RP = optimal value of the stochastic program
    - EEV = expected cost of the deterministic allocation on the
      scenarios: recourse objective + first-stage cost of that allocation

    Attributes:
        vss: EEV - RP
        stochastic_objective: RP
        expected_value_cost: EEV
        recourse_objective: Optimal value of the recourse program
        deterministic_first_stage_cost: First-stage cost of the
            deterministic allocation
        deterministic_objective: Optimal value of the deterministic program
    """

    vss: float
    stochastic_objective: float
    expected_value_cost: float
    recourse_objective: float
    deterministic_first_stage_cost: float
    deterministic_objective: float

    def __repr__(self) -> str:
        return (
            f"VSSResult(\n"
            f"  vss={self.vss:.4f},\n"
            f"  stochastic_objective={self.stochastic_objective:.4f},\n"
            f"  expected_value_cost={self.expected_value_cost:.4f}\n"
            f")"
        )

    def summary(self) -> str:
        """Formatted summary."""
        return (
            "=" * 50 + "\n"
            "Value of the Stochastic Solution\n"
            "=" * 50 + "\n"
            f"Stochastic objective (RP):     {self.stochastic_objective:.4f}\n"
            f"Deterministic objective (EV):  {self.deterministic_objective:.4f}\n"
            f"Recourse objective:            {self.recourse_objective:.4f}\n"
            f"Deterministic first stage:     {self.deterministic_first_stage_cost:.4f}\n"
            f"Expected EV cost (EEV):        {self.expected_value_cost:.4f}\n"
            "-" * 50 + "\n"
            f"VSS = EEV - RP:                {self.vss:.4f}\n"
            "=" * 50
        )


def value_of_stochastic_solution(
    stochastic: TwoStageResult,
    deterministic: TwoStageResult,
    recourse: TwoStageResult,
    tolerance: float = 1e-7,
) -> VSSResult:
    """
    Combine the three solves into the VSS.

        VSS = (recourse objective + first-stage cost of x_det) - stochastic objective

    The deterministic allocation is feasible for the stochastic program,
    so VSS >= 0. A value below ``-tolerance`` (scaled by the objective
    magnitude) signals inconsistent solves.

    Args:
        stochastic: Solution of the stochastic program
        deterministic: Solution of the deterministic program
        recourse: Solution of the recourse program at x_det
        tolerance: Relative tolerance for the sign check

    Raises:
        NumericalError: If VSS is negative beyond tolerance
    """
    if not np.allclose(recourse.x, deterministic.x, rtol=0, atol=1e-12):
        raise ValueError("recourse solve was not run at the deterministic allocation")

    eev = recourse.objective + deterministic.first_stage_cost
    rp = stochastic.objective
    vss = eev - rp

    scale = max(1.0, abs(eev), abs(rp))
    if vss < -tolerance * scale:
        raise NumericalError(
            f"VSS = {vss:.6g} is negative beyond tolerance {tolerance * scale:.3g}",
            problem="vss",
        )

    logger.info("VSS = {:.6f} (EEV={:.6f}, RP={:.6f})", vss, eev, rp)

    return VSSResult(
        vss=vss,
        stochastic_objective=rp,
        expected_value_cost=eev,
        recourse_objective=recourse.objective,
        deterministic_first_stage_cost=deterministic.first_stage_cost,
        deterministic_objective=deterministic.objective,
    )


def compute_vss(
    lp: LiabilityMatchingLP,
    scenarios: ScenarioSet,
    expected_returns: Optional[np.ndarray] = None,
    expected_liability: Optional[float] = None,
    tolerance: float = 1e-7,
) -> VSSResult:
    """
    Compute the Value of the Stochastic Solution from scratch.

    Solves the stochastic program, the deterministic program and the
    recourse program at the deterministic allocation.

    Args:
        lp: Program builder
        scenarios: Scenario set
        expected_returns: Returns for the deterministic program
            (default: scenario mean)
        expected_liability: Liability for the deterministic program
            (default: scenario mean)
        tolerance: Relative tolerance for the VSS sign check

    Example:
        >>> vss = compute_vss(LiabilityMatchingLP(budget=100.0), scenarios)
        >>> print(f"Ignoring uncertainty costs: {vss.vss:.2f}")
    """
    if expected_returns is None:
        expected_returns = scenarios.mean_returns()
    if expected_liability is None:
        expected_liability = scenarios.mean_liability()

    stochastic = lp.solve_stochastic(scenarios)
    deterministic = lp.solve_deterministic(expected_returns, expected_liability)
    recourse = lp.solve_recourse(scenarios, deterministic.x)

    return value_of_stochastic_solution(stochastic, deterministic, recourse, tolerance)


@dataclass
class StabilityResult:
    """
    Dispersion of the stochastic objective across independent seeds.

    Attributes:
        objectives: Optimal objective per replication
        mean: Mean objective
        std: Sample standard deviation (ddof=1)
        ci_lower: Lower confidence bound on the mean
        ci_upper: Upper confidence bound on the mean
        confidence_level: Confidence level (e.g., 0.95)
        n_scenarios: Scenarios per replication
        n_replications: Number of replications
    """

    objectives: np.ndarray
    mean: float
    std: float
    ci_lower: float
    ci_upper: float
    confidence_level: float
    n_scenarios: int
    n_replications: int

    def summary(self) -> str:
        """Formatted summary."""
        return (
            "=" * 50 + "\n"
            "Sampling Stability\n"
            "=" * 50 + "\n"
            f"Scenarios per run:   {self.n_scenarios}\n"
            f"Replications:        {self.n_replications}\n"
            f"Mean objective:      {self.mean:.4f}\n"
            f"Std objective:       {self.std:.4f}\n"
            f"Confidence level:    {self.confidence_level:.0%}\n"
            f"Confidence interval: [{self.ci_lower:.4f}, {self.ci_upper:.4f}]\n"
            "=" * 50
        )


def sampling_stability(
    lp: LiabilityMatchingLP,
    generator: ScenarioGenerator,
    n_scenarios: int,
    n_replications: int = 10,
    confidence_level: float = 0.95,
) -> StabilityResult:
    """
    Re-solve the stochastic program on independent scenario samples.

    Replication ``r`` uses root seed ``generator.seed + r``. A wide
    interval relative to the objective indicates that ``n_scenarios`` is
    too small for the sample average to be trusted.

    Args:
        lp: Program builder
        generator: Scenario generator (its models are reused)
        n_scenarios: Scenarios per replication
        n_replications: Number of replications (>= 2)
        confidence_level: Confidence level for the interval
    """
    if n_replications < 2:
        raise ValueError(f"n_replications must be at least 2, got {n_replications}")

    objectives = []
    for r in range(n_replications):
        replica = ScenarioGenerator(
            generator.asset_model, generator.liability_model, seed=generator.seed + r
        )
        result = lp.solve_stochastic(replica.generate(n_scenarios))
        objectives.append(result.objective)

    objectives_arr = np.array(objectives)
    mean = float(objectives_arr.mean())
    std = float(objectives_arr.std(ddof=1))

    # t-distribution critical value
    alpha = 1 - confidence_level
    t_crit = stats.t.ppf(1 - alpha / 2, n_replications - 1)
    margin = t_crit * std / np.sqrt(n_replications)

    logger.info(
        "Stochastic objective over {} replications of {} scenarios: {:.4f} +/- {:.4f}",
        n_replications, n_scenarios, mean, margin,
    )

    return StabilityResult(
        objectives=objectives_arr,
        mean=mean,
        std=std,
        ci_lower=mean - margin,
        ci_upper=mean + margin,
        confidence_level=confidence_level,
        n_scenarios=n_scenarios,
        n_replications=n_replications,
    )
