"""
stochmatch Stochastic Programming
=================================

Two-stage stochastic liability matching.

A two-stage problem has:
- **First stage**: "Here and now" allocation (x) before returns are revealed
- **Second stage**: "Recourse" surplus/shortfall per scenario after observing
  asset returns r_s and the liability L_s

Extensive form:
    minimize    a * sum(x) + sum_s p_s (c_plus surplus_s + c_minus shortfall_s)
    subject to  (1 + r_s)'x - surplus_s + shortfall_s = L_s   for each s
                sum(x) <= budget
                x, surplus, shortfall >= 0

>>> from stochmatch.stochastic import LiabilityMatchingLP, ScenarioGenerator
>>>
>>> scenarios = generator.generate(n_scenarios=5)
>>> lp = LiabilityMatchingLP(budget=17500.0)
>>> result = lp.solve_stochastic(scenarios)

Value of the Stochastic Solution
--------------------------------
>>> from stochmatch.stochastic import compute_vss
>>>
>>> vss = compute_vss(lp, scenarios)
>>> print(vss.summary())

Classes
-------
LiabilityMatchingLP
    Builds and solves the stochastic, deterministic and recourse programs
TwoStageResult
    Allocation, recourse and cost breakdown
Scenario
    Single joint realization of returns and the liability
ScenarioSet
    Collection of scenarios with validation
ScenarioGenerator
    Correlated GBM returns and Gaussian liabilities on per-scenario substreams

References
----------
- Birge & Louveaux (2011): "Introduction to Stochastic Programming"
"""

from .distributions import Distribution, GeometricBrownianMotion, NormalDistribution
from .evaluation import (
    StabilityResult,
    VSSResult,
    compute_vss,
    sampling_stability,
    value_of_stochastic_solution,
)
from .problem import (
    DETERMINISTIC,
    RECOURSE,
    STOCHASTIC,
    LiabilityMatchingLP,
    TwoStageResult,
    VariableLayout,
)
from .scenarios import Scenario, ScenarioGenerator, ScenarioSet

__all__ = [
    # Problems
    "LiabilityMatchingLP",
    "TwoStageResult",
    "VariableLayout",
    "STOCHASTIC",
    "DETERMINISTIC",
    "RECOURSE",
    # Scenarios
    "Scenario",
    "ScenarioSet",
    "ScenarioGenerator",
    # Evaluation
    "VSSResult",
    "compute_vss",
    "value_of_stochastic_solution",
    "StabilityResult",
    "sampling_stability",
    # Distributions
    "Distribution",
    "NormalDistribution",
    "GeometricBrownianMotion",
]
