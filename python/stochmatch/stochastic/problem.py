"""
Two-Stage Liability Matching Programs
=====================================

Builders for the three LPs of a liability-matching run. All share the
first-stage allocation x (one amount per asset); each scenario s owns a
two-column recourse block (surplus_s, shortfall_s):

    (1 + r_s)'x - surplus_s + shortfall_s = L_s

surplus_s is the payoff in excess of the liability, shortfall_s the
amount missing. The objective is

    a * sum(x) + sum_s p_s * (c_plus * surplus_s + c_minus * shortfall_s)

Stochastic program
    all scenarios, x free subject to sum(x) <= budget.
Deterministic program
    the same structure with a single scenario of probability 1 built
    from expected returns and the expected liability.
Recourse program
    x fixed; only the recourse blocks remain and the right-hand side
    becomes L_s - (1 + r_s)'x.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
from loguru import logger
from scipy import sparse

from ..config import RecourseCosts
from ..exceptions import DimensionError, InvalidInputError
from ..model import LPProblem
from ..result import SolveResult
from ..solver import solve_or_raise
from .scenarios import Scenario, ScenarioSet

STOCHASTIC = "stochastic"
DETERMINISTIC = "deterministic"
RECOURSE = "recourse"


@dataclass(frozen=True)
class VariableLayout:
    """
    Column layout of a decision vector.

    Columns ``[0, n_first_stage)`` hold the allocation; scenario ``s``
    owns columns ``surplus(s)`` and ``shortfall(s)`` right after.

    Example:
        >>> layout = VariableLayout(n_first_stage=2, n_scenarios=3)
        >>> layout.block(1)
        slice(4, 6, None)
    """

    n_first_stage: int
    n_scenarios: int

    BLOCK_WIDTH = 2

    @property
    def n_vars(self) -> int:
        return self.n_first_stage + self.BLOCK_WIDTH * self.n_scenarios

    @property
    def first_stage(self) -> slice:
        return slice(0, self.n_first_stage)

    def block(self, s: int) -> slice:
        """Recourse columns of scenario ``s``."""
        if not 0 <= s < self.n_scenarios:
            raise IndexError(f"scenario {s} out of range [0, {self.n_scenarios})")
        start = self.n_first_stage + self.BLOCK_WIDTH * s
        return slice(start, start + self.BLOCK_WIDTH)

    def surplus(self, s: int) -> int:
        return self.block(s).start

    def shortfall(self, s: int) -> int:
        return self.block(s).start + 1

    def split(self, z: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Split a decision vector into (x, surplus, shortfall)."""
        z = np.asarray(z, dtype=np.float64)
        if z.shape != (self.n_vars,):
            raise DimensionError(f"decision vector has shape {z.shape}, expected ({self.n_vars},)")
        recourse = z[self.n_first_stage:].reshape(self.n_scenarios, self.BLOCK_WIDTH)
        return z[self.first_stage].copy(), recourse[:, 0].copy(), recourse[:, 1].copy()


@dataclass
class TwoStageResult:
    """
    Result of solving one of the liability-matching programs.

    Attributes:
        problem: Which program was solved
        x: First-stage allocation (fixed input for the recourse program)
        surplus: Surplus per scenario (S,)
        shortfall: Shortfall per scenario (S,)
        first_stage_cost: a * sum(x)
        expected_recourse: sum_s p_s (c_plus surplus_s + c_minus shortfall_s)
        total_cost: first_stage_cost + expected_recourse
        objective: Optimal LP objective as reported by the solver
        status: Solver status
        solve_time: Solution time
        n_scenarios: Number of scenarios
    """

    problem: str
    x: np.ndarray
    surplus: np.ndarray
    shortfall: np.ndarray
    first_stage_cost: float
    expected_recourse: float
    total_cost: float
    objective: float
    status: str
    solve_time: float
    n_scenarios: int

    def __repr__(self) -> str:
        return (
            f"TwoStageResult(\n"
            f"  problem={self.problem},\n"
            f"  status={self.status},\n"
            f"  first_stage_cost={self.first_stage_cost:.4f},\n"
            f"  expected_recourse={self.expected_recourse:.4f},\n"
            f"  total_cost={self.total_cost:.4f},\n"
            f"  n_scenarios={self.n_scenarios}\n"
            f")"
        )

    def summary(self, tickers: Optional[List[str]] = None) -> str:
        """Formatted summary."""
        lines = [
            "=" * 50,
            f"Liability Matching Solution ({self.problem})",
            "=" * 50,
            f"Status:            {self.status}",
            f"Scenarios:         {self.n_scenarios}",
            f"Solve time:        {self.solve_time:.4f}s",
            "-" * 50,
            f"First-stage cost:  {self.first_stage_cost:.4f}",
            f"Expected recourse: {self.expected_recourse:.4f}",
            f"Total cost:        {self.total_cost:.4f}",
            "-" * 50,
            "First-stage allocation x:",
        ]

        for i, xi in enumerate(self.x):
            if abs(xi) > 1e-6:
                label = tickers[i] if tickers else f"x[{i}]"
                lines.append(f"  {label} = {xi:.4f}")

        lines.append("-" * 50)
        lines.append(f"{'Scenario':<10}{'Surplus':>14}{'Shortfall':>14}")
        for s, (up, down) in enumerate(zip(self.surplus, self.shortfall)):
            lines.append(f"{s:<10}{up:>14.4f}{down:>14.4f}")

        lines.append("=" * 50)
        return "\n".join(lines)


class LiabilityMatchingLP:
    """
    Builds and solves the stochastic, deterministic and recourse programs.

    Args:
        budget: Capital available for the allocation (sum(x) <= budget)
        costs: Objective coefficients
        solver_params: Parameters for ``stochmatch.solver.solve``

    Example:
        >>> lp = LiabilityMatchingLP(budget=100.0)
        >>> scenarios = ScenarioSet.from_arrays(
        ...     returns=[[0.10, 0.05], [-0.05, 0.02]],
        ...     liabilities=[120.0, 90.0],
        ... )
        >>> result = lp.solve_stochastic(scenarios)
    """

    def __init__(
        self,
        budget: float,
        costs: Optional[RecourseCosts] = None,
        solver_params: Optional[Dict[str, Any]] = None,
    ) -> None:
        if not budget > 0:
            raise InvalidInputError(f"budget must be positive, got {budget}")
        self.budget = float(budget)
        self.costs = costs or RecourseCosts()
        self.solver_params = dict(solver_params or {})

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def _recourse_costs(self, probabilities: np.ndarray) -> np.ndarray:
        block = np.array([self.costs.surplus, self.costs.shortfall])
        return np.concatenate([p * block for p in probabilities]) if len(probabilities) else np.zeros(0)

    def _assemble(
        self,
        name: str,
        scenarios: List[Scenario],
        fixed_allocation: Optional[np.ndarray] = None,
    ) -> Tuple[LPProblem, VariableLayout]:
        n = scenarios[0].n_assets
        n_first = 0 if fixed_allocation is not None else n
        layout = VariableLayout(n_first_stage=n_first, n_scenarios=len(scenarios))

        c = np.zeros(layout.n_vars)
        c[layout.first_stage] = self.costs.allocation
        c[n_first:] = self._recourse_costs(np.array([s.probability for s in scenarios]))

        rows: List[int] = []
        cols: List[int] = []
        vals: List[float] = []
        b_eq = np.zeros(len(scenarios))

        for s, scenario in enumerate(scenarios):
            if scenario.n_assets != n:
                raise DimensionError(f"{scenario.name}: {scenario.n_assets} assets, expected {n}")

            if fixed_allocation is None:
                rows.extend([s] * n)
                cols.extend(range(n))
                vals.extend(scenario.gross_returns)
                b_eq[s] = scenario.liability
            else:
                b_eq[s] = scenario.liability - scenario.payoff(fixed_allocation)

            rows.extend([s, s])
            cols.extend([layout.surplus(s), layout.shortfall(s)])
            vals.extend([-1.0, 1.0])

        A_eq = sparse.coo_matrix(
            (vals, (rows, cols)), shape=(len(scenarios), layout.n_vars)
        ).tocsr()

        A_ub = b_ub = None
        if fixed_allocation is None:
            A_ub = sparse.csr_matrix(
                np.concatenate([np.ones(n), np.zeros(layout.n_vars - n)]).reshape(1, -1)
            )
            b_ub = np.array([self.budget])

        problem = LPProblem(name=name, c=c, A_ub=A_ub, b_ub=b_ub, A_eq=A_eq, b_eq=b_eq)
        logger.debug(
            "Built {} LP: {} vars, {} equality rows, {} inequality rows",
            name, problem.n_vars, problem.n_eq, problem.n_ineq,
        )
        return problem, layout

    def build_stochastic(self, scenarios: ScenarioSet) -> Tuple[LPProblem, VariableLayout]:
        """Extensive form over all scenarios with the budget row."""
        scenarios.validate()
        return self._assemble(STOCHASTIC, list(scenarios))

    def build_deterministic(
        self,
        expected_returns: np.ndarray,
        expected_liability: float,
    ) -> Tuple[LPProblem, VariableLayout]:
        """Single expected-value scenario with probability 1."""
        expected = Scenario(
            index=0,
            returns=expected_returns,
            liability=expected_liability,
            probability=1.0,
            name="expected_value",
        )
        return self._assemble(DETERMINISTIC, [expected])

    def build_recourse(
        self,
        scenarios: ScenarioSet,
        allocation: np.ndarray,
    ) -> Tuple[LPProblem, VariableLayout]:
        """Recourse blocks only, with the allocation fixed."""
        scenarios.validate()
        allocation = np.asarray(allocation, dtype=np.float64).ravel()
        if allocation.shape != (scenarios.n_assets,):
            raise DimensionError(
                f"allocation has {allocation.size} entries, scenarios have {scenarios.n_assets} assets"
            )
        return self._assemble(RECOURSE, list(scenarios), fixed_allocation=allocation)

    # ------------------------------------------------------------------
    # Solving
    # ------------------------------------------------------------------

    def _result(
        self,
        solution: SolveResult,
        layout: VariableLayout,
        probabilities: np.ndarray,
        allocation: Optional[np.ndarray] = None,
    ) -> TwoStageResult:
        x, surplus, shortfall = layout.split(solution.x)
        if allocation is not None:
            x = allocation.copy()

        first_stage_cost = float(self.costs.allocation * x.sum())
        expected_recourse = float(
            probabilities @ (self.costs.surplus * surplus + self.costs.shortfall * shortfall)
        )

        return TwoStageResult(
            problem=solution.problem_name,
            x=x,
            surplus=surplus,
            shortfall=shortfall,
            first_stage_cost=first_stage_cost,
            expected_recourse=expected_recourse,
            total_cost=first_stage_cost + expected_recourse,
            objective=solution.objective,
            status=str(solution.status),
            solve_time=solution.solve_time,
            n_scenarios=layout.n_scenarios,
        )

    def solve_stochastic(self, scenarios: ScenarioSet) -> TwoStageResult:
        """Solve the full stochastic program."""
        problem, layout = self.build_stochastic(scenarios)
        solution = solve_or_raise(problem, self.solver_params)
        return self._result(solution, layout, scenarios.probabilities)

    def solve_deterministic(
        self,
        expected_returns: np.ndarray,
        expected_liability: float,
    ) -> TwoStageResult:
        """Solve the expected-value program."""
        problem, layout = self.build_deterministic(expected_returns, expected_liability)
        solution = solve_or_raise(problem, self.solver_params)
        return self._result(solution, layout, np.array([1.0]))

    def solve_recourse(self, scenarios: ScenarioSet, allocation: np.ndarray) -> TwoStageResult:
        """
        Solve the recourse program for a fixed allocation.

        ``total_cost`` of the result is the expected cost of the
        allocation on the scenarios (EEV when the allocation comes from
        the deterministic program).
        """
        problem, layout = self.build_recourse(scenarios, allocation)
        solution = solve_or_raise(problem, self.solver_params)
        return self._result(
            solution, layout, scenarios.probabilities,
            allocation=np.asarray(allocation, dtype=np.float64).ravel(),
        )
