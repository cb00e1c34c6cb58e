"""
stochmatch Result Classes
=========================

Data classes for solver results and status.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

import numpy as np


class Status(Enum):
    """
    Solver status codes.

    Attributes:
        OPTIMAL: Solution found within tolerance
        PRIMAL_INFEASIBLE: Problem has no feasible solution
        DUAL_INFEASIBLE: Problem is unbounded (objective → -∞)
        MAX_ITERATIONS: Iteration or time limit reached
        NUMERICAL_ERROR: Numerical issues encountered
    """
    OPTIMAL = "optimal"
    PRIMAL_INFEASIBLE = "primal_infeasible"
    DUAL_INFEASIBLE = "dual_infeasible"
    MAX_ITERATIONS = "max_iterations"
    NUMERICAL_ERROR = "numerical_error"

    def __str__(self) -> str:
        return self.value

    @property
    def is_successful(self) -> bool:
        """True if an optimal solution was found."""
        return self == Status.OPTIMAL

    @property
    def has_solution(self) -> bool:
        """True if a (possibly suboptimal) solution is available."""
        return self in (Status.OPTIMAL, Status.MAX_ITERATIONS)


@dataclass
class SolveResult:
    """
    Result of solving an LP problem.

    Attributes:
        status: Solver status
        objective: Optimal objective value (nan when not solved)
        x: Primal solution vector (read-only)
        iterations: Number of iterations performed
        solve_time: Wall clock time in seconds
        problem_name: Name of the LPProblem that was solved
        message: Solver message

    Example:
        >>> result = solve(problem)
        >>> if result.status == Status.OPTIMAL:
        ...     print(f"Optimal value: {result.objective}")
    """

    status: Status
    objective: float
    x: np.ndarray
    iterations: int
    solve_time: float
    problem_name: str = ""
    message: str = ""

    # Optional metadata
    problem_info: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.x = np.array(self.x, dtype=np.float64)
        self.x.setflags(write=False)

    def __repr__(self) -> str:
        return (
            f"SolveResult(problem={self.problem_name!r}, "
            f"status={self.status}, "
            f"objective={self.objective:.6g}, "
            f"iterations={self.iterations}, "
            f"time={self.solve_time:.4f}s)"
        )

    def summary(self) -> str:
        """Return a formatted summary of the solve result."""
        lines = [
            "=" * 50,
            f"LP Solve Summary ({self.problem_name or 'unnamed'})",
            "=" * 50,
            f"Status:           {self.status}",
            f"Objective:        {self.objective:.10g}",
            f"Iterations:       {self.iterations}",
            f"Solve time:       {self.solve_time:.4f} s",
            f"Variables:        {self.x.size}",
            "=" * 50,
        ]
        return "\n".join(lines)
