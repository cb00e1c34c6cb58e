"""stochmatch Solver Interface.

Thin adapter around ``scipy.optimize.linprog`` (HiGHS). The rest of the
package treats it as an oracle: an ``LPProblem`` goes in, a
``SolveResult`` comes out, and ``solve_or_raise`` turns any non-optimal
status into a typed exception naming the failing problem.
"""

from __future__ import annotations

import time
from typing import Any, Dict, Optional

import numpy as np
from loguru import logger
from scipy.optimize import linprog

from .exceptions import InfeasibleError, NumericalError, UnboundedError
from .model import LPProblem
from .result import SolveResult, Status

DEFAULT_TOLERANCE = 1e-7

# scipy.optimize.linprog status codes
_STATUS_MAP = {
    0: Status.OPTIMAL,
    1: Status.MAX_ITERATIONS,
    2: Status.PRIMAL_INFEASIBLE,
    3: Status.DUAL_INFEASIBLE,
    4: Status.NUMERICAL_ERROR,
}

_ERROR_MAP = {
    Status.PRIMAL_INFEASIBLE: InfeasibleError,
    Status.DUAL_INFEASIBLE: UnboundedError,
}


def _highs_options(params: Dict[str, Any]) -> Dict[str, Any]:
    tol = params.get('tolerance', params.get('tol', DEFAULT_TOLERANCE))
    options = {
        'primal_feasibility_tolerance': tol,
        'dual_feasibility_tolerance': tol,
        'presolve': params.get('presolve', True),
    }
    max_iters = params.get('max_iterations', params.get('max_iters'))
    if max_iters is not None:
        options['maxiter'] = int(max_iters)
    if params.get('time_limit') is not None:
        options['time_limit'] = float(params['time_limit'])
    return options


def solve(problem: LPProblem, params: Optional[Dict[str, Any]] = None) -> SolveResult:
    """
    Solve an LP.

    Args:
        problem: Problem in matrix form
        params: Solver parameters: ``tolerance``, ``max_iterations``,
            ``time_limit``, ``presolve``

    Returns:
        SolveResult; ``objective`` is nan and ``x`` is zeros unless a
        solution was found.
    """
    params = params or {}
    start_time = time.perf_counter()
    n = problem.n_vars

    bounds = [
        (None if np.isinf(l) else l, None if np.isinf(u) else u)
        for l, u in zip(problem.lb, problem.ub)
    ]

    logger.debug(
        "Solving {} LP: {} vars, {} inequality rows, {} equality rows",
        problem.name, n, problem.n_ineq, problem.n_eq,
    )

    result = linprog(
        problem.c,
        A_ub=problem.A_ub if problem.n_ineq else None,
        b_ub=problem.b_ub if problem.n_ineq else None,
        A_eq=problem.A_eq if problem.n_eq else None,
        b_eq=problem.b_eq if problem.n_eq else None,
        bounds=bounds,
        method='highs',
        options=_highs_options(params),
    )

    status = _STATUS_MAP.get(result.status, Status.NUMERICAL_ERROR)
    solve_time = time.perf_counter() - start_time

    logger.debug(
        "{} LP finished: status={}, objective={}, time={:.4f}s",
        problem.name, status, result.fun, solve_time,
    )

    return SolveResult(
        status=status,
        objective=float(result.fun) if result.status == 0 else float('nan'),
        x=result.x if result.x is not None else np.zeros(n),
        iterations=int(getattr(result, 'nit', 0) or 0),
        solve_time=solve_time,
        problem_name=problem.name,
        message=str(result.message),
    )


def solve_or_raise(problem: LPProblem, params: Optional[Dict[str, Any]] = None) -> SolveResult:
    """
    Solve an LP and require an optimal solution.

    Raises:
        InfeasibleError: No feasible point exists
        UnboundedError: Objective is unbounded below
        NumericalError: Iteration/time limit hit or numerical failure
    """
    result = solve(problem, params)
    if result.status.is_successful:
        return result

    error_cls = _ERROR_MAP.get(result.status, NumericalError)
    raise error_cls(
        f"{error_cls.default_message}: {result.message}",
        problem=problem.name,
        status=str(result.status),
    )


__all__ = ["solve", "solve_or_raise", "DEFAULT_TOLERANCE"]
