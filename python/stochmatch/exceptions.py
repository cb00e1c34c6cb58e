"""
stochmatch Exception Classes
============================

Custom exceptions for stochmatch error handling.

Solver failures carry the name of the LP instance that failed
("stochastic", "deterministic" or "recourse") so callers can tell
which of the three solves went wrong.
"""

from typing import Optional


class StochMatchError(Exception):
    """Base exception for all stochmatch errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(StochMatchError):
    """
    Raised when configuration or input data cannot support the computation.

    Examples: calibration window with fewer than two observations,
    empty tracking window, non-positive budget.
    """

    def __init__(self, message: str) -> None:
        super().__init__(f"Configuration error: {message}")


class DegenerateCovarianceError(StochMatchError):
    """
    Raised when the correlation matrix does not admit a Cholesky factor.

    The calibration sample is degenerate; the matrix is never regularized.
    """

    def __init__(self, message: str = "Correlation matrix is not positive definite") -> None:
        super().__init__(message)


class SolverError(StochMatchError):
    """
    Base class for LP outcomes other than an optimal solution.

    Attributes:
        problem: Name of the LP instance that failed
        status: Solver status reported for it
    """

    default_message = "LP solve failed"

    def __init__(
        self,
        message: Optional[str] = None,
        problem: Optional[str] = None,
        status: Optional[str] = None,
    ) -> None:
        self.problem = problem
        self.status = status
        message = message or self.default_message
        if problem:
            message = f"{message} (problem: {problem})"
        super().__init__(message)


class InfeasibleError(SolverError):
    """
    Raised when the problem is primal infeasible.

    This means there is no x that satisfies all constraints.
    """

    default_message = "Problem is infeasible"


class UnboundedError(SolverError):
    """
    Raised when the problem is unbounded (dual infeasible).

    This means the objective can be made arbitrarily small (for minimization).
    """

    default_message = "Problem is unbounded"


class NumericalError(SolverError):
    """
    Raised when numerical issues are encountered.

    This covers solver non-convergence and results that violate a
    mathematical guarantee beyond tolerance.
    """

    default_message = "Numerical error encountered"


class DimensionError(StochMatchError):
    """
    Raised when matrix/vector dimensions are incompatible.
    """

    def __init__(self, message: str) -> None:
        super().__init__(f"Dimension mismatch: {message}")


class InvalidInputError(StochMatchError):
    """
    Raised when input data is invalid.

    Examples: NaN values, negative allocations, unknown options.
    """

    def __init__(self, message: str) -> None:
        super().__init__(f"Invalid input: {message}")
