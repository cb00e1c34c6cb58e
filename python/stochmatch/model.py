"""
stochmatch LP Model
===================

Immutable matrix form of a linear program:

    minimize    c'x
    subject to  A_ub x <= b_ub
                A_eq x  = b_eq
                lb <= x <= ub

Every LP in the package (stochastic, deterministic, recourse) is built
fresh as an ``LPProblem`` and handed to :func:`stochmatch.solver.solve`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import numpy as np
from scipy import sparse

from .exceptions import DimensionError, InvalidInputError
from .utils.validation import validate_problem


def _frozen_array(values: Any) -> np.ndarray:
    arr = np.array(values, dtype=np.float64).ravel()
    arr.setflags(write=False)
    return arr


def _frozen_matrix(values: Any, n: int) -> Optional[sparse.csr_matrix]:
    if values is None:
        return None
    if sparse.issparse(values):
        return sparse.csr_matrix(values, dtype=np.float64)
    dense = np.asarray(values, dtype=np.float64)
    if dense.ndim == 1:
        dense = dense.reshape(1, -1)
    if dense.size == 0:
        return sparse.csr_matrix((0, n))
    return sparse.csr_matrix(dense)


@dataclass(frozen=True, eq=False)
class LPProblem:
    """
    Linear program in matrix form.

    Args:
        name: Identifier used in logs and error messages
        c: Objective vector (n,)
        A_ub: Inequality matrix (m_ub, n) or None
        b_ub: Inequality RHS (m_ub,) or None
        A_eq: Equality matrix (m_eq, n) or None
        b_eq: Equality RHS (m_eq,) or None
        lb: Lower bounds (default: 0)
        ub: Upper bounds (default: +inf)

    Raises:
        DimensionError: If shapes are inconsistent
        InvalidInputError: If data contains NaN or lb > ub

    Example:
        >>> problem = LPProblem(
        ...     name="toy",
        ...     c=np.array([-1.0, -1.0]),
        ...     A_ub=np.array([[1.0, 2.0], [3.0, 1.0]]),
        ...     b_ub=np.array([10.0, 15.0]),
        ... )
    """

    name: str
    c: np.ndarray
    A_ub: Optional[sparse.csr_matrix] = None
    b_ub: Optional[np.ndarray] = None
    A_eq: Optional[sparse.csr_matrix] = None
    b_eq: Optional[np.ndarray] = None
    lb: Optional[np.ndarray] = None
    ub: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        c = _frozen_array(self.c)
        n = len(c)
        lb = 0.0 if self.lb is None else self.lb
        ub = np.inf if self.ub is None else self.ub
        lb = np.full(n, lb) if np.ndim(lb) == 0 else lb
        ub = np.full(n, ub) if np.ndim(ub) == 0 else ub

        fields = {
            "c": c,
            "A_ub": _frozen_matrix(self.A_ub, n),
            "b_ub": None if self.b_ub is None else _frozen_array(self.b_ub),
            "A_eq": _frozen_matrix(self.A_eq, n),
            "b_eq": None if self.b_eq is None else _frozen_array(self.b_eq),
            "lb": _frozen_array(lb),
            "ub": _frozen_array(ub),
        }
        for key, value in fields.items():
            object.__setattr__(self, key, value)

        if n == 0:
            raise InvalidInputError(f"{self.name}: objective vector is empty")
        bounds_aligned = len(fields["lb"]) == n and len(fields["ub"]) == n
        if bounds_aligned and np.any(fields["lb"] > fields["ub"]):
            raise InvalidInputError(f"{self.name}: lb exceeds ub for at least one variable")

        ok, message = validate_problem(
            fields["c"], fields["A_ub"], fields["b_ub"],
            fields["A_eq"], fields["b_eq"], fields["lb"], fields["ub"],
        )
        if not ok:
            if "NaN" in message:
                raise InvalidInputError(f"{self.name}: {message}")
            raise DimensionError(f"{self.name}: {message}")

    @property
    def n_vars(self) -> int:
        """Number of decision variables."""
        return len(self.c)

    @property
    def n_ineq(self) -> int:
        """Number of inequality rows."""
        return 0 if self.A_ub is None else self.A_ub.shape[0]

    @property
    def n_eq(self) -> int:
        """Number of equality rows."""
        return 0 if self.A_eq is None else self.A_eq.shape[0]

    def objective(self, x: np.ndarray) -> float:
        """Evaluate c'x."""
        return float(self.c @ np.asarray(x, dtype=np.float64))

    def equality_residual(self, x: np.ndarray) -> np.ndarray:
        """Return A_eq x - b_eq (empty when there are no equality rows)."""
        if self.A_eq is None:
            return np.zeros(0)
        return self.A_eq @ np.asarray(x, dtype=np.float64) - self.b_eq

    def inequality_slack(self, x: np.ndarray) -> np.ndarray:
        """Return b_ub - A_ub x (non-negative when feasible)."""
        if self.A_ub is None:
            return np.zeros(0)
        return self.b_ub - self.A_ub @ np.asarray(x, dtype=np.float64)

    def __repr__(self) -> str:
        return (
            f"LPProblem(name={self.name!r}, n_vars={self.n_vars}, "
            f"n_ineq={self.n_ineq}, n_eq={self.n_eq})"
        )
