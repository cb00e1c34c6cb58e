"""Input validation utilities."""

from typing import Any, Optional, Tuple

import numpy as np
from scipy import sparse


def _has_nan(values: Any) -> bool:
    if values is None:
        return False
    if sparse.issparse(values):
        return bool(np.any(np.isnan(values.data)))
    return bool(np.any(np.isnan(np.asarray(values, dtype=np.float64))))


def _check_system(name: str, A: Any, b: Optional[np.ndarray], n: int) -> Tuple[bool, str]:
    if A is None:
        if b is not None and len(b) > 0:
            return False, f"b_{name} given without A_{name}"
        return True, ""

    m, n_A = A.shape
    if n_A != n:
        return False, f"A_{name} has {n_A} columns but c has {n} elements"
    if b is None or len(b) != m:
        got = 0 if b is None else len(b)
        return False, f"A_{name} has {m} rows but b_{name} has {got} elements"
    if _has_nan(A):
        return False, f"A_{name} contains NaN values"
    if _has_nan(b):
        return False, f"b_{name} contains NaN values"
    return True, ""


def validate_problem(
    c: np.ndarray,
    A_ub: Any = None,
    b_ub: Optional[np.ndarray] = None,
    A_eq: Any = None,
    b_eq: Optional[np.ndarray] = None,
    lb: Optional[np.ndarray] = None,
    ub: Optional[np.ndarray] = None,
) -> Tuple[bool, str]:
    """
    Validate problem data.

    Returns:
        (is_valid, error_message) tuple
    """
    n = len(c)

    if n == 0:
        return False, "c is empty"

    if np.any(np.isnan(c)):
        return False, "c contains NaN values"

    for name, A, b in (("ub", A_ub, b_ub), ("eq", A_eq, b_eq)):
        ok, message = _check_system(name, A, b, n)
        if not ok:
            return False, message

    if lb is not None and len(lb) != n:
        return False, f"lb has {len(lb)} elements, expected {n}"

    if ub is not None and len(ub) != n:
        return False, f"ub has {len(ub)} elements, expected {n}"

    if lb is not None and ub is not None and np.any(np.asarray(lb) > np.asarray(ub)):
        return False, "lb exceeds ub for at least one variable"

    return True, ""
