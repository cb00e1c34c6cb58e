"""
Finance Utility Functions
=========================

Return statistics and correlation helpers used by calibration and
scenario generation.
"""

from __future__ import annotations

from typing import Union

import numpy as np
from scipy import linalg, stats

from ..exceptions import DegenerateCovarianceError

# Type aliases
ArrayLike = Union[np.ndarray, list]


def compute_returns(
    prices: ArrayLike,
    method: str = "simple",
    periods: int = 1,
) -> np.ndarray:
    """
    Compute returns from price data.

    Args:
        prices: Price series (T,) or matrix (T, N) for N assets
        method: 'simple' for arithmetic returns, 'log' for log returns
        periods: Number of periods for return calculation (default: 1)

    Returns:
        Returns array with shape (T-periods, N)

    Example:
        >>> prices = np.array([100, 102, 101, 105])
        >>> returns = compute_returns(prices)
        >>> print(returns)  # [0.02, -0.0098, 0.0396]
    """
    prices = np.asarray(prices, dtype=np.float64)

    if method == "simple":
        returns = prices[periods:] / prices[:-periods] - 1
    elif method == "log":
        returns = np.log(prices[periods:] / prices[:-periods])
    else:
        raise ValueError(f"method must be 'simple' or 'log', got '{method}'")

    return returns


def compute_covariance(returns: ArrayLike) -> np.ndarray:
    """
    Sample covariance (ddof=1) of a return matrix.

    Args:
        returns: Return matrix (T, N) for N assets

    Returns:
        Symmetric covariance matrix (N, N)
    """
    returns = np.asarray(returns, dtype=np.float64)

    if returns.ndim == 1:
        returns = returns.reshape(-1, 1)

    cov = np.atleast_2d(np.cov(returns, rowvar=False, ddof=1))

    # Ensure symmetric
    return (cov + cov.T) / 2


def geometric_mean_return(returns: ArrayLike) -> np.ndarray:
    """
    Per-period geometric mean return, ``gmean(1 + r) - 1`` per column.

    Example:
        >>> geometric_mean_return(np.array([[0.10], [-0.10]]))
        array([-0.00501256])
    """
    returns = np.asarray(returns, dtype=np.float64)

    if returns.ndim == 1:
        returns = returns.reshape(-1, 1)

    return stats.gmean(1.0 + returns, axis=0) - 1.0


def annualize_mean_return(
    period_return: Union[float, np.ndarray],
    periods_per_year: float = 52,
) -> Union[float, np.ndarray]:
    """
    Scale a per-period mean return to a yearly rate (linear scaling).

    Args:
        period_return: Mean return per period
        periods_per_year: Periods per year (52 for weekly data)
    """
    return periods_per_year * period_return


def annualize_volatility(
    volatility: float,
    periods_per_year: float = 52,
) -> float:
    """
    Annualize volatility (standard deviation).

    Args:
        volatility: Period volatility
        periods_per_year: Periods per year (52 for weekly data)

    Returns:
        Annualized volatility
    """
    return volatility * np.sqrt(periods_per_year)


def correlation_from_covariance(cov: ArrayLike) -> np.ndarray:
    """
    Normalize a covariance matrix by the asset standard deviations.

    Raises:
        DegenerateCovarianceError: If the matrix is not square and
            symmetric or an asset has zero or non-finite variance
    """
    cov = np.atleast_2d(np.asarray(cov, dtype=np.float64))

    if cov.ndim != 2 or cov.shape[0] != cov.shape[1]:
        raise DegenerateCovarianceError(f"covariance must be square, got shape {cov.shape}")
    if not np.all(np.isfinite(cov)):
        raise DegenerateCovarianceError("covariance contains non-finite values")
    if not np.allclose(cov, cov.T, rtol=1e-10, atol=1e-12):
        raise DegenerateCovarianceError("covariance is not symmetric")

    variances = np.diag(cov)
    if np.any(variances <= 0):
        zero = np.flatnonzero(variances <= 0).tolist()
        raise DegenerateCovarianceError(f"assets {zero} have zero variance")

    std = np.sqrt(variances)
    rho = cov / np.outer(std, std)
    np.fill_diagonal(rho, 1.0)
    return rho


def cholesky_lower(matrix: ArrayLike) -> np.ndarray:
    """
    Lower Cholesky factor L with ``L @ L.T == matrix``.

    The matrix is never regularized: a matrix that is not symmetric
    positive definite is reported as degenerate.

    Raises:
        DegenerateCovarianceError: If the factorization fails
    """
    matrix = np.atleast_2d(np.asarray(matrix, dtype=np.float64))

    if matrix.shape[0] != matrix.shape[1]:
        raise DegenerateCovarianceError(f"matrix must be square, got shape {matrix.shape}")
    if not np.all(np.isfinite(matrix)):
        raise DegenerateCovarianceError("matrix contains non-finite values")
    if not np.allclose(matrix, matrix.T, rtol=1e-10, atol=1e-12):
        raise DegenerateCovarianceError("matrix is not symmetric")

    try:
        return linalg.cholesky(matrix, lower=True)
    except linalg.LinAlgError as exc:
        raise DegenerateCovarianceError(
            f"correlation matrix is not positive definite: {exc}"
        ) from exc


def is_positive_definite(matrix: np.ndarray) -> bool:
    """Check if matrix is symmetric positive definite."""
    try:
        cholesky_lower(matrix)
    except DegenerateCovarianceError:
        return False
    return True
