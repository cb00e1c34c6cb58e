"""
stochmatch: Two-Stage Stochastic Liability Matching
===================================================

stochmatch chooses a portfolio today so that its value at the horizon
meets an uncertain liability (e.g. a tuition bill), penalizing shortfall
more than it rewards surplus. It calibrates asset returns on history,
samples correlated GBM scenarios, solves the extensive-form LP with
HiGHS, measures the Value of the Stochastic Solution and tracks the
chosen allocation out of sample.

Quick Start
-----------
>>> import stochmatch
>>> panel = stochmatch.read_price_csv("price_data.csv")
>>> result = stochmatch.run_matching(panel, stochmatch.MatchingConfig.default())
>>> print(result.stochastic.x, result.vss.vss)

Logging is disabled by default; enable it with

>>> from stochmatch.utils import setup_logger
>>> setup_logger("INFO")
"""

__version__ = "0.1.0"
__author__ = "stochmatch Contributors"

from loguru import logger

from .config import (
    CalibrationConfig,
    LiabilityConfig,
    MatchingConfig,
    RecourseCosts,
    ScenarioConfig,
    TrackingConfig,
)
from .exceptions import (
    ConfigurationError,
    DegenerateCovarianceError,
    DimensionError,
    InfeasibleError,
    InvalidInputError,
    NumericalError,
    SolverError,
    StochMatchError,
    UnboundedError,
)
from .finance import AssetPanel, PortfolioTracker, ReturnStatistics, calibrate, read_price_csv
from .model import LPProblem
from .pipeline import MatchingResult, run_matching
from .result import SolveResult, Status
from .solver import solve
from .stochastic import (
    LiabilityMatchingLP,
    Scenario,
    ScenarioGenerator,
    ScenarioSet,
    TwoStageResult,
    VSSResult,
    compute_vss,
)

logger.disable("stochmatch")

__all__ = [
    # Version
    "__version__",
    # Configuration
    "CalibrationConfig",
    "ScenarioConfig",
    "LiabilityConfig",
    "RecourseCosts",
    "TrackingConfig",
    "MatchingConfig",
    # Data and calibration
    "AssetPanel",
    "read_price_csv",
    "ReturnStatistics",
    "calibrate",
    "PortfolioTracker",
    # Scenarios and programs
    "Scenario",
    "ScenarioSet",
    "ScenarioGenerator",
    "LiabilityMatchingLP",
    "TwoStageResult",
    "VSSResult",
    "compute_vss",
    # Solving
    "LPProblem",
    "solve",
    "SolveResult",
    "Status",
    # Pipeline
    "run_matching",
    "MatchingResult",
    # Exceptions
    "StochMatchError",
    "ConfigurationError",
    "DegenerateCovarianceError",
    "SolverError",
    "InfeasibleError",
    "UnboundedError",
    "NumericalError",
    "DimensionError",
    "InvalidInputError",
]


def info() -> str:
    """Return information about the stochmatch installation."""
    import platform

    import numpy
    import scipy

    lines = [
        f"stochmatch version: {__version__}",
        f"Python version: {platform.python_version()}",
        f"Platform: {platform.platform()}",
        f"NumPy version: {numpy.__version__}",
        f"SciPy version: {scipy.__version__} (HiGHS LP backend)",
    ]
    return "\n".join(lines)
