"""
Configuration
=============

Frozen dataclasses holding every option of a matching run. Nothing is
read from process-wide state: a ``MatchingConfig`` is built once and
passed explicitly through calibration, scenario generation, model
building and tracking.

Defaults reproduce the 2014/2015 tuition-matching study: weekly prices,
calibration over 2014, five scenarios seeded with 1, a 17,000 tuition
bill with N(500, 200) noise and a 17,500 budget.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

import pandas as pd

from .exceptions import ConfigurationError

EXPECTED_VALUE_SOURCES = ("drift", "sample")


def _timestamp(value: Any, name: str) -> pd.Timestamp:
    try:
        return pd.Timestamp(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} is not a valid date: {value!r}") from exc


def _require_finite(name: str, value: float) -> None:
    if not math.isfinite(value):
        raise ConfigurationError(f"{name} must be finite, got {value}")


def _one_year_after(start: pd.Timestamp) -> pd.Timestamp:
    return start + pd.DateOffset(months=12) - pd.Timedelta(days=2)


@dataclass(frozen=True)
class CalibrationConfig:
    """
    Calibration window and data frequency.

    Attributes:
        start: First period-end date included in the window
        end: Last period-end date included in the window
        annualization_factor: Periods per year (52 for weekly data)
    """

    start: pd.Timestamp
    end: pd.Timestamp
    annualization_factor: float = 52.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", _timestamp(self.start, "calibration start"))
        object.__setattr__(self, "end", _timestamp(self.end, "calibration end"))
        if self.start > self.end:
            raise ConfigurationError(
                f"calibration start {self.start.date()} is after end {self.end.date()}"
            )
        if not self.annualization_factor > 0:
            raise ConfigurationError(
                f"annualization_factor must be positive, got {self.annualization_factor}"
            )

    @classmethod
    def one_year(cls, start: Any, annualization_factor: float = 52.0) -> CalibrationConfig:
        """Window of twelve months (minus two days) starting at ``start``."""
        start = _timestamp(start, "calibration start")
        return cls(start, _one_year_after(start), annualization_factor)


@dataclass(frozen=True)
class ScenarioConfig:
    """
    Scenario sampling options.

    Attributes:
        n_scenarios: Number of scenarios S. Whether S is large enough for
            the sample average to be representative is an assumption of
            the run; see ``evaluation.sampling_stability``.
        seed: Root seed; scenario s draws from substream s
        dt: GBM time step in years
    """

    n_scenarios: int = 5
    seed: int = 1
    dt: float = 1.0 / 252.0

    def __post_init__(self) -> None:
        if int(self.n_scenarios) != self.n_scenarios or self.n_scenarios < 1:
            raise ConfigurationError(f"n_scenarios must be a positive integer, got {self.n_scenarios}")
        if int(self.seed) != self.seed or self.seed < 0:
            raise ConfigurationError(f"seed must be a non-negative integer, got {self.seed}")
        _require_finite("dt", self.dt)
        if self.dt <= 0:
            raise ConfigurationError(f"dt must be positive, got {self.dt}")


@dataclass(frozen=True)
class LiabilityConfig:
    """
    Liability model: L = baseline + Normal(noise_mean, noise_std).
    """

    baseline: float = 17000.0
    noise_mean: float = 500.0
    noise_std: float = 200.0

    def __post_init__(self) -> None:
        for name in ("baseline", "noise_mean", "noise_std"):
            _require_finite(name, getattr(self, name))
        if self.noise_std < 0:
            raise ConfigurationError(f"noise_std must be non-negative, got {self.noise_std}")

    @property
    def expected(self) -> float:
        """Expected liability."""
        return self.baseline + self.noise_mean


@dataclass(frozen=True)
class RecourseCosts:
    """
    Objective coefficients.

    Attributes:
        allocation: Cost per currency unit invested in the first stage
        surplus: Coefficient on surplus (negative = benefit)
        shortfall: Coefficient on shortfall (positive = penalty)
    """

    allocation: float = 1.0
    surplus: float = -1.0
    shortfall: float = 2.0

    def __post_init__(self) -> None:
        for name in ("allocation", "surplus", "shortfall"):
            _require_finite(name, getattr(self, name))


@dataclass(frozen=True)
class TrackingConfig:
    """Out-of-sample tracking window (inclusive)."""

    start: pd.Timestamp
    end: pd.Timestamp

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", _timestamp(self.start, "tracking start"))
        object.__setattr__(self, "end", _timestamp(self.end, "tracking end"))
        if self.start > self.end:
            raise ConfigurationError(
                f"tracking start {self.start.date()} is after end {self.end.date()}"
            )

    @classmethod
    def following(cls, calibration: CalibrationConfig) -> TrackingConfig:
        """One-year window starting the day after calibration ends."""
        start = calibration.end + pd.Timedelta(days=1)
        return cls(start, _one_year_after(start))


@dataclass(frozen=True)
class MatchingConfig:
    """
    Complete configuration of a liability-matching run.

    Attributes:
        calibration: Calibration window
        scenarios: Scenario sampling options
        liability: Liability distribution
        costs: Objective coefficients
        budget: Capital available for the first-stage allocation
        tracking: Out-of-sample window (None skips tracking)
        expected_value_source: Return vector used by the deterministic
            program: "drift" (calibrated mu) or "sample" (scenario mean)
        solver_tolerance: LP feasibility tolerance, also used for the
            VSS sign check
        parallel: Run the stochastic solve concurrently with the
            deterministic/recourse chain
    """

    calibration: CalibrationConfig
    scenarios: ScenarioConfig = field(default_factory=ScenarioConfig)
    liability: LiabilityConfig = field(default_factory=LiabilityConfig)
    costs: RecourseCosts = field(default_factory=RecourseCosts)
    budget: float = 17500.0
    tracking: Optional[TrackingConfig] = None
    expected_value_source: str = "drift"
    solver_tolerance: float = 1e-7
    parallel: bool = False

    def __post_init__(self) -> None:
        _require_finite("budget", self.budget)
        if self.budget <= 0:
            raise ConfigurationError(f"budget must be positive, got {self.budget}")
        if self.expected_value_source not in EXPECTED_VALUE_SOURCES:
            raise ConfigurationError(
                f"expected_value_source must be one of {EXPECTED_VALUE_SOURCES}, "
                f"got {self.expected_value_source!r}"
            )
        if not self.solver_tolerance > 0:
            raise ConfigurationError(
                f"solver_tolerance must be positive, got {self.solver_tolerance}"
            )

    @classmethod
    def default(cls) -> MatchingConfig:
        """Configuration of the 2014/2015 tuition study."""
        calibration = CalibrationConfig.one_year("2014-01-03")
        return cls(calibration=calibration, tracking=TrackingConfig.following(calibration))

    @property
    def solver_params(self) -> Dict[str, Any]:
        """Parameters passed to ``stochmatch.solver.solve``."""
        return {"tolerance": self.solver_tolerance}

    def with_updates(self, **changes: Any) -> MatchingConfig:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)
