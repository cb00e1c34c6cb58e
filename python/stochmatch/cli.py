"""Liability matching CLI - Run the full study on a price file.

Usage:
    stochmatch prices.csv
    python -m stochmatch prices.csv --scenarios 50 --seed 7

Examples:
    # Reproduce the 2014/2015 tuition study
    stochmatch price_data.csv

    # Larger scenario set, deterministic program on the scenario mean
    stochmatch price_data.csv --scenarios 200 --expected-value sample

    # Write the tracked portfolio values and check sampling stability
    stochmatch price_data.csv --output tracked.csv --stability 20
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from loguru import logger

from .config import (
    EXPECTED_VALUE_SOURCES,
    CalibrationConfig,
    LiabilityConfig,
    MatchingConfig,
    RecourseCosts,
    ScenarioConfig,
    TrackingConfig,
)
from .exceptions import StochMatchError
from .finance.panel import read_price_csv
from .pipeline import build_generator, run_matching
from .stochastic.evaluation import sampling_stability
from .stochastic.problem import LiabilityMatchingLP
from .utils.logger import setup_logger


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    defaults = MatchingConfig.default()

    parser = argparse.ArgumentParser(
        prog="stochmatch",
        description="Two-stage stochastic liability matching with VSS and out-of-sample tracking",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument("prices", help="CSV file with a Date column and one column per ticker")
    parser.add_argument("--date-column", default="Date", help="Name of the date column (default: Date)")

    window = parser.add_argument_group("windows")
    window.add_argument(
        "--calibration-start",
        default=str(defaults.calibration.start.date()),
        help="First calibration date (default: %(default)s)",
    )
    window.add_argument(
        "--calibration-end",
        help="Last calibration date (default: one year after the start)",
    )
    window.add_argument(
        "--periods-per-year",
        type=float,
        default=defaults.calibration.annualization_factor,
        help="Annualization factor of the price data (default: %(default)g)",
    )
    window.add_argument("--tracking-start", help="First tracking date (default: day after calibration)")
    window.add_argument("--tracking-end", help="Last tracking date (default: one year after its start)")
    window.add_argument("--no-tracking", action="store_true", help="Skip out-of-sample tracking")

    model = parser.add_argument_group("model")
    model.add_argument(
        "--scenarios", "-n",
        type=int,
        default=defaults.scenarios.n_scenarios,
        help="Number of scenarios (default: %(default)s)",
    )
    model.add_argument("--seed", type=int, default=defaults.scenarios.seed, help="Root seed (default: %(default)s)")
    model.add_argument("--dt", type=float, default=defaults.scenarios.dt, help="GBM time step in years")
    model.add_argument("--budget", type=float, default=defaults.budget, help="Budget (default: %(default)g)")
    model.add_argument("--liability", type=float, default=defaults.liability.baseline, help="Liability baseline")
    model.add_argument("--noise-mean", type=float, default=defaults.liability.noise_mean, help="Liability noise mean")
    model.add_argument("--noise-std", type=float, default=defaults.liability.noise_std, help="Liability noise std")
    model.add_argument(
        "--allocation-cost", type=float, default=defaults.costs.allocation, help="Cost per unit invested"
    )
    model.add_argument("--surplus-cost", type=float, default=defaults.costs.surplus, help="Surplus coefficient")
    model.add_argument("--shortfall-cost", type=float, default=defaults.costs.shortfall, help="Shortfall coefficient")
    model.add_argument(
        "--expected-value",
        choices=EXPECTED_VALUE_SOURCES,
        default=defaults.expected_value_source,
        help="Returns of the deterministic program (default: %(default)s)",
    )
    model.add_argument(
        "--tolerance", type=float, default=defaults.solver_tolerance, help="LP feasibility tolerance"
    )
    model.add_argument("--parallel", action="store_true", help="Solve the stochastic program concurrently")

    output = parser.add_argument_group("output")
    output.add_argument("--output", "-o", help="Write tracked portfolio values to this CSV file")
    output.add_argument(
        "--stability",
        type=int,
        default=0,
        metavar="R",
        help="Re-solve over R independent seeds and report objective dispersion",
    )
    output.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: %(default)s)",
    )
    output.add_argument("--log-file", help="Also log to this file at DEBUG level")

    return parser


def config_from_args(parsed: argparse.Namespace) -> MatchingConfig:
    """Build a MatchingConfig from parsed arguments."""
    if parsed.calibration_end:
        calibration = CalibrationConfig(
            parsed.calibration_start, parsed.calibration_end, parsed.periods_per_year
        )
    else:
        calibration = CalibrationConfig.one_year(parsed.calibration_start, parsed.periods_per_year)

    tracking = None
    if not parsed.no_tracking:
        tracking = TrackingConfig.following(calibration)
        if parsed.tracking_start or parsed.tracking_end:
            tracking = TrackingConfig(
                parsed.tracking_start or tracking.start,
                parsed.tracking_end or tracking.end,
            )

    return MatchingConfig(
        calibration=calibration,
        scenarios=ScenarioConfig(n_scenarios=parsed.scenarios, seed=parsed.seed, dt=parsed.dt),
        liability=LiabilityConfig(
            baseline=parsed.liability,
            noise_mean=parsed.noise_mean,
            noise_std=parsed.noise_std,
        ),
        costs=RecourseCosts(
            allocation=parsed.allocation_cost,
            surplus=parsed.surplus_cost,
            shortfall=parsed.shortfall_cost,
        ),
        budget=parsed.budget,
        tracking=tracking,
        expected_value_source=parsed.expected_value,
        solver_tolerance=parsed.tolerance,
        parallel=parsed.parallel,
    )


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point.

    Args:
        args: Command line arguments

    Returns:
        Exit code (0 for success)
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    setup_logger(parsed.log_level, parsed.log_file)

    try:
        config = config_from_args(parsed)
        panel = read_price_csv(parsed.prices, date_column=parsed.date_column)
        result = run_matching(panel, config)
    except (OSError, StochMatchError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(result.summary())

    if parsed.output and result.tracker is not None:
        result.tracker.to_series().to_csv(parsed.output, index_label="Date")
        logger.info("Tracked values written to {}", parsed.output)

    if parsed.stability:
        lp = LiabilityMatchingLP(config.budget, config.costs, config.solver_params)
        generator = build_generator(result.statistics, result.initial_prices, config)
        try:
            stability = sampling_stability(
                lp, generator, config.scenarios.n_scenarios, n_replications=parsed.stability
            )
        except (ValueError, StochMatchError) as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
        print()
        print(stability.summary())

    return 0


if __name__ == "__main__":
    sys.exit(main())
