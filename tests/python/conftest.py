"""
pytest configuration and fixtures for stochmatch tests.
"""

import numpy as np
import pandas as pd
import pytest


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def simple_lp():
    """
    Simple LP problem for testing.

    minimize: -x - y
    subject to: x + 2y <= 10
                3x + y <= 15
                x, y >= 0

    Optimal: x=4, y=3, obj=-7
    """
    from stochmatch import LPProblem

    problem = LPProblem(
        name="simple",
        c=np.array([-1.0, -1.0]),
        A_ub=np.array([
            [1.0, 2.0],
            [3.0, 1.0],
        ]),
        b_ub=np.array([10.0, 15.0]),
    )

    return {
        "problem": problem,
        "expected_obj": -7.0,
        "expected_x": np.array([4.0, 3.0]),
    }


@pytest.fixture
def two_asset_scenarios():
    """
    Two assets, two equally likely scenarios.

    Gross returns [1.10, 1.05] and [0.95, 1.02]; liabilities 120 and 90.
    With budget 100 and costs (1, -1, 2) the stochastic optimum puts
    everything in asset 0: x = [100, 0], objective 107.5.
    """
    from stochmatch.stochastic import ScenarioSet

    return ScenarioSet.from_arrays(
        returns=[[0.10, 0.05], [-0.05, 0.02]],
        liabilities=[120.0, 90.0],
    )


@pytest.fixture
def gbm_generator():
    """Scenario generator with two correlated assets and the tuition liability."""
    from stochmatch.stochastic import (
        GeometricBrownianMotion,
        NormalDistribution,
        ScenarioGenerator,
    )

    asset_model = GeometricBrownianMotion(
        mu=np.array([0.10, 0.05]),
        cov=np.array([
            [0.04, 0.01],
            [0.01, 0.09],
        ]),
        initial_prices=np.array([100.0, 50.0]),
        dt=1.0 / 252.0,
    )
    liability_model = NormalDistribution(mean_=500.0, std=200.0, shift=17000.0)
    return ScenarioGenerator(asset_model, liability_model, seed=1)


@pytest.fixture
def price_frame():
    """
    Synthetic weekly prices for three assets, 2014-01-03 to 2015-12-25.

    Covers the default calibration (2014) and tracking (2015) windows.
    """
    rng = np.random.default_rng(42)
    dates = pd.date_range("2014-01-03", "2015-12-31", freq="W-FRI")

    corr = np.array([
        [1.0, 0.3, 0.1],
        [0.3, 1.0, 0.2],
        [0.1, 0.2, 1.0],
    ])
    vol = np.array([0.02, 0.025, 0.015])
    shocks = rng.standard_normal((len(dates), 3)) @ np.linalg.cholesky(corr).T
    returns = np.array([0.002, 0.0015, 0.001]) + vol * shocks
    returns[0] = 0.0

    prices = np.array([50.0, 80.0, 120.0]) * np.cumprod(1.0 + returns, axis=0)
    return pd.DataFrame(prices, index=dates, columns=["AAA", "BBB", "CCC"])


@pytest.fixture
def price_panel(price_frame):
    """AssetPanel over the synthetic prices."""
    from stochmatch.finance import AssetPanel

    return AssetPanel(price_frame)


@pytest.fixture
def price_csv(price_frame, tmp_path):
    """Synthetic prices written as a CSV file with a Date column."""
    path = tmp_path / "prices.csv"
    price_frame.to_csv(path, index_label="Date")
    return path


@pytest.fixture
def default_config():
    """Configuration of the 2014/2015 study."""
    from stochmatch.config import MatchingConfig

    return MatchingConfig.default()


# ============================================================================
# Markers
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture
def restore_logging():
    """Undo ``setup_logger``: default stderr sink, stochmatch disabled."""
    import sys

    from loguru import logger

    yield logger
    logger.remove()
    logger.add(sys.stderr)
    logger.disable("stochmatch")
