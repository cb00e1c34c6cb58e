"""
Tests for scenario containers and GBM scenario generation.

Tests covering:
1. Scenario and ScenarioSet validation
2. Correlated GBM price draws
3. Reproducible per-scenario substreams
"""

import numpy as np
import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from stochmatch.exceptions import DegenerateCovarianceError


class TestScenario:
    """Test Scenario class."""

    def test_basic_creation(self):
        """Create basic scenario."""
        from stochmatch.stochastic import Scenario

        s = Scenario(index=3, returns=[0.10, 0.05], liability=120.0, probability=0.5)

        assert s.n_assets == 2
        assert s.name == "scenario_3"
        np.testing.assert_allclose(s.gross_returns, [1.10, 1.05])
        assert s.payoff(np.array([100.0, 0.0])) == pytest.approx(110.0)

    def test_invalid_probability(self):
        """Error on invalid probability."""
        from stochmatch.stochastic import Scenario

        with pytest.raises(ValueError, match="Probability"):
            Scenario(index=0, returns=[0.1], liability=1.0, probability=1.5)

    def test_total_loss_rejected(self):
        from stochmatch.stochastic import Scenario

        with pytest.raises(ValueError, match="-100%"):
            Scenario(index=0, returns=[-1.0], liability=1.0, probability=1.0)

    def test_non_finite(self):
        from stochmatch.stochastic import Scenario

        with pytest.raises(ValueError, match="finite"):
            Scenario(index=0, returns=[np.nan], liability=1.0, probability=1.0)


class TestScenarioSet:
    """Test ScenarioSet class."""

    def test_from_arrays(self, two_asset_scenarios):
        scenarios = two_asset_scenarios

        assert len(scenarios) == 2
        assert scenarios.n_assets == 2
        np.testing.assert_array_equal(scenarios.probabilities, [0.5, 0.5])
        np.testing.assert_allclose(scenarios.returns, [[0.10, 0.05], [-0.05, 0.02]])
        np.testing.assert_array_equal(scenarios.liabilities, [120.0, 90.0])

    def test_means(self, two_asset_scenarios):
        np.testing.assert_allclose(two_asset_scenarios.mean_returns(), [0.025, 0.035])
        assert two_asset_scenarios.mean_liability() == pytest.approx(105.0)

    def test_probabilities_sum(self, two_asset_scenarios):
        assert two_asset_scenarios.total_probability == 1.0
        assert two_asset_scenarios.validate()

    def test_validate_probability_error(self):
        """Error when probabilities don't sum to 1."""
        from stochmatch.stochastic import Scenario, ScenarioSet

        with pytest.raises(ValueError, match="Probabilities"):
            ScenarioSet([
                Scenario(index=0, returns=[0.1], liability=1.0, probability=0.3),
                Scenario(index=1, returns=[0.2], liability=1.0, probability=0.3),
            ])

    def test_empty(self):
        from stochmatch.stochastic import ScenarioSet

        with pytest.raises(ValueError, match="No scenarios"):
            ScenarioSet([])

    def test_inconsistent_assets(self):
        from stochmatch.stochastic import Scenario, ScenarioSet

        with pytest.raises(ValueError, match="assets"):
            ScenarioSet([
                Scenario(index=0, returns=[0.1], liability=1.0, probability=0.5),
                Scenario(index=1, returns=[0.1, 0.2], liability=1.0, probability=0.5),
            ])

    def test_mismatched_arrays(self):
        from stochmatch.stochastic import ScenarioSet

        with pytest.raises(ValueError):
            ScenarioSet.from_arrays(returns=[[0.1], [0.2]], liabilities=[1.0])

    def test_price_grid_requires_prices(self, two_asset_scenarios):
        with pytest.raises(ValueError, match="prices"):
            two_asset_scenarios.price_grid

    def test_iteration(self, two_asset_scenarios):
        indices = [s.index for s in two_asset_scenarios]
        assert indices == [0, 1]
        assert two_asset_scenarios[1].liability == 90.0

    @given(st.integers(min_value=1, max_value=500))
    def test_uniform_probabilities_sum_to_one(self, n):
        from stochmatch.stochastic import ScenarioSet

        scenarios = ScenarioSet.from_arrays(np.zeros((n, 1)), np.ones(n))

        assert scenarios.total_probability == pytest.approx(1.0, abs=1e-15)
        assert np.all(scenarios.probabilities == 1.0 / n)


class TestGeometricBrownianMotion:
    """Test the correlated GBM price model."""

    def test_zero_shock_is_drift(self, gbm_generator):
        model = gbm_generator.asset_model
        prices = model.terminal_prices(np.zeros(2))

        drift = (model.mu - 0.5 * np.diag(model.cov)) * model.dt
        np.testing.assert_allclose(prices, model.initial_prices * np.exp(drift))

    def test_cholesky_of_correlation(self, gbm_generator):
        model = gbm_generator.asset_model
        rho = model.chol @ model.chol.T

        np.testing.assert_allclose(np.diag(rho), [1.0, 1.0])
        assert rho[0, 1] == pytest.approx(0.01 / (0.2 * 0.3))

    def test_degenerate_correlation(self):
        from stochmatch.stochastic import GeometricBrownianMotion

        cov = np.array([
            [1.0, 1.5, 1.5],
            [1.5, 1.0, 1.5],
            [1.5, 1.5, 1.0],
        ])
        with pytest.raises(DegenerateCovarianceError):
            GeometricBrownianMotion(mu=np.zeros(3), cov=cov, initial_prices=np.ones(3), dt=1.0)

    def test_shape_mismatch(self):
        from stochmatch.stochastic import GeometricBrownianMotion

        with pytest.raises(ValueError):
            GeometricBrownianMotion(mu=np.zeros(2), cov=np.eye(3), initial_prices=np.ones(2), dt=1.0)

    def test_sample_positive(self, gbm_generator):
        rng = np.random.default_rng(0)
        for _ in range(50):
            assert np.all(gbm_generator.asset_model.sample(rng) > 0)

    def test_sample_correlation(self):
        """Log-price shocks reproduce the input correlation."""
        from stochmatch.stochastic import GeometricBrownianMotion

        cov = np.array([[0.04, 0.03], [0.03, 0.09]])
        model = GeometricBrownianMotion(
            mu=np.zeros(2), cov=cov, initial_prices=np.ones(2), dt=1.0
        )
        rng = np.random.default_rng(1)
        log_prices = np.log([model.sample(rng) for _ in range(20000)])

        assert np.corrcoef(log_prices.T)[0, 1] == pytest.approx(0.5, abs=0.03)
        np.testing.assert_allclose(log_prices.std(axis=0), [0.2, 0.3], rtol=0.05)


class TestScenarioGenerator:
    """Test scenario generation and reproducibility."""

    def test_generate(self, gbm_generator):
        scenarios = gbm_generator.generate(5)

        assert scenarios.n_scenarios == 5
        assert scenarios.n_assets == 2
        assert scenarios.total_probability == pytest.approx(1.0, abs=1e-15)
        assert scenarios.price_grid.shape == (2, 5)

    def test_returns_from_prices(self, gbm_generator):
        scenarios = gbm_generator.generate(4)
        p0 = gbm_generator.asset_model.initial_prices

        np.testing.assert_allclose(
            scenarios.returns, (scenarios.price_grid.T - p0) / p0
        )

    def test_same_seed_same_scenarios(self, gbm_generator):
        from stochmatch.stochastic import ScenarioGenerator

        twin = ScenarioGenerator(
            gbm_generator.asset_model, gbm_generator.liability_model, seed=1
        )
        a, b = gbm_generator.generate(6), twin.generate(6)

        np.testing.assert_array_equal(a.returns, b.returns)
        np.testing.assert_array_equal(a.liabilities, b.liabilities)

    def test_different_seed_different_scenarios(self, gbm_generator):
        from stochmatch.stochastic import ScenarioGenerator

        other = ScenarioGenerator(
            gbm_generator.asset_model, gbm_generator.liability_model, seed=2
        )
        assert not np.array_equal(
            gbm_generator.generate(3).liabilities, other.generate(3).liabilities
        )

    def test_draw_matches_generate(self, gbm_generator):
        """A scenario depends only on the seed and its index."""
        scenarios = gbm_generator.generate(5)

        for s in range(5):
            single = gbm_generator.draw(s, probability=0.2)
            np.testing.assert_array_equal(single.returns, scenarios[s].returns)
            assert single.liability == scenarios[s].liability

    def test_prefix_stable(self, gbm_generator):
        """Growing the scenario count keeps earlier scenarios unchanged."""
        small = gbm_generator.generate(3)
        large = gbm_generator.generate(7)

        np.testing.assert_array_equal(small.returns, large.returns[:3])
        np.testing.assert_array_equal(small.liabilities, large.liabilities[:3])

    def test_parallel_equals_sequential(self, gbm_generator):
        sequential = gbm_generator.generate(16)
        parallel = gbm_generator.generate(16, max_workers=4)

        np.testing.assert_array_equal(sequential.returns, parallel.returns)
        np.testing.assert_array_equal(sequential.liabilities, parallel.liabilities)

    def test_liability_distribution(self, gbm_generator):
        liabilities = gbm_generator.generate(4000).liabilities

        assert liabilities.mean() == pytest.approx(17500.0, abs=30.0)
        assert liabilities.std() == pytest.approx(200.0, rel=0.1)

    def test_invalid_count(self, gbm_generator):
        with pytest.raises(ValueError):
            gbm_generator.generate(0)

    @settings(
        max_examples=25,
        deadline=None,
        suppress_health_check=[HealthCheck.function_scoped_fixture],
    )
    @given(
        seed=st.integers(min_value=0, max_value=2**32 - 1),
        index=st.integers(min_value=0, max_value=1000),
    )
    def test_substream_deterministic(self, gbm_generator, seed, index):
        from stochmatch.stochastic import ScenarioGenerator

        generator = ScenarioGenerator(
            gbm_generator.asset_model, gbm_generator.liability_model, seed=seed
        )
        a, b = generator.draw(index), generator.draw(index)

        np.testing.assert_array_equal(a.prices, b.prices)
        assert a.liability == b.liability


class TestNormalDistribution:
    """Test the shifted normal liability model."""

    def test_mean(self):
        from stochmatch.stochastic import NormalDistribution

        assert NormalDistribution(mean_=500.0, std=200.0, shift=17000.0).mean() == 17500.0

    def test_zero_std_is_constant(self):
        from stochmatch.stochastic import NormalDistribution

        dist = NormalDistribution(mean_=500.0, std=0.0, shift=17000.0)
        assert dist.sample(np.random.default_rng(3)) == 17500.0

    def test_negative_std(self):
        from stochmatch.stochastic import NormalDistribution

        with pytest.raises(ValueError):
            NormalDistribution(mean_=0.0, std=-1.0)

    def test_gbm_mean(self, gbm_generator):
        model = gbm_generator.asset_model
        np.testing.assert_allclose(
            model.mean(), model.initial_prices * np.exp(model.mu * model.dt)
        )
