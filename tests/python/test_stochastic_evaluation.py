"""
Tests for the Value of the Stochastic Solution and sampling stability.
"""

import numpy as np
import pytest

from stochmatch.exceptions import NumericalError
from stochmatch.stochastic import (
    LiabilityMatchingLP,
    ScenarioSet,
    TwoStageResult,
    compute_vss,
    sampling_stability,
    value_of_stochastic_solution,
)


def _result(problem, x, objective, first_stage_cost=None):
    x = np.asarray(x, dtype=float)
    first = float(x.sum()) if first_stage_cost is None else first_stage_cost
    return TwoStageResult(
        problem=problem,
        x=x,
        surplus=np.zeros(1),
        shortfall=np.zeros(1),
        first_stage_cost=first,
        expected_recourse=objective - first,
        total_cost=objective,
        objective=objective,
        status="optimal",
        solve_time=0.0,
        n_scenarios=1,
    )


class TestComputeVSS:
    """Test VSS from the three solves."""

    def test_two_asset_example(self, two_asset_scenarios):
        """EEV = 9 + 100, RP = 107.5."""
        vss = compute_vss(LiabilityMatchingLP(budget=100.0), two_asset_scenarios)

        assert vss.stochastic_objective == pytest.approx(107.5, abs=1e-6)
        assert vss.deterministic_objective == pytest.approx(103.0, abs=1e-6)
        assert vss.recourse_objective == pytest.approx(9.0, abs=1e-6)
        assert vss.deterministic_first_stage_cost == pytest.approx(100.0, abs=1e-6)
        assert vss.expected_value_cost == pytest.approx(109.0, abs=1e-6)
        assert vss.vss == pytest.approx(1.5, abs=1e-6)

    def test_zero_variance_scenarios(self):
        """Identical scenarios leave nothing for the stochastic solution to gain."""
        returns = np.array([0.10, 0.05])
        scenarios = ScenarioSet.from_arrays([returns] * 4, [100.0] * 4)
        lp = LiabilityMatchingLP(budget=100.0)

        vss = compute_vss(lp, scenarios, expected_returns=returns, expected_liability=100.0)

        assert vss.vss == pytest.approx(0.0, abs=1e-6)

    def test_non_negative_on_generated_data(self, gbm_generator):
        lp = LiabilityMatchingLP(budget=17500.0)
        for n in (1, 5, 25):
            scenarios = gbm_generator.generate(n)
            vss = compute_vss(lp, scenarios, expected_liability=17500.0)
            assert vss.vss >= -1e-7 * max(1.0, abs(vss.stochastic_objective))

    def test_default_expectations_use_scenario_means(self, two_asset_scenarios):
        lp = LiabilityMatchingLP(budget=100.0)
        explicit = compute_vss(
            lp,
            two_asset_scenarios,
            expected_returns=two_asset_scenarios.mean_returns(),
            expected_liability=two_asset_scenarios.mean_liability(),
        )
        default = compute_vss(lp, two_asset_scenarios)

        assert default.vss == pytest.approx(explicit.vss)

    def test_summary(self, two_asset_scenarios):
        text = compute_vss(LiabilityMatchingLP(budget=100.0), two_asset_scenarios).summary()
        assert "VSS" in text
        assert "EEV" in text


class TestValueOfStochasticSolution:
    """Test the combination step on hand-made results."""

    def test_formula(self):
        stochastic = _result("stochastic", [50.0, 50.0], 104.0)
        deterministic = _result("deterministic", [100.0, 0.0], 101.0)
        recourse = _result("recourse", [100.0, 0.0], 6.0, first_stage_cost=100.0)

        vss = value_of_stochastic_solution(stochastic, deterministic, recourse)

        assert vss.expected_value_cost == pytest.approx(106.0)
        assert vss.vss == pytest.approx(2.0)

    def test_within_tolerance_reported(self):
        stochastic = _result("stochastic", [100.0], 100.0 + 1e-8)
        deterministic = _result("deterministic", [100.0], 100.0)
        recourse = _result("recourse", [100.0], 0.0, first_stage_cost=100.0)

        vss = value_of_stochastic_solution(stochastic, deterministic, recourse)
        assert vss.vss == pytest.approx(-1e-8, abs=1e-12)

    def test_negative_raises(self):
        stochastic = _result("stochastic", [100.0], 110.0)
        deterministic = _result("deterministic", [100.0], 100.0)
        recourse = _result("recourse", [100.0], 5.0, first_stage_cost=100.0)

        with pytest.raises(NumericalError) as excinfo:
            value_of_stochastic_solution(stochastic, deterministic, recourse)
        assert excinfo.value.problem == "vss"

    def test_recourse_must_use_deterministic_allocation(self):
        stochastic = _result("stochastic", [100.0], 100.0)
        deterministic = _result("deterministic", [100.0], 100.0)
        recourse = _result("recourse", [50.0], 5.0, first_stage_cost=50.0)

        with pytest.raises(ValueError, match="deterministic allocation"):
            value_of_stochastic_solution(stochastic, deterministic, recourse)


class TestSamplingStability:
    """Test replication of the stochastic solve."""

    def test_replications(self, gbm_generator):
        lp = LiabilityMatchingLP(budget=17500.0)
        result = sampling_stability(lp, gbm_generator, n_scenarios=5, n_replications=4)

        assert result.n_replications == 4
        assert result.objectives.shape == (4,)
        assert result.ci_lower <= result.mean <= result.ci_upper
        assert result.std == pytest.approx(np.std(result.objectives, ddof=1))
        assert "Replications" in result.summary()

    def test_first_replication_uses_generator_seed(self, gbm_generator):
        lp = LiabilityMatchingLP(budget=17500.0)
        result = sampling_stability(lp, gbm_generator, n_scenarios=5, n_replications=2)
        direct = lp.solve_stochastic(gbm_generator.generate(5))

        assert result.objectives[0] == direct.objective

    def test_reproducible(self, gbm_generator):
        lp = LiabilityMatchingLP(budget=17500.0)
        a = sampling_stability(lp, gbm_generator, n_scenarios=3, n_replications=3)
        b = sampling_stability(lp, gbm_generator, n_scenarios=3, n_replications=3)

        np.testing.assert_array_equal(a.objectives, b.objectives)

    def test_requires_two_replications(self, gbm_generator):
        with pytest.raises(ValueError, match="n_replications"):
            sampling_stability(LiabilityMatchingLP(budget=1.0), gbm_generator, 5, n_replications=1)
