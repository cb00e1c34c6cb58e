#!/usr/bin/env python3
"""
stochmatch Benchmark: extensive-form solve time against scenario count
"""

import time

import numpy as np

import stochmatch
from stochmatch.pipeline import solve_programs
from stochmatch.stochastic import (
    GeometricBrownianMotion,
    LiabilityMatchingLP,
    NormalDistribution,
    ScenarioGenerator,
)

print(f"stochmatch version: {stochmatch.__version__}")
print()


def make_generator(n_assets, seed=42):
    """Random calibrated market with n_assets correlated assets."""
    rng = np.random.default_rng(seed)

    factors = rng.standard_normal((n_assets, 3))
    cov = 0.02 * (factors @ factors.T) + np.diag(rng.uniform(0.01, 0.05, n_assets))
    mu = rng.uniform(0.02, 0.12, n_assets)
    p0 = rng.uniform(20.0, 200.0, n_assets)

    asset_model = GeometricBrownianMotion(mu=mu, cov=cov, initial_prices=p0, dt=1.0 / 252.0)
    liability_model = NormalDistribution(mean_=500.0, std=200.0, shift=17000.0)
    return ScenarioGenerator(asset_model, liability_model, seed=seed)


def benchmark_single(n_assets, n_scenarios):
    """Benchmark one scenario count."""
    generator = make_generator(n_assets)
    lp = LiabilityMatchingLP(budget=17500.0)

    start = time.perf_counter()
    scenarios = generator.generate(n_scenarios)
    gen_time = time.perf_counter() - start

    result = lp.solve_stochastic(scenarios)

    print(f"    S={n_scenarios:>6}: generate {gen_time*1000:8.1f} ms, "
          f"solve {result.solve_time*1000:8.1f} ms, obj={result.objective:12.4f}")
    return gen_time, result.solve_time


def benchmark_scaling():
    """Benchmark across scenario counts."""
    print("=" * 70)
    print("Scenario Scaling Benchmark")
    print("=" * 70)

    n_assets = 10
    counts = [5, 50, 500, 2000, 10000]

    all_results = []
    for n_scenarios in counts:
        all_results.append((n_scenarios, benchmark_single(n_assets, n_scenarios)))

    print("\n" + "=" * 70)
    print("Summary")
    print("=" * 70)
    print(f"{'S':>8} {'vars':>8} {'Generate (ms)':>14} {'Solve (ms)':>12}")
    print("-" * 70)

    for n_scenarios, (gen_time, solve_time) in all_results:
        n_vars = n_assets + 2 * n_scenarios
        print(f"{n_scenarios:>8} {n_vars:>8} {gen_time*1000:>14.1f} {solve_time*1000:>12.1f}")


def benchmark_parallel():
    """Sequential vs concurrent stochastic solve."""
    print("\n" + "=" * 70)
    print("Pipeline Schedule Benchmark")
    print("=" * 70)

    generator = make_generator(10)
    lp = LiabilityMatchingLP(budget=17500.0)

    for n_scenarios in [500, 5000]:
        scenarios = generator.generate(n_scenarios)
        expected = scenarios.mean_returns()

        timings = {}
        for parallel in (False, True):
            start = time.perf_counter()
            solve_programs(lp, scenarios, expected, 17500.0, parallel=parallel)
            timings[parallel] = time.perf_counter() - start

        print(f"\n  S={n_scenarios}")
        print(f"    sequential: {timings[False]*1000:8.1f} ms")
        print(f"    parallel:   {timings[True]*1000:8.1f} ms")
        print(f"    speedup:    {timings[False]/timings[True]:.2f}x")


if __name__ == "__main__":
    benchmark_scaling()
    benchmark_parallel()
