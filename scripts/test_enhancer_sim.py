#!/usr/bin/env python3
"""
Tests for EnhancerSimulator: injectable RNG, convergence, round budget,
and the statistical behaviour of single attempts.
"""

import os
import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import numpy as np
from scipy.stats import chisquare

from data_structures import EnhanceResult, default_params
from rates import generate_rates
from transitions import roll_outcome
from enhancer_sim import EnhancerActor, EnhancerSimulator, SimulationNotConverged
from test_rates import small_params


def test_simulator_rng():
    """Default RNG is a numpy Generator; an injected one is used as-is."""
    sim1 = EnhancerSimulator(small_params(), actor_count=3)
    assert isinstance(sim1.rng, np.random.Generator), "rng should be a Generator"

    rng = np.random.default_rng(42)
    sim2 = EnhancerSimulator(small_params(), actor_count=3, rng=rng)
    assert sim2.rng is rng, "Injected RNG not used"
    print("✓ Default and injected RNGs behave")


def test_same_seed_same_histories():
    res_a = EnhancerSimulator(default_params(), actor_count=50, rng=np.random.default_rng(123)).run()
    res_b = EnhancerSimulator(default_params(), actor_count=50, rng=np.random.default_rng(123)).run()
    assert res_a.rounds == res_b.rounds
    assert [a.history for a in res_a.actors] == [b.history for b in res_b.actors]
    print(f"✓ Same seed reproduces all histories ({res_a.rounds} rounds)")


def test_single_actor_converges():
    sim = EnhancerSimulator(small_params(), actor_count=1, rng=np.random.default_rng(7))
    result = sim.run()
    actor = result.actors[0]

    assert actor.level == 2
    assert len(actor.history) == 3
    assert actor.history[0] == 0
    assert actor.history[1] < actor.history[2]
    # one attempt per round until done
    assert result.rounds == actor.attempt_count == actor.history[-1]
    assert sim.rounds == result.rounds
    print(f"✓ Single actor converges after {result.rounds} rounds, history {actor.history}")


def test_population_histories_complete():
    params = default_params()
    result = EnhancerSimulator(params, actor_count=200, rng=np.random.default_rng(1)).run()
    assert len(result.actors) == 200
    for actor in result.actors:
        assert actor.is_maxed
        assert len(actor.history) == params.max_level + 1
        assert actor.history[0] == 0
        assert all(a < b for a, b in zip(actor.history, actor.history[1:]))
        assert actor.attempt_count == actor.history[-1], "Attempts must stop once max level is reached"
    assert result.rounds == max(a.attempt_count for a in result.actors)
    assert sorted(result.distributions) == list(range(params.max_level + 1))
    assert len(result.points) == 200 * (params.max_level + 1)
    print(f"✓ 200 actors converged in {result.rounds} rounds with full histories")


def test_maxed_actor_draws_nothing():
    rng = np.random.default_rng(5)
    actor = EnhancerActor(generate_rates(small_params()))
    while not actor.advance(rng):
        pass
    attempts = actor.attempt_count
    state = rng.bit_generator.state
    for _ in range(10):
        assert actor.advance(rng) is True
    assert rng.bit_generator.state == state, "Maxed actor consumed randomness"
    assert actor.attempt_count == attempts
    print("✓ Maxed actor short-circuits without drawing samples")


def test_round_budget_reports_non_convergence():
    sim = EnhancerSimulator(default_params(), actor_count=10, rng=np.random.default_rng(0))
    try:
        sim.run(max_rounds=1)
        assert False, "Expected SimulationNotConverged"
    except SimulationNotConverged as e:
        assert e.rounds == 1
        assert e.unfinished == 10
    print("✓ Caller round budget surfaces non-convergence")

    # zero upgrade everywhere can never converge
    stuck = small_params().replace(max_upgrade_rate=0.0, min_upgrade_rate=0.0)
    sim = EnhancerSimulator(stuck, actor_count=4, rng=np.random.default_rng(0))
    try:
        sim.run(max_rounds=50)
        assert False, "Expected SimulationNotConverged"
    except SimulationNotConverged as e:
        assert e.rounds == 50 and e.unfinished == 4
    print("✓ Stuck parameter set runs until the budget and reports")


def test_degenerate_populations():
    result = EnhancerSimulator(small_params(), actor_count=0).run()
    assert result.actors == [] and result.distributions == {} and result.points == []

    result = EnhancerSimulator(small_params().replace(max_level=0), actor_count=3).run()
    assert all(a.history == [0] and a.attempt_count == 0 for a in result.actors)

    try:
        EnhancerSimulator(small_params(), actor_count=-1)
        assert False, "Expected ValueError"
    except ValueError:
        pass
    print("✓ Empty population and zero max level converge immediately")


def test_rerun_starts_fresh():
    sim = EnhancerSimulator(small_params(), actor_count=5, rng=np.random.default_rng(11))
    first = sim.run()
    second = sim.run()
    assert first.actors is not second.actors
    assert all(a.history[0] == 0 and a.is_maxed for a in second.actors)
    print("✓ run() rebuilds the population each time")


def test_outcome_frequencies_match_rates():
    """Chi-square goodness of fit of rolled outcomes against the level-1 rates."""
    rate = generate_rates(small_params())[1]
    rng = np.random.default_rng(2024)
    n = 20000
    order = [EnhanceResult.HALVE, EnhanceResult.DOWNGRADE, EnhanceResult.UPGRADE]
    counts = dict.fromkeys(EnhanceResult, 0)
    for _ in range(n):
        counts[roll_outcome(rate, float(rng.random()))] += 1

    assert counts[EnhanceResult.RESET] == 0
    assert counts[EnhanceResult.NO_CHANGE] == 0
    observed = np.array([counts[o] for o in order], dtype=float)
    expected = np.array([rate.halve, rate.downgrade, rate.upgrade]) * n
    stat, p_value = chisquare(observed, expected)
    print(f"  χ² = {stat:.2f}, p-value = {p_value:.4f}")
    assert p_value > 0.001, f"Outcome frequencies deviate from rates: {observed} vs {expected}"
    print("✓ Rolled outcome frequencies match the rate table")


if __name__ == "__main__":
    test_simulator_rng()
    test_same_seed_same_histories()
    test_single_actor_converges()
    test_population_histories_complete()
    test_maxed_actor_draws_nothing()
    test_round_budget_reports_non_convergence()
    test_degenerate_populations()
    test_rerun_starts_fresh()
    test_outcome_frequencies_match_rates()
    print("✓ All simulator tests passed")
