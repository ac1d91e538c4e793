import random

import pytest

from kestrelpay.swarm import Specialization, create_population
from kestrelpay.swarm.scorer import draw_weight
from conftest import ScriptedRandom


@pytest.mark.parametrize("count", [0, 1, 6, 25, 500])
def test_population_size_and_weight_bounds(count):
    population = create_population(count, random.Random(count))
    assert len(population) == count
    assert [s.id for s in population] == list(range(count))
    assert all(0.2 < s.weight <= 1.0 for s in population)
    assert all(s.last_vote is None for s in population)


@pytest.mark.parametrize(
    "draw, expected",
    [
        # Testcase 1: lowest draw gives the maximum weight
        (0.0, 1.0),
        # Testcase 2: midpoint
        (0.5, 0.6),
    ],
)
def test_draw_weight(draw, expected):
    assert draw_weight(ScriptedRandom([draw])) == pytest.approx(expected)


def test_draw_weight_never_reaches_lower_bound():
    assert draw_weight(ScriptedRandom([0.9999999])) > 0.2


def test_specializations_are_assigned_by_choice():
    # choice() consumes one draw, weight the next
    rng = ScriptedRandom([0.0, 0.1, 0.99, 0.1])
    population = create_population(2, rng)
    assert population[0].specialization is Specialization.PRICE_ANALYSIS
    assert population[1].specialization is Specialization.EXECUTION_TIMING


def test_large_population_covers_every_specialization():
    population = create_population(600, random.Random(7))
    assert {s.specialization for s in population} == set(Specialization)


def test_negative_population_rejected():
    with pytest.raises(ValueError):
        create_population(-1)
