"""Tests for weighted parent selection."""

import logging
import random
from collections import Counter

import pytest

from grove.evolution.selection import (
    normalize_weights,
    pick_random_weighted,
    select_parents,
    stretch_weights,
    walk_cumulative,
    weights_normalized,
)
from grove.exceptions import SelectionError, ZeroWeightError
from grove.util.rng import MissingRNGError


class _FixedRoll(random.Random):
    """RNG whose rolls always return the same value."""

    def __init__(self, value):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


class TestNormalization:
    """Tests for weight normalization and stretching."""

    def test_normalize(self, make_population):
        population = make_population([1.0, 1.0, 2.0])
        normalize_weights(population.members)
        assert [m.weight for m in population] == pytest.approx([0.25, 0.25, 0.5])
        assert weights_normalized(population.members)

    @pytest.mark.parametrize(
        "weights",
        [
            [0.01] * 10,
            [1e-12, 3e-12, 7e-13],
            [1e9, 2.5e9, 1.0],
            [1e-8, 1e8],
            [0.9, 0.683772233983162, 0.5358411166387712, 0.01, 0.01],
        ],
    )
    def test_any_positive_vector_sums_to_one(self, make_population, weights):
        population = make_population(weights)
        normalize_weights(population.members)
        assert weights_normalized(population.members, tolerance=1e-9)
        assert all(m.weight > 0.0 for m in population)

    def test_random_positive_vectors_sum_to_one(self, make_population):
        rng = random.Random(2024)
        for _ in range(200):
            size = rng.randint(1, 30)
            scale = 10.0 ** rng.uniform(-10, 10)
            population = make_population([rng.uniform(1e-6, 1.0) * scale for _ in range(size)])
            normalize_weights(population.members)
            assert weights_normalized(population.members, tolerance=1e-9)

    def test_zero_sum_rejected(self, make_population):
        population = make_population([0.0, 0.0])
        with pytest.raises(ZeroWeightError):
            normalize_weights(population.members)

    def test_zero_weight_error_is_zero_division(self, make_population):
        population = make_population([0.0])
        with pytest.raises(ZeroDivisionError):
            normalize_weights(population.members)

    def test_weights_normalized_tolerance(self, make_population):
        assert weights_normalized(make_population([0.1, 0.2, 0.7]).members)
        assert not weights_normalized(make_population([0.1, 0.2, 0.6]).members)

    def test_stretch(self, make_population):
        population = make_population([1.0, 2.0, 3.0])
        stretch_weights(population.members, 0.0, 1.0)
        assert [m.weight for m in population] == pytest.approx([0.0, 0.5, 1.0])

    def test_stretch_equal_weights_go_to_min(self, make_population):
        population = make_population([0.3, 0.3])
        stretch_weights(population.members, 0.1, 0.9)
        assert [m.weight for m in population] == [0.1, 0.1]


class TestRouletteWheel:
    """Tests for single weighted picks."""

    def test_walk_cumulative(self, make_population):
        members = make_population([0.2, 0.3, 0.5]).members
        assert walk_cumulative(members, 0.1) is members[0]
        assert walk_cumulative(members, 0.25) is members[1]
        assert walk_cumulative(members, 0.99) is members[2]

    def test_walk_past_total_raises(self, make_population):
        members = make_population([0.5, 0.5]).members
        with pytest.raises(SelectionError):
            walk_cumulative(members, 1.0)

    def test_rounding_falls_back_to_last_positive_weight(self, make_population, caplog):
        members = make_population([0.5, 0.5, 0.0]).members
        with caplog.at_level(logging.WARNING, logger="grove.evolution.selection"):
            picked = pick_random_weighted(members, _FixedRoll(1.0))
        assert picked is members[1]
        assert "falling back" in caplog.text

    def test_unnormalized_weights_are_normalized_first(self, make_population, seeded_rng):
        members = make_population([2.0, 6.0]).members
        pick_random_weighted(members, seeded_rng)
        assert [m.weight for m in members] == pytest.approx([0.25, 0.75])

    def test_empty_rejected(self, seeded_rng):
        with pytest.raises(SelectionError):
            pick_random_weighted([], seeded_rng)

    def test_requires_rng(self, make_population):
        with pytest.raises(MissingRNGError):
            pick_random_weighted(make_population([1.0]).members)

    def test_frequencies_follow_weights(self, make_population):
        """Chi-square goodness of fit over 100,000 draws.

        13.816 is the critical value for two degrees of freedom at p = 0.001.
        """
        weights = [0.1, 0.2, 0.7]
        members = make_population(weights).members
        rng = random.Random(12345)
        draws = 100_000

        counts = Counter(pick_random_weighted(members, rng).identity for _ in range(draws))
        statistic = sum(
            (counts[m.identity] - draws * w) ** 2 / (draws * w) for m, w in zip(members, weights)
        )
        assert statistic < 13.816


class TestSelectParents:
    """Tests for choosing the parents of the next generation."""

    def test_lowest_weight_is_always_first(self, make_population, seeded_rng):
        population = make_population([0.5, 0.3, 0.2])
        elite = population.members[2]
        parents = select_parents(population, 3, seeded_rng)
        assert parents[0] is elite
        assert len(parents) == 3

    def test_ties_keep_population_order(self, make_population, seeded_rng):
        population = make_population([0.01, 0.01, 0.01])
        parents = select_parents(population, 2, seeded_rng)
        assert parents[0] is population.members[0]

    def test_parent_weights_reset_to_default(self, make_population, seeded_rng):
        population = make_population([0.9, 0.05, 0.05], default_weight=0.01)
        parents = select_parents(population, 4, seeded_rng)
        for parent in parents:
            assert parent.weight == 0.01

    def test_picked_trees_dominate(self, make_population):
        population = make_population([0.9, 0.01, 0.01, 0.01])
        favourite = population.members[0]
        rng = random.Random(3)
        hits = 0
        for _ in range(200):
            population.members[0].weight = 0.9
            for member in population.members[1:]:
                member.weight = 0.01
            hits += select_parents(population, 2, rng)[1] is favourite
        assert hits > 150

    def test_size_must_be_positive(self, make_population, seeded_rng):
        with pytest.raises(SelectionError):
            select_parents(make_population([0.5]), 0, seeded_rng)

    def test_empty_population(self, make_population, seeded_rng):
        with pytest.raises(SelectionError):
            select_parents(make_population([]), 3, seeded_rng)
