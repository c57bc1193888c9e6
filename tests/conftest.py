"""Pytest configuration and fixtures for Grove tests."""

import random

import pytest

from grove.config import EvolutionConfig


@pytest.fixture
def seeded_rng():
    """Provide a deterministic RNG for tests."""
    return random.Random(42)


@pytest.fixture
def small_config():
    """A quick run: six trees, two picks, three generations."""
    return EvolutionConfig(
        population_size=6,
        required_picks=2,
        required_generations=3,
        seed=7,
    )


@pytest.fixture
def make_population():
    """Build a population of one-symbol trees with the given weights.

    Weights are set after the trees are added, since adding resets them.
    """
    from grove.genetics.lsystem import LSystemGenome
    from grove.population import Individual, Population

    def _make(weights, default_weight=0.01):
        population = Population(default_weight=default_weight)
        for _ in weights:
            population.add_individual(Individual(LSystemGenome(sentence="F")))
        for member, weight in zip(population, weights):
            member.weight = weight
        return population

    return _make
