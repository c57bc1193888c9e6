"""Headless runs with an automated picker.

The interactive loop needs a human to pick trees. For batch experiments and
smoke tests a picker function stands in: it chooses which trees of the
current generation get picked, and the run proceeds exactly as it would
under a UI.
"""

import logging
import random
from pathlib import Path
from typing import Callable, Dict, List, Optional

from grove.engine import GrammaticalEvolution
from grove.exceptions import ConfigurationError
from grove.fitness import mark_tree
from grove.persistence import PathLike
from grove.population import Population
from grove.util.rng import require_rng_param

logger = logging.getLogger(__name__)

# (population, how many to pick, rng) -> identities to pick
Picker = Callable[[Population, int, random.Random], List[str]]


def random_picker(population: Population, count: int, rng: random.Random) -> List[str]:
    """Pick ``count`` distinct trees uniformly."""
    rng = require_rng_param(rng, "random_picker")
    members = list(population)
    return [m.identity for m in rng.sample(members, min(count, len(members)))]


def fitness_picker(population: Population, count: int, rng: random.Random) -> List[str]:
    """Pick the ``count`` trees with the best structural fitness."""
    ranked = sorted(population, key=lambda m: mark_tree(m).overall_fitness, reverse=True)
    return [m.identity for m in ranked[:count]]


PICKERS: Dict[str, Picker] = {
    "random": random_picker,
    "fitness": fitness_picker,
}


def get_picker(name: str) -> Picker:
    try:
        return PICKERS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown picker {name!r}; choose from {sorted(PICKERS)}"
        ) from None


def run_headless(
    engine: GrammaticalEvolution,
    picker: Picker,
    output_dir: Optional[PathLike] = None,
) -> Optional[Path]:
    """Evolve until the configured generation count, then save the run.

    Args:
        engine: Engine to drive; generation 0 is created if missing
        picker: Chooses the trees picked each generation
        output_dir: Archive folder; None skips saving

    Returns:
        Path of the written archive, or None when nothing was saved
    """
    if engine.population is None:
        engine.init_population()

    while not engine.is_finished():
        population = engine.population
        for identity in picker(population, engine.config.required_picks, engine.rng):
            engine.record_pick(identity, True)
        logger.info(
            "Generation %d: picked %d trees", population.generation_number, population.pick_count
        )
        engine.evolve_generation()

    if output_dir is None:
        return None
    return engine.finish_run(output_dir)
