"""Interactive evolution driver.

``GrammaticalEvolution`` is the control surface a UI, CLI, or web backend
drives: it seeds the first generation, grows and renders trees, routes pick
events, and breeds the next generation once enough trees were picked.

A breeding cycle runs in this order:

1. Select parents (elite + weighted picks)
2. Queue the outgoing generation's records in the archive
3. Cross over random parent pairs, then mutate every child
4. Replace the population, grow and render the children
"""

import logging
import random
from pathlib import Path
from typing import List, Optional, Sequence

from grove.config import EvolutionConfig
from grove.evolution import midpoint_crossover, point_mutation, select_parents
from grove.exceptions import PersistenceError, PopulationError
from grove.genetics.lsystem import LSystemGenome
from grove.genetics.presets import (
    TREE_TYPE_CONFIGS,
    create_genome,
    default_alphabet,
    default_rules,
    random_tree_type,
)
from grove.persistence import EvaluationArchive, PathLike
from grove.population import Individual, Population
from grove.records import PopulationStats
from grove.turtle import render_branches
from grove.util.rng import make_rng

logger = logging.getLogger(__name__)


class GrammaticalEvolution:
    """Owns the current population and runs breeding cycles.

    Attributes:
        config: Validated run configuration
        rng: The run's only random source
        archive: Accumulator for generation records, flushed by the driver
        population: The current generation, None before ``init_population``
    """

    def __init__(
        self,
        config: Optional[EvolutionConfig] = None,
        rng: Optional[random.Random] = None,
        archive: Optional[EvaluationArchive] = None,
    ) -> None:
        self.config = (config or EvolutionConfig()).validate()
        self.rng = rng if rng is not None else make_rng(self.config.seed)
        self.archive = archive if archive is not None else EvaluationArchive()
        self.population: Optional[Population] = None
        self._run_saved = False

    @property
    def run_saved(self) -> bool:
        """True once ``finish_run`` wrote this run's archive."""
        return self._run_saved

    def _current(self, population: Optional[Population] = None) -> Population:
        population = population if population is not None else self.population
        if population is None:
            raise PopulationError("No population yet; call init_population() first")
        return population

    # ------------------------------------------------------------------
    # Generation lifecycle
    # ------------------------------------------------------------------

    def spawn_individual(self) -> Individual:
        """A fresh, ungrown tree of a random starting type."""
        tree_type = random_tree_type(self.rng)
        return Individual(
            genome=create_genome(tree_type, self.config.iterations),
            weight=self.config.default_weight,
            tree_type=tree_type,
            angle=TREE_TYPE_CONFIGS[tree_type].angle,
        )

    def init_population(self) -> Population:
        """Create, grow and render generation 0."""
        population = Population(
            default_weight=self.config.default_weight,
            capacity=self.config.population_size,
        )
        for _ in range(self.config.population_size):
            population.add_individual(self.spawn_individual())

        self.grow_all_genomes(population)
        self.render_population(population)
        self.population = population
        self._run_saved = False
        logger.info("Initialized generation 0 with %d trees", len(population))
        return population

    def grow_all_genomes(self, population: Optional[Population] = None) -> None:
        """Rewrite every genome up to its iteration target."""
        for member in self._current(population):
            member.genome.iterate_to_target()

    def render_population(self, population: Optional[Population] = None) -> None:
        """Redraw every tree, replacing its branch segments."""
        for member in self._current(population):
            member.branch_segments = render_branches(
                member.genome, angle=member.angle, branch_length=self.config.branch_length
            )

    # ------------------------------------------------------------------
    # Picks
    # ------------------------------------------------------------------

    def record_pick(self, individual_id: str, selected: bool) -> float:
        """Route a pick or unpick to the current population."""
        return self._current().record_pick(individual_id, selected)

    def reset_picks(self) -> None:
        self._current().reset_picks()

    def ready_to_evolve(self, population: Optional[Population] = None) -> bool:
        return self._current(population).pick_count >= self.config.required_picks

    def is_finished(self, population: Optional[Population] = None) -> bool:
        return self._current(population).generation_number >= self.config.required_generations

    # ------------------------------------------------------------------
    # Breeding
    # ------------------------------------------------------------------

    def export_generation(
        self, population: Optional[Population] = None, include_branches: bool = False
    ) -> PopulationStats:
        return PopulationStats.from_population(self._current(population), include_branches)

    def breed(self, parents: Sequence[Individual]) -> List[Individual]:
        """Produce one generation of children from the selected parents.

        Every child comes from a crossover of two parents drawn uniformly
        (possibly the same parent twice); mutation runs once all children
        exist. Children turn with their head parent's angle.
        """
        if not parents:
            raise PopulationError("Cannot breed without parents")

        offspring = []
        for _ in range(self.config.population_size):
            parent_a = self.rng.choice(parents)
            parent_b = self.rng.choice(parents)
            genome = midpoint_crossover(parent_a.genome, parent_b.genome, self.rng)
            offspring.append((genome, parent_a.angle))

        children = []
        for genome, angle in offspring:
            mutated = point_mutation(genome, self.config.mutation_rate, self.rng)
            children.append(
                Individual(genome=mutated, weight=self.config.default_weight, angle=angle)
            )
        return children

    def evolve_generation(self, population: Optional[Population] = None) -> Population:
        """Breed the next generation and make it current.

        The outgoing generation is queued in the archive; branch segments are
        kept for generation 0 only.
        """
        previous = self._current(population)

        parents = select_parents(previous, self.config.population_size, self.rng)
        self.archive.add(
            self.export_generation(previous, include_branches=previous.generation_number == 0)
        )

        children = self.breed(parents)
        new_population = Population.next_generation(previous, children)
        self.grow_all_genomes(new_population)
        self.render_population(new_population)

        for member in previous:
            member.clear_branches()

        self.population = new_population
        new_population.log_population()
        logger.info(
            "Evolved generation %d -> %d", previous.generation_number, new_population.generation_number
        )
        return new_population

    def step(self) -> Optional[Population]:
        """Breed if enough picks were made and the run is not finished."""
        population = self._current()
        if self.is_finished(population) or not self.ready_to_evolve(population):
            return None
        return self.evolve_generation(population)

    # ------------------------------------------------------------------
    # Run end and showcase
    # ------------------------------------------------------------------

    def finish_run(self, directory: PathLike) -> Optional[Path]:
        """Queue the final generation and flush the archive, once per run.

        Write failures are logged and reported as None; the archive keeps its
        records so the flush can be retried.
        """
        population = self._current()
        if self._run_saved:
            return None
        self._archive_final_generation(population)

        try:
            path = self.archive.flush(directory, rng=self.rng)
        except PersistenceError as e:
            logger.error("Failed to save evaluations: %s", e)
            return None
        self._run_saved = True
        return path

    def _archive_final_generation(self, population: Population) -> None:
        if any(s.gen_number == population.generation_number for s in self.archive.pending):
            return
        self.archive.add(self.export_generation(population, include_branches=True))

    def showcase(self, sentences: Sequence[str]) -> Population:
        """Replace the current population with already-grown sentences.

        Used to display the best archived trees. Sentences beyond the
        population size are ignored.
        """
        previous = self._current()
        if not sentences:
            raise PopulationError("No sentences to showcase")

        members = []
        for sentence in list(sentences)[: self.config.population_size]:
            genome = LSystemGenome(
                sentence=sentence,
                alphabet=default_alphabet(),
                rules=default_rules(),
                iteration_target=self.config.iterations,
                iterations_done=self.config.iterations,
                fully_iterated=True,
            )
            tree_type = random_tree_type(self.rng)
            members.append(
                Individual(genome=genome, tree_type=tree_type, angle=TREE_TYPE_CONFIGS[tree_type].angle)
            )

        population = Population.next_generation(previous, members)
        self.render_population(population)
        self.population = population
        return population
