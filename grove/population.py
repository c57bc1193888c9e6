"""Individuals and generations.

An ``Individual`` is one displayed tree: a genome, the weight human picks
give it, and the branches the renderer drew for it. A ``Population`` is one
generation of individuals plus the pick bookkeeping that turns clicks into
weights.

Pick events carry an individual's identity and are routed through
``Population.record_pick``; individuals never hold a reference back to the
population that owns them.
"""

import logging
import math
import random
import uuid
from typing import Iterator, List, Optional, Sequence, Set

from grove.config.evolution import DEFAULT_WEIGHT
from grove.config.rendering import DEFAULT_ANGLE
from grove.evolution import selection
from grove.exceptions import PopulationError, UnknownIndividualError
from grove.genetics.lsystem import LSystemGenome
from grove.genetics.presets import TreeType
from grove.turtle import BranchSegment

logger = logging.getLogger(__name__)


def new_identity() -> str:
    return uuid.uuid4().hex[:12]


class Individual:
    """One tree in a population.

    Attributes:
        genome: The tree's L-system genome (owned exclusively)
        weight: Selection weight, never negative
        generation_number: Generation the tree was created in; set once
        identity: Stable opaque id for picks and logging
        tree_type: Starting preset, or None for bred trees
        angle: Turn angle the renderer uses for this tree
        branch_segments: Segments produced by the last render
    """

    def __init__(
        self,
        genome: LSystemGenome,
        weight: float = DEFAULT_WEIGHT,
        tree_type: Optional[TreeType] = None,
        angle: float = DEFAULT_ANGLE,
        identity: Optional[str] = None,
    ) -> None:
        self.genome = genome
        self._weight = 0.0
        self.weight = weight
        self._identity = identity or new_identity()
        self._generation_number: Optional[int] = None
        self.tree_type = tree_type
        self.angle = angle
        self.branch_segments: List[BranchSegment] = []

    @property
    def identity(self) -> str:
        return self._identity

    @property
    def weight(self) -> float:
        return self._weight

    @weight.setter
    def weight(self, value: float) -> None:
        value = float(value)
        if math.isnan(value) or value < 0.0:
            raise PopulationError(f"Weight must be a non-negative number, got {value}")
        self._weight = value

    @property
    def generation_number(self) -> Optional[int]:
        return self._generation_number

    def assign_generation(self, generation_number: int) -> None:
        """Stamp the generation this tree belongs to. Allowed once."""
        if self._generation_number is not None and self._generation_number != generation_number:
            raise PopulationError(
                f"Individual {self.identity} already belongs to generation "
                f"{self._generation_number}"
            )
        self._generation_number = generation_number

    @property
    def branch_count(self) -> int:
        return len(self.branch_segments)

    def clear_branches(self) -> None:
        self.branch_segments = []

    def describe(self) -> str:
        return (
            f"tree {self.identity} weight={self.weight:.6f} "
            f"alphabet={len(self.genome.alphabet)} sentence={len(self.genome.sentence)} symbols"
        )

    def __repr__(self) -> str:
        return f"Individual(identity={self.identity!r}, weight={self.weight!r})"


class Population:
    """One generation of trees.

    Attributes:
        default_weight: Weight given to fresh, unpicked, and reset trees
        capacity: Maximum number of members, or None for no limit
    """

    def __init__(
        self,
        default_weight: float = DEFAULT_WEIGHT,
        members: Optional[Sequence[Individual]] = None,
        generation_number: int = 0,
        capacity: Optional[int] = None,
    ) -> None:
        if generation_number < 0:
            raise PopulationError(f"Generation number must be >= 0, got {generation_number}")
        self.default_weight = default_weight
        self.capacity = capacity
        self._generation_number = generation_number
        self._members: List[Individual] = []
        self._pick_count = 0
        self._picked: Set[str] = set()

        for member in members or ():
            self.add_individual(member)

    @classmethod
    def next_generation(
        cls, previous: "Population", children: Sequence[Individual]
    ) -> "Population":
        """Build the population that replaces ``previous``.

        Carries the configuration forward, bumps the generation number by one,
        starts with no picks, and installs ``children`` as members.
        """
        population = cls(
            default_weight=previous.default_weight,
            members=children,
            generation_number=previous.generation_number + 1,
            capacity=previous.capacity,
        )
        logger.info(
            "New population initialized: generation %d, tree count %d",
            population.generation_number,
            len(population),
        )
        return population

    @property
    def generation_number(self) -> int:
        return self._generation_number

    @property
    def members(self) -> List[Individual]:
        return self._members

    @property
    def pick_count(self) -> int:
        return self._pick_count

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[Individual]:
        return iter(self._members)

    def add_individual(self, individual: Individual) -> bool:
        """Add a tree with the default weight and this generation's number.

        Returns:
            False (with a warning) if the same tree is already a member

        Raises:
            PopulationError: If the population is full
        """
        if any(member is individual for member in self._members):
            logger.warning("Tree %s is already in the population", individual.identity)
            return False
        if self.capacity is not None and len(self._members) >= self.capacity:
            raise PopulationError(
                f"Population is full ({self.capacity} trees); cannot add {individual.identity}"
            )

        individual.weight = self.default_weight
        individual.assign_generation(self._generation_number)
        self._members.append(individual)
        return True

    def get(self, identity: str) -> Individual:
        for member in self._members:
            if member.identity == identity:
                return member
        raise UnknownIndividualError(identity)

    def selected_tree_weight(self, selected: bool) -> float:
        """Advance the pick counter and return the weight for the clicked tree.

        A pick returns ``1 - default_weight ** (1 / (2 * pick_count))``, which
        shrinks toward 0 as more trees are picked in the same round: with the
        default weight 0.01 the first pick weighs 0.9, the second about 0.68.
        An unpick returns the default weight.
        """
        if selected:
            self._pick_count += 1
            return 1.0 - self.default_weight ** (1.0 / (self._pick_count * 2))

        if self._pick_count > 0:
            self._pick_count -= 1
        else:
            logger.warning("Unpick with no picks recorded; pick count stays at 0")
        return self.default_weight

    def record_pick(self, identity: str, selected: bool) -> float:
        """Apply a pick or unpick event to the member with ``identity``.

        Repeating the current state (picking a picked tree, unpicking an
        unpicked one) changes nothing.

        Returns:
            The member's weight after the event

        Raises:
            UnknownIndividualError: If no member has that identity
        """
        member = self.get(identity)
        if selected == (identity in self._picked):
            logger.warning(
                "Tree %s is already %s; ignoring", identity, "picked" if selected else "unpicked"
            )
            return member.weight

        member.weight = self.selected_tree_weight(selected)
        if selected:
            self._picked.add(identity)
        else:
            self._picked.discard(identity)
        logger.debug("New weight for tree %s: %s", identity, member.weight)
        return member.weight

    def is_picked(self, identity: str) -> bool:
        return identity in self._picked

    def reset_pick_count(self) -> None:
        self._pick_count = 0

    def reset_picks(self) -> None:
        """Unpick every tree: weights go back to default and the count to 0."""
        for member in self._members:
            if member.identity in self._picked:
                member.weight = self.default_weight
        self._picked.clear()
        self.reset_pick_count()

    def normalize_weights(self) -> None:
        selection.normalize_weights(self._members)

    def weights_normalized(self) -> bool:
        return selection.weights_normalized(self._members)

    def stretch_weights(self, desired_min: float = 0.0, desired_max: float = 1.0) -> None:
        selection.stretch_weights(self._members, desired_min, desired_max)

    def pick_random_weighted(self, rng: Optional[random.Random] = None) -> Individual:
        return selection.pick_random_weighted(self._members, rng)

    def log_population(self) -> None:
        logger.debug("Generation %d, %d trees:", self._generation_number, len(self._members))
        for member in self._members:
            logger.debug("  %s", member.describe())
            logger.debug("  %s", member.genome.sentence)
