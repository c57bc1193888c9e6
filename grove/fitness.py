"""Automated structural fitness for exported trees.

Scores a tree on three heuristics and combines them into one number:

- Phototropism: how high the tree reaches, mapped onto [0, 1)
- Bilateral symmetry: ratio of branch length on either side of the trunk
- Branching proportion: how many branch points the sentence opens

The score is for analysis and archives only. It never feeds back into parent
selection, which runs on human picks.

Known limitation: the branching proportion assumes three grammar iterations
(``ASSUMED_ITERATIONS``) because archived records do not carry the real
count.
"""

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Optional, Sequence

from grove.genetics.lsystem import count_brackets
from grove.turtle import BranchSegment

if TYPE_CHECKING:
    from grove.population import Individual

logger = logging.getLogger(__name__)

PHOTOTROPISM_WEIGHT = 100.0
SYMMETRY_WEIGHT = 90.0
BRANCH_POINTS_WEIGHT = 30.0

ASSUMED_ITERATIONS = 3
UNBALANCED = -1.0
TRUNK_X = 0.0


@dataclass(frozen=True)
class FitnessBreakdown:
    """Marks for one tree.

    Attributes:
        tree_name: Identity of the marked tree
        phototropism: Height score in [0, 1)
        bilateral_symmetry: Side ratio in [-1, 1]; -1 means one side is bare
        branching_points_proportion: Branch point score in [0, 1)
        overall_fitness: Weighted combination of the three marks
        tree_height: Highest branch end the phototropism was computed from
        light_gathering: Reserved mark, always 0.0
    """

    tree_name: str
    phototropism: float
    bilateral_symmetry: float
    branching_points_proportion: float
    overall_fitness: float = 0.0
    tree_height: float = 0.0
    light_gathering: float = 0.0


def phototropism_score(highest_y: float) -> float:
    """Saturating height score ``h / (h + 1)``; heights below zero score 0."""
    highest_y = max(0.0, highest_y)
    return highest_y / (highest_y + 1.0)


def tree_height(branches: Optional[Sequence[BranchSegment]]) -> float:
    """Highest branch end, or 0.0 for a tree with no branches."""
    if not branches:
        return 0.0
    return max(branch.end.y for branch in branches)


def calc_phototropism(branches: Optional[Sequence[BranchSegment]]) -> float:
    if not branches:
        return 0.0
    return phototropism_score(tree_height(branches))


def balance_ratio_score(positive_side: float, negative_side: float) -> float:
    """Ratio of the two side totals clamped to [-1, 1]; -1 if a side is bare."""
    if positive_side == 0.0 or negative_side == 0.0:
        return UNBALANCED
    return max(-1.0, min(1.0, positive_side / negative_side))


def calc_tree_balance(branches: Optional[Sequence[BranchSegment]]) -> float:
    """Compare branch length on each side of the trunk.

    A segment with an endpoint on a side counts toward that side; a segment
    crossing the trunk counts toward both. Segments on the trunk line count
    toward neither.
    """
    if branches is None:
        return UNBALANCED

    positive_side = 0.0
    negative_side = 0.0
    for branch in branches:
        length = abs(branch.length())
        if branch.start.x < TRUNK_X or branch.end.x < TRUNK_X:
            negative_side += length
        if branch.start.x > TRUNK_X or branch.end.x > TRUNK_X:
            positive_side += length

    return balance_ratio_score(positive_side, negative_side)


def branching_points_score(open_brackets: int, iterations: int = ASSUMED_ITERATIONS) -> float:
    return open_brackets / (open_brackets + iterations**3)


def calc_branching_points(sentence: str, iterations: int = ASSUMED_ITERATIONS) -> float:
    """Branch point score from the number of ``[`` in a sentence."""
    opens, _ = count_brackets(sentence)
    return branching_points_score(opens, iterations)


def calc_overall_fitness(
    phototropism: float, bilateral_symmetry: float, branching_points_proportion: float
) -> float:
    """Weighted mean of the marks, scoring symmetry as ``1 - |balance|``."""
    symmetry_fitness = 1.0 - abs(bilateral_symmetry)
    total = (
        phototropism * PHOTOTROPISM_WEIGHT
        + symmetry_fitness * SYMMETRY_WEIGHT
        + branching_points_proportion * BRANCH_POINTS_WEIGHT
    )
    return total / (PHOTOTROPISM_WEIGHT + SYMMETRY_WEIGHT + BRANCH_POINTS_WEIGHT)


def score_tree(
    tree_name: str, branches: Optional[Sequence[BranchSegment]], sentence: str
) -> FitnessBreakdown:
    """Mark a tree from its drawn branches and grown sentence."""
    phototropism = calc_phototropism(branches)
    balance = calc_tree_balance(branches)
    branching = calc_branching_points(sentence)
    return FitnessBreakdown(
        tree_name=tree_name,
        phototropism=phototropism,
        bilateral_symmetry=balance,
        branching_points_proportion=branching,
        overall_fitness=calc_overall_fitness(phototropism, balance, branching),
        tree_height=tree_height(branches),
    )


def mark_tree(individual: "Individual") -> FitnessBreakdown:
    """Mark an individual from its last render."""
    return score_tree(individual.identity, individual.branch_segments, individual.genome.sentence)


def remark_tree(
    previous: FitnessBreakdown,
    branches: Optional[Sequence[BranchSegment]],
    sentence: str,
) -> FitnessBreakdown:
    """Recompute marks for an archived tree.

    Phototropism comes from the archived branches when there are any, and
    from the previously recorded tree height otherwise.
    """
    if branches:
        height = tree_height(branches)
    else:
        height = previous.tree_height
    phototropism = phototropism_score(height)
    balance = calc_tree_balance(branches)
    branching = calc_branching_points(sentence)

    return replace(
        previous,
        phototropism=phototropism,
        bilateral_symmetry=balance,
        branching_points_proportion=branching,
        overall_fitness=calc_overall_fitness(phototropism, balance, branching),
        tree_height=height,
    )
