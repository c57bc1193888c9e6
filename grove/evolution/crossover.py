"""Midpoint crossover for L-system genomes.

The child takes a head of parent A's sentence and a tail of parent B's. Cut
points never land on a parent's final index. The child's brackets may not
balance; the renderer repairs that before drawing.
"""

import logging
import random
from typing import Optional, Tuple

from grove.exceptions import PreconditionError
from grove.genetics.lsystem import LSystemGenome, combine_alphabets
from grove.util.rng import require_rng_param

logger = logging.getLogger(__name__)


def draw_cut_point(sentence: str, rng: random.Random) -> int:
    """Draw a cut index uniformly from ``[0, len(sentence) - 1)``.

    A single-symbol sentence has only the cut point 0.

    Raises:
        PreconditionError: If the sentence is empty
    """
    if not sentence:
        raise PreconditionError("Cannot cut an empty sentence for crossover")
    if len(sentence) == 1:
        return 0
    return rng.randrange(len(sentence) - 1)


def splice_sentences(head_source: str, cut_a: int, tail_source: str, cut_b: int) -> str:
    """Join ``head_source[:cut_a]`` with ``tail_source[cut_b:]``."""
    return head_source[:cut_a] + tail_source[cut_b:]


def midpoint_crossover(
    parent_a: LSystemGenome,
    parent_b: LSystemGenome,
    rng: Optional[random.Random] = None,
    cut_points: Optional[Tuple[int, int]] = None,
) -> LSystemGenome:
    """Create a child genome from two parents.

    Args:
        parent_a: Parent contributing the head of the sentence
        parent_b: Parent contributing the tail of the sentence
        rng: Random number generator used to draw cut points
        cut_points: Optional fixed (cut_a, cut_b); skips the random draws

    Returns:
        A new genome. It shares no containers with either parent and is
        marked fully grown, so it is never rewritten again.

    Raises:
        PreconditionError: If either parent's sentence is empty
    """
    if not parent_a.sentence or not parent_b.sentence:
        raise PreconditionError(
            "Crossover requires non-empty parent sentences "
            f"(lengths {len(parent_a.sentence)} and {len(parent_b.sentence)})"
        )

    if cut_points is None:
        rng = require_rng_param(rng, "midpoint_crossover")
        cut_a = draw_cut_point(parent_a.sentence, rng)
        cut_b = draw_cut_point(parent_b.sentence, rng)
    else:
        cut_a, cut_b = cut_points

    rules = dict(parent_a.rules)
    for symbol, replacement in parent_b.rules.items():
        rules.setdefault(symbol, replacement)

    child = LSystemGenome(
        sentence=splice_sentences(parent_a.sentence, cut_a, parent_b.sentence, cut_b),
        alphabet=combine_alphabets(parent_a.alphabet, parent_b.alphabet),
        rules=rules,
        iteration_target=parent_a.iteration_target,
        iterations_done=parent_a.iteration_target,
        fully_iterated=True,
    )
    logger.debug(
        "Crossover cut %d/%d and %d/%d -> child length %d",
        cut_a,
        len(parent_a.sentence),
        cut_b,
        len(parent_b.sentence),
        len(child.sentence),
    )
    return child
