"""Weighted parent selection driven by human picks.

Weights live on the individuals. Picked trees carry weights well above the
default, so after normalization they dominate the roulette wheel, while the
elite slot always goes to the least-disturbed (lowest-weight) tree.
"""

from __future__ import annotations

import logging
import math
import random
from typing import TYPE_CHECKING, List, Optional, Sequence

from grove.config.evolution import WEIGHT_SUM_TOLERANCE
from grove.exceptions import SelectionError, ZeroWeightError
from grove.util.rng import require_rng_param

if TYPE_CHECKING:
    from grove.population import Individual, Population

logger = logging.getLogger(__name__)


def weights_normalized(
    members: Sequence["Individual"], tolerance: float = WEIGHT_SUM_TOLERANCE
) -> bool:
    """Return True when member weights sum to 1.0 within ``tolerance``."""
    total = math.fsum(member.weight for member in members)
    return math.isclose(total, 1.0, rel_tol=0.0, abs_tol=tolerance)


def normalize_weights(members: Sequence["Individual"]) -> None:
    """Scale member weights in place so they sum to 1.0.

    Raises:
        ZeroWeightError: If the weights sum to zero
    """
    total = math.fsum(member.weight for member in members)
    logger.debug("Sum of all weights before normalizing: %s", total)
    if total == 0.0:
        raise ZeroWeightError(f"Cannot normalize {len(members)} weights that sum to zero")

    scale = 1.0 / total
    for member in members:
        member.weight = member.weight * scale

    if not weights_normalized(members):
        logger.warning(
            "Weights sum to %r after normalizing", math.fsum(m.weight for m in members)
        )


def stretch_weights(
    members: Sequence["Individual"], desired_min: float = 0.0, desired_max: float = 1.0
) -> None:
    """Min-max rescale weights in place onto ``[desired_min, desired_max]``.

    When every weight is equal there is no spread to stretch; all weights are
    set to ``desired_min``.
    """
    if not members:
        return
    low = min(member.weight for member in members)
    high = max(member.weight for member in members)
    if high == low:
        for member in members:
            member.weight = desired_min
        return

    scaler = (desired_max - desired_min) / (high - low)
    for member in members:
        member.weight = (member.weight - low) * scaler + desired_min


def walk_cumulative(members: Sequence["Individual"], roll: float) -> "Individual":
    """Return the first member whose cumulative weight exceeds ``roll``.

    Raises:
        SelectionError: If the walk ends without a candidate, which happens
            when rounding leaves the cumulative total at or below ``roll``
    """
    cumulative = 0.0
    for member in members:
        cumulative += member.weight
        if roll < cumulative:
            return member
    raise SelectionError(f"No member selected for roll {roll!r} (cumulative {cumulative!r})")


def pick_random_weighted(
    members: Sequence["Individual"], rng: Optional[random.Random] = None
) -> "Individual":
    """Roulette-wheel pick over member weights.

    Weights are normalized first when they do not already sum to 1.0. A roll
    that rounding pushes past the final cumulative weight falls back to the
    last member with positive weight, with a warning.

    Raises:
        SelectionError: If there are no members
        ZeroWeightError: If every weight is zero
    """
    rng = require_rng_param(rng, "pick_random_weighted")
    if not members:
        raise SelectionError("Cannot pick from an empty population")

    if not weights_normalized(members):
        normalize_weights(members)

    roll = rng.random()
    try:
        return walk_cumulative(members, roll)
    except SelectionError as e:
        fallback = next((m for m in reversed(members) if m.weight > 0.0), members[-1])
        logger.warning("%s; falling back to %s", e, fallback.identity)
        return fallback


def select_parents(
    population: "Population", size: int, rng: Optional[random.Random] = None
) -> List["Individual"]:
    """Choose ``size`` parents for the next generation.

    1. The lowest-weight member is always chosen first (ties keep
       population order).
    2. Weights are normalized.
    3. ``size - 1`` more parents are drawn with replacement by weight.
    4. Every chosen parent's weight is reset to the population default.

    The same individual may appear more than once in the result.
    """
    rng = require_rng_param(rng, "select_parents")
    members = population.members
    if size < 1:
        raise SelectionError(f"Parent count must be >= 1, got {size}")
    if not members:
        raise SelectionError("Cannot select parents from an empty population")

    parents: List["Individual"] = [sorted(members, key=lambda m: m.weight)[0]]

    normalize_weights(members)

    for _ in range(size - 1):
        parents.append(pick_random_weighted(members, rng))

    for parent in parents:
        parent.weight = population.default_weight

    logger.debug("Selected parents: %s", [p.identity for p in parents])
    return parents
