"""RNG utilities for reproducible evolution runs.

Every operator takes its random source as an explicit parameter. These helpers
fail loudly when one is missing rather than silently falling back to the
module-level ``random`` state, which would make runs impossible to replay.
"""

import random
from typing import Optional


class MissingRNGError(RuntimeError):
    """Raised when an RNG is required but was not supplied.

    This indicates a wiring bug: the driver owns a seeded ``random.Random``
    and must pass it to every operator.
    """

    pass


def require_rng_param(rng: Optional[random.Random], context: str) -> random.Random:
    """Validate that an RNG parameter was provided, failing loudly if not.

    Args:
        rng: The RNG that should have been provided
        context: Description of where this is called from (for error messages)

    Returns:
        The validated RNG

    Raises:
        MissingRNGError: If rng is None

    Example:
        def midpoint_crossover(parent_a, parent_b, rng=None):
            rng = require_rng_param(rng, "midpoint_crossover")
    """
    if rng is None:
        raise MissingRNGError(
            f"RNG required: {context}. Pass the driver's seeded RNG explicitly."
        )
    return rng


def make_rng(seed: Optional[int] = None) -> random.Random:
    """Create the driver-owned RNG for a run.

    A ``None`` seed draws fresh OS entropy; pass an int to replay a run.
    """
    return random.Random(seed)
