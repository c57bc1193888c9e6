"""Grove exception hierarchy.

Centralised base classes so callers can catch domain failures narrowly
instead of relying on bare ``except Exception`` blocks.
"""


class GroveError(Exception):
    """Root of all Grove domain exceptions."""


class GeneticsError(GroveError):
    """Genome rewriting, crossover, or mutation failure."""


class PreconditionError(GeneticsError, ValueError):
    """An operator was called with inputs it cannot work on.

    Raised instead of substituting a default that would corrupt a genome,
    e.g. crossover on an empty sentence or mutation with no candidate symbols.
    """


class SelectionError(GroveError):
    """Weighted selection could not produce a parent."""


class ZeroWeightError(SelectionError, ZeroDivisionError):
    """Weights cannot be normalized because they sum to zero."""


class PopulationError(GroveError):
    """Population bookkeeping failure (membership, picks, replacement)."""


class UnknownIndividualError(PopulationError, KeyError):
    """A pick event referenced an individual that is not in the population."""


class PersistenceError(GroveError):
    """Errors during save / load / recalculation of evaluation archives."""


class ConfigurationError(GroveError):
    """Invalid or missing configuration."""
