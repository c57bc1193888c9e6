"""Request and response models for the population API."""

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from grove.config.evolution import BEST_TREE_COUNT
from grove.population import Individual, Population


class TreeData(BaseModel):
    """One tree of the current generation."""

    id: str
    generation: int
    weight: float
    picked: bool
    sentence: str
    alphabet: List[str]
    rules: Dict[str, str]
    angle: float
    tree_type: Optional[str] = None
    branch_count: int
    # ((start_x, start_y), (end_x, end_y)) per drawn branch
    branches: Optional[List[Tuple[Tuple[float, float], Tuple[float, float]]]] = None

    @classmethod
    def from_individual(
        cls, individual: Individual, picked: bool, include_branches: bool
    ) -> "TreeData":
        branches = None
        if include_branches:
            branches = [
                ((s.start.x, s.start.y), (s.end.x, s.end.y)) for s in individual.branch_segments
            ]
        return cls(
            id=individual.identity,
            generation=individual.generation_number or 0,
            weight=individual.weight,
            picked=picked,
            sentence=individual.genome.sentence,
            alphabet=list(individual.genome.alphabet),
            rules=dict(individual.genome.rules),
            angle=individual.angle,
            tree_type=individual.tree_type.value if individual.tree_type else None,
            branch_count=individual.branch_count,
            branches=branches,
        )


class PopulationState(BaseModel):
    """The current generation and its pick progress."""

    generation: int
    pick_count: int
    required_picks: int
    ready_to_evolve: bool
    finished: bool
    trees: List[TreeData]

    @classmethod
    def from_population(
        cls,
        population: Population,
        *,
        required_picks: int,
        ready_to_evolve: bool,
        finished: bool,
        include_branches: bool = False,
    ) -> "PopulationState":
        return cls(
            generation=population.generation_number,
            pick_count=population.pick_count,
            required_picks=required_picks,
            ready_to_evolve=ready_to_evolve,
            finished=finished,
            trees=[
                TreeData.from_individual(m, population.is_picked(m.identity), include_branches)
                for m in population
            ],
        )


class PickRequest(BaseModel):
    """Request body for picking or unpicking a tree."""

    individual_id: str
    selected: bool = True


class PickResponse(BaseModel):
    individual_id: str
    weight: float
    pick_count: int
    ready_to_evolve: bool


class ResetRequest(BaseModel):
    """Request body for restarting the run from a fresh generation 0."""

    seed: Optional[int] = None


class EvolveRequest(BaseModel):
    """Request body for breeding.

    ``force`` breeds even when fewer than the required picks were made.
    """

    force: bool = False


class FlushResponse(BaseModel):
    path: str
    generation: int = Field(ge=0)


class ShowcaseRequest(BaseModel):
    """Request body for displaying the fittest archived trees."""

    count: int = Field(default=BEST_TREE_COUNT, ge=1)
