"""Export records for evaluation archives.

Each generation is archived as a ``PopulationStats`` record holding one
``LSystemRecord`` per tree. Field aliases follow the archive JSON layout
(``genNumber``, ``lsystemsData``, ``Item1``/``Item2`` branch ends, ...) so
archives written by earlier tooling load unchanged.

Records are frozen: a recalculation pass builds new records instead of editing
old ones.
"""

from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from grove.fitness import FitnessBreakdown, mark_tree, remark_tree
from grove.population import Individual, Population
from grove.turtle import BranchSegment, Point


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class PointRecord(_Record):
    x: float
    y: float


class BranchRecord(_Record):
    start: PointRecord = Field(alias="Item1")
    end: PointRecord = Field(alias="Item2")

    @classmethod
    def from_segment(cls, segment: BranchSegment) -> "BranchRecord":
        return cls(
            start=PointRecord(x=segment.start.x, y=segment.start.y),
            end=PointRecord(x=segment.end.x, y=segment.end.y),
        )

    def to_segment(self) -> BranchSegment:
        return BranchSegment(Point(self.start.x, self.start.y), Point(self.end.x, self.end.y))


class FitnessRecord(_Record):
    tree_name: str = Field(alias="treeName")
    positive_phototropism: float = Field(alias="positivePhototropism")
    tree_height: float = Field(default=0.0, alias="treeHeight")
    bilateral_symmetry: float = Field(alias="bilateralSymmetry")
    light_gathering: float = Field(default=0.0, alias="lightGathering")
    branching_points_proportion: float = Field(alias="branchingPointsProportion")
    overall_fitness: float = Field(alias="overallFitness")

    @classmethod
    def from_breakdown(cls, breakdown: FitnessBreakdown) -> "FitnessRecord":
        return cls(
            tree_name=breakdown.tree_name,
            positive_phototropism=breakdown.phototropism,
            tree_height=breakdown.tree_height,
            bilateral_symmetry=breakdown.bilateral_symmetry,
            light_gathering=breakdown.light_gathering,
            branching_points_proportion=breakdown.branching_points_proportion,
            overall_fitness=breakdown.overall_fitness,
        )

    def to_breakdown(self) -> FitnessBreakdown:
        return FitnessBreakdown(
            tree_name=self.tree_name,
            phototropism=self.positive_phototropism,
            bilateral_symmetry=self.bilateral_symmetry,
            branching_points_proportion=self.branching_points_proportion,
            overall_fitness=self.overall_fitness,
            tree_height=self.tree_height,
            light_gathering=self.light_gathering,
        )


class LSystemRecord(_Record):
    sentence: str
    rules: Dict[str, str]
    alphabet: List[str]
    final_weight: float = Field(alias="finalWeight")
    final_branch_count: int = Field(alias="finalBranchCount")
    branches: Optional[List[BranchRecord]] = None
    fitness: FitnessRecord

    @classmethod
    def from_individual(cls, individual: Individual, include_branches: bool) -> "LSystemRecord":
        branches = None
        if include_branches:
            branches = [BranchRecord.from_segment(s) for s in individual.branch_segments]
        return cls(
            sentence=individual.genome.sentence,
            rules=dict(individual.genome.rules),
            alphabet=list(individual.genome.alphabet),
            final_weight=individual.weight,
            final_branch_count=individual.branch_count,
            branches=branches,
            fitness=FitnessRecord.from_breakdown(mark_tree(individual)),
        )

    def branch_segments(self) -> Optional[List[BranchSegment]]:
        if self.branches is None:
            return None
        return [branch.to_segment() for branch in self.branches]

    def recalculated(self) -> "LSystemRecord":
        """Return a copy whose fitness is recomputed from sentence and branches."""
        fitness = remark_tree(self.fitness.to_breakdown(), self.branch_segments(), self.sentence)
        return self.model_copy(update={"fitness": FitnessRecord.from_breakdown(fitness)})


class PopulationStats(_Record):
    gen_number: int = Field(alias="genNumber")
    lsystems_data: List[LSystemRecord] = Field(alias="lsystemsData")

    @classmethod
    def from_population(cls, population: Population, include_branches: bool) -> "PopulationStats":
        return cls(
            gen_number=population.generation_number,
            lsystems_data=[
                LSystemRecord.from_individual(member, include_branches) for member in population
            ],
        )

    def recalculated(self, gen_number: Optional[int] = None) -> "PopulationStats":
        return PopulationStats(
            gen_number=self.gen_number if gen_number is None else gen_number,
            lsystems_data=[record.recalculated() for record in self.lsystems_data],
        )

    def to_json_dict(self) -> Dict:
        return self.model_dump(mode="json", by_alias=True)


def stats_to_json_list(stats: Sequence[PopulationStats]) -> List[Dict]:
    return [item.to_json_dict() for item in stats]
