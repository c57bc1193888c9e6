"""Tests for point mutation."""

import pytest

from grove.evolution.mutation import non_bracket_symbols, point_mutation
from grove.exceptions import PreconditionError
from grove.genetics.lsystem import LSystemGenome
from grove.genetics.presets import TreeType, create_genome
from grove.util.rng import MissingRNGError


class TestPointMutation:
    """Tests for symbol-by-symbol substitution."""

    def test_zero_rate_preserves_sentence(self, seeded_rng):
        genome = create_genome(TreeType.SET1)
        genome.iterate_to_target()
        mutated = point_mutation(genome, 0.0, seeded_rng)
        assert mutated.sentence == genome.sentence
        assert mutated is not genome

    def test_full_rate_replaces_every_non_bracket(self, seeded_rng):
        genome = LSystemGenome(sentence="F[F]F", alphabet=["[", "]", "Z"])
        assert point_mutation(genome, 1.0, seeded_rng).sentence == "Z[Z]Z"

    def test_brackets_keep_their_positions(self, seeded_rng):
        genome = create_genome(TreeType.SET2)
        genome.iterate_to_target()
        mutated = point_mutation(genome, 1.0, seeded_rng)

        assert len(mutated.sentence) == len(genome.sentence)
        for before, after in zip(genome.sentence, mutated.sentence):
            if before in "[]":
                assert after == before
            else:
                assert after not in "[]"

    def test_original_untouched(self, seeded_rng):
        genome = LSystemGenome(sentence="FFFF", alphabet=["F", "X"])
        point_mutation(genome, 1.0, seeded_rng)
        assert genome.sentence == "FFFF"

    def test_rate_matches_observed_changes(self, seeded_rng):
        """At rate 0.5 over two symbols about a quarter of positions change."""
        genome = LSystemGenome(sentence="F" * 1000, alphabet=["F", "X"])
        mutated = point_mutation(genome, 0.5, seeded_rng)
        changed = sum(1 for s in mutated.sentence if s == "X")
        assert 150 < changed < 350

    def test_rate_out_of_range(self, seeded_rng):
        genome = LSystemGenome(sentence="F")
        with pytest.raises(PreconditionError):
            point_mutation(genome, 1.5, seeded_rng)
        with pytest.raises(PreconditionError):
            point_mutation(genome, -0.1, seeded_rng)

    def test_bracket_only_alphabet(self, seeded_rng):
        genome = LSystemGenome(sentence="[]", alphabet=["[", "]"])
        with pytest.raises(PreconditionError):
            point_mutation(genome, 0.5, seeded_rng)
        assert point_mutation(genome, 0.0, seeded_rng).sentence == "[]"

    def test_requires_rng(self):
        with pytest.raises(MissingRNGError):
            point_mutation(LSystemGenome(sentence="F"), 0.1)

    def test_non_bracket_symbols(self):
        assert non_bracket_symbols(["+", "[", "F", "]"]) == ["+", "F"]
