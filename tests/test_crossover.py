"""Tests for midpoint crossover."""

import pytest

from grove.evolution.crossover import draw_cut_point, midpoint_crossover, splice_sentences
from grove.exceptions import PreconditionError
from grove.genetics.lsystem import LSystemGenome
from grove.util.rng import MissingRNGError


def _genome(sentence, rules=None, alphabet=None):
    return LSystemGenome(
        sentence=sentence,
        rules=rules or {},
        alphabet=alphabet or ["+", "-", "[", "]", "F"],
        iteration_target=3,
    )


class TestCutPoints:
    """Tests for drawing cut indices."""

    def test_cut_never_lands_on_final_index(self, seeded_rng):
        cuts = {draw_cut_point("ABCDE", seeded_rng) for _ in range(500)}
        assert cuts == {0, 1, 2, 3}

    def test_single_symbol_cuts_at_zero(self, seeded_rng):
        assert draw_cut_point("A", seeded_rng) == 0

    def test_empty_sentence_rejected(self, seeded_rng):
        with pytest.raises(PreconditionError):
            draw_cut_point("", seeded_rng)

    def test_splice(self):
        assert splice_sentences("AAAA", 2, "BBBB", 2) == "AABB"
        assert splice_sentences("AAAA", 0, "BBBB", 3) == "B"


class TestMidpointCrossover:
    """Tests for building children from two parents."""

    def test_fixed_cut_points(self):
        child = midpoint_crossover(_genome("AAAA"), _genome("BBBB"), cut_points=(2, 2))
        assert child.sentence == "AABB"

    def test_child_is_fully_grown(self, seeded_rng):
        child = midpoint_crossover(_genome("F[+F]F"), _genome("FF"), seeded_rng)
        assert child.fully_iterated
        assert child.iterations_done == child.iteration_target == 3

    def test_rules_merge_prefers_head_parent(self):
        parent_a = _genome("AA", rules={"F": "FF"})
        parent_b = _genome("BB", rules={"F": "F", "X": "FX"})
        child = midpoint_crossover(parent_a, parent_b, cut_points=(1, 1))
        assert child.rules == {"F": "FF", "X": "FX"}

    def test_alphabets_combine(self):
        parent_a = _genome("AA", alphabet=["F", "A"])
        parent_b = _genome("BB", alphabet=["B", "F"])
        child = midpoint_crossover(parent_a, parent_b, cut_points=(1, 1))
        assert child.alphabet == ["F", "A", "B"]

    def test_parents_untouched(self, seeded_rng):
        parent_a = _genome("F[+F]F", rules={"F": "FF"})
        parent_b = _genome("F[-F]F", rules={"X": "FX"})
        midpoint_crossover(parent_a, parent_b, seeded_rng).rules["F"] = "changed"
        assert parent_a.sentence == "F[+F]F"
        assert parent_a.rules == {"F": "FF"}
        assert parent_b.rules == {"X": "FX"}

    def test_child_is_head_of_a_then_tail_of_b(self, seeded_rng):
        for _ in range(100):
            child = midpoint_crossover(_genome("AAAAAA"), _genome("BBB"), seeded_rng)
            assert 2 <= len(child.sentence) <= 7
            assert child.sentence.endswith("BB")
            assert "BA" not in child.sentence

    def test_empty_parent_rejected(self, seeded_rng):
        with pytest.raises(PreconditionError):
            midpoint_crossover(_genome(""), _genome("F"), seeded_rng)

    def test_precondition_error_is_value_error(self, seeded_rng):
        with pytest.raises(ValueError):
            midpoint_crossover(_genome("F"), _genome(""), seeded_rng)

    def test_random_cut_requires_rng(self):
        with pytest.raises(MissingRNGError):
            midpoint_crossover(_genome("FF"), _genome("FF"))
