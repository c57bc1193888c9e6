"""Tests for L-system genomes and the starting tree presets."""

import pytest

from grove.genetics import lsystem
from grove.genetics.lsystem import (
    LSystemGenome,
    alphabet_from_rules,
    combine_alphabets,
    count_brackets,
    is_nesting_valid,
    rewrite,
)
from grove.genetics.presets import (
    DEFAULT_RULESET,
    TREE_TYPE_CONFIGS,
    TreeType,
    create_genome,
    default_rules,
    random_tree_type,
)
from grove.util.rng import MissingRNGError


class TestRewrite:
    """Tests for single grammar steps."""

    def test_one_step_from_x(self):
        assert rewrite("X", DEFAULT_RULESET) == "F[+X][-X]FX"

    def test_two_steps_from_x(self):
        once = rewrite("X", DEFAULT_RULESET)
        assert rewrite(once, DEFAULT_RULESET) == "FF[+F[+X][-X]FX][-F[+X][-X]FX]FFF[+X][-X]FX"

    def test_symbols_without_rules_are_copied(self):
        """Brackets and turns have no rules and pass through unchanged."""
        assert rewrite("+-[]Q", DEFAULT_RULESET) == "+-[]Q"

    def test_empty_sentence(self):
        assert rewrite("", DEFAULT_RULESET) == ""


class TestGenomeGrowth:
    """Tests for iterating a genome up to its target."""

    def test_generate_advances_counter(self):
        genome = LSystemGenome(sentence="X", rules=default_rules(), iteration_target=2)
        genome.generate()
        assert genome.sentence == "F[+X][-X]FX"
        assert genome.iterations_done == 1
        assert not genome.fully_iterated

    def test_iterate_to_target(self):
        genome = LSystemGenome(sentence="X", rules=default_rules(), iteration_target=2)
        genome.iterate_to_target()
        assert genome.sentence == "FF[+F[+X][-X]FX][-F[+X][-X]FX]FFF[+X][-X]FX"
        assert genome.iterations_done == 2
        assert genome.fully_iterated

    def test_fully_iterated_genome_is_never_rewritten(self):
        genome = LSystemGenome(sentence="X", rules=default_rules(), iteration_target=3)
        genome.iterate_to_target()
        grown = genome.sentence
        genome.iteration_target = 5
        genome.iterate_to_target()
        assert genome.sentence == grown
        assert genome.iterations_done == 3

    def test_zero_target_only_marks_grown(self):
        genome = LSystemGenome(sentence="X", rules=default_rules(), iteration_target=0)
        genome.iterate_to_target()
        assert genome.sentence == "X"
        assert genome.fully_iterated


class TestBrackets:
    """Tests for bracket counting, nesting checks and repair."""

    def test_count_brackets(self):
        assert count_brackets("F[+F[-F]]]") == (2, 3)

    def test_nesting(self):
        assert is_nesting_valid("F[+F[-F]]")
        assert is_nesting_valid("")
        assert not is_nesting_valid("F][")
        assert not is_nesting_valid("F[[F]")

    def test_repair_closes_excess_opens(self):
        genome = LSystemGenome(sentence="F[+F[-F")
        assert genome.repair_balance() == 2
        assert genome.sentence == "F[+F[-F]]"
        assert is_nesting_valid(genome.sentence)

    def test_repair_of_balanced_sentence_is_noop(self):
        genome = LSystemGenome(sentence="F[+F]")
        assert genome.repair_balance() == 0
        assert genome.sentence == "F[+F]"

    def test_excess_closers_are_left_alone(self):
        """Rules that emit closers can grow a sentence repair does not fix."""
        genome = LSystemGenome(sentence="A", rules={"A": "]A"}, iteration_target=2)
        genome.iterate_to_target()
        assert genome.sentence == "]]A"

        opens, closes = count_brackets(genome.sentence)
        assert opens - closes == -2
        assert genome.repair_balance() == 0
        assert genome.sentence == "]]A"
        assert not is_nesting_valid(genome.sentence)


class TestAlphabets:
    """Tests for alphabet construction."""

    def test_combine_keeps_order_and_deduplicates(self):
        assert combine_alphabets(["a", "b"], ["b", "c", "a", "d"]) == ["a", "b", "c", "d"]

    def test_alphabet_from_default_rules(self):
        assert alphabet_from_rules(DEFAULT_RULESET) == [
            "+", "-", "[", "]", "F", "X", "G", "H", "Y",
        ]

    def test_base_symbols(self):
        assert lsystem.BASE_SYMBOLS == ("+", "-", "[", "]", "F")


class TestGenomeCopy:
    """Tests for independent copies and dict conversion."""

    def test_copy_shares_no_containers(self):
        genome = create_genome(TreeType.SET1)
        clone = genome.copy()
        clone.rules["X"] = "F"
        clone.alphabet.append("Q")
        assert genome.rules["X"] == "F[+X][-X]FX"
        assert "Q" not in genome.alphabet

    def test_from_dict_builds_alphabet_when_missing(self):
        genome = LSystemGenome.from_dict({"sentence": "X", "rules": {"X": "FX"}})
        assert genome.alphabet == ["+", "-", "[", "]", "F", "X"]
        assert genome.iteration_target == 3

    def test_to_dict_round_trip(self):
        genome = create_genome(TreeType.SET4, iteration_target=2)
        genome.iterate_to_target()
        assert LSystemGenome.from_dict(genome.to_dict()) == genome


class TestPresets:
    """Tests for the starting tree types."""

    def test_tree_type_configs(self):
        assert TREE_TYPE_CONFIGS[TreeType.SET1].axiom == "X"
        assert TREE_TYPE_CONFIGS[TreeType.SET1].angle == 35.0
        assert TREE_TYPE_CONFIGS[TreeType.SET2].axiom == "G"
        assert TREE_TYPE_CONFIGS[TreeType.SET3].angle == 20.0
        assert TREE_TYPE_CONFIGS[TreeType.SET4].angle == 22.5

    def test_create_genome_is_ungrown(self):
        genome = create_genome(TreeType.SET2, iteration_target=4)
        assert genome.sentence == "G"
        assert genome.iteration_target == 4
        assert genome.iterations_done == 0
        assert not genome.fully_iterated

    def test_default_rules_returns_copy(self):
        rules = default_rules()
        rules["F"] = "F"
        assert DEFAULT_RULESET["F"] == "FF"

    def test_random_tree_type_requires_rng(self):
        with pytest.raises(MissingRNGError):
            random_tree_type(None)

    def test_random_tree_type_covers_all_types(self, seeded_rng):
        seen = {random_tree_type(seeded_rng) for _ in range(200)}
        assert seen == set(TreeType)
