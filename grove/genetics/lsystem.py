"""L-system genomes for evolving trees.

A genome is a grammar sentence plus the rules that rewrite it and the alphabet
of symbols the turtle and the operators understand. Rewriting is total: any
symbol without a rule maps to itself, so every sentence can always be grown.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

logger = logging.getLogger(__name__)

OPEN_BRACKET = "["
CLOSE_BRACKET = "]"
BRACKETS = frozenset((OPEN_BRACKET, CLOSE_BRACKET))

# Symbols every tree understands regardless of its rule set
BASE_SYMBOLS: Tuple[str, ...] = ("+", "-", OPEN_BRACKET, CLOSE_BRACKET, "F")


def is_bracket(symbol: str) -> bool:
    return symbol in BRACKETS


def rewrite(sentence: str, rules: Mapping[str, str]) -> str:
    """Apply one grammar step to a sentence.

    Every symbol is replaced by its rule's output when one exists, otherwise it
    is copied unchanged.

    Args:
        sentence: Current sentence
        rules: Mapping of symbol to replacement string

    Returns:
        The rewritten sentence
    """
    return "".join(rules.get(symbol, symbol) for symbol in sentence)


def count_brackets(sentence: str) -> Tuple[int, int]:
    """Count opening and closing brackets.

    Returns:
        Tuple of (opens, closes)
    """
    opens = closes = 0
    for symbol in sentence:
        if symbol == OPEN_BRACKET:
            opens += 1
        elif symbol == CLOSE_BRACKET:
            closes += 1
    return opens, closes


def is_nesting_valid(sentence: str) -> bool:
    """Return True when brackets nest: no prefix closes more than it opened
    and every open is eventually closed."""
    depth = 0
    for symbol in sentence:
        if symbol == OPEN_BRACKET:
            depth += 1
        elif symbol == CLOSE_BRACKET:
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def combine_alphabets(first: Sequence[str], second: Sequence[str]) -> List[str]:
    """Union of two alphabets.

    Keeps the first alphabet's order, then appends symbols only the second
    has, in the second's order.
    """
    combined = list(first)
    seen = set(combined)
    for symbol in second:
        if symbol not in seen:
            combined.append(symbol)
            seen.add(symbol)
    return combined


def alphabet_from_rules(rules: Mapping[str, str], base: Iterable[str] = BASE_SYMBOLS) -> List[str]:
    """Build a tree's alphabet: the base drawing symbols plus every rule key."""
    return combine_alphabets(list(base), list(rules.keys()))


@dataclass
class LSystemGenome:
    """The genetic makeup of one tree.

    Attributes:
        sentence: Current (possibly already rewritten) grammar string
        alphabet: Ordered symbols this genome uses
        rules: Rewrite rules, symbol -> replacement
        iteration_target: Rewrites to apply before the tree is fully grown
        iterations_done: Rewrites applied so far
        fully_iterated: Set once growth finished; blocks further rewriting
    """

    sentence: str
    alphabet: List[str] = field(default_factory=lambda: list(BASE_SYMBOLS))
    rules: Dict[str, str] = field(default_factory=dict)
    iteration_target: int = 3
    iterations_done: int = 0
    fully_iterated: bool = False

    def generate(self) -> str:
        """Apply a single rewrite step and advance the iteration counter."""
        self.sentence = rewrite(self.sentence, self.rules)
        self.iterations_done += 1
        return self.sentence

    def iterate_to_target(self) -> str:
        """Grow the sentence until the iteration target is reached.

        Does nothing for a genome that already finished growing, so a tree
        inherited from a previous generation is never rewritten twice.
        """
        if self.fully_iterated:
            return self.sentence

        while self.iterations_done < self.iteration_target:
            self.generate()

        self.fully_iterated = True
        return self.sentence

    def repair_balance(self) -> int:
        """Close any brackets left open by crossover or mutation.

        Appends one ``]`` per excess ``[``. Excess closers are left as they are;
        the turtle tolerates them by restoring its most recent saved state.

        Returns:
            Number of closers appended
        """
        opens, closes = count_brackets(self.sentence)
        extra = opens - closes
        if extra <= 0:
            return 0

        logger.debug("Closing %d extra opening brackets", extra)
        self.sentence += CLOSE_BRACKET * extra
        return extra

    def copy(self) -> "LSystemGenome":
        """Return an independent genome; no containers are shared."""
        return LSystemGenome(
            sentence=self.sentence,
            alphabet=list(self.alphabet),
            rules=dict(self.rules),
            iteration_target=self.iteration_target,
            iterations_done=self.iterations_done,
            fully_iterated=self.fully_iterated,
        )

    def to_dict(self) -> Dict:
        return {
            "sentence": self.sentence,
            "alphabet": list(self.alphabet),
            "rules": dict(self.rules),
            "iteration_target": self.iteration_target,
            "iterations_done": self.iterations_done,
            "fully_iterated": self.fully_iterated,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "LSystemGenome":
        rules = dict(data.get("rules", {}))
        alphabet = data.get("alphabet") or alphabet_from_rules(rules)
        return cls(
            sentence=data["sentence"],
            alphabet=list(alphabet),
            rules=rules,
            iteration_target=data.get("iteration_target", 3),
            iterations_done=data.get("iterations_done", 0),
            fully_iterated=data.get("fully_iterated", False),
        )
