"""Headless turtle that turns a sentence into branch segments.

The turtle walks a sentence symbol by symbol. Forward symbols draw a segment
through a callback; ``+``/``-`` turn; ``[``/``]`` save and restore the turtle
state. Segments are reported in the tree's local frame: the root sits at the
origin and the tree grows along +Y.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Dict, List, NamedTuple, Optional

from grove.config.rendering import BRANCH_LENGTH, DEFAULT_ANGLE, INITIAL_HEADING
from grove.genetics.lsystem import LSystemGenome, is_nesting_valid

logger = logging.getLogger(__name__)


class Point(NamedTuple):
    x: float
    y: float


class BranchSegment(NamedTuple):
    """One drawn branch, from ``start`` to ``end``."""

    start: Point
    end: Point

    def length(self) -> float:
        return math.hypot(self.end.x - self.start.x, self.end.y - self.start.y)


DrawCallback = Callable[[Point, Point], None]
TurtleCommand = Callable[["Turtle"], None]

FORWARD_SYMBOLS = ("F", "G", "H")


class Turtle:
    """A cursor with a position and heading that draws as it moves."""

    def __init__(
        self,
        draw: DrawCallback,
        position: Point = Point(0.0, 0.0),
        heading: float = INITIAL_HEADING,
    ) -> None:
        self.position = Point(*position)
        self.heading = heading
        self._draw = draw
        self._stack: List[tuple[Point, float]] = []
        # State restored when a closer arrives with nothing saved
        self._last_saved: tuple[Point, float] = (self.position, self.heading)

    def translate(self, distance: float) -> None:
        """Move forward along the heading and draw the covered segment."""
        radians = math.radians(self.heading)
        end = Point(
            self.position.x + distance * math.cos(radians),
            self.position.y + distance * math.sin(radians),
        )
        self._draw(self.position, end)
        self.position = end

    def rotate(self, degrees: float) -> None:
        self.heading = (self.heading + degrees) % 360.0

    def push(self) -> None:
        state = (self.position, self.heading)
        self._stack.append(state)
        self._last_saved = state

    def pop(self) -> None:
        """Restore the last saved state.

        An unmatched closer restores the most recently pushed state instead
        of failing, so sentences with extra ``]`` still draw.
        """
        if self._stack:
            self.position, self.heading = self._stack.pop()
        else:
            self.position, self.heading = self._last_saved


def default_commands(
    angle: float = DEFAULT_ANGLE, branch_length: float = BRANCH_LENGTH
) -> Dict[str, TurtleCommand]:
    """Symbol-to-action mapping shared by every tree."""
    commands: Dict[str, TurtleCommand] = {
        symbol: (lambda t: t.translate(branch_length)) for symbol in FORWARD_SYMBOLS
    }
    commands["+"] = lambda t: t.rotate(angle)
    commands["-"] = lambda t: t.rotate(-angle)
    commands["["] = lambda t: t.push()
    commands["]"] = lambda t: t.pop()
    return commands


def interpret(sentence: str, commands: Dict[str, TurtleCommand], turtle: Turtle) -> None:
    """Run every symbol that has a command; other symbols are ignored."""
    for symbol in sentence:
        command = commands.get(symbol)
        if command is not None:
            command(turtle)


def render_branches(
    genome: LSystemGenome,
    angle: float = DEFAULT_ANGLE,
    branch_length: float = BRANCH_LENGTH,
    commands: Optional[Dict[str, TurtleCommand]] = None,
) -> List[BranchSegment]:
    """Draw a genome and collect its branch segments in drawing order.

    Open brackets are closed on the genome first, so the stored sentence is
    the one that was drawn.
    """
    genome.repair_balance()
    if not is_nesting_valid(genome.sentence):
        logger.debug(
            "Sentence still has unmatched closing brackets; pops restore the last saved state"
        )

    segments: List[BranchSegment] = []
    turtle = Turtle(lambda start, end: segments.append(BranchSegment(start, end)))
    interpret(genome.sentence, commands or default_commands(angle, branch_length), turtle)

    logger.debug("Rendered %d branches from %d symbols", len(segments), len(genome.sentence))
    return segments
