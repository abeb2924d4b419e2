"""
Hint pool shown when player input cannot be parsed.

One line is drawn at random per failure. Consecutive draws may repeat.
"""

import random
from collections.abc import Sequence

PARSE_FAILURE_HINTS: tuple[str, ...] = (
    "Dude, try speaking English!",
    "Did your cat just walk on the keyboard?",
    "A squirrel must've chewed through the wires. Please input something comprehensible!",
    "I don't even know how to respond to that input! Are you just mashing the keyboard randomly?",
    "I'm embarrassed for both of us after that attempt at input. Let's pretend it never happened!",
    "Based on your input, I suspect we're not even speaking the same language!",
    "That input was so wrong, somewhere an error message writer is smiling proudly!",
    "Your input is so confusing I thought maybe my system crashed for a second. But nope, it's just nonsense!",
    "Your input is so illogical it broke my brain for a second. Take a deep breath and try again!",
    "That input is so wrong I had to check if it was April Fools' Day. But nope, it's just bad input!",
    "Whatch' you talkin' 'bout, Willis?",
)


class HintPool:
    """Random picker over a fixed set of hint lines."""

    def __init__(self, hints: Sequence[str] = PARSE_FAILURE_HINTS, rng: random.Random | None = None) -> None:
        if not hints:
            raise ValueError("Hint pool cannot be empty")
        self._hints = tuple(hints)
        self._rng = rng or random.Random()

    @property
    def hints(self) -> tuple[str, ...]:
        return self._hints

    def pick(self) -> str:
        return self._rng.choice(self._hints)
