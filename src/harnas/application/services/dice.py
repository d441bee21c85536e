import random
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, List, Optional, Protocol, Sequence, Tuple


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int:
        ...


@dataclass(frozen=True)
class RollRecord:
    sides: Tuple[int, ...]
    results: Tuple[int, ...]

    @property
    def total(self) -> int:
        return sum(self.results)


class ScriptExhausted(AssertionError):
    pass


class ScriptedSource:
    """Replays a fixed sequence of die faces; for tests and replays."""

    def __init__(self, values: Iterable[int]) -> None:
        self._values: Deque[int] = deque(int(value) for value in values)
        self.consumed: List[Tuple[int, int]] = []

    def randint(self, a: int, b: int) -> int:
        if not self._values:
            raise ScriptExhausted(f"No scripted roll left for d{b}")
        value = self._values.popleft()
        if value < a or value > b:
            raise ValueError(f"Scripted roll {value} is outside [{a}, {b}]")
        self.consumed.append((b, value))
        return value

    def push(self, *values: int) -> None:
        self._values.extend(int(value) for value in values)

    @property
    def remaining(self) -> int:
        return len(self._values)


class Dice:
    """The only source of chance in a run.

    Every roll is recorded so the presentation layer can show the most
    recent dice, and the underlying source can be swapped for a scripted
    one.
    """

    def __init__(self, source: Optional[RandomSource] = None, history_limit: int = 1) -> None:
        self.source: RandomSource = source if source is not None else random.Random()
        self._history: Deque[RollRecord] = deque(maxlen=max(1, int(history_limit)))

    def _draw(self, sides: int) -> int:
        return int(self.source.randint(1, sides))

    def roll(self, sides: int) -> int:
        if sides <= 0:
            return 0
        result = self._draw(sides)
        self._history.appendleft(RollRecord((sides,), (result,)))
        return result

    def roll_many(self, sides: Sequence[int]) -> RollRecord:
        dice = tuple(int(side) for side in sides if int(side) > 0)
        record = RollRecord(dice, tuple(self._draw(side) for side in dice))
        self._history.appendleft(record)
        return record

    def d4(self) -> int:
        return self.roll(4)

    def d6(self) -> int:
        return self.roll(6)

    def last_rolls(self) -> List[RollRecord]:
        return list(self._history)


def seeded_dice(seed: Optional[int] = None, history_limit: int = 1) -> Dice:
    return Dice(random.Random(seed), history_limit=history_limit)


def scripted_dice(*values: int, history_limit: int = 1) -> Dice:
    return Dice(ScriptedSource(values), history_limit=history_limit)
