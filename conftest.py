import os
import random
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import PhysicsConfig  # noqa: E402
from layout import Containment  # noqa: E402


class ScriptedRandom:
    """Stands in for ``random.Random`` and replays recorded ``randrange`` picks."""

    def __init__(self, picks):
        self.picks = list(picks)
        self.calls: list[int] = []

    def randrange(self, stop):
        if not self.picks:
            raise AssertionError(f"script exhausted (randrange({stop}) after {len(self.calls)} calls)")
        value = self.picks.pop(0)
        if not 0 <= value < stop:
            raise AssertionError(f"scripted pick {value} outside range({stop})")
        self.calls.append(stop)
        return value


@pytest.fixture
def scripted_rng():
    return ScriptedRandom


@pytest.fixture
def serpentine_rng():
    """N=4 carve that always takes the first unvisited neighbour from (0, 0)."""
    return ScriptedRandom([0] * 17)


@pytest.fixture
def tie_break_rng():
    """N=3 carve from (1, 0) whose BFS has two cells at the maximum distance."""
    return ScriptedRandom([1, 0, 0, 0, 1, 0, 1, 0, 0, 0])


@pytest.fixture
def seeded_rng():
    return random.Random(1234)


@pytest.fixture
def weightless():
    return PhysicsConfig(gravity=0.0)


@pytest.fixture
def open_space():
    return Containment(10.0, 10.0, -10.0, 10.0)
