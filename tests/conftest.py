import os

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pytest

from cake_tower.client.game_world import TowerWorld
from cake_tower.client.local_store import LocalStore


class StubRng:
    """Deterministic stand-in for random.Random: fixed random(), first choice()."""

    def __init__(self, value: float = 0.9, pick: int = 0):
        self.value = value
        self.pick = pick

    def random(self) -> float:
        return self.value

    def choice(self, seq):
        return seq[self.pick % len(seq)]


@pytest.fixture
def rng() -> StubRng:
    return StubRng()


@pytest.fixture
def world(rng) -> TowerWorld:
    return TowerWorld(field_w=600, field_h=522, rng=rng)


@pytest.fixture
def store(tmp_path) -> LocalStore:
    return LocalStore(tmp_path / "local_store.json")
