# client/session.py
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from cake_tower.client.game_entities import DebrisPiece, Layer, MovingObject
from cake_tower.client.game_world import StackOutcome, TowerWorld
from cake_tower.client.local_store import LocalStore
from cake_tower.client.scheduler import FrameScheduler
from cake_tower.client.scoring import ScoreKeeper
from cake_tower.shared.errors import ValidationError

logger = logging.getLogger(__name__)

MENU = "menu"
PLAYING = "playing"
GAMEOVER = "gameover"

NAME_REQUIRED = "Enter your name to start (required for leaderboard)."


def validate_name(name: Optional[str], message: str = NAME_REQUIRED) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError(message)
    return cleaned


@dataclass(frozen=True)
class FrameSnapshot:
    state: str
    score: int
    high_score: int
    combo: int
    tower: Tuple[Layer, ...]
    moving: Optional[MovingObject]
    debris: Tuple[DebrisPiece, ...]


class Session:
    """Menu -> Playing -> GameOver lifecycle around one TowerWorld."""

    def __init__(self, world: Optional[TowerWorld] = None, store: Optional[LocalStore] = None):
        self.world = world if world is not None else TowerWorld()
        self.store = store
        self.state = MENU
        self.player_name = ""

        high = store.high_score() if store else 0
        self.scores = ScoreKeeper(high, on_high_score=self._persist_high_score)
        self.scheduler = FrameScheduler(self.world.update)

    # ---------------- read-only views ----------------
    @property
    def score(self) -> int:
        return self.scores.score

    @property
    def high_score(self) -> int:
        return self.scores.high_score

    @property
    def combo(self) -> int:
        return self.scores.combo

    @property
    def speed(self) -> float:
        return self.world.speed

    def snapshot(self) -> FrameSnapshot:
        m = self.world.moving
        moving = MovingObject(m.x, m.width, m.style, m.direction) if m else None
        return FrameSnapshot(
            state=self.state,
            score=self.score,
            high_score=self.high_score,
            combo=self.combo,
            tower=tuple(self.world.tower),
            moving=moving,
            debris=tuple(d.copy() for d in self.world.debris),
        )

    # ---------------- transitions ----------------
    def start(self, name: Optional[str]):
        cleaned = validate_name(name)
        self.player_name = cleaned
        if self.store:
            self.store.save_player_name(cleaned)

        self.scores.reset()
        self.world.reset()
        self.state = PLAYING
        self.scheduler.start()
        logger.info("Session started for %s", cleaned)

    def restart(self, name: Optional[str] = None):
        self.start(self.player_name if name is None else name)

    def quit(self):
        self.scheduler.stop()
        self.world.clear()
        self.scores.reset()
        self.state = MENU

    def stack(self) -> Optional[StackOutcome]:
        if self.state != PLAYING:
            return None
        outcome = self.world.stack()
        if not outcome.hit:
            self._game_over()
            return outcome
        self.scores.register_hit(outcome.perfect)
        return outcome

    def action(self, name: Optional[str] = None) -> Optional[StackOutcome]:
        """The single stack/start binding (SPACE, tap)."""
        if self.state == PLAYING:
            return self.stack()
        if self.state == MENU:
            self.start(name)
        return None

    def tick(self, now_ms: float) -> Optional[float]:
        return self.scheduler.tick(now_ms)

    def _game_over(self):
        self.scheduler.stop()
        self.state = GAMEOVER
        self.scores.finish()
        logger.info("Game over: score=%d best=%d", self.score, self.high_score)

    def _persist_high_score(self, value: int):
        if self.store:
            self.store.save_high_score(value)
