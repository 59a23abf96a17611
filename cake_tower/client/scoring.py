# client/scoring.py
from typing import Callable, Optional

from cake_tower.shared.constants import APP_TITLE
from cake_tower.shared.game_config import CFG


def next_combo(combo: int, perfect: bool) -> int:
    return combo + 1 if perfect else 0


def points_for(combo: int, perfect: bool) -> int:
    """Points for a hit, given the combo *after* that hit."""
    return CFG.points_base + CFG.points_per_combo * combo + (CFG.perfect_bonus if perfect else 0)


def share_text(name: str, score: int) -> str:
    return f"{(name or '').strip() or 'Player'} scored {score} in {APP_TITLE} — can you beat me?"


class ScoreKeeper:
    """Score, combo and the process-wide best score.

    `on_high_score` is called with the new value every time the best score
    goes up, so callers can persist it right away.
    """

    def __init__(self, high_score: int = 0, on_high_score: Optional[Callable[[int], None]] = None):
        self.score = 0
        self.combo = 0
        self.high_score = max(0, int(high_score))
        self.on_high_score = on_high_score

    def reset(self):
        self.score = 0
        self.combo = 0

    def register_hit(self, perfect: bool) -> int:
        self.combo = next_combo(self.combo, perfect)
        pts = points_for(self.combo, perfect)
        self.score += pts
        self._bump_high_score()
        return pts

    def finish(self):
        self._bump_high_score()

    def _bump_high_score(self):
        if self.score > self.high_score:
            self.high_score = self.score
            if self.on_high_score:
                self.on_high_score(self.high_score)
