# client/game_world.py
import logging
import math
import random
from dataclasses import dataclass, field
from typing import List, Optional

from cake_tower.client.game_entities import CAKE_STYLES, DebrisPiece, Layer, MovingObject, Vec2
from cake_tower.shared.constants import HEIGHT, WIDTH
from cake_tower.shared.game_config import CFG

logger = logging.getLogger(__name__)


def round_half_up(v: float) -> int:
    return int(math.floor(v + 0.5))


def perfect_threshold(moving_width: float) -> int:
    return max(CFG.perfect_min, int(math.floor(moving_width * CFG.perfect_ratio)))


@dataclass
class StackOutcome:
    hit: bool
    perfect: bool
    overlap: int
    layer: Optional[Layer] = None
    debris: List[DebrisPiece] = field(default_factory=list)


# ---------------- World ----------------
class TowerWorld:
    """
    Tower, moving layer and falling debris for one session.

    update(dt) integrates motion, stack() resolves the player's drop.
    Randomness (start edge, layer style, miss spin) comes from `rng` so a
    stubbed generator makes every outcome reproducible.
    """

    def __init__(self, field_w: int = WIDTH, field_h: int = HEIGHT, rng: Optional[random.Random] = None):
        self.field_w = field_w
        self.field_h = field_h
        self.rng = rng if rng is not None else random.Random()

        self.tower: List[Layer] = []
        self.moving: Optional[MovingObject] = None
        self.debris: List[DebrisPiece] = []

        self.speed: float = CFG.base_speed
        # cumulative height of every layer ever placed; survives history truncation
        self.tower_height: int = 0

    # ---------------- Layout ----------------
    def base_y(self) -> float:
        """Screen y at which pieces cut from the moving layer start falling."""
        return self.field_h - self.tower_height - CFG.tower_offset

    def top(self) -> Optional[Layer]:
        return self.tower[-1] if self.tower else None

    # ---------------- Lifecycle ----------------
    def reset(self):
        self.clear()
        base = Layer(math.floor((self.field_w - CFG.initial_width) / 2), CFG.initial_width, CAKE_STYLES[0])
        self.tower.append(base)
        self.tower_height = base.style.height
        self.moving = self._spawn_moving(CFG.initial_width, self.rng.choice(CAKE_STYLES))

    def clear(self):
        self.tower.clear()
        self.debris.clear()
        self.moving = None
        self.speed = CFG.base_speed
        self.tower_height = 0

    def _spawn_moving(self, width: float, style) -> MovingObject:
        if self.rng.random() > 0.5:
            return MovingObject(0, width, style, 1)
        return MovingObject(max(0, self.field_w - width), width, style, -1)

    # ---------------- Physics update ----------------
    def update(self, dt: float):
        if dt <= 0:
            return
        self._move_object(dt)
        self._step_debris(dt)

    def _move_object(self, dt: float):
        m = self.moving
        if m is None:
            return
        px_per_ms = self.speed / CFG.time_unit_ms
        nx = m.x + m.direction * px_per_ms * dt
        if nx <= 0:
            nx = 0
            m.direction = 1
        if nx + m.width >= self.field_w:
            nx = max(0, self.field_w - m.width)
            m.direction = -1
        m.x = nx

    def _step_debris(self, dt: float):
        if not self.debris:
            return
        s = dt / CFG.time_unit_ms
        limit = self.field_h + CFG.debris_margin
        for d in self.debris:
            d.vel.y += CFG.gravity * s
            d.pos += d.vel * s
            d.rot += d.rot_speed * s
        self.debris = [d for d in self.debris if d.pos.y < limit]

    # ---------------- Stacking ----------------
    def stack(self) -> StackOutcome:
        m = self.moving
        top = self.top()
        if m is None or top is None:
            raise RuntimeError("stack() needs a moving layer and a non-empty tower")

        m_l, m_r = m.x, m.right
        t_l, t_r = top.x, top.right
        left = max(m_l, t_l)
        overlap = max(0, round_half_up(min(m_r, t_r) - left))

        if overlap <= 0:
            piece = DebrisPiece(
                Vec2(m.x, self.base_y()),
                Vec2((self.rng.random() - 0.5) * 6, 0),
                m.width,
                m.style,
                rot_speed=(self.rng.random() - 0.5) * 20,
            )
            self.debris = [piece]
            self.moving = None
            return StackOutcome(hit=False, perfect=False, overlap=0, debris=[piece])

        thr = perfect_threshold(m.width)
        perfect = abs(m_l - t_l) <= thr and abs(m_r - t_r) <= thr

        y = self.base_y()
        cut: List[DebrisPiece] = []
        if m_l < t_l:
            cut.append(DebrisPiece(Vec2(m_l, y), Vec2(-4, -2), t_l - m_l, m.style, rot_speed=-12))
        if m_r > t_r:
            cut.append(DebrisPiece(Vec2(t_r, y), Vec2(4, -2), m_r - t_r, m.style, rot_speed=12))
        self.debris.extend(cut)

        prev_len = len(self.tower)
        layer = Layer(left, overlap, self.rng.choice(CAKE_STYLES))
        self.tower.append(layer)
        self.tower_height += layer.style.height
        if len(self.tower) > CFG.max_layers:
            del self.tower[: len(self.tower) - CFG.max_layers]

        # speed-up cadence keys off the length left by the previous stack
        if prev_len % 2 == 0:
            self.speed = min(CFG.speed_cap, self.speed + CFG.speed_step)

        self.moving = self._spawn_moving(overlap, CAKE_STYLES[(prev_len + 1) % len(CAKE_STYLES)])
        return StackOutcome(hit=True, perfect=perfect, overlap=overlap, layer=layer, debris=cut)
