# client/game_entities.py
from dataclasses import dataclass
from typing import Tuple

import pygame

Vec2 = pygame.math.Vector2
Color = Tuple[int, int, int]


@dataclass(frozen=True)
class CakeStyle:
    base: Color
    frosting: Color
    cream: Color
    sprinkles: Tuple[Color, ...]
    height: int


CAKE_STYLES: Tuple[CakeStyle, ...] = (
    CakeStyle((255, 20, 147), (255, 182, 217), (255, 255, 255), ((255, 215, 0), (0, 206, 209), (255, 99, 71)), 38),
    CakeStyle((147, 112, 219), (224, 204, 255), (240, 230, 255), ((255, 215, 0), (255, 105, 180), (0, 206, 209)), 36),
    CakeStyle((255, 215, 0), (255, 249, 230), (255, 255, 255), ((255, 20, 147), (147, 112, 219), (255, 99, 71)), 40),
    CakeStyle((255, 99, 71), (255, 212, 193), (255, 230, 224), ((255, 215, 0), (0, 206, 209), (255, 105, 180)), 35),
    CakeStyle((72, 209, 204), (193, 240, 237), (224, 255, 255), ((255, 215, 0), (255, 20, 147), (147, 112, 219)), 37),
    CakeStyle((255, 105, 180), (255, 214, 232), (255, 240, 245), ((255, 215, 0), (147, 112, 219), (0, 206, 209)), 39),
)


@dataclass(frozen=True)
class Layer:
    x: float
    width: float
    style: CakeStyle

    @property
    def right(self) -> float:
        return self.x + self.width


@dataclass
class MovingObject:
    x: float
    width: float
    style: CakeStyle
    direction: int = 1   # +1 right, -1 left

    @property
    def right(self) -> float:
        return self.x + self.width


@dataclass
class DebrisPiece:
    pos: Vec2
    vel: Vec2
    width: float
    style: CakeStyle
    rot: float = 0.0
    rot_speed: float = 0.0

    @property
    def x(self) -> float:
        return self.pos.x

    @property
    def y(self) -> float:
        return self.pos.y

    def copy(self) -> "DebrisPiece":
        return DebrisPiece(Vec2(self.pos), Vec2(self.vel), self.width, self.style, self.rot, self.rot_speed)
