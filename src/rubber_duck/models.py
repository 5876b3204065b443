from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

GRID_SIZE = 11


class Direction(str, Enum):
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    @property
    def delta(self) -> tuple[int, int]:
        return _DELTAS[self]

    @classmethod
    def parse(cls, text: str) -> Direction | None:
        return _DIRECTION_ALIASES.get(text.strip().lower())


_DELTAS = {
    Direction.NORTH: (-1, 0),
    Direction.SOUTH: (1, 0),
    Direction.EAST: (0, 1),
    Direction.WEST: (0, -1),
}

_DIRECTION_ALIASES = {
    "n": Direction.NORTH,
    "north": Direction.NORTH,
    "s": Direction.SOUTH,
    "south": Direction.SOUTH,
    "e": Direction.EAST,
    "east": Direction.EAST,
    "w": Direction.WEST,
    "west": Direction.WEST,
}


@dataclass(frozen=True, slots=True)
class Position:
    row: int
    col: int

    def in_bounds(self) -> bool:
        return 0 <= self.row < GRID_SIZE and 0 <= self.col < GRID_SIZE

    def moved(self, direction: Direction) -> Position:
        d_row, d_col = direction.delta
        return Position(self.row + d_row, self.col + d_col)

    def neighbours(self) -> list[Position]:
        """Cardinal neighbours that lie on the grid."""
        candidates = [self.moved(direction) for direction in Direction]
        return [pos for pos in candidates if pos.in_bounds()]

    def key(self) -> str:
        return f"tile/{self.row}/{self.col}"


START_POSITION = Position(10, 5)
CABIN_POSITION = Position(6, 5)


class Room(str, Enum):
    CABIN_MAIN = "cabin_main"
    CABIN_TERRACE = "cabin_terrace"
    WOODSHED = "woodshed"


class FireState(str, Enum):
    COLD = "cold"
    SMOLDERING = "smoldering"
    BURNING = "burning"
    ROARING = "roaring"
