from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

TileKind = Literal["empty", "wall", "player", "box", "target"]
Direction = Literal["up", "down", "left", "right"]

# (x, y) with y=0 at the bottom row
Position = tuple[int, int]

DIRECTIONS: tuple[Direction, ...] = ("up", "down", "left", "right")

DIRECTION_DELTAS: dict[Direction, Position] = {
    "up": (0, 1),
    "down": (0, -1),
    "left": (-1, 0),
    "right": (1, 0),
}

CHAR_TO_TILE: dict[str, TileKind] = {
    "W": "wall",
    "P": "player",
    "B": "box",
    "T": "target",
}

TILE_TO_CHAR: dict[TileKind, str] = {
    "empty": "0",
    "wall": "W",
    "player": "P",
    "box": "B",
    "target": "T",
}

LoadErrorKind = Literal[
    "null_or_missing_data",
    "non_positive_dimensions",
    "row_count_mismatch",
    "row_length_mismatch",
    "player_count_mismatch",
]


def offset(pos: Position, direction: Direction) -> Position:
    dx, dy = DIRECTION_DELTAS[direction]
    return (pos[0] + dx, pos[1] + dy)


@dataclass(frozen=True)
class LevelDefinition:
    """Level as authored: rows are listed top-to-bottom.

    `player_start` is in internal (bottom-up) coordinates and is only used
    when the rows carry no 'P'.
    """

    width: int
    height: int
    rows: tuple[str, ...] | None
    player_start: Position
    id: str = ""
    name: str = ""


@dataclass(frozen=True)
class LoadError:
    kind: LoadErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


@dataclass(frozen=True)
class LoadResult:
    ok: bool
    error: LoadError | None = None


@dataclass(frozen=True)
class Snapshot:
    """Immutable copy of the grid at one point in time.

    `tiles` is indexed [y][x], bottom row first.
    """

    width: int
    height: int
    tiles: tuple[tuple[TileKind, ...], ...]
    player_pos: Position
    boxes: tuple[Position, ...]
