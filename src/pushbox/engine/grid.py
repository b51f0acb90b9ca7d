from __future__ import annotations

from collections.abc import Iterator, Sequence

from .types import (
    CHAR_TO_TILE,
    TILE_TO_CHAR,
    LevelDefinition,
    LoadError,
    LoadResult,
    Position,
    TileKind,
)

TileRows = tuple[tuple[TileKind, ...], ...]

_FLOOR: frozenset[TileKind] = frozenset(("empty", "target"))


def decode_tile(ch: str) -> TileKind:
    return CHAR_TO_TILE.get(ch, "empty")


def rows_from_tiles(tiles: Sequence[Sequence[TileKind]]) -> list[str]:
    """Serialize bottom-up tiles back to top-to-bottom row strings."""
    height = len(tiles)
    return ["".join(TILE_TO_CHAR[t] for t in tiles[height - 1 - r]) for r in range(height)]


def validate_level(level: LevelDefinition | None) -> LoadError | None:
    """Return the first problem that would prevent `level` from loading."""
    if level is None or level.rows is None:
        return LoadError("null_or_missing_data", "Level has no row data.")
    if any(not isinstance(row, str) for row in level.rows):
        return LoadError("null_or_missing_data", "Every row must be a string.")
    if level.width <= 0 or level.height <= 0:
        return LoadError(
            "non_positive_dimensions",
            f"Dimensions must be positive, got {level.width}x{level.height}.",
        )
    if len(level.rows) != level.height:
        return LoadError(
            "row_count_mismatch",
            f"Expected {level.height} rows, got {len(level.rows)}.",
        )
    for r, row in enumerate(level.rows):
        if len(row) != level.width:
            return LoadError(
                "row_length_mismatch",
                f"Row {r} has length {len(row)}, expected {level.width}.",
            )

    players = sum(row.count("P") for row in level.rows)
    if players > 1:
        return LoadError("player_count_mismatch", f"Level has {players} players, expected 1.")
    if players == 0:
        x, y = level.player_start
        if not (0 <= x < level.width and 0 <= y < level.height):
            return LoadError(
                "player_count_mismatch",
                f"No 'P' in rows and player_start {level.player_start} is out of bounds.",
            )
        under = decode_tile(level.rows[level.height - 1 - y][x])
        if under not in _FLOOR:
            return LoadError(
                "player_count_mismatch",
                f"No 'P' in rows and player_start {level.player_start} is not a free cell.",
            )
    return None


class GridState:
    """Authoritative tile store for the active level.

    Collaborators read it through queries and mutate it only via
    `relocate` (moves) and `restore` (undo).
    """

    def __init__(self) -> None:
        self.width = 0
        self.height = 0
        self._tiles: list[list[TileKind]] = []
        self._targets: frozenset[Position] = frozenset()
        self.player_pos: Position = (0, 0)
        self.loaded = False

    def load(self, level: LevelDefinition) -> LoadResult:
        err = validate_level(level)
        if err is not None:
            return LoadResult(ok=False, error=err)
        assert level.rows is not None

        tiles: list[list[TileKind]] = []
        targets: set[Position] = set()
        player: Position | None = None
        for y in range(level.height):
            row = level.rows[level.height - 1 - y]
            line: list[TileKind] = []
            for x, ch in enumerate(row):
                kind = decode_tile(ch)
                if kind == "target":
                    targets.add((x, y))
                elif kind == "player":
                    player = (x, y)
                line.append(kind)
            tiles.append(line)

        # The 'P' in the rows wins over player_start.
        if player is None:
            player = level.player_start
            tiles[player[1]][player[0]] = "player"

        self.width = level.width
        self.height = level.height
        self._tiles = tiles
        self._targets = frozenset(targets)
        self.player_pos = player
        self.loaded = True
        return LoadResult(ok=True)

    @property
    def targets(self) -> frozenset[Position]:
        return self._targets

    def in_bounds(self, pos: Position) -> bool:
        x, y = pos
        return 0 <= x < self.width and 0 <= y < self.height

    def is_passable(self, pos: Position) -> bool:
        return self.in_bounds(pos) and self._tiles[pos[1]][pos[0]] != "wall"

    def tile_at(self, pos: Position) -> TileKind:
        if not self.in_bounds(pos):
            raise IndexError(f"Position {pos} is outside the {self.width}x{self.height} grid.")
        return self._tiles[pos[1]][pos[0]]

    def is_target(self, pos: Position) -> bool:
        return pos in self._targets

    def is_open(self, pos: Position) -> bool:
        """True if an entity may be moved onto `pos`."""
        return self.is_passable(pos) and self._tiles[pos[1]][pos[0]] in _FLOOR

    def cells(self) -> Iterator[tuple[Position, TileKind]]:
        for y, line in enumerate(self._tiles):
            for x, kind in enumerate(line):
                yield (x, y), kind

    def box_positions(self) -> list[Position]:
        return sorted(pos for pos, kind in self.cells() if kind == "box")

    def box_count(self) -> int:
        return sum(1 for _, kind in self.cells() if kind == "box")

    def player_count(self) -> int:
        return sum(1 for _, kind in self.cells() if kind == "player")

    def tile_rows(self) -> TileRows:
        return tuple(tuple(line) for line in self._tiles)

    def to_rows(self) -> list[str]:
        return rows_from_tiles(self._tiles)

    def relocate(self, src: Position, dst: Position) -> None:
        """Move the player or box at `src` onto the free cell `dst`."""
        kind = self.tile_at(src)
        if kind not in ("player", "box"):
            raise ValueError(f"Nothing movable at {src} ({kind}).")
        if not self.is_open(dst):
            raise ValueError(f"Cannot move {kind} onto {dst} ({self.tile_at(dst)}).")
        self._tiles[src[1]][src[0]] = "target" if src in self._targets else "empty"
        self._tiles[dst[1]][dst[0]] = kind
        if kind == "player":
            self.player_pos = dst

    def restore(self, tiles: TileRows, player_pos: Position) -> None:
        """Replace the whole grid with `tiles`; goal cells stay as loaded."""
        if len(tiles) != self.height or any(len(line) != self.width for line in tiles):
            raise ValueError("Restored tiles do not match the loaded grid size.")
        self._tiles = [list(line) for line in tiles]
        self.player_pos = player_pos
