from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .grid import GridState
from .types import DIRECTION_DELTAS, Direction, Position, offset

EntityKind = Literal["player", "box"]


@dataclass(frozen=True)
class EntityMove:
    kind: EntityKind
    before: Position
    after: Position


@dataclass(frozen=True)
class Blocked:
    direction: Direction
    player: Position
    type: Literal["blocked"] = "blocked"

    @property
    def moves(self) -> tuple[EntityMove, ...]:
        return ()


@dataclass(frozen=True)
class PlayerStep:
    direction: Direction
    player: EntityMove
    type: Literal["step"] = "step"

    @property
    def moves(self) -> tuple[EntityMove, ...]:
        return (self.player,)


@dataclass(frozen=True)
class PlayerPush:
    direction: Direction
    player: EntityMove
    box: EntityMove
    type: Literal["push"] = "push"

    @property
    def moves(self) -> tuple[EntityMove, ...]:
        return (self.box, self.player)


MoveOutcome = Blocked | PlayerStep | PlayerPush


def try_move(state: GridState, direction: Direction) -> MoveOutcome:
    """Resolve one player move and apply it to `state`.

    A push moves exactly one box; a box never pushes another box. Every
    check happens before the first mutation, so a move is either applied in
    full or not at all.
    """
    if direction not in DIRECTION_DELTAS:
        raise ValueError(f"Unknown direction: {direction!r}")

    start = state.player_pos
    target = offset(start, direction)
    if not state.is_passable(target):
        return Blocked(direction=direction, player=start)

    kind = state.tile_at(target)
    if kind in ("empty", "target"):
        state.relocate(start, target)
        return PlayerStep(
            direction=direction,
            player=EntityMove(kind="player", before=start, after=target),
        )

    if kind == "box":
        beyond = offset(target, direction)
        if not state.is_open(beyond):
            return Blocked(direction=direction, player=start)
        state.relocate(target, beyond)
        state.relocate(start, target)
        return PlayerPush(
            direction=direction,
            player=EntityMove(kind="player", before=start, after=target),
            box=EntityMove(kind="box", before=target, after=beyond),
        )

    return Blocked(direction=direction, player=start)
