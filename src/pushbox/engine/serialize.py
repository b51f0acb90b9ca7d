from __future__ import annotations

from typing import Iterable

from .game import Engine, EngineConfig
from .grid import rows_from_tiles
from .moves import Blocked, EntityMove, MoveOutcome, PlayerPush, PlayerStep
from .types import Direction, LevelDefinition, Snapshot

_DIRECTION_CHARS: dict[str, Direction] = {
    "u": "up",
    "d": "down",
    "l": "left",
    "r": "right",
}


def parse_directions(text: str) -> list[Direction]:
    """Parse a compact move string such as "RRdL" into directions."""
    out: list[Direction] = []
    for ch in text:
        if ch.isspace():
            continue
        d = _DIRECTION_CHARS.get(ch.lower())
        if d is None:
            raise ValueError(f"Invalid move character: {ch!r}")
        out.append(d)
    return out


def _entity_to_dict(m: EntityMove) -> dict[str, object]:
    return {"kind": m.kind, "before": list(m.before), "after": list(m.after)}


def outcome_to_dict(outcome: MoveOutcome) -> dict[str, object]:
    if isinstance(outcome, PlayerStep):
        return {
            "type": "step",
            "direction": outcome.direction,
            "player": _entity_to_dict(outcome.player),
        }
    if isinstance(outcome, PlayerPush):
        return {
            "type": "push",
            "direction": outcome.direction,
            "player": _entity_to_dict(outcome.player),
            "box": _entity_to_dict(outcome.box),
        }
    if isinstance(outcome, Blocked):
        return {"type": "blocked", "direction": outcome.direction, "player": list(outcome.player)}
    raise TypeError(f"Unknown move outcome: {outcome!r}")


def snapshot_to_dict(snap: Snapshot) -> dict[str, object]:
    return {
        "width": snap.width,
        "height": snap.height,
        "rows": rows_from_tiles(snap.tiles),
        "player": list(snap.player_pos),
        "boxes": [list(p) for p in snap.boxes],
    }


def state_to_dict(engine: Engine) -> dict[str, object]:
    """Return a JSON-serializable canonical view of the engine state."""
    if engine.status == "unloaded":
        return {"status": "unloaded"}
    grid = engine.grid
    return {
        "level_id": engine.level_id,
        "status": engine.status,
        "width": grid.width,
        "height": grid.height,
        "rows": grid.to_rows(),
        "player": list(grid.player_pos),
        "boxes": [list(p) for p in grid.box_positions()],
        "targets": [list(p) for p in sorted(grid.targets)],
        "won": engine.is_won(),
        "moves": engine.move_count,
        "history_depth": engine.history_depth,
    }


def replay(
    level: LevelDefinition,
    directions: Iterable[Direction],
    config: EngineConfig | None = None,
) -> Engine:
    engine = Engine(config=config)
    result = engine.load(level)
    if not result.ok:
        raise ValueError(f"Cannot replay an invalid level: {result.error}")
    for d in directions:
        if engine.status == "won":
            break
        engine.move(d)
    return engine
