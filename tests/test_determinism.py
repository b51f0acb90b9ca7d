from __future__ import annotations

import pytest

from pushbox.engine.game import Engine
from pushbox.engine.serialize import (
    outcome_to_dict,
    parse_directions,
    replay,
    snapshot_to_dict,
    state_to_dict,
)
from pushbox.engine.types import DIRECTIONS, LevelDefinition
from pushbox.paths import get_paths
from pushbox.services.levels import LevelService


def _load_pack():
    paths = get_paths()
    return LevelService(paths.data_dir, paths.schema_dir).load_pack()


def test_engine_determinism_replay() -> None:
    level = _load_pack().get("two_crates")
    engine = Engine()
    engine.load(level)

    directions = []
    for i in range(25):
        d = DIRECTIONS[(i * 5 + 1) % 4]
        directions.append(d)
        engine.move(d)
        if engine.status == "won":
            break

    snap1 = state_to_dict(engine)
    snap2 = state_to_dict(replay(level, directions))
    assert snap1 == snap2


@pytest.mark.parametrize(
    ("level_id", "solution"),
    [
        ("first_push", "R"),
        ("around_the_corner", "DRURD"),
        ("two_crates", "RRRDL"),
    ],
)
def test_shipped_levels_are_solvable(level_id: str, solution: str) -> None:
    engine = replay(_load_pack().get(level_id), parse_directions(solution))
    assert engine.status == "won"
    assert engine.move_count == len(solution)


def test_replay_stops_at_win() -> None:
    engine = replay(_load_pack().get("first_push"), parse_directions("R L L"))
    assert engine.status == "won"
    assert engine.player_position() == (2, 1)


def test_parse_directions() -> None:
    assert parse_directions("uD l\nR") == ["up", "down", "left", "right"]
    with pytest.raises(ValueError):
        parse_directions("UX")


def test_snapshot_dict_matches_state() -> None:
    level = LevelDefinition(width=4, height=1, rows=("PB0T",), player_start=(0, 0))
    engine = replay(level, ["right"])
    snap = engine.snapshot()
    assert snap is not None
    assert snapshot_to_dict(snap) == {
        "width": 4,
        "height": 1,
        "rows": ["0PBT"],
        "player": [1, 0],
        "boxes": [[2, 0]],
    }
    state = state_to_dict(engine)
    assert state["rows"] == ["0PBT"]
    assert state["targets"] == [[3, 0]]
    assert state["status"] == "ready"


def test_replay_rejects_invalid_level() -> None:
    with pytest.raises(ValueError):
        replay(LevelDefinition(width=2, height=1, rows=("P",), player_start=(0, 0)), [])


def test_outcome_to_dict_rejects_unknown_values() -> None:
    with pytest.raises(TypeError):
        outcome_to_dict("step")  # type: ignore[arg-type]
