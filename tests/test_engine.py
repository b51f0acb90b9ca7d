from __future__ import annotations

import pytest

from pushbox.engine.game import Engine, EngineConfig
from pushbox.engine.moves import Blocked, MoveOutcome, PlayerPush, PlayerStep
from pushbox.engine.types import DIRECTIONS, LevelDefinition


def _level(rows: list[str], level_id: str = "test") -> LevelDefinition:
    return LevelDefinition(
        width=len(rows[0]),
        height=len(rows),
        rows=tuple(rows),
        player_start=(0, 0),
        id=level_id,
    )


def _state(engine: Engine) -> tuple[list[str], tuple[int, int], list[tuple[int, int]]]:
    return engine.rows(), engine.player_position(), engine.box_positions()


def test_single_row_push_wins() -> None:
    engine = Engine()
    assert engine.load(_level(["PBT"])).ok
    assert engine.rows() == ["PBT"]

    won: list[bool] = []
    engine.on_won(lambda: won.append(True))
    outcome = engine.move("right")
    assert isinstance(outcome, PlayerPush)
    assert engine.is_won()
    assert engine.status == "won"
    assert won == [True]


def test_player_unique_after_load() -> None:
    engine = Engine()
    assert engine.load(_level(["W0B", "0PT"])).ok
    assert engine.tile_at(engine.player_position()) == "player"
    assert engine.grid.player_count() == 1


def test_undo_right_after_load_returns_false() -> None:
    engine = Engine()
    engine.load(_level(["PB0T"]))
    before = _state(engine)
    assert not engine.undo()
    assert _state(engine) == before
    assert engine.history_depth == 1


def test_move_then_undo_restores_every_direction() -> None:
    rows = ["WWWWWWW", "W00T00W", "W0BPB0W", "W00B00W", "W00000W", "WWWWWWW"]
    for d in DIRECTIONS:
        engine = Engine()
        assert engine.load(_level(rows)).ok
        # walk onto the goal and back so there is history below the move
        engine.move("up")
        engine.move("down")
        before = _state(engine)
        outcome = engine.move(d)
        if isinstance(outcome, Blocked):
            assert _state(engine) == before
            continue
        assert engine.undo()
        assert _state(engine) == before


def test_blocked_move_changes_nothing() -> None:
    engine = Engine()
    engine.load(_level(["PBW"]))
    depth = engine.history_depth
    seen: list[MoveOutcome] = []
    engine.on_moved(seen.append)

    outcome = engine.move("right")
    assert isinstance(outcome, Blocked)
    assert engine.rows() == ["PBW"]
    assert engine.player_position() == (0, 0)
    assert engine.history_depth == depth
    assert seen == [outcome]


def test_win_flips_back_when_box_leaves_goal() -> None:
    engine = Engine(config=EngineConfig(evaluate_win=False))
    engine.load(_level(["PBT0"]))
    engine.move("right")
    assert engine.is_won()
    assert engine.status == "ready"
    engine.move("right")
    assert not engine.is_won()


def test_won_is_terminal_until_restart() -> None:
    engine = Engine()
    engine.load(_level(["0PBT"]))
    engine.move("right")
    assert engine.status == "won"

    outcome = engine.move("left")
    assert isinstance(outcome, Blocked)
    assert engine.player_position() == (2, 0)
    assert not engine.undo()

    engine.restart()
    assert engine.status == "ready"
    assert engine.rows() == ["0PBT"]
    assert engine.history_depth == 1
    assert isinstance(engine.move("left"), PlayerStep)


def test_failed_load_keeps_current_level_and_reports() -> None:
    engine = Engine()
    engine.load(_level(["P0B0T"]))
    engine.move("right")
    reasons: list[str] = []
    engine.on_load_error(reasons.append)

    bad = LevelDefinition(width=-1, height=1, rows=("P",), player_start=(0, 0))
    res = engine.load(bad)
    assert not res.ok
    assert res.error is not None
    assert res.error.kind == "non_positive_dimensions"
    assert reasons == [str(res.error)]
    assert engine.status == "ready"
    assert engine.player_position() == (1, 0)
    assert engine.level_id == "test"
    assert engine.event_log[-1]["type"] == "LOAD_FAILED"


def test_failed_first_load_stays_unloaded() -> None:
    engine = Engine()
    res = engine.load(LevelDefinition(width=1, height=1, rows=None, player_start=(0, 0)))
    assert not res.ok
    assert engine.status == "unloaded"
    with pytest.raises(RuntimeError):
        engine.move("up")
    with pytest.raises(RuntimeError):
        engine.restart()


def test_restart_replays_latest_level_and_clears_history() -> None:
    engine = Engine()
    engine.load(_level(["P000"], level_id="a"))
    engine.load(_level(["0P00"], level_id="b"))
    engine.move("right")
    engine.move("right")
    assert engine.move_count == 2
    engine.restart()
    assert engine.level_id == "b"
    assert engine.player_position() == (1, 0)
    assert engine.move_count == 0
    assert engine.event_log[-1] == {"type": "RESTARTED", "level_id": "b"}


def test_move_count_tracks_undo() -> None:
    engine = Engine()
    engine.load(_level(["P000"]))
    engine.move("right")
    engine.move("left")
    engine.move("left")  # blocked
    assert engine.move_count == 2
    engine.undo()
    assert engine.move_count == 1


def test_listeners_see_applied_state_and_can_unsubscribe() -> None:
    engine = Engine()
    engine.load(_level(["P00"]))
    positions: list[tuple[int, int]] = []
    unsubscribe = engine.on_moved(lambda _: positions.append(engine.player_position()))
    engine.move("right")
    unsubscribe()
    engine.move("right")
    assert positions == [(1, 0)]


def test_event_log_is_capped() -> None:
    engine = Engine(config=EngineConfig(event_log_limit=3))
    engine.load(_level(["P00"]))
    for d in ("right", "left", "right", "left"):
        engine.move(d)  # type: ignore[arg-type]
    assert len(engine.event_log) == 3
    assert all(e["type"] == "MOVED" for e in engine.event_log)


def test_level_without_goals_is_never_won() -> None:
    engine = Engine()
    engine.load(_level(["PB0"]))
    engine.move("right")
    assert not engine.is_won()
    assert engine.status == "ready"


def test_queries_require_a_loaded_level() -> None:
    engine = Engine()
    for query in (
        engine.player_position,
        engine.rows,
        engine.box_positions,
        lambda: engine.tile_at((0, 0)),
        lambda: engine.is_target((0, 0)),
    ):
        with pytest.raises(RuntimeError):
            query()
