from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal

from .grid import GridState
from .history import HistoryManager
from .moves import Blocked, MoveOutcome, try_move
from .types import DIRECTION_DELTAS, Direction, LevelDefinition, LoadResult, Position, Snapshot, TileKind
from .win import is_won

EngineStatus = Literal["unloaded", "ready", "won"]
Event = dict[str, object]

MovedListener = Callable[[MoveOutcome], None]
WonListener = Callable[[], None]
LoadErrorListener = Callable[[str], None]


@dataclass(frozen=True)
class EngineConfig:
    event_log_limit: int = 256
    evaluate_win: bool = True  # False keeps the engine in "ready" forever (free play)


class Engine:
    """Composition root: one grid, one history, and the public game contract.

    Every operation is synchronous. Listeners are called in subscription
    order after the state change they report has been applied.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        grid: GridState | None = None,
        history: HistoryManager | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self._grid = grid or GridState()
        self._history = history or HistoryManager()
        self._level: LevelDefinition | None = None
        self.status: EngineStatus = "unloaded"
        self.event_log: list[Event] = []
        self._moved: list[MovedListener] = []
        self._won: list[WonListener] = []
        self._load_error: list[LoadErrorListener] = []

    # -- subscriptions ---------------------------------------------------

    def on_moved(self, listener: MovedListener) -> Callable[[], None]:
        self._moved.append(listener)
        return lambda: self._moved.remove(listener)

    def on_won(self, listener: WonListener) -> Callable[[], None]:
        self._won.append(listener)
        return lambda: self._won.remove(listener)

    def on_load_error(self, listener: LoadErrorListener) -> Callable[[], None]:
        self._load_error.append(listener)
        return lambda: self._load_error.remove(listener)

    def _log(self, event: Event) -> None:
        self.event_log.append(event)
        limit = self.config.event_log_limit
        if limit >= 0 and len(self.event_log) > limit:
            del self.event_log[: len(self.event_log) - limit]

    # -- commands --------------------------------------------------------

    def load(self, level: LevelDefinition) -> LoadResult:
        result = self._grid.load(level)
        if not result.ok:
            assert result.error is not None
            self._log({"type": "LOAD_FAILED", "kind": result.error.kind, "message": result.error.message})
            reason = str(result.error)
            for listener in list(self._load_error):
                listener(reason)
            return result

        self._level = level
        self._history.reset(self._grid)
        self.status = "ready"
        self._log(
            {
                "type": "LEVEL_LOADED",
                "level_id": level.id,
                "width": level.width,
                "height": level.height,
            }
        )
        return result

    def restart(self) -> None:
        """Reload the level most recently passed to `load`."""
        if self._level is None:
            raise RuntimeError("No level has been loaded.")
        result = self._grid.load(self._level)
        # the level already loaded once, so it cannot fail validation now
        assert result.ok
        self._history.reset(self._grid)
        self.status = "ready"
        self._log({"type": "RESTARTED", "level_id": self._level.id})

    def move(self, direction: Direction) -> MoveOutcome:
        if direction not in DIRECTION_DELTAS:
            raise ValueError(f"Unknown direction: {direction!r}")
        if self.status == "unloaded":
            raise RuntimeError("No level has been loaded.")

        if self.status == "won":
            outcome: MoveOutcome = Blocked(direction=direction, player=self._grid.player_pos)
        else:
            outcome = try_move(self._grid, direction)

        became_won = False
        if not isinstance(outcome, Blocked):
            self._history.record(self._grid)
            if self.config.evaluate_win and is_won(self._grid):
                self.status = "won"
                became_won = True

        self._log(
            {
                "type": "MOVED",
                "direction": direction,
                "outcome": outcome.type,
                "player": self._grid.player_pos,
            }
        )
        for listener in list(self._moved):
            listener(outcome)

        if became_won:
            self._log({"type": "LEVEL_WON", "level_id": self.level_id, "moves": self.move_count})
            for won_listener in list(self._won):
                won_listener()
        return outcome

    def undo(self) -> bool:
        if self.status != "ready":
            return False
        undone = self._history.undo(self._grid)
        if undone:
            self._log({"type": "UNDONE", "player": self._grid.player_pos})
        return undone

    # -- queries ---------------------------------------------------------

    @property
    def level(self) -> LevelDefinition | None:
        return self._level

    @property
    def level_id(self) -> str | None:
        return self._level.id if self._level is not None else None

    @property
    def grid(self) -> GridState:
        return self._grid

    @property
    def history_depth(self) -> int:
        return self._history.depth

    @property
    def move_count(self) -> int:
        """Moves that changed the grid on this level, net of undos."""
        return max(0, self._history.depth - 1)

    def _require_loaded(self) -> None:
        if self.status == "unloaded":
            raise RuntimeError("No level has been loaded.")

    def is_won(self) -> bool:
        return is_won(self._grid)

    def player_position(self) -> Position:
        self._require_loaded()
        return self._grid.player_pos

    def tile_at(self, pos: Position) -> TileKind:
        self._require_loaded()
        return self._grid.tile_at(pos)

    def is_target(self, pos: Position) -> bool:
        self._require_loaded()
        return self._grid.is_target(pos)

    def box_positions(self) -> list[Position]:
        self._require_loaded()
        return self._grid.box_positions()

    def rows(self) -> list[str]:
        self._require_loaded()
        return self._grid.to_rows()

    def snapshot(self) -> Snapshot | None:
        return self._history.peek()
