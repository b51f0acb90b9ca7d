from __future__ import annotations

from typing import Callable

from pushbox.engine.game import Engine
from pushbox.engine.moves import MoveOutcome
from pushbox.engine.types import Direction, LoadResult
from pushbox.services.levels import LevelPack


class Campaign:
    """Plays the levels of a pack in order on one engine.

    With `auto_advance`, a win loads the next level once `move()` has
    returned from the engine, so every won listener still sees the level
    that was won. Otherwise the caller decides when to `advance()`.
    """

    def __init__(self, engine: Engine, pack: LevelPack, auto_advance: bool = False) -> None:
        if len(pack) == 0:
            raise ValueError("Campaign needs at least one level.")
        self.engine = engine
        self.pack = pack
        self.auto_advance = auto_advance
        self.index = 0
        self.completed: list[str] = []
        self.finished = False
        self._advance_pending = False
        self._level_completed: list[Callable[[int], None]] = []
        self._all_completed: list[Callable[[], None]] = []
        engine.on_won(self._handle_won)

    def on_level_completed(self, listener: Callable[[int], None]) -> None:
        self._level_completed.append(listener)

    def on_all_levels_completed(self, listener: Callable[[], None]) -> None:
        self._all_completed.append(listener)

    @property
    def moves(self) -> int:
        """Grid-changing moves on the current level, net of undos."""
        return self.engine.move_count

    def start(self, index: int = 0) -> LoadResult:
        if not 0 <= index < len(self.pack):
            raise IndexError(f"Level index {index} out of range (0..{len(self.pack) - 1}).")
        result = self.engine.load(self.pack.at(index))
        if result.ok:
            self.finished = False
            self.index = index
        return result

    def move(self, direction: Direction) -> MoveOutcome:
        outcome = self.engine.move(direction)
        if self._advance_pending:
            self._advance_pending = False
            self.advance()
        return outcome

    def restart_current(self) -> None:
        self.engine.restart()

    def advance(self) -> bool:
        """Load the next level after a win. Returns False when there is none."""
        if self.finished or self.engine.status != "won":
            return False
        if self.index + 1 >= len(self.pack):
            self.finished = True
            for listener in list(self._all_completed):
                listener()
            return False
        return self.start(self.index + 1).ok

    def progress_label(self) -> str:
        return f"Level: {self.index + 1}/{len(self.pack)}"

    def _handle_won(self) -> None:
        level_id = self.pack.ids()[self.index]
        if level_id not in self.completed:
            self.completed.append(level_id)
        for listener in list(self._level_completed):
            listener(self.index)
        if self.auto_advance:
            self._advance_pending = True
