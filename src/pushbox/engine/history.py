from __future__ import annotations

from .grid import GridState
from .types import Snapshot


def capture(state: GridState) -> Snapshot:
    return Snapshot(
        width=state.width,
        height=state.height,
        tiles=state.tile_rows(),
        player_pos=state.player_pos,
        boxes=tuple(state.box_positions()),
    )


class HistoryManager:
    """Snapshot stack for undo.

    The bottom entry is the baseline taken at load time and is never popped.
    Undo always rebuilds the grid from a full snapshot rather than patching
    the last move back.
    """

    def __init__(self) -> None:
        self._stack: list[Snapshot] = []

    @property
    def depth(self) -> int:
        return len(self._stack)

    def reset(self, state: GridState) -> None:
        self._stack.clear()
        self._stack.append(capture(state))

    def record(self, state: GridState) -> None:
        if not self._stack:
            raise RuntimeError("History has no baseline; call reset() after loading.")
        self._stack.append(capture(state))

    def undo(self, state: GridState) -> bool:
        if len(self._stack) <= 1:
            return False
        self._stack.pop()
        prev = self._stack[-1]
        state.restore(prev.tiles, prev.player_pos)
        return True

    def peek(self) -> Snapshot | None:
        return self._stack[-1] if self._stack else None
