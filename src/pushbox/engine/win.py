from __future__ import annotations

from .grid import GridState


def is_won(state: GridState) -> bool:
    """True when every goal cell holds a box. A level without goals is never won."""
    if not state.loaded or not state.targets:
        return False
    return all(state.tile_at(pos) == "box" for pos in state.targets)
