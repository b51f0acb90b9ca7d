from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence

from jsonschema import Draft202012Validator

from pushbox.engine.types import LevelDefinition, Position


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path])
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int) or isinstance(v, bool):
        raise ContentError(f"Expected int for {key}")
    return v


def _parse_position(raw: object) -> Position:
    if (
        not isinstance(raw, list)
        or len(raw) != 2
        or not all(isinstance(v, int) and not isinstance(v, bool) for v in raw)
    ):
        raise ContentError("player_start must be [x, y]")
    return (raw[0], raw[1])


def parse_level(raw: Mapping[str, object]) -> LevelDefinition:
    """Build a LevelDefinition from its interchange dict.

    Only the shape is checked here; row/size consistency is checked when the
    level is loaded into a grid.
    """
    rows_raw = raw.get("rows")
    if not isinstance(rows_raw, list):
        raise ContentError("rows must be a list")
    name = raw.get("name", "")
    return LevelDefinition(
        width=_require_int(raw, "width"),
        height=_require_int(raw, "height"),
        rows=tuple(r for r in rows_raw if isinstance(r, str)),
        player_start=_parse_position(raw.get("player_start")),
        id=_require_str(raw, "id"),
        name=name if isinstance(name, str) else "",
    )


def level_to_dict(level: LevelDefinition) -> dict[str, object]:
    return {
        "id": level.id,
        "name": level.name,
        "width": level.width,
        "height": level.height,
        "rows": list(level.rows or ()),
        "player_start": list(level.player_start),
    }


@dataclass(frozen=True)
class LevelPack:
    """Ordered, immutable set of levels."""

    levels: dict[str, LevelDefinition]

    def get(self, level_id: str) -> LevelDefinition:
        return self.levels[level_id]

    def ids(self) -> Sequence[str]:
        return list(self.levels.keys())

    def at(self, index: int) -> LevelDefinition:
        return self.levels[self.ids()[index]]

    def __len__(self) -> int:
        return len(self.levels)


class LevelService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def load_pack(self, path: Path | None = None) -> LevelPack:
        pack_path = path or self._data_dir / "levels.json"
        schema = _load_json(self._schema_dir / "levels.schema.json")
        raw = _load_json(pack_path)
        validate_json(raw, schema, context=str(pack_path))

        if not isinstance(raw, dict):
            raise ContentError(f"{pack_path} must be an object")
        raw_levels = raw.get("levels")
        if not isinstance(raw_levels, list):
            raise ContentError(f"{pack_path}.levels must be a list")

        levels: dict[str, LevelDefinition] = {}
        for item in raw_levels:
            if not isinstance(item, dict):
                continue
            level = parse_level(item)
            if level.id in levels:
                raise ContentError(f"Duplicate level id: {level.id}")
            levels[level.id] = level
        return LevelPack(levels=levels)

    def validate_all(self, path: Path | None = None) -> None:
        # Load is validation (schema + parse)
        _ = self.load_pack(path)
