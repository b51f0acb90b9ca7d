from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping

from pushbox.engine.game import Engine
from pushbox.engine.moves import MoveOutcome
from pushbox.engine.serialize import outcome_to_dict


@dataclass
class TelemetryService:
    path: Path

    def log(self, event_type: str, payload: Mapping[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        rec = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "type": event_type,
            "payload": dict(payload),
        }
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")


@dataclass
class TelemetryRecorder:
    """Writes an engine's events to telemetry."""

    telemetry: TelemetryService
    engine: Engine

    def attach(self) -> None:
        self.engine.on_moved(self._moved)
        self.engine.on_won(self._won)
        self.engine.on_load_error(self._load_error)

    def _moved(self, outcome: MoveOutcome) -> None:
        payload = outcome_to_dict(outcome)
        payload["level_id"] = self.engine.level_id
        self.telemetry.log("moved", payload)

    def _won(self) -> None:
        self.telemetry.log("won", {"level_id": self.engine.level_id, "moves": self.engine.move_count})

    def _load_error(self, reason: str) -> None:
        self.telemetry.log("load_error", {"reason": reason})
