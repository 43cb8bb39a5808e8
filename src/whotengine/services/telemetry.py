from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Mapping


@dataclass
class TelemetryService:
    """Append-only JSON-lines log of match events and rejected actions.

    Several matches may share one file; every record carries the id of the
    match it belongs to so `read` can pull a single match back out.
    """

    path: Path

    def log(self, match_id: str, event_type: str, payload: Mapping[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        rec = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "match_id": match_id,
            "type": event_type,
            "payload": {k: v for k, v in payload.items() if k != "type"},
        }
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")

    def read(self, match_id: str | None = None) -> Iterable[dict[str, object]]:
        if not self.path.exists():
            return []
        with self.path.open("r", encoding="utf-8") as f:
            records = [json.loads(line) for line in f if line.strip()]
        if match_id is None:
            return records
        return [r for r in records if r.get("match_id") == match_id]
