from __future__ import annotations

import threading
from dataclasses import dataclass, field

from whotengine.engine.actions import Action
from whotengine.engine.match import ActionRecord, StepResult, new_match, step
from whotengine.engine.rules import MatchConfig
from whotengine.engine.serialize import action_to_dict, snapshot
from whotengine.engine.state import MatchState
from whotengine.services.telemetry import TelemetryService


@dataclass
class LocalMatchHost:
    """In-process caller for a single match.

    Serializes actions, commits the returned state only when an action is
    accepted, keeps the accepted action history for replay, and writes
    every event and rejection to telemetry when a sink is configured.
    """

    match_id: str
    state: MatchState
    telemetry: TelemetryService | None = None
    history: list[ActionRecord] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @staticmethod
    def create(
        match_id: str, config: MatchConfig, telemetry: TelemetryService | None = None
    ) -> "LocalMatchHost":
        return LocalMatchHost(
            match_id=match_id, state=new_match(config, seed=match_id), telemetry=telemetry
        )

    def submit(self, action: Action, *, actor: str | None, now: int) -> StepResult:
        with self._lock:
            result = step(self.state, action, actor=actor, now=now)
            if result.ok:
                self.state = result.state
                self.history.append((actor, action, now))
            self._record(result, action, actor, now)
            return result

    def snapshot(self) -> dict[str, object]:
        with self._lock:
            return snapshot(self.state)

    def _record(self, result: StepResult, action: Action, actor: str | None, now: int) -> None:
        if self.telemetry is None:
            return
        if not result.ok:
            assert result.error is not None
            self.telemetry.log(
                self.match_id,
                "ACTION_REJECTED",
                {
                    "actor": actor,
                    "now": now,
                    "action": action_to_dict(action),
                    "code": result.error.code,
                    "message": str(result.error),
                },
            )
            return
        for ev in result.events:
            self.telemetry.log(self.match_id, str(ev["type"]), ev)
