from __future__ import annotations

from typing import Mapping

from .actions import (
    Action,
    CallLastCardAction,
    ChallengeLastCardAction,
    CheckTimeoutAction,
    DrawCardAction,
    JoinMatchAction,
    LeaveMatchAction,
    PlayCardAction,
    StartAction,
)
from .rules import MatchConfig
from .state import MatchState, PlayerState
from .types import SUITS, card_from_dict, card_to_dict


def action_to_dict(a: Action) -> dict[str, object]:
    if isinstance(a, JoinMatchAction):
        return {"type": "join", "name": a.name}
    if isinstance(a, StartAction):
        return {"type": "start"}
    if isinstance(a, PlayCardAction):
        return {"type": "play", "hand_index": a.hand_index, "chosen_suit": a.chosen_suit}
    if isinstance(a, DrawCardAction):
        return {"type": "draw"}
    if isinstance(a, CallLastCardAction):
        return {"type": "call_last_card"}
    if isinstance(a, ChallengeLastCardAction):
        return {"type": "challenge", "target_index": a.target_index}
    if isinstance(a, LeaveMatchAction):
        return {"type": "leave"}
    if isinstance(a, CheckTimeoutAction):
        return {"type": "check_timeout"}
    # should be unreachable
    return {"type": "unknown"}


def action_from_dict(d: Mapping[str, object]) -> Action:
    t = d.get("type")
    if t == "join":
        return JoinMatchAction(name=str(d.get("name", "")))
    if t == "start":
        return StartAction()
    if t == "play":
        idx = d.get("hand_index")
        suit = d.get("chosen_suit")
        if not isinstance(idx, int):
            raise ValueError("play action needs an integer hand_index")
        if suit is not None and suit not in SUITS:
            raise ValueError(f"Unknown suit: {suit!r}")
        return PlayCardAction(hand_index=idx, chosen_suit=suit)  # type: ignore[arg-type]
    if t == "draw":
        return DrawCardAction()
    if t == "call_last_card":
        return CallLastCardAction()
    if t == "challenge":
        target = d.get("target_index")
        if not isinstance(target, int):
            raise ValueError("challenge action needs an integer target_index")
        return ChallengeLastCardAction(target_index=target)
    if t == "leave":
        return LeaveMatchAction()
    if t == "check_timeout":
        return CheckTimeoutAction()
    raise ValueError(f"Unknown action type: {t!r}")


def _player_to_dict(p: PlayerState | None) -> dict[str, object] | None:
    if p is None:
        return None
    return {
        "player_id": p.player_id,
        "name": p.name,
        "hand": [card_to_dict(c) for c in p.hand],
        "called_last_card": p.called_last_card,
        "active": p.active,
    }


def _player_from_dict(d: object) -> PlayerState | None:
    if d is None:
        return None
    if not isinstance(d, dict):
        raise ValueError("player entry must be an object or null")
    return PlayerState(
        player_id=str(d["player_id"]),
        name=str(d["name"]),
        hand=[card_from_dict(c) for c in d.get("hand", [])],
        called_last_card=bool(d.get("called_last_card", False)),
        active=bool(d.get("active", True)),
    )


def snapshot(state: MatchState) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the current match state."""
    return {
        "ruleset": state.config.ruleset,
        "seed": state.seed,
        "status": state.status,
        "winner": state.winner,
        "current_player": state.current_player,
        "players": [_player_to_dict(p) for p in state.players],
        "draw_pile": [card_to_dict(c) for c in state.draw_pile],
        "discard_pile": [card_to_dict(c) for c in state.discard_pile],
        "pending_penalty_count": state.pending_penalty_count,
        "pending_penalty_rank": state.pending_penalty_rank,
        "active_demand_suit": state.active_demand_suit,
        "forced_replay_active": state.forced_replay_active,
        "forced_replay_suit": state.forced_replay_suit,
        "turn_started_at": state.turn_started_at,
        "round_number": state.round_number,
    }


def restore(snap: Mapping[str, object], config: MatchConfig) -> MatchState:
    """Rebuild a MatchState from `snapshot` output.

    The config is not part of the snapshot; the caller supplies the one
    the match was created with.
    """
    players = snap.get("players")
    if not isinstance(players, list) or len(players) != config.max_players:
        raise ValueError("snapshot players do not match the config's seat count")
    return MatchState(
        config=config,
        seed=str(snap["seed"]),
        players=[_player_from_dict(p) for p in players],
        draw_pile=[card_from_dict(c) for c in snap.get("draw_pile", [])],  # type: ignore[union-attr]
        discard_pile=[card_from_dict(c) for c in snap.get("discard_pile", [])],  # type: ignore[union-attr]
        current_player=int(snap.get("current_player", 0)),  # type: ignore[arg-type]
        status=snap.get("status", "waiting"),  # type: ignore[arg-type]
        winner=snap.get("winner"),  # type: ignore[arg-type]
        pending_penalty_count=int(snap.get("pending_penalty_count", 0)),  # type: ignore[arg-type]
        pending_penalty_rank=snap.get("pending_penalty_rank"),  # type: ignore[arg-type]
        active_demand_suit=snap.get("active_demand_suit"),  # type: ignore[arg-type]
        forced_replay_active=bool(snap.get("forced_replay_active", False)),
        forced_replay_suit=snap.get("forced_replay_suit"),  # type: ignore[arg-type]
        turn_started_at=snap.get("turn_started_at"),  # type: ignore[arg-type]
        round_number=int(snap.get("round_number", 0)),  # type: ignore[arg-type]
    )
