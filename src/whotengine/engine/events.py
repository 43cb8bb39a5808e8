"""Domain events handed back to the caller for broadcast.

Events are plain JSON-compatible dicts with an upper-case "type" key,
the same shape the engine logs and snapshots use.
"""

from __future__ import annotations

from .state import MatchState, Winner
from .types import Card, card_to_dict

Event = dict[str, object]


def _name(state: MatchState, index: int | None) -> str | None:
    if index is None:
        return None
    p = state.players[index]
    return p.name if p is not None else None


def player_joined(name: str, count: int) -> Event:
    return {"type": "PLAYER_JOINED", "name": name, "count": count}


def match_started(state: MatchState) -> Event:
    top = state.top_card
    return {
        "type": "MATCH_STARTED",
        "first_player": state.current_player,
        "first_player_name": _name(state, state.current_player),
        "top_card": card_to_dict(top) if top is not None else None,
    }


def card_played(
    state: MatchState, player: int, card: Card, next_player: int | None, effect: str | None
) -> Event:
    return {
        "type": "CARD_PLAYED",
        "player": player,
        "name": _name(state, player),
        "card": card_to_dict(card),
        "next_player": next_player,
        "next_player_name": _name(state, next_player),
        "effect": effect,
    }


def cards_drawn(state: MatchState, player: int, count: int, next_player: int | None) -> Event:
    return {
        "type": "CARDS_DRAWN",
        "player": player,
        "name": _name(state, player),
        "count": count,
        "next_player": next_player,
        "next_player_name": _name(state, next_player),
    }


def market_draw(state: MatchState, player: int, count: int) -> Event:
    return {"type": "MARKET_DRAW", "player": player, "name": _name(state, player), "count": count}


def deck_recycled(state: MatchState) -> Event:
    return {"type": "DECK_RECYCLED", "round": state.round_number, "draw_pile": len(state.draw_pile)}


def match_ended(state: MatchState, winner: Winner, reason: str) -> Event:
    if winner == "draw":
        return {
            "type": "MATCH_ENDED",
            "winner": "draw",
            "index": None,
            "reason": reason,
            "ranked": state.config.ranked,
        }
    return {
        "type": "MATCH_ENDED",
        "winner": _name(state, winner),
        "index": winner,
        "reason": reason,
        "ranked": state.config.ranked,
    }


def player_left(name: str) -> Event:
    return {"type": "PLAYER_LEFT", "name": name}


def turn_warning(state: MatchState, player: int, time_left: int) -> Event:
    return {"type": "TURN_WARNING", "player": player, "name": _name(state, player), "time_left": time_left}


def turn_timeout(state: MatchState, player: int, drew: bool, next_player: int | None) -> Event:
    return {
        "type": "TURN_TIMEOUT",
        "player": player,
        "name": _name(state, player),
        "drew": drew,
        "next_player": next_player,
    }


def challenge_penalty(state: MatchState, target: int, count: int) -> Event:
    return {"type": "CHALLENGE_PENALTY", "target": target, "name": _name(state, target), "count": count}


def last_card_called(state: MatchState, player: int) -> Event:
    return {"type": "LAST_CARD_CALLED", "player": player, "name": _name(state, player)}
