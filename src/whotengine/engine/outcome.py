from __future__ import annotations

from .deck import available_cards
from .events import Event, match_ended
from .state import MatchState, Winner
from .validator import has_legal_play


def finish(state: MatchState, winner: Winner, reason: str) -> Event:
    state.status = "finished"
    state.winner = winner
    state.turn_started_at = None
    return match_ended(state, winner, reason)


def empty_hand_winner(state: MatchState) -> int | None:
    for idx in state.active_indices():
        if not state.player(idx).hand:
            return idx
    return None


def fewest_cards_result(state: MatchState) -> Winner:
    """Active player with the fewest cards, or "draw" on a tie."""
    counts = [(idx, len(state.player(idx).hand)) for idx in state.active_indices()]
    low = min(c for _, c in counts)
    leaders = [idx for idx, c in counts if c == low]
    if len(leaders) > 1:
        return "draw"
    return leaders[0]


def is_stalemate(state: MatchState) -> bool:
    if available_cards(state) > 0:
        return False
    return not any(has_legal_play(state, idx) for idx in state.active_indices())


def check_outcome(state: MatchState) -> Event | None:
    """Finish the match if a terminal condition holds; returns MATCH_ENDED."""
    if state.status != "in_progress":
        return None
    winner = empty_hand_winner(state)
    if winner is not None:
        return finish(state, winner, "empty_hand")
    active = state.active_indices()
    if len(active) == 1:
        return finish(state, active[0], "last_player_standing")
    if is_stalemate(state):
        return finish(state, fewest_cards_result(state), "stalemate")
    return None
