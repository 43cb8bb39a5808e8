from __future__ import annotations

from .rules import MatchConfig, blocks_penalty
from .state import MatchState
from .types import Card, Suit


def is_legal(
    card: Card,
    top: Card | None,
    active_demand_suit: Suit | None,
    pending_penalty_rank: int | None,
    forced_replay_active: bool,
    forced_replay_suit: Suit | None,
    chosen_suit: Suit | None = None,
    config: MatchConfig | None = None,
) -> bool:
    """Decide whether `card` may be placed right now.

    Checks run in precedence order and the first applicable one decides:
    forced replay, pending penalty, demand suit, then plain suit/rank
    matching against the top of the discard pile.
    """
    if forced_replay_active:
        if card.is_wild:
            return chosen_suit is not None and chosen_suit == forced_replay_suit
        return card.suit == forced_replay_suit

    if pending_penalty_rank is not None:
        if config is not None:
            return blocks_penalty(card, pending_penalty_rank, config)
        return card.rank == pending_penalty_rank

    if active_demand_suit is not None:
        return card.is_wild or card.suit == active_demand_suit

    if top is None:
        return True
    return card.is_wild or card.suit == top.suit or card.rank == top.rank


def is_legal_in(state: MatchState, card: Card, chosen_suit: Suit | None = None) -> bool:
    return is_legal(
        card,
        state.top_card,
        state.active_demand_suit,
        state.pending_penalty_rank,
        state.forced_replay_active,
        state.forced_replay_suit,
        chosen_suit=chosen_suit,
        config=state.config,
    )


def legal_hand_indices(state: MatchState, player_index: int) -> list[int]:
    """Hand positions the player could legally play in the current context.

    A wild card counts as playable under forced replay because its suit
    choice can always be set to the required suit.
    """
    player = state.player(player_index)
    out: list[int] = []
    for i, card in enumerate(player.hand):
        choice = state.forced_replay_suit if card.is_wild else None
        if is_legal_in(state, card, chosen_suit=choice):
            out.append(i)
    return out


def has_legal_play(state: MatchState, player_index: int) -> bool:
    return bool(legal_hand_indices(state, player_index))
