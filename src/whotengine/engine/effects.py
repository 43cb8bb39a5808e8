from __future__ import annotations

from dataclasses import dataclass, field

from .deck import draw_cards
from .state import MatchState
from .types import (
    AllOthersDrawEffect,
    Card,
    ChooseSuitEffect,
    Effect,
    ForcedReplayEffect,
    PenaltyEffect,
    SkipNextEffect,
    Suit,
)


@dataclass
class EffectOutcome:
    skip: bool = False
    replay: bool = False
    market_draws: list[tuple[int, int]] = field(default_factory=list)
    recycles: int = 0


def clear_play_constraints(state: MatchState, played: Card) -> None:
    """Lift constraints that the newly accepted card has satisfied."""
    state.forced_replay_active = False
    state.forced_replay_suit = None
    if not played.is_wild:
        state.active_demand_suit = None


def apply_effect(
    state: MatchState,
    effect: Effect,
    actor: int,
    played: Card,
    chosen_suit: Suit | None,
) -> EffectOutcome:
    out = EffectOutcome()

    if isinstance(effect, PenaltyEffect):
        if state.pending_penalty_rank == effect.rank and state.pending_penalty_count > 0:
            state.pending_penalty_count += effect.amount
        else:
            state.pending_penalty_count = effect.amount
            state.pending_penalty_rank = effect.rank

    elif isinstance(effect, ForcedReplayEffect):
        state.forced_replay_active = True
        state.forced_replay_suit = played.suit
        out.replay = True

    elif isinstance(effect, SkipNextEffect):
        out.skip = True

    elif isinstance(effect, AllOthersDrawEffect):
        for idx in state.active_indices():
            if idx == actor:
                continue
            drawn, recycles = draw_cards(state, idx, effect.count)
            out.recycles += recycles
            out.market_draws.append((idx, drawn))

    elif isinstance(effect, ChooseSuitEffect):
        state.active_demand_suit = chosen_suit

    return out
