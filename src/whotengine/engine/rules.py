from __future__ import annotations

from dataclasses import dataclass

from .types import (
    WHOT,
    AllOthersDrawEffect,
    Card,
    ChooseSuitEffect,
    Effect,
    ForcedReplayEffect,
    NoEffect,
    PenaltyEffect,
    SkipNextEffect,
    Suit,
)


@dataclass(frozen=True)
class SuitSpec:
    suit: Suit
    ranks: tuple[int, ...]


@dataclass(frozen=True)
class MatchConfig:
    """Immutable ruleset for one match.

    Deck composition and every divergent constant between rule variants
    (penalty amounts, exempt cards, challenge penalty, the extra card
    drawn on top of a penalty) live here so the engine itself has a
    single code path.
    """

    ruleset: str = "custom"
    suits: tuple[SuitSpec, ...] = ()
    wild_count: int = 5
    min_players: int = 2
    max_players: int = 4
    hand_size: int = 6
    turn_timeout_micros: int = 180_000_000
    turn_warning_micros: int = 120_000_000
    challenge_penalty: int = 2
    draw_bonus: int = 0
    penalties: tuple[tuple[int, int], ...] = ((2, 2), (5, 3))
    penalty_exempt: tuple[Card, ...] = ()
    ranked: bool = False
    strict: bool = False

    @property
    def deck_size(self) -> int:
        return sum(len(s.ranks) for s in self.suits) + self.wild_count

    def penalty_amount(self, card: Card) -> int:
        if card in self.penalty_exempt:
            return 0
        for rank, amount in self.penalties:
            if rank == card.rank:
                return amount
        return 0


def effect_for(card: Card, config: MatchConfig) -> Effect:
    """Total mapping from a played card to its special effect."""
    if card.rank == WHOT:
        return ChooseSuitEffect()
    amount = config.penalty_amount(card)
    if amount > 0:
        return PenaltyEffect(amount=amount, rank=card.rank)
    if card.rank == 1:
        return ForcedReplayEffect()
    if card.rank == 8:
        return SkipNextEffect()
    if card.rank == 14:
        return AllOthersDrawEffect(count=1)
    return NoEffect()


def blocks_penalty(card: Card, pending_rank: int, config: MatchConfig) -> bool:
    return card.rank == pending_rank and config.penalty_amount(card) > 0
