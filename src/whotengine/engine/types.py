from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Suit = Literal["circle", "cross", "triangle", "square", "star", "whot"]
MatchStatus = Literal["waiting", "in_progress", "finished"]

SUITS: tuple[Suit, ...] = ("circle", "cross", "triangle", "square", "star", "whot")
# Suits a wild card may demand.
DEMANDABLE_SUITS: tuple[Suit, ...] = ("circle", "cross", "triangle", "square", "star")

WHOT = 20
RANKS: tuple[int, ...] = tuple(range(1, 15)) + (WHOT,)
SPECIAL_RANKS = frozenset({1, 2, 5, 8, 14, WHOT})


def is_special(rank: int) -> bool:
    return rank in SPECIAL_RANKS


def rank_value(rank: int) -> int:
    """Numeric face value of a rank (wild cards count as 20)."""
    if rank not in RANKS:
        raise ValueError(f"Unknown rank: {rank}")
    return int(rank)


@dataclass(frozen=True)
class Card:
    suit: Suit
    rank: int

    @property
    def is_wild(self) -> bool:
        return self.rank == WHOT

    def label(self) -> str:
        if self.is_wild:
            return "WHOT"
        return f"{self.suit} {self.rank}"


def card_to_dict(card: Card) -> dict[str, object]:
    return {"suit": card.suit, "rank": card.rank}


def card_from_dict(raw: dict[str, object]) -> Card:
    suit = raw.get("suit")
    rank = raw.get("rank")
    if suit not in SUITS or not isinstance(rank, int) or rank not in RANKS:
        raise ValueError(f"Invalid card: {raw!r}")
    return Card(suit=suit, rank=rank)  # type: ignore[arg-type]


@dataclass(frozen=True)
class ForcedReplayEffect:
    type: Literal["forced_replay"] = "forced_replay"


@dataclass(frozen=True)
class PenaltyEffect:
    amount: int
    rank: int
    type: Literal["penalty"] = "penalty"


@dataclass(frozen=True)
class SkipNextEffect:
    type: Literal["skip_next"] = "skip_next"


@dataclass(frozen=True)
class AllOthersDrawEffect:
    count: int = 1
    type: Literal["all_others_draw"] = "all_others_draw"


@dataclass(frozen=True)
class ChooseSuitEffect:
    type: Literal["choose_suit"] = "choose_suit"


@dataclass(frozen=True)
class NoEffect:
    type: Literal["none"] = "none"


Effect = (
    ForcedReplayEffect
    | PenaltyEffect
    | SkipNextEffect
    | AllOthersDrawEffect
    | ChooseSuitEffect
    | NoEffect
)
