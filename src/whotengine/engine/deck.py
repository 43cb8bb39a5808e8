"""Deck construction, the seeded shuffle, and discard recycling.

The shuffle is part of the observable contract: every participant must
reproduce the same deal from the same seed, so the hash, the LCG
constants and the descending Fisher-Yates order must not change.
"""

from __future__ import annotations

import hashlib

from .rules import MatchConfig
from .state import MatchState
from .types import WHOT, Card

LCG_MULTIPLIER = 6364136223846793005
LCG_INCREMENT = 1442695040888963407
_MASK64 = (1 << 64) - 1


def build_deck(config: MatchConfig) -> list[Card]:
    deck: list[Card] = []
    for spec in config.suits:
        for rank in spec.ranks:
            deck.append(Card(suit=spec.suit, rank=rank))
    for _ in range(config.wild_count):
        deck.append(Card(suit="whot", rank=WHOT))
    return deck


def seed_to_state(seed: bytes) -> int:
    return int.from_bytes(hashlib.sha256(seed).digest()[:8], "big")


def shuffle(deck: list[Card], seed: bytes) -> None:
    state = seed_to_state(seed)
    for i in range(len(deck) - 1, 0, -1):
        state = (state * LCG_MULTIPLIER + LCG_INCREMENT) & _MASK64
        j = state % (i + 1)
        deck[i], deck[j] = deck[j], deck[i]


def match_seed(seed: str, round_number: int) -> bytes:
    """Shuffle seed for the opening deal (round 0) or the n-th recycle."""
    if round_number == 0:
        return seed.encode("utf-8")
    return f"{seed}{round_number}".encode("utf-8")


def recyclable(state: MatchState) -> int:
    return max(0, len(state.discard_pile) - 1)


def available_cards(state: MatchState) -> int:
    return len(state.draw_pile) + recyclable(state)


def recycle(state: MatchState) -> bool:
    """Turn the discard pile (minus its top card) into a new draw pile."""
    if state.draw_pile or recyclable(state) == 0:
        return False
    top = state.discard_pile[-1]
    state.draw_pile = state.discard_pile[:-1]
    state.discard_pile = [top]
    state.round_number += 1
    shuffle(state.draw_pile, match_seed(state.seed, state.round_number))
    return True


def draw_cards(state: MatchState, player_index: int, count: int) -> tuple[int, int]:
    """Move up to `count` cards into a hand.

    Returns (cards drawn, recycles performed).
    """
    player = state.player(player_index)
    drawn = 0
    recycles = 0
    for _ in range(max(0, count)):
        if not state.draw_pile:
            if not recycle(state):
                break
            recycles += 1
        player.hand.append(state.draw_pile.pop())
        drawn += 1
    if drawn:
        player.called_last_card = False
    return drawn, recycles
