from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from .errors import TurnPointerError
from .rules import MatchConfig
from .types import Card, MatchStatus, Suit

Winner = int | Literal["draw"] | None


@dataclass
class PlayerState:
    player_id: str
    name: str
    hand: list[Card] = field(default_factory=list)
    called_last_card: bool = False
    active: bool = True


@dataclass
class MatchState:
    config: MatchConfig
    seed: str
    players: list[PlayerState | None]
    draw_pile: list[Card] = field(default_factory=list)
    discard_pile: list[Card] = field(default_factory=list)
    current_player: int = 0
    status: MatchStatus = "waiting"
    winner: Winner = None
    pending_penalty_count: int = 0
    pending_penalty_rank: int | None = None
    active_demand_suit: Suit | None = None
    forced_replay_active: bool = False
    forced_replay_suit: Suit | None = None
    turn_started_at: int | None = None
    round_number: int = 0

    @property
    def top_card(self) -> Card | None:
        return self.discard_pile[-1] if self.discard_pile else None

    def seated(self) -> list[tuple[int, PlayerState]]:
        return [(i, p) for i, p in enumerate(self.players) if p is not None]

    def active_indices(self) -> list[int]:
        return [i for i, p in self.seated() if p.active]

    def index_of(self, player_id: str) -> int | None:
        for i, p in self.seated():
            if p.player_id == player_id:
                return i
        return None

    def player(self, index: int) -> PlayerState:
        p = self.players[index]
        if p is None:
            raise TurnPointerError(f"Slot {index} is empty.")
        return p

    def current(self) -> PlayerState:
        """The player holding the turn; fails loudly if the pointer is bad."""
        idx = self.current_player
        if idx < 0 or idx >= len(self.players):
            raise TurnPointerError(f"Turn pointer {idx} out of range.")
        p = self.players[idx]
        if p is None or not p.active:
            raise TurnPointerError(f"Turn pointer {idx} is not an active player.")
        return p

    def cards_in_play(self) -> int:
        return (
            len(self.draw_pile)
            + len(self.discard_pile)
            + sum(len(p.hand) for _, p in self.seated())
        )
