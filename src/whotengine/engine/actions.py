from __future__ import annotations

from dataclasses import dataclass

from .types import Suit


@dataclass(frozen=True)
class JoinMatchAction:
    name: str


@dataclass(frozen=True)
class StartAction:
    pass


@dataclass(frozen=True)
class PlayCardAction:
    hand_index: int
    chosen_suit: Suit | None = None


@dataclass(frozen=True)
class DrawCardAction:
    pass


@dataclass(frozen=True)
class CallLastCardAction:
    pass


@dataclass(frozen=True)
class ChallengeLastCardAction:
    target_index: int


@dataclass(frozen=True)
class LeaveMatchAction:
    pass


@dataclass(frozen=True)
class CheckTimeoutAction:
    pass


Action = (
    JoinMatchAction
    | StartAction
    | PlayCardAction
    | DrawCardAction
    | CallLastCardAction
    | ChallengeLastCardAction
    | LeaveMatchAction
    | CheckTimeoutAction
)
