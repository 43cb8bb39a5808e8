"""Deterministic, headless rules engine for Whot.

IMPORTANT: This package must never do I/O; persistence, transport and
logging belong to the caller (see whotengine.services).
"""

from .actions import (
    CallLastCardAction,
    ChallengeLastCardAction,
    CheckTimeoutAction,
    DrawCardAction,
    JoinMatchAction,
    LeaveMatchAction,
    PlayCardAction,
    StartAction,
)
from .match import StepResult, new_match, replay, step
from .rules import MatchConfig, SuitSpec
from .state import MatchState, PlayerState
from .types import WHOT, Card, Suit

__all__ = [
    "CallLastCardAction",
    "Card",
    "ChallengeLastCardAction",
    "CheckTimeoutAction",
    "DrawCardAction",
    "JoinMatchAction",
    "LeaveMatchAction",
    "MatchConfig",
    "MatchState",
    "PlayCardAction",
    "PlayerState",
    "StartAction",
    "StepResult",
    "Suit",
    "SuitSpec",
    "WHOT",
    "new_match",
    "replay",
    "step",
]
