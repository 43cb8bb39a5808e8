"""Rejection taxonomy for match transitions.

Every rule violation raises a subclass of MatchError. `step` catches
MatchError and turns it into a failed StepResult with the state left
unchanged; anything else propagates.
"""

from __future__ import annotations


class MatchError(Exception):
    code = "match_error"
    message = "Action rejected."

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        super().__init__(detail or self.message)


class MatchAlreadyStarted(MatchError):
    code = "match_already_started"
    message = "Match already started."


class MatchNotInProgress(MatchError):
    code = "match_not_in_progress"
    message = "Match not in progress."


class MatchFull(MatchError):
    code = "match_full"
    message = "Match is full."


class PlayerAlreadyJoined(MatchError):
    code = "player_already_joined"
    message = "Player already joined."


class NotEnoughPlayers(MatchError):
    code = "not_enough_players"
    message = "Not enough players to start."


class NotYourTurn(MatchError):
    code = "not_your_turn"
    message = "Not your turn."


class InvalidHandIndex(MatchError):
    code = "invalid_hand_index"
    message = "Invalid hand index."


class InvalidCardPlay(MatchError):
    code = "invalid_card_play"
    message = "Card doesn't match suit, rank, or special requirements."


class InvalidPlayerIndex(MatchError):
    code = "invalid_player_index"
    message = "Invalid player index."


class NoDiscardTop(MatchError):
    code = "no_discard_top"
    message = "No card in discard pile."


class TurnTimedOut(MatchError):
    code = "turn_timed_out"
    message = "Turn timed out."


class CallerRequired(MatchError):
    code = "caller_required"
    message = "Caller identity required."


class UnknownPlayer(MatchError):
    code = "unknown_player"
    message = "Caller is not an active player in this match."


class DeckExhausted(MatchError):
    code = "deck_exhausted"
    message = "No card left to draw; a legal card must be played."


class TurnPointerError(RuntimeError):
    """The turn pointer does not reference an active player.

    This is an engine invariant violation, not a player mistake.
    """
