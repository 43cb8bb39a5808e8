from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Iterable

from .actions import (
    Action,
    CallLastCardAction,
    ChallengeLastCardAction,
    CheckTimeoutAction,
    DrawCardAction,
    JoinMatchAction,
    LeaveMatchAction,
    PlayCardAction,
    StartAction,
)
from .deck import available_cards, build_deck, draw_cards, match_seed, shuffle
from .effects import apply_effect, clear_play_constraints
from .errors import (
    CallerRequired,
    DeckExhausted,
    InvalidCardPlay,
    InvalidHandIndex,
    InvalidPlayerIndex,
    MatchAlreadyStarted,
    MatchError,
    MatchFull,
    MatchNotInProgress,
    NoDiscardTop,
    NotEnoughPlayers,
    NotYourTurn,
    PlayerAlreadyJoined,
    TurnPointerError,
    TurnTimedOut,
    UnknownPlayer,
)
from .events import (
    Event,
    card_played,
    cards_drawn,
    challenge_penalty,
    deck_recycled,
    last_card_called,
    market_draw,
    match_started,
    player_joined,
    player_left,
    turn_timeout,
    turn_warning,
)
from .outcome import check_outcome, fewest_cards_result, finish
from .rules import MatchConfig, effect_for
from .state import MatchState, PlayerState
from .types import DEMANDABLE_SUITS
from .validator import has_legal_play, is_legal_in, legal_hand_indices

ActionRecord = tuple[str | None, Action, int]


@dataclass
class StepResult:
    ok: bool
    state: MatchState
    events: list[Event]
    error: MatchError | None = None


def new_match(config: MatchConfig, seed: str) -> MatchState:
    """Create an empty match waiting for players.

    `seed` must be agreed by every participant (e.g. a chain id); the
    opening deal and every recycle are derived from it.
    """
    return MatchState(config=config, seed=seed, players=[None] * config.max_players)


def _next_active(state: MatchState, start: int, steps: int = 1) -> int:
    n = len(state.players)
    idx = start
    for _ in range(steps):
        for _ in range(n):
            idx = (idx + 1) % n
            p = state.players[idx]
            if p is not None and p.active:
                break
        else:
            raise TurnPointerError("No active player to pass the turn to.")
    return idx


def _require_actor(state: MatchState, actor: str | None) -> int:
    if not actor:
        raise CallerRequired()
    idx = state.index_of(actor)
    if idx is None or not state.player(idx).active:
        raise UnknownPlayer(f"{actor!r} is not an active player in this match.")
    return idx


def _require_in_progress(state: MatchState) -> None:
    if state.status != "in_progress":
        raise MatchNotInProgress()


def _timed_out(state: MatchState, now: int) -> bool:
    if state.turn_started_at is None:
        return False
    return now - state.turn_started_at >= state.config.turn_timeout_micros


def _require_turn(state: MatchState, actor_index: int, now: int) -> None:
    if _timed_out(state, now):
        raise TurnTimedOut()
    state.current()
    if actor_index != state.current_player:
        raise NotYourTurn()


def _draw_count(state: MatchState) -> int:
    if state.pending_penalty_count > 0:
        return state.pending_penalty_count + state.config.draw_bonus
    return 1


def _clear_turn_obligations(state: MatchState) -> None:
    state.pending_penalty_count = 0
    state.pending_penalty_rank = None
    state.active_demand_suit = None
    state.forced_replay_active = False
    state.forced_replay_suit = None


def _join(state: MatchState, action: JoinMatchAction, actor: str | None) -> list[Event]:
    if not actor:
        raise CallerRequired()
    if state.status != "waiting":
        raise MatchAlreadyStarted()
    if state.index_of(actor) is not None:
        raise PlayerAlreadyJoined()
    try:
        slot = state.players.index(None)
    except ValueError:
        raise MatchFull(f"Match is full (max {state.config.max_players} players).") from None
    name = action.name or actor
    state.players[slot] = PlayerState(player_id=actor, name=name)
    return [player_joined(name, len(state.active_indices()))]


def _start(state: MatchState, actor: str | None, now: int) -> list[Event]:
    if state.status != "waiting":
        raise MatchAlreadyStarted()
    _require_actor(state, actor)
    cfg = state.config
    active = state.active_indices()
    if not cfg.min_players <= len(active) <= cfg.max_players:
        raise NotEnoughPlayers(
            f"Need at least {cfg.min_players} players. Current: {len(active)}"
        )
    if cfg.deck_size < len(active) * cfg.hand_size + 1:
        raise NoDiscardTop("Deck is too small to deal hands and open the discard pile.")

    deck = build_deck(cfg)
    shuffle(deck, match_seed(state.seed, 0))
    for _ in range(cfg.hand_size):
        for idx in active:
            state.player(idx).hand.append(deck.pop())
    state.discard_pile = [deck.pop()]
    state.draw_pile = deck
    state.round_number = 0
    state.status = "in_progress"
    state.current_player = active[0]
    state.turn_started_at = now
    return [match_started(state)]


def _play_card(state: MatchState, action: PlayCardAction, actor: str | None, now: int) -> list[Event]:
    _require_in_progress(state)
    idx = _require_actor(state, actor)
    _require_turn(state, idx, now)

    player = state.player(idx)
    if action.hand_index < 0 or action.hand_index >= len(player.hand):
        raise InvalidHandIndex(f"Invalid hand index: {action.hand_index}")
    card = player.hand[action.hand_index]

    chosen = action.chosen_suit
    if card.is_wild:
        if chosen not in DEMANDABLE_SUITS:
            raise InvalidCardPlay("A WHOT card needs a suit choice.")
    else:
        if chosen is not None and state.config.strict:
            raise InvalidCardPlay("Only a WHOT card takes a suit choice.")
        chosen = None
    if not is_legal_in(state, card, chosen_suit=chosen):
        raise InvalidCardPlay(f"{card.label()} cannot be played now.")

    effect = effect_for(card, state.config)
    player.hand.pop(action.hand_index)
    state.discard_pile.append(card)

    if not player.hand:
        # Winning play: the card's effect is never resolved.
        events = [card_played(state, idx, card, None, effect.type)]
        events.append(finish(state, idx, "empty_hand"))
        return events

    clear_play_constraints(state, card)
    outcome = apply_effect(state, effect, idx, card, chosen)
    if outcome.replay:
        next_idx = idx
    else:
        next_idx = _next_active(state, idx, 2 if outcome.skip else 1)
    state.current_player = next_idx
    state.turn_started_at = now

    events = [card_played(state, idx, card, next_idx, effect.type)]
    if outcome.recycles:
        events.append(deck_recycled(state))
    for target, count in outcome.market_draws:
        events.append(market_draw(state, target, count))
    ended = check_outcome(state)
    if ended is not None:
        events.append(ended)
    return events


def _draw_card(state: MatchState, actor: str | None, now: int) -> list[Event]:
    _require_in_progress(state)
    idx = _require_actor(state, actor)
    _require_turn(state, idx, now)

    if available_cards(state) == 0:
        if has_legal_play(state, idx):
            raise DeckExhausted()
        return [finish(state, fewest_cards_result(state), "stalemate")]

    drawn, recycles = draw_cards(state, idx, _draw_count(state))
    _clear_turn_obligations(state)
    next_idx = _next_active(state, idx)
    state.current_player = next_idx
    state.turn_started_at = now

    events: list[Event] = []
    if recycles:
        events.append(deck_recycled(state))
    events.append(cards_drawn(state, idx, drawn, next_idx))
    ended = check_outcome(state)
    if ended is not None:
        events.append(ended)
    return events


def _call_last_card(state: MatchState, actor: str | None) -> list[Event]:
    if state.status == "finished":
        raise MatchNotInProgress()
    idx = _require_actor(state, actor)
    state.player(idx).called_last_card = True
    return [last_card_called(state, idx)]


def _challenge(state: MatchState, action: ChallengeLastCardAction, actor: str | None) -> list[Event]:
    _require_in_progress(state)
    _require_actor(state, actor)
    target_idx = action.target_index
    if target_idx < 0 or target_idx >= len(state.players):
        raise InvalidPlayerIndex(f"Invalid player index: {target_idx}")
    target = state.players[target_idx]
    if target is None or not target.active:
        raise InvalidPlayerIndex(f"Invalid player index: {target_idx}")

    if len(target.hand) != 1 or target.called_last_card:
        return []

    drawn, recycles = draw_cards(state, target_idx, state.config.challenge_penalty)
    events: list[Event] = []
    if recycles:
        events.append(deck_recycled(state))
    events.append(challenge_penalty(state, target_idx, drawn))
    ended = check_outcome(state)
    if ended is not None:
        events.append(ended)
    return events


def _leave(state: MatchState, actor: str | None, now: int) -> list[Event]:
    if state.status == "finished":
        raise MatchNotInProgress()
    idx = _require_actor(state, actor)
    player = state.player(idx)

    if state.status == "waiting":
        state.players[idx] = None
        return [player_left(player.name)]

    player.active = False
    events = [player_left(player.name)]
    if state.current_player == idx and len(state.active_indices()) > 1:
        # Obligations aimed at the leaver lapse with their turn.
        _clear_turn_obligations(state)
        state.current_player = _next_active(state, idx)
        state.turn_started_at = now
    ended = check_outcome(state)
    if ended is not None:
        events.append(ended)
    return events


def _check_timeout(state: MatchState, now: int) -> list[Event]:
    _require_in_progress(state)
    if state.turn_started_at is None:
        return []
    state.current()
    cfg = state.config
    idx = state.current_player
    elapsed = now - state.turn_started_at

    if elapsed < cfg.turn_warning_micros:
        return []
    if elapsed < cfg.turn_timeout_micros:
        return [turn_warning(state, idx, cfg.turn_timeout_micros - elapsed)]

    # Always a single card; a pending penalty passes on to the next player.
    drawn, recycles = draw_cards(state, idx, 1)
    state.active_demand_suit = None
    state.forced_replay_active = False
    state.forced_replay_suit = None
    next_idx = _next_active(state, idx)
    state.current_player = next_idx
    state.turn_started_at = now

    events: list[Event] = []
    if recycles:
        events.append(deck_recycled(state))
    events.append(turn_timeout(state, idx, drawn > 0, next_idx))
    ended = check_outcome(state)
    if ended is not None:
        events.append(ended)
    return events


def _dispatch(state: MatchState, action: Action, actor: str | None, now: int) -> list[Event]:
    if isinstance(action, JoinMatchAction):
        return _join(state, action, actor)
    if isinstance(action, StartAction):
        return _start(state, actor, now)
    if isinstance(action, PlayCardAction):
        return _play_card(state, action, actor, now)
    if isinstance(action, DrawCardAction):
        return _draw_card(state, actor, now)
    if isinstance(action, CallLastCardAction):
        return _call_last_card(state, actor)
    if isinstance(action, ChallengeLastCardAction):
        return _challenge(state, action, actor)
    if isinstance(action, LeaveMatchAction):
        return _leave(state, actor, now)
    if isinstance(action, CheckTimeoutAction):
        return _check_timeout(state, now)
    raise MatchError("Unknown action.")


def step(state: MatchState, action: Action, *, actor: str | None = None, now: int = 0) -> StepResult:
    """Apply a single action and return the resulting state.

    `state` itself is never modified: the transition runs on a copy that
    is returned only when the action is accepted, so a rejection leaves
    the caller holding exactly what it passed in. `now` is the caller's
    wall-clock time in microseconds.
    """
    work = copy.deepcopy(state, {id(state.config): state.config})
    try:
        events = _dispatch(work, action, actor, now)
    except MatchError as e:
        return StepResult(ok=False, state=state, events=[], error=e)
    return StepResult(ok=True, state=work, events=events)


def replay(config: MatchConfig, seed: str, records: Iterable[ActionRecord]) -> MatchState:
    state = new_match(config, seed)
    for actor, action, now in records:
        state = step(state, action, actor=actor, now=now).state
        if state.status == "finished":
            break
    return state


def get_legal_plays(state: MatchState, player_index: int) -> list[int]:
    if state.status != "in_progress":
        return []
    return legal_hand_indices(state, player_index)


def time_left(state: MatchState, now: int) -> int | None:
    if state.status != "in_progress" or state.turn_started_at is None:
        return None
    return max(0, state.config.turn_timeout_micros - (now - state.turn_started_at))
