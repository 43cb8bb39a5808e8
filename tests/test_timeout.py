from __future__ import annotations

from whotengine.engine.actions import CheckTimeoutAction, DrawCardAction, PlayCardAction
from whotengine.engine.errors import MatchNotInProgress, TurnTimedOut
from whotengine.engine.match import step, time_left
from whotengine.engine.rules import MatchConfig
from whotengine.engine.serialize import snapshot
from whotengine.engine.state import MatchState, PlayerState
from whotengine.engine.types import Card

SECOND = 1_000_000
TIMEOUT = 180 * SECOND
WARNING = 120 * SECOND


def _c(suit: str, rank: int) -> Card:
    return Card(suit=suit, rank=rank)  # type: ignore[arg-type]


def _table(draw: list[Card] | None = None) -> MatchState:
    cfg = MatchConfig(ruleset="table", max_players=2, turn_timeout_micros=TIMEOUT, turn_warning_micros=WARNING)
    return MatchState(
        config=cfg,
        seed="timer",
        players=[
            PlayerState(player_id="p0", name="P0", hand=[_c("circle", 3), _c("square", 9)]),
            PlayerState(player_id="p1", name="P1", hand=[_c("star", 4)]),
        ],
        draw_pile=list(draw if draw is not None else [_c("cross", 7), _c("cross", 10)]),
        discard_pile=[_c("circle", 6)],
        status="in_progress",
        turn_started_at=0,
    )


def test_before_warning_is_a_noop() -> None:
    state = _table()
    res = step(state, CheckTimeoutAction(), now=WARNING - 1)
    assert res.ok
    assert res.events == []
    assert snapshot(res.state) == snapshot(state)


def test_one_tick_before_timeout_only_warns() -> None:
    state = _table()
    res = step(state, CheckTimeoutAction(), now=TIMEOUT - 1)
    assert res.ok
    assert res.events == [{"type": "TURN_WARNING", "player": 0, "name": "P0", "time_left": 1}]
    assert snapshot(res.state) == snapshot(state)


def test_timeout_auto_draws_and_advances() -> None:
    state = _table()
    res = step(state, CheckTimeoutAction(), now=TIMEOUT)
    assert res.ok
    state = res.state
    assert len(state.player(0).hand) == 3
    assert state.current_player == 1
    assert state.turn_started_at == TIMEOUT
    assert res.events[-1] == {
        "type": "TURN_TIMEOUT",
        "player": 0,
        "name": "P0",
        "drew": True,
        "next_player": 1,
    }

    again = step(state, CheckTimeoutAction(), now=TIMEOUT)
    assert again.ok
    assert again.events == []
    assert snapshot(again.state) == snapshot(state)


def test_timeout_with_nothing_to_draw_still_advances() -> None:
    state = _table(draw=[])
    res = step(state, CheckTimeoutAction(), now=TIMEOUT + 5)
    assert res.ok
    assert len(res.state.player(0).hand) == 2
    assert res.state.current_player == 1
    assert res.state.turn_started_at == TIMEOUT + 5
    assert res.events[0]["drew"] is False


def test_timeout_clears_demand_and_forced_replay() -> None:
    state = _table()
    state.forced_replay_active = True
    state.forced_replay_suit = "circle"
    res = step(state, CheckTimeoutAction(), now=TIMEOUT)
    assert not res.state.forced_replay_active
    assert res.state.forced_replay_suit is None

    state = _table()
    state.active_demand_suit = "star"
    res = step(state, CheckTimeoutAction(), now=TIMEOUT)
    assert res.state.active_demand_suit is None


def test_timeout_draws_one_and_leaves_penalty_pending() -> None:
    state = _table(draw=[_c("cross", 7), _c("cross", 10), _c("cross", 11)])
    state.pending_penalty_count = 3
    state.pending_penalty_rank = 5
    res = step(state, CheckTimeoutAction(), now=TIMEOUT)
    assert res.ok
    assert len(res.state.player(0).hand) == 3
    assert len(res.state.draw_pile) == 2
    assert res.state.pending_penalty_count == 3
    assert res.state.pending_penalty_rank == 5
    assert res.state.current_player == 1


def test_stale_player_is_rejected_before_tick() -> None:
    state = _table()
    play = step(state, PlayCardAction(hand_index=0), actor="p0", now=TIMEOUT)
    assert isinstance(play.error, TurnTimedOut)
    draw = step(state, DrawCardAction(), actor="p0", now=TIMEOUT + 1)
    assert isinstance(draw.error, TurnTimedOut)

    fresh = step(state, PlayCardAction(hand_index=0), actor="p0", now=TIMEOUT - 1)
    assert fresh.ok


def test_check_timeout_requires_running_match() -> None:
    state = _table()
    state.status = "finished"
    res = step(state, CheckTimeoutAction(), now=TIMEOUT)
    assert isinstance(res.error, MatchNotInProgress)


def test_time_left() -> None:
    state = _table()
    assert time_left(state, 10 * SECOND) == TIMEOUT - 10 * SECOND
    assert time_left(state, TIMEOUT * 2) == 0
