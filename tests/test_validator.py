from __future__ import annotations

from whotengine.engine.rules import MatchConfig
from whotengine.engine.types import WHOT, Card
from whotengine.engine.validator import is_legal

WILD = Card(suit="whot", rank=WHOT)


def _c(suit: str, rank: int) -> Card:
    return Card(suit=suit, rank=rank)  # type: ignore[arg-type]


def _legal(card: Card, top: Card | None, **kw) -> bool:
    args = {
        "active_demand_suit": None,
        "pending_penalty_rank": None,
        "forced_replay_active": False,
        "forced_replay_suit": None,
    }
    args.update(kw)
    return is_legal(card, top, **args)


def test_normal_matching() -> None:
    top = _c("circle", 7)
    assert _legal(_c("circle", 3), top)
    assert _legal(_c("star", 7), top)
    assert _legal(WILD, top)
    assert not _legal(_c("star", 3), top)


def test_no_top_card_accepts_anything() -> None:
    assert _legal(_c("star", 3), None)


def test_bare_wild_top_takes_only_another_wild() -> None:
    assert not _legal(_c("star", 3), WILD)
    assert not _legal(_c("circle", 14), WILD)
    assert _legal(WILD, WILD)


def test_demand_suit() -> None:
    top = WILD
    assert _legal(_c("square", 9), top, active_demand_suit="square")
    assert not _legal(_c("circle", 9), top, active_demand_suit="square")
    assert _legal(WILD, top, active_demand_suit="square")


def test_penalty_only_same_rank() -> None:
    top = _c("circle", 2)
    assert _legal(_c("star", 2), top, pending_penalty_rank=2)
    assert not _legal(_c("circle", 5), top, pending_penalty_rank=2)
    assert not _legal(_c("circle", 9), top, pending_penalty_rank=2)
    assert not _legal(WILD, top, pending_penalty_rank=2)


def test_exempt_card_cannot_block() -> None:
    cfg = MatchConfig(ruleset="t", penalty_exempt=(_c("star", 5),))
    top = _c("circle", 5)
    assert not _legal(_c("star", 5), top, pending_penalty_rank=5, config=cfg)
    assert _legal(_c("cross", 5), top, pending_penalty_rank=5, config=cfg)


def test_forced_replay_outranks_everything() -> None:
    top = _c("circle", 1)
    forced = {"forced_replay_active": True, "forced_replay_suit": "circle"}
    assert _legal(_c("circle", 12), top, **forced)
    assert not _legal(_c("star", 1), top, **forced)
    assert not _legal(WILD, top, **forced)
    assert not _legal(WILD, top, chosen_suit="star", **forced)
    assert _legal(WILD, top, chosen_suit="circle", **forced)
    # a stale demand suit does not matter while forced replay is active
    assert _legal(_c("circle", 12), top, active_demand_suit="star", **forced)
