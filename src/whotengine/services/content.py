from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from whotengine.engine.rules import MatchConfig, SuitSpec
from whotengine.engine.types import Card


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.absolute_path])
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int) or isinstance(v, bool):
        raise ContentError(f"Expected int for {key}")
    return v


def _require_list(obj: Mapping[str, object], key: str) -> list[object]:
    v = obj.get(key)
    if not isinstance(v, list):
        raise ContentError(f"Expected list for {key}")
    return v


def _parse_suits(raw: list[object]) -> tuple[SuitSpec, ...]:
    out: list[SuitSpec] = []
    for item in raw:
        if not isinstance(item, dict):
            raise ContentError("suit entry must be an object")
        ranks = tuple(r for r in _require_list(item, "ranks") if isinstance(r, int))
        # trust schema for allowed suit names
        out.append(SuitSpec(suit=_require_str(item, "suit"), ranks=ranks))  # type: ignore[arg-type]
    return tuple(out)


def _parse_ruleset(item: Mapping[str, object]) -> MatchConfig:
    penalties: list[tuple[int, int]] = []
    for p in _require_list(item, "penalties"):
        if isinstance(p, dict):
            penalties.append((_require_int(p, "rank"), _require_int(p, "amount")))
    exempt: list[Card] = []
    raw_exempt = item.get("penalty_exempt", [])
    if isinstance(raw_exempt, list):
        for c in raw_exempt:
            if isinstance(c, dict):
                exempt.append(Card(suit=_require_str(c, "suit"), rank=_require_int(c, "rank")))  # type: ignore[arg-type]

    cfg = MatchConfig(
        ruleset=_require_str(item, "name"),
        suits=_parse_suits(_require_list(item, "suits")),
        wild_count=_require_int(item, "wild_count"),
        min_players=_require_int(item, "min_players"),
        max_players=_require_int(item, "max_players"),
        hand_size=_require_int(item, "hand_size"),
        turn_timeout_micros=_require_int(item, "turn_timeout_micros"),
        turn_warning_micros=_require_int(item, "turn_warning_micros"),
        challenge_penalty=_require_int(item, "challenge_penalty"),
        draw_bonus=int(item.get("draw_bonus", 0)),
        penalties=tuple(penalties),
        penalty_exempt=tuple(exempt),
        ranked=bool(item.get("ranked", False)),
        strict=bool(item.get("strict", False)),
    )
    if cfg.min_players > cfg.max_players:
        raise ContentError(f"{cfg.ruleset}: min_players exceeds max_players")
    if cfg.turn_warning_micros >= cfg.turn_timeout_micros:
        raise ContentError(f"{cfg.ruleset}: turn warning must come before the timeout")
    if cfg.deck_size < cfg.max_players * cfg.hand_size + 1:
        raise ContentError(f"{cfg.ruleset}: deck too small for a full table")
    return cfg


@dataclass(frozen=True)
class RulesetCatalog:
    rulesets: dict[str, MatchConfig]

    def get(self, name: str) -> MatchConfig:
        try:
            return self.rulesets[name]
        except KeyError:
            raise ContentError(f"Unknown ruleset: {name}") from None

    def names(self) -> list[str]:
        return sorted(self.rulesets)


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def load_rulesets(self) -> RulesetCatalog:
        path = self._data_dir / "rulesets.json"
        schema = _load_json(self._schema_dir / "rulesets.schema.json")
        raw = _load_json(path)
        validate_json(raw, schema, context=str(path))
        if not isinstance(raw, dict):
            raise ContentError("rulesets.json must be an object")

        out: dict[str, MatchConfig] = {}
        for item in _require_list(raw, "rulesets"):
            if not isinstance(item, dict):
                continue
            cfg = _parse_ruleset(item)
            if cfg.ruleset in out:
                raise ContentError(f"Duplicate ruleset: {cfg.ruleset}")
            out[cfg.ruleset] = cfg
        return RulesetCatalog(rulesets=out)

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        _ = self.load_rulesets()
