"""Parse the pipeline reference pack (``pipeline_YYYY-MM-DD.json``)."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from slatesavvy.errors import MalformedPipelinePayload
from slatesavvy.models import ContestInput, Lineup, PayoutTier, Player, PlayerRef
from slatesavvy.pool.reconcile import PlayerIndex

from ._tabular import header_key, parse_float, parse_salary, percent_column
from .lineups import SimOutcomes, build_lineup, parse_cell
from .teams import canonical_team


logger = logging.getLogger(__name__)

SIDECAR_LINEUPS_KEY = "optimized_lineups"

_TOP_LEVEL_ALIASES = {
    "referencePlayers": "players",
    "reference_players": "players",
    "referenceLineups": "lineups",
    "reference_lineups": "lineups",
    "slate": "meta",
    "metadata": "meta",
    "contestState": "contest",
    "contest_state": "contest",
}

_PLAYER_FIELDS: Dict[str, Tuple[str, ...]] = {
    "player_id": ("id", "playerid", "dkid", "draftkingsid"),
    "name": ("name", "player", "playername", "fullname"),
    "team": ("team", "teamabbrev"),
    "opponent": ("opp", "opponent"),
    "position": ("pos", "position", "positions", "rosterposition"),
    "salary": ("salary", "sal"),
    "projection": ("proj", "projection", "fpts", "median", "projectedpoints"),
    "ownership": ("own", "ownership", "projown", "ownpct", "own%"),
    "ceiling": ("ceil", "ceiling", "p90", "upside"),
    "value": ("value", "val"),
}

_LINEUP_FIELDS: Dict[str, Tuple[str, ...]] = {
    "label": ("lineupid", "id", "lineup", "name", "rank"),
    "set": ("set", "build", "group"),
    "players": ("playerids", "players", "roster", "ids", "slots"),
    "sim_ev": ("simev", "ev"),
    "sim_roi": ("simroi", "roi"),
    "cash_pct": ("cashpct", "cash%", "cash", "cashrate"),
    "top10_pct": ("top10pct", "top10%", "top10", "top10rate"),
}

_CONTEST_FIELDS: Dict[str, Tuple[str, ...]] = {
    "contest_name": ("contestname", "name", "contest"),
    "entry_fee": ("entryfee", "fee", "buyin"),
    "max_entries": ("maxentries", "entries", "userentries"),
    "field_size": ("fieldsize", "field", "totalentries", "size"),
    "prize_pool": ("prizepool", "totalprizes", "prizes"),
    "paid_pct": ("paidpct", "paid%", "cashline"),
    "payout_tiers": ("payouttiers", "payouts", "payouttable", "payoutcurve"),
}


class PipelinePayload(BaseModel):
    """Top-level shape of a reference pack."""

    players: List[Dict[str, Any]]
    lineups: List[Any] = Field(default_factory=list)
    meta: Dict[str, Any] = Field(default_factory=dict)
    diagnostics: Union[Dict[str, Any], List[Any]] = Field(default_factory=dict)
    contest: Optional[Dict[str, Any]] = None
    files: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _normalize_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        normalized: Dict[str, Any] = {}
        for key, value in data.items():
            target = _TOP_LEVEL_ALIASES.get(key, key)
            if target in normalized and key != target:
                continue
            normalized[target] = value
        for optional in ("lineups", "meta", "diagnostics", "contest", "files"):
            if normalized.get(optional) is None:
                normalized.pop(optional, None)
        return normalized


@dataclass(frozen=True)
class PipelinePack:
    players: Tuple[Player, ...]
    lineups: Tuple[Lineup, ...]
    meta: Mapping[str, Any] = field(default_factory=dict)
    diagnostics: Union[Mapping[str, Any], Sequence[Any]] = field(default_factory=dict)
    contest: Optional[ContestInput] = None
    files: Mapping[str, Any] = field(default_factory=dict)
    missing_salary_count: int = 0
    warnings: Tuple[str, ...] = ()

    @property
    def sidecar_lineups(self) -> Optional[str]:
        reference = self.files.get(SIDECAR_LINEUPS_KEY)
        return str(reference) if reference else None


def _normalized(row: Mapping[str, Any]) -> Dict[str, Any]:
    return {header_key(str(key)): value for key, value in row.items()}


def _get(row: Mapping[str, Any], aliases: Sequence[str]) -> Any:
    for alias in aliases:
        value = row.get(alias)
        if value not in (None, ""):
            return value
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return "/".join(str(part) for part in value)
    return str(value).strip()


def _parse_players(rows: Sequence[Mapping[str, Any]]) -> Tuple[List[Player], int]:
    normalized = [_normalized(row) for row in rows]
    ownership = percent_column([_get(row, _PLAYER_FIELDS["ownership"]) for row in normalized])
    players: List[Player] = []
    missing_salary = 0
    for idx, (row, own) in enumerate(zip(normalized, ownership)):
        player_id = _text(_get(row, _PLAYER_FIELDS["player_id"]))
        if not player_id:
            raise MalformedPipelinePayload(f"players[{idx}] has no player id")
        salary = parse_salary(_get(row, _PLAYER_FIELDS["salary"]))
        if salary is None:
            missing_salary += 1
        projection = parse_float(_get(row, _PLAYER_FIELDS["projection"]))
        try:
            players.append(
                Player(
                    player_id=player_id,
                    name=_text(_get(row, _PLAYER_FIELDS["name"])) or player_id,
                    team=canonical_team(_text(_get(row, _PLAYER_FIELDS["team"]))),
                    opponent=canonical_team(_text(_get(row, _PLAYER_FIELDS["opponent"]))),
                    position=_text(_get(row, _PLAYER_FIELDS["position"])).upper(),
                    salary=salary or 0,
                    projection=projection if projection is not None else 0.0,
                    ownership=None if own is None else min(100.0, max(0.0, own)),
                    ceiling=parse_float(_get(row, _PLAYER_FIELDS["ceiling"])),
                    value=parse_float(_get(row, _PLAYER_FIELDS["value"])),
                )
            )
        except ValidationError as exc:
            raise MalformedPipelinePayload(f"players[{idx}] is invalid: {exc}") from exc
    return players, missing_salary


def _lineup_refs(raw: Any) -> List[PlayerRef]:
    if isinstance(raw, Mapping):
        raw = list(raw.values())
    if isinstance(raw, str):
        raw = [part for part in raw.replace(";", ",").split(",")]
    if not isinstance(raw, (list, tuple)):
        return []
    refs: List[PlayerRef] = []
    for item in raw:
        if isinstance(item, Mapping):
            entry = _normalized(item)
            player_id = _text(_get(entry, _PLAYER_FIELDS["player_id"])) or None
            name = _text(_get(entry, _PLAYER_FIELDS["name"])) or None
            team = canonical_team(_text(_get(entry, _PLAYER_FIELDS["team"]))) or None
            if player_id or name:
                refs.append(PlayerRef(player_id=player_id, name=name, team=team, raw=player_id or name or ""))
            continue
        ref = parse_cell(_text(item))
        if ref is not None:
            refs.append(ref)
    return refs


def _parse_lineups(rows: Sequence[Any], index: PlayerIndex) -> List[Lineup]:
    normalized = [_normalized(row) if isinstance(row, Mapping) else {"playerids": row} for row in rows]

    def column(field_name: str) -> List[Optional[float]]:
        values = [_get(row, _LINEUP_FIELDS[field_name]) for row in normalized]
        if field_name == "sim_ev":
            return [parse_float(value) for value in values]
        return percent_column(values)

    sims = {name: column(name) for name in ("sim_ev", "sim_roi", "cash_pct", "top10_pct")}
    lineups: List[Lineup] = []
    for position, row in enumerate(normalized, start=1):
        label = _get(row, _LINEUP_FIELDS["label"])
        lineups.append(
            build_lineup(
                set_name=_text(_get(row, _LINEUP_FIELDS["set"])) or "reference",
                position=position,
                refs=_lineup_refs(_get(row, _LINEUP_FIELDS["players"])),
                index=index,
                raw_label=_text(label) or None,
                sims=SimOutcomes(**{name: values[position - 1] for name, values in sims.items()}),
            )
        )
    return lineups


def parse_contest_config(data: Mapping[str, Any]) -> ContestInput:
    """Build contest parameters from a loosely keyed mapping.

    Raises :class:`ValueError` (pydantic ``ValidationError``) on bad values.
    """

    if "input" in data and isinstance(data["input"], Mapping):
        data = data["input"]
    row = _normalized(data)
    values: Dict[str, Any] = {}
    for name, aliases in _CONTEST_FIELDS.items():
        value = _get(row, aliases)
        if value is None:
            continue
        if name == "payout_tiers":
            values[name] = _payout_tiers(value)
        elif name == "contest_name":
            values[name] = _text(value)
        elif name == "paid_pct":
            pct = parse_float(value)
            if pct is not None:
                values[name] = pct / 100.0 if pct > 1.0 else pct
        else:
            values[name] = parse_float(value)
    return ContestInput.model_validate(values)


def _payout_tiers(raw: Any) -> Tuple[PayoutTier, ...]:
    if not isinstance(raw, (list, tuple)):
        raise ValueError("payout table must be a list")
    tiers: List[PayoutTier] = []
    for place, item in enumerate(raw, start=1):
        if isinstance(item, Mapping):
            entry = _normalized(item)
            min_rank = parse_float(_get(entry, ("minrank", "min", "from", "place", "rank")))
            max_rank = parse_float(_get(entry, ("maxrank", "max", "to"))) or min_rank
            tiers.append(
                PayoutTier(
                    min_rank=int(min_rank or place),
                    max_rank=int(max_rank or min_rank or place),
                    payout=parse_float(_get(entry, ("payout", "prize", "amount"))) or 0.0,
                )
            )
        else:
            tiers.append(PayoutTier(min_rank=place, max_rank=place, payout=parse_float(item) or 0.0))
    return tuple(tiers)


def parse_pipeline_json(text: str) -> PipelinePack:
    """Parse a reference pack into canonical players and lineups.

    Embedded lineups resolve against the pack's own players. Missing optional
    sections default to empty collections.
    """

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedPipelinePayload(f"pipeline JSON is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedPipelinePayload("pipeline JSON must be an object at the top level")
    try:
        payload = PipelinePayload.model_validate(data)
    except ValidationError as exc:
        raise MalformedPipelinePayload(f"pipeline JSON has an unexpected shape: {exc}") from exc

    players, missing_salary = _parse_players(payload.players)
    index = PlayerIndex(players)
    lineups = _parse_lineups(payload.lineups, index)

    warnings: List[str] = []
    contest: Optional[ContestInput] = None
    if payload.contest:
        try:
            contest = parse_contest_config(payload.contest)
        except (ValidationError, ValueError) as exc:
            logger.warning("Ignoring embedded contest configuration: %s", exc)
            warnings.append("Embedded contest configuration was invalid and has been ignored.")
    if missing_salary:
        warnings.append(f"{missing_salary} reference players have no salary.")

    logger.info(
        "Parsed pipeline pack: %d players, %d embedded lineups", len(players), len(lineups)
    )
    return PipelinePack(
        players=tuple(players),
        lineups=tuple(lineups),
        meta=dict(payload.meta),
        diagnostics=payload.diagnostics,
        contest=contest,
        files=dict(payload.files),
        missing_salary_count=missing_salary,
        warnings=tuple(warnings),
    )
