"""Parsers for lineup CSVs: optimizer exports and loosely formatted user files."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from slatesavvy.errors import ReferencePackRequired
from slatesavvy.models import ROSTER_SIZE, Lineup, Player, PlayerRef
from slatesavvy.pool.reconcile import PlayerIndex, resolve_refs

from ._tabular import first_key, parse_float, percent_column, pick, read_rows
from .teams import canonical_team, looks_like_team


logger = logging.getLogger(__name__)

SLOT_COLUMNS: Tuple[str, ...] = ("pg", "sg", "sf", "pf", "c", "g", "f", "util")
NUMBERED_PREFIXES: Tuple[str, ...] = ("p", "player")
LABEL_COLUMNS: Tuple[str, ...] = ("lineupid", "lineup", "entryid", "id", "rank", "lineupnumber", "entry")
LONG_LABEL_COLUMNS: Tuple[str, ...] = ("lineupid", "lineup", "lineupnumber", "entryid", "entry")
SET_COLUMNS: Tuple[str, ...] = ("set", "build", "group", "tag", "run")
SIM_COLUMNS: Dict[str, Tuple[str, ...]] = {
    "sim_ev": ("simev", "ev", "expectedprofit", "avgprofit"),
    "sim_roi": ("simroi", "roi", "roi%", "simroi%"),
    "cash_pct": ("cash%", "cashpct", "cashrate", "cash", "simcash%", "simcashpct"),
    "top10_pct": ("top10%", "top10pct", "top10", "simtop10%", "simtop10pct", "top10rate"),
}
NAME_COLUMNS: Tuple[str, ...] = ("name", "player", "playername", "fullname")
TEAM_COLUMNS: Tuple[str, ...] = ("team", "teamabbrev", "tm")
ID_COLUMNS: Tuple[str, ...] = ("playerid", "dkid", "draftkingsid", "id")

_NAME_WITH_PAREN = re.compile(r"^(?P<name>.*?)\s*\((?P<inner>[^)]*)\)\s*$")
_ID_TOKEN = re.compile(r"^\d+(?:\.0+)?$")


@dataclass(frozen=True)
class SimOutcomes:
    sim_ev: Optional[float] = None
    sim_roi: Optional[float] = None
    cash_pct: Optional[float] = None
    top10_pct: Optional[float] = None


def lineup_id_for(set_name: str, position: int) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", set_name.lower()).strip("-") or "lineup"
    return f"{slug}-{position:03d}"


def parse_cell(cell: str) -> Optional[PlayerRef]:
    """Read one roster cell: ``4471``, ``Jane Doe (4471)``, ``Jane Doe (BOS)`` or ``Jane Doe``."""

    text = cell.strip()
    if not text:
        return None
    if _ID_TOKEN.match(text):
        return PlayerRef(player_id=text, raw=text)
    match = _NAME_WITH_PAREN.match(text)
    if match:
        name = match.group("name").strip() or None
        inner = match.group("inner").strip()
        if _ID_TOKEN.match(inner):
            return PlayerRef(player_id=inner, name=name, raw=text)
        if looks_like_team(inner):
            return PlayerRef(name=name, team=canonical_team(inner), raw=text)
    return PlayerRef(name=text, raw=text)


def build_lineup(
    *,
    set_name: str,
    position: int,
    refs: Sequence[PlayerRef],
    index: Optional[PlayerIndex],
    raw_label: Optional[str] = None,
    sims: SimOutcomes = SimOutcomes(),
) -> Lineup:
    """Create a lineup and, when a pool index is given, resolve it immediately.

    Refs that resolve are enriched with the matched player's name and team so a
    later pool with different identifiers can still find them.
    """

    lineup = Lineup(
        lineup_id=lineup_id_for(set_name, position),
        raw_label=raw_label,
        set_name=set_name,
        refs=tuple(refs[:ROSTER_SIZE]),
        sim_ev=sims.sim_ev,
        sim_roi=sims.sim_roi,
        cash_pct=sims.cash_pct,
        top10_pct=sims.top10_pct,
    )
    if len(refs) > ROSTER_SIZE:
        logger.warning("Lineup %s lists %d players; keeping the first %d", lineup.lineup_id, len(refs), ROSTER_SIZE)
    if index is None:
        return lineup.with_players((), missing_count=len(lineup.refs))
    enriched = []
    for ref in lineup.refs:
        player = index.resolve(ref)
        enriched.append(ref.enriched_with(player) if player is not None else ref)
    resolution = resolve_refs(enriched, index)
    return lineup.model_copy(update={"refs": tuple(enriched)}).with_players(
        resolution.players, resolution.missing_count
    )


def roster_columns(keys: Sequence[str]) -> List[str]:
    """Return the per-player columns of a wide lineup file, in roster order."""

    present = set(keys)
    if all(slot in present for slot in SLOT_COLUMNS):
        return [key for key in keys if key in SLOT_COLUMNS]
    for prefix in NUMBERED_PREFIXES:
        numbered = [f"{prefix}{n}" for n in range(1, ROSTER_SIZE + 1)]
        if all(column in present for column in numbered):
            return numbered
    return []


def sim_columns(keys: Sequence[str]) -> Dict[str, str]:
    found: Dict[str, str] = {}
    for field, aliases in SIM_COLUMNS.items():
        column = first_key(keys, aliases)
        if column:
            found[field] = column
    return found


def _sim_outcomes(rows: Sequence[Mapping[str, str]], columns: Mapping[str, str]) -> List[SimOutcomes]:
    parsed: Dict[str, List[Optional[float]]] = {}
    for field, column in columns.items():
        values = [row.get(column) for row in rows]
        if field == "sim_ev":
            parsed[field] = [parse_float(value) for value in values]
        else:
            parsed[field] = percent_column(values)
    return [
        SimOutcomes(**{field: values[idx] for field, values in parsed.items()})
        for idx in range(len(rows))
    ]


def parse_optimizer_lineups(
    text: str,
    reference_pool: Sequence[Player],
    *,
    set_name: str = "optimizer",
) -> List[Lineup]:
    """Parse an optimizer export whose cells are pipeline-assigned player ids."""

    if not reference_pool:
        raise ReferencePackRequired()

    index = PlayerIndex(reference_pool)
    keys, rows = read_rows(text)
    columns = roster_columns(keys)
    if not columns:
        raise ValueError("optimizer export has no roster slot columns")
    label_column = first_key(keys, LABEL_COLUMNS)
    set_column = first_key(keys, SET_COLUMNS)
    outcomes = _sim_outcomes(rows, sim_columns(keys))

    lineups: List[Lineup] = []
    for position, (row, sims) in enumerate(zip(rows, outcomes), start=1):
        refs = [ref for ref in (parse_cell(row.get(column, "")) for column in columns) if ref is not None]
        row_set = (row.get(set_column) if set_column else None) or set_name
        lineups.append(
            build_lineup(
                set_name=row_set,
                position=position,
                refs=refs,
                index=index,
                raw_label=row.get(label_column) if label_column else None,
                sims=sims,
            )
        )
    unresolved = sum(1 for lineup in lineups if lineup.missing_count)
    logger.info("Parsed %d optimizer lineups (%d with unresolved players)", len(lineups), unresolved)
    return lineups


def parse_user_lineups(text: str, *, set_name: str = "uploaded") -> List[Lineup]:
    """Parse a user lineup file without resolving it.

    Wide files carry one lineup per row; long files carry one player per row
    grouped by a lineup column.
    """

    keys, rows = read_rows(text)
    columns = roster_columns(keys)
    set_column = first_key(keys, SET_COLUMNS)
    label_column = first_key(keys, LABEL_COLUMNS)
    if columns:
        outcomes = _sim_outcomes(rows, sim_columns(keys))
        lineups = []
        for position, (row, sims) in enumerate(zip(rows, outcomes), start=1):
            refs = [ref for ref in (parse_cell(row.get(column, "")) for column in columns) if ref is not None]
            lineups.append(
                build_lineup(
                    set_name=(row.get(set_column) if set_column else None) or set_name,
                    position=position,
                    refs=refs,
                    index=None,
                    raw_label=row.get(label_column) if label_column else None,
                    sims=sims,
                )
            )
        return lineups
    return _parse_long_lineups(rows, keys, set_name=set_name)


def _parse_long_lineups(rows: Sequence[Mapping[str, str]], keys: Sequence[str], *, set_name: str) -> List[Lineup]:
    label_column = first_key(keys, LONG_LABEL_COLUMNS)
    if label_column is None:
        raise ValueError("lineup file has neither roster columns nor a lineup column")
    set_column = first_key(keys, SET_COLUMNS)
    id_columns = tuple(col for col in ID_COLUMNS if col != label_column)

    groups: Dict[str, List[Mapping[str, str]]] = {}
    for row in rows:
        groups.setdefault(row.get(label_column, ""), []).append(row)

    lineups: List[Lineup] = []
    for position, (label, members) in enumerate(groups.items(), start=1):
        refs: List[PlayerRef] = []
        for member in members:
            player_id = pick(member, id_columns)
            name = pick(member, NAME_COLUMNS)
            team = pick(member, TEAM_COLUMNS)
            if not (player_id or name):
                continue
            raw = ", ".join(part for part in (name, team, player_id) if part)
            refs.append(PlayerRef(player_id=player_id, name=name, team=canonical_team(team) or None, raw=raw))
        row_set = (members[0].get(set_column) if set_column else None) or set_name
        lineups.append(build_lineup(set_name=row_set, position=position, refs=refs, index=None, raw_label=label or None))
    return lineups


__all__ = [
    "SimOutcomes",
    "build_lineup",
    "lineup_id_for",
    "parse_cell",
    "parse_optimizer_lineups",
    "parse_user_lineups",
    "roster_columns",
    "sim_columns",
]
