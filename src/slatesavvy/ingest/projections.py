"""Load projection CSVs into a replacement player pool (a "belief profile")."""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence

from pydantic import BaseModel

from slatesavvy.models import Player

from ._tabular import header_key, percent_column, parse_float, parse_salary, read_rows
from .teams import canonical_team


logger = logging.getLogger(__name__)

DEFAULT_PROJECTION_ALIASES: dict[str, tuple[str, ...]] = {
    "player_id": ("id", "playerid", "dkid", "draftkingsid", "dfsid"),
    "name": ("name", "player", "playername", "fullname"),
    "first_name": ("firstname",),
    "last_name": ("lastname",),
    "team": ("team", "teamabbrev", "tm"),
    "opponent": ("opp", "opponent", "vs"),
    "position": ("position", "pos", "rosterposition"),
    "salary": ("salary", "sal", "dksalary", "cost"),
    "projection": ("projection", "proj", "fpts", "fantasy", "projectedpoints", "median", "points"),
    "ownership": ("ownership", "own", "own%", "projown", "projectedownership", "pown", "pown%"),
    "ceiling": ("ceiling", "ceil", "upside", "p90"),
    "value": ("value", "val"),
}


class ProjectionRow(BaseModel):
    raw_id: Optional[str] = None
    raw_name: str
    raw_team: str
    raw_opponent: Optional[str] = None
    raw_position: Optional[str] = None
    raw_salary: Optional[str] = None
    raw_projection: Optional[str] = None
    raw_ownership: Optional[str] = None
    raw_ceiling: Optional[str] = None
    raw_value: Optional[str] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, str], mapping: Mapping[str, Sequence[str]]) -> "ProjectionRow":
        def extract(field: str) -> Optional[str]:
            for alias in mapping.get(field, ()):
                value = row.get(alias)
                if value not in (None, ""):
                    return value.strip()
            return None

        name = extract("name")
        if not name:
            parts = [part for part in (extract("first_name"), extract("last_name")) if part]
            name = " ".join(parts)
        return cls(
            raw_id=extract("player_id"),
            raw_name=name or "",
            raw_team=extract("team") or "",
            raw_opponent=extract("opponent"),
            raw_position=extract("position"),
            raw_salary=extract("salary"),
            raw_projection=extract("projection"),
            raw_ownership=extract("ownership"),
            raw_ceiling=extract("ceiling"),
            raw_value=extract("value"),
        )


def merge_aliases(overrides: Mapping[str, str] | None) -> dict[str, tuple[str, ...]]:
    """Put caller-supplied column names ahead of the default aliases."""

    aliases = dict(DEFAULT_PROJECTION_ALIASES)
    for field, column in (overrides or {}).items():
        extra = tuple(header_key(part) for part in column.split("|") if part.strip())
        aliases[field] = extra + aliases.get(field, ())
    return aliases


def load_projection_rows(text: str, *, mapping: Mapping[str, str] | None = None) -> List[ProjectionRow]:
    aliases = merge_aliases(mapping)
    _, rows = read_rows(text)
    return [ProjectionRow.from_mapping(row, aliases) for row in rows]


def rows_to_players(rows: Sequence[ProjectionRow]) -> List[Player]:
    ownership = percent_column([row.raw_ownership for row in rows])
    players: List[Player] = []
    skipped = 0
    for row, own in zip(rows, ownership):
        if not row.raw_name:
            skipped += 1
            continue
        team = canonical_team(row.raw_team)
        projection = parse_float(row.raw_projection)
        players.append(
            Player(
                player_id=row.raw_id or f"{row.raw_name}::{team}",
                name=row.raw_name,
                team=team,
                opponent=canonical_team(row.raw_opponent),
                position=(row.raw_position or "").upper(),
                salary=parse_salary(row.raw_salary) or 0,
                projection=projection if projection is not None else 0.0,
                ownership=None if own is None else min(100.0, max(0.0, own)),
                ceiling=parse_float(row.raw_ceiling),
                value=parse_float(row.raw_value),
                metadata={"source_id": row.raw_id} if row.raw_id else {},
            )
        )
    if skipped:
        logger.debug("Skipped %d projection rows without a player name", skipped)
    return players


def parse_projections(text: str, *, mapping: Mapping[str, str] | None = None) -> List[Player]:
    """Parse a projections CSV into a full replacement pool; never merged with a prior pool."""

    players = rows_to_players(load_projection_rows(text, mapping=mapping))
    logger.info("Parsed %d belief projections", len(players))
    return players
