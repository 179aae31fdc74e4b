"""Team abbreviation aliases seen across DFS data sources."""

from __future__ import annotations

import re


NBA_TEAM_ALIAS_GROUPS: dict[str, list[str]] = {
    "ATL": ["ATL", "ATLANTA", "ATLANTA HAWKS", "HAWKS"],
    "BOS": ["BOS", "BOSTON", "BOSTON CELTICS", "CELTICS"],
    "BKN": ["BKN", "BRK", "BROOKLYN", "BROOKLYN NETS", "NETS"],
    "CHA": ["CHA", "CHO", "CHARLOTTE", "CHARLOTTE HORNETS", "HORNETS"],
    "CHI": ["CHI", "CHICAGO", "CHICAGO BULLS", "BULLS"],
    "CLE": ["CLE", "CLEVELAND", "CLEVELAND CAVALIERS", "CAVALIERS", "CAVS"],
    "DAL": ["DAL", "DALLAS", "DALLAS MAVERICKS", "MAVERICKS", "MAVS"],
    "DEN": ["DEN", "DENVER", "DENVER NUGGETS", "NUGGETS"],
    "DET": ["DET", "DETROIT", "DETROIT PISTONS", "PISTONS"],
    "GSW": ["GSW", "GS", "GOLDEN STATE", "GOLDEN STATE WARRIORS", "WARRIORS"],
    "HOU": ["HOU", "HOUSTON", "HOUSTON ROCKETS", "ROCKETS"],
    "IND": ["IND", "INDIANA", "INDIANA PACERS", "PACERS"],
    "LAC": ["LAC", "LA CLIPPERS", "LOS ANGELES CLIPPERS", "CLIPPERS"],
    "LAL": ["LAL", "LA LAKERS", "LOS ANGELES LAKERS", "LAKERS"],
    "MEM": ["MEM", "MEMPHIS", "MEMPHIS GRIZZLIES", "GRIZZLIES"],
    "MIA": ["MIA", "MIAMI", "MIAMI HEAT", "HEAT"],
    "MIL": ["MIL", "MILWAUKEE", "MILWAUKEE BUCKS", "BUCKS"],
    "MIN": ["MIN", "MINNESOTA", "MINNESOTA TIMBERWOLVES", "TIMBERWOLVES", "WOLVES"],
    "NOP": ["NOP", "NO", "NOR", "NEW ORLEANS", "NEW ORLEANS PELICANS", "PELICANS"],
    "NYK": ["NYK", "NY", "NEW YORK", "NEW YORK KNICKS", "KNICKS"],
    "OKC": ["OKC", "OKLAHOMA CITY", "OKLAHOMA CITY THUNDER", "THUNDER"],
    "ORL": ["ORL", "ORLANDO", "ORLANDO MAGIC", "MAGIC"],
    "PHI": ["PHI", "PHILADELPHIA", "PHILADELPHIA 76ERS", "76ERS", "SIXERS"],
    "PHX": ["PHX", "PHO", "PHOENIX", "PHOENIX SUNS", "SUNS"],
    "POR": ["POR", "PORTLAND", "PORTLAND TRAIL BLAZERS", "TRAIL BLAZERS", "BLAZERS"],
    "SAC": ["SAC", "SACRAMENTO", "SACRAMENTO KINGS", "KINGS"],
    "SAS": ["SAS", "SA", "SAN ANTONIO", "SAN ANTONIO SPURS", "SPURS"],
    "TOR": ["TOR", "TORONTO", "TORONTO RAPTORS", "RAPTORS"],
    "UTA": ["UTA", "UTAH", "UTAH JAZZ", "JAZZ"],
    "WAS": ["WAS", "WSH", "WASHINGTON", "WASHINGTON WIZARDS", "WIZARDS"],
}


def _team_token(value: str) -> str:
    return re.sub(r"[^A-Z0-9]", "", value.upper())


def _build_alias_lookup() -> dict[str, str]:
    lookup: dict[str, str] = {}
    for abbr, variants in NBA_TEAM_ALIAS_GROUPS.items():
        for variant in variants:
            key = _team_token(variant)
            if key:
                lookup.setdefault(key, abbr)
    return lookup


TEAM_ALIAS_LOOKUP = _build_alias_lookup()


def canonical_team(team: str | None) -> str:
    if not team:
        return ""
    token = _team_token(team)
    if not token:
        return team.strip().upper()
    # Unknown abbreviations pass through uppercased.
    return TEAM_ALIAS_LOOKUP.get(token, team.strip().upper())


def looks_like_team(value: str) -> bool:
    return _team_token(value) in TEAM_ALIAS_LOOKUP and len(value.strip()) <= 4
