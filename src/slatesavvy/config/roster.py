"""Roster configuration for supported site/sport combinations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Set, Tuple


@dataclass(frozen=True)
class RosterRules:
    site: str
    sport: str
    salary_cap: int
    roster_order: Tuple[str, ...]
    slot_positions: Mapping[str, Set[str]]

    @property
    def roster_size(self) -> int:
        return len(self.roster_order)

    def eligible_slots(self, positions: Iterable[str]) -> Tuple[str, ...]:
        """Slots a player may fill, ordered primary first, then flex, then catch-all."""

        wanted = set(positions)
        ranked = sorted(
            (slot for slot in self.roster_order if wanted & self.slot_positions.get(slot, set())),
            key=lambda slot: (len(self.slot_positions[slot]), self.roster_order.index(slot)),
        )
        return tuple(dict.fromkeys(ranked))


_ROSTER_RULES: Dict[Tuple[str, str], RosterRules] = {
    ("DK", "NBA"): RosterRules(
        site="DK",
        sport="NBA",
        salary_cap=50_000,
        roster_order=("PG", "SG", "SF", "PF", "C", "G", "F", "UTIL"),
        slot_positions={
            "PG": {"PG"},
            "SG": {"SG"},
            "SF": {"SF"},
            "PF": {"PF"},
            "C": {"C"},
            "G": {"PG", "SG"},
            "F": {"SF", "PF"},
            "UTIL": {"PG", "SG", "SF", "PF", "C"},
        },
    ),
}


def get_rules(site: str, sport: str) -> RosterRules:
    """Fetch rules for a site/sport pair, raising KeyError if missing."""

    key = (site.upper(), sport.upper())
    if key not in _ROSTER_RULES:
        raise KeyError(f"No roster rules configured for site={site!r}, sport={sport!r}")
    return _ROSTER_RULES[key]


DK_NBA = get_rules("DK", "NBA")
