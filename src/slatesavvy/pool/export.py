"""DraftKings upload CSV export and raw-id copy helpers for lineups."""

from __future__ import annotations

import csv
from dataclasses import dataclass
from io import StringIO
from typing import Sequence

from slatesavvy.config import RosterRules, get_rules
from slatesavvy.models import Lineup

from .slots import assign_slots


class ContestExportError(RuntimeError):
    """Raised when a lineup cannot be written to a contest upload file."""


@dataclass(frozen=True)
class ContestTemplate:
    site: str
    sport: str
    headers: tuple[str, ...]
    slot_order: tuple[str, ...]


def _slot_headers(slot_order: Sequence[str]) -> tuple[str, ...]:
    counts: dict[str, int] = {}
    headers: list[str] = []
    for slot in slot_order:
        counts[slot] = counts.get(slot, 0) + 1
        if slot_order.count(slot) > 1 and slot != "UTIL":
            headers.append(f"{slot}{counts[slot]}")
        else:
            headers.append(slot)
    return tuple(headers)


def _resolve_template(rules: RosterRules, *, include_entry_name: bool) -> ContestTemplate:
    slots = _slot_headers(rules.roster_order)
    headers = ("EntryName", *slots) if include_entry_name else slots
    return ContestTemplate(site=rules.site, sport=rules.sport, headers=headers, slot_order=rules.roster_order)


def slotted_player_ids(lineup: Lineup, rules: RosterRules) -> list[str]:
    """Player ids in slot order; raises when the lineup cannot fill every slot."""

    if not lineup.is_complete:
        raise ContestExportError(
            f"Lineup {lineup.lineup_id} is incomplete ({lineup.missing_count} unresolved players)"
        )
    assignment = assign_slots(lineup.players, rules)
    if not assignment.complete:
        raise ContestExportError(
            f"Lineup {lineup.lineup_id} cannot fill slot(s) {', '.join(assignment.open_slots)}"
        )
    return [player_id for player_id in assignment.ordered_ids() if player_id is not None]


def export_lineups_to_csv(
    lineups: Sequence[Lineup],
    *,
    site: str = "DK",
    sport: str = "NBA",
    entry_names: Sequence[str] | None = None,
) -> str:
    """Write lineups in the site's upload layout, one row per lineup."""

    if entry_names is not None and len(entry_names) != len(lineups):
        raise ContestExportError("entry_names length must match lineups length")

    rules = get_rules(site, sport)
    template = _resolve_template(rules, include_entry_name=entry_names is not None)

    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(template.headers)
    for idx, lineup in enumerate(lineups):
        row = slotted_player_ids(lineup, rules)
        if entry_names is not None:
            row.insert(0, entry_names[idx])
        writer.writerow(row)
    return buffer.getvalue()


def copy_ids_text(lineup: Lineup) -> str:
    """The lineup's identifiers exactly as they appeared in its source file."""

    return ",".join(lineup.player_ids)


__all__ = [
    "ContestExportError",
    "copy_ids_text",
    "export_lineups_to_csv",
    "slotted_player_ids",
]
