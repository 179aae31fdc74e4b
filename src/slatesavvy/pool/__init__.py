"""Lineup pool utilities: reconciliation, slotting, recompute, filtering and export."""

from .reconcile import PlayerIndex, Resolution, match_player, resolve_refs
from .slots import SlotAssignment, assign_slots
from .recompute import recompute
from .filtering import ALL_SETS, FilterCriteria, FilterResult, FilterSummary, filter_lineups, lineup_sets
from .export import ContestExportError, copy_ids_text, export_lineups_to_csv

__all__ = [
    "ALL_SETS",
    "ContestExportError",
    "FilterCriteria",
    "FilterResult",
    "FilterSummary",
    "PlayerIndex",
    "Resolution",
    "SlotAssignment",
    "assign_slots",
    "copy_ids_text",
    "export_lineups_to_csv",
    "filter_lineups",
    "lineup_sets",
    "match_player",
    "recompute",
    "resolve_refs",
]
