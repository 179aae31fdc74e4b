"""Contest economics, lineup classification and portfolio reporting."""

from .economics import build_contest_state, derive_contest, derive_games
from .classify import (
    classify_lineup,
    field_ownership_baseline,
    get_contest_viability,
    get_field_alignment,
    get_upside_quality,
)
from .beliefs import PlayerDelta, belief_deltas
from .report import PortfolioReport, SlateStats, build_report, roster_status

__all__ = [
    "PlayerDelta",
    "PortfolioReport",
    "SlateStats",
    "belief_deltas",
    "build_contest_state",
    "build_report",
    "classify_lineup",
    "derive_contest",
    "derive_games",
    "field_ownership_baseline",
    "get_contest_viability",
    "get_field_alignment",
    "get_upside_quality",
    "roster_status",
]
