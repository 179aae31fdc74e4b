"""Portfolio-level summaries: slate statistics and the reality check report."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from slatesavvy.models import ROSTER_SIZE, Alignment, ContestState, Lineup, Upside, Viability


LARGE_FIELD_SIZE = 5000

_EMPTY_NARRATIVE = "No lineups analyzed yet. Upload builds to generate your Reality Check summary."
_LARGE_FIELD_GUIDANCE = (
    "For this contest size, consider reducing duplication risk and increasing ceiling exposure across "
    'your remaining entries. The "Over-Aligned" builds should be scrutinized for potential pivot plays '
    "in FLEX spots."
)
_SMALL_FIELD_GUIDANCE = (
    'Smaller fields prioritize projectable volume. Focus on your "Strong Viability" builds and ensure '
    "you aren't over-extending into low-floor contrarian plays where variance outweighs potential ROI."
)


class SlateStats(BaseModel):
    total_players: int = 0
    total_lineups: int = 0
    missing_salary_count: int = 0
    warnings: Tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)


class PortfolioReport(BaseModel):
    total_lineups: int
    complete_lineups: int
    strong_pct: float = Field(..., ge=0.0, le=1.0)
    over_aligned_pct: float = Field(..., ge=0.0, le=1.0)
    clean_pct: float = Field(..., ge=0.0, le=1.0)
    narrative: str
    contest_context: Optional[str] = None
    guidance: Optional[str] = None
    rake_pct: Optional[float] = None
    paid_places: Optional[int] = None

    model_config = ConfigDict(frozen=True)


def roster_status(lineup: Lineup) -> str:
    """Short mapping status for a lineup row."""

    resolved = len(lineup.players)
    if lineup.refs and resolved == 0:
        return "Unmapped Roster"
    if lineup.missing_count:
        return f"Partially Mapped ({resolved}/{ROSTER_SIZE})"
    if resolved:
        return ", ".join(player.name.split(" ")[-1] for player in lineup.players[:3]) + "..."
    return "Empty Lineup"


def _share(lineups: Sequence[Lineup], axis: str, label: str) -> float:
    if not lineups:
        return 0.0
    hits = sum(
        1 for lineup in lineups if lineup.signals is not None and getattr(lineup.signals, axis).label == label
    )
    return hits / len(lineups)


def build_narrative(strong_pct: float, over_aligned_pct: float, clean_count: int) -> str:
    viability = (
        "Your portfolio is highly viable for this contest"
        if strong_pct > 0.5
        else "Your portfolio shows mixed viability"
    )
    alignment = (
        "but is heavily aligned with the field"
        if over_aligned_pct > 0.5
        else "and maintains a balanced exposure to the field"
    )
    upside = (
        "Upside exists, but payout splitting risk should be monitored."
        if clean_count > 0
        else "Upside exists, though floor stability is the primary driver."
    )
    return f"{viability} {alignment}. {upside}"


def contest_context(contest_state: ContestState) -> str:
    contest = contest_state.input
    rake = f"{contest_state.derived.rake_pct * 100:.1f}%"
    return (
        f"This {contest.contest_name} slate features a field of {contest.field_size:,} entries "
        f"with {contest_state.derived.paid_places:,} paid places and a {rake} house edge."
    )


def field_guidance(contest_state: ContestState) -> str:
    if contest_state.input.field_size > LARGE_FIELD_SIZE:
        return _LARGE_FIELD_GUIDANCE
    return _SMALL_FIELD_GUIDANCE


def build_report(lineups: Sequence[Lineup], contest_state: Optional[ContestState]) -> PortfolioReport:
    """Summarize classified lineups; only complete lineups count toward the shares."""

    complete = [lineup for lineup in lineups if lineup.is_complete]
    strong_pct = _share(complete, "viability", Viability.STRONG.value)
    over_pct = _share(complete, "alignment", Alignment.OVER_ALIGNED.value)
    clean_pct = _share(complete, "upside", Upside.CLEAN.value)
    clean_count = round(clean_pct * len(complete))

    narrative = build_narrative(strong_pct, over_pct, clean_count) if complete else _EMPTY_NARRATIVE
    return PortfolioReport(
        total_lineups=len(lineups),
        complete_lineups=len(complete),
        strong_pct=round(strong_pct, 6),
        over_aligned_pct=round(over_pct, 6),
        clean_pct=round(clean_pct, 6),
        narrative=narrative,
        contest_context=contest_context(contest_state) if contest_state else None,
        guidance=field_guidance(contest_state) if contest_state else None,
        rake_pct=contest_state.derived.rake_pct if contest_state else None,
        paid_places=contest_state.derived.paid_places if contest_state else None,
    )


__all__ = [
    "LARGE_FIELD_SIZE",
    "PortfolioReport",
    "SlateStats",
    "build_narrative",
    "build_report",
    "contest_context",
    "field_guidance",
    "roster_status",
]
