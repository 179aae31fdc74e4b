"""Slice a lineup portfolio by set, signals and metrics."""

from __future__ import annotations

from dataclasses import dataclass
from statistics import fmean, median, pstdev
from typing import Iterable, List, Literal, Optional, Sequence

from slatesavvy.models import Lineup


ALL_SETS = "All"

SortField = Literal["projection", "salary", "ownership", "ceiling", "sim_roi", "sim_ev", "source"]


@dataclass(frozen=True)
class FilterCriteria:
    """Filtering configuration for a lineup portfolio."""

    set_name: str = ALL_SETS
    complete_only: bool = False
    viability: tuple[str, ...] = ()
    alignment: tuple[str, ...] = ()
    upside: tuple[str, ...] = ()
    min_projection: float | None = None
    max_projection: float | None = None
    min_salary: int | None = None
    max_salary: int | None = None
    max_ownership: float | None = None
    include_player_ids: tuple[str, ...] = ()
    exclude_player_ids: tuple[str, ...] = ()
    include_team_codes: tuple[str, ...] = ()
    exclude_team_codes: tuple[str, ...] = ()
    limit: int | None = None
    sort_by: SortField = "source"
    sort_direction: Literal["asc", "desc"] = "desc"


@dataclass(frozen=True)
class FilterSummary:
    available_lineups: int
    selected_lineups: int
    complete_lineups: int
    projection_mean: float | None
    projection_median: float | None
    projection_std: float | None
    ownership_mean: float | None
    sim_roi_mean: float | None


@dataclass(frozen=True)
class FilterResult:
    lineups: list[Lineup]
    summary: FilterSummary


def lineup_sets(lineups: Iterable[Lineup]) -> list[str]:
    """``All`` followed by each distinct set name in first-seen order."""

    names = dict.fromkeys(lineup.set_name for lineup in lineups if lineup.set_name)
    return [ALL_SETS, *names]


def _label(lineup: Lineup, axis: str) -> Optional[str]:
    if lineup.signals is None:
        return None
    return getattr(lineup.signals, axis).label


def _passes_criteria(lineup: Lineup, criteria: FilterCriteria) -> bool:
    if criteria.set_name != ALL_SETS and lineup.set_name != criteria.set_name:
        return False
    if criteria.complete_only and not lineup.is_complete:
        return False
    for axis in ("viability", "alignment", "upside"):
        wanted = getattr(criteria, axis)
        if wanted and _label(lineup, axis) not in wanted:
            return False
    if criteria.min_projection is not None and lineup.total_projection < criteria.min_projection:
        return False
    if criteria.max_projection is not None and lineup.total_projection > criteria.max_projection:
        return False
    if criteria.min_salary is not None and lineup.total_salary < criteria.min_salary:
        return False
    if criteria.max_salary is not None and lineup.total_salary > criteria.max_salary:
        return False
    if criteria.max_ownership is not None and lineup.total_ownership > criteria.max_ownership:
        return False

    player_ids = {player.player_id for player in lineup.players}
    if criteria.include_player_ids and not set(criteria.include_player_ids).issubset(player_ids):
        return False
    if criteria.exclude_player_ids and player_ids.intersection(criteria.exclude_player_ids):
        return False

    team_codes = {player.team for player in lineup.players}
    if criteria.include_team_codes and not set(criteria.include_team_codes).issubset(team_codes):
        return False
    if criteria.exclude_team_codes and team_codes.intersection(criteria.exclude_team_codes):
        return False
    return True


def _sort_key(lineup: Lineup, criteria: FilterCriteria) -> float:
    if criteria.sort_by == "salary":
        return float(lineup.total_salary)
    if criteria.sort_by == "ownership":
        return lineup.total_ownership
    if criteria.sort_by == "ceiling":
        return lineup.total_ceiling
    if criteria.sort_by == "sim_roi":
        return lineup.sim_roi if lineup.sim_roi is not None else float("-inf")
    if criteria.sort_by == "sim_ev":
        return lineup.sim_ev if lineup.sim_ev is not None else float("-inf")
    return lineup.total_projection


def _safe_stats(values: Iterable[float]) -> tuple[float | None, float | None, float | None]:
    values = list(values)
    if not values:
        return None, None, None
    std = pstdev(values) if len(values) > 1 else 0.0
    return fmean(values), median(values), std


def _build_summary(available: Sequence[Lineup], selected: Sequence[Lineup]) -> FilterSummary:
    projection_mean, projection_median, projection_std = _safe_stats(
        lineup.total_projection for lineup in selected
    )
    ownership_mean, _, _ = _safe_stats(lineup.total_ownership for lineup in selected)
    roi_mean, _, _ = _safe_stats(lineup.sim_roi for lineup in selected if lineup.sim_roi is not None)
    return FilterSummary(
        available_lineups=len(available),
        selected_lineups=len(selected),
        complete_lineups=sum(1 for lineup in selected if lineup.is_complete),
        projection_mean=projection_mean,
        projection_median=projection_median,
        projection_std=projection_std,
        ownership_mean=ownership_mean,
        sim_roi_mean=roi_mean,
    )


def filter_lineups(lineups: Sequence[Lineup], criteria: FilterCriteria = FilterCriteria()) -> FilterResult:
    """Filter lineups and return ordered selections with summary statistics.

    ``sort_by="source"`` keeps the order the lineups were loaded in.
    """

    available = list(lineups)
    selected: List[Lineup] = [lineup for lineup in available if _passes_criteria(lineup, criteria)]
    if criteria.sort_by != "source":
        reverse = criteria.sort_direction != "asc"
        selected.sort(key=lambda lineup: (_sort_key(lineup, criteria), lineup.lineup_id), reverse=reverse)
    if criteria.limit is not None and criteria.limit > 0:
        selected = selected[: criteria.limit]
    return FilterResult(lineups=selected, summary=_build_summary(available, selected))


__all__ = [
    "ALL_SETS",
    "FilterCriteria",
    "FilterResult",
    "FilterSummary",
    "filter_lineups",
    "lineup_sets",
]
