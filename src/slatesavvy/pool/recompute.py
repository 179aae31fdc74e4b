"""Re-resolve lineups against the active pool and refresh their signals."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from slatesavvy.analysis.classify import classify_lineup, field_ownership_baseline
from slatesavvy.config import DEFAULT_THRESHOLDS, ClassifierThresholds
from slatesavvy.models import ContestState, Lineup, Player

from .reconcile import PlayerIndex, resolve_refs


def recompute(
    lineups: Sequence[Lineup],
    contest_state: ContestState,
    active_pool: Iterable[Player],
    *,
    thresholds: Optional[ClassifierThresholds] = None,
) -> List[Lineup]:
    """Rebuild players, totals and signals for every lineup.

    Only ``refs`` and the ``sim_*`` fields are read from the input lineups, so
    running the output through again yields equal lineups.
    """

    thresholds = thresholds or DEFAULT_THRESHOLDS
    pool = tuple(active_pool)
    index = PlayerIndex(pool)
    baseline = field_ownership_baseline(pool, thresholds)

    refreshed: List[Lineup] = []
    for lineup in lineups:
        resolution = resolve_refs(lineup.refs, index)
        rebuilt = lineup.with_players(resolution.players, resolution.missing_count)
        signals = classify_lineup(rebuilt, contest_state, baseline, thresholds)
        refreshed.append(rebuilt.model_copy(update={"signals": signals}))
    return refreshed


__all__ = ["recompute"]
