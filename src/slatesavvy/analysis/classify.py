"""Rule tables that label lineups on viability, field alignment and upside.

Every function here is pure. Incomplete lineups are never labelled; they get
the gray ``Unclassifiable`` signal instead. Values that land exactly on a
cutoff take the lower label.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from slatesavvy.config import DEFAULT_THRESHOLDS, ClassifierThresholds
from slatesavvy.models import (
    ROSTER_SIZE,
    UNCLASSIFIABLE,
    Alignment,
    ContestState,
    Lineup,
    LineupSignals,
    Player,
    Signal,
    Upside,
    Viability,
)


UNCLASSIFIED_COLOR = "gray"

VIABILITY_STYLE: Dict[Viability, tuple[str, str]] = {
    Viability.STRONG: ("emerald", "▲"),
    Viability.MODERATE: ("amber", "◆"),
    Viability.UNLIKELY: ("red", "▼"),
}
ALIGNMENT_COLORS: Dict[Alignment, str] = {
    Alignment.OVER_ALIGNED: "red",
    Alignment.BALANCED: "blue",
    Alignment.CONTRARIAN: "emerald",
}
UPSIDE_COLORS: Dict[Upside, str] = {
    Upside.CLEAN: "emerald",
    Upside.MIXED: "amber",
    Upside.THIN: "red",
}

UNCLASSIFIED = Signal(label=UNCLASSIFIABLE, color=UNCLASSIFIED_COLOR)


def lineup_roi(lineup: Lineup, contest_state: ContestState) -> Optional[float]:
    """Simulated ROI in percent, falling back to EV over the entry fee."""

    if lineup.sim_roi is not None:
        return lineup.sim_roi
    fee = contest_state.input.entry_fee
    if lineup.sim_ev is not None and fee > 0:
        return lineup.sim_ev / fee * 100.0
    return None


def get_contest_viability(
    lineup: Lineup,
    contest_state: ContestState,
    thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS,
) -> Signal:
    if not lineup.is_complete:
        return UNCLASSIFIED
    roi = lineup_roi(lineup, contest_state)
    if roi is None:
        return UNCLASSIFIED
    rake_pct = contest_state.derived.rake_pct * 100.0
    strong_cutoff = max(rake_pct * thresholds.viability_strong_rake_multiple, thresholds.viability_strong_floor)
    if roi > strong_cutoff:
        label = Viability.STRONG
    elif roi > thresholds.viability_moderate_floor:
        label = Viability.MODERATE
    else:
        label = Viability.UNLIKELY
    color, icon = VIABILITY_STYLE[label]
    return Signal(label=label.value, color=color, icon=icon)


def field_ownership_baseline(
    pool: Iterable[Player],
    thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS,
) -> float:
    """Expected total ownership of a lineup drawn the way the field drafts.

    A field roster picks each player with probability proportional to their
    ownership, so the expected ownership per slot is ``sum(own^2) / sum(own)``.
    """

    owns = [player.ownership for player in pool if player.ownership]
    total = sum(owns)
    if total <= 0:
        return thresholds.alignment_default_baseline
    return round(ROSTER_SIZE * sum(own * own for own in owns) / total, 6)


def get_field_alignment(
    lineup: Lineup,
    baseline: float,
    thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS,
) -> Signal:
    if not lineup.is_complete or baseline <= 0:
        return UNCLASSIFIED
    ratio = lineup.total_ownership / baseline
    if ratio >= thresholds.alignment_over_ratio:
        label = Alignment.OVER_ALIGNED
    elif ratio < thresholds.alignment_contrarian_ratio:
        label = Alignment.CONTRARIAN
    else:
        label = Alignment.BALANCED
    return Signal(label=label.value, color=ALIGNMENT_COLORS[label])


def _chalk_ceiling_players(lineup: Lineup, thresholds: ClassifierThresholds) -> list[Player]:
    chalk = []
    for player in lineup.players:
        if player.projection <= 0:
            continue
        high_ceiling = player.effective_ceiling / player.projection >= thresholds.upside_player_high_ratio
        if high_ceiling and (player.ownership or 0.0) >= thresholds.upside_chalk_ownership:
            chalk.append(player)
    return chalk


def get_upside_quality(
    lineup: Lineup,
    thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS,
) -> Signal:
    if not lineup.is_complete or lineup.total_projection <= 0:
        return UNCLASSIFIED
    ratio = lineup.total_ceiling / lineup.total_projection
    if ratio > thresholds.upside_clean_ratio:
        # A high ceiling the field also rosters gets split, so it is not clean.
        label = Upside.MIXED if _chalk_ceiling_players(lineup, thresholds) else Upside.CLEAN
    elif ratio > thresholds.upside_mixed_ratio:
        label = Upside.MIXED
    else:
        label = Upside.THIN
    return Signal(label=label.value, color=UPSIDE_COLORS[label])


def classify_lineup(
    lineup: Lineup,
    contest_state: ContestState,
    baseline: float,
    thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS,
) -> LineupSignals:
    return LineupSignals(
        viability=get_contest_viability(lineup, contest_state, thresholds),
        alignment=get_field_alignment(lineup, baseline, thresholds),
        upside=get_upside_quality(lineup, thresholds),
    )


__all__ = [
    "UNCLASSIFIED",
    "classify_lineup",
    "field_ownership_baseline",
    "get_contest_viability",
    "get_field_alignment",
    "get_upside_quality",
    "lineup_roi",
]
