"""Canonical record shapes shared by every layer."""

from .contest import DEFAULT_CONTEST, ContestDerived, ContestInput, ContestState, PayoutTier
from .lineup import ROSTER_SIZE, Lineup
from .player import Player, PlayerRef
from .signals import UNCLASSIFIABLE, Alignment, LineupSignals, Signal, Upside, Viability

__all__ = [
    "Alignment",
    "ContestDerived",
    "ContestInput",
    "ContestState",
    "DEFAULT_CONTEST",
    "Lineup",
    "LineupSignals",
    "PayoutTier",
    "Player",
    "PlayerRef",
    "ROSTER_SIZE",
    "Signal",
    "UNCLASSIFIABLE",
    "Upside",
    "Viability",
]
