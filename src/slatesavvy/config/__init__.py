"""Configuration helpers for roster rules and classifier thresholds."""

from .roster import DK_NBA, RosterRules, get_rules
from .thresholds import DEFAULT_THRESHOLDS, ClassifierThresholds, load_thresholds, sidecar_timeout

__all__ = [
    "ClassifierThresholds",
    "DEFAULT_THRESHOLDS",
    "DK_NBA",
    "RosterRules",
    "get_rules",
    "load_thresholds",
    "sidecar_timeout",
]
