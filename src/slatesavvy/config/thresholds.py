"""Classifier cutoffs and runtime knobs, overridable from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass


logger = logging.getLogger(__name__)

_ENV_PREFIX = "SLATESAVVY_"
_SIDECAR_TIMEOUT_ENV = "SLATESAVVY_SIDECAR_TIMEOUT"
_SIDECAR_TIMEOUT_DEFAULT = 5.0


def _env_float(name: str, default: float, *, clamp_min: float | None = None, clamp_max: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    if clamp_max is not None:
        value = min(clamp_max, value)
    return value


@dataclass(frozen=True)
class ClassifierThresholds:
    """Cutoffs for the three lineup signals.

    ROI values are percent units; ownership ratios compare a lineup's total
    ownership with the field baseline; upside ratios are ceiling over
    projection.
    """

    viability_strong_rake_multiple: float = 1.0
    viability_strong_floor: float = 10.0
    viability_moderate_floor: float = -2.0
    alignment_over_ratio: float = 1.2
    alignment_contrarian_ratio: float = 0.8
    alignment_default_baseline: float = 100.0
    upside_clean_ratio: float = 1.30
    upside_mixed_ratio: float = 1.15
    upside_player_high_ratio: float = 1.35
    upside_chalk_ownership: float = 25.0


DEFAULT_THRESHOLDS = ClassifierThresholds()


def load_thresholds() -> ClassifierThresholds:
    """Build thresholds from defaults plus ``SLATESAVVY_<FIELD>`` overrides."""

    values = {}
    for name, default in vars(DEFAULT_THRESHOLDS).items():
        values[name] = _env_float(f"{_ENV_PREFIX}{name.upper()}", default)
    return ClassifierThresholds(**values)


def sidecar_timeout() -> float:
    return _env_float(_SIDECAR_TIMEOUT_ENV, _SIDECAR_TIMEOUT_DEFAULT, clamp_min=0.1, clamp_max=60.0)
