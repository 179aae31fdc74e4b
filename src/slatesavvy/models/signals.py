"""Classification labels attached to lineups."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel
from pydantic.config import ConfigDict


class Viability(str, Enum):
    STRONG = "Strong"
    MODERATE = "Moderate"
    UNLIKELY = "Unlikely"


class Alignment(str, Enum):
    OVER_ALIGNED = "Over-Aligned"
    BALANCED = "Balanced"
    CONTRARIAN = "Contrarian"


class Upside(str, Enum):
    CLEAN = "Clean"
    MIXED = "Mixed"
    THIN = "Thin"


UNCLASSIFIABLE = "Unclassifiable"


class Signal(BaseModel):
    label: str
    color: str
    icon: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class LineupSignals(BaseModel):
    viability: Signal
    alignment: Signal
    upside: Signal

    model_config = ConfigDict(frozen=True)
