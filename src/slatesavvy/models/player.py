"""Canonical player models shared across ingestion and analysis layers."""

from __future__ import annotations

import re
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict


_POSITION_SPLIT = re.compile(r"[/,]+")
_GENERIC_POSITIONS: Dict[str, Tuple[str, ...]] = {
    "G": ("PG", "SG"),
    "F": ("SF", "PF"),
}


class Player(BaseModel):
    """Normalized player row from a reference pack or a belief profile."""

    player_id: str = Field(..., min_length=1)
    name: str
    team: str
    opponent: str = ""
    position: str = ""
    salary: int = Field(..., ge=0)
    projection: float
    ownership: Optional[float] = Field(default=None, ge=0.0, le=100.0)
    ceiling: Optional[float] = None
    value: Optional[float] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _fill_value(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("value") is not None:
            return data
        salary = data.get("salary")
        projection = data.get("projection")
        if isinstance(salary, (int, float)) and salary > 0 and isinstance(projection, (int, float)):
            data = dict(data)
            data["value"] = round(float(projection) / (salary / 1000.0), 3)
        return data

    @property
    def positions(self) -> Tuple[str, ...]:
        tokens: list[str] = []
        for raw in _POSITION_SPLIT.split(self.position.upper()):
            token = raw.strip()
            if not token:
                continue
            for expanded in _GENERIC_POSITIONS.get(token, (token,)):
                if expanded not in tokens:
                    tokens.append(expanded)
        return tuple(tokens)

    @property
    def effective_ceiling(self) -> float:
        return self.ceiling if self.ceiling is not None else self.projection


class PlayerRef(BaseModel):
    """One roster entry as written in a source file, before reconciliation."""

    player_id: Optional[str] = None
    name: Optional[str] = None
    team: Optional[str] = None
    raw: str = ""

    model_config = ConfigDict(frozen=True)

    @property
    def label(self) -> str:
        return self.player_id or self.name or self.raw

    def enriched_with(self, player: Player) -> "PlayerRef":
        """Attach the matched player's name and team for later re-resolution."""

        return self.model_copy(
            update={
                "name": self.name or player.name,
                "team": self.team or player.team,
            }
        )
