from __future__ import annotations

from typing import Any, List, Literal

from pydantic import BaseModel, Field

from slatesavvy.analysis import PlayerDelta, PortfolioReport
from slatesavvy.models import ContestState, Player


class PackLoadResponse(BaseModel):
    version: int
    location: str | None
    players: int
    lineups: int
    lineup_source: Literal["sidecar", "embedded"]
    contest_name: str
    meta: dict[str, Any] = Field(default_factory=dict)
    warnings: List[str] = Field(default_factory=list)


class BeliefUploadResponse(BaseModel):
    version: int
    name: str
    players: int


class PlayerPoolResponse(BaseModel):
    source: Literal["reference", "belief", "none"]
    version: int | None
    belief_name: str | None
    games: List[str]
    players: List[Player]
    deltas: List[PlayerDelta] = Field(default_factory=list)


class SlateStatsResponse(BaseModel):
    total_players: int
    total_lineups: int
    missing_salary_count: int
    warnings: List[str]


class ReportResponse(BaseModel):
    report: PortfolioReport
    stats: SlateStatsResponse
    contest: ContestState
