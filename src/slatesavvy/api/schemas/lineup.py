from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from slatesavvy.models import LineupSignals


class LineupPlayerResponse(BaseModel):
    player_id: str
    name: str
    team: str
    positions: List[str]
    salary: int
    projection: float
    ownership: float | None
    ceiling: float | None
    slot: str | None = None


class LineupResponse(BaseModel):
    lineup_id: str
    raw_label: str | None
    set_name: str
    status: str
    complete: bool
    player_ids: List[str]
    players: List[LineupPlayerResponse]
    slots: Dict[str, Optional[str]]
    missing_count: int
    salary: int
    projection: float
    ownership: float
    ceiling: float
    sim_ev: float | None
    sim_roi: float | None
    cash_pct: float | None
    top10_pct: float | None
    signals: LineupSignals | None


class LineupFilterSummary(BaseModel):
    available_lineups: int
    selected_lineups: int
    complete_lineups: int
    projection_mean: float | None
    projection_median: float | None
    projection_std: float | None
    ownership_mean: float | None
    sim_roi_mean: float | None


class LineupListResponse(BaseModel):
    sets: List[str]
    summary: LineupFilterSummary
    lineups: List[LineupResponse]


class LineupUploadResponse(BaseModel):
    format: Literal["optimizer_export", "user_lineups"]
    lineup_count: int
    incomplete_count: int
    warnings: List[str] = Field(default_factory=list)
