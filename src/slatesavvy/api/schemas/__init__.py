"""Pydantic models for API I/O."""

from .lineup import LineupFilterSummary, LineupListResponse, LineupPlayerResponse, LineupResponse, LineupUploadResponse
from .session import (
    BeliefUploadResponse,
    PackLoadResponse,
    PlayerPoolResponse,
    ReportResponse,
    SlateStatsResponse,
)

__all__ = [
    "BeliefUploadResponse",
    "LineupFilterSummary",
    "LineupListResponse",
    "LineupPlayerResponse",
    "LineupResponse",
    "LineupUploadResponse",
    "PackLoadResponse",
    "PlayerPoolResponse",
    "ReportResponse",
    "SlateStatsResponse",
]
