"""Contest parameters and the payout summaries derived from them."""

from __future__ import annotations

from typing import Optional, Tuple

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict


class PayoutTier(BaseModel):
    min_rank: int = Field(..., ge=1)
    max_rank: int = Field(..., ge=1)
    payout: float = Field(..., ge=0.0)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_order(self) -> "PayoutTier":
        if self.max_rank < self.min_rank:
            raise ValueError(f"max_rank {self.max_rank} is below min_rank {self.min_rank}")
        return self


class ContestInput(BaseModel):
    """Contest form values as edited by the caller."""

    contest_name: str = "Custom Contest"
    entry_fee: float = Field(default=20.0, ge=0.0)
    max_entries: int = Field(default=1, ge=1)
    field_size: int = Field(default=0, ge=0)
    prize_pool: float = Field(default=0.0, ge=0.0)
    paid_pct: float = Field(default=0.2, ge=0.0, le=1.0)
    payout_tiers: Tuple[PayoutTier, ...] = ()

    model_config = ConfigDict(frozen=True)


class ContestDerived(BaseModel):
    total_contributions: float
    rake_pct: float
    paid_places: int
    paid_pct: float
    min_cash: Optional[float] = None
    min_cash_multiple: Optional[float] = None
    top_prize: Optional[float] = None
    top_prize_multiple: Optional[float] = None
    user_investment: float = 0.0
    has_overlay: bool = False

    model_config = ConfigDict(frozen=True)


class ContestState(BaseModel):
    input: ContestInput
    derived: ContestDerived

    model_config = ConfigDict(frozen=True)


DEFAULT_CONTEST = ContestInput(
    contest_name="NBA $20 Main Slate",
    entry_fee=20.0,
    max_entries=20,
    field_size=10_000,
    prize_pool=170_000.0,
    paid_pct=0.22,
)
