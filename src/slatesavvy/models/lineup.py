"""Lineup records and the derived totals that travel with them."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from .player import Player, PlayerRef
from .signals import LineupSignals


ROSTER_SIZE = 8


class Lineup(BaseModel):
    """A roster from one source plus its simulated outcomes.

    ``players`` and the ``total_*`` fields are derived from ``refs`` and the
    active player pool; only :meth:`with_players` produces them. The ``sim_*``
    fields are opaque inputs from the optimizer and are never recomputed.
    """

    lineup_id: str
    raw_label: Optional[str] = None
    set_name: str = ""
    refs: Tuple[PlayerRef, ...] = ()
    players: Tuple[Player, ...] = ()
    missing_count: int = Field(default=0, ge=0)
    total_salary: int = 0
    total_projection: float = 0.0
    total_ownership: float = 0.0
    total_ceiling: float = 0.0
    sim_ev: Optional[float] = None
    sim_roi: Optional[float] = None
    cash_pct: Optional[float] = None
    top10_pct: Optional[float] = None
    signals: Optional[LineupSignals] = None

    model_config = ConfigDict(frozen=True)

    @property
    def player_ids(self) -> Tuple[str, ...]:
        return tuple(ref.label for ref in self.refs)

    @property
    def is_complete(self) -> bool:
        if self.missing_count or len(self.players) != ROSTER_SIZE:
            return False
        return len({player.player_id for player in self.players}) == ROSTER_SIZE

    def with_players(self, players: Sequence[Player], missing_count: int) -> "Lineup":
        resolved = tuple(players)
        return self.model_copy(
            update={
                "players": resolved,
                "missing_count": missing_count,
                "total_salary": sum(player.salary for player in resolved),
                "total_projection": round(sum(player.projection for player in resolved), 4),
                "total_ownership": round(sum(player.ownership or 0.0 for player in resolved), 4),
                "total_ceiling": round(sum(player.effective_ceiling for player in resolved), 4),
            }
        )
