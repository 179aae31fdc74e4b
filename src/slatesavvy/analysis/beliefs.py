"""Compare a belief profile with the reference pack, player by player."""

from __future__ import annotations

from typing import List, Literal, Optional, Sequence

from pydantic import BaseModel
from pydantic.config import ConfigDict

from slatesavvy.models import Player
from slatesavvy.pool.reconcile import PlayerIndex, match_player


_DELTA_EPSILON = 0.01


class MetricDelta(BaseModel):
    belief: float
    reference: Optional[float] = None
    delta: Optional[float] = None
    direction: Optional[Literal["up", "down"]] = None

    model_config = ConfigDict(frozen=True)


class PlayerDelta(BaseModel):
    player_id: str
    name: str
    team: str
    reference_id: Optional[str] = None
    projection: MetricDelta
    ownership: MetricDelta
    value: MetricDelta

    model_config = ConfigDict(frozen=True)


def _metric(belief: Optional[float], reference: Optional[float]) -> MetricDelta:
    belief_value = belief or 0.0
    if reference is None:
        return MetricDelta(belief=belief_value)
    delta = round(belief_value - reference, 4)
    direction: Optional[Literal["up", "down"]] = None
    if delta > _DELTA_EPSILON:
        direction = "up"
    elif delta < -_DELTA_EPSILON:
        direction = "down"
    return MetricDelta(belief=belief_value, reference=reference, delta=delta, direction=direction)


def belief_deltas(beliefs: Sequence[Player], reference: Sequence[Player]) -> List[PlayerDelta]:
    """Projection, ownership and value differences for every belief player.

    Players with no reference counterpart are listed with empty deltas.
    """

    index = PlayerIndex(reference)
    rows: List[PlayerDelta] = []
    for player in beliefs:
        ref = match_player(player, index)
        rows.append(
            PlayerDelta(
                player_id=player.player_id,
                name=player.name,
                team=player.team,
                reference_id=ref.player_id if ref is not None else None,
                projection=_metric(player.projection, ref.projection if ref else None),
                ownership=_metric(player.ownership, ref.ownership if ref else None),
                value=_metric(player.value, ref.value if ref else None),
            )
        )
    return rows


__all__ = ["MetricDelta", "PlayerDelta", "belief_deltas"]
