"""Assign a resolved roster to the site's position slots."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from slatesavvy.config import DK_NBA, RosterRules
from slatesavvy.models import Player


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotAssignment:
    """Slot label to player; ``None`` marks a slot nobody could fill."""

    slots: Mapping[str, Optional[Player]]
    unassigned: Tuple[Player, ...] = ()

    @property
    def complete(self) -> bool:
        return all(player is not None for player in self.slots.values()) and not self.unassigned

    @property
    def open_slots(self) -> Tuple[str, ...]:
        return tuple(slot for slot, player in self.slots.items() if player is None)

    def ordered_ids(self) -> List[Optional[str]]:
        return [player.player_id if player is not None else None for player in self.slots.values()]


def _empty(rules: RosterRules) -> Dict[str, Optional[Player]]:
    return {slot: None for slot in rules.roster_order}


def assign_slots(players: Sequence[Player], rules: RosterRules = DK_NBA) -> SlotAssignment:
    """Place each player in exactly one slot.

    Players with the fewest eligible slots go first and each tries its
    narrowest slot first, backtracking on conflict, so a valid assignment is
    always found when one exists. An infeasible roster falls back to a maximum
    matching and leaves the remaining slots open. Never raises.
    """

    roster = list(players)
    if len(roster) != rules.roster_size:
        return SlotAssignment(slots=_empty(rules), unassigned=tuple(roster))

    options = [rules.eligible_slots(player.positions) for player in roster]
    order = sorted(range(len(roster)), key=lambda idx: (len(options[idx]), idx))
    taken: Dict[str, int] = {}

    def place(depth: int) -> bool:
        if depth == len(order):
            return True
        idx = order[depth]
        for slot in options[idx]:
            if slot in taken:
                continue
            taken[slot] = idx
            if place(depth + 1):
                return True
            del taken[slot]
        return False

    if place(0):
        slots = _empty(rules)
        for slot, idx in taken.items():
            slots[slot] = roster[idx]
        return SlotAssignment(slots=slots)

    logger.debug("Roster %s is positionally infeasible", [player.player_id for player in roster])
    return _max_matching(roster, options, rules)


def _max_matching(
    roster: Sequence[Player],
    options: Sequence[Tuple[str, ...]],
    rules: RosterRules,
) -> SlotAssignment:
    owner: Dict[str, int] = {}

    def augment(idx: int, seen: set) -> bool:
        for slot in options[idx]:
            if slot in seen:
                continue
            seen.add(slot)
            if slot not in owner or augment(owner[slot], seen):
                owner[slot] = idx
                return True
        return False

    for idx in sorted(range(len(roster)), key=lambda i: (len(options[i]), i)):
        augment(idx, set())

    slots = _empty(rules)
    for slot, idx in owner.items():
        slots[slot] = roster[idx]
    placed = set(owner.values())
    leftover = tuple(player for idx, player in enumerate(roster) if idx not in placed)
    return SlotAssignment(slots=slots, unassigned=leftover)


__all__ = ["SlotAssignment", "assign_slots"]
