"""Resolve raw roster entries against a player pool.

Resolution is strict priority, first match wins: exact identifier, then
case-insensitive name together with the exact team. Those two rules are
the whole matching contract for sources that carry ids or teams.

Hand-written lineup files often list bare names ("Jane Doe") with no team
column, which neither rule can match. For those refs a third, last-resort
step applies: the name resolves only when exactly one player in the pool
carries it. Duplicate names stay unresolved rather than guessing.
Identifiers or name/team keys shared by different players are ambiguous
and never resolve.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from slatesavvy.models import Player, PlayerRef


logger = logging.getLogger(__name__)

_FLOAT_ID = re.compile(r"^(\d+)\.0+$")


def normalize_id(value: str) -> str:
    text = value.strip()
    match = _FLOAT_ID.match(text)
    return match.group(1) if match else text


def name_key(value: str) -> str:
    return " ".join(value.casefold().split())


def team_key(value: str) -> str:
    return value.strip().upper()


def _identity(player: Player) -> Tuple[str, str]:
    return name_key(player.name), team_key(player.team)


class PlayerIndex:
    """Lookup tables over one immutable pool."""

    def __init__(self, pool: Iterable[Player]):
        self._by_id: Dict[str, Player] = {}
        self._by_name_team: Dict[Tuple[str, str], Player] = {}
        self._by_name: Dict[str, List[Player]] = {}
        ambiguous_ids: Set[str] = set()
        ambiguous_keys: Set[Tuple[str, str]] = set()
        size = 0

        for player in pool:
            size += 1
            pid = normalize_id(player.player_id)
            existing = self._by_id.get(pid)
            if existing is None:
                self._by_id[pid] = player
            elif _identity(existing) != _identity(player):
                ambiguous_ids.add(pid)

            key = _identity(player)
            current = self._by_name_team.get(key)
            if current is None:
                self._by_name_team[key] = player
            elif normalize_id(current.player_id) != pid:
                ambiguous_keys.add(key)

            bucket = self._by_name.setdefault(key[0], [])
            if all(normalize_id(other.player_id) != pid for other in bucket):
                bucket.append(player)

        for pid in ambiguous_ids:
            logger.warning("Player id %s maps to several players; it will not resolve", pid)
            del self._by_id[pid]
        for key in ambiguous_keys:
            logger.warning("Player %s (%s) appears with several ids; name lookup disabled", *key)
            del self._by_name_team[key]
        self._size = size

    def __len__(self) -> int:
        return self._size

    def by_id(self, player_id: str) -> Optional[Player]:
        return self._by_id.get(normalize_id(player_id))

    def by_name_team(self, name: str, team: str) -> Optional[Player]:
        return self._by_name_team.get((name_key(name), team_key(team)))

    def resolve(self, ref: PlayerRef) -> Optional[Player]:
        if ref.player_id:
            match = self.by_id(ref.player_id)
            if match is not None:
                return match
        if not ref.name:
            return None
        if ref.team:
            return self.by_name_team(ref.name, ref.team)
        candidates = self._by_name.get(name_key(ref.name), [])
        if len(candidates) == 1:
            return candidates[0]
        return None


@dataclass(frozen=True)
class Resolution:
    players: Tuple[Player, ...]
    missing_count: int
    unresolved: Tuple[PlayerRef, ...]


def resolve_refs(refs: Sequence[PlayerRef], index: PlayerIndex) -> Resolution:
    """Resolve refs in order; unresolved refs and repeated players count as missing."""

    players: List[Player] = []
    unresolved: List[PlayerRef] = []
    seen: Set[str] = set()
    for ref in refs:
        player = index.resolve(ref)
        if player is None:
            logger.debug("Unresolved roster entry %r", ref.raw or ref.label)
            unresolved.append(ref)
            continue
        if player.player_id in seen:
            logger.debug("Roster entry %r repeats player %s", ref.raw or ref.label, player.player_id)
            unresolved.append(ref)
            continue
        seen.add(player.player_id)
        players.append(player)
    return Resolution(players=tuple(players), missing_count=len(unresolved), unresolved=tuple(unresolved))


def match_player(player: Player, index: PlayerIndex) -> Optional[Player]:
    """Find ``player``'s counterpart in another pool using the same priority rules."""

    return index.resolve(PlayerRef(player_id=player.player_id, name=player.name, team=player.team))


__all__ = [
    "PlayerIndex",
    "Resolution",
    "match_player",
    "name_key",
    "normalize_id",
    "resolve_refs",
    "team_key",
]
