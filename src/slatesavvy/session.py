"""Explicit session state and the load/upload operations that change it.

A session never merges player pools. Every reference pack or belief upload
becomes a new immutable :class:`PoolSnapshot` in the session's
:class:`PoolArena`. Pack loads claim a version number before any slow work
and only commit if no newer load or lineup upload has happened since, so a
slow sidecar fetch cannot overwrite newer state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence, Tuple, Union

import httpx

from slatesavvy.analysis import (
    PlayerDelta,
    SlateStats,
    belief_deltas,
    build_contest_state,
    derive_games,
)
from slatesavvy.config import ClassifierThresholds, load_thresholds
from slatesavvy.errors import (
    MalformedPipelinePayload,
    ReferencePackRequired,
    SidecarFetchFailed,
    UnresolvedIdentifier,
)
from slatesavvy.ingest import (
    DEFAULT_PACK_NAME,
    CsvFormat,
    PipelinePack,
    fetch_sidecar_text,
    fetch_sidecar_text_async,
    find_reference_pack,
    find_reference_pack_async,
    parse_belief_upload,
    parse_lineup_upload,
    parse_optimizer_lineups,
    parse_pipeline_json,
)
from slatesavvy.models import DEFAULT_CONTEST, ContestInput, ContestState, Lineup, Player
from slatesavvy.persistence import PreferenceStore
from slatesavvy.pool import PlayerIndex, recompute, resolve_refs


logger = logging.getLogger(__name__)

PoolSource = Literal["reference", "belief"]
LineupSource = Literal["sidecar", "embedded"]

AUTOLOAD_WARNING = "Auto-load failed: reference pack could not be loaded."
MAPPING_WARNING_PREFIX = "Mapping:"
_UNRESOLVED_SAMPLE = 5


@dataclass(frozen=True)
class PoolSnapshot:
    version: int
    players: Tuple[Player, ...]
    source: PoolSource
    label: str


class PoolArena:
    """Append-only store of player pools keyed by increasing version."""

    def __init__(self) -> None:
        self._snapshots: Dict[int, PoolSnapshot] = {}
        self._latest = 0

    def add(self, players: Sequence[Player], *, source: PoolSource, label: str) -> PoolSnapshot:
        self._latest += 1
        snapshot = PoolSnapshot(version=self._latest, players=tuple(players), source=source, label=label)
        self._snapshots[snapshot.version] = snapshot
        return snapshot

    def get(self, version: int) -> PoolSnapshot:
        return self._snapshots[version]

    @property
    def latest_version(self) -> int:
        return self._latest

    def __len__(self) -> int:
        return len(self._snapshots)


@dataclass(frozen=True)
class PackLoadResult:
    snapshot: PoolSnapshot
    lineup_count: int
    lineup_source: LineupSource
    location: Optional[str]
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LineupUploadResult:
    format: CsvFormat
    lineup_count: int
    incomplete_count: int


class SessionContext:
    """Everything one user's analysis depends on, passed explicitly to each operation."""

    def __init__(
        self,
        store: Optional[PreferenceStore] = None,
        *,
        thresholds: Optional[ClassifierThresholds] = None,
    ):
        self.store = store
        self.thresholds = thresholds or load_thresholds()
        self.arena = PoolArena()
        self.reference: Optional[PoolSnapshot] = None
        self.belief: Optional[PoolSnapshot] = None
        self.lineups: Tuple[Lineup, ...] = ()
        self.reference_lineups: Tuple[Lineup, ...] = ()
        self.contest_input: ContestInput = DEFAULT_CONTEST
        self.pack_meta: Mapping[str, Any] = {}
        self.pack_diagnostics: Union[Mapping[str, Any], Sequence[Any]] = {}
        self.pack_location: Optional[str] = None
        self.games: List[str] = []
        self.missing_salary_count = 0
        self.pack_warnings: Tuple[str, ...] = ()
        self.notices: List[str] = []
        self._load_version = 0
        if store is not None:
            self._restore(store)

    def _restore(self, store: PreferenceStore) -> None:
        saved_contest = store.load_contest_input()
        if saved_contest is not None:
            self.contest_input = saved_contest
        profile = store.load_beliefs()
        if profile is not None and profile.players:
            self.belief = self.arena.add(profile.players, source="belief", label=profile.name)
            self.games = derive_games(profile.players)
            logger.info("Restored belief profile %s (%d players)", profile.name, len(profile.players))

    @property
    def active_snapshot(self) -> Optional[PoolSnapshot]:
        return self.belief or self.reference

    @property
    def active_pool(self) -> Tuple[Player, ...]:
        snapshot = self.active_snapshot
        return snapshot.players if snapshot is not None else ()

    @property
    def reference_pool(self) -> Tuple[Player, ...]:
        return self.reference.players if self.reference is not None else ()

    @property
    def belief_name(self) -> Optional[str]:
        return self.belief.label if self.belief is not None else None

    def begin_load(self) -> int:
        self._load_version += 1
        return self._load_version

    def is_current(self, token: int) -> bool:
        return token == self._load_version


def _sidecar_lineups(pack: PipelinePack, text: str, location: str) -> List[Lineup]:
    try:
        return parse_optimizer_lineups(text, pack.players, set_name="reference")
    except (ReferencePackRequired, ValueError) as exc:
        raise SidecarFetchFailed(location, f"unreadable lineup file: {exc}") from exc


def _choose_lineups(
    pack: PipelinePack, sidecar: Optional[List[Lineup]]
) -> Tuple[Tuple[Lineup, ...], LineupSource]:
    if sidecar:
        logger.info("Using %d sidecar lineups instead of %d embedded", len(sidecar), len(pack.lineups))
        return tuple(sidecar), "sidecar"
    return pack.lineups, "embedded"


def _commit_pack(
    session: SessionContext,
    token: int,
    pack: PipelinePack,
    sidecar: Optional[List[Lineup]],
    location: Optional[str],
) -> Optional[PackLoadResult]:
    if not session.is_current(token):
        logger.info("Discarding stale reference pack load from %s", location or "upload")
        return None

    lineups, source = _choose_lineups(pack, sidecar)
    snapshot = session.arena.add(pack.players, source="reference", label=location or "upload")
    session.reference = snapshot
    session.reference_lineups = lineups
    session.lineups = lineups
    session.pack_meta = pack.meta
    session.pack_diagnostics = pack.diagnostics
    session.pack_location = location
    session.missing_salary_count = pack.missing_salary_count
    session.games = derive_games(pack.players or session.active_pool)
    session.pack_warnings = pack.warnings
    session.notices = [notice for notice in session.notices if notice != AUTOLOAD_WARNING]
    if pack.contest is not None:
        set_contest_input(session, pack.contest)

    logger.info(
        "Loaded reference pack %s: %d players, %d %s lineups",
        location or "upload",
        len(pack.players),
        len(lineups),
        source,
    )
    return PackLoadResult(
        snapshot=snapshot,
        lineup_count=len(lineups),
        lineup_source=source,
        location=location,
        warnings=pack.warnings,
    )


def load_reference_pack(
    session: SessionContext,
    text: str,
    *,
    location: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> Optional[PackLoadResult]:
    """Replace the reference pool and lineups with a parsed pipeline pack.

    Raises :class:`MalformedPipelinePayload` without touching the session.
    Returns ``None`` when a newer load started while this one was running.
    """

    pack = parse_pipeline_json(text)
    token = session.begin_load()
    sidecar: Optional[List[Lineup]] = None
    if pack.sidecar_lineups:
        try:
            fetched = fetch_sidecar_text(pack.sidecar_lineups, location, client=client)
            sidecar = _sidecar_lineups(pack, fetched.text, fetched.location)
        except SidecarFetchFailed as exc:
            logger.warning("%s; using embedded lineups", exc)
    return _commit_pack(session, token, pack, sidecar, location)


async def load_reference_pack_async(
    session: SessionContext,
    text: str,
    *,
    location: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[PackLoadResult]:
    pack = parse_pipeline_json(text)
    token = session.begin_load()
    sidecar: Optional[List[Lineup]] = None
    if pack.sidecar_lineups:
        try:
            fetched = await fetch_sidecar_text_async(pack.sidecar_lineups, location, client=client)
            sidecar = _sidecar_lineups(pack, fetched.text, fetched.location)
        except SidecarFetchFailed as exc:
            logger.warning("%s; using embedded lineups", exc)
    return _commit_pack(session, token, pack, sidecar, location)


def _autoload_failed(session: SessionContext, reason: str) -> None:
    logger.warning("Reference pack failed to auto-load: %s", reason)
    if AUTOLOAD_WARNING not in session.notices:
        session.notices.append(AUTOLOAD_WARNING)


def autoload_reference_pack(
    session: SessionContext,
    base: str,
    date_strings: Optional[Sequence[str]] = None,
    default_name: str = DEFAULT_PACK_NAME,
    *,
    client: Optional[httpx.Client] = None,
) -> Optional[PackLoadResult]:
    """Load today's dated pack from ``base``, falling back to ``default_name``."""

    dates = list(date_strings) if date_strings is not None else [date.today().isoformat()]
    found = find_reference_pack(base, dates, default_name, client=client)
    if found is None:
        _autoload_failed(session, f"no pack under {base or '.'}")
        return None
    try:
        return load_reference_pack(session, found.text, location=found.location, client=client)
    except MalformedPipelinePayload as exc:
        _autoload_failed(session, str(exc))
        return None


async def autoload_reference_pack_async(
    session: SessionContext,
    base: str,
    date_strings: Optional[Sequence[str]] = None,
    default_name: str = DEFAULT_PACK_NAME,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[PackLoadResult]:
    dates = list(date_strings) if date_strings is not None else [date.today().isoformat()]
    found = await find_reference_pack_async(base, dates, default_name, client=client)
    if found is None:
        _autoload_failed(session, f"no pack under {base or '.'}")
        return None
    try:
        return await load_reference_pack_async(session, found.text, location=found.location, client=client)
    except MalformedPipelinePayload as exc:
        _autoload_failed(session, str(exc))
        return None


def upload_beliefs(session: SessionContext, text: str, *, name: str) -> PoolSnapshot:
    """Replace the active pool with a projections file; lineups are left as they are."""

    players = parse_belief_upload(text)
    if not players:
        raise ValueError("Projections file contains no players.")
    snapshot = session.arena.add(players, source="belief", label=name)
    session.belief = snapshot
    if not session.reference_pool:
        session.games = derive_games(players)
    if session.store is not None:
        session.store.save_beliefs(players, name)
    logger.info("Belief profile %s active (%d players, version %d)", name, len(players), snapshot.version)
    return snapshot


def clear_beliefs(session: SessionContext) -> None:
    session.belief = None
    session.games = derive_games(session.reference_pool)
    if session.store is not None:
        session.store.clear_beliefs()


def upload_lineups(
    session: SessionContext,
    text: str,
    *,
    set_name: str = "uploaded",
) -> LineupUploadResult:
    """Detect, parse and install a lineup file, replacing the current lineups."""

    fmt, lineups = parse_lineup_upload(text, session.reference_pool, set_name=set_name)
    session.begin_load()
    session.lineups = tuple(lineups)
    incomplete = sum(1 for lineup in computed_lineups(session) if not lineup.is_complete)
    logger.info("Installed %d %s lineups (%d incomplete)", len(lineups), fmt.value, incomplete)
    return LineupUploadResult(format=fmt, lineup_count=len(lineups), incomplete_count=incomplete)


def set_contest_input(session: SessionContext, contest: ContestInput) -> ContestState:
    session.contest_input = contest
    if session.store is not None:
        session.store.save_contest_input(contest)
    return contest_state(session)


def contest_state(session: SessionContext) -> ContestState:
    return build_contest_state(session.contest_input)


def computed_lineups(session: SessionContext) -> List[Lineup]:
    return recompute(session.lineups, contest_state(session), session.active_pool, thresholds=session.thresholds)


def unresolved_identifiers(session: SessionContext) -> List[UnresolvedIdentifier]:
    index = PlayerIndex(session.active_pool)
    unresolved: List[UnresolvedIdentifier] = []
    for lineup in session.lineups:
        resolution = resolve_refs(lineup.refs, index)
        unresolved.extend(
            UnresolvedIdentifier(lineup_id=lineup.lineup_id, raw=ref.raw or ref.label)
            for ref in resolution.unresolved
        )
    return unresolved


def mapping_warnings(session: SessionContext) -> List[str]:
    unresolved = unresolved_identifiers(session)
    if not unresolved:
        return []
    lineup_count = len({item.lineup_id for item in unresolved})
    sample = ", ".join(dict.fromkeys(item.raw for item in unresolved[:_UNRESOLVED_SAMPLE]))
    return [
        f"{MAPPING_WARNING_PREFIX} {len(unresolved)} player entries in {lineup_count} lineups "
        f"did not match the active player pool (e.g. {sample})."
    ]


def session_warnings(session: SessionContext) -> List[str]:
    return [*session.pack_warnings, *session.notices, *mapping_warnings(session)]


def slate_stats(session: SessionContext) -> SlateStats:
    return SlateStats(
        total_players=len(session.reference_pool or session.active_pool),
        total_lineups=len(session.lineups),
        missing_salary_count=session.missing_salary_count,
        warnings=tuple(session_warnings(session)),
    )


def player_deltas(session: SessionContext) -> List[PlayerDelta]:
    if session.belief is None or session.reference is None:
        return []
    return belief_deltas(session.belief.players, session.reference.players)


__all__ = [
    "AUTOLOAD_WARNING",
    "LineupUploadResult",
    "PackLoadResult",
    "PoolArena",
    "PoolSnapshot",
    "SessionContext",
    "autoload_reference_pack",
    "autoload_reference_pack_async",
    "clear_beliefs",
    "computed_lineups",
    "contest_state",
    "load_reference_pack",
    "load_reference_pack_async",
    "mapping_warnings",
    "player_deltas",
    "session_warnings",
    "set_contest_input",
    "slate_stats",
    "unresolved_identifiers",
    "upload_beliefs",
    "upload_lineups",
]
