import json

import anyio
import httpx
import pytest

from slatesavvy.errors import AmbiguousFormat, MalformedPipelinePayload, ReferencePackRequired
from slatesavvy.ingest import CsvFormat
from slatesavvy.models import ContestInput
from slatesavvy.persistence import SqlitePreferenceStore
from slatesavvy.session import (
    AUTOLOAD_WARNING,
    PoolArena,
    SessionContext,
    autoload_reference_pack,
    autoload_reference_pack_async,
    clear_beliefs,
    computed_lineups,
    contest_state,
    load_reference_pack,
    load_reference_pack_async,
    mapping_warnings,
    player_deltas,
    session_warnings,
    set_contest_input,
    slate_stats,
    unresolved_identifiers,
    upload_beliefs,
    upload_lineups,
)

from .sample_data import optimizer_csv, pack_dict, pack_json, projections_csv, reference_players


def _loaded_session() -> SessionContext:
    session = SessionContext()
    load_reference_pack(session, pack_json())
    return session


def test_load_pack_installs_pool_lineups_and_contest():
    session = SessionContext()

    result = load_reference_pack(session, pack_json())

    assert result is not None
    assert result.lineup_source == "embedded"
    assert result.lineup_count == 2
    assert len(session.reference_pool) == 10
    assert session.active_snapshot is session.reference
    assert session.games == ["BOS @ NYK", "LAL @ MIA"]
    assert session.contest_input.entry_fee == pytest.approx(10.0)
    assert contest_state(session).derived.rake_pct == pytest.approx(0.15)


def test_malformed_pack_leaves_session_untouched():
    session = _loaded_session()
    before = session.reference

    with pytest.raises(MalformedPipelinePayload):
        load_reference_pack(session, "{}")

    assert session.reference is before
    assert len(session.lineups) == 2


def test_sidecar_lineups_replace_embedded_ones(tmp_path):
    (tmp_path / "optimized.csv").write_text(optimizer_csv(), encoding="utf-8")
    pack_path = tmp_path / "pipeline_2025-12-20.json"

    session = SessionContext()
    result = load_reference_pack(
        session,
        pack_json(files={"optimized_lineups": "optimized.csv"}),
        location=str(pack_path),
    )

    assert result.lineup_source == "sidecar"
    assert [lineup.sim_roi for lineup in session.lineups] == [pytest.approx(42.5), pytest.approx(-5.0)]
    assert session.lineups[0].set_name == "reference"


def test_missing_sidecar_falls_back_to_embedded(tmp_path):
    session = SessionContext()

    result = load_reference_pack(
        session,
        pack_json(files={"optimized_lineups": "missing.csv"}),
        location=str(tmp_path / "pipeline.json"),
    )

    assert result.lineup_source == "embedded"
    assert result.lineup_count == 2


def test_sidecar_url_is_fetched_with_the_client():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url == httpx.URL("https://packs.test/slates/optimized.csv")
        return httpx.Response(200, text=optimizer_csv())

    session = SessionContext()
    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        result = load_reference_pack(
            session,
            pack_json(files={"optimized_lineups": "optimized.csv"}),
            location="https://packs.test/slates/pipeline_2025-12-20.json",
            client=client,
        )

    assert result.lineup_source == "sidecar"


def test_sidecar_http_error_falls_back_to_embedded():
    session = SessionContext()
    transport = httpx.MockTransport(lambda request: httpx.Response(404))
    with httpx.Client(transport=transport) as client:
        result = load_reference_pack(
            session,
            pack_json(files={"optimized_lineups": "https://packs.test/optimized.csv"}),
            client=client,
        )

    assert result.lineup_source == "embedded"


@pytest.mark.anyio
async def test_stale_async_load_is_discarded():
    requested = anyio.Event()
    release = anyio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        requested.set()
        await release.wait()
        return httpx.Response(200, text=optimizer_csv())

    session = SessionContext()
    outcome = {}

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:

        async def slow_load():
            outcome["slow"] = await load_reference_pack_async(
                session,
                pack_json(files={"optimized_lineups": "https://packs.test/optimized.csv"}, meta={"slate": "early"}),
                client=client,
            )

        async with anyio.create_task_group() as tg:
            tg.start_soon(slow_load)
            await requested.wait()
            outcome["fast"] = await load_reference_pack_async(session, pack_json(meta={"slate": "late"}))
            release.set()

    assert outcome["slow"] is None
    assert outcome["fast"] is not None
    assert session.pack_meta == {"slate": "late"}
    assert session.reference is outcome["fast"].snapshot


@pytest.mark.anyio
async def test_lineup_upload_during_slow_load_wins():
    requested = anyio.Event()
    release = anyio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        requested.set()
        await release.wait()
        return httpx.Response(200, text=optimizer_csv())

    session = SessionContext()
    outcome = {}
    user_csv = "PG,SG,SF,PF,C,G,F,UTIL\n4471,1002,1003,1004,1005,1006,1007,1008\n"

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:

        async def slow_load():
            outcome["slow"] = await load_reference_pack_async(
                session,
                pack_json(files={"optimized_lineups": "https://packs.test/optimized.csv"}),
                client=client,
            )

        async with anyio.create_task_group() as tg:
            tg.start_soon(slow_load)
            await requested.wait()
            upload_lineups(session, user_csv, set_name="mine")
            release.set()

    assert outcome["slow"] is None
    assert [lineup.set_name for lineup in session.lineups] == ["mine"]
    assert session.reference is None


def test_belief_upload_switches_active_pool():
    session = _loaded_session()

    snapshot = upload_beliefs(session, projections_csv(), name="My Reads")

    assert session.active_snapshot is snapshot
    assert session.belief_name == "My Reads"
    assert snapshot.version > session.reference.version
    lineup = computed_lineups(session)[0]
    assert lineup.is_complete
    assert lineup.total_projection == pytest.approx(251.0)


def test_failed_belief_upload_keeps_state():
    session = _loaded_session()
    lineups = session.lineups

    with pytest.raises(AmbiguousFormat):
        upload_beliefs(session, optimizer_csv(), name="oops")

    assert session.belief is None
    assert session.lineups is lineups


def test_clear_beliefs_returns_to_reference():
    session = _loaded_session()
    upload_beliefs(session, projections_csv(), name="My Reads")

    clear_beliefs(session)

    assert session.active_snapshot is session.reference
    assert computed_lineups(session)[0].total_projection == pytest.approx(235.0)


def test_player_deltas_compare_beliefs_with_reference():
    session = _loaded_session()
    upload_beliefs(session, projections_csv(), name="My Reads")

    deltas = {row.player_id: row for row in player_deltas(session)}

    jane = deltas["Jane Doe::BOS"]
    assert jane.reference_id == "4471"
    assert jane.projection.delta == pytest.approx(2.0)
    assert jane.projection.direction == "up"
    assert jane.ownership.direction is None


def test_optimizer_upload_requires_reference_pack():
    session = SessionContext()

    with pytest.raises(ReferencePackRequired):
        upload_lineups(session, optimizer_csv())

    assert session.lineups == ()


def test_optimizer_upload_replaces_lineups_and_warnings():
    session = _loaded_session()
    assert mapping_warnings(session) == [
        "Mapping: 1 player entries in 1 lineups did not match the active player pool (e.g. 9999)."
    ]

    result = upload_lineups(session, optimizer_csv(), set_name="sims")

    assert result.format is CsvFormat.OPTIMIZER_EXPORT
    assert result.lineup_count == 2
    assert result.incomplete_count == 0
    assert mapping_warnings(session) == []


def test_unresolved_identifiers_name_the_lineup():
    session = _loaded_session()

    unresolved = unresolved_identifiers(session)

    assert [(item.lineup_id, item.raw) for item in unresolved] == [("reference-002", "9999")]


def test_slate_stats_and_warnings():
    session = SessionContext()
    load_reference_pack(session, pack_json(contest={"fee": -1}))

    stats = slate_stats(session)

    assert stats.total_players == 10
    assert stats.total_lineups == 2
    assert "Embedded contest configuration was invalid and has been ignored." in stats.warnings
    assert session_warnings(session)[-1].startswith("Mapping:")


def test_clean_pack_replaces_previous_pack_warnings():
    session = SessionContext()
    bad = pack_dict(contest={"fee": -1})
    bad["players"][0]["salary"] = None
    load_reference_pack(session, json.dumps(bad))
    assert "1 reference players have no salary." in session_warnings(session)

    load_reference_pack(session, pack_json())

    stats = slate_stats(session)
    assert stats.missing_salary_count == 0
    assert not any("salary" in warning for warning in stats.warnings)
    assert not any("Embedded contest" in warning for warning in stats.warnings)
    assert len(stats.warnings) == 1
    assert stats.warnings[0].startswith("Mapping:")


def test_autoload_prefers_dated_pack(tmp_path):
    (tmp_path / "pipeline_2025-12-21.json").write_text(pack_json(meta={"slate": "dated"}), encoding="utf-8")
    (tmp_path / "pipeline_2025-12-20.json").write_text(pack_json(meta={"slate": "default"}), encoding="utf-8")
    session = SessionContext()

    result = autoload_reference_pack(session, str(tmp_path), ["2025-12-21"])

    assert result is not None
    assert result.location.endswith("pipeline_2025-12-21.json")
    assert session.pack_meta == {"slate": "dated"}


def test_autoload_falls_back_to_default_pack(tmp_path):
    (tmp_path / "pipeline_2025-12-20.json").write_text(pack_json(meta={"slate": "default"}), encoding="utf-8")
    session = SessionContext()

    result = autoload_reference_pack(session, str(tmp_path), ["2026-01-02"])

    assert result is not None
    assert session.pack_meta == {"slate": "default"}


def test_autoload_failure_warns_until_a_pack_loads(tmp_path):
    session = SessionContext()

    assert autoload_reference_pack(session, str(tmp_path), ["2026-01-02"]) is None
    assert session.notices == [AUTOLOAD_WARNING]

    load_reference_pack(session, pack_json())
    assert AUTOLOAD_WARNING not in session.notices


def test_autoload_malformed_pack_warns(tmp_path):
    (tmp_path / "pipeline_2025-12-20.json").write_text("[]", encoding="utf-8")
    session = SessionContext()

    assert autoload_reference_pack(session, str(tmp_path), []) is None
    assert AUTOLOAD_WARNING in session.notices
    assert session.reference is None


@pytest.mark.anyio
async def test_autoload_over_http():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/packs/pipeline_2025-12-21.json":
            return httpx.Response(200, text=pack_json())
        return httpx.Response(404)

    session = SessionContext()
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        result = await autoload_reference_pack_async(
            session, "https://data.test/packs", ["2025-12-21"], client=client
        )

    assert result is not None
    assert result.location == "https://data.test/packs/pipeline_2025-12-21.json"


@pytest.mark.anyio
async def test_async_autoload_reads_local_pack_and_sidecar(tmp_path):
    (tmp_path / "optimized.csv").write_text(optimizer_csv(), encoding="utf-8")
    (tmp_path / "pipeline_2025-12-20.json").write_text(
        pack_json(files={"optimized_lineups": "optimized.csv"}), encoding="utf-8"
    )

    session = SessionContext()
    result = await autoload_reference_pack_async(session, str(tmp_path), ["2025-12-22"])

    assert result is not None
    assert result.location == str(tmp_path / "pipeline_2025-12-20.json")
    assert result.lineup_source == "sidecar"
    assert AUTOLOAD_WARNING not in session.notices


@pytest.mark.anyio
async def test_async_autoload_warns_when_directory_is_empty(tmp_path):
    session = SessionContext()

    result = await autoload_reference_pack_async(session, str(tmp_path), ["2025-12-22"])

    assert result is None
    assert session.notices == [AUTOLOAD_WARNING]


def test_store_restores_contest_and_beliefs(tmp_path):
    store = SqlitePreferenceStore(tmp_path / "prefs.sqlite")
    session = SessionContext(store)
    set_contest_input(session, ContestInput(contest_name="Saved", entry_fee=3, field_size=100, prize_pool=250))
    upload_beliefs(session, projections_csv(), name="My Reads")

    restored = SessionContext(store)

    assert restored.contest_input.contest_name == "Saved"
    assert restored.belief_name == "My Reads"
    assert len(restored.active_pool) == 10
    assert restored.reference is None


def test_pool_arena_versions_increase():
    arena = PoolArena()

    first = arena.add(reference_players(), source="reference", label="pack")
    second = arena.add(reference_players()[:3], source="belief", label="mine")

    assert (first.version, second.version) == (1, 2)
    assert arena.latest_version == 2
    assert arena.get(1) is first
    assert len(arena) == 2


def test_clearing_restored_beliefs_drops_their_games(tmp_path):
    store = SqlitePreferenceStore(tmp_path / "prefs.sqlite")
    upload_beliefs(SessionContext(store), projections_csv(), name="My Reads")
    restored = SessionContext(store)
    assert restored.games

    clear_beliefs(restored)

    assert restored.games == []
    assert restored.active_pool == ()
