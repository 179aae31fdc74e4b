import pytest

from slatesavvy.analysis import build_contest_state
from slatesavvy.ingest import parse_optimizer_lineups, parse_pipeline_json
from slatesavvy.models import ContestInput
from slatesavvy.pool import ContestExportError, copy_ids_text, export_lineups_to_csv, recompute

from .sample_data import LINEUP_IDS, optimizer_csv, pack_json, reference_players


STATE = build_contest_state(ContestInput(entry_fee=10, field_size=1000, prize_pool=8500))


def _optimizer_lineups():
    return recompute(parse_optimizer_lineups(optimizer_csv(), reference_players()), STATE, reference_players())


def test_export_writes_slot_order():
    text = export_lineups_to_csv(_optimizer_lineups())

    rows = text.splitlines()
    assert rows[0] == "PG,SG,SF,PF,C,G,F,UTIL"
    assert rows[1] == ",".join(LINEUP_IDS)
    assert rows[2] == "1009,1002,1003,1004,1005,1006,1007,1008"


def test_export_with_entry_names():
    lineups = _optimizer_lineups()

    text = export_lineups_to_csv(lineups, entry_names=["Entry A", "Entry B"])

    rows = text.splitlines()
    assert rows[0].startswith("EntryName,PG,")
    assert rows[1].startswith("Entry A,4471,")


def test_export_rejects_mismatched_entry_names():
    with pytest.raises(ContestExportError):
        export_lineups_to_csv(_optimizer_lineups(), entry_names=["only one"])


def test_export_rejects_incomplete_lineups():
    pack = parse_pipeline_json(pack_json())
    lineups = recompute(pack.lineups, STATE, pack.players)

    with pytest.raises(ContestExportError, match="reference-002"):
        export_lineups_to_csv(lineups)


def test_export_rejects_positionally_infeasible_lineups():
    pool = [
        player.model_copy(update={"position": "C"}) if player.player_id == "4471" else player
        for player in reference_players()
    ]
    lineups = recompute(parse_optimizer_lineups(optimizer_csv(), pool), STATE, pool)

    with pytest.raises(ContestExportError, match="cannot fill"):
        export_lineups_to_csv(lineups[:1])


def test_unknown_site_raises():
    with pytest.raises(KeyError):
        export_lineups_to_csv([], site="FD")


def test_copy_ids_text_uses_source_identifiers():
    lineup = _optimizer_lineups()[0]

    assert copy_ids_text(lineup) == ",".join(LINEUP_IDS)
