import pytest

from slatesavvy.ingest import parse_projections
from slatesavvy.ingest.projections import load_projection_rows, merge_aliases

from .sample_data import projections_csv


def test_parse_projections_builds_name_team_ids():
    players = parse_projections(projections_csv())

    assert len(players) == 10
    jane = players[0]
    assert jane.player_id == "Jane Doe::BOS"
    assert jane.salary == 9000
    assert jane.projection == pytest.approx(47.0)
    assert jane.ownership == pytest.approx(30.0)
    assert jane.ceiling == pytest.approx(60.0)
    assert jane.opponent == "NYK"
    assert players[9].player_id == "Jane Doe::MIA"


def test_parse_projections_scales_fraction_ownership():
    text = "Player,Team,Salary,FPTS,Ownership\nAl One,Boston,5000,25,0.25\nBo Two,Knicks,4000,20,0.05\n"

    players = parse_projections(text)

    assert [p.ownership for p in players] == [pytest.approx(25.0), pytest.approx(5.0)]
    assert [p.team for p in players] == ["BOS", "NYK"]
    assert players[0].value == pytest.approx(5.0)


def test_parse_projections_prefers_id_column():
    text = "ID,Name,Team,Salary,Proj\n4471,Jane Doe,BOS,9000,45\n"

    players = parse_projections(text)

    assert players[0].player_id == "4471"
    assert players[0].metadata == {"source_id": "4471"}


def test_parse_projections_joins_first_and_last_name():
    text = "First Name,Last Name,Team,Salary,Proj\nJane,Doe,BOS,9000,45\n"

    players = parse_projections(text)

    assert players[0].name == "Jane Doe"


def test_rows_without_name_are_skipped():
    text = "Name,Team,Salary,Proj\n,BOS,9000,45\nSam Shooter,BOS,7000,33\n"

    players = parse_projections(text)

    assert [p.name for p in players] == ["Sam Shooter"]


def test_mapping_overrides_take_priority():
    aliases = merge_aliases({"projection": "My Median"})
    assert aliases["projection"][0] == "mymedian"

    text = "Name,Team,Salary,Proj,My Median\nJane Doe,BOS,9000,45,50\n"
    rows = load_projection_rows(text, mapping={"projection": "My Median"})

    assert rows[0].raw_projection == "50"
