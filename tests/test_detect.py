import pytest

from slatesavvy.errors import AmbiguousFormat, ReferencePackRequired
from slatesavvy.ingest import CsvFormat, detect_csv_format, parse_belief_upload, parse_lineup_upload

from .sample_data import optimizer_csv, projections_csv, reference_players


USER_WIDE = "PG,SG,SF,PF,C,G,F,UTIL\n4471,1002,1003,1004,1005,1006,1007,1008\n"
USER_LONG = "Lineup,Player,Team\n1,Jane Doe,BOS\n"


@pytest.mark.parametrize(
    "text, expected",
    [
        (optimizer_csv(), CsvFormat.OPTIMIZER_EXPORT),
        (USER_WIDE, CsvFormat.USER_LINEUPS),
        (USER_LONG, CsvFormat.USER_LINEUPS),
        (projections_csv(), CsvFormat.PROJECTIONS),
        ("\ufeff" + projections_csv(), CsvFormat.PROJECTIONS),
    ],
)
def test_detect_each_format(text, expected):
    assert detect_csv_format(text).format is expected


def test_numbered_player_columns_are_roster_columns():
    text = "P1,P2,P3,P4,P5,P6,P7,P8,ROI\n" + ",".join(["1"] * 9) + "\n"

    assert detect_csv_format(text).format is CsvFormat.OPTIMIZER_EXPORT


@pytest.mark.parametrize("text", ["", "\n\n", "Foo,Bar\n1,2\n"])
def test_unrecognized_files_raise(text):
    with pytest.raises(AmbiguousFormat):
        detect_csv_format(text)


def test_file_matching_two_formats_is_ambiguous():
    # A long lineup file that also carries salary and projection columns.
    text = "Lineup,Name,Team,Salary,Proj\n1,Jane Doe,BOS,9000,45\n"

    with pytest.raises(AmbiguousFormat) as excinfo:
        detect_csv_format(text)

    assert set(excinfo.value.candidates) == {"user_lineups", "projections"}


def test_lineup_upload_rejects_projections():
    with pytest.raises(AmbiguousFormat):
        parse_lineup_upload(projections_csv(), reference_players())


def test_lineup_upload_routes_optimizer_exports():
    fmt, lineups = parse_lineup_upload(optimizer_csv(), reference_players(), set_name="sims")

    assert fmt is CsvFormat.OPTIMIZER_EXPORT
    assert all(lineup.is_complete for lineup in lineups)
    assert lineups[0].set_name == "sims"


def test_optimizer_upload_without_pool_requires_reference_pack():
    with pytest.raises(ReferencePackRequired):
        parse_lineup_upload(optimizer_csv(), [])


def test_user_upload_does_not_need_pool():
    fmt, lineups = parse_lineup_upload(USER_WIDE, [])

    assert fmt is CsvFormat.USER_LINEUPS
    assert len(lineups) == 1


def test_belief_upload_rejects_lineup_files():
    with pytest.raises(AmbiguousFormat):
        parse_belief_upload(optimizer_csv())


def test_belief_upload_parses_projections():
    players = parse_belief_upload(projections_csv())

    assert len(players) == 10
