from slatesavvy.models import Player, PlayerRef
from slatesavvy.pool import PlayerIndex, match_player, resolve_refs

from .sample_data import reference_players


def _index() -> PlayerIndex:
    return PlayerIndex(reference_players())


def test_name_and_team_resolve_to_the_right_duplicate():
    index = _index()

    boston = index.resolve(PlayerRef(name="jane  DOE", team="BOS"))
    miami = index.resolve(PlayerRef(name="Jane Doe", team="MIA"))

    assert boston is not None and boston.player_id == "4471"
    assert miami is not None and miami.player_id == "1010"


def test_duplicate_name_without_team_does_not_resolve():
    assert _index().resolve(PlayerRef(name="Jane Doe")) is None


def test_unique_name_without_team_resolves():
    match = _index().resolve(PlayerRef(name="Sam Shooter"))

    assert match is not None and match.player_id == "1002"


def test_identifier_beats_name():
    match = _index().resolve(PlayerRef(player_id="1002", name="Jane Doe", team="BOS"))

    assert match is not None and match.name == "Sam Shooter"


def test_unknown_identifier_falls_back_to_name_and_team():
    match = _index().resolve(PlayerRef(player_id="Jane Doe::BOS", name="Jane Doe", team="BOS"))

    assert match is not None and match.player_id == "4471"


def test_float_formatted_identifier_resolves():
    match = _index().resolve(PlayerRef(player_id="4471.0"))

    assert match is not None and match.player_id == "4471"


def test_wrong_team_does_not_resolve():
    assert _index().resolve(PlayerRef(name="Jane Doe", team="LAL")) is None


def test_shared_identifier_is_ambiguous():
    pool = [
        Player(player_id="77", name="One", team="BOS", salary=3000, projection=10.0),
        Player(player_id="77", name="Two", team="NYK", salary=3000, projection=10.0),
    ]
    index = PlayerIndex(pool)

    assert index.by_id("77") is None
    assert index.resolve(PlayerRef(player_id="77", name="Two", team="NYK")).name == "Two"
    assert len(index) == 2


def test_resolve_refs_counts_unresolved_and_repeats():
    refs = [
        PlayerRef(player_id="4471", raw="4471"),
        PlayerRef(player_id="4471", raw="4471"),
        PlayerRef(player_id="9999", raw="9999"),
        PlayerRef(name="Wes Wing", raw="Wes Wing"),
    ]

    resolution = resolve_refs(refs, _index())

    assert [p.player_id for p in resolution.players] == ["4471", "1003"]
    assert resolution.missing_count == 2
    assert [ref.raw for ref in resolution.unresolved] == ["4471", "9999"]


def test_match_player_maps_belief_rows_to_reference_ids():
    belief = Player(player_id="Jane Doe::BOS", name="Jane Doe", team="BOS", salary=9000, projection=50.0)

    match = match_player(belief, _index())

    assert match is not None and match.player_id == "4471"
