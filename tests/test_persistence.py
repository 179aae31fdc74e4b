from slatesavvy.models import ContestInput, PayoutTier
from slatesavvy.persistence import SqlitePreferenceStore

from .sample_data import reference_players


def test_contest_input_round_trip(tmp_path):
    store = SqlitePreferenceStore(tmp_path / "prefs.sqlite")
    assert store.load_contest_input() is None

    contest = ContestInput(
        contest_name="Single Entry",
        entry_fee=3,
        field_size=2000,
        prize_pool=5100,
        payout_tiers=(PayoutTier(min_rank=1, max_rank=1, payout=1000),),
    )
    store.save_contest_input(contest)

    assert SqlitePreferenceStore(tmp_path / "prefs.sqlite").load_contest_input() == contest


def test_latest_contest_input_wins(tmp_path):
    store = SqlitePreferenceStore(tmp_path / "prefs.sqlite")
    store.save_contest_input(ContestInput(entry_fee=1))
    store.save_contest_input(ContestInput(entry_fee=2))

    assert store.load_contest_input().entry_fee == 2


def test_belief_profile_save_load_and_clear(tmp_path):
    store = SqlitePreferenceStore(tmp_path / "prefs.sqlite")
    players = reference_players()

    saved = store.save_beliefs(players, "My Reads")
    loaded = store.load_beliefs()

    assert loaded is not None
    assert loaded.profile_id == saved.profile_id
    assert loaded.name == "My Reads"
    assert loaded.players == players

    store.clear_beliefs()
    assert store.load_beliefs() is None


def test_only_latest_belief_profile_is_active(tmp_path):
    store = SqlitePreferenceStore(tmp_path / "prefs.sqlite")
    store.save_beliefs(reference_players()[:2], "first")
    store.save_beliefs(reference_players()[:3], "second")

    loaded = store.load_beliefs()

    assert loaded.name == "second"
    assert len(loaded.players) == 3


def test_db_path_from_environment(tmp_path, monkeypatch):
    target = tmp_path / "env" / "prefs.sqlite"
    monkeypatch.setenv("SLATESAVVY_DB_PATH", str(target))

    store = SqlitePreferenceStore()

    assert store.db_path == target
    assert target.exists()
