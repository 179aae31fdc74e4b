from slatesavvy.config import DK_NBA
from slatesavvy.models import Player
from slatesavvy.pool import assign_slots

from .sample_data import LINEUP_IDS, reference_players


def _player(pid: str, position: str) -> Player:
    return Player(player_id=pid, name=f"Player {pid}", team="BOS", position=position, salary=4000, projection=20.0)


def _lineup_players():
    by_id = {player.player_id: player for player in reference_players()}
    return [by_id[pid] for pid in LINEUP_IDS]


def test_assignment_fills_every_slot_once():
    assignment = assign_slots(_lineup_players())

    assert assignment.complete
    assert assignment.ordered_ids() == ["4471", "1002", "1003", "1004", "1005", "1006", "1007", "1008"]
    assert list(assignment.slots) == list(DK_NBA.roster_order)


def test_assignment_is_valid_for_any_input_order():
    players = list(reversed(_lineup_players()))

    assignment = assign_slots(players)

    assert assignment.complete
    assert sorted(assignment.ordered_ids()) == sorted(LINEUP_IDS)
    for slot, player in assignment.slots.items():
        assert slot in DK_NBA.eligible_slots(player.positions)


def test_flex_slots_take_the_overflow():
    players = [
        _player("1", "PG"),
        _player("2", "PG"),
        _player("3", "PG"),
        _player("4", "SG"),
        _player("5", "SF"),
        _player("6", "PF"),
        _player("7", "C"),
        _player("8", "SF"),
    ]

    assignment = assign_slots(players)

    assert assignment.complete
    assert {assignment.slots[slot].player_id for slot in ("PG", "G", "UTIL")} == {"1", "2", "3"}
    assert {assignment.slots[slot].player_id for slot in ("SF", "F")} == {"5", "8"}


def test_infeasible_roster_leaves_an_open_slot():
    players = [
        _player("1", "PG"),
        _player("2", "PG"),
        _player("3", "PG"),
        _player("4", "SG"),
        _player("5", "SF"),
        _player("6", "PF"),
        _player("7", "C"),
        _player("8", "C"),
    ]

    assignment = assign_slots(players)

    assert not assignment.complete
    assert len(assignment.open_slots) == 1
    assert len(assignment.unassigned) == 1
    placed = [pid for pid in assignment.ordered_ids() if pid is not None]
    assert len(placed) == len(set(placed)) == 7


def test_short_roster_is_not_slotted():
    players = _lineup_players()[:7]

    assignment = assign_slots(players)

    assert not assignment.complete
    assert assignment.open_slots == DK_NBA.roster_order
    assert len(assignment.unassigned) == 7
