import pytest

from slatesavvy.config import DK_NBA, get_rules, load_thresholds


def test_get_rules_handles_site_and_sport_uppercase():
    rules = get_rules("dk", "nba")
    assert rules.site == "DK"
    assert rules.roster_order == ("PG", "SG", "SF", "PF", "C", "G", "F", "UTIL")
    assert rules.roster_size == 8
    assert rules.salary_cap == 50_000


def test_get_rules_missing_raises():
    with pytest.raises(KeyError):
        get_rules("DK", "CURLING")


def test_eligible_slots_are_narrowest_first():
    assert DK_NBA.eligible_slots(("PG",)) == ("PG", "G", "UTIL")
    assert DK_NBA.eligible_slots(("SF", "PF")) == ("SF", "PF", "F", "UTIL")
    assert DK_NBA.eligible_slots(("C",)) == ("C", "UTIL")
    assert DK_NBA.eligible_slots(()) == ()


def test_thresholds_read_environment(monkeypatch):
    monkeypatch.setenv("SLATESAVVY_UPSIDE_CLEAN_RATIO", "1.5")
    monkeypatch.setenv("SLATESAVVY_ALIGNMENT_OVER_RATIO", "not-a-number")

    thresholds = load_thresholds()

    assert thresholds.upside_clean_ratio == pytest.approx(1.5)
    assert thresholds.alignment_over_ratio == pytest.approx(1.2)
