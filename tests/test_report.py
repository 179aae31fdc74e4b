from slatesavvy.analysis import build_contest_state, build_report, roster_status
from slatesavvy.analysis.report import build_narrative, field_guidance
from slatesavvy.ingest import parse_pipeline_json, parse_user_lineups
from slatesavvy.models import ContestInput, Lineup
from slatesavvy.pool import recompute

from .sample_data import pack_json


STATE = build_contest_state(ContestInput(entry_fee=10, field_size=1000, prize_pool=8500))


def _classified():
    pack = parse_pipeline_json(pack_json())
    return recompute(pack.lineups, STATE, pack.players)


def test_report_counts_only_complete_lineups():
    report = build_report(_classified(), STATE)

    assert report.total_lineups == 2
    assert report.complete_lineups == 1
    assert report.strong_pct == 1.0
    assert report.over_aligned_pct == 0.0
    assert report.clean_pct == 1.0
    assert report.narrative == (
        "Your portfolio is highly viable for this contest and maintains a balanced exposure to the field. "
        "Upside exists, but payout splitting risk should be monitored."
    )
    assert report.rake_pct == 0.15
    assert report.paid_places == 200


def test_report_contest_context_and_guidance():
    report = build_report(_classified(), STATE)

    assert report.contest_context == (
        "This Custom Contest slate features a field of 1,000 entries with 200 paid places and a 15.0% house edge."
    )
    assert report.guidance.startswith("Smaller fields prioritize projectable volume.")


def test_large_fields_get_duplication_guidance():
    state = build_contest_state(ContestInput(entry_fee=20, field_size=10_000, prize_pool=170_000))

    assert field_guidance(state).startswith("For this contest size")


def test_empty_portfolio_narrative():
    report = build_report([], None)

    assert report.narrative == "No lineups analyzed yet. Upload builds to generate your Reality Check summary."
    assert report.contest_context is None
    assert report.strong_pct == 0.0


def test_narrative_variants():
    assert build_narrative(0.2, 0.8, 0) == (
        "Your portfolio shows mixed viability but is heavily aligned with the field. "
        "Upside exists, though floor stability is the primary driver."
    )


def test_roster_status_labels():
    complete, partial = _classified()
    unmapped = parse_user_lineups("PG,SG,SF,PF,C,G,F,UTIL\na,b,c,d,e,f,g,h\n")[0]

    assert roster_status(complete) == "Doe, Shooter, Wing..."
    assert roster_status(partial) == "Partially Mapped (7/8)"
    assert roster_status(unmapped) == "Unmapped Roster"
    assert roster_status(Lineup(lineup_id="empty")) == "Empty Lineup"
