"""Contest payout economics and slate game listing."""

from __future__ import annotations

import math
from functools import lru_cache
from typing import Iterable, List, Optional

from slatesavvy.models import ContestDerived, ContestInput, ContestState, Player


def _multiple(amount: Optional[float], entry_fee: float) -> Optional[float]:
    if amount is None or entry_fee <= 0:
        return None
    return round(amount / entry_fee, 4)


@lru_cache(maxsize=256)
def derive_contest(contest: ContestInput) -> ContestDerived:
    """Compute rake, paid places and prize multiples for one contest input.

    Rake never goes below zero: a prize pool larger than entry contributions
    is an overlay, not a negative house edge.
    """

    contributions = contest.entry_fee * contest.field_size
    if contributions > 0:
        rake = max(0.0, (contributions - contest.prize_pool) / contributions)
    else:
        rake = 0.0

    min_cash: Optional[float] = None
    top_prize: Optional[float] = None
    if contest.payout_tiers:
        tiers = sorted(contest.payout_tiers, key=lambda tier: tier.min_rank)
        paid_places = max(tier.max_rank for tier in tiers)
        if contest.field_size:
            paid_places = min(paid_places, contest.field_size)
        top_prize = tiers[0].payout
        min_cash = tiers[-1].payout
    else:
        paid_places = math.floor(contest.field_size * contest.paid_pct)

    paid_pct = paid_places / contest.field_size if contest.field_size else 0.0
    return ContestDerived(
        total_contributions=round(contributions, 2),
        rake_pct=round(rake, 6),
        paid_places=paid_places,
        paid_pct=round(paid_pct, 6),
        min_cash=min_cash,
        min_cash_multiple=_multiple(min_cash, contest.entry_fee),
        top_prize=top_prize,
        top_prize_multiple=_multiple(top_prize, contest.entry_fee),
        user_investment=round(contest.entry_fee * contest.max_entries, 2),
        has_overlay=contributions > 0 and contest.prize_pool > contributions,
    )


def build_contest_state(contest: ContestInput) -> ContestState:
    return ContestState(input=contest, derived=derive_contest(contest))


def derive_games(players: Iterable[Player]) -> List[str]:
    """One ``TEAM @ TEAM`` label per matchup on the slate; home/away is not known."""

    games = set()
    for player in players:
        if not player.team or not player.opponent:
            continue
        pair = tuple(sorted((player.team, player.opponent)))
        games.add(f"{pair[0]} @ {pair[1]}")
    return sorted(games)


__all__ = ["build_contest_state", "derive_contest", "derive_games"]
