# schedule_finder/matching.py
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from schedule_finder.core.models import (
    CandidateMatch,
    OccurrenceWindow,
    RecurConfig,
    Transaction,
)
from schedule_finder.recurring import to_day
from schedule_finder.rules import approx_number_threshold


def get_rank(day1, day2) -> float:
    """Closeness of two days: 1 for the same day, 0.5 one day apart, etc."""
    day_diff = abs((to_day(day1) - to_day(day2)).days)
    return 1 / (day_diff + 1)


def _find_match(
    occur: OccurrenceWindow, trans: Transaction, threshold: int
) -> Optional[Tuple[Transaction, float]]:
    for candidate in occur.transactions:
        if (
            trans.amount - threshold <= candidate.amount <= trans.amount + threshold
            and candidate.payee == trans.payee
        ):
            return candidate, get_rank(occur.date, candidate.date)
    return None


def match_schedules(
    all_occurs: Sequence[OccurrenceWindow], config: RecurConfig
) -> List[CandidateMatch]:
    """Find transactions that repeat across every occurrence window.

    The most recent window is the base: each of its transactions must have a
    same-payee, similar-amount counterpart in every older window, otherwise it
    yields nothing. The rank sums the closeness of each matched transaction to
    its occurrence date, so it equals ``len(all_occurs)`` only when every
    match landed on the exact day.
    """
    all_occurs = list(reversed(all_occurs))
    if not all_occurs:
        return []
    base_occur = all_occurs[0]
    occurs = all_occurs[1:]
    schedules = []

    for trans in base_occur.transactions:
        threshold = approx_number_threshold(trans.amount)
        found = [_find_match(occur, trans, threshold) for occur in occurs]
        if any(match is None for match in found):
            continue

        rank = get_rank(base_occur.date, trans.date) + sum(r for _, r in found)
        exact_amount = all(matched.amount == trans.amount for matched, _ in found)

        schedules.append(
            CandidateMatch(
                rank=rank,
                amount=trans.amount,
                account=trans.account,
                payee=trans.payee,
                date=config,
                exact_date=rank == len(all_occurs),
                exact_amount=exact_amount,
            )
        )

    return schedules
