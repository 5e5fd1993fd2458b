# schedule_finder/schedules.py
from __future__ import annotations

import logging
import uuid
from typing import Dict, Iterable, List, Optional

from schedule_finder.core.models import CandidateMatch, Condition, Schedule
from schedule_finder.ledger import Ledger
from schedule_finder.patterns import (
    PATTERN_FAMILIES,
    InferenceCancelled,
    SearchOptions,
    ensure_active,
)
from schedule_finder.recurring import InvalidFrequencyError
from schedule_finder.start_date import find_start_date

logger = logging.getLogger(__name__)


def schedule_from_candidate(winner: CandidateMatch) -> Schedule:
    return Schedule(
        id=str(uuid.uuid4()),
        account=winner.account,
        payee=winner.payee,
        date=winner.date,
        amount=winner.amount,
        conditions=(
            Condition("is", "account", winner.account),
            Condition("is", "payee", winner.payee),
            Condition("is" if winner.exact_date else "isapprox", "date", winner.date),
            Condition(
                "is" if winner.exact_amount else "isapprox", "amount", winner.amount
            ),
        ),
    )


def select_winners(candidates: Iterable[CandidateMatch]) -> List[Schedule]:
    """Pick the highest ranked candidate per payee.

    Payees keep the order in which they first appear and an equal rank never
    replaces the current best, so the earlier candidate wins a tie.
    """
    best: Dict[Optional[str], CandidateMatch] = {}
    for candidate in candidates:
        current = best.get(candidate.payee)
        if current is None or candidate.rank > current.rank:
            best[candidate.payee] = candidate
    return [schedule_from_candidate(winner) for winner in best.values()]


async def collect_candidates(
    ledger: Ledger, options: Optional[SearchOptions] = None
) -> List[CandidateMatch]:
    candidates: List[CandidateMatch] = []
    for account in await ledger.open_accounts():
        ensure_active(options)
        latest = await ledger.latest_date(account.id)
        if latest is None:
            logger.debug("Account %s has no transactions, skipping", account.id)
            continue

        found = 0
        for name, family in PATTERN_FAMILIES:
            matches = await family(ledger, latest, account.id, options)
            logger.debug(
                "%s: %d candidate(s) for account %s", name, len(matches), account.id
            )
            candidates.extend(matches)
            found += len(matches)
        logger.info(
            "Account %s: %d candidate(s) seeded from %s", account.id, found, latest
        )
    return candidates


async def finalize_schedule(
    schedule: Schedule, ledger: Ledger, options: Optional[SearchOptions] = None
) -> Schedule:
    try:
        return await find_start_date(schedule, ledger, options)
    except InvalidFrequencyError:
        logger.exception("Could not search a start date for payee %s", schedule.payee)
        return schedule


async def find_schedules(
    ledger: Ledger, options: Optional[SearchOptions] = None
) -> List[Schedule]:
    """Infer one recurring schedule per payee from the ledger history.

    When ``options.cancel`` is set the search stops before the next ledger
    query and the schedules finalized so far are returned.
    """
    try:
        candidates = await collect_candidates(ledger, options)
    except InferenceCancelled:
        logger.info("Schedule search cancelled before any schedule was finalized")
        return []

    finalized: List[Schedule] = []
    for schedule in select_winners(candidates):
        try:
            schedule = await finalize_schedule(schedule, ledger, options)
        except InferenceCancelled:
            logger.info(
                "Schedule search cancelled after %d schedule(s)", len(finalized)
            )
            break
        logger.info(
            "Found %s schedule for payee %s starting %s",
            schedule.date.frequency,
            schedule.payee,
            schedule.date.start,
        )
        finalized.append(schedule)
    return finalized
