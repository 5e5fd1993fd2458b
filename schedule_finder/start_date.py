# schedule_finder/start_date.py
from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional

from schedule_finder.core.models import RecurConfig, Schedule
from schedule_finder.ledger import Ledger
from schedule_finder.patterns import SearchOptions, ensure_active
from schedule_finder.recurring import previous_start
from schedule_finder.rules import conditions_to_filter

logger = logging.getLogger(__name__)


class SearchState(Enum):
    SEARCHING = "searching"
    CONVERGED = "converged"
    ABORTED = "aborted"


class StartDateSearch:
    """Walks a schedule's start date back one period at a time.

    Each step proposes the previous period and expects the caller to report
    how many ledger transactions match it. The search converges on the first
    period without evidence, keeping the last period that had some, and
    aborts when a proposed schedule cannot be translated into a filter.
    """

    def __init__(self, schedule: Schedule) -> None:
        self.schedule = schedule
        self.current: RecurConfig = schedule.date_condition.value
        self.state = SearchState.SEARCHING
        self.steps = 0
        self._candidate: Optional[RecurConfig] = None

    @property
    def done(self) -> bool:
        return self.state is not SearchState.SEARCHING

    def propose(self) -> Optional[List[dict]]:
        """Return the ledger filter for the previous period, or ``None``.

        Raises ``InvalidFrequencyError`` for frequencies that have no period.
        """
        if self.done:
            return None

        candidate = previous_start(self.current)
        conditions = self.schedule.with_date(candidate).conditions
        filters, errors = conditions_to_filter(conditions, recur_date_bounds=1)
        if errors:
            logger.warning(
                "Stopping start date search for payee %s: %s",
                self.schedule.payee,
                "; ".join(errors),
            )
            self.state = SearchState.ABORTED
            return None

        self._candidate = candidate
        return filters

    def record(self, matches: int) -> None:
        if self._candidate is None:
            raise RuntimeError("record() called without a pending proposal")
        if matches == 0:
            self.state = SearchState.CONVERGED
        else:
            self.current = self._candidate
            self.steps += 1
        self._candidate = None

    def result(self) -> Schedule:
        if self.steps == 0:
            return self.schedule
        return self.schedule.with_date(self.current)


async def find_start_date(
    schedule: Schedule,
    ledger: Ledger,
    options: Optional[SearchOptions] = None,
) -> Schedule:
    search = StartDateSearch(schedule)
    while not search.done:
        filters = search.propose()
        if filters is None:
            break
        ensure_active(options)
        data = await ledger.query({"$and": filters})
        search.record(len(data))

    logger.debug(
        "Start date for payee %s moved back %d period(s) to %s",
        schedule.payee,
        search.steps,
        search.current.start,
    )
    return search.result()
