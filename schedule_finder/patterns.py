# schedule_finder/patterns.py
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Callable, List, Optional, Sequence, Tuple

import anyio
from dateutil.relativedelta import relativedelta

from schedule_finder.core.models import (
    BuildResult,
    CandidateMatch,
    OccurrenceWindow,
    RecurConfig,
    RecurPattern,
    Skip,
    Transaction,
)
from schedule_finder.ledger import Ledger
from schedule_finder.matching import match_schedules
from schedule_finder.recurring import take_dates, to_day, weekday_code

logger = logging.getLogger(__name__)

WINDOW_DAYS = 2
# Not every month has a 29th, 30th or 31st. End-of-month schedules are
# covered by the last-day family instead.
MAX_MONTH_DAY = 28

Builder = Callable[[date], BuildResult]


class InferenceCancelled(Exception):
    """Raised between ledger round-trips once cancellation was requested."""


@dataclass
class SearchOptions:
    today: Optional[date] = None
    # "today" derives weekday patterns from the clock, "offset" from the
    # start date being tried.
    weekday_source: str = "today"
    cancel: Optional[anyio.Event] = None

    def reference_today(self) -> date:
        return self.today or date.today()


def ensure_active(options: Optional[SearchOptions]) -> None:
    if options is not None and options.cancel is not None and options.cancel.is_set():
        raise InferenceCancelled()


async def get_transactions(
    ledger: Ledger, day: date, account_id: str
) -> List[Transaction]:
    """Transactions within two days of *day* not linked to a schedule yet."""
    return await ledger.query(
        {
            "account": account_id,
            "schedule": None,
            # Transfers are never schedules
            "payee.transfer_acct": None,
            "$and": [
                {"date": {"$gte": day - timedelta(days=WINDOW_DAYS)}},
                {"date": {"$lte": day + timedelta(days=WINDOW_DAYS)}},
            ],
        },
        splits="none",
    )


def fixed_config(
    frequency: str, interval: int = 1, patterns: Sequence[RecurPattern] = ()
) -> Builder:
    def build(start: date) -> BuildResult:
        return RecurConfig(
            frequency=frequency, start=start, interval=interval, patterns=tuple(patterns)
        )

    return build


async def schedules_for_pattern(
    ledger: Ledger,
    base_start: date,
    num_days: int,
    build: Builder,
    account_id: str,
    options: Optional[SearchOptions] = None,
) -> List[CandidateMatch]:
    schedules: List[CandidateMatch] = []

    for i in range(num_days):
        start = base_start + timedelta(days=i)
        config = build(start)
        if isinstance(config, Skip):
            logger.debug("Skipping offset %s: %s", start, config.reason)
            continue

        config = replace(config, start=to_day(config.start))

        data = []
        for day in take_dates(config):
            ensure_active(options)
            data.append(
                OccurrenceWindow(
                    date=day,
                    transactions=tuple(await get_transactions(ledger, day, account_id)),
                )
            )

        schedules.extend(match_schedules(data, config))
    return schedules


async def weekly(ledger, start_date, account_id, options=None):
    return await schedules_for_pattern(
        ledger,
        start_date - relativedelta(weeks=4),
        7 * 2,
        fixed_config("weekly"),
        account_id,
        options,
    )


async def every_2_weeks(ledger, start_date, account_id, options=None):
    return await schedules_for_pattern(
        ledger,
        # 6 weeks would cover 3 occurrences, one more week is scanned back
        start_date - relativedelta(weeks=7),
        7 * 2,
        fixed_config("weekly", interval=2),
        account_id,
        options,
    )


def _monthly_on_day(start: date) -> BuildResult:
    if start.day > MAX_MONTH_DAY:
        return Skip(f"day {start.day} is missing from some months")
    return RecurConfig(frequency="monthly", start=start)


async def monthly(ledger, start_date, account_id, options=None):
    return await schedules_for_pattern(
        ledger,
        start_date - relativedelta(months=4),
        31 * 2,
        _monthly_on_day,
        account_id,
        options,
    )


async def monthly_last_day(ledger, start_date, account_id, options=None):
    build = fixed_config("monthly", patterns=[RecurPattern("day", -1)])
    recent = await schedules_for_pattern(
        ledger, start_date - relativedelta(months=3), 1, build, account_id, options
    )
    older = await schedules_for_pattern(
        ledger, start_date - relativedelta(months=4), 1, build, account_id, options
    )
    return recent + older


def nth_weekday_config(
    ordinals: Tuple[int, ...], options: Optional[SearchOptions] = None
) -> Builder:
    """Monthly rule on the given weekday ordinals, e.g. the 1st and 3rd Monday.

    By default the weekday is today's, not the offset's; set
    ``weekday_source="offset"`` to use the date being tried.
    """
    options = options or SearchOptions()

    def build(start: date) -> BuildResult:
        if options.weekday_source == "offset":
            code = weekday_code(start)
        else:
            code = weekday_code(options.reference_today())
        return RecurConfig(
            frequency="monthly",
            start=start,
            patterns=tuple(RecurPattern(code, n) for n in ordinals),
        )

    return build


async def monthly_1st_or_3rd(ledger, start_date, account_id, options=None):
    return await schedules_for_pattern(
        ledger,
        start_date - relativedelta(weeks=8),
        14,
        nth_weekday_config((1, 3), options),
        account_id,
        options,
    )


async def monthly_2nd_or_4th(ledger, start_date, account_id, options=None):
    return await schedules_for_pattern(
        ledger,
        start_date - relativedelta(months=8),
        14,
        nth_weekday_config((2, 4), options),
        account_id,
        options,
    )


PATTERN_FAMILIES = (
    ("weekly", weekly),
    ("every_2_weeks", every_2_weeks),
    ("monthly", monthly),
    ("monthly_last_day", monthly_last_day),
    ("monthly_1st_or_3rd", monthly_1st_or_3rd),
    ("monthly_2nd_or_4th", monthly_2nd_or_4th),
)
