# schedule_finder/recurring.py
from __future__ import annotations

from datetime import date, datetime
from typing import List

from dateutil.relativedelta import relativedelta
from dateutil.rrule import (
    DAILY,
    FR,
    MO,
    MONTHLY,
    SA,
    SU,
    TH,
    TU,
    WE,
    WEEKLY,
    YEARLY,
    rrule,
    rruleset,
)

from schedule_finder.core.models import RecurConfig

OCCURRENCE_COUNT = 3

WEEKDAY_CODES = ("MO", "TU", "WE", "TH", "FR", "SA", "SU")

_WEEKDAYS = {"MO": MO, "TU": TU, "WE": WE, "TH": TH, "FR": FR, "SA": SA, "SU": SU}

_FREQUENCIES = {
    "daily": DAILY,
    "weekly": WEEKLY,
    "monthly": MONTHLY,
    "yearly": YEARLY,
}


class InvalidFrequencyError(ValueError):
    """Raised when a descriptor's frequency cannot be stepped back."""


def _parse_date(value, field_name, entry):
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value).date()
    raise ValueError(f"Unrecognized {field_name} in recurring entry: {entry}")


def to_day(value) -> date:
    """Normalize a date, datetime or ISO string to a calendar day."""
    return _parse_date(value, "date", value)


def weekday_code(day: date) -> str:
    return WEEKDAY_CODES[day.weekday()]


def validate_recur_config(config) -> List[str]:
    """Return a list of problems with *config*; empty when it is usable."""
    if not isinstance(config, RecurConfig):
        return [f"Expected a recurring config, got {type(config).__name__}"]

    errors = []
    if config.frequency not in _FREQUENCIES:
        errors.append(f"Unsupported frequency '{config.frequency}'.")
    if not isinstance(config.interval, int) or config.interval < 1:
        errors.append(f"Interval must be a positive integer, got {config.interval!r}.")
    if not isinstance(config.start, date) or isinstance(config.start, datetime):
        errors.append(f"Start must be a calendar day, got {config.start!r}.")
    for pattern in config.patterns:
        if pattern.type != "day" and pattern.type not in _WEEKDAYS:
            errors.append(f"Unknown pattern type '{pattern.type}'.")
        elif pattern.value == 0:
            errors.append(f"Pattern '{pattern.type}' needs a non-zero value.")
    if config.patterns and config.frequency != "monthly":
        errors.append("Patterns are only supported for monthly frequency.")
    return errors


def config_to_rruleset(config: RecurConfig) -> rruleset:
    freq = _FREQUENCIES.get(config.frequency)
    if freq is None:
        raise ValueError(f"Unsupported frequency '{config.frequency}'.")

    dtstart = datetime.combine(config.start, datetime.min.time())
    rules = rruleset()

    days = [p.value for p in config.patterns if p.type == "day"]
    weekdays = [
        _WEEKDAYS[p.type](p.value) for p in config.patterns if p.type in _WEEKDAYS
    ]

    if not config.patterns:
        rules.rrule(rrule(freq, interval=config.interval, dtstart=dtstart))
        return rules

    # Day and weekday patterns are alternatives, so each gets its own rule
    # and the set yields their union.
    if days:
        rules.rrule(
            rrule(freq, interval=config.interval, dtstart=dtstart, bymonthday=days)
        )
    if weekdays:
        rules.rrule(
            rrule(freq, interval=config.interval, dtstart=dtstart, byweekday=weekdays)
        )
    return rules


def take_dates(config: RecurConfig, count: int = OCCURRENCE_COUNT) -> List[date]:
    dates = []
    for occurrence in config_to_rruleset(config):
        dates.append(occurrence.date())
        if len(dates) >= count:
            break
    return dates


def previous_start(config: RecurConfig) -> RecurConfig:
    """Move ``config.start`` back by one ``interval``-sized period."""
    interval = config.interval or 1
    if config.frequency == "weekly":
        delta = relativedelta(weeks=interval)
    elif config.frequency == "monthly":
        delta = relativedelta(months=interval)
    elif config.frequency == "yearly":
        delta = relativedelta(years=interval)
    else:
        raise InvalidFrequencyError(
            f"Cannot step back a schedule with frequency '{config.frequency}'."
        )
    return RecurConfig(
        frequency=config.frequency,
        start=to_day(config.start - delta),
        interval=config.interval,
        patterns=config.patterns,
    )
