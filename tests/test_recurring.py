from datetime import date

import pytest

from schedule_finder.core.models import RecurConfig, RecurPattern
from schedule_finder.recurring import (
    InvalidFrequencyError,
    previous_start,
    take_dates,
    validate_recur_config,
    weekday_code,
)


def test_take_dates_weekly_and_every_two_weeks():
    weekly = RecurConfig(frequency="weekly", start=date(2024, 1, 1))
    assert take_dates(weekly) == [
        date(2024, 1, 1),
        date(2024, 1, 8),
        date(2024, 1, 15),
    ]

    biweekly = RecurConfig(frequency="weekly", start=date(2024, 1, 1), interval=2)
    assert take_dates(biweekly) == [
        date(2024, 1, 1),
        date(2024, 1, 15),
        date(2024, 1, 29),
    ]


def test_take_dates_monthly_on_start_day():
    monthly = RecurConfig(frequency="monthly", start=date(2024, 1, 15))
    assert take_dates(monthly) == [
        date(2024, 1, 15),
        date(2024, 2, 15),
        date(2024, 3, 15),
    ]


def test_take_dates_monthly_last_day():
    last_day = RecurConfig(
        frequency="monthly",
        start=date(2024, 1, 15),
        patterns=(RecurPattern("day", -1),),
    )
    assert take_dates(last_day) == [
        date(2024, 1, 31),
        date(2024, 2, 29),
        date(2024, 3, 31),
    ]


def test_take_dates_first_and_third_weekday():
    config = RecurConfig(
        frequency="monthly",
        start=date(2023, 12, 17),
        patterns=(RecurPattern("MO", 1), RecurPattern("MO", 3)),
    )
    assert take_dates(config) == [
        date(2023, 12, 18),
        date(2024, 1, 1),
        date(2024, 1, 15),
    ]


def test_take_dates_mixes_day_and_weekday_patterns():
    config = RecurConfig(
        frequency="monthly",
        start=date(2024, 1, 1),
        patterns=(RecurPattern("day", 10), RecurPattern("FR", -1)),
    )
    assert take_dates(config, 4) == [
        date(2024, 1, 10),
        date(2024, 1, 26),
        date(2024, 2, 10),
        date(2024, 2, 23),
    ]


def test_previous_start_steps_one_interval_back():
    weekly = RecurConfig(frequency="weekly", start=date(2024, 1, 15), interval=2)
    assert previous_start(weekly).start == date(2024, 1, 1)
    assert previous_start(weekly).interval == 2

    monthly = RecurConfig(frequency="monthly", start=date(2024, 3, 31))
    assert previous_start(monthly).start == date(2024, 2, 29)

    yearly = RecurConfig(frequency="yearly", start=date(2024, 2, 29))
    assert previous_start(yearly).start == date(2023, 2, 28)


def test_previous_start_rejects_other_frequencies():
    with pytest.raises(InvalidFrequencyError, match="daily"):
        previous_start(RecurConfig(frequency="daily", start=date(2024, 1, 1)))


def test_validate_recur_config():
    config = RecurConfig(
        frequency="monthly",
        start=date(2024, 1, 5),
        patterns=(RecurPattern("TU", 2),),
    )
    assert validate_recur_config(config) == []

    bad = RecurConfig(frequency="hourly", start=date(2024, 1, 1), interval=0)
    errors = validate_recur_config(bad)
    assert any("hourly" in e for e in errors)
    assert any("Interval" in e for e in errors)

    weekly_pattern = RecurConfig(
        frequency="weekly", start=date(2024, 1, 1), patterns=(RecurPattern("day", 5),)
    )
    assert validate_recur_config(weekly_pattern) == [
        "Patterns are only supported for monthly frequency."
    ]
    assert validate_recur_config("2024-01-01") == ["Expected a recurring config, got str"]


def test_weekday_code():
    assert weekday_code(date(2024, 1, 1)) == "MO"
    assert weekday_code(date(2024, 2, 7)) == "WE"
    assert weekday_code(date(2024, 1, 7)) == "SU"
