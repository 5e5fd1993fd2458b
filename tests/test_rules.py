from datetime import date

from schedule_finder.core.models import Condition, RecurConfig
from schedule_finder.rules import approx_number_threshold, conditions_to_filter


def test_approx_number_threshold():
    assert approx_number_threshold(0) == 0
    assert approx_number_threshold(1000) == 75
    assert approx_number_threshold(-1000) == 75
    # 37.5 rounds half up
    assert approx_number_threshold(-500) == 38
    assert approx_number_threshold(10) == 1
    assert approx_number_threshold(-6) == 0


def test_conditions_to_filter_exact():
    config = RecurConfig(frequency="weekly", start=date(2024, 1, 15), interval=2)
    filters, errors = conditions_to_filter(
        [
            Condition("is", "account", "checking"),
            Condition("is", "payee", "P1"),
            Condition("is", "date", config),
            Condition("is", "amount", -500),
        ],
        recur_date_bounds=1,
    )
    assert errors == []
    assert filters == [
        {"account": "checking"},
        {"payee": "P1"},
        {"$or": [{"date": date(2024, 1, 15)}]},
        {"amount": -500},
    ]


def test_conditions_to_filter_approx():
    config = RecurConfig(frequency="weekly", start=date(2024, 1, 15), interval=2)
    filters, errors = conditions_to_filter(
        [
            Condition("isapprox", "date", config),
            Condition("isapprox", "amount", -500),
        ],
        recur_date_bounds=2,
    )
    assert errors == []
    assert filters[0] == {
        "$or": [
            {
                "$and": [
                    {"date": {"$gte": date(2024, 1, 13)}},
                    {"date": {"$lte": date(2024, 1, 17)}},
                ]
            },
            {
                "$and": [
                    {"date": {"$gte": date(2024, 1, 27)}},
                    {"date": {"$lte": date(2024, 1, 31)}},
                ]
            },
        ]
    }
    assert filters[1] == {
        "$and": [{"amount": {"$gte": -538}}, {"amount": {"$lte": -462}}]
    }


def test_conditions_to_filter_plain_date():
    filters, errors = conditions_to_filter([Condition("is", "date", date(2024, 5, 1))])
    assert errors == []
    assert filters == [{"date": date(2024, 5, 1)}]


def test_conditions_to_filter_reports_errors():
    filters, errors = conditions_to_filter(
        [
            Condition("contains", "payee", "P1"),
            Condition("is", "notes", "rent"),
            Condition("is", "amount", "12.50"),
            Condition("is", "account", 7),
            Condition("is", "date", RecurConfig(frequency="hourly", start=date(2024, 1, 1))),
        ]
    )
    assert filters == []
    assert len(errors) == 5
    assert any("contains" in e for e in errors)
    assert any("notes" in e for e in errors)
    assert any("hourly" in e for e in errors)


def test_missing_payee_filters_on_null():
    filters, errors = conditions_to_filter(
        [Condition("is", "account", "checking"), Condition("is", "payee", None)]
    )
    assert errors == []
    assert filters == [{"account": "checking"}, {"payee": None}]

    _, errors = conditions_to_filter([Condition("is", "account", None)])
    assert errors == ["Field 'account' needs an id, got None."]
