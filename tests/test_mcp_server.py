import anyio
import pytest

from schedule_finder.mcp_server import find_recurring_schedules


def _setup_db(make_ledger):
    return make_ledger(
        [
            ("2023-12-18", -500, "P1"),
            ("2024-01-01", -500, "P1"),
            ("2024-01-15", -500, "P1"),
            ("2024-01-29", -500, "P1"),
        ]
    )


def test_find_recurring_schedules(make_ledger):
    db_path = _setup_db(make_ledger)

    [schedule] = anyio.run(find_recurring_schedules, db_path, "2024-02-07")
    assert schedule["payee"] == "P1"
    assert schedule["amount"] == -500
    assert schedule["date"] == {
        "frequency": "weekly",
        "interval": 2,
        "start": "2023-12-18",
    }
    assert schedule["conditions"][2] == {
        "op": "is",
        "field": "date",
        "value": schedule["date"],
    }


def test_find_recurring_schedules_bad_input(tmp_path):
    db_path = str(tmp_path / "missing.db")

    with pytest.raises(ValueError, match="Invalid today"):
        anyio.run(find_recurring_schedules, db_path, "not-a-date")

    with pytest.raises(ValueError, match="Invalid weekday_source"):
        anyio.run(find_recurring_schedules, db_path, None, "weekly")

    with pytest.raises(FileNotFoundError, match="Database not found"):
        anyio.run(find_recurring_schedules, db_path)
