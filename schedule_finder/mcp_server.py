from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from datetime import date

from pathlib import Path

from schedule_finder.ledger import Ledger
from schedule_finder.patterns import SearchOptions
from schedule_finder.schedules import find_schedules

server = FastMCP(
    name="schedfind", instructions="Infer recurring schedules from a SQLite ledger"
)


@server.tool(
    name="find_recurring_schedules",
    description="Infer one recurring schedule per payee from ledger history",
)
async def find_recurring_schedules(
    db_path: str,
    today: str | None = None,
    weekday_source: str = "today",
) -> list[dict]:
    """Return the inferred schedules of the ledger at ``db_path``.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file.
    today:
        Optional ISO date used as today for weekday based patterns.
    weekday_source:
        ``today`` or ``offset``, see ``SearchOptions``.
    """

    try:
        reference = date.fromisoformat(today) if today else None
    except ValueError as exc:
        raise ValueError(f"Invalid today: {today}") from exc

    if weekday_source not in ("today", "offset"):
        raise ValueError(f"Invalid weekday_source: {weekday_source}")

    if not Path(db_path).exists():
        raise FileNotFoundError(f"Database not found: {db_path}")

    options = SearchOptions(today=reference, weekday_source=weekday_source)
    schedules = await find_schedules(Ledger(db_path), options)
    return [s.to_dict() for s in schedules]


def main() -> None:
    server.run()


if __name__ == "__main__":
    main()
