# schedule_finder/ledger.py
from __future__ import annotations

from datetime import date
from functools import partial
from typing import List, Optional

import anyio

from schedule_finder.core.models import Account, Transaction
from schedule_finder.database import (
    latest_transaction_date,
    list_open_accounts,
    query_transactions,
)


class Ledger:
    """Read-only async access to a SQLite ledger.

    Every call runs the blocking SQLite query in a worker thread and is
    awaited before the caller builds the next one.
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = str(db_path)

    async def query(self, filters=None, splits: str = "inline") -> List[Transaction]:
        return await anyio.to_thread.run_sync(
            partial(query_transactions, self.db_path, filters, splits=splits)
        )

    async def latest_date(self, account_id: str) -> Optional[date]:
        return await anyio.to_thread.run_sync(
            latest_transaction_date, self.db_path, account_id
        )

    async def open_accounts(self) -> List[Account]:
        return await anyio.to_thread.run_sync(list_open_accounts, self.db_path)
