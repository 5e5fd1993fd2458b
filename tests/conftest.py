from datetime import date

import pytest

from schedule_finder.core.models import Account, Transaction
from schedule_finder.database import add_accounts, append_transactions


@pytest.fixture
def make_ledger(tmp_path):
    """Return a helper that stores ``(date, amount, payee)`` rows for one account."""

    def _make(rows, account="checking", db_name="ledger.db"):
        db_path = tmp_path / db_name
        add_accounts([Account(account, account.title())], str(db_path))
        txs = [
            Transaction(
                id=f"{account}-{idx}",
                account=account,
                payee=payee,
                amount=amount,
                date=day if isinstance(day, date) else date.fromisoformat(day),
            )
            for idx, (day, amount, payee) in enumerate(rows)
        ]
        append_transactions(txs, str(db_path))
        return str(db_path)

    return _make
