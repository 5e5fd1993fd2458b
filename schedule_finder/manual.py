# schedule_finder/manual.py
from datetime import date, datetime
import yaml
from schedule_finder.core.models import Account, Transaction


def _parse_day(value, entry):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value).date()
    raise ValueError(f"Missing or invalid 'date' in ledger entry: {entry}")


def _parse_amount(value, entry):
    # Amounts are integer minor units; 12.50 must be written as 1250.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"'amount' must be an integer in ledger entry: {entry}")
    return value


def load_ledger(path):
    """Load accounts, payees and transactions from a YAML ledger file.

    Returns ``(accounts, payees, transactions)`` where payees are dicts with
    ``id``, ``name`` and ``transfer_acct``.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    accounts = [
        Account(
            id=str(entry['id']),
            name=entry.get('name', ''),
            closed=bool(entry.get('closed', False)),
        )
        for entry in data.get('accounts') or []
    ]

    payees = []
    for entry in data.get('payees') or []:
        if 'id' not in entry:
            raise ValueError(f"Missing 'id' in payee entry: {entry}")
        payees.append({
            'id': str(entry['id']),
            'name': entry.get('name', ''),
            'transfer_acct': entry.get('transfer_acct'),
        })

    txs = []
    for entry in data.get('transactions') or []:
        for key in ('id', 'account'):
            if not entry.get(key):
                raise ValueError(f"Missing '{key}' in ledger entry: {entry}")
        txs.append(Transaction(
            id=str(entry['id']),
            account=str(entry['account']),
            payee=entry.get('payee'),
            amount=_parse_amount(entry.get('amount'), entry),
            date=_parse_day(entry.get('date'), entry),
            parent_id=entry.get('parent_id'),
            is_parent=bool(entry.get('is_parent', False)),
            is_child=entry.get('parent_id') is not None,
            schedule=entry.get('schedule'),
        ))
    return accounts, payees, txs
