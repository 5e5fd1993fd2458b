import sqlite3
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from schedule_finder.core.models import Account, Transaction

_FIELD_COLUMNS = {
    "id": "t.id",
    "account": "t.account",
    "payee": "t.payee",
    "payee.transfer_acct": "p.transfer_acct",
    "schedule": "t.schedule",
    "date": "t.date",
    "amount": "t.amount",
    "parent_id": "t.parent_id",
}

_OPERATORS = {
    "$eq": "=",
    "$ne": "!=",
    "$gt": ">",
    "$gte": ">=",
    "$lt": "<",
    "$lte": "<=",
}

_SPLIT_MODES = {
    # Split parents are hidden, their children are returned in their place.
    "inline": "t.is_parent = 0",
    # Only top-level rows, split children are hidden.
    "none": "t.parent_id IS NULL",
    "all": None,
}


def _init_db(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS accounts (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL DEFAULT '',
            closed INTEGER NOT NULL DEFAULT 0
        );
        CREATE TABLE IF NOT EXISTS payees (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL DEFAULT '',
            transfer_acct TEXT
        );
        CREATE TABLE IF NOT EXISTS transactions (
            id TEXT PRIMARY KEY,
            account TEXT NOT NULL,
            payee TEXT,
            amount INTEGER NOT NULL,
            date TEXT NOT NULL,
            parent_id TEXT,
            is_parent INTEGER NOT NULL DEFAULT 0,
            is_child INTEGER NOT NULL DEFAULT 0,
            schedule TEXT
        );
        CREATE INDEX IF NOT EXISTS idx_transactions_account_date
            ON transactions (account, date);
        """
    )
    conn.commit()


def _connect(db_path: str) -> sqlite3.Connection:
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    _init_db(conn)
    return conn


def add_accounts(accounts: Iterable[Account], db_path: str) -> None:
    rows = [(a.id, a.name, int(bool(a.closed))) for a in accounts]
    if not rows:
        return
    conn = _connect(db_path)
    try:
        conn.executemany(
            """
            INSERT INTO accounts (id, name, closed) VALUES (?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET name = excluded.name,
                                          closed = excluded.closed
            """,
            rows,
        )
        conn.commit()
    finally:
        conn.close()


def add_payee(
    db_path: str,
    payee_id: str,
    name: str = "",
    transfer_acct: Optional[str] = None,
) -> None:
    """Create or update a payee.

    A payee with ``transfer_acct`` set is the counterpart of a transfer to
    that account; its transactions are never considered for schedules.
    """
    conn = _connect(db_path)
    try:
        conn.execute(
            """
            INSERT INTO payees (id, name, transfer_acct) VALUES (?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET name = excluded.name,
                                          transfer_acct = excluded.transfer_acct
            """,
            (payee_id, name or payee_id, transfer_acct),
        )
        conn.commit()
    finally:
        conn.close()


def append_transactions(transactions: Iterable[Transaction], db_path: str) -> None:
    """Persist transactions into a SQLite ledger.

    Accounts and payees referenced by the transactions are created when they
    do not exist yet. Rows with an existing id are left untouched.
    """
    transactions = list(transactions)
    if not transactions:
        return

    conn = _connect(db_path)
    try:
        conn.executemany(
            "INSERT OR IGNORE INTO accounts (id, name) VALUES (?, ?)",
            {(tx.account, tx.account) for tx in transactions},
        )
        conn.executemany(
            "INSERT OR IGNORE INTO payees (id, name) VALUES (?, ?)",
            {(tx.payee, tx.payee) for tx in transactions if tx.payee},
        )
        conn.executemany(
            """
            INSERT OR IGNORE INTO transactions
            (id, account, payee, amount, date, parent_id, is_parent, is_child,
             schedule)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    tx.id,
                    tx.account,
                    tx.payee,
                    int(tx.amount),
                    tx.date.isoformat(),
                    tx.parent_id,
                    int(tx.is_parent),
                    int(tx.is_child),
                    tx.schedule,
                )
                for tx in transactions
            ],
        )
        conn.commit()
    finally:
        conn.close()


def _to_param(value):
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return int(value)
    return value


def _compile_comparison(column: str, op: str, operand) -> Tuple[str, list]:
    if op not in _OPERATORS:
        raise ValueError(f"Unknown filter operator '{op}'")
    if operand is None:
        if op == "$eq":
            return f"{column} IS NULL", []
        if op == "$ne":
            return f"{column} IS NOT NULL", []
        raise ValueError(f"Operator '{op}' cannot compare against null")
    return f"{column} {_OPERATORS[op]} ?", [_to_param(operand)]


def _compile_filter(expr) -> Tuple[str, list]:
    """Compile a filter expression into a SQL condition and its parameters.

    A filter is a mapping of field names to values (equality, ``None`` meaning
    ``IS NULL``) or to ``{operator: operand}`` mappings, plus the ``$and`` and
    ``$or`` combinators taking lists of filters. A bare list is an ``$and``.
    """
    if isinstance(expr, (list, tuple)):
        expr = {"$and": list(expr)}

    clauses: List[str] = []
    params: list = []
    for key, value in expr.items():
        if key in ("$and", "$or"):
            parts = [_compile_filter(sub) for sub in value]
            if not parts:
                clauses.append("1" if key == "$and" else "0")
                continue
            joiner = " AND " if key == "$and" else " OR "
            clauses.append("(" + joiner.join(sql for sql, _ in parts) + ")")
            for _, sub_params in parts:
                params.extend(sub_params)
            continue

        column = _FIELD_COLUMNS.get(key)
        if column is None:
            raise ValueError(f"Unknown filter field '{key}'")
        if isinstance(value, dict):
            for op, operand in value.items():
                sql, sub_params = _compile_comparison(column, op, operand)
                clauses.append(sql)
                params.extend(sub_params)
        else:
            sql, sub_params = _compile_comparison(column, "$eq", value)
            clauses.append(sql)
            params.extend(sub_params)

    return (" AND ".join(clauses) or "1"), params


def _row_to_transaction(row) -> Transaction:
    return Transaction(
        id=row[0],
        account=row[1],
        payee=row[2],
        amount=int(row[3]),
        date=date.fromisoformat(row[4]),
        parent_id=row[5],
        is_parent=bool(row[6]),
        is_child=bool(row[7]),
        schedule=row[8],
        is_transfer=row[9] is not None,
    )


def query_transactions(
    db_path: str,
    filters=None,
    splits: str = "inline",
) -> List[Transaction]:
    """Retrieve transactions matching a filter expression.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file.
    filters:
        Optional filter expression, see ``_compile_filter``.
    splits:
        ``inline`` hides split parents, ``none`` hides split children and
        ``all`` returns every row.
    """
    if splits not in _SPLIT_MODES:
        raise ValueError(f"Unknown splits mode '{splits}'")

    where, params = _compile_filter(filters or {})
    split_clause = _SPLIT_MODES[splits]
    if split_clause:
        where = f"({where}) AND {split_clause}"

    conn = _connect(db_path)
    try:
        rows = conn.execute(
            f"""
            SELECT t.id, t.account, t.payee, t.amount, t.date, t.parent_id,
                   t.is_parent, t.is_child, t.schedule, p.transfer_acct
            FROM transactions t
            LEFT JOIN payees p ON p.id = t.payee
            WHERE {where}
            ORDER BY t.date, t.id
            """,
            params,
        ).fetchall()
        return [_row_to_transaction(r) for r in rows]
    finally:
        conn.close()


def latest_transaction_date(db_path: str, account_id: str) -> Optional[date]:
    """Return the date of the newest top-level transaction of an account."""
    conn = _connect(db_path)
    try:
        row = conn.execute(
            """
            SELECT date FROM transactions
            WHERE account = ? AND parent_id IS NULL
            ORDER BY date DESC
            LIMIT 1
            """,
            (account_id,),
        ).fetchone()
    finally:
        conn.close()
    return date.fromisoformat(row[0]) if row else None


def list_open_accounts(db_path: str) -> List[Account]:
    conn = _connect(db_path)
    try:
        rows = conn.execute(
            "SELECT id, name, closed FROM accounts WHERE closed = 0 ORDER BY id"
        ).fetchall()
    finally:
        conn.close()
    return [Account(id=r[0], name=r[1], closed=bool(r[2])) for r in rows]
