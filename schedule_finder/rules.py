# schedule_finder/rules.py
from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from typing import Iterable, List, Tuple

from schedule_finder.core.models import Condition, RecurConfig
from schedule_finder.recurring import take_dates, validate_recur_config

APPROX_DATE_DAYS = 2
DEFAULT_RECUR_DATE_BOUNDS = 100

_OPS = ("is", "isapprox")
_ID_FIELDS = ("account", "payee")


def approx_number_threshold(number: int) -> int:
    """Absolute tolerance for an ``isapprox`` amount match (7.5%, half up)."""
    return int(math.floor(abs(number) * 0.075 + 0.5))


def _date_filter(op: str, day: date) -> dict:
    if op == "isapprox":
        return {
            "$and": [
                {"date": {"$gte": day - timedelta(days=APPROX_DATE_DAYS)}},
                {"date": {"$lte": day + timedelta(days=APPROX_DATE_DAYS)}},
            ]
        }
    return {"date": day}


def _translate(cond: Condition, recur_date_bounds: int) -> Tuple[dict | None, List[str]]:
    if cond.op not in _OPS:
        return None, [f"Invalid operator '{cond.op}' for field '{cond.field}'."]

    if cond.field in _ID_FIELDS:
        # Transactions may have no payee; that matches payee IS NULL
        nullable = cond.field == "payee" and cond.value is None
        if not nullable and not isinstance(cond.value, str):
            return None, [f"Field '{cond.field}' needs an id, got {cond.value!r}."]
        if cond.op != "is":
            return None, [f"Field '{cond.field}' only supports 'is'."]
        return {cond.field: cond.value}, []

    if cond.field == "amount":
        if isinstance(cond.value, bool) or not isinstance(cond.value, int):
            return None, [f"Amount must be an integer, got {cond.value!r}."]
        if cond.op == "isapprox":
            threshold = approx_number_threshold(cond.value)
            return {
                "$and": [
                    {"amount": {"$gte": cond.value - threshold}},
                    {"amount": {"$lte": cond.value + threshold}},
                ]
            }, []
        return {"amount": cond.value}, []

    if cond.field == "date":
        if isinstance(cond.value, RecurConfig):
            errors = validate_recur_config(cond.value)
            if errors:
                return None, errors
            dates = take_dates(cond.value, recur_date_bounds)
            return {"$or": [_date_filter(cond.op, d) for d in dates]}, []
        if isinstance(cond.value, date) and not isinstance(cond.value, datetime):
            return _date_filter(cond.op, cond.value), []
        return None, [f"Invalid date value {cond.value!r}."]

    return None, [f"Unknown field '{cond.field}'."]


def conditions_to_filter(
    conditions: Iterable[Condition],
    recur_date_bounds: int = DEFAULT_RECUR_DATE_BOUNDS,
) -> Tuple[List[dict], List[str]]:
    """Translate schedule conditions into ledger filters.

    Returns ``(filters, errors)``. The filters are meant to be combined with
    ``$and``; when *errors* is non-empty the filters must not be used.
    ``recur_date_bounds`` caps how many occurrences of a recurring date
    condition are expanded into the filter.
    """
    filters: List[dict] = []
    errors: List[str] = []
    for cond in conditions:
        expr, problems = _translate(cond, recur_date_bounds)
        if problems:
            errors.extend(problems)
        else:
            filters.append(expr)
    return filters, errors
