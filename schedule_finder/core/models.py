# schedule_finder/core/models.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Optional, Tuple, Union


@dataclass
class Account:
    id: str
    name: str = ""
    closed: bool = False


@dataclass(frozen=True)
class Transaction:
    id: str
    account: str
    payee: Optional[str]
    amount: int
    date: date
    parent_id: Optional[str] = None
    is_parent: bool = False
    is_child: bool = False
    schedule: Optional[str] = None
    is_transfer: bool = False


@dataclass(frozen=True)
class RecurPattern:
    """One entry of a monthly rule: ``day`` or a weekday code like ``MO``."""

    type: str
    value: int

    def to_dict(self) -> dict:
        return {"type": self.type, "value": self.value}


@dataclass(frozen=True)
class RecurConfig:
    frequency: str
    start: date
    interval: int = 1
    patterns: Tuple[RecurPattern, ...] = ()

    def to_dict(self) -> dict:
        data = {
            "frequency": self.frequency,
            "interval": self.interval,
            "start": self.start.isoformat(),
        }
        if self.patterns:
            data["patterns"] = [p.to_dict() for p in self.patterns]
        return data


@dataclass(frozen=True)
class Skip:
    """Returned by a descriptor builder for an offset that must not be tried."""

    reason: str


BuildResult = Union[RecurConfig, Skip]


@dataclass(frozen=True)
class OccurrenceWindow:
    date: date
    transactions: Tuple[Transaction, ...] = ()


@dataclass(frozen=True)
class CandidateMatch:
    rank: float
    amount: int
    account: str
    payee: Optional[str]
    date: RecurConfig
    exact_date: bool
    exact_amount: bool


@dataclass(frozen=True)
class Condition:
    op: str
    field: str
    value: object

    def to_dict(self) -> dict:
        value = self.value
        if isinstance(value, RecurConfig):
            value = value.to_dict()
        elif isinstance(value, date):
            value = value.isoformat()
        return {"op": self.op, "field": self.field, "value": value}


@dataclass(frozen=True)
class Schedule:
    id: str
    account: str
    payee: Optional[str]
    date: RecurConfig
    amount: int
    conditions: Tuple[Condition, ...] = field(default_factory=tuple)

    @property
    def date_condition(self) -> Condition:
        return next(c for c in self.conditions if c.field == "date")

    def condition_op(self, field_name: str) -> Optional[str]:
        cond = next((c for c in self.conditions if c.field == field_name), None)
        return cond.op if cond else None

    def with_date(self, config: RecurConfig) -> "Schedule":
        conditions = tuple(
            replace(c, value=config) if c.field == "date" else c
            for c in self.conditions
        )
        return replace(self, date=config, conditions=conditions)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "account": self.account,
            "payee": self.payee,
            "amount": self.amount,
            "date": self.date.to_dict(),
            "conditions": [c.to_dict() for c in self.conditions],
        }
