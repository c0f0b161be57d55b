# fish_ledger/modules/reconciliation/results.py
"""
Result values returned by the coordinator and the report aggregator.

Expected business failures (not enough stock, posted lock, bad date range,
unknown ids, malformed input) come back as `Result.fail(<error>)`; they are
never raised. Storage failures are the only exceptions callers see
(PersistenceError).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class StockShortfall:
    item_id: int
    required: Decimal
    available: Decimal


@dataclass(frozen=True)
class InsufficientStock:
    shortfalls: Tuple[StockShortfall, ...] = field(default_factory=tuple)

    @property
    def message(self) -> str:
        parts = [
            f"item {s.item_id}: required {s.required}, available {s.available}"
            for s in self.shortfalls
        ]
        return "Insufficient stock (" + "; ".join(parts) + ")"


@dataclass(frozen=True)
class Locked:
    kind: str
    transaction_id: int

    @property
    def message(self) -> str:
        return f"{self.kind} {self.transaction_id} is posted and cannot be changed."


@dataclass(frozen=True)
class InvalidRange:
    date_from: Any
    date_to: Any

    @property
    def message(self) -> str:
        return f"Invalid date range: {self.date_from} .. {self.date_to}"


@dataclass(frozen=True)
class NotFound:
    entity: str
    entity_id: Any

    @property
    def message(self) -> str:
        return f"{self.entity} {self.entity_id} not found."


@dataclass(frozen=True)
class InvalidInput:
    message: str


ValidationError = (InsufficientStock, Locked, InvalidRange, NotFound, InvalidInput)


@dataclass(frozen=True)
class Result(Generic[T]):
    ok: bool
    value: Optional[T] = None
    error: Optional[Any] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(ok=True, value=value)

    @classmethod
    def fail(cls, error: Any) -> "Result[T]":
        return cls(ok=False, error=error)

    def __bool__(self) -> bool:
        return self.ok
