# fish_ledger/modules/inventory/stock_ledger.py
"""
Stock ledger: authoritative quantity on hand per item.

items.current_stock always equals the signed sum of the item's rows in
stock_movements. Both are changed together, only through this class, and
only inside the caller's unit of work (nothing here commits).
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
import logging
import sqlite3
from typing import Optional

from ...database.repositories.items_repo import ItemsRepo
from ...database.repositories.stock_movements_repo import StockMovement, StockMovementsRepo
from ...utils.helpers import NumberLike, ZERO, weight

_log = logging.getLogger(__name__)

OPENING_KIND = "opening"


def opening_reference(item_id: int) -> str:
    return f"{OPENING_KIND}:{int(item_id)}"


@dataclass(frozen=True)
class Availability:
    ok: bool
    available: Decimal


class StockLedger:
    def __init__(self, conn: sqlite3.Connection, *, allow_negative_stock: bool = False):
        self.conn = conn
        self.allow_negative_stock = bool(allow_negative_stock)
        self.items = ItemsRepo(conn)
        self.movements = StockMovementsRepo(conn)

    # ---- Queries ----------------------------------------------------------

    def current_stock(self, item_id: int) -> Decimal:
        item = self.items.get(item_id)
        return item.current_stock if item else weight(ZERO)

    def movements_for(self, reference: str) -> list[StockMovement]:
        return self.movements.list_for_reference(reference)

    def check_availability(
        self,
        item_id: int,
        required_qty: NumberLike,
        exclude_reference: Optional[str] = None,
    ) -> Availability:
        """
        available = current_stock + what `exclude_reference` already took out.

        A transaction being edited must not be rejected for its own earlier
        consumption, so the quantity it currently holds is added back before
        comparing. With allow_negative_stock the check always passes but
        still reports the true figure.
        """
        available = self.current_stock(item_id)
        if exclude_reference:
            # movements are signed; a sale holds a negative quantity
            available -= self.movements.quantity_for(exclude_reference, item_id)
        available = weight(available)
        if self.allow_negative_stock:
            return Availability(ok=True, available=available)
        return Availability(ok=available >= weight(required_qty), available=available)

    # ---- Mutations (no commit) -------------------------------------------

    def apply_movement(
        self,
        item_id: int,
        signed_qty: NumberLike,
        reference: str,
        kind: str,
        date: str,
    ) -> None:
        qty = weight(signed_qty)
        if qty == 0:
            return
        self.movements.upsert(
            item_id=item_id, reference=reference, kind=kind, quantity=qty, date=date
        )
        self.items.adjust_stock(item_id, qty)

    def reverse_transaction(self, reference: str) -> list[StockMovement]:
        """
        Back every movement of `reference` out of current_stock and delete
        the movements. Returns what was reversed.
        """
        reversed_moves = self.movements.list_for_reference(reference)
        for m in reversed_moves:
            self.items.adjust_stock(m.item_id, -m.quantity)
        if reversed_moves:
            self.movements.delete_for_reference(reference)
            _log.debug("reversed %d stock movement(s) for %s", len(reversed_moves), reference)
        return reversed_moves

    def set_opening_stock(self, item_id: int, qty: NumberLike, date: str) -> None:
        """Replace the item's opening movement with `qty`."""
        ref = opening_reference(item_id)
        self.reverse_transaction(ref)
        self.apply_movement(item_id, qty, ref, OPENING_KIND, date)
