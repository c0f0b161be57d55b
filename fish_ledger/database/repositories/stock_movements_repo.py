from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
import sqlite3

from ...utils.helpers import weight_from_db, weight_to_db


@dataclass
class StockMovement:
    movement_id: int | None
    item_id: int
    reference: str
    kind: str              # 'opening' | 'purchase' | 'sale'
    quantity: Decimal      # signed: + into stock, - out of stock
    date: str


class StockMovementsRepo:
    """
    Persistence for stock_movements. Exactly one row per (reference, item_id).
    All writes leave commit/rollback to the caller's unit of work.
    """

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    @staticmethod
    def _from_row(r: sqlite3.Row) -> StockMovement:
        return StockMovement(
            movement_id=int(r["movement_id"]),
            item_id=int(r["item_id"]),
            reference=r["reference"],
            kind=r["kind"],
            quantity=weight_from_db(r["quantity"]),
            date=r["date"],
        )

    def list_for_reference(self, reference: str) -> list[StockMovement]:
        rows = self.conn.execute(
            "SELECT * FROM stock_movements WHERE reference=? ORDER BY item_id",
            (reference,),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def list_for_item(self, item_id: int) -> list[StockMovement]:
        rows = self.conn.execute(
            "SELECT * FROM stock_movements WHERE item_id=? ORDER BY date, movement_id",
            (int(item_id),),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def quantity_for(self, reference: str, item_id: int) -> Decimal:
        row = self.conn.execute(
            "SELECT COALESCE(SUM(quantity), 0) AS q FROM stock_movements WHERE reference=? AND item_id=?",
            (reference, int(item_id)),
        ).fetchone()
        return weight_from_db(row["q"])

    def sum_for_item(self, item_id: int) -> Decimal:
        row = self.conn.execute(
            "SELECT COALESCE(SUM(quantity), 0) AS q FROM stock_movements WHERE item_id=?",
            (int(item_id),),
        ).fetchone()
        return weight_from_db(row["q"])

    def upsert(self, *, item_id: int, reference: str, kind: str, quantity: Decimal, date: str) -> None:
        """
        Add `quantity` to the (reference, item_id) movement, creating it if needed.
        """
        self.conn.execute(
            """
            INSERT INTO stock_movements(item_id, reference, kind, quantity, date)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(reference, item_id) DO UPDATE SET
                quantity = quantity + excluded.quantity,
                date     = excluded.date
            """,
            (int(item_id), reference, kind, weight_to_db(quantity), date),
        )

    def delete_for_reference(self, reference: str) -> int:
        cur = self.conn.execute("DELETE FROM stock_movements WHERE reference=?", (reference,))
        return cur.rowcount
