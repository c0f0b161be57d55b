from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
import sqlite3

from ...utils.validators import non_empty
from ...utils.helpers import (
    money_from_db,
    money_to_db,
    weight_from_db,
    weight_to_db,
)


# Domain-level error the caller can surface directly (e.g., form error)
class DomainError(Exception):
    pass


@dataclass
class Item:
    item_id: int | None
    name: str
    name_english: str | None
    unit_price: Decimal
    current_stock: Decimal
    is_active: bool = True


class ItemsRepo:
    """
    Items (fish varieties).

    `current_stock` is owned by the stock ledger: it is only moved through
    adjust_stock(), always together with a stock_movements row.
    """

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    @staticmethod
    def _from_row(r: sqlite3.Row) -> Item:
        return Item(
            item_id=int(r["item_id"]),
            name=r["name"],
            name_english=r["name_english"],
            unit_price=money_from_db(r["unit_price"]),
            current_stock=weight_from_db(r["current_stock"]),
            is_active=bool(r["is_active"]),
        )

    # ---- Queries ----------------------------------------------------------

    def get(self, item_id: int) -> Item | None:
        r = self.conn.execute(
            "SELECT * FROM items WHERE item_id=?", (int(item_id),)
        ).fetchone()
        return self._from_row(r) if r else None

    def list_items(self, active_only: bool = True) -> list[Item]:
        sql = "SELECT * FROM items"
        if active_only:
            sql += " WHERE is_active = 1"
        sql += " ORDER BY name COLLATE NOCASE"
        return [self._from_row(r) for r in self.conn.execute(sql)]

    def name_exists(self, name: str, exclude_id: int | None = None) -> bool:
        if exclude_id is None:
            row = self.conn.execute(
                "SELECT 1 FROM items WHERE name=? AND is_active=1 LIMIT 1", (name.strip(),)
            ).fetchone()
        else:
            row = self.conn.execute(
                "SELECT 1 FROM items WHERE name=? AND is_active=1 AND item_id<>? LIMIT 1",
                (name.strip(), int(exclude_id)),
            ).fetchone()
        return row is not None

    def has_transactions(self, item_id: int) -> bool:
        row = self.conn.execute(
            "SELECT 1 FROM stock_movements WHERE item_id=? AND kind<>'opening' LIMIT 1",
            (int(item_id),),
        ).fetchone()
        return row is not None

    # ---- Mutations --------------------------------------------------------

    def create(self, name: str, name_english: str | None = None, unit_price=0) -> int:
        """
        Insert a new item with zero stock. Opening stock is a stock movement,
        see StockLedger.set_opening_stock().
        """
        if not non_empty(name):
            raise DomainError("Item name cannot be empty.")
        if self.name_exists(name):
            raise DomainError(f"An item named '{name.strip()}' already exists.")
        cur = self.conn.execute(
            "INSERT INTO items(name, name_english, unit_price) VALUES (?,?,?)",
            (name.strip(), name_english, money_to_db(unit_price)),
        )
        self.conn.commit()
        return int(cur.lastrowid)

    def deactivate(self, item_id: int) -> None:
        """Soft delete; stock history stays for reports."""
        self.conn.execute("UPDATE items SET is_active=0 WHERE item_id=?", (int(item_id),))
        self.conn.commit()

    def adjust_stock(self, item_id: int, delta: Decimal) -> None:
        """current_stock += delta. No commit; runs inside the caller's unit of work."""
        self.conn.execute(
            "UPDATE items SET current_stock = current_stock + ? WHERE item_id=?",
            (weight_to_db(delta), int(item_id)),
        )
