from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
import sqlite3
from typing import ClassVar, Optional

from ...utils.helpers import money_from_db, money_to_db, weight_from_db, weight_to_db
from .numbering import make_reference, next_number


@dataclass
class SaleLine:
    item_id: int
    gross_weight: Decimal
    tare_weight: Decimal
    net_weight: Decimal
    rate: Decimal
    amount: Decimal
    grocery_charges: Decimal
    ice_charges: Decimal
    line_net_amount: Decimal
    from_stock: bool = True
    line_number: int = 0
    line_id: int | None = None


@dataclass
class Sale:
    sale_id: int | None
    sale_number: str | None
    customer_id: int
    supplier_id: int | None
    date: str
    vehicle_number: str | None
    total_weight: Decimal
    gross_amount: Decimal
    total_charges: Decimal
    net_amount: Decimal
    cash_received: Decimal
    receipt_amount: Decimal
    balance_amount: Decimal
    status: str = "draft"
    notes: str | None = None
    lines: list[SaleLine] = field(default_factory=list)

    kind: ClassVar[str] = "sale"

    @property
    def transaction_id(self) -> int | None:
        return self.sale_id

    @property
    def number(self) -> str | None:
        return self.sale_number

    @property
    def reference(self) -> str:
        return make_reference(self.kind, self.sale_id)


class SalesRepo:
    """
    Sale headers + lines.

    Key behavior:
      - Lines with from_stock=0 are consignment lines sold straight off a
        supplier's vehicle; they carry amounts but no stock movement.
      - supplier_id on the header names the consignor; supplier bills and
        the vendor sales report aggregate over it.
      - Writes never commit (see PurchasesRepo).
    """

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    # ---------------------------------------------------------------------
    # READ
    # ---------------------------------------------------------------------
    def get(self, sale_id: int) -> Sale | None:
        h = self.conn.execute("SELECT * FROM sales WHERE sale_id=?", (int(sale_id),)).fetchone()
        if not h:
            return None
        return Sale(
            sale_id=int(h["sale_id"]),
            sale_number=h["sale_number"],
            customer_id=int(h["customer_id"]),
            supplier_id=None if h["supplier_id"] is None else int(h["supplier_id"]),
            date=h["date"],
            vehicle_number=h["vehicle_number"],
            total_weight=weight_from_db(h["total_weight"]),
            gross_amount=money_from_db(h["gross_amount"]),
            total_charges=money_from_db(h["total_charges"]),
            net_amount=money_from_db(h["net_amount"]),
            cash_received=money_from_db(h["cash_received"]),
            receipt_amount=money_from_db(h["receipt_amount"]),
            balance_amount=money_from_db(h["balance_amount"]),
            status=h["status"],
            notes=h["notes"],
            lines=self.list_items(int(h["sale_id"])),
        )

    def list_items(self, sale_id: int) -> list[SaleLine]:
        rows = self.conn.execute(
            "SELECT * FROM sale_items WHERE sale_id=? ORDER BY line_number, line_id",
            (int(sale_id),),
        ).fetchall()
        return [
            SaleLine(
                item_id=int(r["item_id"]),
                gross_weight=weight_from_db(r["gross_weight"]),
                tare_weight=weight_from_db(r["tare_weight"]),
                net_weight=weight_from_db(r["net_weight"]),
                rate=money_from_db(r["rate"]),
                amount=money_from_db(r["amount"]),
                grocery_charges=money_from_db(r["grocery_charges"]),
                ice_charges=money_from_db(r["ice_charges"]),
                line_net_amount=money_from_db(r["line_net_amount"]),
                from_stock=bool(r["from_stock"]),
                line_number=int(r["line_number"]),
                line_id=int(r["line_id"]),
            )
            for r in rows
        ]

    def list_sales(
        self,
        *,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        customer_id: Optional[int] = None,
    ) -> list[dict]:
        where: list[str] = []
        params: list = []
        if date_from:
            where.append("s.date >= ?")
            params.append(date_from)
        if date_to:
            where.append("s.date <= ?")
            params.append(date_to)
        if customer_id is not None:
            where.append("s.customer_id = ?")
            params.append(int(customer_id))
        sql = """
            SELECT s.sale_id, s.sale_number, s.date, s.customer_id,
                   c.name AS customer_name, s.vehicle_number,
                   s.total_weight, s.net_amount, s.balance_amount, s.status
            FROM sales s
            JOIN accounts c ON c.account_id = s.customer_id
        """
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY s.date DESC, s.sale_id DESC"
        out = []
        for r in self.conn.execute(sql, params):
            d = dict(r)
            d["total_weight"] = weight_from_db(d["total_weight"])
            d["net_amount"] = money_from_db(d["net_amount"])
            d["balance_amount"] = money_from_db(d["balance_amount"])
            out.append(d)
        return out

    def lines_for_supplier(self, supplier_id: int, date_from: str, date_to: str) -> list[dict]:
        """
        Sale lines consigned by `supplier_id` with sale date in [date_from, date_to],
        oldest first. Source rows for supplier bill previews.
        """
        rows = self.conn.execute(
            """
            SELECT si.line_id, si.sale_id, s.sale_number, s.date AS sale_date,
                   i.name AS item_name, si.net_weight, si.rate, si.amount
            FROM sale_items si
            JOIN sales s ON s.sale_id = si.sale_id
            JOIN items i ON i.item_id = si.item_id
            WHERE s.supplier_id = ?
              AND s.date >= ?
              AND s.date <= ?
            ORDER BY s.date ASC, s.sale_id ASC, si.line_number ASC
            """,
            (int(supplier_id), date_from, date_to),
        ).fetchall()
        out = []
        for r in rows:
            d = dict(r)
            d["net_weight"] = weight_from_db(d["net_weight"])
            d["rate"] = money_from_db(d["rate"])
            d["amount"] = money_from_db(d["amount"])
            out.append(d)
        return out

    # ---------------------------------------------------------------------
    # WRITE (no commit)
    # ---------------------------------------------------------------------
    def _header_params(self, s: Sale) -> tuple:
        return (
            int(s.customer_id),
            None if s.supplier_id is None else int(s.supplier_id),
            s.date,
            s.vehicle_number,
            weight_to_db(s.total_weight),
            money_to_db(s.gross_amount),
            money_to_db(s.total_charges),
            money_to_db(s.net_amount),
            money_to_db(s.cash_received),
            money_to_db(s.receipt_amount),
            money_to_db(s.balance_amount),
            s.status,
            s.notes,
        )

    def _insert_lines(self, s: Sale) -> None:
        for n, ln in enumerate(s.lines, start=1):
            ln.line_number = n
            cur = self.conn.execute(
                """
                INSERT INTO sale_items(
                    sale_id, line_number, item_id, gross_weight, tare_weight, net_weight,
                    rate, amount, grocery_charges, ice_charges, line_net_amount, from_stock
                ) VALUES (?,?,?,?,?,?,?,?,?,?,?,?)
                """,
                (
                    int(s.sale_id),
                    n,
                    int(ln.item_id),
                    weight_to_db(ln.gross_weight),
                    weight_to_db(ln.tare_weight),
                    weight_to_db(ln.net_weight),
                    money_to_db(ln.rate),
                    money_to_db(ln.amount),
                    money_to_db(ln.grocery_charges),
                    money_to_db(ln.ice_charges),
                    money_to_db(ln.line_net_amount),
                    1 if ln.from_stock else 0,
                ),
            )
            ln.line_id = int(cur.lastrowid)

    def insert(self, s: Sale) -> int:
        s.sale_number = next_number(self.conn, "sale")
        cur = self.conn.execute(
            """
            INSERT INTO sales(
                customer_id, supplier_id, date, vehicle_number, total_weight,
                gross_amount, total_charges, net_amount, cash_received,
                receipt_amount, balance_amount, status, notes, sale_number
            ) VALUES (?,?,?,?,?,?,?,?,?,?,?,?,?,?)
            """,
            self._header_params(s) + (s.sale_number,),
        )
        s.sale_id = int(cur.lastrowid)
        self._insert_lines(s)
        return s.sale_id

    def update(self, s: Sale) -> None:
        self.conn.execute(
            """
            UPDATE sales SET
                customer_id=?, supplier_id=?, date=?, vehicle_number=?, total_weight=?,
                gross_amount=?, total_charges=?, net_amount=?, cash_received=?,
                receipt_amount=?, balance_amount=?, status=?, notes=?,
                updated_at=CURRENT_TIMESTAMP
             WHERE sale_id=?
            """,
            self._header_params(s) + (int(s.sale_id),),
        )
        self.conn.execute("DELETE FROM sale_items WHERE sale_id=?", (int(s.sale_id),))
        self._insert_lines(s)

    def delete(self, sale_id: int) -> None:
        self.conn.execute("DELETE FROM sale_items WHERE sale_id=?", (int(sale_id),))
        self.conn.execute("DELETE FROM sales WHERE sale_id=?", (int(sale_id),))

    def set_status(self, sale_id: int, status: str) -> None:
        self.conn.execute(
            "UPDATE sales SET status=?, updated_at=CURRENT_TIMESTAMP WHERE sale_id=?",
            (status, int(sale_id)),
        )
