from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
import sqlite3
from typing import ClassVar, Optional

from ...utils.helpers import money_from_db, money_to_db, weight_from_db, weight_to_db
from .numbering import make_reference, next_number


@dataclass
class PurchaseLine:
    item_id: int
    weight: Decimal
    rate: Decimal
    amount: Decimal
    line_number: int = 0
    line_id: int | None = None


@dataclass
class Purchase:
    purchase_id: int | None
    purchase_number: str | None
    supplier_id: int
    date: str
    vehicle_number: str | None
    total_weight: Decimal
    gross_amount: Decimal
    concession_amount: Decimal
    net_amount: Decimal
    cash_paid: Decimal
    previous_balance: Decimal
    balance_amount: Decimal
    status: str = "draft"
    notes: str | None = None
    lines: list[PurchaseLine] = field(default_factory=list)

    kind: ClassVar[str] = "purchase"

    @property
    def transaction_id(self) -> int | None:
        return self.purchase_id

    @property
    def number(self) -> str | None:
        return self.purchase_number

    @property
    def reference(self) -> str:
        return make_reference(self.kind, self.purchase_id)


class PurchasesRepo:
    """
    Purchase headers + lines. Writes never commit; the reconciliation
    coordinator wraps them (with stock and ledger postings) in one unit of work.
    """

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    # ---------------------------------------------------------------------
    # READ
    # ---------------------------------------------------------------------
    def get(self, purchase_id: int) -> Purchase | None:
        h = self.conn.execute(
            "SELECT * FROM purchases WHERE purchase_id=?", (int(purchase_id),)
        ).fetchone()
        if not h:
            return None
        return Purchase(
            purchase_id=int(h["purchase_id"]),
            purchase_number=h["purchase_number"],
            supplier_id=int(h["supplier_id"]),
            date=h["date"],
            vehicle_number=h["vehicle_number"],
            total_weight=weight_from_db(h["total_weight"]),
            gross_amount=money_from_db(h["gross_amount"]),
            concession_amount=money_from_db(h["concession_amount"]),
            net_amount=money_from_db(h["net_amount"]),
            cash_paid=money_from_db(h["cash_paid"]),
            previous_balance=money_from_db(h["previous_balance"]),
            balance_amount=money_from_db(h["balance_amount"]),
            status=h["status"],
            notes=h["notes"],
            lines=self.list_items(int(h["purchase_id"])),
        )

    def list_items(self, purchase_id: int) -> list[PurchaseLine]:
        rows = self.conn.execute(
            "SELECT * FROM purchase_items WHERE purchase_id=? ORDER BY line_number, line_id",
            (int(purchase_id),),
        ).fetchall()
        return [
            PurchaseLine(
                item_id=int(r["item_id"]),
                weight=weight_from_db(r["weight"]),
                rate=money_from_db(r["rate"]),
                amount=money_from_db(r["amount"]),
                line_number=int(r["line_number"]),
                line_id=int(r["line_id"]),
            )
            for r in rows
        ]

    def list_purchases(
        self,
        *,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        supplier_id: Optional[int] = None,
    ) -> list[dict]:
        where: list[str] = []
        params: list = []
        if date_from:
            where.append("p.date >= ?")
            params.append(date_from)
        if date_to:
            where.append("p.date <= ?")
            params.append(date_to)
        if supplier_id is not None:
            where.append("p.supplier_id = ?")
            params.append(int(supplier_id))
        sql = """
            SELECT p.purchase_id, p.purchase_number, p.date, p.supplier_id,
                   a.name AS supplier_name, p.vehicle_number,
                   p.total_weight, p.net_amount, p.balance_amount, p.status
            FROM purchases p
            JOIN accounts a ON a.account_id = p.supplier_id
        """
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY p.date DESC, p.purchase_id DESC"
        out = []
        for r in self.conn.execute(sql, params):
            d = dict(r)
            d["total_weight"] = weight_from_db(d["total_weight"])
            d["net_amount"] = money_from_db(d["net_amount"])
            d["balance_amount"] = money_from_db(d["balance_amount"])
            out.append(d)
        return out

    # ---------------------------------------------------------------------
    # WRITE (no commit)
    # ---------------------------------------------------------------------
    def _header_params(self, p: Purchase) -> tuple:
        return (
            int(p.supplier_id),
            p.date,
            p.vehicle_number,
            weight_to_db(p.total_weight),
            money_to_db(p.gross_amount),
            money_to_db(p.concession_amount),
            money_to_db(p.net_amount),
            money_to_db(p.cash_paid),
            money_to_db(p.previous_balance),
            money_to_db(p.balance_amount),
            p.status,
            p.notes,
        )

    def _insert_lines(self, p: Purchase) -> None:
        for n, ln in enumerate(p.lines, start=1):
            ln.line_number = n
            cur = self.conn.execute(
                """
                INSERT INTO purchase_items(purchase_id, line_number, item_id, weight, rate, amount)
                VALUES (?,?,?,?,?,?)
                """,
                (
                    int(p.purchase_id),
                    n,
                    int(ln.item_id),
                    weight_to_db(ln.weight),
                    money_to_db(ln.rate),
                    money_to_db(ln.amount),
                ),
            )
            ln.line_id = int(cur.lastrowid)

    def insert(self, p: Purchase) -> int:
        p.purchase_number = next_number(self.conn, "purchase")
        cur = self.conn.execute(
            """
            INSERT INTO purchases(
                supplier_id, date, vehicle_number, total_weight, gross_amount,
                concession_amount, net_amount, cash_paid, previous_balance,
                balance_amount, status, notes, purchase_number
            ) VALUES (?,?,?,?,?,?,?,?,?,?,?,?,?)
            """,
            self._header_params(p) + (p.purchase_number,),
        )
        p.purchase_id = int(cur.lastrowid)
        self._insert_lines(p)
        return p.purchase_id

    def update(self, p: Purchase) -> None:
        """Rewrite header and rebuild lines; the document number is kept."""
        self.conn.execute(
            """
            UPDATE purchases SET
                supplier_id=?, date=?, vehicle_number=?, total_weight=?, gross_amount=?,
                concession_amount=?, net_amount=?, cash_paid=?, previous_balance=?,
                balance_amount=?, status=?, notes=?, updated_at=CURRENT_TIMESTAMP
             WHERE purchase_id=?
            """,
            self._header_params(p) + (int(p.purchase_id),),
        )
        self.conn.execute("DELETE FROM purchase_items WHERE purchase_id=?", (int(p.purchase_id),))
        self._insert_lines(p)

    def delete(self, purchase_id: int) -> None:
        self.conn.execute("DELETE FROM purchase_items WHERE purchase_id=?", (int(purchase_id),))
        self.conn.execute("DELETE FROM purchases WHERE purchase_id=?", (int(purchase_id),))

    def set_status(self, purchase_id: int, status: str) -> None:
        self.conn.execute(
            "UPDATE purchases SET status=?, updated_at=CURRENT_TIMESTAMP WHERE purchase_id=?",
            (status, int(purchase_id)),
        )
