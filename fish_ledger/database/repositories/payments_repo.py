from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
import sqlite3
from typing import ClassVar

from ...utils.helpers import money_from_db, money_to_db
from .numbering import make_reference, next_number


@dataclass
class Payment:
    payment_id: int | None
    payment_number: str | None
    account_id: int
    date: str
    amount: Decimal
    method: str = "cash"
    status: str = "draft"
    notes: str | None = None

    kind: ClassVar[str] = "payment"

    @property
    def transaction_id(self) -> int | None:
        return self.payment_id

    @property
    def number(self) -> str | None:
        return self.payment_number

    @property
    def reference(self) -> str:
        return make_reference(self.kind, self.payment_id)


class PaymentsRepo:
    """
    Standalone money movements: receipts from customers and payments to
    suppliers. Both credit the party's account. Writes never commit.
    """

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    @staticmethod
    def _from_row(r: sqlite3.Row) -> Payment:
        return Payment(
            payment_id=int(r["payment_id"]),
            payment_number=r["payment_number"],
            account_id=int(r["account_id"]),
            date=r["date"],
            amount=money_from_db(r["amount"]),
            method=r["method"],
            status=r["status"],
            notes=r["notes"],
        )

    def get(self, payment_id: int) -> Payment | None:
        r = self.conn.execute(
            "SELECT * FROM payments WHERE payment_id=?", (int(payment_id),)
        ).fetchone()
        return self._from_row(r) if r else None

    def list_for_account(self, account_id: int) -> list[Payment]:
        rows = self.conn.execute(
            "SELECT * FROM payments WHERE account_id=? ORDER BY date, payment_id",
            (int(account_id),),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def insert(self, p: Payment) -> int:
        p.payment_number = next_number(self.conn, "payment")
        cur = self.conn.execute(
            """
            INSERT INTO payments(payment_number, account_id, date, amount, method, status, notes)
            VALUES (?,?,?,?,?,?,?)
            """,
            (p.payment_number, int(p.account_id), p.date, money_to_db(p.amount), p.method, p.status, p.notes),
        )
        p.payment_id = int(cur.lastrowid)
        return p.payment_id

    def update(self, p: Payment) -> None:
        self.conn.execute(
            """
            UPDATE payments SET account_id=?, date=?, amount=?, method=?, status=?, notes=?,
                   updated_at=CURRENT_TIMESTAMP
             WHERE payment_id=?
            """,
            (int(p.account_id), p.date, money_to_db(p.amount), p.method, p.status, p.notes, int(p.payment_id)),
        )

    def delete(self, payment_id: int) -> None:
        self.conn.execute("DELETE FROM payments WHERE payment_id=?", (int(payment_id),))

    def set_status(self, payment_id: int, status: str) -> None:
        self.conn.execute(
            "UPDATE payments SET status=?, updated_at=CURRENT_TIMESTAMP WHERE payment_id=?",
            (status, int(payment_id)),
        )
