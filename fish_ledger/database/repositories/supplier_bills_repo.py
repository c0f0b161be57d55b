from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
import sqlite3
from typing import ClassVar

from ...utils.helpers import (
    money_from_db,
    money_to_db,
    pct_from_db,
    pct_to_db,
    weight_from_db,
    weight_to_db,
)
from .numbering import make_reference, next_number


@dataclass
class SupplierBill:
    bill_id: int | None
    bill_number: str | None
    supplier_id: int
    date: str
    date_from: str
    date_to: str
    total_weight: Decimal
    gross_amount: Decimal
    commission_pct: Decimal
    commission_amount: Decimal
    drugs_charges: Decimal
    fare_charges: Decimal
    labor_charges: Decimal
    ice_charges: Decimal
    total_charges: Decimal
    net_payable: Decimal
    concession_amount: Decimal
    total_payable: Decimal
    cash_paid: Decimal
    balance_amount: Decimal
    status: str = "draft"
    notes: str | None = None

    kind: ClassVar[str] = "supplier_bill"

    @property
    def transaction_id(self) -> int | None:
        return self.bill_id

    @property
    def number(self) -> str | None:
        return self.bill_number

    @property
    def reference(self) -> str:
        return make_reference(self.kind, self.bill_id)


# column name -> (dataclass attribute, to_db, from_db); header order for INSERT/UPDATE
_MONEY = (money_to_db, money_from_db)
_COLUMNS = (
    ("supplier_id", int, int),
    ("date", str, str),
    ("date_from", str, str),
    ("date_to", str, str),
    ("total_weight", weight_to_db, weight_from_db),
    ("gross_amount", *_MONEY),
    ("commission_pct", pct_to_db, pct_from_db),
    ("commission_amount", *_MONEY),
    ("drugs_charges", *_MONEY),
    ("fare_charges", *_MONEY),
    ("labor_charges", *_MONEY),
    ("ice_charges", *_MONEY),
    ("total_charges", *_MONEY),
    ("net_payable", *_MONEY),
    ("concession_amount", *_MONEY),
    ("total_payable", *_MONEY),
    ("cash_paid", *_MONEY),
    ("balance_amount", *_MONEY),
    ("status", str, str),
)


class SupplierBillsRepo:
    """
    Supplier (consignor) bills. A bill carries no lines of its own: its gross
    amount and weight are aggregated from the supplier's sale lines in
    [date_from, date_to] when the bill is computed. Writes never commit.
    """

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    def get(self, bill_id: int) -> SupplierBill | None:
        r = self.conn.execute(
            "SELECT * FROM supplier_bills WHERE bill_id=?", (int(bill_id),)
        ).fetchone()
        if not r:
            return None
        values = {col: from_db(r[col]) for col, _to_db, from_db in _COLUMNS}
        return SupplierBill(
            bill_id=int(r["bill_id"]),
            bill_number=r["bill_number"],
            notes=r["notes"],
            **values,
        )

    def list_bills(self, supplier_id: int | None = None) -> list[dict]:
        sql = """
            SELECT b.bill_id, b.bill_number, b.date, b.date_from, b.date_to,
                   b.supplier_id, a.name AS supplier_name,
                   b.total_payable, b.balance_amount, b.status
            FROM supplier_bills b
            JOIN accounts a ON a.account_id = b.supplier_id
        """
        params: list = []
        if supplier_id is not None:
            sql += " WHERE b.supplier_id = ?"
            params.append(int(supplier_id))
        sql += " ORDER BY b.date DESC, b.bill_id DESC"
        out = []
        for r in self.conn.execute(sql, params):
            d = dict(r)
            d["total_payable"] = money_from_db(d["total_payable"])
            d["balance_amount"] = money_from_db(d["balance_amount"])
            out.append(d)
        return out

    # ---- WRITE (no commit) -------------------------------------------------

    def _params(self, b: SupplierBill) -> tuple:
        return tuple(to_db(getattr(b, col)) for col, to_db, _from_db in _COLUMNS) + (b.notes,)

    def insert(self, b: SupplierBill) -> int:
        b.bill_number = next_number(self.conn, "supplier_bill")
        cols = [c for c, _t, _f in _COLUMNS] + ["notes", "bill_number"]
        placeholders = ",".join("?" for _ in cols)
        cur = self.conn.execute(
            f"INSERT INTO supplier_bills({', '.join(cols)}) VALUES ({placeholders})",
            self._params(b) + (b.bill_number,),
        )
        b.bill_id = int(cur.lastrowid)
        return b.bill_id

    def update(self, b: SupplierBill) -> None:
        cols = [c for c, _t, _f in _COLUMNS] + ["notes"]
        assignments = ", ".join(f"{c}=?" for c in cols)
        self.conn.execute(
            f"UPDATE supplier_bills SET {assignments}, updated_at=CURRENT_TIMESTAMP WHERE bill_id=?",
            self._params(b) + (int(b.bill_id),),
        )

    def delete(self, bill_id: int) -> None:
        self.conn.execute("DELETE FROM supplier_bills WHERE bill_id=?", (int(bill_id),))

    def set_status(self, bill_id: int, status: str) -> None:
        self.conn.execute(
            "UPDATE supplier_bills SET status=?, updated_at=CURRENT_TIMESTAMP WHERE bill_id=?",
            (status, int(bill_id)),
        )
