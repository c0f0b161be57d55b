from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
import sqlite3
from typing import Optional

from ...utils.helpers import money_from_db, money_to_db


@dataclass
class LedgerEntry:
    entry_id: int | None
    account_id: int
    date: str
    reference: str
    entry_type: str
    debit: Decimal
    credit: Decimal
    description: str | None = None


class LedgerEntriesRepo:
    """
    Persistence for ledger_entries.

    Ordering contract for every list method: date, then entry_id (insertion
    order). The running-balance fold depends on it.
    """

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    @staticmethod
    def _from_row(r: sqlite3.Row) -> LedgerEntry:
        return LedgerEntry(
            entry_id=int(r["entry_id"]),
            account_id=int(r["account_id"]),
            date=r["date"],
            reference=r["reference"],
            entry_type=r["entry_type"],
            debit=money_from_db(r["debit"]),
            credit=money_from_db(r["credit"]),
            description=r["description"],
        )

    # ---- Queries ----------------------------------------------------------

    def list_for_reference(self, reference: str) -> list[LedgerEntry]:
        rows = self.conn.execute(
            "SELECT * FROM ledger_entries WHERE reference=? ORDER BY date, entry_id",
            (reference,),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def list_for_account(
        self,
        account_id: int,
        date_from: Optional[str] = None,   # inclusive 'YYYY-MM-DD'
        date_to: Optional[str] = None,     # inclusive 'YYYY-MM-DD'
    ) -> list[LedgerEntry]:
        where = ["account_id = ?"]
        params: list = [int(account_id)]
        if date_from:
            where.append("date >= ?")
            params.append(date_from)
        if date_to:
            where.append("date <= ?")
            params.append(date_to)
        sql = (
            "SELECT * FROM ledger_entries WHERE "
            + " AND ".join(where)
            + " ORDER BY date, entry_id"
        )
        return [self._from_row(r) for r in self.conn.execute(sql, params)]

    def net_for_account(self, account_id: int, *, before: Optional[str] = None) -> Decimal:
        """SUM(debit - credit), optionally only entries dated strictly before `before`."""
        sql = "SELECT COALESCE(SUM(debit - credit), 0) AS n FROM ledger_entries WHERE account_id=?"
        params: list = [int(account_id)]
        if before:
            sql += " AND date < ?"
            params.append(before)
        row = self.conn.execute(sql, params).fetchone()
        return money_from_db(row["n"])

    def net_for_reference(self, account_id: int, reference: str) -> Decimal:
        row = self.conn.execute(
            "SELECT COALESCE(SUM(debit - credit), 0) AS n FROM ledger_entries WHERE account_id=? AND reference=?",
            (int(account_id), reference),
        ).fetchone()
        return money_from_db(row["n"])

    # ---- Mutations (no commit) ------------------------------------------

    def insert(self, e: LedgerEntry) -> int:
        cur = self.conn.execute(
            """
            INSERT INTO ledger_entries(account_id, date, reference, entry_type, debit, credit, description)
            VALUES (?,?,?,?,?,?,?)
            """,
            (
                int(e.account_id),
                e.date,
                e.reference,
                e.entry_type,
                money_to_db(e.debit),
                money_to_db(e.credit),
                e.description,
            ),
        )
        e.entry_id = int(cur.lastrowid)
        return e.entry_id

    def delete_for_reference(self, reference: str) -> int:
        cur = self.conn.execute("DELETE FROM ledger_entries WHERE reference=?", (reference,))
        return cur.rowcount
