from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
import sqlite3

from ...constants import ACCOUNT_KINDS
from ...utils.helpers import money_from_db, money_to_db, pct_from_db, pct_to_db
from ...utils.validators import non_empty


# Domain-level error the caller can surface directly (e.g., form error)
class DomainError(Exception):
    pass


@dataclass
class Account:
    account_id: int | None
    kind: str                 # 'customer' | 'supplier'
    name: str
    name_english: str | None
    phone: str | None
    opening_balance: Decimal
    current_balance: Decimal
    default_commission_pct: Decimal | None = None
    is_active: bool = True


class AccountsRepo:
    """
    Customers and suppliers.

    `current_balance` is maintained by the account ledger (adjust_balance)
    and always equals opening_balance + SUM(debit - credit) of the account's
    ledger entries.
    """

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    @staticmethod
    def _from_row(r: sqlite3.Row) -> Account:
        pct = r["default_commission_pct"]
        return Account(
            account_id=int(r["account_id"]),
            kind=r["kind"],
            name=r["name"],
            name_english=r["name_english"],
            phone=r["phone"],
            opening_balance=money_from_db(r["opening_balance"]),
            current_balance=money_from_db(r["current_balance"]),
            default_commission_pct=None if pct is None else pct_from_db(pct),
            is_active=bool(r["is_active"]),
        )

    # ---- Queries ----------------------------------------------------------

    def get(self, account_id: int) -> Account | None:
        r = self.conn.execute(
            "SELECT * FROM accounts WHERE account_id=?", (int(account_id),)
        ).fetchone()
        return self._from_row(r) if r else None

    def list_accounts(self, kind: str | None = None, active_only: bool = True) -> list[Account]:
        where: list[str] = []
        params: list = []
        if kind is not None:
            where.append("kind = ?")
            params.append(kind)
        if active_only:
            where.append("is_active = 1")
        sql = "SELECT * FROM accounts"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY name COLLATE NOCASE, account_id"
        return [self._from_row(r) for r in self.conn.execute(sql, params)]

    def search(self, term: str, kind: str | None = None) -> list[Account]:
        pattern = f"%{term.strip()}%"
        sql = (
            "SELECT * FROM accounts "
            "WHERE is_active = 1 AND (name LIKE ? OR COALESCE(name_english,'') LIKE ? OR COALESCE(phone,'') LIKE ?)"
        )
        params: list = [pattern, pattern, pattern]
        if kind is not None:
            sql += " AND kind = ?"
            params.append(kind)
        sql += " ORDER BY name COLLATE NOCASE"
        return [self._from_row(r) for r in self.conn.execute(sql, params)]

    def has_transactions(self, account_id: int) -> bool:
        row = self.conn.execute(
            "SELECT 1 FROM ledger_entries WHERE account_id=? LIMIT 1", (int(account_id),)
        ).fetchone()
        return row is not None

    # ---- Mutations --------------------------------------------------------

    def create(
        self,
        kind: str,
        name: str,
        *,
        opening_balance=0,
        name_english: str | None = None,
        phone: str | None = None,
        default_commission_pct=None,
    ) -> int:
        """
        Insert a customer or supplier. current_balance starts at opening_balance.
        """
        if kind not in ACCOUNT_KINDS:
            raise DomainError(f"Account kind must be one of: {', '.join(ACCOUNT_KINDS)}.")
        if not non_empty(name):
            raise DomainError("Name cannot be empty.")
        opening = money_to_db(opening_balance)
        cur = self.conn.execute(
            """
            INSERT INTO accounts(kind, name, name_english, phone,
                                 opening_balance, current_balance, default_commission_pct)
            VALUES (?,?,?,?,?,?,?)
            """,
            (
                kind,
                name.strip(),
                name_english,
                phone,
                opening,
                opening,
                None if default_commission_pct is None else pct_to_db(default_commission_pct),
            ),
        )
        self.conn.commit()
        return int(cur.lastrowid)

    def deactivate(self, account_id: int) -> None:
        """
        Soft delete. Accounts with ledger history cannot be removed.
        """
        if self.has_transactions(account_id):
            raise DomainError("This account has transactions and cannot be deleted.")
        self.conn.execute("UPDATE accounts SET is_active=0 WHERE account_id=?", (int(account_id),))
        self.conn.commit()

    def adjust_balance(self, account_id: int, delta: Decimal) -> None:
        """current_balance += delta. No commit; runs inside the caller's unit of work."""
        self.conn.execute(
            "UPDATE accounts SET current_balance = current_balance + ? WHERE account_id=?",
            (money_to_db(delta), int(account_id)),
        )
