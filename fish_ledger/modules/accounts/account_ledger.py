# fish_ledger/modules/accounts/account_ledger.py
"""
Account ledger: running balances for customers and suppliers.

Sign convention: a debit raises what the party owes us (or, for a supplier,
what we owe them), a credit lowers it. For every account

    current_balance = opening_balance + Σ(debit − credit)

over its committed ledger entries. The stored accounts.current_balance is
kept equal to that sum by post_entry() and reverse_entries_for(); neither
commits, the caller's unit of work does.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
import logging
import sqlite3
from typing import Iterable, List, Optional

from ...database.repositories.accounts_repo import AccountsRepo
from ...database.repositories.ledger_entries_repo import LedgerEntriesRepo, LedgerEntry
from ...utils.helpers import NumberLike, ZERO, money

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunningBalanceRow:
    entry_id: Optional[int]
    date: str
    reference: str
    entry_type: str
    description: Optional[str]
    debit: Decimal
    credit: Decimal
    balance: Decimal


def running_balances(opening: NumberLike, entries: Iterable[LedgerEntry]) -> List[RunningBalanceRow]:
    """
    Left fold: balance[i] = balance[i-1] + debit[i] − credit[i], starting at
    `opening`. Entries are ordered by (date, entry_id) and by nothing else;
    entries without an id keep their input order within a date.
    """
    indexed = list(enumerate(entries))
    indexed.sort(
        key=lambda p: (
            p[1].date,
            p[1].entry_id if p[1].entry_id is not None else float("inf"),
            p[0],
        )
    )
    balance = money(opening)
    rows: List[RunningBalanceRow] = []
    for _pos, e in indexed:
        balance = money(balance + money(e.debit) - money(e.credit))
        rows.append(
            RunningBalanceRow(
                entry_id=e.entry_id,
                date=e.date,
                reference=e.reference,
                entry_type=e.entry_type,
                description=e.description,
                debit=money(e.debit),
                credit=money(e.credit),
                balance=balance,
            )
        )
    return rows


class AccountLedger:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.accounts = AccountsRepo(conn)
        self.entries = LedgerEntriesRepo(conn)

    # ---- Queries ----------------------------------------------------------

    def current_balance(self, account_id: int, exclude_reference: Optional[str] = None) -> Decimal:
        """
        Live balance. With `exclude_reference`, the balance as if that
        transaction had never been posted (purchase forms show this as the
        previous balance while editing).
        """
        acc = self.accounts.get(account_id)
        if acc is None:
            return money(ZERO)
        bal = acc.current_balance
        if exclude_reference:
            bal -= self.entries.net_for_reference(account_id, exclude_reference)
        return money(bal)

    def balance_as_of(self, account_id: int, before_date: str) -> Decimal:
        """opening_balance + Σ(debit − credit) of entries dated strictly before `before_date`."""
        acc = self.accounts.get(account_id)
        if acc is None:
            return money(ZERO)
        return money(acc.opening_balance + self.entries.net_for_account(account_id, before=before_date))

    def entries_for(
        self, account_id: int, date_from: Optional[str] = None, date_to: Optional[str] = None
    ) -> list[LedgerEntry]:
        return self.entries.list_for_account(account_id, date_from, date_to)

    # ---- Mutations (no commit) -------------------------------------------

    def post_entry(
        self,
        account_id: int,
        date: str,
        reference: str,
        debit: NumberLike = 0,
        credit: NumberLike = 0,
        description: Optional[str] = None,
        entry_type: str = "manual",
    ) -> LedgerEntry:
        d, c = money(debit), money(credit)
        if d < 0 or c < 0:
            raise ValueError("Ledger entry sides cannot be negative.")
        if d != 0 and c != 0:
            raise ValueError("A ledger entry is either a debit or a credit, not both.")
        entry = LedgerEntry(
            entry_id=None,
            account_id=int(account_id),
            date=date,
            reference=reference,
            entry_type=entry_type,
            debit=d,
            credit=c,
            description=description,
        )
        self.entries.insert(entry)
        self.accounts.adjust_balance(account_id, d - c)
        return entry

    def reverse_entries_for(self, reference: str) -> list[LedgerEntry]:
        """Remove every entry of `reference` and back it out of the balances."""
        removed = self.entries.list_for_reference(reference)
        for e in removed:
            self.accounts.adjust_balance(e.account_id, e.credit - e.debit)
        if removed:
            self.entries.delete_for_reference(reference)
            _log.debug("reversed %d ledger entr(ies) for %s", len(removed), reference)
        return removed
