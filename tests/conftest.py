# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - pytest-qt owns QApplication (use qapp/qtbot fixtures), offscreen
# - Every test gets its own SQLite file under tmp_path, built through
#   get_connection() so schema, version and default settings are real
# - Seed two customers, two suppliers and three items; expose their ids
# - conn.row_factory = sqlite3.Row, PRAGMA foreign_keys=ON (from get_connection)
# ---------------------------------------------------------------------

from __future__ import annotations

import os
import sqlite3

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from fish_ledger.database import get_connection
from fish_ledger.database.repositories.accounts_repo import AccountsRepo
from fish_ledger.database.repositories.items_repo import ItemsRepo
from fish_ledger.modules.reconciliation.coordinator import ReconciliationCoordinator
from fish_ledger.modules.reporting.aggregator import ReportAggregator


# ---------- Qt: let pytest-qt own the app ----------
@pytest.fixture(scope="session")
def app(qapp):  # alias to match code that expects an `app` fixture
    return qapp


# ---------- Per-test database ----------
@pytest.fixture()
def conn(tmp_path):
    """Fresh database file per test; closed afterwards."""
    con = get_connection(tmp_path / "fishledger_test.db")
    try:
        yield con
    finally:
        con.close()


# ---------- Seed + handy ids ----------
@pytest.fixture()
def ids(conn: sqlite3.Connection) -> dict:
    """Common ids used throughout the ledger tests."""
    accounts = AccountsRepo(conn)
    items = ItemsRepo(conn)
    return {
        "customer_a": accounts.create("customer", "Akram Traders"),
        "customer_b": accounts.create("customer", "Bilal Fish House", opening_balance="500"),
        "supplier_a": accounts.create("supplier", "Karachi Boat Co", default_commission_pct="6"),
        "supplier_b": accounts.create("supplier", "Gwadar Catch", opening_balance="1000"),
        "rohu": items.create("Rohu"),
        "pomfret": items.create("Pomfret"),
        "prawn": items.create("Prawn"),
    }


@pytest.fixture()
def coordinator(conn, ids) -> ReconciliationCoordinator:
    return ReconciliationCoordinator(conn)


@pytest.fixture()
def reports(conn, ids) -> ReportAggregator:
    return ReportAggregator(conn)


# ---------- State snapshot for rollback assertions ----------
@pytest.fixture()
def snapshot(conn):
    """Callable returning every ledger-relevant row, for before/after equality."""
    def take() -> dict:
        def rows(sql: str):
            return [tuple(r) for r in conn.execute(sql).fetchall()]
        return {
            "items": rows("SELECT item_id, current_stock FROM items ORDER BY item_id"),
            "accounts": rows("SELECT account_id, current_balance FROM accounts ORDER BY account_id"),
            "movements": rows(
                "SELECT item_id, reference, kind, quantity, date FROM stock_movements ORDER BY reference, item_id"
            ),
            "entries": rows(
                "SELECT entry_id, account_id, date, reference, entry_type, debit, credit, description "
                "FROM ledger_entries ORDER BY entry_id"
            ),
            "sales": rows("SELECT * FROM sales ORDER BY sale_id"),
            "sale_items": rows("SELECT * FROM sale_items ORDER BY line_id"),
            "purchases": rows("SELECT * FROM purchases ORDER BY purchase_id"),
            "sequences": rows("SELECT name, current_number FROM number_sequences ORDER BY name"),
        }
    return take
