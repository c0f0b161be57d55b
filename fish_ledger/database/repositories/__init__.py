# database/repositories/__init__.py
"""
Repository layer public API.

Usage:
    from fish_ledger.database.repositories import (
        # Master data
        ItemsRepo, Item, AccountsRepo, Account, SettingsRepo,
        # Ledgers
        StockMovementsRepo, StockMovement, LedgerEntriesRepo, LedgerEntry,
        # Transactions
        PurchasesRepo, Purchase, PurchaseLine,
        SalesRepo, Sale, SaleLine,
        SupplierBillsRepo, SupplierBill,
        PaymentsRepo, Payment,
        # Reports
        ReportingRepo,
    )
"""

# ---------------- Items --------------------
from .items_repo import (
    ItemsRepo,
    Item,
    DomainError as ItemsDomainError,
)

# ---------------- Accounts -----------------
from .accounts_repo import (
    AccountsRepo,
    Account,
    DomainError as AccountsDomainError,
)

# ---------------- Settings -----------------
from .settings_repo import SettingsRepo

# ---------------- Ledgers ------------------
from .stock_movements_repo import StockMovementsRepo, StockMovement
from .ledger_entries_repo import LedgerEntriesRepo, LedgerEntry

# ---------------- Numbering ----------------
from .numbering import make_reference, next_number, peek_next_number

# ---------------- Purchases ----------------
from .purchases_repo import PurchasesRepo, Purchase, PurchaseLine

# ------------------ Sales ------------------
from .sales_repo import SalesRepo, Sale, SaleLine

# -------------- Supplier bills -------------
from .supplier_bills_repo import SupplierBillsRepo, SupplierBill

# ----------------- Payments ----------------
from .payments_repo import PaymentsRepo, Payment

# ----------------- Reports -----------------
from .reporting_repo import ReportingRepo


__all__ = [
    # Items
    "ItemsRepo",
    "Item",
    "ItemsDomainError",
    # Accounts
    "AccountsRepo",
    "Account",
    "AccountsDomainError",
    # Settings
    "SettingsRepo",
    # Ledgers
    "StockMovementsRepo",
    "StockMovement",
    "LedgerEntriesRepo",
    "LedgerEntry",
    # Numbering
    "make_reference",
    "next_number",
    "peek_next_number",
    # Purchases
    "PurchasesRepo",
    "Purchase",
    "PurchaseLine",
    # Sales
    "SalesRepo",
    "Sale",
    "SaleLine",
    # Supplier bills
    "SupplierBillsRepo",
    "SupplierBill",
    # Payments
    "PaymentsRepo",
    "Payment",
    # Reports
    "ReportingRepo",
]
