# fish_ledger/modules/reconciliation/coordinator.py
"""
Transaction lifecycle: create, update, delete and post purchases, sales,
supplier bills and payments, keeping the stock ledger and the account
ledger consistent with the saved transactions.

Every mutation follows the same sequence:

  1) validate the input and compute the header (no writes)
  2) check stock for every item whose quantity would go down
  3) in ONE unit of work: reverse the transaction's old movements and
     entries, write the transaction rows, apply the new movements and
     entries

Step 3 either commits completely or rolls back completely, so readers
never see an edit with the old effects reversed and the new ones missing.
Business failures are returned as `Result.fail(...)`; only storage errors
raise (PersistenceError).

Status:
  - 'draft'  : saved, effects committed, still editable
  - 'posted' : same effects, locked against edit and delete
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
import logging
import sqlite3
from typing import Any, Dict, List, Optional

from ...config import AppSettings
from ...constants import (
    ACCOUNT_CUSTOMER,
    ACCOUNT_SUPPLIER,
    STATUS_POSTED,
    TRANSACTION_STATUSES,
)
from ...database.repositories.accounts_repo import AccountsRepo
from ...database.repositories.items_repo import ItemsRepo
from ...database.repositories.payments_repo import PaymentsRepo
from ...database.repositories.purchases_repo import PurchasesRepo
from ...database.repositories.sales_repo import SalesRepo
from ...database.repositories.settings_repo import SettingsRepo
from ...database.repositories.supplier_bills_repo import SupplierBillsRepo
from ...database.unit_of_work import unit_of_work
from ...utils.helpers import ZERO, money, weight
from ...utils.validators import (
    is_iso_date,
    is_non_negative_number,
    is_strictly_positive_number,
    try_parse_decimal,
)
from ..accounts.account_ledger import AccountLedger
from ..inventory.stock_ledger import Availability, OPENING_KIND, StockLedger, opening_reference
from .inputs import PaymentInput, PurchaseInput, SaleInput, SupplierBillInput
from .postings import (
    PostingPlan,
    plan_payment,
    plan_purchase,
    plan_sale,
    plan_supplier_bill,
)
from .results import (
    InsufficientStock,
    InvalidInput,
    InvalidRange,
    Locked,
    NotFound,
    Result,
    StockShortfall,
)

_log = logging.getLogger(__name__)

# kind -> (id attribute, number attribute) on the transaction dataclass
_KEY_ATTRS = {
    "purchase": ("purchase_id", "purchase_number"),
    "sale": ("sale_id", "sale_number"),
    "supplier_bill": ("bill_id", "bill_number"),
    "payment": ("payment_id", "payment_number"),
}


@dataclass(frozen=True)
class BillPreview:
    supplier_id: int
    date_from: str
    date_to: str
    commission_pct: Decimal
    total_weight: Decimal
    gross_amount: Decimal
    supplier_advance: Decimal = ZERO
    lines: List[dict] = field(default_factory=list)


class ReconciliationCoordinator:
    def __init__(self, conn: sqlite3.Connection, settings: Optional[AppSettings] = None):
        self.conn = conn
        self.settings = settings if settings is not None else SettingsRepo(conn).load()
        self.stock = StockLedger(conn, allow_negative_stock=self.settings.allow_negative_stock)
        self.ledger = AccountLedger(conn)
        self.items = ItemsRepo(conn)
        self.accounts = AccountsRepo(conn)
        self.sales = SalesRepo(conn)
        self._repos: Dict[str, Any] = {
            "purchase": PurchasesRepo(conn),
            "sale": self.sales,
            "supplier_bill": SupplierBillsRepo(conn),
            "payment": PaymentsRepo(conn),
        }

    # ======================================================================
    # Live queries for forms
    # ======================================================================

    def check_availability(self, item_id: int, required_qty, exclude_reference: Optional[str] = None) -> Availability:
        return self.stock.check_availability(item_id, required_qty, exclude_reference)

    def current_balance(self, account_id: int) -> Decimal:
        return self.ledger.current_balance(account_id)

    def get_transaction(self, kind: str, transaction_id: int) -> Result:
        repo = self._repos.get(kind)
        if repo is None:
            return Result.fail(InvalidInput(f"Unknown transaction kind '{kind}'."))
        txn = repo.get(transaction_id)
        if txn is None:
            return Result.fail(NotFound(kind, transaction_id))
        return Result.success(txn)

    def preview_supplier_bill(self, supplier_id: int, date_from: str, date_to: str) -> Result:
        """Sale lines the bill would cover, their totals, the commission % and any advance held."""
        if not (is_iso_date(date_from) and is_iso_date(date_to)):
            return Result.fail(InvalidInput("Bill dates must be YYYY-MM-DD."))
        if date_from > date_to:
            return Result.fail(InvalidRange(date_from, date_to))
        err = self._check_account(supplier_id, ACCOUNT_SUPPLIER)
        if err is not None:
            return Result.fail(err)
        lines = self.sales.lines_for_supplier(supplier_id, date_from, date_to)
        return Result.success(
            BillPreview(
                supplier_id=int(supplier_id),
                date_from=date_from,
                date_to=date_to,
                commission_pct=self._commission_pct(supplier_id, None),
                total_weight=weight(sum((ln["net_weight"] for ln in lines), ZERO)),
                gross_amount=money(sum((ln["amount"] for ln in lines), ZERO)),
                supplier_advance=money(max(ZERO, -self.ledger.current_balance(supplier_id))),
                lines=lines,
            )
        )

    # ======================================================================
    # Lifecycle
    # ======================================================================

    def create_transaction(self, data) -> Result:
        kind = getattr(data, "kind", None)
        if kind not in self._repos:
            return Result.fail(InvalidInput(f"Unsupported transaction input {type(data).__name__}."))

        err = self._validate(data)
        if err is None:
            plan = self._plan(data, reference=None)
            err = self._stock_error(plan, reference=None)
        if err is not None:
            return self._reject(kind, None, err)

        repo = self._repos[kind]
        txn = plan.transaction
        with unit_of_work(self.conn):
            repo.insert(txn)
            self._apply(plan, txn.reference, txn.number, txn.date)

        _log.info("created %s id=%s number=%s", kind, txn.transaction_id, txn.number)
        return Result.success(repo.get(txn.transaction_id))

    def update_transaction(self, kind: str, transaction_id: int, data) -> Result:
        repo = self._repos.get(kind)
        if repo is None:
            return Result.fail(InvalidInput(f"Unknown transaction kind '{kind}'."))
        if getattr(data, "kind", None) != kind:
            return Result.fail(InvalidInput(f"Input does not describe a {kind}."))

        existing = repo.get(transaction_id)
        if existing is None:
            return self._reject(kind, transaction_id, NotFound(kind, transaction_id))
        if existing.status == STATUS_POSTED:
            return self._reject(kind, transaction_id, Locked(kind, existing.transaction_id))

        reference = existing.reference
        err = self._validate(data)
        if err is None:
            plan = self._plan(data, reference=reference)
            err = self._stock_error(plan, reference=reference)
        if err is not None:
            return self._reject(kind, transaction_id, err)

        txn = plan.transaction
        id_attr, number_attr = _KEY_ATTRS[kind]
        setattr(txn, id_attr, existing.transaction_id)
        setattr(txn, number_attr, existing.number)

        with unit_of_work(self.conn):
            self.stock.reverse_transaction(reference)
            self.ledger.reverse_entries_for(reference)
            repo.update(txn)
            self._apply(plan, reference, txn.number, txn.date)

        _log.info("updated %s id=%s number=%s", kind, txn.transaction_id, txn.number)
        return Result.success(repo.get(txn.transaction_id))

    def delete_transaction(self, kind: str, transaction_id: int) -> Result:
        repo = self._repos.get(kind)
        if repo is None:
            return Result.fail(InvalidInput(f"Unknown transaction kind '{kind}'."))

        existing = repo.get(transaction_id)
        if existing is None:
            return self._reject(kind, transaction_id, NotFound(kind, transaction_id))
        if existing.status == STATUS_POSTED:
            return self._reject(kind, transaction_id, Locked(kind, existing.transaction_id))

        reference = existing.reference
        # removing a purchase takes its weight back out of stock
        err = self._stock_error(PostingPlan(existing), reference=reference)
        if err is not None:
            return self._reject(kind, transaction_id, err)

        with unit_of_work(self.conn):
            self.stock.reverse_transaction(reference)
            self.ledger.reverse_entries_for(reference)
            repo.delete(existing.transaction_id)

        _log.info("deleted %s id=%s number=%s", kind, existing.transaction_id, existing.number)
        return Result.success(None)

    def post_transaction(self, kind: str, transaction_id: int) -> Result:
        """Lock a saved transaction. Posting twice is a no-op."""
        repo = self._repos.get(kind)
        if repo is None:
            return Result.fail(InvalidInput(f"Unknown transaction kind '{kind}'."))
        existing = repo.get(transaction_id)
        if existing is None:
            return self._reject(kind, transaction_id, NotFound(kind, transaction_id))
        if existing.status == STATUS_POSTED:
            return Result.success(existing)

        with unit_of_work(self.conn):
            repo.set_status(existing.transaction_id, STATUS_POSTED)

        _log.info("posted %s id=%s number=%s", kind, existing.transaction_id, existing.number)
        return Result.success(repo.get(existing.transaction_id))

    def delete_many(self, kind: str, transaction_ids) -> List[Result]:
        """
        Delete one by one, each in its own unit of work. Stops at the first
        failure: earlier deletions stay committed, later ids are not tried.
        """
        results: List[Result] = []
        for tid in transaction_ids:
            res = self.delete_transaction(kind, tid)
            results.append(res)
            if not res.ok:
                break
        return results

    def set_opening_stock(self, item_id: int, qty, date: str) -> Result:
        """Replace an item's opening stock (a movement tagged opening:<item_id>)."""
        if self.items.get(item_id) is None:
            return Result.fail(NotFound("item", item_id))
        if not is_non_negative_number(qty):
            return Result.fail(InvalidInput("Opening stock must be a non-negative number."))
        if not is_iso_date(date):
            return Result.fail(InvalidInput("Date must be YYYY-MM-DD."))

        reference = opening_reference(item_id)
        plan = PostingPlan(None)
        new_qty = weight(qty)
        err = self._stock_error(plan, reference=reference, new_by_item={int(item_id): new_qty})
        if err is not None:
            return self._reject(OPENING_KIND, item_id, err)

        with unit_of_work(self.conn):
            self.stock.set_opening_stock(item_id, new_qty, date)
        _log.info("opening stock for item %s set to %s", item_id, new_qty)
        return Result.success(self.stock.current_stock(item_id))

    # ======================================================================
    # Internals
    # ======================================================================

    def _reject(self, kind: str, transaction_id, err) -> Result:
        _log.warning("%s %s rejected: %s", kind, transaction_id if transaction_id is not None else "(new)",
                     type(err).__name__)
        return Result.fail(err)

    def _apply(self, plan: PostingPlan, reference: str, number: Optional[str], date: str) -> None:
        for eff in plan.stock:
            self.stock.apply_movement(eff.item_id, eff.quantity, reference, eff.kind, date)
        for eff in plan.ledger:
            self.ledger.post_entry(
                eff.account_id,
                date,
                reference,
                debit=eff.debit,
                credit=eff.credit,
                description=f"{eff.label} {number}",
                entry_type=eff.entry_type,
            )

    def _plan(self, data, reference: Optional[str]) -> PostingPlan:
        if isinstance(data, PurchaseInput):
            previous = self.ledger.current_balance(data.supplier_id, exclude_reference=reference)
            return plan_purchase(data, previous_balance=previous)
        if isinstance(data, SaleInput):
            return plan_sale(data)
        if isinstance(data, SupplierBillInput):
            lines = self.sales.lines_for_supplier(data.supplier_id, data.date_from, data.date_to)
            return plan_supplier_bill(
                data,
                gross_amount=sum((ln["amount"] for ln in lines), ZERO),
                total_weight=sum((ln["net_weight"] for ln in lines), ZERO),
                commission_pct=self._commission_pct(data.supplier_id, data.commission_pct),
            )
        return plan_payment(data)

    def _commission_pct(self, supplier_id: int, requested) -> Decimal:
        if requested is not None and requested != "":
            return money(requested)
        acc = self.accounts.get(supplier_id)
        if acc is not None and acc.default_commission_pct is not None:
            return acc.default_commission_pct
        return money(self.settings.default_commission_pct)

    def _stock_error(
        self,
        plan: PostingPlan,
        reference: Optional[str],
        new_by_item: Optional[Dict[int, Decimal]] = None,
    ) -> Optional[InsufficientStock]:
        """
        Compare each item's new signed quantity with what `reference` holds now.
        Only decreases are checked; the reference's own movement is added back
        by check_availability(exclude_reference=...).
        """
        new = plan.stock_by_item() if new_by_item is None else new_by_item
        old: Dict[int, Decimal] = {}
        if reference:
            for m in self.stock.movements_for(reference):
                old[m.item_id] = m.quantity

        shortfalls: List[StockShortfall] = []
        for item_id in list(new) + [i for i in old if i not in new]:
            new_qty = new.get(item_id, ZERO)
            if new_qty >= old.get(item_id, ZERO):
                continue
            required = weight(-new_qty)
            avail = self.stock.check_availability(item_id, required, exclude_reference=reference)
            if not avail.ok:
                shortfalls.append(StockShortfall(item_id=item_id, required=required, available=avail.available))
        return InsufficientStock(tuple(shortfalls)) if shortfalls else None

    # ---- input validation -------------------------------------------------

    def _check_account(self, account_id, kind: Optional[str]):
        acc = self.accounts.get(account_id) if account_id is not None else None
        if acc is None:
            return NotFound("account", account_id)
        if kind is not None and acc.kind != kind:
            return InvalidInput(f"Account {account_id} is not a {kind}.")
        return None

    def _check_items(self, lines) -> Optional[Any]:
        if not lines:
            return InvalidInput("At least one line item is required.")
        for ln in lines:
            if self.items.get(ln.item_id) is None:
                return NotFound("item", ln.item_id)
        return None

    @staticmethod
    def _check_non_negative(**values) -> Optional[InvalidInput]:
        for name, v in values.items():
            if not is_non_negative_number(v):
                return InvalidInput(f"{name.replace('_', ' ')} must be a non-negative number.")
        return None

    def _validate(self, data):
        if not is_iso_date(data.date):
            return InvalidInput("Date must be YYYY-MM-DD.")
        if data.status not in TRANSACTION_STATUSES:
            return InvalidInput(f"Unknown status '{data.status}'.")

        if isinstance(data, PurchaseInput):
            err = self._check_account(data.supplier_id, ACCOUNT_SUPPLIER) or self._check_items(data.lines)
            if err:
                return err
            for ln in data.lines:
                err = self._check_non_negative(weight=ln.weight, rate=ln.rate)
                if err:
                    return err
            return self._check_non_negative(concession_amount=data.concession_amount, cash_paid=data.cash_paid)

        if isinstance(data, SaleInput):
            err = self._check_account(data.customer_id, ACCOUNT_CUSTOMER)
            if err is None and data.supplier_id is not None:
                err = self._check_account(data.supplier_id, ACCOUNT_SUPPLIER)
            err = err or self._check_items(data.lines)
            if err:
                return err
            for ln in data.lines:
                err = self._check_non_negative(
                    gross_weight=ln.gross_weight,
                    tare_weight=ln.tare_weight,
                    rate=ln.rate,
                    grocery_charges=ln.grocery_charges,
                    ice_charges=ln.ice_charges,
                )
                if err:
                    return err
            return self._check_non_negative(cash_received=data.cash_received, receipt_amount=data.receipt_amount)

        if isinstance(data, SupplierBillInput):
            if not (is_iso_date(data.date_from) and is_iso_date(data.date_to)):
                return InvalidInput("Bill dates must be YYYY-MM-DD.")
            if data.date_from > data.date_to:
                return InvalidRange(data.date_from, data.date_to)
            err = self._check_account(data.supplier_id, ACCOUNT_SUPPLIER)
            if err:
                return err
            if data.commission_pct is not None and data.commission_pct != "":
                ok, pct = try_parse_decimal(data.commission_pct)
                if not ok or pct < 0 or pct > 100:
                    return InvalidInput("Commission % must be between 0 and 100.")
            return self._check_non_negative(
                drugs_charges=data.drugs_charges,
                fare_charges=data.fare_charges,
                labor_charges=data.labor_charges,
                ice_charges=data.ice_charges,
                concession_amount=data.concession_amount,
                cash_paid=data.cash_paid,
            )

        if isinstance(data, PaymentInput):
            err = self._check_account(data.account_id, None)
            if err:
                return err
            if not is_strictly_positive_number(data.amount):
                return InvalidInput("Payment amount must be greater than zero.")
            return None

        return InvalidInput(f"Unsupported transaction input {type(data).__name__}.")
