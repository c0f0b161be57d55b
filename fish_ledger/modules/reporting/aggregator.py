# fish_ledger/modules/reporting/aggregator.py
"""
Read-only reports over the stock ledger, the account ledger and the
transaction history. Nothing here writes.

Every public method returns a Result: ranged reports fail with InvalidRange
(date_from after date_to) before running any query, unknown ids fail with
NotFound. The arithmetic lives in pure functions (build_stock_report,
build_register, group_vendor_sales, build_daily_net_summary,
build_client_recovery) so it can be checked without a database.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
import sqlite3
from typing import Iterable, List, Optional

from ...constants import ACCOUNT_CUSTOMER, ACCOUNT_KINDS, ACCOUNT_SUPPLIER
from ...database.repositories.accounts_repo import AccountsRepo
from ...database.repositories.items_repo import ItemsRepo
from ...database.repositories.reporting_repo import ReportingRepo
from ...utils.helpers import ZERO, money, weight
from ...utils.validators import is_iso_date
from ..accounts.account_ledger import AccountLedger, RunningBalanceRow, running_balances
from ..reconciliation.results import InvalidInput, InvalidRange, NotFound, Result


# =============================================================================
# Report shapes
# =============================================================================

@dataclass(frozen=True)
class StockReportRow:
    item_id: int
    item_name: str
    opening_stock: Decimal
    previous_stock: Decimal
    today_purchases: Decimal
    today_sales: Decimal
    remaining_stock: Decimal


@dataclass(frozen=True)
class StockReport:
    as_of: Optional[str]
    rows: List[StockReportRow]
    total_previous_stock: Decimal
    total_today_purchases: Decimal
    total_today_sales: Decimal
    total_remaining_stock: Decimal


@dataclass(frozen=True)
class RegisterRow:
    account_id: int
    name: str
    previous_balance: Decimal
    net_amount: Decimal
    collection: Decimal
    balance: Decimal


@dataclass(frozen=True)
class Register:
    kind: str
    date_from: Optional[str]
    date_to: Optional[str]
    rows: List[RegisterRow]
    total_previous_balance: Decimal
    total_net_amount: Decimal
    total_collection: Decimal
    total_balance: Decimal


@dataclass(frozen=True)
class LedgerReport:
    account_id: int
    account_name: str
    date_from: str
    date_to: str
    opening_balance: Decimal
    rows: List[RunningBalanceRow]
    total_debit: Decimal
    total_credit: Decimal
    closing_balance: Decimal


@dataclass(frozen=True)
class DailyNetSummary:
    as_of: str
    previous_balance: Decimal
    today_sales: Decimal
    today_charges: Decimal
    total_amount: Decimal
    cash_received: Decimal
    payments_received: Decimal
    total_collection: Decimal
    closing_balance: Decimal


@dataclass(frozen=True)
class DailyNetComparison:
    first: DailyNetSummary
    second: DailyNetSummary

    @property
    def closing_difference(self) -> Decimal:
        return money(self.second.closing_balance - self.first.closing_balance)


@dataclass(frozen=True)
class VendorSalesGroup:
    supplier_id: int
    supplier_name: str
    rows: List[dict]
    vehicle_count: int
    total_weight: Decimal
    total_amount: Decimal


@dataclass(frozen=True)
class VendorSalesReport:
    groups: List[VendorSalesGroup]
    total_vehicles: int
    total_weight: Decimal
    total_amount: Decimal
    date_from: Optional[str] = None
    date_to: Optional[str] = None


@dataclass(frozen=True)
class DailySalesReport:
    date_from: str
    date_to: str
    rows: List[dict]
    total_weight: Decimal
    total_amount: Decimal


@dataclass(frozen=True)
class ItemMovementReport:
    item_id: int
    item_name: str
    date_from: str
    date_to: str
    rows: List[dict]
    total_weight: Decimal
    total_amount: Decimal
    average_rate: Decimal


@dataclass(frozen=True)
class ClientRecoveryRow:
    customer_id: int
    customer_name: str
    total_amount: Decimal
    total_charges: Decimal
    total_collection: Decimal
    total_balance: Decimal


@dataclass(frozen=True)
class ClientRecoveryReport:
    date_from: str
    date_to: str
    transactions: List[dict]
    summary: List[ClientRecoveryRow]
    total_amount: Decimal
    total_charges: Decimal
    total_collection: Decimal
    total_balance: Decimal
    customer_id: Optional[int] = None


@dataclass(frozen=True)
class DailySalesDetailsReport:
    as_of: str
    rows: List[dict]
    total_weight: Decimal
    total_amount: Decimal


@dataclass(frozen=True)
class SupplierAdvanceRow:
    account_id: int
    name: str
    name_english: Optional[str]
    advance_amount: Decimal


@dataclass(frozen=True)
class SupplierAdvances:
    rows: List[SupplierAdvanceRow]
    total_advance: Decimal


@dataclass(frozen=True)
class ConcessionReport:
    date_from: str
    date_to: str
    rows: List[dict]
    total_gross_amount: Decimal
    total_concession: Decimal
    total_net_amount: Decimal
    supplier_id: Optional[int] = None


# =============================================================================
# Pure builders
# =============================================================================

def build_stock_report(raw_rows: Iterable[dict], as_of: Optional[str] = None) -> StockReport:
    """
    Per item:
        previous_stock  = opening_stock + purchases_before − sales_before
        remaining_stock = previous_stock + today_purchases − today_sales
    Totals are column sums.
    """
    rows: List[StockReportRow] = []
    for r in raw_rows:
        opening = weight(r.get("opening_stock"))
        previous = weight(opening + weight(r.get("purchases_before")) - weight(r.get("sales_before")))
        purchases = weight(r.get("today_purchases"))
        sales = weight(r.get("today_sales"))
        rows.append(
            StockReportRow(
                item_id=int(r["item_id"]),
                item_name=r.get("item_name") or "",
                opening_stock=opening,
                previous_stock=previous,
                today_purchases=purchases,
                today_sales=sales,
                remaining_stock=weight(previous + purchases - sales),
            )
        )
    return StockReport(
        as_of=as_of,
        rows=rows,
        total_previous_stock=weight(sum((r.previous_stock for r in rows), ZERO)),
        total_today_purchases=weight(sum((r.today_purchases for r in rows), ZERO)),
        total_today_sales=weight(sum((r.today_sales for r in rows), ZERO)),
        total_remaining_stock=weight(sum((r.remaining_stock for r in rows), ZERO)),
    )


def build_register(
    kind: str, raw_rows: Iterable[dict], date_from: Optional[str] = None, date_to: Optional[str] = None
) -> Register:
    """
    previous_balance = opening_balance + net of entries before the period
    balance          = previous_balance + net_amount − collection
    """
    rows: List[RegisterRow] = []
    for r in raw_rows:
        previous = money(money(r.get("opening_balance")) + money(r.get("before_net")))
        net_amount = money(r.get("period_debit"))
        collection = money(r.get("period_credit"))
        rows.append(
            RegisterRow(
                account_id=int(r["account_id"]),
                name=r.get("name") or "",
                previous_balance=previous,
                net_amount=net_amount,
                collection=collection,
                balance=money(previous + net_amount - collection),
            )
        )
    return Register(
        kind=kind,
        date_from=date_from,
        date_to=date_to,
        rows=rows,
        total_previous_balance=money(sum((r.previous_balance for r in rows), ZERO)),
        total_net_amount=money(sum((r.net_amount for r in rows), ZERO)),
        total_collection=money(sum((r.collection for r in rows), ZERO)),
        total_balance=money(sum((r.balance for r in rows), ZERO)),
    )


def build_daily_net_summary(as_of: str, figures: dict) -> DailyNetSummary:
    previous = money(figures.get("previous_balance"))
    sales = money(figures.get("today_sales"))
    charges = money(figures.get("today_charges"))
    cash = money(figures.get("cash_received"))
    payments = money(figures.get("payments_received"))
    total_amount = money(previous + sales + charges)
    total_collection = money(cash + payments)
    return DailyNetSummary(
        as_of=as_of,
        previous_balance=previous,
        today_sales=sales,
        today_charges=charges,
        total_amount=total_amount,
        cash_received=cash,
        payments_received=payments,
        total_collection=total_collection,
        closing_balance=money(total_amount - total_collection),
    )


def build_client_recovery(
    sales: List[dict],
    collections: Iterable[dict],
    date_from: str,
    date_to: str,
    customer_id: Optional[int] = None,
) -> ClientRecoveryReport:
    """
    One summary row per customer with sales or collections in the period:
        total_amount     = Σ gross_amount of the customer's sales
        total_charges    = Σ total_charges
        total_collection = Σ credits on the customer's account (cash, receipts, payments)
        total_balance    = total_amount + total_charges − total_collection
    """
    acc: dict = {}

    def bucket(cid, name):
        return acc.setdefault(int(cid), {"name": name or "", "amount": ZERO, "charges": ZERO, "collection": ZERO})

    for s in sales:
        b = bucket(s["customer_id"], s.get("customer_name"))
        b["amount"] += money(s.get("gross_amount"))
        b["charges"] += money(s.get("total_charges"))
    for c in collections:
        bucket(c["customer_id"], c.get("customer_name"))["collection"] += money(c.get("collection"))

    summary = [
        ClientRecoveryRow(
            customer_id=cid,
            customer_name=b["name"],
            total_amount=money(b["amount"]),
            total_charges=money(b["charges"]),
            total_collection=money(b["collection"]),
            total_balance=money(b["amount"] + b["charges"] - b["collection"]),
        )
        for cid, b in acc.items()
    ]
    summary.sort(key=lambda r: (r.customer_name.casefold(), r.customer_id))
    return ClientRecoveryReport(
        date_from=date_from,
        date_to=date_to,
        transactions=list(sales),
        summary=summary,
        total_amount=money(sum((r.total_amount for r in summary), ZERO)),
        total_charges=money(sum((r.total_charges for r in summary), ZERO)),
        total_collection=money(sum((r.total_collection for r in summary), ZERO)),
        total_balance=money(sum((r.total_balance for r in summary), ZERO)),
        customer_id=customer_id,
    )


def _vehicle_key(v) -> Optional[str]:
    s = str(v).strip() if v is not None else ""
    return s.upper() or None


def group_vendor_sales(rows: Iterable[dict]) -> VendorSalesReport:
    """
    Group flat sale lines by supplier_id. Groups appear in order of first
    occurrence and keep their rows in input order. A group's vehicle count is
    the number of distinct non-empty vehicle numbers in it.
    """
    buckets: dict = {}
    for r in rows:
        sid = int(r["supplier_id"])
        bucket = buckets.setdefault(sid, {"name": r.get("supplier_name") or "", "rows": []})
        bucket["rows"].append(r)

    groups: List[VendorSalesGroup] = []
    for sid, bucket in buckets.items():
        group_rows = bucket["rows"]
        vehicles = {_vehicle_key(r.get("vehicle_number")) for r in group_rows} - {None}
        groups.append(
            VendorSalesGroup(
                supplier_id=sid,
                supplier_name=bucket["name"],
                rows=group_rows,
                vehicle_count=len(vehicles),
                total_weight=weight(sum((weight(r.get("net_weight")) for r in group_rows), ZERO)),
                total_amount=money(sum((money(r.get("amount")) for r in group_rows), ZERO)),
            )
        )
    return VendorSalesReport(
        groups=groups,
        total_vehicles=sum(g.vehicle_count for g in groups),
        total_weight=weight(sum((g.total_weight for g in groups), ZERO)),
        total_amount=money(sum((g.total_amount for g in groups), ZERO)),
    )


def _range_error(date_from, date_to):
    if not (is_iso_date(date_from) and is_iso_date(date_to)):
        return InvalidInput("Dates must be YYYY-MM-DD.")
    if date_from > date_to:
        return InvalidRange(date_from, date_to)
    return None


def _lines_report(item, date_from, date_to, rows) -> ItemMovementReport:
    total_weight = weight(sum((r["weight"] for r in rows), ZERO))
    total_amount = money(sum((r["amount"] for r in rows), ZERO))
    avg = money(total_amount / total_weight) if total_weight else money(ZERO)
    return ItemMovementReport(
        item_id=int(item.item_id),
        item_name=item.name,
        date_from=date_from,
        date_to=date_to,
        rows=rows,
        total_weight=total_weight,
        total_amount=total_amount,
        average_rate=avg,
    )


# =============================================================================
# Aggregator
# =============================================================================

class ReportAggregator:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.repo = ReportingRepo(conn)
        self.accounts = AccountsRepo(conn)
        self.items = ItemsRepo(conn)
        self.ledger = AccountLedger(conn)

    # ---- Stock -----------------------------------------------------------

    def stock_report(self, as_of: str) -> Result:
        if not is_iso_date(as_of):
            return Result.fail(InvalidInput("Date must be YYYY-MM-DD."))
        return Result.success(build_stock_report(self.repo.stock_positions(as_of), as_of))

    # ---- Accounts --------------------------------------------------------

    def register(self, kind: str, date_to: str, date_from: Optional[str] = None) -> Result:
        """Customer or supplier register up to `date_to`, optionally from `date_from`."""
        if kind not in ACCOUNT_KINDS:
            return Result.fail(InvalidInput(f"Account kind must be one of: {', '.join(ACCOUNT_KINDS)}."))
        if date_from is not None:
            err = _range_error(date_from, date_to)
            if err is not None:
                return Result.fail(err)
        elif not is_iso_date(date_to):
            return Result.fail(InvalidInput("Date must be YYYY-MM-DD."))
        raw = self.repo.register_positions(kind, date_to, date_from)
        return Result.success(build_register(kind, raw, date_from, date_to))

    def ledger_report(self, account_id: int, date_from: str, date_to: str) -> Result:
        err = _range_error(date_from, date_to)
        if err is not None:
            return Result.fail(err)
        acc = self.accounts.get(account_id)
        if acc is None:
            return Result.fail(NotFound("account", account_id))

        opening = self.ledger.balance_as_of(account_id, date_from)
        entries = self.ledger.entries_for(account_id, date_from, date_to)
        rows = running_balances(opening, entries)
        return Result.success(
            LedgerReport(
                account_id=int(acc.account_id),
                account_name=acc.name,
                date_from=date_from,
                date_to=date_to,
                opening_balance=opening,
                rows=rows,
                total_debit=money(sum((r.debit for r in rows), ZERO)),
                total_credit=money(sum((r.credit for r in rows), ZERO)),
                closing_balance=rows[-1].balance if rows else opening,
            )
        )

    def daily_net_summary(self, as_of: str) -> Result:
        if not is_iso_date(as_of):
            return Result.fail(InvalidInput("Date must be YYYY-MM-DD."))
        return Result.success(build_daily_net_summary(as_of, self.repo.customer_day_totals(as_of)))

    def compare_daily_net_summary(self, first_date: str, second_date: str) -> Result:
        """Same computation for two days, side by side."""
        first = self.daily_net_summary(first_date)
        if not first.ok:
            return first
        second = self.daily_net_summary(second_date)
        if not second.ok:
            return second
        return Result.success(DailyNetComparison(first=first.value, second=second.value))

    def client_recovery(
        self,
        date_from: str,
        date_to: str,
        customer_id: Optional[int] = None,
        all_clients: bool = False,
    ) -> Result:
        """Sales in the period plus a per-customer amount / collection summary."""
        err = _range_error(date_from, date_to)
        if err is not None:
            return Result.fail(err)
        if not all_clients:
            if customer_id is None:
                return Result.fail(InvalidInput("Select a customer or all clients."))
            acc = self.accounts.get(customer_id)
            if acc is None or acc.kind != ACCOUNT_CUSTOMER:
                return Result.fail(NotFound("customer", customer_id))
        cid = None if all_clients else int(customer_id)
        sales = self.repo.customer_sales(date_from, date_to, cid)
        collections = self.repo.customer_collections(date_from, date_to, cid)
        return Result.success(build_client_recovery(sales, collections, date_from, date_to, cid))

    # ---- Sales -----------------------------------------------------------

    def vendor_sales(
        self,
        date_from: str,
        date_to: str,
        supplier_id: Optional[int] = None,
        all_vendors: bool = False,
    ) -> Result:
        err = _range_error(date_from, date_to)
        if err is not None:
            return Result.fail(err)
        if not all_vendors:
            if supplier_id is None:
                return Result.fail(InvalidInput("Select a supplier or all vendors."))
            acc = self.accounts.get(supplier_id)
            if acc is None or acc.kind != ACCOUNT_SUPPLIER:
                return Result.fail(NotFound("supplier", supplier_id))
        rows = self.repo.vendor_sale_lines(date_from, date_to, None if all_vendors else supplier_id)
        report = replace(group_vendor_sales(rows), date_from=date_from, date_to=date_to)
        return Result.success(report)

    def daily_sales(self, date_from: str, date_to: str) -> Result:
        err = _range_error(date_from, date_to)
        if err is not None:
            return Result.fail(err)
        rows = self.repo.sales_by_item(date_from, date_to)
        return Result.success(
            DailySalesReport(
                date_from=date_from,
                date_to=date_to,
                rows=rows,
                total_weight=weight(sum((r["total_weight"] for r in rows), ZERO)),
                total_amount=money(sum((r["total_amount"] for r in rows), ZERO)),
            )
        )

    def daily_sales_details(self, as_of: str) -> Result:
        if not is_iso_date(as_of):
            return Result.fail(InvalidInput("Date must be YYYY-MM-DD."))
        rows = self.repo.sale_lines_on(as_of)
        return Result.success(
            DailySalesDetailsReport(
                as_of=as_of,
                rows=rows,
                total_weight=weight(sum((r["weight"] for r in rows), ZERO)),
                total_amount=money(sum((r["amount"] for r in rows), ZERO)),
            )
        )

    def item_sales(self, item_id: int, date_from: str, date_to: str) -> Result:
        err = _range_error(date_from, date_to)
        if err is not None:
            return Result.fail(err)
        item = self.items.get(item_id)
        if item is None:
            return Result.fail(NotFound("item", item_id))
        rows = self.repo.item_sale_lines(item_id, date_from, date_to)
        return Result.success(_lines_report(item, date_from, date_to, rows))

    def item_purchases(self, item_id: int, date_from: str, date_to: str) -> Result:
        err = _range_error(date_from, date_to)
        if err is not None:
            return Result.fail(err)
        item = self.items.get(item_id)
        if item is None:
            return Result.fail(NotFound("item", item_id))
        rows = self.repo.item_purchase_lines(item_id, date_from, date_to)
        return Result.success(_lines_report(item, date_from, date_to, rows))

    # ---- Purchases -------------------------------------------------------

    def supplier_advances(self) -> Result:
        """Active suppliers paid ahead of what they are owed (negative balance)."""
        rows = [
            SupplierAdvanceRow(
                account_id=int(a.account_id),
                name=a.name,
                name_english=a.name_english,
                advance_amount=money(-a.current_balance),
            )
            for a in self.accounts.list_accounts(ACCOUNT_SUPPLIER)
            if a.current_balance < 0
        ]
        return Result.success(
            SupplierAdvances(rows=rows, total_advance=money(sum((r.advance_amount for r in rows), ZERO)))
        )

    def concession_report(
        self,
        date_from: str,
        date_to: str,
        supplier_id: Optional[int] = None,
        all_suppliers: bool = False,
    ) -> Result:
        err = _range_error(date_from, date_to)
        if err is not None:
            return Result.fail(err)
        if not all_suppliers:
            if supplier_id is None:
                return Result.fail(InvalidInput("Select a supplier or all suppliers."))
            if self.accounts.get(supplier_id) is None:
                return Result.fail(NotFound("supplier", supplier_id))
        sid = None if all_suppliers else int(supplier_id)
        rows = self.repo.concession_purchases(date_from, date_to, sid)
        return Result.success(
            ConcessionReport(
                date_from=date_from,
                date_to=date_to,
                rows=rows,
                total_gross_amount=money(sum((r["gross_amount"] for r in rows), ZERO)),
                total_concession=money(sum((r["concession_amount"] for r in rows), ZERO)),
                total_net_amount=money(sum((r["net_amount"] for r in rows), ZERO)),
                supplier_id=sid,
            )
        )
