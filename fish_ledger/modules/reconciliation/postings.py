# fish_ledger/modules/reconciliation/postings.py
"""
Posting rules: how each transaction kind turns into stock movements and
ledger entries.

    kind           stock                      ledger (account: debit / credit)
    purchase       +weight per item           supplier: net_amount / cash_paid
    sale           −net_weight (stock lines)  customer: net_amount / cash_received, receipt_amount
    supplier_bill  none                       supplier: total_payable / cash_paid
    payment        none                       party:    - / amount

The plan_* functions are pure: they compute the header with the line-item
calculator and list the effects. The coordinator applies them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ...constants import (
    ENTRY_BILL,
    ENTRY_BILL_CASH,
    ENTRY_PAYMENT,
    ENTRY_PURCHASE,
    ENTRY_PURCHASE_CASH,
    ENTRY_SALE,
    ENTRY_SALE_CASH,
    ENTRY_SALE_RECEIPT,
)
from ...database.repositories.payments_repo import Payment
from ...database.repositories.purchases_repo import Purchase, PurchaseLine
from ...database.repositories.sales_repo import Sale, SaleLine
from ...database.repositories.supplier_bills_repo import SupplierBill
from ...utils.helpers import NumberLike, ZERO, money, weight
from ..calculations.line_items import purchase_totals, sale_totals, supplier_bill_totals
from .inputs import PaymentInput, PurchaseInput, SaleInput, SupplierBillInput


@dataclass(frozen=True)
class StockEffect:
    item_id: int
    quantity: Decimal      # signed
    kind: str


@dataclass(frozen=True)
class LedgerEffect:
    account_id: int
    entry_type: str
    debit: Decimal
    credit: Decimal
    label: str


@dataclass
class PostingPlan:
    transaction: Any
    stock: List[StockEffect] = field(default_factory=list)
    ledger: List[LedgerEffect] = field(default_factory=list)

    def stock_by_item(self) -> Dict[int, Decimal]:
        out: Dict[int, Decimal] = {}
        for s in self.stock:
            out[s.item_id] = out.get(s.item_id, ZERO) + s.quantity
        return out


def _merge_stock(effects: List[StockEffect]) -> List[StockEffect]:
    """One effect per item, first-seen order; zero nets dropped."""
    totals: Dict[int, Decimal] = {}
    kinds: Dict[int, str] = {}
    for e in effects:
        totals[e.item_id] = totals.get(e.item_id, ZERO) + e.quantity
        kinds.setdefault(e.item_id, e.kind)
    return [
        StockEffect(item_id=i, quantity=weight(q), kind=kinds[i])
        for i, q in totals.items()
        if weight(q) != 0
    ]


def _debit(account_id: int, entry_type: str, amount: Decimal, label: str) -> Optional[LedgerEffect]:
    if amount == 0:
        return None
    if amount < 0:
        # a negative total still has to land on the right side
        return LedgerEffect(account_id, entry_type, ZERO, money(-amount), label)
    return LedgerEffect(account_id, entry_type, money(amount), ZERO, label)


def _credit(account_id: int, entry_type: str, amount: Decimal, label: str) -> Optional[LedgerEffect]:
    if amount == 0:
        return None
    if amount < 0:
        return LedgerEffect(account_id, entry_type, money(-amount), ZERO, label)
    return LedgerEffect(account_id, entry_type, ZERO, money(amount), label)


def _present(*effects: Optional[LedgerEffect]) -> List[LedgerEffect]:
    return [e for e in effects if e is not None]


# --------------------------------------------------------------------------

def plan_purchase(data: PurchaseInput, *, previous_balance: NumberLike = 0) -> PostingPlan:
    totals = purchase_totals(
        data.lines,
        concession_amount=data.concession_amount,
        cash_paid=data.cash_paid,
        previous_balance=previous_balance,
    )
    lines = [
        PurchaseLine(item_id=int(ln.item_id), weight=weight(ln.weight), rate=money(ln.rate), amount=amt)
        for ln, amt in zip(data.lines, totals.line_amounts)
    ]
    purchase = Purchase(
        purchase_id=None,
        purchase_number=None,
        supplier_id=int(data.supplier_id),
        date=data.date,
        vehicle_number=data.vehicle_number,
        total_weight=totals.total_weight,
        gross_amount=totals.gross_amount,
        concession_amount=totals.concession_amount,
        net_amount=totals.net_amount,
        cash_paid=totals.cash_paid,
        previous_balance=totals.previous_balance,
        balance_amount=totals.balance_amount,
        status=data.status,
        notes=data.notes,
        lines=lines,
    )
    stock = _merge_stock([StockEffect(ln.item_id, ln.weight, "purchase") for ln in lines])
    ledger = _present(
        _debit(purchase.supplier_id, ENTRY_PURCHASE, totals.net_amount, "Purchase"),
        _credit(purchase.supplier_id, ENTRY_PURCHASE_CASH, totals.cash_paid, "Cash paid, purchase"),
    )
    return PostingPlan(purchase, stock, ledger)


def plan_sale(data: SaleInput) -> PostingPlan:
    totals = sale_totals(
        data.lines,
        cash_received=data.cash_received,
        receipt_amount=data.receipt_amount,
    )
    lines = [
        SaleLine(
            item_id=int(ln.item_id),
            gross_weight=weight(ln.gross_weight),
            tare_weight=weight(ln.tare_weight),
            net_weight=c.net_weight,
            rate=money(ln.rate),
            amount=c.amount,
            grocery_charges=c.grocery_charges,
            ice_charges=c.ice_charges,
            line_net_amount=c.line_net_amount,
            from_stock=bool(ln.from_stock),
        )
        for ln, c in zip(data.lines, totals.lines)
    ]
    sale = Sale(
        sale_id=None,
        sale_number=None,
        customer_id=int(data.customer_id),
        supplier_id=None if data.supplier_id is None else int(data.supplier_id),
        date=data.date,
        vehicle_number=data.vehicle_number,
        total_weight=totals.total_weight,
        gross_amount=totals.gross_amount,
        total_charges=totals.total_charges,
        net_amount=totals.net_amount,
        cash_received=totals.cash_received,
        receipt_amount=totals.receipt_amount,
        balance_amount=totals.balance_amount,
        status=data.status,
        notes=data.notes,
        lines=lines,
    )
    stock = _merge_stock(
        [StockEffect(ln.item_id, -ln.net_weight, "sale") for ln in lines if ln.from_stock]
    )
    ledger = _present(
        _debit(sale.customer_id, ENTRY_SALE, totals.net_amount, "Sale"),
        _credit(sale.customer_id, ENTRY_SALE_CASH, totals.cash_received, "Cash received, sale"),
        _credit(sale.customer_id, ENTRY_SALE_RECEIPT, totals.receipt_amount, "Receipt, sale"),
    )
    return PostingPlan(sale, stock, ledger)


def plan_supplier_bill(
    data: SupplierBillInput,
    *,
    gross_amount: NumberLike,
    total_weight: NumberLike,
    commission_pct: NumberLike,
) -> PostingPlan:
    totals = supplier_bill_totals(
        gross_amount=gross_amount,
        total_weight=total_weight,
        commission_pct=commission_pct,
        drugs_charges=data.drugs_charges,
        fare_charges=data.fare_charges,
        labor_charges=data.labor_charges,
        ice_charges=data.ice_charges,
        concession_amount=data.concession_amount,
        cash_paid=data.cash_paid,
    )
    bill = SupplierBill(
        bill_id=None,
        bill_number=None,
        supplier_id=int(data.supplier_id),
        date=data.date,
        date_from=data.date_from,
        date_to=data.date_to,
        total_weight=totals.total_weight,
        gross_amount=totals.gross_amount,
        commission_pct=totals.commission_pct,
        commission_amount=totals.commission_amount,
        drugs_charges=totals.drugs_charges,
        fare_charges=totals.fare_charges,
        labor_charges=totals.labor_charges,
        ice_charges=totals.ice_charges,
        total_charges=totals.total_charges,
        net_payable=totals.net_payable,
        concession_amount=totals.concession_amount,
        total_payable=totals.total_payable,
        cash_paid=totals.cash_paid,
        balance_amount=totals.balance_amount,
        status=data.status,
        notes=data.notes,
    )
    ledger = _present(
        _debit(bill.supplier_id, ENTRY_BILL, totals.total_payable, "Supplier bill"),
        _credit(bill.supplier_id, ENTRY_BILL_CASH, totals.cash_paid, "Cash paid, bill"),
    )
    return PostingPlan(bill, [], ledger)


def plan_payment(data: PaymentInput) -> PostingPlan:
    amount = money(data.amount)
    payment = Payment(
        payment_id=None,
        payment_number=None,
        account_id=int(data.account_id),
        date=data.date,
        amount=amount,
        method=data.method,
        status=data.status,
        notes=data.notes,
    )
    ledger = _present(_credit(payment.account_id, ENTRY_PAYMENT, amount, "Payment"))
    return PostingPlan(payment, [], ledger)
