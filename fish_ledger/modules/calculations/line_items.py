# fish_ledger/modules/calculations/line_items.py
"""
Line-item arithmetic for purchases, sales and supplier bills.

Pure functions over Decimal. Weights are rounded to 3 places and money to 2
places (half-up) at line level and again at header level, so the same input
always produces the same stored totals.

Lines are duck-typed: anything with the attributes a function reads
(`weight`/`rate` for purchases; `gross_weight`, `tare_weight`, `rate`,
`grocery_charges`, `ice_charges` for sales) can be passed, including the
input dataclasses and the repository line objects.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, List

from ...constants import KG_PER_MAUND
from ...utils.helpers import ZERO, NumberLike, money, to_decimal, weight


# ------------------------------- Purchases ---------------------------------

@dataclass(frozen=True)
class PurchaseTotals:
    total_weight: Decimal
    gross_amount: Decimal
    concession_amount: Decimal
    net_amount: Decimal
    cash_paid: Decimal
    previous_balance: Decimal
    balance_amount: Decimal
    line_amounts: List[Decimal] = field(default_factory=list)


def purchase_line_amount(weight_kg: NumberLike, rate: NumberLike) -> Decimal:
    """amount = weight × rate."""
    return money(weight(weight_kg) * money(rate))


def purchase_totals(
    lines: Iterable,
    *,
    concession_amount: NumberLike = 0,
    cash_paid: NumberLike = 0,
    previous_balance: NumberLike = 0,
) -> PurchaseTotals:
    """
    total_weight   = Σ weight
    gross_amount   = Σ amount
    net_amount     = gross_amount − concession_amount
    balance_amount = net_amount − cash_paid + previous_balance
    """
    total_weight = ZERO
    gross = ZERO
    amounts: List[Decimal] = []
    for ln in lines:
        amt = purchase_line_amount(ln.weight, ln.rate)
        amounts.append(amt)
        total_weight += weight(ln.weight)
        gross += amt
    concession = money(concession_amount)
    cash = money(cash_paid)
    previous = money(previous_balance)
    net = money(gross - concession)
    return PurchaseTotals(
        total_weight=weight(total_weight),
        gross_amount=money(gross),
        concession_amount=concession,
        net_amount=net,
        cash_paid=cash,
        previous_balance=previous,
        balance_amount=money(net - cash + previous),
        line_amounts=amounts,
    )


# --------------------------------- Sales -----------------------------------

@dataclass(frozen=True)
class SaleLineAmounts:
    net_weight: Decimal
    amount: Decimal
    grocery_charges: Decimal
    ice_charges: Decimal
    line_net_amount: Decimal


@dataclass(frozen=True)
class SaleTotals:
    total_weight: Decimal
    gross_amount: Decimal
    total_charges: Decimal
    net_amount: Decimal
    cash_received: Decimal
    receipt_amount: Decimal
    balance_amount: Decimal
    lines: List[SaleLineAmounts] = field(default_factory=list)


def sale_line_amounts(
    gross_weight: NumberLike,
    rate: NumberLike,
    *,
    tare_weight: NumberLike = 0,
    grocery_charges: NumberLike = 0,
    ice_charges: NumberLike = 0,
) -> SaleLineAmounts:
    net_w = max(ZERO, weight(gross_weight) - weight(tare_weight))
    net_w = weight(net_w)
    amount = money(net_w * money(rate))
    grocery = money(grocery_charges)
    ice = money(ice_charges)
    return SaleLineAmounts(
        net_weight=net_w,
        amount=amount,
        grocery_charges=grocery,
        ice_charges=ice,
        line_net_amount=money(amount + grocery + ice),
    )


def sale_totals(
    lines: Iterable,
    *,
    cash_received: NumberLike = 0,
    receipt_amount: NumberLike = 0,
) -> SaleTotals:
    """
    gross_amount   = Σ amount
    net_amount     = gross_amount + Σ grocery + Σ ice
    balance_amount = net_amount − cash_received − receipt_amount
    """
    computed = [
        sale_line_amounts(
            ln.gross_weight,
            ln.rate,
            tare_weight=ln.tare_weight,
            grocery_charges=ln.grocery_charges,
            ice_charges=ln.ice_charges,
        )
        for ln in lines
    ]
    total_weight = sum((c.net_weight for c in computed), ZERO)
    gross = sum((c.amount for c in computed), ZERO)
    charges = sum((c.grocery_charges + c.ice_charges for c in computed), ZERO)
    cash = money(cash_received)
    receipt = money(receipt_amount)
    net = money(gross + charges)
    return SaleTotals(
        total_weight=weight(total_weight),
        gross_amount=money(gross),
        total_charges=money(charges),
        net_amount=net,
        cash_received=cash,
        receipt_amount=receipt,
        balance_amount=money(net - cash - receipt),
        lines=computed,
    )


# ----------------------------- Supplier bills ------------------------------

@dataclass(frozen=True)
class SupplierBillTotals:
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


def supplier_bill_totals(
    *,
    gross_amount: NumberLike,
    total_weight: NumberLike = 0,
    commission_pct: NumberLike = 0,
    drugs_charges: NumberLike = 0,
    fare_charges: NumberLike = 0,
    labor_charges: NumberLike = 0,
    ice_charges: NumberLike = 0,
    concession_amount: NumberLike = 0,
    cash_paid: NumberLike = 0,
) -> SupplierBillTotals:
    """
    commission_amount = gross_amount × commission_pct / 100
    total_charges     = drugs + fare + labor + ice
    net_payable       = gross_amount − commission_amount − total_charges
    total_payable     = net_payable − concession_amount
    balance_amount    = total_payable − cash_paid
    """
    gross = money(gross_amount)
    pct = to_decimal(commission_pct)
    commission = money(gross * pct / Decimal(100))
    drugs, fare, labor, ice = (money(drugs_charges), money(fare_charges),
                               money(labor_charges), money(ice_charges))
    charges = drugs + fare + labor + ice
    net_payable = gross - commission - charges
    concession = money(concession_amount)
    total_payable = net_payable - concession
    cash = money(cash_paid)
    return SupplierBillTotals(
        total_weight=weight(total_weight),
        gross_amount=gross,
        commission_pct=money(pct),
        commission_amount=commission,
        drugs_charges=drugs,
        fare_charges=fare,
        labor_charges=labor,
        ice_charges=ice,
        total_charges=money(charges),
        net_payable=money(net_payable),
        concession_amount=concession,
        total_payable=money(total_payable),
        cash_paid=cash,
        balance_amount=money(total_payable - cash),
    )


# ----------------------------- Rate conversion -----------------------------

def rate_per_kg(rate_per_maund_value: NumberLike) -> Decimal:
    """Maund rate → kg rate (1 maund = 40 kg)."""
    return money(to_decimal(rate_per_maund_value) / KG_PER_MAUND)


def rate_per_maund(rate_per_kg_value: NumberLike) -> Decimal:
    return money(to_decimal(rate_per_kg_value) * KG_PER_MAUND)
