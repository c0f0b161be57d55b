# fish_ledger/modules/reconciliation/inputs.py
"""
What a form hands to the coordinator. Raw user numbers (Decimal, int, str
or float) are accepted; the calculator normalizes them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, List, Optional, Union

from ...constants import STATUS_DRAFT
from ...utils.helpers import NumberLike


@dataclass
class PurchaseLineInput:
    item_id: int
    weight: NumberLike
    rate: NumberLike


@dataclass
class PurchaseInput:
    supplier_id: int
    date: str
    lines: List[PurchaseLineInput] = field(default_factory=list)
    concession_amount: NumberLike = 0
    cash_paid: NumberLike = 0
    vehicle_number: Optional[str] = None
    notes: Optional[str] = None
    status: str = STATUS_DRAFT

    kind: ClassVar[str] = "purchase"


@dataclass
class SaleLineInput:
    item_id: int
    gross_weight: NumberLike
    rate: NumberLike
    tare_weight: NumberLike = 0
    grocery_charges: NumberLike = 0
    ice_charges: NumberLike = 0
    from_stock: bool = True      # False: sold straight off a supplier's vehicle


@dataclass
class SaleInput:
    customer_id: int
    date: str
    lines: List[SaleLineInput] = field(default_factory=list)
    supplier_id: Optional[int] = None
    vehicle_number: Optional[str] = None
    cash_received: NumberLike = 0
    receipt_amount: NumberLike = 0
    notes: Optional[str] = None
    status: str = STATUS_DRAFT

    kind: ClassVar[str] = "sale"


@dataclass
class SupplierBillInput:
    supplier_id: int
    date: str
    date_from: str
    date_to: str
    commission_pct: Optional[NumberLike] = None   # None: supplier default, then app default
    drugs_charges: NumberLike = 0
    fare_charges: NumberLike = 0
    labor_charges: NumberLike = 0
    ice_charges: NumberLike = 0
    concession_amount: NumberLike = 0
    cash_paid: NumberLike = 0
    notes: Optional[str] = None
    status: str = STATUS_DRAFT

    kind: ClassVar[str] = "supplier_bill"


@dataclass
class PaymentInput:
    account_id: int
    date: str
    amount: NumberLike
    method: str = "cash"
    notes: Optional[str] = None
    status: str = STATUS_DRAFT

    kind: ClassVar[str] = "payment"


TransactionInput = Union[PurchaseInput, SaleInput, SupplierBillInput, PaymentInput]
