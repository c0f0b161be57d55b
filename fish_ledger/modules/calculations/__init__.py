from .line_items import (
    PurchaseTotals,
    SaleLineAmounts,
    SaleTotals,
    SupplierBillTotals,
    purchase_line_amount,
    purchase_totals,
    rate_per_kg,
    rate_per_maund,
    sale_line_amounts,
    sale_totals,
    supplier_bill_totals,
)

__all__ = [
    "PurchaseTotals",
    "SaleLineAmounts",
    "SaleTotals",
    "SupplierBillTotals",
    "purchase_line_amount",
    "purchase_totals",
    "rate_per_kg",
    "rate_per_maund",
    "sale_line_amounts",
    "sale_totals",
    "supplier_bill_totals",
]
