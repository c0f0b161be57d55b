from .coordinator import BillPreview, ReconciliationCoordinator
from .inputs import (
    PaymentInput,
    PurchaseInput,
    PurchaseLineInput,
    SaleInput,
    SaleLineInput,
    SupplierBillInput,
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

__all__ = [
    "BillPreview",
    "ReconciliationCoordinator",
    "PaymentInput",
    "PurchaseInput",
    "PurchaseLineInput",
    "SaleInput",
    "SaleLineInput",
    "SupplierBillInput",
    "InsufficientStock",
    "InvalidInput",
    "InvalidRange",
    "Locked",
    "NotFound",
    "Result",
    "StockShortfall",
]
