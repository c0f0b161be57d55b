from .stock_ledger import Availability, StockLedger, opening_reference

__all__ = [
    "Availability",
    "StockLedger",
    "opening_reference",
]
