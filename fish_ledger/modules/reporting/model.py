# fish_ledger/modules/reporting/model.py
from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence, Tuple

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

from ...utils.helpers import fmt_money, fmt_weight
from .aggregator import LedgerReport, Register, StockReport, VendorSalesReport


def _text(v: Any) -> str:
    return "" if v is None else str(v)


def _field(row: Any, key: str) -> Any:
    if isinstance(row, dict):
        return row.get(key)
    return getattr(row, key, None)


# (header, row key, formatter, right-aligned)
Column = Tuple[str, str, Callable[[Any], str], bool]


class _ReportTableModel(QAbstractTableModel):
    """Read-only table over report rows (dataclasses or dicts)."""

    COLUMNS: Sequence[Column] = ()

    def __init__(self, rows: Optional[List[Any]] = None, parent=None) -> None:
        super().__init__(parent)
        self._rows: List[Any] = rows or []

    def set_rows(self, rows: List[Any]) -> None:
        self.beginResetModel()
        self._rows = rows or []
        self.endResetModel()

    def row_at(self, r: int) -> Any:
        return self._rows[r]

    def rowCount(self, parent=QModelIndex()) -> int:  # type: ignore[override]
        return 0 if parent.isValid() else len(self._rows)

    def columnCount(self, parent=QModelIndex()) -> int:  # type: ignore[override]
        return 0 if parent.isValid() else len(self.COLUMNS)

    def headerData(self, section, orientation, role=Qt.DisplayRole):  # type: ignore[override]
        if role != Qt.DisplayRole:
            return None
        if orientation == Qt.Horizontal:
            return self.COLUMNS[section][0]
        return str(section + 1)

    def data(self, index: QModelIndex, role=Qt.DisplayRole):  # type: ignore[override]
        if not index.isValid():
            return None
        _header, key, fmt, numeric = self.COLUMNS[index.column()]
        if role == Qt.DisplayRole:
            return fmt(_field(self._rows[index.row()], key))
        if role == Qt.TextAlignmentRole:
            return (Qt.AlignRight | Qt.AlignVCenter) if numeric else (Qt.AlignLeft | Qt.AlignVCenter)
        return None


# ------------------------------ A) Stock Report ------------------------------

class StockReportTableModel(_ReportTableModel):
    COLUMNS = (
        ("Item", "item_name", _text, False),
        ("Previous Stock", "previous_stock", fmt_weight, True),
        ("Purchases", "today_purchases", fmt_weight, True),
        ("Sales", "today_sales", fmt_weight, True),
        ("Remaining", "remaining_stock", fmt_weight, True),
    )

    def set_report(self, report: StockReport) -> None:
        self.set_rows(list(report.rows))


# ------------------------------ B) Ledger Report -----------------------------

class LedgerReportTableModel(_ReportTableModel):
    COLUMNS = (
        ("Date", "date", _text, False),
        ("Description", "description", _text, False),
        ("Debit", "debit", fmt_money, True),
        ("Credit", "credit", fmt_money, True),
        ("Balance", "balance", fmt_money, True),
    )

    def set_report(self, report: LedgerReport) -> None:
        self.set_rows(list(report.rows))


# ------------------------------ C) Register ----------------------------------

class RegisterTableModel(_ReportTableModel):
    COLUMNS = (
        ("Name", "name", _text, False),
        ("Previous Balance", "previous_balance", fmt_money, True),
        ("Net Amount", "net_amount", fmt_money, True),
        ("Collection", "collection", fmt_money, True),
        ("Balance", "balance", fmt_money, True),
    )

    def set_report(self, report: Register) -> None:
        self.set_rows(list(report.rows))


# ------------------------------ D) Vendor Sales ------------------------------

class VendorSalesTableModel(_ReportTableModel):
    """Flattened groups: each sale line carries its supplier name."""

    COLUMNS = (
        ("Supplier", "supplier_name", _text, False),
        ("Date", "date", _text, False),
        ("Vehicle", "vehicle_number", _text, False),
        ("Customer", "customer_name", _text, False),
        ("Item", "item_name", _text, False),
        ("Weight", "net_weight", fmt_weight, True),
        ("Rate", "rate", fmt_money, True),
        ("Amount", "amount", fmt_money, True),
    )

    def set_report(self, report: VendorSalesReport) -> None:
        self.set_rows([row for g in report.groups for row in g.rows])
