# tests/test_report_models.py
from decimal import Decimal

from PySide6.QtCore import Qt

from fish_ledger.modules.reporting.aggregator import build_register, build_stock_report, group_vendor_sales
from fish_ledger.modules.reporting.model import (
    RegisterTableModel,
    StockReportTableModel,
    VendorSalesTableModel,
)


def _stock_report():
    return build_stock_report(
        [
            {"item_id": 1, "item_name": "Rohu", "opening_stock": "1200.5", "today_purchases": 50, "today_sales": 0},
            {"item_id": 2, "item_name": "Prawn", "opening_stock": 0, "today_purchases": 0, "today_sales": 0},
        ],
        "2024-03-01",
    )


def test_stock_model_shape_and_headers(app):
    model = StockReportTableModel()
    assert model.rowCount() == 0
    model.set_report(_stock_report())

    assert model.rowCount() == 2
    assert model.columnCount() == 5
    assert model.headerData(0, Qt.Horizontal) == "Item"
    assert model.headerData(4, Qt.Horizontal) == "Remaining"
    assert model.headerData(1, Qt.Vertical) == "2"


def test_stock_model_formats_weights_and_aligns_numbers(app):
    model = StockReportTableModel()
    model.set_report(_stock_report())

    assert model.data(model.index(0, 0)) == "Rohu"
    assert model.data(model.index(0, 1)) == "1,200.500"
    assert model.data(model.index(0, 4)) == "1,250.500"
    assert model.data(model.index(0, 1), Qt.TextAlignmentRole) == (Qt.AlignRight | Qt.AlignVCenter)
    assert model.data(model.index(0, 0), Qt.TextAlignmentRole) == (Qt.AlignLeft | Qt.AlignVCenter)
    assert model.row_at(1).item_name == "Prawn"


def test_register_model_formats_money(app):
    reg = build_register(
        "customer",
        [{"account_id": 7, "name": "Bilal", "opening_balance": "500", "before_net": "1000",
          "period_debit": "2050", "period_credit": "1000"}],
    )
    model = RegisterTableModel()
    model.set_report(reg)

    assert model.data(model.index(0, 1)) == "1,500.00"
    assert model.data(model.index(0, 4)) == "2,550.00"
    assert model.row_at(0).balance == Decimal("2550.00")


def test_vendor_model_flattens_groups(app):
    report = group_vendor_sales(
        [
            {"supplier_id": 1, "supplier_name": "A", "date": "2024-03-01", "vehicle_number": "X1",
             "customer_name": "C", "item_name": "Rohu", "net_weight": Decimal("2.000"),
             "rate": Decimal("300.00"), "amount": Decimal("600.00")},
            {"supplier_id": 2, "supplier_name": "B", "date": "2024-03-02", "vehicle_number": None,
             "customer_name": "C", "item_name": "Prawn", "net_weight": Decimal("1.000"),
             "rate": Decimal("900.00"), "amount": Decimal("900.00")},
        ]
    )
    model = VendorSalesTableModel()
    model.set_report(report)

    assert model.rowCount() == 2
    assert [model.data(model.index(r, 0)) for r in range(2)] == ["A", "B"]
    assert model.data(model.index(1, 2)) == ""
    assert model.data(model.index(1, 7)) == "900.00"
