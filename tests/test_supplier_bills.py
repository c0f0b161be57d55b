# tests/test_supplier_bills.py
from decimal import Decimal

import pytest

from fish_ledger.modules.reconciliation import (
    InvalidInput,
    InvalidRange,
    Locked,
    PaymentInput,
    SaleInput,
    SaleLineInput,
    SupplierBillInput,
)

D = Decimal


def consign(coordinator, customer_id, supplier_id, date, item_id, weight, rate, vehicle=None):
    res = coordinator.create_transaction(
        SaleInput(
            customer_id=customer_id,
            supplier_id=supplier_id,
            vehicle_number=vehicle,
            date=date,
            lines=[SaleLineInput(item_id, gross_weight=weight, rate=rate, from_stock=False)],
        )
    )
    assert res.ok, res.error
    return res.value


@pytest.fixture()
def consigned(coordinator, ids):
    """Supplier A: two sales inside 1–7 March, one after; supplier B: one inside."""
    c, a, b = ids["customer_a"], ids["supplier_a"], ids["supplier_b"]
    consign(coordinator, c, a, "2024-03-01", ids["prawn"], 12, 900, "KHI-1")
    consign(coordinator, c, a, "2024-03-05", ids["pomfret"], 10, 500, "KHI-2")
    consign(coordinator, c, a, "2024-03-09", ids["rohu"], 1, 100, "KHI-3")
    consign(coordinator, c, b, "2024-03-02", ids["rohu"], 2, 300, "GWD-7")
    return ids


def bill_input(supplier_id, **kw):
    base = dict(
        supplier_id=supplier_id,
        date="2024-03-08",
        date_from="2024-03-01",
        date_to="2024-03-07",
        fare_charges=300,
        labor_charges=200,
        cash_paid=1000,
    )
    base.update(kw)
    return SupplierBillInput(**base)


def test_preview_aggregates_supplier_lines_in_range(coordinator, consigned):
    res = coordinator.preview_supplier_bill(consigned["supplier_a"], "2024-03-01", "2024-03-07")
    assert res.ok
    preview = res.value
    assert [ln["item_name"] for ln in preview.lines] == ["Prawn", "Pomfret"]
    assert preview.total_weight == D("22.000")
    assert preview.gross_amount == D("15800.00")
    assert preview.commission_pct == D("6.00")  # supplier default


def test_create_bill_computes_and_posts_supplier_entries(coordinator, consigned):
    sup = consigned["supplier_a"]
    res = coordinator.create_transaction(bill_input(sup))
    assert res.ok, res.error
    bill = res.value

    assert bill.bill_number == "BILL-000001"
    assert bill.gross_amount == D("15800.00")
    assert bill.commission_amount == D("948.00")
    assert bill.total_charges == D("500.00")
    assert bill.net_payable == D("14352.00")
    assert bill.total_payable == D("14352.00")
    assert bill.balance_amount == D("13352.00")
    assert coordinator.current_balance(sup) == D("13352.00")
    assert coordinator.stock.movements_for(bill.reference) == []


def test_bill_commission_falls_back_to_app_default(coordinator, consigned):
    res = coordinator.create_transaction(bill_input(consigned["supplier_b"], cash_paid=0, fare_charges=0, labor_charges=0))
    assert res.ok
    assert res.value.commission_pct == D("5.00")
    assert res.value.commission_amount == D("30.00")
    assert res.value.total_payable == D("570.00")


def test_explicit_commission_overrides_defaults(coordinator, consigned):
    res = coordinator.create_transaction(bill_input(consigned["supplier_a"], commission_pct="4.5"))
    assert res.value.commission_amount == D("711.00")


def test_bill_rejects_inverted_range(coordinator, consigned, snapshot):
    before = snapshot()
    res = coordinator.create_transaction(
        bill_input(consigned["supplier_a"], date_from="2024-03-07", date_to="2024-03-01")
    )
    assert res.error == InvalidRange("2024-03-07", "2024-03-01")
    assert snapshot() == before
    assert coordinator.preview_supplier_bill(consigned["supplier_a"], "2024-03-07", "2024-03-01").error == InvalidRange(
        "2024-03-07", "2024-03-01"
    )


def test_bill_rejects_bad_commission(coordinator, consigned):
    res = coordinator.create_transaction(bill_input(consigned["supplier_a"], commission_pct="150"))
    assert isinstance(res.error, InvalidInput)


def test_update_bill_recomputes_from_current_sales(coordinator, consigned):
    sup = consigned["supplier_a"]
    bill = coordinator.create_transaction(bill_input(sup)).value
    consign(coordinator, consigned["customer_b"], sup, "2024-03-03", consigned["rohu"], 1, 200)

    res = coordinator.update_transaction("supplier_bill", bill.bill_id, bill_input(sup))
    assert res.ok, res.error
    assert res.value.bill_number == "BILL-000001"
    assert res.value.gross_amount == D("16000.00")
    assert res.value.balance_amount == D("13540.00")
    assert coordinator.current_balance(sup) == D("13540.00")


def test_delete_and_lock_bill(coordinator, consigned):
    sup = consigned["supplier_a"]
    first = coordinator.create_transaction(bill_input(sup)).value
    assert coordinator.delete_transaction("supplier_bill", first.bill_id).ok
    assert coordinator.current_balance(sup) == D("0.00")

    second = coordinator.create_transaction(bill_input(sup)).value
    coordinator.post_transaction("supplier_bill", second.bill_id)
    res = coordinator.delete_transaction("supplier_bill", second.bill_id)
    assert res.error == Locked("supplier_bill", second.bill_id)


def test_preview_shows_advance_held_by_supplier(coordinator, consigned):
    assert coordinator.create_transaction(PaymentInput(consigned["supplier_b"], "2024-03-01", 1500)).ok

    held = coordinator.preview_supplier_bill(consigned["supplier_b"], "2024-03-01", "2024-03-07").value
    assert held.supplier_advance == D("500.00")
    owed = coordinator.preview_supplier_bill(consigned["supplier_a"], "2024-03-01", "2024-03-07").value
    assert owed.supplier_advance == D("0.00")
