# tests/test_reporting.py
from decimal import Decimal

import pytest

from fish_ledger.modules.reconciliation import (
    InvalidInput,
    InvalidRange,
    NotFound,
    PaymentInput,
    PurchaseInput,
    PurchaseLineInput,
    SaleInput,
    SaleLineInput,
)
from fish_ledger.modules.reporting.aggregator import build_client_recovery, build_stock_report, group_vendor_sales

D = Decimal


def buy(coordinator, supplier_id, date, item_id, weight, rate, **kw):
    res = coordinator.create_transaction(
        PurchaseInput(supplier_id, date, [PurchaseLineInput(item_id, weight, rate)], **kw)
    )
    assert res.ok, res.error
    return res.value


def sell(coordinator, customer_id, date, item_id, weight, rate, *, from_stock=True, supplier_id=None,
         vehicle=None, grocery=0, **kw):
    res = coordinator.create_transaction(
        SaleInput(
            customer_id=customer_id,
            date=date,
            supplier_id=supplier_id,
            vehicle_number=vehicle,
            lines=[SaleLineInput(item_id, gross_weight=weight, rate=rate, grocery_charges=grocery,
                                 from_stock=from_stock)],
            **kw,
        )
    )
    assert res.ok, res.error
    return res.value


# =============================================================================
# Stock report
# =============================================================================

def test_stock_report_identity_pure():
    raw = [
        {"item_id": 1, "item_name": "Rohu", "opening_stock": 100, "purchases_before": 0,
         "sales_before": 0, "today_purchases": 20, "today_sales": 30},
        {"item_id": 2, "item_name": "Pomfret", "opening_stock": 150, "purchases_before": 70,
         "sales_before": 20, "today_purchases": 40, "today_sales": 10},
    ]
    report = build_stock_report(raw, "2024-03-01")
    assert [r.previous_stock for r in report.rows] == [D("100.000"), D("200.000")]
    assert [r.remaining_stock for r in report.rows] == [D("90.000"), D("230.000")]
    assert report.total_previous_stock == D("300.000")
    assert report.total_today_purchases == D("60.000")
    assert report.total_today_sales == D("40.000")
    assert report.total_remaining_stock == D("320.000")
    for r in report.rows:
        assert r.remaining_stock == r.previous_stock + r.today_purchases - r.today_sales


def test_stock_report_from_ledgers(coordinator, reports, ids):
    rohu, pomfret = ids["rohu"], ids["pomfret"]
    sup, cust = ids["supplier_a"], ids["customer_a"]
    coordinator.set_opening_stock(rohu, 80, "2024-01-01")
    coordinator.set_opening_stock(pomfret, 200, "2024-01-01")
    buy(coordinator, sup, "2024-02-28", rohu, 30, 100)
    sell(coordinator, cust, "2024-02-29", rohu, 10, 150)
    # the day itself
    buy(coordinator, sup, "2024-03-01", rohu, 20, 100)
    buy(coordinator, sup, "2024-03-01", pomfret, 40, 100)
    sell(coordinator, cust, "2024-03-01", rohu, 30, 150)
    sell(coordinator, cust, "2024-03-01", pomfret, 10, 150)
    # later movements are ignored
    buy(coordinator, sup, "2024-03-02", rohu, 5, 100)

    res = reports.stock_report("2024-03-01")
    assert res.ok
    by_name = {r.item_name: r for r in res.value.rows}
    assert [r.item_name for r in res.value.rows] == ["Pomfret", "Prawn", "Rohu"]
    assert by_name["Rohu"].previous_stock == D("100.000")
    assert by_name["Rohu"].remaining_stock == D("90.000")
    assert by_name["Pomfret"].remaining_stock == D("230.000")
    assert res.value.total_previous_stock == D("300.000")
    assert res.value.total_remaining_stock == D("320.000")


def test_stock_report_rejects_bad_date(reports):
    assert isinstance(reports.stock_report("yesterday").error, InvalidInput)


# =============================================================================
# Customer activity: register, ledger report, daily net summary
# =============================================================================

@pytest.fixture()
def customer_activity(coordinator, ids):
    """
    Bilal (opening 500): sale 1000 on 20 Feb; sale 2000 + grocery 50 with cash 300
    on 5 Mar; payment 700 on 10 Mar. Akram has no activity.
    """
    cust = ids["customer_b"]
    sell(coordinator, cust, "2024-02-20", ids["prawn"], 10, 100, from_stock=False)
    sell(coordinator, cust, "2024-03-05", ids["prawn"], 20, 100, from_stock=False, grocery=50, cash_received=300)
    assert coordinator.create_transaction(PaymentInput(cust, "2024-03-10", 700)).ok
    return ids


def test_customer_register_for_period(reports, customer_activity):
    res = reports.register("customer", "2024-03-31", date_from="2024-03-01")
    assert res.ok
    reg = res.value
    assert [r.name for r in reg.rows] == ["Akram Traders", "Bilal Fish House"]
    bilal = reg.rows[1]
    assert bilal.previous_balance == D("1500.00")
    assert bilal.net_amount == D("2050.00")
    assert bilal.collection == D("1000.00")
    assert bilal.balance == D("2550.00")
    assert reg.rows[0].balance == D("0.00")
    assert reg.total_previous_balance == D("1500.00")
    assert reg.total_balance == D("2550.00")


def test_register_without_start_date_covers_everything(reports, customer_activity):
    reg = reports.register("customer", "2024-03-31").value
    bilal = reg.rows[1]
    assert bilal.previous_balance == D("500.00")
    assert bilal.net_amount == D("3050.00")
    assert bilal.balance == D("2550.00")


def test_register_validation(reports, customer_activity):
    assert isinstance(reports.register("vendor", "2024-03-31").error, InvalidInput)
    assert reports.register("customer", "2024-03-01", date_from="2024-03-31").error == InvalidRange(
        "2024-03-31", "2024-03-01"
    )


def test_ledger_report_running_balance(reports, coordinator, customer_activity):
    cust = customer_activity["customer_b"]
    res = reports.ledger_report(cust, "2024-03-01", "2024-03-31")
    assert res.ok
    rep = res.value
    assert rep.opening_balance == D("1500.00")
    assert [r.balance for r in rep.rows] == [D("3550.00"), D("3250.00"), D("2550.00")]
    assert [r.entry_type for r in rep.rows] == ["sale", "sale_cash", "payment"]
    assert rep.total_debit == D("2050.00")
    assert rep.total_credit == D("1000.00")
    assert rep.closing_balance == coordinator.current_balance(cust)


def test_ledger_report_errors(reports, customer_activity):
    assert reports.ledger_report(customer_activity["customer_b"], "2024-03-31", "2024-03-01").error == InvalidRange(
        "2024-03-31", "2024-03-01"
    )
    assert reports.ledger_report(4242, "2024-03-01", "2024-03-31").error == NotFound("account", 4242)


def test_daily_net_summary(reports, customer_activity):
    s = reports.daily_net_summary("2024-03-05").value
    assert s.previous_balance == D("1500.00")
    assert s.today_sales == D("2000.00")
    assert s.today_charges == D("50.00")
    assert s.total_amount == D("3550.00")
    assert s.cash_received == D("300.00")
    assert s.payments_received == D("0.00")
    assert s.total_collection == D("300.00")
    assert s.closing_balance == D("3250.00")


def test_compare_daily_net_summary(reports, customer_activity):
    cmp_ = reports.compare_daily_net_summary("2024-03-05", "2024-03-10").value
    assert cmp_.first.closing_balance == D("3250.00")
    assert cmp_.second.previous_balance == D("3250.00")
    assert cmp_.second.payments_received == D("700.00")
    assert cmp_.second.closing_balance == D("2550.00")
    assert cmp_.closing_difference == D("-700.00")


# =============================================================================
# Vendor sales and sales summaries
# =============================================================================

def test_group_vendor_sales_pure():
    rows = [
        {"supplier_id": 2, "supplier_name": "B", "vehicle_number": "V1", "net_weight": 10, "amount": 100},
        {"supplier_id": 1, "supplier_name": "A", "vehicle_number": "X1", "net_weight": 5, "amount": 50},
        {"supplier_id": 2, "supplier_name": "B", "vehicle_number": "v1 ", "net_weight": 3, "amount": 30},
        {"supplier_id": 2, "supplier_name": "B", "vehicle_number": "", "net_weight": 2, "amount": 20},
        {"supplier_id": 1, "supplier_name": "A", "vehicle_number": None, "net_weight": 1, "amount": 10},
    ]
    report = group_vendor_sales(rows)

    assert [g.supplier_id for g in report.groups] == [2, 1]
    b, a = report.groups
    assert b.rows == [rows[0], rows[2], rows[3]]
    assert (b.vehicle_count, b.total_weight, b.total_amount) == (1, D("15.000"), D("150.00"))
    assert (a.vehicle_count, a.total_weight, a.total_amount) == (1, D("6.000"), D("60.00"))
    assert report.total_vehicles == 2
    assert report.total_weight == D("21.000")
    assert report.total_amount == D("210.00")


@pytest.fixture()
def consigned(coordinator, ids):
    c, a, b = ids["customer_a"], ids["supplier_a"], ids["supplier_b"]
    sell(coordinator, c, "2024-03-01", ids["prawn"], 12, 900, from_stock=False, supplier_id=a, vehicle="KHI-1")
    sell(coordinator, c, "2024-03-02", ids["rohu"], 2, 300, from_stock=False, supplier_id=b, vehicle="GWD-7")
    sell(coordinator, c, "2024-03-05", ids["pomfret"], 10, 500, from_stock=False, supplier_id=a, vehicle="KHI-2")
    sell(coordinator, c, "2024-03-09", ids["rohu"], 1, 100, from_stock=False, supplier_id=a, vehicle="KHI-3")
    return ids


def test_vendor_sales_all_vendors(reports, consigned):
    rep = reports.vendor_sales("2024-03-01", "2024-03-07", all_vendors=True).value
    assert [g.supplier_name for g in rep.groups] == ["Karachi Boat Co", "Gwadar Catch"]
    assert [g.vehicle_count for g in rep.groups] == [2, 1]
    assert rep.total_vehicles == 3
    assert rep.total_weight == D("24.000")
    assert rep.total_amount == D("16400.00")
    assert (rep.date_from, rep.date_to) == ("2024-03-01", "2024-03-07")


def test_vendor_sales_single_supplier_and_validation(reports, consigned):
    rep = reports.vendor_sales("2024-03-01", "2024-03-31", supplier_id=consigned["supplier_b"]).value
    assert [g.supplier_id for g in rep.groups] == [consigned["supplier_b"]]
    assert rep.total_amount == D("600.00")

    assert isinstance(reports.vendor_sales("2024-03-01", "2024-03-31").error, InvalidInput)
    assert reports.vendor_sales("2024-03-31", "2024-03-01", all_vendors=True).error == InvalidRange(
        "2024-03-31", "2024-03-01"
    )
    assert reports.vendor_sales("2024-03-01", "2024-03-31", supplier_id=consigned["customer_a"]).error == NotFound(
        "supplier", consigned["customer_a"]
    )


def test_daily_sales_by_item(reports, consigned):
    rep = reports.daily_sales("2024-03-01", "2024-03-07").value
    assert {r["item_name"]: r["total_amount"] for r in rep.rows} == {
        "Pomfret": D("5000.00"),
        "Prawn": D("10800.00"),
        "Rohu": D("600.00"),
    }
    assert rep.total_weight == D("24.000")
    assert rep.total_amount == D("16400.00")


def test_item_sales_and_purchases(coordinator, reports, consigned):
    rohu = consigned["rohu"]
    sales = reports.item_sales(rohu, "2024-03-01", "2024-03-31").value
    assert len(sales.rows) == 2
    assert sales.total_weight == D("3.000")
    assert sales.total_amount == D("700.00")
    assert sales.average_rate == D("233.33")

    buy(coordinator, consigned["supplier_a"], "2024-03-03", rohu, 10, 200)
    buy(coordinator, consigned["supplier_b"], "2024-03-04", rohu, 30, 180)
    purchases = reports.item_purchases(rohu, "2024-03-01", "2024-03-31").value
    assert [r["supplier_name"] for r in purchases.rows] == ["Karachi Boat Co", "Gwadar Catch"]
    assert purchases.total_amount == D("7400.00")
    assert purchases.average_rate == D("185.00")

    assert reports.item_sales(9999, "2024-03-01", "2024-03-31").error == NotFound("item", 9999)


def test_concession_report(coordinator, reports, ids):
    buy(coordinator, ids["supplier_a"], "2024-03-02", ids["rohu"], 10, 200, concession_amount=100)
    buy(coordinator, ids["supplier_b"], "2024-03-03", ids["rohu"], 10, 200)

    rep = reports.concession_report("2024-03-01", "2024-03-31", all_suppliers=True).value
    assert len(rep.rows) == 1
    assert rep.total_gross_amount == D("2000.00")
    assert rep.total_concession == D("100.00")
    assert rep.total_net_amount == D("1900.00")

    only_b = reports.concession_report("2024-03-01", "2024-03-31", supplier_id=ids["supplier_b"]).value
    assert only_b.rows == []
    assert isinstance(reports.concession_report("2024-03-01", "2024-03-31").error, InvalidInput)


# =============================================================================
# Client recovery
# =============================================================================

def test_build_client_recovery_pure():
    sales = [
        {"sale_id": 1, "customer_id": 2, "customer_name": "bilal", "gross_amount": D("2000"), "total_charges": D("50")},
        {"sale_id": 2, "customer_id": 2, "customer_name": "bilal", "gross_amount": D("100"), "total_charges": 0},
    ]
    collections = [
        {"customer_id": 2, "customer_name": "bilal", "collection": D("1000")},
        {"customer_id": 1, "customer_name": "Akram", "collection": D("250")},
    ]
    rep = build_client_recovery(sales, collections, "2024-03-01", "2024-03-31")
    assert [r.customer_name for r in rep.summary] == ["Akram", "bilal"]
    akram, bilal = rep.summary
    # paid in the period without buying: recovery runs negative
    assert akram.total_balance == D("-250.00")
    assert (bilal.total_amount, bilal.total_charges, bilal.total_collection) == (D("2100.00"), D("50.00"), D("1000.00"))
    assert bilal.total_balance == D("1150.00")
    assert rep.total_balance == D("900.00")
    assert len(rep.transactions) == 2


def test_client_recovery_all_clients(coordinator, reports, customer_activity):
    ids = customer_activity
    sell(coordinator, ids["customer_a"], "2024-03-15", ids["rohu"], 5, 100, from_stock=False, cash_received=500)

    rep = reports.client_recovery("2024-03-01", "2024-03-31", all_clients=True).value
    assert [t["date"] for t in rep.transactions] == ["2024-03-05", "2024-03-15"]
    assert [r.customer_name for r in rep.summary] == ["Akram Traders", "Bilal Fish House"]
    akram, bilal = rep.summary
    assert (akram.total_amount, akram.total_charges, akram.total_collection, akram.total_balance) == (
        D("500.00"), D("0.00"), D("500.00"), D("0.00"),
    )
    assert (bilal.total_amount, bilal.total_charges, bilal.total_collection, bilal.total_balance) == (
        D("2000.00"), D("50.00"), D("1000.00"), D("1050.00"),
    )
    assert (rep.total_amount, rep.total_charges, rep.total_collection, rep.total_balance) == (
        D("2500.00"), D("50.00"), D("1500.00"), D("1050.00"),
    )
    assert rep.customer_id is None


def test_client_recovery_single_customer_and_validation(reports, customer_activity):
    ids = customer_activity
    rep = reports.client_recovery("2024-03-01", "2024-03-31", customer_id=ids["customer_b"]).value
    assert [r.customer_id for r in rep.summary] == [ids["customer_b"]]
    assert len(rep.transactions) == 1
    assert rep.customer_id == ids["customer_b"]

    assert isinstance(reports.client_recovery("2024-03-01", "2024-03-31").error, InvalidInput)
    assert reports.client_recovery("2024-03-01", "2024-03-31", customer_id=ids["supplier_a"]).error == NotFound(
        "customer", ids["supplier_a"]
    )
    assert reports.client_recovery("2024-03-31", "2024-03-01", all_clients=True).error == InvalidRange(
        "2024-03-31", "2024-03-01"
    )


# =============================================================================
# Daily sales details
# =============================================================================

def test_daily_sales_details_lists_lines_by_sale_number(coordinator, reports, ids):
    two_lines = SaleInput(
        customer_id=ids["customer_a"],
        date="2024-03-05",
        lines=[
            SaleLineInput(ids["rohu"], gross_weight=2, rate=300, from_stock=False),
            SaleLineInput(ids["prawn"], gross_weight=1, rate=900, from_stock=False),
        ],
    )
    assert coordinator.create_transaction(two_lines).ok
    sell(coordinator, ids["customer_b"], "2024-03-05", ids["pomfret"], 4, 500, from_stock=False)
    sell(coordinator, ids["customer_a"], "2024-03-06", ids["rohu"], 1, 100, from_stock=False)

    rep = reports.daily_sales_details("2024-03-05").value
    assert [r["item_name"] for r in rep.rows] == ["Rohu", "Prawn", "Pomfret"]
    assert [r["sale_number"] for r in rep.rows] == ["S-000001", "S-000001", "S-000002"]
    assert [r["customer_name"] for r in rep.rows][-1] == "Bilal Fish House"
    assert rep.total_weight == D("7.000")
    assert rep.total_amount == D("3500.00")

    assert reports.daily_sales_details("2024-03-07").value.rows == []
    assert isinstance(reports.daily_sales_details("05/03/2024").error, InvalidInput)


# =============================================================================
# Supplier advances
# =============================================================================

def test_supplier_advances_lists_overpaid_suppliers(coordinator, reports, ids):
    assert coordinator.create_transaction(PaymentInput(ids["supplier_b"], "2024-03-01", 1500)).ok

    rep = reports.supplier_advances().value
    assert [r.account_id for r in rep.rows] == [ids["supplier_b"]]
    assert rep.rows[0].advance_amount == D("500.00")
    assert rep.total_advance == D("500.00")
