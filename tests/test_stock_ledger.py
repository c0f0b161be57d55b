# tests/test_stock_ledger.py
from decimal import Decimal

import pytest

from fish_ledger.database import unit_of_work
from fish_ledger.modules.inventory.stock_ledger import StockLedger, opening_reference

D = Decimal


@pytest.fixture()
def ledger(conn, ids):
    return StockLedger(conn)


def _movement_sum(conn, item_id) -> Decimal:
    r = conn.execute(
        "SELECT COALESCE(SUM(quantity), 0) FROM stock_movements WHERE item_id=?", (item_id,)
    ).fetchone()
    return D(r[0]).scaleb(-3)


def test_apply_movement_updates_stock_and_keeps_invariant(conn, ids, ledger):
    rohu = ids["rohu"]
    with unit_of_work(conn):
        ledger.apply_movement(rohu, "120.5", "purchase:1", "purchase", "2024-03-01")
        ledger.apply_movement(rohu, "-20.25", "sale:1", "sale", "2024-03-02")

    assert ledger.current_stock(rohu) == D("100.250")
    assert _movement_sum(conn, rohu) == ledger.current_stock(rohu)


def test_one_movement_per_reference_and_item(conn, ids, ledger):
    rohu = ids["rohu"]
    with unit_of_work(conn):
        ledger.apply_movement(rohu, 10, "purchase:7", "purchase", "2024-03-01")
        ledger.apply_movement(rohu, 5, "purchase:7", "purchase", "2024-03-01")

    moves = ledger.movements_for("purchase:7")
    assert len(moves) == 1
    assert moves[0].quantity == D("15.000")


def test_reverse_transaction_restores_stock(conn, ids, ledger):
    rohu, pomfret = ids["rohu"], ids["pomfret"]
    with unit_of_work(conn):
        ledger.set_opening_stock(rohu, 50, "2024-01-01")
        ledger.set_opening_stock(pomfret, 30, "2024-01-01")
    with unit_of_work(conn):
        ledger.apply_movement(rohu, -12, "sale:3", "sale", "2024-03-02")
        ledger.apply_movement(pomfret, -7.5, "sale:3", "sale", "2024-03-02")
    with unit_of_work(conn):
        reversed_moves = ledger.reverse_transaction("sale:3")

    assert len(reversed_moves) == 2
    assert ledger.movements_for("sale:3") == []
    assert ledger.current_stock(rohu) == D("50.000")
    assert ledger.current_stock(pomfret) == D("30.000")


def test_reverse_unknown_reference_is_noop(conn, ids, ledger):
    with unit_of_work(conn):
        assert ledger.reverse_transaction("sale:999") == []
    assert ledger.current_stock(ids["rohu"]) == D("0.000")


def test_check_availability_plain(conn, ids, ledger):
    rohu = ids["rohu"]
    with unit_of_work(conn):
        ledger.set_opening_stock(rohu, 40, "2024-01-01")

    ok = ledger.check_availability(rohu, 40)
    short = ledger.check_availability(rohu, "40.001")
    assert ok.ok and ok.available == D("40.000")
    assert not short.ok and short.available == D("40.000")


def test_edit_compensation_adds_back_own_consumption(conn, ids, ledger):
    """A committed sale of Q must pass its own re-check even when stock < Q."""
    rohu = ids["rohu"]
    with unit_of_work(conn):
        ledger.set_opening_stock(rohu, 100, "2024-01-01")
        ledger.apply_movement(rohu, -80, "sale:1", "sale", "2024-03-01")

    assert ledger.current_stock(rohu) == D("20.000")

    with_own = ledger.check_availability(rohu, 80, exclude_reference="sale:1")
    assert with_own.ok
    assert with_own.available == D("100.000")

    without = ledger.check_availability(rohu, 80)
    assert not without.ok
    assert without.available == D("20.000")


def test_allow_negative_stock_always_ok(conn, ids):
    ledger = StockLedger(conn, allow_negative_stock=True)
    res = ledger.check_availability(ids["prawn"], 999)
    assert res.ok
    assert res.available == D("0.000")


def test_set_opening_stock_replaces_previous_opening(conn, ids, ledger):
    rohu = ids["rohu"]
    with unit_of_work(conn):
        ledger.set_opening_stock(rohu, 25, "2024-01-01")
    with unit_of_work(conn):
        ledger.set_opening_stock(rohu, 60, "2024-01-01")

    moves = ledger.movements_for(opening_reference(rohu))
    assert [m.quantity for m in moves] == [D("60.000")]
    assert moves[0].kind == "opening"
    assert ledger.current_stock(rohu) == D("60.000")


def test_unit_of_work_rollback_discards_movements(conn, ids, ledger):
    rohu = ids["rohu"]
    with pytest.raises(RuntimeError):
        with unit_of_work(conn):
            ledger.apply_movement(rohu, 10, "purchase:1", "purchase", "2024-03-01")
            raise RuntimeError("boom")

    assert ledger.current_stock(rohu) == D("0.000")
    assert ledger.movements_for("purchase:1") == []
