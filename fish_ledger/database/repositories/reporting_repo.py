# fish_ledger/database/repositories/reporting_repo.py
from __future__ import annotations

import sqlite3
from typing import Optional

from ...constants import (
    ACCOUNT_CUSTOMER,
    ENTRY_PAYMENT,
    ENTRY_SALE_CASH,
    ENTRY_SALE_RECEIPT,
)
from ...utils.helpers import money_from_db, weight_from_db


class ReportingRepo:
    """
    Read-only queries for the report aggregator.

    Uses only objects the schema defines:
      - Tables: items, accounts, stock_movements, ledger_entries,
                purchases, purchase_items, sales, sale_items

    Notes on date handling:
      • Callers pass ISO 'YYYY-MM-DD'; dates are stored the same way, so plain
        string comparison is calendar order.
      • Integer minor units are converted to Decimal here; callers never see
        raw storage values.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.conn.row_factory = sqlite3.Row

    # ----------------------------------------------------------------------
    # ------------------------------- STOCK --------------------------------
    # ----------------------------------------------------------------------

    def stock_positions(self, as_of: str) -> list[dict]:
        """
        Per active item: opening stock, purchases/sales strictly before `as_of`,
        and purchases/sales on `as_of`. Sales are returned as positive weights.
        """
        sql = """
        SELECT
            i.item_id AS item_id,
            i.name    AS item_name,
            COALESCE(SUM(CASE WHEN m.kind = 'opening' THEN m.quantity END), 0)                    AS opening_stock,
            COALESCE(SUM(CASE WHEN m.kind = 'purchase' AND m.date < ? THEN m.quantity END), 0)    AS purchases_before,
            COALESCE(SUM(CASE WHEN m.kind = 'sale'     AND m.date < ? THEN -m.quantity END), 0)   AS sales_before,
            COALESCE(SUM(CASE WHEN m.kind = 'purchase' AND m.date = ? THEN m.quantity END), 0)    AS today_purchases,
            COALESCE(SUM(CASE WHEN m.kind = 'sale'     AND m.date = ? THEN -m.quantity END), 0)   AS today_sales
        FROM items i
        LEFT JOIN stock_movements m ON m.item_id = i.item_id
        WHERE i.is_active = 1
        GROUP BY i.item_id, i.name
        ORDER BY i.name COLLATE NOCASE
        """
        out = []
        for r in self.conn.execute(sql, (as_of, as_of, as_of, as_of)):
            d = dict(r)
            for k in ("opening_stock", "purchases_before", "sales_before", "today_purchases", "today_sales"):
                d[k] = weight_from_db(d[k])
            out.append(d)
        return out

    # ----------------------------------------------------------------------
    # ------------------------------ ACCOUNTS ------------------------------
    # ----------------------------------------------------------------------

    def register_positions(
        self, kind: str, date_to: str, date_from: Optional[str] = None
    ) -> list[dict]:
        """
        Per active account of `kind`:
          before_net    = SUM(debit - credit) dated before date_from (0 without date_from)
          period_debit  = SUM(debit)  in [date_from, date_to]
          period_credit = SUM(credit) in [date_from, date_to]
        """
        lower = date_from or ""
        sql = """
        SELECT
            a.account_id      AS account_id,
            a.name            AS name,
            a.opening_balance AS opening_balance,
            COALESCE(SUM(CASE WHEN e.date < ? THEN e.debit - e.credit END), 0)           AS before_net,
            COALESCE(SUM(CASE WHEN e.date >= ? AND e.date <= ? THEN e.debit END), 0)     AS period_debit,
            COALESCE(SUM(CASE WHEN e.date >= ? AND e.date <= ? THEN e.credit END), 0)    AS period_credit
        FROM accounts a
        LEFT JOIN ledger_entries e ON e.account_id = a.account_id
        WHERE a.kind = ? AND a.is_active = 1
        GROUP BY a.account_id, a.name, a.opening_balance
        ORDER BY a.name COLLATE NOCASE, a.account_id
        """
        out = []
        for r in self.conn.execute(sql, (lower, lower, date_to, lower, date_to, kind)):
            d = dict(r)
            for k in ("opening_balance", "before_net", "period_debit", "period_credit"):
                d[k] = money_from_db(d[k])
            out.append(d)
        return out

    def customer_day_totals(self, as_of: str) -> dict:
        """
        Figures for the daily net amount summary (customer side).
        """
        prev = self.conn.execute(
            """
            SELECT
              (SELECT COALESCE(SUM(opening_balance), 0) FROM accounts WHERE kind = ?)
              +
              (SELECT COALESCE(SUM(e.debit - e.credit), 0)
                 FROM ledger_entries e
                 JOIN accounts a ON a.account_id = e.account_id
                WHERE a.kind = ? AND e.date < ?) AS previous_balance
            """,
            (ACCOUNT_CUSTOMER, ACCOUNT_CUSTOMER, as_of),
        ).fetchone()
        sales = self.conn.execute(
            """
            SELECT COALESCE(SUM(gross_amount), 0)  AS today_sales,
                   COALESCE(SUM(total_charges), 0) AS today_charges
            FROM sales WHERE date = ?
            """,
            (as_of,),
        ).fetchone()
        coll = self.conn.execute(
            """
            SELECT
              COALESCE(SUM(CASE WHEN e.entry_type = ? THEN e.credit END), 0)      AS cash_received,
              COALESCE(SUM(CASE WHEN e.entry_type IN (?, ?) THEN e.credit END), 0) AS payments_received
            FROM ledger_entries e
            JOIN accounts a ON a.account_id = e.account_id
            WHERE a.kind = ? AND e.date = ?
            """,
            (ENTRY_SALE_CASH, ENTRY_SALE_RECEIPT, ENTRY_PAYMENT, ACCOUNT_CUSTOMER, as_of),
        ).fetchone()
        return {
            "previous_balance": money_from_db(prev["previous_balance"]),
            "today_sales": money_from_db(sales["today_sales"]),
            "today_charges": money_from_db(sales["today_charges"]),
            "cash_received": money_from_db(coll["cash_received"]),
            "payments_received": money_from_db(coll["payments_received"]),
        }

    def customer_sales(
        self, date_from: str, date_to: str, customer_id: Optional[int] = None
    ) -> list[dict]:
        """Sale headers in range, oldest first, optionally for one customer."""
        params: list[object] = [date_from, date_to]
        where_extra = ""
        if customer_id is not None:
            where_extra = " AND s.customer_id = ? "
            params.append(int(customer_id))
        sql = f"""
        SELECT s.sale_id, s.sale_number, s.date, s.customer_id,
               c.name AS customer_name, s.vehicle_number,
               s.total_weight, s.gross_amount, s.total_charges, s.net_amount,
               s.cash_received, s.receipt_amount, s.balance_amount
        FROM sales s
        JOIN accounts c ON c.account_id = s.customer_id
        WHERE s.date >= ? AND s.date <= ?
          {where_extra}
        ORDER BY s.date, s.sale_id
        """
        out = []
        for r in self.conn.execute(sql, params):
            d = dict(r)
            d["total_weight"] = weight_from_db(d["total_weight"])
            for k in ("gross_amount", "total_charges", "net_amount", "cash_received",
                      "receipt_amount", "balance_amount"):
                d[k] = money_from_db(d[k])
            out.append(d)
        return out

    def customer_collections(
        self, date_from: str, date_to: str, customer_id: Optional[int] = None
    ) -> list[dict]:
        """
        Per customer with credits in range: cash with sales, sale receipts and
        payments (every credit on a customer account).
        """
        params: list[object] = [ACCOUNT_CUSTOMER, date_from, date_to]
        where_extra = ""
        if customer_id is not None:
            where_extra = " AND a.account_id = ? "
            params.append(int(customer_id))
        sql = f"""
        SELECT a.account_id AS customer_id, a.name AS customer_name,
               COALESCE(SUM(e.credit), 0) AS collection
        FROM ledger_entries e
        JOIN accounts a ON a.account_id = e.account_id
        WHERE a.kind = ? AND e.date >= ? AND e.date <= ? AND e.credit > 0
          {where_extra}
        GROUP BY a.account_id, a.name
        """
        out = []
        for r in self.conn.execute(sql, params):
            d = dict(r)
            d["collection"] = money_from_db(d["collection"])
            out.append(d)
        return out

    # ----------------------------------------------------------------------
    # ------------------------------- SALES --------------------------------
    # ----------------------------------------------------------------------

    def sale_lines_on(self, as_of: str) -> list[dict]:
        """Every sale line of one day, by sale number then line number."""
        sql = """
        SELECT s.sale_id, s.sale_number, s.date, c.name AS customer_name,
               sup.name AS supplier_name, s.vehicle_number,
               si.line_number, i.name AS item_name,
               si.net_weight AS weight, si.rate, si.amount
        FROM sale_items si
        JOIN sales s       ON s.sale_id = si.sale_id
        JOIN accounts c    ON c.account_id = s.customer_id
        LEFT JOIN accounts sup ON sup.account_id = s.supplier_id
        JOIN items i       ON i.item_id = si.item_id
        WHERE s.date = ?
        ORDER BY s.sale_number, si.line_number
        """
        return self._weighted_lines(sql, (as_of,))

    def vendor_sale_lines(
        self, date_from: str, date_to: str, supplier_id: Optional[int] = None
    ) -> list[dict]:
        """
        Consigned sale lines (sales with a supplier) in range, in input order:
        sale date, sale id, line number.
        """
        params: list[object] = [date_from, date_to]
        where_extra = ""
        if supplier_id is not None:
            where_extra = " AND s.supplier_id = ? "
            params.append(int(supplier_id))
        sql = f"""
        SELECT
            s.supplier_id     AS supplier_id,
            a.name            AS supplier_name,
            s.sale_id         AS sale_id,
            s.sale_number     AS sale_number,
            s.date            AS date,
            s.vehicle_number  AS vehicle_number,
            c.name            AS customer_name,
            i.name            AS item_name,
            si.net_weight     AS net_weight,
            si.rate           AS rate,
            si.amount         AS amount
        FROM sale_items si
        JOIN sales s    ON s.sale_id = si.sale_id
        JOIN accounts a ON a.account_id = s.supplier_id
        JOIN accounts c ON c.account_id = s.customer_id
        JOIN items i    ON i.item_id = si.item_id
        WHERE s.supplier_id IS NOT NULL
          AND s.date >= ?
          AND s.date <= ?
          {where_extra}
        ORDER BY s.date, s.sale_id, si.line_number
        """
        out = []
        for r in self.conn.execute(sql, params):
            d = dict(r)
            d["net_weight"] = weight_from_db(d["net_weight"])
            d["rate"] = money_from_db(d["rate"])
            d["amount"] = money_from_db(d["amount"])
            out.append(d)
        return out

    def sales_by_item(self, date_from: str, date_to: str) -> list[dict]:
        sql = """
        SELECT
            i.item_id                 AS item_id,
            i.name                    AS item_name,
            COUNT(DISTINCT s.sale_id) AS sale_count,
            COALESCE(SUM(si.net_weight), 0) AS total_weight,
            COALESCE(SUM(si.amount), 0)     AS total_amount
        FROM sale_items si
        JOIN sales s ON s.sale_id = si.sale_id
        JOIN items i ON i.item_id = si.item_id
        WHERE s.date >= ? AND s.date <= ?
        GROUP BY i.item_id, i.name
        ORDER BY i.name COLLATE NOCASE
        """
        out = []
        for r in self.conn.execute(sql, (date_from, date_to)):
            d = dict(r)
            d["total_weight"] = weight_from_db(d["total_weight"])
            d["total_amount"] = money_from_db(d["total_amount"])
            out.append(d)
        return out

    def item_sale_lines(self, item_id: int, date_from: str, date_to: str) -> list[dict]:
        sql = """
        SELECT s.sale_id, s.sale_number, s.date, c.name AS customer_name,
               si.net_weight AS weight, si.rate, si.amount
        FROM sale_items si
        JOIN sales s    ON s.sale_id = si.sale_id
        JOIN accounts c ON c.account_id = s.customer_id
        WHERE si.item_id = ? AND s.date >= ? AND s.date <= ?
        ORDER BY s.date, s.sale_id, si.line_number
        """
        return self._weighted_lines(sql, (int(item_id), date_from, date_to))

    def item_purchase_lines(self, item_id: int, date_from: str, date_to: str) -> list[dict]:
        sql = """
        SELECT p.purchase_id, p.purchase_number, p.date, a.name AS supplier_name,
               pi.weight AS weight, pi.rate, pi.amount
        FROM purchase_items pi
        JOIN purchases p ON p.purchase_id = pi.purchase_id
        JOIN accounts a  ON a.account_id = p.supplier_id
        WHERE pi.item_id = ? AND p.date >= ? AND p.date <= ?
        ORDER BY p.date, p.purchase_id, pi.line_number
        """
        return self._weighted_lines(sql, (int(item_id), date_from, date_to))

    # ----------------------------------------------------------------------
    # ----------------------------- PURCHASES ------------------------------
    # ----------------------------------------------------------------------

    def concession_purchases(
        self, date_from: str, date_to: str, supplier_id: Optional[int] = None
    ) -> list[dict]:
        params: list[object] = [date_from, date_to]
        where_extra = ""
        if supplier_id is not None:
            where_extra = " AND p.supplier_id = ? "
            params.append(int(supplier_id))
        sql = f"""
        SELECT p.purchase_id, p.purchase_number, p.date, p.supplier_id,
               a.name AS supplier_name, p.gross_amount, p.concession_amount, p.net_amount
        FROM purchases p
        JOIN accounts a ON a.account_id = p.supplier_id
        WHERE p.concession_amount > 0
          AND p.date >= ? AND p.date <= ?
          {where_extra}
        ORDER BY p.date, p.purchase_id
        """
        out = []
        for r in self.conn.execute(sql, params):
            d = dict(r)
            for k in ("gross_amount", "concession_amount", "net_amount"):
                d[k] = money_from_db(d[k])
            out.append(d)
        return out

    # ----------------------------------------------------------------------
    # Utilities
    # ----------------------------------------------------------------------
    def _weighted_lines(self, sql: str, params: tuple) -> list[dict]:
        out = []
        for r in self.conn.execute(sql, params):
            d = dict(r)
            d["weight"] = weight_from_db(d["weight"])
            d["rate"] = money_from_db(d["rate"])
            d["amount"] = money_from_db(d["amount"])
            out.append(d)
        return out
