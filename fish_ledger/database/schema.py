from pathlib import Path
import sqlite3
import sys

# Storage precision:
#   money columns       -> INTEGER minor units (1/100)
#   weight/qty columns  -> INTEGER grams (1/1000 kg)
#   *_pct columns       -> INTEGER hundredths of a percent
# Repositories convert to/from Decimal; nothing in SQL uses REAL.

SQL = r"""
PRAGMA foreign_keys = ON;

/* ======================== SCHEMA VERSION ================== */

CREATE TABLE IF NOT EXISTS schema_version (
    id      INTEGER PRIMARY KEY CHECK (id = 1),
    version TEXT NOT NULL
);

/* ======================== SETTINGS ======================== */

CREATE TABLE IF NOT EXISTS settings (
    key        TEXT PRIMARY KEY,
    value      TEXT,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS number_sequences (
    name           TEXT PRIMARY KEY,
    prefix         TEXT    NOT NULL,
    current_number INTEGER NOT NULL DEFAULT 0,
    number_length  INTEGER NOT NULL DEFAULT 6,
    updated_at     TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

/* ======================== MASTER DATA ======================== */

/* -------- parties: customers and suppliers share one table -------- */
CREATE TABLE IF NOT EXISTS accounts (
    account_id             INTEGER PRIMARY KEY AUTOINCREMENT,
    kind                   TEXT    NOT NULL CHECK (kind IN ('customer','supplier')),
    name                   TEXT    NOT NULL,
    name_english           TEXT,
    phone                  TEXT,
    opening_balance        INTEGER NOT NULL DEFAULT 0,
    current_balance        INTEGER NOT NULL DEFAULT 0,
    default_commission_pct INTEGER,
    is_active              INTEGER NOT NULL DEFAULT 1 CHECK (is_active IN (0,1)),
    created_at             TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_accounts_kind ON accounts(kind, is_active);

/* -------- items (fish) -------- */
CREATE TABLE IF NOT EXISTS items (
    item_id       INTEGER PRIMARY KEY AUTOINCREMENT,
    name          TEXT    NOT NULL,
    name_english  TEXT,
    unit_price    INTEGER NOT NULL DEFAULT 0,
    current_stock INTEGER NOT NULL DEFAULT 0,
    is_active     INTEGER NOT NULL DEFAULT 1 CHECK (is_active IN (0,1)),
    created_at    TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
CREATE UNIQUE INDEX IF NOT EXISTS idx_items_active_name
ON items(name) WHERE is_active = 1;

/* ======================== LEDGERS ======================== */

/* one row per (transaction reference, item); quantity is signed */
CREATE TABLE IF NOT EXISTS stock_movements (
    movement_id INTEGER PRIMARY KEY AUTOINCREMENT,
    item_id     INTEGER NOT NULL,
    reference   TEXT    NOT NULL,
    kind        TEXT    NOT NULL CHECK (kind IN ('opening','purchase','sale')),
    quantity    INTEGER NOT NULL,
    date        DATE    NOT NULL,
    created_at  TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    UNIQUE (reference, item_id),
    FOREIGN KEY (item_id) REFERENCES items(item_id)
);
CREATE INDEX IF NOT EXISTS idx_stock_movements_item_date
ON stock_movements(item_id, date);

CREATE TABLE IF NOT EXISTS ledger_entries (
    entry_id    INTEGER PRIMARY KEY AUTOINCREMENT,
    account_id  INTEGER NOT NULL,
    date        DATE    NOT NULL,
    reference   TEXT    NOT NULL,
    entry_type  TEXT    NOT NULL,
    debit       INTEGER NOT NULL DEFAULT 0 CHECK (debit  >= 0),
    credit      INTEGER NOT NULL DEFAULT 0 CHECK (credit >= 0),
    description TEXT,
    created_at  TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    CHECK (debit = 0 OR credit = 0),
    FOREIGN KEY (account_id) REFERENCES accounts(account_id)
);
CREATE INDEX IF NOT EXISTS idx_ledger_entries_account_date
ON ledger_entries(account_id, date, entry_id);
CREATE INDEX IF NOT EXISTS idx_ledger_entries_reference
ON ledger_entries(reference);

/* ======================== TRANSACTIONS ======================== */

/* -------- purchases -------- */
CREATE TABLE IF NOT EXISTS purchases (
    purchase_id       INTEGER PRIMARY KEY AUTOINCREMENT,
    purchase_number   TEXT    NOT NULL UNIQUE,
    supplier_id       INTEGER NOT NULL,
    date              DATE    NOT NULL,
    vehicle_number    TEXT,
    total_weight      INTEGER NOT NULL DEFAULT 0,
    gross_amount      INTEGER NOT NULL DEFAULT 0,
    concession_amount INTEGER NOT NULL DEFAULT 0,
    net_amount        INTEGER NOT NULL DEFAULT 0,
    cash_paid         INTEGER NOT NULL DEFAULT 0,
    previous_balance  INTEGER NOT NULL DEFAULT 0,
    balance_amount    INTEGER NOT NULL DEFAULT 0,
    status            TEXT    NOT NULL DEFAULT 'draft' CHECK (status IN ('draft','posted')),
    notes             TEXT,
    created_at        TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at        TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (supplier_id) REFERENCES accounts(account_id)
);
CREATE INDEX IF NOT EXISTS idx_purchases_date ON purchases(date);

CREATE TABLE IF NOT EXISTS purchase_items (
    line_id     INTEGER PRIMARY KEY AUTOINCREMENT,
    purchase_id INTEGER NOT NULL,
    line_number INTEGER NOT NULL,
    item_id     INTEGER NOT NULL,
    weight      INTEGER NOT NULL CHECK (weight >= 0),
    rate        INTEGER NOT NULL CHECK (rate >= 0),
    amount      INTEGER NOT NULL,
    FOREIGN KEY (purchase_id) REFERENCES purchases(purchase_id) ON DELETE CASCADE,
    FOREIGN KEY (item_id)     REFERENCES items(item_id)
);
CREATE INDEX IF NOT EXISTS idx_purchase_items_purchase ON purchase_items(purchase_id);

/* -------- sales -------- */
CREATE TABLE IF NOT EXISTS sales (
    sale_id        INTEGER PRIMARY KEY AUTOINCREMENT,
    sale_number    TEXT    NOT NULL UNIQUE,
    customer_id    INTEGER NOT NULL,
    supplier_id    INTEGER,
    date           DATE    NOT NULL,
    vehicle_number TEXT,
    total_weight   INTEGER NOT NULL DEFAULT 0,
    gross_amount   INTEGER NOT NULL DEFAULT 0,
    total_charges  INTEGER NOT NULL DEFAULT 0,
    net_amount     INTEGER NOT NULL DEFAULT 0,
    cash_received  INTEGER NOT NULL DEFAULT 0,
    receipt_amount INTEGER NOT NULL DEFAULT 0,
    balance_amount INTEGER NOT NULL DEFAULT 0,
    status         TEXT    NOT NULL DEFAULT 'draft' CHECK (status IN ('draft','posted')),
    notes          TEXT,
    created_at     TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at     TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (customer_id) REFERENCES accounts(account_id),
    FOREIGN KEY (supplier_id) REFERENCES accounts(account_id)
);
CREATE INDEX IF NOT EXISTS idx_sales_date ON sales(date);

CREATE TABLE IF NOT EXISTS sale_items (
    line_id         INTEGER PRIMARY KEY AUTOINCREMENT,
    sale_id         INTEGER NOT NULL,
    line_number     INTEGER NOT NULL,
    item_id         INTEGER NOT NULL,
    gross_weight    INTEGER NOT NULL CHECK (gross_weight >= 0),
    tare_weight     INTEGER NOT NULL DEFAULT 0 CHECK (tare_weight >= 0),
    net_weight      INTEGER NOT NULL,
    rate            INTEGER NOT NULL CHECK (rate >= 0),
    amount          INTEGER NOT NULL,
    grocery_charges INTEGER NOT NULL DEFAULT 0,
    ice_charges     INTEGER NOT NULL DEFAULT 0,
    line_net_amount INTEGER NOT NULL,
    from_stock      INTEGER NOT NULL DEFAULT 1 CHECK (from_stock IN (0,1)),
    FOREIGN KEY (sale_id) REFERENCES sales(sale_id) ON DELETE CASCADE,
    FOREIGN KEY (item_id) REFERENCES items(item_id)
);
CREATE INDEX IF NOT EXISTS idx_sale_items_sale ON sale_items(sale_id);

/* -------- supplier bills -------- */
CREATE TABLE IF NOT EXISTS supplier_bills (
    bill_id           INTEGER PRIMARY KEY AUTOINCREMENT,
    bill_number       TEXT    NOT NULL UNIQUE,
    supplier_id       INTEGER NOT NULL,
    date              DATE    NOT NULL,
    date_from         DATE    NOT NULL,
    date_to           DATE    NOT NULL,
    total_weight      INTEGER NOT NULL DEFAULT 0,
    gross_amount      INTEGER NOT NULL DEFAULT 0,
    commission_pct    INTEGER NOT NULL DEFAULT 0,
    commission_amount INTEGER NOT NULL DEFAULT 0,
    drugs_charges     INTEGER NOT NULL DEFAULT 0,
    fare_charges      INTEGER NOT NULL DEFAULT 0,
    labor_charges     INTEGER NOT NULL DEFAULT 0,
    ice_charges       INTEGER NOT NULL DEFAULT 0,
    total_charges     INTEGER NOT NULL DEFAULT 0,
    net_payable       INTEGER NOT NULL DEFAULT 0,
    concession_amount INTEGER NOT NULL DEFAULT 0,
    total_payable     INTEGER NOT NULL DEFAULT 0,
    cash_paid         INTEGER NOT NULL DEFAULT 0,
    balance_amount    INTEGER NOT NULL DEFAULT 0,
    status            TEXT    NOT NULL DEFAULT 'draft' CHECK (status IN ('draft','posted')),
    notes             TEXT,
    created_at        TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at        TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    CHECK (date_from <= date_to),
    FOREIGN KEY (supplier_id) REFERENCES accounts(account_id)
);

/* -------- payments (customer receipts / supplier payments) -------- */
CREATE TABLE IF NOT EXISTS payments (
    payment_id     INTEGER PRIMARY KEY AUTOINCREMENT,
    payment_number TEXT    NOT NULL UNIQUE,
    account_id     INTEGER NOT NULL,
    date           DATE    NOT NULL,
    amount         INTEGER NOT NULL CHECK (amount > 0),
    method         TEXT    NOT NULL DEFAULT 'cash',
    status         TEXT    NOT NULL DEFAULT 'draft' CHECK (status IN ('draft','posted')),
    notes          TEXT,
    created_at     TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at     TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (account_id) REFERENCES accounts(account_id)
);
CREATE INDEX IF NOT EXISTS idx_payments_account_date ON payments(account_id, date);
"""


def init_schema(db_path: Path | str = "fishledger.db") -> None:
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        conn.execute("PRAGMA journal_mode=WAL;")
        # Apply (idempotent) schema
        conn.executescript(SQL)
        conn.commit()
    finally:
        conn.close()


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else Path(__file__).resolve().parents[1] / "data" / "fishledger.db"
    init_schema(target)
    print(f"✓ DB applied to {target}")
