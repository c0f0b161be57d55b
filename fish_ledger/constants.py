# fish_ledger/constants.py
from decimal import Decimal

DATA_DIR = "data"
DB_FILE_NAME = "fishledger.db"

SCHEMA_VERSION = "1"

# Storage precision: integer minor units per column family
MONEY_PLACES = 2
WEIGHT_PLACES = 3
PERCENT_PLACES = 2

KG_PER_MAUND = 40
DEFAULT_COMMISSION_PCT = Decimal("5.00")

# Account kinds
ACCOUNT_CUSTOMER = "customer"
ACCOUNT_SUPPLIER = "supplier"
ACCOUNT_KINDS = (ACCOUNT_CUSTOMER, ACCOUNT_SUPPLIER)

# Transaction status
STATUS_DRAFT = "draft"
STATUS_POSTED = "posted"
TRANSACTION_STATUSES = (STATUS_DRAFT, STATUS_POSTED)

# name -> (prefix, number_length)
NUMBER_SEQUENCES = {
    "purchase": ("P-", 6),
    "sale": ("S-", 6),
    "supplier_bill": ("BILL-", 6),
    "payment": ("PAY-", 6),
}

# settings keys
SETTING_ALLOW_NEGATIVE_STOCK = "allow_negative_stock"
SETTING_DEFAULT_COMMISSION_PCT = "default_commission_pct"

# ledger entry types
ENTRY_PURCHASE = "purchase"
ENTRY_PURCHASE_CASH = "purchase_cash"
ENTRY_SALE = "sale"
ENTRY_SALE_CASH = "sale_cash"
ENTRY_SALE_RECEIPT = "sale_receipt"
ENTRY_BILL = "supplier_bill"
ENTRY_BILL_CASH = "supplier_bill_cash"
ENTRY_PAYMENT = "payment"
