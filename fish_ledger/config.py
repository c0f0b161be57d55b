# fish_ledger/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path

from .constants import DATA_DIR, DB_FILE_NAME, DEFAULT_COMMISSION_PCT

BASE_DIR = Path(__file__).resolve().parent
DATA_PATH = BASE_DIR / DATA_DIR
DB_PATH = Path(os.environ.get("FISH_LEDGER_DB", DATA_PATH / DB_FILE_NAME))


@dataclass(frozen=True)
class AppSettings:
    """
    Typed view over the `settings` key/value table.

    Loaded by SettingsRepo.load(); injected into the ledgers instead of
    passing raw 'true'/'false' strings around.
    """
    allow_negative_stock: bool = False
    default_commission_pct: Decimal = DEFAULT_COMMISSION_PCT
