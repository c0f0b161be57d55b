from __future__ import annotations

import sqlite3

from ...config import AppSettings
from ...constants import (
    DEFAULT_COMMISSION_PCT,
    SETTING_ALLOW_NEGATIVE_STOCK,
    SETTING_DEFAULT_COMMISSION_PCT,
)
from ...utils.helpers import to_decimal


def _parse_bool(value: str | None) -> bool:
    return str(value or "").strip().lower() in ("1", "true", "yes", "on")


class SettingsRepo:
    """Key/value settings table, read into a typed AppSettings."""

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    def get(self, key: str, default: str | None = None) -> str | None:
        row = self.conn.execute("SELECT value FROM settings WHERE key=?", (key,)).fetchone()
        return default if row is None or row["value"] is None else row["value"]

    def set(self, key: str, value: str) -> None:
        self.conn.execute(
            """
            INSERT INTO settings(key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP
            """,
            (key, value),
        )
        self.conn.commit()

    def load(self) -> AppSettings:
        pct_raw = self.get(SETTING_DEFAULT_COMMISSION_PCT)
        try:
            pct = to_decimal(pct_raw) if pct_raw else DEFAULT_COMMISSION_PCT
        except ValueError:
            pct = DEFAULT_COMMISSION_PCT
        return AppSettings(
            allow_negative_stock=_parse_bool(self.get(SETTING_ALLOW_NEGATIVE_STOCK)),
            default_commission_pct=pct,
        )

    def set_allow_negative_stock(self, allow: bool) -> None:
        self.set(SETTING_ALLOW_NEGATIVE_STOCK, "true" if allow else "false")
