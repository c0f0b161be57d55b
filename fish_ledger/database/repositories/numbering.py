# database/repositories/numbering.py
"""
Document numbers (P-000001, S-000001, BILL-000001, PAY-000001) and the stable
transaction reference ("sale:12") that tags stock movements and ledger entries.
"""
from __future__ import annotations

import sqlite3

from ...constants import NUMBER_SEQUENCES


def make_reference(kind: str, transaction_id: int) -> str:
    return f"{kind}:{int(transaction_id)}"


def format_number(prefix: str, number: int, length: int) -> str:
    return f"{prefix}{str(number).zfill(length)}"


def peek_next_number(conn: sqlite3.Connection, name: str) -> str:
    """Next number without consuming it (form preview)."""
    row = conn.execute(
        "SELECT prefix, current_number, number_length FROM number_sequences WHERE name=?",
        (name,),
    ).fetchone()
    if row is None:
        prefix, length = NUMBER_SEQUENCES[name]
        return format_number(prefix, 1, length)
    return format_number(row["prefix"], int(row["current_number"]) + 1, int(row["number_length"]))


def next_number(conn: sqlite3.Connection, name: str) -> str:
    """
    Consume and return the next number. No commit: a rolled-back unit of work
    gives the number back.
    """
    prefix, length = NUMBER_SEQUENCES[name]
    conn.execute(
        "INSERT OR IGNORE INTO number_sequences(name, prefix, current_number, number_length) VALUES (?,?,0,?)",
        (name, prefix, length),
    )
    conn.execute(
        "UPDATE number_sequences SET current_number = current_number + 1, updated_at = CURRENT_TIMESTAMP WHERE name=?",
        (name,),
    )
    row = conn.execute(
        "SELECT prefix, current_number, number_length FROM number_sequences WHERE name=?",
        (name,),
    ).fetchone()
    return format_number(row["prefix"], int(row["current_number"]), int(row["number_length"]))
