# database/unit_of_work.py
"""
One atomic unit of work over a sqlite3 connection.

Repository write methods never commit on their own; callers that mutate
ledgers wrap every related write in `unit_of_work(conn)` so stock movements,
ledger entries and transaction rows land (or vanish) together.
"""
from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from typing import Iterator

_log = logging.getLogger(__name__)


class PersistenceError(Exception):
    """The storage layer failed; the unit of work was rolled back."""


@contextmanager
def unit_of_work(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """
    Commit on success, roll back on any exception.

    sqlite3.Error is re-raised as PersistenceError (cause chained);
    every other exception is re-raised unchanged after the rollback.
    """
    if conn.in_transaction:
        # Flush master-data writes made outside any unit of work.
        conn.commit()
    conn.execute("BEGIN")
    try:
        yield conn
    except sqlite3.Error as e:
        conn.rollback()
        _log.exception("unit of work rolled back")
        raise PersistenceError(str(e)) from e
    except BaseException:
        conn.rollback()
        raise
    else:
        try:
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise PersistenceError(str(e)) from e
