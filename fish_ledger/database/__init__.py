# database/__init__.py
from __future__ import annotations

from pathlib import Path
import sqlite3

from ..config import DB_PATH
from ..constants import SCHEMA_VERSION
from . import schema as schema_module
from .seeders.default_data import seed as seed_default_data
from .unit_of_work import PersistenceError, unit_of_work
from ..utils.loggers import get_logger

_log = get_logger()


def stamp_schema_version(conn: sqlite3.Connection) -> str:
    """Record SCHEMA_VERSION on a new database; return the version the file carries."""
    conn.execute(
        "INSERT OR IGNORE INTO schema_version(id, version) VALUES (1, ?)", (SCHEMA_VERSION,)
    )
    return conn.execute("SELECT version FROM schema_version WHERE id = 1").fetchone()["version"]


def get_connection(db_path: Path | str | None = None) -> sqlite3.Connection:
    """
    Returns a sqlite3.Connection with:
      - WAL mode
      - foreign_keys ON
      - row_factory = sqlite3.Row (so rows behave like dicts and tuples)
    Ensures schema & seed data are applied idempotently.
    """
    path = Path(db_path) if db_path is not None else DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)

    # Always apply the schema (idempotent: uses CREATE IF NOT EXISTS)
    schema_module.init_schema(path)

    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    conn.execute("PRAGMA journal_mode = WAL;")

    version = stamp_schema_version(conn)

    # Seeders are safe to run repeatedly (idempotent).
    seed_default_data(conn)

    conn.commit()
    _log.info("database ready at %s (schema v%s)", path, version)
    return conn


__all__ = [
    "get_connection",
    "stamp_schema_version",
    "unit_of_work",
    "PersistenceError",
]
