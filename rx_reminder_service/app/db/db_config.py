# app/db/db_config.py

import sqlite3
from pathlib import Path
from typing import Iterator, Optional

from app.core.settings import RX_DB_PATH

SCHEMA = """
CREATE TABLE IF NOT EXISTS prescriptions (
    prescription_id  TEXT PRIMARY KEY,
    patient_id       TEXT NOT NULL,
    medicines        TEXT NOT NULL,
    confidence_score INTEGER NOT NULL DEFAULT 0,
    raw_text         TEXT NOT NULL DEFAULT '',
    image_url        TEXT,
    scan_date        TEXT NOT NULL,
    created_at       TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_prescriptions_patient ON prescriptions (patient_id, scan_date);
"""


def get_sqlite_connection(db_path: Optional[Path] = None) -> sqlite3.Connection:
    """
    Create and configure SQLite connection with recommended PRAGMA settings.
    The prescriptions schema is created on first use.
    """
    path = Path(db_path or RX_DB_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(path), check_same_thread=False)
    conn.row_factory = sqlite3.Row

    # Performance & concurrency settings
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    conn.execute("PRAGMA busy_timeout=5000;")

    conn.executescript(SCHEMA)
    return conn


def get_db() -> Iterator[sqlite3.Connection]:
    """FastAPI dependency: one connection per request."""
    conn = get_sqlite_connection()
    try:
        yield conn
    finally:
        conn.close()
