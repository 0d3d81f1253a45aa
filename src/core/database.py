"""
SQLite database operations for saved invoices and API request logs.
"""

import sqlite3
from pathlib import Path

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS invoices (
        id TEXT PRIMARY KEY,
        config_id TEXT NOT NULL,
        generated_at TEXT NOT NULL,
        sent_at TEXT,
        invoice_data TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS api_requests (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        request_id TEXT UNIQUE NOT NULL,
        timestamp TEXT NOT NULL,
        endpoint TEXT NOT NULL,
        method TEXT NOT NULL,
        client_ip TEXT,
        config_id TEXT,
        invoice_id TEXT,
        status_code INTEGER NOT NULL,
        error_code TEXT,
        error_message TEXT,
        processing_time_ms INTEGER NOT NULL,
        total_hours REAL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS api_request_details (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        request_id TEXT NOT NULL,
        detail_type TEXT NOT NULL CHECK(detail_type = 'validation_error'),
        message TEXT NOT NULL,
        FOREIGN KEY (request_id) REFERENCES api_requests(request_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_invoices_config ON invoices(config_id)",
    "CREATE INDEX IF NOT EXISTS idx_api_requests_timestamp ON api_requests(timestamp)",
    "CREATE INDEX IF NOT EXISTS idx_api_requests_status ON api_requests(status_code)",
    "CREATE INDEX IF NOT EXISTS idx_api_request_details_request ON api_request_details(request_id)",
]


def init_schema(conn: sqlite3.Connection) -> None:
    """Create tables and indexes if they don't exist."""
    conn.execute("PRAGMA foreign_keys = ON")
    cursor = conn.cursor()
    for statement in SCHEMA:
        cursor.execute(statement)
    conn.commit()


def get_connection(db_path: Path) -> sqlite3.Connection:
    """Get a database connection, creating the file and schema on first use."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    init_schema(conn)
    return conn


# =============================================================================
# INVOICES
# =============================================================================


def invoice_exists(conn: sqlite3.Connection, invoice_id: str) -> bool:
    cursor = conn.cursor()
    cursor.execute("SELECT 1 FROM invoices WHERE id = ?", (invoice_id,))
    return cursor.fetchone() is not None


def insert_invoice(
    conn: sqlite3.Connection,
    invoice_id: str,
    config_id: str,
    generated_at: str,
    invoice_data: str,
) -> None:
    """Insert one saved-invoice row."""
    cursor = conn.cursor()
    cursor.execute(
        """
        INSERT INTO invoices (id, config_id, generated_at, sent_at, invoice_data)
        VALUES (?, ?, ?, NULL, ?)
        """,
        (invoice_id, config_id, generated_at, invoice_data),
    )
    conn.commit()


def fetch_invoice_row(conn: sqlite3.Connection, invoice_id: str) -> tuple | None:
    """Return (id, config_id, generated_at, sent_at, invoice_data) or None."""
    cursor = conn.cursor()
    cursor.execute(
        "SELECT id, config_id, generated_at, sent_at, invoice_data FROM invoices WHERE id = ?",
        (invoice_id,),
    )
    return cursor.fetchone()


def fetch_invoice_rows(conn: sqlite3.Connection, config_id: str | None = None) -> list[tuple]:
    """Return saved-invoice rows, optionally for one config id (unordered)."""
    cursor = conn.cursor()
    if config_id:
        cursor.execute(
            "SELECT id, config_id, generated_at, sent_at, invoice_data FROM invoices WHERE config_id = ?",
            (config_id,),
        )
    else:
        cursor.execute("SELECT id, config_id, generated_at, sent_at, invoice_data FROM invoices")
    return cursor.fetchall()


def update_invoice_sent_at(conn: sqlite3.Connection, invoice_id: str, sent_at: str) -> int:
    """Set sent_at and return the number of rows updated."""
    cursor = conn.cursor()
    cursor.execute("UPDATE invoices SET sent_at = ? WHERE id = ?", (sent_at, invoice_id))
    conn.commit()
    return cursor.rowcount


def delete_invoice_row(conn: sqlite3.Connection, invoice_id: str) -> None:
    cursor = conn.cursor()
    cursor.execute("DELETE FROM invoices WHERE id = ?", (invoice_id,))
    conn.commit()
