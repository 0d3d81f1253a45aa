"""
Saved-invoice store backed by SQLite.
"""

import json
import sqlite3
from datetime import datetime, timezone

from core.database import (
    delete_invoice_row,
    fetch_invoice_row,
    fetch_invoice_rows,
    insert_invoice,
    invoice_exists,
    update_invoice_sent_at,
)
from core.errors import InvoiceNotFoundError, StorageError
from models.invoice import InvoiceData, SavedInvoice


def _now() -> datetime:
    return datetime.now(timezone.utc)


def generate_invoice_id(conn: sqlite3.Connection, config_id: str, generated_at: datetime) -> str:
    """'<configId>-<epoch ms>', bumped by a millisecond until unused."""
    millis = int(generated_at.timestamp() * 1000)
    while invoice_exists(conn, f"{config_id}-{millis}"):
        millis += 1
    return f"{config_id}-{millis}"


def _row_to_saved_invoice(row: tuple) -> SavedInvoice:
    invoice_id, config_id, generated_at, sent_at, invoice_data = row
    return SavedInvoice(
        id=invoice_id,
        config_id=config_id,
        generated_at=datetime.fromisoformat(generated_at),
        sent_at=datetime.fromisoformat(sent_at) if sent_at else None,
        invoice_data=InvoiceData.from_dict(json.loads(invoice_data)),
    )


def save_invoice(conn: sqlite3.Connection, config_id: str, invoice_data: InvoiceData) -> SavedInvoice:
    """Persist a generated invoice and return its saved record."""
    generated_at = _now()
    saved = SavedInvoice(
        id=generate_invoice_id(conn, config_id, generated_at),
        config_id=config_id,
        generated_at=generated_at,
        invoice_data=invoice_data,
    )
    insert_invoice(
        conn,
        saved.id,
        config_id,
        generated_at.isoformat(),
        json.dumps(invoice_data.to_dict()),
    )
    return saved


def load_invoice(conn: sqlite3.Connection, invoice_id: str) -> SavedInvoice:
    """
    Raises:
        InvoiceNotFoundError: no invoice with this id
        StorageError: the stored row cannot be decoded
    """
    row = fetch_invoice_row(conn, invoice_id)
    if row is None:
        raise InvoiceNotFoundError(invoice_id)
    try:
        return _row_to_saved_invoice(row)
    except (ValueError, KeyError, TypeError) as e:
        raise StorageError(f"Saved invoice {invoice_id} is unreadable: {e}") from e


def list_invoices(conn: sqlite3.Connection, config_id: str | None = None) -> list[SavedInvoice]:
    """Saved invoices, newest first. Unreadable rows are reported and skipped."""
    invoices = []
    for row in fetch_invoice_rows(conn, config_id):
        try:
            invoices.append(_row_to_saved_invoice(row))
        except (ValueError, KeyError, TypeError) as e:
            print(f"Failed to load invoice {row[0]}: {e}")

    invoices.sort(key=lambda inv: inv.generated_at, reverse=True)
    return invoices


def mark_invoice_as_sent(conn: sqlite3.Connection, invoice_id: str) -> None:
    """Raises InvoiceNotFoundError if absent."""
    if update_invoice_sent_at(conn, invoice_id, _now().isoformat()) == 0:
        raise InvoiceNotFoundError(invoice_id)


def delete_invoice(conn: sqlite3.Connection, invoice_id: str) -> None:
    """Delete a saved invoice; missing ids are ignored."""
    delete_invoice_row(conn, invoice_id)
