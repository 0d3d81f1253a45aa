"""SQLite request logging for API."""

import sqlite3
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from fastapi import HTTPException, Request

from api.models.responses import ErrorCodes
from core.database import get_connection


@dataclass
class RequestLog:
    """Captured request/response data for logging."""

    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    endpoint: str = ""
    method: str = ""
    client_ip: str | None = None
    config_id: str | None = None
    invoice_id: str | None = None
    status_code: int = 0
    error_code: str | None = None
    error_message: str | None = None
    processing_time_ms: int = 0
    total_hours: float | None = None
    details: list[tuple[str, str]] = field(default_factory=list)  # (type, message)


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def log_request(log: RequestLog, db_path: Path) -> None:
    """Write request log to SQLite database."""
    conn = get_connection(db_path)
    try:
        cursor = conn.cursor()

        cursor.execute(
            """
            INSERT INTO api_requests (
                request_id, timestamp, endpoint, method, client_ip,
                config_id, invoice_id, status_code, error_code, error_message,
                processing_time_ms, total_hours
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
            (
                log.request_id,
                log.timestamp,
                log.endpoint,
                log.method,
                log.client_ip,
                log.config_id,
                log.invoice_id,
                log.status_code,
                log.error_code,
                log.error_message,
                log.processing_time_ms,
                log.total_hours,
            ),
        )

        for detail_type, message in log.details:
            cursor.execute(
                """
                INSERT INTO api_request_details (request_id, detail_type, message)
                VALUES (?, ?, ?)
            """,
                (log.request_id, detail_type, message),
            )

        conn.commit()
    finally:
        conn.close()


@contextmanager
def logged_request(request: Request, endpoint: str, db_path: Path, **fields) -> Iterator[RequestLog]:
    """
    Record one request in the audit tables, whatever its outcome.

    The route fills in the yielded RequestLog; HTTP errors and unexpected
    exceptions are captured and re-raised. A failure to write the record
    is printed and never fails the request.
    """
    start_time = time.time()
    request_log = RequestLog(
        endpoint=endpoint,
        method=request.method,
        client_ip=get_client_ip(request),
        **fields,
    )

    try:
        yield request_log
        request_log.status_code = request_log.status_code or 200

    except HTTPException as e:
        request_log.status_code = e.status_code
        if isinstance(e.detail, dict):
            request_log.error_code = e.detail.get("code")
            request_log.error_message = e.detail.get("error")
            for detail in e.detail.get("details", []):
                request_log.details.append(("validation_error", detail))
        else:
            request_log.error_message = str(e.detail)
        raise

    except Exception as e:
        request_log.status_code = 500
        request_log.error_code = ErrorCodes.INTERNAL_ERROR
        request_log.error_message = str(e)
        raise

    finally:
        request_log.processing_time_ms = int((time.time() - start_time) * 1000)
        try:
            log_request(request_log, db_path)
        except sqlite3.Error as e:
            print(f"Failed to log API request {request_log.request_id}: {e}")
