"""FastAPI dependencies for authentication and shared resources."""

import secrets
import sqlite3
from collections.abc import AsyncIterator

from fastapi import Depends, Header, HTTPException, status

from core.config import Settings, load_settings
from core.database import get_connection
from services.invoices import InvoicePipeline, open_pipeline

_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the process settings."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


async def get_db(settings: Settings = Depends(get_settings)) -> AsyncIterator[sqlite3.Connection]:
    """Connection opened on the event loop thread, where the async routes use it."""
    conn = get_connection(settings.db_path)
    try:
        yield conn
    finally:
        conn.close()


async def get_pipeline(settings: Settings = Depends(get_settings)) -> AsyncIterator[InvoicePipeline]:
    async with open_pipeline(settings) as pipeline:
        yield pipeline


async def verify_api_key(
    x_api_key: str = Header(..., alias="X-API-Key"),
    settings: Settings = Depends(get_settings),
) -> str:
    """
    Verify API key from X-API-Key header.

    Raises:
        HTTPException: 401 if key is missing or invalid
    """
    if not settings.api_key:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "API key not configured on server",
                "code": "INTERNAL_ERROR",
                "details": [],
            },
        )

    # Constant-time comparison
    if not secrets.compare_digest(x_api_key, settings.api_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "Invalid or missing API key",
                "code": "UNAUTHORIZED",
                "details": [],
            },
        )

    return x_api_key
