"""API Pydantic models."""

from .responses import (
    ConfigSummary,
    ErrorCodes,
    ErrorResponse,
    HealthResponse,
    InvoiceResponse,
    TaskResponse,
    WeekResponse,
)

__all__ = [
    "HealthResponse",
    "ErrorResponse",
    "ErrorCodes",
    "ConfigSummary",
    "InvoiceResponse",
    "TaskResponse",
    "WeekResponse",
]
