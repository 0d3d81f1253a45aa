"""Pydantic response models for API endpoints."""

from datetime import date

from pydantic import BaseModel

from models.config import InvoiceConfig
from models.invoice import SavedInvoice, TaskSummary, WeeklyWork


class HealthResponse(BaseModel):
    """Health check response."""

    status: str  # "healthy" or "unhealthy"
    version: str
    config_available: bool
    timestamp: str  # ISO 8601 UTC
    error: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    details: list[str] = []


class ErrorCodes:
    """Error code constants."""

    INVALID_REQUEST = "INVALID_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    CONFIG_ERROR = "CONFIG_ERROR"
    NO_COMMIT_SOURCES = "NO_COMMIT_SOURCES"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ConfigSummary(BaseModel):
    id: str
    name: str
    customer: str
    schedule: str
    enabled: bool

    @classmethod
    def from_config(cls, config: InvoiceConfig) -> "ConfigSummary":
        return cls(
            id=config.id,
            name=config.display_name,
            customer=config.customer,
            schedule=config.schedule.type,
            enabled=config.enabled,
        )


class TaskResponse(BaseModel):
    description: str
    hours: float
    commit_count: int

    @classmethod
    def from_task(cls, task: TaskSummary) -> "TaskResponse":
        return cls(description=task.description, hours=task.hours, commit_count=task.commit_count)


class WeekResponse(BaseModel):
    week_start: date
    week_end: date
    date_range: str
    total_hours: float
    tasks: list[TaskResponse]

    @classmethod
    def from_week(cls, week: WeeklyWork) -> "WeekResponse":
        return cls(
            week_start=week.week_start,
            week_end=week.week_end,
            date_range=week.date_range_label,
            total_hours=week.total_hours,
            tasks=[TaskResponse.from_task(task) for task in week.tasks],
        )


class InvoiceResponse(BaseModel):
    """A saved invoice with its generated content."""

    id: str
    config_id: str
    generated_at: str
    sent_at: str | None = None
    customer: str
    start_date: str
    end_date: str
    total_hours: float
    text: str
    weeks: list[WeekResponse]

    @classmethod
    def from_saved(cls, saved: SavedInvoice) -> "InvoiceResponse":
        data = saved.invoice_data
        return cls(
            id=saved.id,
            config_id=saved.config_id,
            generated_at=saved.generated_at.isoformat(),
            sent_at=saved.sent_at.isoformat() if saved.sent_at else None,
            customer=data.customer,
            start_date=data.start_date_label,
            end_date=data.end_date_label,
            total_hours=data.total_hours,
            text=data.formatted_text,
            weeks=[WeekResponse.from_week(week) for week in data.weeks],
        )
