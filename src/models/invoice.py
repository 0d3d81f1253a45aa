"""
Data models for commits, billing tasks, and invoices.

Commit and fetch records are ephemeral; InvoiceData and SavedInvoice
round-trip through JSON for the saved-invoice store and the API.
"""

from dataclasses import dataclass, field
from datetime import date, datetime


@dataclass(frozen=True)
class CommitWindow:
    """Inclusive date range [start, end] used to bound a commit query."""

    start: date
    end: date


@dataclass
class CommitRecord:
    """One commit read from a remote or local source."""

    message: str
    date: datetime
    repo: str


@dataclass
class FetchResult:
    """Outcome of reading one source: commits, or empty with a reason."""

    source: str
    commits: list[CommitRecord] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ResolveResult:
    """All commits for one window plus the per-source outcomes behind them."""

    commits: list[CommitRecord] = field(default_factory=list)
    fetches: list[FetchResult] = field(default_factory=list)
    used_fallback: bool = False

    @property
    def source_count(self) -> int:
        return len(self.fetches)


@dataclass
class TaskSummary:
    """One billing line: a category (or AI description) with its hours."""

    description: str
    hours: float = 0.0
    commit_count: int = 0

    def to_dict(self) -> dict:
        return {
            "description": self.description,
            "hours": self.hours,
            "commitCount": self.commit_count,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TaskSummary":
        return cls(
            description=data["description"],
            hours=float(data["hours"]),
            commit_count=int(data.get("commitCount", 0)),
        )


@dataclass
class WeeklyWork:
    """Billed work for one week."""

    week_start: date
    week_end: date
    date_range_label: str
    total_hours: float
    tasks: list[TaskSummary] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "weekStart": self.week_start.isoformat(),
            "weekEnd": self.week_end.isoformat(),
            "dateRange": self.date_range_label,
            "totalHours": self.total_hours,
            "tasks": [task.to_dict() for task in self.tasks],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WeeklyWork":
        return cls(
            week_start=date.fromisoformat(data["weekStart"]),
            week_end=date.fromisoformat(data["weekEnd"]),
            date_range_label=data["dateRange"],
            total_hours=float(data["totalHours"]),
            tasks=[TaskSummary.from_dict(t) for t in data.get("tasks", [])],
        )


@dataclass(frozen=True)
class InvoiceData:
    """A generated invoice. Created once per run and never modified."""

    customer: str
    start_date_label: str
    end_date_label: str
    formatted_text: str
    total_hours: float
    weeks: tuple[WeeklyWork, ...] = ()

    def to_dict(self) -> dict:
        return {
            "customer": self.customer,
            "startDate": self.start_date_label,
            "endDate": self.end_date_label,
            "text": self.formatted_text,
            "totalHours": self.total_hours,
            "weeks": [week.to_dict() for week in self.weeks],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "InvoiceData":
        return cls(
            customer=data["customer"],
            start_date_label=data["startDate"],
            end_date_label=data["endDate"],
            formatted_text=data["text"],
            total_hours=float(data["totalHours"]),
            weeks=tuple(WeeklyWork.from_dict(w) for w in data.get("weeks", [])),
        )


@dataclass
class SavedInvoice:
    """An InvoiceData persisted by the saved-invoice store."""

    id: str
    config_id: str
    generated_at: datetime
    invoice_data: InvoiceData
    sent_at: datetime | None = None

    @property
    def is_sent(self) -> bool:
        return self.sent_at is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "configId": self.config_id,
            "generatedAt": self.generated_at.isoformat(),
            "sentAt": self.sent_at.isoformat() if self.sent_at else None,
            "invoiceData": self.invoice_data.to_dict(),
        }
