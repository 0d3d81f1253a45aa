"""
Pydantic models for the invoice configuration file (invoice-configs.json).

Field names are snake_case in Python and camelCase in the file.
"""

from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.config import DEFAULT_HOURS_PER_WEEK, DEFAULT_WEEKS

ScheduleType = Literal[
    "bi-weekly-sunday",
    "weekly-sunday",
    "monthly-first",
    "monthly-last",
    "custom",
]


class ConfigModel(BaseModel):
    """Base model accepting camelCase keys from the config file."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScheduleConfig(ConfigModel):
    type: ScheduleType
    start_date: date | None = None  # required for bi-weekly-sunday
    cron: str | None = None


class EmailConfig(ConfigModel):
    to: list[str]
    cc: list[str] = []
    bcc: list[str] = []
    subject: str | None = None  # may use {{startDate}}, {{endDate}}, {{customer}}
    from_name: str | None = None


class GitConfig(ConfigModel):
    repos: list[str] = []  # GitHub "owner/name" identifiers
    repo_dirs: list[str] = []  # local glob patterns
    weeks: int = Field(default=DEFAULT_WEEKS, ge=1)
    hours_per_week: float = Field(default=DEFAULT_HOURS_PER_WEEK, ge=0)


class AIStageConfig(ConfigModel):
    enabled: bool = False
    prompt: str | None = None


class AIConfig(ConfigModel):
    enabled: bool = False
    code_analysis: AIStageConfig = Field(default_factory=AIStageConfig)
    line_item_generation: AIStageConfig = Field(default_factory=AIStageConfig)


class InvoiceConfig(ConfigModel):
    """One client's invoice definition."""

    id: str
    name: str = ""
    customer: str
    enabled: bool = True
    schedule: ScheduleConfig
    email: EmailConfig
    git: GitConfig = Field(default_factory=GitConfig)
    ai: AIConfig | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.id


class GlobalConfig(ConfigModel):
    default_from_email: str | None = None
    default_bcc: list[str] = []


class InvoiceConfigs(ConfigModel):
    """Top-level structure of the config file."""

    version: str
    invoices: list[InvoiceConfig]
    global_: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
