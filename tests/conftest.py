"""
Pytest configuration and shared fixtures.
"""

import sys
from datetime import datetime, time, timezone
from pathlib import Path

import httpx
import pytest
from faker import Faker

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.config import Settings
from core.database import get_connection
from core.runner import CommandResult
from models.config import InvoiceConfig, InvoiceConfigs
from models.invoice import CommitRecord


class FakeRunner:
    """
    Stand-in for CommandRunner.

    `handler(cmd, input_text, cwd)` returns a CommandResult or raises;
    without one every command succeeds with empty output.
    """

    def __init__(self, handler=None):
        self.handler = handler
        self.calls = []

    async def run(self, cmd, input_text=None, cwd=None, timeout=None):
        self.calls.append({"cmd": list(cmd), "input": input_text, "cwd": cwd, "timeout": timeout})
        if self.handler is None:
            return CommandResult(0, "", "")
        return self.handler(cmd, input_text, cwd)


def github_commit(message: str, when: datetime, author: str = "Dev") -> dict:
    """One item as returned by GET /repos/{owner}/{repo}/commits."""
    return {
        "sha": "0" * 40,
        "commit": {
            "message": message,
            "author": {"name": author, "date": when.strftime("%Y-%m-%dT%H:%M:%SZ")},
        },
    }


def github_transport(repos: dict[str, list[dict]], status_codes: dict[str, int] | None = None):
    """
    MockTransport answering the commits endpoint per 'owner/name'.

    Each request is recorded on the returned transport's `requests` list.
    """
    status_codes = status_codes or {}
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        path = request.url.path
        repo = path.removeprefix("/repos/").removesuffix("/commits")
        if repo in status_codes:
            return httpx.Response(status_codes[repo], json={"message": "error"})
        return httpx.Response(200, json=repos.get(repo, []))

    transport = httpx.MockTransport(handler)
    transport.requests = requests
    return transport


@pytest.fixture
def fake():
    Faker.seed(1234)
    return Faker()


@pytest.fixture
def make_commit(fake):
    """Factory for CommitRecords with a fixed message and a fake repo/date."""

    def _make(message: str, day=None, repo: str | None = None) -> CommitRecord:
        when = day or fake.date_between(start_date="-1y", end_date="today")
        return CommitRecord(
            message=message,
            date=datetime.combine(when, time(12, 0), tzinfo=timezone.utc),
            repo=repo or fake.slug(),
        )

    return _make


@pytest.fixture
def settings(tmp_path):
    return Settings(
        config_file=tmp_path / "invoice-configs.json",
        db_path=tmp_path / "invoices.db",
        projects_dir=tmp_path / "projects",
        ai_command=["fake-ai"],
        ai_timeout=5,
        from_email="invoices@consulting.example",
        from_name="Example Consulting",
        test_email="qa@consulting.example",
        error_email="ops@consulting.example",
        api_key="secret-key",
    )


@pytest.fixture
def db_conn(tmp_path):
    conn = get_connection(tmp_path / "invoices.db")
    yield conn
    conn.close()


@pytest.fixture
def sample_config_dict():
    """One configuration entry in the file's camelCase format."""
    return {
        "id": "acme-biweekly",
        "name": "Acme Bi-Weekly",
        "customer": "acme",
        "enabled": True,
        "schedule": {"type": "bi-weekly-sunday", "startDate": "2024-09-15"},
        "email": {
            "to": ["billing@acme.example"],
            "cc": ["pm@acme.example"],
            "subject": "Invoice for {{customer}}: {{startDate}} - {{endDate}}",
        },
        "git": {"repos": ["acme-corp/portal"], "weeks": 2, "hoursPerWeek": 30},
    }


@pytest.fixture
def sample_configs_dict(sample_config_dict):
    return {
        "version": "1.0",
        "invoices": [
            sample_config_dict,
            {
                "id": "globex-monthly",
                "customer": "globex",
                "enabled": False,
                "schedule": {"type": "monthly-last"},
                "email": {"to": ["ap@globex.example"]},
            },
        ],
        "global": {
            "defaultFromEmail": "billing@consulting.example",
            "defaultBcc": ["archive@consulting.example"],
        },
    }


@pytest.fixture
def sample_config(sample_config_dict) -> InvoiceConfig:
    return InvoiceConfig.model_validate(sample_config_dict)


@pytest.fixture
def sample_configs(sample_configs_dict) -> InvoiceConfigs:
    return InvoiceConfigs.model_validate(sample_configs_dict)
