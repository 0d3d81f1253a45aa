"""
Configuration constants and environment setup.
"""

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_CONFIG_FILE = PROJECT_ROOT / "invoice-configs.json"
DEFAULT_DB_PATH = PROJECT_ROOT / "data" / "db" / "invoices.db"
TEMPLATES_DIR = PROJECT_ROOT / "data" / "templates"
EMAIL_TEMPLATE_PATH = TEMPLATES_DIR / "invoice-email.html"
SCHEDULER_LOG_PATH = PROJECT_ROOT / "invoice-scheduler.log"

# =============================================================================
# GIT SOURCES
# =============================================================================

DEFAULT_PROJECTS_DIR = Path("/opt/dev")  # searched by customer name when no sources are configured
GITHUB_API_URL = "https://api.github.com"
GIT_MARKER = ".git"

# =============================================================================
# INVOICE DEFAULTS
# =============================================================================

DEFAULT_WEEKS = 2
DEFAULT_HOURS_PER_WEEK = 30
DEFAULT_SUBJECT = "Invoice from {{startDate}} - {{endDate}}"

# =============================================================================
# AI SERVICE
# =============================================================================

DEFAULT_AI_COMMAND = "claude -p"
DEFAULT_AI_TIMEOUT = 600

# =============================================================================
# API CONFIGURATION
# =============================================================================

API_VERSION = "2.0.0"


@dataclass
class Settings:
    """Process-wide settings, built once at startup and passed down explicitly."""

    config_file: Path = DEFAULT_CONFIG_FILE
    db_path: Path = DEFAULT_DB_PATH
    projects_dir: Path = DEFAULT_PROJECTS_DIR

    github_token: str = ""

    ai_command: list[str] = field(default_factory=lambda: shlex.split(DEFAULT_AI_COMMAND))
    ai_timeout: float = DEFAULT_AI_TIMEOUT

    # MS Graph credentials
    graph_tenant_id: str = ""
    graph_app_id: str = ""
    graph_client_secret: str = ""

    from_email: str = ""
    from_name: str = ""
    test_email: str = ""
    error_email: str = ""

    api_key: str = ""
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False

    @property
    def graph_configured(self) -> bool:
        return bool(self.graph_tenant_id and self.graph_app_id and self.graph_client_secret)


def load_settings(env_file: str | Path | None = None) -> Settings:
    """
    Build Settings from the environment (after loading .env).

    This is the only place the process environment is read.
    """
    load_dotenv(env_file)
    env = os.environ

    return Settings(
        config_file=Path(env.get("INVOICE_CONFIG_FILE", str(DEFAULT_CONFIG_FILE))),
        db_path=Path(env.get("INVOICE_DB_PATH", str(DEFAULT_DB_PATH))),
        projects_dir=Path(env.get("INVOICE_PROJECTS_DIR", str(DEFAULT_PROJECTS_DIR))),
        github_token=env.get("GITHUB_TOKEN", ""),
        ai_command=shlex.split(env.get("INVOICE_AI_COMMAND", DEFAULT_AI_COMMAND)),
        ai_timeout=float(env.get("INVOICE_AI_TIMEOUT", str(DEFAULT_AI_TIMEOUT))),
        graph_tenant_id=env.get("MICROSOFT_GRAPH_TENANT_ID", ""),
        graph_app_id=env.get("MICROSOFT_GRAPH_APP_ID", ""),
        graph_client_secret=env.get("MICROSOFT_GRAPH_CLIENT_SECRET", ""),
        from_email=env.get("INVOICE_FROM_EMAIL", ""),
        from_name=env.get("INVOICE_FROM_NAME", ""),
        test_email=env.get("INVOICE_TEST_EMAIL", ""),
        error_email=env.get("INVOICE_ERROR_EMAIL", ""),
        api_key=env.get("INVOICE_API_KEY", ""),
        api_host=env.get("API_HOST", "0.0.0.0"),
        api_port=int(env.get("API_PORT", "8000")),
        api_debug=env.get("API_DEBUG", "false").lower() == "true",
    )
