"""
Loading and selecting invoice configurations.
"""

import json
from datetime import date
from pathlib import Path

from pydantic import ValidationError

from core.errors import ConfigurationError
from core.schedule import should_run
from models.config import InvoiceConfig, InvoiceConfigs


def load_configs(config_file: Path) -> InvoiceConfigs:
    """
    Load and validate the invoice configuration file.

    Raises:
        ConfigurationError: file missing, not JSON, or structurally invalid
    """
    if not config_file.exists():
        raise ConfigurationError(f"Config file not found: {config_file}")

    try:
        data = json.loads(config_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Config file is not valid JSON: {e}") from e

    if not isinstance(data, dict) or not data.get("version"):
        raise ConfigurationError("Config file missing version field")
    if not isinstance(data.get("invoices"), list):
        raise ConfigurationError("Config file missing or invalid invoices array")

    try:
        return InvoiceConfigs.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config file {config_file}:\n{e}") from e


def get_config_by_id(configs: InvoiceConfigs, config_id: str) -> InvoiceConfig:
    """Raises ConfigurationError if no configuration has this id."""
    for config in configs.invoices:
        if config.id == config_id:
            return config
    raise ConfigurationError(f"Configuration '{config_id}' not found")


def get_enabled_configs(configs: InvoiceConfigs) -> list[InvoiceConfig]:
    return [config for config in configs.invoices if config.enabled]


def get_configs_to_run_today(configs: InvoiceConfigs, today: date) -> list[InvoiceConfig]:
    """
    Enabled configurations whose schedule fires today.

    A configuration with a broken schedule is reported and skipped.
    """
    due = []
    for config in get_enabled_configs(configs):
        try:
            if should_run(config.schedule, today, config.id):
                due.append(config)
        except ConfigurationError as e:
            print(f"Skipping {config.id}: {e}")
    return due
