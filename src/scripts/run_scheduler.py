#!/usr/bin/env python3
"""
Scheduled invoice run: generate and email every invoice due today.

Intended to be run once a day by cron or launchd.

Usage:
    uv run python src/scripts/run_scheduler.py [--date YYYY-MM-DD]
"""

import argparse
import asyncio
import sys
import traceback
from datetime import date
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import load_settings
from core.database import get_connection
from services.configs import load_configs
from services.email import send_error_email
from services.invoices import open_pipeline
from services.scheduler import make_logger, run_scheduled_invoices


async def main(today: date | None = None) -> int:
    """Main entry point. Returns the process exit code."""
    settings = load_settings()
    log = make_logger()

    try:
        configs = load_configs(settings.config_file)
        conn = get_connection(settings.db_path)
        try:
            async with open_pipeline(settings, verbose=True) as pipeline:
                results = await run_scheduled_invoices(settings, configs, pipeline, conn, today=today, log=log)
        finally:
            conn.close()

    except Exception as e:
        log(f"FATAL ERROR: {e}")
        traceback.print_exc()
        await send_error_email(settings, e)
        return 1

    failed = [result.config_id for result in results if not result.ok]
    if failed:
        log(f"Failed configurations: {', '.join(failed)}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate and send invoices scheduled for today")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        help="Evaluate schedules as of this date (YYYY-MM-DD). Defaults to today.",
    )
    args = parser.parse_args()

    sys.exit(asyncio.run(main(args.date)))
