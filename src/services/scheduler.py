"""
Scheduled batch run: generate and send every invoice due today.
"""

import sqlite3
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path

from core.config import SCHEDULER_LOG_PATH, Settings
from models.config import InvoiceConfig, InvoiceConfigs
from services.configs import get_configs_to_run_today
from services.email import send_invoice_email_from_config
from services.invoices import InvoicePipeline, format_hours, generate_invoice_from_config
from services.storage import mark_invoice_as_sent, save_invoice


@dataclass
class ScheduledRunResult:
    """Outcome of one configuration in a scheduled run."""

    config_id: str
    generated: bool = False
    sent: bool = False
    invoice_id: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.generated and self.sent and self.error is None


def make_logger(log_path: Path | None = SCHEDULER_LOG_PATH) -> Callable[[str], None]:
    """Return a log function printing '[YYYY-MM-DD HH:MM:SS] message' and appending it to log_path."""

    def log(message: str) -> None:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        line = f"[{timestamp}] {message}"
        print(line)
        if log_path is not None:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(log_path, "a", encoding="utf-8") as f:
                f.write(line + "\n")

    return log


async def process_config(
    settings: Settings,
    config: InvoiceConfig,
    configs: InvoiceConfigs,
    pipeline: InvoicePipeline,
    conn: sqlite3.Connection | None,
    today: date,
    log: Callable[[str], None],
    graph=None,
) -> ScheduledRunResult:
    result = ScheduledRunResult(config_id=config.id)

    log(f"--- Processing invoice: {config.display_name} ({config.id}) ---")
    log("Generating invoice...")
    invoice = await generate_invoice_from_config(config, pipeline, today=today, verbose=True)
    if invoice is None:
        result.error = "No invoice generated"
        log(f"ERROR: Failed to generate invoice for {config.id}")
        return result

    result.generated = True
    log("Invoice generated successfully")
    log(f"  Customer: {invoice.customer}")
    log(f"  Period: {invoice.start_date_label} - {invoice.end_date_label}")
    log(f"  Total Hours: {format_hours(invoice.total_hours)}")

    if conn is not None:
        result.invoice_id = save_invoice(conn, config.id, invoice).id
        log(f"Saved invoice {result.invoice_id}")

    log("Sending invoice email...")
    email_result = await send_invoice_email_from_config(
        settings,
        config,
        invoice,
        global_config=configs.global_,
        test_mode=False,
        verbose=True,
        graph=graph,
    )
    if not email_result.success:
        result.error = email_result.error
        log(f"ERROR: Failed to send email for {config.id}: {email_result.error}")
        return result

    result.sent = True
    if conn is not None and result.invoice_id:
        mark_invoice_as_sent(conn, result.invoice_id)
    log(f"Invoice email sent successfully for {config.id}")
    return result


async def run_scheduled_invoices(
    settings: Settings,
    configs: InvoiceConfigs,
    pipeline: InvoicePipeline,
    conn: sqlite3.Connection | None = None,
    today: date | None = None,
    log: Callable[[str], None] | None = None,
    graph=None,
) -> list[ScheduledRunResult]:
    """
    Generate and send (customer mode) every enabled invoice due today.

    A failure in one configuration is logged and recorded in its result;
    the remaining configurations still run.
    """
    today = today or date.today()
    log = log or make_logger()

    log("Starting scheduled invoice checker...")
    log(f"Today: {today.strftime('%A, %B')} {today.day}, {today.year}")

    due = get_configs_to_run_today(configs, today)
    if not due:
        log("No invoices scheduled for today")
        return []

    log(f"Found {len(due)} invoice(s) to generate")

    results = []
    for config in due:
        try:
            result = await process_config(settings, config, configs, pipeline, conn, today, log, graph)
        except Exception as e:
            log(f"ERROR processing {config.id}: {e}")
            result = ScheduledRunResult(config_id=config.id, error=str(e) or type(e).__name__)
        results.append(result)

    sent = sum(1 for result in results if result.sent)
    log(f"=== Scheduler run completed: {sent}/{len(results)} sent ===")
    return results
