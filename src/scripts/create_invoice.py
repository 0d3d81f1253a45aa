#!/usr/bin/env python3
"""
Generate, save, and send invoices from invoice-configs.json.

Usage:
    uv run python src/scripts/create_invoice.py --list
    uv run python src/scripts/create_invoice.py <config-id> [--test | --send]
    uv run python src/scripts/create_invoice.py <config-id> --send-existing

Example:
    uv run python src/scripts/create_invoice.py acme-biweekly --test
"""

import argparse
import asyncio
import sqlite3
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import Settings, load_settings
from core.database import get_connection
from core.errors import ConfigurationError
from models.config import InvoiceConfig, InvoiceConfigs
from models.invoice import InvoiceData, SavedInvoice
from services.configs import get_config_by_id, load_configs
from services.email import send_invoice_email_from_config
from services.invoices import format_hours, generate_invoice_from_config, open_pipeline
from services.storage import list_invoices, mark_invoice_as_sent, save_invoice

RULE = "-" * 60


# =============================================================================
# OUTPUT
# =============================================================================


def print_configs(configs: InvoiceConfigs) -> None:
    print("\nAvailable Invoice Configurations:\n")
    for config in configs.invoices:
        print(f"  {config.id} - {config.display_name}")
        print(f"    Customer: {config.customer}")
        print(f"    Schedule: {config.schedule.type}")
        print(f"    Status: {'Enabled' if config.enabled else 'Disabled'}")
        print()


def print_invoice(text: str) -> None:
    print(RULE)
    print(text)
    print(RULE)


def print_recipients(config: InvoiceConfig, configs: InvoiceConfigs) -> None:
    print("\nInvoice will be sent to:")
    for address in config.email.to:
        print(f"  To: {address}")
    for address in config.email.cc:
        print(f"  CC: {address}")
    for address in config.email.bcc or configs.global_.default_bcc:
        print(f"  BCC: {address}")


def confirm(prompt: str) -> bool:
    answer = input(prompt).strip().lower()
    return answer in ("y", "yes")


def choose_saved_invoice(invoices: list[SavedInvoice]) -> SavedInvoice | None:
    """Let the operator pick a saved invoice by number; None on cancel."""
    for index, saved in enumerate(invoices, start=1):
        data = saved.invoice_data
        sent_label = " [SENT]" if saved.is_sent else ""
        generated = saved.generated_at.astimezone().strftime("%b %d, %Y %H:%M")
        print(f"  {index}. {data.start_date_label} - {data.end_date_label} ({generated}){sent_label}")
    print("  0. Cancel")

    answer = input("\nSelect an invoice to send: ").strip()
    if not answer.isdigit() or not 0 < int(answer) <= len(invoices):
        return None
    return invoices[int(answer) - 1]


# =============================================================================
# SENDING
# =============================================================================


async def deliver(
    settings: Settings,
    conn: sqlite3.Connection,
    config: InvoiceConfig,
    configs: InvoiceConfigs,
    invoice: InvoiceData,
    invoice_id: str,
    test_mode: bool,
    verbose: bool,
) -> None:
    """Send one invoice; a customer send marks the saved invoice as sent."""
    if test_mode:
        print("\nSending to test email...")
    else:
        print("\nSending invoice to customers...")

    result = await send_invoice_email_from_config(
        settings,
        config,
        invoice,
        global_config=configs.global_,
        test_mode=test_mode,
        verbose=verbose,
    )
    result.raise_for_status()

    if test_mode:
        print(f"Test invoice sent to {settings.test_email}")
    else:
        mark_invoice_as_sent(conn, invoice_id)
        print("\nInvoice sent successfully!")


def confirm_customer_send(config: InvoiceConfig, configs: InvoiceConfigs, invoice: InvoiceData) -> bool:
    print("\nCONFIRMATION REQUIRED")
    print_recipients(config, configs)
    print("\nInvoice Summary:")
    print(f"  Period: {invoice.start_date_label} - {invoice.end_date_label}")
    print(f"  Total Hours: {format_hours(invoice.total_hours)}")
    print(f"  Customer: {config.customer}")
    return confirm("\nSend invoice? (y/n): ")


# =============================================================================
# COMMANDS
# =============================================================================


async def send_existing(
    settings: Settings,
    conn: sqlite3.Connection,
    config: InvoiceConfig,
    configs: InvoiceConfigs,
    verbose: bool,
) -> None:
    saved_invoices = list_invoices(conn, config.id)
    if not saved_invoices:
        print(f"\nNo saved invoices found for '{config.id}'")
        print("Generate an invoice first to save it for later sending")
        return

    print(f"\nSaved Invoices for {config.display_name}:\n")
    saved = choose_saved_invoice(saved_invoices)
    if saved is None:
        print("\nCancelled")
        return

    print("\nInvoice loaded:\n")
    print_invoice(saved.invoice_data.formatted_text)

    print("\n  1. Send to test email")
    print("  2. Send to customers")
    print("  0. Cancel")
    action = input("\nWhat would you like to do? ").strip()
    if action not in ("1", "2"):
        print("\nCancelled")
        return

    test_mode = action == "1"
    if not test_mode and not confirm_customer_send(config, configs, saved.invoice_data):
        print("\nInvoice send cancelled")
        return

    await deliver(settings, conn, config, configs, saved.invoice_data, saved.id, test_mode, verbose)


async def generate(
    settings: Settings,
    conn: sqlite3.Connection,
    config: InvoiceConfig,
    configs: InvoiceConfigs,
    args: argparse.Namespace,
) -> None:
    print(f"Generating invoice: {config.display_name}")
    print(f"   Customer: {config.customer}")
    print(f"   Schedule: {config.schedule.type}\n")

    async with open_pipeline(settings, verbose=args.verbose) as pipeline:
        invoice = await generate_invoice_from_config(config, pipeline, verbose=args.verbose)

    if invoice is None:
        raise RuntimeError(f"Failed to generate invoice for {config.id}")

    saved = save_invoice(conn, config.id, invoice)

    print("\nInvoice generated successfully!\n")
    print_invoice(invoice.formatted_text)
    print(f"\nInvoice saved (ID: {saved.id})")

    if not args.test and not args.send:
        print("\nInvoice displayed (no email sent)")
        print("Use --test to send to test email")
        print("Use --send to send to customers")
        print("Use --send-existing to send this invoice later")
        return

    if args.test:
        await deliver(settings, conn, config, configs, invoice, saved.id, True, args.verbose)

    if args.send:
        if not confirm_customer_send(config, configs, invoice):
            print("\nInvoice send cancelled")
            return
        await deliver(settings, conn, config, configs, invoice, saved.id, False, args.verbose)


async def run(args: argparse.Namespace) -> None:
    settings = load_settings()
    configs = load_configs(settings.config_file)

    if args.list or not args.config_id:
        print_configs(configs)
        return

    try:
        config = get_config_by_id(configs, args.config_id)
    except ConfigurationError:
        print("\nAvailable configurations:")
        for entry in configs.invoices:
            print(f"  - {entry.id}")
        raise

    conn = get_connection(settings.db_path)
    try:
        if args.send_existing:
            await send_existing(settings, conn, config, configs, args.verbose)
        else:
            await generate(settings, conn, config, configs, args)
    finally:
        conn.close()


def main():
    parser = argparse.ArgumentParser(description="Generate and send invoices from invoice configurations")
    parser.add_argument("config_id", nargs="?", help="Invoice configuration id")
    parser.add_argument("-t", "--test", action="store_true", help="Send to the test address only")
    parser.add_argument("-s", "--send", action="store_true", help="Send to customers (asks for confirmation)")
    parser.add_argument("--send-existing", action="store_true", help="Send a previously generated invoice")
    parser.add_argument("-l", "--list", action="store_true", help="List invoice configurations")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    args = parser.parse_args()

    try:
        asyncio.run(run(args))
    except Exception as e:
        print(f"\nError: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
