#!/usr/bin/env python3
"""
Generate an invoice by customer name (legacy mode).

Looks for local git clones under the projects directory whose name contains
the customer name, builds the invoice, prints it, and optionally emails it.

Usage:
    uv run python src/scripts/create_legacy_invoice.py <customer> [--weeks N] [--dry-run]

Example:
    uv run python src/scripts/create_legacy_invoice.py acme --weeks 2 --test
"""

import argparse
import asyncio
import sys
from datetime import date
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DEFAULT_HOURS_PER_WEEK, DEFAULT_WEEKS, load_settings
from services.email import send_invoice_email
from services.invoices import generate_invoice, open_pipeline

RULE = "-" * 60


async def run(args: argparse.Namespace) -> None:
    settings = load_settings()
    print(f"Generating invoice for {args.customer}...")

    async with open_pipeline(settings, verbose=args.verbose) as pipeline:
        invoice = await generate_invoice(
            args.customer,
            pipeline,
            weeks=args.weeks,
            start_date=args.start_date,
            end_date=args.end_date,
            hours_per_week=args.hours_per_week,
            verbose=args.verbose,
        )

    if invoice is None:
        raise RuntimeError("Failed to generate invoice")

    print("\nInvoice generated successfully!\n")
    print(RULE)
    print(invoice.formatted_text)
    print(RULE)

    if args.dry_run:
        print("\nDry run mode - email not sent")
        return

    print("\nSending invoice email...")
    result = await send_invoice_email(
        settings,
        customer=invoice.customer,
        start_date=invoice.start_date_label,
        end_date=invoice.end_date_label,
        text=invoice.formatted_text,
        total_hours=invoice.total_hours,
        recipients=args.to,
        test_mode=args.test,
        verbose=args.verbose,
    )
    result.raise_for_status()

    print("Invoice email sent successfully!")
    if args.test:
        print(f"Test mode: Only sent to {settings.test_email}")


def main():
    parser = argparse.ArgumentParser(description="Generate an invoice using the customer name lookup")
    parser.add_argument("customer", help="Customer name, matched against local project directory names")
    parser.add_argument("-w", "--weeks", type=int, default=DEFAULT_WEEKS, help="Number of weeks to include")
    parser.add_argument("-s", "--start-date", type=date.fromisoformat, help="Start date (YYYY-MM-DD)")
    parser.add_argument("-e", "--end-date", type=date.fromisoformat, help="End date (YYYY-MM-DD)")
    parser.add_argument(
        "--hours-per-week",
        type=float,
        default=DEFAULT_HOURS_PER_WEEK,
        help="Hours billed per week",
    )
    parser.add_argument("--to", action="append", default=[], help="Recipient address (repeatable)")
    parser.add_argument("-t", "--test", action="store_true", help="Send only to the test address")
    parser.add_argument("-d", "--dry-run", action="store_true", help="Generate without sending email")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    args = parser.parse_args()

    try:
        asyncio.run(run(args))
    except Exception as e:
        print(f"\nError: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
