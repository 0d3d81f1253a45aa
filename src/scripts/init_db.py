#!/usr/bin/env python3
"""Create the invoice SQLite3 database with saved-invoice and API logging tables."""

import argparse
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import load_settings
from core.database import get_connection


def create_database(db_path: Path) -> None:
    """Create the database and tables if they don't exist."""
    conn = get_connection(db_path)
    conn.close()
    print(f"Database created successfully at: {db_path}")


def main():
    parser = argparse.ArgumentParser(description="Create the invoice database")
    parser.add_argument(
        "--db",
        type=Path,
        help="Database path (defaults to INVOICE_DB_PATH or data/db/invoices.db)",
    )
    args = parser.parse_args()

    try:
        create_database(args.db or load_settings().db_path)
    except Exception as e:
        print(f"\nError: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
