#!/usr/bin/env python3
"""
Create the finance dashboard database at the configured path.

Safe to re-run: existing tables and data are left alone.
"""
import sys

from finance_dashboard.config.settings import load_settings
from finance_dashboard.database.connection import DatabaseConfig, DatabaseManager


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    db_path = argv[0] if argv else load_settings().db_path
    config = DatabaseConfig(db_path)
    print(f"Database: {config.connection_string}")

    with DatabaseManager(config) as db:
        version = db.initialize()

    if version is None:
        print("✗ No schema version recorded")
        return 1

    number, description = version
    print(f"✓ Schema version {number}: {description}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
