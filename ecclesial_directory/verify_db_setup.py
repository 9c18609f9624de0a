#!/usr/bin/env python3
"""
Verify that the directory backends are reachable.

This script:
1. Checks that the directory tables exist in the database
2. Prints the row counts of entities, dioceses and clergy
3. Pings the REST API health endpoint

Each check is skipped when its URL is not given (on the command line or via
DATABASE_URL / DIRECTORY_API_URL).
"""

import argparse
import sys
from typing import Optional, Tuple

from sqlalchemy import create_engine, inspect

from ecclesial_directory.config import DirectoryConfig
from ecclesial_directory.errors import DirectoryError
from ecclesial_directory.rest.client import DirectoryApiClient
from ecclesial_directory.setup_database import DIRECTORY_TABLES
from ecclesial_directory.storage.backends.database import SQLModelDirectoryStorage


def check_database(database_url: str) -> Tuple[bool, str]:
    """Check the directory tables and count their rows."""
    engine = create_engine(database_url)
    try:
        existing = set(inspect(engine).get_table_names())
        missing = [table for table in DIRECTORY_TABLES if table not in existing]
        if missing:
            return False, f"Missing tables: {', '.join(missing)}"

        counts = SQLModelDirectoryStorage(engine).count_all()
        summary = ", ".join(f"{name}: {total}" for name, total in counts.items())
        return True, f"Database connected successfully\n  Tables: OK\n  Rows: {summary}"
    except DirectoryError as e:
        return False, f"Error: {e}"
    except Exception as e:
        return False, f"Connection failed: {e}"
    finally:
        engine.dispose()


def check_api(api_url: str) -> Tuple[bool, str]:
    """Ping the REST API health endpoint."""
    with DirectoryApiClient(api_url) as api:
        try:
            health = api.health()
        except DirectoryError as e:
            return False, f"API check failed: {e}"
    return True, f"REST API reachable\n  Status: {health.status or 'ok'}"


def main(argv: Optional[list[str]] = None) -> int:
    config = DirectoryConfig.from_env()
    parser = argparse.ArgumentParser(description="Verify the ecclesial directory backends")
    parser.add_argument("--database-url", default=config.database_url, help="Database URL (defaults to DATABASE_URL)")
    parser.add_argument("--api-url", default=config.api_url, help="REST API base URL (defaults to DIRECTORY_API_URL)")
    args = parser.parse_args(argv)

    results = []
    if args.database_url:
        print("Checking database...")
        ok, message = check_database(args.database_url)
        print(f"{'✓' if ok else '✗'} {message}")
        results.append(ok)
    else:
        print("Skipping database check (no database URL)")

    if args.api_url:
        print("Checking REST API...")
        ok, message = check_api(args.api_url)
        print(f"{'✓' if ok else '✗'} {message}")
        results.append(ok)
    else:
        print("Skipping REST API check (no API URL)")

    if not results:
        print("Nothing to verify")
        return 1
    if all(results):
        print("\n✅ All checks passed!")
        return 0
    print("\n❌ Some checks failed")
    return 1


if __name__ == "__main__":
    sys.exit(main())
