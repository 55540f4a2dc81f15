#!/usr/bin/env python3
"""
Database Check Script

Verifies both stores are reachable, creates any missing tables and prints
row counts for the portal tables.
Usage: python scripts/check_db.py
"""
import sys
sys.path.insert(0, '.')

from placement_portal.core.config import get_settings
from placement_portal.db.mongodb import test_mongo_connection
from placement_portal.db.postgres import execute_raw_sql, init_schema, test_postgres_connection
from placement_portal.db.tables import metadata


def main():
    settings = get_settings()
    print("=" * 50)
    print("PLACEMENT PORTAL - DATABASE CHECK")
    print("=" * 50)

    print("\n[1] Relational store...")
    print(f"    Host: {settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}")
    if not test_postgres_connection():
        print("    ❌ FAILED")
        sys.exit(1)
    print("    ✅ CONNECTED")

    init_schema()
    print("\n[2] Tables")
    for table in metadata.sorted_tables:
        count = execute_raw_sql(f"SELECT COUNT(*) AS count FROM {table.name}")[0]["count"]
        print(f"    {table.name:<22} {count:>6} rows")

    print("\n[3] MongoDB...")
    print(f"    URI: {settings.mongodb_uri}  Database: {settings.mongodb_db}")
    if test_mongo_connection():
        print("    ✅ CONNECTED")
    else:
        print("    ⚠️  UNREACHABLE (notifications and audit events will be skipped)")

    print("\n" + "=" * 50)


if __name__ == "__main__":
    main()
