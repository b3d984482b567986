#!/usr/bin/env python3
"""
Database initialization script

Creates the WealthWise document table.
"""
import sys
from pathlib import Path

import psycopg2

from wealthwise.utils.db_connection import get_db_connection


SCHEMA_FILE = Path(__file__).parent.parent / "db" / "db_schema.sql"


def run_sql_file(conn, sql_file: Path, description: str):
    """Execute a SQL file"""
    print(f"\n📄 {description}")
    print(f"   File: {sql_file}")

    with open(sql_file, 'r') as f:
        sql = f.read()

    cursor = conn.cursor()
    try:
        cursor.execute(sql)
        conn.commit()
        print(f"   ✅ Success")
    except psycopg2.Error as e:
        conn.rollback()
        print(f"   ❌ Error: {e}")
        raise
    finally:
        cursor.close()


def print_summary(conn):
    """Print document counts per collection"""
    cursor = conn.cursor()

    print("\n" + "=" * 80)
    print("📊 DATABASE SUMMARY")
    print("=" * 80)

    cursor.execute("""
        SELECT collection, COUNT(*), COUNT(DISTINCT user_id)
        FROM user_documents
        GROUP BY collection
        ORDER BY collection
    """)
    rows = cursor.fetchall()
    if not rows:
        print("No documents yet")
    for collection, count, users in rows:
        print(f"  • {collection}: {count} documents ({users} users)")

    print("=" * 80)
    cursor.close()


def main():
    """Main initialization function"""
    print("=" * 80)
    print("🚀 WEALTHWISE DATABASE INITIALIZATION")
    print("=" * 80)

    if not SCHEMA_FILE.exists():
        print(f"\n❌ Missing schema file: {SCHEMA_FILE}")
        sys.exit(1)

    print("\n🔌 Connecting to database...")
    try:
        conn = get_db_connection()
        print("   ✅ Connected")
    except psycopg2.Error as e:
        print(f"   ❌ Connection failed: {e}")
        print("\nCheck the DB_* settings in your .env file")
        sys.exit(1)

    try:
        run_sql_file(conn, SCHEMA_FILE, "Creating database schema")
        print_summary(conn)

        print("\n✅ Database initialization complete!")
        print("\nNext steps:")
        print('  1. Add a transaction: wealthwise-add USER_ID "spent 20 dollars on groceries"')
        print("  2. Or use: python -m wealthwise.cli.add_transaction USER_ID \"...\"")

    except psycopg2.Error as e:
        print(f"\n❌ Initialization failed: {e}")
        sys.exit(1)
    finally:
        conn.close()


if __name__ == "__main__":
    main()
