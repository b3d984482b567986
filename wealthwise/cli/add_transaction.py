#!/usr/bin/env python3
"""
Transaction entry CLI

Runs one natural-language transaction through the pipeline and saves it.
"""
import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from wealthwise.core.exceptions import WealthWiseError
from wealthwise.core.transaction_manager import TransactionManager
from wealthwise.storage.document_store import InMemoryDocumentStore
from wealthwise.transaction_service import TransactionService, load_budgets


# Load environment variables
load_dotenv()


def print_result(result):
    """Print a processed transaction"""
    print(f"\n🏷️  {result.description:<40} → {result.category} ({result.type})")
    print(f"       ${result.amount:>9.2f}")

    if result.recurring:
        print(f"\n🔁 Recurring expense ({result.recurring_reason})")

    if result.insights:
        print(f"\n💡 Insights:")
        for insight in result.insights:
            print(f"   • {insight}")
    else:
        print(f"\n💡 No insights available")

    if result.alerts:
        print(f"\n⚠️  Budget alerts:")
        for alert in result.alerts:
            print(f"   • {alert}")
    else:
        print(f"\n✅ Within budget")


def main():
    """Main entry function"""
    parser = argparse.ArgumentParser(description='Categorize and save a transaction')
    parser.add_argument('user_id', help='User ID owning the transaction')
    parser.add_argument('text', help='Transaction text, e.g. "spent 20 dollars on groceries"')
    parser.add_argument('--budgets', type=Path, help='Budgets JSON file (default: packaged table)')
    parser.add_argument('--memory', action='store_true', help='Use an in-memory store instead of PostgreSQL')
    parser.add_argument('--dry-run', action='store_true', help='Process but do not save')
    parser.add_argument('-v', '--verbose', action='store_true', help='Show debug logging')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    print("=" * 80)
    print("📥 TRANSACTION ENTRY")
    print("=" * 80)
    print(f"User: {args.user_id}")
    print(f"Text: {args.text}")
    print(f"Store: {'memory' if args.memory else 'postgres'}")
    print(f"Dry Run: {args.dry_run}")
    print("=" * 80)

    if args.memory:
        store = InMemoryDocumentStore()
    else:
        print("\n🔌 Connecting to database...")
        try:
            from wealthwise.storage.postgres_store import PostgresDocumentStore
            store = PostgresDocumentStore()
            print("   ✅ Connected")
        except Exception as e:
            print(f"   ❌ Connection failed: {e}")
            print("\nRun with --memory to skip the database")
            sys.exit(1)

    try:
        manager = TransactionManager()
        service = TransactionService(store=store, manager=manager, budgets=load_budgets(args.budgets))

        if args.dry_run:
            print(f"\n🧠 Processing...")
            history = service.get_transactions(args.user_id)
            result = manager.process(args.text, history, service.budgets)
            print_result(result)
            print(f"\n🔍 DRY RUN - Not saving")
        else:
            print(f"\n🧠 Processing and saving...")
            message = service.process_and_save(args.user_id, args.text)
            print(f"   ✅ {message}")

            alerts = service.get_alerts(args.user_id, unread_only=True)
            if alerts:
                print(f"\n⚠️  {len(alerts)} unread alerts:")
                for alert in alerts[:5]:
                    print(f"   • {alert['message']}")

        print("\n" + "=" * 80)
        print("✅ Done!")
        print("=" * 80)

    except WealthWiseError as e:
        print(f"\n❌ Failed: {e}")
        sys.exit(1)
    finally:
        if hasattr(store, 'close'):
            store.close()


if __name__ == "__main__":
    main()
