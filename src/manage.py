"""Ordering portal management CLI.

Usage:
    python src/manage.py setup-db                       # Create all tables
    python src/manage.py drop-db                        # Drop all tables
    python src/manage.py reconcile-remittance [--dry-run]
"""

import argparse
import sys


def setup_database():
    from ordering.domain import ordering
    from ordering.utils.db import setup_db

    print("Initializing ordering domain...")
    ordering.init()
    print("Creating ordering database schema...")
    setup_db(ordering)
    print("Done.")


def drop_database():
    from ordering.domain import ordering
    from ordering.utils.db import drop_db

    print("Initializing ordering domain...")
    ordering.init()
    print("Dropping ordering database schema...")
    drop_db(ordering)
    print("Done.")


def reconcile(dry_run=False):
    from ordering.domain import ordering
    from ordering.payment.reconciliation import reconcile_remittance
    from ordering.utils.logging import configure_logging

    configure_logging()
    ordering.init()
    with ordering.domain_context():
        report = reconcile_remittance(dry_run=dry_run)

    verb = "Would delete" if dry_run else "Deleted"
    print(f"{verb} {len(report.orphaned_blobs)} orphaned blob(s).")
    for path in report.orphaned_blobs:
        print(f"  {path}")
    verb = "Would drop" if dry_run else "Dropped"
    print(f"{verb} {len(report.dangling_references)} dangling reference(s).")
    for order_id, file_id in report.dangling_references:
        print(f"  order {order_id}: file {file_id}")


def main():
    parser = argparse.ArgumentParser(description="Ordering portal management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    reconcile_parser = subparsers.add_parser(
        "reconcile-remittance",
        help="Remove orphaned remittance blobs and dangling order references",
    )
    reconcile_parser.add_argument("--dry-run", action="store_true", help="Report without changing anything")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "reconcile-remittance":
        reconcile(dry_run=args.dry_run)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
