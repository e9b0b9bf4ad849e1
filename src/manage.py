"""IVMA Store management CLI.

Creates or drops the database schema, and runs the cart expiry sweep.

Usage:
    python src/manage.py setup-db        # Create all tables
    python src/manage.py drop-db         # Drop all tables
    python src/manage.py expire-carts    # Flag carts past their expiry date
"""

import argparse
import sys


def _domain():
    from storefront.domain import storefront

    storefront.init()
    return storefront


def setup_database():
    from storefront.utils.db import setup_db

    domain = _domain()
    print("Creating storefront database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    from storefront.utils.db import drop_db

    domain = _domain()
    print("Dropping storefront database schema...")
    drop_db(domain)
    print("Done.")


def expire_carts():
    from storefront.cart.management import ExpireStaleCarts

    domain = _domain()
    with domain.domain_context():
        expired = domain.process(ExpireStaleCarts(), asynchronous=False)
    print(f"Expired {expired} cart(s).")


def main():
    parser = argparse.ArgumentParser(description="IVMA Store management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("expire-carts", help="Mark active carts past their expiry date as expired")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "expire-carts":
        expire_carts()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
