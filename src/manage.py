"""Marketstream database management CLI.

Creates and drops the marketplace schema, and seeds the treasure code.

Usage:
    python src/manage.py setup-db      # Create all tables
    python src/manage.py drop-db       # Drop all tables
    python src/manage.py seed          # Seed the default treasure code
"""

import argparse
import sys


def _domain():
    from marketplace.domain import marketplace

    print("Initializing marketplace domain...")
    marketplace.init()
    return marketplace


def setup_database():
    """Create database tables for the marketplace domain."""
    from marketplace.utils.db import setup_db

    domain = _domain()
    print("Creating marketplace database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    """Drop database tables for the marketplace domain."""
    from marketplace.utils.db import drop_db

    domain = _domain()
    print("Dropping marketplace database schema...")
    drop_db(domain)
    print("Done.")


def seed():
    from marketplace.promotion.treasure import seed_treasure_config

    domain = _domain()
    with domain.domain_context():
        config = seed_treasure_config()
    state = "active" if config.is_active else "inactive"
    print(f"Treasure code {config.code} is {state}.")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Marketstream database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("seed", help="Seed the default treasure code")

    args = parser.parse_args(argv)

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "seed":
        seed()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
