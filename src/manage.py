"""Relief database management CLI.

Provides commands to create and drop the relief database schema.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys


def setup_databases():
    """Create the relief database schema."""
    from relief.domain import relief
    from relief.utils.db import setup_db

    print("Initializing relief domain...")
    relief.init()
    print("Creating relief database schema...")
    setup_db(relief)
    print("Done.")


def drop_databases():
    """Drop the relief database schema."""
    from relief.domain import relief
    from relief.utils.db import drop_db

    print("Initializing relief domain...")
    relief.init()
    print("Dropping relief database schema...")
    drop_db(relief)
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Relief database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases()
    elif args.command == "drop-db":
        drop_databases()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
