"""
Delete every event and guest, keeping the tables.

Asks for two confirmations ("CONFIRMAR", then "SIM") unless --yes is given.
"""

import argparse
import sys
from typing import Callable, Dict

from smart_invite.core.logging import logger
from smart_invite.db.session import DatabaseAdapter, create_adapter


def _count(db: DatabaseAdapter, table: str) -> int:
    row = db.get(f"SELECT COUNT(*) AS count FROM {table}")
    return int(row["count"]) if row else 0


def clean_database(db: DatabaseAdapter) -> Dict[str, int]:
    logger.info("Current state: %d events, %d guests", _count(db, "events"), _count(db, "guests"))

    # guests first because of the foreign key
    guests = db.run("DELETE FROM guests").changes
    events = db.run("DELETE FROM events").changes

    if db.backend == "mysql":
        db.run("ALTER TABLE guests AUTO_INCREMENT = 1")
        db.run("ALTER TABLE events AUTO_INCREMENT = 1")
    else:
        exists = db.get("SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'sqlite_sequence'")
        if exists:
            db.run("DELETE FROM sqlite_sequence WHERE name IN ('events', 'guests')")

    logger.info("Removed %d guests and %d events", guests, events)
    return {"guests": guests, "events": events}


def confirmed_by_user(ask: Callable[[str], str] = input) -> bool:
    if ask('Type "CONFIRMAR" to delete ALL events and guests: ').strip() != "CONFIRMAR":
        return False
    return ask('Last chance. Type "SIM" to proceed: ').strip() == "SIM"


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Delete all events and guests (tables are kept).")
    parser.add_argument("--yes", action="store_true", help="skip the interactive confirmations")
    args = parser.parse_args(argv)

    if not args.yes and not confirmed_by_user():
        logger.info("Cancelled.")
        return 1

    db = create_adapter()
    try:
        clean_database(db)
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
