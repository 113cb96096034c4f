"""Create the schema and optionally seed a demo roster.

Usage:
    python scripts/init_db.py [--database-url URL] [--seed]

Creates every table that does not exist yet. With ``--seed`` it also adds a
few workers so the punch and invoice flows can be tried locally.
"""

from __future__ import annotations

import argparse
import asyncio
from decimal import Decimal

from sqlalchemy import select

from timesheet_engine.config import get_settings
from timesheet_engine.database import create_schema, get_engine, make_session_factory
from timesheet_engine.models import Employee


DEMO_ROSTER = [
    {"name": "Alice", "surname": "Smith", "hourly_rate": Decimal("25.00")},
    {"name": "Bob", "surname": "Jones", "hourly_rate": Decimal("30.00")},
    {"name": "Admin", "surname": "", "hourly_rate": None, "role": "admin"},
]


async def init_db(database_url: str, seed: bool) -> None:
    """Create tables and, when asked, insert the demo roster."""
    print(f"Target database: {database_url.split('@')[1] if '@' in database_url else database_url}")

    engine = get_engine(database_url)
    try:
        await create_schema(engine)
        print("Schema created")

        if not seed:
            return

        factory = make_session_factory(engine)
        async with factory() as session, session.begin():
            existing = set(
                (await session.execute(select(Employee.name, Employee.surname))).all()
            )
            added = 0
            for row in DEMO_ROSTER:
                if (row["name"], row["surname"]) in existing:
                    continue
                session.add(Employee(**row))
                added += 1

        print(f"Seeded {added} employee(s)")
    finally:
        await engine.dispose()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Create the timesheet schema")
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Database URL (default: from settings)",
    )
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Insert a demo roster",
    )

    args = parser.parse_args()

    asyncio.run(init_db(args.database_url or get_settings().database_url, args.seed))


if __name__ == "__main__":
    main()
