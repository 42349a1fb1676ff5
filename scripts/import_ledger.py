"""Ledger import script.

Reads an income and expense workbook (the format produced by the export
endpoint) and writes its cells into the ledger of one car and year. Every
changed cell gets a log row attributed to the given user.

Usage:
    cd fleet-portal
    python scripts/import_ledger.py CAR_ID YEAR path/to/ledger.xlsx [--user EMAIL]
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

# Add backend to path so we can import fleet_portal modules
SCRIPT_DIR = Path(__file__).resolve().parent
PROJECT_DIR = SCRIPT_DIR.parent
BACKEND_DIR = PROJECT_DIR / "backend"
sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import select

from fleet_portal.config import settings
from fleet_portal.database import async_session_factory, init_db
from fleet_portal.excel.ledger_reader import read_ledger_workbook
from fleet_portal.models.user import User
from fleet_portal.services import ledger_service
from fleet_portal.utils.log_setup import configure_logging


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import a ledger workbook for one car/year.")
    parser.add_argument("car_id", type=int)
    parser.add_argument("year", type=int)
    parser.add_argument("workbook", type=Path)
    parser.add_argument(
        "--user",
        default=settings.DEFAULT_ADMIN_EMAIL,
        help="Email of the user the changes are logged under",
    )
    return parser.parse_args(argv)


async def import_ledger(car_id: int, year: int, workbook: Path, user_email: str) -> int:
    """Import ``workbook`` and return the number of rejected groups."""
    parsed = read_ledger_workbook(workbook)
    print(f"  Read {len(parsed['cells'])} category-month group(s), "
          f"{parsed['skipped']} dynamic row(s) skipped")
    for error in parsed["errors"]:
        print(f"  WARNING: {error}")

    async with async_session_factory() as session:
        result = await session.execute(select(User).where(User.email == user_email.lower()))
        actor = result.scalar_one_or_none()
        if actor is None:
            print(f"  WARNING: user {user_email} not found, changes are logged without a user")

        rejected = 0
        changed = 0
        try:
            for (category, month), values in sorted(parsed["cells"].items()):
                try:
                    changed += await ledger_service.write_category(
                        session, car_id, year, month, category, values,
                        remarks="Imported from workbook", actor=actor,
                    )
                except ValueError as e:
                    rejected += 1
                    print(f"  REJECTED {category} month {month}: {e}")
            await session.commit()
        except Exception as e:
            await session.rollback()
            print(f"\nERROR: Import failed: {e}")
            raise

    print(f"  Changed {changed} cell(s)")
    return rejected


async def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    configure_logging(settings.LOG_LEVEL)

    if not args.workbook.exists():
        print(f"ERROR: Workbook not found: {args.workbook}")
        sys.exit(1)

    print("=" * 60)
    print(f"Importing {args.workbook.name} into car {args.car_id}, {args.year}")
    print("=" * 60)

    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    await init_db()

    rejected = await import_ledger(args.car_id, args.year, args.workbook, args.user)

    print("=" * 60)
    print("Import completed" + (f" with {rejected} rejected group(s)" if rejected else " successfully!"))
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
