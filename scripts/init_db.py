#!/usr/bin/env python3
"""Create the HRMS tables and optionally seed the department catalogue.

Run from the repository root:

    python3 scripts/init_db.py [--database-url URL] [--drop] [--seed] [--dry-run] [--verbose]

Without --database-url the DATABASE_URL setting (env / .env) is used.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from hrms.core.config import Settings  # noqa: E402
from hrms.services.employee_service import EmployeeService  # noqa: E402

logger = logging.getLogger(__name__)

DEFAULT_DEPARTMENTS: list[dict[str, str]] = [
    {"name": "Human Resources", "code": "HR", "description": "People operations and payroll"},
    {"name": "Finance", "code": "FIN", "description": "Accounting and treasury"},
    {"name": "Engineering", "code": "ENG", "description": "Product development"},
    {"name": "Sales", "code": "SALES", "description": "Domestic and export sales"},
    {"name": "Operations", "code": "OPS", "description": "Facilities and logistics"},
]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create HRMS database tables and seed reference data",
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy async URL (default: DATABASE_URL setting)",
    )
    parser.add_argument(
        "--drop",
        action="store_true",
        help="Drop all HRMS tables before creating them",
    )
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Insert the default departments after creating tables",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log what would be done without touching the database",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    return parser.parse_args(argv)


async def init_db(args: argparse.Namespace) -> int:
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")

    settings = Settings()
    if args.database_url:
        settings = settings.model_copy(update={"DATABASE_URL": args.database_url})

    if not settings.DATABASE_URL:
        logger.error("No database URL configured. Set DATABASE_URL or pass --database-url.")
        return 1

    if args.dry_run:
        logger.info("[DRY RUN] Would %screate tables", "drop and " if args.drop else "")
        if args.seed:
            for department in DEFAULT_DEPARTMENTS:
                logger.info("[DRY RUN] Would seed department %s (%s)", department["name"], department["code"])
        return 0

    service = EmployeeService()
    await service.initialize(settings)
    try:
        logger.info("Creating tables%s...", " (dropping existing)" if args.drop else "")
        await service.create_schema(drop_first=args.drop)

        if args.seed:
            for department in DEFAULT_DEPARTMENTS:
                created = await service.create_department(**department)
                logger.info("Seeded department %s (id=%d)", created.code, created.id)
    finally:
        await service.close()

    logger.info("Database initialization complete")
    return 0


def main() -> None:
    args = parse_args()
    sys.exit(asyncio.run(init_db(args)))


if __name__ == "__main__":
    main()
