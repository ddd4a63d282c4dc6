"""Tests for the database initialization script."""

from __future__ import annotations

import pytest

from hrms.core.config import Settings
from hrms.models.employee import EmployeeQuery
from hrms.services.employee_service import EmployeeService
from scripts.init_db import DEFAULT_DEPARTMENTS, init_db, parse_args


def test_parse_args_defaults():
    args = parse_args([])
    assert args.database_url is None
    assert args.drop is False
    assert args.seed is False
    assert args.dry_run is False
    assert args.verbose is False


def test_parse_args_flags():
    args = parse_args(["--database-url", "sqlite+aiosqlite:///x.db", "--drop", "--seed", "--dry-run", "--verbose"])
    assert args.database_url == "sqlite+aiosqlite:///x.db"
    assert args.drop is True
    assert args.seed is True
    assert args.dry_run is True
    assert args.verbose is True


def test_default_departments_have_unique_codes():
    codes = [d["code"] for d in DEFAULT_DEPARTMENTS]
    assert len(codes) == len(set(codes))


@pytest.mark.anyio
async def test_init_db_without_url_fails(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    assert await init_db(parse_args([])) == 1


@pytest.mark.anyio
async def test_init_db_dry_run_touches_nothing(tmp_path):
    db_file = tmp_path / "dry.db"
    args = parse_args(["--database-url", f"sqlite+aiosqlite:///{db_file}", "--seed", "--dry-run"])

    assert await init_db(args) == 0
    assert not db_file.exists()


@pytest.mark.anyio
async def test_init_db_creates_schema_and_seeds(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'init.db'}"

    assert await init_db(parse_args(["--database-url", url, "--seed"])) == 0

    service = EmployeeService()
    await service.initialize(Settings(DATABASE_URL=url))
    try:
        created = await service.create_employee(
            {"full_name_english": "Nguyen Van An", "full_name_vietnamese": "Nguyễn Văn An"}
        )
        page = await service.list_employees(EmployeeQuery())
        extra = await service.create_department("Legal", "LEGAL")
    finally:
        await service.close()

    assert page.total == 1
    assert page.data[0].employee_id == created.employee_id
    # Five seeded departments precede the new one.
    assert extra.id == len(DEFAULT_DEPARTMENTS) + 1


@pytest.mark.anyio
async def test_init_db_drop_recreates_empty_tables(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'drop.db'}"
    assert await init_db(parse_args(["--database-url", url, "--seed"])) == 0

    assert await init_db(parse_args(["--database-url", url, "--drop"])) == 0

    service = EmployeeService()
    await service.initialize(Settings(DATABASE_URL=url))
    try:
        department = await service.create_department("Engineering", "ENG")
    finally:
        await service.close()

    assert department.id == 1
