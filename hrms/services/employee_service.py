"""Relational employee repository: the read/write contract of the employee aggregate."""

from __future__ import annotations

import logging
import math
import secrets
import string
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import ValidationError
from sqlalchemy import func, or_, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import aliased

from hrms.core.config import Settings
from hrms.core.db import build_engine, build_session_factory, create_schema
from hrms.core.errors import NotFoundError, StorageError, ValidationFailedError
from hrms.models import tables
from hrms.models.employee import (
    EMPLOYEE_SORT_COLUMNS,
    EXTENSION_SCHEMAS,
    PROTECTED_EMPLOYEE_FIELDS,
    ContactSummary,
    DepartmentRef,
    EmployeeCreate,
    EmployeeDetail,
    EmployeeListItem,
    EmployeePage,
    EmployeeQuery,
    EmployeeRecord,
    EmployeeUpdate,
    EmploymentInfoDetail,
    EmploymentStatus,
    EmploymentSummary,
    ExtensionKind,
    ManagerRef,
)

logger = logging.getLogger(__name__)

_ID_PREFIX = "EMP"
_ID_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits

_EXTENSION_TABLES: dict[ExtensionKind, type] = {
    ExtensionKind.PERSONAL: tables.PersonalInfo,
    ExtensionKind.CONTACT: tables.ContactInfo,
    ExtensionKind.EMPLOYMENT: tables.EmploymentInfo,
    ExtensionKind.FINANCIAL: tables.FinancialInfo,
}

_EXTENSION_SYSTEM_FIELDS = frozenset({"id", "employee_id", "created_at", "updated_at"})


def generate_employee_id() -> str:
    """EMP + last 6 digits of the millisecond clock + 3 random [A-Z0-9].

    Uniqueness is probabilistic; the unique constraint on employees.employee_id
    rejects collisions.
    """
    timestamp = str(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_ID_SUFFIX_ALPHABET) for _ in range(3))
    return f"{_ID_PREFIX}{timestamp[-6:]}{suffix}"


def _next_timestamp(previous: datetime | None) -> datetime:
    now = tables.utcnow()
    if previous is None:
        return now
    if previous.tzinfo is None:
        previous = previous.replace(tzinfo=timezone.utc)
    if now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _db_message(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


def _validate(model: type, fields: dict[str, Any]):
    try:
        return model.model_validate(fields)
    except ValidationError as e:
        raise ValidationFailedError.from_pydantic(e) from e


class EmployeeService:
    def __init__(self) -> None:
        self.engine: AsyncEngine | None = None
        self.session_factory: async_sessionmaker[AsyncSession] | None = None
        self.initialized: bool = False

    async def initialize(self, settings: Settings) -> None:
        if self.initialized:
            return

        if not settings.DATABASE_URL:
            logger.warning("DATABASE_URL missing, EmployeeService not initialized")
            return

        self.engine = build_engine(settings)
        self.session_factory = build_session_factory(self.engine)
        self.initialized = True
        logger.info("EmployeeService initialized (dialect=%s)", self.engine.dialect.name)

    async def close(self) -> None:
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None
            self.initialized = False

    async def create_schema(self, drop_first: bool = False) -> None:
        if not self.engine:
            raise StorageError("Database is not configured")
        await create_schema(self.engine, drop_first=drop_first)

    async def check_connection(self) -> bool:
        if not self.engine:
            return False
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.exception("Database connection check failed")
            return False

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        if not self.session_factory:
            raise StorageError("Database is not configured")
        try:
            async with self.session_factory() as session:
                yield session
        except SQLAlchemyError as e:
            logger.exception("Database operation failed")
            raise StorageError(_db_message(e)) from e

    # Employees

    async def get_employee(self, employee_id: str) -> EmployeeDetail:
        async with self._session() as session:
            employee = await self._find_employee(session, employee_id)
            if employee is None:
                raise NotFoundError("Employee not found")

            personal = await self._first_row(session, tables.PersonalInfo, employee_id)
            contact = await self._first_row(session, tables.ContactInfo, employee_id)
            financial = await self._first_row(session, tables.FinancialInfo, employee_id)
            employment = await self._employment_detail(session, employee_id)

        personal_model = EXTENSION_SCHEMAS[ExtensionKind.PERSONAL][1]
        contact_model = EXTENSION_SCHEMAS[ExtensionKind.CONTACT][1]
        financial_model = EXTENSION_SCHEMAS[ExtensionKind.FINANCIAL][1]

        return EmployeeDetail(
            **EmployeeRecord.model_validate(employee).model_dump(),
            personal_info=personal_model.model_validate(personal) if personal else None,
            contact_info=contact_model.model_validate(contact) if contact else None,
            employment_info=employment,
            financial_info=financial_model.model_validate(financial) if financial else None,
        )

    async def list_employees(self, query: EmployeeQuery) -> EmployeePage:
        if query.sort_by not in EMPLOYEE_SORT_COLUMNS:
            raise ValidationFailedError(
                "Invalid input data",
                details=[
                    {
                        "field": "sortBy",
                        "message": f"Cannot sort by '{query.sort_by}'",
                        "type": "value_error",
                    }
                ],
            )

        conditions = self._list_conditions(query)
        ascending = query.sort_order == "asc"
        sort_column = getattr(tables.Employee, query.sort_by)
        order_by = [
            sort_column.asc() if ascending else sort_column.desc(),
            tables.Employee.number.asc() if ascending else tables.Employee.number.desc(),
        ]

        async with self._session() as session:
            total = await session.scalar(
                select(func.count()).select_from(tables.Employee).where(*conditions)
            )
            result = await session.execute(
                select(tables.Employee)
                .where(*conditions)
                .order_by(*order_by)
                .offset(query.page * query.page_size)
                .limit(query.page_size)
            )
            employees = list(result.scalars().all())
            ids = [e.employee_id for e in employees]
            employment = await self._employment_summaries(session, ids)
            contacts = await self._contact_summaries(session, ids)

        total = total or 0
        items = [
            EmployeeListItem(
                **EmployeeRecord.model_validate(e).model_dump(),
                employment_info=employment.get(e.employee_id),
                contact_info=contacts.get(e.employee_id),
            )
            for e in employees
        ]
        return EmployeePage(
            data=items,
            page=query.page,
            page_size=query.page_size,
            total=total,
            total_pages=math.ceil(total / query.page_size) if total else 0,
        )

    async def create_employee(self, fields: dict[str, Any]) -> EmployeeRecord:
        payload = _validate(
            EmployeeCreate,
            {k: v for k, v in fields.items() if k not in ("number", "created_at", "updated_at")},
        )
        values = payload.model_dump()
        if not values.get("employee_id"):
            values["employee_id"] = generate_employee_id()

        now = tables.utcnow()
        employee = tables.Employee(**values, created_at=now, updated_at=now)

        async with self._session() as session:
            session.add(employee)
            await session.commit()
            await session.refresh(employee)

        logger.info("Created employee %s (number=%s)", employee.employee_id, employee.number)
        return EmployeeRecord.model_validate(employee)

    async def update_employee(self, employee_id: str, fields: dict[str, Any]) -> EmployeeRecord:
        payload = _validate(
            EmployeeUpdate,
            {k: v for k, v in fields.items() if k not in PROTECTED_EMPLOYEE_FIELDS},
        )
        values = payload.model_dump(exclude_unset=True)

        async with self._session() as session:
            employee = await self._find_employee(session, employee_id)
            if employee is None:
                raise NotFoundError("Employee not found")

            for key, value in values.items():
                setattr(employee, key, value)
            employee.updated_at = _next_timestamp(employee.updated_at)

            await session.commit()
            await session.refresh(employee)

        return EmployeeRecord.model_validate(employee)

    async def terminate_employee(self, employee_id: str) -> EmployeeRecord:
        """Soft delete: the row and its extension records stay in place."""
        async with self._session() as session:
            employee = await self._find_employee(session, employee_id)
            if employee is None:
                raise NotFoundError("Employee not found")

            employee.employment_status = EmploymentStatus.TERMINATED.value
            employee.updated_at = _next_timestamp(employee.updated_at)

            await session.commit()
            await session.refresh(employee)

        logger.info("Terminated employee %s", employee_id)
        return EmployeeRecord.model_validate(employee)

    # Extension records

    async def get_extension(self, kind: ExtensionKind | str, employee_id: str):
        kind = ExtensionKind(kind)
        record_model = EXTENSION_SCHEMAS[kind][1]

        async with self._session() as session:
            row = await self._first_row(session, _EXTENSION_TABLES[kind], employee_id)

        return record_model.model_validate(row) if row is not None else None

    async def put_extension(self, kind: ExtensionKind | str, employee_id: str, fields: dict[str, Any]):
        """Partial upsert keyed by employee_id: only supplied fields are written."""
        kind = ExtensionKind(kind)
        update_model, record_model = EXTENSION_SCHEMAS[kind]
        table = _EXTENSION_TABLES[kind]

        payload = _validate(
            update_model,
            {k: v for k, v in fields.items() if k not in _EXTENSION_SYSTEM_FIELDS},
        )
        values = payload.model_dump(exclude_unset=True)

        async with self._session() as session:
            if await self._find_employee(session, employee_id) is None:
                raise NotFoundError("Employee not found")

            row = await self._first_row(session, table, employee_id)
            if row is None:
                now = tables.utcnow()
                row = table(employee_id=employee_id, created_at=now, updated_at=now, **values)
                session.add(row)
            else:
                for key, value in values.items():
                    setattr(row, key, value)
                row.updated_at = _next_timestamp(row.updated_at)

            await session.commit()
            await session.refresh(row)

        logger.info("Upserted %s info for employee %s", kind.value, employee_id)
        return record_model.model_validate(row)

    # Departments

    async def create_department(self, name: str, code: str, description: str | None = None) -> DepartmentRef:
        now = tables.utcnow()
        department = tables.Department(
            name=name,
            code=code,
            description=description,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        async with self._session() as session:
            session.add(department)
            await session.commit()
            await session.refresh(department)
        return DepartmentRef.model_validate(department)

    # Helpers

    async def _find_employee(self, session: AsyncSession, employee_id: str):
        result = await session.execute(
            select(tables.Employee).where(tables.Employee.employee_id == employee_id)
        )
        return result.scalar_one_or_none()

    async def _first_row(self, session: AsyncSession, table: type, employee_id: str):
        result = await session.execute(
            select(table).where(table.employee_id == employee_id).order_by(table.id).limit(1)
        )
        return result.scalars().first()

    async def _employment_detail(self, session: AsyncSession, employee_id: str) -> EmploymentInfoDetail | None:
        manager = aliased(tables.Employee)
        stmt = (
            select(tables.EmploymentInfo, tables.Department, manager)
            .outerjoin(tables.Department, tables.Department.id == tables.EmploymentInfo.department_id)
            .outerjoin(manager, manager.employee_id == tables.EmploymentInfo.manager_id)
            .where(tables.EmploymentInfo.employee_id == employee_id)
            .order_by(tables.EmploymentInfo.id)
            .limit(1)
        )
        row = (await session.execute(stmt)).first()
        if row is None:
            return None

        info, department, manager_row = row
        base = EXTENSION_SCHEMAS[ExtensionKind.EMPLOYMENT][1].model_validate(info)
        return EmploymentInfoDetail(
            **base.model_dump(),
            department=DepartmentRef.model_validate(department) if department else None,
            manager=ManagerRef.model_validate(manager_row) if manager_row else None,
        )

    async def _employment_summaries(
        self, session: AsyncSession, employee_ids: list[str]
    ) -> dict[str, EmploymentSummary]:
        if not employee_ids:
            return {}

        result = await session.execute(
            select(tables.EmploymentInfo, tables.Department)
            .outerjoin(tables.Department, tables.Department.id == tables.EmploymentInfo.department_id)
            .where(tables.EmploymentInfo.employee_id.in_(employee_ids))
            .order_by(tables.EmploymentInfo.id)
        )

        summaries: dict[str, EmploymentSummary] = {}
        for info, department in result.all():
            if info.employee_id in summaries:
                continue
            summaries[info.employee_id] = EmploymentSummary(
                id=info.id,
                position_english=info.position_english,
                position_vietnamese=info.position_vietnamese,
                onboarding_date=info.onboarding_date,
                department=DepartmentRef.model_validate(department) if department else None,
            )
        return summaries

    async def _contact_summaries(self, session: AsyncSession, employee_ids: list[str]) -> dict[str, ContactSummary]:
        if not employee_ids:
            return {}

        result = await session.execute(
            select(tables.ContactInfo)
            .where(tables.ContactInfo.employee_id.in_(employee_ids))
            .order_by(tables.ContactInfo.id)
        )

        summaries: dict[str, ContactSummary] = {}
        for contact in result.scalars().all():
            summaries.setdefault(contact.employee_id, ContactSummary.model_validate(contact))
        return summaries

    def _list_conditions(self, query: EmployeeQuery) -> list[Any]:
        conditions: list[Any] = []

        if query.search:
            pattern = f"%{_escape_like(query.search)}%"
            conditions.append(
                or_(
                    tables.Employee.full_name_english.ilike(pattern, escape="\\"),
                    tables.Employee.full_name_vietnamese.ilike(pattern, escape="\\"),
                    tables.Employee.employee_id.ilike(pattern, escape="\\"),
                )
            )

        if query.employment_status:
            conditions.append(tables.Employee.employment_status == query.employment_status)

        if query.department_id is not None:
            conditions.append(
                tables.Employee.employee_id.in_(
                    select(tables.EmploymentInfo.employee_id).where(
                        tables.EmploymentInfo.department_id == query.department_id
                    )
                )
            )

        return conditions


employee_service = EmployeeService()
