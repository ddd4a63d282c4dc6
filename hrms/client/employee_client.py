"""Async client for the employee API with cached reads and invalidating writes."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp
from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from hrms.client.cache import (
    DEFAULT_STALE_SECONDS,
    DETAIL_STALE_SECONDS,
    LIST_STALE_SECONDS,
    STATS_STALE_SECONDS,
    EmployeeKeys,
    QueryCache,
)
from hrms.client.notifier import LoggingNotifier, Notifier
from hrms.models.employee import (
    EXTENSION_SCHEMAS,
    EmployeeDetail,
    EmployeeListItem,
    EmployeeQuery,
    EmployeeRecord,
    EmploymentStatus,
    ExtensionKind,
)

logger = logging.getLogger(__name__)

_EXTENSION_LABELS = {
    ExtensionKind.PERSONAL: "personal information",
    ExtensionKind.CONTACT: "contact information",
    ExtensionKind.EMPLOYMENT: "employment information",
    ExtensionKind.FINANCIAL: "financial information",
}

# Extension kinds projected into list rows.
_LISTED_EXTENSIONS = frozenset({ExtensionKind.CONTACT, ExtensionKind.EMPLOYMENT})


class EmployeeClientError(Exception):
    def __init__(self, message: str, code: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status


class PaginatedEmployees(BaseModel):
    data: list[EmployeeListItem]
    count: int
    page: int
    page_size: int
    total_pages: int


class EmployeeStats(BaseModel):
    total: int
    active: int
    terminated: int
    onboarding: int
    pre_onboarding: int


def _payload(value: BaseModel | dict[str, Any]) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_unset=True)
    return to_jsonable_python(value)


def _list_params(query: EmployeeQuery) -> dict[str, str]:
    params = {
        "page": str(query.page),
        "pageSize": str(query.page_size),
        "sortBy": query.sort_by,
        "sortOrder": query.sort_order,
    }
    if query.search:
        params["search"] = query.search
    if query.employment_status:
        params["employment_status"] = str(query.employment_status)
    if query.department_id is not None:
        params["department_id"] = str(query.department_id)
    return params


class EmployeeClient:
    def __init__(
        self,
        base_url: str,
        cache: QueryCache,
        notifier: Notifier | None = None,
        access_token: str | None = None,
        timeout: float = 30,
        read_retries: int = 1,
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/employees"
        self.cache = cache
        self.notifier = notifier or LoggingNotifier()
        self.access_token = access_token
        self.timeout = timeout
        self.read_retries = read_retries

    async def _request(
        self,
        method: str,
        path: str = "",
        params: dict[str, str] | None = None,
        json: Any = None,
        retries: int = 0,
    ) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        headers = {"Content-Type": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"

        attempt = 0
        while True:
            try:
                timeout = aiohttp.ClientTimeout(total=self.timeout)
                async with aiohttp.ClientSession(timeout=timeout) as session:
                    async with session.request(
                        method, url, headers=headers, params=params, json=json
                    ) as response:
                        try:
                            body = await response.json()
                        except (aiohttp.ContentTypeError, ValueError):
                            body = {}
                        body = body if isinstance(body, dict) else {}

                        if response.status >= 400:
                            error = body.get("error") or {}
                            raise EmployeeClientError(
                                error.get("message") or "API request failed",
                                code=error.get("code"),
                                status=response.status,
                            )
                        return body
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                if attempt < retries:
                    attempt += 1
                    logger.warning("%s %s failed (%s), retrying", method, url, e)
                    continue
                logger.error("API call failed: %s %s: %s", method, url, e)
                raise EmployeeClientError(f"API request failed: {e}") from e

    def _report_failure(self, error: EmployeeClientError, fallback: str) -> None:
        self.notifier.error(error.message or fallback)

    # Reads

    async def get_employees(self, query: EmployeeQuery | None = None) -> PaginatedEmployees:
        query = query or EmployeeQuery()
        key = EmployeeKeys.list(query)
        if key in self.cache:
            return self.cache.get(key)

        body = await self._request("GET", params=_list_params(query), retries=self.read_retries)
        pagination = (body.get("metadata") or {}).get("pagination") or {}
        result = PaginatedEmployees(
            data=[EmployeeListItem.model_validate(item) for item in body.get("data") or []],
            count=pagination.get("total", 0),
            page=pagination.get("page", query.page),
            page_size=pagination.get("pageSize", query.page_size),
            total_pages=pagination.get("totalPages", 0),
        )
        self.cache.set(key, result, LIST_STALE_SECONDS)
        return result

    async def get_employee(self, employee_id: str) -> EmployeeDetail | None:
        key = EmployeeKeys.detail(employee_id)
        if key in self.cache:
            return self.cache.get(key)

        try:
            body = await self._request("GET", f"/{employee_id}", retries=self.read_retries)
        except EmployeeClientError as e:
            if e.code == "NOT_FOUND":
                return None
            raise

        employee = EmployeeDetail.model_validate(body["data"])
        self.cache.set(key, employee, DETAIL_STALE_SECONDS)
        return employee

    async def search_employees(self, search_term: str, limit: int = 10) -> list[EmployeeRecord]:
        page = await self.get_employees(EmployeeQuery(search=search_term, page_size=limit, page=0))
        fields = set(EmployeeRecord.model_fields)
        return [EmployeeRecord.model_validate(item.model_dump(include=fields)) for item in page.data]

    async def get_employees_by_department(self, department_id: int) -> list[EmployeeListItem]:
        page = await self.get_employees(
            EmployeeQuery(
                department_id=department_id,
                employment_status=EmploymentStatus.ACTIVE,
                page_size=100,
            )
        )
        return page.data

    async def get_employee_stats(self) -> EmployeeStats:
        key = EmployeeKeys.stats()
        if key in self.cache:
            return self.cache.get(key)

        active, terminated, onboarding, pre_onboarding = await asyncio.gather(
            *(
                self.get_employees(EmployeeQuery(employment_status=status, page_size=1))
                for status in (
                    EmploymentStatus.ACTIVE,
                    EmploymentStatus.TERMINATED,
                    EmploymentStatus.ONBOARDING,
                    EmploymentStatus.PRE_ONBOARDING,
                )
            )
        )
        stats = EmployeeStats(
            total=active.count + terminated.count + onboarding.count + pre_onboarding.count,
            active=active.count,
            terminated=terminated.count,
            onboarding=onboarding.count,
            pre_onboarding=pre_onboarding.count,
        )
        self.cache.set(key, stats, STATS_STALE_SECONDS)
        return stats

    # Writes (never retried)

    async def create_employee(self, employee: BaseModel | dict[str, Any]) -> EmployeeRecord:
        try:
            body = await self._request("POST", json=_payload(employee))
        except EmployeeClientError as e:
            self._report_failure(e, "Failed to create employee")
            raise

        created = EmployeeRecord.model_validate(body["data"])
        self.cache.invalidate(EmployeeKeys.lists())
        self.cache.invalidate(EmployeeKeys.stats())
        self.notifier.success("Employee created successfully")
        return created

    async def update_employee(self, employee_id: str, updates: BaseModel | dict[str, Any]) -> EmployeeRecord:
        payload = _payload(updates)
        try:
            body = await self._request("PUT", f"/{employee_id}", json=payload)
        except EmployeeClientError as e:
            self._report_failure(e, "Failed to update employee")
            raise

        updated = EmployeeRecord.model_validate(body["data"])

        detail_key = EmployeeKeys.detail(employee_id)
        cached = self.cache.get(detail_key)
        if isinstance(cached, EmployeeDetail):
            self.cache.set(detail_key, cached.model_copy(update=updated.model_dump()), DETAIL_STALE_SECONDS)
        else:
            self.cache.remove(detail_key)

        self.cache.invalidate(EmployeeKeys.lists())
        if "employment_status" in payload:
            self.cache.invalidate(EmployeeKeys.stats())
        self.notifier.success("Employee updated successfully")
        return updated

    async def delete_employee(self, employee_id: str) -> str:
        try:
            await self._request("DELETE", f"/{employee_id}")
        except EmployeeClientError as e:
            self._report_failure(e, "Failed to delete employee")
            raise

        self.cache.remove(EmployeeKeys.detail(employee_id))
        self.cache.invalidate(EmployeeKeys.lists())
        self.cache.invalidate(EmployeeKeys.stats())
        self.notifier.success("Employee deleted successfully")
        return employee_id

    # Extension records

    async def _get_extension(self, kind: ExtensionKind, employee_id: str):
        key = EmployeeKeys.extension(kind, employee_id)
        if key in self.cache:
            return self.cache.get(key)

        try:
            body = await self._request("GET", f"/{employee_id}/{kind.value}", retries=self.read_retries)
        except EmployeeClientError as e:
            if e.code == "NOT_FOUND":
                return None
            raise

        data = body.get("data")
        record = EXTENSION_SCHEMAS[kind][1].model_validate(data) if data else None
        self.cache.set(key, record, DEFAULT_STALE_SECONDS)
        return record

    async def _update_extension(self, kind: ExtensionKind, employee_id: str, info: BaseModel | dict[str, Any]):
        label = _EXTENSION_LABELS[kind]
        try:
            body = await self._request("PUT", f"/{employee_id}/{kind.value}", json=_payload(info))
        except EmployeeClientError as e:
            self._report_failure(e, f"Failed to update {label}")
            raise

        record = EXTENSION_SCHEMAS[kind][1].model_validate(body["data"])
        self.cache.set(EmployeeKeys.extension(kind, employee_id), record, DEFAULT_STALE_SECONDS)
        self.cache.remove(EmployeeKeys.detail(employee_id))
        if kind in _LISTED_EXTENSIONS:
            self.cache.invalidate(EmployeeKeys.lists())
        self.notifier.success(f"{label.capitalize()} updated successfully")
        return record

    async def get_personal_info(self, employee_id: str):
        return await self._get_extension(ExtensionKind.PERSONAL, employee_id)

    async def update_personal_info(self, employee_id: str, info: BaseModel | dict[str, Any]):
        return await self._update_extension(ExtensionKind.PERSONAL, employee_id, info)

    async def get_contact_info(self, employee_id: str):
        return await self._get_extension(ExtensionKind.CONTACT, employee_id)

    async def update_contact_info(self, employee_id: str, info: BaseModel | dict[str, Any]):
        return await self._update_extension(ExtensionKind.CONTACT, employee_id, info)

    async def get_employment_info(self, employee_id: str):
        return await self._get_extension(ExtensionKind.EMPLOYMENT, employee_id)

    async def update_employment_info(self, employee_id: str, info: BaseModel | dict[str, Any]):
        return await self._update_extension(ExtensionKind.EMPLOYMENT, employee_id, info)

    async def get_financial_info(self, employee_id: str):
        return await self._get_extension(ExtensionKind.FINANCIAL, employee_id)

    async def update_financial_info(self, employee_id: str, info: BaseModel | dict[str, Any]):
        return await self._update_extension(ExtensionKind.FINANCIAL, employee_id, info)
