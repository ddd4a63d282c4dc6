from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import TypeVar

from fastapi import APIRouter, Depends, Query, status

from hrms.core.config import settings
from hrms.core.dependencies import get_current_user
from hrms.core.errors import HRMSError, InternalError
from hrms.models.auth import UserInfo
from hrms.models.employee import (
    ContactInfo,
    ContactInfoUpdate,
    EmployeeCreate,
    EmployeeDetail,
    EmployeeListItem,
    EmployeeQuery,
    EmployeeRecord,
    EmployeeUpdate,
    EmploymentInfo,
    EmploymentInfoUpdate,
    EmploymentStatus,
    ExtensionKind,
    FinancialInfo,
    FinancialInfoUpdate,
    PersonalInfo,
    PersonalInfoUpdate,
)
from hrms.models.envelope import ApiResponse, PaginationMeta, ResponseMetadata
from hrms.services.employee_service import employee_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])

T = TypeVar("T")


async def _run(action: str, operation: Awaitable[T]) -> T:
    try:
        return await operation
    except HRMSError:
        raise
    except Exception as err:
        logger.exception("Failed to %s", action)
        raise InternalError(f"Failed to {action}") from err


@router.get("", response_model=ApiResponse[list[EmployeeListItem]])
async def list_employees(
    page: int = Query(0, ge=0),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, alias="pageSize"),
    search: str | None = None,
    employment_status: EmploymentStatus | None = None,
    department_id: int | None = None,
    sort_by: str = Query("created_at", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    query = EmployeeQuery(
        page=page,
        page_size=page_size,
        search=search or None,
        employment_status=employment_status,
        department_id=department_id,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    result = await _run("retrieve employees", employee_service.list_employees(query))

    return ApiResponse[list[EmployeeListItem]](
        success=True,
        data=result.data,
        metadata=ResponseMetadata(
            pagination=PaginationMeta(
                page=result.page,
                page_size=result.page_size,
                total=result.total,
                total_pages=result.total_pages,
            )
        ),
    )


@router.post("", response_model=ApiResponse[EmployeeRecord], status_code=status.HTTP_201_CREATED)
async def create_employee(
    payload: EmployeeCreate,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    logger.info("Create employee request from user=%s", user.id)
    employee = await _run(
        "create employee",
        employee_service.create_employee(payload.model_dump(exclude_unset=True)),
    )
    return ApiResponse[EmployeeRecord](success=True, data=employee)


@router.get("/{employee_id}", response_model=ApiResponse[EmployeeDetail])
async def get_employee(
    employee_id: str,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    employee = await _run("retrieve employee", employee_service.get_employee(employee_id))
    return ApiResponse[EmployeeDetail](success=True, data=employee)


@router.put("/{employee_id}", response_model=ApiResponse[EmployeeRecord])
async def update_employee(
    employee_id: str,
    payload: EmployeeUpdate,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    employee = await _run(
        "update employee",
        employee_service.update_employee(employee_id, payload.model_dump(exclude_unset=True)),
    )
    return ApiResponse[EmployeeRecord](success=True, data=employee)


@router.delete("/{employee_id}", response_model=ApiResponse[EmployeeRecord])
async def delete_employee(
    employee_id: str,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    logger.info("Terminate employee %s requested by user=%s", employee_id, user.id)
    employee = await _run("delete employee", employee_service.terminate_employee(employee_id))
    return ApiResponse[EmployeeRecord](success=True, data=employee, message="Employee terminated")


@router.get("/{employee_id}/personal", response_model=ApiResponse[PersonalInfo])
async def get_personal_info(
    employee_id: str,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    info = await _run(
        "retrieve personal information",
        employee_service.get_extension(ExtensionKind.PERSONAL, employee_id),
    )
    return ApiResponse[PersonalInfo](success=True, data=info)


@router.put("/{employee_id}/personal", response_model=ApiResponse[PersonalInfo])
async def update_personal_info(
    employee_id: str,
    payload: PersonalInfoUpdate,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    info = await _run(
        "update personal information",
        employee_service.put_extension(
            ExtensionKind.PERSONAL, employee_id, payload.model_dump(exclude_unset=True)
        ),
    )
    return ApiResponse[PersonalInfo](
        success=True, data=info, message="Personal information updated successfully"
    )


@router.get("/{employee_id}/contact", response_model=ApiResponse[ContactInfo])
async def get_contact_info(
    employee_id: str,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    info = await _run(
        "retrieve contact information",
        employee_service.get_extension(ExtensionKind.CONTACT, employee_id),
    )
    return ApiResponse[ContactInfo](success=True, data=info)


@router.put("/{employee_id}/contact", response_model=ApiResponse[ContactInfo])
async def update_contact_info(
    employee_id: str,
    payload: ContactInfoUpdate,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    info = await _run(
        "update contact information",
        employee_service.put_extension(
            ExtensionKind.CONTACT, employee_id, payload.model_dump(exclude_unset=True)
        ),
    )
    return ApiResponse[ContactInfo](
        success=True, data=info, message="Contact information updated successfully"
    )


@router.get("/{employee_id}/employment", response_model=ApiResponse[EmploymentInfo])
async def get_employment_info(
    employee_id: str,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    info = await _run(
        "retrieve employment information",
        employee_service.get_extension(ExtensionKind.EMPLOYMENT, employee_id),
    )
    return ApiResponse[EmploymentInfo](success=True, data=info)


@router.put("/{employee_id}/employment", response_model=ApiResponse[EmploymentInfo])
async def update_employment_info(
    employee_id: str,
    payload: EmploymentInfoUpdate,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    info = await _run(
        "update employment information",
        employee_service.put_extension(
            ExtensionKind.EMPLOYMENT, employee_id, payload.model_dump(exclude_unset=True)
        ),
    )
    return ApiResponse[EmploymentInfo](
        success=True, data=info, message="Employment information updated successfully"
    )


@router.get("/{employee_id}/financial", response_model=ApiResponse[FinancialInfo])
async def get_financial_info(
    employee_id: str,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    info = await _run(
        "retrieve financial information",
        employee_service.get_extension(ExtensionKind.FINANCIAL, employee_id),
    )
    return ApiResponse[FinancialInfo](success=True, data=info)


@router.put("/{employee_id}/financial", response_model=ApiResponse[FinancialInfo])
async def update_financial_info(
    employee_id: str,
    payload: FinancialInfoUpdate,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    info = await _run(
        "update financial information",
        employee_service.put_extension(
            ExtensionKind.FINANCIAL, employee_id, payload.model_dump(exclude_unset=True)
        ),
    )
    return ApiResponse[FinancialInfo](
        success=True, data=info, message="Financial information updated successfully"
    )
