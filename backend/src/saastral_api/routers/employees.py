"""Employees router."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from saastral_api.database import get_db
from saastral_api.models.dto.employee import (
    EmployeeCreate,
    EmployeeResponse,
    EmployeeStatusChange,
    EmployeeUpdate,
)
from saastral_api.services.employee_service import EmployeeService

router = APIRouter()


def get_employee_service(db: AsyncSession = Depends(get_db)) -> EmployeeService:
    """Get EmployeeService instance."""
    return EmployeeService(db)


@router.get("", response_model=list[EmployeeResponse])
async def list_employees(
    organization_id: Annotated[UUID, Query()],
    service: Annotated[EmployeeService, Depends(get_employee_service)],
    offset: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
) -> list[EmployeeResponse]:
    employees = await service.list_employees(organization_id, offset, limit)
    return [EmployeeResponse.from_domain(e) for e in employees]


@router.post("", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
async def create_employee(
    data: EmployeeCreate,
    service: Annotated[EmployeeService, Depends(get_employee_service)],
) -> EmployeeResponse:
    """Create an employee manually (outside of directory sync)."""
    employee = await service.create_employee(data)
    return EmployeeResponse.from_domain(employee)


@router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: UUID,
    organization_id: Annotated[UUID, Query()],
    service: Annotated[EmployeeService, Depends(get_employee_service)],
) -> EmployeeResponse:
    employee = await service.get_employee(employee_id, organization_id)
    return EmployeeResponse.from_domain(employee)


@router.patch("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    employee_id: UUID,
    data: EmployeeUpdate,
    service: Annotated[EmployeeService, Depends(get_employee_service)],
) -> EmployeeResponse:
    employee = await service.update_employee(employee_id, data)
    return EmployeeResponse.from_domain(employee)


@router.post("/{employee_id}/offboard", response_model=EmployeeResponse)
async def offboard_employee(
    employee_id: UUID,
    data: EmployeeStatusChange,
    service: Annotated[EmployeeService, Depends(get_employee_service)],
) -> EmployeeResponse:
    """Offboard an employee. Offboarding is final."""
    employee = await service.offboard_employee(
        employee_id, data.organization_id, data.updated_by
    )
    return EmployeeResponse.from_domain(employee)


@router.post("/{employee_id}/suspend", response_model=EmployeeResponse)
async def suspend_employee(
    employee_id: UUID,
    data: EmployeeStatusChange,
    service: Annotated[EmployeeService, Depends(get_employee_service)],
) -> EmployeeResponse:
    employee = await service.suspend_employee(employee_id, data.organization_id, data.updated_by)
    return EmployeeResponse.from_domain(employee)


@router.post("/{employee_id}/reactivate", response_model=EmployeeResponse)
async def reactivate_employee(
    employee_id: UUID,
    data: EmployeeStatusChange,
    service: Annotated[EmployeeService, Depends(get_employee_service)],
) -> EmployeeResponse:
    employee = await service.reactivate_employee(
        employee_id, data.organization_id, data.updated_by
    )
    return EmployeeResponse.from_domain(employee)
