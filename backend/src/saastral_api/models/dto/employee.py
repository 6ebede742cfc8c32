"""Employee DTOs."""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from saastral_api.models.domain.employee import Employee, EmployeeStatus
from saastral_api.models.domain.provider import ExternalProvider


class EmployeeResponse(BaseModel):
    """Employee response DTO."""

    id: UUID
    organization_id: UUID
    name: str
    email: str
    status: EmployeeStatus
    title: str | None = None
    phone: str | None = None
    avatar_url: str | None = None
    department_id: UUID | None = None
    manager_id: UUID | None = None
    hired_at: date | None = None
    offboarded_at: datetime | None = None
    external_id: str | None = None
    external_provider: ExternalProvider | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    monthly_saas_cost_cents: int | None = None
    currency: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, employee: Employee) -> "EmployeeResponse":
        cost = employee.monthly_saas_cost
        return cls(
            id=employee.id,
            organization_id=employee.organization_id,
            name=employee.name,
            email=str(employee.email),
            status=employee.status,
            title=employee.title,
            phone=employee.phone,
            avatar_url=employee.avatar_url,
            department_id=employee.department_id,
            manager_id=employee.manager_id,
            hired_at=employee.hired_at,
            offboarded_at=employee.offboarded_at,
            external_id=employee.external_id,
            external_provider=employee.external_provider,
            metadata=employee.metadata,
            monthly_saas_cost_cents=cost.cents if cost else None,
            currency=cost.currency if cost else None,
            created_at=employee.created_at,
            updated_at=employee.updated_at,
        )


class EmployeeCreate(BaseModel):
    """DTO for creating an employee by hand."""

    organization_id: UUID
    email: EmailStr = Field(description="Employee email address")
    name: str = Field(min_length=1, max_length=255, description="Full name of the employee")
    title: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    avatar_url: str | None = Field(default=None, max_length=500)
    department_id: UUID | None = None
    manager_id: UUID | None = None
    hired_at: date | None = None
    created_by: UUID | None = None


class EmployeeUpdate(BaseModel):
    """DTO for updating an employee's profile, department and manager."""

    organization_id: UUID
    name: str | None = Field(default=None, min_length=1, max_length=255)
    title: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    avatar_url: str | None = Field(default=None, max_length=500)
    department_id: UUID | None = None
    manager_id: UUID | None = None
    updated_by: UUID | None = None


class EmployeeStatusChange(BaseModel):
    """Body for offboard/suspend/reactivate."""

    organization_id: UUID
    updated_by: UUID | None = None
