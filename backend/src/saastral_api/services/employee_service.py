"""Employee service for manual employee management."""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from saastral_api.exceptions import EmployeeAlreadyExistsError, EmployeeNotFoundError
from saastral_api.models.domain.employee import Employee
from saastral_api.models.domain.value_objects import Email
from saastral_api.models.dto.employee import EmployeeCreate, EmployeeUpdate
from saastral_api.repositories.employee_repository import EmployeeRepository

logger = logging.getLogger(__name__)


class EmployeeService:
    """Service for employee operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize service with database session."""
        self.session = session
        self.employee_repo = EmployeeRepository(session)

    async def get_employee(self, employee_id: UUID, organization_id: UUID) -> Employee:
        """Get an employee of an organization.

        Raises:
            EmployeeNotFoundError: If missing or owned by another organization
        """
        employee = await self.employee_repo.find_by_id(employee_id)
        if employee is None or employee.organization_id != organization_id:
            raise EmployeeNotFoundError(str(employee_id))
        return employee

    async def list_employees(
        self,
        organization_id: UUID,
        offset: int = 0,
        limit: int = 100,
    ) -> list[Employee]:
        return await self.employee_repo.find_by_organization(organization_id, offset, limit)

    async def create_employee(self, data: EmployeeCreate) -> Employee:
        """Create an employee by hand.

        Raises:
            InvalidEmailError: If the email is malformed
            EmployeeAlreadyExistsError: If the email is taken in the organization
        """
        email = Email.create(data.email)
        if await self.employee_repo.find_by_email(email, data.organization_id) is not None:
            raise EmployeeAlreadyExistsError(str(email), str(data.organization_id))

        employee = Employee.create(
            data.organization_id,
            data.name,
            email,
            title=data.title,
            phone=data.phone,
            avatar_url=data.avatar_url,
            department_id=data.department_id,
            manager_id=data.manager_id,
            hired_at=data.hired_at,
            created_by=data.created_by,
        )
        await self.employee_repo.save(employee)
        logger.info(f"Created employee {employee.id}")
        return employee

    async def update_employee(self, employee_id: UUID, data: EmployeeUpdate) -> Employee:
        """Update profile fields, department and manager.

        Only fields present in the request are applied.
        """
        employee = await self.get_employee(employee_id, data.organization_id)
        fields = data.model_fields_set

        employee.update_profile(
            name=data.name,
            title=data.title,
            phone=data.phone,
            avatar_url=data.avatar_url,
            updated_by=data.updated_by,
        )
        if "department_id" in fields:
            employee.update_department(data.department_id, data.updated_by)
        if "manager_id" in fields:
            employee.update_manager(data.manager_id, data.updated_by)

        await self.employee_repo.save(employee)
        return employee

    async def offboard_employee(
        self,
        employee_id: UUID,
        organization_id: UUID,
        updated_by: UUID | None = None,
    ) -> Employee:
        employee = await self.get_employee(employee_id, organization_id)
        employee.offboard(updated_by)
        await self.employee_repo.save(employee)
        logger.info(f"Offboarded employee {employee_id}")
        return employee

    async def suspend_employee(
        self,
        employee_id: UUID,
        organization_id: UUID,
        updated_by: UUID | None = None,
    ) -> Employee:
        employee = await self.get_employee(employee_id, organization_id)
        employee.suspend(updated_by)
        await self.employee_repo.save(employee)
        return employee

    async def reactivate_employee(
        self,
        employee_id: UUID,
        organization_id: UUID,
        updated_by: UUID | None = None,
    ) -> Employee:
        employee = await self.get_employee(employee_id, organization_id)
        employee.reactivate(updated_by)
        await self.employee_repo.save(employee)
        return employee
