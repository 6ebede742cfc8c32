"""Employee repository."""

from typing import Any
from uuid import UUID

from sqlalchemy import select

from saastral_api.models.domain.employee import Employee
from saastral_api.models.domain.value_objects import Email, Money
from saastral_api.models.orm.employee import EmployeeORM
from saastral_api.repositories.base import BaseRepository


class EmployeeRepository(BaseRepository[EmployeeORM, Employee]):
    """Repository for employee operations."""

    model = EmployeeORM

    def _to_domain(self, row: EmployeeORM) -> Employee:
        cost = None
        if row.monthly_saas_cost_cents is not None:
            cost = Money.from_cents(row.monthly_saas_cost_cents, row.currency or "BRL")
        return Employee.reconstitute(
            id=row.id,
            organization_id=row.organization_id,
            name=row.name,
            email=Email.reconstitute(row.email),
            status=row.status,
            title=row.title,
            phone=row.phone,
            avatar_url=row.avatar_url,
            department_id=row.department_id,
            manager_id=row.manager_id,
            hired_at=row.hired_at,
            offboarded_at=row.offboarded_at,
            external_id=row.external_id,
            external_provider=row.external_provider,
            metadata=row.extra_metadata,
            monthly_saas_cost=cost,
            created_at=row.created_at,
            updated_at=row.updated_at,
            created_by=row.created_by,
            updated_by=row.updated_by,
        )

    def _to_row(self, entity: Employee) -> dict[str, Any]:
        cost = entity.monthly_saas_cost
        return {
            "id": entity.id,
            "organization_id": entity.organization_id,
            "name": entity.name,
            "email": str(entity.email),
            "status": str(entity.status),
            "title": entity.title,
            "phone": entity.phone,
            "avatar_url": entity.avatar_url,
            "department_id": entity.department_id,
            "manager_id": entity.manager_id,
            "hired_at": entity.hired_at,
            "offboarded_at": entity.offboarded_at,
            "external_id": entity.external_id,
            "external_provider": str(entity.external_provider) if entity.external_provider else None,
            "extra_metadata": entity.metadata,
            "monthly_saas_cost_cents": cost.cents if cost else None,
            "currency": cost.currency if cost else None,
            "created_at": entity.created_at,
            "updated_at": entity.updated_at,
            "created_by": entity.created_by,
            "updated_by": entity.updated_by,
        }

    async def find_by_external_id(self, external_id: str, organization_id: UUID) -> Employee | None:
        """Get employee by directory external ID within an organization.

        Args:
            external_id: Provider-side user ID
            organization_id: Organization UUID

        Returns:
            Employee or None if not found
        """
        return await self._first(
            select(EmployeeORM).where(
                EmployeeORM.organization_id == organization_id,
                EmployeeORM.external_id == external_id,
            )
        )

    async def find_by_email(self, email: Email | str, organization_id: UUID) -> Employee | None:
        """Get employee by (normalized) email within an organization.

        Args:
            email: Employee email address
            organization_id: Organization UUID

        Returns:
            Employee or None if not found
        """
        return await self._first(
            select(EmployeeORM).where(
                EmployeeORM.organization_id == organization_id,
                EmployeeORM.email == str(email).strip().lower(),
            )
        )

    async def find_by_organization(
        self,
        organization_id: UUID,
        offset: int = 0,
        limit: int = 100,
    ) -> list[Employee]:
        """List an organization's employees ordered by name."""
        return await self._all(
            select(EmployeeORM)
            .where(EmployeeORM.organization_id == organization_id)
            .order_by(EmployeeORM.name)
            .offset(offset)
            .limit(limit)
        )
