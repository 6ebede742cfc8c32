"""Department repository."""

from typing import Any
from uuid import UUID

from sqlalchemy import select

from saastral_api.models.domain.department import Department
from saastral_api.models.domain.provider import ExternalProvider
from saastral_api.models.orm.department import DepartmentORM
from saastral_api.repositories.base import BaseRepository


class DepartmentRepository(BaseRepository[DepartmentORM, Department]):
    """Repository for department operations."""

    model = DepartmentORM

    def _to_domain(self, row: DepartmentORM) -> Department:
        return Department.reconstitute(
            id=row.id,
            organization_id=row.organization_id,
            name=row.name,
            description=row.description,
            parent_id=row.parent_id,
            external_id=row.external_id,
            external_provider=row.external_provider,
            path=row.path,
            metadata=row.extra_metadata,
            created_at=row.created_at,
            updated_at=row.updated_at,
            created_by=row.created_by,
            updated_by=row.updated_by,
        )

    def _to_row(self, entity: Department) -> dict[str, Any]:
        return {
            "id": entity.id,
            "organization_id": entity.organization_id,
            "name": entity.name,
            "description": entity.description,
            "parent_id": entity.parent_id,
            "external_id": entity.external_id,
            "external_provider": str(entity.external_provider) if entity.external_provider else None,
            "path": entity.path,
            "extra_metadata": entity.metadata,
            "created_at": entity.created_at,
            "updated_at": entity.updated_at,
            "created_by": entity.created_by,
            "updated_by": entity.updated_by,
        }

    async def find_by_external_id(
        self,
        organization_id: UUID,
        external_id: str,
        provider: ExternalProvider,
    ) -> Department | None:
        """Get department by directory external ID.

        Args:
            organization_id: Organization UUID
            external_id: Provider-side org unit ID
            provider: External provider tag

        Returns:
            Department or None if not found
        """
        return await self._first(
            select(DepartmentORM).where(
                DepartmentORM.organization_id == organization_id,
                DepartmentORM.external_provider == str(provider),
                DepartmentORM.external_id == external_id,
            )
        )

    async def find_by_organization(self, organization_id: UUID) -> list[Department]:
        """List an organization's departments ordered by path."""
        return await self._all(
            select(DepartmentORM)
            .where(DepartmentORM.organization_id == organization_id)
            .order_by(DepartmentORM.path, DepartmentORM.name)
        )
