"""Integration repository."""

from collections.abc import Iterable
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from saastral_api.models.domain.integration import Integration, IntegrationStatus
from saastral_api.models.domain.provider import IntegrationProvider
from saastral_api.models.orm.integration import IntegrationORM
from saastral_api.repositories.base import BaseRepository
from saastral_api.security.encryption import EncryptionService, get_encryption_service


class IntegrationRepository(BaseRepository[IntegrationORM, Integration]):
    """Repository for integration operations.

    Credentials are encrypted on write and decrypted on read, so the
    aggregate only ever holds plaintext credentials in memory.
    """

    model = IntegrationORM

    def __init__(self, session: AsyncSession, encryption: EncryptionService | None = None) -> None:
        super().__init__(session)
        self.encryption = encryption or get_encryption_service()

    def _to_domain(self, row: IntegrationORM) -> Integration:
        return Integration.reconstitute(
            id=row.id,
            organization_id=row.organization_id,
            provider=row.provider,
            status=row.status,
            credentials=self.encryption.decrypt(row.credentials_encrypted),
            config=row.config or {},
            last_sync_at=row.last_sync_at,
            last_sync_status=row.last_sync_status,
            last_sync_error=row.last_sync_error,
            created_at=row.created_at,
            updated_at=row.updated_at,
            created_by=row.created_by,
        )

    def _to_row(self, entity: Integration) -> dict[str, Any]:
        return {
            "id": entity.id,
            "organization_id": entity.organization_id,
            "provider": str(entity.provider),
            "status": str(entity.status),
            "credentials_encrypted": self.encryption.encrypt(entity.credentials),
            "config": entity.config,
            "last_sync_at": entity.last_sync_at,
            "last_sync_status": str(entity.last_sync_status) if entity.last_sync_status else None,
            "last_sync_error": entity.last_sync_error,
            "created_at": entity.created_at,
            "updated_at": entity.updated_at,
            "created_by": entity.created_by,
        }

    async def find_by_organization_and_provider(
        self,
        organization_id: UUID,
        provider: IntegrationProvider,
    ) -> Integration | None:
        """Get the organization's integration for a provider, if any."""
        return await self._first(
            select(IntegrationORM).where(
                IntegrationORM.organization_id == organization_id,
                IntegrationORM.provider == str(provider),
            )
        )

    async def find_by_organization(self, organization_id: UUID) -> list[Integration]:
        """List an organization's integrations."""
        return await self._all(
            select(IntegrationORM)
            .where(IntegrationORM.organization_id == organization_id)
            .order_by(IntegrationORM.provider)
        )

    async def find_by_statuses(self, statuses: Iterable[IntegrationStatus]) -> list[Integration]:
        """List integrations across organizations in any of the given statuses."""
        return await self._all(
            select(IntegrationORM)
            .where(IntegrationORM.status.in_([str(s) for s in statuses]))
            .order_by(IntegrationORM.last_sync_at.asc().nulls_first())
        )
