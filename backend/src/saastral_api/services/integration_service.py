"""Integration service for managing directory connections and triggering syncs."""

import logging
from collections.abc import Callable
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from saastral_api.exceptions import (
    IntegrationAlreadyExistsError,
    IntegrationError,
    IntegrationNotFoundError,
    InvalidCredentialsError,
    SyncFailedError,
)
from saastral_api.models.domain.integration import (
    DEFAULT_OVERDUE_THRESHOLD_HOURS,
    Integration,
    IntegrationStatus,
)
from saastral_api.models.dto.integration import IntegrationCreate
from saastral_api.models.dto.sync import DirectorySyncResponse
from saastral_api.providers.base import DirectoryProvider
from saastral_api.providers.factory import create_directory_provider
from saastral_api.repositories.department_repository import DepartmentRepository
from saastral_api.repositories.employee_repository import EmployeeRepository
from saastral_api.repositories.integration_repository import IntegrationRepository
from saastral_api.services.directory_sync_service import DirectorySyncService
from saastral_api.utils.secure_logging import log_warning

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[Integration], DirectoryProvider]


class IntegrationService:
    """Service for integration lifecycle operations."""

    def __init__(
        self,
        session: AsyncSession,
        provider_factory: ProviderFactory = create_directory_provider,
    ) -> None:
        """Initialize service with database session."""
        self.session = session
        self.integration_repo = IntegrationRepository(session)
        self.employee_repo = EmployeeRepository(session)
        self.department_repo = DepartmentRepository(session)
        self.provider_factory = provider_factory

    async def create_integration(self, data: IntegrationCreate) -> Integration:
        """Create a pending integration.

        Raises:
            IntegrationAlreadyExistsError: If the organization already has one for the provider
        """
        existing = await self.integration_repo.find_by_organization_and_provider(
            data.organization_id, data.provider
        )
        if existing is not None:
            raise IntegrationAlreadyExistsError(str(data.organization_id), data.provider)

        integration = Integration.create(
            organization_id=data.organization_id,
            provider=data.provider,
            credentials=data.credentials,
            config=data.config,
            created_by=data.created_by,
        )
        await self.integration_repo.save(integration)
        logger.info(f"Created {integration.provider} integration {integration.id}")
        return integration

    async def get_integration(self, integration_id: UUID) -> Integration:
        """Get an integration by ID.

        Raises:
            IntegrationNotFoundError: If it does not exist
        """
        integration = await self.integration_repo.find_by_id(integration_id)
        if integration is None:
            raise IntegrationNotFoundError(str(integration_id))
        return integration

    async def list_integrations(self, organization_id: UUID) -> list[Integration]:
        return await self.integration_repo.find_by_organization(organization_id)

    async def test_connection(self, integration_id: UUID) -> None:
        """Check the stored credentials against the provider.

        Raises:
            IntegrationNotFoundError: If the integration does not exist
            InvalidCredentialsError: If the provider cannot be reached with them
        """
        integration = await self.get_integration(integration_id)
        provider = self.provider_factory(integration)
        try:
            await provider.test_connection()
        except InvalidCredentialsError:
            raise
        except IntegrationError as e:
            log_warning(logger, f"Connection test failed for integration {integration_id}", e)
            raise InvalidCredentialsError(integration.provider, e.message) from e
        finally:
            await provider.aclose()

    async def activate(self, integration_id: UUID) -> Integration:
        integration = await self.get_integration(integration_id)
        integration.activate()
        await self.integration_repo.save(integration)
        return integration

    async def disable(self, integration_id: UUID) -> Integration:
        integration = await self.get_integration(integration_id)
        integration.disable()
        await self.integration_repo.save(integration)
        return integration

    async def update_config(self, integration_id: UUID, config: dict[str, Any]) -> Integration:
        integration = await self.get_integration(integration_id)
        integration.update_config(config)
        await self.integration_repo.save(integration)
        return integration

    async def delete_integration(self, integration_id: UUID) -> None:
        if not await self.integration_repo.delete(integration_id):
            raise IntegrationNotFoundError(str(integration_id))
        logger.info(f"Deleted integration {integration_id}")

    async def list_sync_candidates(
        self,
        threshold_hours: int = DEFAULT_OVERDUE_THRESHOLD_HOURS,
    ) -> list[Integration]:
        """Get active or errored integrations whose last sync is overdue.

        Disabled and pending integrations are never handed to the sync engine.
        """
        integrations = await self.integration_repo.find_by_statuses(
            [IntegrationStatus.ACTIVE, IntegrationStatus.ERROR]
        )
        return [i for i in integrations if i.is_sync_overdue(threshold_hours)]

    async def trigger_sync(self, integration_id: UUID) -> DirectorySyncResponse:
        """Run a full directory sync (departments, then employees).

        Raises:
            IntegrationNotFoundError: If the integration does not exist
            SyncFailedError: If the run fails fatally
            IntegrationError: If no directory client can be built for the integration
        """
        integration = await self.get_integration(integration_id)
        try:
            provider = self.provider_factory(integration)
        except IntegrationError as e:
            if not integration.is_disabled():
                integration.record_sync_error(e.message)
                await self.integration_repo.save(integration)
                await self.session.commit()
            raise
        try:
            sync_service = DirectorySyncService(
                self.integration_repo,
                self.employee_repo,
                self.department_repo,
                provider,
            )
            return await sync_service.sync_directory(integration.id, integration.organization_id)
        except SyncFailedError:
            # Keep the error recorded on the integration
            await self.session.commit()
            raise
        finally:
            await provider.aclose()
