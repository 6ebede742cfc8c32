"""Tests for IntegrationService with in-memory repositories."""

import asyncio
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from conftest import (
    FakeIntegrationRepository,
    make_integration,
    make_user,
)
from saastral_api.exceptions import (
    IntegrationAlreadyExistsError,
    IntegrationConfigurationError,
    IntegrationNotFoundError,
    InvalidCredentialsError,
    InvalidStatusTransitionError,
    ProviderConnectionError,
    SyncFailedError,
)
from saastral_api.models.domain.integration import IntegrationStatus
from saastral_api.models.domain.provider import IntegrationProvider
from saastral_api.models.dto.integration import IntegrationCreate
from saastral_api.services.integration_service import IntegrationService


class FakeSession:
    """Tracks commits and rollbacks."""

    def __init__(self) -> None:
        self.commits = 0
        self.rollbacks = 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def make_service(session, integration_repo, employee_repo, department_repo, provider):
    def _make(repo: FakeIntegrationRepository | None = None) -> IntegrationService:
        service = IntegrationService(session, provider_factory=lambda integration: provider)
        service.integration_repo = repo or integration_repo
        service.employee_repo = employee_repo
        service.department_repo = department_repo
        return service

    return _make


class TestIntegrationCrud:
    """Create, read, configure and delete."""

    def test_create_integration_is_pending(self, make_service) -> None:
        service = make_service(FakeIntegrationRepository())
        data = IntegrationCreate(
            organization_id=uuid4(),
            provider=IntegrationProvider.GOOGLE_WORKSPACE,
            credentials={"refresh_token": "refresh"},
        )

        integration = asyncio.run(service.create_integration(data))

        assert integration.status == IntegrationStatus.PENDING
        assert integration.credentials == {"refresh_token": "refresh"}

    def test_one_integration_per_provider(self, make_service, integration) -> None:
        service = make_service()
        data = IntegrationCreate(
            organization_id=integration.organization_id,
            provider=integration.provider,
            credentials={"refresh_token": "other"},
        )

        with pytest.raises(IntegrationAlreadyExistsError):
            asyncio.run(service.create_integration(data))

    def test_get_missing_integration(self, make_service) -> None:
        with pytest.raises(IntegrationNotFoundError):
            asyncio.run(make_service().get_integration(uuid4()))

    def test_update_config_merges(self, make_service, integration) -> None:
        service = make_service()

        updated = asyncio.run(service.update_config(integration.id, {"customer_id": "C1"}))

        assert updated.get_config_value("customer_id") == "C1"

    def test_delete(self, make_service, integration, integration_repo) -> None:
        service = make_service()

        asyncio.run(service.delete_integration(integration.id))

        assert integration.id not in integration_repo.integrations
        with pytest.raises(IntegrationNotFoundError):
            asyncio.run(service.delete_integration(integration.id))

    def test_disabled_integration_cannot_be_activated(self, make_service, integration) -> None:
        service = make_service()
        asyncio.run(service.disable(integration.id))

        with pytest.raises(InvalidStatusTransitionError):
            asyncio.run(service.activate(integration.id))


class TestConnectionTest:
    """Provider connection checks."""

    def test_success_closes_provider(self, make_service, integration, provider) -> None:
        asyncio.run(make_service().test_connection(integration.id))
        assert provider.closed

    def test_connection_failure_becomes_invalid_credentials(
        self, make_service, integration, provider
    ) -> None:
        provider.connection_error = ProviderConnectionError("google_workspace", "HTTP 404")

        with pytest.raises(InvalidCredentialsError):
            asyncio.run(make_service().test_connection(integration.id))

        assert provider.closed


class TestSyncCandidates:
    """Selection of integrations due for a scheduled sync."""

    def test_only_active_or_errored_overdue_integrations(self, make_service) -> None:
        now = datetime.now(UTC)
        overdue_active = make_integration(last_sync_at=now - timedelta(hours=3))
        never_synced_error = make_integration(status=IntegrationStatus.ERROR)
        fresh_active = make_integration(last_sync_at=now - timedelta(minutes=10))
        disabled = make_integration(status=IntegrationStatus.DISABLED)
        pending = make_integration(status=IntegrationStatus.PENDING)
        repo = FakeIntegrationRepository(
            [overdue_active, never_synced_error, fresh_active, disabled, pending]
        )

        candidates = asyncio.run(make_service(repo).list_sync_candidates(threshold_hours=2))

        assert {c.id for c in candidates} == {overdue_active.id, never_synced_error.id}


class TestTriggerSync:
    """Manual sync through the service."""

    def test_runs_full_directory_sync(self, make_service, integration, provider) -> None:
        provider.pages = [[make_user("g-1", "ann@example.com")]]

        response = asyncio.run(make_service().trigger_sync(integration.id))

        assert response.employees.stats.created == 1
        assert response.departments.success is True
        assert provider.closed

    def test_fatal_failure_commits_recorded_error(
        self, make_service, integration, provider, session
    ) -> None:
        provider.list_users_error = ProviderConnectionError("google_workspace", "unreachable")

        with pytest.raises(SyncFailedError):
            asyncio.run(make_service().trigger_sync(integration.id))

        assert session.commits == 1
        assert integration.status == IntegrationStatus.ERROR
        assert provider.closed

    def test_unknown_integration(self, make_service) -> None:
        with pytest.raises(IntegrationNotFoundError):
            asyncio.run(make_service().trigger_sync(uuid4()))

    def test_unsupported_provider_is_recorded_on_the_integration(
        self, integration_repo, session
    ) -> None:
        okta = make_integration(provider=IntegrationProvider.OKTA)
        integration_repo.integrations[okta.id] = okta
        service = IntegrationService(session)
        service.integration_repo = integration_repo

        with pytest.raises(IntegrationConfigurationError):
            asyncio.run(service.trigger_sync(okta.id))

        assert okta.status == IntegrationStatus.ERROR
        assert okta.last_sync_error is not None
        assert session.commits == 1
