"""Integrations router."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from saastral_api.database import get_db
from saastral_api.exceptions import InvalidCredentialsError
from saastral_api.models.dto.integration import (
    ConnectionTestResponse,
    IntegrationConfigUpdate,
    IntegrationCreate,
    IntegrationListResponse,
    IntegrationResponse,
)
from saastral_api.models.dto.sync import DirectorySyncResponse
from saastral_api.services.integration_service import IntegrationService

router = APIRouter()


def get_integration_service(db: AsyncSession = Depends(get_db)) -> IntegrationService:
    """Get IntegrationService instance."""
    return IntegrationService(db)


@router.get("", response_model=IntegrationListResponse)
async def list_integrations(
    organization_id: Annotated[UUID, Query()],
    service: Annotated[IntegrationService, Depends(get_integration_service)],
) -> IntegrationListResponse:
    """List the directory integrations of an organization."""
    integrations = await service.list_integrations(organization_id)
    return IntegrationListResponse(
        items=[IntegrationResponse.model_validate(i) for i in integrations],
        total=len(integrations),
    )


@router.post("", response_model=IntegrationResponse, status_code=status.HTTP_201_CREATED)
async def create_integration(
    data: IntegrationCreate,
    service: Annotated[IntegrationService, Depends(get_integration_service)],
) -> IntegrationResponse:
    """Create a pending integration. Credentials are stored encrypted."""
    integration = await service.create_integration(data)
    return IntegrationResponse.model_validate(integration)


@router.get("/{integration_id}", response_model=IntegrationResponse)
async def get_integration(
    integration_id: UUID,
    service: Annotated[IntegrationService, Depends(get_integration_service)],
) -> IntegrationResponse:
    integration = await service.get_integration(integration_id)
    return IntegrationResponse.model_validate(integration)


@router.patch("/{integration_id}/config", response_model=IntegrationResponse)
async def update_integration_config(
    integration_id: UUID,
    data: IntegrationConfigUpdate,
    service: Annotated[IntegrationService, Depends(get_integration_service)],
) -> IntegrationResponse:
    """Merge the given keys into the integration config."""
    integration = await service.update_config(integration_id, data.config)
    return IntegrationResponse.model_validate(integration)


@router.post("/{integration_id}/activate", response_model=IntegrationResponse)
async def activate_integration(
    integration_id: UUID,
    service: Annotated[IntegrationService, Depends(get_integration_service)],
) -> IntegrationResponse:
    integration = await service.activate(integration_id)
    return IntegrationResponse.model_validate(integration)


@router.post("/{integration_id}/disable", response_model=IntegrationResponse)
async def disable_integration(
    integration_id: UUID,
    service: Annotated[IntegrationService, Depends(get_integration_service)],
) -> IntegrationResponse:
    integration = await service.disable(integration_id)
    return IntegrationResponse.model_validate(integration)


@router.post("/{integration_id}/test", response_model=ConnectionTestResponse)
async def test_integration_connection(
    integration_id: UUID,
    service: Annotated[IntegrationService, Depends(get_integration_service)],
) -> ConnectionTestResponse:
    """Test the stored credentials against the directory provider."""
    try:
        await service.test_connection(integration_id)
    except InvalidCredentialsError as e:
        return ConnectionTestResponse(success=False, message=e.message)
    return ConnectionTestResponse(success=True, message="Connection successful")


@router.post("/{integration_id}/sync", response_model=DirectorySyncResponse)
async def sync_integration(
    integration_id: UUID,
    service: Annotated[IntegrationService, Depends(get_integration_service)],
) -> DirectorySyncResponse:
    """Run a full directory sync now.

    Per-record failures are reported in the result; a fatal failure
    is returned as an error response and recorded on the integration.
    """
    return await service.trigger_sync(integration_id)


@router.delete("/{integration_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_integration(
    integration_id: UUID,
    service: Annotated[IntegrationService, Depends(get_integration_service)],
) -> None:
    await service.delete_integration(integration_id)
