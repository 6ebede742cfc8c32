"""Integration DTOs."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from saastral_api.models.domain.integration import IntegrationStatus, SyncStatus
from saastral_api.models.domain.provider import IntegrationProvider


class IntegrationCreate(BaseModel):
    """Integration create DTO."""

    organization_id: UUID
    provider: IntegrationProvider
    credentials: dict[str, Any] = Field(min_length=1)
    config: dict[str, Any] = Field(default_factory=dict)
    created_by: UUID | None = None


class IntegrationConfigUpdate(BaseModel):
    """Partial config update, merged into the stored config."""

    config: dict[str, Any]


class IntegrationResponse(BaseModel):
    """Integration response DTO. Credentials are never returned."""

    id: UUID
    organization_id: UUID
    provider: IntegrationProvider
    status: IntegrationStatus
    config: dict[str, Any]
    last_sync_at: datetime | None = None
    last_sync_status: SyncStatus | None = None
    last_sync_error: str | None = None
    created_at: datetime
    updated_at: datetime
    created_by: UUID | None = None

    class Config:
        """Pydantic config."""

        from_attributes = True


class IntegrationListResponse(BaseModel):
    """Integration list response DTO."""

    items: list[IntegrationResponse]
    total: int


class ConnectionTestResponse(BaseModel):
    """Result of a provider connection test."""

    success: bool
    message: str
