"""Integration aggregate: one organization's connection to an identity provider."""

from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from saastral_api.exceptions import (
    IntegrationDisabledError,
    InvalidStatusTransitionError,
    ValidationError,
)
from saastral_api.models.domain.provider import IntegrationProvider

if TYPE_CHECKING:
    from saastral_api.models.dto.sync import SyncResult


class IntegrationStatus(StrEnum):
    """Lifecycle status of an integration."""

    PENDING = "pending"
    ACTIVE = "active"
    ERROR = "error"
    DISABLED = "disabled"


class SyncStatus(StrEnum):
    """Outcome of the last sync run."""

    SUCCESS = "success"
    ERROR = "error"


DEFAULT_OVERDUE_THRESHOLD_HOURS = 2


class Integration:
    """Integration aggregate.

    State machine (initial ``pending``)::

        pending  --activate()-->            active
        pending  --mark_as_error()-->       error
        error    --activate()-->            active
        error    --record_sync_success()--> active
        active   --record_sync_error()-->   error
        *        --disable()-->             disabled

    Once disabled, ``activate()`` raises ``InvalidStatusTransitionError`` and
    sync bookkeeping raises ``IntegrationDisabledError``.
    """

    def __init__(
        self,
        *,
        id: UUID,
        organization_id: UUID,
        provider: IntegrationProvider,
        status: IntegrationStatus,
        credentials: dict[str, Any],
        config: dict[str, Any],
        last_sync_at: datetime | None,
        last_sync_status: SyncStatus | None,
        last_sync_error: str | None,
        created_at: datetime,
        updated_at: datetime,
        created_by: UUID | None = None,
    ) -> None:
        self._id = id
        self._organization_id = organization_id
        self._provider = IntegrationProvider(provider)
        self._status = IntegrationStatus(status)
        self._credentials = dict(credentials)
        self._config = dict(config)
        self._last_sync_at = last_sync_at
        self._last_sync_status = SyncStatus(last_sync_status) if last_sync_status else None
        self._last_sync_error = last_sync_error
        self._created_at = created_at
        self._updated_at = updated_at
        self._created_by = created_by

    @classmethod
    def create(
        cls,
        organization_id: UUID,
        provider: IntegrationProvider,
        credentials: dict[str, Any],
        config: dict[str, Any] | None = None,
        created_by: UUID | None = None,
    ) -> "Integration":
        if not credentials:
            raise ValidationError("Integration credentials cannot be empty")
        now = datetime.now(UTC)
        return cls(
            id=uuid4(),
            organization_id=organization_id,
            provider=provider,
            status=IntegrationStatus.PENDING,
            credentials=credentials,
            config=config or {},
            last_sync_at=None,
            last_sync_status=None,
            last_sync_error=None,
            created_at=now,
            updated_at=now,
            created_by=created_by,
        )

    @classmethod
    def reconstitute(cls, **state: Any) -> "Integration":
        return cls(**state)

    # Accessors

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def organization_id(self) -> UUID:
        return self._organization_id

    @property
    def provider(self) -> IntegrationProvider:
        return self._provider

    @property
    def status(self) -> IntegrationStatus:
        return self._status

    @property
    def credentials(self) -> dict[str, Any]:
        return dict(self._credentials)

    @property
    def config(self) -> dict[str, Any]:
        return dict(self._config)

    @property
    def last_sync_at(self) -> datetime | None:
        return self._last_sync_at

    @property
    def last_sync_status(self) -> SyncStatus | None:
        return self._last_sync_status

    @property
    def last_sync_error(self) -> str | None:
        return self._last_sync_error

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    @property
    def created_by(self) -> UUID | None:
        return self._created_by

    # Queries

    def is_active(self) -> bool:
        return self._status == IntegrationStatus.ACTIVE

    def is_disabled(self) -> bool:
        return self._status == IntegrationStatus.DISABLED

    def has_error(self) -> bool:
        return self._status == IntegrationStatus.ERROR

    def is_sync_overdue(
        self,
        threshold_hours: int = DEFAULT_OVERDUE_THRESHOLD_HOURS,
        now: datetime | None = None,
    ) -> bool:
        """True if the integration never synced or last synced too long ago."""
        if self._last_sync_at is None:
            return True
        now = now or datetime.now(UTC)
        return now - self._last_sync_at > timedelta(hours=threshold_hours)

    def get_config_value(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    # Transitions

    def activate(self) -> None:
        if self._status == IntegrationStatus.DISABLED:
            raise InvalidStatusTransitionError(self._status, IntegrationStatus.ACTIVE)
        self._status = IntegrationStatus.ACTIVE
        self._touch()

    def disable(self) -> None:
        if self._status == IntegrationStatus.DISABLED:
            return
        self._status = IntegrationStatus.DISABLED
        self._touch()

    def mark_as_error(self, message: str) -> None:
        self._ensure_enabled()
        self._status = IntegrationStatus.ERROR
        self._last_sync_error = message
        self._touch()

    def record_sync_success(self, result: "SyncResult") -> None:
        self._ensure_enabled()
        self._status = IntegrationStatus.ACTIVE
        self._last_sync_status = SyncStatus.SUCCESS
        self._last_sync_error = None
        self._last_sync_at = result.completed_at
        self._touch()

    def record_sync_error(self, message: str, timestamp: datetime | None = None) -> None:
        self._ensure_enabled()
        self._status = IntegrationStatus.ERROR
        self._last_sync_status = SyncStatus.ERROR
        self._last_sync_error = message
        self._last_sync_at = timestamp or datetime.now(UTC)
        self._touch()

    # Configuration

    def update_config(self, config: dict[str, Any]) -> None:
        self._config = {**self._config, **config}
        self._touch()

    def update_credentials(self, credentials: dict[str, Any]) -> None:
        if not credentials:
            raise ValidationError("Integration credentials cannot be empty")
        self._credentials = dict(credentials)
        self._touch()

    def _ensure_enabled(self) -> None:
        if self._status == IntegrationStatus.DISABLED:
            raise IntegrationDisabledError(str(self._id))

    def _touch(self) -> None:
        self._updated_at = datetime.now(UTC)

    def __repr__(self) -> str:
        return f"<Integration {self._id} {self._provider} {self._status}>"
