"""Employee aggregate."""

from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any
from uuid import UUID, uuid4

from saastral_api.exceptions import EmployeeAlreadyOffboardedError, InvalidEmployeeStatusError
from saastral_api.models.domain.provider import ExternalProvider
from saastral_api.models.domain.value_objects import Email, Money


class EmployeeStatus(StrEnum):
    """Employee status enum."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    OFFBOARDED = "offboarded"


class Employee:
    """Employee aggregate.

    Attributes are read-only; every change goes through a method that
    refreshes ``updated_at``. Status transitions:

    - active <-> suspended
    - active | suspended -> offboarded (terminal)
    """

    def __init__(
        self,
        *,
        id: UUID,
        organization_id: UUID,
        name: str,
        email: Email,
        status: EmployeeStatus,
        title: str | None = None,
        phone: str | None = None,
        avatar_url: str | None = None,
        department_id: UUID | None = None,
        manager_id: UUID | None = None,
        hired_at: date | None = None,
        offboarded_at: datetime | None = None,
        external_id: str | None = None,
        external_provider: ExternalProvider | None = None,
        metadata: dict[str, Any] | None = None,
        monthly_saas_cost: Money | None = None,
        created_at: datetime,
        updated_at: datetime,
        created_by: UUID | None = None,
        updated_by: UUID | None = None,
    ) -> None:
        self._id = id
        self._organization_id = organization_id
        self._name = name
        self._email = email
        self._status = EmployeeStatus(status)
        self._title = title
        self._phone = phone
        self._avatar_url = avatar_url
        self._department_id = department_id
        self._manager_id = manager_id
        self._hired_at = hired_at
        self._offboarded_at = offboarded_at
        self._external_id = external_id
        self._external_provider = ExternalProvider(external_provider) if external_provider else None
        self._metadata = dict(metadata or {})
        self._monthly_saas_cost = monthly_saas_cost
        self._created_at = created_at
        self._updated_at = updated_at
        self._created_by = created_by
        self._updated_by = updated_by

    @classmethod
    def create(
        cls,
        organization_id: UUID,
        name: str,
        email: Email,
        *,
        title: str | None = None,
        phone: str | None = None,
        avatar_url: str | None = None,
        department_id: UUID | None = None,
        manager_id: UUID | None = None,
        hired_at: date | None = None,
        external_id: str | None = None,
        external_provider: ExternalProvider | None = None,
        monthly_saas_cost: Money | None = None,
        created_by: UUID | None = None,
    ) -> "Employee":
        """Create a new active employee."""
        now = datetime.now(UTC)
        return cls(
            id=uuid4(),
            organization_id=organization_id,
            name=name.strip(),
            email=email,
            status=EmployeeStatus.ACTIVE,
            title=title,
            phone=phone,
            avatar_url=avatar_url,
            department_id=department_id,
            manager_id=manager_id,
            hired_at=hired_at,
            external_id=external_id,
            external_provider=external_provider,
            monthly_saas_cost=monthly_saas_cost,
            created_at=now,
            updated_at=now,
            created_by=created_by,
            updated_by=created_by,
        )

    @classmethod
    def reconstitute(cls, **state: Any) -> "Employee":
        """Rebuild from persisted state without re-validating it."""
        return cls(**state)

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def organization_id(self) -> UUID:
        return self._organization_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def email(self) -> Email:
        return self._email

    @property
    def status(self) -> EmployeeStatus:
        return self._status

    @property
    def title(self) -> str | None:
        return self._title

    @property
    def phone(self) -> str | None:
        return self._phone

    @property
    def avatar_url(self) -> str | None:
        return self._avatar_url

    @property
    def department_id(self) -> UUID | None:
        return self._department_id

    @property
    def manager_id(self) -> UUID | None:
        return self._manager_id

    @property
    def hired_at(self) -> date | None:
        return self._hired_at

    @property
    def offboarded_at(self) -> datetime | None:
        return self._offboarded_at

    @property
    def external_id(self) -> str | None:
        return self._external_id

    @property
    def external_provider(self) -> ExternalProvider | None:
        return self._external_provider

    @property
    def metadata(self) -> dict[str, Any]:
        return dict(self._metadata)

    @property
    def monthly_saas_cost(self) -> Money | None:
        return self._monthly_saas_cost

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    @property
    def created_by(self) -> UUID | None:
        return self._created_by

    @property
    def updated_by(self) -> UUID | None:
        return self._updated_by

    def is_active(self) -> bool:
        return self._status == EmployeeStatus.ACTIVE

    def is_suspended(self) -> bool:
        return self._status == EmployeeStatus.SUSPENDED

    def is_offboarded(self) -> bool:
        return self._status == EmployeeStatus.OFFBOARDED

    def has_external_id(self) -> bool:
        return bool(self._external_id)

    # Status transitions

    def offboard(self, updated_by: UUID | None = None) -> None:
        """Offboard the employee.

        Raises:
            EmployeeAlreadyOffboardedError: If already offboarded
        """
        if self._status == EmployeeStatus.OFFBOARDED:
            raise EmployeeAlreadyOffboardedError(str(self._id))
        now = datetime.now(UTC)
        self._status = EmployeeStatus.OFFBOARDED
        self._offboarded_at = now
        self._touch(updated_by, now)

    def suspend(self, updated_by: UUID | None = None) -> None:
        if self._status != EmployeeStatus.ACTIVE:
            raise InvalidEmployeeStatusError(self._status, "suspend")
        self._status = EmployeeStatus.SUSPENDED
        self._touch(updated_by)

    def reactivate(self, updated_by: UUID | None = None) -> None:
        if self._status != EmployeeStatus.SUSPENDED:
            raise InvalidEmployeeStatusError(self._status, "reactivate")
        self._status = EmployeeStatus.ACTIVE
        self._touch(updated_by)

    # Field updates

    def update_profile(
        self,
        *,
        name: str | None = None,
        title: str | None = None,
        phone: str | None = None,
        avatar_url: str | None = None,
        updated_by: UUID | None = None,
    ) -> None:
        """Update the given profile fields; None leaves a field as is."""
        if name is not None:
            self._name = name.strip()
        if title is not None:
            self._title = title
        if phone is not None:
            self._phone = phone
        if avatar_url is not None:
            self._avatar_url = avatar_url
        self._touch(updated_by)

    def update_name(self, name: str, updated_by: UUID | None = None) -> None:
        self._name = name.strip()
        self._touch(updated_by)

    def update_email(self, email: Email, updated_by: UUID | None = None) -> None:
        self._email = email
        self._touch(updated_by)

    def update_department(self, department_id: UUID | None, updated_by: UUID | None = None) -> None:
        self._department_id = department_id
        self._touch(updated_by)

    def update_manager(self, manager_id: UUID | None, updated_by: UUID | None = None) -> None:
        self._manager_id = manager_id
        self._touch(updated_by)

    def update_external_id(
        self,
        external_id: str,
        provider: ExternalProvider,
        updated_by: UUID | None = None,
    ) -> None:
        self._external_id = external_id
        self._external_provider = ExternalProvider(provider)
        self._touch(updated_by)

    def update_monthly_saas_cost(self, cost: Money | None, updated_by: UUID | None = None) -> None:
        self._monthly_saas_cost = cost
        self._touch(updated_by)

    def update_metadata(self, metadata: dict[str, Any], updated_by: UUID | None = None) -> None:
        self._metadata = {**self._metadata, **metadata}
        self._touch(updated_by)

    def _touch(self, updated_by: UUID | None = None, now: datetime | None = None) -> None:
        self._updated_at = now or datetime.now(UTC)
        if updated_by is not None:
            self._updated_by = updated_by

    def __repr__(self) -> str:
        return f"<Employee {self._id} {self._email} {self._status}>"
