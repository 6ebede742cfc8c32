"""Department aggregate."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from saastral_api.exceptions import InvalidDepartmentError
from saastral_api.models.domain.provider import ExternalProvider


class Department:
    """A node in an organization's department tree.

    Only self-parenting is rejected here. Remote hierarchies are trusted and
    the sync order keeps parents ahead of their children.
    """

    def __init__(
        self,
        *,
        id: UUID,
        organization_id: UUID,
        name: str,
        description: str | None = None,
        parent_id: UUID | None = None,
        external_id: str | None = None,
        external_provider: ExternalProvider | None = None,
        path: str | None = None,
        metadata: dict[str, Any] | None = None,
        created_at: datetime,
        updated_at: datetime,
        created_by: UUID | None = None,
        updated_by: UUID | None = None,
    ) -> None:
        self._id = id
        self._organization_id = organization_id
        self._name = name
        self._description = description
        self._parent_id = parent_id
        self._external_id = external_id
        self._external_provider = ExternalProvider(external_provider) if external_provider else None
        self._path = path
        self._metadata = dict(metadata or {})
        self._created_at = created_at
        self._updated_at = updated_at
        self._created_by = created_by
        self._updated_by = updated_by

    @classmethod
    def create(
        cls,
        organization_id: UUID,
        name: str,
        *,
        description: str | None = None,
        parent_id: UUID | None = None,
        external_id: str | None = None,
        external_provider: ExternalProvider | None = None,
        path: str | None = None,
        created_by: UUID | None = None,
    ) -> "Department":
        if not name or not name.strip():
            raise InvalidDepartmentError("Department name cannot be empty")
        now = datetime.now(UTC)
        return cls(
            id=uuid4(),
            organization_id=organization_id,
            name=name.strip(),
            description=description,
            parent_id=parent_id,
            external_id=external_id,
            external_provider=external_provider,
            path=path,
            created_at=now,
            updated_at=now,
            created_by=created_by,
            updated_by=created_by,
        )

    @classmethod
    def reconstitute(cls, **state: Any) -> "Department":
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
    def description(self) -> str | None:
        return self._description

    @property
    def parent_id(self) -> UUID | None:
        return self._parent_id

    @property
    def external_id(self) -> str | None:
        return self._external_id

    @property
    def external_provider(self) -> ExternalProvider | None:
        return self._external_provider

    @property
    def path(self) -> str | None:
        return self._path

    @property
    def metadata(self) -> dict[str, Any]:
        return dict(self._metadata)

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

    @property
    def is_root(self) -> bool:
        return self._parent_id is None

    @property
    def depth(self) -> int:
        """Number of non-empty segments in the path ("/Eng/Backend" is 2)."""
        if not self._path:
            return 0
        return len([segment for segment in self._path.split("/") if segment])

    def update_name(self, name: str, updated_by: UUID | None = None) -> None:
        if not name or not name.strip():
            raise InvalidDepartmentError("Department name cannot be empty")
        self._name = name.strip()
        self._touch(updated_by)

    def update_description(self, description: str | None, updated_by: UUID | None = None) -> None:
        self._description = description
        self._touch(updated_by)

    def update_parent(self, parent_id: UUID | None, updated_by: UUID | None = None) -> None:
        if parent_id is not None and parent_id == self._id:
            raise InvalidDepartmentError(
                "Department cannot be its own parent", {"department_id": str(self._id)}
            )
        self._parent_id = parent_id
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

    def clear_external_id(self, updated_by: UUID | None = None) -> None:
        self._external_id = None
        self._external_provider = None
        self._touch(updated_by)

    def update_path(self, path: str | None, updated_by: UUID | None = None) -> None:
        self._path = path
        self._touch(updated_by)

    def update_metadata(self, metadata: dict[str, Any], updated_by: UUID | None = None) -> None:
        self._metadata = {**self._metadata, **metadata}
        self._touch(updated_by)

    def _touch(self, updated_by: UUID | None = None) -> None:
        self._updated_at = datetime.now(UTC)
        if updated_by is not None:
            self._updated_by = updated_by

    def __repr__(self) -> str:
        return f"<Department {self._id} {self._name!r}>"
