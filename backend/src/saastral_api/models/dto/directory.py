"""Records returned by directory providers."""

from datetime import date, datetime
from enum import StrEnum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class DirectoryUserStatus(StrEnum):
    """Status as reported by a directory provider."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    ARCHIVED = "archived"
    DELETED = "deleted"


class DirectoryUser(BaseModel):
    """A user record as seen in the remote directory."""

    external_id: str
    email: str
    full_name: str
    first_name: str | None = None
    last_name: str | None = None
    # Kept as a plain string so unknown provider statuses reach the sync engine
    status: str = DirectoryUserStatus.ACTIVE
    job_title: str | None = None
    department_id: str | None = None
    department_name: str | None = None
    manager_email: str | None = None
    phone_number: str | None = None
    start_date: date | None = None
    last_login_at: datetime | None = None
    suspended_at: datetime | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class DirectoryOrgUnit(BaseModel):
    """An organizational unit (department) in the remote directory."""

    external_id: str
    name: str
    path: str
    parent_id: str | None = None
    description: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def depth(self) -> int:
        """Number of non-empty path segments."""
        return len([segment for segment in self.path.split("/") if segment])


class DirectoryListOptions(BaseModel):
    """Options for listing directory users."""

    page_size: int | None = None
    page_token: str | None = None
    status: str | None = None
    department_id: str | None = None
    include_deleted: bool = False


class DirectoryListResult(BaseModel, Generic[T]):
    """One page of directory records."""

    items: list[T]
    next_page_token: str | None = None
    total_count: int | None = None
