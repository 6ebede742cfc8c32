"""Sync run result DTOs."""

from datetime import datetime

from pydantic import BaseModel, Field, computed_field


class SyncStats(BaseModel):
    """Per-run counters."""

    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0


class SyncResult(BaseModel):
    """Outcome of one directory sync run.

    Each entry of ``errors`` reads ``"<type>:<identifier> - <message>"``.
    """

    success: bool
    started_at: datetime
    completed_at: datetime
    stats: SyncStats = Field(default_factory=SyncStats)
    errors: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def duration_ms(self) -> int:
        return int((self.completed_at - self.started_at).total_seconds() * 1000)


class DirectorySyncResponse(BaseModel):
    """Both results of a full directory sync."""

    departments: SyncResult
    employees: SyncResult
