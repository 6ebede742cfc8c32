"""Data Transfer Objects package."""

from saastral_api.models.dto.directory import (
    DirectoryListOptions,
    DirectoryListResult,
    DirectoryOrgUnit,
    DirectoryUser,
    DirectoryUserStatus,
)
from saastral_api.models.dto.employee import (
    EmployeeCreate,
    EmployeeResponse,
    EmployeeStatusChange,
    EmployeeUpdate,
)
from saastral_api.models.dto.integration import (
    ConnectionTestResponse,
    IntegrationConfigUpdate,
    IntegrationCreate,
    IntegrationListResponse,
    IntegrationResponse,
)
from saastral_api.models.dto.sync import DirectorySyncResponse, SyncResult, SyncStats

__all__ = [
    "ConnectionTestResponse",
    "DirectoryListOptions",
    "DirectoryListResult",
    "DirectoryOrgUnit",
    "DirectorySyncResponse",
    "DirectoryUser",
    "DirectoryUserStatus",
    "EmployeeCreate",
    "EmployeeResponse",
    "EmployeeStatusChange",
    "EmployeeUpdate",
    "IntegrationConfigUpdate",
    "IntegrationCreate",
    "IntegrationListResponse",
    "IntegrationResponse",
    "SyncResult",
    "SyncStats",
]
