"""Business logic services package."""

from saastral_api.services.directory_sync_service import DirectorySyncService
from saastral_api.services.employee_service import EmployeeService
from saastral_api.services.integration_service import IntegrationService

__all__ = [
    "DirectorySyncService",
    "EmployeeService",
    "IntegrationService",
]
