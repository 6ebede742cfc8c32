"""Domain models package."""

from saastral_api.models.domain.credentials import ServiceAccountCredentials
from saastral_api.models.domain.department import Department
from saastral_api.models.domain.employee import Employee, EmployeeStatus
from saastral_api.models.domain.integration import Integration, IntegrationStatus, SyncStatus
from saastral_api.models.domain.provider import (
    ExternalProvider,
    IntegrationProvider,
    to_external_provider,
    to_integration_provider,
)
from saastral_api.models.domain.value_objects import BillingCycle, Email, Money

__all__ = [
    "BillingCycle",
    "Department",
    "Email",
    "Employee",
    "EmployeeStatus",
    "ExternalProvider",
    "Integration",
    "IntegrationProvider",
    "IntegrationStatus",
    "Money",
    "ServiceAccountCredentials",
    "SyncStatus",
    "to_external_provider",
    "to_integration_provider",
]
