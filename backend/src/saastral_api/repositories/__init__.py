"""Repositories package."""

from saastral_api.repositories.base import BaseRepository
from saastral_api.repositories.department_repository import DepartmentRepository
from saastral_api.repositories.employee_repository import EmployeeRepository
from saastral_api.repositories.integration_repository import IntegrationRepository

__all__ = [
    "BaseRepository",
    "DepartmentRepository",
    "EmployeeRepository",
    "IntegrationRepository",
]
