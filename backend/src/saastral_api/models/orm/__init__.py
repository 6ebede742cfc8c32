"""SQLAlchemy ORM models package."""

from saastral_api.models.orm.base import Base
from saastral_api.models.orm.department import DepartmentORM
from saastral_api.models.orm.employee import EmployeeORM
from saastral_api.models.orm.integration import IntegrationORM

__all__ = [
    "Base",
    "DepartmentORM",
    "EmployeeORM",
    "IntegrationORM",
]
