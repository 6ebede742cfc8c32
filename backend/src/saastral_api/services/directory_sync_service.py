"""Directory sync engine.

Reconciles an organization's employees and departments against its identity
provider. Records are processed one at a time; a failure on one record is
collected into the result and the run continues. Only a missing integration
or a failed bulk listing aborts the run with ``SyncFailedError``.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from saastral_api.exceptions import SyncFailedError
from saastral_api.models.domain.department import Department
from saastral_api.models.domain.employee import Employee, EmployeeStatus
from saastral_api.models.domain.integration import Integration
from saastral_api.models.domain.provider import ExternalProvider, to_external_provider
from saastral_api.models.domain.value_objects import Email
from saastral_api.models.dto.directory import (
    DirectoryListOptions,
    DirectoryOrgUnit,
    DirectoryUser,
    DirectoryUserStatus,
)
from saastral_api.models.dto.sync import DirectorySyncResponse, SyncResult, SyncStats
from saastral_api.providers.base import DirectoryProvider
from saastral_api.repositories.department_repository import DepartmentRepository
from saastral_api.repositories.employee_repository import EmployeeRepository
from saastral_api.repositories.integration_repository import IntegrationRepository
from saastral_api.utils.secure_logging import log_error, log_warning

logger = logging.getLogger(__name__)

_STATUS_MAP: dict[str, EmployeeStatus] = {
    DirectoryUserStatus.ACTIVE: EmployeeStatus.ACTIVE,
    DirectoryUserStatus.SUSPENDED: EmployeeStatus.SUSPENDED,
    DirectoryUserStatus.ARCHIVED: EmployeeStatus.OFFBOARDED,
    DirectoryUserStatus.DELETED: EmployeeStatus.OFFBOARDED,
}


def map_directory_status(status: str) -> EmployeeStatus:
    """Map a directory status to an employee status.

    Unknown statuses fall back to active and are logged as a warning so they
    can be told apart from a confirmed active mapping.
    """
    mapped = _STATUS_MAP.get(status)
    if mapped is None:
        logger.warning(f"Unmapped directory status {status!r}, treating as active")
        return EmployeeStatus.ACTIVE
    return mapped


@dataclass
class _RecordError:
    type: str
    identifier: str
    message: str

    def __str__(self) -> str:
        return f"{self.type}:{self.identifier} - {self.message}"


class DirectorySyncService:
    """Service for synchronizing employees and departments from a directory."""

    def __init__(
        self,
        integration_repo: IntegrationRepository,
        employee_repo: EmployeeRepository,
        department_repo: DepartmentRepository,
        provider: DirectoryProvider,
    ) -> None:
        self.integration_repo = integration_repo
        self.employee_repo = employee_repo
        self.department_repo = department_repo
        self.provider = provider

    async def sync_directory(self, integration_id: UUID, organization_id: UUID) -> DirectorySyncResponse:
        """Sync departments first, then employees.

        A fatal department failure does not stop the employee sync; it is
        reported as a failed department result instead.

        Raises:
            SyncFailedError: If the employee run fails fatally
        """
        started_at = datetime.now(UTC)
        try:
            departments = await self.sync_departments(integration_id, organization_id)
        except SyncFailedError as e:
            departments = SyncResult(
                success=False,
                started_at=started_at,
                completed_at=datetime.now(UTC),
                errors=[str(_RecordError("departments", str(integration_id), e.reason))],
            )
        employees = await self.sync_employees(integration_id, organization_id)
        return DirectorySyncResponse(departments=departments, employees=employees)

    # =========================================================================
    # Employees
    # =========================================================================

    async def sync_employees(self, integration_id: UUID, organization_id: UUID) -> SyncResult:
        """Reconcile employees with the directory and record the outcome on the integration.

        Args:
            integration_id: Integration to sync
            organization_id: Organization owning the integration

        Returns:
            SyncResult; ``success`` is False when any record failed

        Raises:
            SyncFailedError: If the integration is missing or disabled, or the
                directory listing fails
        """
        started_at = datetime.now(UTC)
        integration = await self.integration_repo.find_by_id(integration_id)
        if integration is None:
            raise SyncFailedError(str(integration_id), "Integration not found")
        if integration.is_disabled():
            raise SyncFailedError(str(integration_id), "Integration is disabled")

        logger.info(f"Starting employee sync for integration {integration_id}")

        try:
            users = await self._fetch_all_users()
        except Exception as e:
            await self._record_fatal_error(integration, str(e))
            log_error(logger, f"Employee sync failed for integration {integration_id}", e)
            raise SyncFailedError(str(integration_id), str(e)) from e

        external_provider = to_external_provider(integration.provider)
        stats = SyncStats()
        errors: list[_RecordError] = []

        for user in users:
            try:
                async with self.employee_repo.savepoint():
                    outcome = await self._sync_employee(user, organization_id, external_provider)
                setattr(stats, outcome, getattr(stats, outcome) + 1)
            except Exception as e:
                stats.errors += 1
                errors.append(_RecordError("employee", user.email, str(e)))
                log_warning(logger, f"Failed to sync directory user {user.external_id}", e)

        result = SyncResult(
            success=not errors,
            started_at=started_at,
            completed_at=datetime.now(UTC),
            stats=stats,
            errors=[str(error) for error in errors],
        )

        if result.success:
            integration.record_sync_success(result)
        else:
            identifiers = ", ".join(error.identifier for error in errors)
            integration.record_sync_error(
                f"Sync completed with {len(errors)} errors: {identifiers}",
                result.completed_at,
            )
        await self.integration_repo.save(integration)

        logger.info(
            f"Employee sync finished for integration {integration_id}: "
            f"created={stats.created} updated={stats.updated} "
            f"skipped={stats.skipped} errors={stats.errors}"
        )
        return result

    async def _fetch_all_users(self) -> list[DirectoryUser]:
        users: list[DirectoryUser] = []
        page_token: str | None = None
        while True:
            page = await self.provider.list_users(
                DirectoryListOptions(include_deleted=True, page_token=page_token)
            )
            users.extend(page.items)
            page_token = page.next_page_token
            if not page_token:
                return users

    async def _sync_employee(
        self,
        user: DirectoryUser,
        organization_id: UUID,
        external_provider: ExternalProvider,
    ) -> str:
        """Create or update one employee; returns the stats field to bump."""
        email = Email.create(user.email)
        name = user.full_name.strip()
        target_status = map_directory_status(user.status)

        employee = await self.employee_repo.find_by_external_id(user.external_id, organization_id)
        if employee is None:
            employee = await self.employee_repo.find_by_email(email, organization_id)

        if employee is None:
            employee = Employee.create(
                organization_id,
                name,
                email,
                title=user.job_title,
                phone=user.phone_number,
                hired_at=user.start_date,
                external_id=user.external_id,
                external_provider=external_provider,
            )
            self._apply_status(employee, target_status)
            await self.employee_repo.save(employee)
            return "created"

        needs_update = (
            employee.name != name
            or employee.email != email
            or employee.status != target_status
        )
        if not needs_update:
            return "skipped"

        employee.update_name(name)
        employee.update_email(email)
        self._apply_status(employee, target_status)
        if not employee.has_external_id():
            employee.update_external_id(user.external_id, external_provider)
        await self.employee_repo.save(employee)
        return "updated"

    @staticmethod
    def _apply_status(employee: Employee, target: EmployeeStatus) -> None:
        # Only legal transitions are attempted; offboarded stays offboarded
        if target == EmployeeStatus.SUSPENDED and employee.status == EmployeeStatus.ACTIVE:
            employee.suspend()
        elif target == EmployeeStatus.OFFBOARDED and employee.status != EmployeeStatus.OFFBOARDED:
            employee.offboard()
        elif target == EmployeeStatus.ACTIVE and employee.status == EmployeeStatus.SUSPENDED:
            employee.reactivate()

    async def _record_fatal_error(self, integration: Integration, reason: str) -> None:
        try:
            integration.record_sync_error(reason)
            await self.integration_repo.save(integration)
        except Exception as e:
            log_error(logger, f"Failed to record sync error on integration {integration.id}", e)

    # =========================================================================
    # Departments
    # =========================================================================

    async def sync_departments(self, integration_id: UUID, organization_id: UUID) -> SyncResult:
        """Reconcile departments with the directory's org units.

        Units are processed shallowest first so a parent always exists before
        its children. Integration bookkeeping is left to the employee sync.

        Raises:
            SyncFailedError: If the integration is missing or disabled, or the
                org unit listing fails
        """
        started_at = datetime.now(UTC)
        integration = await self.integration_repo.find_by_id(integration_id)
        if integration is None:
            raise SyncFailedError(str(integration_id), "Integration not found")
        if integration.is_disabled():
            raise SyncFailedError(str(integration_id), "Integration is disabled")

        logger.info(f"Starting department sync for integration {integration_id}")

        try:
            org_units = await self.provider.list_org_units()
        except Exception as e:
            log_error(logger, f"Department sync failed for integration {integration_id}", e)
            raise SyncFailedError(str(integration_id), str(e)) from e

        external_provider = to_external_provider(integration.provider)
        stats = SyncStats()
        errors: list[_RecordError] = []
        # external_id -> local id, scoped to this run
        resolved_ids: dict[str, UUID] = {}

        for unit in sorted(org_units, key=lambda u: u.depth):
            try:
                async with self.department_repo.savepoint():
                    outcome = await self._sync_department(
                        unit, organization_id, external_provider, resolved_ids
                    )
                setattr(stats, outcome, getattr(stats, outcome) + 1)
            except Exception as e:
                stats.errors += 1
                errors.append(_RecordError("department", unit.name, str(e)))
                log_warning(logger, f"Failed to sync org unit {unit.external_id}", e)

        result = SyncResult(
            success=not errors,
            started_at=started_at,
            completed_at=datetime.now(UTC),
            stats=stats,
            errors=[str(error) for error in errors],
        )
        logger.info(
            f"Department sync finished for integration {integration_id}: "
            f"created={stats.created} updated={stats.updated} "
            f"skipped={stats.skipped} errors={stats.errors}"
        )
        return result

    async def _resolve_parent_id(
        self,
        parent_external_id: str,
        organization_id: UUID,
        external_provider: ExternalProvider,
        resolved_ids: dict[str, UUID],
    ) -> UUID | None:
        if parent_external_id in resolved_ids:
            return resolved_ids[parent_external_id]
        parent = await self.department_repo.find_by_external_id(
            organization_id, parent_external_id, external_provider
        )
        if parent is None:
            return None
        resolved_ids[parent_external_id] = parent.id
        return parent.id

    async def _sync_department(
        self,
        unit: DirectoryOrgUnit,
        organization_id: UUID,
        external_provider: ExternalProvider,
        resolved_ids: dict[str, UUID],
    ) -> str:
        name = unit.name.strip()
        parent_id = None
        if unit.parent_id:
            parent_id = await self._resolve_parent_id(
                unit.parent_id, organization_id, external_provider, resolved_ids
            )

        department = await self.department_repo.find_by_external_id(
            organization_id, unit.external_id, external_provider
        )

        if department is None:
            department = Department.create(
                organization_id,
                name,
                description=unit.description,
                parent_id=parent_id,
                external_id=unit.external_id,
                external_provider=external_provider,
                path=unit.path,
            )
            await self.department_repo.save(department)
            resolved_ids[unit.external_id] = department.id
            return "created"

        resolved_ids[unit.external_id] = department.id
        needs_update = (
            department.name != name
            or department.description != unit.description
            or (parent_id is not None and department.parent_id != parent_id)
            or department.path != unit.path
        )
        if not needs_update:
            return "skipped"

        department.update_name(name)
        department.update_description(unit.description)
        if parent_id is not None:
            department.update_parent(parent_id)
        department.update_path(unit.path)
        await self.department_repo.save(department)
        return "updated"
