"""Tests for EmployeeService with an in-memory repository."""

import asyncio
from uuid import uuid4

import pytest

from conftest import FakeEmployeeRepository, make_employee
from saastral_api.exceptions import (
    EmployeeAlreadyExistsError,
    EmployeeAlreadyOffboardedError,
    EmployeeNotFoundError,
)
from saastral_api.models.domain.employee import EmployeeStatus
from saastral_api.models.dto.employee import EmployeeCreate, EmployeeResponse, EmployeeUpdate
from saastral_api.services.employee_service import EmployeeService


@pytest.fixture
def service(employee_repo: FakeEmployeeRepository) -> EmployeeService:
    service = EmployeeService(session=None)
    service.employee_repo = employee_repo
    return service


class TestEmployeeService:
    """Manual employee management."""

    def test_create_normalizes_email(self, service, organization_id) -> None:
        data = EmployeeCreate(organization_id=organization_id, email="Ann@Example.com", name="Ann Lee")

        employee = asyncio.run(service.create_employee(data))

        assert str(employee.email) == "ann@example.com"
        assert employee.status == EmployeeStatus.ACTIVE

    def test_duplicate_email_in_organization(self, service, employee_repo, organization_id) -> None:
        employee_repo.add(make_employee(organization_id, "ann@example.com"))
        data = EmployeeCreate(organization_id=organization_id, email="ANN@example.com", name="Ann")

        with pytest.raises(EmployeeAlreadyExistsError):
            asyncio.run(service.create_employee(data))

    def test_employee_of_other_organization_is_not_found(
        self, service, employee_repo, organization_id
    ) -> None:
        employee = employee_repo.add(make_employee(organization_id, "ann@example.com"))

        with pytest.raises(EmployeeNotFoundError):
            asyncio.run(service.get_employee(employee.id, uuid4()))

    def test_update_applies_only_sent_fields(self, service, employee_repo, organization_id) -> None:
        employee = employee_repo.add(make_employee(organization_id, "ann@example.com"))
        department_id = uuid4()
        employee.update_manager(uuid4())
        manager_id = employee.manager_id

        asyncio.run(
            service.update_employee(
                employee.id,
                EmployeeUpdate(
                    organization_id=organization_id, title="Lead", department_id=department_id
                ),
            )
        )

        assert employee.title == "Lead"
        assert employee.department_id == department_id
        assert employee.manager_id == manager_id

    def test_offboard_twice(self, service, employee_repo, organization_id) -> None:
        employee = employee_repo.add(make_employee(organization_id, "ann@example.com"))

        asyncio.run(service.offboard_employee(employee.id, organization_id))
        with pytest.raises(EmployeeAlreadyOffboardedError):
            asyncio.run(service.offboard_employee(employee.id, organization_id))

    def test_suspend_and_reactivate(self, service, employee_repo, organization_id) -> None:
        employee = employee_repo.add(make_employee(organization_id, "ann@example.com"))

        asyncio.run(service.suspend_employee(employee.id, organization_id))
        assert employee.status == EmployeeStatus.SUSPENDED
        asyncio.run(service.reactivate_employee(employee.id, organization_id))
        assert employee.status == EmployeeStatus.ACTIVE

    def test_response_from_domain(self, organization_id) -> None:
        employee = make_employee(organization_id, "ann@example.com", external_id="g-1")

        response = EmployeeResponse.from_domain(employee)

        assert response.email == "ann@example.com"
        assert response.external_provider == "google"
        assert response.monthly_saas_cost_cents is None
