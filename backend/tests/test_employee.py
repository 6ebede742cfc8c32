"""Tests for the Employee aggregate state machine."""

from datetime import date
from uuid import uuid4

import pytest

from saastral_api.exceptions import EmployeeAlreadyOffboardedError, InvalidEmployeeStatusError
from saastral_api.models.domain.employee import Employee, EmployeeStatus
from saastral_api.models.domain.provider import ExternalProvider
from saastral_api.models.domain.value_objects import Email, Money


def new_employee(**kwargs) -> Employee:
    return Employee.create(uuid4(), " Ann Lee ", Email.create("ann@example.com"), **kwargs)


class TestEmployeeCreate:
    """Creation defaults."""

    def test_new_employee_is_active(self) -> None:
        employee = new_employee(hired_at=date(2024, 3, 1))
        assert employee.status == EmployeeStatus.ACTIVE
        assert employee.name == "Ann Lee"
        assert employee.offboarded_at is None
        assert employee.created_at == employee.updated_at
        assert not employee.has_external_id()


class TestEmployeeTransitions:
    """active <-> suspended, anything -> offboarded once."""

    def test_suspend_and_reactivate(self) -> None:
        employee = new_employee()
        employee.suspend()
        assert employee.is_suspended()
        employee.reactivate()
        assert employee.is_active()

    def test_offboard_sets_timestamp(self) -> None:
        employee = new_employee()
        actor = uuid4()
        employee.offboard(actor)
        assert employee.is_offboarded()
        assert employee.offboarded_at is not None
        assert employee.updated_at == employee.offboarded_at
        assert employee.updated_by == actor

    def test_suspended_employee_can_be_offboarded(self) -> None:
        employee = new_employee()
        employee.suspend()
        employee.offboard()
        assert employee.is_offboarded()

    def test_suspend_requires_active(self) -> None:
        employee = new_employee()
        employee.suspend()
        with pytest.raises(InvalidEmployeeStatusError):
            employee.suspend()

    def test_reactivate_requires_suspended(self) -> None:
        with pytest.raises(InvalidEmployeeStatusError):
            new_employee().reactivate()

    def test_offboarded_is_terminal(self) -> None:
        employee = new_employee()
        employee.offboard()
        snapshot = (employee.status, employee.offboarded_at, employee.updated_at)

        with pytest.raises(EmployeeAlreadyOffboardedError):
            employee.offboard()
        with pytest.raises(InvalidEmployeeStatusError):
            employee.suspend()
        with pytest.raises(InvalidEmployeeStatusError):
            employee.reactivate()

        assert (employee.status, employee.offboarded_at, employee.updated_at) == snapshot


class TestEmployeeUpdates:
    """Unconditional setters."""

    def test_update_profile_keeps_missing_fields(self) -> None:
        employee = new_employee(title="Engineer", phone="123")
        employee.update_profile(title="Staff Engineer")
        assert employee.title == "Staff Engineer"
        assert employee.phone == "123"
        assert employee.name == "Ann Lee"

    def test_setters_refresh_updated_at(self) -> None:
        employee = new_employee()
        before = employee.updated_at
        department_id, manager_id = uuid4(), uuid4()

        employee.update_department(department_id)
        employee.update_manager(manager_id)
        employee.update_email(Email.create("ann.lee@example.com"))
        employee.update_external_id("g-1", ExternalProvider.GOOGLE)

        assert employee.updated_at >= before
        assert employee.department_id == department_id
        assert employee.manager_id == manager_id
        assert str(employee.email) == "ann.lee@example.com"
        assert employee.has_external_id()
        assert employee.external_provider == ExternalProvider.GOOGLE

    def test_metadata_is_merged_and_copied(self) -> None:
        employee = new_employee()
        employee.update_metadata({"a": 1})
        employee.update_metadata({"b": 2})
        metadata = employee.metadata
        metadata["c"] = 3
        assert employee.metadata == {"a": 1, "b": 2}

    def test_monthly_saas_cost(self) -> None:
        employee = new_employee()
        employee.update_monthly_saas_cost(Money.from_cents(4990))
        assert employee.monthly_saas_cost == Money.from_cents(4990)
