"""Domain-specific exceptions for the SaaStral API.

These exceptions keep service-layer and domain errors separate from HTTP
responses; the error handler middleware maps each family to a status code.
"""

from typing import Any


class SaaStralAPIError(Exception):
    """Base exception for all SaaStral API errors."""

    def __init__(self, message: str = "An error occurred", details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# =============================================================================
# Resource Not Found Errors (404)
# =============================================================================


class NotFoundError(SaaStralAPIError):
    """Base class for resource not found errors."""

    pass


class EmployeeNotFoundError(NotFoundError):
    """Raised when an employee cannot be found."""

    def __init__(self, employee_id: str | None = None) -> None:
        details = {"employee_id": str(employee_id)} if employee_id else {}
        super().__init__("Employee not found", details)


class DepartmentNotFoundError(NotFoundError):
    """Raised when a department cannot be found."""

    def __init__(self, department_id: str | None = None) -> None:
        details = {"department_id": str(department_id)} if department_id else {}
        super().__init__("Department not found", details)


class IntegrationNotFoundError(NotFoundError):
    """Raised when an integration cannot be found."""

    def __init__(self, integration_id: str | None = None) -> None:
        self.integration_id = str(integration_id) if integration_id else None
        details = {"integration_id": self.integration_id} if integration_id else {}
        super().__init__(f"Integration {integration_id} not found", details)


# =============================================================================
# Conflict Errors (409)
# =============================================================================


class ConflictError(SaaStralAPIError):
    """Base class for resource conflict errors."""

    pass


class EmployeeAlreadyExistsError(ConflictError):
    """Raised when an email is already used inside the organization."""

    def __init__(self, email: str, organization_id: str) -> None:
        super().__init__(
            "Employee with this email already exists",
            {"email": email, "organization_id": str(organization_id)},
        )


class IntegrationAlreadyExistsError(ConflictError):
    """Raised when the organization already has an integration for the provider."""

    def __init__(self, organization_id: str, provider: str) -> None:
        super().__init__(
            "Integration for this provider already exists",
            {"organization_id": str(organization_id), "provider": str(provider)},
        )


# =============================================================================
# Validation Errors (400)
# =============================================================================


class ValidationError(SaaStralAPIError):
    """Base class for validation errors."""

    pass


class InvalidEmailError(ValidationError):
    """Raised when an email address fails format validation."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid email format: {value}", {"value": value})


class InvalidMoneyAmountError(ValidationError):
    """Raised for negative amounts or division by zero."""

    pass


class CurrencyMismatchError(ValidationError):
    """Raised when combining amounts in different currencies."""

    def __init__(self, left: str, right: str) -> None:
        super().__init__(
            f"Cannot operate on different currencies: {left} and {right}",
            {"left": left, "right": right},
        )


class InvalidDepartmentError(ValidationError):
    """Raised when a department mutation breaks a basic rule."""

    pass


# =============================================================================
# Domain Rule Violations (409)
# =============================================================================


class DomainRuleError(SaaStralAPIError):
    """Base class for rejected state transitions."""

    pass


class EmployeeAlreadyOffboardedError(DomainRuleError):
    """Raised when offboarding an employee that is already offboarded."""

    def __init__(self, employee_id: str) -> None:
        super().__init__(
            f'Employee with id "{employee_id}" is already offboarded',
            {"employee_id": str(employee_id)},
        )


class InvalidEmployeeStatusError(DomainRuleError):
    """Raised when a status transition is not allowed from the current status."""

    def __init__(self, current_status: str, attempted_action: str) -> None:
        self.current_status = str(current_status)
        self.attempted_action = attempted_action
        super().__init__(
            f'Cannot {attempted_action} employee with status "{current_status}"',
            {"current_status": self.current_status, "action": attempted_action},
        )


class InvalidStatusTransitionError(DomainRuleError):
    """Raised when an integration cannot move to the requested status."""

    def __init__(self, current_status: str, target_status: str) -> None:
        self.current_status = str(current_status)
        self.target_status = str(target_status)
        super().__init__(
            f'Invalid status transition from "{current_status}" to "{target_status}"',
            {"current_status": self.current_status, "target_status": self.target_status},
        )


class IntegrationDisabledError(DomainRuleError):
    """Raised on sync bookkeeping against a disabled integration."""

    def __init__(self, integration_id: str) -> None:
        self.integration_id = str(integration_id)
        super().__init__(
            f'Integration "{integration_id}" is disabled',
            {"integration_id": self.integration_id},
        )


# =============================================================================
# Integration / Provider Errors
# =============================================================================


class IntegrationError(SaaStralAPIError):
    """Base class for failures talking to or syncing from a provider."""

    pass


class SyncFailedError(IntegrationError):
    """Raised when a whole sync run is aborted."""

    def __init__(self, integration_id: str, reason: str) -> None:
        self.integration_id = str(integration_id)
        self.reason = reason
        super().__init__(
            f'Sync failed for integration "{integration_id}": {reason}',
            {"integration_id": self.integration_id, "reason": reason},
        )


class InvalidCredentialsError(IntegrationError):
    """Raised when provider credentials are rejected or malformed."""

    def __init__(self, provider: str, reason: str) -> None:
        self.provider = str(provider)
        self.reason = reason
        super().__init__(
            f'Invalid credentials for provider "{provider}": {reason}',
            {"provider": self.provider},
        )


class ProviderConnectionError(IntegrationError):
    """Raised when a directory provider cannot be reached or answers with an error."""

    def __init__(self, provider: str, reason: str, status_code: int | None = None) -> None:
        self.provider = str(provider)
        self.reason = reason
        self.status_code = status_code
        details: dict[str, Any] = {"provider": self.provider}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(f'Failed to connect to provider "{provider}": {reason}', details)


class IntegrationConfigurationError(IntegrationError):
    """Raised when an integration is missing configuration needed to sync."""

    def __init__(self, provider: str, reason: str) -> None:
        self.provider = str(provider)
        self.reason = reason
        super().__init__(
            f'Invalid configuration for provider "{provider}": {reason}',
            {"provider": self.provider},
        )
