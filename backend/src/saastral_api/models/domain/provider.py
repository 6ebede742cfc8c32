"""Identity provider enums and the canonical mapping between them."""

from enum import StrEnum


class IntegrationProvider(StrEnum):
    """Provider an organization connects an integration to."""

    GOOGLE_WORKSPACE = "google_workspace"
    MICROSOFT_365 = "microsoft_365"
    OKTA = "okta"
    KEYCLOAK = "keycloak"


class ExternalProvider(StrEnum):
    """Provider tag stored on employees and departments imported from a directory."""

    GOOGLE = "google"
    MICROSOFT = "microsoft"
    OKTA = "okta"
    KEYCLOAK = "keycloak"


_TO_EXTERNAL: dict[IntegrationProvider, ExternalProvider] = {
    IntegrationProvider.GOOGLE_WORKSPACE: ExternalProvider.GOOGLE,
    IntegrationProvider.MICROSOFT_365: ExternalProvider.MICROSOFT,
    IntegrationProvider.OKTA: ExternalProvider.OKTA,
    IntegrationProvider.KEYCLOAK: ExternalProvider.KEYCLOAK,
}
_TO_INTEGRATION: dict[ExternalProvider, IntegrationProvider] = {
    external: integration for integration, external in _TO_EXTERNAL.items()
}


def to_external_provider(provider: IntegrationProvider | str) -> ExternalProvider:
    """Map an integration provider to the tag stored on imported records."""
    return _TO_EXTERNAL[IntegrationProvider(provider)]


def to_integration_provider(provider: ExternalProvider | str) -> IntegrationProvider:
    """Map a stored external provider tag back to its integration provider."""
    return _TO_INTEGRATION[ExternalProvider(provider)]
