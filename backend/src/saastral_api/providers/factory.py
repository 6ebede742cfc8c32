"""Build directory providers for integrations."""

import httpx

from saastral_api.config import get_settings
from saastral_api.exceptions import IntegrationConfigurationError
from saastral_api.models.domain.integration import Integration
from saastral_api.models.domain.provider import IntegrationProvider
from saastral_api.providers.base import DirectoryProvider
from saastral_api.providers.google_workspace import GoogleWorkspaceProvider
from saastral_api.providers.microsoft import MicrosoftProvider

PROVIDER_CLASSES: dict[IntegrationProvider, type[GoogleWorkspaceProvider | MicrosoftProvider]] = {
    IntegrationProvider.GOOGLE_WORKSPACE: GoogleWorkspaceProvider,
    IntegrationProvider.MICROSOFT_365: MicrosoftProvider,
}


def create_directory_provider(
    integration: Integration,
    http_client: httpx.AsyncClient | None = None,
) -> DirectoryProvider:
    """Instantiate the directory client for an integration.

    Args:
        integration: Integration holding decrypted credentials and config
        http_client: Optional shared client (tests inject a mock transport here)

    Returns:
        DirectoryProvider instance

    Raises:
        IntegrationConfigurationError: If no client exists for the provider or
            its credentials are incomplete
    """
    provider_class = PROVIDER_CLASSES.get(integration.provider)
    if provider_class is None:
        raise IntegrationConfigurationError(
            integration.provider, "Directory sync is not available for this provider yet"
        )

    return provider_class(
        integration.credentials,
        integration.config,
        http_client=http_client,
        page_size=get_settings().directory_page_size,
    )
