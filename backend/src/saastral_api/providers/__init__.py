"""Directory provider integrations package."""

from saastral_api.providers.base import DirectoryProvider, HTTPDirectoryProvider
from saastral_api.providers.factory import create_directory_provider
from saastral_api.providers.google_workspace import GoogleWorkspaceProvider
from saastral_api.providers.microsoft import MicrosoftProvider

__all__ = [
    "DirectoryProvider",
    "GoogleWorkspaceProvider",
    "HTTPDirectoryProvider",
    "MicrosoftProvider",
    "create_directory_provider",
]
