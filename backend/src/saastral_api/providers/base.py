"""Directory provider interface."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from saastral_api.exceptions import InvalidCredentialsError, ProviderConnectionError
from saastral_api.models.dto.directory import (
    DirectoryListOptions,
    DirectoryListResult,
    DirectoryOrgUnit,
    DirectoryUser,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 500
MAX_RETRIES = 5
RETRY_DELAY = 1.0  # Seconds, doubled on every attempt
# Page tokens carrying this prefix walk the deleted-users listing
DELETED_PAGE_PREFIX = "deleted:"


class DirectoryProvider(ABC):
    """Abstract base class for identity directory integrations."""

    name: str = "directory"

    @abstractmethod
    async def test_connection(self) -> None:
        """Verify credentials and reachability.

        Raises:
            InvalidCredentialsError: If the provider rejects the credentials
            ProviderConnectionError: If the provider cannot be reached
        """

    @abstractmethod
    async def list_users(
        self, options: DirectoryListOptions | None = None
    ) -> DirectoryListResult[DirectoryUser]:
        """List one page of directory users.

        Args:
            options: Paging and filter options

        Returns:
            Page of users plus the token of the next page (None on the last page)
        """

    @abstractmethod
    async def list_org_units(self) -> list[DirectoryOrgUnit]:
        """List every organizational unit in the directory."""

    @abstractmethod
    async def get_user_by_email(self, email: str) -> DirectoryUser | None:
        """Get a single user by primary email, or None."""

    @abstractmethod
    async def get_user_by_id(self, external_id: str) -> DirectoryUser | None:
        """Get a single user by provider ID, or None."""

    @abstractmethod
    async def get_org_unit_by_id(self, external_id: str) -> DirectoryOrgUnit | None:
        """Get a single organizational unit by provider ID, or None."""

    async def aclose(self) -> None:
        """Release network resources held by the provider."""


class HTTPDirectoryProvider(DirectoryProvider):
    """Shared plumbing for providers talking to a JSON REST API over httpx.

    Handles bearer token caching, retries with exponential backoff on
    429 / 5xx / timeouts (honouring ``Retry-After``) and maps failures to
    ``InvalidCredentialsError`` / ``ProviderConnectionError``.
    """

    def __init__(
        self,
        credentials: dict[str, Any],
        http_client: httpx.AsyncClient | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_retries: int = MAX_RETRIES,
        retry_delay: float = RETRY_DELAY,
    ) -> None:
        self.credentials = credentials
        self.page_size = page_size
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=30.0)
        self._access_token: str | None = None

    @abstractmethod
    async def _fetch_access_token(self) -> str:
        """Obtain a fresh access token from the provider's token endpoint."""

    async def _get_access_token(self) -> str:
        if self._access_token:
            return self._access_token
        try:
            self._access_token = await self._fetch_access_token()
        except httpx.HTTPStatusError as e:
            raise InvalidCredentialsError(
                self.name, f"Token request rejected with HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderConnectionError(self.name, "Token endpoint unreachable") from e
        return self._access_token

    async def _post_token_request(self, url: str, data: dict[str, Any]) -> str:
        response = await self._client.post(url, data=data, timeout=10.0)
        response.raise_for_status()
        return response.json()["access_token"]

    def _retry_delay(self, attempt: int, response: httpx.Response | None = None) -> float:
        if response is not None and response.headers.get("Retry-After"):
            try:
                return float(response.headers["Retry-After"])
            except ValueError:
                pass
        return self.retry_delay * (2**attempt)

    async def _request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        allow_not_found: bool = False,
    ) -> dict[str, Any] | None:
        """Send an authenticated request with retries.

        Args:
            method: HTTP method
            url: Absolute URL
            params: Query parameters
            allow_not_found: Return None on 404 instead of raising

        Returns:
            Decoded JSON body, or None for an allowed 404

        Raises:
            InvalidCredentialsError: On 401 / 403
            ProviderConnectionError: On other failures once retries are exhausted
        """
        for attempt in range(self.max_retries):
            token = await self._get_access_token()
            try:
                response = await self._client.request(
                    method,
                    url,
                    params=params,
                    headers={"Authorization": f"Bearer {token}"},
                )
            except (httpx.TimeoutException, httpx.TransportError) as e:
                if attempt < self.max_retries - 1:
                    delay = self._retry_delay(attempt)
                    logger.warning("%s request failed (%s), retrying in %ss", self.name, type(e).__name__, delay)
                    await asyncio.sleep(delay)
                    continue
                raise ProviderConnectionError(self.name, f"{type(e).__name__} after {self.max_retries} attempts") from e

            if response.status_code == 404 and allow_not_found:
                return None

            if response.status_code in (401, 403):
                self._access_token = None
                raise InvalidCredentialsError(self.name, f"Request rejected with HTTP {response.status_code}")

            if response.status_code == 429 or response.status_code >= 500:
                if attempt < self.max_retries - 1:
                    delay = self._retry_delay(attempt, response)
                    logger.warning("%s returned HTTP %s, retrying in %ss", self.name, response.status_code, delay)
                    await asyncio.sleep(delay)
                    continue
                raise ProviderConnectionError(
                    self.name,
                    f"HTTP {response.status_code} after {self.max_retries} attempts",
                    status_code=response.status_code,
                )

            if response.status_code >= 400:
                raise ProviderConnectionError(
                    self.name, f"HTTP {response.status_code}", status_code=response.status_code
                )

            return response.json()

        raise ProviderConnectionError(self.name, "No attempts made")

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
