"""Google Workspace directory provider (Admin SDK Directory API)."""

import logging
import time
from datetime import datetime
from typing import Any
from urllib.parse import quote

from jose import jwt

from saastral_api.config import get_settings
from saastral_api.exceptions import IntegrationConfigurationError
from saastral_api.models.domain.credentials import ServiceAccountCredentials
from saastral_api.models.dto.directory import (
    DirectoryListOptions,
    DirectoryListResult,
    DirectoryOrgUnit,
    DirectoryUser,
    DirectoryUserStatus,
)
from saastral_api.providers.base import DELETED_PAGE_PREFIX, HTTPDirectoryProvider

logger = logging.getLogger(__name__)

DIRECTORY_API_URL = "https://admin.googleapis.com/admin/directory/v1"
TOKEN_URL = "https://oauth2.googleapis.com/token"
DIRECTORY_SCOPES = (
    "https://www.googleapis.com/auth/admin.directory.user.readonly "
    "https://www.googleapis.com/auth/admin.directory.orgunit.readonly"
)
# Google reports "never logged in" as the epoch
NEVER_LOGGED_IN = "1970-01-01T00:00:00.000Z"


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value or value == NEVER_LOGGED_IN:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class GoogleWorkspaceProvider(HTTPDirectoryProvider):
    """Google Workspace integration for users and organizational units."""

    name = "google_workspace"

    def __init__(
        self,
        credentials: dict[str, Any],
        config: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize Google Workspace provider.

        Args:
            credentials: Dict with keys:
                Service Account mode:
                - service_account_json: Service account key (JSON string or dict)
                - admin_email: Admin email for domain-wide delegation

                OAuth mode:
                - refresh_token: OAuth2 refresh token
            config: Integration config; ``customer_id`` defaults to ``my_customer``
            **kwargs: Passed to HTTPDirectoryProvider (http_client, page_size, ...)
        """
        super().__init__(credentials, **kwargs)
        config = config or {}
        self.refresh_token = credentials.get("refresh_token")
        self.admin_email = credentials.get("admin_email") or config.get("admin_email")
        self.customer_id = config.get("customer_id") or credentials.get("customer_id") or "my_customer"
        self.service_account: ServiceAccountCredentials | None = None

        if not self.refresh_token:
            key_file = credentials.get("service_account_json")
            if not key_file:
                raise IntegrationConfigurationError(
                    self.name, "Either refresh_token or service_account_json is required"
                )
            if not self.admin_email:
                raise IntegrationConfigurationError(
                    self.name, "admin_email is required for domain-wide delegation"
                )
            self.service_account = ServiceAccountCredentials.from_json(key_file)

    async def _fetch_access_token(self) -> str:
        """Get OAuth access token using refresh token or service account."""
        if self.refresh_token:
            settings = get_settings()
            return await self._post_token_request(
                TOKEN_URL,
                {
                    "grant_type": "refresh_token",
                    "refresh_token": self.refresh_token,
                    "client_id": settings.google_client_id,
                    "client_secret": settings.google_client_secret,
                },
            )

        now = int(time.time())
        payload = {
            "iss": self.service_account.client_email,
            "sub": self.admin_email,
            "scope": DIRECTORY_SCOPES,
            "aud": TOKEN_URL,
            "iat": now,
            "exp": now + 3600,
        }
        signed_jwt = jwt.encode(payload, self.service_account.private_key, algorithm="RS256")
        return await self._post_token_request(
            TOKEN_URL,
            {
                "grant_type": "urn:ietf:params:oauth:grant-type:jwt-bearer",
                "assertion": signed_jwt,
            },
        )

    async def test_connection(self) -> None:
        """Test Google Workspace API connection."""
        await self._request(
            "GET",
            f"{DIRECTORY_API_URL}/users",
            params={"customer": self.customer_id, "maxResults": 1},
        )

    async def list_users(
        self, options: DirectoryListOptions | None = None
    ) -> DirectoryListResult[DirectoryUser]:
        """List one page of users.

        The Directory API returns deleted users only when ``showDeleted`` is
        set, so with ``include_deleted`` the active listing is paged first and
        then continues into the deleted listing through a prefixed page token.
        """
        options = options or DirectoryListOptions()
        page_token = options.page_token
        deleted_phase = bool(page_token and page_token.startswith(DELETED_PAGE_PREFIX))
        if deleted_phase:
            page_token = page_token[len(DELETED_PAGE_PREFIX):]

        params: dict[str, Any] = {
            "customer": self.customer_id,
            "maxResults": min(options.page_size or self.page_size, 500),
            "projection": "full",
            "orderBy": "email",
        }
        if page_token:
            params["pageToken"] = page_token
        if deleted_phase:
            params["showDeleted"] = "true"
        if options.department_id:
            params["query"] = f"orgUnitPath='{options.department_id}'"

        data = await self._request("GET", f"{DIRECTORY_API_URL}/users", params=params) or {}
        users = [self._map_user(user) for user in data.get("users", [])]
        if deleted_phase:
            users = [user.model_copy(update={"status": DirectoryUserStatus.DELETED}) for user in users]
        if options.status:
            users = [user for user in users if user.status == options.status]

        next_token = data.get("nextPageToken")
        if deleted_phase:
            next_token = f"{DELETED_PAGE_PREFIX}{next_token}" if next_token else None
        elif not next_token and options.include_deleted:
            next_token = DELETED_PAGE_PREFIX

        return DirectoryListResult[DirectoryUser](items=users, next_page_token=next_token)

    async def get_user_by_email(self, email: str) -> DirectoryUser | None:
        return await self._get_user(email)

    async def get_user_by_id(self, external_id: str) -> DirectoryUser | None:
        return await self._get_user(external_id)

    async def _get_user(self, user_key: str) -> DirectoryUser | None:
        data = await self._request(
            "GET",
            f"{DIRECTORY_API_URL}/users/{quote(user_key)}",
            params={"projection": "full"},
            allow_not_found=True,
        )
        return self._map_user(data) if data else None

    async def list_org_units(self) -> list[DirectoryOrgUnit]:
        data = await self._request(
            "GET",
            f"{DIRECTORY_API_URL}/customer/{self.customer_id}/orgunits",
            params={"type": "all"},
        ) or {}
        units = [self._map_org_unit(unit) for unit in data.get("organizationUnits", [])]
        logger.debug("Fetched %d org units from Google Workspace", len(units))
        return units

    async def get_org_unit_by_id(self, external_id: str) -> DirectoryOrgUnit | None:
        # The API addresses org units by path (without leading slash) or by "id:<orgUnitId>"
        if external_id.startswith("/"):
            key = quote(external_id.lstrip("/"))
        else:
            key = quote(f"id:{external_id}")
        data = await self._request(
            "GET",
            f"{DIRECTORY_API_URL}/customer/{self.customer_id}/orgunits/{key}",
            allow_not_found=True,
        )
        return self._map_org_unit(data) if data else None

    def _map_user(self, user: dict[str, Any]) -> DirectoryUser:
        """Map a Directory API user resource to a DirectoryUser."""
        primary_email = user["primaryEmail"]
        name = user.get("name") or {}
        primary_org = next(
            (org for org in user.get("organizations") or [] if org.get("primary")), None
        ) or {}
        primary_phone = next(
            (phone.get("value") for phone in user.get("phones") or [] if phone.get("primary")), None
        )
        manager_email = next(
            (
                relation.get("value")
                for relation in user.get("relations") or []
                if relation.get("type") == "manager" or relation.get("customType") == "manager"
            ),
            None,
        )

        if user.get("archived"):
            status = DirectoryUserStatus.ARCHIVED
        elif user.get("suspended"):
            status = DirectoryUserStatus.SUSPENDED
        else:
            status = DirectoryUserStatus.ACTIVE

        created = _parse_timestamp(user.get("creationTime"))

        return DirectoryUser(
            external_id=user["id"],
            email=primary_email,
            full_name=name.get("fullName") or primary_email,
            first_name=name.get("givenName"),
            last_name=name.get("familyName"),
            status=status,
            job_title=primary_org.get("title"),
            department_id=user.get("orgUnitPath"),
            department_name=primary_org.get("department"),
            manager_email=manager_email,
            phone_number=primary_phone,
            start_date=created.date() if created else None,
            last_login_at=_parse_timestamp(user.get("lastLoginTime")),
            metadata={
                "org_unit_path": user.get("orgUnitPath"),
                "thumbnail_photo_url": user.get("thumbnailPhotoUrl"),
                "suspension_reason": user.get("suspensionReason"),
                "is_admin": user.get("isAdmin", False),
            },
        )

    def _map_org_unit(self, unit: dict[str, Any]) -> DirectoryOrgUnit:
        """Map a Directory API org unit resource to a DirectoryOrgUnit.

        Units directly under the root ("/") have no parent. The parent is
        referenced by ``parentOrgUnitId`` so it matches the parent's external ID.
        """
        parent_id = None
        if unit.get("parentOrgUnitPath") and unit["parentOrgUnitPath"] != "/":
            parent_id = unit.get("parentOrgUnitId") or unit["parentOrgUnitPath"]

        return DirectoryOrgUnit(
            external_id=unit.get("orgUnitId") or unit["orgUnitPath"],
            name=unit["name"],
            path=unit["orgUnitPath"],
            parent_id=parent_id,
            description=unit.get("description") or None,
            metadata={"block_inheritance": unit.get("blockInheritance", False)},
        )
