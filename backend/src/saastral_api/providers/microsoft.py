"""Microsoft 365 / Entra ID directory provider (Microsoft Graph)."""

from datetime import datetime
from typing import Any
from urllib.parse import quote

from saastral_api.exceptions import IntegrationConfigurationError
from saastral_api.models.dto.directory import (
    DirectoryListOptions,
    DirectoryListResult,
    DirectoryOrgUnit,
    DirectoryUser,
    DirectoryUserStatus,
)
from saastral_api.providers.base import DELETED_PAGE_PREFIX, HTTPDirectoryProvider

USER_FIELDS = (
    "id,mail,userPrincipalName,displayName,givenName,surname,accountEnabled,"
    "jobTitle,department,mobilePhone,businessPhones,employeeHireDate,createdDateTime"
)


def _odata_literal(value: str) -> str:
    return value.replace("'", "''")


class MicrosoftProvider(HTTPDirectoryProvider):
    """Microsoft 365 integration for directory users.

    Graph has no org unit tree; each distinct ``department`` value becomes a
    single-level org unit whose external ID is the department name.
    """

    name = "microsoft_365"

    GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
    LOGIN_URL = "https://login.microsoftonline.com"

    def __init__(
        self,
        credentials: dict[str, Any],
        config: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize Microsoft provider.

        Args:
            credentials: Dict with keys:
                - tenant_id: Entra ID tenant ID
                - client_id: Application (client) ID
                - client_secret: Client secret
            config: Integration config (unused by this provider)
            **kwargs: Passed to HTTPDirectoryProvider (http_client, page_size, ...)
        """
        super().__init__(credentials, **kwargs)
        self.tenant_id = credentials.get("tenant_id")
        self.client_id = credentials.get("client_id")
        self.client_secret = credentials.get("client_secret")
        if not (self.tenant_id and self.client_id and self.client_secret):
            raise IntegrationConfigurationError(
                self.name, "tenant_id, client_id and client_secret are required"
            )

    async def _fetch_access_token(self) -> str:
        """Get OAuth access token using client credentials flow."""
        return await self._post_token_request(
            f"{self.LOGIN_URL}/{self.tenant_id}/oauth2/v2.0/token",
            {
                "grant_type": "client_credentials",
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "scope": "https://graph.microsoft.com/.default",
            },
        )

    async def test_connection(self) -> None:
        await self._request("GET", f"{self.GRAPH_BASE_URL}/users", params={"$top": 1, "$select": "id"})

    async def list_users(
        self, options: DirectoryListOptions | None = None
    ) -> DirectoryListResult[DirectoryUser]:
        """List one page of users.

        Graph pages through ``@odata.nextLink`` URLs, which are used as page
        tokens verbatim. With ``include_deleted`` the listing continues into
        ``directory/deletedItems`` once the active users are exhausted.
        """
        options = options or DirectoryListOptions()
        page_token = options.page_token
        deleted_phase = bool(page_token and page_token.startswith(DELETED_PAGE_PREFIX))
        if deleted_phase:
            page_token = page_token[len(DELETED_PAGE_PREFIX):]

        if page_token:
            # nextLink already carries every query parameter
            url, params = page_token, None
        else:
            base = "directory/deletedItems/microsoft.graph.user" if deleted_phase else "users"
            url = f"{self.GRAPH_BASE_URL}/{base}"
            params = {
                "$top": min(options.page_size or self.page_size, 999),
                "$select": USER_FIELDS,
            }
            if not deleted_phase:
                params["$expand"] = "manager($select=mail,userPrincipalName)"
            if options.department_id:
                params["$filter"] = f"department eq '{_odata_literal(options.department_id)}'"

        data = await self._request("GET", url, params=params) or {}
        status = DirectoryUserStatus.DELETED if deleted_phase else None
        users = [self._map_user(user, status) for user in data.get("value", [])]
        if options.status:
            users = [user for user in users if user.status == options.status]

        next_token = data.get("@odata.nextLink")
        if deleted_phase:
            next_token = f"{DELETED_PAGE_PREFIX}{next_token}" if next_token else None
        elif not next_token and options.include_deleted:
            next_token = DELETED_PAGE_PREFIX

        return DirectoryListResult[DirectoryUser](items=users, next_page_token=next_token)

    async def get_user_by_email(self, email: str) -> DirectoryUser | None:
        # userPrincipalName works as a key; fall back to a mail filter
        user = await self._get_user(email)
        if user is not None:
            return user
        data = await self._request(
            "GET",
            f"{self.GRAPH_BASE_URL}/users",
            params={"$filter": f"mail eq '{_odata_literal(email)}'", "$select": USER_FIELDS},
        ) or {}
        matches = data.get("value", [])
        return self._map_user(matches[0]) if matches else None

    async def get_user_by_id(self, external_id: str) -> DirectoryUser | None:
        return await self._get_user(external_id)

    async def _get_user(self, user_key: str) -> DirectoryUser | None:
        data = await self._request(
            "GET",
            f"{self.GRAPH_BASE_URL}/users/{quote(user_key)}",
            params={"$select": USER_FIELDS, "$expand": "manager($select=mail,userPrincipalName)"},
            allow_not_found=True,
        )
        return self._map_user(data) if data else None

    async def list_org_units(self) -> list[DirectoryOrgUnit]:
        departments: set[str] = set()
        url: str | None = f"{self.GRAPH_BASE_URL}/users"
        params: dict[str, Any] | None = {"$select": "department", "$top": 999}
        while url:
            data = await self._request("GET", url, params=params) or {}
            for user in data.get("value", []):
                if user.get("department") and user["department"].strip():
                    departments.add(user["department"].strip())
            url, params = data.get("@odata.nextLink"), None

        return [
            DirectoryOrgUnit(external_id=name, name=name, path=f"/{name}")
            for name in sorted(departments)
        ]

    async def get_org_unit_by_id(self, external_id: str) -> DirectoryOrgUnit | None:
        for unit in await self.list_org_units():
            if unit.external_id == external_id:
                return unit
        return None

    def _map_user(
        self,
        user: dict[str, Any],
        status: DirectoryUserStatus | None = None,
    ) -> DirectoryUser:
        """Map a Graph user resource to a DirectoryUser."""
        email = user.get("mail") or user.get("userPrincipalName") or ""
        if status is None:
            if user.get("accountEnabled") is False:
                status = DirectoryUserStatus.SUSPENDED
            else:
                status = DirectoryUserStatus.ACTIVE

        manager = user.get("manager") or {}
        hire_date = user.get("employeeHireDate")
        phones = user.get("businessPhones") or []

        return DirectoryUser(
            external_id=user["id"],
            email=email,
            full_name=user.get("displayName") or email,
            first_name=user.get("givenName"),
            last_name=user.get("surname"),
            status=status,
            job_title=user.get("jobTitle"),
            department_id=user.get("department"),
            department_name=user.get("department"),
            manager_email=manager.get("mail") or manager.get("userPrincipalName"),
            phone_number=user.get("mobilePhone") or (phones[0] if phones else None),
            start_date=datetime.fromisoformat(hire_date.replace("Z", "+00:00")).date() if hire_date else None,
            metadata={
                "user_principal_name": user.get("userPrincipalName"),
                "created_date_time": user.get("createdDateTime"),
            },
        )
