"""Tests for the Google Workspace directory provider against a mocked Directory API."""

import asyncio
from datetime import date

import httpx
import pytest

from saastral_api.exceptions import (
    IntegrationConfigurationError,
    InvalidCredentialsError,
    ProviderConnectionError,
)
from saastral_api.models.dto.directory import DirectoryListOptions, DirectoryUserStatus
from saastral_api.providers.base import DELETED_PAGE_PREFIX
from saastral_api.providers.google_workspace import GoogleWorkspaceProvider

USER_RESOURCE = {
    "id": "1001",
    "primaryEmail": "ann@example.com",
    "name": {"fullName": "Ann Lee", "givenName": "Ann", "familyName": "Lee"},
    "suspended": False,
    "archived": False,
    "orgUnitPath": "/Engineering",
    "organizations": [
        {"title": "Intern", "department": "Old", "primary": False},
        {"title": "Engineer", "department": "Engineering", "primary": True},
    ],
    "phones": [{"value": "+55 11 5555", "primary": True}],
    "relations": [{"type": "manager", "value": "boss@example.com"}],
    "creationTime": "2023-02-01T10:00:00.000Z",
    "lastLoginTime": "1970-01-01T00:00:00.000Z",
}


class DirectoryAPI:
    """Routes mocked requests and records what was asked."""

    def __init__(self, routes: dict[str, list[httpx.Response]]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "oauth2.googleapis.com":
            return httpx.Response(200, json={"access_token": "access", "expires_in": 3600})
        responses = self.routes[request.url.path]
        return responses.pop(0) if len(responses) > 1 else responses[0]

    def api_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host != "oauth2.googleapis.com"]


def run(api: DirectoryAPI, call):
    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(api)) as client:
            provider = GoogleWorkspaceProvider(
                {"refresh_token": "refresh"}, http_client=client, retry_delay=0
            )
            return await call(provider)

    return asyncio.run(_run())


USERS_PATH = "/admin/directory/v1/users"
ORG_UNITS_PATH = "/admin/directory/v1/customer/my_customer/orgunits"


class TestConfiguration:
    """Credential validation at construction time."""

    def test_requires_refresh_token_or_service_account(self) -> None:
        with pytest.raises(IntegrationConfigurationError):
            GoogleWorkspaceProvider({})

    def test_service_account_requires_admin_email(self) -> None:
        with pytest.raises(IntegrationConfigurationError):
            GoogleWorkspaceProvider({"service_account_json": "{}"})

    def test_malformed_service_account_key(self) -> None:
        with pytest.raises(InvalidCredentialsError):
            GoogleWorkspaceProvider(
                {"service_account_json": "{not json", "admin_email": "admin@example.com"}
            )

    def test_customer_id_from_config(self) -> None:
        provider = GoogleWorkspaceProvider({"refresh_token": "r"}, config={"customer_id": "C0abc"})
        assert provider.customer_id == "C0abc"


class TestListUsers:
    """User listing and mapping."""

    def test_maps_user_resource(self) -> None:
        api = DirectoryAPI({USERS_PATH: [httpx.Response(200, json={"users": [USER_RESOURCE]})]})

        page = run(api, lambda p: p.list_users())

        user = page.items[0]
        assert user.external_id == "1001"
        assert user.email == "ann@example.com"
        assert user.full_name == "Ann Lee"
        assert user.status == DirectoryUserStatus.ACTIVE
        assert user.job_title == "Engineer"
        assert user.department_name == "Engineering"
        assert user.department_id == "/Engineering"
        assert user.manager_email == "boss@example.com"
        assert user.phone_number == "+55 11 5555"
        assert user.start_date == date(2023, 2, 1)
        assert user.last_login_at is None
        assert page.next_page_token is None
        assert api.api_requests()[0].headers["Authorization"] == "Bearer access"

    @pytest.mark.parametrize(
        ("flags", "expected"),
        [
            ({"suspended": True}, DirectoryUserStatus.SUSPENDED),
            ({"archived": True}, DirectoryUserStatus.ARCHIVED),
            ({"archived": True, "suspended": True}, DirectoryUserStatus.ARCHIVED),
        ],
    )
    def test_status_flags(self, flags, expected) -> None:
        resource = {**USER_RESOURCE, **flags}
        api = DirectoryAPI({USERS_PATH: [httpx.Response(200, json={"users": [resource]})]})

        page = run(api, lambda p: p.list_users())

        assert page.items[0].status == expected

    def test_include_deleted_continues_into_deleted_listing(self) -> None:
        api = DirectoryAPI(
            {
                USERS_PATH: [
                    httpx.Response(200, json={"users": [USER_RESOURCE]}),
                    httpx.Response(
                        200,
                        json={"users": [{**USER_RESOURCE, "id": "1002", "primaryEmail": "gone@example.com"}]},
                    ),
                ]
            }
        )

        async def walk(provider):
            first = await provider.list_users(DirectoryListOptions(include_deleted=True))
            second = await provider.list_users(
                DirectoryListOptions(include_deleted=True, page_token=first.next_page_token)
            )
            return first, second

        first, second = run(api, walk)

        assert first.next_page_token == DELETED_PAGE_PREFIX
        assert second.next_page_token is None
        assert second.items[0].email == "gone@example.com"
        assert second.items[0].status == DirectoryUserStatus.DELETED
        first_request, second_request = api.api_requests()
        assert "showDeleted" not in first_request.url.params
        assert second_request.url.params["showDeleted"] == "true"
        assert "pageToken" not in second_request.url.params

    def test_page_tokens_are_passed_through(self) -> None:
        api = DirectoryAPI(
            {USERS_PATH: [httpx.Response(200, json={"users": [], "nextPageToken": "abc"})]}
        )

        page = run(api, lambda p: p.list_users(DirectoryListOptions(page_token="xyz", page_size=50)))

        assert page.next_page_token == "abc"
        params = api.api_requests()[0].url.params
        assert params["pageToken"] == "xyz"
        assert params["maxResults"] == "50"
        assert params["customer"] == "my_customer"


class TestOrgUnits:
    """Org unit listing."""

    def test_maps_hierarchy(self) -> None:
        units = [
            {
                "orgUnitId": "id:eng",
                "name": "Engineering",
                "orgUnitPath": "/Engineering",
                "parentOrgUnitId": "id:root",
                "parentOrgUnitPath": "/",
            },
            {
                "orgUnitId": "id:backend",
                "name": "Backend",
                "orgUnitPath": "/Engineering/Backend",
                "parentOrgUnitId": "id:eng",
                "parentOrgUnitPath": "/Engineering",
                "description": "APIs",
            },
        ]
        api = DirectoryAPI({ORG_UNITS_PATH: [httpx.Response(200, json={"organizationUnits": units})]})

        engineering, backend = run(api, lambda p: p.list_org_units())

        assert engineering.parent_id is None
        assert engineering.depth == 1
        assert backend.parent_id == "id:eng"
        assert backend.external_id == "id:backend"
        assert backend.description == "APIs"
        assert backend.depth == 2

    def test_empty_directory(self) -> None:
        api = DirectoryAPI({ORG_UNITS_PATH: [httpx.Response(200, json={})]})
        assert run(api, lambda p: p.list_org_units()) == []


class TestRequestHandling:
    """Retries and error mapping."""

    def test_retries_server_errors(self) -> None:
        api = DirectoryAPI(
            {
                USERS_PATH: [
                    httpx.Response(503),
                    httpx.Response(429, headers={"Retry-After": "0"}),
                    httpx.Response(200, json={"users": [USER_RESOURCE]}),
                ]
            }
        )

        page = run(api, lambda p: p.list_users())

        assert len(page.items) == 1
        assert len(api.api_requests()) == 3

    def test_gives_up_after_max_retries(self) -> None:
        api = DirectoryAPI({USERS_PATH: [httpx.Response(500)]})

        with pytest.raises(ProviderConnectionError):
            run(api, lambda p: p.list_users())

        assert len(api.api_requests()) == 5

    def test_unauthorized_is_invalid_credentials(self) -> None:
        api = DirectoryAPI({USERS_PATH: [httpx.Response(401)]})

        with pytest.raises(InvalidCredentialsError):
            run(api, lambda p: p.test_connection())

    def test_missing_user_is_none(self) -> None:
        api = DirectoryAPI({f"{USERS_PATH}/nobody@example.com": [httpx.Response(404)]})

        assert run(api, lambda p: p.get_user_by_email("nobody@example.com")) is None

    def test_rejected_token_request(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": "invalid_grant"})

        async def _run():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                provider = GoogleWorkspaceProvider({"refresh_token": "expired"}, http_client=client)
                await provider.test_connection()

        with pytest.raises(InvalidCredentialsError):
            asyncio.run(_run())
