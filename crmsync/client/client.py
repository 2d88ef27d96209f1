"""Async client for the Users Remote API.

Wraps ``httpx.AsyncClient`` and normalises every failure into the
``crmsync.client.errors`` hierarchy so callers never see transport or
parsing exceptions directly.
"""

from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from crmsync.client.errors import ApiError, NetworkFailure, ParseFailure
from crmsync.config.models.users_api import UsersApiConfig
from crmsync.customers.enums import SortField, Span
from crmsync.customers.models import Customer, CustomerCreate, MutationResult, UsersPage
from crmsync.customers.patch import CustomerPatch
from crmsync.observability.logging import get_logger

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def build_list_params(
    page: int,
    per_page: int,
    search: str | None = None,
    sort_by: SortField | str | None = None,
    span: Span | str | None = None,
) -> dict[str, str]:
    """Build the ``GET /users`` query string; unset optional params are omitted."""
    if page < 1:
        raise ValueError(f"API page numbers start at 1, got {page}")
    if per_page < 1:
        raise ValueError(f"per_page must be positive, got {per_page}")

    params = {"page": str(page), "perPage": str(per_page)}
    if search:
        params["search"] = search
    if sort_by:
        params["sortBy"] = SortField(sort_by).value
    if span:
        params["span"] = Span(span).value
    return params


class UsersApiClient:
    """Async client for the Users Remote API.

    Attributes:
        base_url: Base URL of the API, without the ``/users`` suffix
    """

    def __init__(
        self,
        base_url: str = "https://user-api.builder-io.workers.dev/api",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Base URL of the Users API
            timeout: Request timeout in seconds
            transport: Optional transport, used to plug in test doubles
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @classmethod
    def from_settings(
        cls,
        config: UsersApiConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "UsersApiClient":
        """Create a client from the ``users_api`` settings section."""
        return cls(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "UsersApiClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict | None = None,
        params: dict | None = None,
    ) -> Any:
        """Make an API request and return the decoded JSON body."""
        try:
            response = await self._client.request(
                method=method,
                url=path,
                json=json,
                params=params,
            )
        except httpx.RequestError as e:
            logger.warning("users_api_unreachable", method=method, path=path, error=str(e))
            raise NetworkFailure(f"Could not reach Users API: {e}", cause=e) from e

        if not response.is_success:
            message = self._error_message(response)
            logger.warning(
                "users_api_error",
                method=method,
                path=path,
                status_code=response.status_code,
                error=message,
            )
            raise ApiError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise ParseFailure(f"Users API returned invalid JSON for {method} {path}", cause=e) from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        fallback = f"HTTP {response.status_code}: {response.reason_phrase}"
        try:
            body = response.json()
        except ValueError:
            return fallback
        if isinstance(body, dict) and isinstance(body.get("error"), str):
            return body["error"]
        return fallback

    @staticmethod
    def _parse(model: type[ModelT], data: Any) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ParseFailure(
                f"Unexpected {model.__name__} payload: {e.error_count()} validation error(s)",
                cause=e,
            ) from e

    # Users
    async def list_users(
        self,
        page: int = 1,
        per_page: int = 10,
        search: str | None = None,
        sort_by: SortField | str | None = None,
        span: Span | str | None = None,
    ) -> UsersPage:
        """Fetch one page of customers.

        Args:
            page: 1-based page number
            per_page: Page size
            search: Free-text filter; omitted when empty
            sort_by: Sort field; omitted when unset
            span: Registration window; omitted when unset
        """
        params = build_list_params(page, per_page, search, sort_by, span)
        data = await self._request("GET", "/users", params=params)
        return self._parse(UsersPage, data)

    async def get_user(self, identifier: str) -> Customer:
        """Get one customer by uuid, username or email."""
        data = await self._request("GET", f"/users/{quote(identifier, safe='')}")
        return self._parse(Customer, data)

    async def create_user(self, payload: CustomerCreate) -> MutationResult:
        """Create a new customer."""
        data = await self._request(
            "POST",
            "/users",
            json=payload.model_dump(exclude_none=True),
        )
        return self._parse(MutationResult, data)

    async def update_user(self, customer_id: str, patch: CustomerPatch) -> MutationResult:
        """Send only the patched fields of a customer."""
        if not patch:
            raise ValueError("Refusing to send an empty patch")

        data = await self._request(
            "PUT",
            f"/users/{quote(customer_id, safe='')}",
            json=patch.to_payload(),
        )
        return self._parse(MutationResult, data)

    async def delete_user(self, customer_id: str) -> MutationResult:
        """Delete a customer."""
        data = await self._request("DELETE", f"/users/{quote(customer_id, safe='')}")
        return self._parse(MutationResult, data)
