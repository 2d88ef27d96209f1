"""Tests for wiring crmsync from settings."""

import json

import httpx
import pytest

from crmsync.bootstrap import bootstrap
from crmsync.config import Settings
from crmsync.customers.enums import SortField
from tests.factories import page_payload


class FakeUsersApi:
    """Serves a shrinking user list over httpx.MockTransport."""

    def __init__(self, total: int) -> None:
        self.total = total
        self.requests: list[httpx.Request] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "DELETE":
            self.total -= 1
            return httpx.Response(200, json={"success": True, "message": "User deleted"})

        per_page = int(request.url.params["perPage"])
        count = min(per_page, self.total)
        return httpx.Response(200, content=json.dumps(page_payload(count, total=self.total, per_page=per_page)))


@pytest.fixture
def api() -> FakeUsersApi:
    return FakeUsersApi(total=12)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        users_api={"base_url": "https://users.test/api"},
        listing={"default_page_size": 5, "search_debounce_ms": 10, "default_sort_field": "location.city"},
        observability={"logging": {"level": "WARNING", "format": "console"}},
    )


class TestBootstrap:
    """bootstrap() builds a client, mutation service and list views."""

    async def test_client_uses_configured_base_url(self, settings, api) -> None:
        ctx = bootstrap(settings, transport=httpx.MockTransport(api.handle))
        assert ctx.client.base_url == "https://users.test/api"
        await ctx.aclose()

    async def test_view_uses_listing_defaults(self, settings, api) -> None:
        async with bootstrap(settings, transport=httpx.MockTransport(api.handle)) as ctx:
            view = ctx.new_list_view("customers")
            await view.load()

        params = api.requests[0].url.params
        assert params["page"] == "1"
        assert params["perPage"] == "5"
        assert params["sortBy"] == SortField.CITY.value
        assert view.result.total_count == 12
        assert view.closed is True

    async def test_delete_refreshes_every_view(self, settings, api) -> None:
        async with bootstrap(settings, transport=httpx.MockTransport(api.handle)) as ctx:
            first = ctx.new_list_view("customers")
            second = ctx.new_list_view("dashboard")
            await first.load()
            await second.load()

            await ctx.mutations.delete(first.result.rows[0].id)
            await first.settle()
            await second.settle()

            assert first.result.total_count == 11
            assert second.result.total_count == 11
        assert [r.method for r in api.requests].count("GET") == 4

    async def test_closed_view_is_no_longer_refreshed(self, settings, api) -> None:
        async with bootstrap(settings, transport=httpx.MockTransport(api.handle)) as ctx:
            view = ctx.new_list_view()
            await view.load()
            ctx.close_view(view)

            await ctx.mutations.delete("c-0")

            assert view.closed is True
            assert view.result.total_count == 12
            assert ctx.views == []
