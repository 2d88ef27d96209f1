"""Bootstrap module for wiring crmsync from configuration.

Creates the Users API client, the mutation service and list controllers
from settings, with logging configured. Every controller made through the
returned context is attached to the mutation service, so a write from any
editor refreshes every open list.

Example usage:

    from crmsync.bootstrap import bootstrap

    async with bootstrap() as ctx:
        customers = ctx.new_list_view("customers")
        await customers.load()
        await ctx.mutations.delete(customers.result.rows[0].id)
        await customers.settle()
"""

from dataclasses import dataclass, field

import httpx

from crmsync.client.client import UsersApiClient
from crmsync.config import Settings, get_settings
from crmsync.customers.service import CustomerMutations
from crmsync.listing.controller import ListSyncController
from crmsync.observability.logging import get_logger, setup_logging_from_config

logger = get_logger(__name__)


@dataclass
class BootstrapContext:
    """Client, mutation service and the list views created so far."""

    settings: Settings
    client: UsersApiClient
    mutations: CustomerMutations
    views: list[ListSyncController] = field(default_factory=list)

    def new_list_view(self, view_name: str = "users") -> ListSyncController:
        """Create a controller with configured defaults, refreshed on every mutation."""
        controller = ListSyncController.from_settings(
            self.client,
            self.settings.listing,
            view_name=view_name,
        )
        self.mutations.attach(controller)
        self.views.append(controller)
        return controller

    def close_view(self, controller: ListSyncController) -> None:
        """Tear down one view and stop refreshing it."""
        self.mutations.detach(controller)
        if controller in self.views:
            self.views.remove(controller)
        controller.close()

    async def aclose(self) -> None:
        for controller in list(self.views):
            self.close_view(controller)
        await self.client.close()

    async def __aenter__(self) -> "BootstrapContext":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()


def bootstrap(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> BootstrapContext:
    """Build a BootstrapContext from settings (loaded from config/ by default).

    Args:
        settings: Explicit settings; defaults to ``get_settings()``
        transport: Optional httpx transport, used to plug in test doubles
    """
    settings = settings or get_settings()
    setup_logging_from_config(settings.observability.logging)

    client = UsersApiClient.from_settings(settings.users_api, transport=transport)
    logger.info(
        "crmsync_bootstrapped",
        base_url=client.base_url,
        page_size=settings.listing.default_page_size,
        search_debounce_ms=settings.listing.search_debounce_ms,
    )
    return BootstrapContext(
        settings=settings,
        client=client,
        mutations=CustomerMutations(client),
    )
