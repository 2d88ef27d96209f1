"""List synchronisation controller.

Keeps one displayed page of customers consistent with user-driven paging,
search and sort changes, and with mutations performed elsewhere. Every list
view composes one controller instead of re-deriving the fetch logic.

Usage:
    controller = ListSyncController(client, page_size=25)
    controller.subscribe(render)
    await controller.load()

    controller.set_search_term("bo")   # no fetch yet
    controller.set_search_term("bob")  # restarts the debounce timer
    controller.set_page(2)             # fetches API page 3
    ...
    controller.close()
"""

import asyncio
import time
from collections.abc import Callable
from typing import Protocol
from uuid import uuid4

from crmsync.client.errors import UsersApiError
from crmsync.config.models.listing import ListingConfig
from crmsync.customers.enums import SortField, Span
from crmsync.customers.models import UsersPage
from crmsync.listing.debounce import Debouncer
from crmsync.listing.models import FetchFailed, SearchState, ViewQuery, ViewResult
from crmsync.observability.logging import get_logger
from crmsync.observability.metrics import (
    FETCH_COUNT,
    FETCH_LATENCY,
    SEARCH_COMMITS,
    STALE_RESPONSES,
)

logger = get_logger(__name__)

Listener = Callable[[ViewResult], None]


class UsersSource(Protocol):
    """The part of the Users API client a controller depends on."""

    async def list_users(
        self,
        page: int = 1,
        per_page: int = 10,
        search: str | None = None,
        sort_by: SortField | str | None = None,
        span: Span | str | None = None,
    ) -> UsersPage: ...


class ControllerClosedError(RuntimeError):
    """Raised when a closed controller is asked to fetch."""


class ListSyncController:
    """Owns the ViewQuery/ViewResult pair of one list view.

    Fetches run as asyncio tasks. Each is tagged with a sequence number and
    only the most recently issued fetch may update the visible result, so a
    slow reply to an old query can never overwrite a newer page.
    """

    def __init__(
        self,
        client: UsersSource,
        *,
        page_size: int = 10,
        sort_field: SortField | str | None = SortField.FIRST_NAME,
        span: Span | str | None = None,
        search_debounce_seconds: float = 0.5,
        view_name: str = "users",
    ):
        """Initialize controller. No request is made until ``load()``.

        Args:
            client: Users API client (or any UsersSource)
            page_size: Initial rows per page
            sort_field: Initial sort field
            span: Initial registration window filter
            search_debounce_seconds: Quiet period before a search term is committed
            view_name: Name bound to log events
        """
        self._client = client
        self._query = ViewQuery(
            page_size=page_size,
            sort_field=SortField(sort_field) if sort_field else None,
            span=Span(span) if span else None,
        )
        self._result = ViewResult(query=self._query)
        self._search_input = ""
        self._debouncer: Debouncer[str] = Debouncer(search_debounce_seconds, self._commit_search)
        self._sequence = 0
        self._inflight: asyncio.Task[ViewResult] | None = None
        self._listeners: list[Listener] = []
        self._closed = False
        self._log = logger.bind(view=view_name, view_id=uuid4().hex[:8])

    @classmethod
    def from_settings(
        cls,
        client: UsersSource,
        config: ListingConfig,
        view_name: str = "users",
    ) -> "ListSyncController":
        """Create a controller using the ``listing`` settings section."""
        return cls(
            client,
            page_size=config.default_page_size,
            sort_field=config.default_sort_field,
            search_debounce_seconds=config.search_debounce_seconds,
            view_name=view_name,
        )

    @property
    def query(self) -> ViewQuery:
        return self._query

    @property
    def result(self) -> ViewResult:
        return self._result

    @property
    def search_input(self) -> str:
        """Raw search box contents, updated on every keystroke."""
        return self._search_input

    @property
    def search_state(self) -> SearchState:
        return self._debouncer.state

    @property
    def closed(self) -> bool:
        return self._closed

    # Input handlers

    def load(self) -> asyncio.Task[ViewResult]:
        """Fetch the current query; used when the view mounts."""
        return self._dispatch("load")

    def set_page(self, page_index: int) -> asyncio.Task[ViewResult]:
        """Show another page of the current query. Search and sort are kept."""
        self._ensure_open()
        if page_index < 0:
            raise ValueError(f"page_index must be >= 0, got {page_index}")

        self._query = self._query.replace(page_index=page_index)
        return self._dispatch("page")

    def set_page_size(self, size: int) -> asyncio.Task[ViewResult]:
        """Change rows per page and go back to the first page."""
        self._ensure_open()
        if size < 1:
            raise ValueError(f"page size must be positive, got {size}")

        self._query = self._query.replace(page_size=size, page_index=0)
        return self._dispatch("page_size")

    def set_search_term(self, text: str) -> None:
        """Record a keystroke; the fetch happens once typing pauses."""
        self._ensure_open()
        self._search_input = text
        self._debouncer.trigger(text)

    def set_sort_field(self, field: SortField | str) -> asyncio.Task[ViewResult]:
        """Sort by another field and go back to the first page.

        Raises:
            ValueError: If ``field`` is not a sortable field
        """
        self._ensure_open()
        self._query = self._query.replace(sort_field=SortField(field), page_index=0)
        return self._dispatch("sort")

    def set_span(self, span: Span | str | None) -> asyncio.Task[ViewResult]:
        """Restrict to customers registered within a week or month (None clears)."""
        self._ensure_open()
        self._query = self._query.replace(span=Span(span) if span else None, page_index=0)
        return self._dispatch("span")

    def refresh(self) -> asyncio.Task[ViewResult]:
        """Re-issue the fetch for the current query unchanged."""
        return self._dispatch("refresh")

    def notify_mutation_succeeded(self) -> asyncio.Task[ViewResult] | None:
        """Resynchronise after a create, update or delete made elsewhere.

        A closed controller ignores the notification and returns None.
        """
        if self._closed:
            self._log.debug("mutation_notification_ignored")
            return None
        return self.refresh()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with every new ViewResult.

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def settle(self) -> ViewResult:
        """Wait for the pending search commit and the latest fetch to finish."""
        while True:
            await self._debouncer.wait()
            task = self._inflight
            if task is None or task.done():
                return self._result
            await asyncio.wait({task})

    def close(self) -> None:
        """Tear down the view: drop the pending search and ignore late replies."""
        if self._closed:
            return

        self._closed = True
        dropped = self._debouncer.cancel()
        self._listeners.clear()
        self._log.debug("controller_closed", dropped_pending_search=dropped)

    async def aclose(self) -> None:
        """Close and wait for the debounce timer cancellation to complete."""
        await self._debouncer.aclose()
        self.close()

    # Internals

    def _ensure_open(self) -> None:
        if self._closed:
            raise ControllerClosedError("List controller has been closed")

    def _commit_search(self, term: str) -> None:
        if self._closed:
            return

        self._query = self._query.replace(search=term, page_index=0)
        SEARCH_COMMITS.inc()
        self._log.debug("search_committed", search=term)
        self._dispatch("search")

    def _dispatch(self, reason: str) -> asyncio.Task[ViewResult]:
        self._ensure_open()

        self._sequence += 1
        sequence = self._sequence
        query = self._query

        self._publish(self._result.model_copy(update={"loading": True, "error": None, "query": query}))
        self._log.debug(
            "fetch_dispatched",
            reason=reason,
            sequence=sequence,
            api_page=query.api_page,
            page_size=query.page_size,
            search=query.search,
            sort_field=query.sort_field.value if query.sort_field else None,
        )

        task = asyncio.get_running_loop().create_task(self._fetch(sequence, query))
        self._inflight = task
        return task

    async def _fetch(self, sequence: int, query: ViewQuery) -> ViewResult:
        started = time.perf_counter()
        try:
            page = await self._client.list_users(
                page=query.api_page,
                per_page=query.page_size,
                search=query.search or None,
                sort_by=query.sort_field,
                span=query.span,
            )
        except UsersApiError as e:
            failure = FetchFailed.from_error(e)
            outcome = "error"
            result = ViewResult(query=query, error=failure.message)
        except Exception:
            FETCH_LATENCY.observe(time.perf_counter() - started)
            self._log.exception("fetch_crashed", sequence=sequence)
            if sequence == self._sequence and not self._closed:
                FETCH_COUNT.labels(outcome="crashed").inc()
                self._publish(self._result.model_copy(update={"loading": False}))
            raise
        else:
            failure = None
            outcome = "success"
            result = ViewResult(query=query, rows=page.data, total_count=page.total)
        FETCH_LATENCY.observe(time.perf_counter() - started)

        if sequence != self._sequence or self._closed:
            STALE_RESPONSES.inc()
            self._log.debug(
                "stale_response_discarded",
                sequence=sequence,
                latest_sequence=self._sequence,
                closed=self._closed,
            )
            return self._result

        FETCH_COUNT.labels(outcome=outcome).inc()
        if failure is not None:
            self._log.warning(
                "fetch_failed",
                sequence=sequence,
                kind=failure.kind,
                error=failure.message,
            )
        else:
            self._log.debug(
                "fetch_succeeded",
                sequence=sequence,
                rows=len(result.rows),
                total_count=result.total_count,
            )

        self._publish(result)
        return result

    def _publish(self, result: ViewResult) -> None:
        self._result = result
        for listener in list(self._listeners):
            listener(result)
