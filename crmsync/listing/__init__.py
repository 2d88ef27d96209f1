"""List synchronisation: paginated, searchable, sortable views of the customer collection."""

from crmsync.listing.controller import (
    ControllerClosedError,
    ListSyncController,
    UsersSource,
)
from crmsync.listing.debounce import Debouncer
from crmsync.listing.models import FetchFailed, SearchState, ViewQuery, ViewResult

__all__ = [
    "ControllerClosedError",
    "Debouncer",
    "FetchFailed",
    "ListSyncController",
    "SearchState",
    "UsersSource",
    "ViewQuery",
    "ViewResult",
]
