"""View state models for list synchronisation."""

import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from crmsync.client.errors import ApiError, NetworkFailure, ParseFailure, UsersApiError
from crmsync.customers.enums import SortField, Span
from crmsync.customers.models import Customer


class SearchState(str, Enum):
    """Debounced search lifecycle."""

    IDLE = "idle"  # No pending search change
    PENDING = "pending"  # Keystroke recorded, timer running
    COMMITTED = "committed"  # Timer elapsed, fetch being dispatched


class ViewQuery(BaseModel):
    """What a list view wants to display.

    ``page_index`` is 0-based like grid widgets; ``api_page`` is the
    1-based page number the Users API expects.
    """

    model_config = ConfigDict(frozen=True)

    page_index: int = Field(default=0, ge=0)
    page_size: int = Field(default=10, ge=1)
    search: str = Field(default="", description="Committed search term; empty means unfiltered")
    sort_field: SortField | None = SortField.FIRST_NAME
    span: Span | None = None

    @property
    def api_page(self) -> int:
        return self.page_index + 1

    def replace(self, **changes: Any) -> "ViewQuery":
        """Return a validated copy with ``changes`` applied."""
        return ViewQuery.model_validate({**self.model_dump(), **changes})


class ViewResult(BaseModel):
    """The materialised page for a ViewQuery."""

    model_config = ConfigDict(frozen=True)

    query: ViewQuery
    rows: list[Customer] = Field(default_factory=list)
    total_count: int = Field(default=0, ge=0)
    loading: bool = False
    error: str | None = None

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.query.page_size)


class FetchFailed(BaseModel):
    """Normalised failure of a list fetch; only the message reaches the view."""

    model_config = ConfigDict(frozen=True)

    message: str
    kind: str = Field(default="unknown", exclude=True)

    @classmethod
    def from_error(cls, error: UsersApiError) -> "FetchFailed":
        if isinstance(error, NetworkFailure):
            kind = "network"
        elif isinstance(error, ApiError):
            kind = "api"
        elif isinstance(error, ParseFailure):
            kind = "parse"
        else:
            kind = "unknown"
        return cls(message=error.message or "Failed to fetch users", kind=kind)
