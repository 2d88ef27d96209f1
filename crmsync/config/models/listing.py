"""List view configuration."""

from pydantic import BaseModel, Field

from crmsync.customers.enums import SortField


class ListingConfig(BaseModel):
    """Defaults applied to every list controller built from settings."""

    default_page_size: int = Field(default=10, ge=1, le=500, description="Rows per page")
    search_debounce_ms: int = Field(
        default=500,
        ge=0,
        description="Quiet period before a typed search term is committed",
    )
    default_sort_field: SortField | None = Field(
        default=SortField.FIRST_NAME,
        description="Sort field sent as sortBy; null to let the server decide",
    )

    @property
    def search_debounce_seconds(self) -> float:
        return self.search_debounce_ms / 1000
