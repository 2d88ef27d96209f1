"""Users Remote API client.

Usage:
    from crmsync.client import UsersApiClient

    async with UsersApiClient(base_url="https://example.test/api") as client:
        page = await client.list_users(page=1, per_page=10, search="bob")
        for customer in page.data:
            print(customer.full_name)
"""

from crmsync.client.client import UsersApiClient
from crmsync.client.errors import ApiError, NetworkFailure, ParseFailure, UsersApiError

__all__ = [
    "ApiError",
    "NetworkFailure",
    "ParseFailure",
    "UsersApiClient",
    "UsersApiError",
]
