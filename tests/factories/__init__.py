"""Test factories for creating test data."""

from tests.factories.customers import CustomerFactory, make_page, page_payload
from tests.factories.users_source import GatedUsersSource, ListCall

__all__ = [
    "CustomerFactory",
    "GatedUsersSource",
    "ListCall",
    "make_page",
    "page_payload",
]
