"""Configuration section models."""

from crmsync.config.models.listing import ListingConfig
from crmsync.config.models.observability import LoggingConfig, ObservabilityConfig
from crmsync.config.models.users_api import UsersApiConfig

__all__ = [
    "ListingConfig",
    "LoggingConfig",
    "ObservabilityConfig",
    "UsersApiConfig",
]
