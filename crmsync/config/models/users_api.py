"""Users Remote API connection configuration."""

from pydantic import BaseModel, Field


class UsersApiConfig(BaseModel):
    """Where and how to reach the Users Remote API."""

    base_url: str = Field(
        default="https://user-api.builder-io.workers.dev/api",
        description="Base URL; resource paths such as /users are appended",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout in seconds",
    )
