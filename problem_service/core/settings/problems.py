"""Problem details settings."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProblemSettings(BaseSettings):
    """Settings for problem detail translation and rendering.

    Environment variables use PROBLEM_ prefix.
    Example: PROBLEM_TYPE_URI_AUTHORITY=https://example.com/probs/

    These values are read once at startup and injected into the
    translator and dispatcher; changing them afterwards has no effect
    on a running application.
    """

    type_uri_authority: str = Field(
        default="urn:",
        min_length=1,
        description="Prefix for type URIs synthesized from exception class names",
    )
    validation_type: str | None = Field(
        default=None,
        description="Type URI for validation problems (defaults to <authority>validation-error)",
    )
    xml_enabled: bool = Field(
        default=True, description="Offer application/problem+xml responses"
    )
    include_request_id: bool = Field(
        default=True, description="Add a request_id member when the request carries one"
    )
    expose_exception_detail: bool = Field(
        default=True,
        description="Copy unhandled exception messages into the problem detail member",
    )

    model_config = SettingsConfigDict(
        env_prefix="PROBLEM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )
