"""RFC 7807 Problem Details schema for error responses."""

from __future__ import annotations

from typing import Annotated, Any, Union

from pydantic import AllowInfNan, BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, field_validator
from typing_extensions import TypeAliasType

# JSON has no NaN or Infinity.
FiniteFloat = Annotated[StrictFloat, AllowInfNan(False)]

# Closed set of value kinds an extension member may hold.
ExtensionValue = TypeAliasType(
    "ExtensionValue",
    Union[StrictBool, StrictInt, FiniteFloat, str, list[str], dict[str, "ExtensionValue"]],
)

STANDARD_MEMBERS = ("type", "title", "status", "detail", "instance")


class ProblemDetail(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    Provides a standardized way to carry machine-readable details
    of errors in HTTP responses. Extension members are kept in
    ``extensions`` and flattened next to the standard members on the wire.

    See: https://datatracker.ietf.org/doc/html/rfc7807

    Example:
            problem = ProblemDetail(
            type="https://example.com/probs/out-of-credit",
            title="You do not have enough credit.",
            status=403,
            detail="Your current balance is 30, but that costs 50.",
            instance="/account/12345/msgs/abc",
            extensions={"balance": 30},
        )
    """

    type: str | None = Field(
        default=None,
        description="URI reference identifying the problem type",
    )
    title: str | None = Field(
        default=None,
        description="Short, human-readable summary of the problem type",
    )
    status: int = Field(
        default=0,
        description="HTTP status code; values <= 0 are normalized to 500",
    )
    detail: str | None = Field(
        default=None,
        description="Human-readable explanation specific to this occurrence",
    )
    instance: str | None = Field(
        default=None,
        description="URI reference identifying the specific occurrence",
    )
    extensions: dict[str, ExtensionValue] = Field(
        default_factory=dict,
        description="Additional members flattened alongside the standard ones",
    )

    model_config = ConfigDict(
        validate_assignment=True,
        json_schema_extra={
            "example": {
                "type": "https://example.com/probs/out-of-credit",
                "title": "You do not have enough credit.",
                "status": 403,
                "detail": "Your current balance is 30, but that costs 50.",
                "instance": "/account/12345/msgs/abc",
            }
        },
    )

    @field_validator("extensions")
    @classmethod
    def reject_reserved_keys(cls, value: dict[str, Any]) -> dict[str, Any]:
        """Extension members may not shadow the standard members."""
        reserved = sorted(set(value) & set(STANDARD_MEMBERS))
        if reserved:
            msg = f"extension keys collide with standard members: {', '.join(reserved)}"
            raise ValueError(msg)
        return value

    @classmethod
    def from_status(cls, status: int) -> ProblemDetail:
        """Build a minimal but compliant problem carrying only a status code."""
        return cls(status=status)

    def to_wire(self) -> dict[str, Any]:
        """Return the wire mapping with extension members at the top level.

        Standard members come first in RFC order; null members are omitted.
        """
        wire: dict[str, Any] = {}
        for name in STANDARD_MEMBERS:
            value = getattr(self, name)
            if value is not None:
                wire[name] = value
        wire.update(self.extensions)
        return wire
