"""Core data models for cas-client.

Defines the schemas for:
- Credentials (tenant + API token)
- HTTP methods and raw responses
- Retry policy for rate-limited calls
- Alert queries (fetch-by-id and list-with-filter)
"""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# --- Enums ---


class HttpMethod(enum.StrEnum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class SortField(enum.StrEnum):
    DATE = "Date"
    SEVERITY = "Severity"


class SortDirection(enum.StrEnum):
    ASCENDING = "Ascending"
    DESCENDING = "Descending"


# --- Credentials ---


class Credential(BaseModel):
    """Tenant hostname and API token pair.

    The model accepts any strings; ``check_credential()`` enforces the
    tenant suffix and token format before a request is issued.
    """

    model_config = ConfigDict(frozen=True)

    tenant: str
    token: str = Field(repr=False)


# --- Transport ---


class RetryPolicy(BaseModel):
    """How the executor reacts to HTTP 429 responses."""

    interval_seconds: float = Field(3.0, ge=0)
    """Seconds to wait before the first retry."""

    max_retries: int = Field(10, ge=0)
    """Retries allowed after the initial attempt before giving up."""

    backoff_factor: float = Field(1.0, ge=1.0)
    """Multiplier applied to the interval after each retry (1.0 = constant)."""

    def delay_for(self, retry: int, interval: float | None = None) -> float:
        """Delay before retry number *retry* (0-based)."""
        base = self.interval_seconds if interval is None else interval
        return base * (self.backoff_factor ** retry)


@dataclass(frozen=True)
class RequestDescriptor:
    """One outbound call, built fresh per ``execute()``."""

    path: str
    method: HttpMethod
    body: Any = None
    content_type: str = "application/json"
    retry_interval: float = 3.0


@dataclass(frozen=True)
class RawResponse:
    """Status, headers and undecoded body of a successful call."""

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))


# --- Alert queries ---

IDENTITY_PATTERN = r"^[0-9a-fA-F]{24}$"


class FetchAlertQuery(BaseModel):
    """Fetch a single alert by its 24-hex-character identifier."""

    mode: Literal["fetch"] = "fetch"
    identity: str = Field(..., pattern=IDENTITY_PATTERN)


class ListAlertsQuery(BaseModel):
    """List alerts with server-side filtering, sorting and pagination."""

    mode: Literal["list"] = "list"
    filters: dict[str, Any] | None = None
    sort_by: SortField | None = None
    sort_direction: SortDirection | None = None
    size: int = Field(100, ge=1, le=100)
    skip: int = Field(0, ge=0)

    @model_validator(mode="after")
    def _sort_pairing(self) -> ListAlertsQuery:
        if (self.sort_by is None) != (self.sort_direction is None):
            raise ValueError(
                "sort_by and sort_direction must be specified together"
            )
        return self

    def request_body(self) -> dict[str, Any]:
        """Build the POST body for ``/api/v1/alerts/``."""
        body: dict[str, Any] = {"skip": self.skip, "limit": self.size}
        if self.sort_by is not None and self.sort_direction is not None:
            body["sortDirection"] = (
                self.sort_direction.value.lower().removesuffix("ending")
            )
            body["sortField"] = self.sort_by.value.lower()
        if self.filters:
            body["filters"] = self.filters
        return body


AlertQuery = Annotated[
    FetchAlertQuery | ListAlertsQuery,
    Field(discriminator="mode"),
]
