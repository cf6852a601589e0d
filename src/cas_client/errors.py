"""Exception hierarchy for cas-client.

Validation errors (credential, argument, allow-list) are raised before any
network call. Transport failures surface as ``RequestError`` and are wrapped
in ``QueryError`` by the query layer.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


class CasClientError(Exception):
    """Base class for all cas-client errors."""


class InvalidCredentialError(CasClientError):
    """Raised when a credential fails tenant-suffix or token-pattern checks."""


class InvalidArgumentError(CasClientError, ValueError):
    """Raised when caller-supplied parameters violate documented constraints."""


class UnsupportedOperationError(CasClientError):
    """Raised when a path/method pair is not present in the allow-list.

    The full allow-list is attached (and rendered in the message) so the
    caller can see which combinations are permitted.
    """

    def __init__(
        self,
        base_path: str,
        method: str,
        allow_list: Mapping[str, frozenset[Any]],
    ) -> None:
        self.base_path = base_path
        self.method = method
        self.allow_list = allow_list
        lines = [
            f"  {path:<28} {', '.join(sorted(str(m) for m in methods))}"
            for path, methods in sorted(allow_list.items())
        ]
        super().__init__(
            f"Method {method} is not supported for {base_path!r}. "
            f"Supported operations:\n" + "\n".join(lines)
        )


class RequestError(CasClientError):
    """Raised for any transport failure other than a retried rate limit."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class RateLimitExceededError(RequestError):
    """Raised when the API keeps returning 429 after the retry budget."""

    def __init__(self, attempts: int) -> None:
        super().__init__(
            f"Rate limit still in effect after {attempts} attempt(s)",
            status=429,
        )
        self.attempts = attempts


class QueryError(CasClientError):
    """Raised by query operations when the underlying request fails."""
