"""Authenticated request executor for the Cloud App Security API.

Every call goes through the same steps:
1. Validate the credential (tenant suffix, token format)
2. Check the path/method pair against the allow-list
3. Build ``https://{tenant}{path}`` with a ``Token`` authorization header
4. Issue the request, retrying on HTTP 429 up to the retry policy's limit

Uses stdlib ``urllib.request``, no extra dependencies required.
"""

from __future__ import annotations

import http.client
import json
import logging
import time
import urllib.error
import urllib.request
from collections.abc import Callable, Mapping
from typing import Any

from cas_client.credentials.validator import check_credential
from cas_client.errors import InvalidArgumentError, RateLimitExceededError, RequestError
from cas_client.models import (
    Credential,
    HttpMethod,
    RawResponse,
    RequestDescriptor,
    RetryPolicy,
)
from cas_client.transport.allowlist import ALLOW_LIST, check_allowed

logger = logging.getLogger(__name__)

DEFAULT_JSON_DEPTH = 2


def serialize_body(body: Any, max_depth: int = DEFAULT_JSON_DEPTH) -> bytes:
    """Compact JSON with containers nested deeper than *max_depth* stringified."""
    return json.dumps(
        _limit_depth(body, max_depth), separators=(",", ":"), default=str,
    ).encode("utf-8")


def _limit_depth(value: Any, remaining: int) -> Any:
    if isinstance(value, Mapping):
        if remaining < 0:
            return str(dict(value))
        return {str(k): _limit_depth(v, remaining - 1) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        if remaining < 0:
            return str(list(value))
        return [_limit_depth(v, remaining - 1) for v in value]
    return value


def coerce_method(method: HttpMethod | str) -> HttpMethod:
    if isinstance(method, HttpMethod):
        return method
    try:
        return HttpMethod(str(method).upper())
    except ValueError as exc:
        raise InvalidArgumentError(
            f"Unsupported HTTP method {method!r}; "
            f"expected one of {', '.join(m.value for m in HttpMethod)}"
        ) from exc


class RequestExecutor:
    """Issues authenticated calls against a tenant's API.

    Stateless between calls. The allow-list and retry policy are fixed
    at construction and never mutated.
    """

    def __init__(
        self,
        retry_policy: RetryPolicy | dict | None = None,
        timeout: float = 30.0,
        allow_list: Mapping[str, frozenset[HttpMethod]] = ALLOW_LIST,
        _opener: Callable[..., Any] | None = None,
        _sleep: Callable[[float], None] | None = None,
    ) -> None:
        if isinstance(retry_policy, dict):
            retry_policy = RetryPolicy(**retry_policy)
        self._retry = retry_policy or RetryPolicy()
        self._timeout = timeout
        self._allow_list = allow_list
        self._opener = _opener
        self._sleep = _sleep

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry

    @property
    def allow_list(self) -> Mapping[str, frozenset[HttpMethod]]:
        return self._allow_list

    def execute(
        self,
        credential: Credential,
        path: str,
        method: HttpMethod | str,
        body: Any = None,
        content_type: str = "application/json",
        retry_interval_seconds: float | None = None,
        json_depth: int = DEFAULT_JSON_DEPTH,
    ) -> RawResponse:
        """Issue one call, retrying on rate limits.

        Raises:
            InvalidCredentialError: credential fails validation.
            InvalidArgumentError: unknown HTTP method.
            UnsupportedOperationError: path/method not in the allow-list.
            RateLimitExceededError: still throttled after the retry budget.
            RequestError: any other transport failure.
        """
        check_credential(credential)
        http_method = coerce_method(method)
        check_allowed(path, http_method, self._allow_list)

        descriptor = RequestDescriptor(
            path=path,
            method=http_method,
            body=None if http_method == HttpMethod.GET else body,
            content_type=content_type,
            retry_interval=(
                self._retry.interval_seconds
                if retry_interval_seconds is None
                else retry_interval_seconds
            ),
        )
        request = self._build_request(credential, descriptor, json_depth)

        retries = 0
        while True:
            try:
                return self._send(request)
            except urllib.error.HTTPError as e:
                if e.code != 429:
                    raise RequestError(
                        f"{descriptor.method} {descriptor.path} failed: "
                        f"HTTP {e.code} {e.reason}",
                        status=e.code,
                    ) from e
                if retries >= self._retry.max_retries:
                    raise RateLimitExceededError(retries + 1) from e
                delay = self._retry.delay_for(retries, descriptor.retry_interval)
                logger.warning(
                    "429 - Too many requests. Waiting %s seconds before "
                    "retrying %s %s (retry %d of %d)",
                    delay, descriptor.method, descriptor.path,
                    retries + 1, self._retry.max_retries,
                )
                (self._sleep or time.sleep)(delay)
                retries += 1
            except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
                raise RequestError(
                    f"{descriptor.method} {descriptor.path} failed: {e}"
                ) from e

    def _build_request(
        self,
        credential: Credential,
        descriptor: RequestDescriptor,
        json_depth: int,
    ) -> urllib.request.Request:
        data: bytes | None = None
        if descriptor.method != HttpMethod.GET and descriptor.body is not None:
            data = serialize_body(descriptor.body, json_depth)

        return urllib.request.Request(
            f"https://{credential.tenant}{descriptor.path}",
            data=data,
            headers={
                "Authorization": f"Token {credential.token}",
                "Content-Type": descriptor.content_type,
                "Accept": "application/json",
            },
            method=descriptor.method.value,
        )

    def _send(self, request: urllib.request.Request) -> RawResponse:
        logger.debug("%s %s", request.get_method(), request.full_url)
        opener = self._opener or urllib.request.urlopen
        with opener(request, timeout=self._timeout) as resp:
            return RawResponse(
                status=resp.status,
                headers=dict(resp.headers.items()),
                body=resp.read(),
            )


def execute(
    credential: Credential,
    path: str,
    method: HttpMethod | str,
    body: Any = None,
    content_type: str = "application/json",
    retry_interval_seconds: float | None = None,
) -> RawResponse:
    """Module-level shortcut using a default ``RequestExecutor``."""
    return RequestExecutor().execute(
        credential,
        path,
        method,
        body=body,
        content_type=content_type,
        retry_interval_seconds=retry_interval_seconds,
    )
