"""Alert queries: fetch one alert by id, or list alerts with sorting and paging.

Both modes go through the request executor and return plain dict records
with an ``Identity`` key mirroring the API's ``_id`` field.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any

from pydantic import TypeAdapter, ValidationError

from cas_client.errors import InvalidArgumentError, QueryError, RequestError
from cas_client.models import (
    AlertQuery,
    Credential,
    FetchAlertQuery,
    HttpMethod,
    ListAlertsQuery,
    SortDirection,
    SortField,
)
from cas_client.transport.executor import DEFAULT_JSON_DEPTH, RequestExecutor

logger = logging.getLogger(__name__)

ALERTS_PATH = "/api/v1/alerts/"

# Deep enough for filter expressions such as {"filters": {"severity": {"eq": [2]}}}
_FILTER_JSON_DEPTH = 8

_query_adapter: TypeAdapter[AlertQuery] = TypeAdapter(AlertQuery)


def add_identity_alias(record: Any) -> bool:
    """Add ``Identity`` mirroring ``_id``. Never raises.

    Returns ``False`` (and logs at debug level) when the record was left
    unchanged.
    """
    if not isinstance(record, MutableMapping):
        logger.debug("Identity alias skipped: record is %s", type(record).__name__)
        return False
    if "_id" not in record:
        logger.debug("Identity alias skipped: record has no _id")
        return False
    if "Identity" in record:
        logger.debug("Identity alias skipped: %s already has Identity", record["_id"])
        return False
    record["Identity"] = record["_id"]
    return True


def parse_query(data: dict[str, Any]) -> FetchAlertQuery | ListAlertsQuery:
    """Build a query from a ``mode``-tagged dict."""
    try:
        return _query_adapter.validate_python(data)
    except ValidationError as exc:
        raise InvalidArgumentError(_describe(exc)) from exc


def fetch_alert(
    credential: Credential,
    identity: str,
    *,
    executor: RequestExecutor | None = None,
) -> dict[str, Any]:
    """Fetch one alert by its 24-hex-character identifier."""
    try:
        query = FetchAlertQuery(identity=identity)
    except ValidationError as exc:
        raise InvalidArgumentError(
            f"Invalid alert identity {identity!r}: expected 24 hex characters"
        ) from exc
    return _run_fetch(credential, query, executor or RequestExecutor())


def list_alerts(
    credential: Credential,
    filters: dict[str, Any] | None = None,
    sort_by: SortField | str | None = None,
    sort_direction: SortDirection | str | None = None,
    size: int = 100,
    skip: int = 0,
    *,
    executor: RequestExecutor | None = None,
) -> list[dict[str, Any]]:
    """List alerts in server order unless *sort_by* and *sort_direction* are given."""
    try:
        query = ListAlertsQuery(
            filters=filters,
            sort_by=sort_by,
            sort_direction=sort_direction,
            size=size,
            skip=skip,
        )
    except ValidationError as exc:
        raise InvalidArgumentError(_describe(exc)) from exc
    return _run_list(credential, query, executor or RequestExecutor())


def query_alerts(
    credential: Credential,
    query: FetchAlertQuery | ListAlertsQuery,
    *,
    executor: RequestExecutor | None = None,
) -> list[dict[str, Any]]:
    """Dispatch on the query type. Fetch results come back as a one-item list."""
    executor = executor or RequestExecutor()
    if isinstance(query, FetchAlertQuery):
        return [_run_fetch(credential, query, executor)]
    if isinstance(query, ListAlertsQuery):
        return _run_list(credential, query, executor)
    raise InvalidArgumentError(f"Unknown alert query type: {type(query).__name__}")


def _run_fetch(
    credential: Credential,
    query: FetchAlertQuery,
    executor: RequestExecutor,
) -> dict[str, Any]:
    try:
        response = executor.execute(
            credential, f"{ALERTS_PATH}{query.identity}/", HttpMethod.GET,
        )
    except RequestError as exc:
        raise QueryError(f"Error calling API. The exception was: {exc}") from exc

    record = _decode(response)
    if not isinstance(record, dict):
        raise QueryError(
            f"Expected a JSON object for alert {query.identity}, "
            f"got {type(record).__name__}"
        )
    add_identity_alias(record)
    return record


def _run_list(
    credential: Credential,
    query: ListAlertsQuery,
    executor: RequestExecutor,
) -> list[dict[str, Any]]:
    body = query.request_body()
    depth = _FILTER_JSON_DEPTH if "filters" in body else DEFAULT_JSON_DEPTH
    try:
        response = executor.execute(
            credential, ALERTS_PATH, HttpMethod.POST, body, json_depth=depth,
        )
    except RequestError as exc:
        raise QueryError(f"Error calling API. The exception was: {exc}") from exc

    payload = _decode(response)
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
        raise QueryError("Alert list response has no 'data' array")

    records: list[dict[str, Any]] = payload["data"]
    for record in records:
        add_identity_alias(record)
    logger.debug("Listed %d alert(s) (skip=%d, limit=%d)", len(records), query.skip, query.size)
    return records


def _decode(response: Any) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise QueryError(f"API returned a body that is not valid JSON: {exc}") from exc


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)
