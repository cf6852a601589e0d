"""Static allow-list of API base paths and the HTTP methods they accept.

The base path of a request is its first three non-empty path segments,
e.g. ``/api/v1/alerts/`` for ``/api/v1/alerts/572caf4588011e452ec18ef0/``.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from cas_client.errors import UnsupportedOperationError
from cas_client.models import HttpMethod

_READ = frozenset({HttpMethod.GET, HttpMethod.POST})

ALLOW_LIST: Mapping[str, frozenset[HttpMethod]] = MappingProxyType({
    "/api/v1/activities/": _READ,
    "/api/v1/alerts/": _READ,
    "/api/v1/discovery/": _READ,
    "/api/v1/entities/": _READ,
    "/api/v1/files/": _READ,
    "/api/v1/governance/": _READ,
    "/api/v1/policies/": _READ,
    "/api/v1/subnet/": frozenset(HttpMethod),
})


def base_path(path: str) -> str:
    """Return the first three non-empty segments of *path* as ``/a/b/c/``."""
    path = path.split("?", 1)[0]
    segments = [s for s in path.split("/") if s][:3]
    return "/" + "".join(f"{s}/" for s in segments)


def check_allowed(
    path: str,
    method: HttpMethod,
    allow_list: Mapping[str, frozenset[HttpMethod]] = ALLOW_LIST,
) -> str:
    """Return the base path of *path*, or raise ``UnsupportedOperationError``."""
    key = base_path(path)
    if method not in allow_list.get(key, frozenset()):
        raise UnsupportedOperationError(key, str(method), allow_list)
    return key
