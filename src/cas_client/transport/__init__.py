"""Transport layer: allow-list checks and the authenticated request executor."""

from cas_client.transport.allowlist import ALLOW_LIST, base_path, check_allowed
from cas_client.transport.executor import RequestExecutor, execute, serialize_body

__all__ = [
    "ALLOW_LIST",
    "RequestExecutor",
    "base_path",
    "check_allowed",
    "execute",
    "serialize_body",
]
