"""Process-wide default credential.

A thin convenience layer for interactive use: set a credential once at
session start and let ``CloudAppSecurity`` pick it up. The transport and
query functions never read this state; they always take a credential
argument.
"""

from __future__ import annotations

import threading

from cas_client.models import Credential

_lock = threading.Lock()
_default: Credential | None = None


def set_default_credential(credential: Credential) -> None:
    global _default
    with _lock:
        _default = credential


def get_default_credential() -> Credential | None:
    with _lock:
        return _default


def clear_default_credential() -> None:
    global _default
    with _lock:
        _default = None
