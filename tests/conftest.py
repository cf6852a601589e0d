"""Shared fixtures: a valid credential and fake urllib responses."""

from __future__ import annotations

import io
import json
import urllib.error
from collections.abc import Callable, Generator
from typing import Any

import pytest

from cas_client.credentials.session import clear_default_credential
from cas_client.models import Credential

TENANT = "contoso.us.portal.cloudappsecurity.com"
TOKEN = "0123456789abcdef" * 4
ALERT_ID = "572caf4588011e452ec18ef0"


class FakeResponse:
    """Stands in for the object returned by ``urllib.request.urlopen``."""

    def __init__(self, payload: Any, status: int = 200) -> None:
        self.status = status
        self.headers = {"Content-Type": "application/json"}
        if isinstance(payload, bytes):
            self._body = payload
        else:
            self._body = json.dumps(payload).encode("utf-8")

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> FakeResponse:
        return self

    def __exit__(self, *exc: object) -> bool:
        return False


@pytest.fixture()
def credential() -> Credential:
    return Credential(tenant=TENANT, token=TOKEN)


@pytest.fixture()
def response() -> Callable[..., FakeResponse]:
    return FakeResponse


@pytest.fixture()
def http_error() -> Callable[[int], urllib.error.HTTPError]:
    def _make(code: int) -> urllib.error.HTTPError:
        return urllib.error.HTTPError(
            f"https://{TENANT}/api/v1/alerts/", code, f"status {code}",
            {}, io.BytesIO(b""),  # type: ignore[arg-type]
        )
    return _make


@pytest.fixture(autouse=True)
def _reset_default_credential() -> Generator[None, None, None]:
    clear_default_credential()
    yield
    clear_default_credential()
