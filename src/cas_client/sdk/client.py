"""CloudAppSecurity SDK, the single public entry point.

Wires configuration, credential and request executor behind one class.

Usage::

    from cas_client import CloudAppSecurity, Credential

    cas = CloudAppSecurity(
        credential=Credential(
            tenant="contoso.us.portal.cloudappsecurity.com",
            token="0123...cdef",
        ),
    )
    alert = cas.fetch_alert("572caf4588011e452ec18ef0")
    recent = cas.list_alerts(sort_by="Date", sort_direction="Descending", size=10)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from cas_client.config import CasClientConfig, load_config
from cas_client.credentials.session import get_default_credential
from cas_client.errors import CasClientError
from cas_client.models import (
    Credential,
    FetchAlertQuery,
    HttpMethod,
    ListAlertsQuery,
    RawResponse,
    RetryPolicy,
    SortDirection,
    SortField,
)
from cas_client.queries.alerts import fetch_alert, list_alerts, query_alerts
from cas_client.transport.executor import RequestExecutor


class CloudAppSecurityError(CasClientError):
    """Raised for configuration or initialization errors."""


class CloudAppSecurity:
    """Public API for cas-client.

    The credential is resolved once at construction (explicit argument,
    then the session default, then the config file or environment) and
    passed explicitly to every call afterwards.
    """

    def __init__(
        self,
        credential: Credential | None = None,
        config: str | Path | CasClientConfig | None = None,
        retry_policy: RetryPolicy | dict | None = None,
        timeout: float | None = None,
        auto_discover: bool = True,
        executor: RequestExecutor | None = None,
    ) -> None:
        """Initialize CloudAppSecurity.

        Args:
            credential: Tenant/token pair (optional if the session default,
                config file or ``CAS_TENANT``/``CAS_TOKEN`` provide one).
            config: Path to ``cas-client.yaml`` or a loaded config (optional).
            retry_policy: Rate-limit retry policy, or a dict of its fields
                (default: from config, else 3s interval / 10 retries).
            timeout: Per-request socket timeout in seconds.
            auto_discover: Search parent directories for ``cas-client.yaml``
                when *config* is not given.
            executor: Pre-built executor (overrides retry_policy/timeout).
        """
        if isinstance(config, CasClientConfig):
            cfg = config
        else:
            cfg = load_config(config, auto_discover=auto_discover)
        self._config = cfg

        resolved = credential or get_default_credential() or cfg.credential()
        if resolved is None:
            raise CloudAppSecurityError(
                "No credential available. Pass credential=..., call "
                "set_default_credential(), add tenant/token to "
                "cas-client.yaml, or set CAS_TENANT and CAS_TOKEN."
            )
        self._credential = resolved

        if executor is None:
            if isinstance(retry_policy, dict):
                retry_policy = RetryPolicy(**retry_policy)
            executor = RequestExecutor(
                retry_policy=retry_policy or cfg.retry_policy,
                timeout=timeout if timeout is not None else cfg.timeout,
            )
        self._executor = executor

    @property
    def credential(self) -> Credential:
        return self._credential

    @property
    def executor(self) -> RequestExecutor:
        return self._executor

    @property
    def config(self) -> CasClientConfig:
        return self._config

    def request(
        self,
        path: str,
        method: HttpMethod | str = HttpMethod.GET,
        body: Any = None,
        content_type: str = "application/json",
    ) -> RawResponse:
        """Raw call for resource wrappers beyond alerts."""
        return self._executor.execute(
            self._credential, path, method, body=body, content_type=content_type,
        )

    def fetch_alert(self, identity: str) -> dict[str, Any]:
        return fetch_alert(self._credential, identity, executor=self._executor)

    def list_alerts(
        self,
        filters: dict[str, Any] | None = None,
        sort_by: SortField | str | None = None,
        sort_direction: SortDirection | str | None = None,
        size: int = 100,
        skip: int = 0,
    ) -> list[dict[str, Any]]:
        return list_alerts(
            self._credential,
            filters=filters,
            sort_by=sort_by,
            sort_direction=sort_direction,
            size=size,
            skip=skip,
            executor=self._executor,
        )

    def query_alerts(
        self, query: FetchAlertQuery | ListAlertsQuery,
    ) -> list[dict[str, Any]]:
        return query_alerts(self._credential, query, executor=self._executor)
