"""Environment variable credential source for CI and local scripts.

Reads the tenant from ``CAS_TENANT`` and the token from ``CAS_TOKEN``
(the prefix is configurable). Nothing is validated here; the executor
checks the credential before every call.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from cas_client.models import Credential


class EnvCredentialSource:
    """Build a ``Credential`` from environment variables.

    Lookup strategy:
    1. ``{prefix}TENANT`` for the tenant hostname.
    2. ``{prefix}TOKEN`` for the API token.
    3. Return ``None`` if either is missing or empty.
    """

    def __init__(
        self,
        env_prefix: str = "CAS_",
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._env_prefix = env_prefix
        self._environ = environ if environ is not None else os.environ

    @property
    def tenant_var(self) -> str:
        return f"{self._env_prefix}TENANT"

    @property
    def token_var(self) -> str:
        return f"{self._env_prefix}TOKEN"

    def load(self) -> Credential | None:
        tenant = self._environ.get(self.tenant_var)
        token = self._environ.get(self.token_var)
        if not tenant or not token:
            return None
        return Credential(tenant=tenant, token=token)
