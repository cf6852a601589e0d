"""Config file loading and auto-discovery for cas-client.

Searches for ``cas-client.yaml`` in the current directory and parent
directories and parses it. A token can be given inline (``token``) or
read from an environment variable named by ``token_env``. Tenant and
token missing from the file are filled from ``CAS_TENANT``/``CAS_TOKEN``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from cas_client.credentials.env_source import EnvCredentialSource
from cas_client.models import Credential, RetryPolicy

CONFIG_FILENAME = "cas-client.yaml"


@dataclass(frozen=True)
class CasClientConfig:
    """Parsed cas-client configuration."""

    config_path: Path | None = None
    tenant: str | None = None
    token: str | None = field(default=None, repr=False)
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    timeout: float = 30.0

    def credential(self) -> Credential | None:
        if self.tenant and self.token:
            return Credential(tenant=self.tenant, token=self.token)
        return None


def find_config(start: Path | None = None) -> Path | None:
    """Return the nearest ``cas-client.yaml`` at or above *start* (default cwd)."""
    origin = (start or Path.cwd()).resolve()
    for directory in (origin, *origin.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_config(
    path: str | Path | None = None,
    *,
    auto_discover: bool = True,
    environ: Mapping[str, str] | None = None,
) -> CasClientConfig:
    """Load configuration from a file and the environment.

    The file is *path* if given (error if missing), otherwise the nearest
    discovered ``cas-client.yaml`` when *auto_discover* is set. Whatever
    credential fields the file leaves empty are taken from the environment.
    """
    environ = os.environ if environ is None else environ

    if path is not None:
        config_path: Path | None = Path(path).resolve()
        if not config_path.is_file():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        config_path = find_config() if auto_discover else None

    cfg = _parse_config(config_path, environ) if config_path else CasClientConfig()

    if cfg.tenant and cfg.token:
        return cfg
    env_cred = EnvCredentialSource(environ=environ).load()
    if env_cred is None:
        return cfg
    return replace(
        cfg,
        tenant=cfg.tenant or env_cred.tenant,
        token=cfg.token or env_cred.token,
    )


def _parse_config(config_path: Path, environ: Mapping[str, str]) -> CasClientConfig:
    """Read and validate a YAML config file."""
    data: Any = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping in {config_path}, got {type(data).__name__}"
        )

    token = data.get("token")
    if token is None and data.get("token_env"):
        token = environ.get(data["token_env"])

    retry = data.get("retry") or {}
    if not isinstance(retry, dict):
        raise ValueError(f"'retry' must be a mapping in {config_path}")
    try:
        policy = RetryPolicy(**retry)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        raise ValueError(f"Invalid 'retry' settings in {config_path}: {problems}") from exc

    try:
        timeout = float(data.get("timeout", 30.0))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"'timeout' must be a number in {config_path}") from exc

    return CasClientConfig(
        config_path=config_path,
        tenant=str(data["tenant"]) if data.get("tenant") else None,
        token=str(token) if token is not None else None,
        retry_policy=policy,
        timeout=timeout,
    )
