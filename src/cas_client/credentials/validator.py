"""Credential validation.

A credential is only sent over the network once its tenant is a plain
hostname under the Cloud App Security portal domain and its token is a
64-character hex string.
"""

from __future__ import annotations

import re

from cas_client.errors import InvalidCredentialError
from cas_client.models import Credential

TENANT_SUFFIX = ".portal.cloudappsecurity.com"

# Whole-string match: no scheme, port, userinfo, path, query or fragment.
_TENANT_PATTERN = re.compile(
    r"(?:[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?\.)+portal\.cloudappsecurity\.com",
    re.IGNORECASE,
)
_TOKEN_PATTERN = re.compile(r"[0-9a-fA-F]{64}")


def check_credential(credential: Credential) -> Credential:
    """Return *credential* unchanged, or raise ``InvalidCredentialError``."""
    if not isinstance(credential, Credential):
        raise InvalidCredentialError(
            f"Expected a Credential, got {type(credential).__name__}"
        )

    if not _TENANT_PATTERN.fullmatch(credential.tenant):
        raise InvalidCredentialError(
            f"Tenant {credential.tenant!r} must be a hostname ending in "
            f"'{TENANT_SUFFIX}'"
        )

    if not _TOKEN_PATTERN.fullmatch(credential.token):
        raise InvalidCredentialError(
            "API token must be a 64-character hexadecimal string"
        )

    return credential
