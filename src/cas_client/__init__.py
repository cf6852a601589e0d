"""cas-client: a credentialed client for the Cloud App Security REST API."""

__version__ = "0.3.0"

from cas_client.config import CasClientConfig, find_config, load_config
from cas_client.credentials.env_source import EnvCredentialSource
from cas_client.credentials.session import (
    clear_default_credential,
    get_default_credential,
    set_default_credential,
)
from cas_client.credentials.validator import check_credential
from cas_client.errors import (
    CasClientError,
    InvalidArgumentError,
    InvalidCredentialError,
    QueryError,
    RateLimitExceededError,
    RequestError,
    UnsupportedOperationError,
)
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
from cas_client.sdk.client import CloudAppSecurity, CloudAppSecurityError
from cas_client.transport.executor import RequestExecutor, execute

__all__ = [
    "CasClientConfig",
    "CasClientError",
    "check_credential",
    "clear_default_credential",
    "CloudAppSecurity",
    "CloudAppSecurityError",
    "Credential",
    "EnvCredentialSource",
    "execute",
    "fetch_alert",
    "FetchAlertQuery",
    "find_config",
    "get_default_credential",
    "HttpMethod",
    "InvalidArgumentError",
    "InvalidCredentialError",
    "list_alerts",
    "ListAlertsQuery",
    "load_config",
    "query_alerts",
    "QueryError",
    "RateLimitExceededError",
    "RawResponse",
    "RequestError",
    "RequestExecutor",
    "RetryPolicy",
    "set_default_credential",
    "SortDirection",
    "SortField",
    "UnsupportedOperationError",
    "__version__",
]
