"""
Vault Python Client Package

An asynchronous client for the HashiCorp Vault HTTP API.
"""

from .client import (
    VaultClient,
    format_ttl,
    health_check,
    read_secret,
    set_secret,
)
from .endpoint import (
    AuthInfo,
    Endpoint,
    RequestMethod,
    ResponseKey,
    VaultResponse,
    WrapInfo,
)
from .errors import (
    VaultClientError,
    VaultClientConfigError,
    VaultClientConnectionError,
    VaultClientApiError,
    VaultClientSerializationError,
)
from .login import (
    AppRoleLogin,
    JWTLogin,
    KubernetesLogin,
    LoginMethod,
    MultiLoginCallback,
    MultiLoginMethod,
    OIDCCallback,
    OIDCLogin,
    TokenLogin,
    UserpassLogin,
)
from .settings import VaultClientSettings
from .wrapping import WrappedResponse

__version__ = "1.0.0"
__all__ = [
    "VaultClient",
    "VaultClientSettings",
    "VaultClientError",
    "VaultClientConfigError",
    "VaultClientConnectionError",
    "VaultClientApiError",
    "VaultClientSerializationError",
    "Endpoint",
    "RequestMethod",
    "ResponseKey",
    "VaultResponse",
    "AuthInfo",
    "WrapInfo",
    "WrappedResponse",
    "LoginMethod",
    "MultiLoginMethod",
    "MultiLoginCallback",
    "AppRoleLogin",
    "UserpassLogin",
    "JWTLogin",
    "KubernetesLogin",
    "TokenLogin",
    "OIDCLogin",
    "OIDCCallback",
    "format_ttl",
    "health_check",
    "read_secret",
    "set_secret",
]
