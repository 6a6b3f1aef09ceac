#!/usr/bin/env python3
"""
Vault Python Client

An asynchronous client for the HashiCorp Vault HTTP API.
Executes declarative endpoints with the configured token and namespace,
classifies failures, and supports response wrapping and login flows.
"""

import asyncio
import json
import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

import aiohttp
from pydantic import ValidationError

from .api import kv2, system
from .endpoint import AuthInfo, Endpoint, ResponseEnvelope, VaultResponse, parse_document
from .errors import (
    VaultClientApiError,
    VaultClientConfigError,
    VaultClientConnectionError,
    VaultClientSerializationError,
)
from .settings import VaultClientSettings, build_ssl_context
from .wrapping import WrappedResponse

if TYPE_CHECKING:
    from .login import MultiLoginCallback, MultiLoginMethod, LoginMethod

logger = logging.getLogger(__name__)


def format_ttl(ttl: Union[int, str, timedelta]) -> str:
    """Render a TTL the way Vault's duration headers expect it."""
    if isinstance(ttl, timedelta):
        ttl = int(ttl.total_seconds())
    if isinstance(ttl, int):
        if ttl <= 0:
            raise VaultClientConfigError(f"wrap TTL must be positive, got {ttl}")
        return f"{ttl}s"
    return ttl


class VaultClient:
    """
    Python client for the Vault HTTP API.

    This client provides methods to:
    - Execute any endpoint with the current token and namespace
    - Request wrapped responses and redeem wrap tokens
    - Log in with an auth method and install the issued token

    The current token is the only mutable state. It is read once per request
    and replaced only after a login succeeds, both under the same lock, so
    concurrent requests never see a partially updated token.
    """

    def __init__(self, settings: Optional[VaultClientSettings] = None, **overrides):
        """
        Initialize the Vault client.

        Args:
            settings: Validated connection settings. When omitted, settings are
                built from ``overrides`` and the VAULT_* environment variables.
            **overrides: Settings fields, only allowed when ``settings`` is None

        Raises:
            VaultClientConfigError: If the settings are invalid, the TLS
                material cannot be loaded, or both ``settings`` and overrides are given
        """
        if settings is not None and overrides:
            raise VaultClientConfigError(
                f"Pass either settings or keyword overrides, not both (got {sorted(overrides)})"
            )
        self.settings = settings or VaultClientSettings.build(**overrides)
        self.timeout = aiohttp.ClientTimeout(total=self.settings.timeout)
        self._ssl = build_ssl_context(self.settings)
        self._token = self.settings.token
        # Created on first use so the lock belongs to the loop the client runs in
        self._token_lock: Optional[asyncio.Lock] = None
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def connect(self):
        """Create HTTP session."""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                connector=aiohttp.TCPConnector(ssl=self._ssl),
                timeout=self.timeout,
                headers={"User-Agent": self.settings.user_agent},
            )

    async def close(self):
        """Close HTTP session."""
        if self.session:
            await self.session.close()
            self.session = None

    @property
    def token(self) -> Optional[str]:
        return self._token

    def _get_token_lock(self) -> asyncio.Lock:
        if self._token_lock is None:
            self._token_lock = asyncio.Lock()
        return self._token_lock

    async def get_token(self) -> Optional[str]:
        async with self._get_token_lock():
            return self._token

    async def set_token(self, token: Optional[str]) -> None:
        async with self._get_token_lock():
            self._token = token

    def _get_headers(self, token: Optional[str], wrap_ttl: Optional[str]) -> Dict[str, str]:
        """Get headers for a request: token, namespace and wrap TTL when set."""
        headers = {
            "Accept": "application/json",
            "X-Vault-Request": "true",
        }
        if token:
            headers["X-Vault-Token"] = token
        if self.settings.namespace:
            headers["X-Vault-Namespace"] = self.settings.namespace
        if wrap_ttl:
            headers["X-Vault-Wrap-TTL"] = wrap_ttl
        return headers

    def _handle_error_response(self, status: int, raw: str, url: str) -> VaultClientApiError:
        """
        Build the API error for a non-success response.

        Vault reports failures as ``{"errors": [...]}``; anything else is kept
        as a single message so nothing the server said is lost.
        """
        errors = []
        try:
            document = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError:
            document = None

        if isinstance(document, dict):
            messages = document.get("errors") or []
            if not isinstance(messages, list):
                messages = [messages]
            errors = [str(message) for message in messages]
        elif raw.strip():
            errors = [raw.strip()]
        return VaultClientApiError(status, errors, url=url)

    async def send(
        self,
        endpoint: Endpoint,
        *,
        wrap_ttl: Optional[Union[int, str, timedelta]] = None,
        token: Optional[str] = None,
    ) -> VaultResponse:
        """
        Execute an endpoint and return its result with the response metadata.

        Args:
            endpoint: The operation to perform
            wrap_ttl: Ask Vault to wrap the response for this long
            token: Use this token for this single call instead of the current one

        Returns:
            VaultResponse holding the decoded value, warnings and lease data.
            For wrapped responses ``value`` is None and ``wrap_info`` is set.

        Raises:
            VaultClientConnectionError: If no response was received
            VaultClientApiError: If Vault returned a non-success status
            VaultClientSerializationError: If the body could not be encoded or decoded
        """
        await self.connect()

        path = endpoint.build_path()
        url = f"{self.settings.base_url}/{path}"
        body = endpoint.build_body()
        params = endpoint.build_query()
        bearer = token if token is not None else await self.get_token()
        wrap_header = format_ttl(wrap_ttl) if wrap_ttl is not None else None
        headers = self._get_headers(bearer, wrap_header)

        logger.debug(
            "Sending Vault request",
            extra={
                "method": endpoint.method.value,
                "path": path,
                "wrapped": wrap_header is not None,
            },
        )

        try:
            async with self.session.request(
                endpoint.http_method(),
                url,
                json=body,
                params=params or None,
                headers=headers,
            ) as response:
                status = response.status
                content = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise VaultClientConnectionError(f"Failed to connect to {url}: {e!r}", url=url) from e

        if not 200 <= status < 300:
            raise self._handle_error_response(status, content.decode("utf-8", errors="replace"), url)

        try:
            raw = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise VaultClientSerializationError(
                f"Response body is not valid UTF-8: {e}", content=content
            ) from e

        document = parse_document(raw)
        try:
            envelope = ResponseEnvelope.model_validate(document)
        except ValidationError as e:
            raise VaultClientSerializationError(f"Malformed response envelope: {e}", content=raw) from e

        warnings = envelope.warnings or []
        for warning in warnings:
            logger.warning("Vault returned a warning", extra={"path": path, "warning": warning})

        if wrap_header is not None:
            if envelope.wrap_info is None:
                raise VaultClientSerializationError(
                    f"Expected a wrapped response for {type(endpoint).__name__}", content=raw
                )
            value = None
        else:
            value = endpoint.decode(document, raw)

        return VaultResponse(
            value=value,
            status=status,
            warnings=warnings,
            request_id=envelope.request_id,
            lease_id=envelope.lease_id or None,
            lease_duration=envelope.lease_duration,
            renewable=envelope.renewable,
            wrap_info=envelope.wrap_info,
            auth=envelope.auth,
        )

    async def execute(self, endpoint: Endpoint, *, token: Optional[str] = None) -> Any:
        """
        Execute an endpoint and return its decoded result.

        Warnings are logged; use ``send`` to receive them.
        """
        response = await self.send(endpoint, token=token)
        return response.value

    async def wrap(self, endpoint: Endpoint, ttl: Union[int, str, timedelta]) -> WrappedResponse:
        """
        Execute an endpoint with response wrapping.

        The client's token is not changed. The returned handle can be looked
        up or unwrapped here, or its token handed to another process.
        """
        response = await self.send(endpoint, wrap_ttl=ttl)
        return WrappedResponse(self, response.wrap_info, endpoint)

    async def login(self, method: "LoginMethod", mount: Optional[str] = None) -> AuthInfo:
        """
        Log in and install the issued token.

        Args:
            method: The auth method and its credentials
            mount: Mount path of the auth method; defaults to the method's own

        Returns:
            The auth block returned by Vault

        Raises:
            VaultClientApiError: If Vault rejected the credentials. The
                current token is left unchanged.
        """
        mount = mount or method.default_mount
        auth = await method.login(self, mount)
        await self.set_token(auth.client_token)
        logger.info(
            "Logged in to Vault",
            extra={
                "mount": mount,
                "accessor": auth.accessor[:8] + "..." if auth.accessor else None,
                "policies": auth.policies,
                "lease_duration": auth.lease_duration,
            },
        )
        return auth

    async def login_multi(self, method: "MultiLoginMethod", mount: Optional[str] = None) -> "MultiLoginCallback":
        """Start a multi-step login. The token is installed by ``login_multi_callback``."""
        return await method.login(self, mount or method.default_mount)

    async def login_multi_callback(
        self, callback: "MultiLoginCallback", mount: Optional[str] = None
    ) -> AuthInfo:
        """Finish a multi-step login and install the issued token."""
        mount = mount or callback.mount
        auth = await callback.callback(self, mount)
        await self.set_token(auth.client_token)
        logger.info(
            "Logged in to Vault",
            extra={"mount": mount, "policies": auth.policies, "lease_duration": auth.lease_duration},
        )
        return auth


# Convenience functions for common operations
async def health_check(address: str) -> Dict:
    """
    Convenience function to check server health.

    Args:
        address: Address of the Vault server

    Returns:
        Health status reported by the server
    """
    async with VaultClient(address=address) as client:
        health = await client.execute(system.ReadHealth())
        return health.model_dump()


async def read_secret(address: str, mount: str, path: str, token: Optional[str] = None) -> Dict[str, Any]:
    """
    Convenience function to read a key/value v2 secret.

    Args:
        address: Address of the Vault server
        mount: Mount path of the secret engine
        path: Path of the secret
        token: Token to authenticate with; defaults to VAULT_TOKEN

    Returns:
        The secret's key/value pairs
    """
    overrides = {"address": address}
    if token is not None:
        overrides["token"] = token
    async with VaultClient(**overrides) as client:
        return await kv2.read(client, mount, path)


async def set_secret(
    address: str,
    mount: str,
    path: str,
    data: Dict[str, Any],
    token: Optional[str] = None,
) -> int:
    """
    Convenience function to write a key/value v2 secret.

    Returns:
        The version number written
    """
    overrides = {"address": address}
    if token is not None:
        overrides["token"] = token
    async with VaultClient(**overrides) as client:
        metadata = await kv2.set(client, mount, path, data)
        return metadata.version
