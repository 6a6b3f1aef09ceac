"""
Login flows.

A login method exchanges credentials for a token by executing one auth
endpoint. ``VaultClient.login`` installs the returned token only after the
exchange succeeded, so a failed login leaves the previous token in place.

Multi-step methods (OIDC) split the exchange in two: ``login`` returns a
callback object, and the token is issued when that callback completes.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import aiofiles
from aiohttp import web

from .api.auth import (
    AppRoleLoginRequest,
    JWTLoginRequest,
    KubernetesLoginRequest,
    OIDCAuthURLRequest,
    OIDCCallbackRequest,
    UserpassLoginRequest,
)
from .api.token import LookupSelf
from .endpoint import AuthInfo
from .errors import VaultClientConfigError, VaultClientConnectionError

if TYPE_CHECKING:
    from .client import VaultClient

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_ACCOUNT_TOKEN_PATH = "/var/run/secrets/kubernetes.io/serviceaccount/token"

# The Vault CLI listens on localhost:8250 for OIDC redirects; match it so the
# same redirect URIs work for both.
DEFAULT_OIDC_PORT = 8250
OIDC_LISTEN_HOST = "127.0.0.1"
OIDC_REDIRECT_HOST = "localhost"


class LoginMethod:
    """Base class for single-step login methods."""

    default_mount: str = ""

    async def login(self, client: "VaultClient", mount: str) -> AuthInfo:
        raise NotImplementedError


class AppRoleLogin(LoginMethod):
    default_mount = "approle"

    def __init__(self, role_id: str, secret_id: Optional[str] = None):
        self.role_id = role_id
        self.secret_id = secret_id

    async def login(self, client: "VaultClient", mount: str) -> AuthInfo:
        return await client.execute(
            AppRoleLoginRequest(mount=mount, role_id=self.role_id, secret_id=self.secret_id)
        )


class UserpassLogin(LoginMethod):
    default_mount = "userpass"

    def __init__(self, username: str, password: str):
        self.username = username
        self.password = password

    async def login(self, client: "VaultClient", mount: str) -> AuthInfo:
        return await client.execute(
            UserpassLoginRequest(mount=mount, username=self.username, password=self.password)
        )


class JWTLogin(LoginMethod):
    default_mount = "jwt"

    def __init__(self, jwt: str, role: Optional[str] = None):
        self.jwt = jwt
        self.role = role

    async def login(self, client: "VaultClient", mount: str) -> AuthInfo:
        return await client.execute(JWTLoginRequest(mount=mount, jwt=self.jwt, role=self.role))


class KubernetesLogin(LoginMethod):
    """
    Log in with a Kubernetes service account token.

    When no JWT is given it is read from ``jwt_path``, the file Kubernetes
    mounts into every pod.
    """

    default_mount = "kubernetes"

    def __init__(
        self,
        role: str,
        jwt: Optional[str] = None,
        jwt_path: str = DEFAULT_SERVICE_ACCOUNT_TOKEN_PATH,
    ):
        self.role = role
        self.jwt = jwt
        self.jwt_path = jwt_path

    async def _read_jwt(self) -> str:
        try:
            async with aiofiles.open(self.jwt_path, "r") as f:
                return (await f.read()).strip()
        except FileNotFoundError as e:
            raise VaultClientConfigError(f"Service account token not found: {self.jwt_path}") from e
        except OSError as e:
            raise VaultClientConfigError(f"Failed to read service account token {self.jwt_path}: {e}") from e

    async def login(self, client: "VaultClient", mount: str) -> AuthInfo:
        jwt = self.jwt if self.jwt is not None else await self._read_jwt()
        return await client.execute(KubernetesLoginRequest(mount=mount, role=self.role, jwt=jwt))


class TokenLogin(LoginMethod):
    """
    Adopt an existing token after checking it with a self-lookup.

    The lookup is sent with the candidate token, so an invalid token fails
    here without touching the client's current one.
    """

    default_mount = "token"

    def __init__(self, token: str):
        self.token = token

    async def login(self, client: "VaultClient", mount: str) -> AuthInfo:
        info = await client.execute(LookupSelf(), token=self.token)
        return AuthInfo(
            client_token=self.token,
            accessor=info.accessor,
            policies=info.policies,
            metadata=info.meta,
            lease_duration=info.ttl,
            renewable=info.renewable,
            entity_id=info.entity_id,
            token_type=info.type,
            orphan=info.orphan,
        )


class MultiLoginMethod:
    """Base class for login methods that need an out-of-band step."""

    default_mount: str = ""

    async def login(self, client: "VaultClient", mount: str) -> "MultiLoginCallback":
        raise NotImplementedError


class MultiLoginCallback:
    """Second half of a multi-step login; ``mount`` is where it started."""

    mount: str = ""

    async def callback(self, client: "VaultClient", mount: str) -> AuthInfo:
        raise NotImplementedError


@dataclass
class OIDCCallbackParams:
    """Parameters the OAuth authorization server sends to the redirect URL."""
    code: str = ""
    nonce: str = ""
    state: str = ""


class OIDCCallbackListener:
    """
    Small HTTP server that waits for a single OIDC redirect.

    The first request to ``/oidc/callback`` resolves ``wait()`` with its
    ``code``, ``nonce`` and ``state`` query parameters; missing parameters
    become empty strings.
    """

    def __init__(self, host: str = OIDC_LISTEN_HOST, port: int = DEFAULT_OIDC_PORT):
        self.host = host
        self.port = port
        self._params: Optional[asyncio.Future] = None
        self._runner: Optional[web.AppRunner] = None

    async def start(self) -> None:
        """
        Start listening.

        Raises:
            VaultClientConnectionError: If the port cannot be bound
        """
        self._params = asyncio.get_running_loop().create_future()
        app = web.Application()
        app.router.add_get("/oidc/callback", self._handle_callback)
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        try:
            await web.TCPSite(self._runner, self.host, self.port).start()
        except OSError as e:
            await self._runner.cleanup()
            self._runner = None
            raise VaultClientConnectionError(
                f"Failed to listen for OIDC callback on {self.host}:{self.port}: {e}"
            ) from e
        logger.info("Listening for OIDC callback", extra={"host": self.host, "port": self.port})

    async def _handle_callback(self, request: web.Request) -> web.Response:
        if self._params is not None and not self._params.done():
            self._params.set_result(
                OIDCCallbackParams(
                    code=request.query.get("code", ""),
                    nonce=request.query.get("nonce", ""),
                    state=request.query.get("state", ""),
                )
            )
        return web.Response(text="Success!")

    async def wait(self) -> OIDCCallbackParams:
        """Wait for the redirect, then stop listening."""
        if self._params is None:
            raise RuntimeError("listener has not been started")
        try:
            return await self._params
        finally:
            await self.close()

    async def close(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None


class OIDCCallback(MultiLoginCallback):
    """
    Pending OIDC login.

    ``url`` is the authorization URL the user must open in a browser. Awaiting
    ``callback`` blocks until the browser is redirected back to the listener.
    """

    def __init__(self, url: str, listener: OIDCCallbackListener, mount: str):
        self.url = url
        self.listener = listener
        self.mount = mount

    async def callback(self, client: "VaultClient", mount: str) -> AuthInfo:
        params = await self.listener.wait()
        return await client.execute(
            OIDCCallbackRequest(mount=mount, state=params.state, nonce=params.nonce, code=params.code)
        )

    async def cancel(self) -> None:
        await self.listener.close()


class OIDCLogin(MultiLoginMethod):
    """
    Browser-based OIDC login.

    Asks Vault for an authorization URL whose redirect points back at a local
    listener, then starts that listener.
    """

    default_mount = "oidc"

    def __init__(self, port: Optional[int] = None, role: Optional[str] = None):
        self.port = port or DEFAULT_OIDC_PORT
        self.role = role

    @property
    def redirect_uri(self) -> str:
        return f"http://{OIDC_REDIRECT_HOST}:{self.port}/oidc/callback"

    async def login(self, client: "VaultClient", mount: str) -> OIDCCallback:
        response = await client.execute(
            OIDCAuthURLRequest(mount=mount, redirect_uri=self.redirect_uri, role=self.role)
        )
        listener = OIDCCallbackListener(OIDC_LISTEN_HOST, self.port)
        await listener.start()
        return OIDCCallback(response.auth_url, listener, mount)
