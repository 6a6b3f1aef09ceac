"""
Login flow tests.

These tests verify that a successful login installs the issued token and a
failed login leaves the current token untouched.
"""

import asyncio

import aiohttp
import pytest

from vault_client import (
    AppRoleLogin,
    JWTLogin,
    KubernetesLogin,
    OIDCCallback,
    OIDCLogin,
    TokenLogin,
    UserpassLogin,
    VaultClient,
    VaultClientApiError,
    VaultClientConfigError,
)
from vault_client.api import token
from vault_client.login import OIDCCallbackListener
from vault_helpers import (
    APPROLE_ROLE_ID,
    APPROLE_SECRET_ID,
    JWT_VALID,
    KUBERNETES_JWT,
    OIDC_CODE,
    OIDC_NONCE,
    OIDC_STATE,
    ROOT_TOKEN,
)


class TestSingleStepLogin:
    """Test login methods that exchange credentials in one call."""

    @pytest.mark.asyncio
    async def test_approle_login_installs_token(self, anonymous_client, vault_server):
        auth = await anonymous_client.login(AppRoleLogin(APPROLE_ROLE_ID, APPROLE_SECRET_ID))

        assert anonymous_client.token == auth.client_token
        assert "app" in auth.policies

        info = await token.lookup_self(anonymous_client)
        assert info.id == auth.client_token
        assert vault_server.last_request("/v1/auth/token/lookup-self").headers["X-Vault-Token"] == auth.client_token

    @pytest.mark.asyncio
    async def test_userpass_login(self, anonymous_client, vault_server):
        auth = await anonymous_client.login(UserpassLogin("alice", "hunter2"))

        assert anonymous_client.token == auth.client_token
        assert auth.metadata == {"username": "alice"}
        assert vault_server.last_request().path == "/v1/auth/userpass/login/alice"

    @pytest.mark.asyncio
    async def test_jwt_login_with_custom_mount(self, anonymous_client, vault_server):
        auth = await anonymous_client.login(JWTLogin(JWT_VALID, role="dev"), mount="jwt")

        assert anonymous_client.token == auth.client_token
        assert vault_server.last_request().body == {"jwt": JWT_VALID, "role": "dev"}

    @pytest.mark.asyncio
    async def test_kubernetes_login_reads_service_account_token(self, anonymous_client, tmp_path):
        jwt_file = tmp_path / "token"
        jwt_file.write_text(KUBERNETES_JWT + "\n")

        auth = await anonymous_client.login(KubernetesLogin("app", jwt_path=str(jwt_file)))

        assert anonymous_client.token == auth.client_token
        assert "app" in auth.policies

    @pytest.mark.asyncio
    async def test_kubernetes_login_missing_token_file(self, client, tmp_path):
        with pytest.raises(VaultClientConfigError, match="Service account token not found"):
            await client.login(KubernetesLogin("app", jwt_path=str(tmp_path / "missing")))
        assert client.token == ROOT_TOKEN

    @pytest.mark.asyncio
    async def test_token_login_verifies_token(self, client, vault_server):
        issued = await token.create(client, policies=["reader"])

        async with VaultClient(address=vault_server.url) as other:
            auth = await other.login(TokenLogin(issued.client_token))
            assert other.token == issued.client_token
            assert auth.policies == ["reader"]

    @pytest.mark.asyncio
    async def test_token_login_with_invalid_token(self, client):
        with pytest.raises(VaultClientApiError) as excinfo:
            await client.login(TokenLogin("hvs.bogus"))
        assert excinfo.value.is_permission_denied
        assert client.token == ROOT_TOKEN


class TestFailedLogin:
    """A failed login never replaces the current token."""

    @pytest.mark.asyncio
    async def test_bad_credentials_keep_previous_token(self, client):
        with pytest.raises(VaultClientApiError) as excinfo:
            await client.login(AppRoleLogin(APPROLE_ROLE_ID, "wrong-secret"))

        assert excinfo.value.errors == ["invalid role or secret ID"]
        assert client.token == ROOT_TOKEN

    @pytest.mark.asyncio
    async def test_bad_credentials_without_previous_token(self, anonymous_client):
        with pytest.raises(VaultClientApiError):
            await anonymous_client.login(UserpassLogin("alice", "wrong"))
        assert anonymous_client.token is None

    @pytest.mark.asyncio
    async def test_disabled_method_is_an_api_error(self, client):
        with pytest.raises(VaultClientApiError) as excinfo:
            await client.login(AppRoleLogin(APPROLE_ROLE_ID, APPROLE_SECRET_ID), mount="not-enabled")
        assert excinfo.value.is_not_found
        assert client.token == ROOT_TOKEN

    @pytest.mark.asyncio
    async def test_login_concurrent_with_requests(self, anonymous_client, vault_server):
        async def read_health():
            return await anonymous_client.execute(token.LookupSelf(), token=ROOT_TOKEN)

        results = await asyncio.gather(
            anonymous_client.login(AppRoleLogin(APPROLE_ROLE_ID, APPROLE_SECRET_ID)),
            *[read_health() for _ in range(5)],
        )

        auth = results[0]
        assert anonymous_client.token == auth.client_token
        assert all(info.id == ROOT_TOKEN for info in results[1:])


class TestOIDCLogin:
    """Test the browser-based multi-step login."""

    @pytest.mark.asyncio
    async def test_listener_captures_redirect_parameters(self, unused_port):
        listener = OIDCCallbackListener(port=unused_port)
        await listener.start()

        async with aiohttp.ClientSession() as session:
            async with session.get(
                f"http://127.0.0.1:{unused_port}/oidc/callback",
                params={"code": "abc", "state": "xyz"},
            ) as response:
                assert response.status == 200
                assert await response.text() == "Success!"

        params = await listener.wait()
        assert params.code == "abc"
        assert params.state == "xyz"
        assert params.nonce == ""

    @pytest.mark.asyncio
    async def test_full_oidc_login(self, anonymous_client, vault_server, unused_port):
        callback = await anonymous_client.login_multi(OIDCLogin(port=unused_port, role="dev"))

        assert isinstance(callback, OIDCCallback)
        assert f"redirect_uri=http://localhost:{unused_port}/oidc/callback" in callback.url
        assert vault_server.last_request("/v1/auth/oidc/oidc/auth_url").body == {
            "redirect_uri": f"http://localhost:{unused_port}/oidc/callback",
            "role": "dev",
        }
        assert anonymous_client.token is None

        async def browser_redirect():
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    f"http://127.0.0.1:{unused_port}/oidc/callback",
                    params={"code": OIDC_CODE, "state": OIDC_STATE, "nonce": OIDC_NONCE},
                ):
                    pass

        auth, _ = await asyncio.gather(
            anonymous_client.login_multi_callback(callback),
            browser_redirect(),
        )

        assert anonymous_client.token == auth.client_token
        assert "oidc" in auth.policies

    @pytest.mark.asyncio
    async def test_failed_oidc_callback_keeps_token(self, client, unused_port):
        callback = await client.login_multi(OIDCLogin(port=unused_port))

        async def browser_redirect():
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    f"http://127.0.0.1:{unused_port}/oidc/callback",
                    params={"code": "wrong", "state": OIDC_STATE},
                ):
                    pass

        results = await asyncio.gather(
            client.login_multi_callback(callback),
            browser_redirect(),
            return_exceptions=True,
        )

        assert isinstance(results[0], VaultClientApiError)
        assert client.token == ROOT_TOKEN

    @pytest.mark.asyncio
    async def test_cancel_stops_listener(self, anonymous_client, unused_port):
        callback = await anonymous_client.login_multi(OIDCLogin(port=unused_port))
        await callback.cancel()

        async with aiohttp.ClientSession() as session:
            with pytest.raises(aiohttp.ClientConnectionError):
                await session.get(f"http://127.0.0.1:{unused_port}/oidc/callback")
