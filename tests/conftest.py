"""
Pytest configuration and shared fixtures for the Vault client tests.

Every test that talks to a server gets its own in-process fake Vault, so no
test depends on state left behind by another.
"""

import os
import socket
import sys
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestServer

sys.path.insert(0, str(Path(__file__).parent))

from vault_client import VaultClient
from vault_helpers import ROOT_TOKEN, FakeVault


@pytest.fixture(autouse=True)
def clean_vault_environment(monkeypatch):
    """Keep VAULT_* variables from the developer's shell out of the tests."""
    for name in list(os.environ):
        if name.upper().startswith("VAULT_"):
            monkeypatch.delenv(name, raising=False)


@pytest_asyncio.fixture
async def vault_server() -> AsyncGenerator[FakeVault, None]:
    """Start a fake Vault server for a single test."""
    fake = FakeVault()
    async with TestServer(fake.build_app()) as server:
        fake.url = f"http://{server.host}:{server.port}"
        yield fake


@pytest_asyncio.fixture
async def client(vault_server: FakeVault) -> AsyncGenerator[VaultClient, None]:
    """Create a client authenticated with the root token."""
    client = VaultClient(address=vault_server.url, token=ROOT_TOKEN, timeout=5)
    try:
        await client.connect()
        yield client
    finally:
        await client.close()


@pytest_asyncio.fixture
async def anonymous_client(vault_server: FakeVault) -> AsyncGenerator[VaultClient, None]:
    """Create a client without a token."""
    async with VaultClient(address=vault_server.url, timeout=5) as client:
        yield client


@pytest.fixture
def unused_port() -> int:
    """Find a free local TCP port."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def pytest_collection_modifyitems(config, items):
    """Mark tests that use the fake server as integration tests."""
    for item in items:
        if "vault_server" in item.fixturenames:
            item.add_marker(pytest.mark.integration)
