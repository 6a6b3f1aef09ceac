"""
Response wrapping.

A wrapped response is a single-use token standing in for the real payload.
Vault alone knows whether a wrap token has been redeemed: the token may be
handed to another process and unwrapped there. Nothing here records that a
token was looked up or unwrapped; every call asks the server.
"""

import json
import logging
from typing import TYPE_CHECKING, Any, Optional

from .api.system import LookupWrapping, RewrapWrapping, UnwrapWrapping, WrapLookupResponse
from .endpoint import Endpoint, WrapInfo
from .errors import VaultClientSerializationError

if TYPE_CHECKING:
    from .client import VaultClient

logger = logging.getLogger(__name__)


async def lookup(client: "VaultClient", token: str) -> WrapLookupResponse:
    """
    Read the creation path, time and TTL of a wrap token without consuming it.

    Raises:
        VaultClientApiError: If the token is unknown, expired or already unwrapped
    """
    return await client.execute(LookupWrapping(token=token), token=token)


async def unwrap(client: "VaultClient", token: str, endpoint: Optional[Endpoint] = None) -> Any:
    """
    Redeem a wrap token.

    The wrap token is sent as the request token for this call only; the
    client's own token is not used or changed.

    Args:
        client: Client to send the request with
        token: The wrap token
        endpoint: The endpoint whose response was wrapped. Its decoder is used
            on the unwrapped document. When omitted the raw ``data`` is returned.

    Returns:
        The original response, decoded

    Raises:
        VaultClientApiError: If the token was already unwrapped, expired or never existed
        VaultClientSerializationError: If the payload does not match ``endpoint``
    """
    document = await client.execute(UnwrapWrapping(), token=token)
    if endpoint is None:
        return document.get("data")
    return endpoint.decode(document, json.dumps(document))


async def rewrap(client: "VaultClient", token: str) -> WrapInfo:
    """
    Exchange a wrap token for a fresh one holding the same payload.

    The old token stops working once this succeeds.
    """
    response = await client.send(RewrapWrapping(token=token))
    if response.wrap_info is None:
        raise VaultClientSerializationError("Rewrap response has no wrap_info")
    return response.wrap_info


class WrappedResponse:
    """
    Handle for a response that Vault wrapped.

    The handle carries the wrap metadata and the endpoint that produced the
    response so ``unwrap`` can decode the payload into the same type a direct
    call would have returned.
    """

    def __init__(self, client: "VaultClient", info: WrapInfo, endpoint: Endpoint):
        self.client = client
        self.info = info
        self.endpoint = endpoint

    def __repr__(self) -> str:
        return (
            f"WrappedResponse(creation_path={self.info.creation_path!r}, "
            f"ttl={self.info.ttl}, endpoint={type(self.endpoint).__name__})"
        )

    @property
    def token(self) -> str:
        return self.info.token

    @property
    def ttl(self) -> int:
        return self.info.ttl

    @property
    def creation_path(self) -> str:
        return self.info.creation_path

    async def lookup(self) -> WrapLookupResponse:
        return await lookup(self.client, self.info.token)

    async def unwrap(self) -> Any:
        logger.debug("Unwrapping response", extra={"creation_path": self.info.creation_path})
        return await unwrap(self.client, self.info.token, self.endpoint)
