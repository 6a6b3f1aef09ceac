"""
Exceptions raised by the Vault client.

Every failure surfaced by the client is one of four kinds: the request never
got a response (connection), the server answered with an error (API), a body
could not be encoded or decoded (serialization), or the client was configured
incorrectly (config).
"""

from typing import Any, List, Optional


class VaultClientError(Exception):
    """Base exception for Vault client errors."""
    pass


class VaultClientConfigError(VaultClientError):
    """Configuration error, raised while building settings or the client."""
    pass


class VaultClientConnectionError(VaultClientError):
    """Connection error: refused, TLS failure or timeout."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class VaultClientApiError(VaultClientError):
    """
    The server returned a non-success status.

    The ``errors`` list holds the messages from the server's error envelope
    exactly as they were sent.
    """

    def __init__(self, status: int, errors: Optional[List[str]] = None, url: Optional[str] = None):
        self.status = status
        self.errors = list(errors or [])
        self.url = url
        detail = "; ".join(self.errors) if self.errors else "no error message"
        super().__init__(f"HTTP {status}: {detail}")

    @property
    def is_not_found(self) -> bool:
        return self.status == 404

    @property
    def is_permission_denied(self) -> bool:
        return self.status == 403


class VaultClientSerializationError(VaultClientError):
    """A request body could not be encoded or a response body decoded."""

    def __init__(self, message: str, content: Any = None):
        super().__init__(message)
        self.content = content
