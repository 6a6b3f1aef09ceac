"""
Connection settings for the Vault client.

Settings are validated once and then frozen. Unset fields fall back to the
same environment variables the Vault CLI reads (``VAULT_ADDR``,
``VAULT_TOKEN`` and friends).
"""

import ssl
from typing import Optional, Union
from urllib.parse import urlparse

from pydantic import AliasChoices, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import VaultClientConfigError

DEFAULT_ADDRESS = "http://127.0.0.1:8200"


class VaultClientSettings(BaseSettings):
    """
    Immutable connection configuration.

    Keyword arguments use the field names; environment variables use the
    names the Vault CLI understands.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="forbid",
        case_sensitive=False,
    )

    address: str = Field(
        default=DEFAULT_ADDRESS,
        validation_alias=AliasChoices("VAULT_ADDR"),
        description="Base address of the Vault server.",
    )
    token: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("VAULT_TOKEN"),
        description="Token sent with every request until a login replaces it.",
    )
    namespace: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("VAULT_NAMESPACE"),
    )
    skip_verify: bool = Field(
        default=False,
        validation_alias=AliasChoices("VAULT_SKIP_VERIFY"),
        description="Disable TLS certificate verification.",
    )
    ca_cert: Optional[str] = Field(default=None, validation_alias=AliasChoices("VAULT_CACERT"))
    ca_path: Optional[str] = Field(default=None, validation_alias=AliasChoices("VAULT_CAPATH"))
    client_cert: Optional[str] = Field(default=None, validation_alias=AliasChoices("VAULT_CLIENT_CERT"))
    client_key: Optional[str] = Field(default=None, validation_alias=AliasChoices("VAULT_CLIENT_KEY"))
    timeout: float = Field(
        default=60.0,
        gt=0,
        validation_alias=AliasChoices("VAULT_CLIENT_TIMEOUT"),
        description="Total request timeout in seconds.",
    )
    api_version: str = Field(default="1")
    user_agent: str = Field(default="vault-client-python/1.0", min_length=1)

    @field_validator("address")
    @classmethod
    def _validate_address(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError(f"address must be an absolute http(s) URL, got {value!r}")
        try:
            parsed.port
        except ValueError as e:
            raise ValueError(f"address has an invalid port, got {value!r}: {e}") from e
        return value.rstrip("/")

    @field_validator("token", "namespace")
    @classmethod
    def _empty_as_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @model_validator(mode="after")
    def _validate_identity(self) -> "VaultClientSettings":
        if bool(self.client_cert) != bool(self.client_key):
            raise ValueError("client_cert and client_key must be set together")
        return self

    @property
    def verify(self) -> bool:
        return not self.skip_verify

    @property
    def base_url(self) -> str:
        return f"{self.address}/v{self.api_version}"

    @classmethod
    def build(cls, **kwargs) -> "VaultClientSettings":
        """
        Validate and construct settings.

        Raises:
            VaultClientConfigError: If any field is missing or invalid
        """
        try:
            return cls(**kwargs)
        except ValidationError as e:
            raise VaultClientConfigError(f"Invalid client settings: {e}") from e


def build_ssl_context(settings: VaultClientSettings) -> Union[ssl.SSLContext, bool]:
    """
    Turn the TLS options into the value aiohttp expects for ``ssl=``.

    Returns:
        False when verification is disabled, True for the system defaults,
        otherwise an SSLContext loaded with the configured material

    Raises:
        VaultClientConfigError: If a certificate or key file cannot be loaded
    """
    if settings.skip_verify:
        return False
    if not (settings.ca_cert or settings.ca_path or settings.client_cert):
        return True

    try:
        context = ssl.create_default_context(cafile=settings.ca_cert, capath=settings.ca_path)
        if settings.client_cert:
            context.load_cert_chain(settings.client_cert, settings.client_key)
    except (OSError, ssl.SSLError) as e:
        raise VaultClientConfigError(f"Failed to load TLS material: {e}") from e
    return context
