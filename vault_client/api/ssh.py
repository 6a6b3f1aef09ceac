"""SSH secret engine endpoints."""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict

from ..endpoint import Endpoint, RequestMethod


class SignKeyResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    serial_number: str
    signed_key: str


class CAConfigResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    public_key: str


class SignKey(Endpoint):
    """POST {mount}/sign/{role}. Signs an SSH public key with the engine's CA."""

    method = RequestMethod.POST
    path_template = "{mount}/sign/{role}"
    path_fields = frozenset({"mount", "role"})
    response_model = SignKeyResponse

    mount: str
    role: str
    public_key: str
    ttl: Optional[str] = None
    valid_principals: Optional[str] = None
    cert_type: Optional[str] = None
    key_id: Optional[str] = None
    critical_options: Optional[Dict[str, str]] = None
    extensions: Optional[Dict[str, str]] = None


class ReadCAConfig(Endpoint):
    path_template = "{mount}/config/ca"
    path_fields = frozenset({"mount"})
    response_model = CAConfigResponse

    mount: str


async def sign(client, mount: str, role: str, public_key: str, **options) -> SignKeyResponse:
    return await client.execute(SignKey(mount=mount, role=role, public_key=public_key, **options))


async def read_ca_public_key(client, mount: str) -> str:
    config = await client.execute(ReadCAConfig(mount=mount))
    return config.public_key
