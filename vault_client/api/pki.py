"""PKI secret engine endpoints."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from ..endpoint import Endpoint, RequestMethod


class GenerateCertificateResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    certificate: str
    issuing_ca: str
    ca_chain: Optional[List[str]] = None
    private_key: Optional[str] = None
    private_key_type: Optional[str] = None
    serial_number: str
    expiration: Optional[int] = None


class ReadCertificateResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    certificate: str
    revocation_time: int = 0
    ca_chain: Optional[str] = None


class RevokeCertificateResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    revocation_time: int


class ListCertificatesResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    keys: List[str]


class GenerateCertificate(Endpoint):
    """POST {mount}/issue/{role}. Issues a certificate and private key."""

    method = RequestMethod.POST
    path_template = "{mount}/issue/{role}"
    path_fields = frozenset({"mount", "role"})
    response_model = GenerateCertificateResponse

    mount: str
    role: str
    common_name: Optional[str] = None
    alt_names: Optional[str] = None
    ip_sans: Optional[str] = None
    uri_sans: Optional[str] = None
    other_sans: Optional[str] = None
    ttl: Optional[str] = None
    format: Optional[str] = None
    private_key_format: Optional[str] = None
    exclude_cn_from_sans: Optional[bool] = None


class ReadCertificate(Endpoint):
    path_template = "{mount}/cert/{serial}"
    path_fields = frozenset({"mount", "serial"})
    response_model = ReadCertificateResponse

    mount: str
    serial: str


class ListCertificates(Endpoint):
    method = RequestMethod.LIST
    path_template = "{mount}/certs"
    path_fields = frozenset({"mount"})
    response_model = ListCertificatesResponse

    mount: str

    def decode_value(self, value: ListCertificatesResponse) -> List[str]:
        return value.keys


class RevokeCertificate(Endpoint):
    method = RequestMethod.POST
    path_template = "{mount}/revoke"
    path_fields = frozenset({"mount"})
    response_model = RevokeCertificateResponse

    mount: str
    serial_number: str


async def generate(client, mount: str, role: str, **options) -> GenerateCertificateResponse:
    return await client.execute(GenerateCertificate(mount=mount, role=role, **options))


async def read(client, mount: str, serial: str) -> ReadCertificateResponse:
    return await client.execute(ReadCertificate(mount=mount, serial=serial))


async def list(client, mount: str) -> List[str]:
    return await client.execute(ListCertificates(mount=mount))


async def revoke(client, mount: str, serial: str) -> RevokeCertificateResponse:
    return await client.execute(RevokeCertificate(mount=mount, serial_number=serial))
