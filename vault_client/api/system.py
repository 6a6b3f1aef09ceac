"""System backend endpoints: health, seal status and response wrapping."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from ..endpoint import Endpoint, RequestMethod, ResponseKey


class HealthResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    initialized: bool
    sealed: bool
    standby: bool
    performance_standby: bool = False
    replication_performance_mode: Optional[str] = None
    replication_dr_mode: Optional[str] = None
    server_time_utc: Optional[int] = None
    version: str
    cluster_name: Optional[str] = None
    cluster_id: Optional[str] = None


class SealStatusResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    initialized: bool
    sealed: bool
    t: int
    n: int
    progress: int
    nonce: str = ""
    version: str
    migration: bool = False
    cluster_name: Optional[str] = None
    cluster_id: Optional[str] = None
    recovery_seal: bool = False
    storage_type: Optional[str] = None


class WrapLookupResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    creation_path: str
    creation_time: str
    creation_ttl: int


class ReadHealth(Endpoint):
    """GET sys/health. Unauthenticated; the payload is the whole document."""

    path_template = "sys/health"
    query_fields = frozenset({"standbyok", "perfstandbyok"})
    response_model = HealthResponse
    response_key = ResponseKey.ROOT

    standbyok: Optional[bool] = None
    perfstandbyok: Optional[bool] = None


class ReadSealStatus(Endpoint):
    path_template = "sys/seal-status"
    response_model = SealStatusResponse
    response_key = ResponseKey.ROOT


class WrapData(Endpoint):
    """
    POST sys/wrapping/wrap.

    Wraps an arbitrary payload. Only meaningful with a wrap TTL, so execute it
    through ``VaultClient.wrap``.
    """

    method = RequestMethod.POST
    path_template = "sys/wrapping/wrap"

    data: Dict[str, Any]

    def request_body(self) -> Optional[Dict[str, Any]]:
        return dict(self.data)


class LookupWrapping(Endpoint):
    method = RequestMethod.POST
    path_template = "sys/wrapping/lookup"
    response_model = WrapLookupResponse

    token: str


class UnwrapWrapping(Endpoint):
    """
    POST sys/wrapping/unwrap.

    Returns the complete original response document so the caller can decode
    it with the endpoint that produced it.
    """

    method = RequestMethod.POST
    path_template = "sys/wrapping/unwrap"
    response_key = ResponseKey.ROOT

    token: Optional[str] = None


class RewrapWrapping(Endpoint):
    """POST sys/wrapping/rewrap. The new token arrives in ``wrap_info``."""

    method = RequestMethod.POST
    path_template = "sys/wrapping/rewrap"
    response_key = ResponseKey.NONE

    token: str


async def health(client, standbyok: Optional[bool] = None) -> HealthResponse:
    return await client.execute(ReadHealth(standbyok=standbyok))


async def seal_status(client) -> SealStatusResponse:
    return await client.execute(ReadSealStatus())
