"""Token auth method endpoints."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from ..endpoint import AuthInfo, Endpoint, RequestMethod, ResponseKey


class TokenLookupResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    accessor: str = ""
    creation_time: int = 0
    creation_ttl: int = 0
    display_name: str = ""
    entity_id: str = ""
    expire_time: Optional[str] = None
    explicit_max_ttl: int = 0
    id: str
    issue_time: Optional[str] = None
    meta: Optional[Dict[str, str]] = None
    num_uses: int = 0
    orphan: bool = False
    path: str = ""
    policies: List[str] = []
    renewable: bool = False
    ttl: int = 0
    type: str = ""


class LookupSelf(Endpoint):
    path_template = "auth/token/lookup-self"
    response_model = TokenLookupResponse


class LookupToken(Endpoint):
    method = RequestMethod.POST
    path_template = "auth/token/lookup"
    response_model = TokenLookupResponse

    token: str


class CreateToken(Endpoint):
    method = RequestMethod.POST
    path_template = "auth/token/create"
    response_model = AuthInfo
    response_key = ResponseKey.AUTH

    policies: Optional[List[str]] = None
    meta: Optional[Dict[str, str]] = None
    no_parent: Optional[bool] = None
    no_default_policy: Optional[bool] = None
    renewable: Optional[bool] = None
    ttl: Optional[str] = None
    explicit_max_ttl: Optional[str] = None
    display_name: Optional[str] = None
    num_uses: Optional[int] = None
    period: Optional[str] = None


class RenewSelf(Endpoint):
    method = RequestMethod.POST
    path_template = "auth/token/renew-self"
    response_model = AuthInfo
    response_key = ResponseKey.AUTH

    increment: Optional[str] = None


class RevokeSelf(Endpoint):
    method = RequestMethod.POST
    path_template = "auth/token/revoke-self"
    response_key = ResponseKey.NONE


async def lookup_self(client) -> TokenLookupResponse:
    return await client.execute(LookupSelf())


async def lookup(client, token: str) -> TokenLookupResponse:
    return await client.execute(LookupToken(token=token))


async def create(client, **options: Any) -> AuthInfo:
    return await client.execute(CreateToken(**options))


async def renew_self(client, increment: Optional[str] = None) -> AuthInfo:
    return await client.execute(RenewSelf(increment=increment))


async def revoke_self(client) -> None:
    await client.execute(RevokeSelf())
