"""Key/value version 1 secret engine endpoints."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from ..endpoint import Endpoint, RequestMethod, ResponseKey


class ListSecretsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    keys: List[str]


class SetSecret(Endpoint):
    """POST {mount}/{path}. Vault answers 204 with no payload."""

    method = RequestMethod.POST
    path_template = "{mount}/{path}"
    path_fields = frozenset({"mount", "path"})
    response_key = ResponseKey.NONE

    mount: str
    path: str
    data: Dict[str, Any]

    def request_body(self) -> Optional[Dict[str, Any]]:
        return dict(self.data)


class GetSecret(Endpoint):
    """GET {mount}/{path}. Returns the stored key/value pairs."""

    path_template = "{mount}/{path}"
    path_fields = frozenset({"mount", "path"})

    mount: str
    path: str


class ListSecrets(Endpoint):
    method = RequestMethod.LIST
    path_template = "{mount}/{path}"
    path_fields = frozenset({"mount", "path"})
    response_model = ListSecretsResponse

    mount: str
    path: str = ""

    def decode_value(self, value: ListSecretsResponse) -> List[str]:
        return value.keys


class DeleteSecret(Endpoint):
    method = RequestMethod.DELETE
    path_template = "{mount}/{path}"
    path_fields = frozenset({"mount", "path"})
    response_key = ResponseKey.NONE

    mount: str
    path: str


async def set(client, mount: str, path: str, data: Dict[str, Any]) -> None:
    await client.execute(SetSecret(mount=mount, path=path, data=data))


async def get(client, mount: str, path: str) -> Dict[str, Any]:
    return await client.execute(GetSecret(mount=mount, path=path))


async def list(client, mount: str, path: str = "") -> List[str]:
    return await client.execute(ListSecrets(mount=mount, path=path))


async def delete(client, mount: str, path: str) -> None:
    await client.execute(DeleteSecret(mount=mount, path=path))
