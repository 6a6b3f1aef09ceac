"""Key/value version 2 secret engine endpoints."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from ..endpoint import Endpoint, RequestMethod, ResponseKey


class SecretVersionMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    created_time: str
    custom_metadata: Optional[Dict[str, str]] = None
    deletion_time: str = ""
    destroyed: bool = False
    version: int


class ReadSecretResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: Dict[str, Any]
    metadata: SecretVersionMetadata


class SecretVersionInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    created_time: str
    deletion_time: str = ""
    destroyed: bool = False


class SecretMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    cas_required: bool = False
    created_time: str
    current_version: int
    delete_version_after: str = "0s"
    max_versions: int = 0
    oldest_version: int = 0
    updated_time: str
    custom_metadata: Optional[Dict[str, str]] = None
    versions: Dict[str, SecretVersionInfo] = {}


class ListSecretsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    keys: List[str]


class SetSecret(Endpoint):
    """
    POST {mount}/data/{path}.

    ``cas`` enables check-and-set: the write only succeeds if the current
    version equals it (0 means the secret must not exist yet).
    """

    method = RequestMethod.POST
    path_template = "{mount}/data/{path}"
    path_fields = frozenset({"mount", "path"})
    response_model = SecretVersionMetadata

    mount: str
    path: str
    data: Dict[str, Any]
    cas: Optional[int] = None

    def request_body(self) -> Optional[Dict[str, Any]]:
        body = {"data": dict(self.data)}
        if self.cas is not None:
            body["options"] = {"cas": self.cas}
        return body


class ReadSecret(Endpoint):
    """GET {mount}/data/{path}. Returns only the secret's key/value pairs."""

    path_template = "{mount}/data/{path}"
    path_fields = frozenset({"mount", "path"})
    query_fields = frozenset({"version"})
    response_model = ReadSecretResponse

    mount: str
    path: str
    version: Optional[int] = None

    def decode_value(self, value: ReadSecretResponse) -> Dict[str, Any]:
        return value.data


class ReadSecretWithMetadata(Endpoint):
    path_template = "{mount}/data/{path}"
    path_fields = frozenset({"mount", "path"})
    query_fields = frozenset({"version"})
    response_model = ReadSecretResponse

    mount: str
    path: str
    version: Optional[int] = None


class ListSecrets(Endpoint):
    method = RequestMethod.LIST
    path_template = "{mount}/metadata/{path}"
    path_fields = frozenset({"mount", "path"})
    response_model = ListSecretsResponse

    mount: str
    path: str = ""

    def decode_value(self, value: ListSecretsResponse) -> List[str]:
        return value.keys


class ReadSecretMetadata(Endpoint):
    path_template = "{mount}/metadata/{path}"
    path_fields = frozenset({"mount", "path"})
    response_model = SecretMetadata

    mount: str
    path: str


class DeleteLatestSecretVersion(Endpoint):
    method = RequestMethod.DELETE
    path_template = "{mount}/data/{path}"
    path_fields = frozenset({"mount", "path"})
    response_key = ResponseKey.NONE

    mount: str
    path: str


class DeleteSecretVersions(Endpoint):
    method = RequestMethod.POST
    path_template = "{mount}/delete/{path}"
    path_fields = frozenset({"mount", "path"})
    response_key = ResponseKey.NONE

    mount: str
    path: str
    versions: List[int]


class UndeleteSecretVersions(Endpoint):
    method = RequestMethod.POST
    path_template = "{mount}/undelete/{path}"
    path_fields = frozenset({"mount", "path"})
    response_key = ResponseKey.NONE

    mount: str
    path: str
    versions: List[int]


class DestroySecretVersions(Endpoint):
    method = RequestMethod.PUT
    path_template = "{mount}/destroy/{path}"
    path_fields = frozenset({"mount", "path"})
    response_key = ResponseKey.NONE

    mount: str
    path: str
    versions: List[int]


class DeleteSecretMetadata(Endpoint):
    """DELETE {mount}/metadata/{path}. Removes every version permanently."""

    method = RequestMethod.DELETE
    path_template = "{mount}/metadata/{path}"
    path_fields = frozenset({"mount", "path"})
    response_key = ResponseKey.NONE

    mount: str
    path: str


async def set(client, mount: str, path: str, data: Dict[str, Any], cas: Optional[int] = None) -> SecretVersionMetadata:
    return await client.execute(SetSecret(mount=mount, path=path, data=data, cas=cas))


async def read(client, mount: str, path: str, version: Optional[int] = None) -> Dict[str, Any]:
    return await client.execute(ReadSecret(mount=mount, path=path, version=version))


async def list(client, mount: str, path: str = "") -> List[str]:
    return await client.execute(ListSecrets(mount=mount, path=path))


async def read_metadata(client, mount: str, path: str) -> SecretMetadata:
    return await client.execute(ReadSecretMetadata(mount=mount, path=path))


async def delete_latest(client, mount: str, path: str) -> None:
    await client.execute(DeleteLatestSecretVersion(mount=mount, path=path))


async def delete_versions(client, mount: str, path: str, versions: List[int]) -> None:
    await client.execute(DeleteSecretVersions(mount=mount, path=path, versions=versions))


async def undelete_versions(client, mount: str, path: str, versions: List[int]) -> None:
    await client.execute(UndeleteSecretVersions(mount=mount, path=path, versions=versions))


async def destroy_versions(client, mount: str, path: str, versions: List[int]) -> None:
    await client.execute(DestroySecretVersions(mount=mount, path=path, versions=versions))


async def delete_metadata(client, mount: str, path: str) -> None:
    await client.execute(DeleteSecretMetadata(mount=mount, path=path))
