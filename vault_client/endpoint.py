"""
Declarative description of a single Vault API operation.

An endpoint knows how to build its request (method, path, query, body) and
how to decode the JSON document Vault answers with. It never performs I/O
itself; ``VaultClient.execute`` does that.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, Generic, List, Optional, Type, TypeVar
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic_core import PydanticSerializationError, to_jsonable_python

from .errors import VaultClientSerializationError

T = TypeVar("T")


class RequestMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    LIST = "LIST"


class ResponseKey(str, Enum):
    """Where an endpoint's payload lives in the response document."""
    DATA = "data"
    AUTH = "auth"
    ROOT = "root"
    NONE = "none"


class WrapInfo(BaseModel):
    """The ``wrap_info`` block returned in place of ``data`` for wrapped responses."""

    model_config = ConfigDict(extra="ignore")

    token: str
    accessor: Optional[str] = None
    ttl: int
    creation_time: str
    creation_path: str
    wrapped_accessor: Optional[str] = None


class AuthInfo(BaseModel):
    """The ``auth`` block returned by login and token-creation endpoints."""

    model_config = ConfigDict(extra="ignore")

    client_token: str
    accessor: str = ""
    policies: List[str] = []
    token_policies: List[str] = []
    metadata: Optional[Dict[str, Any]] = None
    lease_duration: int = 0
    renewable: bool = False
    entity_id: str = ""
    token_type: str = ""
    orphan: bool = False


class ResponseEnvelope(BaseModel):
    """The fields Vault wraps around every successful response."""

    model_config = ConfigDict(extra="ignore")

    request_id: Optional[str] = None
    lease_id: Optional[str] = None
    renewable: Optional[bool] = None
    lease_duration: Optional[int] = None
    data: Optional[Any] = None
    wrap_info: Optional[WrapInfo] = None
    warnings: Optional[List[str]] = None
    auth: Optional[AuthInfo] = None


@dataclass
class VaultResponse(Generic[T]):
    """A decoded value together with the envelope metadata it arrived in."""
    value: T
    status: int
    warnings: List[str] = field(default_factory=list)
    request_id: Optional[str] = None
    lease_id: Optional[str] = None
    lease_duration: Optional[int] = None
    renewable: Optional[bool] = None
    wrap_info: Optional[WrapInfo] = None
    auth: Optional[AuthInfo] = None


class Endpoint(BaseModel):
    """
    Base class for every Vault operation.

    Subclasses declare their request shape through class variables and their
    parameters as pydantic fields. Fields named in ``path_fields`` are
    substituted into ``path_template``, fields named in ``query_fields`` are
    sent as query parameters and every other non-None field goes into the
    JSON body.

    ``response_model`` validates the payload selected by ``response_key``.
    When it is None the payload is returned as plain JSON data.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    method: ClassVar[RequestMethod] = RequestMethod.GET
    path_template: ClassVar[str] = ""
    path_fields: ClassVar[FrozenSet[str]] = frozenset()
    query_fields: ClassVar[FrozenSet[str]] = frozenset()
    response_model: ClassVar[Optional[Type[BaseModel]]] = None
    response_key: ClassVar[ResponseKey] = ResponseKey.DATA

    def build_path(self) -> str:
        values = {
            name: quote(str(getattr(self, name)).strip("/"), safe="/")
            for name in self.path_fields
        }
        return self.path_template.format(**values)

    def http_method(self) -> str:
        """LIST is sent as GET with ?list=true, which Vault treats the same."""
        if self.method is RequestMethod.LIST:
            return RequestMethod.GET.value
        return self.method.value

    def build_query(self) -> Dict[str, str]:
        query = {"list": "true"} if self.method is RequestMethod.LIST else {}
        for name in sorted(self.query_fields):
            value = getattr(self, name)
            if value is None:
                continue
            query[name] = str(value).lower() if isinstance(value, bool) else str(value)
        return query

    def request_body(self) -> Optional[Dict[str, Any]]:
        """The JSON body before encoding. Endpoints with a custom layout override this."""
        return self.model_dump(
            by_alias=True,
            exclude_none=True,
            exclude=set(self.path_fields | self.query_fields),
        )

    def build_body(self) -> Optional[Dict[str, Any]]:
        """
        Serialize the body of this endpoint.

        Returns:
            The JSON body, or None when the endpoint sends no body

        Raises:
            VaultClientSerializationError: If a field cannot be encoded as JSON
        """
        if self.method in (RequestMethod.GET, RequestMethod.LIST):
            return None
        try:
            body = to_jsonable_python(self.request_body())
        except PydanticSerializationError as e:
            raise VaultClientSerializationError(
                f"Failed to encode request body for {type(self).__name__}: {e}"
            ) from e
        return body or None

    def select_payload(self, document: Dict[str, Any]) -> Any:
        if self.response_key is ResponseKey.ROOT:
            return document
        return document.get(self.response_key.value)

    def decode(self, document: Dict[str, Any], raw: str) -> Any:
        """
        Decode a successful response document into this endpoint's result.

        Args:
            document: The parsed JSON response
            raw: The response body as received, kept for diagnostics

        Returns:
            The decoded result, or None for endpoints without a payload

        Raises:
            VaultClientSerializationError: If the payload is missing or does not
                match the declared response shape
        """
        if self.response_key is ResponseKey.NONE:
            return None

        payload = self.select_payload(document)
        if payload is None:
            raise VaultClientSerializationError(
                f"Response for {type(self).__name__} has no '{self.response_key.value}' payload",
                content=raw,
            )

        if self.response_model is None:
            return self.decode_value(payload)

        try:
            value = self.response_model.model_validate(payload)
        except ValidationError as e:
            raise VaultClientSerializationError(
                f"Failed to decode {self.response_model.__name__} for {type(self).__name__}: {e}",
                content=raw,
            ) from e
        return self.decode_value(value)

    def decode_value(self, value: Any) -> Any:
        """Hook for endpoints that return part of their decoded model."""
        return value


def parse_document(raw: str) -> Dict[str, Any]:
    """
    Parse a response body into a JSON object.

    Empty bodies (204 No Content) parse to an empty document.

    Raises:
        VaultClientSerializationError: If the body is not a JSON object
    """
    if not raw.strip():
        return {}
    try:
        document = json.loads(raw)
    except json.JSONDecodeError as e:
        raise VaultClientSerializationError(f"Invalid JSON response: {e}", content=raw) from e
    if not isinstance(document, dict):
        raise VaultClientSerializationError("Response body is not a JSON object", content=raw)
    return document
