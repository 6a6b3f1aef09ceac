"""Login endpoints for the supported auth methods."""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from ..endpoint import AuthInfo, Endpoint, RequestMethod, ResponseKey


class AppRoleLoginRequest(Endpoint):
    method = RequestMethod.POST
    path_template = "auth/{mount}/login"
    path_fields = frozenset({"mount"})
    response_model = AuthInfo
    response_key = ResponseKey.AUTH

    mount: str
    role_id: str
    secret_id: Optional[str] = None


class UserpassLoginRequest(Endpoint):
    method = RequestMethod.POST
    path_template = "auth/{mount}/login/{username}"
    path_fields = frozenset({"mount", "username"})
    response_model = AuthInfo
    response_key = ResponseKey.AUTH

    mount: str
    username: str
    password: str


class JWTLoginRequest(Endpoint):
    method = RequestMethod.POST
    path_template = "auth/{mount}/login"
    path_fields = frozenset({"mount"})
    response_model = AuthInfo
    response_key = ResponseKey.AUTH

    mount: str
    jwt: str
    role: Optional[str] = None


class KubernetesLoginRequest(Endpoint):
    method = RequestMethod.POST
    path_template = "auth/{mount}/login"
    path_fields = frozenset({"mount"})
    response_model = AuthInfo
    response_key = ResponseKey.AUTH

    mount: str
    role: str
    jwt: str


class OIDCAuthURLResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    auth_url: str


class OIDCAuthURLRequest(Endpoint):
    method = RequestMethod.POST
    path_template = "auth/{mount}/oidc/auth_url"
    path_fields = frozenset({"mount"})
    response_model = OIDCAuthURLResponse

    mount: str
    redirect_uri: str
    role: Optional[str] = None


class OIDCCallbackRequest(Endpoint):
    path_template = "auth/{mount}/oidc/callback"
    path_fields = frozenset({"mount"})
    query_fields = frozenset({"state", "nonce", "code"})
    response_model = AuthInfo
    response_key = ResponseKey.AUTH

    mount: str
    state: str
    nonce: str
    code: str
