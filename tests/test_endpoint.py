"""
Endpoint contract tests.

These tests build requests and decode responses without any network I/O.
"""

import json
from typing import Any, Dict, Optional

import pytest
from pydantic import BaseModel

from vault_client import Endpoint, RequestMethod, ResponseKey, VaultClientSerializationError
from vault_client.api import kv1, kv2, pki, system, token
from vault_client.endpoint import parse_document


class Widget(BaseModel):
    name: str
    size: int


class WriteWidget(Endpoint):
    method = RequestMethod.POST
    path_template = "widgets/{mount}/{name}"
    path_fields = frozenset({"mount", "name"})
    query_fields = frozenset({"dry_run"})
    response_model = Widget

    mount: str
    name: str
    size: int
    color: Optional[str] = None
    dry_run: Optional[bool] = None


class TestRequestBuilding:
    """Test method, path, query and body construction."""

    def test_path_fields_are_substituted(self):
        endpoint = WriteWidget(mount="shop", name="gear", size=3)
        assert endpoint.build_path() == "widgets/shop/gear"

    def test_path_segments_are_quoted_but_keep_slashes(self):
        endpoint = kv2.ReadSecret(mount="secret", path="/team a/db#1/")
        assert endpoint.build_path() == "secret/data/team%20a/db%231"

    def test_body_excludes_path_query_and_unset_fields(self):
        endpoint = WriteWidget(mount="shop", name="gear", size=3, dry_run=True)
        assert endpoint.build_body() == {"size": 3}

    def test_query_renders_booleans_in_lowercase(self):
        endpoint = WriteWidget(mount="shop", name="gear", size=3, dry_run=True)
        assert endpoint.build_query() == {"dry_run": "true"}

    def test_query_skips_unset_values(self):
        assert kv2.ReadSecret(mount="secret", path="a").build_query() == {}
        assert kv2.ReadSecret(mount="secret", path="a", version=2).build_query() == {"version": "2"}

    def test_get_sends_no_body(self):
        assert kv1.GetSecret(mount="secret", path="a").build_body() is None

    def test_list_is_sent_as_get_with_list_query(self):
        endpoint = kv2.ListSecrets(mount="secret", path="team")
        assert endpoint.http_method() == "GET"
        assert endpoint.build_query() == {"list": "true"}
        assert endpoint.build_path() == "secret/metadata/team"

    def test_kv2_set_wraps_data_and_options(self):
        endpoint = kv2.SetSecret(mount="secret", path="app", data={"key": "value"}, cas=0)
        assert endpoint.build_body() == {"data": {"key": "value"}, "options": {"cas": 0}}

    def test_kv1_set_sends_the_secret_as_body(self):
        endpoint = kv1.SetSecret(mount="secret", path="mysecret", data={"key": "super", "password": "secret"})
        assert endpoint.build_body() == {"key": "super", "password": "secret"}

    def test_unencodable_body_is_a_serialization_error(self):
        endpoint = kv1.SetSecret(mount="secret", path="a", data={"handle": object()})
        with pytest.raises(VaultClientSerializationError):
            endpoint.build_body()

    def test_endpoints_are_immutable(self):
        endpoint = pki.ReadCertificate(mount="pki", serial="aa:bb")
        with pytest.raises(Exception):
            endpoint.serial = "cc:dd"

    def test_unknown_fields_are_rejected(self):
        with pytest.raises(Exception):
            token.LookupToken(token="abc", accessor="nope")


class TestResponseDecoding:
    """Test payload selection and validation."""

    def _decode(self, endpoint: Endpoint, document: Dict[str, Any]) -> Any:
        return endpoint.decode(document, json.dumps(document))

    def test_data_payload_is_validated(self):
        endpoint = WriteWidget(mount="shop", name="gear", size=3)
        widget = self._decode(endpoint, {"data": {"name": "gear", "size": 3}})
        assert widget == Widget(name="gear", size=3)

    def test_decode_value_hook(self):
        endpoint = kv2.ReadSecret(mount="secret", path="app")
        document = {
            "data": {
                "data": {"key": "value"},
                "metadata": {"created_time": "2024-01-01T00:00:00Z", "version": 1},
            }
        }
        assert self._decode(endpoint, document) == {"key": "value"}

    def test_root_payload(self):
        document = {"initialized": True, "sealed": False, "standby": False, "version": "1.15.2"}
        health = self._decode(system.ReadHealth(), document)
        assert health.version == "1.15.2"
        assert health.sealed is False

    def test_no_payload_endpoint_ignores_body(self):
        assert self._decode(kv1.DeleteSecret(mount="secret", path="a"), {}) is None

    def test_missing_payload_is_a_serialization_error(self):
        endpoint = kv1.GetSecret(mount="secret", path="a")
        with pytest.raises(VaultClientSerializationError) as excinfo:
            endpoint.decode({"data": None}, '{"data": null}')
        assert excinfo.value.content == '{"data": null}'

    def test_shape_mismatch_carries_raw_body(self):
        endpoint = WriteWidget(mount="shop", name="gear", size=3)
        raw = '{"data": {"name": "gear", "size": "huge"}}'
        with pytest.raises(VaultClientSerializationError) as excinfo:
            endpoint.decode(json.loads(raw), raw)
        assert excinfo.value.content == raw

    def test_auth_payload(self):
        endpoint = token.CreateToken(policies=["default"])
        auth = self._decode(endpoint, {"data": None, "auth": {"client_token": "hvs.new", "policies": ["default"]}})
        assert auth.client_token == "hvs.new"
        assert endpoint.response_key is ResponseKey.AUTH


class TestParseDocument:
    """Test parsing of raw response bodies."""

    def test_empty_body(self):
        assert parse_document("") == {}

    def test_invalid_json(self):
        with pytest.raises(VaultClientSerializationError) as excinfo:
            parse_document("<html>")
        assert excinfo.value.content == "<html>"

    def test_non_object_json(self):
        with pytest.raises(VaultClientSerializationError):
            parse_document("[1, 2, 3]")
