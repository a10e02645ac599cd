"""Tests for the remote endpoint client."""

import json
from unittest.mock import Mock

import pytest
import requests

from recordquery.client.restlet import RestletClient, encode_params, standardize_response

ENDPOINTS = {
    "get_record": {"script_id": 175, "deploy_id": 1},
    "get_related_record": {"script_id": 176, "deploy_id": 1},
}


def _client(session):
    return RestletClient("https://example.test/restlet", "token-123", ENDPOINTS, timeout=5, session=session)


def _response(payload):
    response = Mock()
    response.raise_for_status.return_value = None
    response.json.return_value = payload
    return response


def test_get_record_sends_script_deploy_and_encoded_params():
    session = Mock()
    session.get.return_value = _response({"status": 200, "message": "ok", "results": [{"type": "customer", "key": 1}]})
    request = {
        "recordType": "customer",
        "idOptions": [{"property": "entityid", "operator": "is", "value": "ACME"}],
    }

    payload = _client(session).get_record(request)

    _, kwargs = session.get.call_args
    assert kwargs["params"]["script"] == "175"
    assert kwargs["params"]["deploy"] == "1"
    assert kwargs["params"]["recordType"] == "customer"
    assert json.loads(kwargs["params"]["idOptions"]) == request["idOptions"]
    assert kwargs["headers"]["Authorization"] == "Bearer token-123"
    assert kwargs["timeout"] == 5
    assert payload["results"] == [{"type": "customer", "key": 1, "fields": {}, "sublists": {}}]
    assert payload["rejects"] == []


def test_related_records_uses_related_endpoint():
    session = Mock()
    session.get.return_value = _response({"status": 200, "results": []})
    _client(session).get_related_records({"parentRecordType": "customer"})
    _, kwargs = session.get.call_args
    assert kwargs["params"]["script"] == "176"


def test_transport_failure_raises_runtime_error():
    session = Mock()
    session.get.side_effect = requests.ConnectionError("unreachable")
    with pytest.raises(RuntimeError, match="Failed to call get_record"):
        _client(session).get_record({})


def test_http_error_raises_runtime_error():
    session = Mock()
    response = _response({})
    response.raise_for_status.side_effect = requests.HTTPError("401 Unauthorized")
    session.get.return_value = response
    with pytest.raises(RuntimeError):
        _client(session).get_record({})


def test_non_json_body_raises_runtime_error():
    session = Mock()
    response = _response(None)
    response.json.side_effect = requests.JSONDecodeError("Expecting value", "<html>", 0)
    session.get.return_value = response
    with pytest.raises(RuntimeError, match="Invalid JSON from get_record endpoint"):
        _client(session).get_record({})


def test_non_object_json_body_raises_runtime_error():
    session = Mock()
    session.get.return_value = _response(["not", "an", "envelope"])
    with pytest.raises(RuntimeError, match="Unexpected get_record response type: list"):
        _client(session).get_record({})


def test_client_requires_url_and_token():
    with pytest.raises(ValueError):
        RestletClient("", "token", ENDPOINTS)
    with pytest.raises(ValueError):
        RestletClient("https://example.test", "", ENDPOINTS)


def test_from_settings():
    settings = {"restlet_url": "https://example.test/restlet", "timeout_seconds": 12, **ENDPOINTS}
    client = RestletClient.from_settings(settings, access_token="abc", session=Mock())
    assert client.timeout == 12
    assert client.endpoints["get_related_record"]["script_id"] == 176


def test_encode_params_skips_none():
    assert encode_params({"a": "x", "b": None, "c": [1]}) == {"a": "x", "c": "[1]"}


def test_standardize_response_fills_missing_containers():
    response = standardize_response({"status": 404, "results": None, "rejects": "nope"})
    assert response["results"] == []
    assert response["rejects"] == []
