"""Client for the deployed GET endpoints that serve the two wire requests."""

import json
from typing import Any, Dict, Optional

import requests

from ..utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30


def encode_params(params: Dict[str, Any]) -> Dict[str, str]:
    """Query parameters: strings pass through, everything else is JSON-encoded."""
    encoded: Dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        encoded[key] = value if isinstance(value, str) else json.dumps(value)
    return encoded


def standardize_response(response: Dict[str, Any]) -> Dict[str, Any]:
    """Ensure ``results``/``rejects`` are lists and every result has ``fields``/``sublists`` dicts."""
    if not isinstance(response.get("results"), list):
        response["results"] = []
    if not isinstance(response.get("rejects"), list):
        response["rejects"] = []
    for result in response["results"]:
        if not isinstance(result, dict):
            continue
        if not result.get("fields"):
            result["fields"] = {}
        if not result.get("sublists"):
            result["sublists"] = {}
    return response


class RestletClient:
    """
    Sends wire requests to remote endpoints with a bearer token.

    Token acquisition is the caller's job; the client only attaches it.
    """

    def __init__(
        self,
        base_url: str,
        access_token: str,
        endpoints: Dict[str, Dict[str, int]],
        timeout: int = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        if not base_url:
            raise ValueError("base_url is required")
        if not access_token:
            raise ValueError("access_token is required")
        self.base_url = base_url
        self.access_token = access_token
        self.endpoints = endpoints
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, endpoint_settings: Dict[str, Any], access_token: str, **kwargs) -> "RestletClient":
        """Build a client from ``get_endpoint_settings()`` output."""
        return cls(
            base_url=endpoint_settings.get("restlet_url") or "",
            access_token=access_token,
            endpoints={
                "get_record": endpoint_settings["get_record"],
                "get_related_record": endpoint_settings["get_related_record"],
            },
            timeout=endpoint_settings.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS),
            **kwargs,
        )

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _get(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        ids = self.endpoints.get(endpoint)
        if not ids or not ids.get("script_id") or not ids.get("deploy_id"):
            raise ValueError(f"Endpoint '{endpoint}' has no script_id/deploy_id configured")
        query = {"script": str(ids["script_id"]), "deploy": str(ids["deploy_id"]), **encode_params(params)}
        try:
            response = self.session.get(
                self.base_url,
                params=query,
                headers=self._get_headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise RuntimeError(f"Failed to call {endpoint} endpoint: {e}") from e
        # requests.JSONDecodeError subclasses RequestException
        try:
            payload = response.json()
        except ValueError as e:
            raise RuntimeError(f"Invalid JSON from {endpoint} endpoint: {e}") from e
        if not isinstance(payload, dict):
            raise RuntimeError(f"Unexpected {endpoint} response type: {type(payload).__name__}")
        logger.debug(f"{endpoint} returned status {payload.get('status')}")
        return standardize_response(payload)

    def get_record(self, request: Dict[str, Any]) -> Dict[str, Any]:
        return self._get("get_record", request)

    def get_related_records(self, request: Dict[str, Any]) -> Dict[str, Any]:
        return self._get("get_related_record", request)
