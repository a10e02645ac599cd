from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from ..query.log_buffer import DEFAULT_LOG_LIMIT, BoundedLogger
from ..query.record_types import DEFAULT_SUBRECORD_FIELDS
from ..query.resolver import DEFAULT_PROBE_SIZE
from ..query.traversal import DEFAULT_PAGE_SIZE
from ..store.base import MAX_PAGE_SIZE, MIN_PAGE_SIZE

DEFAULT_CONFIG_PATH = Path("recordquery.config.yaml")
DEFAULT_SQLITE_PATH = "recordquery.db"
DEFAULT_TIMEOUT_SECONDS = 30

DEFAULT_ENDPOINTS: Dict[str, Dict[str, int]] = {
    "get_record": {"script_id": 175, "deploy_id": 1},
    "get_related_record": {"script_id": 176, "deploy_id": 1},
}


class EngineSettings(BaseModel):
    """Tunables for one request. Defaults match the deployed endpoints."""
    page_size: int = Field(DEFAULT_PAGE_SIZE, ge=MIN_PAGE_SIZE, le=MAX_PAGE_SIZE)
    probe_size: int = Field(DEFAULT_PROBE_SIZE, ge=2)
    log_limit_per_severity: int = Field(DEFAULT_LOG_LIMIT, ge=0)
    subrecord_fields: FrozenSet[str] = DEFAULT_SUBRECORD_FIELDS

    @field_validator("subrecord_fields", mode="before")
    @classmethod
    def _lowercase_fields(cls, v):
        if v is None:
            return DEFAULT_SUBRECORD_FIELDS
        if isinstance(v, str):
            v = [v]
        return frozenset(str(f).strip().lower() for f in v if str(f).strip())

    def new_logger(self) -> BoundedLogger:
        return BoundedLogger(limit=self.log_limit_per_severity)


def load_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load the YAML config file.

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the file is not a mapping
    """
    cfg_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f)
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError("Config must be a dictionary")
    return config


def _section(config: Optional[Dict[str, Any]], name: str) -> Dict[str, Any]:
    section = (config or {}).get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Config '{name}' must be a dictionary if provided")
    return section


def get_engine_settings(config: Optional[Dict[str, Any]] = None) -> EngineSettings:
    """Build EngineSettings from the ``engine`` section; invalid values raise ValueError."""
    section = {k: v for k, v in _section(config, "engine").items() if v is not None}
    return EngineSettings(**section)


def get_storage_settings(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    section = _section(config, "storage")
    return {"sqlite_path": str(section.get("sqlite_path") or DEFAULT_SQLITE_PATH)}


def _endpoint(section: Dict[str, Any], name: str) -> Dict[str, int]:
    entry = section.get(name) or {}
    if not isinstance(entry, dict):
        raise ValueError(f"Config 'endpoints.{name}' must be a dictionary if provided")
    merged = {**DEFAULT_ENDPOINTS[name], **{k: v for k, v in entry.items() if v is not None}}
    try:
        return {"script_id": int(merged["script_id"]), "deploy_id": int(merged["deploy_id"])}
    except (TypeError, ValueError) as e:
        raise ValueError(f"Config 'endpoints.{name}' ids must be integers") from e


def get_endpoint_settings(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Normalize the ``endpoints`` section.

    ``restlet_url`` has no default; it is None when not configured.
    """
    section = _section(config, "endpoints")
    timeout = section.get("timeout_seconds")
    return {
        "restlet_url": section.get("restlet_url") or None,
        "get_record": _endpoint(section, "get_record"),
        "get_related_record": _endpoint(section, "get_related_record"),
        "timeout_seconds": int(timeout) if timeout is not None else DEFAULT_TIMEOUT_SECONDS,
    }
