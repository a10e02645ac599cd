"""Tests for config loading and settings normalization."""

import pytest

from recordquery.config.loader import (
    EngineSettings,
    get_endpoint_settings,
    get_engine_settings,
    get_storage_settings,
    load_config,
)
from recordquery.query.log_buffer import Severity


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_load_config_requires_mapping(tmp_path):
    cfg = tmp_path / "recordquery.config.yaml"
    cfg.write_text("- not\n- a mapping\n", encoding="utf-8")
    with pytest.raises(ValueError, match="dictionary"):
        load_config(cfg)


def test_defaults_when_sections_missing():
    settings = get_engine_settings({})
    assert settings == EngineSettings()
    assert (settings.page_size, settings.probe_size, settings.log_limit_per_severity) == (100, 10, 5)
    assert "addressbookaddress" in settings.subrecord_fields
    assert get_storage_settings({}) == {"sqlite_path": "recordquery.db"}

    endpoints = get_endpoint_settings(None)
    assert endpoints["restlet_url"] is None
    assert endpoints["get_record"] == {"script_id": 175, "deploy_id": 1}
    assert endpoints["get_related_record"] == {"script_id": 176, "deploy_id": 1}
    assert endpoints["timeout_seconds"] == 30


def test_engine_section_from_yaml(tmp_path):
    cfg = tmp_path / "recordquery.config.yaml"
    cfg.write_text(
        "engine:\n"
        "  page_size: 250\n"
        "  log_limit_per_severity: 2\n"
        "  subrecord_fields: [BillingAddress]\n"
        "endpoints:\n"
        "  restlet_url: https://example.test/restlet\n"
        "  get_record: {script_id: '900'}\n",
        encoding="utf-8",
    )
    config = load_config(cfg)

    settings = get_engine_settings(config)
    assert settings.page_size == 250
    assert settings.subrecord_fields == frozenset({"billingaddress"})
    assert len(settings.new_logger().counters) == 5
    assert settings.new_logger().counters[Severity.ERROR].limit == 2

    endpoints = get_endpoint_settings(config)
    assert endpoints["restlet_url"] == "https://example.test/restlet"
    assert endpoints["get_record"] == {"script_id": 900, "deploy_id": 1}


@pytest.mark.parametrize("engine", [{"page_size": 4}, {"page_size": 1001}, {"probe_size": 1}])
def test_invalid_engine_values_raise(engine):
    with pytest.raises(ValueError):
        get_engine_settings({"engine": engine})


def test_non_mapping_section_raises():
    with pytest.raises(ValueError, match="storage"):
        get_storage_settings({"storage": "recordquery.db"})
