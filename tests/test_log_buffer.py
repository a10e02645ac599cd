"""Tests for the request-scoped bounded logger."""

import logging

import pytest

from recordquery.query.log_buffer import BoundedLogger, Severity


def test_log_cap_keeps_limit_entries_and_true_counter():
    log = BoundedLogger(limit=5)
    kept = [log.warning(f"warning {i}") for i in range(8)]

    warnings = [e for e in log.to_list() if e["severity"] == "warning"]
    assert len(warnings) == 5
    assert kept == [True] * 5 + [False] * 3
    assert log.count(Severity.WARNING) == 8
    assert log.dropped(Severity.WARNING) == 3
    # The first five are the ones kept
    assert [e["title"] for e in warnings] == [f"warning {i}" for i in range(5)]


def test_log_caps_are_per_severity():
    log = BoundedLogger(limit=2)
    for _ in range(3):
        log.debug("d")
        log.error("e")
    log.audit("a")

    severities = [e["severity"] for e in log.to_list()]
    assert severities.count("debug") == 2
    assert severities.count("error") == 2
    assert severities.count("audit") == 1
    assert log.count("error") == 3


def test_custom_limit_for_one_severity():
    log = BoundedLogger(limit=1, limits={Severity.ERROR: 3})
    for _ in range(4):
        log.error("boom")
        log.debug("noise")
    assert len([e for e in log.entries if e.severity is Severity.ERROR]) == 3
    assert len([e for e in log.entries if e.severity is Severity.DEBUG]) == 1


def test_entry_shape_and_detail_rendering():
    log = BoundedLogger()
    log.error("[x()] failed", "plain", {"b": 1, "a": 2}, ValueError("bad"))
    entry = log.to_list()[0]

    assert set(entry) == {"timestamp", "severity", "title", "detail"}
    assert entry["timestamp"].endswith("Z")
    assert entry["detail"] == ["plain", '{"a": 2, "b": 1}', "ValueError: bad"]


def test_entry_without_detail_repeats_title():
    log = BoundedLogger()
    log.audit("done")
    assert log.to_list()[0]["detail"] == ["done"]


def test_only_kept_entries_are_mirrored_to_process_logger(caplog):
    caplog.set_level(logging.DEBUG, logger="recordquery")
    log = BoundedLogger(limit=2)
    for i in range(4):
        log.warning(f"mirror {i}")

    mirrored = [r for r in caplog.records if r.getMessage().startswith("mirror")]
    assert len(mirrored) == 2
    assert all(r.levelno == logging.WARNING for r in mirrored)


def test_negative_limit_rejected():
    with pytest.raises(ValueError):
        BoundedLogger(limit=-1)
