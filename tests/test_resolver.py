"""Tests for identifier resolution."""

import pytest

from fakes import FakeStore
from recordquery.query.log_buffer import BoundedLogger
from recordquery.query.models import IdCandidate, RecordLocator
from recordquery.query.record_types import RecordType
from recordquery.query.resolver import locator_from_fields, resolve
from recordquery.store.base import RecordStoreError


def _locator(record_type, *candidates):
    return RecordLocator(
        type=record_type,
        candidates=[IdCandidate(property=p, operator=o, value=v) for p, o, v in candidates],
    )


def test_first_unique_match_short_circuits(log):
    store = FakeStore({("externalid", "EXT-1"): [5], ("entityid", "E-1"): [6]})
    locator = _locator(
        RecordType.CUSTOMER,
        ("externalid", "is", "EXT-1"),
        ("entityid", "is", "E-1"),
    )

    assert resolve(store, locator, log) == 5
    assert len(store.searches) == 1


def test_ambiguous_candidate_defers_to_later_unique_match(log):
    store = FakeStore({("companyname", "Globex"): [2, 3], ("entityid", "GLOBEX-2"): [3]})
    locator = _locator(
        RecordType.CUSTOMER,
        ("companyname", "is", "Globex"),
        ("entityid", "is", "GLOBEX-2"),
    )

    assert resolve(store, locator, log) == 3
    warnings = [e for e in log.to_list() if e["severity"] == "warning"]
    assert len(warnings) == 1
    assert "tentative internalid: 2" in warnings[0]["detail"][-1]


def test_ambiguous_only_candidate_returns_tentative_key(log):
    """Documented quirk: an ambiguous match is returned when nothing better turns up."""
    store = FakeStore({("companyname", "Globex"): [2, 3]})
    locator = _locator(RecordType.CUSTOMER, ("companyname", "is", "Globex"))

    assert resolve(store, locator, log) == 2
    assert any(e["severity"] == "audit" for e in log.to_list())


def test_first_ambiguous_key_is_kept(log):
    store = FakeStore({("companyname", "Globex"): [2, 3], ("phone", "555"): [8, 9]})
    locator = _locator(
        RecordType.CUSTOMER,
        ("companyname", "is", "Globex"),
        ("phone", "is", "555"),
    )
    assert resolve(store, locator, log) == 2


def test_one_element_list_counts_as_single_value(log):
    store = FakeStore({("entityid", "GLOBEX"): [2, 3]})
    locator = _locator(RecordType.CUSTOMER, ("entityid", "anyof", ["GLOBEX"]))
    assert resolve(store, locator, log) == 2


def test_multi_value_candidate_with_several_matches_selects_nothing(log):
    store = FakeStore({("internalid", 2): [2, 3]})
    locator = _locator(RecordType.CUSTOMER, ("internalid", "anyof", [2, 3]))

    assert resolve(store, locator, log) is None
    assert not any(e["severity"] == "warning" for e in log.to_list())


def test_zero_matches_everywhere_returns_none(log):
    store = FakeStore()
    locator = _locator(RecordType.CUSTOMER, ("externalid", "is", "EXT-1"))
    assert resolve(store, locator, log) is None
    assert [e["severity"] for e in log.to_list()] == ["debug"]


def test_failing_candidate_is_logged_and_skipped(log):
    store = FakeStore({("externalid", "EXT-1"): RecordStoreError("search exploded"), ("entityid", "E-1"): [6]})
    locator = _locator(
        RecordType.CUSTOMER,
        ("externalid", "is", "EXT-1"),
        ("entityid", "is", "E-1"),
    )

    assert resolve(store, locator, log) == 6
    errors = [e for e in log.to_list() if e["severity"] == "error"]
    assert len(errors) == 1
    assert "RecordStoreError: search exploded" in errors[0]["detail"]


def test_unknown_operator_is_a_skipped_candidate(log):
    store = FakeStore({("entityid", "E-1"): [6]})
    locator = _locator(
        RecordType.CUSTOMER,
        ("externalid", "matches", "EXT-1"),
        ("entityid", "is", "E-1"),
    )
    assert resolve(store, locator, log) == 6
    assert len(store.searches) == 1


def test_probe_size_below_two_rejected(log):
    locator = _locator(RecordType.CUSTOMER, ("externalid", "is", "EXT-1"))
    with pytest.raises(ValueError):
        resolve(FakeStore(), locator, log, probe_size=1)


def test_resolve_against_sqlite_store(store, log):
    locator = _locator(
        RecordType.CUSTOMER,
        ("externalid", "is", "missing"),
        ("entityid", "is", "acme"),
    )
    assert resolve(store, locator, log) == 42


def test_resolve_ambiguity_against_sqlite_store(store):
    log = BoundedLogger()
    locator = _locator(RecordType.CUSTOMER, ("companyname", "is", "Globex"))
    assert resolve(store, locator, log) == 2


def test_locator_from_fields_orders_identifier_properties():
    locator = locator_from_fields(
        RecordType.SALES_ORDER,
        {"tranid": "SO-100", "externalid": "X-1", "internalid": "100", "memo": "ignored"},
    )
    assert [(c.prop, c.operator, c.value) for c in locator.candidates] == [
        ("internalid", "anyof", 100),
        ("externalid", "is", "X-1"),
        ("tranid", "is", "SO-100"),
    ]


def test_locator_from_fields_without_identifiers():
    assert locator_from_fields(RecordType.CUSTOMER, {"companyname": "Acme", "internalid": "abc"}) is None


def test_id_candidate_accepts_wire_keys():
    candidate = IdCandidate(idProp="entityid", searchOperator="is", idValue=["ACME"])
    assert candidate.prop == "entityid"
    assert candidate.operator == "is"
    assert candidate.values == ["ACME"]
    assert candidate.expects_single
