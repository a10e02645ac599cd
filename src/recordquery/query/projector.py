"""Field/sublist/subrecord projection of a loaded record into a RecordSnapshot."""

from typing import Any, Dict, FrozenSet, List, Optional, Union

from recordquery.query.log_buffer import BoundedLogger
from recordquery.query.models import AllFields, FieldSelection, ProjectionSpec, RecordSnapshot
from recordquery.query.outcome import Skip
from recordquery.query.record_types import DEFAULT_SUBRECORD_FIELDS, IdProperty, RecordType
from recordquery.store.base import RecordHandle

PRIMARY_KEY_FIELD = IdProperty.INTERNAL_ID.value
LINE_ID_FIELD = "id"


def _read_field(
    record: RecordHandle,
    field_id: str,
    subrecord_fields: FrozenSet[str],
) -> Union[Any, Skip]:
    try:
        if field_id in subrecord_fields:
            return record.get_subrecord(field_id)
        return record.get_value(field_id)
    except Exception as e:
        return Skip.from_exception("field read failed", e, f"fieldId: '{field_id}'")


def _read_sublist_field(
    record: RecordHandle,
    sublist_id: str,
    field_id: str,
    line: int,
    subrecord_fields: FrozenSet[str],
) -> Union[Any, Skip]:
    try:
        if field_id in subrecord_fields:
            return record.get_sublist_subrecord(sublist_id, field_id, line)
        return record.get_sublist_value(sublist_id, field_id, line)
    except Exception as e:
        return Skip.from_exception(
            "sublist field read failed", e,
            f"sublistId: '{sublist_id}'", f"fieldId: '{field_id}'", f"line: {line}",
        )


def project_fields(
    record: RecordHandle,
    field_ids: List[str],
    log: BoundedLogger,
    subrecord_fields: FrozenSet[str] = DEFAULT_SUBRECORD_FIELDS,
) -> Dict[str, Any]:
    """Body fields; ``internalid`` is always included, missing values are omitted."""
    fields: Dict[str, Any] = {PRIMARY_KEY_FIELD: record.key}
    for raw_id in field_ids:
        field_id = raw_id.strip().lower()
        if not field_id or field_id == PRIMARY_KEY_FIELD:
            continue
        value = _read_field(record, field_id, subrecord_fields)
        if isinstance(value, Skip):
            log.error(f"[project_fields()] Error getting value for fieldId '{field_id}'", *value.detail)
            continue
        if value is None:
            continue
        fields[field_id] = value
    return fields


def _build_line(
    record: RecordHandle,
    sublist_id: str,
    line: int,
    field_ids: List[str],
    log: BoundedLogger,
    subrecord_fields: FrozenSet[str],
) -> Union[Dict[str, Any], Skip]:
    try:
        entry: Dict[str, Any] = {"lineIndex": line}
        line_id = record.get_sublist_value(sublist_id, LINE_ID_FIELD, line)
        line_key = record.get_sublist_value(sublist_id, PRIMARY_KEY_FIELD, line)
    except Exception as e:
        return Skip.from_exception("sublist line read failed", e, f"sublistId: '{sublist_id}'", f"line: {line}")
    if line_id is not None:
        entry[LINE_ID_FIELD] = line_id
    if line_key is not None:
        entry["lineKey"] = line_key

    for field_id in field_ids:
        if field_id in (LINE_ID_FIELD, PRIMARY_KEY_FIELD):
            continue
        value = _read_sublist_field(record, sublist_id, field_id, line, subrecord_fields)
        if isinstance(value, Skip):
            log.error("[project_sublists()] Error getting sublist field value", *value.detail)
            continue
        if value is None:
            continue
        entry[field_id] = value
    return entry


def _resolve_selection(
    record: RecordHandle,
    sublist_id: str,
    selection: FieldSelection,
) -> Union[List[str], Skip]:
    if not isinstance(selection, AllFields):
        return list(selection.names)
    try:
        return list(record.get_sublist_fields(sublist_id))
    except Exception as e:
        return Skip.from_exception("sublist field listing failed", e, f"sublistId: '{sublist_id}'")


def project_sublists(
    record: RecordHandle,
    sublists: Dict[str, FieldSelection],
    log: BoundedLogger,
    subrecord_fields: FrozenSet[str] = DEFAULT_SUBRECORD_FIELDS,
) -> Dict[str, List[Dict[str, Any]]]:
    """
    Project the requested sublists line by line.

    A sublist missing from the record is logged and skipped; a line or field
    that fails to read is logged and skipped without affecting its siblings.
    """
    result: Dict[str, List[Dict[str, Any]]] = {}
    for sublist_id, selection in sublists.items():
        try:
            exists = record.get_sublist(sublist_id)
            line_count = record.get_line_count(sublist_id) if exists else 0
        except Exception as e:
            log.error(f"[project_sublists()] Unable to read sublist '{sublist_id}'", e)
            continue
        if not exists:
            log.error("[project_sublists()] Invalid sublistId", f"sublistId '{sublist_id}' not found on record")
            continue

        result[sublist_id] = []
        if line_count == 0:
            log.debug(f"[project_sublists()] No lines found for sublistId '{sublist_id}'")
            continue

        field_ids = _resolve_selection(record, sublist_id, selection)
        if isinstance(field_ids, Skip):
            log.error(f"[project_sublists()] {field_ids.reason}", *field_ids.detail)
            field_ids = []

        for line in range(line_count):
            entry = _build_line(record, sublist_id, line, field_ids, log, subrecord_fields)
            if isinstance(entry, Skip):
                log.error(f"[project_sublists()] {entry.reason}", *entry.detail)
                continue
            result[sublist_id].append(entry)
    return result


def project(
    record: RecordHandle,
    record_type: RecordType,
    spec: Optional[ProjectionSpec],
    log: BoundedLogger,
    subrecord_fields: FrozenSet[str] = DEFAULT_SUBRECORD_FIELDS,
) -> RecordSnapshot:
    """Project one loaded record. The snapshot key is the store's key for the record."""
    snapshot = RecordSnapshot(type=record_type, key=int(record.key))
    if spec is None:
        return snapshot
    if spec.fields:
        snapshot.fields = project_fields(record, list(spec.fields), log, subrecord_fields)
    if spec.sublists:
        snapshot.sublists = project_sublists(record, spec.sublists, log, subrecord_fields)
    return snapshot
