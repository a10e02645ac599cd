"""Repository for records and sublist_lines table operations."""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml
from sqlalchemy import func
from sqlalchemy.orm import Session

from recordquery.database.schema import StoredRecord, StoredSublistLine
from recordquery.query.record_types import NOT_VALID, validate_record_type
from recordquery.utils.logging import get_logger
from recordquery.utils.time import utc_now_z

logger = get_logger(__name__)


def _loads(payload: Optional[str], default: Any) -> Any:
    if not payload:
        return default
    try:
        return json.loads(payload)
    except (json.JSONDecodeError, TypeError):
        return default


def load_fields(row: StoredRecord) -> Dict[str, Any]:
    fields = _loads(row.fields_json, {})
    return fields if isinstance(fields, dict) else {}


def load_line_values(line: StoredSublistLine) -> Dict[str, Any]:
    values = _loads(line.values_json, {})
    return values if isinstance(values, dict) else {}


def load_sublist_ids(row: StoredRecord) -> List[str]:
    ids = _loads(row.sublist_ids_json, [])
    return [i for i in ids if isinstance(i, str)] if isinstance(ids, list) else []


def next_internal_id(session: Session, record_type: str) -> int:
    current = (
        session.query(func.max(StoredRecord.internal_id))
        .filter(StoredRecord.record_type == record_type)
        .scalar()
    )
    return (current or 0) + 1


def get_record_row(session: Session, record_type: str, internal_id: int) -> Optional[StoredRecord]:
    """Get record row by type and internal id."""
    return (
        session.query(StoredRecord)
        .filter(StoredRecord.record_type == record_type, StoredRecord.internal_id == internal_id)
        .first()
    )


def list_record_rows(session: Session, record_type: str) -> List[StoredRecord]:
    """All rows of one record type, in internal id order."""
    return (
        session.query(StoredRecord)
        .filter(StoredRecord.record_type == record_type)
        .order_by(StoredRecord.internal_id.asc())
        .all()
    )


def list_sublist_lines(
    session: Session,
    record_type: str,
    internal_id: int,
    sublist_id: Optional[str] = None,
) -> List[StoredSublistLine]:
    query = session.query(StoredSublistLine).filter(
        StoredSublistLine.record_type == record_type,
        StoredSublistLine.internal_id == internal_id,
    )
    if sublist_id:
        query = query.filter(StoredSublistLine.sublist_id == sublist_id)
    return query.order_by(StoredSublistLine.sublist_id.asc(), StoredSublistLine.line_index.asc()).all()


def save_record(
    session: Session,
    record_type: str,
    fields: Optional[Dict[str, Any]] = None,
    sublists: Optional[Dict[str, List[Dict[str, Any]]]] = None,
    internal_id: Optional[int] = None,
) -> StoredRecord:
    """
    Save one record with its sublist lines.

    Args:
        session: SQLAlchemy session
        record_type: Record type value (validated)
        fields: Body field values; subrecords are nested dicts
        sublists: {sublistId: [line values]}; an empty list declares the sublist
        internal_id: Explicit key; the next free key for the type when omitted

    Returns:
        StoredRecord row (the existing row when the key is already taken)
    """
    validated = validate_record_type(record_type)
    if validated is NOT_VALID:
        raise ValueError(f"Unknown record type: {record_type!r}")
    record_type = validated.value

    if internal_id is not None:
        existing = get_record_row(session, record_type, int(internal_id))
        if existing:
            logger.debug(f"Record already exists: {record_type}:{internal_id}")
            return existing
        key = int(internal_id)
    else:
        key = next_internal_id(session, record_type)

    sublists = sublists or {}
    row = StoredRecord(
        record_type=record_type,
        internal_id=key,
        fields_json=json.dumps(fields or {}, default=str),
        sublist_ids_json=json.dumps(sorted(sublists.keys())),
        created_at_utc=utc_now_z(),
    )
    session.add(row)

    for sublist_id, lines in sublists.items():
        for line_index, values in enumerate(lines or []):
            session.add(
                StoredSublistLine(
                    record_type=record_type,
                    internal_id=key,
                    sublist_id=sublist_id,
                    line_index=line_index,
                    values_json=json.dumps(values or {}, default=str),
                )
            )
    session.flush()
    logger.debug(f"Created record {record_type}:{key} with {len(sublists)} sublist(s)")
    return row


def seed_records(session: Session, entries: Iterable[Dict[str, Any]]) -> List[StoredRecord]:
    """
    Save fixture entries and commit.

    Each entry is ``{recordType, internalid?, fields?, sublists?}``.
    """
    rows = []
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ValueError(f"Fixture entry {i} must be a dictionary")
        record_type = entry.get("recordType")
        if not record_type:
            raise ValueError(f"Fixture entry {i} missing required field: recordType")
        rows.append(
            save_record(
                session,
                record_type=record_type,
                fields=entry.get("fields") or {},
                sublists=entry.get("sublists") or {},
                internal_id=entry.get("internalid"),
            )
        )
    session.commit()
    return rows


def load_fixture_file(path: Path) -> List[Dict[str, Any]]:
    """Read fixture records from a YAML (or JSON) file."""
    if not path.exists():
        raise FileNotFoundError(f"Fixture file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        payload = yaml.safe_load(f) or []
    if isinstance(payload, dict):
        payload = payload.get("records", [])
    if not isinstance(payload, list):
        raise ValueError("Fixture file must contain a list of records (or a 'records' list)")
    return payload
