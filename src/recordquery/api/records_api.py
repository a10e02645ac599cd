"""Records API: the two request entry points and their response envelopes."""

import json
from typing import Any, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from ..config.loader import EngineSettings
from ..query.log_buffer import BoundedLogger
from ..query.models import ProjectionSpec, RecordSnapshot
from ..query.projector import project
from ..query.record_types import RecordType
from ..query.resolver import resolve
from ..query.traversal import traverse
from ..store.base import RecordStore
from ..utils.logging import get_logger
from .models import RelatedRecordRequest, ResponseEnvelope, SingleRecordRequest

logger = get_logger(__name__)

BAD_REQUEST_MESSAGE = "Bad Request: Invalid Parameter(s)"
NOT_FOUND_ERROR = "Record Not Found"

RequestModel = TypeVar("RequestModel", bound=BaseModel)


def _dump(request: Any) -> str:
    try:
        return json.dumps(request, default=str, sort_keys=True)
    except (TypeError, ValueError):
        return repr(request)


def _validation_details(e: ValidationError) -> List[str]:
    details = []
    for err in e.errors():
        location = ".".join(str(part) for part in err.get("loc", ())) or "request"
        details.append(f"{location}: {err.get('msg')}")
    return details


def _bad_request(source: str, request: Any, details: List[str], log: BoundedLogger) -> ResponseEnvelope:
    log.error(f"{source} {BAD_REQUEST_MESSAGE}", *details, f"requestContent: {_dump(request)}")
    return ResponseEnvelope(
        status=400,
        message=BAD_REQUEST_MESSAGE,
        error=f"{source} " + "; ".join(details),
        logs=log.to_list(),
        rejects=[request],
    )


def _parse(
    model: Type[RequestModel],
    source: str,
    request: Any,
    log: BoundedLogger,
) -> Union[RequestModel, ResponseEnvelope]:
    """Validate a wire request, or return the 400 envelope describing why it is invalid."""
    if not isinstance(request, dict):
        return _bad_request(
            source, request,
            [f"Invalid request parameters object, received {type(request).__name__}"], log,
        )
    try:
        parsed = model.model_validate(request)
    except ValidationError as e:
        return _bad_request(source, request, _validation_details(e), log)
    log.audit(f"{source} Unpacked request", f"{model.__name__}: {_dump(request)}")
    return parsed


def _not_found(source: str, record_type: RecordType, request: Any, log: BoundedLogger) -> ResponseEnvelope:
    log.error(f"{source} {NOT_FOUND_ERROR}", f"No '{record_type.value}' record matched any idOptions entry")
    return ResponseEnvelope(
        status=404,
        message=f"No '{record_type.value}' record found",
        error=NOT_FOUND_ERROR,
        logs=log.to_list(),
        rejects=[request],
    )


def _snapshot_record(
    store: RecordStore,
    record_type: RecordType,
    key: int,
    projection: Optional[ProjectionSpec],
    log: BoundedLogger,
    settings: EngineSettings,
) -> RecordSnapshot:
    if projection is None:
        return RecordSnapshot(type=record_type, key=key)
    try:
        record = store.load(record_type, key)
    except Exception as e:
        log.error("[get_record()] Error loading record", f"recordType: '{record_type.value}'", f"internalid: {key}", e)
        return RecordSnapshot(type=record_type, key=key)
    return project(record, record_type, projection, log, settings.subrecord_fields)


def get_record(
    request: Any,
    store: RecordStore,
    settings: Optional[EngineSettings] = None,
) -> ResponseEnvelope:
    """
    Resolve one record and project the requested fields and sublists.

    Args:
        request: Wire dict ``{recordType, idOptions, responseOptions?}``
        store: Record store to search and load from
        settings: Engine tunables (defaults when omitted)

    Returns:
        ResponseEnvelope with status 200, 400 or 404
    """
    settings = settings or EngineSettings()
    log = settings.new_logger()
    source = "[get_record()]"

    parsed = _parse(SingleRecordRequest, source, request, log)
    if isinstance(parsed, ResponseEnvelope):
        return parsed

    key = resolve(store, parsed.to_locator(), log, settings.probe_size)
    if key is None:
        return _not_found(source, parsed.record_type, request, log)

    snapshot = _snapshot_record(store, parsed.record_type, key, parsed.to_projection(), log, settings)
    log.audit(f"{source} Request complete", f"'{parsed.record_type.value}' internalid: {key}")
    return ResponseEnvelope(
        status=200,
        message=f"Found '{parsed.record_type.value}' record with internalid {key}",
        logs=log.to_list(),
        results=[snapshot],
    )


def get_related_records(
    request: Any,
    store: RecordStore,
    settings: Optional[EngineSettings] = None,
) -> ResponseEnvelope:
    """
    Resolve a parent record and collect its children for every child option.

    Results are flattened in order of first appearance of each child type in
    ``childOptions``, one snapshot per unique child key.
    """
    settings = settings or EngineSettings()
    log = settings.new_logger()
    source = "[get_related_records()]"

    parsed = _parse(RelatedRecordRequest, source, request, log)
    if isinstance(parsed, ResponseEnvelope):
        return parsed

    parent_key = resolve(store, parsed.to_locator(), log, settings.probe_size)
    if parent_key is None:
        return _not_found(source, parsed.parent_record_type, request, log)

    by_type = traverse(
        store,
        parent_key,
        parsed.to_child_specs(),
        log,
        page_size=settings.page_size,
        subrecord_fields=settings.subrecord_fields,
    )
    results: List[RecordSnapshot] = [snapshot for snapshots in by_type.values() for snapshot in snapshots]
    summary = ", ".join(f"{len(snapshots)} '{child_type.value}'" for child_type, snapshots in by_type.items())
    log.audit(
        f"{source} Request complete",
        f"parent '{parsed.parent_record_type.value}' internalid: {parent_key}",
        f"children: {summary or 'none'}",
    )
    logger.debug(f"Related records for {parsed.parent_record_type.value}:{parent_key}: {len(results)}")
    return ResponseEnvelope(
        status=200,
        message=f"Found {len(results)} related record(s) for '{parsed.parent_record_type.value}' {parent_key}",
        logs=log.to_list(),
        results=results,
    )
