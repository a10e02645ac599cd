"""Relationship traversal from a resolved parent to child records."""

from typing import Dict, FrozenSet, List, Optional, Union

from recordquery.query.log_buffer import BoundedLogger
from recordquery.query.models import ChildRelationSpec, ProjectionSpec, RecordSnapshot, TraversalResult
from recordquery.query.outcome import Skip
from recordquery.query.projector import project
from recordquery.query.record_types import ANY_OF, DEFAULT_SUBRECORD_FIELDS, IS, MAINLINE_FIELD, RecordType
from recordquery.store.base import RecordStore, SearchHandle, validate_page_size

DEFAULT_PAGE_SIZE = 100


def _child_search(store: RecordStore, parent_key: int, spec: ChildRelationSpec) -> Union[SearchHandle, Skip]:
    try:
        filters = [store.create_filter(spec.join_field, ANY_OF, [parent_key])]
        if spec.scope_sublist:
            # Summary rows would otherwise match when the join field is also a line column
            filters.append(store.create_filter(MAINLINE_FIELD, IS, ["F"]))
        return store.search(spec.child_type, filters)
    except Exception as e:
        return Skip.from_exception(
            "Unable to create child search", e,
            f"childRecordType: '{spec.child_type.value}'", f"fieldId: '{spec.join_field}'",
            f"sublistId: '{spec.scope_sublist}'",
        )


def _run_paged(handle: SearchHandle, page_size: int) -> Union[List[int], Skip]:
    try:
        paged = handle.run_paged(page_size)
        keys: List[int] = []
        for page_range in paged.page_ranges:
            page = paged.fetch(page_range.index)
            keys.extend(int(result.id) for result in page.data)
        return keys
    except Exception as e:
        return Skip.from_exception("Paged search failed", e)


def collect_child_keys(
    store: RecordStore,
    parent_key: int,
    child_specs: List[ChildRelationSpec],
    log: BoundedLogger,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Dict[RecordType, List[int]]:
    """
    Run one paged search per spec and union the keys per child type.

    Keys keep their order of first discovery; a key seen again (on a later
    page or from another spec of the same type) is not added twice. A spec
    whose search cannot be built or run is logged and skipped.
    """
    validate_page_size(page_size)
    keys_by_type: Dict[RecordType, List[int]] = {}
    seen: Dict[RecordType, set] = {}
    total = len(child_specs)

    for i, spec in enumerate(child_specs, start=1):
        handle = _child_search(store, parent_key, spec)
        if isinstance(handle, Skip):
            log.error(f"[collect_child_keys()] {handle.reason} at childOptions[{i - 1}]", *handle.detail)
            continue
        found = _run_paged(handle, page_size)
        if isinstance(found, Skip):
            log.error(f"[collect_child_keys()] {found.reason} at childOptions[{i - 1}]", *found.detail)
            continue

        ordered = keys_by_type.setdefault(spec.child_type, [])
        known = seen.setdefault(spec.child_type, set())
        for key in found:
            if key not in known:
                known.add(key)
                ordered.append(key)
        log.debug(
            "[collect_child_keys()] Search completed",
            f"child search {i}/{total}",
            f"childRecordType: '{spec.child_type.value}'",
            f"rows returned: {len(found)}, unique records so far: {len(ordered)}",
        )
    return keys_by_type


def _merged_projections(child_specs: List[ChildRelationSpec]) -> Dict[RecordType, ProjectionSpec]:
    merged: Dict[RecordType, ProjectionSpec] = {}
    for spec in child_specs:
        if spec.projection is None:
            continue
        current = merged.get(spec.child_type)
        merged[spec.child_type] = spec.projection if current is None else current.merge(spec.projection)
    return merged


def _snapshot_child(
    store: RecordStore,
    child_type: RecordType,
    key: int,
    projection: Optional[ProjectionSpec],
    log: BoundedLogger,
    subrecord_fields: FrozenSet[str],
) -> RecordSnapshot:
    if projection is None:
        return RecordSnapshot(type=child_type, key=key)
    try:
        record = store.load(child_type, key)
    except Exception as e:
        log.error(
            "[traverse()] Error loading child record",
            f"recordType: '{child_type.value}'", f"internalid: {key}", e,
        )
        return RecordSnapshot(type=child_type, key=key)
    return project(record, child_type, projection, log, subrecord_fields)


def traverse(
    store: RecordStore,
    parent_key: int,
    child_specs: List[ChildRelationSpec],
    log: BoundedLogger,
    page_size: int = DEFAULT_PAGE_SIZE,
    subrecord_fields: FrozenSet[str] = DEFAULT_SUBRECORD_FIELDS,
) -> TraversalResult:
    """
    Find and project the children of ``parent_key`` for every relation spec.

    Returns:
        {child type: [RecordSnapshot]} with exactly one snapshot per unique key
    """
    keys_by_type = collect_child_keys(store, parent_key, child_specs, log, page_size)
    projections = _merged_projections(child_specs)

    result: TraversalResult = {}
    for child_type, keys in keys_by_type.items():
        snapshots = result.setdefault(child_type, [])
        for key in keys:
            snapshots.append(
                _snapshot_child(store, child_type, key, projections.get(child_type), log, subrecord_fields)
            )
    return result
