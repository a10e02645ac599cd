"""Identifier resolution: turn a RecordLocator into one primary key."""

from typing import Any, Dict, List, Optional, Union

from recordquery.query.log_buffer import BoundedLogger
from recordquery.query.models import IdCandidate, RecordLocator
from recordquery.query.outcome import Skip
from recordquery.query.record_types import ANY_OF, IS, IdProperty, RecordType
from recordquery.store.base import RecordStore

DEFAULT_PROBE_SIZE = 10


def _bounded_search(
    store: RecordStore,
    record_type: RecordType,
    candidate: IdCandidate,
    probe_size: int,
) -> Union[List[int], Skip]:
    """Run one size-capped search; any failure becomes a Skip."""
    try:
        id_filter = store.create_filter(candidate.prop, candidate.operator, candidate.values)
        results = store.search(record_type, [id_filter]).run().get_range(0, probe_size)
        return [int(r.id) for r in results]
    except Exception as e:
        return Skip.from_exception(
            "candidate search failed",
            e,
            f"'{record_type.value}' search with {candidate.prop} {candidate.operator} {candidate.value!r}",
        )


def resolve(
    store: RecordStore,
    locator: RecordLocator,
    log: BoundedLogger,
    probe_size: int = DEFAULT_PROBE_SIZE,
) -> Optional[int]:
    """
    Resolve a locator to a primary key.

    Candidates are tried in order. The first candidate with exactly one match
    wins and later candidates are never searched. A scalar candidate with
    several matches is ambiguous: the first ambiguous match is kept as a
    tentative key and resolution moves on. Multi-value candidates with several
    matches select nothing. When no candidate matches exactly once, the
    tentative key (if any) is returned.

    Returns:
        The primary key, or None when nothing matched
    """
    if probe_size < 2:
        raise ValueError(f"probe_size must be >= 2 to detect ambiguity, got {probe_size}")

    record_type = locator.type
    total = len(locator.candidates)
    tentative: Optional[int] = None

    for i, candidate in enumerate(locator.candidates, start=1):
        outcome = _bounded_search(store, record_type, candidate, probe_size)
        if isinstance(outcome, Skip):
            log.error(f"[resolve()] {outcome.reason} for candidate {i}/{total}", *outcome.detail)
            continue

        if not outcome:
            log.debug(
                f"[resolve()] 0 records found for candidate {i}/{total}",
                f"0 '{record_type.value}' records with {candidate.prop} {candidate.operator} {candidate.value!r}",
            )
            continue

        if len(outcome) == 1:
            log.debug(
                "[resolve()] Record found",
                f"1 '{record_type.value}' record with {candidate.prop} {candidate.operator} {candidate.value!r}",
            )
            return outcome[0]

        if candidate.expects_single:
            if tentative is None:
                tentative = outcome[0]
            log.warning(
                "[resolve()] Multiple records found",
                f"{len(outcome)} '{record_type.value}' records with "
                f"{candidate.prop} {candidate.operator} {candidate.value!r}",
                f"tentative internalid: {tentative}; continuing to next candidate",
            )
            continue

        log.debug(
            f"[resolve()] {len(outcome)} records matched multi-value candidate {i}/{total}",
            "no key selected from this candidate",
        )

    if tentative is not None:
        log.audit(
            "[resolve()] No unambiguous match, using tentative key",
            f"'{record_type.value}' internalid: {tentative}",
        )
    return tentative


def locator_from_fields(record_type: RecordType, fields: Dict[str, Any]) -> Optional[RecordLocator]:
    """
    Build a locator from identifier properties present in a field dictionary.

    ``internalid`` is searched with ``anyof`` as an integer; every other
    identifier property with ``is`` as a string.
    """
    candidates = []
    for prop in IdProperty:
        value = fields.get(prop.value)
        if value is None or value == "":
            continue
        if prop is IdProperty.INTERNAL_ID:
            try:
                candidates.append(IdCandidate(property=prop.value, operator=ANY_OF, value=int(value)))
            except (TypeError, ValueError):
                continue
        else:
            candidates.append(IdCandidate(property=prop.value, operator=IS, value=str(value)))
    if not candidates:
        return None
    return RecordLocator(type=record_type, candidates=candidates)
