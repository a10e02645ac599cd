"""Record store backed by the local SQLAlchemy tables.

Search semantics follow the platform closely enough for the engine to be
exercised end to end:

- Without a ``mainline`` filter there is one result row per matching record.
  A filter on a field that is not a body field matches if any sublist line
  carries a matching value.
- ``mainline is F`` yields one row per matching sublist line, so a record with
  several matching lines comes back several times (possibly across pages).
- ``mainline is T`` matches body fields only.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.orm import Session

from recordquery.database.record_repo import (
    get_record_row,
    list_record_rows,
    list_sublist_lines,
    load_fields,
    load_line_values,
    load_sublist_ids,
)
from recordquery.query.record_types import MAINLINE_FIELD, RecordType
from recordquery.store.base import (
    InvalidFilterError,
    PagedData,
    RecordHandle,
    RecordNotFoundError,
    RecordStore,
    RecordStoreError,
    ResultSet,
    SearchFilter,
    SearchHandle,
    SearchResult,
    require_record_type,
    validate_page_size,
)
from recordquery.utils.logging import get_logger

logger = get_logger(__name__)

INTERNAL_ID = "internalid"
_EMPTY = (None, "", [], {})


def _norm(value: Any) -> str:
    if isinstance(value, bool):
        return "t" if value else "f"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip().lower()


def _as_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def _compare(actual: Any, expected: Any, convert) -> Optional[int]:
    a, b = convert(actual), convert(expected)
    if a is None or b is None:
        return None
    return (a > b) - (a < b)


def _between(actual: Any, values, convert) -> bool:
    if len(values) < 2:
        return False
    low, high = _compare(actual, values[0], convert), _compare(actual, values[1], convert)
    return low is not None and high is not None and low >= 0 and high <= 0


def matches(operator: str, actual: Any, values) -> bool:
    """Evaluate one search operator against a stored value."""
    op = operator.lower()
    if op == "any":
        return True
    if op == "isempty":
        return actual in _EMPTY
    if op == "isnotempty":
        return actual not in _EMPTY

    first = values[0] if values else None
    expected = {_norm(v) for v in values}
    actual_items = actual if isinstance(actual, list) else [actual]
    actual_norm = {_norm(a) for a in actual_items if a is not None}

    if op == "anyof":
        return bool(actual_norm & expected)
    if op == "noneof":
        return not (actual_norm & expected)
    if op == "allof":
        return expected <= actual_norm
    if op == "notallof":
        return not expected <= actual_norm

    if op.startswith("not") and op[3:] in _NEGATABLE:
        return not matches(op[3:], actual, values)
    if op in ("isnot", "doesnotcontain", "doesnotstartwith"):
        return not matches({"isnot": "is", "doesnotcontain": "contains", "doesnotstartwith": "startswith"}[op], actual, values)

    if actual is None or isinstance(actual, dict):
        return False
    text = _norm(actual)
    if op == "is":
        return text == _norm(first)
    if op == "contains":
        return _norm(first) in text
    if op == "startswith":
        return text.startswith(_norm(first))
    if op == "haskeywords":
        return all(word in text for word in _norm(first).split())

    numeric = {
        "equalto": lambda c: c == 0,
        "greaterthan": lambda c: c > 0,
        "greaterthanorequalto": lambda c: c >= 0,
        "lessthan": lambda c: c < 0,
        "lessthanorequalto": lambda c: c <= 0,
    }
    if op in numeric:
        cmp = _compare(actual, first, _as_float)
        return cmp is not None and numeric[op](cmp)
    if op == "between":
        return _between(actual, values, _as_float)

    dated = {
        "on": lambda c: c == 0,
        "before": lambda c: c < 0,
        "after": lambda c: c > 0,
        "onorbefore": lambda c: c <= 0,
        "onorafter": lambda c: c >= 0,
    }
    if op in dated:
        cmp = _compare(actual, first, _as_date)
        return cmp is not None and dated[op](cmp)
    if op == "within":
        return _between(actual, values, _as_date)

    raise InvalidFilterError(f"Unsupported search operator: {operator!r}")


_NEGATABLE = frozenset({
    "equalto", "greaterthan", "greaterthanorequalto", "lessthan", "lessthanorequalto", "between",
    "on", "before", "after", "onorbefore", "onorafter", "within",
})


def _mainline_flag(f: SearchFilter) -> Optional[bool]:
    if not f.values:
        return None
    return _norm(f.values[0]) in ("t", "true")


class SqliteSearch(SearchHandle):
    def __init__(self, session: Session, record_type: RecordType, filters: List[SearchFilter]):
        self.session = session
        self.record_type = record_type
        self.filters = list(filters)

    def _results(self) -> List[SearchResult]:
        mainline = None
        field_filters = []
        for f in self.filters:
            if f.name == MAINLINE_FIELD:
                mainline = _mainline_flag(f)
            else:
                field_filters.append(f)

        results: List[SearchResult] = []
        for row in list_record_rows(self.session, self.record_type.value):
            body = load_fields(row)
            body[INTERNAL_ID] = row.internal_id
            lines = [load_line_values(line) for line in list_sublist_lines(self.session, row.record_type, row.internal_id)]

            if mainline is False:
                for line in lines:
                    merged = {**body, **{k: v for k, v in line.items() if k != INTERNAL_ID}}
                    if all(matches(f.operator, merged.get(f.name), f.values) for f in field_filters):
                        results.append(SearchResult(id=row.internal_id, record_type=row.record_type))
                continue

            if all(self._record_matches(f, body, lines if mainline is None else []) for f in field_filters):
                results.append(SearchResult(id=row.internal_id, record_type=row.record_type))
        return results

    @staticmethod
    def _record_matches(f: SearchFilter, body: Dict[str, Any], lines: List[Dict[str, Any]]) -> bool:
        if f.name in body:
            return matches(f.operator, body[f.name], f.values)
        line_values = [line[f.name] for line in lines if f.name in line]
        if not line_values:
            return matches(f.operator, None, f.values)
        return any(matches(f.operator, value, f.values) for value in line_values)

    def run(self) -> ResultSet:
        return ResultSet(self._results())

    def run_paged(self, page_size: int) -> PagedData:
        try:
            validate_page_size(page_size)
        except ValueError as e:
            raise RecordStoreError(str(e)) from e
        return PagedData.from_results(self._results(), page_size)


class SqliteRecordHandle(RecordHandle):
    def __init__(
        self,
        record_type: str,
        key: int,
        fields: Dict[str, Any],
        sublists: Dict[str, List[Dict[str, Any]]],
    ):
        self.record_type = record_type
        self.key = key
        self._fields = fields
        self._sublists = sublists

    def get_value(self, field_id: str) -> Any:
        if field_id == INTERNAL_ID:
            return self.key
        return self._fields.get(field_id)

    def get_subrecord(self, field_id: str) -> Optional[Dict[str, Any]]:
        value = self._fields.get(field_id)
        if value is None:
            return None
        if not isinstance(value, dict):
            raise RecordStoreError(f"Field '{field_id}' on {self.record_type}:{self.key} is not a subrecord")
        return dict(value)

    def get_sublist(self, sublist_id: str) -> Optional[str]:
        return sublist_id if sublist_id in self._sublists else None

    def _lines(self, sublist_id: str) -> List[Dict[str, Any]]:
        if sublist_id not in self._sublists:
            raise RecordStoreError(f"Sublist '{sublist_id}' not found on {self.record_type}:{self.key}")
        return self._sublists[sublist_id]

    def _line(self, sublist_id: str, line: int) -> Dict[str, Any]:
        lines = self._lines(sublist_id)
        if line < 0 or line >= len(lines):
            raise RecordStoreError(f"Line {line} out of range for sublist '{sublist_id}' ({len(lines)} lines)")
        return lines[line]

    def get_line_count(self, sublist_id: str) -> int:
        return len(self._lines(sublist_id))

    def get_sublist_value(self, sublist_id: str, field_id: str, line: int) -> Any:
        return self._line(sublist_id, line).get(field_id)

    def get_sublist_subrecord(self, sublist_id: str, field_id: str, line: int) -> Optional[Dict[str, Any]]:
        value = self._line(sublist_id, line).get(field_id)
        if value is None:
            return None
        if not isinstance(value, dict):
            raise RecordStoreError(f"Sublist field '{sublist_id}.{field_id}' is not a subrecord")
        return dict(value)

    def get_sublist_fields(self, sublist_id: str) -> List[str]:
        seen: List[str] = []
        for line in self._lines(sublist_id):
            seen.extend(k for k in line if k not in seen)
        return seen


class SqliteRecordStore(RecordStore):
    """RecordStore over the ``records``/``sublist_lines`` tables. Read-only."""

    def __init__(self, session: Session):
        self.session = session

    def search(self, record_type: Union[RecordType, str], filters: List[SearchFilter]) -> SqliteSearch:
        validated = require_record_type(record_type)
        for f in filters:
            if not isinstance(f, SearchFilter):
                raise InvalidFilterError(f"Expected SearchFilter, got {type(f).__name__}")
        return SqliteSearch(self.session, validated, filters)

    def load(self, record_type: Union[RecordType, str], key: int) -> SqliteRecordHandle:
        validated = require_record_type(record_type)
        row = get_record_row(self.session, validated.value, int(key))
        if row is None:
            raise RecordNotFoundError(f"No {validated.value} record with internalid {key}")

        sublists: Dict[str, List[Dict[str, Any]]] = {sublist_id: [] for sublist_id in load_sublist_ids(row)}
        for line in list_sublist_lines(self.session, row.record_type, row.internal_id):
            sublists.setdefault(line.sublist_id, []).append(load_line_values(line))
        logger.debug(f"Loaded {validated.value}:{key}")
        return SqliteRecordHandle(row.record_type, row.internal_id, load_fields(row), sublists)
