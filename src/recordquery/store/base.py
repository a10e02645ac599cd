"""Interface of the remote record store consumed by the query engine.

The engine only talks to these abstract classes. A backend supplies
``RecordStore.search``/``load`` and a ``RecordHandle`` implementation; result
windows and paging over an already-materialised result list are provided here.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from recordquery.query.record_types import NOT_VALID, RecordType, is_search_operator, validate_record_type

MIN_PAGE_SIZE = 5
MAX_PAGE_SIZE = 1000


class RecordStoreError(Exception):
    """Base error raised by record store backends."""


class InvalidFilterError(RecordStoreError):
    """A filter (or search) could not be constructed."""


class RecordNotFoundError(RecordStoreError):
    """``load`` was asked for a key the store does not hold."""


@dataclass(frozen=True)
class SearchFilter:
    name: str
    operator: str
    values: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class SearchResult:
    id: int
    record_type: str


@dataclass(frozen=True)
class PageRange:
    index: int
    compound_label: str


@dataclass
class SearchPage:
    index: int
    data: List[SearchResult] = field(default_factory=list)


class ResultSet:
    """Bounded-window access to search results."""

    def __init__(self, results: Sequence[SearchResult]):
        self._results = list(results)

    def get_range(self, start: int, end: int) -> List[SearchResult]:
        if start < 0 or end < start:
            raise RecordStoreError(f"Invalid result range [{start}, {end})")
        return self._results[start:end]


class PagedData:
    """
    Paged access to search results.

    ``fetch`` is called lazily per page index, mirroring the platform where each
    page is a separate round trip.
    """

    def __init__(self, count: int, page_size: int, fetch_page: Callable[[int], List[SearchResult]]):
        self.count = count
        self.page_size = page_size
        self._fetch_page = fetch_page
        num_pages = math.ceil(count / page_size) if count else 0
        self.page_ranges = [
            PageRange(index=i, compound_label=f"{i * page_size + 1} - {min((i + 1) * page_size, count)}")
            for i in range(num_pages)
        ]

    def fetch(self, index: int) -> SearchPage:
        if index < 0 or index >= len(self.page_ranges):
            raise RecordStoreError(f"Page index out of range: {index}")
        return SearchPage(index=index, data=self._fetch_page(index))

    @classmethod
    def from_results(cls, results: Sequence[SearchResult], page_size: int) -> "PagedData":
        results = list(results)

        def _slice(index: int) -> List[SearchResult]:
            return results[index * page_size:(index + 1) * page_size]

        return cls(count=len(results), page_size=page_size, fetch_page=_slice)


def validate_page_size(page_size: int) -> int:
    if not isinstance(page_size, int) or isinstance(page_size, bool):
        raise ValueError(f"page_size must be an integer, got {page_size!r}")
    if not (MIN_PAGE_SIZE <= page_size <= MAX_PAGE_SIZE):
        raise ValueError(f"page_size must be between {MIN_PAGE_SIZE} and {MAX_PAGE_SIZE}, got {page_size}")
    return page_size


class SearchHandle(ABC):
    @abstractmethod
    def run(self) -> ResultSet:
        pass

    @abstractmethod
    def run_paged(self, page_size: int) -> PagedData:
        pass


class RecordHandle(ABC):
    """A loaded record: body fields, sublists and subrecords."""

    record_type: str
    key: int

    @abstractmethod
    def get_value(self, field_id: str) -> Any:
        pass

    @abstractmethod
    def get_subrecord(self, field_id: str) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    def get_sublist(self, sublist_id: str) -> Optional[Any]:
        """Truthy when the sublist exists on the record, else None."""

    @abstractmethod
    def get_line_count(self, sublist_id: str) -> int:
        pass

    @abstractmethod
    def get_sublist_value(self, sublist_id: str, field_id: str, line: int) -> Any:
        pass

    @abstractmethod
    def get_sublist_subrecord(self, sublist_id: str, field_id: str, line: int) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    def get_sublist_fields(self, sublist_id: str) -> List[str]:
        pass


class RecordStore(ABC):
    def create_filter(self, name: str, operator: str, values: Union[Any, List[Any]]) -> SearchFilter:
        """Build a filter, rejecting unknown operators the way the platform does."""
        if not isinstance(name, str) or not name.strip():
            raise InvalidFilterError(f"Filter name must be a non-empty string, got {name!r}")
        if not is_search_operator(operator):
            raise InvalidFilterError(f"Unknown search operator: {operator!r}")
        if not isinstance(values, (list, tuple)):
            values = [values]
        return SearchFilter(name=name.strip().lower(), operator=operator.lower(), values=tuple(values))

    @abstractmethod
    def search(self, record_type: Union[RecordType, str], filters: List[SearchFilter]) -> SearchHandle:
        pass

    @abstractmethod
    def load(self, record_type: Union[RecordType, str], key: int) -> RecordHandle:
        pass


def require_record_type(record_type: Union[RecordType, str]) -> RecordType:
    validated = validate_record_type(record_type.value if isinstance(record_type, RecordType) else record_type)
    if validated is NOT_VALID:
        raise InvalidFilterError(f"Unknown record type: {record_type!r}")
    return validated
