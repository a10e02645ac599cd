"""Engine-side types: locators, projections, relation specs and snapshots."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .record_types import RecordType

Scalar = Union[str, int, float, bool]


class IdCandidate(BaseModel):
    """One way to look a record up: ``prop OP value``.

    The wire keys ``idProp``/``searchOperator``/``idValue`` are accepted as well.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    prop: str = Field(..., min_length=1, validation_alias=AliasChoices("property", "idProp"))
    operator: str = Field(..., min_length=1, validation_alias=AliasChoices("operator", "searchOperator"))
    value: Union[Scalar, List[Scalar]] = Field(..., validation_alias=AliasChoices("value", "idValue"))

    @field_validator("prop", "operator")
    @classmethod
    def _strip_non_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must be a non-empty string")
        return v

    @field_validator("value")
    @classmethod
    def _non_empty_value(cls, v):
        if isinstance(v, list) and not v:
            raise ValueError("value list must not be empty")
        if isinstance(v, str) and not v.strip():
            raise ValueError("value must not be an empty string")
        return v

    @property
    def values(self) -> List[Scalar]:
        return list(self.value) if isinstance(self.value, list) else [self.value]

    @property
    def expects_single(self) -> bool:
        """A scalar (or one-element list) is expected to identify exactly one record."""
        return not isinstance(self.value, list) or len(self.value) == 1


class RecordLocator(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: RecordType
    candidates: List[IdCandidate] = Field(..., min_length=1)


@dataclass(frozen=True)
class AllFields:
    """Every field the store knows for the sublist."""


@dataclass(frozen=True)
class NamedFields:
    names: Tuple[str, ...]


FieldSelection = Union[AllFields, NamedFields]


def selection_from_wire(value: Union[None, str, List[str]]) -> FieldSelection:
    """Empty or missing selections mean every field."""
    if value is None:
        return AllFields()
    if isinstance(value, str):
        return NamedFields((value,)) if value.strip() else AllFields()
    names = tuple(v for v in value if isinstance(v, str) and v.strip())
    return NamedFields(names) if names else AllFields()


def merge_selections(a: FieldSelection, b: FieldSelection) -> FieldSelection:
    if isinstance(a, AllFields) or isinstance(b, AllFields):
        return AllFields()
    merged = list(a.names)
    merged.extend(n for n in b.names if n not in merged)
    return NamedFields(tuple(merged))


@dataclass(frozen=True)
class ProjectionSpec:
    """
    Which body fields and sublists to project.

    An empty ``fields`` tuple returns only the primary key.
    """
    fields: Tuple[str, ...] = ()
    sublists: Dict[str, FieldSelection] = field(default_factory=dict)

    def merge(self, other: "ProjectionSpec") -> "ProjectionSpec":
        fields = list(self.fields)
        fields.extend(f for f in other.fields if f not in fields)
        sublists = dict(self.sublists)
        for sublist_id, selection in other.sublists.items():
            sublists[sublist_id] = (
                merge_selections(sublists[sublist_id], selection) if sublist_id in sublists else selection
            )
        return ProjectionSpec(fields=tuple(fields), sublists=sublists)


@dataclass(frozen=True)
class ChildRelationSpec:
    child_type: RecordType
    join_field: str
    scope_sublist: Optional[str] = None
    projection: Optional[ProjectionSpec] = None


class RecordSnapshot(BaseModel):
    """Flat projection of one record. ``key`` comes from the store, never derived."""
    type: RecordType
    key: int
    fields: Dict[str, Any] = Field(default_factory=dict)
    sublists: Dict[str, List[Dict[str, Any]]] = Field(default_factory=dict)

    def to_wire(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "key": self.key,
            "fields": dict(self.fields),
            "sublists": {k: [dict(line) for line in v] for k, v in self.sublists.items()},
        }


TraversalResult = Dict[RecordType, List[RecordSnapshot]]
