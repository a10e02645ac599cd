"""Wire DTOs for the two request kinds and the response envelope.

Requests arriving as query parameters carry their nested options as JSON
strings, and a single object may stand in for a one-element list. Both are
normalized here before field validation runs.
"""

import json
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..query.models import (
    ChildRelationSpec,
    IdCandidate,
    ProjectionSpec,
    RecordLocator,
    RecordSnapshot,
    selection_from_wire,
)
from ..query.record_types import NOT_VALID, RecordType, validate_record_type


def decode_json_param(value: Any) -> Any:
    """Decode a JSON-encoded parameter; anything else passes through."""
    if not isinstance(value, str):
        return value
    text = value.strip()
    if not text or text == "undefined":
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"not valid JSON: {e.msg}") from e


def _as_list(value: Any) -> Any:
    value = decode_json_param(value)
    if isinstance(value, dict):
        return [value]
    return value


def _record_type(value: Any) -> RecordType:
    validated = validate_record_type(value)
    if validated is NOT_VALID:
        raise ValueError(f"Expected a RecordType value, received {value!r}")
    return validated


class ResponseOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    fields: Optional[Union[str, List[str]]] = None
    sublists: Optional[Dict[str, Optional[Union[str, List[str]]]]] = None

    def to_projection(self) -> ProjectionSpec:
        raw = [self.fields] if isinstance(self.fields, str) else list(self.fields or [])
        fields = []
        for name in raw:
            name = name.strip().lower()
            if name and name not in fields:
                fields.append(name)
        sublists = {
            sublist_id.strip(): selection_from_wire(selection)
            for sublist_id, selection in (self.sublists or {}).items()
            if sublist_id.strip()
        }
        return ProjectionSpec(fields=tuple(fields), sublists=sublists)


def _projection(options: Optional[ResponseOptions]) -> Optional[ProjectionSpec]:
    return options.to_projection() if options is not None else None


class ChildOption(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    child_record_type: RecordType = Field(..., alias="childRecordType")
    field_id: str = Field(..., alias="fieldId", min_length=1)
    sublist_id: Optional[str] = Field(None, alias="sublistId")
    response_options: Optional[ResponseOptions] = Field(None, alias="responseOptions")

    @field_validator("child_record_type", mode="before")
    @classmethod
    def _validate_type(cls, v):
        return _record_type(v)

    @field_validator("field_id")
    @classmethod
    def _strip_field_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must be a non-empty string")
        return v

    @field_validator("sublist_id")
    @classmethod
    def _blank_sublist_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() or None if v is not None else None

    @field_validator("response_options", mode="before")
    @classmethod
    def _decode_options(cls, v):
        return decode_json_param(v)

    def to_spec(self) -> ChildRelationSpec:
        return ChildRelationSpec(
            child_type=self.child_record_type,
            join_field=self.field_id,
            scope_sublist=self.sublist_id,
            projection=_projection(self.response_options),
        )


class SingleRecordRequest(BaseModel):
    """``{recordType, idOptions, responseOptions?}``"""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    record_type: RecordType = Field(..., alias="recordType")
    id_options: List[IdCandidate] = Field(..., alias="idOptions", min_length=1)
    response_options: Optional[ResponseOptions] = Field(None, alias="responseOptions")

    @field_validator("record_type", mode="before")
    @classmethod
    def _validate_type(cls, v):
        return _record_type(v)

    @field_validator("id_options", mode="before")
    @classmethod
    def _decode_id_options(cls, v):
        return _as_list(v)

    @field_validator("response_options", mode="before")
    @classmethod
    def _decode_options(cls, v):
        return decode_json_param(v)

    def to_locator(self) -> RecordLocator:
        return RecordLocator(type=self.record_type, candidates=self.id_options)

    def to_projection(self) -> Optional[ProjectionSpec]:
        return _projection(self.response_options)


class RelatedRecordRequest(BaseModel):
    """``{parentRecordType, idOptions, childOptions}``"""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    parent_record_type: RecordType = Field(..., alias="parentRecordType")
    id_options: List[IdCandidate] = Field(..., alias="idOptions", min_length=1)
    child_options: List[ChildOption] = Field(..., alias="childOptions", min_length=1)

    @field_validator("parent_record_type", mode="before")
    @classmethod
    def _validate_type(cls, v):
        return _record_type(v)

    @field_validator("id_options", "child_options", mode="before")
    @classmethod
    def _decode_lists(cls, v):
        return _as_list(v)

    def to_locator(self) -> RecordLocator:
        return RecordLocator(type=self.parent_record_type, candidates=self.id_options)

    def to_child_specs(self) -> List[ChildRelationSpec]:
        return [option.to_spec() for option in self.child_options]


class ResponseEnvelope(BaseModel):
    """Uniform response for both request kinds."""
    status: int
    message: str
    error: Optional[str] = None
    logs: List[Dict[str, Any]] = Field(default_factory=list)
    results: List[RecordSnapshot] = Field(default_factory=list)
    rejects: List[Any] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == 200

    def to_wire(self) -> Dict[str, Any]:
        wire: Dict[str, Any] = {"status": self.status, "message": self.message}
        if self.error:
            wire["error"] = self.error
        wire["logs"] = [dict(entry) for entry in self.logs]
        wire["results"] = [snapshot.to_wire() for snapshot in self.results]
        wire["rejects"] = list(self.rejects)
        return wire
