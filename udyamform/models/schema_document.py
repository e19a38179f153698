"""Pydantic models for the Schema Document.

The Schema Document is produced offline by the scraper and consumed by both
the form controller and the API. Models are frozen: once a document is loaded
it is not mutated for the lifetime of a session or process.

Documents written by older scrapes use `tag`, `type` and `maxlength`; these
are accepted as aliases of `kind`, `inputType` and `maxLength`.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from udyamform.logic.transform_engine import default_transform_for
from udyamform.models.field_kind import FieldKind
from udyamform.transform_registry import TRANSFORM_REGISTRY


_TRANSFORM_NAMES = frozenset(t["name"] for t in TRANSFORM_REGISTRY)


class FieldOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: str


class FieldDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = ""
    name: str
    label: str
    kind: str = Field(
        default=FieldKind.INPUT,
        validation_alias=AliasChoices("kind", "tag"),
        serialization_alias="kind",
    )
    input_type: str = Field(
        default="text",
        validation_alias=AliasChoices("inputType", "input_type", "type"),
        serialization_alias="inputType",
    )
    placeholder: Optional[str] = None
    required: bool = False
    pattern: Optional[str] = None
    max_length: Optional[int] = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("maxLength", "max_length", "maxlength"),
        serialization_alias="maxLength",
    )
    options: Tuple[FieldOption, ...] = ()
    transform: str

    @model_validator(mode="before")
    @classmethod
    def _fill_authoring_defaults(cls, data: Any) -> Any:
        """Fill name/label/transform for descriptors that omit them."""
        if not isinstance(data, dict):
            return data
        data = {k: v for k, v in data.items() if v is not None}
        name = data.get("name") or data.get("id")
        if name:
            data["name"] = name
        if not data.get("label"):
            data["label"] = name
        if not data.get("transform"):
            input_type = data.get("inputType") or data.get("input_type") or data.get("type")
            kind = data.get("kind") or data.get("tag")
            data["transform"] = default_transform_for(name or "", input_type=input_type, kind=kind)
        return data

    @field_validator("name")
    @classmethod
    def name_must_be_non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("field name must be a non-empty string")
        return v

    @field_validator("transform")
    @classmethod
    def transform_must_be_known(cls, v: str) -> str:
        if v not in _TRANSFORM_NAMES:
            raise ValueError(f"transform must be one of {sorted(_TRANSFORM_NAMES)}")
        return v

    @model_validator(mode="after")
    def select_requires_options(self) -> "FieldDescriptor":
        if self.kind == FieldKind.SELECT and not self.options:
            raise ValueError(f"select field {self.name!r} must declare at least one option")
        return self

    @property
    def is_select(self) -> bool:
        return self.kind == FieldKind.SELECT


class Step(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    fields: Tuple[FieldDescriptor, ...] = Field(min_length=1)


class SchemaDocument(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    generated_at: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("generatedAt", "generated_at"),
        serialization_alias="generatedAt",
    )
    source: Optional[str] = None
    steps: Tuple[Step, ...] = Field(min_length=1)

    @model_validator(mode="after")
    def field_names_unique(self) -> "SchemaDocument":
        seen: set[str] = set()
        dupes: list[str] = []
        for f in self.iter_fields():
            if f.name in seen:
                dupes.append(f.name)
            seen.add(f.name)
        if dupes:
            raise ValueError(f"field names must be unique across steps; duplicated: {sorted(set(dupes))}")
        return self

    def iter_fields(self) -> Iterator[FieldDescriptor]:
        for step in self.steps:
            yield from step.fields

    def field_names(self) -> list[str]:
        return [f.name for f in self.iter_fields()]

    def find_field(self, name: str) -> FieldDescriptor | None:
        for f in self.iter_fields():
            if f.name == name:
                return f
        return None

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


__all__ = ["FieldOption", "FieldDescriptor", "Step", "SchemaDocument"]
