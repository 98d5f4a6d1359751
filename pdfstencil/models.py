"""Field and template data model.

A template is the source PDF plus an ordered list of fields. Each field is a
page-relative rectangle (fractions of the page, origin top-left) bound to a
data key. The JSON form of these models uses camelCase keys; the PDF bytes
are kept out of the JSON record and stored beside it.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .coords import NormalizedRect

FieldType = Literal["text", "number", "date", "checkbox"]
DataValue = Union[bool, int, float, str]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FieldStyle(CamelModel):
    font_size: Optional[float] = None
    color: Optional[str] = None
    font_weight: Optional[str] = None
    text_align: Optional[str] = None


class PdfField(CamelModel):
    id: str
    page: int = 0
    x: float
    y: float
    width: float
    height: float
    key: str
    type: FieldType = "text"
    style: Optional[FieldStyle] = None

    @property
    def rect(self) -> NormalizedRect:
        return NormalizedRect(self.x, self.y, self.width, self.height)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_field(
    page: int,
    rect: NormalizedRect,
    key: str = "",
    type: FieldType = "text",
    style: Optional[FieldStyle] = None,
) -> PdfField:
    """Create a field for a freshly drawn rectangle.

    A blank key is replaced with a generated ``field_xxxxxx`` key so the
    field can still be bound to data.
    """
    field_id = uuid.uuid4().hex
    return PdfField(
        id=field_id,
        page=page,
        x=rect.x,
        y=rect.y,
        width=rect.width,
        height=rect.height,
        key=key.strip() or f"field_{field_id[:6]}",
        type=type,
        style=style,
    )


def schema_keys(fields: List[PdfField]) -> List[str]:
    """Trimmed, non-empty keys in order of first appearance."""
    keys: List[str] = []
    seen = set()
    for f in fields:
        key = f.key.strip()
        if key and key not in seen:
            seen.add(key)
            keys.append(key)
    return keys


def key_types(fields: List[PdfField]) -> Dict[str, FieldType]:
    """Each key mapped to the type of the first field that uses it."""
    types: Dict[str, FieldType] = {}
    for f in fields:
        types.setdefault(f.key, f.type)
    return types


class Template(CamelModel):
    id: str
    name: str
    fields: List[PdfField] = Field(default_factory=list)
    schema_keys: List[str] = Field(default_factory=list)
    created_at: str = Field(default_factory=_now)
    updated_at: Optional[str] = None
    source_bytes: bytes = Field(default=b"", exclude=True, repr=False)

    @classmethod
    def create(cls, name: str, source_bytes: bytes, fields: List[PdfField]) -> "Template":
        return cls(
            id=uuid.uuid4().hex,
            name=name,
            fields=list(fields),
            schema_keys=schema_keys(fields),
            source_bytes=bytes(source_bytes),
        )

    def _touch(self) -> None:
        self.schema_keys = schema_keys(self.fields)
        self.updated_at = _now()

    def get_field(self, field_id: str) -> Optional[PdfField]:
        return next((f for f in self.fields if f.id == field_id), None)

    def add_field(self, field: PdfField) -> None:
        self.fields.append(field)
        self._touch()

    def update_field(self, field_id: str, **changes) -> PdfField:
        for i, f in enumerate(self.fields):
            if f.id == field_id:
                updated = f.model_copy(update=changes)
                self.fields[i] = updated
                self._touch()
                return updated
        raise KeyError(field_id)

    def remove_field(self, field_id: str) -> None:
        self.fields = [f for f in self.fields if f.id != field_id]
        self._touch()

    def replace_fields(self, fields: List[PdfField]) -> None:
        """Save layout changes: swap in a whole new field list."""
        self.fields = list(fields)
        self._touch()


class FillRequest(CamelModel):
    document_bytes: bytes = Field(repr=False)
    fields: List[PdfField]
    data: Dict[str, Optional[DataValue]] = Field(default_factory=dict)
    flatten: bool = True
    default_style: Optional[FieldStyle] = None


class OneOffField(PdfField):
    """A field that carries its own value, for fills without a saved template."""

    key: str = ""
    value: Optional[DataValue] = None
