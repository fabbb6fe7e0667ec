"""Canonical schema model shared by every reader and writer.

The model mirrors a slot/class schema language: classes with single ``is_a``
inheritance plus ordered mixins, schema-level slots, enumerations and scalar
types. Every entity carries a namespaced annotation set for format-specific
detail that has no field of its own.

Entities are frozen pydantic models. Callers replace values wholesale with
``model_copy(update=...)`` instead of mutating them in place.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from schema_mesh_core.datatypes import ScalarKind

Annotations = Dict[str, Dict[str, str]]

DEFAULT_RANGE = ScalarKind.STRING.value


class _Entity(BaseModel):
    """Common configuration for canonical model entities."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    @field_validator("annotations", mode="before", check_fields=False)
    @classmethod
    def coerce_annotation_values(cls, v: Any) -> Any:
        """Accept scalar annotation values written by hand in YAML."""
        if not isinstance(v, dict):
            return v
        coerced: Dict[str, Dict[str, str]] = {}
        for namespace, entries in v.items():
            if not isinstance(entries, dict):
                raise ValueError(f"Annotations under '{namespace}' must be a mapping")
            coerced[str(namespace)] = {str(k): _to_text(val) for k, val in entries.items()}
        return coerced


def _to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


class Contributor(_Entity):
    """A person or organisation credited on the schema."""

    name: str = Field(..., description="Contributor name")
    orcid: Optional[str] = Field(default=None, description="ORCID identifier URL")
    role: Optional[str] = Field(default=None, description="Role such as author or editor")


class PermissibleValue(_Entity):
    """One literal of an enumeration."""

    text: str
    description: Optional[str] = None
    meaning: Optional[str] = Field(default=None, description="IRI giving the value's meaning")


class SlotEntity(_Entity):
    """A property definition, schema-level or scoped to one class."""

    name: str
    description: Optional[str] = None
    range: Optional[str] = Field(default=None, description="Class, enum, type or scalar name")
    domain: Optional[str] = Field(default=None, description="Class that owns the slot")
    required: bool = False
    multivalued: bool = False
    identifier: bool = False
    pattern: Optional[str] = None
    minimum_cardinality: Optional[int] = None
    maximum_cardinality: Optional[int] = None
    inverse: Optional[str] = None
    slot_uri: Optional[str] = None
    annotations: Annotations = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_cardinality(self) -> "SlotEntity":
        """Cardinality bounds must be ordered and non-negative."""
        low, high = self.minimum_cardinality, self.maximum_cardinality
        if low is not None and low < 0:
            raise ValueError(f"Slot '{self.name}' has a negative minimum_cardinality")
        if low is not None and high is not None and high < low:
            raise ValueError(f"Slot '{self.name}' has maximum_cardinality below minimum_cardinality")
        return self


class ClassEntity(_Entity):
    """A class with single-parent inheritance plus ordered mixins."""

    name: str
    description: Optional[str] = None
    is_a: Optional[str] = Field(default=None, description="Primary parent class")
    mixins: List[str] = Field(default_factory=list, description="Secondary parents, in precedence order")
    slots: List[str] = Field(default_factory=list, description="Owned schema-level slot names")
    attributes: Dict[str, SlotEntity] = Field(default_factory=dict, description="Class-scoped slots")
    abstract: bool = False
    mixin: bool = False
    disjoint_with: List[str] = Field(default_factory=list)
    class_uri: Optional[str] = None
    annotations: Annotations = Field(default_factory=dict)

    @field_validator("attributes", mode="before")
    @classmethod
    def name_attributes(cls, v: Any) -> Any:
        """Allow attributes written as ``name: {range: ...}`` without a name field."""
        return _name_entries(v)


class EnumEntity(_Entity):
    """An enumerated type with ordered permissible values."""

    name: str
    description: Optional[str] = None
    permissible_values: List[PermissibleValue] = Field(default_factory=list)
    enum_uri: Optional[str] = None
    annotations: Annotations = Field(default_factory=dict)

    @field_validator("permissible_values", mode="before")
    @classmethod
    def expand_value_mapping(cls, v: Any) -> Any:
        """Accept the ``text: {description: ...}`` mapping shorthand."""
        if isinstance(v, dict):
            values = []
            for text, body in v.items():
                entry = dict(body or {})
                entry.setdefault("text", str(text))
                values.append(entry)
            return values
        if isinstance(v, list):
            return [{"text": str(item)} if not isinstance(item, (dict, BaseModel)) else item for item in v]
        return v

    def values(self) -> List[str]:
        return [pv.text for pv in self.permissible_values]


class TypeEntity(_Entity):
    """A named scalar type built on one canonical kind."""

    name: str
    description: Optional[str] = None
    base: ScalarKind = ScalarKind.STRING
    typeof: Optional[str] = Field(default=None, description="Parent type name")
    uri: Optional[str] = None
    pattern: Optional[str] = None
    annotations: Annotations = Field(default_factory=dict)


def _name_entries(v: Any) -> Any:
    """Fill in missing ``name`` fields from mapping keys."""
    if not isinstance(v, dict):
        return v
    named: Dict[str, Any] = {}
    for key, body in v.items():
        if isinstance(body, BaseModel):
            named[key] = body
            continue
        entry = dict(body or {})
        entry.setdefault("name", str(key))
        named[key] = entry
    return named


class SchemaModel(_Entity):
    """Root of the canonical model; owns every class, slot, enum and type."""

    name: str = Field(..., description="Machine-readable schema name")
    id: Optional[str] = Field(default=None, description="Schema identifier IRI")
    title: Optional[str] = None
    description: Optional[str] = None
    version: Optional[str] = None
    license: Optional[str] = None
    prefixes: Dict[str, str] = Field(default_factory=dict, description="Prefix to IRI bindings")
    default_prefix: Optional[str] = None
    default_range: Optional[str] = None
    created: Optional[str] = None
    modified: Optional[str] = None
    imports: List[str] = Field(default_factory=list)
    contributors: List[Contributor] = Field(default_factory=list)
    classes: Dict[str, ClassEntity] = Field(default_factory=dict)
    slots: Dict[str, SlotEntity] = Field(default_factory=dict)
    enums: Dict[str, EnumEntity] = Field(default_factory=dict)
    types: Dict[str, TypeEntity] = Field(default_factory=dict)
    annotations: Annotations = Field(default_factory=dict)

    @field_validator("created", "modified", "version", mode="before")
    @classmethod
    def normalize_scalar_text(cls, v: Any) -> Any:
        """YAML turns unquoted dates and versions into non-strings."""
        if v is None or isinstance(v, str):
            return v
        return _to_text(v)

    @field_validator("prefixes", mode="before")
    @classmethod
    def normalize_prefixes(cls, v: Any) -> Any:
        """Accept ``prefix: {prefix_reference: iri}`` as well as ``prefix: iri``."""
        if not isinstance(v, dict):
            return v
        out = {}
        for prefix, ref in v.items():
            if isinstance(ref, dict):
                ref = ref.get("prefix_reference", ref.get("iri"))
            out[str(prefix)] = ref
        return out

    @field_validator("contributors", mode="before")
    @classmethod
    def normalize_contributors(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [{"name": item} if isinstance(item, str) else item for item in v]
        return v

    @field_validator("classes", "slots", "enums", "types", mode="before")
    @classmethod
    def name_entities(cls, v: Any) -> Any:
        return _name_entries(v)

    def display_title(self) -> str:
        return self.title or self.name

    def effective_range(self, slot: SlotEntity) -> str:
        """Range of ``slot``, falling back to the schema default."""
        return slot.range or self.default_range or DEFAULT_RANGE

    def schema_iri(self) -> str:
        return self.id or f"https://w3id.org/schema-mesh/{self.name}"


__all__ = [
    "Annotations",
    "DEFAULT_RANGE",
    "Contributor",
    "PermissibleValue",
    "SlotEntity",
    "ClassEntity",
    "EnumEntity",
    "TypeEntity",
    "SchemaModel",
]
