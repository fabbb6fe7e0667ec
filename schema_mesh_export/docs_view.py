"""Documentation view projection.

:func:`build_documentation_view` turns a model into plain, frozen view data
for an external template renderer: resolved class hierarchies, every slot's
range resolved to a link or a scalar label, and cross references from each
entity to the slots that point at it. The view depends only on the model's
fields, so two models describing the same schema produce the same view
whichever format they were read from. Annotations surface only through
each entity's ``optional_sections``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple, Union

from pydantic import BaseModel

from schema_mesh_core.annotations import (
    INDIVIDUAL_PREFIX,
    INDIVIDUALS,
    LABEL,
    RANGE_EXPRESSION,
    RESERVED_NAMESPACE,
    PreservedIndividual,
    display_label,
    get_system,
    preserved_individuals,
    unwrap_iri,
)
from schema_mesh_core.config import WriterOptions
from schema_mesh_core.datatypes import normalize_scalar
from schema_mesh_core.inheritance import ResolvedSlot, ancestors, descendants, resolve_slots
from schema_mesh_core.model import SchemaModel, SlotEntity
from schema_mesh_core.vocab import entity_iri

from .rdf_graph import expand_curie
from .writer_base import SchemaWriter

logger = logging.getLogger(__name__)

Sections = Dict[str, Dict[str, str]]
Renderer = Callable[["DocumentationView"], Union[str, bytes]]


@dataclass(frozen=True)
class EntityRef:
    """A link to a documented entity."""

    kind: str
    name: str
    label: str

    @property
    def anchor(self) -> str:
        return f"{self.kind}-{self.name}"


@dataclass(frozen=True)
class RangeRef:
    """A slot range: a link to a class, enum or type, or a scalar label."""

    target: Optional[EntityRef] = None
    scalar: Optional[str] = None
    expression: Optional[str] = None

    @property
    def display(self) -> str:
        if self.target is not None:
            return self.target.label
        return self.scalar or self.expression or ""


@dataclass(frozen=True)
class SlotUsage:
    """One row of a class's resolved slot table."""

    name: str
    label: str
    description: Optional[str]
    range: RangeRef
    owner: EntityRef
    inherited: bool
    required: bool = False
    multivalued: bool = False
    identifier: bool = False


@dataclass(frozen=True)
class ClassView:
    name: str
    label: str
    iri: str
    description: Optional[str]
    abstract: bool
    mixin: bool
    ancestors: Tuple[EntityRef, ...]
    mixins: Tuple[EntityRef, ...]
    subclasses: Tuple[EntityRef, ...]
    slots: Tuple[SlotUsage, ...]
    referenced_by: Tuple[EntityRef, ...]
    disjoint_with: Tuple[EntityRef, ...]
    optional_sections: Sections = field(default_factory=dict)


@dataclass(frozen=True)
class SlotView:
    name: str
    label: str
    iri: str
    description: Optional[str]
    domain: Tuple[EntityRef, ...]
    range: RangeRef
    inverse: Optional[EntityRef]
    required: bool
    multivalued: bool
    identifier: bool
    pattern: Optional[str]
    used_by: Tuple[EntityRef, ...]
    optional_sections: Sections = field(default_factory=dict)


@dataclass(frozen=True)
class PermissibleValueView:
    text: str
    description: Optional[str] = None
    meaning: Optional[str] = None


@dataclass(frozen=True)
class EnumView:
    name: str
    label: str
    iri: str
    description: Optional[str]
    values: Tuple[PermissibleValueView, ...]
    referenced_by: Tuple[EntityRef, ...]
    optional_sections: Sections = field(default_factory=dict)


@dataclass(frozen=True)
class TypeView:
    name: str
    label: str
    iri: str
    description: Optional[str]
    base: str
    typeof: Optional[EntityRef]
    pattern: Optional[str]
    referenced_by: Tuple[EntityRef, ...]
    optional_sections: Sections = field(default_factory=dict)


@dataclass(frozen=True)
class PropertyValueView:
    property: str
    value: str
    slot: Optional[EntityRef] = None
    target: Optional[str] = None


@dataclass(frozen=True)
class IndividualView:
    name: str
    label: str
    iri: Optional[str]
    description: Optional[str]
    types: Tuple[EntityRef, ...]
    external_types: Tuple[str, ...]
    property_values: Tuple[PropertyValueView, ...]


@dataclass(frozen=True)
class NamespaceView:
    prefix: str
    iri: str


@dataclass(frozen=True)
class SchemaSummary:
    name: str
    title: str
    iri: str
    description: Optional[str]
    version: Optional[str]
    license: Optional[str]
    created: Optional[str]
    modified: Optional[str]
    imports: Tuple[str, ...]
    contributors: Tuple[str, ...]
    class_count: int
    slot_count: int
    enum_count: int
    type_count: int
    optional_sections: Sections = field(default_factory=dict)


@dataclass(frozen=True)
class DocumentationView:
    """Everything a template needs to document one schema."""

    schema: SchemaSummary
    namespaces: Tuple[NamespaceView, ...]
    classes: Tuple[ClassView, ...]
    slots: Tuple[SlotView, ...]
    enums: Tuple[EnumView, ...]
    types: Tuple[TypeView, ...]
    individuals: Tuple[IndividualView, ...]

    def class_view(self, name: str) -> Optional[ClassView]:
        return next((c for c in self.classes if c.name == name), None)

    def slot_view(self, name: str) -> Optional[SlotView]:
        return next((s for s in self.slots if s.name == name), None)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def optional_sections(entity: BaseModel) -> Sections:
    """Annotation-driven extra sections; the label and individuals are shown elsewhere."""
    sections: Sections = {}
    for namespace in sorted(getattr(entity, "annotations", {})):
        entries = entity.annotations[namespace]
        if namespace == RESERVED_NAMESPACE:
            entries = {
                k: v
                for k, v in entries.items()
                if k not in (LABEL, INDIVIDUALS) and not k.startswith(INDIVIDUAL_PREFIX)
            }
        if entries:
            sections[namespace] = dict(sorted(entries.items()))
    return sections


class _ViewBuilder:
    def __init__(self, schema: SchemaModel, base: str) -> None:
        self.schema = schema
        self.base = base
        self.resolved: Dict[str, Dict[str, ResolvedSlot]] = {
            name: resolve_slots(schema, name) for name in sorted(schema.classes)
        }

    def iri(self, declared: Optional[str], name: str) -> str:
        if declared:
            expanded = expand_curie(self.schema, declared)
            if expanded is not None:
                return str(expanded)
        return str(entity_iri(self.base, name))

    def class_ref(self, name: str) -> EntityRef:
        return EntityRef("class", name, display_label(self.schema.classes[name]))

    def slot_ref(self, name: str) -> EntityRef:
        return EntityRef("slot", name, display_label(self.schema.slots[name]))

    def range_ref(self, slot: SlotEntity) -> RangeRef:
        schema = self.schema
        if slot.range is None and get_system(slot, RANGE_EXPRESSION):
            return RangeRef(expression=get_system(slot, RANGE_EXPRESSION))
        target = schema.effective_range(slot)
        if target in schema.classes:
            return RangeRef(target=self.class_ref(target))
        if target in schema.enums:
            return RangeRef(target=EntityRef("enum", target, display_label(schema.enums[target])))
        if target in schema.types:
            return RangeRef(target=EntityRef("type", target, display_label(schema.types[target])))
        kind = normalize_scalar(target)
        return RangeRef(scalar=kind.value if kind is not None else target)

    def referencing_slots(self, target: str) -> Tuple[EntityRef, ...]:
        refs = [
            self.slot_ref(name)
            for name, slot in self.schema.slots.items()
            if self.schema.effective_range(slot) == target
        ]
        for class_name, cls in self.schema.classes.items():
            for attr_name, attr in cls.attributes.items():
                if self.schema.effective_range(attr) == target:
                    refs.append(EntityRef("slot", f"{class_name}.{attr_name}", display_label(attr)))
        return tuple(sorted(refs, key=lambda r: r.name))

    def class_view(self, name: str) -> ClassView:
        cls = self.schema.classes[name]
        usages = tuple(
            SlotUsage(
                name=slot_name,
                label=display_label(resolved.slot),
                description=resolved.slot.description,
                range=self.range_ref(resolved.slot),
                owner=self.class_ref(resolved.owner),
                inherited=resolved.owner != name,
                required=resolved.slot.required,
                multivalued=resolved.slot.multivalued,
                identifier=resolved.slot.identifier,
            )
            for slot_name, resolved in self.resolved[name].items()
        )
        return ClassView(
            name=name,
            label=display_label(cls),
            iri=self.iri(cls.class_uri, name),
            description=cls.description,
            abstract=cls.abstract,
            mixin=cls.mixin,
            ancestors=tuple(self.class_ref(a) for a in ancestors(self.schema, name)),
            mixins=tuple(self.class_ref(m) for m in cls.mixins),
            subclasses=tuple(self.class_ref(d) for d in sorted(descendants(self.schema, name))),
            slots=usages,
            referenced_by=self.referencing_slots(name),
            disjoint_with=tuple(self.class_ref(d) for d in sorted(cls.disjoint_with)),
            optional_sections=optional_sections(cls),
        )

    def slot_view(self, name: str) -> SlotView:
        slot = self.schema.slots[name]
        owners = {slot.domain} if slot.domain else set()
        owners.update(c for c, cls in self.schema.classes.items() if name in cls.slots)
        used_by = [
            c for c, resolved in self.resolved.items() if name in resolved and not resolved[name].local
        ]
        return SlotView(
            name=name,
            label=display_label(slot),
            iri=self.iri(slot.slot_uri, name),
            description=slot.description,
            domain=tuple(self.class_ref(o) for o in sorted(owners)),
            range=self.range_ref(slot),
            inverse=self.slot_ref(slot.inverse) if slot.inverse in self.schema.slots else None,
            required=slot.required,
            multivalued=slot.multivalued,
            identifier=slot.identifier,
            pattern=slot.pattern,
            used_by=tuple(self.class_ref(c) for c in used_by),
            optional_sections=optional_sections(slot),
        )

    def individual_view(self, individual: PreservedIndividual) -> IndividualView:
        schema = self.schema
        types, external = [], []
        for type_name in individual.types:
            if type_name in schema.classes:
                types.append(self.class_ref(type_name))
            elif type_name in schema.enums:
                types.append(EntityRef("enum", type_name, display_label(schema.enums[type_name])))
            else:
                external.append(unwrap_iri(type_name) or type_name)
        values = tuple(
            PropertyValueView(
                property=unwrap_iri(prop) or prop,
                value=unwrap_iri(value) or value,
                slot=self.slot_ref(prop) if prop in schema.slots else None,
                target=unwrap_iri(value),
            )
            for prop, value in individual.values
        )
        return IndividualView(
            name=individual.name,
            label=individual.label or individual.name,
            iri=individual.iri,
            description=individual.comment,
            types=tuple(types),
            external_types=tuple(external),
            property_values=values,
        )

    def build(self) -> DocumentationView:
        schema = self.schema
        summary = SchemaSummary(
            name=schema.name,
            title=schema.display_title(),
            iri=self.base,
            description=schema.description,
            version=schema.version,
            license=schema.license,
            created=schema.created,
            modified=schema.modified,
            imports=tuple(schema.imports),
            contributors=tuple(c.name for c in schema.contributors),
            class_count=len(schema.classes),
            slot_count=len(schema.slots),
            enum_count=len(schema.enums),
            type_count=len(schema.types),
            optional_sections=optional_sections(schema),
        )
        enums = tuple(
            EnumView(
                name=name,
                label=display_label(enum),
                iri=self.iri(enum.enum_uri, name),
                description=enum.description,
                values=tuple(PermissibleValueView(pv.text, pv.description, pv.meaning) for pv in enum.permissible_values),
                referenced_by=self.referencing_slots(name),
                optional_sections=optional_sections(enum),
            )
            for name, enum in sorted(schema.enums.items())
        )
        types = tuple(
            TypeView(
                name=name,
                label=display_label(type_),
                iri=self.iri(type_.uri, name),
                description=type_.description,
                base=type_.base.value,
                typeof=EntityRef("type", type_.typeof, type_.typeof) if type_.typeof else None,
                pattern=type_.pattern,
                referenced_by=self.referencing_slots(name),
                optional_sections=optional_sections(type_),
            )
            for name, type_ in sorted(schema.types.items())
        )
        return DocumentationView(
            schema=summary,
            namespaces=tuple(NamespaceView(p, iri) for p, iri in sorted(schema.prefixes.items())),
            classes=tuple(self.class_view(name) for name in sorted(schema.classes)),
            slots=tuple(self.slot_view(name) for name in sorted(schema.slots)),
            enums=enums,
            types=types,
            individuals=tuple(
                self.individual_view(i) for i in sorted(preserved_individuals(schema), key=lambda i: i.name)
            ),
        )


def build_documentation_view(schema: SchemaModel, options: Optional[WriterOptions] = None) -> DocumentationView:
    """Project ``schema`` into documentation view data.

    Args:
        schema: A validated model
        options: Writer options; ``base_uri`` is used when the schema has no id

    Returns:
        A DocumentationView

    Raises:
        StructuralError: If class inheritance cannot be resolved
    """
    options = options or WriterOptions()
    base = schema.id or options.base_uri or schema.schema_iri()
    view = _ViewBuilder(schema, base).build()
    logger.debug("Built documentation view for %s: %d classes", schema.name, len(view.classes))
    return view


def render_json(view: DocumentationView) -> str:
    return json.dumps(view.to_dict(), indent=2, ensure_ascii=False)


class DocumentationWriter(SchemaWriter):
    """Hands the documentation view to an external renderer.

    The renderer is any callable taking a :class:`DocumentationView` and
    returning text or bytes, such as a template engine wrapper.
    """

    FORMAT_ID = "docs"

    def __init__(self, renderer: Renderer) -> None:
        self.renderer = renderer

    def serialize(self, schema: SchemaModel, options: Optional[WriterOptions] = None) -> bytes:
        rendered = self.renderer(build_documentation_view(schema, options))
        return rendered.encode("utf-8") if isinstance(rendered, str) else rendered


class DocsJsonWriter(DocumentationWriter):
    """Documentation view as JSON, for renderers outside this process."""

    FORMAT_ID = "docs-json"

    def __init__(self) -> None:
        super().__init__(render_json)


__all__ = [
    "EntityRef",
    "RangeRef",
    "SlotUsage",
    "ClassView",
    "SlotView",
    "PermissibleValueView",
    "EnumView",
    "TypeView",
    "PropertyValueView",
    "IndividualView",
    "NamespaceView",
    "SchemaSummary",
    "DocumentationView",
    "optional_sections",
    "build_documentation_view",
    "render_json",
    "DocumentationWriter",
    "DocsJsonWriter",
]
