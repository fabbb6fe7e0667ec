"""Namespaced annotation side-channel attached to every model entity.

Annotations map ``(namespace, key)`` to a string. They carry format-specific
detail that the canonical model has no field for, so translating through the
model does not silently drop it. The ``schema-mesh`` namespace is reserved for
metadata the system itself preserves; format producers use their own
namespace (``owl``, ``linkml``, ...).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, TypeVar

from pydantic import BaseModel

RESERVED_NAMESPACE = "schema-mesh"

# Keys the system writes under the reserved namespace.
SOURCE_FORMAT = "source_format"
LABEL = "label"
RESTRICTIONS = "restrictions"
EQUIVALENT_CLASSES = "equivalent_classes"
RANGE_EXPRESSION = "range_expression"
DATATYPE = "datatype"
CHARACTERISTICS = "characteristics"
OWL_PROPERTY_TYPE = "owl_property_type"
DOMAIN_FORM = "domain_form"
INDIVIDUALS = "individuals"
INDIVIDUAL_PREFIX = "individual:"

RESERVED_KEYS = frozenset(
    {
        SOURCE_FORMAT,
        LABEL,
        RESTRICTIONS,
        EQUIVALENT_CLASSES,
        RANGE_EXPRESSION,
        DATATYPE,
        CHARACTERISTICS,
        OWL_PROPERTY_TYPE,
        DOMAIN_FORM,
        INDIVIDUALS,
    }
)

E = TypeVar("E", bound=BaseModel)
AnnotationDict = Dict[str, Dict[str, str]]


def is_reserved_key(key: str) -> bool:
    """Return True if ``key`` is one the system may write in the reserved namespace."""
    return key in RESERVED_KEYS or key.startswith(INDIVIDUAL_PREFIX)


def get_annotation(entity: BaseModel, namespace: str, key: str, default: Optional[str] = None) -> Optional[str]:
    """Look up one annotation value on an entity."""
    return getattr(entity, "annotations", {}).get(namespace, {}).get(key, default)


def get_system(entity: BaseModel, key: str, default: Optional[str] = None) -> Optional[str]:
    """Look up a reserved-namespace annotation."""
    return get_annotation(entity, RESERVED_NAMESPACE, key, default)


def with_annotation(entity: E, namespace: str, key: str, value: str) -> E:
    """Return a copy of ``entity`` carrying one more annotation."""
    merged = merge_annotations(entity.annotations, {namespace: {key: value}})
    return entity.model_copy(update={"annotations": merged})


def add_annotation(annotations: AnnotationDict, namespace: str, key: str, value: str) -> None:
    """Add an annotation to a mutable builder dictionary."""
    annotations.setdefault(namespace, {})[key] = value


def add_system(annotations: AnnotationDict, key: str, value: str) -> None:
    add_annotation(annotations, RESERVED_NAMESPACE, key, value)


def merge_annotations(base: Mapping[str, Mapping[str, str]], extra: Mapping[str, Mapping[str, str]]) -> AnnotationDict:
    """Merge two annotation sets; values in ``extra`` win."""
    merged: AnnotationDict = {ns: dict(entries) for ns, entries in base.items()}
    for namespace, entries in extra.items():
        merged.setdefault(namespace, {}).update(entries)
    return merged


def iter_annotations(entity: BaseModel) -> Iterator[Tuple[Tuple[str, str], str]]:
    """Yield ``((namespace, key), value)`` pairs in sorted order."""
    annotations = getattr(entity, "annotations", {})
    for namespace in sorted(annotations):
        for key in sorted(annotations[namespace]):
            yield (namespace, key), annotations[namespace][key]


def display_label(entity: BaseModel) -> str:
    """Human-readable label: the preserved label, else the entity name."""
    return get_system(entity, LABEL) or getattr(entity, "name")


@dataclass(frozen=True)
class PreservedIndividual:
    """A named individual kept in the reserved schema annotations.

    ``types`` holds class or enum names, or ``<iri>`` for external types.
    ``values`` holds ``(property, value)`` pairs. The property is a slot
    name, or ``<iri>`` for a predicate the schema does not declare. IRI
    values are ``<iri>``.
    """

    name: str
    types: Tuple[str, ...] = ()
    iri: Optional[str] = None
    label: Optional[str] = None
    comment: Optional[str] = None
    values: Tuple[Tuple[str, str], ...] = ()


def preserved_individuals(schema: BaseModel) -> List[PreservedIndividual]:
    """Decode the individuals recorded on a schema, in recorded order."""
    reserved = getattr(schema, "annotations", {}).get(RESERVED_NAMESPACE, {})
    listed = reserved.get(INDIVIDUALS, "")
    individuals = []
    for name in (n.strip() for n in listed.split(",") if n.strip()):
        key = f"{INDIVIDUAL_PREFIX}{name}"
        prefix = f"{key}:"
        values = []
        for entry in sorted(reserved):
            prop = entry[len(prefix):] if entry.startswith(prefix) else ""
            if prop and not prop.startswith("_"):
                values.extend((prop, value) for value in decode_values(reserved[entry]))
        individuals.append(
            PreservedIndividual(
                name=name,
                types=tuple(t.strip() for t in reserved.get(key, "").split(",") if t.strip()),
                iri=reserved.get(f"{key}:_iri"),
                label=reserved.get(f"{key}:_label"),
                comment=reserved.get(f"{key}:_comment"),
                values=tuple(values),
            )
        )
    return individuals


def encode_values(values: List[str]) -> str:
    """Encode individual property values as a JSON list."""
    return json.dumps(values, ensure_ascii=False)


def decode_values(text: str) -> List[str]:
    """Decode :func:`encode_values` output; any other text is a single value."""
    try:
        decoded = json.loads(text)
    except ValueError:
        return [text]
    if isinstance(decoded, list) and all(isinstance(v, str) for v in decoded):
        return decoded
    return [text]


def unwrap_iri(value: str) -> Optional[str]:
    """Return the IRI inside ``<...>``, or None for a plain value."""
    if value.startswith("<") and value.endswith(">"):
        return value[1:-1]
    return None


__all__ = [
    "RESERVED_NAMESPACE",
    "SOURCE_FORMAT",
    "LABEL",
    "RESTRICTIONS",
    "EQUIVALENT_CLASSES",
    "RANGE_EXPRESSION",
    "DATATYPE",
    "CHARACTERISTICS",
    "OWL_PROPERTY_TYPE",
    "DOMAIN_FORM",
    "INDIVIDUALS",
    "INDIVIDUAL_PREFIX",
    "RESERVED_KEYS",
    "is_reserved_key",
    "get_annotation",
    "get_system",
    "with_annotation",
    "add_annotation",
    "add_system",
    "merge_annotations",
    "iter_annotations",
    "display_label",
    "PreservedIndividual",
    "preserved_individuals",
    "encode_values",
    "decode_values",
    "unwrap_iri",
]
