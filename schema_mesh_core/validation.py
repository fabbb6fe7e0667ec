"""Structural invariant checks for the canonical model.

Every reader runs :func:`close_symmetric_relations` followed by
:func:`validate_schema` before returning a model, and every writer validates
the model it is handed. A failed check raises :class:`StructuralError`; a
partially valid model is never returned.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel

from schema_mesh_core.annotations import RESERVED_NAMESPACE, is_reserved_key
from schema_mesh_core.datatypes import is_scalar
from schema_mesh_core.errors import StructuralError
from schema_mesh_core.model import SchemaModel, SlotEntity

logger = logging.getLogger(__name__)

_VISITING = 1
_DONE = 2


def iter_entities(schema: SchemaModel) -> Iterator[Tuple[str, str, BaseModel]]:
    """Yield ``(kind, qualified_name, entity)`` for every annotated entity."""
    yield "schema", schema.name, schema
    for name, cls in schema.classes.items():
        yield "class", name, cls
        for attr_name, attr in cls.attributes.items():
            yield "attribute", f"{name}.{attr_name}", attr
    for name, slot in schema.slots.items():
        yield "slot", name, slot
    for name, enum in schema.enums.items():
        yield "enum", name, enum
    for name, type_ in schema.types.items():
        yield "type", name, type_


def validate_schema(schema: SchemaModel) -> SchemaModel:
    """Check every structural invariant and return ``schema`` unchanged.

    Raises:
        StructuralError: On the first violated invariant.
    """
    _check_names(schema)
    _check_references(schema)
    _check_acyclic(schema)
    _check_ranges(schema)
    _check_reserved_annotations(schema)
    logger.debug("Validated schema %s", schema.name)
    return schema


def _check_names(schema: SchemaModel) -> None:
    for kind, mapping in (
        ("class", schema.classes),
        ("slot", schema.slots),
        ("enum", schema.enums),
        ("type", schema.types),
    ):
        for key, entity in mapping.items():
            if key != entity.name:
                raise StructuralError(
                    f"{kind.title()} registered as '{key}' is named '{entity.name}'",
                    entity=key,
                    kind=kind,
                )
    for class_name, cls in schema.classes.items():
        for key, attr in cls.attributes.items():
            if key != attr.name:
                raise StructuralError(
                    f"Attribute registered as '{key}' is named '{attr.name}'",
                    entity=f"{class_name}.{key}",
                    kind="attribute",
                )

    for enum_name, enum in schema.enums.items():
        texts = enum.values()
        if len(texts) != len(set(texts)):
            duplicate = next(t for t in texts if texts.count(t) > 1)
            raise StructuralError(
                f"Enum '{enum_name}' lists permissible value '{duplicate}' more than once",
                entity=enum_name,
                kind="enum",
                reference=duplicate,
            )

    # A range has to resolve to exactly one target.
    owners: Dict[str, str] = {}
    for kind, mapping in (("class", schema.classes), ("enum", schema.enums), ("type", schema.types)):
        for name in mapping:
            if name in owners:
                raise StructuralError(
                    f"Name '{name}' is used by both a {owners[name]} and a {kind}",
                    entity=name,
                    kind=kind,
                )
            owners[name] = kind


def _check_references(schema: SchemaModel) -> None:
    classes = schema.classes
    for name, cls in classes.items():
        if cls.is_a and cls.is_a not in classes:
            raise StructuralError(
                f"Class '{name}' has unknown parent '{cls.is_a}'", entity=name, kind="class", reference=cls.is_a
            )
        for mixin in cls.mixins:
            if mixin not in classes:
                raise StructuralError(
                    f"Class '{name}' has unknown mixin '{mixin}'", entity=name, kind="class", reference=mixin
                )
        for other in cls.disjoint_with:
            if other not in classes:
                raise StructuralError(
                    f"Class '{name}' is disjoint with unknown class '{other}'",
                    entity=name,
                    kind="class",
                    reference=other,
                )
        for slot_name in cls.slots:
            if slot_name not in schema.slots:
                raise StructuralError(
                    f"Class '{name}' owns unknown slot '{slot_name}'", entity=name, kind="class", reference=slot_name
                )
        for attr in cls.attributes.values():
            _check_slot_references(schema, attr, f"{name}.{attr.name}", local_slots=cls.attributes)

    for name, slot in schema.slots.items():
        _check_slot_references(schema, slot, name)

    for name, type_ in schema.types.items():
        if type_.typeof and type_.typeof not in schema.types:
            raise StructuralError(
                f"Type '{name}' derives from unknown type '{type_.typeof}'",
                entity=name,
                kind="type",
                reference=type_.typeof,
            )


def _check_slot_references(
    schema: SchemaModel,
    slot: SlotEntity,
    qualified: str,
    local_slots: Optional[Dict[str, SlotEntity]] = None,
) -> None:
    if slot.domain and slot.domain not in schema.classes:
        raise StructuralError(
            f"Slot '{qualified}' has unknown domain '{slot.domain}'", entity=qualified, kind="slot", reference=slot.domain
        )
    if slot.inverse:
        known = slot.inverse in schema.slots or (local_slots is not None and slot.inverse in local_slots)
        if not known:
            raise StructuralError(
                f"Slot '{qualified}' has unknown inverse '{slot.inverse}'",
                entity=qualified,
                kind="slot",
                reference=slot.inverse,
            )


def _check_acyclic(schema: SchemaModel) -> None:
    state: Dict[str, int] = {}

    def visit(name: str, path: List[str]) -> None:
        state[name] = _VISITING
        path.append(name)
        cls = schema.classes[name]
        parents = list(cls.mixins) + ([cls.is_a] if cls.is_a else [])
        for parent in parents:
            status = state.get(parent)
            if status == _VISITING:
                cycle = " -> ".join(path[path.index(parent):] + [parent])
                raise StructuralError(
                    f"Inheritance cycle detected: {cycle}",
                    entity=parent,
                    kind="class",
                    cycle=cycle,
                )
            if status is None:
                visit(parent, path)
        path.pop()
        state[name] = _DONE

    for class_name in schema.classes:
        if class_name not in state:
            visit(class_name, [])

    for type_name in schema.types:
        seen = [type_name]
        current = schema.types[type_name].typeof
        while current:
            if current in seen:
                raise StructuralError(
                    f"Type derivation cycle detected: {' -> '.join(seen + [current])}",
                    entity=type_name,
                    kind="type",
                )
            seen.append(current)
            current = schema.types[current].typeof


def resolves_range(schema: SchemaModel, range_name: str) -> bool:
    return (
        range_name in schema.classes
        or range_name in schema.enums
        or range_name in schema.types
        or is_scalar(range_name)
    )


def _check_ranges(schema: SchemaModel) -> None:
    if schema.default_range and not resolves_range(schema, schema.default_range):
        raise StructuralError(
            f"Default range '{schema.default_range}' does not resolve",
            entity=schema.name,
            kind="schema",
            reference=schema.default_range,
        )
    slots: List[Tuple[str, SlotEntity]] = list(schema.slots.items())
    for class_name, cls in schema.classes.items():
        slots.extend((f"{class_name}.{name}", attr) for name, attr in cls.attributes.items())
    for qualified, slot in slots:
        if slot.range and not resolves_range(schema, slot.range):
            raise StructuralError(
                f"Slot '{qualified}' has unresolved range '{slot.range}'",
                entity=qualified,
                kind="slot",
                reference=slot.range,
            )


def _check_reserved_annotations(schema: SchemaModel) -> None:
    for kind, name, entity in iter_entities(schema):
        reserved = getattr(entity, "annotations", {}).get(RESERVED_NAMESPACE, {})
        for key in reserved:
            if not is_reserved_key(key):
                raise StructuralError(
                    f"Annotation key '{key}' is not allowed in the reserved '{RESERVED_NAMESPACE}' namespace",
                    entity=name,
                    kind=kind,
                    reference=key,
                )


def close_symmetric_relations(schema: SchemaModel) -> SchemaModel:
    """Materialise ``disjoint_with`` in both directions, each edge exactly once.

    Duplicate declarations are dropped; missing reverse edges are appended
    in schema order.

    Raises:
        StructuralError: If a class is disjoint with itself or with an
            unknown class.
    """
    disjoint: Dict[str, List[str]] = {
        name: list(dict.fromkeys(cls.disjoint_with)) for name, cls in schema.classes.items()
    }
    for name in schema.classes:
        for other in list(disjoint[name]):
            if other == name:
                raise StructuralError(
                    f"Class '{name}' is declared disjoint with itself", entity=name, kind="class", reference=other
                )
            if other not in disjoint:
                raise StructuralError(
                    f"Class '{name}' is disjoint with unknown class '{other}'",
                    entity=name,
                    kind="class",
                    reference=other,
                )
            if name not in disjoint[other]:
                disjoint[other].append(name)

    changed = {
        name: cls.model_copy(update={"disjoint_with": disjoint[name]})
        for name, cls in schema.classes.items()
        if disjoint[name] != cls.disjoint_with
    }
    if not changed:
        return schema
    classes = {name: changed.get(name, cls) for name, cls in schema.classes.items()}
    return schema.model_copy(update={"classes": classes})


__all__ = ["iter_entities", "validate_schema", "resolves_range", "close_symmetric_relations"]
