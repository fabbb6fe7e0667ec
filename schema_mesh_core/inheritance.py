"""Effective slot resolution over ``is_a`` and mixin inheritance.

Resolution is computed on demand and never cached on the model. Precedence,
highest first: the class's own attributes and slots, then each mixin in
declared order (a mixin's own ancestry contributes at the mixin's
precedence), then the ``is_a`` parent. The first definition of a slot name
wins. Revisiting a class already on the current path is a cycle.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from schema_mesh_core.errors import StructuralError
from schema_mesh_core.model import SchemaModel, SlotEntity


@dataclass(frozen=True)
class ResolvedSlot:
    """A slot in a class's effective slot set and the class that supplied it."""

    slot: SlotEntity
    owner: str
    local: bool = False  # class-scoped attribute rather than a schema-level slot

    @property
    def name(self) -> str:
        return self.slot.name


def resolve_slots(schema: SchemaModel, class_name: str) -> Dict[str, ResolvedSlot]:
    """Return the ordered effective slot set of ``class_name``.

    Raises:
        StructuralError: If the class or a referenced slot is unknown, or the
            inheritance graph reachable from the class contains a cycle.
    """
    resolved: Dict[str, ResolvedSlot] = {}
    _collect(schema, class_name, resolved, ())
    return resolved


def _collect(
    schema: SchemaModel,
    class_name: str,
    resolved: Dict[str, ResolvedSlot],
    path: Tuple[str, ...],
) -> None:
    if class_name in path:
        cycle = " -> ".join(path[path.index(class_name):] + (class_name,))
        raise StructuralError(
            f"Inheritance cycle detected: {cycle}",
            entity=class_name,
            kind="class",
            cycle=cycle,
        )
    cls = schema.classes.get(class_name)
    if cls is None:
        raise StructuralError(
            f"Unknown class '{class_name}'",
            entity=path[-1] if path else class_name,
            kind="class",
            reference=class_name,
        )
    path = path + (class_name,)

    for attr_name, attr in cls.attributes.items():
        resolved.setdefault(attr_name, ResolvedSlot(attr, class_name, local=True))
    for slot_name in cls.slots:
        slot = schema.slots.get(slot_name)
        if slot is None:
            raise StructuralError(
                f"Class '{class_name}' owns unknown slot '{slot_name}'",
                entity=class_name,
                kind="class",
                reference=slot_name,
            )
        resolved.setdefault(slot_name, ResolvedSlot(slot, class_name))

    for mixin in cls.mixins:
        _collect(schema, mixin, resolved, path)
    if cls.is_a:
        _collect(schema, cls.is_a, resolved, path)


def ancestors(schema: SchemaModel, class_name: str) -> List[str]:
    """Return the ``is_a`` chain above ``class_name``, nearest first."""
    chain: List[str] = []
    seen = {class_name}
    current = schema.classes[class_name].is_a
    while current:
        if current in seen:
            raise StructuralError(
                f"Inheritance cycle detected through '{current}'",
                entity=class_name,
                kind="class",
            )
        chain.append(current)
        seen.add(current)
        parent = schema.classes.get(current)
        current = parent.is_a if parent is not None else None
    return chain


def descendants(schema: SchemaModel, class_name: str) -> List[str]:
    """Direct ``is_a`` children of ``class_name`` in schema order."""
    return [name for name, cls in schema.classes.items() if cls.is_a == class_name]


def mixin_users(schema: SchemaModel, class_name: str) -> List[str]:
    """Classes that list ``class_name`` among their mixins."""
    return [name for name, cls in schema.classes.items() if class_name in cls.mixins]


__all__ = ["ResolvedSlot", "resolve_slots", "ancestors", "descendants", "mixin_users"]
