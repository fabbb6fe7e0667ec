"""Graph-topology projection consumed by visualization front ends.

The projection is a flat list of typed nodes and directed typed edges. Node
identifiers are ``kind:name`` so classes and slots that share a name stay
distinct. Layout and rendering are left entirely to the consumer.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from schema_mesh_core.annotations import display_label
from schema_mesh_core.config import GraphOptions, WriterOptions
from schema_mesh_core.model import SchemaModel, SlotEntity

from .writer_base import SchemaWriter

FORMAT_VERSION = "1.0"


class NodeKind(str, Enum):
    CLASS = "class"
    SLOT = "slot"
    ENUM = "enum"
    TYPE = "type"


class EdgeKind(str, Enum):
    SUBCLASS_OF = "subclass_of"
    MIXIN = "mixin"
    DOMAIN = "domain"
    RANGE = "range"
    INVERSE = "inverse"
    TYPE_OF = "type_of"


@dataclass(frozen=True)
class GraphNode:
    id: str
    kind: NodeKind
    label: str
    description: Optional[str] = None
    uri: Optional[str] = None
    is_abstract: bool = False


@dataclass(frozen=True)
class GraphEdge:
    source: str
    target: str
    kind: EdgeKind
    label: Optional[str] = None


@dataclass(frozen=True)
class GraphTopology:
    """Nodes and edges of one schema, plus the schema it came from."""

    schema_name: str
    schema_title: Optional[str]
    nodes: Tuple[GraphNode, ...] = ()
    edges: Tuple[GraphEdge, ...] = ()
    format_version: str = FORMAT_VERSION

    def node(self, node_id: str) -> Optional[GraphNode]:
        return next((n for n in self.nodes if n.id == node_id), None)

    def edges_of_kind(self, kind: EdgeKind) -> List[GraphEdge]:
        return [e for e in self.edges if e.kind == kind]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for node in data["nodes"]:
            node["kind"] = node["kind"].value
        for edge in data["edges"]:
            edge["kind"] = edge["kind"].value
        return data


def node_id(kind: NodeKind, name: str) -> str:
    return f"{kind.value}:{name}"


def build_topology(schema: SchemaModel, options: Optional[GraphOptions] = None) -> GraphTopology:
    """Project ``schema`` into typed nodes and edges.

    Args:
        schema: Model to project
        options: Which node and edge kinds to include; defaults to everything

    Returns:
        A GraphTopology
    """
    options = options or GraphOptions()
    nodes: List[GraphNode] = []
    edges: List[GraphEdge] = []

    for name, cls in schema.classes.items():
        source = node_id(NodeKind.CLASS, name)
        nodes.append(
            GraphNode(
                id=source,
                kind=NodeKind.CLASS,
                label=display_label(cls),
                description=cls.description,
                uri=cls.class_uri,
                is_abstract=cls.abstract,
            )
        )
        if cls.is_a:
            edges.append(GraphEdge(source, node_id(NodeKind.CLASS, cls.is_a), EdgeKind.SUBCLASS_OF))
        for mixin in cls.mixins:
            edges.append(GraphEdge(source, node_id(NodeKind.CLASS, mixin), EdgeKind.MIXIN))

    if options.include_slots:
        owners: Dict[str, List[str]] = {}
        for class_name, cls in schema.classes.items():
            for slot_name in cls.slots:
                owners.setdefault(slot_name, []).append(class_name)
        for name, slot in schema.slots.items():
            domains = list(dict.fromkeys(([slot.domain] if slot.domain else []) + owners.get(name, [])))
            _add_slot(schema, options, nodes, edges, node_id(NodeKind.SLOT, name), slot, domains)
        for class_name, cls in schema.classes.items():
            for attr_name, attr in cls.attributes.items():
                qualified = f"{class_name}.{attr_name}"
                _add_slot(schema, options, nodes, edges, node_id(NodeKind.SLOT, qualified), attr, [class_name])

    if options.include_enums:
        for name, enum in schema.enums.items():
            source = node_id(NodeKind.ENUM, name)
            nodes.append(GraphNode(source, NodeKind.ENUM, display_label(enum), enum.description, enum.enum_uri))

    if options.include_types:
        for name, type_ in schema.types.items():
            source = node_id(NodeKind.TYPE, name)
            nodes.append(GraphNode(source, NodeKind.TYPE, display_label(type_), type_.description, type_.uri))
            if type_.typeof:
                edges.append(GraphEdge(source, node_id(NodeKind.TYPE, type_.typeof), EdgeKind.TYPE_OF))

    return GraphTopology(
        schema_name=schema.name,
        schema_title=schema.title,
        nodes=tuple(nodes),
        edges=tuple(edges),
    )


def _add_slot(
    schema: SchemaModel,
    options: GraphOptions,
    nodes: List[GraphNode],
    edges: List[GraphEdge],
    source: str,
    slot: SlotEntity,
    domains: List[str],
) -> None:
    nodes.append(GraphNode(source, NodeKind.SLOT, display_label(slot), slot.description, slot.slot_uri))
    if options.include_domain_edges:
        for domain in domains:
            edges.append(GraphEdge(source, node_id(NodeKind.CLASS, domain), EdgeKind.DOMAIN, "domain"))
    if options.include_range_edges:
        target = _range_target(schema, options, schema.effective_range(slot))
        if target is not None:
            edges.append(GraphEdge(source, target, EdgeKind.RANGE, "range"))
    if options.include_inverse_edges and slot.inverse and slot.inverse in schema.slots:
        edges.append(GraphEdge(source, node_id(NodeKind.SLOT, slot.inverse), EdgeKind.INVERSE, "inverseOf"))


def _range_target(schema: SchemaModel, options: GraphOptions, range_name: str) -> Optional[str]:
    """Node id for a range; scalar ranges have no node."""
    if range_name in schema.classes:
        return node_id(NodeKind.CLASS, range_name)
    if options.include_enums and range_name in schema.enums:
        return node_id(NodeKind.ENUM, range_name)
    if options.include_types and range_name in schema.types:
        return node_id(NodeKind.TYPE, range_name)
    return None


class GraphJsonWriter(SchemaWriter):
    """Writes the graph-topology projection as JSON."""

    FORMAT_ID = "graph-json"
    ALIASES = ("graph",)

    def serialize(self, schema: SchemaModel, options: Optional[WriterOptions] = None) -> bytes:
        options = options or WriterOptions()
        topology = build_topology(schema, options.graph)
        return json.dumps(topology.to_dict(), indent=2, ensure_ascii=False).encode("utf-8")


__all__ = [
    "FORMAT_VERSION",
    "NodeKind",
    "EdgeKind",
    "GraphNode",
    "GraphEdge",
    "GraphTopology",
    "node_id",
    "build_topology",
    "GraphJsonWriter",
]
