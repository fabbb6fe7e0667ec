"""
Unit tests for the graph-topology projection.

Tests cover:
- Typed nodes with kind-qualified identifiers
- Inheritance, domain, range and inverse edges
- Scalar ranges producing no edge
- Option-driven filtering
- JSON output
"""

import json

import pytest

from schema_mesh_core.config import GraphOptions, WriterOptions
from schema_mesh_core.model import ClassEntity, SchemaModel, SlotEntity, TypeEntity
from schema_mesh_export.topology import EdgeKind, GraphEdge, GraphJsonWriter, NodeKind, build_topology


class TestNodes:
    """Test node projection."""

    @pytest.mark.unit
    def test_class_nodes(self, yaml_schema):
        """Test that every class becomes a node."""
        topology = build_topology(yaml_schema)
        dog = topology.node("class:Dog")

        assert dog is not None
        assert dog.kind == NodeKind.CLASS
        assert dog.label == "Dog"
        assert topology.node("class:Animal").description == "A living organism"

    @pytest.mark.unit
    def test_slot_and_enum_nodes(self, yaml_schema):
        """Test slot and enum nodes."""
        topology = build_topology(yaml_schema)

        assert topology.node("slot:hasOwner").kind == NodeKind.SLOT
        assert topology.node("enum:Size").kind == NodeKind.ENUM

    @pytest.mark.unit
    def test_attribute_nodes_qualified(self, mixin_schema):
        """Test that class attributes get owner-qualified ids."""
        topology = build_topology(mixin_schema)

        assert topology.node("slot:Item.tag") is not None
        assert topology.node("slot:tag") is not None

    @pytest.mark.unit
    def test_same_name_different_kinds(self):
        """Test that a class and a slot sharing a name stay distinct."""
        schema = SchemaModel(
            name="clash",
            classes={"Owner": ClassEntity(name="Owner", slots=["Owner"])},
            slots={"Owner": SlotEntity(name="Owner")},
        )
        ids = [node.id for node in build_topology(schema).nodes]

        assert ids == ["class:Owner", "slot:Owner"]


class TestEdges:
    """Test edge projection."""

    @pytest.mark.unit
    def test_subclass_edges(self, yaml_schema):
        """Test is_a edges."""
        edges = build_topology(yaml_schema).edges_of_kind(EdgeKind.SUBCLASS_OF)

        assert GraphEdge("class:Dog", "class:Mammal", EdgeKind.SUBCLASS_OF) in edges
        assert len(edges) == 3

    @pytest.mark.unit
    def test_mixin_edges(self, mixin_schema):
        """Test mixin edges keep their order."""
        edges = build_topology(mixin_schema).edges_of_kind(EdgeKind.MIXIN)

        assert [e.target for e in edges] == ["class:Named", "class:Tagged"]

    @pytest.mark.unit
    def test_domain_edges(self, yaml_schema):
        """Test that a slot points at its owning class once."""
        edges = build_topology(yaml_schema).edges_of_kind(EdgeKind.DOMAIN)

        assert [e.target for e in edges if e.source == "slot:hasName"] == ["class:Animal"]

    @pytest.mark.unit
    def test_range_edges(self, yaml_schema):
        """Test range edges to classes and enums."""
        edges = build_topology(yaml_schema).edges_of_kind(EdgeKind.RANGE)
        targets = {e.source: e.target for e in edges}

        assert targets["slot:hasOwner"] == "class:Person"
        assert targets["slot:size"] == "enum:Size"

    @pytest.mark.unit
    def test_scalar_range_has_no_edge(self, yaml_schema):
        """Test that scalar ranges produce no edge."""
        edges = build_topology(yaml_schema).edges_of_kind(EdgeKind.RANGE)

        assert "slot:age" not in {e.source for e in edges}

    @pytest.mark.unit
    def test_inverse_edges(self, yaml_schema):
        """Test inverse edges in both directions."""
        edges = build_topology(yaml_schema).edges_of_kind(EdgeKind.INVERSE)

        assert {(e.source, e.target) for e in edges} == {
            ("slot:hasOwner", "slot:owns"),
            ("slot:owns", "slot:hasOwner"),
        }

    @pytest.mark.unit
    def test_type_edges(self):
        """Test type-of edges and type range targets."""
        schema = SchemaModel(
            name="types",
            types={
                "Code": TypeEntity(name="Code"),
                "ShortCode": TypeEntity(name="ShortCode", typeof="Code"),
            },
            slots={"code": SlotEntity(name="code", range="ShortCode")},
        )
        topology = build_topology(schema)

        assert topology.edges_of_kind(EdgeKind.TYPE_OF) == [
            GraphEdge("type:ShortCode", "type:Code", EdgeKind.TYPE_OF)
        ]
        assert topology.edges_of_kind(EdgeKind.RANGE)[0].target == "type:ShortCode"


class TestOptions:
    """Test option-driven filtering."""

    @pytest.mark.unit
    def test_classes_only(self, yaml_schema):
        """Test the class hierarchy preset."""
        topology = build_topology(yaml_schema, GraphOptions.classes_only())

        assert {n.kind for n in topology.nodes} == {NodeKind.CLASS}
        assert {e.kind for e in topology.edges} == {EdgeKind.SUBCLASS_OF}

    @pytest.mark.unit
    def test_enum_range_dropped_without_enum_nodes(self, yaml_schema):
        """Test that range edges never point at excluded nodes."""
        topology = build_topology(yaml_schema, GraphOptions(include_enums=False))
        ids = {n.id for n in topology.nodes}

        assert all(e.target in ids for e in topology.edges)

    @pytest.mark.unit
    def test_json_writer(self, yaml_schema):
        """Test the JSON serialization and its options."""
        options = WriterOptions(graph=GraphOptions(include_slots=False))
        data = json.loads(GraphJsonWriter().render(yaml_schema, options))

        assert data["schema_name"] == "animals"
        assert data["format_version"] == "1.0"
        assert {n["kind"] for n in data["nodes"]} == {"class", "enum"}
        assert data["edges"][0] == {
            "source": "class:Mammal",
            "target": "class:Animal",
            "kind": "subclass_of",
            "label": None,
        }
