"""
Unit tests for structural invariant validation.

Tests cover:
- Unresolved parents, mixins, slots, inverses and ranges
- Inheritance and type derivation cycles
- Name collisions between classes, enums and types
- Duplicate permissible values
- Symmetric disjointness closure
- Reserved annotation namespace
"""

import pytest

from schema_mesh_core.errors import StructuralError
from schema_mesh_core.model import ClassEntity, EnumEntity, SchemaModel, SlotEntity, TypeEntity
from schema_mesh_core.validation import close_symmetric_relations, iter_entities, validate_schema


def make_schema(**sections) -> SchemaModel:
    return SchemaModel(name="test", **sections)


class TestReferences:
    """Test that every reference resolves."""

    @pytest.mark.unit
    def test_valid_schema_returned_unchanged(self, yaml_schema):
        """Test that a valid schema passes and is returned as is."""
        assert validate_schema(yaml_schema) is yaml_schema

    @pytest.mark.unit
    def test_unknown_parent(self):
        """Test that an is_a to a missing class fails."""
        schema = make_schema(classes={"Dog": ClassEntity(name="Dog", is_a="Animal")})

        with pytest.raises(StructuralError) as exc_info:
            validate_schema(schema)

        assert exc_info.value.entity == "Dog"
        assert exc_info.value.reference == "Animal"

    @pytest.mark.unit
    def test_unknown_mixin(self):
        """Test that a mixin to a missing class fails."""
        schema = make_schema(classes={"Dog": ClassEntity(name="Dog", mixins=["Pet"])})

        with pytest.raises(StructuralError, match="unknown mixin 'Pet'"):
            validate_schema(schema)

    @pytest.mark.unit
    def test_unknown_owned_slot(self):
        """Test that a class cannot own an undeclared slot."""
        schema = make_schema(classes={"Dog": ClassEntity(name="Dog", slots=["bark"])})

        with pytest.raises(StructuralError, match="unknown slot 'bark'"):
            validate_schema(schema)

    @pytest.mark.unit
    def test_unknown_inverse(self):
        """Test that an inverse must name a declared slot."""
        schema = make_schema(slots={"owns": SlotEntity(name="owns", inverse="ownedBy")})

        with pytest.raises(StructuralError, match="unknown inverse"):
            validate_schema(schema)

    @pytest.mark.unit
    def test_attribute_inverse_may_be_local(self):
        """Test that a class-scoped slot may be the inverse of a sibling attribute."""
        schema = make_schema(
            classes={
                "Node": ClassEntity(
                    name="Node",
                    attributes={
                        "parent": SlotEntity(name="parent", range="Node", inverse="children"),
                        "children": SlotEntity(name="children", range="Node", inverse="parent"),
                    },
                )
            }
        )

        assert validate_schema(schema) is schema

    @pytest.mark.unit
    def test_unresolved_range(self):
        """Test that a slot range must be a class, enum, type or scalar."""
        schema = make_schema(slots={"owner": SlotEntity(name="owner", range="Person")})

        with pytest.raises(StructuralError) as exc_info:
            validate_schema(schema)

        assert exc_info.value.reference == "Person"
        assert exc_info.value.kind == "slot"

    @pytest.mark.unit
    def test_unresolved_default_range(self):
        """Test that the schema default range must resolve."""
        with pytest.raises(StructuralError, match="Default range"):
            validate_schema(make_schema(default_range="Nothing"))

    @pytest.mark.unit
    def test_scalar_alias_range_resolves(self):
        """Test that scalar aliases are accepted as ranges."""
        schema = make_schema(slots={"count": SlotEntity(name="count", range="int")})

        assert validate_schema(schema) is schema


class TestCycles:
    """Test cycle detection."""

    @pytest.mark.unit
    def test_is_a_cycle(self):
        """Test that a two-class is_a cycle fails."""
        schema = make_schema(
            classes={
                "A": ClassEntity(name="A", is_a="B"),
                "B": ClassEntity(name="B", is_a="A"),
            }
        )

        with pytest.raises(StructuralError, match="cycle"):
            validate_schema(schema)

    @pytest.mark.unit
    def test_cycle_through_mixin(self):
        """Test that cycles mixing is_a and mixin edges are detected."""
        schema = make_schema(
            classes={
                "A": ClassEntity(name="A", is_a="B"),
                "B": ClassEntity(name="B", mixins=["C"]),
                "C": ClassEntity(name="C", is_a="A"),
            }
        )

        with pytest.raises(StructuralError) as exc_info:
            validate_schema(schema)

        assert "->" in exc_info.value.details["cycle"]

    @pytest.mark.unit
    def test_self_parent(self):
        """Test that a class cannot be its own parent."""
        schema = make_schema(classes={"A": ClassEntity(name="A", is_a="A")})

        with pytest.raises(StructuralError):
            validate_schema(schema)

    @pytest.mark.unit
    def test_diamond_is_not_a_cycle(self):
        """Test that shared ancestors are allowed."""
        schema = make_schema(
            classes={
                "Top": ClassEntity(name="Top"),
                "Left": ClassEntity(name="Left", is_a="Top"),
                "Right": ClassEntity(name="Right", is_a="Top"),
                "Bottom": ClassEntity(name="Bottom", is_a="Left", mixins=["Right"]),
            }
        )

        assert validate_schema(schema) is schema

    @pytest.mark.unit
    def test_type_derivation_cycle(self):
        """Test that types cannot derive from themselves through typeof."""
        schema = make_schema(
            types={
                "Code": TypeEntity(name="Code", typeof="Label"),
                "Label": TypeEntity(name="Label", typeof="Code"),
            }
        )

        with pytest.raises(StructuralError, match="Type derivation cycle"):
            validate_schema(schema)


class TestNames:
    """Test name uniqueness rules."""

    @pytest.mark.unit
    def test_key_must_match_name(self):
        """Test that an entity registered under another key fails."""
        schema = make_schema(classes={"Dog": ClassEntity(name="Hound")})

        with pytest.raises(StructuralError, match="registered as 'Dog'"):
            validate_schema(schema)

    @pytest.mark.unit
    def test_class_and_enum_share_name(self):
        """Test that a range name must identify exactly one entity."""
        schema = make_schema(
            classes={"Size": ClassEntity(name="Size")},
            enums={"Size": EnumEntity(name="Size", permissible_values=["Small"])},
        )

        with pytest.raises(StructuralError, match="used by both"):
            validate_schema(schema)

    @pytest.mark.unit
    def test_duplicate_permissible_value(self):
        """Test that an enum cannot list the same value twice."""
        schema = make_schema(enums={"Size": EnumEntity(name="Size", permissible_values=["Small", "Small"])})

        with pytest.raises(StructuralError) as exc_info:
            validate_schema(schema)

        assert exc_info.value.reference == "Small"


class TestDisjointClosure:
    """Test symmetric closure of disjointness."""

    @pytest.mark.unit
    def test_reverse_edge_added(self):
        """Test that Dog disjoint with Cat implies Cat disjoint with Dog."""
        schema = make_schema(
            classes={
                "Dog": ClassEntity(name="Dog", disjoint_with=["Cat"]),
                "Cat": ClassEntity(name="Cat"),
            }
        )

        closed = close_symmetric_relations(schema)

        assert closed.classes["Cat"].disjoint_with == ["Dog"]
        assert closed.classes["Dog"].disjoint_with == ["Cat"]

    @pytest.mark.unit
    def test_each_edge_once(self):
        """Test that duplicate and mutual declarations collapse to one edge per side."""
        schema = make_schema(
            classes={
                "Dog": ClassEntity(name="Dog", disjoint_with=["Cat", "Cat"]),
                "Cat": ClassEntity(name="Cat", disjoint_with=["Dog"]),
            }
        )

        closed = close_symmetric_relations(schema)

        assert closed.classes["Dog"].disjoint_with == ["Cat"]
        assert closed.classes["Cat"].disjoint_with == ["Dog"]

    @pytest.mark.unit
    def test_closed_schema_returned_as_is(self, yaml_schema):
        """Test that an already symmetric schema is not copied."""
        closed = close_symmetric_relations(yaml_schema)

        assert close_symmetric_relations(closed) is closed

    @pytest.mark.unit
    def test_self_disjoint_rejected(self):
        """Test that a class cannot be disjoint with itself."""
        schema = make_schema(classes={"Dog": ClassEntity(name="Dog", disjoint_with=["Dog"])})

        with pytest.raises(StructuralError, match="itself"):
            close_symmetric_relations(schema)

    @pytest.mark.unit
    def test_disjoint_with_unknown_class(self):
        """Test that disjointness must name a declared class."""
        schema = make_schema(classes={"Dog": ClassEntity(name="Dog", disjoint_with=["Unicorn"])})

        with pytest.raises(StructuralError, match="unknown class 'Unicorn'"):
            close_symmetric_relations(schema)


class TestReservedAnnotations:
    """Test the reserved annotation namespace."""

    @pytest.mark.unit
    def test_system_keys_allowed(self):
        """Test that known reserved keys and individual keys pass."""
        schema = make_schema(
            annotations={"schema-mesh": {"source_format": "ttl", "individuals": "rex", "individual:rex": "Dog"}}
        )

        assert validate_schema(schema) is schema

    @pytest.mark.unit
    def test_user_key_in_reserved_namespace_rejected(self):
        """Test that arbitrary keys cannot use the reserved namespace."""
        schema = make_schema(
            classes={"Dog": ClassEntity(name="Dog", annotations={"schema-mesh": {"colour": "brown"}})}
        )

        with pytest.raises(StructuralError) as exc_info:
            validate_schema(schema)

        assert exc_info.value.entity == "Dog"
        assert exc_info.value.reference == "colour"

    @pytest.mark.unit
    def test_iter_entities_covers_attributes(self, mixin_schema):
        """Test that attributes are visited with qualified names."""
        names = [name for kind, name, _ in iter_entities(mixin_schema)]

        assert "Item.tag" in names
        assert names[0] == "mixins"
