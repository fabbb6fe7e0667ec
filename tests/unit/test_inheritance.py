"""
Unit tests for effective slot resolution.

Tests cover:
- Precedence of attributes, owned slots, mixins and is_a
- First mixin wins over later mixins
- Cycle detection during resolution
- Ancestor, descendant and mixin-user queries
"""

import pytest

from schema_mesh_core.errors import StructuralError
from schema_mesh_core.inheritance import ancestors, descendants, mixin_users, resolve_slots
from schema_mesh_core.model import ClassEntity, SchemaModel, SlotEntity


class TestResolveSlots:
    """Test effective slot sets."""

    @pytest.mark.unit
    def test_precedence_order(self, mixin_schema):
        """Test own attributes, then mixins in order, then is_a."""
        resolved = resolve_slots(mixin_schema, "Item")

        assert list(resolved) == ["tag", "note", "name", "id"]
        assert {name: r.owner for name, r in resolved.items()} == {
            "tag": "Item",
            "note": "Named",
            "name": "Named",
            "id": "Base",
        }

    @pytest.mark.unit
    def test_attribute_wins_over_mixin(self, mixin_schema):
        """Test that the class's own attribute shadows a mixin's slot."""
        tag = resolve_slots(mixin_schema, "Item")["tag"]

        assert tag.local
        assert tag.slot.range == "string"

    @pytest.mark.unit
    def test_first_mixin_wins(self, mixin_schema):
        """Test that the first mixin wins conflicts with later mixins."""
        note = resolve_slots(mixin_schema, "Item")["note"]

        assert note.owner == "Named"
        assert not note.local

    @pytest.mark.unit
    def test_mixin_wins_over_parent(self, mixin_schema):
        """Test that a mixin's slot wins over the is_a parent's."""
        assert resolve_slots(mixin_schema, "Item")["name"].owner == "Named"

    @pytest.mark.unit
    def test_inherited_through_chain(self, yaml_schema):
        """Test that Dog inherits Animal's slots through Mammal."""
        resolved = resolve_slots(yaml_schema, "Dog")

        assert list(resolved) == ["hasOwner", "size", "hasName", "age"]
        assert resolved["hasName"].owner == "Animal"

    @pytest.mark.unit
    def test_resolution_does_not_modify_model(self, yaml_schema):
        """Test that resolution is computed, not stored."""
        before = yaml_schema.model_dump()

        resolve_slots(yaml_schema, "Dog")

        assert yaml_schema.model_dump() == before
        assert yaml_schema.classes["Dog"].slots == ["hasOwner", "size"]

    @pytest.mark.unit
    def test_cycle_detected(self):
        """Test that a cycle on the visitation path raises."""
        schema = SchemaModel(
            name="cyclic",
            classes={
                "A": ClassEntity(name="A", mixins=["B"]),
                "B": ClassEntity(name="B", is_a="A"),
            },
        )

        with pytest.raises(StructuralError) as exc_info:
            resolve_slots(schema, "A")

        assert exc_info.value.details["cycle"] == "A -> B -> A"

    @pytest.mark.unit
    def test_shared_ancestor_is_not_a_cycle(self):
        """Test that reaching one ancestor along two paths is fine."""
        schema = SchemaModel(
            name="diamond",
            slots={"id": SlotEntity(name="id")},
            classes={
                "Top": ClassEntity(name="Top", slots=["id"]),
                "Left": ClassEntity(name="Left", is_a="Top"),
                "Right": ClassEntity(name="Right", is_a="Top"),
                "Bottom": ClassEntity(name="Bottom", is_a="Left", mixins=["Right"]),
            },
        )

        resolved = resolve_slots(schema, "Bottom")

        assert list(resolved) == ["id"]
        assert resolved["id"].owner == "Top"

    @pytest.mark.unit
    def test_unknown_class(self, yaml_schema):
        """Test that resolving an unknown class raises."""
        with pytest.raises(StructuralError, match="Unknown class 'Unicorn'"):
            resolve_slots(yaml_schema, "Unicorn")


class TestHierarchyQueries:
    """Test hierarchy helpers."""

    @pytest.mark.unit
    def test_ancestors_nearest_first(self, yaml_schema):
        """Test that ancestors follow is_a, nearest first."""
        assert ancestors(yaml_schema, "Dog") == ["Mammal", "Animal"]
        assert ancestors(yaml_schema, "Animal") == []

    @pytest.mark.unit
    def test_descendants(self, yaml_schema):
        """Test direct is_a children in schema order."""
        assert descendants(yaml_schema, "Mammal") == ["Dog", "Cat"]

    @pytest.mark.unit
    def test_mixin_users(self, mixin_schema):
        """Test classes listing a mixin."""
        assert mixin_users(mixin_schema, "Tagged") == ["Item"]
        assert mixin_users(mixin_schema, "Base") == []
