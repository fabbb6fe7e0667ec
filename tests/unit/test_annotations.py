"""
Unit tests for the namespaced annotation mechanism.

Tests cover:
- Lookup and copy-on-write updates
- Merging annotation sets
- Display labels
- Decoding preserved individuals
"""

import pytest

from schema_mesh_core.annotations import (
    RESERVED_NAMESPACE,
    decode_values,
    display_label,
    encode_values,
    get_annotation,
    get_system,
    is_reserved_key,
    iter_annotations,
    merge_annotations,
    preserved_individuals,
    unwrap_iri,
    with_annotation,
)
from schema_mesh_core.model import ClassEntity, SchemaModel


class TestAnnotationAccess:
    """Test reading and writing annotations."""

    @pytest.mark.unit
    def test_with_annotation_returns_copy(self):
        """Test that adding an annotation leaves the original untouched."""
        cls = ClassEntity(name="Dog")

        annotated = with_annotation(cls, "docs", "icon", "dog.svg")

        assert get_annotation(annotated, "docs", "icon") == "dog.svg"
        assert cls.annotations == {}

    @pytest.mark.unit
    def test_get_annotation_default(self):
        """Test the default for a missing key."""
        cls = ClassEntity(name="Dog")

        assert get_annotation(cls, "docs", "icon") is None
        assert get_annotation(cls, "docs", "icon", "none.svg") == "none.svg"

    @pytest.mark.unit
    def test_get_system_reads_reserved_namespace(self):
        """Test that get_system reads the reserved namespace only."""
        cls = ClassEntity(name="Dog", annotations={RESERVED_NAMESPACE: {"label": "Hound"}, "docs": {"label": "x"}})

        assert get_system(cls, "label") == "Hound"

    @pytest.mark.unit
    def test_merge_prefers_extra(self):
        """Test that merged values from the second set win."""
        merged = merge_annotations({"a": {"k": "1", "j": "2"}}, {"a": {"k": "3"}, "b": {"x": "y"}})

        assert merged == {"a": {"k": "3", "j": "2"}, "b": {"x": "y"}}

    @pytest.mark.unit
    def test_iter_annotations_sorted(self):
        """Test that iteration is sorted by namespace then key."""
        cls = ClassEntity(name="Dog", annotations={"z": {"b": "1", "a": "2"}, "m": {"k": "3"}})

        assert [key for key, _ in iter_annotations(cls)] == [("m", "k"), ("z", "a"), ("z", "b")]

    @pytest.mark.unit
    def test_reserved_keys(self):
        """Test the reserved key predicate."""
        assert is_reserved_key("restrictions")
        assert is_reserved_key("individual:rex:_iri")
        assert not is_reserved_key("colour")


class TestDisplayLabel:
    """Test label fallback."""

    @pytest.mark.unit
    def test_label_annotation_used(self):
        """Test that a preserved label is displayed."""
        cls = ClassEntity(name="Dog", annotations={RESERVED_NAMESPACE: {"label": "Domestic dog"}})

        assert display_label(cls) == "Domestic dog"

    @pytest.mark.unit
    def test_name_used_without_label(self):
        """Test that the name is displayed when no label is kept."""
        assert display_label(ClassEntity(name="Dog")) == "Dog"


class TestPreservedIndividuals:
    """Test decoding individuals from schema annotations."""

    @pytest.mark.unit
    def test_decode(self):
        """Test that types, metadata and values are decoded."""
        schema = SchemaModel(
            name="pets",
            annotations={
                RESERVED_NAMESPACE: {
                    "individuals": "rex,tom",
                    "individual:rex": "Dog,<http://example.org/other#Pet>",
                    "individual:rex:_iri": "http://example.org/pets#rex",
                    "individual:rex:_label": "Rex",
                    "individual:rex:hasName": '["Rex", "Rexy"]',
                    "individual:rex:<http://xmlns.com/foaf/0.1/name>": '["Rex"]',
                    "individual:rex:hasOwner": "<http://example.org/pets#alice>",
                    "individual:tom": "Cat",
                }
            },
        )

        rex, tom = preserved_individuals(schema)

        assert rex.name == "rex"
        assert rex.types == ("Dog", "<http://example.org/other#Pet>")
        assert rex.iri == "http://example.org/pets#rex"
        assert rex.label == "Rex"
        assert rex.comment is None
        assert rex.values == (
            ("<http://xmlns.com/foaf/0.1/name>", "Rex"),
            ("hasName", "Rex"),
            ("hasName", "Rexy"),
            ("hasOwner", "<http://example.org/pets#alice>"),
        )
        assert tom.types == ("Cat",)
        assert tom.values == ()

    @pytest.mark.unit
    def test_no_individuals(self):
        """Test that a schema without individuals decodes to nothing."""
        assert preserved_individuals(SchemaModel(name="pets")) == []

    @pytest.mark.unit
    def test_multiline_value_stays_whole(self):
        """Test that a value containing newlines decodes as one value."""
        encoded = encode_values(["line1\nline2", "Rex"])

        assert decode_values(encoded) == ["line1\nline2", "Rex"]

    @pytest.mark.unit
    def test_plain_text_is_one_value(self):
        """Test that hand-written text that is not a JSON list is kept whole."""
        assert decode_values("Rex") == ["Rex"]
        assert decode_values("42") == ["42"]
        assert decode_values("[unclosed") == ["[unclosed"]

    @pytest.mark.unit
    def test_unwrap_iri(self):
        """Test IRI unwrapping of bracketed values."""
        assert unwrap_iri("<http://example.org/x>") == "http://example.org/x"
        assert unwrap_iri("plain") is None
