"""
Unit tests for option models, config loading and the error hierarchy.

Tests cover:
- Option defaults and validation
- Loading TranslationConfig from YAML
- Error string rendering and structured dictionaries
- Vocabulary helpers
"""

import pytest
from pydantic import ValidationError

from schema_mesh_core.config import GraphOptions, TranslationConfig, WriterOptions, load_config
from schema_mesh_core.errors import (
    ParseError,
    SchemaMeshError,
    StructuralError,
    TranslationWarning,
    UnsupportedFormat,
)
from schema_mesh_core.vocab import entity_iri, local_name_of


class TestOptions:
    """Test option models."""

    @pytest.mark.unit
    def test_defaults(self):
        """Test default option values."""
        config = TranslationConfig()

        assert config.reader.preserve_unknown_predicates
        assert config.writer.include_individuals
        assert config.writer.graph.include_slots
        assert not config.fail_on_warnings

    @pytest.mark.unit
    def test_relative_base_uri_rejected(self):
        """Test that a writer base IRI must be absolute."""
        with pytest.raises(ValidationError):
            WriterOptions(base_uri="animals")

    @pytest.mark.unit
    def test_unknown_option_rejected(self):
        """Test that misspelled options fail."""
        with pytest.raises(ValidationError):
            TranslationConfig.model_validate({"fail_on_warning": True})

    @pytest.mark.unit
    def test_classes_only(self):
        """Test the classes-only graph preset."""
        options = GraphOptions.classes_only()

        assert not options.include_slots
        assert not options.include_enums
        assert not options.include_types


class TestLoadConfig:
    """Test YAML config loading."""

    @pytest.mark.unit
    def test_load(self, tmp_path):
        """Test loading nested options."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "reader:\n"
            "  base_uri: http://example.org/base\n"
            "writer:\n"
            "  include_individuals: false\n"
            "  graph:\n"
            "    include_enums: false\n"
            "fail_on_warnings: true\n"
        )

        config = load_config(path)

        assert config.reader.base_uri == "http://example.org/base"
        assert not config.writer.include_individuals
        assert not config.writer.graph.include_enums
        assert config.fail_on_warnings

    @pytest.mark.unit
    def test_empty_file_gives_defaults(self, tmp_path):
        """Test that an empty config file yields defaults."""
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_config(path) == TranslationConfig()


class TestErrors:
    """Test the error hierarchy."""

    @pytest.mark.unit
    def test_str_includes_details(self):
        """Test that details are rendered after the message."""
        error = ParseError("Invalid Turtle", source_format="ttl", line=3)

        assert str(error) == "Invalid Turtle (format=ttl, line=3)"
        assert error.line == 3

    @pytest.mark.unit
    def test_to_dict(self):
        """Test the structured logging form."""
        error = StructuralError("Cycle", entity="A", kind="class", cycle="A -> A")

        assert error.to_dict() == {
            "error_type": "StructuralError",
            "message": "Cycle",
            "details": {"kind": "class", "entity": "A", "cycle": "A -> A"},
        }

    @pytest.mark.unit
    def test_unsupported_format_lists_available(self):
        """Test that the available formats are reported."""
        error = UnsupportedFormat("xlsx", "reader", ["ttl", "yaml"])

        assert isinstance(error, SchemaMeshError)
        assert error.identifier == "xlsx"
        assert "available=ttl, yaml" in str(error)

    @pytest.mark.unit
    def test_warning_to_dict(self):
        """Test the warning record's dictionary form."""
        warning = TranslationWarning("multiple_ontology_headers", "Two headers", {"used": "x"})

        assert warning.to_dict() == {
            "code": "multiple_ontology_headers",
            "message": "Two headers",
            "details": {"used": "x"},
        }


class TestVocab:
    """Test IRI helpers."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "iri,expected",
        [
            ("http://example.org/animals#Dog", "Dog"),
            ("http://example.org/animals/Dog", "Dog"),
            ("http://example.org/animals/", "animals"),
            ("urn:isbn:123", "123"),
            ("plain", "plain"),
        ],
    )
    def test_local_name_of(self, iri, expected):
        """Test local names from fragments and path segments."""
        assert local_name_of(iri) == expected

    @pytest.mark.unit
    def test_entity_iri(self):
        """Test minting entity IRIs against a base."""
        assert str(entity_iri("http://example.org/animals", "Dog")) == "http://example.org/animals#Dog"
        assert str(entity_iri("http://example.org/animals/", "Dog")) == "http://example.org/animals/Dog"
