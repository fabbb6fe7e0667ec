"""
Pytest configuration and shared fixtures for schema-mesh tests.

This module provides fixtures for:
- Sample schemas in Turtle and native YAML describing the same domain
- Parsed canonical models
- A populated format registry
- RDF graph comparison utilities
"""

from pathlib import Path

import pytest
import structlog
from rdflib import Graph

from schema_mesh_core.model import ClassEntity, SchemaModel, SlotEntity
from schema_mesh_ingest import OWLReader, YAMLSchemaReader
from schema_mesh_orchestrator.registry import FormatRegistry


# ============================================================================
# Sample Turtle Data Fixtures
# ============================================================================

ANIMALS_TTL = '''@prefix : <http://example.org/animals#> .
@prefix owl: <http://www.w3.org/2002/07/owl#> .
@prefix rdf: <http://www.w3.org/1999/02/22-rdf-syntax-ns#> .
@prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .
@prefix xsd: <http://www.w3.org/2001/XMLSchema#> .

<http://example.org/animals> a owl:Ontology ;
    rdfs:label "Animals" ;
    rdfs:comment "A small animal ontology" ;
    owl:versionInfo "1.0" .

:Animal a owl:Class ;
    rdfs:comment "A living organism" .

:Mammal a owl:Class ;
    rdfs:subClassOf :Animal .

:Dog a owl:Class ;
    rdfs:subClassOf :Mammal ;
    owl:disjointWith :Cat .

:Cat a owl:Class ;
    rdfs:subClassOf :Mammal .

:Person a owl:Class .

:Size a owl:Class ;
    owl:oneOf ( :Small :Large ) .

:hasName a owl:DatatypeProperty ;
    rdfs:domain :Animal ;
    rdfs:range xsd:string .

:age a owl:DatatypeProperty ;
    rdfs:domain :Animal ;
    rdfs:range xsd:integer .

:hasOwner a owl:ObjectProperty ;
    rdfs:domain :Dog ;
    rdfs:range :Person .

:owns a owl:ObjectProperty ;
    rdfs:domain :Person ;
    rdfs:range :Dog ;
    owl:inverseOf :hasOwner .

:size a owl:ObjectProperty ;
    rdfs:domain :Dog ;
    rdfs:range :Size .
'''

ANIMALS_YAML = '''id: http://example.org/animals
name: animals
title: Animals
description: A small animal ontology
version: "1.0"
prefixes:
  animals: http://example.org/animals#
default_prefix: animals
classes:
  Animal:
    description: A living organism
    slots:
      - hasName
      - age
  Mammal:
    is_a: Animal
  Dog:
    is_a: Mammal
    slots:
      - hasOwner
      - size
    disjoint_with:
      - Cat
  Cat:
    is_a: Mammal
  Person:
    slots:
      - owns
slots:
  hasName:
    domain: Animal
    range: string
  age:
    domain: Animal
    range: integer
  hasOwner:
    domain: Dog
    range: Person
    inverse: owns
  owns:
    domain: Person
    range: Dog
    inverse: hasOwner
  size:
    domain: Dog
    range: Size
enums:
  Size:
    permissible_values:
      Small:
        meaning: http://example.org/animals#Small
      Large:
        meaning: http://example.org/animals#Large
'''


@pytest.fixture
def animals_ttl() -> str:
    """Provide a small OWL ontology serialized as Turtle."""
    return ANIMALS_TTL


@pytest.fixture
def animals_yaml() -> str:
    """Provide the native YAML schema describing the same domain as animals_ttl."""
    return ANIMALS_YAML


@pytest.fixture
def animals_ttl_file(tmp_path, animals_ttl) -> Path:
    """Write the Turtle sample to a temporary file."""
    path = tmp_path / "animals.ttl"
    path.write_text(animals_ttl, encoding="utf-8")
    return path


@pytest.fixture
def animals_yaml_file(tmp_path, animals_yaml) -> Path:
    """Write the YAML sample to a temporary file."""
    path = tmp_path / "animals.yaml"
    path.write_text(animals_yaml, encoding="utf-8")
    return path


# ============================================================================
# Model Fixtures
# ============================================================================

@pytest.fixture
def owl_schema(animals_ttl) -> SchemaModel:
    """Canonical model read from the Turtle sample."""
    return OWLReader().read(animals_ttl).schema


@pytest.fixture
def yaml_schema(animals_yaml) -> SchemaModel:
    """Canonical model read from the YAML sample."""
    return YAMLSchemaReader().read(animals_yaml).schema


@pytest.fixture
def mixin_schema() -> SchemaModel:
    """Model exercising slot precedence across attributes, mixins and is_a."""
    return SchemaModel(
        name="mixins",
        slots={
            "id": SlotEntity(name="id", identifier=True),
            "name": SlotEntity(name="name", description="from parent"),
            "note": SlotEntity(name="note", description="from first mixin"),
            "tag": SlotEntity(name="tag", range="integer"),
        },
        classes={
            "Base": ClassEntity(name="Base", slots=["id", "name"]),
            "Named": ClassEntity(name="Named", mixin=True, slots=["note", "name"]),
            "Tagged": ClassEntity(name="Tagged", mixin=True, slots=["note", "tag"]),
            "Item": ClassEntity(
                name="Item",
                is_a="Base",
                mixins=["Named", "Tagged"],
                attributes={"tag": SlotEntity(name="tag", range="string")},
            ),
        },
    )


# ============================================================================
# Registry and Utility Fixtures
# ============================================================================

@pytest.fixture
def registry() -> FormatRegistry:
    """Provide a registry populated with every built-in reader and writer."""
    return FormatRegistry.with_defaults()


@pytest.fixture
def parse_rdf():
    """Provide a helper that parses serialized RDF into a graph."""
    def parse(data: bytes, fmt: str) -> Graph:
        graph = Graph()
        graph.parse(data=data.decode("utf-8"), format=fmt)
        return graph

    return parse


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog configuration a test installed through the CLI."""
    yield
    structlog.reset_defaults()


# ============================================================================
# Pytest Configuration Hooks
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: fast, isolated tests")
    config.addinivalue_line("markers", "integration: tests crossing reader, model and writer")
    config.addinivalue_line("markers", "property: hypothesis property-based tests")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        # Auto-mark tests based on path
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        if "property" in item.nodeid.lower() or "hypothesis" in item.nodeid.lower():
            item.add_marker(pytest.mark.property)
