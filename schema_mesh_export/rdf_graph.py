"""Shared model-to-triples mapping used by every RDF-family writer.

:func:`build_rdf_graph` is deterministic: list cells get blank-node
identifiers derived from their owner, so two builds of the same model
serialize identically. The graph is transient and discarded after
serialization.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Dict, List, Optional
from urllib.parse import quote

from rdflib import BNode, Graph, Literal, URIRef
from rdflib.namespace import DCTERMS, FOAF, OWL, RDF, RDFS, XSD
from rdflib.term import Node

from schema_mesh_core.annotations import (
    CHARACTERISTICS,
    DATATYPE,
    DOMAIN_FORM,
    OWL_PROPERTY_TYPE,
    RANGE_EXPRESSION,
    display_label,
    get_system,
    preserved_individuals,
    unwrap_iri,
)
from schema_mesh_core.config import WriterOptions
from schema_mesh_core.datatypes import datatype_for_scalar
from schema_mesh_core.errors import WriteError
from schema_mesh_core.model import ClassEntity, SchemaModel, SlotEntity
from schema_mesh_core.vocab import (
    ABSTRACT,
    IDENTIFIER,
    MIXIN,
    MULTIVALUED,
    PATTERN,
    PRIMARY_PARENT,
    REQUIRED,
    SM,
    TYPEOF,
    entity_iri,
)

logger = logging.getLogger(__name__)

TRUE = Literal(True)

CONTRIBUTOR_PREDICATES = {"author": DCTERMS.creator, "creator": DCTERMS.creator}

PROPERTY_TYPES = frozenset(
    {
        "ObjectProperty",
        "DatatypeProperty",
        "AnnotationProperty",
        "FunctionalProperty",
        "InverseFunctionalProperty",
        "SymmetricProperty",
        "AsymmetricProperty",
        "TransitiveProperty",
        "ReflexiveProperty",
        "IrreflexiveProperty",
    }
)


def expand_curie(schema: SchemaModel, value: str) -> Optional[URIRef]:
    """Expand ``prefix:local`` against the schema prefixes; absolute IRIs pass through."""
    if "://" in value or value.startswith("urn:"):
        return URIRef(value)
    prefix, sep, local = value.partition(":")
    if sep and prefix in schema.prefixes:
        return URIRef(schema.prefixes[prefix] + local)
    return None


def _stable_bnode(*parts: str) -> BNode:
    digest = hashlib.sha1("|".join(parts).encode("utf-8")).hexdigest()[:20]
    return BNode(f"sm{digest}")


def add_list(graph: Graph, items: List[Node], *seed: str) -> Node:
    """Add an RDF list with deterministic cell identifiers and return its head."""
    if not items:
        return RDF.nil
    cells = [_stable_bnode(*seed, str(i)) for i in range(len(items))]
    for i, (cell, item) in enumerate(zip(cells, items)):
        graph.add((cell, RDF.first, item))
        graph.add((cell, RDF.rest, cells[i + 1] if i + 1 < len(cells) else RDF.nil))
    return cells[0]


class _IriMinter:
    """Resolves model names to IRIs for one build."""

    def __init__(self, schema: SchemaModel, base: str) -> None:
        self.schema = schema
        self.base = base

    def mint(self, declared: Optional[str], name: str) -> URIRef:
        if declared:
            iri = expand_curie(self.schema, declared)
            if iri is not None and not str(iri).startswith(str(XSD)):
                return iri
        return entity_iri(self.base, name)

    def cls(self, name: str) -> URIRef:
        return self.mint(self.schema.classes[name].class_uri, name)

    def slot(self, name: str) -> URIRef:
        return self.mint(self.schema.slots[name].slot_uri, name)

    def attribute(self, owner: str, slot: SlotEntity) -> URIRef:
        return self.mint(slot.slot_uri, f"{owner}.{slot.name}")

    def enum(self, name: str) -> URIRef:
        return self.mint(self.schema.enums[name].enum_uri, name)

    def type(self, name: str) -> URIRef:
        return self.mint(self.schema.types[name].uri, name)

    def range(self, slot: SlotEntity) -> URIRef:
        datatype = get_system(slot, DATATYPE)
        if datatype:
            return URIRef(datatype)
        target = self.schema.effective_range(slot)
        if target in self.schema.classes:
            return self.cls(target)
        if target in self.schema.enums:
            return self.enum(target)
        if target in self.schema.types:
            return self.type(target)
        return datatype_for_scalar(target)


def build_rdf_graph(schema: SchemaModel, options: Optional[WriterOptions] = None) -> Graph:
    """Map a canonical model to an OWL triple collection.

    Args:
        schema: A validated model
        options: Writer options; ``base_uri`` is used when the schema has no id

    Returns:
        A new rdflib Graph
    """
    options = options or WriterOptions()
    base = schema.id or options.base_uri or schema.schema_iri()
    iris = _IriMinter(schema, base)

    graph = Graph(bind_namespaces="core")
    graph.bind("dcterms", DCTERMS)
    graph.bind("sm", SM)
    for prefix, namespace in schema.prefixes.items():
        graph.bind(prefix, namespace, override=True)
    if schema.default_prefix and schema.default_prefix in schema.prefixes:
        graph.bind("", schema.prefixes[schema.default_prefix], override=True)

    _add_header(graph, schema, base)
    for name, cls in schema.classes.items():
        _add_class(graph, schema, iris, name, cls)
    owners = _slot_owners(schema)
    for name, slot in schema.slots.items():
        _add_slot(graph, schema, iris, iris.slot(name), slot, owners.get(name, []))
    for class_name, cls in schema.classes.items():
        for attr in cls.attributes.values():
            _add_slot(graph, schema, iris, iris.attribute(class_name, attr), attr, [class_name], scope=cls)
    for name, enum in schema.enums.items():
        iri = iris.enum(name)
        graph.add((iri, RDF.type, OWL.Class))
        _add_label(graph, iri, enum)
        members = []
        for pv in enum.permissible_values:
            member = URIRef(pv.meaning) if pv.meaning else entity_iri(base, f"{name}.{quote(pv.text, safe='')}")
            graph.add((member, RDFS.label, Literal(pv.text)))
            if pv.description:
                graph.add((member, RDFS.comment, Literal(pv.description)))
            members.append(member)
        graph.add((iri, OWL.oneOf, add_list(graph, members, str(iri), "oneOf")))
    for name, type_ in schema.types.items():
        iri = iris.type(name)
        graph.add((iri, RDF.type, RDFS.Datatype))
        _add_label(graph, iri, type_)
        datatype = get_system(type_, DATATYPE)
        graph.add((iri, OWL.equivalentClass, URIRef(datatype) if datatype else datatype_for_scalar(type_.base.value)))
        if type_.typeof:
            graph.add((iri, TYPEOF, iris.type(type_.typeof)))
        if type_.pattern:
            graph.add((iri, PATTERN, Literal(type_.pattern)))
    if options.include_individuals:
        _add_individuals(graph, schema, iris)

    logger.debug("Built %d triples for schema %s", len(graph), schema.name)
    return graph


def _add_label(graph: Graph, iri: URIRef, entity) -> None:
    graph.add((iri, RDFS.label, Literal(display_label(entity))))
    if entity.description:
        graph.add((iri, RDFS.comment, Literal(entity.description)))


def _add_header(graph: Graph, schema: SchemaModel, base: str) -> None:
    ontology = URIRef(base)
    graph.add((ontology, RDF.type, OWL.Ontology))
    if schema.title:
        graph.add((ontology, RDFS.label, Literal(schema.title)))
    if schema.description:
        graph.add((ontology, RDFS.comment, Literal(schema.description)))
    if schema.version:
        graph.add((ontology, OWL.versionInfo, Literal(schema.version)))
        graph.add((ontology, OWL.versionIRI, URIRef(f"{base.rstrip('/#')}/{schema.version}")))
    if schema.license:
        license_iri = expand_curie(schema, schema.license)
        graph.add((ontology, DCTERMS.license, license_iri if license_iri is not None else Literal(schema.license)))
    for contributor in schema.contributors:
        predicate = CONTRIBUTOR_PREDICATES.get(contributor.role or "author", DCTERMS.contributor)
        if contributor.orcid:
            person = URIRef(contributor.orcid)
            graph.add((ontology, predicate, person))
            graph.add((person, FOAF.name, Literal(contributor.name)))
        else:
            graph.add((ontology, predicate, Literal(contributor.name)))
    if schema.created:
        graph.add((ontology, DCTERMS.created, Literal(schema.created)))
    if schema.modified:
        graph.add((ontology, DCTERMS.modified, Literal(schema.modified)))
    for imported in schema.imports:
        graph.add((ontology, OWL.imports, expand_curie(schema, imported) or URIRef(imported)))


def _add_class(graph: Graph, schema: SchemaModel, iris: _IriMinter, name: str, cls: ClassEntity) -> None:
    iri = iris.cls(name)
    graph.add((iri, RDF.type, OWL.Class))
    _add_label(graph, iri, cls)
    if cls.is_a:
        graph.add((iri, RDFS.subClassOf, iris.cls(cls.is_a)))
    for mixin in cls.mixins:
        graph.add((iri, RDFS.subClassOf, iris.cls(mixin)))
    if cls.is_a and cls.mixins:
        graph.add((iri, PRIMARY_PARENT, iris.cls(cls.is_a)))
    for other in cls.disjoint_with:
        graph.add((iri, OWL.disjointWith, iris.cls(other)))
    if cls.abstract:
        graph.add((iri, ABSTRACT, TRUE))
    if cls.mixin:
        graph.add((iri, MIXIN, TRUE))


def _slot_owners(schema: SchemaModel) -> Dict[str, List[str]]:
    """Classes owning each schema-level slot, declared domain first."""
    owners: Dict[str, List[str]] = {}
    for name, slot in schema.slots.items():
        if slot.domain:
            owners.setdefault(name, []).append(slot.domain)
    for class_name, cls in schema.classes.items():
        for slot_name in cls.slots:
            current = owners.setdefault(slot_name, [])
            if class_name not in current:
                current.append(class_name)
    return owners


def _add_slot(
    graph: Graph,
    schema: SchemaModel,
    iris: _IriMinter,
    iri: URIRef,
    slot: SlotEntity,
    owners: List[str],
    scope: Optional[ClassEntity] = None,
) -> None:
    target = schema.effective_range(slot)
    kind = get_system(slot, OWL_PROPERTY_TYPE)
    if kind is None:
        kind = "ObjectProperty" if target in schema.classes or target in schema.enums else "DatatypeProperty"
    graph.add((iri, RDF.type, _property_type(kind, slot)))
    characteristics = get_system(slot, CHARACTERISTICS)
    if characteristics:
        for characteristic in characteristics.split(","):
            graph.add((iri, RDF.type, _property_type(characteristic.strip(), slot)))
    _add_label(graph, iri, slot)

    if len(owners) == 1 or get_system(slot, DOMAIN_FORM) == "intersection":
        for owner in owners:
            graph.add((iri, RDFS.domain, iris.cls(owner)))
    elif owners:
        union = _stable_bnode(str(iri), "domain")
        graph.add((union, RDF.type, OWL.Class))
        graph.add((union, OWL.unionOf, add_list(graph, [iris.cls(o) for o in owners], str(iri), "domain")))
        graph.add((iri, RDFS.domain, union))

    if get_system(slot, RANGE_EXPRESSION) is None:
        graph.add((iri, RDFS.range, iris.range(slot)))

    if slot.inverse:
        if scope is not None and slot.inverse in scope.attributes:
            graph.add((iri, OWL.inverseOf, iris.attribute(scope.name, scope.attributes[slot.inverse])))
        else:
            graph.add((iri, OWL.inverseOf, iris.slot(slot.inverse)))
    if slot.required:
        graph.add((iri, REQUIRED, TRUE))
    if slot.multivalued:
        graph.add((iri, MULTIVALUED, TRUE))
    if slot.identifier:
        graph.add((iri, IDENTIFIER, TRUE))
    if slot.pattern:
        graph.add((iri, PATTERN, Literal(slot.pattern)))


def _property_type(local: str, slot: SlotEntity) -> URIRef:
    if local not in PROPERTY_TYPES:
        raise WriteError(
            f"Slot '{slot.name}' carries unknown OWL property type '{local}'",
            target_format="rdf",
            entity=slot.name,
        )
    return OWL[local]


def _add_individuals(graph: Graph, schema: SchemaModel, iris: _IriMinter) -> None:
    """Re-emit named individuals kept as reserved schema annotations."""
    for individual in preserved_individuals(schema):
        iri = URIRef(individual.iri) if individual.iri else entity_iri(iris.base, individual.name)
        graph.add((iri, RDF.type, OWL.NamedIndividual))
        for type_name in individual.types:
            external = unwrap_iri(type_name)
            if external:
                graph.add((iri, RDF.type, URIRef(external)))
            elif type_name in schema.classes:
                graph.add((iri, RDF.type, iris.cls(type_name)))
            elif type_name in schema.enums:
                graph.add((iri, RDF.type, iris.enum(type_name)))
        if individual.label:
            graph.add((iri, RDFS.label, Literal(individual.label)))
        if individual.comment:
            graph.add((iri, RDFS.comment, Literal(individual.comment)))
        for prop, value in individual.values:
            declared = unwrap_iri(prop)
            if declared:
                predicate = URIRef(declared)
            elif prop in schema.slots:
                predicate = iris.slot(prop)
            else:
                predicate = entity_iri(iris.base, prop)
            target = unwrap_iri(value)
            graph.add((iri, predicate, URIRef(target) if target else Literal(value)))


__all__ = ["build_rdf_graph", "add_list", "expand_curie"]
