"""OWL (Turtle) to canonical model reader.

Reading happens in two passes over the parsed triples:

1. Group every named subject's statements into an :class:`OntologyEntity`
   and classify it (ontology header, class, enumeration, datatype, property
   or individual).
2. Map each classified entity into the canonical model.

Axioms with no canonical counterpart (restrictions, unions, complements,
cardinalities) are rendered to Manchester-like text and kept as reserved
annotations. Named individuals are kept as reserved annotations on the
schema. Predicates the mapping does not recognise are kept under the
``owl`` annotation namespace, keyed by their compact name.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from rdflib import BNode, Graph, Literal, URIRef
from rdflib.collection import Collection
from rdflib.namespace import DC, DCTERMS, FOAF, OWL, RDF, RDFS, SKOS, XSD
from rdflib.plugins.parsers.notation3 import BadSyntax
from rdflib.term import Node

from schema_mesh_core.annotations import (
    CHARACTERISTICS,
    DATATYPE,
    DOMAIN_FORM,
    EQUIVALENT_CLASSES,
    INDIVIDUAL_PREFIX,
    INDIVIDUALS,
    LABEL,
    OWL_PROPERTY_TYPE,
    RANGE_EXPRESSION,
    RESTRICTIONS,
    SOURCE_FORMAT,
    AnnotationDict,
    add_annotation,
    add_system,
    encode_values,
)
from schema_mesh_core.config import ReaderOptions
from schema_mesh_core.datatypes import ScalarKind, datatype_for_scalar, scalar_for_datatype
from schema_mesh_core.errors import MappingError, ParseError, StructuralError, TranslationWarning
from schema_mesh_core.model import (
    ClassEntity,
    Contributor,
    EnumEntity,
    PermissibleValue,
    SchemaModel,
    SlotEntity,
    TypeEntity,
)
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
    local_name_of,
)

from .reader_base import ReaderInput, ReadResult, SchemaReader

logger = logging.getLogger(__name__)

OWL_NAMESPACE = "owl"
MAX_EXPRESSION_DEPTH = 32

PROPERTY_KINDS = {
    OWL.ObjectProperty: "ObjectProperty",
    OWL.DatatypeProperty: "DatatypeProperty",
}

CHARACTERISTIC_TYPES = (
    OWL.FunctionalProperty,
    OWL.InverseFunctionalProperty,
    OWL.SymmetricProperty,
    OWL.AsymmetricProperty,
    OWL.TransitiveProperty,
    OWL.ReflexiveProperty,
    OWL.IrreflexiveProperty,
)

PROPERTY_MARKERS = frozenset(set(PROPERTY_KINDS) | set(CHARACTERISTIC_TYPES) | {RDF.Property})

# Ranges that only say "any resource".
TOP_RANGES = (OWL.Thing, RDFS.Resource)

# Namespaces whose terms are vocabulary, never schema entities.
BUILTIN_NAMESPACES = tuple(str(ns) for ns in (OWL, RDF, RDFS, XSD, SM))

# Used to compact predicate IRIs the document declares no prefix for.
WELL_KNOWN_PREFIXES = {
    "owl": str(OWL),
    "rdf": str(RDF),
    "rdfs": str(RDFS),
    "xsd": str(XSD),
    "skos": str(SKOS),
    "dcterms": str(DCTERMS),
    "dc": str(DC),
    "foaf": str(FOAF),
    "sm": str(SM),
}

HEADER_PREDICATES = frozenset(
    {
        RDF.type,
        RDFS.label,
        RDFS.comment,
        DCTERMS.title,
        DCTERMS.description,
        OWL.versionInfo,
        OWL.versionIRI,
        OWL.imports,
        DCTERMS.license,
        DCTERMS.creator,
        DCTERMS.contributor,
        DC.creator,
        DC.contributor,
        DCTERMS.created,
        DCTERMS.modified,
    }
)
CLASS_PREDICATES = frozenset(
    {
        RDF.type,
        RDFS.label,
        RDFS.comment,
        RDFS.subClassOf,
        OWL.equivalentClass,
        OWL.disjointWith,
        OWL.oneOf,
        PRIMARY_PARENT,
        ABSTRACT,
        MIXIN,
    }
)
PROPERTY_PREDICATES = frozenset(
    {
        RDF.type,
        RDFS.label,
        RDFS.comment,
        RDFS.domain,
        RDFS.range,
        OWL.inverseOf,
        REQUIRED,
        MULTIVALUED,
        IDENTIFIER,
        PATTERN,
    }
)
DATATYPE_PREDICATES = frozenset({RDF.type, RDFS.label, RDFS.comment, OWL.equivalentClass, TYPEOF, PATTERN})


@dataclass
class OntologyEntity:
    """Statements about one named subject, grouped by predicate in input order."""

    iri: URIRef
    statements: Dict[URIRef, List[Node]] = field(default_factory=dict)
    kind: Optional[str] = None

    def values(self, predicate: URIRef) -> List[Node]:
        return self.statements.get(predicate, [])

    def first(self, predicate: URIRef) -> Optional[Node]:
        values = self.values(predicate)
        return values[0] if values else None

    @property
    def types(self) -> List[Node]:
        return self.values(RDF.type)


def group_by_subject(graph: Graph) -> Dict[URIRef, OntologyEntity]:
    """First pass: collect the statements of every named subject."""
    entities: Dict[URIRef, OntologyEntity] = {}
    for subject, predicate, obj in graph:
        if not isinstance(subject, URIRef):
            continue
        entity = entities.get(subject)
        if entity is None:
            entity = entities[subject] = OntologyEntity(subject)
        entity.statements.setdefault(predicate, []).append(obj)
    return entities


def pick_text(values: Iterable[Node]) -> Optional[str]:
    """Choose one literal: untagged first, then English, then the first seen."""
    literals = [v for v in values if isinstance(v, Literal)]
    if not literals:
        return None
    for preferred in (None, "en"):
        for literal in literals:
            if literal.language == preferred:
                return str(literal)
    return str(literals[0])


def is_true(node: Optional[Node]) -> bool:
    return node is not None and str(node).strip().lower() in ("true", "1")


def _is_builtin(iri: URIRef) -> bool:
    return str(iri).startswith(BUILTIN_NAMESPACES)


class OWLReader(SchemaReader):
    """Reader for OWL ontologies serialized as Turtle."""

    SOURCE_FORMAT = "ttl"

    @classmethod
    def supported_extensions(cls) -> List[str]:
        return ["ttl", "turtle", "owl"]

    def read(self, data: ReaderInput, options: Optional[ReaderOptions] = None) -> ReadResult:
        options = options or ReaderOptions()
        graph = self.parse(self.decode(data), options)
        logger.debug("Parsed %d triples", len(graph))
        mapper = _OntologyMapper(graph, options)
        schema = mapper.build()
        return self.finalize(schema, mapper.warnings)

    def parse(self, text: str, options: ReaderOptions) -> Graph:
        """Parse Turtle text into a graph that only carries the document's own prefixes."""
        graph = Graph(bind_namespaces="none")
        try:
            graph.parse(data=text, format="turtle", publicID=options.base_uri)
        except BadSyntax as e:
            raise ParseError(
                f"Invalid Turtle: {e}",
                source_format=self.SOURCE_FORMAT,
                line=e.lines + 1,
            ) from e
        except (SyntaxError, ValueError) as e:
            raise ParseError(f"Invalid Turtle: {e}", source_format=self.SOURCE_FORMAT) from e
        return graph


class _OntologyMapper:
    """Per-call state for the second pass; never shared between reads."""

    def __init__(self, graph: Graph, options: ReaderOptions) -> None:
        self.graph = graph
        self.options = options
        self.entities = group_by_subject(graph)
        self.warnings: List[TranslationWarning] = []
        self.class_names: Dict[URIRef, str] = {}
        self.enum_names: Dict[URIRef, str] = {}
        self.type_names: Dict[URIRef, str] = {}
        self.property_names: Dict[URIRef, str] = {}

    def warn(self, code: str, message: str, **details: str) -> None:
        self.warnings.append(TranslationWarning(code=code, message=message, details=details))

    # -- classification --------------------------------------------------

    def classify(self) -> None:
        """Assign a kind to every named subject and reserve its name."""
        type_group: Dict[str, URIRef] = {}
        property_group: Dict[str, URIRef] = {}

        for iri, entity in self.entities.items():
            if _is_builtin(iri):
                continue
            types = set(entity.types)
            if OWL.Ontology in types:
                entity.kind = "ontology"
            elif OWL.Class in types or RDFS.Class in types:
                entity.kind = "enum" if self.one_of_members(entity) is not None else "class"
            elif RDFS.Datatype in types:
                entity.kind = "enum" if self.one_of_members(entity) is not None else "datatype"
            elif types & PROPERTY_MARKERS:
                entity.kind = "property"
            elif OWL.AnnotationProperty in types:
                continue
            elif RDFS.subClassOf in entity.statements or OWL.disjointWith in entity.statements:
                entity.kind = "class"
            else:
                continue

            name = local_name_of(iri)
            if entity.kind in ("class", "enum", "datatype"):
                self._reserve(type_group, name, iri, entity.kind)
                target = {"class": self.class_names, "enum": self.enum_names, "datatype": self.type_names}
                target[entity.kind][iri] = name
            elif entity.kind == "property":
                self._reserve(property_group, name, iri, "slot")
                self.property_names[iri] = name

        known = set(self.class_names) | set(self.enum_names)
        for iri, entity in self.entities.items():
            if entity.kind is not None or _is_builtin(iri):
                continue
            types = set(entity.types)
            if OWL.NamedIndividual in types or types & known:
                entity.kind = "individual"

    @staticmethod
    def _reserve(group: Dict[str, URIRef], name: str, iri: URIRef, kind: str) -> None:
        if name in group and group[name] != iri:
            raise StructuralError(
                f"<{group[name]}> and <{iri}> both map to the name '{name}'",
                entity=name,
                kind=kind,
            )
        group[name] = iri

    def one_of_members(self, entity: OntologyEntity) -> Optional[List[Node]]:
        """Members of an ``owl:oneOf`` list, given directly or via an equivalent class."""
        for node in entity.values(OWL.oneOf):
            return self._list(node, entity.iri)
        for equivalent in entity.values(OWL.equivalentClass):
            if isinstance(equivalent, BNode):
                members = self.graph.value(equivalent, OWL.oneOf)
                if members is not None:
                    return self._list(members, entity.iri)
        return None

    def _list(self, node: Node, owner: URIRef) -> List[Node]:
        if node != RDF.nil and self.graph.value(node, RDF.first) is None:
            raise MappingError(f"<{owner}> has a malformed RDF list", construct="owl:oneOf", entity=str(owner))
        return list(Collection(self.graph, node))

    # -- rendering -------------------------------------------------------

    def compact(self, iri: URIRef) -> str:
        """Short display form: known entity name, then prefixed name, then ``<iri>``."""
        for names in (self.class_names, self.enum_names, self.type_names, self.property_names):
            if iri in names:
                return names[iri]
        try:
            prefix, _, local = self.graph.namespace_manager.compute_qname(str(iri), generate=False)
        except (KeyError, ValueError):
            text = str(iri)
            for prefix, namespace in WELL_KNOWN_PREFIXES.items():
                if text.startswith(namespace) and len(text) > len(namespace):
                    return f"{prefix}:{text[len(namespace):]}"
            return f"<{iri}>"
        return f"{prefix}:{local}"

    def render(self, node: Node, depth: int = 0) -> str:
        """Render a class expression as Manchester-like text."""
        if depth > MAX_EXPRESSION_DEPTH:
            raise MappingError("Class expression nests too deeply to render", construct="class expression")
        if isinstance(node, Literal):
            return _literal_text(node)
        if isinstance(node, URIRef):
            return self.compact(node)

        g = self.graph
        nested = depth + 1
        on_property = g.value(node, OWL.onProperty)
        if on_property is not None:
            prop = self.render(on_property, nested)
            for predicate, word in (
                (OWL.someValuesFrom, "some"),
                (OWL.allValuesFrom, "only"),
                (OWL.hasValue, "value"),
            ):
                filler = g.value(node, predicate)
                if filler is not None:
                    return f"{prop} {word} {self.render(filler, nested)}"
            if g.value(node, OWL.hasSelf) is not None:
                return f"{prop} Self"
            for predicate, word in (
                (OWL.cardinality, "exactly"),
                (OWL.qualifiedCardinality, "exactly"),
                (OWL.minCardinality, "min"),
                (OWL.minQualifiedCardinality, "min"),
                (OWL.maxCardinality, "max"),
                (OWL.maxQualifiedCardinality, "max"),
            ):
                count = g.value(node, predicate)
                if count is not None:
                    text = f"{prop} {word} {count}"
                    filler = g.value(node, OWL.onClass) or g.value(node, OWL.onDataRange)
                    return f"{text} {self.render(filler, nested)}" if filler is not None else text
            return f"{prop} restriction"

        for predicate, joiner in ((OWL.unionOf, " or "), (OWL.intersectionOf, " and ")):
            members = g.value(node, predicate)
            if members is not None:
                parts = [self.render(m, nested) for m in Collection(g, members)]
                return "(" + joiner.join(parts) + ")"

        complement = g.value(node, OWL.complementOf)
        if complement is not None:
            return f"not {self.render(complement, nested)}"

        members = g.value(node, OWL.oneOf)
        if members is not None:
            return "{" + ", ".join(self.render(m, nested) for m in Collection(g, members)) + "}"

        base = g.value(node, OWL.onDatatype)
        if base is not None:
            facets = []
            restrictions = g.value(node, OWL.withRestrictions)
            if restrictions is not None:
                for facet in Collection(g, restrictions):
                    for predicate, value in g.predicate_objects(facet):
                        facets.append(f"{local_name_of(predicate)} {_literal_text(value)}")
            return f"{self.render(base, nested)}[{', '.join(facets)}]"

        inverse = g.value(node, OWL.inverseOf)
        if inverse is not None:
            return f"inverse {self.render(inverse, nested)}"

        parts = sorted(
            f"{self.compact(p)} {self.render(o, nested)}" for p, o in g.predicate_objects(node) if p != RDF.type
        )
        return "[" + "; ".join(parts) + "]"

    def render_value(self, node: Node) -> str:
        """Render an annotation value; IRIs are written as ``<iri>``."""
        if isinstance(node, Literal):
            return str(node)
        if isinstance(node, URIRef):
            return f"<{node}>"
        return self.render(node)

    def preserve(self, annotations: AnnotationDict, predicate: URIRef, values: Iterable[Node]) -> None:
        rendered = sorted(self.compact(v) if isinstance(v, URIRef) else self.render_value(v) for v in values)
        if rendered and self.options.preserve_unknown_predicates:
            add_annotation(annotations, OWL_NAMESPACE, self.compact(predicate), "\n".join(rendered))

    def preserve_unknown(self, annotations: AnnotationDict, entity: OntologyEntity, handled: frozenset) -> None:
        for predicate, values in entity.statements.items():
            if predicate not in handled:
                self.preserve(annotations, predicate, values)

    def describe(self, entity: OntologyEntity, annotations: AnnotationDict) -> Optional[str]:
        """Record a label that differs from the name and return the description."""
        label = pick_text(entity.values(RDFS.label))
        if label and label != local_name_of(entity.iri):
            add_system(annotations, LABEL, label)
        return (
            pick_text(entity.values(RDFS.comment))
            or pick_text(entity.values(SKOS.definition))
            or pick_text(entity.values(DCTERMS.description))
        )

    # -- mapping ---------------------------------------------------------

    def build(self) -> SchemaModel:
        self.classify()
        header = self._header()

        classes = {
            name: self.map_class(self.entities[iri]) for iri, name in self.class_names.items()
        }
        enums = {name: self.map_enum(self.entities[iri]) for iri, name in self.enum_names.items()}
        types = {name: self.map_datatype(self.entities[iri]) for iri, name in self.type_names.items()}

        slots: Dict[str, SlotEntity] = {}
        owners: Dict[str, List[str]] = {name: [] for name in classes}
        inverse_pairs: List[Tuple[str, str]] = []
        for iri, name in self.property_names.items():
            slot, slot_owners, inverses = self.map_property(self.entities[iri])
            slots[name] = slot
            for owner in slot_owners:
                owners[owner].append(name)
            inverse_pairs.extend((name, inverse) for inverse in inverses)

        for class_name, slot_names in owners.items():
            if slot_names:
                cls = classes[class_name]
                classes[class_name] = cls.model_copy(update={"slots": list(dict.fromkeys(slot_names))})

        slots = self._link_inverses(slots, inverse_pairs)
        classes = self._apply_disjoint_groups(classes)

        annotations = header.pop("annotations")
        self._collect_individuals(annotations)
        add_system(annotations, SOURCE_FORMAT, OWLReader.SOURCE_FORMAT)

        return SchemaModel(
            **header,
            classes=classes,
            slots=slots,
            enums=enums,
            types=types,
            annotations=annotations,
        )

    def _header(self) -> dict:
        headers = [iri for iri in self.graph.subjects(RDF.type, OWL.Ontology)]
        annotations: AnnotationDict = {}
        prefixes, default_prefix = {}, None

        if not headers:
            self.warn("missing_ontology_header", "No owl:Ontology declaration; using defaults")
            name = "ontology"
            fields: dict = {"id": self.options.base_uri}
            entity = None
        else:
            if len(headers) > 1:
                self.warn(
                    "multiple_ontology_headers",
                    f"Found {len(headers)} owl:Ontology declarations; using <{headers[0]}>",
                    used=str(headers[0]),
                    ignored=", ".join(str(h) for h in headers[1:]),
                )
            header = headers[0]
            if isinstance(header, URIRef):
                name = local_name_of(header)
                entity = self.entities[header]
                fields = {"id": str(header)}
            else:
                name = "ontology"
                entity = OntologyEntity(URIRef(self.options.base_uri or ""))
                for predicate, obj in self.graph.predicate_objects(header):
                    entity.statements.setdefault(predicate, []).append(obj)
                fields = {"id": self.options.base_uri}

        for prefix, namespace in self.graph.namespaces():
            if prefix == "xml":
                continue
            if prefix == "":
                default_prefix = name
                prefixes.setdefault(name, str(namespace))
            else:
                prefixes[prefix] = str(namespace)

        if entity is not None:
            fields.update(
                title=pick_text(entity.values(RDFS.label)) or pick_text(entity.values(DCTERMS.title)),
                description=pick_text(entity.values(RDFS.comment)) or pick_text(entity.values(DCTERMS.description)),
                version=pick_text(entity.values(OWL.versionInfo)),
                license=_first_text(entity.values(DCTERMS.license)),
                created=_first_text(entity.values(DCTERMS.created)),
                modified=_first_text(entity.values(DCTERMS.modified)),
                imports=[str(o) for o in entity.values(OWL.imports)],
                contributors=self._contributors(entity),
            )
            self.preserve_unknown(annotations, entity, HEADER_PREDICATES)

        fields.update(name=name, prefixes=prefixes, default_prefix=default_prefix, annotations=annotations)
        return fields

    def _contributors(self, entity: OntologyEntity) -> List[Contributor]:
        contributors = []
        for predicates, role in (
            ((DCTERMS.creator, DC.creator), "author"),
            ((DCTERMS.contributor, DC.contributor), "contributor"),
        ):
            for predicate in predicates:
                for value in entity.values(predicate):
                    if isinstance(value, URIRef):
                        label = pick_text(self.graph.objects(value, FOAF.name)) or pick_text(
                            self.graph.objects(value, RDFS.label)
                        )
                        orcid = str(value) if "orcid.org" in str(value) else None
                        contributors.append(Contributor(name=label or str(value), orcid=orcid, role=role))
                    else:
                        contributors.append(Contributor(name=str(value), role=role))
        return contributors

    def map_class(self, entity: OntologyEntity) -> ClassEntity:
        annotations: AnnotationDict = {}
        description = self.describe(entity, annotations)
        name = self.class_names[entity.iri]

        named: List[str] = []
        anonymous: List[Node] = []
        external: List[Node] = []
        for parent in entity.values(RDFS.subClassOf):
            if isinstance(parent, BNode):
                anonymous.append(parent)
            elif parent in TOP_RANGES:
                continue
            elif parent in self.class_names:
                named.append(self.class_names[parent])
            else:
                external.append(parent)
        named = list(dict.fromkeys(named))
        is_a, mixins = self.choose_parents(entity, named)

        if anonymous:
            add_system(annotations, RESTRICTIONS, "\n".join(sorted(self.render(b) for b in anonymous)))
        if external:
            self.warn(
                "external_superclass",
                f"Class '{name}' extends undeclared classes; kept as annotations",
                entity=name,
            )
            self.preserve(annotations, RDFS.subClassOf, external)

        equivalents = [e for e in entity.values(OWL.equivalentClass) if isinstance(e, BNode)]
        if equivalents:
            add_system(annotations, EQUIVALENT_CLASSES, "\n".join(sorted(self.render(e) for e in equivalents)))
        named_equivalents = [e for e in entity.values(OWL.equivalentClass) if not isinstance(e, BNode)]
        self.preserve(annotations, OWL.equivalentClass, named_equivalents)

        disjoint: List[str] = []
        undeclared: List[Node] = []
        for other in entity.values(OWL.disjointWith):
            if other in self.class_names:
                disjoint.append(self.class_names[other])
            else:
                undeclared.append(other)
        if undeclared:
            self.warn(
                "external_disjoint",
                f"Class '{name}' is disjoint with undeclared classes; kept as annotations",
                entity=name,
            )
            self.preserve(annotations, OWL.disjointWith, undeclared)

        self.preserve_unknown(annotations, entity, CLASS_PREDICATES)

        return ClassEntity(
            name=name,
            description=description,
            is_a=is_a,
            mixins=mixins,
            abstract=is_true(entity.first(ABSTRACT)),
            mixin=is_true(entity.first(MIXIN)),
            disjoint_with=disjoint,
            class_uri=str(entity.iri),
            annotations=annotations,
        )

    def choose_parents(self, entity: OntologyEntity, named: List[str]) -> Tuple[Optional[str], List[str]]:
        """Split named superclasses into ``is_a`` and mixins.

        One superclass becomes ``is_a`` unless it is itself flagged as a
        mixin class. Several superclasses all become mixins, in input order,
        unless the class names one of them with ``sm:primaryParent``.
        """
        if not named:
            return None, []
        marker = entity.first(PRIMARY_PARENT)
        primary = self.class_names.get(marker) if isinstance(marker, URIRef) else None
        if primary in named:
            return primary, [n for n in named if n != primary]
        if len(named) == 1:
            parent_iri = next(iri for iri, n in self.class_names.items() if n == named[0])
            if is_true(self.entities[parent_iri].first(MIXIN)):
                return None, named
            return named[0], []
        return None, named

    def map_property(self, entity: OntologyEntity) -> Tuple[SlotEntity, List[str], List[str]]:
        """Map a property; returns the slot, its owning classes and its declared inverses."""
        annotations: AnnotationDict = {}
        description = self.describe(entity, annotations)
        name = self.property_names[entity.iri]
        types = entity.types

        kinds = [PROPERTY_KINDS[t] for t in PROPERTY_KINDS if t in types]
        if len(kinds) > 1:
            raise MappingError(
                f"Property '{name}' is declared both an object and a datatype property",
                construct="owl:ObjectProperty/owl:DatatypeProperty",
                entity=name,
            )
        if kinds:
            add_system(annotations, OWL_PROPERTY_TYPE, kinds[0])
        characteristics = sorted(local_name_of(t) for t in CHARACTERISTIC_TYPES if t in types)
        if characteristics:
            add_system(annotations, CHARACTERISTICS, ",".join(characteristics))

        owners: List[str] = []
        unmapped_domains: List[Node] = []
        named_domains, union_domains = 0, 0
        for domain in entity.values(RDFS.domain):
            if domain in self.class_names:
                owners.append(self.class_names[domain])
                named_domains += 1
            elif domain in TOP_RANGES:
                continue
            else:
                members = self._union_members(domain)
                if members is not None:
                    owners.extend(members)
                    union_domains += 1
                else:
                    unmapped_domains.append(domain)
        owners = list(dict.fromkeys(owners))
        # Repeated rdfs:domain statements intersect
        if named_domains + union_domains > 1:
            if union_domains == 0:
                add_system(annotations, DOMAIN_FORM, "intersection")
            else:
                self.warn(
                    "domain_widened",
                    f"Property '{name}' has several domains including a union; they are read as one union",
                    entity=name,
                )
        self.preserve(annotations, RDFS.domain, unmapped_domains)

        ranges = entity.values(RDFS.range)
        slot_range = None
        if ranges:
            slot_range = self.resolve_range(entity.iri, name, ranges[0], annotations)
            self.preserve(annotations, RDFS.range, ranges[1:])

        inverses: List[str] = []
        for inverse in entity.values(OWL.inverseOf):
            if isinstance(inverse, BNode):
                self.preserve(annotations, OWL.inverseOf, [inverse])
            elif inverse in self.property_names:
                inverses.append(self.property_names[inverse])
            else:
                raise StructuralError(
                    f"Property '{name}' is the inverse of undeclared property <{inverse}>",
                    entity=name,
                    kind="slot",
                    reference=str(inverse),
                    triple=f"<{entity.iri}> owl:inverseOf <{inverse}>",
                )

        self.preserve_unknown(annotations, entity, PROPERTY_PREDICATES)
        pattern = entity.first(PATTERN)

        slot = SlotEntity(
            name=name,
            description=description,
            range=slot_range,
            domain=owners[0] if len(owners) == 1 else None,
            required=is_true(entity.first(REQUIRED)),
            multivalued=is_true(entity.first(MULTIVALUED)),
            identifier=is_true(entity.first(IDENTIFIER)),
            pattern=str(pattern) if pattern is not None else None,
            slot_uri=str(entity.iri),
            annotations=annotations,
        )
        return slot, owners, inverses

    def _union_members(self, node: Node) -> Optional[List[str]]:
        if not isinstance(node, BNode):
            return None
        members = self.graph.value(node, OWL.unionOf)
        if members is None:
            return None
        names = []
        for member in Collection(self.graph, members):
            if member not in self.class_names:
                return None
            names.append(self.class_names[member])
        return names

    def resolve_range(self, prop: URIRef, name: str, node: Node, annotations: AnnotationDict) -> Optional[str]:
        if isinstance(node, BNode):
            add_system(annotations, RANGE_EXPRESSION, self.render(node))
            return None
        for names in (self.class_names, self.enum_names, self.type_names):
            if node in names:
                return names[node]
        kind = scalar_for_datatype(node)
        if kind is not None:
            if datatype_for_scalar(kind.value) != node:
                add_system(annotations, DATATYPE, str(node))
            return kind.value
        if node in TOP_RANGES:
            add_system(annotations, DATATYPE, str(node))
            return ScalarKind.URI.value
        raise StructuralError(
            f"Property '{name}' has unresolved range <{node}>",
            entity=name,
            kind="slot",
            reference=str(node),
            triple=f"<{prop}> rdfs:range <{node}>",
        )

    def _link_inverses(self, slots: Dict[str, SlotEntity], pairs: List[Tuple[str, str]]) -> Dict[str, SlotEntity]:
        """Populate ``inverse`` on both sides; the first declaration wins."""
        inverse_of: Dict[str, str] = {}
        for a, b in pairs:
            for this, other in ((a, b), (b, a)):
                current = inverse_of.get(this)
                if current is None:
                    inverse_of[this] = other
                elif current != other:
                    self.warn(
                        "conflicting_inverse",
                        f"Slot '{this}' is declared inverse of both '{current}' and '{other}'; keeping '{current}'",
                        entity=this,
                    )
        return {
            name: slot.model_copy(update={"inverse": inverse_of[name]}) if name in inverse_of else slot
            for name, slot in slots.items()
        }

    def _apply_disjoint_groups(self, classes: Dict[str, ClassEntity]) -> Dict[str, ClassEntity]:
        """Expand ``owl:AllDisjointClasses`` groups into pairwise ``disjoint_with``."""
        extra: Dict[str, List[str]] = {}
        for group in self.graph.subjects(RDF.type, OWL.AllDisjointClasses):
            members_node = self.graph.value(group, OWL.members)
            if members_node is None:
                continue
            members = [self.class_names[m] for m in Collection(self.graph, members_node) if m in self.class_names]
            for member in members:
                extra.setdefault(member, []).extend(m for m in members if m != member)
        for name, others in extra.items():
            cls = classes[name]
            classes[name] = cls.model_copy(update={"disjoint_with": list(cls.disjoint_with) + others})
        return classes

    def map_enum(self, entity: OntologyEntity) -> EnumEntity:
        annotations: AnnotationDict = {}
        description = self.describe(entity, annotations)
        values: List[PermissibleValue] = []
        seen: Set[str] = set()
        for member in self.one_of_members(entity) or []:
            if isinstance(member, Literal):
                value = PermissibleValue(text=str(member))
            else:
                label = pick_text(self.graph.objects(member, RDFS.label))
                value = PermissibleValue(
                    text=label or local_name_of(member),
                    description=pick_text(self.graph.objects(member, RDFS.comment)),
                    meaning=str(member) if isinstance(member, URIRef) else None,
                )
            if value.text not in seen:
                seen.add(value.text)
                values.append(value)
        self.preserve_unknown(annotations, entity, CLASS_PREDICATES)
        return EnumEntity(
            name=self.enum_names[entity.iri],
            description=description,
            permissible_values=values,
            enum_uri=str(entity.iri),
            annotations=annotations,
        )

    def map_datatype(self, entity: OntologyEntity) -> TypeEntity:
        annotations: AnnotationDict = {}
        description = self.describe(entity, annotations)
        base = ScalarKind.STRING
        expressions = []
        for equivalent in entity.values(OWL.equivalentClass):
            datatype = equivalent
            if isinstance(equivalent, BNode):
                datatype = self.graph.value(equivalent, OWL.onDatatype)
                expressions.append(self.render(equivalent))
            kind = scalar_for_datatype(datatype) if datatype is not None else None
            if kind is not None:
                base = kind
                if datatype_for_scalar(kind.value) != datatype:
                    add_system(annotations, DATATYPE, str(datatype))
                break
        if expressions:
            add_system(annotations, EQUIVALENT_CLASSES, "\n".join(sorted(expressions)))

        parent = entity.first(TYPEOF)
        pattern = entity.first(PATTERN)
        self.preserve_unknown(annotations, entity, DATATYPE_PREDICATES)
        return TypeEntity(
            name=self.type_names[entity.iri],
            description=description,
            base=base,
            typeof=self.type_names.get(parent) if parent is not None else None,
            uri=str(entity.iri),
            pattern=str(pattern) if pattern is not None else None,
            annotations=annotations,
        )

    def _collect_individuals(self, annotations: AnnotationDict) -> None:
        """Keep named individuals as reserved schema annotations."""
        ids: List[str] = []
        for iri, entity in self.entities.items():
            if entity.kind != "individual":
                continue
            ident = local_name_of(iri)
            if ident in ids:
                self.warn("duplicate_individual", f"Individual name '{ident}' is used twice; <{iri}> skipped")
                continue
            ids.append(ident)
            key = f"{INDIVIDUAL_PREFIX}{ident}"
            types = [
                self.compact(t) if t in self.class_names or t in self.enum_names else f"<{t}>"
                for t in entity.types
                if t != OWL.NamedIndividual
            ]
            add_system(annotations, key, ",".join(types))
            add_system(annotations, f"{key}:_iri", str(iri))
            label = pick_text(entity.values(RDFS.label))
            if label:
                add_system(annotations, f"{key}:_label", label)
            comment = pick_text(entity.values(RDFS.comment))
            if comment:
                add_system(annotations, f"{key}:_comment", comment)
            for predicate, values in entity.statements.items():
                if predicate in (RDF.type, RDFS.label, RDFS.comment):
                    continue
                prop = self.property_names.get(predicate) or f"<{predicate}>"
                rendered = encode_values(sorted(self.render_value(v) for v in values))
                add_system(annotations, f"{key}:{prop}", rendered)
        if ids:
            add_system(annotations, INDIVIDUALS, ",".join(ids))


def _literal_text(literal: Node) -> str:
    if isinstance(literal, Literal) and (literal.datatype in (None, XSD.string) or literal.language):
        return f'"{literal}"'
    return str(literal)


def _first_text(values: List[Node]) -> Optional[str]:
    return str(values[0]) if values else None


__all__ = ["OWLReader", "OntologyEntity", "group_by_subject", "pick_text"]
