"""RDF vocabulary for schema facts that OWL itself does not express.

The RDF writers emit these predicates and the ontology reader reads them
back, so flags such as ``required`` survive a Turtle round trip.
"""

from __future__ import annotations

from rdflib import Namespace, URIRef

VOCAB_IRI = "https://w3id.org/schema-mesh/vocab"
SM = Namespace(f"{VOCAB_IRI}#")

PRIMARY_PARENT = SM.primaryParent
REQUIRED = SM.required
MULTIVALUED = SM.multivalued
IDENTIFIER = SM.identifier
ABSTRACT = SM.abstract
MIXIN = SM.mixin
PATTERN = SM.pattern
TYPEOF = SM.typeof

DEFAULT_BASE_URI = "https://w3id.org/schema-mesh/"


def local_name_of(iri: str) -> str:
    """Return the fragment or last path segment of an IRI.

    Trailing separators are ignored, so ``http://ex.org/animals/`` yields
    ``animals``. An IRI without separators is returned whole.
    """
    text = str(iri).rstrip("/#")
    for sep in ("#", "/", ":"):
        pos = text.rfind(sep)
        if pos != -1 and pos + 1 < len(text):
            return text[pos + 1:]
    return text or str(iri)


def entity_iri(base: str, name: str) -> URIRef:
    """Mint ``{base}#{name}``, or ``{base}{name}`` when base already ends in a separator."""
    if base.endswith(("#", "/")):
        return URIRef(f"{base}{name}")
    return URIRef(f"{base}#{name}")


__all__ = [
    "SM",
    "VOCAB_IRI",
    "PRIMARY_PARENT",
    "REQUIRED",
    "MULTIVALUED",
    "IDENTIFIER",
    "ABSTRACT",
    "MIXIN",
    "PATTERN",
    "TYPEOF",
    "DEFAULT_BASE_URI",
    "local_name_of",
    "entity_iri",
]
