"""Canonical scalar kinds and the fixed XSD datatype table."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from rdflib import RDF, RDFS, URIRef, XSD


class ScalarKind(str, Enum):
    """The fixed set of scalar representations a range may name."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    URI = "uri"


# Names accepted in native schemas in addition to the canonical kinds.
SCALAR_ALIASES: Dict[str, ScalarKind] = {
    "int": ScalarKind.INTEGER,
    "double": ScalarKind.FLOAT,
    "decimal": ScalarKind.FLOAT,
    "time": ScalarKind.STRING,
    "uriorcurie": ScalarKind.URI,
    "curie": ScalarKind.URI,
}

# Preferred XSD datatype for each canonical kind and alias.
SCALAR_TO_XSD: Dict[str, URIRef] = {
    "string": XSD.string,
    "integer": XSD.integer,
    "float": XSD.float,
    "boolean": XSD.boolean,
    "date": XSD.date,
    "datetime": XSD.dateTime,
    "uri": XSD.anyURI,
    "int": XSD.int,
    "double": XSD.double,
    "decimal": XSD.decimal,
    "time": XSD.time,
    "uriorcurie": XSD.anyURI,
    "curie": XSD.anyURI,
}

XSD_TO_SCALAR: Dict[URIRef, ScalarKind] = {
    XSD.string: ScalarKind.STRING,
    XSD.normalizedString: ScalarKind.STRING,
    XSD.token: ScalarKind.STRING,
    XSD.language: ScalarKind.STRING,
    XSD.Name: ScalarKind.STRING,
    XSD.NCName: ScalarKind.STRING,
    XSD.NMTOKEN: ScalarKind.STRING,
    XSD.time: ScalarKind.STRING,
    XSD.duration: ScalarKind.STRING,
    XSD.gYear: ScalarKind.STRING,
    XSD.gYearMonth: ScalarKind.STRING,
    URIRef(f"{XSD}anySimpleType"): ScalarKind.STRING,
    XSD.integer: ScalarKind.INTEGER,
    XSD.int: ScalarKind.INTEGER,
    XSD.long: ScalarKind.INTEGER,
    XSD.short: ScalarKind.INTEGER,
    XSD.byte: ScalarKind.INTEGER,
    XSD.nonNegativeInteger: ScalarKind.INTEGER,
    XSD.positiveInteger: ScalarKind.INTEGER,
    XSD.nonPositiveInteger: ScalarKind.INTEGER,
    XSD.negativeInteger: ScalarKind.INTEGER,
    XSD.unsignedInt: ScalarKind.INTEGER,
    XSD.unsignedLong: ScalarKind.INTEGER,
    XSD.unsignedShort: ScalarKind.INTEGER,
    XSD.unsignedByte: ScalarKind.INTEGER,
    XSD.float: ScalarKind.FLOAT,
    XSD.double: ScalarKind.FLOAT,
    XSD.decimal: ScalarKind.FLOAT,
    XSD.boolean: ScalarKind.BOOLEAN,
    XSD.date: ScalarKind.DATE,
    XSD.dateTime: ScalarKind.DATETIME,
    XSD.dateTimeStamp: ScalarKind.DATETIME,
    XSD.anyURI: ScalarKind.URI,
    RDF.langString: ScalarKind.STRING,
    RDF.PlainLiteral: ScalarKind.STRING,
    RDFS.Literal: ScalarKind.STRING,
}


def normalize_scalar(name: Optional[str]) -> Optional[ScalarKind]:
    """Return the canonical kind for a scalar range name, or None."""
    if not name:
        return None
    try:
        return ScalarKind(name)
    except ValueError:
        return SCALAR_ALIASES.get(name)


def is_scalar(name: Optional[str]) -> bool:
    return normalize_scalar(name) is not None


def scalar_for_datatype(datatype: URIRef) -> Optional[ScalarKind]:
    """Map an XSD/RDF datatype IRI to its canonical kind."""
    return XSD_TO_SCALAR.get(URIRef(datatype))


def datatype_for_scalar(name: str) -> URIRef:
    """Map a scalar range name to an XSD datatype IRI.

    Unknown names fall back to ``xsd:string``.
    """
    if name in SCALAR_TO_XSD:
        return SCALAR_TO_XSD[name]
    kind = normalize_scalar(name)
    if kind is None:
        return XSD.string
    return SCALAR_TO_XSD[kind.value]


__all__ = [
    "ScalarKind",
    "SCALAR_ALIASES",
    "SCALAR_TO_XSD",
    "XSD_TO_SCALAR",
    "normalize_scalar",
    "is_scalar",
    "scalar_for_datatype",
    "datatype_for_scalar",
]
