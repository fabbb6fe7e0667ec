"""RDF-family writers.

Every writer here builds the same triples through
:func:`~schema_mesh_export.rdf_graph.build_rdf_graph` and differs only in
the rdflib serializer applied at the end.
"""

from __future__ import annotations

import logging
from typing import Optional

from schema_mesh_core.config import WriterOptions
from schema_mesh_core.errors import WriteError
from schema_mesh_core.model import SchemaModel

from .rdf_graph import build_rdf_graph
from .writer_base import SchemaWriter

logger = logging.getLogger(__name__)


class RDFGraphWriter(SchemaWriter):
    """Base class for writers that serialize the shared OWL graph."""

    #: rdflib serializer plugin name
    RDFLIB_FORMAT = ""

    def serialize(self, schema: SchemaModel, options: Optional[WriterOptions] = None) -> bytes:
        graph = build_rdf_graph(schema, options)
        try:
            return graph.serialize(format=self.RDFLIB_FORMAT, encoding="utf-8")
        except (ValueError, TypeError, KeyError) as e:
            raise WriteError(
                f"Failed to serialize schema '{schema.name}': {e}",
                target_format=self.FORMAT_ID,
            ) from e


class TurtleWriter(RDFGraphWriter):
    """OWL ontology as Turtle."""

    FORMAT_ID = "ttl"
    ALIASES = ("turtle", "owl")
    RDFLIB_FORMAT = "turtle"


class RDFXMLWriter(RDFGraphWriter):
    """OWL ontology as RDF/XML."""

    FORMAT_ID = "rdfxml"
    ALIASES = ("rdf", "xml")
    RDFLIB_FORMAT = "xml"


class NTriplesWriter(RDFGraphWriter):
    FORMAT_ID = "nt"
    ALIASES = ("ntriples",)
    RDFLIB_FORMAT = "nt"


class JSONLDWriter(RDFGraphWriter):
    FORMAT_ID = "jsonld"
    ALIASES = ("json-ld",)
    RDFLIB_FORMAT = "json-ld"


__all__ = ["RDFGraphWriter", "TurtleWriter", "RDFXMLWriter", "NTriplesWriter", "JSONLDWriter"]
