"""Schema Mesh Export - writers and projections of the canonical model.

Writers:
- Native YAML (``yaml``, ``yml``)
- OWL as Turtle, RDF/XML, N-Triples and JSON-LD, all built from one shared
  triple mapping (:func:`build_rdf_graph`)
- Graph topology as JSON (``graph-json``)
- Documentation view as JSON (``docs-json``), or through any renderer via
  :class:`DocumentationWriter`
"""

from .writer_base import SchemaWriter
from .rdf_graph import build_rdf_graph, expand_curie
from .rdf_writers import JSONLDWriter, NTriplesWriter, RDFGraphWriter, RDFXMLWriter, TurtleWriter
from .yaml_writer import YAMLSchemaWriter, schema_to_dict
from .topology import (
    EdgeKind,
    GraphEdge,
    GraphJsonWriter,
    GraphNode,
    GraphTopology,
    NodeKind,
    build_topology,
)
from .docs_view import (
    ClassView,
    DocsJsonWriter,
    DocumentationView,
    DocumentationWriter,
    EntityRef,
    RangeRef,
    SlotView,
    build_documentation_view,
)

__all__ = [
    # Base classes
    'SchemaWriter',
    'RDFGraphWriter',

    # Writers
    'YAMLSchemaWriter',
    'TurtleWriter',
    'RDFXMLWriter',
    'NTriplesWriter',
    'JSONLDWriter',
    'GraphJsonWriter',
    'DocumentationWriter',
    'DocsJsonWriter',

    # Projections
    'build_rdf_graph',
    'build_topology',
    'build_documentation_view',
    'schema_to_dict',
    'expand_curie',

    # View data
    'GraphTopology',
    'GraphNode',
    'GraphEdge',
    'NodeKind',
    'EdgeKind',
    'DocumentationView',
    'ClassView',
    'SlotView',
    'EntityRef',
    'RangeRef',
]
