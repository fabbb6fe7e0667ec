"""Schema Mesh Ingest - readers from external formats into the canonical model.

Supported formats:
- OWL ontologies serialized as Turtle (``ttl``, ``turtle``, ``owl``)
- The native YAML schema format (``yaml``, ``yml``)

Readers are stateless and registered explicitly with a
:class:`schema_mesh_orchestrator.registry.FormatRegistry`.
"""

from .reader_base import ReadResult, ReaderInput, SchemaReader
from .owl_reader import OWLReader, OntologyEntity, group_by_subject
from .yaml_reader import UniqueKeyLoader, YAMLSchemaReader

__all__ = [
    # Base classes
    'SchemaReader',
    'ReadResult',
    'ReaderInput',

    # Readers
    'OWLReader',
    'YAMLSchemaReader',

    # Helpers
    'OntologyEntity',
    'group_by_subject',
    'UniqueKeyLoader',
]
