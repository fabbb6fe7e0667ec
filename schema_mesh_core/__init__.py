"""schema-mesh canonical model, invariants and inheritance resolution."""

from .annotations import (
    RESERVED_NAMESPACE,
    PreservedIndividual,
    display_label,
    get_annotation,
    get_system,
    iter_annotations,
    merge_annotations,
    preserved_individuals,
    unwrap_iri,
    with_annotation,
)
from .config import GraphOptions, ReaderOptions, TranslationConfig, WriterOptions, load_config
from .datatypes import ScalarKind, datatype_for_scalar, is_scalar, normalize_scalar, scalar_for_datatype
from .errors import (
    MappingError,
    ParseError,
    SchemaMeshError,
    StructuralError,
    TranslationAborted,
    TranslationWarning,
    UnsupportedFormat,
    WriteError,
)
from .inheritance import ResolvedSlot, ancestors, descendants, mixin_users, resolve_slots
from .model import (
    ClassEntity,
    Contributor,
    EnumEntity,
    PermissibleValue,
    SchemaModel,
    SlotEntity,
    TypeEntity,
)
from .validation import close_symmetric_relations, iter_entities, validate_schema
from .vocab import DEFAULT_BASE_URI, SM, entity_iri, local_name_of

__all__ = [
    # Model
    "SchemaModel",
    "ClassEntity",
    "SlotEntity",
    "EnumEntity",
    "TypeEntity",
    "PermissibleValue",
    "Contributor",
    "ScalarKind",
    # Annotations
    "RESERVED_NAMESPACE",
    "get_annotation",
    "get_system",
    "with_annotation",
    "merge_annotations",
    "iter_annotations",
    "display_label",
    "PreservedIndividual",
    "preserved_individuals",
    "unwrap_iri",
    # Datatypes
    "normalize_scalar",
    "is_scalar",
    "scalar_for_datatype",
    "datatype_for_scalar",
    # Invariants and resolution
    "validate_schema",
    "close_symmetric_relations",
    "iter_entities",
    "resolve_slots",
    "ResolvedSlot",
    "ancestors",
    "descendants",
    "mixin_users",
    # Vocabulary
    "SM",
    "DEFAULT_BASE_URI",
    "entity_iri",
    "local_name_of",
    # Options
    "ReaderOptions",
    "WriterOptions",
    "GraphOptions",
    "TranslationConfig",
    "load_config",
    # Errors
    "SchemaMeshError",
    "UnsupportedFormat",
    "ParseError",
    "StructuralError",
    "TranslationAborted",
    "MappingError",
    "WriteError",
    "TranslationWarning",
]
