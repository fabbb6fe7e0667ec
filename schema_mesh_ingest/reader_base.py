"""
Abstract base class for readers that parse an external format into the
canonical schema model.

Readers are stateless: everything a translation needs arrives through the
arguments of :meth:`SchemaReader.read`, so one instance can be shared across
threads. Each reader finishes by closing symmetric relations and validating
the structural invariants, so no partially valid model ever escapes.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from schema_mesh_core.config import ReaderOptions
from schema_mesh_core.errors import ParseError, TranslationWarning
from schema_mesh_core.model import SchemaModel
from schema_mesh_core.validation import close_symmetric_relations, validate_schema

logger = logging.getLogger(__name__)

ReaderInput = Union[str, bytes]


@dataclass(frozen=True)
class ReadResult:
    """A validated model plus any non-fatal warnings raised while reading it."""

    schema: SchemaModel
    warnings: Tuple[TranslationWarning, ...] = ()


class SchemaReader(ABC):
    """Abstract base class for format readers.

    Subclasses must implement:
    - read(): Parse input into a :class:`ReadResult`
    - supported_extensions(): Format identifiers this reader handles
    """

    #: Short name recorded as the model's source format.
    SOURCE_FORMAT = ""

    @classmethod
    @abstractmethod
    def supported_extensions(cls) -> List[str]:
        """Return the format identifiers handled, e.g. ``['ttl', 'turtle']``."""

    @abstractmethod
    def read(self, data: ReaderInput, options: Optional[ReaderOptions] = None) -> ReadResult:
        """Parse ``data`` into a validated model.

        Raises:
            ParseError: If the input is malformed
            StructuralError: If the result would violate a model invariant
            MappingError: If an essential construct cannot be represented
        """

    def supports(self, identifier: str) -> bool:
        """Check (case-insensitively) whether this reader handles ``identifier``."""
        wanted = identifier.lower().lstrip(".")
        return any(ext.lower() == wanted for ext in self.supported_extensions())

    def decode(self, data: ReaderInput) -> str:
        """Return input as text; bytes are decoded as UTF-8 (BOM tolerated)."""
        if isinstance(data, str):
            return data
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ParseError(
                f"Input is not valid UTF-8: {e.reason}",
                source_format=self.SOURCE_FORMAT,
                token=repr(data[e.start:e.end]),
            ) from e

    def finalize(self, schema: SchemaModel, warnings: Sequence[TranslationWarning] = ()) -> ReadResult:
        """Close symmetric relations, validate invariants and package the result."""
        schema = validate_schema(close_symmetric_relations(schema))
        for warning in warnings:
            logger.warning("%s: %s", warning.code, warning.message)
        logger.info(
            "Read %s schema %s: %d classes, %d slots, %d enums, %d types",
            self.SOURCE_FORMAT,
            schema.name,
            len(schema.classes),
            len(schema.slots),
            len(schema.enums),
            len(schema.types),
        )
        return ReadResult(schema=schema, warnings=tuple(warnings))


__all__ = ["ReadResult", "ReaderInput", "SchemaReader"]
