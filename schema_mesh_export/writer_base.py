"""
Abstract base class for writers that serialize the canonical model.

Writers are pure functions of the model and the options passed in. A writer
validates the model, serializes it completely into memory, and only then
hands the bytes to the caller's stream, so a failure never leaves partial
output behind.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import BinaryIO, List, Optional, Tuple

from schema_mesh_core.config import WriterOptions
from schema_mesh_core.model import SchemaModel
from schema_mesh_core.validation import validate_schema

logger = logging.getLogger(__name__)


class SchemaWriter(ABC):
    """Abstract base class for format writers.

    Subclasses must implement:
    - serialize(): Convert a model into the target grammar
    - FORMAT_ID: Primary format identifier
    """

    FORMAT_ID = ""
    ALIASES: Tuple[str, ...] = ()

    @property
    def format_id(self) -> str:
        return self.FORMAT_ID

    @classmethod
    def identifiers(cls) -> List[str]:
        """Primary identifier followed by its aliases."""
        return [cls.FORMAT_ID, *cls.ALIASES]

    @abstractmethod
    def serialize(self, schema: SchemaModel, options: Optional[WriterOptions] = None) -> bytes:
        """Serialize ``schema`` without validating it.

        Raises:
            WriteError: If a value cannot be represented in the target grammar
        """

    def render(self, schema: SchemaModel, options: Optional[WriterOptions] = None) -> bytes:
        """Validate ``schema`` and serialize it."""
        validate_schema(schema)
        payload = self.serialize(schema, options or WriterOptions())
        logger.debug("Serialized schema %s as %s (%d bytes)", schema.name, self.FORMAT_ID, len(payload))
        return payload

    def write(self, schema: SchemaModel, stream: BinaryIO, options: Optional[WriterOptions] = None) -> None:
        """Validate, serialize fully, then write the result to ``stream`` in one call."""
        payload = self.render(schema, options)
        stream.write(payload)


__all__ = ["SchemaWriter"]
