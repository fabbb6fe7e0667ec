"""Format registry mapping format identifiers to readers and writers.

A registry is an ordinary value: build one per process or per test, fill it,
and pass it to whatever drives translations. There is no global instance.
Lookups are case-insensitive and never mutate the registry, so a populated
registry can be shared between threads.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from schema_mesh_core.errors import UnsupportedFormat
from schema_mesh_export import (
    DocsJsonWriter,
    GraphJsonWriter,
    JSONLDWriter,
    NTriplesWriter,
    RDFXMLWriter,
    SchemaWriter,
    TurtleWriter,
    YAMLSchemaWriter,
)
from schema_mesh_ingest import OWLReader, SchemaReader, YAMLSchemaReader

logger = logging.getLogger(__name__)


def _normalize(identifier: str) -> str:
    return identifier.strip().lower().lstrip(".")


class FormatRegistry:
    """Two independent lookup tables: one for readers, one for writers."""

    def __init__(self) -> None:
        self._readers: Dict[str, SchemaReader] = {}
        self._writers: Dict[str, SchemaWriter] = {}

    @classmethod
    def with_defaults(cls) -> "FormatRegistry":
        """Create a registry holding every built-in reader and writer."""
        registry = cls()
        for reader in (OWLReader(), YAMLSchemaReader()):
            registry.register_reader(reader)
        for writer in (
            YAMLSchemaWriter(),
            TurtleWriter(),
            RDFXMLWriter(),
            NTriplesWriter(),
            JSONLDWriter(),
            GraphJsonWriter(),
            DocsJsonWriter(),
        ):
            registry.register_writer(writer)
        return registry

    def register_reader(self, reader: SchemaReader, identifiers: Optional[List[str]] = None) -> None:
        """Register a reader under its supported extensions or explicit identifiers.

        Args:
            reader: Reader instance
            identifiers: Identifiers to use instead of ``reader.supported_extensions()``
        """
        for identifier in identifiers or reader.supported_extensions():
            self._store(self._readers, _normalize(identifier), reader, "reader")

    def register_writer(self, writer: SchemaWriter, identifiers: Optional[List[str]] = None) -> None:
        """Register a writer under its format id and aliases or explicit identifiers."""
        for identifier in identifiers or writer.identifiers():
            self._store(self._writers, _normalize(identifier), writer, "writer")

    @staticmethod
    def _store(table: Dict, key: str, handle: object, direction: str) -> None:
        current = table.get(key)
        if current is not None and current is not handle:
            logger.warning(
                "Replacing %s for format '%s': %s -> %s",
                direction,
                key,
                type(current).__name__,
                type(handle).__name__,
            )
        table[key] = handle
        logger.debug("Registered %s %s for format '%s'", direction, type(handle).__name__, key)

    def reader_for(self, identifier: str) -> SchemaReader:
        """Look up the reader for ``identifier``.

        Raises:
            UnsupportedFormat: If no reader is registered for it
        """
        reader = self._readers.get(_normalize(identifier))
        if reader is None:
            raise UnsupportedFormat(identifier, "reader", self.readers())
        return reader

    def writer_for(self, identifier: str) -> SchemaWriter:
        """Look up the writer for ``identifier``.

        Raises:
            UnsupportedFormat: If no writer is registered for it
        """
        writer = self._writers.get(_normalize(identifier))
        if writer is None:
            raise UnsupportedFormat(identifier, "writer", self.writers())
        return writer

    def reader_for_path(self, path: Union[str, Path]) -> SchemaReader:
        return self.reader_for(format_from_path(path))

    def writer_for_path(self, path: Union[str, Path]) -> SchemaWriter:
        return self.writer_for(format_from_path(path))

    def readers(self) -> List[str]:
        return sorted(self._readers)

    def writers(self) -> List[str]:
        return sorted(self._writers)


def format_from_path(path: Union[str, Path]) -> str:
    """Format identifier implied by a file name, e.g. ``schema.TTL`` -> ``ttl``."""
    suffix = Path(path).suffix
    if not suffix:
        raise UnsupportedFormat(str(path), "format for path")
    return _normalize(suffix)


__all__ = ["FormatRegistry", "format_from_path"]
