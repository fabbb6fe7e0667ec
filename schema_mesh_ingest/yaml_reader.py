"""Native YAML schema reader.

Deserialization is direct, but the result still goes through the full
invariant check because hand-written schemas can contain cycles, typos in
references or duplicated names.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import yaml
from pydantic import ValidationError

from schema_mesh_core.annotations import RESERVED_NAMESPACE, SOURCE_FORMAT, merge_annotations
from schema_mesh_core.config import ReaderOptions
from schema_mesh_core.errors import ParseError, StructuralError
from schema_mesh_core.model import SchemaModel

from .reader_base import ReaderInput, ReadResult, SchemaReader

logger = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """Safe loader that rejects duplicate mapping keys instead of keeping the last."""

    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> Any:
        seen = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            try:
                duplicate = key in seen
            except TypeError:
                continue
            if duplicate:
                raise StructuralError(
                    f"Duplicate name '{key}'",
                    entity=str(key),
                    line=key_node.start_mark.line + 1,
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


class YAMLSchemaReader(SchemaReader):
    """Reader for the native slot/class schema format."""

    SOURCE_FORMAT = "yaml"

    @classmethod
    def supported_extensions(cls) -> List[str]:
        return ["yaml", "yml"]

    def read(self, data: ReaderInput, options: Optional[ReaderOptions] = None) -> ReadResult:
        text = self.decode(data)
        try:
            document = yaml.load(text, Loader=UniqueKeyLoader)
        except yaml.MarkedYAMLError as e:
            mark = e.problem_mark or e.context_mark
            raise ParseError(
                f"Invalid YAML: {e.problem or e}",
                source_format=self.SOURCE_FORMAT,
                line=mark.line + 1 if mark else None,
                column=mark.column + 1 if mark else None,
            ) from e
        except yaml.YAMLError as e:
            raise ParseError(f"Invalid YAML: {e}", source_format=self.SOURCE_FORMAT) from e

        if document is None:
            raise ParseError("Schema document is empty", source_format=self.SOURCE_FORMAT)
        if not isinstance(document, dict):
            raise ParseError(
                f"Schema document must be a mapping, got {type(document).__name__}",
                source_format=self.SOURCE_FORMAT,
            )

        try:
            schema = SchemaModel.model_validate(document)
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            raise ParseError(
                f"Invalid schema document: {first['msg']} at '{location}'",
                source_format=self.SOURCE_FORMAT,
                token=location,
            ) from e

        if SOURCE_FORMAT not in schema.annotations.get(RESERVED_NAMESPACE, {}):
            annotations = merge_annotations(schema.annotations, {RESERVED_NAMESPACE: {SOURCE_FORMAT: self.SOURCE_FORMAT}})
            schema = schema.model_copy(update={"annotations": annotations})

        return self.finalize(schema)


__all__ = ["UniqueKeyLoader", "YAMLSchemaReader"]
