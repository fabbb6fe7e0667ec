"""Native YAML schema writer.

Output keeps model field order, omits empty and default values, and writes
entity mappings without a redundant ``name`` key, which is the shape the
YAML reader accepts. Writing and re-reading yields an equal model.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import yaml

from schema_mesh_core.config import WriterOptions
from schema_mesh_core.model import SchemaModel

from .writer_base import SchemaWriter

ENTITY_SECTIONS = ("classes", "slots", "enums", "types")


def schema_to_dict(schema: SchemaModel) -> Dict[str, Any]:
    """Plain-data form of ``schema`` ready for ``yaml.safe_dump``."""
    data = _drop_empty(schema.model_dump(mode="json", exclude_defaults=True, exclude_none=True))
    for section in ENTITY_SECTIONS:
        for key, body in data.get(section, {}).items():
            body = data[section][key] = _drop_empty(body)
            body.pop("name", None)
            for attr_key, attr in body.get("attributes", {}).items():
                body["attributes"][attr_key] = _drop_empty(attr)
                body["attributes"][attr_key].pop("name", None)
    for enum in data.get("enums", {}).values():
        values = enum.pop("permissible_values", None)
        if values:
            enum["permissible_values"] = {value.pop("text"): value for value in values}
    return data


def _drop_empty(body: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in body.items() if value not in ({}, [])}


class YAMLSchemaWriter(SchemaWriter):
    """Writer for the native slot/class schema format."""

    FORMAT_ID = "yaml"
    ALIASES = ("yml",)

    def serialize(self, schema: SchemaModel, options: Optional[WriterOptions] = None) -> bytes:
        text = yaml.safe_dump(
            schema_to_dict(schema),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
        return text.encode("utf-8")


__all__ = ["YAMLSchemaWriter", "schema_to_dict"]
