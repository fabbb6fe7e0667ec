"""Pydantic option models passed explicitly to readers, writers and the pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ReaderOptions(BaseModel):
    """Options shared by readers."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_uri: Optional[str] = Field(default=None, description="Base IRI used when the input has none")
    preserve_unknown_predicates: bool = Field(
        default=True,
        description="Keep unrecognised ontology predicates as 'owl' annotations",
    )


class GraphOptions(BaseModel):
    """Which nodes and edges the graph-topology projection includes."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    include_slots: bool = True
    include_enums: bool = True
    include_types: bool = True
    include_domain_edges: bool = True
    include_range_edges: bool = True
    include_inverse_edges: bool = True

    @classmethod
    def classes_only(cls) -> "GraphOptions":
        return cls(
            include_slots=False,
            include_enums=False,
            include_types=False,
            include_domain_edges=False,
            include_range_edges=False,
            include_inverse_edges=False,
        )


class WriterOptions(BaseModel):
    """Options shared by writers."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_uri: Optional[str] = Field(default=None, description="IRI used when the schema has no id")
    include_individuals: bool = Field(default=True, description="Emit preserved named individuals")
    graph: GraphOptions = Field(default_factory=GraphOptions, description="Graph-topology projection settings")

    @field_validator("base_uri")
    @classmethod
    def validate_base_uri(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and ":" not in v:
            raise ValueError(f"base_uri must be an absolute IRI, got '{v}'")
        return v


class TranslationConfig(BaseModel):
    """Complete option set for one translation run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    reader: ReaderOptions = Field(default_factory=ReaderOptions)
    writer: WriterOptions = Field(default_factory=WriterOptions)
    fail_on_warnings: bool = Field(default=False, description="Treat reader warnings as errors")


def load_config(path: Union[str, Path]) -> TranslationConfig:
    """Load a :class:`TranslationConfig` from a YAML file.

    An empty file yields the defaults.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return TranslationConfig.model_validate(data or {})


__all__ = ["ReaderOptions", "WriterOptions", "GraphOptions", "TranslationConfig", "load_config"]
