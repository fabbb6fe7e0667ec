"""Schema Mesh Orchestrator - format registry and translation pipeline."""

from .registry import FormatRegistry, format_from_path
from .pipeline import TranslationResult, configure_logging, main, translate, translate_file

__all__ = [
    "FormatRegistry",
    "format_from_path",
    "TranslationResult",
    "configure_logging",
    "translate",
    "translate_file",
    "main",
]
