"""Translation pipeline: input bytes -> reader -> canonical model -> writer -> output bytes."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import structlog
import yaml

from schema_mesh_core.config import TranslationConfig, load_config
from schema_mesh_core.errors import SchemaMeshError, TranslationAborted, TranslationWarning
from schema_mesh_core.model import SchemaModel
from schema_mesh_ingest.reader_base import ReaderInput
from schema_mesh_orchestrator.registry import FormatRegistry, format_from_path

logger = structlog.get_logger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Set up structlog for command-line use.

    Console rendering on a terminal, JSON lines otherwise. Standard-library
    loggers used inside the readers and writers share the same threshold.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    logging.basicConfig(level=numeric_level, stream=sys.stderr)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer() if sys.stderr.isatty() else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


@dataclass(frozen=True)
class TranslationResult:
    schema: SchemaModel
    output: bytes
    warnings: Tuple[TranslationWarning, ...] = ()


def translate(
    data: ReaderInput,
    source_format: str,
    target_format: str,
    registry: FormatRegistry,
    config: Optional[TranslationConfig] = None,
) -> TranslationResult:
    """Translate an in-memory document from one format to another.

    Args:
        data: Source document as text or bytes
        source_format: Identifier of the reader to use, e.g. ``ttl``
        target_format: Identifier of the writer to use, e.g. ``yaml``
        registry: Registry to resolve both identifiers against
        config: Reader/writer options; defaults apply when omitted

    Returns:
        TranslationResult with the intermediate model, the output bytes and
        any reader warnings

    Raises:
        UnsupportedFormat: If either identifier is unknown
        TranslationAborted: If ``config.fail_on_warnings`` is set and the
            reader reported warnings
        SchemaMeshError: Any parse, structural, mapping or write failure
    """
    config = config or TranslationConfig()
    log = logger.bind(source_format=source_format, target_format=target_format)

    reader = registry.reader_for(source_format)
    writer = registry.writer_for(target_format)

    log.info("translation_starting", input_bytes=len(data))
    try:
        result = reader.read(data, config.reader)
        if result.warnings and config.fail_on_warnings:
            raise TranslationAborted(
                f"Reader reported {len(result.warnings)} warning(s) and fail_on_warnings is set",
                list(result.warnings),
            )
        output = writer.render(result.schema, config.writer)
    except SchemaMeshError as e:
        log.error("translation_failed", error=str(e), error_type=type(e).__name__)
        raise

    log.info(
        "translation_complete",
        schema=result.schema.name,
        classes=len(result.schema.classes),
        slots=len(result.schema.slots),
        warnings=len(result.warnings),
        output_bytes=len(output),
    )
    return TranslationResult(schema=result.schema, output=output, warnings=result.warnings)


def translate_file(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    registry: FormatRegistry,
    source_format: Optional[str] = None,
    target_format: Optional[str] = None,
    config: Optional[TranslationConfig] = None,
) -> TranslationResult:
    """Translate a file, replacing ``output_path`` atomically.

    Formats default to the file extensions. Output goes to a temporary file in
    the target directory which is renamed over ``output_path`` only once the
    writer has succeeded, so readers of ``output_path`` never see partial data.
    """
    input_path = Path(input_path)
    output_path = Path(output_path)
    source_format = source_format or format_from_path(input_path)
    target_format = target_format or format_from_path(output_path)

    result = translate(input_path.read_bytes(), source_format, target_format, registry, config)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=output_path.parent, prefix=f".{output_path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(result.output)
        os.replace(tmp_name, output_path)
    except OSError:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise

    logger.info("output_written", path=str(output_path), bytes=len(result.output))
    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schema-mesh",
        description="Translate ontology and schema definitions through the canonical model",
    )
    parser.add_argument("input", type=str, nargs="?", help="Input file")
    parser.add_argument("output", type=str, nargs="?", help="Output file (replaced atomically)")
    parser.add_argument("--from", dest="source_format", default=None, help="Input format (default: input extension)")
    parser.add_argument("--to", dest="target_format", default=None, help="Output format (default: output extension)")
    parser.add_argument("--config", type=str, default=None, help="Translation config YAML")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Log level (default: INFO)",
    )
    parser.add_argument("--list-formats", action="store_true", help="List registered formats and exit")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line entry point. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    registry = FormatRegistry.with_defaults()
    if args.list_formats:
        print("readers: " + ", ".join(registry.readers()))
        print("writers: " + ", ".join(registry.writers()))
        return 0
    if not args.input or not args.output:
        parser.error("INPUT and OUTPUT are required")

    try:
        config = load_config(args.config) if args.config else None
        result = translate_file(
            args.input,
            args.output,
            registry,
            source_format=args.source_format,
            target_format=args.target_format,
            config=config,
        )
    except SchemaMeshError as e:
        logger.error("translation_failed", **e.to_dict())
        return 1
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error("translation_failed", error=str(e), error_type=type(e).__name__)
        return 1

    for warning in result.warnings:
        logger.warning("translation_warning", **warning.to_dict())
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry
    sys.exit(main())
