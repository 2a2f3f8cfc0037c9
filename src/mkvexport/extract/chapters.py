"""Chapter extraction.

One ``mkvextract SRC chapters [--simple] -`` call per requested format. The
chapters arrive on stdout and are written by us:

- output starting with an XML declaration is parsed and re-serialized
- ``CHAPTER01=...`` / ``CHAPTER01NAME=...`` lines are written as text
- anything else means the file has no chapters (nothing is written)

Files that mkvmerge reported without chapters are not run at all. The
chapter document is read from the combined output, so ``-v`` is never passed
in this mode.

An ``Error:`` line or a failing exit code aborts that format only.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path

from mkvexport.exceptions import ExtractionError
from mkvexport.extract.base import (
    DriverOutcome,
    DriverResult,
    ProgressCallback,
    ToolOptions,
    build_command,
    classify_common,
    ensure_parent,
    exit_message,
    tool_failed,
)
from mkvexport.models import ChapterExport, ChapterFormat, ExtractionState, FileMetadata
from mkvexport.naming import chapter_output_path
from mkvexport.utils.tools import LineStream

logger = logging.getLogger(__name__)

CATEGORY = "chapters"

XML_DECLARATION = "<?xml"
XML_ROOT_END = "</Chapters>"
SIMPLE_CHAPTER_RE = re.compile(r"^CHAPTER\d+(?:NAME)?=")


def _mode_flags(chapter_format: ChapterFormat) -> list[str]:
    return ["--simple"] if chapter_format == ChapterFormat.SIMPLE else []


def _write_xml(lines: Sequence[str], path: Path) -> None:
    root = ET.fromstring("\n".join(lines))
    ET.indent(root)
    ET.ElementTree(root).write(path, encoding="utf-8", xml_declaration=True)


def _write_simple(lines: Sequence[str], path: Path) -> None:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def _fail(export: ChapterExport, error: ExtractionError) -> None:
    export.set_state(ExtractionState.FAILED)
    export.path = None
    export.message = error.message


def extract_chapter_format(
    metadata: FileMetadata,
    chapter_format: ChapterFormat,
    *,
    pattern: str,
    output_dir: Path | None = None,
    options: ToolOptions | None = None,
    on_progress: ProgressCallback | None = None,
) -> DriverResult:
    """
    Export the chapters of a file in one format.

    A ChapterExport is appended to ``metadata.chapters`` while the tool runs;
    it is removed again when the file turns out to have no chapters.
    """
    options = replace(options or ToolOptions(), verbose=False)
    category = f"{CATEGORY} ({chapter_format.value})"

    if metadata.has_chapters is False:
        logger.info(f"{metadata.path.name}: no chapters found ({chapter_format.value})")
        return DriverResult(category=CATEGORY, outcome=DriverOutcome.EMPTY)

    export = ChapterExport(
        format=chapter_format,
        path=chapter_output_path(metadata, chapter_format, pattern, output_dir),
    )
    metadata.chapters.append(export)

    stream = LineStream(
        build_command(
            options,
            metadata.path,
            "chapters",
            ["-"],
            mode_flags=_mode_flags(chapter_format),
        ),
        tail_size=options.tail_size,
    )

    errors: list[ExtractionError] = []
    xml_lines: list[str] = []
    simple_lines: list[str] = []
    xml_open = False
    try:
        for line in stream:
            kind, value = classify_common(line, category, logger, on_progress)
            if kind == "error":
                errors.append(ExtractionError(value, category=CATEGORY, command=stream.command))
            elif kind != "other":
                continue
            elif xml_open or (not xml_lines and line.lstrip().startswith(XML_DECLARATION)):
                xml_lines.append(line)
                xml_open = not line.rstrip().endswith(XML_ROOT_END)
            elif SIMPLE_CHAPTER_RE.match(line):
                simple_lines.append(line)
            else:
                logger.info(line)
    except OSError as e:
        errors.append(
            ExtractionError(
                f"Could not run mkvextract: {e}", category=CATEGORY, command=stream.command
            )
        )

    def result(outcome: DriverOutcome, extracted: int = 0) -> DriverResult:
        return DriverResult(
            category=CATEGORY,
            outcome=outcome,
            extracted=extracted,
            failed=1 if outcome == DriverOutcome.FAILED else 0,
            errors=errors,
            output_tail=list(stream.tail),
            return_code=stream.return_code,
            command=stream.command,
        )

    return_code = stream.return_code
    if not errors and return_code is not None and tool_failed(return_code):
        errors.append(
            ExtractionError(
                exit_message(return_code),
                category=CATEGORY,
                command=stream.command,
                return_code=return_code,
                stdout=stream.tail_text(),
            )
        )
    if errors:
        _fail(export, errors[0])
        logger.debug(f"mkvextract {category} output tail:\n{stream.tail_text()}")
        return result(DriverOutcome.FAILED)

    assert export.path is not None
    try:
        if xml_lines:
            ensure_parent(export.path)
            _write_xml(xml_lines, export.path)
        elif simple_lines:
            ensure_parent(export.path)
            _write_simple(simple_lines, export.path)
        else:
            metadata.chapters.remove(export)
            logger.info(f"{metadata.path.name}: no chapters found ({chapter_format.value})")
            return result(DriverOutcome.EMPTY)
    except (ET.ParseError, OSError) as e:
        errors.append(
            ExtractionError(f"Could not write chapters: {e}", category=CATEGORY, command=stream.command)
        )
        _fail(export, errors[-1])
        return result(DriverOutcome.FAILED)

    export.set_state(ExtractionState.SUCCEEDED)
    logger.info(f"{metadata.path.name}: chapters written to {export.path}")
    return result(DriverOutcome.COMPLETED, extracted=1)


def extract_chapters(
    metadata: FileMetadata,
    formats: Sequence[ChapterFormat],
    *,
    pattern: str,
    output_dir: Path | None = None,
    options: ToolOptions | None = None,
    on_progress: ProgressCallback | None = None,
) -> list[DriverResult]:
    """Export chapters in every requested format; a failing format does not stop the next."""
    if not formats:
        logger.info(f"{metadata.path.name}: no chapters requested")
        return [DriverResult(category=CATEGORY, outcome=DriverOutcome.SKIPPED)]

    return [
        extract_chapter_format(
            metadata,
            chapter_format,
            pattern=pattern,
            output_dir=output_dir,
            options=options,
            on_progress=on_progress,
        )
        for chapter_format in formats
    ]
