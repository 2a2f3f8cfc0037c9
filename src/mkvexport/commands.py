"""Command handlers for the mkvexport CLI.

Each handler returns a process exit code; the Typer layer only parses
arguments and raises ``typer.Exit`` with the returned value.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path

from mkvexport.batch import (
    BatchResult,
    ExportOptions,
    FileReport,
    export_files,
    identify_files,
    resolve_inputs,
)
from mkvexport.cli._app import (
    EXIT_ASSET_FAILED,
    EXIT_INPUT_ERROR,
    EXIT_OK,
    EXIT_TOOL_NOT_FOUND,
)
from mkvexport.cli._context import RuntimeContext
from mkvexport.exceptions import InputResolutionError, ToolNotFoundError
from mkvexport.logging_setup import setup_logging
from mkvexport.ui import console, fatal_error, print_error_summary, print_warning

logger = logging.getLogger(__name__)

TOOL_HINT = "Install MKVToolNix or set MKVEXPORT_MKVEXTRACT / MKVEXPORT_MKVMERGE"


def _configure_logging(runtime: RuntimeContext, verbosity: int, log_file: Path | None) -> None:
    settings = runtime.require_settings()
    setup_logging(
        log_level=settings.log_level,
        log_file=log_file or settings.log_file,
        verbosity=verbosity,
    )


def _print_identification_errors(reports: Sequence[FileReport]) -> None:
    errors: list[tuple[Path, Exception]] = [
        (r.path, r.error) for r in reports if r.error is not None
    ]
    print_error_summary(errors, title="Not identified")


def _print_report(result: BatchResult, verbosity: int) -> None:
    from mkvexport.ui.tables import print_batch_summary, print_file_tables

    if verbosity >= 1:
        for error in result.selector_errors:
            print_warning(error.message)

    if verbosity >= 2:
        for report in result.files:
            if report.metadata is not None:
                print_file_tables(report.metadata)
                console.print()

    if verbosity >= 1:
        _print_identification_errors(result.files)
        failures: list[tuple[Path, Exception]] = [
            (report.path, error)
            for report in result.files
            for driver_result in report.results
            for error in driver_result.errors
        ]
        print_error_summary(failures, title="Extraction errors")
        print_batch_summary(result)


def cmd_export(
    runtime: RuntimeContext,
    paths: Sequence[Path],
    options: ExportOptions,
    *,
    recursive: bool = False,
    json_output: bool = False,
    strict: bool = False,
    log_file: Path | None = None,
) -> int:
    """Resolve inputs, run the export batch and report the outcome."""
    from mkvexport.ui.progress import batch_progress

    _configure_logging(runtime, options.verbosity, log_file)

    try:
        files = resolve_inputs(paths, recursive=recursive)
        logger.info(f"Exporting from {len(files)} file(s)")
        with batch_progress(enabled=options.verbosity >= 1 and not json_output) as observer:
            result = export_files(files, options, observer=observer)
    except ToolNotFoundError as e:
        fatal_error(e.message, TOOL_HINT)
        return EXIT_TOOL_NOT_FOUND
    except InputResolutionError as e:
        fatal_error(e.message, "Pass Matroska files or directories containing them")
        return EXIT_INPUT_ERROR

    if json_output:
        console.print_json(json.dumps(result.to_list(), ensure_ascii=False))
    else:
        _print_report(result, options.verbosity)

    if strict and result.failed:
        return EXIT_ASSET_FAILED
    return EXIT_OK


def cmd_info(
    runtime: RuntimeContext,
    paths: Sequence[Path],
    options: ExportOptions,
    *,
    recursive: bool = False,
    json_output: bool = False,
) -> int:
    """Identify files and print their tracks and attachments."""
    from mkvexport.ui.tables import print_file_tables

    _configure_logging(runtime, options.verbosity, None)

    try:
        files = resolve_inputs(paths, recursive=recursive)
        reports = identify_files(files, options)
    except ToolNotFoundError as e:
        fatal_error(e.message, TOOL_HINT)
        return EXIT_TOOL_NOT_FOUND
    except InputResolutionError as e:
        fatal_error(e.message, "Pass Matroska files or directories containing them")
        return EXIT_INPUT_ERROR

    if json_output:
        console.print_json(
            json.dumps([r.metadata.to_dict() for r in reports if r.metadata], ensure_ascii=False)
        )
        return EXIT_OK

    for report in reports:
        if report.metadata is not None:
            print_file_tables(report.metadata, show_states=False)
            console.print()
    _print_identification_errors(reports)
    return EXIT_OK
