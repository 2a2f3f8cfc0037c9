"""Export and inspection commands.

Commands: export, info
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Annotated, Any

import typer

from mkvexport.cli._app import EXIT_ERROR, EXPORT_COMMANDS, INSPECT_COMMANDS
from mkvexport.cli._context import get_runtime_context

PathsArg = Annotated[
    list[Path],
    typer.Argument(
        metavar="PATHS...",
        help="Matroska files or directories to scan.",
        show_default=False,
    ),
]
RecursiveOpt = Annotated[
    bool,
    typer.Option("--recursive", "-r", help="Scan directories recursively."),
]
VerbosityOpt = Annotated[
    int | None,
    typer.Option(
        "--verbosity",
        "-v",
        min=0,
        max=4,
        help="0 silent, 1 summary, 2 +tables, 3 +tool output, 4 +full tool verbosity.",
        show_default=False,
    ),
]
JsonOpt = Annotated[
    bool,
    typer.Option("--json", "-j", help="Print annotated metadata as JSON instead of tables."),
]


def _run(handler: Callable[..., int], *args: Any, **kwargs: Any) -> None:
    """Run a command handler and exit with its code; unexpected errors exit 1."""
    from mkvexport.ui import print_exception

    try:
        code = handler(*args, **kwargs)
    except (typer.Exit, typer.Abort):
        raise
    except Exception as e:
        print_exception(e, "Unexpected error")
        raise typer.Exit(EXIT_ERROR) from e
    raise typer.Exit(code)


def register_export_commands(app: typer.Typer) -> None:
    """Register export/info commands on the app."""

    @app.command("export", rich_help_panel=EXPORT_COMMANDS)
    def export(
        ctx: typer.Context,
        paths: PathsArg,
        tracks: Annotated[
            list[str] | None,
            typer.Option(
                "--tracks",
                "-t",
                help="Track selectors: all, none, video, audio, subtitles or track IDs.",
            ),
        ] = None,
        attachments: Annotated[
            list[str] | None,
            typer.Option("--attachments", "-a", help="Attachment selectors: all, none, fonts."),
        ] = None,
        chapters: Annotated[
            list[str] | None,
            typer.Option("--chapters", "-c", help="Chapter formats: xml, simple, none."),
        ] = None,
        timecodes: Annotated[
            list[str] | None,
            typer.Option(
                "--timecodes",
                "-T",
                help="Timecode selectors (same vocabulary as --tracks).",
            ),
        ] = None,
        output_dir: Annotated[
            Path | None,
            typer.Option(
                "--output-dir",
                "-o",
                help="Output directory (default: next to each input file).",
                file_okay=False,
            ),
        ] = None,
        track_pattern: Annotated[
            str | None,
            typer.Option("--track-pattern", help="Track filename pattern ($f $i $t $n $l)."),
        ] = None,
        attachment_pattern: Annotated[
            str | None,
            typer.Option("--attachment-pattern", help="Attachment filename pattern ($f $i $n)."),
        ] = None,
        chapter_pattern: Annotated[
            str | None,
            typer.Option("--chapter-pattern", help="Chapter filename pattern ($f $n)."),
        ] = None,
        timecode_pattern: Annotated[
            str | None,
            typer.Option(
                "--timecode-pattern",
                help="Timecode filename pattern ($f $i $t $n $l $v).",
            ),
        ] = None,
        parse_fully: Annotated[
            bool,
            typer.Option("--parse-fully", help="Let mkvextract parse the whole file."),
        ] = False,
        raw: Annotated[
            bool,
            typer.Option("--raw", help="Extract raw track data without codec headers."),
        ] = False,
        fullraw: Annotated[
            bool,
            typer.Option("--fullraw", help="Extract raw track data including codec private data."),
        ] = False,
        recursive: RecursiveOpt = False,
        verbosity: VerbosityOpt = None,
        json_output: JsonOpt = False,
        log_file: Annotated[
            Path | None,
            typer.Option("--log-file", help="Also write a DEBUG log to this file.", dir_okay=False),
        ] = None,
        strict: Annotated[
            bool,
            typer.Option("--strict", help="Exit with code 5 if any asset failed."),
        ] = False,
    ) -> None:
        """Extract tracks, attachments, chapters and timecodes.

        Files are processed one after another; for each file tracks,
        attachments, chapters and timecodes are extracted in that order.

        [bold]Examples:[/]
          mkvexport export movie.mkv -t video,audio
          mkvexport export Anime/ -r -t subtitles -a fonts -c xml,simple
          mkvexport export movie.mkv -t 0 -T 0 -o out/ --json

        [bold]Pattern variables:[/]
          [cyan]$f[/] input name  [cyan]$i[/] ID/UID  [cyan]$t[/] type
          [cyan]$n[/] name  [cyan]$l[/] language  [cyan]$v[/] "v2"
        """
        from mkvexport.batch import options_from_settings
        from mkvexport.commands import cmd_export

        if raw and fullraw:
            raise typer.BadParameter("--raw and --fullraw are mutually exclusive")

        runtime = get_runtime_context(ctx.obj)
        options = options_from_settings(
            runtime.require_settings(),
            tracks=tracks or [],
            attachments=attachments or [],
            chapters=chapters or [],
            timecodes=timecodes or [],
            output_dir=output_dir,
            track_pattern=track_pattern,
            attachment_pattern=attachment_pattern,
            chapter_pattern=chapter_pattern,
            timecode_pattern=timecode_pattern,
            parse_fully=parse_fully or None,
            raw=True if raw else (False if fullraw else None),
            fullraw=True if fullraw else (False if raw else None),
            verbosity=verbosity,
        )
        _run(
            cmd_export,
            runtime,
            paths,
            options,
            recursive=recursive,
            json_output=json_output,
            strict=strict,
            log_file=log_file,
        )

    @app.command("info", rich_help_panel=INSPECT_COMMANDS)
    def info(
        ctx: typer.Context,
        paths: PathsArg,
        recursive: RecursiveOpt = False,
        verbosity: VerbosityOpt = None,
        json_output: JsonOpt = False,
    ) -> None:
        """Show tracks, attachments and chapters without extracting.

        [bold]Examples:[/]
          mkvexport info movie.mkv
          mkvexport info Shows/ -r --json
        """
        from mkvexport.batch import options_from_settings
        from mkvexport.commands import cmd_info

        runtime = get_runtime_context(ctx.obj)
        options = options_from_settings(runtime.require_settings(), verbosity=verbosity)
        _run(cmd_info, runtime, paths, options, recursive=recursive, json_output=json_output)
