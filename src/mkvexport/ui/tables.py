"""Table formatting components for the mkvexport UI.

These render one file's tracks, attachments and chapters together with their
extraction states, plus the one-line batch summary.
"""

from __future__ import annotations

from rich.table import Table

from mkvexport.batch import BatchResult
from mkvexport.models import ExtractionState, FileMetadata, Track
from mkvexport.ui.core import console, state_markup
from mkvexport.ui.formatting import format_elapsed, format_file_size, truncate_path


def _track_state(track: Track) -> str:
    if track.state == ExtractionState.MARKED and not track.extractable:
        return "[dim]skipped[/]"
    return state_markup(track.state)


def print_tracks_table(metadata: FileMetadata, show_states: bool = True) -> None:
    """Print the tracks of a file.

    Example:
        >>> print_tracks_table(metadata)
        ┏━━━━┳━━━━━━━┳━━━━━━━━━━━━━━━━━┳━━━━━━┳━━━━━━━━━━━┓
        ┃ ID ┃ Type  ┃ Codec           ┃ Lang ┃ Track     ┃ ...
        ┡━━━━╇━━━━━━━╇━━━━━━━━━━━━━━━━━╇━━━━━━╇━━━━━━━━━━━┩
        │ 0  │ video │ V_MPEG4/ISO/AVC │ und  │ succeeded │ ...
    """
    if not metadata.tracks:
        console.print("[dim]No tracks[/]")
        return

    table = Table(title="Tracks", show_header=True, header_style="bold", title_justify="left")
    table.add_column("ID", style="dim", justify="right", width=4)
    table.add_column("Type")
    table.add_column("Codec", style="codec")
    table.add_column("Lang", style="language")
    table.add_column("Name", overflow="fold")
    if show_states:
        table.add_column("Track", justify="center")
        table.add_column("Timecodes", justify="center")
        table.add_column("Output", style="path", overflow="fold")

    for track in metadata.tracks:
        row = [
            str(track.id),
            track.type.value,
            track.codec_id or track.codec or "-",
            track.language or "-",
            track.name or "",
        ]
        if show_states:
            outputs = [truncate_path(p) for p in (track.path, track.timecodes_path) if p]
            row += [
                _track_state(track),
                state_markup(track.timecodes_state),
                "\n".join(outputs) or "-",
            ]
        table.add_row(*row)

    console.print(table)


def print_attachments_table(metadata: FileMetadata, show_states: bool = True) -> None:
    """Print the attachments of a file."""
    if not metadata.attachments:
        console.print("[dim]No attachments[/]")
        return

    table = Table(title="Attachments", show_header=True, header_style="bold", title_justify="left")
    table.add_column("ID", style="dim", justify="right", width=4)
    table.add_column("UID", style="dim")
    table.add_column("File name")
    table.add_column("MIME type", style="codec")
    table.add_column("Size", justify="right")
    if show_states:
        table.add_column("State", justify="center")
        table.add_column("Output", style="path", overflow="fold")

    for attachment in metadata.attachments:
        row = [
            str(attachment.id),
            str(attachment.uid),
            attachment.file_name,
            attachment.mime_type or "-",
            format_file_size(attachment.size),
        ]
        if show_states:
            row += [state_markup(attachment.state), truncate_path(attachment.path)]
        table.add_row(*row)

    console.print(table)


def print_chapters_table(metadata: FileMetadata) -> None:
    """Print the exported chapter formats of a file."""
    if not metadata.chapters:
        if metadata.has_chapters is False:
            console.print("[dim]No chapters[/]")
        return

    table = Table(title="Chapters", show_header=True, header_style="bold", title_justify="left")
    table.add_column("Format")
    table.add_column("State", justify="center")
    table.add_column("Output", style="path", overflow="fold")
    table.add_column("Message", style="dim", overflow="fold")

    for export in metadata.chapters:
        table.add_row(
            export.format.value,
            state_markup(export.state),
            truncate_path(export.path),
            export.message or "",
        )

    console.print(table)


def print_file_tables(metadata: FileMetadata, show_states: bool = True) -> None:
    """Print every table for one file under a title rule."""
    title = f" [dim]({metadata.title})[/]" if metadata.title else ""
    console.rule(f"[title]{metadata.path.name}[/]{title}", align="left")
    print_tracks_table(metadata, show_states=show_states)
    print_attachments_table(metadata, show_states=show_states)
    if show_states:
        print_chapters_table(metadata)
    elif metadata.has_chapters:
        console.print("[dim]Chapters: yes[/]")


def print_batch_summary(result: BatchResult) -> None:
    """Print the one-line summary of a batch.

    Example:
        >>> print_batch_summary(result)
        3 file(s): 12 succeeded, 1 failed, 0 skipped in 42.1s
    """
    failed_style = "error" if result.failed else "dim"
    line = (
        f"[title]{len(result.files)} file(s):[/] "
        f"[success]{result.succeeded} succeeded[/], "
        f"[{failed_style}]{result.failed} failed[/], "
        f"[dim]{result.skipped} skipped[/] "
        f"in {format_elapsed(result.elapsed)}"
    )
    unidentified = len(result.identification_errors)
    if unidentified:
        line += f" [error]({unidentified} not identified)[/]"
    console.print(line)
