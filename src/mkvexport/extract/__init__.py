"""mkvextract drivers, one per asset category.

Usage:
    from mkvexport.extract import extract_tracks, ToolOptions

    result = extract_tracks(metadata, pattern="$f_$i", options=ToolOptions())
"""

from mkvexport.extract.attachments import extract_attachments
from mkvexport.extract.base import DriverOutcome, DriverResult, ProgressCallback, ToolOptions
from mkvexport.extract.chapters import extract_chapter_format, extract_chapters
from mkvexport.extract.timecodes import extract_timecodes
from mkvexport.extract.tracks import extract_tracks

__all__ = [
    "DriverOutcome",
    "DriverResult",
    "ProgressCallback",
    "ToolOptions",
    "extract_attachments",
    "extract_chapter_format",
    "extract_chapters",
    "extract_timecodes",
    "extract_tracks",
]
