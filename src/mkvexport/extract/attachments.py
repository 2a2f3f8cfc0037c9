"""Attachment extraction (``mkvextract SRC attachments N:PATH ...``).

Attachments complete one by one: mkvextract confirms each of them with

    The attachment #1, ID 1234, MIME type font/ttf, size 5120, is written to 'x.ttf'.

where ``#1`` is the attachment ID given on the command line and ``ID`` is the
attachment's UID. Anything still MARKED when the tool exits has failed.
"""

from __future__ import annotations

import logging
from pathlib import Path

from mkvexport.exceptions import ExtractionError
from mkvexport.extract.base import (
    ATTACHMENT_WRITTEN_RE,
    DriverOutcome,
    DriverResult,
    ProgressCallback,
    StateAccess,
    ToolOptions,
    abort_batch,
    build_command,
    classify_common,
    ensure_parent,
    exit_message,
    fail_marked,
    tool_failed,
)
from mkvexport.models import Attachment, ExtractionState, FileMetadata
from mkvexport.naming import attachment_output_path
from mkvexport.utils.tools import LineStream

logger = logging.getLogger(__name__)

CATEGORY = "attachments"


def _find_attachment(metadata: FileMetadata, number: int, uid: int) -> Attachment | None:
    return metadata.attachment_by_id(number) or metadata.attachment_by_uid(uid)


def _clear_path(attachment: Attachment) -> None:
    attachment.path = None


ATTACHMENT_ACCESS: StateAccess[Attachment] = StateAccess(
    get_state=lambda a: a.state,
    set_state=lambda a, s: a.set_state(s),
    clear_path=_clear_path,
)


def extract_attachments(
    metadata: FileMetadata,
    *,
    pattern: str,
    output_dir: Path | None = None,
    options: ToolOptions | None = None,
    on_progress: ProgressCallback | None = None,
) -> DriverResult:
    """
    Extract every MARKED attachment of a file in a single mkvextract call.

    Returns:
        DriverResult for the call (SKIPPED/EMPTY when nothing ran).
    """
    options = options or ToolOptions()

    selected = [a for a in metadata.attachments if a.state == ExtractionState.MARKED]
    if not selected:
        logger.info(f"{metadata.path.name}: no attachments to extract")
        outcome = DriverOutcome.EMPTY if not metadata.attachments else DriverOutcome.SKIPPED
        return DriverResult(category=CATEGORY, outcome=outcome)

    specs: list[str] = []
    try:
        for attachment in selected:
            attachment.path = attachment_output_path(metadata, attachment, pattern, output_dir)
            ensure_parent(attachment.path)
            specs.append(f"{attachment.id}:{attachment.path}")
    except OSError as e:
        return abort_batch(selected, ATTACHMENT_ACCESS, e, category=CATEGORY, log=logger)

    stream = LineStream(
        build_command(options, metadata.path, "attachments", specs),
        tail_size=options.tail_size,
    )
    logger.info(f"{metadata.path.name}: extracting {len(selected)} attachment(s)")

    errors: list[ExtractionError] = []
    reason = "mkvextract did not confirm the attachment"
    try:
        for line in stream:
            kind, value = classify_common(line, CATEGORY, logger, on_progress)
            if kind == "error":
                errors.append(ExtractionError(value, category=CATEGORY, command=stream.command))
                fail_marked(selected, ATTACHMENT_ACCESS)
                continue
            if kind != "other":
                continue

            m = ATTACHMENT_WRITTEN_RE.match(line)
            if not m:
                logger.info(line)
                continue

            number, uid = int(m.group(1)), int(m.group(2))
            attachment = _find_attachment(metadata, number, uid)
            if attachment is None or attachment.state != ExtractionState.MARKED:
                logger.debug(f"Unexpected attachment #{number} (UID {uid}) in mkvextract output")
                continue
            attachment.set_state(ExtractionState.SUCCEEDED)
            logger.info(
                f"Attachment #{number} ({m.group(3)}, {m.group(4)} bytes) written to {m.group(5)}"
            )
    except OSError as e:
        logger.error(f"mkvextract {CATEGORY}: could not run mkvextract: {e}")
        reason = f"could not run mkvextract: {e}"

    pending = [a for a in selected if a.state == ExtractionState.MARKED]
    if pending:
        if stream.return_code is not None and tool_failed(stream.return_code):
            reason = exit_message(stream.return_code)
        for attachment in pending:
            attachment.set_state(ExtractionState.FAILED)
            _clear_path(attachment)
            errors.append(
                ExtractionError(
                    f"{attachment.file_name}: {reason}",
                    category=CATEGORY,
                    command=stream.command,
                    return_code=stream.return_code,
                )
            )

    succeeded = sum(1 for a in selected if a.state == ExtractionState.SUCCEEDED)
    failed = sum(1 for a in selected if a.state == ExtractionState.FAILED)
    if failed:
        logger.debug(f"mkvextract {CATEGORY} output tail:\n{stream.tail_text()}")

    return DriverResult(
        category=CATEGORY,
        outcome=DriverOutcome.FAILED if failed else DriverOutcome.COMPLETED,
        extracted=succeeded,
        failed=failed,
        errors=errors,
        output_tail=list(stream.tail),
        return_code=stream.return_code,
        command=stream.command,
    )
