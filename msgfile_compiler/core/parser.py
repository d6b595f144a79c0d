"""Message parser/normalizer: the one line state machine both backends share.

WHY: The binary catalog and the assembler output must agree byte for
byte on what a message contains. Keeping the line classification, the
type check, the separator rule and the line-ending fixups in a single
generator means the two backends cannot drift apart.

HOW: iter_messages() walks the source lines after the identifier line
and classifies each one:
  comment       : ';' in column 0, skipped without touching the message
  new message   : starts with the identifier; closes the previous record
  continuation  : anything else; appended to the current record
Every slice (the text part of a message line, or a whole continuation
line) goes through normalize_slice() before it is appended. Records are
yielded when the next message line starts and at end of input.

RULES:
- Type letter at column 7 must be one of E W I H P ?
- '?' messages always get the body CR LF; the rest of the line is ignored
- Column 8 must be ':' (MissingSeparatorError otherwise)
- Text starts at column 10 when column 9 is a space; without the space
  the text starts at column 9 and a warning is logged
- Numbers start at the plan's first message number, one per message line
- Continuation text before the first message is dropped with a warning
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from msgfile_compiler.config import (
    COLON_COLUMN,
    COMMENT_PREFIX,
    IDENTIFIER_LENGTH,
    SEPARATOR_COLUMN,
    TEXT_COLUMN,
    TYPE_COLUMN,
)
from msgfile_compiler.core.ir import CatalogPlan, MessageRecord, MessageType
from msgfile_compiler.errors import (
    InvalidMessageTypeError,
    MissingSeparatorError,
    OpenFailureError,
)

logger = logging.getLogger(__name__)

CRLF = b"\r\n"
PLACEHOLDER_END = b"%0\r\n"
PLACEHOLDER_FILL = b"\x00\x00\x00\x00"


def normalize_slice(data: bytes) -> bytes:
    """Apply the line-ending and %0 fixups to one body slice.

    WHY: Authors use any editor, so a slice may end in CR LF, in a bare
    LF, or in nothing at all (last line without newline). Catalog bodies
    need exactly one CR LF per line. A trailing ``%0`` marks a message
    that must not end with a line break; it is blanked out with NULs in
    place so the entry length stays the same.

    HOW:
    1. If the slice does not end in CR LF, drop a trailing LF or CR and
       append CR LF.
    2. If it now ends in ``%0`` CR LF, overwrite those four bytes with
       four NUL bytes.

    RULES:
    - A slice already ending in CR LF passes step 1 unchanged
    - Step 2 never changes the length
    """
    if not data.endswith(CRLF):
        if data.endswith(b"\n") or data.endswith(b"\r"):
            data = data[:-1]
        data += CRLF
    if data.endswith(PLACEHOLDER_END):
        data = data[: -len(PLACEHOLDER_END)] + PLACEHOLDER_FILL
    return data


def parse_message_line(line: bytes, line_number: int = 0) -> tuple[MessageType, bytes]:
    """Split a message line into its type and its raw text slice.

    Raises InvalidMessageTypeError for an unknown type letter and
    MissingSeparatorError when the colon after the type is absent.
    """
    letter = line[TYPE_COLUMN:TYPE_COLUMN + 1]
    message_type = MessageType.from_letter(letter)
    if message_type is None:
        shown = letter.decode("latin-1") if letter else "end of line"
        raise InvalidMessageTypeError(
            f"bad message type {shown!r}, expected one of E W I H P ?",
            line_number=line_number,
        )

    if message_type is MessageType.GENERIC:
        return message_type, CRLF

    if line[COLON_COLUMN:COLON_COLUMN + 1] != b":":
        raise MissingSeparatorError(
            "expected ':' after the message type",
            line_number=line_number,
        )

    if line[SEPARATOR_COLUMN:SEPARATOR_COLUMN + 1] == b" ":
        return message_type, line[TEXT_COLUMN:]

    logger.warning(
        "line %d: no space after ':', message text starts right after the colon",
        line_number,
    )
    return message_type, line[SEPARATOR_COLUMN:]


def iter_messages(
    lines: Iterable[bytes],
    identifier: bytes,
    first_number: int,
    start_line: int = 1,
) -> Iterator[MessageRecord]:
    """Turn raw source lines into normalized MessageRecords.

    Args:
        lines: Raw lines (with terminators) following the identifier line.
        identifier: The 3-byte component identifier.
        first_number: Number assigned to the first message.
        start_line: Source line number of the first item in ``lines``.

    Yields:
        One MessageRecord per message line, in source order.
    """
    number = first_number
    current: MessageRecord | None = None
    parts: list[bytes] = []

    for line_number, line in enumerate(lines, start=start_line):
        if line.startswith(COMMENT_PREFIX):
            continue

        if line[:IDENTIFIER_LENGTH] == identifier:
            if current is not None:
                current.body = b"".join(parts)
                yield current
            message_type, text = parse_message_line(line, line_number)
            current = MessageRecord(
                number=number,
                message_type=message_type,
                body=b"",
                line_number=line_number,
            )
            parts = [normalize_slice(text)]
            number += 1
            continue

        if current is None:
            logger.warning(
                "line %d: text before the first message is ignored", line_number
            )
            continue
        parts.append(normalize_slice(line))

    if current is not None:
        current.body = b"".join(parts)
        yield current


def read_messages(plan: CatalogPlan) -> Iterator[MessageRecord]:
    """Re-read the plan's source from just after the identifier line.

    WHY: Both emitters make the second pass the same way; this is that
    pass, so neither emitter opens or positions the source itself.

    RULES:
    - Starts at plan.data_offset, numbering lines from plan.data_line
    - OpenFailureError if the source can no longer be opened
    """
    try:
        fh = open(plan.source_path, "rb")
    except OSError as exc:
        raise OpenFailureError(plan.source_path, exc.strerror or str(exc)) from exc

    with fh:
        fh.seek(plan.data_offset)
        yield from iter_messages(
            fh,
            plan.identifier,
            plan.first_message,
            start_line=plan.data_line,
        )
