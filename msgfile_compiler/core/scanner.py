"""Source scanner: first pass over the message definition file.

WHY: The catalog header and the index are written before any message
body, so the component identifier, the message count, the first message
number and the index width must all be known up front. One cheap read
of the source collects them.

HOW: scan_source() reads the file in binary mode line by line. Comment
lines (';' in column 0) are skipped. The first other line is the
identifier line; every later line starting with the identifier counts
as one message, and the first of them supplies the first message
number. The index width comes from the raw file size on disk.

RULES:
- The identifier line is exactly 3 bytes plus a line terminator
- A message line is any line whose first 3 bytes equal the identifier
- The first message number is the 4-byte field after the identifier,
  decoded like C atoi (leading digits, 0 if none)
- Index width: 2 bytes if the raw size is <= 40000, else 4
- The width decision is made here once and never revisited
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from msgfile_compiler.config import (
    COMMENT_PREFIX,
    IDENTIFIER_LENGTH,
    INDEX_WIDTH_THRESHOLD,
    MESSAGE_NUMBER_WIDTH,
)
from msgfile_compiler.core.ir import CatalogPlan
from msgfile_compiler.errors import MalformedIdentifierError, OpenFailureError

logger = logging.getLogger(__name__)


def choose_index_width(source_size: int) -> int:
    """Return the index entry width (2 or 4) for a raw source size."""
    return 2 if source_size <= INDEX_WIDTH_THRESHOLD else 4


def split_terminator(line: bytes) -> tuple[bytes, bytes]:
    """Split a raw line into its content and its line terminator."""
    if line.endswith(b"\r\n"):
        return line[:-2], b"\r\n"
    if line.endswith(b"\n"):
        return line[:-1], b"\n"
    return line, b""


def atoi(field: bytes | str) -> int:
    """Decode a numeric field the way C atoi does.

    Used for the message number after the identifier and for the
    ``-l`` language ids. Leading blanks are skipped, then digits are
    taken up to the first non-digit. A field without leading digits
    decodes to 0.
    """
    if isinstance(field, str):
        field = field.encode("latin-1", errors="replace")
    digits = bytearray()
    for value in field.lstrip(b" \t"):
        if not 0x30 <= value <= 0x39:
            break
        digits.append(value)
    return int(digits) if digits else 0


def scan_source(path: str | Path) -> CatalogPlan:
    """Scan a message definition file and plan its catalog.

    WHY: Both emitters need the same identifier, numbering and index
    width; computing them once here and freezing them in a CatalogPlan
    keeps the two passes consistent.

    HOW: Read lines, skip comments, validate the identifier line and
    remember the offset just after it, then count message lines. The
    raw size comes from the filesystem, not from the bytes parsed.

    RULES:
    - OpenFailureError if the file cannot be opened or stat'ed
    - MalformedIdentifierError if there is no identifier line, or it is
      not exactly 3 bytes followed by a terminator

    Args:
        path: Path to the message definition text file.

    Returns:
        The immutable CatalogPlan for this source.
    """
    source_path = Path(path)
    identifier: bytes | None = None
    data_offset = 0
    data_line = 1
    message_count = 0
    first_message = 0
    position = 0

    try:
        with open(source_path, "rb") as fh:
            for line_number, line in enumerate(fh, start=1):
                position += len(line)

                if identifier is None:
                    if line.startswith(COMMENT_PREFIX):
                        continue
                    content, terminator = split_terminator(line)
                    if len(content) != IDENTIFIER_LENGTH or not terminator:
                        raise MalformedIdentifierError(
                            "component identifier must be exactly "
                            f"{IDENTIFIER_LENGTH} characters on its own line",
                            line_number=line_number,
                        )
                    identifier = content
                    data_offset = position
                    data_line = line_number + 1
                    continue

                if line[:IDENTIFIER_LENGTH] == identifier:
                    message_count += 1
                    if message_count == 1:
                        start = IDENTIFIER_LENGTH
                        first_message = atoi(
                            line[start:start + MESSAGE_NUMBER_WIDTH]
                        )
        source_size = os.path.getsize(source_path)
    except OSError as exc:
        raise OpenFailureError(source_path, exc.strerror or str(exc)) from exc

    if identifier is None:
        raise MalformedIdentifierError("no component identifier line found")

    plan = CatalogPlan(
        source_path=source_path,
        identifier=identifier,
        message_count=message_count,
        first_message=first_message,
        index_width=choose_index_width(source_size),
        source_size=source_size,
        data_offset=data_offset,
        data_line=data_line,
    )
    logger.info(
        "Scanned %s: identifier %s, %d messages from %04d, %d-byte index",
        source_path,
        plan.identifier_text,
        plan.message_count,
        plan.first_message,
        plan.index_width,
    )
    return plan
