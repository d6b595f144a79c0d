"""Binary catalog emitter: writes the v2 ``.MSG`` message file.

WHY: Message retrieval reads a catalog by seeking: header → index entry
for the message number → message entry. Every offset in the index has to
point at the exact first byte of its entry as physically written.

HOW: The header and the country block only depend on the scan, so they
are written first with a zero-filled index between them. The messages
are then streamed from the parser while their output positions are
recorded. Finally the index region alone is rewritten with the real
offsets, and the optional extension trailer is appended and its offset
patched into the header.

RULES:
- Layout: header (0x1F) | index (count × width) | country block (302) | entries
- Each entry is the type letter followed by the normalized body
- Index entries are little-endian u16 or u32, per the plan's width
- An offset or count too large for its field raises IndexOverflowError
- Output is deterministic: same input and options, same bytes
"""

from __future__ import annotations

import logging
import os
import struct
from typing import BinaryIO

from msgfile_compiler.config import (
    CATALOG_EXTENSION,
    COUNTRY_FILENAME_SIZE,
    EXTENSION_BLOCK,
    EXTENSION_OFFSET_FIELD,
    FORMAT_VERSION,
    MAGIC_SIGNATURE,
    MAX_CODEPAGES,
    RESERVED_MARK,
)
from msgfile_compiler.core.ir import CatalogPlan, CountryInfo
from msgfile_compiler.core.parser import read_messages
from msgfile_compiler.emitters.base import BaseEmitter, EmitOptions, EmitResult
from msgfile_compiler.errors import CompileError, IndexOverflowError, UsageError

logger = logging.getLogger(__name__)

# magic, identifier, count, first, 16-bit flag, version, index offset,
# country offset, extension offset, reserved
HEADER_STRUCT = struct.Struct("<8s3sHHBHHHI5s")

# bytes/char, country, family, version, codepage count, codepages, filename, filler
COUNTRY_STRUCT = struct.Struct(f"<BHHHH{MAX_CODEPAGES}H{COUNTRY_FILENAME_SIZE}sB")

EXTENSION_OFFSET_STRUCT = struct.Struct("<I")

_INDEX_FORMATS = {2: "H", 4: "I"}


def _check_fits(value: int, size: int, what: str) -> None:
    limit = (1 << (8 * size)) - 1
    if value > limit:
        raise IndexOverflowError(f"{what} {value} does not fit in {size} bytes")


def pack_header(plan: CatalogPlan, extension_offset: int = 0) -> bytes:
    """Pack the fixed-size catalog header for a plan."""
    _check_fits(plan.message_count, 2, "message count")
    _check_fits(plan.first_message, 2, "first message number")
    _check_fits(plan.country_offset, 2, "country block offset")
    return HEADER_STRUCT.pack(
        MAGIC_SIGNATURE,
        plan.identifier,
        plan.message_count,
        plan.first_message,
        1 if plan.index_width == 2 else 0,
        FORMAT_VERSION,
        plan.index_offset,
        plan.country_offset,
        extension_offset,
        RESERVED_MARK,
    )


def pack_country_block(country: CountryInfo) -> bytes:
    """Pack the country block.

    The file name is encoded as Latin-1 (unmappable characters become
    '?') and truncated so the field always keeps a terminating NUL.
    """
    if len(country.codepages) > MAX_CODEPAGES:
        raise UsageError(f"more than {MAX_CODEPAGES} codepages given")
    codepages = list(country.codepages) + [0] * (MAX_CODEPAGES - len(country.codepages))
    for codepage in codepages:
        _check_fits(codepage, 2, "codepage")
    filename = country.filename.encode("latin-1", errors="replace")
    filename = filename[: COUNTRY_FILENAME_SIZE - 1]
    return COUNTRY_STRUCT.pack(
        country.bytes_per_char,
        country.country,
        country.language_family,
        country.language_version,
        len(country.codepages),
        *codepages,
        filename,
        0,
    )


def pack_index(offsets: list[int], width: int) -> bytes:
    """Pack index offsets at a fixed entry width (2 or 4)."""
    for offset in offsets:
        _check_fits(offset, width, "message offset")
    return struct.pack(f"<{len(offsets)}{_INDEX_FORMATS[width]}", *offsets)


class CatalogEmitter(BaseEmitter):
    """Backend that writes the binary message catalog.

    WHY: This is the artifact programs load at run time; the index has
    to be byte-exact or every message lookup lands in the wrong place.

    HOW: Header, placeholder index and country block first; then one
    pass over the parser recording out.tell() before each entry; then
    seek back and fill in the index; then the optional trailer.

    RULES:
    - The number of records parsed must equal the scanned message count
    - The index is rewritten in place; nothing else moves
    """

    extension = CATALOG_EXTENSION

    @property
    def name(self) -> str:
        return "Binary catalog"

    def emit(self, plan: CatalogPlan, out: BinaryIO, options: EmitOptions) -> EmitResult:
        out.write(pack_header(plan))
        out.write(bytes(plan.index_size))
        out.write(pack_country_block(options.country))

        offsets: list[int] = []
        for record in read_messages(plan):
            offsets.append(out.tell())
            out.write(record.entry)

        if len(offsets) != plan.message_count:
            raise CompileError(
                f"scanned {plan.message_count} messages but parsed {len(offsets)}"
            )

        out.seek(plan.index_offset)
        out.write(pack_index(offsets, plan.index_width))

        extension_offset = 0
        if options.extension_block:
            out.seek(0, os.SEEK_END)
            extension_offset = out.tell()
            out.write(EXTENSION_BLOCK)
            out.seek(EXTENSION_OFFSET_FIELD)
            out.write(EXTENSION_OFFSET_STRUCT.pack(extension_offset))
            logger.info("Extension block written at 0x%X", extension_offset)

        out.seek(0, os.SEEK_END)
        logger.info(
            "Wrote %d messages, %d-byte index at 0x%X",
            len(offsets),
            plan.index_width,
            plan.index_offset,
        )
        return EmitResult(
            messages=len(offsets),
            offsets=offsets,
            extension_offset=extension_offset,
        )
