"""Assembler source emitter: the message set as labelled DB directives.

WHY: Some components link their messages straight into the binary
instead of shipping a catalog. For those, the compiler emits assembler
source where each message is a labelled block, named after the symbol
the code already uses for the message number.

HOW: For every record from the shared parser, the message number is
looked up in the SymbolTable. A labelled message is wrapped in:
  PUBLIC TXT_<label> / TXT_<label> LABEL WORD / DW length
  ... message prefix and body ...
  END_<label> LABEL WORD / DB 0
An unlabelled message gets the prefix and body only.

RULES:
- Body text ends at the first NUL (a %0 message has no trailing line break)
- String literals hold at most ASM_LITERAL_WIDTH characters
- An embedded CR LF closes the literal and is written as ", 0DH, 0AH"
- A quote inside a literal is doubled
- Every output line ends in CR LF
- Missing labels are a warning, never an error
"""

from __future__ import annotations

import logging
from typing import BinaryIO

from msgfile_compiler.config import ASM_LITERAL_WIDTH, ASSEMBLY_EXTENSION
from msgfile_compiler.core.ir import CatalogPlan, MessageRecord
from msgfile_compiler.core.parser import CRLF, read_messages
from msgfile_compiler.emitters.base import BaseEmitter, EmitOptions, EmitResult

logger = logging.getLogger(__name__)


def _literal(text: bytes) -> bytes:
    return b"\tDB\t'" + text + b"'"


def render_body(body: bytes, width: int = ASM_LITERAL_WIDTH) -> list[bytes]:
    """Render a message body as DB directive lines (without terminators).

    WHY: Assemblers limit the length of a source line and cannot take raw
    control characters inside a string literal.

    HOW: Walk the body up to its first NUL, accumulating characters into
    the current literal. A CR LF pair flushes the literal with the two
    bytes appended numerically; a literal about to exceed ``width`` is
    flushed and a new one started.

    RULES:
    - "Hi\\r\\n" → ["\\tDB\\t'Hi', 0DH, 0AH"]
    - A CR LF with no pending text → "\\tDB\\t0DH, 0AH"
    - A doubled quote counts as two characters of width
    """
    text = body.split(b"\x00", 1)[0]
    lines: list[bytes] = []
    chunk = bytearray()
    i = 0
    while i < len(text):
        if text[i:i + 2] == CRLF:
            if chunk:
                lines.append(_literal(bytes(chunk)) + b", 0DH, 0AH")
            else:
                lines.append(b"\tDB\t0DH, 0AH")
            chunk = bytearray()
            i += 2
            continue
        piece = text[i:i + 1]
        if piece == b"'":
            piece = b"''"
        if chunk and len(chunk) + len(piece) > width:
            lines.append(_literal(bytes(chunk)))
            chunk = bytearray()
        chunk += piece
        i += 1
    if chunk:
        lines.append(_literal(bytes(chunk)))
    return lines


def render_record(plan: CatalogPlan, record: MessageRecord, label: str | None) -> list[bytes]:
    """Render one message, with its label directives when a label exists."""
    lines: list[bytes] = []
    name = label.encode("latin-1", errors="replace") if label else b""

    if label:
        lines.append(b"\tPUBLIC\tTXT_" + name)
        lines.append(b"TXT_" + name + b"\tLABEL\tWORD")
        lines.append(b"\tDW\tEND_" + name + b" - TXT_" + name + b" - 2")

    prefix = plan.identifier + b"%04d: " % record.number
    lines.append(_literal(prefix))
    lines.extend(render_body(record.body))

    if label:
        lines.append(b"END_" + name + b"\tLABEL\tWORD")
        lines.append(b"\tDB\t0")
    return lines


class AssemblyEmitter(BaseEmitter):
    """Backend that writes assembler source with symbol labels.

    RULES:
    - Labels come only from options.symbols
    - Unlabelled message numbers are reported in EmitResult.unlabelled
    """

    extension = ASSEMBLY_EXTENSION

    @property
    def name(self) -> str:
        return "Assembler source"

    def emit(self, plan: CatalogPlan, out: BinaryIO, options: EmitOptions) -> EmitResult:
        result = EmitResult()
        for record in read_messages(plan):
            label = options.symbols.lookup(record.number)
            if label is None:
                result.unlabelled.append(record.number)
                logger.warning(
                    "No symbol for message %s%04d, emitting text without labels",
                    plan.identifier_text,
                    record.number,
                )
            lines = render_record(plan, record, label)
            out.write(CRLF.join(lines) + CRLF)
            result.messages += 1

        logger.info(
            "Wrote %d messages (%d without labels)",
            result.messages,
            len(result.unlabelled),
        )
        return result
