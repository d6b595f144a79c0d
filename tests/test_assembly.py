"""Unit tests for the assembler source emitter.

WHY: Linked-in message text is only as good as the assembler source it
comes from: an unescaped quote or an over-long literal stops the build,
and a wrong label breaks every reference to the message.

HOW: render_body() and render_record() are checked line by line; the
full emitter is run on the shared sample with a two-label SymbolTable.

RULES:
- Expected lines are written out literally, tabs included.
"""

import io
import logging

from msgfile_compiler.core.ir import MessageRecord, MessageType, SymbolTable
from msgfile_compiler.core.scanner import scan_source
from msgfile_compiler.emitters import EMITTERS
from msgfile_compiler.emitters.assembly import AssemblyEmitter, render_body, render_record
from msgfile_compiler.emitters.base import EmitOptions


def _emit(plan, symbols):
    out = io.BytesIO()
    result = AssemblyEmitter().emit(plan, out, EmitOptions(symbols=symbols))
    return out.getvalue(), result


class TestRenderBody:

    def test_single_line(self):
        assert render_body(b"Hi\r\n") == [b"\tDB\t'Hi', 0DH, 0AH"]

    def test_two_lines(self):
        assert render_body(b"One\r\nTwo\r\n") == [
            b"\tDB\t'One', 0DH, 0AH",
            b"\tDB\t'Two', 0DH, 0AH",
        ]

    def test_empty_line(self):
        assert render_body(b"\r\n") == [b"\tDB\t0DH, 0AH"]

    def test_quote_doubled(self):
        assert render_body(b"It's\r\n") == [b"\tDB\t'It''s', 0DH, 0AH"]

    def test_stops_at_nul(self):
        assert render_body(b"Prompt\x00\x00\x00\x00") == [b"\tDB\t'Prompt'"]

    def test_nul_after_earlier_lines(self):
        assert render_body(b"Line\r\nAsk:\x00\x00\x00\x00") == [
            b"\tDB\t'Line', 0DH, 0AH",
            b"\tDB\t'Ask:'",
        ]

    def test_long_text_chunked(self):
        lines = render_body(b"A" * 130 + b"\r\n")
        assert lines == [
            b"\tDB\t'" + b"A" * 60 + b"'",
            b"\tDB\t'" + b"A" * 60 + b"'",
            b"\tDB\t'" + b"A" * 10 + b"', 0DH, 0AH",
        ]

    def test_custom_width(self):
        assert render_body(b"abcdef", width=4) == [b"\tDB\t'abcd'", b"\tDB\t'ef'"]

    def test_empty_body(self):
        assert render_body(b"") == []


class TestRenderRecord:

    def test_labelled(self, sample_source):
        plan = scan_source(sample_source)
        record = MessageRecord(1, MessageType.ERROR, b"Hello world\r\n")
        assert render_record(plan, record, "MSG_HELLO") == [
            b"\tPUBLIC\tTXT_MSG_HELLO",
            b"TXT_MSG_HELLO\tLABEL\tWORD",
            b"\tDW\tEND_MSG_HELLO - TXT_MSG_HELLO - 2",
            b"\tDB\t'ABC0001: '",
            b"\tDB\t'Hello world', 0DH, 0AH",
            b"END_MSG_HELLO\tLABEL\tWORD",
            b"\tDB\t0",
        ]

    def test_unlabelled(self, sample_source):
        plan = scan_source(sample_source)
        record = MessageRecord(42, MessageType.INFO, b"Plain\r\n")
        assert render_record(plan, record, None) == [
            b"\tDB\t'ABC0042: '",
            b"\tDB\t'Plain', 0DH, 0AH",
        ]


class TestAssemblyEmitter:

    def test_registered_as_asm(self):
        assert EMITTERS["asm"] is AssemblyEmitter
        assert AssemblyEmitter.extension == ".asm"

    def test_sample_output(self, sample_source, sample_symbols):
        data, result = _emit(scan_source(sample_source), sample_symbols)
        assert result.messages == 4
        assert result.unlabelled == [3, 4]
        assert data == (
            b"\tPUBLIC\tTXT_MSG_HELLO\r\n"
            b"TXT_MSG_HELLO\tLABEL\tWORD\r\n"
            b"\tDW\tEND_MSG_HELLO - TXT_MSG_HELLO - 2\r\n"
            b"\tDB\t'ABC0001: '\r\n"
            b"\tDB\t'Hello world', 0DH, 0AH\r\n"
            b"END_MSG_HELLO\tLABEL\tWORD\r\n"
            b"\tDB\t0\r\n"
            b"\tPUBLIC\tTXT_MSG_SECOND\r\n"
            b"TXT_MSG_SECOND\tLABEL\tWORD\r\n"
            b"\tDW\tEND_MSG_SECOND - TXT_MSG_SECOND - 2\r\n"
            b"\tDB\t'ABC0002: '\r\n"
            b"\tDB\t'Second', 0DH, 0AH\r\n"
            b"\tDB\t'  continued line', 0DH, 0AH\r\n"
            b"END_MSG_SECOND\tLABEL\tWORD\r\n"
            b"\tDB\t0\r\n"
            b"\tDB\t'ABC0003: '\r\n"
            b"\tDB\t0DH, 0AH\r\n"
            b"\tDB\t'ABC0004: '\r\n"
            b"\tDB\t'Prompt'\r\n"
        )

    def test_every_line_ends_in_crlf(self, sample_source, sample_symbols):
        data, _ = _emit(scan_source(sample_source), sample_symbols)
        assert data.endswith(b"\r\n")
        assert b"\n" not in data.replace(b"\r\n", b"")

    def test_missing_labels_warn(self, sample_source, caplog):
        with caplog.at_level(logging.WARNING):
            _, result = _emit(scan_source(sample_source), SymbolTable())
        assert result.unlabelled == [1, 2, 3, 4]
        assert "ABC0001" in caplog.text
        assert "ABC0004" in caplog.text
