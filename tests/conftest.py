"""Shared test fixtures for the msgfile_compiler test suite.

WHY: Most test modules compile the same small message file and check
the catalog or assembler bytes against hand-computed offsets. Keeping
the sample and its expected layout in one place keeps those numbers
consistent across modules.

HOW: SAMPLE_SOURCE covers every line kind: a leading comment, the
identifier line, a plain message, a message with a continuation line,
a comment between messages, a '?' message and a %0 message. Fixtures
write it (or any other bytes) into tmp_path.

RULES:
- Sample bytes use CR LF line endings, like real DOS-era sources.
- EXPECTED_ENTRIES and EXPECTED_OFFSETS are computed by hand from the
  catalog layout, never by running the emitter.
"""

from pathlib import Path

import pytest

from msgfile_compiler.core.ir import SymbolTable


SAMPLE_SOURCE = (
    b"; Sample message file\r\n"
    b"ABC\r\n"
    b"ABC0001E: Hello world\r\n"
    b"ABC0002W: Second\r\n"
    b"  continued line\r\n"
    b"; note between messages\r\n"
    b"ABC0003?: ignored\r\n"
    b"ABC0004I: Prompt%0\r\n"
)

# Type letter + normalized body, in message order
EXPECTED_ENTRIES = [
    b"E" + b"Hello world\r\n",
    b"W" + b"Second\r\n" + b"  continued line\r\n",
    b"?" + b"\r\n",
    b"I" + b"Prompt" + b"\x00\x00\x00\x00",
]

# Header 0x1F + index 4 x 2 bytes + country block 302 bytes = 341
EXPECTED_OFFSETS = [341, 355, 382, 385]
EXPECTED_SIZE = 396


@pytest.fixture
def write_source(tmp_path):
    """Return a helper that writes bytes to tmp_path/<name> and returns the path."""

    def _write(data: bytes, name: str = "sample.txt") -> Path:
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture
def sample_source(write_source):
    """Path to SAMPLE_SOURCE written into tmp_path."""
    return write_source(SAMPLE_SOURCE)


@pytest.fixture
def include_dir(tmp_path):
    """A directory holding BASEMID.INC and one UTILMD family file."""
    directory = tmp_path / "include"
    directory.mkdir()
    (directory / "BASEMID.INC").write_text(
        "; base message ids\r\n"
        "MSG_HELLO      EQU  1\r\n"
        "MSG_SECOND     EQU  2\r\n",
        encoding="latin-1",
    )
    (directory / "utilmd01.inc").write_text(
        "MSG_DUPLICATE  EQU  1\n"
        "MSG_PROMPT     =    4\n",
        encoding="latin-1",
    )
    return directory


@pytest.fixture
def sample_symbols():
    """SymbolTable labelling messages 1 and 2 of the sample."""
    table = SymbolTable()
    table.add(1, "MSG_HELLO")
    table.add(2, "MSG_SECOND")
    return table


@pytest.fixture
def expected_entries():
    """Catalog entries (type letter + body) of SAMPLE_SOURCE."""
    return list(EXPECTED_ENTRIES)


@pytest.fixture
def expected_offsets():
    """Index offsets of SAMPLE_SOURCE's entries in a 2-byte-index catalog."""
    return list(EXPECTED_OFFSETS)
