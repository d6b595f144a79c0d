"""Data model dataclasses shared by the scanner, parser and emitters.

WHY: The scanner, the parser and both emitters all need the component
identifier, the message numbering, the index width and the normalized
message bodies. Passing explicit, typed values between the stages keeps
the two read passes over the source independent of each other.

HOW: Five types:
  MessageType   : the six message kinds and their source letters
  MessageRecord : one normalized message (number, type, body)
  CatalogPlan   : immutable scan result plus the derived region offsets
  CountryInfo   : locale metadata written into the country block
  SymbolTable   : message number → label mapping for textual output

RULES:
- CatalogPlan and CountryInfo are frozen; nothing mutates them after creation
- MessageRecord.body always ends in CR LF or in four NUL bytes
- MessageRecord.entry (type letter + body) is what a catalog stores
- SymbolTable keeps the first label seen for a number
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path

from msgfile_compiler.config import HEADER_SIZE

COUNTRY_BLOCK_SIZE = 302
"""Size of the packed country block: 1+2+2+2+2+32+260+1 bytes."""


class MessageType(enum.Enum):
    """Message kinds, valued by their source letter."""

    ERROR = "E"
    WARNING = "W"
    INFO = "I"
    HELP = "H"
    PROGRAM = "P"
    GENERIC = "?"

    @property
    def letter(self) -> bytes:
        return self.value.encode("ascii")

    @classmethod
    def from_letter(cls, letter: bytes) -> MessageType | None:
        """Map a one-byte source letter to its type, or None if unknown."""
        try:
            return cls(letter.decode("ascii"))
        except (UnicodeDecodeError, ValueError):
            return None


@dataclass
class MessageRecord:
    """One message assembled from a message line and its continuations.

    RULES:
    - number: sequence number, first message number + position
    - message_type: the kind parsed from column 7
    - body: normalized bytes, each source slice ending in CR LF (or in
      four NULs where the slice ended in %0)
    - line_number: 1-based source line of the message line
    """

    number: int
    message_type: MessageType
    body: bytes
    line_number: int = 0

    @property
    def entry(self) -> bytes:
        """Bytes stored in the catalog: the type letter, then the body."""
        return self.message_type.letter + self.body


@dataclass(frozen=True)
class CatalogPlan:
    """Immutable result of the source scan.

    WHY: The identifier and the index width are decided once, before any
    message is parsed, and both emitters must see the same values. A
    frozen value passed by reference replaces shared mutable state.

    HOW: scan_source() fills the scanned fields; the region offsets are
    derived properties so they can never disagree with the scan.

    RULES:
    - identifier: exactly 3 bytes
    - index_width: 2 or 4
    - data_offset: byte offset of the first line after the identifier line
    - data_line: 1-based line number found at data_offset
    """

    source_path: Path
    identifier: bytes
    message_count: int
    first_message: int
    index_width: int
    source_size: int
    data_offset: int
    data_line: int = 1

    @property
    def index_offset(self) -> int:
        return HEADER_SIZE

    @property
    def index_size(self) -> int:
        return self.message_count * self.index_width

    @property
    def country_offset(self) -> int:
        return self.index_offset + self.index_size

    @property
    def messages_offset(self) -> int:
        return self.country_offset + COUNTRY_BLOCK_SIZE

    @property
    def identifier_text(self) -> str:
        return self.identifier.decode("latin-1")


@dataclass(frozen=True)
class CountryInfo:
    """Locale metadata for the country block.

    RULES:
    - codepages: at most 16 entries (checked by the CLI and the emitter)
    - filename: the final output file name, echoed into the block
    - bytes_per_char is always 1 (no DBCS support)
    """

    language_family: int = 0
    language_version: int = 0
    codepages: tuple[int, ...] = ()
    filename: str = ""
    country: int = 0
    bytes_per_char: int = 1


@dataclass
class SymbolTable:
    """Message number → label mapping built from symbol definition files."""

    labels: dict[int, str] = field(default_factory=dict)

    def add(self, number: int, label: str) -> bool:
        """Insert a label unless the number already has one.

        Returns True when the label was stored.
        """
        if number in self.labels:
            return False
        self.labels[number] = label
        return True

    def lookup(self, number: int) -> str | None:
        return self.labels.get(number)

    def __len__(self) -> int:
        return len(self.labels)

    def __contains__(self, number: object) -> bool:
        return number in self.labels
