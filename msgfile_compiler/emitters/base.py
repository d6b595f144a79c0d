"""Abstract base emitter plus its option and result containers.

WHY: The binary catalog and the assembler source are two renderings of
the same parsed message set. A common interface lets the compiler pick
a backend by output mode and drive it without knowing its format.

HOW: BaseEmitter is an ABC with a ``name`` property, a default output
``extension`` and an ``emit()`` method that writes into a seekable
binary stream. EmitOptions carries everything a backend may need
beyond the plan; EmitResult reports what was written.

RULES:
- Subclasses MUST implement ``name`` and ``emit()``
- ``emit()`` gets its records from parser.read_messages(plan); no
  backend parses lines on its own
- ``emit()`` writes only to the stream it is given; the caller owns
  the file and its cleanup
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import BinaryIO

from msgfile_compiler.core.ir import CatalogPlan, CountryInfo, SymbolTable


@dataclass
class EmitOptions:
    """Backend inputs that do not come from the source scan.

    Attributes:
        country: Locale metadata for the catalog's country block.
        extension_block: Append the 4-byte extension trailer (catalog only).
        symbols: Message labels for textual output; empty means no labels.
    """

    country: CountryInfo = field(default_factory=CountryInfo)
    extension_block: bool = False
    symbols: SymbolTable = field(default_factory=SymbolTable)


@dataclass
class EmitResult:
    """Summary of one backend run.

    Attributes:
        messages: Number of message records written.
        offsets: Final index offsets (catalog only, else empty).
        extension_offset: File offset of the extension block, 0 if none.
        unlabelled: Message numbers emitted without labels (textual only).
    """

    messages: int = 0
    offsets: list[int] = field(default_factory=list)
    extension_offset: int = 0
    unlabelled: list[int] = field(default_factory=list)


class BaseEmitter(ABC):
    """Abstract base for all output backends.

    To add a new output format:
    1. Create a new module in emitters/
    2. Subclass BaseEmitter
    3. Implement name and emit(), set extension
    4. Register in EMITTERS in emitters/__init__.py
    """

    extension: str = ""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable backend name, e.g. 'Binary catalog'."""

    @abstractmethod
    def emit(self, plan: CatalogPlan, out: BinaryIO, options: EmitOptions) -> EmitResult:
        """Write the plan's messages to ``out``.

        Args:
            plan: The immutable scan result for the source file.
            out: A writable, seekable binary stream positioned at 0.
            options: Country data, extension flag and symbol labels.

        Returns:
            An EmitResult describing what was written.
        """
