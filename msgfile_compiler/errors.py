"""Typed errors raised by the scanner, parser, emitters and CLI.

WHY: Every failure of a compilation is fatal for that compilation, but
the CLI still needs to tell them apart: each one maps to its own exit
status and message, and the compiler must clean up the partial output
before the error reaches the user.

HOW: CompileError is the common base and carries an ``exit_code``.
Parse errors also carry the 1-based source line number. The CLI catches
CompileError once, prints the message plus the usage line, and exits
with the error's code.

RULES:
- Raise at the point of detection; never retry
- Never call sys.exit() below the CLI
- exit_code values are stable and unique per error kind
"""

from __future__ import annotations


class CompileError(Exception):
    """Base class for every error that aborts a compilation."""

    exit_code = 1

    def __init__(self, message: str, line_number: int | None = None) -> None:
        self.message = message
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class UsageError(CompileError):
    """Raised for invalid command-line syntax or option values."""

    exit_code = 2


class OpenFailureError(CompileError):
    """Raised when the source cannot be read or the destination written.

    WHY: File errors surface as OSError from many call sites; wrapping
    them keeps the CLI's single handler simple.

    RULES:
    - path is the file that failed
    - The original OSError is chained as __cause__
    """

    exit_code = 3

    def __init__(self, path: object, reason: str) -> None:
        self.path = path
        super().__init__(f"cannot open {path}: {reason}")


class MalformedIdentifierError(CompileError):
    """Raised when the first non-comment line is not a 3-character identifier."""

    exit_code = 4


class InvalidMessageTypeError(CompileError):
    """Raised when a message line's type letter is not one of E W I H P ?."""

    exit_code = 5


class MissingSeparatorError(CompileError):
    """Raised when a message line has no colon after its type letter."""

    exit_code = 6


class AllocationFailureError(CompileError):
    """Raised when the interpreter runs out of memory mid-compilation."""

    exit_code = 7


class LanguageOutOfRangeError(CompileError):
    """Raised when the language family id is outside 1..34."""

    exit_code = 8


class LanguageSubIdOutOfRangeError(CompileError):
    """Raised when a family/sub id pair is not in the language table."""

    exit_code = 9


class SameInputOutputPathError(CompileError):
    """Raised when the output path resolves to the input file."""

    exit_code = 10


class IndexOverflowError(CompileError):
    """Raised when an offset or count does not fit its catalog field.

    WHY: A 2-byte index cannot address past 0xFFFF and the header stores
    the message count in 16 bits. Packing a larger value would silently
    corrupt the catalog.
    """

    exit_code = 11
