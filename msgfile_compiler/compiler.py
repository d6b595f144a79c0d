"""One compilation: scan, pick a backend, emit transactionally.

WHY: The CLI, the control-file runner and the tests all need the same
sequence (validate paths, scan the source, load symbols when needed,
run the chosen emitter) and the same guarantee that a failed run
leaves no half-written artifact behind.

HOW: compile_messages() takes a CompileOptions value, resolves the
output path, scans the source into a CatalogPlan and runs the emitter
registered for the output mode into a temporary file created next to
the destination. The temporary file is renamed over the destination
only after the emitter returns; on any error it is deleted.

RULES:
- Default output: input stem + backend extension, in the current directory
- Output path equal to the input path raises SameInputOutputPathError
- Symbol files are only loaded for textual ("asm") output
- MemoryError is reported as AllocationFailureError
- The destination is either the complete new artifact or untouched
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Tuple

from msgfile_compiler.config import load_include_env
from msgfile_compiler.core.ir import CatalogPlan, CountryInfo, SymbolTable
from msgfile_compiler.core.scanner import scan_source
from msgfile_compiler.core.symbols import load_symbol_table
from msgfile_compiler.emitters import EMITTERS
from msgfile_compiler.emitters.base import EmitOptions, EmitResult
from msgfile_compiler.errors import (
    AllocationFailureError,
    OpenFailureError,
    SameInputOutputPathError,
    UsageError,
)

logger = logging.getLogger(__name__)


@dataclass
class CompileOptions:
    """Everything one compilation needs besides the source text.

    Attributes:
        input_path: The message definition file.
        output_path: Destination; derived from input_path when None.
        mode: "catalog" (binary) or "asm" (assembler source).
        symbol_syntax: "asm" (.INC) or "header" (.H) symbol files.
        include: Include path option (';'-separated), or None.
        include_env: INCLUDE value; read from the environment when None.
        language_family: Country block language family id.
        language_version: Country block language sub id.
        codepages: Up to 16 codepage numbers.
        extension_block: Append the extension trailer (catalog only).
    """

    input_path: Path
    output_path: Optional[Path] = None
    mode: str = "catalog"
    symbol_syntax: str = "asm"
    include: Optional[str] = None
    include_env: Optional[str] = None
    language_family: int = 0
    language_version: int = 0
    codepages: Tuple[int, ...] = field(default_factory=tuple)
    extension_block: bool = False


@dataclass
class CompileResult:
    """What a successful compilation produced."""

    plan: CatalogPlan
    output_path: Path
    emitter_name: str
    emitted: EmitResult


def default_output_path(input_path: Path, extension: str) -> Path:
    """Input file stem plus the backend extension, in the current directory."""
    return Path(input_path.stem + extension)


def _same_path(first: Path, second: Path) -> bool:
    try:
        if first.exists() and second.exists():
            return os.path.samefile(first, second)
    except OSError:
        pass
    return first.resolve() == second.resolve()


def _file_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


@contextlib.contextmanager
def atomic_output(path: Path) -> Iterator[BinaryIO]:
    """Yield a temporary binary file that replaces ``path`` on success.

    WHY: The catalog is written in several passes (header, messages,
    index patch, trailer). Any failure in between must not leave a
    truncated catalog where the old one used to be.

    HOW: mkstemp() in the destination directory (so the final rename
    stays on one filesystem), yield the open file, then os.replace().
    Any exception removes the temporary file and propagates.

    RULES:
    - OpenFailureError if the temporary file cannot be created or renamed
    - The destination is never opened for writing directly
    """
    directory = path.parent if str(path.parent) else Path(".")
    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=directory
        )
    except OSError as exc:
        raise OpenFailureError(path, exc.strerror or str(exc)) from exc

    try:
        with os.fdopen(fd, "w+b") as fh:
            yield fh
        os.chmod(tmp_name, _file_mode())
        os.replace(tmp_name, path)
    except BaseException as exc:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        logger.debug("Discarded partial output %s", tmp_name)
        if isinstance(exc, OSError):
            raise OpenFailureError(path, exc.strerror or str(exc)) from exc
        raise


def compile_messages(options: CompileOptions) -> CompileResult:
    """Compile one message definition file.

    Args:
        options: Paths, output mode and country data for this run.

    Returns:
        CompileResult with the plan, final output path and emitter summary.
    """
    if options.mode not in EMITTERS:
        raise UsageError(f"unknown output mode {options.mode!r}")
    emitter = EMITTERS[options.mode]()

    input_path = Path(options.input_path)
    if options.output_path is not None:
        output_path = Path(options.output_path)
    else:
        output_path = default_output_path(input_path, emitter.extension)

    if _same_path(input_path, output_path):
        raise SameInputOutputPathError(f"input file is the same as output file: {output_path}")

    try:
        plan = scan_source(input_path)

        symbols = SymbolTable()
        if options.mode == "asm":
            env_path = options.include_env
            if env_path is None:
                env_path = load_include_env()
            symbols = load_symbol_table(options.include, env_path, options.symbol_syntax)

        emit_options = EmitOptions(
            country=CountryInfo(
                language_family=options.language_family,
                language_version=options.language_version,
                codepages=tuple(options.codepages),
                filename=str(output_path),
            ),
            extension_block=options.extension_block,
            symbols=symbols,
        )

        with atomic_output(output_path) as fh:
            emitted = emitter.emit(plan, fh, emit_options)
    except MemoryError as exc:
        raise AllocationFailureError("out of memory while compiling") from exc

    logger.info("%s written to %s", emitter.name, output_path)
    return CompileResult(
        plan=plan,
        output_path=output_path,
        emitter_name=emitter.name,
        emitted=emitted,
    )
