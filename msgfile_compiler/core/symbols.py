"""Symbol table loader: message number → label from definition files.

WHY: Assembler output labels every message with the symbolic name the
rest of the code base uses for it (TXT_<name> / END_<name>). Those names
live in shared include files (BASEMID and the UTILMD* family), written
either as assembler EQUs or as C #defines.

HOW: build_search_path() joins the explicit include option and the
INCLUDE environment value. load_symbol_table() visits every directory
on that path, finds the base file and the family files for the chosen
syntax, and parses each line against a fixed three-token pattern.

RULES:
- Search path order: include option, then INCLUDE; '.' if both are empty
- Assembler syntax: "<symbol> <op> <number>", op is 1-3 chars (EQU, =)
- Header syntax:    "#define <symbol> <number>"
- Non-matching lines are ignored silently
- The first label found for a number wins (file order, then line order)
- A file that cannot be read is skipped with a warning
- Finding no files at all is a warning; the table is simply empty
"""

from __future__ import annotations

import fnmatch
import logging
import re
from pathlib import Path

from msgfile_compiler.config import DEFAULT_SEARCH_PATH, SYMBOL_FILES
from msgfile_compiler.core.ir import SymbolTable

logger = logging.getLogger(__name__)

_ASM_LINE_RE = re.compile(r"^\s*(\S{1,80})\s+(\S{1,3})\s+([+-]?\d+)")
_HEADER_LINE_RE = re.compile(r"^\s*#define\s+(\S{1,80})\s+([+-]?\d+)")


def build_search_path(include: str | None, env_path: str | None) -> list[str]:
    """Join the include option and the environment path into directories.

    Empty entries are dropped. Returns ['.'] when nothing is left.
    """
    combined = ";".join(part for part in (include, env_path) if part)
    entries = [entry.strip() for entry in combined.split(";")]
    entries = [entry for entry in entries if entry]
    return entries or [DEFAULT_SEARCH_PATH]


def parse_symbol_line(line: str, syntax: str) -> tuple[str, int] | None:
    """Match one definition line; return (label, number) or None."""
    if syntax == "asm":
        match = _ASM_LINE_RE.match(line)
        if match:
            return match.group(1), int(match.group(3))
    else:
        match = _HEADER_LINE_RE.match(line)
        if match:
            return match.group(1), int(match.group(2))
    return None


def find_symbol_files(directory: Path, syntax: str) -> list[Path]:
    """List the base file and the family files present in one directory.

    WHY: The definition files come from DOS-era trees where case is
    inconsistent (BaseMid.inc, UTILMD01.INC), so names are matched
    case-insensitively.

    HOW: The base file comes first, then the family matches sorted by
    upper-cased name so repeated runs load the same table.
    """
    base_name, family_pattern = SYMBOL_FILES[syntax]
    try:
        names = sorted(
            (entry.name for entry in directory.iterdir() if entry.is_file()),
            key=str.upper,
        )
    except OSError as exc:
        logger.warning("Cannot list include directory %s: %s", directory, exc)
        return []

    found = [directory / name for name in names if name.upper() == base_name]
    found.extend(
        directory / name
        for name in names
        if fnmatch.fnmatchcase(name.upper(), family_pattern)
        and name.upper() != base_name
    )
    return found


def load_symbol_file(path: Path, syntax: str, table: SymbolTable) -> int:
    """Add every matching line of one file to the table.

    Returns the number of labels stored.
    """
    stored = 0
    with open(path, "r", encoding="latin-1") as fh:
        for line in fh:
            parsed = parse_symbol_line(line, syntax)
            if parsed is None:
                continue
            label, number = parsed
            if table.add(number, label):
                stored += 1
            else:
                logger.debug(
                    "%s: %s ignored, message %d already labelled %s",
                    path, label, number, table.lookup(number),
                )
    return stored


def load_symbol_table(
    include: str | None,
    env_path: str | None,
    syntax: str = "asm",
) -> SymbolTable:
    """Build the SymbolTable for textual output.

    WHY: The assembler emitter only needs number → label lookups, so a
    dict keyed by message number replaces a linear scan per message.

    HOW: For each search path directory, find the definition files for
    ``syntax`` and load them in order. Unreadable files are skipped.

    RULES:
    - syntax is "asm" (.INC files) or "header" (.H files)
    - Zero files found logs a warning and returns an empty table

    Args:
        include: Explicit include path option (';'-separated), or None.
        env_path: INCLUDE environment value, or None.
        syntax: Definition file syntax to search for.

    Returns:
        The loaded SymbolTable.
    """
    if syntax not in SYMBOL_FILES:
        raise ValueError(f"unknown symbol syntax: {syntax!r}")

    table = SymbolTable()
    files_read = 0
    for entry in build_search_path(include, env_path):
        directory = Path(entry)
        if not directory.is_dir():
            logger.debug("Include path entry %s is not a directory", directory)
            continue
        for path in find_symbol_files(directory, syntax):
            try:
                stored = load_symbol_file(path, syntax, table)
            except OSError as exc:
                logger.warning("Cannot read symbol file %s: %s", path, exc)
                continue
            files_read += 1
            logger.info("Loaded %d labels from %s", stored, path)

    if files_read == 0:
        base_name, family_pattern = SYMBOL_FILES[syntax]
        logger.warning(
            "No symbol files (%s, %s) found on the include path; "
            "messages will be emitted without labels",
            base_name,
            family_pattern,
        )
    return table
