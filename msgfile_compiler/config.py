"""Configuration constants, catalog layout values, and .env loading.

WHY: Centralizes every fixed number of the catalog format (header size,
index-width tripwire, field widths) and the handful of environment
overrides, so neither the scanner nor the emitters hard-code them.

HOW: python-dotenv loads the .env file on import. Format constants are
module-level values; environment-driven values are read through small
functions so tests can change the environment after import.

RULES:
- Layout constants describe the v2 catalog format and never change at runtime
- INCLUDE is read from the environment (or .env) only by load_include_env()
- MSGF_LOG_LEVEL selects the default logging level for the CLI
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the directory the tool is run from
load_dotenv()

# ---------------------------------------------------------------------------
# Source file conventions
# ---------------------------------------------------------------------------

COMMENT_PREFIX = b";"
IDENTIFIER_LENGTH = 3
MESSAGE_NUMBER_WIDTH = 4

# Column layout of a message line: ABC0001E: text
TYPE_COLUMN = 7
COLON_COLUMN = 8
SEPARATOR_COLUMN = 9
TEXT_COLUMN = 10

# ---------------------------------------------------------------------------
# Catalog layout (v2)
# ---------------------------------------------------------------------------

MAGIC_SIGNATURE = b"\xffMKMSGF\x00"
FORMAT_VERSION = 0x0002
HEADER_SIZE = 0x1F
RESERVED_MARK = b"MKG\x00\x00"
EXTENSION_OFFSET_FIELD = 0x16

INDEX_WIDTH_THRESHOLD = 40000
"""Raw input sizes up to this many bytes get 2-byte index entries."""

MAX_CODEPAGES = 16
COUNTRY_FILENAME_SIZE = 260

# Empty extended header: u16 length, u16 block count
EXTENSION_BLOCK = b"\x00\x00\x00\x00"

# ---------------------------------------------------------------------------
# Output naming and textual output
# ---------------------------------------------------------------------------

CATALOG_EXTENSION = ".msg"
ASSEMBLY_EXTENSION = ".asm"

ASM_LITERAL_WIDTH = 60
"""Maximum characters inside one DB string literal."""

# Symbol definition files searched on each include path entry
SYMBOL_FILES: dict[str, tuple[str, str]] = {
    "asm": ("BASEMID.INC", "UTILMD*.INC"),
    "header": ("BASEMID.H", "UTILMD*.H"),
}

DEFAULT_SEARCH_PATH = "."


def load_include_env() -> str:
    """Return the INCLUDE search path from the environment, or ''."""
    return os.getenv("INCLUDE", "").strip()


def default_log_level() -> str:
    """Return the default log level name (MSGF_LOG_LEVEL, default WARNING)."""
    return os.getenv("MSGF_LOG_LEVEL", "WARNING").strip().upper() or "WARNING"
