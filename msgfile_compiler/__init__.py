"""Message File Compiler: builds OS/2-style message catalogs from text.

WHY: Programs look up their user-facing messages by number in a compiled
catalog rather than carrying the strings themselves. Message authors
write a loosely formatted text file; this package turns it into the
byte-exact ``.MSG`` catalog (or into assembler source with labels).

HOW: Three-stage pipeline: scan (discover identifier, count, index
width), parse (one shared line state machine that yields normalized
message records), emit (pluggable backends: binary catalog or assembler
text). Each stage is independently testable.

RULES:
- Both backends consume the same parser; there is exactly one copy of
  the line classification and normalization rules
- The scan result (CatalogPlan) is immutable and shared read-only
- A failed compilation never leaves a half-written artifact behind
"""

__version__ = "1.1.0"
