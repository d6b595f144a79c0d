"""Output emitter registry: binary catalog or assembler source.

WHY: The compiler and the CLI need a single lookup to find the backend
for the requested output mode. The binary catalog and the assembler
source share the scanner and the parser; only the emitter differs.

HOW: EMITTERS maps output mode keys to emitter *classes* (not
instances). Callers instantiate as needed: ``EMITTERS["catalog"]()``.

RULES:
- Keys are the output modes used by the compiler options
- Values are BaseEmitter subclasses (not instances)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from msgfile_compiler.emitters.assembly import AssemblyEmitter
from msgfile_compiler.emitters.catalog import CatalogEmitter

if TYPE_CHECKING:
    from msgfile_compiler.emitters.base import BaseEmitter

EMITTERS: dict[str, type[BaseEmitter]] = {
    "catalog": CatalogEmitter,
    "asm": AssemblyEmitter,
}
