"""Core scanning, parsing and data model modules.

WHY: The core package holds the format-agnostic heart of the compiler:
the data model, the scanner that plans a catalog, the one shared message
parser, and the symbol table loader. Both emitters consume these.

HOW: ir.py defines the data structures, scanner.py builds the
CatalogPlan, parser.py turns source lines into MessageRecords, and
symbols.py loads message-number → label mappings for textual output.

RULES:
- No emitter-specific logic here
- The parser is the only place that classifies and normalizes lines
"""
