"""Command-line interface for the message file compiler.

WHY: Message files are compiled from build scripts and makefiles that
were written for the original IBM tool, so the CLI has to accept both
the modern ``-x`` switches and the legacy ``infile outfile /X`` form,
plus ``@controlfile`` batches that replay several invocations.

HOW: Uses argparse for the switches after a small normalization pass
that maps legacy ``/X`` switches and upper-case letters onto the
argparse spelling. Each invocation builds a CompileOptions value and
calls compile_messages(). Status messages go to stderr; errors print
the usage line plus ``Error: ...`` and set the exit status from the
error's exit_code.

RULES:
- Positional: input file, optional output file
- -p CP (repeatable, max 16), -l FAM[,SUB] (once), -e, -a | -c, -i PATH, -v | -q
- -d (DBCS) is recognised and rejected
- A '/' switch is translated only when it cannot be a file path:
  "/X" alone, or "/P" / "/L" followed by digits and commas
- @file runs each non-blank line as its own invocation; the exit status
  is the first non-zero status, and later lines still run
- No arguments at all prints the short usage and exits 0
- --list-languages needs no input file
"""

from __future__ import annotations

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import List, Optional

from msgfile_compiler import __version__
from msgfile_compiler.compiler import CompileOptions, CompileResult, compile_messages
from msgfile_compiler.config import MAX_CODEPAGES, default_log_level
from msgfile_compiler.errors import CompileError, OpenFailureError, UsageError
from msgfile_compiler.languages import LANGUAGES, decode_language_option

_SWITCH_LETTERS = "acdehilpqv?"
_LEGACY_VALUE_RE = re.compile(r"^/([pPlL])([0-9,]+)$")


def _status(msg: str, quiet: bool = False) -> None:
    """Print a status message to stderr unless quiet."""
    if not quiet:
        print(msg, file=sys.stderr, flush=True)


def normalize_switches(argv: List[str]) -> List[str]:
    """Map legacy and upper-case switches onto argparse spelling.

    WHY: The original tool accepted ``/V``, ``-V`` and ``-v`` alike.
    argparse is case-sensitive and only knows ``-``.

    HOW: A ``-X...`` token whose letter is a known switch gets its letter
    lower-cased. A ``/X`` token is only rewritten when it is exactly two
    characters, or a ``/P`` or ``/L`` with a numeric value attached, so
    an absolute path such as ``/data/app.txt`` is left alone.

    RULES:
    - "/V" → "-v", "-E" → "-e", "/P850" → "-p850", "/?" → "-h"
    - "--long" options pass through untouched
    """
    result: List[str] = []
    for token in argv:
        if len(token) >= 2 and token[0] == "-" and token[1] != "-":
            letter = token[1].lower()
            if letter in _SWITCH_LETTERS:
                token = "-" + ("h" if letter == "?" else letter) + token[2:]
        elif len(token) == 2 and token[0] == "/" and token[1].lower() in _SWITCH_LETTERS:
            letter = token[1].lower()
            token = "-" + ("h" if letter == "?" else letter)
        else:
            match = _LEGACY_VALUE_RE.match(token)
            if match:
                token = "-" + match.group(1).lower() + match.group(2)
        result.append(token)
    return result


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for one invocation."""
    parser = argparse.ArgumentParser(
        prog="mkmsgf",
        description="Compile a message definition text file into a binary "
                    "message catalog or into assembler source.",
        epilog="Legacy /X switches are accepted. Use @file to run each line "
               "of a control file as a separate invocation.",
    )

    parser.add_argument(
        "input_file",
        nargs="?",
        default=None,
        help="Message definition text file (required unless --list-languages).",
    )
    parser.add_argument(
        "output_file",
        nargs="?",
        default=None,
        help="Output file (default: input name with .msg or .asm, in the current directory).",
    )
    parser.add_argument(
        "-p", "--codepage",
        type=int,
        action="append",
        default=None,
        help="Codepage number recorded in the catalog. Repeat for up to 16.",
    )
    parser.add_argument(
        "-l", "--language",
        action="append",
        default=None,
        metavar="FAMILY[,SUB]",
        help="Language family id and sub id (see --list-languages).",
    )
    parser.add_argument(
        "-e", "--extend",
        action="store_true",
        help="Append an extended header block to the catalog.",
    )
    symbols = parser.add_mutually_exclusive_group()
    symbols.add_argument(
        "-a", "--asm",
        action="store_true",
        help="Emit assembler source, labels from BASEMID.INC / UTILMD*.INC.",
    )
    symbols.add_argument(
        "-c", "--header-symbols",
        action="store_true",
        help="Emit assembler source, labels from BASEMID.H / UTILMD*.H.",
    )
    parser.add_argument(
        "-i", "--include",
        default=None,
        help="';'-separated directories searched for symbol files (before INCLUDE).",
    )
    parser.add_argument(
        "-d", "--dbcs",
        default=None,
        help=argparse.SUPPRESS,
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print the parsed header and country information.",
    )
    verbosity.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Print nothing unless there is an error.",
    )
    parser.add_argument(
        "--list-languages",
        action="store_true",
        help="Print the language family / sub id table and exit.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s {}".format(__version__),
    )
    return parser


def _configure_logging(args: argparse.Namespace) -> None:
    if args.quiet:
        level = logging.ERROR
    elif args.verbose:
        level = logging.INFO
    else:
        level = getattr(logging, default_log_level(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def options_from_args(args: argparse.Namespace) -> CompileOptions:
    """Validate parsed arguments and turn them into CompileOptions.

    RULES:
    - A missing input file raises UsageError
    - -d always raises UsageError (DBCS is not supported)
    - More than 16 -p values raises UsageError
    - More than one -l raises UsageError
    - The language pair is validated by decode_language_option()
    """
    if not args.input_file:
        raise UsageError("no input file specified")
    if args.dbcs is not None:
        raise UsageError("DBCS not supported")

    codepages = tuple(args.codepage or ())
    if len(codepages) > MAX_CODEPAGES:
        raise UsageError("more than {} codepages entered".format(MAX_CODEPAGES))

    family = 0
    version = 0
    if args.language:
        if len(args.language) > 1:
            raise UsageError("only one -l option is allowed")
        info = decode_language_option(args.language[0])
        family, version = info.family, info.sub

    mode = "asm" if (args.asm or args.header_symbols) else "catalog"
    return CompileOptions(
        input_path=Path(args.input_file),
        output_path=Path(args.output_file) if args.output_file else None,
        mode=mode,
        symbol_syntax="header" if args.header_symbols else "asm",
        include=args.include,
        language_family=family,
        language_version=version,
        codepages=codepages,
        extension_block=args.extend,
    )


def describe_result(result: CompileResult, options: CompileOptions) -> List[str]:
    """Format the header and country fields of a compilation for display."""
    plan = result.plan
    lines = [
        "",
        "*********** Header Info ***********",
        "",
        "Input filename         {}".format(plan.source_path),
        "Component Identifier:  {}".format(plan.identifier_text),
        "Number of messages:    {}".format(plan.message_count),
        "First message number:  {}".format(plan.first_message),
        "Index entry width:     {} bytes".format(plan.index_width),
        "Index offset:          0x{0:02X} ({0})".format(plan.index_offset),
        "Country Info:          0x{0:02X} ({0})".format(plan.country_offset),
        "Extended Header:       0x{0:02X} ({0})".format(result.emitted.extension_offset),
    ]
    if options.mode == "catalog":
        codepages = "  ".join("0x{0:02X} ({0})".format(cp) for cp in options.codepages)
        lines += [
            "",
            "*********** Country Info  ***********",
            "",
            "Bytes per character:       1",
            "Language family ID:        {}".format(options.language_family),
            "Language version ID:       {}".format(options.language_version),
            "Number of codepages:       {}".format(len(options.codepages)),
            "Codepages:                 {}".format(codepages or "none"),
            "File name:                 {}".format(result.output_path),
        ]
    else:
        lines.append(
            "Messages without labels:  {}".format(len(result.emitted.unlabelled))
        )
    return lines


def _print_languages() -> None:
    print("Code\tFamily\tSub\tLanguage                  Principal country")
    print("----\t------\t---\t--------                  -----------------")
    for info in LANGUAGES:
        print("{}\t{}\t{}\t{:<25} {}".format(
            info.code, info.family, info.sub, info.language, info.country
        ))


def _run_single(argv: List[str]) -> int:
    """Run one invocation and return its exit status."""
    parser = build_parser()
    try:
        args = parser.parse_args(normalize_switches(argv))
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 2

    if args.list_languages:
        _print_languages()
        return 0

    _configure_logging(args)
    try:
        options = options_from_args(args)
        _status("Compiling {}...".format(options.input_path), args.quiet)
        result = compile_messages(options)
    except CompileError as exc:
        print(parser.format_usage(), end="", file=sys.stderr)
        print("Error: {}".format(exc), file=sys.stderr)
        return exc.exit_code

    if args.verbose:
        for line in describe_result(result, options):
            _status(line)
    _status("Done: {} messages written to {}".format(
        result.emitted.messages, result.output_path
    ), args.quiet)
    if result.emitted.unlabelled:
        _status("  {} message(s) had no symbol label".format(
            len(result.emitted.unlabelled)
        ), args.quiet)
    return 0


def run_control_file(path: str) -> int:
    """Replay every line of a control file as a separate invocation.

    WHY: Large builds compile dozens of message files with the same
    switches; a control file keeps them in one place.

    HOW: Each non-blank line is split on whitespace and handed to
    _run_single(). Lines starting with ';' are comments.

    RULES:
    - Every line runs, even after a failure
    - Returns the first non-zero exit status, or 0
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            lines = fh.read().splitlines()
    except OSError as exc:
        error = OpenFailureError(path, exc.strerror or str(exc))
        print("Error: {}".format(error), file=sys.stderr)
        return error.exit_code

    status = 0
    for line in lines:
        tokens = line.split()
        if not tokens or tokens[0].startswith(";"):
            continue
        _status(line)
        code = _run_single(tokens)
        if code and not status:
            status = code
    return status


def run(argv: List[str]) -> int:
    """Dispatch to usage, control-file replay, or a single invocation."""
    if not argv:
        print("Message File Compiler {}".format(__version__))
        print(build_parser().format_usage(), end="")
        return 0
    if argv[0].startswith("@"):
        return run_control_file(argv[0][1:])
    return _run_single(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``mkmsgf`` console script.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    sys.exit(run(sys.argv[1:] if argv is None else argv))


if __name__ == "__main__":
    main()
