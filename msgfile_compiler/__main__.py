"""Package entry point for ``python -m msgfile_compiler``.

WHY: Users run the compiler as ``python -m msgfile_compiler input.txt``
when the ``mkmsgf`` console script is not on PATH.

HOW: Delegates straight to the CLI's main() function.
"""

from msgfile_compiler.cli import main

if __name__ == "__main__":
    main()
