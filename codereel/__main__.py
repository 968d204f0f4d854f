"""Entry point for `python -m codereel`.

Enable execution of the codereel package as a module using the Python -m flag.

Usage:
    python -m codereel [options] COMMAND

Exports:
    None - This module is intended for direct execution only.
"""

from codereel.cli import main

if __name__ == "__main__":
    main()
