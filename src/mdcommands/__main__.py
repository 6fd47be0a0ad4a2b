"""Entry point for ``python -m mdcommands``."""

import sys

from mdcommands.cli import main

if __name__ == "__main__":
    sys.exit(main())
