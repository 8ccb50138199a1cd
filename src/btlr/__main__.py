"""Module entry point so ``python -m btlr`` runs the CLI."""

import sys

from btlr.ui.cli import main

if __name__ == "__main__":
    sys.exit(main())
