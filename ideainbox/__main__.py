"""Entry point for running IdeaInbox as a module or CLI command.

This module provides the CLI entry point that will be installed when users
run `pip install ideainbox`. It can also be invoked directly with
`python -m ideainbox`.

Usage:
    # Run as a module
    python -m ideainbox "Call the plumber about the leak"

    # After pip install, run as a command
    ideainbox --send file "Call the plumber about the leak"
"""

from __future__ import annotations

import sys

from .ideainbox import main


def cli() -> None:
    """CLI entry point installed by pip.

    Registered in pyproject.toml as the console script entry point.
    """
    sys.exit(main())


if __name__ == "__main__":
    cli()
