"""
jsl10n - Extracts translatable strings from JavaScript projects into .po catalogs.
"""

import sys

from .main import main as run_main


def main() -> None:
    """Console entry point."""
    sys.exit(run_main())


__all__ = ["main"]
