"""
Command-line argument parsing for jsl10n.

This module defines the ``extract`` subcommand and turns its options into a
type-safe container.
"""

import argparse
from pathlib import Path
from typing import NamedTuple

from ..core.version import get_version


class PathValidationError(Exception):
    """Raised when a path validation fails."""

    pass


class ParsedArgs(NamedTuple):
    """Container for parsed command-line arguments."""

    command: str
    workdir: Path
    config_file: Path | None
    translations_dir: str | None
    default_locale: str | None
    locales: list[str]
    dry_run: bool
    check: bool
    verbose: bool
    ci_mode: bool


def validate_workdir(path_str: str) -> Path:
    """
    Validate and resolve the working directory.

    Args:
        path_str: String representation of the directory path

    Returns:
        Resolved absolute path

    Raises:
        PathValidationError: If the path is invalid or not a directory
    """
    try:
        path = Path(path_str).expanduser().resolve()
    except (OSError, ValueError) as e:
        raise PathValidationError(f"Invalid working directory: {e}") from e

    if not path.exists():
        raise PathValidationError(f"Working directory does not exist: {path}")
    if not path.is_dir():
        raise PathValidationError(f"Working directory is not a directory: {path}")

    return path


def validate_config_file_path(config_file_str: str) -> Path:
    """
    Validate configuration file path.

    Args:
        config_file_str: String path to configuration file

    Returns:
        Resolved Path object for the configuration file

    Raises:
        PathValidationError: If the configuration file path is invalid
    """
    try:
        config_file = Path(config_file_str).expanduser().resolve()
    except (OSError, ValueError) as e:
        raise PathValidationError(f"Invalid config file path: {e}") from e

    if not config_file.is_file():
        raise PathValidationError(f"Config file does not exist: {config_file}")

    return config_file


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create the argument parser for jsl10n.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="jsl10n",
        description="jsl10n - translation catalog maintenance for JavaScript projects",
    )
    _ = parser.add_argument(
        "--version", action="version", version=f"%(prog)s {get_version()}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    extract = subparsers.add_parser(
        "extract",
        help="Extract translatable strings into a translation table (.po format).",
        description="Extract translatable strings into a translation table (.po format).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  jsl10n extract
    Update translations/<locale>.po for every locale in package.json

  jsl10n extract -l fr-FR -l de-DE
    Update only the given locales

  jsl10n extract --check
    Exit with status 1 if any catalog is out of date (nothing is written)

Note: a scan that finds no strings empties existing catalogs.
""",
    )

    _ = extract.add_argument(
        "-l",
        "--locale",
        dest="locales",
        action="append",
        default=[],
        metavar="LOCALE",
        help="Locale to maintain instead of package.json's l10n.locales (repeatable)",
    )
    _ = extract.add_argument(
        "--workdir",
        type=str,
        default=".",
        metavar="PATH",
        help="Project root to scan (default: current directory)",
    )
    _ = extract.add_argument(
        "--config-file",
        type=str,
        default=None,
        metavar="PATH",
        help="YAML file with extraction settings",
    )
    _ = extract.add_argument(
        "--translations-dir",
        type=str,
        default=None,
        metavar="DIR",
        help="Catalog output directory relative to the project root (default: translations)",
    )
    _ = extract.add_argument(
        "--default-locale",
        type=str,
        default=None,
        metavar="LOCALE",
        help="Locale of the source strings; it gets no catalog (default: en-US)",
    )
    _ = extract.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without actually writing files",
    )
    _ = extract.add_argument(
        "--check",
        action="store_true",
        help="Check mode: fail if any catalog differs from what would be written",
    )
    _ = extract.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    _ = extract.add_argument(
        "--ci-mode",
        action="store_true",
        help="Enable CI/CD mode with compact log output",
    )

    return parser


def parse_arguments(args: list[str] | None = None) -> ParsedArgs:
    """
    Parse command-line arguments.

    Args:
        args: List of arguments to parse (defaults to sys.argv[1:])

    Returns:
        ParsedArgs containing validated and resolved paths

    Raises:
        SystemExit: If argument parsing fails or --help is requested
        PathValidationError: If path validation fails
    """
    parser = create_argument_parser()
    parsed = parser.parse_args(args)

    # argparse returns Any types
    config_file_str: str | None = getattr(parsed, "config_file", None)
    workdir_str: str = getattr(parsed, "workdir", ".")

    return ParsedArgs(
        command=parsed.command,  # pyright: ignore[reportAny]
        workdir=validate_workdir(workdir_str),
        config_file=validate_config_file_path(config_file_str) if config_file_str else None,
        translations_dir=parsed.translations_dir,  # pyright: ignore[reportAny]
        default_locale=parsed.default_locale,  # pyright: ignore[reportAny]
        locales=list(parsed.locales),  # pyright: ignore[reportAny]
        dry_run=parsed.dry_run,  # pyright: ignore[reportAny]
        check=parsed.check,  # pyright: ignore[reportAny]
        verbose=parsed.verbose,  # pyright: ignore[reportAny]
        ci_mode=parsed.ci_mode,  # pyright: ignore[reportAny]
    )
