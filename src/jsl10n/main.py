"""
Main entry point for jsl10n.

This module parses the command line, sets up logging, runs the requested
command and maps its outcome onto a process exit code.
"""

import logging
import sys

import yaml

from .commands.extract import ExtractCommand
from .config.manager import ConfigManager
from .utils.cli.args import ParsedArgs, PathValidationError, parse_arguments
from .utils.core.exceptions import ConfigurationError, FileSystemError

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def setup_logging(verbose: bool = False, ci_mode: bool = False) -> None:
    """
    Set up logging configuration.

    Args:
        verbose: Enable verbose logging
        ci_mode: Use compact output suited to CI logs
    """
    level = logging.DEBUG if verbose else logging.INFO
    if ci_mode:
        logging.basicConfig(
            level=level,
            format="::%(levelname)s::%(message)s" if verbose else "%(message)s",
            force=True,
        )
        return

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def run_extract(args: ParsedArgs) -> int:
    """
    Run the extract command.

    Returns:
        Exit code
    """
    logger = logging.getLogger(__name__)

    try:
        config = ConfigManager.load_config(
            args.config_file,
            workdir=args.workdir,
            translations_dir=args.translations_dir,
            default_locale=args.default_locale,
        )
        command = ExtractCommand(
            config, locales=args.locales, dry_run=args.dry_run, check=args.check
        )
        result = command.execute()
    except (ConfigurationError, FileNotFoundError, yaml.YAMLError) as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR
    except FileSystemError as e:
        logger.error(f"Error during string extraction: {e}")
        if args.verbose:
            logger.exception("Full traceback:")
        return EXIT_FAILURE

    if not result.success:
        for locale, error in result.failed:
            logger.error(f"  {locale}: {error}")
        if result.outdated:
            logger.info("Translation catalogs need update")
        return EXIT_FAILURE

    if args.ci_mode:
        logger.info("✅ String extraction completed")
    else:
        logger.info("String extraction completed successfully!")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for failure, 2 for configuration errors)
    """
    try:
        args = parse_arguments(argv)
    except PathValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    setup_logging(args.verbose, args.ci_mode)
    logger = logging.getLogger(__name__)

    try:
        match args.command:
            case ExtractCommand.name:
                return run_extract(args)
            case _:
                logger.error(f"Unknown command: {args.command}")
                return EXIT_CONFIG_ERROR
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return EXIT_FAILURE
