"""
Source file discovery.

Walks a project tree and returns the JavaScript sources that should be
scanned for translatable strings, keyed by absolute path with the
project-relative alias used in ``#:`` references.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from ..utils.core.exceptions import FileSystemError

logger = logging.getLogger(__name__)

# File patterns to include in extraction
SOURCE_EXTENSIONS = (".js", ".mjs")

# Directories to exclude from extraction
VENDOR_DIRS = ("node_modules",)


def _is_excluded(alias: str, excluded_dirs: Iterable[str]) -> bool:
    """True when any excluded directory appears as a path segment run in alias."""
    wrapped = f"/{alias}"
    return any(f"/{excluded}/" in wrapped for excluded in excluded_dirs)


def find_source_files(
    root: Path,
    translations_dir: str,
    extensions: Iterable[str] = SOURCE_EXTENSIONS,
    vendor_dirs: Iterable[str] = VENDOR_DIRS,
) -> dict[Path, str]:
    """
    Find all source files below a project root.

    Args:
        root: Project root directory
        translations_dir: Translations output directory (relative to root); never scanned
        extensions: File extensions to include
        vendor_dirs: Dependency directory names; never scanned

    Returns:
        Mapping of absolute file path to project-relative alias, sorted by alias

    Raises:
        FileSystemError: If root does not exist, is not a directory or cannot be read
    """
    if not root.exists():
        raise FileSystemError(f"Source directory does not exist: {root}", path=root)
    if not root.is_dir():
        raise FileSystemError(f"Source path is not a directory: {root}", path=root)

    root = root.resolve()
    suffixes = tuple(ext.lower() for ext in extensions)
    excluded = [translations_dir.strip("/"), *vendor_dirs]

    def _raise(error: OSError) -> None:
        raise error

    files: dict[Path, str] = {}
    try:
        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
            current = Path(dirpath)
            # Prune excluded directories before descending
            dirnames[:] = sorted(
                name
                for name in dirnames
                if not _is_excluded(f"{(current / name).relative_to(root).as_posix()}/", excluded)
            )
            for filename in filenames:
                if not filename.lower().endswith(suffixes):
                    continue
                filepath = current / filename
                alias = filepath.relative_to(root).as_posix()
                if _is_excluded(alias, excluded):
                    continue
                files[filepath] = alias
    except OSError as e:
        raise FileSystemError(f"Cannot read source directory {root}: {e}", path=root) from e

    logger.info(f"Found {len(files)} source file(s) in {root}")
    return dict(sorted(files.items(), key=lambda item: item[1]))
