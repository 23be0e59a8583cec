"""
Global test configuration fixtures for jsl10n tests.

This module provides reusable pytest fixtures for building throwaway
JavaScript projects on disk and the ExtractConfig instances that point at
them.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from jsl10n.config.schema import ExtractConfig

SourceWriter = Callable[[str, str], Path]


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """
    Create an empty project directory with a package.json listing fr-FR.

    Returns:
        Path: Project root
    """
    root = tmp_path / "project"
    root.mkdir()
    manifest = {"name": "demo-app", "version": "1.0.0", "l10n": {"locales": ["fr-FR"]}}
    _ = (root / "package.json").write_text(json.dumps(manifest), encoding="utf-8")
    return root


@pytest.fixture
def write_source(project_dir: Path) -> SourceWriter:
    """
    Return a helper writing a file relative to the project root.

    The helper creates parent directories and returns the file path.
    """

    def _write(relative_path: str, content: str) -> Path:
        path = project_dir / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        _ = path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def set_locales(project_dir: Path) -> Callable[[object], None]:
    """Return a helper replacing l10n.locales in the project's package.json."""

    def _set(locales: object) -> None:
        manifest = {"name": "demo-app", "l10n": {"locales": locales}}
        _ = (project_dir / "package.json").write_text(json.dumps(manifest), encoding="utf-8")

    return _set


@pytest.fixture
def base_config(project_dir: Path) -> ExtractConfig:
    """
    Create the default configuration for the test project.

    Returns:
        ExtractConfig: Configuration with default settings
    """
    return ExtractConfig(workdir=project_dir)


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    """Undo logging.basicConfig calls made by the code under test."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(level)
