"""
The ``extract`` command.

Scans the project for translatable strings and merges them into one .po
catalog per configured locale, keeping existing translations.

Locales are validated before anything is written. After that, locales are
processed one by one; a failure (unreadable or malformed old catalog,
unwritable output) fails only that locale, and catalogs already written for
earlier locales in the same run stay in place.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import override

from ..config.manager import ConfigManager
from ..config.schema import ExtractConfig, validate_locale
from ..i18n.catalog import Catalog
from ..i18n.file_locator import find_source_files
from ..i18n.po_file import dumps, read_po_file, write_po_file
from ..i18n.reconciler import reconcile_catalogs
from ..i18n.string_extractor import extract_catalog
from ..utils.core.exceptions import CatalogFormatError, FileSystemError

logger = logging.getLogger(__name__)


class ExtractResult:
    """Result of an extract run."""

    def __init__(self) -> None:
        self.written: list[Path] = []
        self.unchanged: list[Path] = []
        self.outdated: list[Path] = []
        self.failed: list[tuple[str, Exception]] = []
        self.locales: list[str] = []

    @property
    def success(self) -> bool:
        """True when no locale failed and no catalog is out of date."""
        return not self.failed and not self.outdated

    @property
    def failure_count(self) -> int:
        return len(self.failed)

    @override
    def __str__(self) -> str:
        return (
            f"Extract Results: "
            f"{len(self.locales)} locale(s), "
            f"{len(self.written)} written, "
            f"{len(self.unchanged)} unchanged, "
            f"{len(self.outdated)} outdated, "
            f"{self.failure_count} failed"
        )


class ExtractCommand:
    """Extract translatable strings into a translation table (.po format)."""

    name: str = "extract"

    def __init__(
        self,
        config: ExtractConfig,
        locales: Sequence[str] | None = None,
        dry_run: bool = False,
        check: bool = False,
    ) -> None:
        """
        Initialize the command.

        Args:
            config: Run configuration
            locales: Locales overriding the project manifest (None uses the manifest)
            dry_run: Render catalogs without writing them
            check: Compare rendered catalogs with the files on disk without writing
        """
        self.config: ExtractConfig = config
        self.locale_override: list[str] | None = list(locales) if locales else None
        self.dry_run: bool = dry_run
        self.check: bool = check

    def resolve_locales(self) -> list[str]:
        """
        Determine the locales that get a catalog.

        Returns:
            Validated locales without the default locale and without duplicates

        Raises:
            InvalidLocaleError: If any configured locale is malformed
            ConfigurationError: If the project manifest can't be read
        """
        if self.locale_override is not None:
            configured: list[object] = list(self.locale_override)
        else:
            configured = ConfigManager.load_manifest(self.config.manifest_path).locales

        # Validate everything before touching any catalog
        validated = [validate_locale(locale) for locale in configured]

        locales: list[str] = []
        for locale in validated:
            if locale == self.config.default_locale:
                logger.debug(f"Skipping default locale {locale}")
                continue
            if locale not in locales:
                locales.append(locale)

        if not locales:
            logger.warning("No locales configured; no catalogs will be generated")
        return locales

    def extract(self) -> Catalog:
        """
        Scan the project once and build the locale-less catalog.

        Raises:
            FileSystemError: If the project directory can't be read
        """
        files = find_source_files(
            self.config.workdir,
            self.config.translations_dir,
            extensions=self.config.source_extensions,
            vendor_dirs=self.config.vendor_dirs,
        )
        return extract_catalog(
            files,
            functions=self.config.functions,
            source_locale=self.config.default_locale,
        )

    def create_catalog(self, locale: str, extracted: Catalog) -> Catalog:
        """
        Reconcile the extracted catalog with the existing one for a locale.

        Raises:
            FileSystemError: If the existing catalog can't be read
            CatalogFormatError: If the existing catalog is malformed
        """
        catalog_file = self.config.catalog_path(locale)
        new_catalog = extracted.copy(locale=locale)

        if catalog_file.exists():
            old_catalog = read_po_file(
                catalog_file, locale=locale, source_locale=self.config.default_locale
            )
        else:
            old_catalog = Catalog(locale=locale, source_locale=self.config.default_locale)

        merge = reconcile_catalogs(new_catalog, old_catalog)
        logger.info(f"{locale}: {merge}")
        return merge.catalog

    def execute(self) -> ExtractResult:
        """
        Run the command.

        Returns:
            ExtractResult describing what happened per locale

        Raises:
            ConfigurationError: If the locale configuration is invalid (nothing is written)
            FileSystemError: If the project directory can't be read (nothing is written)
        """
        result = ExtractResult()
        locales = self.resolve_locales()
        result.locales = locales

        extracted = self.extract()

        for locale in locales:
            try:
                self._process_locale(locale, extracted, result)
            except (FileSystemError, CatalogFormatError) as e:
                logger.error(f"Failed to update catalog for {locale}: {e}")
                result.failed.append((locale, e))

        logger.info(str(result))
        return result

    def _process_locale(self, locale: str, extracted: Catalog, result: ExtractResult) -> None:
        catalog_file = self.config.catalog_path(locale)
        catalog = self.create_catalog(locale, extracted)

        if len(catalog) == 0 and catalog_file.exists():
            logger.warning(f"No translatable strings found; {catalog_file} will be emptied")

        if self.check or self.dry_run:
            content = dumps(catalog)
            current = self._read_current(catalog_file)
            if current == content:
                result.unchanged.append(catalog_file)
                logger.info(f"{catalog_file} is up to date")
            elif self.check:
                result.outdated.append(catalog_file)
                logger.info(f"{catalog_file} needs update")
            else:
                logger.info(f"DRY RUN: Would write {len(catalog)} entries to {catalog_file}")
            return

        write_po_file(catalog_file, catalog)
        result.written.append(catalog_file)

    @staticmethod
    def _read_current(catalog_file: Path) -> str | None:
        if not catalog_file.exists():
            return None
        try:
            return catalog_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise FileSystemError(f"Cannot read catalog {catalog_file}: {e}", path=catalog_file) from e
