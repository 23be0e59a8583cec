"""
Catalog reconciliation.

Merges the catalog freshly extracted from source code with the catalog that
was previously written for the same locale. The new catalog decides which
entries exist and where they come from; the old catalog only contributes the
translator's work (translated text, translator comments and flags) for
entries that still exist.
"""

from __future__ import annotations

import logging
from typing import override

from .catalog import Catalog, EntryKey, TranslationEntry

logger = logging.getLogger(__name__)


class MergeResult:
    """Result of a reconciliation."""

    def __init__(self, catalog: Catalog) -> None:
        self.catalog: Catalog = catalog
        self.preserved: list[EntryKey] = []
        self.dropped: list[EntryKey] = []

    @property
    def preserved_count(self) -> int:
        """Number of entries that kept an existing translation."""
        return len(self.preserved)

    @property
    def dropped_count(self) -> int:
        """Number of old entries no longer found in code."""
        return len(self.dropped)

    @property
    def untranslated_count(self) -> int:
        """Number of entries without any translated text."""
        return sum(1 for entry in self.catalog if not entry.has_translation())

    @override
    def __str__(self) -> str:
        return (
            f"{len(self.catalog)} entries: "
            f"{self.preserved_count} translations preserved, "
            f"{self.untranslated_count} untranslated, "
            f"{self.dropped_count} dropped"
        )


def strip_references(catalog: Catalog) -> Catalog:
    """Copy of a catalog with every source location removed."""
    stripped = catalog.copy()
    stripped.delete_references()
    return stripped


def _carry_translation(target: TranslationEntry, source: TranslationEntry) -> bool:
    """
    Copy translator work from source into target where target has none.

    Returns:
        True if any translated text was copied
    """
    copied = False
    if source.msgstr and not target.msgstr:
        target.msgstr = source.msgstr
        copied = True

    for index, text in source.msgstr_plural.items():
        if text and not target.msgstr_plural.get(index):
            target.msgstr_plural[index] = text
            copied = True
    if copied and target.msgstr_plural:
        target.msgstr_plural = dict(sorted(target.msgstr_plural.items()))

    if source.comments and not target.comments:
        target.comments = list(source.comments)
    for flag in source.flags:
        if flag not in target.flags:
            target.flags.append(flag)

    return copied


def reconcile_catalogs(new: Catalog, old: Catalog) -> MergeResult:
    """
    Merge an old catalog into a freshly extracted one.

    The result contains exactly the identities of ``new``, in ``new``'s order
    and with ``new``'s references. Entries of ``old`` whose identity is absent
    from ``new`` are dropped. Neither input is modified.

    Args:
        new: Catalog extracted from the current code base
        old: Catalog read from disk for the same locale (may be empty)

    Returns:
        MergeResult holding the merged catalog and merge statistics
    """
    result = MergeResult(new.copy())
    catalog = result.catalog

    for old_entry in strip_references(old):
        target = catalog.get(old_entry.key)
        if target is None:
            result.dropped.append(old_entry.key)
            logger.debug(f"Dropping stale entry {old_entry.msgid!r}")
            continue

        if _carry_translation(target, old_entry):
            result.preserved.append(old_entry.key)

    logger.debug(f"Reconciled catalog for {catalog.locale}: {result}")
    return result


def merge_catalogs(new: Catalog, old: Catalog) -> Catalog:
    """Merge an old catalog into a freshly extracted one; see :func:`reconcile_catalogs`."""
    return reconcile_catalogs(new, old).catalog
