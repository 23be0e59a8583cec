"""
In-memory translation catalog.

A :class:`Catalog` holds the entries for one target locale, keyed by
:class:`EntryKey` (msgid, msgctxt, msgid_plural) and iterated in the order the
entries were first added.
"""

from __future__ import annotations

import copy
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import NamedTuple

Reference = tuple[str, int | None]


class EntryKey(NamedTuple):
    """Identity of an entry within a catalog."""

    msgid: str
    msgctxt: str | None = None
    msgid_plural: str | None = None


@dataclass
class TranslationEntry:
    """A single translatable message and whatever translation it has."""

    msgid: str
    msgctxt: str | None = None
    msgid_plural: str | None = None
    msgstr: str = ""
    msgstr_plural: dict[int, str] = field(default_factory=dict)
    references: list[Reference] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)
    extracted_comments: list[str] = field(default_factory=list)
    flags: list[str] = field(default_factory=list)
    obsolete: bool = False

    @property
    def key(self) -> EntryKey:
        return EntryKey(self.msgid, self.msgctxt, self.msgid_plural)

    @property
    def is_plural(self) -> bool:
        return self.msgid_plural is not None

    def has_translation(self) -> bool:
        """True when any translated text is present."""
        if self.msgstr:
            return True
        return any(self.msgstr_plural.values())

    def add_reference(self, path: str, line: int | None = None) -> None:
        """Record a source location, ignoring exact duplicates."""
        reference = (path, line)
        if reference not in self.references:
            self.references.append(reference)

    def delete_references(self) -> None:
        self.references.clear()

    def copy(self) -> TranslationEntry:
        return copy.deepcopy(self)


class Catalog:
    """Ordered, identity-keyed collection of translation entries."""

    def __init__(self, locale: str | None = None, source_locale: str | None = None) -> None:
        """
        Initialize an empty catalog.

        Args:
            locale: Target locale identifier (e.g. ``fr-FR``)
            source_locale: Locale the msgids are written in
        """
        self.locale: str | None = locale
        self.source_locale: str | None = source_locale
        self._entries: dict[EntryKey, TranslationEntry] = {}

    @property
    def language(self) -> str | None:
        """Target language in gettext form (``fr_FR``)."""
        if self.locale is None:
            return None
        return self.locale.replace("-", "_")

    def add(self, entry: TranslationEntry) -> TranslationEntry:
        """
        Add an entry, collapsing it into an existing one with the same identity.

        When the identity is already present only the new references are
        merged in; the stored entry is returned in both cases.
        """
        existing = self._entries.get(entry.key)
        if existing is None:
            self._entries[entry.key] = entry
            return entry

        for path, line in entry.references:
            existing.add_reference(path, line)
        return existing

    def add_message(
        self,
        msgid: str,
        msgctxt: str | None = None,
        msgid_plural: str | None = None,
        reference: Reference | None = None,
    ) -> TranslationEntry:
        """Add an untranslated message found in source code."""
        entry = TranslationEntry(msgid=msgid, msgctxt=msgctxt, msgid_plural=msgid_plural)
        if reference is not None:
            entry.add_reference(*reference)
        return self.add(entry)

    def get(self, key: EntryKey) -> TranslationEntry | None:
        return self._entries.get(key)

    def find(
        self, msgid: str, msgctxt: str | None = None, msgid_plural: str | None = None
    ) -> TranslationEntry | None:
        return self._entries.get(EntryKey(msgid, msgctxt, msgid_plural))

    def keys(self) -> list[EntryKey]:
        return list(self._entries)

    def delete_references(self) -> None:
        """Drop the source locations of every entry."""
        for entry in self._entries.values():
            entry.delete_references()

    def copy(self, locale: str | None = None) -> Catalog:
        """
        Deep copy of the catalog, optionally retargeted at another locale.

        Args:
            locale: Locale for the copy (defaults to this catalog's locale)
        """
        duplicate = Catalog(
            locale=locale if locale is not None else self.locale,
            source_locale=self.source_locale,
        )
        for entry in self._entries.values():
            _ = duplicate.add(entry.copy())
        return duplicate

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[TranslationEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Catalog(locale={self.locale!r}, entries={len(self)})"
