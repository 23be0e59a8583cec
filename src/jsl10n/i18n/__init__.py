"""
Catalog building blocks.

This package contains the pieces of the extraction pipeline:
- Source file discovery
- String extraction from JavaScript sources
- The in-memory catalog and its .po serialization
- Reconciliation of fresh and existing catalogs
"""

from .catalog import Catalog, EntryKey, TranslationEntry
from .reconciler import MergeResult, merge_catalogs, reconcile_catalogs

__all__ = [
    "Catalog",
    "EntryKey",
    "TranslationEntry",
    "MergeResult",
    "merge_catalogs",
    "reconcile_catalogs",
]
