"""Command implementations for the jsl10n command line."""

from .extract import ExtractCommand, ExtractResult

__all__ = ["ExtractCommand", "ExtractResult"]
