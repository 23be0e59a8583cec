"""
Basic exception classes for jsl10n.

This module contains the error taxonomy shared by the extraction pipeline
without creating import cycles.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class ErrorSeverity(Enum):
    """Error severity levels for classification and handling."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Categories of errors for appropriate handling strategies."""

    CONFIGURATION = "configuration"
    FILESYSTEM = "filesystem"
    EXTRACTION = "extraction"
    CATALOG = "catalog"
    UNKNOWN = "unknown"


class JsL10nError(Exception):
    """Base exception class for jsl10n specific errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        user_message: str | None = None,
        context: object | None = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message)
        self.category: ErrorCategory = category
        self.severity: ErrorSeverity = severity
        self.user_message: str = user_message or message
        self.context: object | None = context
        self.recoverable: bool = recoverable


class ConfigurationError(JsL10nError):
    """Configuration-related errors."""

    def __init__(
        self,
        message: str,
        user_message: str | None = None,
        context: object | None = None,
    ) -> None:
        super().__init__(
            message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.HIGH,
            recoverable=False,
            user_message=user_message,
            context=context,
        )


class InvalidLocaleError(ConfigurationError):
    """A configured locale identifier does not match the ``ll-RR`` pattern."""

    def __init__(self, locale: object) -> None:
        super().__init__(
            f"Invalid locale: {locale!r} (expected a value like 'fr-FR')",
            context=locale,
        )
        self.locale: object = locale


class FileSystemError(JsL10nError):
    """Missing or unreadable source tree, unwritable catalog path."""

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        user_message: str | None = None,
    ) -> None:
        super().__init__(
            message,
            category=ErrorCategory.FILESYSTEM,
            severity=ErrorSeverity.HIGH,
            recoverable=False,
            user_message=user_message,
            context=path,
        )
        self.path: Path | None = path


class ExtractionError(JsL10nError):
    """Source file content the string scanner cannot make sense of."""

    def __init__(self, message: str, line: int | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.EXTRACTION,
            severity=ErrorSeverity.LOW,
            recoverable=True,
            context=line,
        )
        self.line: int | None = line


class CatalogFormatError(JsL10nError):
    """Malformed content in an existing .po catalog."""

    def __init__(self, message: str, line: int | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.CATALOG,
            severity=ErrorSeverity.MEDIUM,
            recoverable=True,
            context=line,
        )
        self.line: int | None = line
