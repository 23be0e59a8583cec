"""Configuration schema for jsl10n using Pydantic models."""

import re
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.core.exceptions import InvalidLocaleError

LOCALE_PATTERN = r"^[a-z]{2}-[A-Z]{2}$"
_LOCALE_RE = re.compile(LOCALE_PATTERN)


class FunctionRole(str, Enum):
    """How the leading arguments of a marker call map onto an entry."""

    GETTEXT = "gettext"  # (msgid)
    PGETTEXT = "pgettext"  # (msgctxt, msgid)
    NGETTEXT = "ngettext"  # (msgid, msgid_plural)


DEFAULT_FUNCTIONS: dict[str, FunctionRole] = {
    "t": FunctionRole.GETTEXT,
    "x": FunctionRole.PGETTEXT,
    "n": FunctionRole.NGETTEXT,
}


def validate_locale(locale: object) -> str:
    """
    Check a locale identifier against the ``ll-RR`` pattern.

    Args:
        locale: Value taken from the project manifest or the command line

    Returns:
        The locale unchanged

    Raises:
        InvalidLocaleError: If the value is not a string like ``fr-FR``
    """
    if not isinstance(locale, str) or not _LOCALE_RE.fullmatch(locale):
        raise InvalidLocaleError(locale)
    return locale


class ExtractConfig(BaseModel):
    """Settings for one extraction run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    workdir: Path = Field(
        default_factory=Path.cwd,
        description="Project root that is scanned and that holds the translations directory",
    )
    translations_dir: str = Field(
        default="translations",
        description="Directory (relative to workdir) receiving one <locale>.po per locale",
        min_length=1,
    )
    default_locale: str = Field(
        default="en-US",
        description="Locale the source strings are written in; never gets a catalog",
        pattern=LOCALE_PATTERN,
    )
    source_extensions: tuple[str, ...] = Field(
        default=(".js", ".mjs"),
        description="File extensions treated as source files",
        min_length=1,
    )
    vendor_dirs: tuple[str, ...] = Field(
        default=("node_modules",),
        description="Dependency directories that are never scanned",
    )
    functions: dict[str, FunctionRole] = Field(
        default_factory=lambda: dict(DEFAULT_FUNCTIONS),
        description="Marker function names and their argument roles",
        min_length=1,
    )
    manifest_file: str = Field(
        default="package.json",
        description="Project metadata file holding l10n.locales",
        min_length=1,
    )

    @field_validator("workdir")
    @classmethod
    def resolve_workdir(cls, v: Path) -> Path:
        """Expand and absolutize the working directory."""
        return v.expanduser().resolve()

    @field_validator("translations_dir")
    @classmethod
    def normalize_translations_dir(cls, v: str) -> str:
        """Use forward slashes and drop surrounding separators."""
        normalized = v.replace("\\", "/").strip("/")
        if not normalized:
            raise ValueError("translations_dir must name a directory")
        return normalized

    @field_validator("source_extensions")
    @classmethod
    def normalize_extensions(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Ensure every extension has a leading dot and is lowercase."""
        return tuple(
            ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in v
        )

    @field_validator("functions")
    @classmethod
    def validate_function_names(
        cls, v: dict[str, FunctionRole]
    ) -> dict[str, FunctionRole]:
        """Marker names must be plain JavaScript identifiers."""
        for name in v:
            if not re.match(r"^[A-Za-z_$][A-Za-z0-9_$]*$", name):
                raise ValueError(f"Invalid marker function name: {name!r}")
        return v

    @property
    def translations_path(self) -> Path:
        """Absolute path of the translations output directory."""
        return self.workdir / self.translations_dir

    @property
    def manifest_path(self) -> Path:
        """Absolute path of the project manifest."""
        return self.workdir / self.manifest_file

    def catalog_path(self, locale: str) -> Path:
        """Path of the catalog file for a locale."""
        return self.translations_path / f"{locale}.po"


class L10nSection(BaseModel):
    """The ``l10n`` object of the project manifest."""

    model_config = ConfigDict(extra="allow")

    locales: list[object] = Field(default_factory=list)

    @field_validator("locales", mode="before")
    @classmethod
    def ignore_non_list(cls, v: object) -> object:
        """Anything other than an array counts as "no locales"."""
        if not isinstance(v, list):
            return []
        return v


class PackageManifest(BaseModel):
    """The parts of package.json that jsl10n reads."""

    model_config = ConfigDict(extra="allow")

    l10n: L10nSection = Field(default_factory=L10nSection)

    @field_validator("l10n", mode="before")
    @classmethod
    def ignore_non_object(cls, v: object) -> object:
        """A non-object ``l10n`` value counts as absent."""
        if not isinstance(v, dict):
            return {}
        return v

    @property
    def locales(self) -> list[object]:
        """Configured locale values, unvalidated."""
        return list(self.l10n.locales)
