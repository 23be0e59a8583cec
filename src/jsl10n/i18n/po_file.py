"""
Reading and writing catalogs in the gettext portable-object (.po) format.

Catalogs are written without a header entry: the file holds only the
messages. The reader accepts the header, obsolete (``#~``) entries and
previous-msgid (``#|``) comments so that catalogs edited with other gettext
tools can be read back.

Usage Examples:
    Render a catalog:
        >>> text = dumps(catalog)

    Read and write files:
        >>> catalog = read_po_file(Path("translations/fr-FR.po"), locale="fr-FR")
        >>> write_po_file(Path("translations/fr-FR.po"), catalog)
"""

from __future__ import annotations

import logging
import re
import tempfile
from pathlib import Path

from ..utils.core.exceptions import CatalogFormatError, FileSystemError
from .catalog import Catalog, Reference, TranslationEntry

logger = logging.getLogger(__name__)

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\v": "\\v",
}
_UNESCAPES = {escaped[1]: char for char, escaped in _ESCAPES.items()}

_KEYWORD_RE = re.compile(r'^(msgctxt|msgid_plural|msgid|msgstr)(?:\[(\d+)\])?\s+(".*")\s*$')
_UNESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)
_SEGMENT_RE = re.compile(r"[^\n]*\n|[^\n]+")

# File names containing whitespace are wrapped in FSI ... PDI, as GNU gettext does
_FSI = "\u2068"
_PDI = "\u2069"
_REFERENCE_RE = re.compile(
    rf"{_FSI}(?P<wrapped>[^{_PDI}]*){_PDI}(?::(?P<line>\d+))?|(?P<plain>\S+)"
)


def escape(text: str) -> str:
    """Escape a string for use between double quotes."""
    return "".join(_ESCAPES.get(char, char) for char in text)


def unescape(text: str) -> str:
    """Reverse :func:`escape`; unknown escapes keep the escaped character."""
    return _UNESCAPE_RE.sub(lambda m: _UNESCAPES.get(m.group(1), m.group(1)), text)


def _format_field(keyword: str, value: str) -> list[str]:
    """Render ``keyword "value"``, splitting after inner newlines gettext style."""
    if "\n" not in value[:-1]:
        return [f'{keyword} "{escape(value)}"']

    lines = [f'{keyword} ""']
    for segment in _SEGMENT_RE.findall(value):
        lines.append(f'"{escape(segment)}"')
    return lines


def _format_reference(reference: Reference) -> str:
    path, line = reference
    if any(char.isspace() for char in path):
        path = f"{_FSI}{path}{_PDI}"
    return path if line is None else f"{path}:{line}"


def format_entry(entry: TranslationEntry) -> str:
    """Render a single entry block, without the separating blank line."""
    lines: list[str] = []
    lines.extend(f"# {comment}".rstrip() for comment in entry.comments)
    lines.extend(f"#. {comment}".rstrip() for comment in entry.extracted_comments)
    lines.extend(f"#: {_format_reference(reference)}" for reference in entry.references)
    if entry.flags:
        lines.append(f"#, {', '.join(entry.flags)}")

    body: list[str] = []
    if entry.msgctxt is not None:
        body.extend(_format_field("msgctxt", entry.msgctxt))
    body.extend(_format_field("msgid", entry.msgid))
    if entry.msgid_plural is not None:
        body.extend(_format_field("msgid_plural", entry.msgid_plural))
        count = max([1, *entry.msgstr_plural.keys()]) + 1
        for index in range(count):
            body.extend(_format_field(f"msgstr[{index}]", entry.msgstr_plural.get(index, "")))
    else:
        body.extend(_format_field("msgstr", entry.msgstr))

    if entry.obsolete:
        body = [f"#~ {line}" for line in body]

    return "\n".join(lines + body) + "\n"


def dumps(catalog: Catalog) -> str:
    """
    Serialize a catalog to .po text.

    Args:
        catalog: Catalog to render

    Returns:
        Entry blocks separated by blank lines; an empty string for an empty catalog
    """
    return "\n".join(format_entry(entry) for entry in catalog)


class _PoParser:
    """Line-oriented state machine over .po text."""

    def __init__(self, text: str, catalog: Catalog) -> None:
        # Only "\n" ends a line; other line separators may appear inside strings
        self.lines: list[str] = text.split("\n")
        self.catalog: Catalog = catalog
        self._reset()

    def _reset(self) -> None:
        self.fields: dict[str, str] = {}
        self.plural_msgstrs: dict[int, str] = {}
        self.current: tuple[str, int | None] | None = None
        self.comments: list[str] = []
        self.extracted_comments: list[str] = []
        self.references: list[Reference] = []
        self.flags: list[str] = []
        self.obsolete: bool = False

    @property
    def _has_message(self) -> bool:
        return bool(self.fields) or bool(self.plural_msgstrs)

    @property
    def _has_translation(self) -> bool:
        return "msgstr" in self.fields or bool(self.plural_msgstrs)

    def parse(self) -> Catalog:
        for lineno, raw_line in enumerate(self.lines, start=1):
            line = raw_line.strip(" \t\r")
            if not line:
                if self._has_message:
                    self._flush(lineno)
                continue

            if line.startswith("#~"):
                rest = line[2:].strip(" \t")
                if rest.startswith("|") or not rest:
                    continue
                if rest.startswith(("msgctxt", "msgid ")) and self._has_translation:
                    self._flush(lineno)
                self.obsolete = True
                self._parse_content(rest, lineno)
            elif line.startswith("#"):
                if self._has_translation:
                    self._flush(lineno)
                self._parse_comment(line)
            else:
                self._parse_content(line, lineno)

        if self._has_message:
            self._flush(len(self.lines))
        return self.catalog

    def _parse_comment(self, line: str) -> None:
        marker = line[1:2]
        rest = line[2:].strip(" \t")
        if marker == ":":
            self.references.extend(_parse_references(rest))
        elif marker == ",":
            self.flags.extend(flag.strip() for flag in rest.split(",") if flag.strip())
        elif marker == ".":
            self.extracted_comments.append(rest)
        elif marker == "|":
            pass
        else:
            self.comments.append(line[2:] if marker == " " else line[1:])

    def _parse_content(self, line: str, lineno: int) -> None:
        if line.startswith('"'):
            if self.current is None:
                raise CatalogFormatError(f"Line {lineno}: continuation without keyword", line=lineno)
            self._append(self.current, _unquote(line, lineno))
            return

        match = _KEYWORD_RE.match(line)
        if match is None:
            raise CatalogFormatError(f"Line {lineno}: unexpected content {line!r}", line=lineno)

        keyword, index, quoted = match.groups()
        if keyword in ("msgctxt", "msgid") and self._has_translation:
            self._flush(lineno)
        if index is not None and keyword != "msgstr":
            raise CatalogFormatError(f"Line {lineno}: index not allowed on {keyword}", line=lineno)

        target = (keyword, int(index) if index is not None else None)
        if keyword != "msgstr" and keyword in self.fields:
            raise CatalogFormatError(f"Line {lineno}: duplicate {keyword}", line=lineno)
        self.current = target
        self._append(target, _unquote(quoted, lineno), start=True)

    def _append(self, target: tuple[str, int | None], value: str, start: bool = False) -> None:
        keyword, index = target
        if index is not None:
            self.plural_msgstrs[index] = value if start else self.plural_msgstrs[index] + value
        else:
            self.fields[keyword] = value if start else self.fields[keyword] + value

    def _flush(self, lineno: int) -> None:
        if "msgid" not in self.fields:
            raise CatalogFormatError(f"Line {lineno}: entry without msgid", line=lineno)

        msgid = self.fields["msgid"]
        msgctxt = self.fields.get("msgctxt")
        if msgid == "" and msgctxt is None:
            # Header entry
            self._reset()
            return

        entry = TranslationEntry(
            msgid=msgid,
            msgctxt=msgctxt,
            msgid_plural=self.fields.get("msgid_plural"),
            msgstr=self.fields.get("msgstr", ""),
            msgstr_plural=dict(sorted(self.plural_msgstrs.items())),
            references=self.references,
            comments=self.comments,
            extracted_comments=self.extracted_comments,
            flags=self.flags,
            obsolete=self.obsolete,
        )
        if entry.key in self.catalog:
            logger.warning(f"Line {lineno}: duplicate entry for {msgid!r}, keeping the first")
        _ = self.catalog.add(entry)
        self._reset()


def _parse_references(text: str) -> list[Reference]:
    references: list[Reference] = []
    for match in _REFERENCE_RE.finditer(text):
        plain = match.group("plain")
        if plain is not None:
            references.append(_parse_reference(plain))
            continue
        line = match.group("line")
        references.append((match.group("wrapped"), int(line) if line is not None else None))
    return references


def _parse_reference(token: str) -> Reference:
    path, sep, line = token.rpartition(":")
    if sep and line.isdigit():
        return path, int(line)
    return token, None


def _unquote(quoted: str, lineno: int) -> str:
    inner = quoted[1:-1]
    # An odd run of trailing backslashes escapes the closing quote
    trailing_backslashes = len(inner) - len(inner.rstrip("\\"))
    if len(quoted) < 2 or not quoted.endswith('"') or trailing_backslashes % 2:
        raise CatalogFormatError(f"Line {lineno}: unterminated string", line=lineno)
    return unescape(inner)


def loads(text: str, locale: str | None = None, source_locale: str | None = None) -> Catalog:
    """
    Parse .po text into a catalog.

    Args:
        text: File content
        locale: Locale to attach to the catalog
        source_locale: Source locale to attach to the catalog

    Returns:
        Parsed catalog (header entry excluded)

    Raises:
        CatalogFormatError: If the text is not well-formed
    """
    return _PoParser(text, Catalog(locale=locale, source_locale=source_locale)).parse()


def read_po_file(
    po_file: Path, locale: str | None = None, source_locale: str | None = None
) -> Catalog:
    """
    Read a catalog file.

    Raises:
        FileSystemError: If the file can't be read
        CatalogFormatError: If the file is not well-formed
    """
    try:
        text = po_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileSystemError(f"Cannot read catalog {po_file}: {e}", path=po_file) from e

    try:
        catalog = loads(text, locale=locale, source_locale=source_locale)
    except CatalogFormatError as e:
        raise CatalogFormatError(f"{po_file}: {e}", line=e.line) from e

    logger.debug(f"Parsed {len(catalog)} entries from {po_file}")
    return catalog


def write_po_file(po_file: Path, catalog: Catalog) -> None:
    """
    Write a catalog file atomically.

    The whole content is rendered first, written to a temporary file next to
    the destination and then moved over it, so a failed write never leaves a
    partial catalog behind.

    Raises:
        FileSystemError: If the directory or file can't be written
    """
    content = dumps(catalog)

    temp_path: Path | None = None
    try:
        po_file.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            newline="\n",
            dir=po_file.parent,
            prefix=f".{po_file.name}.",
            suffix=".tmp",
            delete=False,
        ) as temp_file:
            temp_path = Path(temp_file.name)
            _ = temp_file.write(content)
            temp_file.flush()

        # Atomic move
        _ = temp_path.replace(po_file)
    except OSError as e:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise FileSystemError(f"Failed to write catalog {po_file}: {e}", path=po_file) from e

    logger.info(f"Wrote {len(catalog)} entries to {po_file}")
