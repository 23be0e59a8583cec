"""
String extraction utilities for JavaScript sources.

This module scans JavaScript files for calls to translation marker functions
and turns their literal arguments into catalog entries. It is a lightweight
lexer, not a JavaScript parser: it understands comments, string, template and
regular expression literals well enough never to mistake their content for a
call, and it reads the leading arguments of every marker call.

Usage Examples:
    Extract strings from source text:
        >>> from jsl10n.i18n.string_extractor import extract_strings
        >>> extract_strings('t("Hello")')
        [ExtractedMessage(msgid='Hello', line=1, msgctxt=None, msgid_plural=None)]

    Extract a catalog from discovered files:
        >>> from jsl10n.i18n.file_locator import find_source_files
        >>> catalog = extract_catalog(find_source_files(root, "translations"))
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import NamedTuple

from ..config.schema import DEFAULT_FUNCTIONS, FunctionRole
from ..utils.core.exceptions import ExtractionError
from .catalog import Catalog

logger = logging.getLogger(__name__)

QUOTES = "'\"`"

SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
}

# Tokens after which a slash starts a regular expression rather than a division
REGEX_PRECEDING_PUNCTUATION = set("(,=:[!&|?{};+-*%<>~^")
REGEX_PRECEDING_KEYWORDS = {
    "return",
    "typeof",
    "case",
    "do",
    "else",
    "in",
    "instanceof",
    "new",
    "delete",
    "void",
    "throw",
    "yield",
    "await",
}

REQUIRED_ARGUMENTS = {
    FunctionRole.GETTEXT: 1,
    FunctionRole.PGETTEXT: 2,
    FunctionRole.NGETTEXT: 2,
}


class ExtractedMessage(NamedTuple):
    """A message found at one call site."""

    msgid: str
    line: int
    msgctxt: str | None = None
    msgid_plural: str | None = None


def _is_identifier_start(char: str) -> bool:
    return char.isalpha() or char in "_$"


def _is_identifier_part(char: str) -> bool:
    return char.isalnum() or char in "_$"


class StringExtractor:
    """Single-pass scanner collecting marker calls from one source text."""

    def __init__(
        self, source: str, functions: Mapping[str, FunctionRole] | None = None
    ) -> None:
        """
        Initialize the string extractor.

        Args:
            source: JavaScript source text
            functions: Marker function names and their roles
        """
        self.source: str = source
        self.functions: dict[str, FunctionRole] = dict(
            functions if functions is not None else DEFAULT_FUNCTIONS
        )
        self.messages: list[ExtractedMessage] = []
        self._line_starts: list[int] = [0] + [
            index + 1 for index, char in enumerate(source) if char == "\n"
        ]

    def line_of(self, pos: int) -> int:
        """1-based line number of a character offset."""
        return bisect.bisect_right(self._line_starts, pos)

    def scan(self) -> list[ExtractedMessage]:
        """
        Scan the whole source.

        Returns:
            Messages in source order

        Raises:
            ExtractionError: On an unterminated string, comment, template or call
        """
        src = self.source
        length = len(src)
        pos = 0
        prev = ""  # last significant token, used to tell regexes from divisions

        while pos < length:
            char = src[pos]

            if char.isspace():
                pos += 1
            elif src.startswith("//", pos) or src.startswith("/*", pos):
                pos = self._skip_comment(pos)
            elif char in QUOTES:
                value, end = self._read_string(pos, collect=True, lenient=True)
                if value is None and end == pos + 1:
                    # Stray quote, e.g. an apostrophe in JSX text
                    pos = end
                    prev = char
                    continue
                pos = end
                prev = "literal"
            elif char == "/" and self._regex_allowed(prev):
                pos = self._skip_regex(pos)
                prev = "literal"
            elif _is_identifier_start(char):
                end = pos
                while end < length and _is_identifier_part(src[end]):
                    end += 1
                name = src[pos:end]
                if name in self.functions and prev != "function":
                    open_pos = self._skip_insignificant(end)
                    if open_pos < length and src[open_pos] == "(":
                        self._extract_call(name, pos, open_pos)
                        # Resume inside the call so nested markers are found
                        pos = open_pos + 1
                        prev = "("
                        continue
                pos = end
                prev = name
            elif char.isdigit():
                while pos < length and (_is_identifier_part(src[pos]) or src[pos] == "."):
                    pos += 1
                prev = "literal"
            elif src.startswith(("++", "--"), pos):
                # A postfix increment ends an operand, so a following slash divides
                pos += 2
                prev = "literal" if self._is_operand(prev) else char
            else:
                pos += 1
                prev = char

        return self.messages

    @staticmethod
    def _is_operand(prev: str) -> bool:
        if prev in ("literal", ")", "]"):
            return True
        return (
            bool(prev)
            and _is_identifier_start(prev[0])
            and prev not in REGEX_PRECEDING_KEYWORDS
        )

    def _regex_allowed(self, prev: str) -> bool:
        return prev == "" or prev in REGEX_PRECEDING_PUNCTUATION or prev in REGEX_PRECEDING_KEYWORDS

    def _skip_insignificant(self, pos: int) -> int:
        """Skip whitespace and comments."""
        src = self.source
        while pos < len(src):
            if src[pos].isspace():
                pos += 1
            elif src.startswith("//", pos) or src.startswith("/*", pos):
                pos = self._skip_comment(pos)
            else:
                break
        return pos

    def _skip_comment(self, pos: int) -> int:
        src = self.source
        if src.startswith("//", pos):
            end = src.find("\n", pos)
            return len(src) if end == -1 else end + 1

        end = src.find("*/", pos + 2)
        if end == -1:
            raise ExtractionError(
                f"Unterminated block comment starting at line {self.line_of(pos)}",
                line=self.line_of(pos),
            )
        return end + 2

    def _skip_regex(self, pos: int) -> int:
        """
        Skip a regular expression literal starting at pos.

        Falls back to treating the slash as a division operator when no
        closing slash is found on the same line.
        """
        src = self.source
        i = pos + 1
        in_class = False
        while i < len(src):
            char = src[i]
            if char == "\\":
                i += 2
                continue
            if char == "\n":
                break
            if in_class:
                if char == "]":
                    in_class = False
            elif char == "[":
                in_class = True
            elif char == "/":
                i += 1
                while i < len(src) and _is_identifier_part(src[i]):
                    i += 1
                return i
            i += 1
        return pos + 1

    def _read_string(
        self, pos: int, collect: bool = False, lenient: bool = False
    ) -> tuple[str | None, int]:
        """
        Read a string or template literal.

        Args:
            pos: Offset of the opening quote
            collect: Also collect marker calls inside ``${...}`` substitutions
            lenient: Treat a quote left open at the end of its line as a stray
                character and return (None, pos + 1) instead of raising

        Returns:
            Tuple of (decoded value, offset after the closing quote). The value
            is None for template literals containing substitutions.
        """
        src = self.source
        quote = src[pos]
        chunks: list[str] = []
        static = True
        i = pos + 1

        while i < len(src):
            char = src[i]
            if char == "\\":
                text, i = self._read_escape(i)
                chunks.append(text)
            elif char == quote:
                return ("".join(chunks) if static else None), i + 1
            elif char == "\n" and quote != "`":
                break
            elif quote == "`" and src.startswith("${", i):
                static = False
                end = self._skip_template_expression(i + 2)
                if collect:
                    self._scan_substitution(i + 2, end - 1)
                i = end
            else:
                chunks.append(char)
                i += 1

        if lenient and quote != "`":
            logger.debug(f"Ignoring stray {quote} at line {self.line_of(pos)}")
            return None, pos + 1
        raise ExtractionError(
            f"Unterminated string literal starting at line {self.line_of(pos)}",
            line=self.line_of(pos),
        )

    def _read_escape(self, pos: int) -> tuple[str, int]:
        """Decode the escape sequence whose backslash is at pos."""
        src = self.source
        if pos + 1 >= len(src):
            raise ExtractionError(
                f"Dangling escape at line {self.line_of(pos)}", line=self.line_of(pos)
            )

        char = src[pos + 1]
        if char in SIMPLE_ESCAPES:
            return SIMPLE_ESCAPES[char], pos + 2
        if char == "\r":
            # Line continuation, CRLF flavour
            return "", pos + 3 if src.startswith("\n", pos + 2) else pos + 2
        if char in "\n\u2028\u2029":
            return "", pos + 2
        if char == "0" and not (pos + 2 < len(src) and src[pos + 2].isdigit()):
            return "\0", pos + 2
        if char == "x":
            return self._decode_hex(pos, pos + 2, pos + 4), pos + 4
        if char == "u":
            if src.startswith("{", pos + 2):
                end = src.find("}", pos + 3)
                if end == -1:
                    raise ExtractionError(
                        f"Invalid unicode escape at line {self.line_of(pos)}",
                        line=self.line_of(pos),
                    )
                return self._decode_hex(pos, pos + 3, end), end + 1
            return self._decode_hex(pos, pos + 2, pos + 6), pos + 6
        return char, pos + 2

    def _decode_hex(self, pos: int, start: int, end: int) -> str:
        digits = self.source[start:end]
        try:
            if not digits or len(digits) != end - start:
                raise ValueError(digits)
            return chr(int(digits, 16))
        except (ValueError, OverflowError) as e:
            raise ExtractionError(
                f"Invalid escape sequence at line {self.line_of(pos)}",
                line=self.line_of(pos),
            ) from e

    def _skip_template_expression(self, pos: int) -> int:
        """Skip a ``${...}`` substitution; pos is just past the opening brace."""
        src = self.source
        depth = 1
        i = pos
        while i < len(src):
            char = src[i]
            if src.startswith("//", i) or src.startswith("/*", i):
                i = self._skip_comment(i)
            elif char in QUOTES:
                _, i = self._read_string(i)
            elif char == "{":
                depth += 1
                i += 1
            elif char == "}":
                depth -= 1
                i += 1
                if depth == 0:
                    return i
            else:
                i += 1

        raise ExtractionError(
            f"Unterminated template substitution at line {self.line_of(pos)}",
            line=self.line_of(pos),
        )

    def _scan_substitution(self, start: int, end: int) -> None:
        """Collect marker calls from the expression source[start:end]."""
        nested = StringExtractor(self.source[start:end], self.functions)
        offset = self.line_of(start) - 1
        for message in nested.scan():
            self.messages.append(message._replace(line=message.line + offset))

    def _parse_arguments(self, name: str, open_pos: int) -> list[str | None]:
        """
        Read the arguments of a call.

        Each argument is its literal value when it is a string literal or a
        ``+`` concatenation of string literals, and None otherwise.
        """
        src = self.source
        args: list[str | None] = []
        parts: list[str] = []
        static = True
        expect_operand = True
        seen = False
        depth = 0
        prev = "("
        i = open_pos + 1

        def finish() -> str | None:
            if static and parts and not expect_operand:
                return "".join(parts)
            return None

        while i < len(src):
            char = src[i]

            if char.isspace():
                i += 1
                continue
            if src.startswith("//", i) or src.startswith("/*", i):
                i = self._skip_comment(i)
                continue

            if depth == 0 and char == ",":
                args.append(finish())
                parts, static, expect_operand, seen = [], True, True, False
                prev = char
                i += 1
                continue
            if depth == 0 and char == ")":
                if seen:
                    args.append(finish())
                return args

            seen = True
            if char in QUOTES:
                value, i = self._read_string(i)
                if depth == 0 and value is not None and expect_operand:
                    parts.append(value)
                    expect_operand = False
                else:
                    static = False
                prev = "literal"
                continue

            if src.startswith(("++", "--"), i):
                static = False
                prev = char if prev in REGEX_PRECEDING_PUNCTUATION else "literal"
                i += 2
                continue

            if char == "/" and prev in REGEX_PRECEDING_PUNCTUATION:
                static = False
                i = self._skip_regex(i)
                prev = "literal"
                continue

            if char in "([{":
                depth += 1
                static = False
            elif char in ")]}":
                if depth == 0:
                    raise ExtractionError(
                        f"Unbalanced '{char}' in call to {name} at line {self.line_of(i)}",
                        line=self.line_of(i),
                    )
                depth -= 1
            elif char == "+" and depth == 0 and not expect_operand and parts:
                expect_operand = True
            else:
                static = False
            prev = char
            i += 1

        raise ExtractionError(
            f"Unterminated call to {name} at line {self.line_of(open_pos)}",
            line=self.line_of(open_pos),
        )

    def _extract_call(self, name: str, name_pos: int, open_pos: int) -> None:
        line = self.line_of(name_pos)
        args = self._parse_arguments(name, open_pos)
        role = self.functions[name]

        needed = REQUIRED_ARGUMENTS[role]
        literal_args = args[:needed]
        if len(literal_args) < needed or any(arg is None for arg in literal_args):
            logger.debug(f"Skipping non-literal call to {name}() at line {line}")
            return

        msgctxt: str | None = None
        msgid_plural: str | None = None
        match role:
            case FunctionRole.GETTEXT:
                msgid = literal_args[0]
            case FunctionRole.PGETTEXT:
                msgctxt, msgid = literal_args[0], literal_args[1]
            case FunctionRole.NGETTEXT:
                msgid, msgid_plural = literal_args[0], literal_args[1]

        if not msgid:
            logger.debug(f"Skipping empty msgid in call to {name}() at line {line}")
            return

        self.messages.append(
            ExtractedMessage(
                msgid=msgid, line=line, msgctxt=msgctxt, msgid_plural=msgid_plural
            )
        )
        logger.debug(f"Found translatable string: '{msgid}' at line {line}")


def extract_strings(
    source: str, functions: Mapping[str, FunctionRole] | None = None
) -> list[ExtractedMessage]:
    """
    Extract translatable strings from JavaScript source text.

    Args:
        source: Source text
        functions: Marker function names and their roles (defaults to t/x/n)

    Returns:
        Messages in source order

    Raises:
        ExtractionError: If the source cannot be tokenized
    """
    return StringExtractor(source, functions).scan()


def extract_strings_from_file(
    filepath: Path, functions: Mapping[str, FunctionRole] | None = None
) -> list[ExtractedMessage]:
    """
    Extract translatable strings from a single JavaScript file.

    Args:
        filepath: Path to the file to process
        functions: Marker function names and their roles

    Returns:
        Messages in source order

    Raises:
        OSError: If the file can't be read
        UnicodeDecodeError: If the file is not UTF-8
        ExtractionError: If the file cannot be tokenized
    """
    content = filepath.read_text(encoding="utf-8")
    messages = extract_strings(content, functions)
    logger.debug(f"Extracted {len(messages)} strings from {filepath}")
    return messages


def extract_catalog(
    files: Mapping[Path, str],
    functions: Mapping[str, FunctionRole] | None = None,
    source_locale: str | None = None,
) -> Catalog:
    """
    Build a locale-less catalog from every discovered source file.

    Files that can't be read or tokenized are logged and skipped; the
    catalog then lacks their strings but the run continues.

    Args:
        files: Mapping of absolute path to project-relative alias
        functions: Marker function names and their roles
        source_locale: Locale the source strings are written in

    Returns:
        Catalog with one untranslated entry per distinct message identity
    """
    catalog = Catalog(source_locale=source_locale)
    skipped = 0

    for filepath, alias in files.items():
        try:
            messages = extract_strings_from_file(filepath, functions)
        except (ExtractionError, OSError, UnicodeDecodeError) as e:
            logger.warning(f"Skipping {alias} due to error: {e}")
            skipped += 1
            continue

        for message in messages:
            _ = catalog.add_message(
                message.msgid,
                msgctxt=message.msgctxt,
                msgid_plural=message.msgid_plural,
                reference=(alias, message.line),
            )

    logger.info(
        f"Scanned {len(files) - skipped} files ({skipped} skipped), "
        f"found {len(catalog)} translatable strings"
    )
    return catalog
