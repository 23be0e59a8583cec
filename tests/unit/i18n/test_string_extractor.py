"""
Tests for the JavaScript string extractor.

This module covers marker detection, argument handling for the three
function roles, literal decoding and the handling of malformed sources.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from jsl10n.config.schema import FunctionRole
from jsl10n.i18n.catalog import EntryKey
from jsl10n.i18n.string_extractor import (
    ExtractedMessage,
    extract_catalog,
    extract_strings,
    extract_strings_from_file,
)
from jsl10n.utils.core.exceptions import ExtractionError


class TestMarkerCalls:
    """Test recognition of marker function calls."""

    def test_plain_call(self) -> None:
        """A t() call yields its first argument as msgid."""
        assert extract_strings('t("Hello")') == [ExtractedMessage("Hello", 1)]

    def test_contextual_call(self) -> None:
        """An x() call yields context and msgid."""
        messages = extract_strings("x('menu', 'Open')")

        assert messages == [ExtractedMessage("Open", 1, msgctxt="menu")]

    def test_plural_call(self) -> None:
        """An n() call yields singular and plural, ignoring the count."""
        messages = extract_strings('n("One file", "%d files", count)')

        assert messages == [ExtractedMessage("One file", 1, msgid_plural="%d files")]

    def test_member_call(self) -> None:
        """Markers called as methods are recognized."""
        messages = extract_strings('i18n.t("Save"); this.x("verb", "Save")')

        assert [m.msgid for m in messages] == ["Save", "Save"]
        assert messages[1].msgctxt == "verb"

    def test_whitespace_and_comments_before_parenthesis(self) -> None:
        """Whitespace and comments may separate the name and the call."""
        messages = extract_strings('t /* label */ (\n  "Spaced"\n)')

        assert messages == [ExtractedMessage("Spaced", 1)]

    def test_other_identifiers_are_ignored(self) -> None:
        """Identifiers merely containing a marker name don't match."""
        source = 'cat("a"); test("b"); t_("c"); $t("d"); tt("e")'

        assert extract_strings(source) == []

    def test_function_definition_is_not_a_call(self) -> None:
        """Declaring a marker function does not produce entries."""
        assert extract_strings('function t(text = "fallback") { return text; }') == []

    def test_custom_functions(self) -> None:
        """Configured marker names replace the defaults."""
        functions = {"__": FunctionRole.GETTEXT, "_p": FunctionRole.PGETTEXT}
        source = '__("A"); _p("ctx", "B"); t("ignored")'

        messages = extract_strings(source, functions)

        assert messages == [
            ExtractedMessage("A", 1),
            ExtractedMessage("B", 1, msgctxt="ctx"),
        ]

    def test_nested_calls(self) -> None:
        """Markers nested in another marker's arguments are found."""
        messages = extract_strings('t(x("ctx", "Inner"))')

        assert messages == [ExtractedMessage("Inner", 1, msgctxt="ctx")]


class TestArguments:
    """Test handling of call arguments."""

    def test_variable_argument_is_skipped(self) -> None:
        """Calls with a non-literal text argument are skipped."""
        assert extract_strings("t(label)") == []

    def test_missing_arguments_are_skipped(self) -> None:
        """Calls without enough arguments are skipped."""
        assert extract_strings('t(); x("only-context"); n("singular")') == []

    def test_non_literal_context_is_skipped(self) -> None:
        """A contextual call needs a literal context too."""
        assert extract_strings('x(ctx, "Text")') == []

    def test_extra_arguments_are_ignored(self) -> None:
        """Arguments beyond the literal ones may be anything."""
        messages = extract_strings('t("Hi %s", user.name, { escape: true })')

        assert messages == [ExtractedMessage("Hi %s", 1)]

    def test_empty_msgid_is_skipped(self) -> None:
        """An empty string is never a msgid."""
        assert extract_strings('t("")') == []

    def test_concatenated_literals(self) -> None:
        """Concatenations of literals are joined."""
        messages = extract_strings('t("Hello, " +\n  "world")')

        assert messages == [ExtractedMessage("Hello, world", 1)]

    def test_concatenation_with_variable_is_skipped(self) -> None:
        """A concatenation involving a variable is not static."""
        assert extract_strings('t("Hello " + name)') == []

    def test_template_literal_without_substitution(self) -> None:
        """Template literals without ${} are static."""
        assert extract_strings("t(`Plain`)") == [ExtractedMessage("Plain", 1)]

    def test_template_literal_with_substitution_is_skipped(self) -> None:
        """Template literals with ${} are not static."""
        assert extract_strings("t(`Hi ${name}`)") == []

    def test_trailing_comma(self) -> None:
        """A trailing comma does not add an argument."""
        assert extract_strings('t("Trailing",)') == [ExtractedMessage("Trailing", 1)]


class TestLiterals:
    """Test decoding of string literals."""

    def test_escaped_quotes(self) -> None:
        """Escaped quotes are part of the text."""
        messages = extract_strings(r't("Say \"hi\"") + t(' + "'It\\'s')")

        assert [m.msgid for m in messages] == ['Say "hi"', "It's"]

    def test_other_quote_style_inside_string(self) -> None:
        """The other quote character needs no escaping."""
        assert extract_strings("""t("It's")""") == [ExtractedMessage("It's", 1)]

    def test_escape_sequences(self) -> None:
        """Standard escapes are decoded."""
        messages = extract_strings(r't("Tab\there\nline \\ \x41B\u{43}")')

        assert messages[0].msgid == "Tab\there\nline \\ ABC"

    def test_line_continuation(self) -> None:
        """A backslash before a newline continues the string."""
        messages = extract_strings('t("Long \\\ntext")')

        assert messages == [ExtractedMessage("Long text", 1)]


class TestSkippedRegions:
    """Test that comments, strings and regexes never produce calls."""

    def test_line_comment(self) -> None:
        """Calls in line comments are ignored."""
        assert extract_strings('// t("Commented")\nt("Live")') == [ExtractedMessage("Live", 2)]

    def test_block_comment(self) -> None:
        """Calls in block comments are ignored."""
        assert extract_strings('/* t("Commented") */ t("Live")') == [ExtractedMessage("Live", 1)]

    def test_marker_inside_string(self) -> None:
        """Marker-like text inside a string is not a call."""
        assert extract_strings('const s = "t(\\"Nope\\")";') == []

    def test_calls_inside_template_substitutions(self) -> None:
        """Markers inside ${} are found once, with their own line."""
        source = 'const s = `${t("Hi")}, ${\n  n("item", "items", k)\n}`;\nt(`${t("Inner")}`);'

        messages = extract_strings(source)

        assert messages == [
            ExtractedMessage("Hi", 1),
            ExtractedMessage("item", 2, msgid_plural="items"),
            ExtractedMessage("Inner", 4),
        ]

    def test_regex_literal(self) -> None:
        """Quotes inside a regex literal don't open strings."""
        source = 'const re = /["]/g;\nt("After regex")'

        assert extract_strings(source) == [ExtractedMessage("After regex", 2)]

    def test_division_is_not_a_regex(self) -> None:
        """Slashes after an operand are divisions."""
        source = 'const half = total / 2; const q = a / b / c; t("Ratio")'

        assert extract_strings(source) == [ExtractedMessage("Ratio", 1)]

    @pytest.mark.parametrize("operator", ["++", "--"])
    def test_postfix_operator_before_division(self, operator: str) -> None:
        """A slash after a postfix increment or decrement is a division."""
        source = f'a = i{operator} / 2 + t("Hi") / 3;\n'

        assert extract_strings(source) == [ExtractedMessage("Hi", 1)]

    def test_postfix_operator_inside_call(self) -> None:
        """Postfix operators in later arguments don't hide the closing parenthesis."""
        source = 'n("One", "Many", i++ / 2); t("After")'

        assert extract_strings(source) == [
            ExtractedMessage("One", 1, msgid_plural="Many"),
            ExtractedMessage("After", 1),
        ]

    def test_prefix_operator_before_regex(self) -> None:
        """A slash after a prefix operator still starts a regex."""
        source = 'x = ++/["]/.lastIndex;\nt("After")'

        assert extract_strings(source) == [ExtractedMessage("After", 2)]

    def test_stray_apostrophe_in_markup(self) -> None:
        """An apostrophe in JSX text doesn't hide the rest of the file."""
        source = "const a = <p>Don't</p>;\nconst b = t(\"Hello\");\n"

        assert extract_strings(source) == [ExtractedMessage("Hello", 2)]


class TestLineNumbers:
    """Test that call sites are located correctly."""

    def test_line_of_call(self) -> None:
        """The line is the line of the marker name."""
        source = 'const a = 1;\n\nfoo(\n  t(\n    "Multi-line"\n  )\n);'

        assert extract_strings(source) == [ExtractedMessage("Multi-line", 4)]

    def test_repeated_string_on_two_lines(self) -> None:
        """Each call site produces a message."""
        messages = extract_strings('t("Hello");\nt("Hello");')

        assert [(m.msgid, m.line) for m in messages] == [("Hello", 1), ("Hello", 2)]


class TestMalformedSources:
    """Test errors raised for sources that can't be tokenized."""

    @pytest.mark.parametrize(
        "source",
        [
            't("unterminated',
            '/* never closed t("x")',
            't("open call"',
            "t(`template ${ never closed`)",
            't("bad \\x4")',
        ],
    )
    def test_extraction_error(self, source: str) -> None:
        """Unterminated constructs raise ExtractionError."""
        with pytest.raises(ExtractionError):
            _ = extract_strings(source)

    def test_error_carries_line(self) -> None:
        """The error reports where the construct started."""
        with pytest.raises(ExtractionError) as exc_info:
            _ = extract_strings('ok();\n\nt("broken')

        assert exc_info.value.line == 3


class TestExtractCatalog:
    """Test building a catalog from files."""

    def test_duplicate_call_sites_collapse(self, tmp_path: Path) -> None:
        """The same string at two call sites is one entry with two references."""
        source = tmp_path / "app.js"
        _ = source.write_text('t("Hello");\nconsole.log(t("Hello"));\n', encoding="utf-8")

        catalog = extract_catalog({source: "app.js"})

        assert len(catalog) == 1
        entry = catalog.get(EntryKey("Hello"))
        assert entry is not None
        assert entry.references == [("app.js", 1), ("app.js", 2)]

    def test_context_distinguishes_entries(self, tmp_path: Path) -> None:
        """Same msgid with different contexts gives separate entries."""
        source = tmp_path / "app.js"
        _ = source.write_text('t("Open"); x("door", "Open"); x("file", "Open");', encoding="utf-8")

        catalog = extract_catalog({source: "app.js"})

        assert catalog.keys() == [
            EntryKey("Open"),
            EntryKey("Open", "door"),
            EntryKey("Open", "file"),
        ]

    def test_malformed_file_is_skipped(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A malformed file is logged and skipped, other files still count."""
        broken = tmp_path / "broken.js"
        _ = broken.write_text('t("never closed', encoding="utf-8")
        good = tmp_path / "good.js"
        _ = good.write_text('t("Fine")', encoding="utf-8")

        catalog = extract_catalog({broken: "broken.js", good: "good.js"})

        assert catalog.keys() == [EntryKey("Fine")]
        assert "Skipping broken.js" in caplog.text

    def test_undecodable_file_is_skipped(self, tmp_path: Path) -> None:
        """Files that aren't UTF-8 are skipped."""
        binary = tmp_path / "binary.js"
        _ = binary.write_bytes(b"t('\xff\xfe')")

        catalog = extract_catalog({binary: "binary.js"})

        assert len(catalog) == 0

    def test_source_locale_is_attached(self) -> None:
        """The catalog records the source locale and no target locale."""
        catalog = extract_catalog({}, source_locale="en-US")

        assert catalog.source_locale == "en-US"
        assert catalog.locale is None

    def test_extract_strings_from_file(self, tmp_path: Path) -> None:
        """File extraction reads UTF-8 text."""
        source = tmp_path / "app.mjs"
        _ = source.write_text('export const title = t("Café");', encoding="utf-8")

        assert extract_strings_from_file(source) == [ExtractedMessage("Café", 1)]
