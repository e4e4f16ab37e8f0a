"""Tests for the style engine."""

import textwrap

from weblint.rules import base, style

_engine = style.StyleRuleEngine()

_RESET_MESSAGE = (
    "Consider adding CSS reset or normalize.css for cross-browser consistency"
)


def _messages(source: str) -> list[str]:
    return [diag.message for diag in _engine.validate(source)]


def _find(source: str, message: str) -> list[base.Diagnostic]:
    return [diag for diag in _engine.validate(source) if diag.message == message]


# ---------------------------------------------------------------------------
# Brace balance and whole-buffer checks
# ---------------------------------------------------------------------------


class TestBraces:
    def test_single_line_rule_only_suggests_reset(self) -> None:
        diags = _engine.validate("a{color:red}")
        assert [(diag.severity, diag.source, diag.message) for diag in diags] == [
            (base.Severity.INFO, "css-best-practices", _RESET_MESSAGE)
        ]

    def test_unclosed_block_reported_once_on_last_line(self) -> None:
        source = "a {\n  color: red;\n"
        diags = _find(source, "Unmatched braces in CSS")
        assert [(diag.line, diag.severity) for diag in diags] == [
            (3, base.Severity.ERROR)
        ]

    def test_extra_close_reported_once(self) -> None:
        source = "a {\n}\n}\n}"
        assert _messages(source).count("Unmatched braces in CSS") == 1

    def test_balanced_nested_blocks(self) -> None:
        source = textwrap.dedent("""\
            @media (max-width: 600px) {
              .card {
                margin: 0;
              }
            }
        """)
        assert "Unmatched braces in CSS" not in _messages(source)

    def test_braces_on_comment_lines_not_counted(self) -> None:
        source = "/* { */\na { color: red; }"
        assert "Unmatched braces in CSS" not in _messages(source)

    def test_reset_markers_silence_suggestion(self) -> None:
        assert _RESET_MESSAGE not in _messages("* {\n  box-sizing: border-box;\n}")
        assert _RESET_MESSAGE not in _messages("body {\n  margin: 0;\n}")

    def test_reset_suggestion_comes_last(self) -> None:
        assert _messages("a {")[-1] == _RESET_MESSAGE


# ---------------------------------------------------------------------------
# Declaration checks
# ---------------------------------------------------------------------------


class TestDeclarations:
    def test_line_comment_is_syntax_error(self) -> None:
        diags = _find("a {\n  // note\n}", "Use /* */ for CSS comments, not //")
        assert [(diag.line, diag.column, diag.source) for diag in diags] == [
            (2, 3, "css-syntax")
        ]

    def test_missing_semicolon(self) -> None:
        diags = _find("a {\n  color: red\n}", "Missing semicolon")
        assert [(diag.line, diag.column) for diag in diags] == [(2, 12)]

    def test_semicolon_present(self) -> None:
        assert "Missing semicolon" not in _messages("a {\n  color: red;\n}")

    def test_declarations_outside_blocks_ignored(self) -> None:
        assert "Missing semicolon" not in _messages("color: red")

    def test_deprecated_filter_property(self) -> None:
        assert "Property 'filter' is deprecated" in _messages(
            "a {\n  filter: blur(2px);\n}"
        )

    def test_vendor_prefix_without_standard(self) -> None:
        diags = _find(
            "a {\n  -webkit-transform: none;\n}",
            "Consider adding standard property 'transform' after vendor prefix",
        )
        assert [(diag.line, diag.severity) for diag in diags] == [
            (2, base.Severity.INFO)
        ]

    def test_vendor_prefix_with_standard_sibling(self) -> None:
        source = textwrap.dedent("""\
            a {
              -webkit-transform: none;
              transform: none;
            }
        """)
        assert not any("standard property" in msg for msg in _messages(source))

    def test_invalid_hex_color(self) -> None:
        diags = _find("a {\n  color: #ffff;\n}", "Invalid hex color format")
        assert [(diag.line, diag.column, diag.severity) for diag in diags] == [
            (2, 7, base.Severity.ERROR)
        ]

    def test_valid_hex_colors(self) -> None:
        source = textwrap.dedent("""\
            a {
              color: #fff;
              background-color: #A1B2C3;
            }
        """)
        assert "Invalid hex color format" not in _messages(source)

    def test_hex_check_only_for_color_properties(self) -> None:
        assert "Invalid hex color format" not in _messages(
            "a {\n  content: #ab;\n}"
        )

    def test_unitless_number_flagged(self) -> None:
        assert "Numeric value should include a unit (px, em, %, etc.)" in _messages(
            "a {\n  width: 10;\n}"
        )

    def test_unitless_exemptions(self) -> None:
        source = textwrap.dedent("""\
            a {
              z-index: 10;
              opacity: 1;
              font-weight: 700;
              line-height: 2;
              flex-grow: 1;
            }
        """)
        assert "Numeric value should include a unit (px, em, %, etc.)" not in _messages(
            source
        )

    def test_absolute_position_info(self) -> None:
        diags = _find(
            "a {\n  position: absolute;\n}",
            "Consider using flexbox or grid instead of absolute positioning when possible",
        )
        assert [diag.source for diag in diags] == ["css-performance"]

    def test_small_font_size_warning(self) -> None:
        diags = _find(
            "a {\n  font-size: 10px;\n}",
            "Font size below 12px may cause accessibility issues",
        )
        assert [(diag.line, diag.source) for diag in diags] == [
            (2, "css-accessibility")
        ]

    def test_readable_font_size_ok(self) -> None:
        assert not any(
            "Font size" in msg for msg in _messages("a {\n  font-size: 14px;\n}")
        )

    def test_font_size_in_em_ignored(self) -> None:
        assert not any(
            "Font size" in msg for msg in _messages("a {\n  font-size: 0.5em;\n}")
        )


# ---------------------------------------------------------------------------
# Selector checks
# ---------------------------------------------------------------------------


class TestSelectors:
    def test_universal_selector(self) -> None:
        diags = _find("* {\n}", "Universal selector (*) can impact performance")
        assert [(diag.line, diag.column) for diag in diags] == [(1, 1)]

    def test_complex_selector(self) -> None:
        assert "Overly complex selector - consider simplifying" in _messages(
            "nav > ul li + a ~ span {\n}"
        )

    def test_simple_selector_ok(self) -> None:
        assert "Overly complex selector - consider simplifying" not in _messages(
            "nav ul li {\n}"
        )

    def test_important_on_selector_line(self) -> None:
        assert "Avoid using !important - restructure CSS instead" in _messages(
            "a !important {\n}"
        )

    def test_nested_selector_not_checked(self) -> None:
        source = textwrap.dedent("""\
            @media screen {
              * {
              }
            }
        """)
        assert "Universal selector (*) can impact performance" not in _messages(
            source
        )

    def test_selector_after_closed_block_not_treated_as_declaration(self) -> None:
        source = textwrap.dedent("""\
            a {
              color: red;
            }
            b:hover, c:focus {
              color: blue;
            }
        """)
        assert _messages(source) == [_RESET_MESSAGE]


class TestDeterminism:
    def test_repeated_runs_identical(self) -> None:
        source = "a {\n  color: #12;\n  width: 3\n// x\n"
        assert _engine.validate(source) == _engine.validate(source)

    def test_positions_are_positive(self) -> None:
        source = "}\n* {\n  font-size: 2px\n  color: #1\n"
        assert all(
            diag.line >= 1 and diag.column >= 1 for diag in _engine.validate(source)
        )
