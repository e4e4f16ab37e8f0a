"""Style rules: brace balance, declaration checks, selector checks."""

from __future__ import annotations

import re

from weblint.rules import base

_DEPRECATED_PROPERTIES: frozenset[str] = frozenset(
    {"filter", "-webkit-filter", "-moz-filter"}
)

_VENDOR_PREFIXES: tuple[str, ...] = ("-webkit-", "-moz-", "-ms-", "-o-")
_VENDOR_PREFIX_PAT = re.compile(r"^-\w+-")

_HEX_COLOR_PAT = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")
_BARE_INTEGER_PAT = re.compile(r"^\d+$")
_LEADING_INTEGER_PAT = re.compile(r"^\s*[+-]?\d+")

# Matched as substrings of the property name.
_UNITLESS_EXEMPT: tuple[str, ...] = (
    "0",
    "z-index",
    "opacity",
    "font-weight",
    "line-height",
    "flex",
)

_COMBINATOR_PAT = re.compile(r"[ >+~]")
_MAX_SELECTOR_COMBINATORS: int = 3
_MIN_FONT_SIZE_PX: int = 12

_RESET_MARKERS: tuple[str, ...] = ("box-sizing", "margin: 0", "padding: 0")


def _property_name(line: str) -> str:
    return line.strip().split(":", 1)[0].strip()


def _has_standard_sibling(lines: list[str], lineno: int, standard: str) -> bool:
    """Return True if a line other than *lineno* declares *standard*."""
    return any(
        _property_name(other) == standard
        for other_lineno, other in enumerate(lines, start=1)
        if other_lineno != lineno and ":" in other
    )


def _leading_integer(value: str) -> int | None:
    match = _LEADING_INTEGER_PAT.match(value)
    return int(match.group(0)) if match else None


class StyleRuleEngine(base.Engine):
    """Validate a CSS buffer with a textual brace-depth counter.

    The depth counter counts every ``{`` and ``}`` on a scanned line,
    including those inside strings and comments. Blank lines and lines that
    open a block comment are skipped entirely. Declarations are only checked
    while depth is positive and the previous brace seen was an opening one,
    so selector lines following a closed block are not mistaken for
    declarations.

    Allowed:
        .card {
          margin: 0;
          color: #fff;
        }

    Flagged:
        .card {
          color: #ffff          # invalid hex, missing semicolon
          width: 10             # missing unit
        // note                 # line comment
    """

    language = base.Language.CSS

    def validate(self, source: str) -> list[base.Diagnostic]:
        """Return style diagnostics in evaluation order."""
        diagnostics: list[base.Diagnostic] = []
        lines = source.split("\n")
        depth = 0
        is_after_close = False

        for lineno, line in enumerate(lines, start=1):
            trimmed = line.strip()
            if not trimmed or trimmed.startswith("/*"):
                continue

            if "//" in trimmed:
                diagnostics.append(
                    base.at(
                        lineno,
                        line.find("//") + 1,
                        "Use /* */ for CSS comments, not //",
                        base.Severity.ERROR,
                        "css-syntax",
                    )
                )

            open_braces = line.count("{")
            close_braces = line.count("}")
            depth += open_braces - close_braces

            if depth > 0 and not is_after_close and ":" in trimmed:
                diagnostics.extend(self._check_declaration(line, lineno, lines))

            if trimmed.endswith("{") and depth == 1:
                diagnostics.extend(self._check_selector(trimmed, lineno))

            if open_braces > 0:
                is_after_close = False
            if close_braces > 0:
                is_after_close = True

        if depth != 0:
            diagnostics.append(
                base.at(
                    len(lines),
                    1,
                    "Unmatched braces in CSS",
                    base.Severity.ERROR,
                    "css-validator",
                )
            )

        if not any(marker in source for marker in _RESET_MARKERS):
            diagnostics.append(
                base.at(
                    1,
                    1,
                    "Consider adding CSS reset or normalize.css for cross-browser consistency",
                    base.Severity.INFO,
                    "css-best-practices",
                )
            )
        return diagnostics

    def _check_declaration(
        self,
        line: str,
        lineno: int,
        lines: list[str],
    ) -> list[base.Diagnostic]:
        diagnostics: list[base.Diagnostic] = []
        trimmed = line.strip()
        colon = trimmed.index(":")
        prop = trimmed[:colon].strip()
        value = trimmed[colon + 1 :].replace(";", "", 1).strip()
        value_column = colon + 2

        if not trimmed.endswith((";", "{", "}")):
            diagnostics.append(
                base.at(
                    lineno,
                    len(line),
                    "Missing semicolon",
                    base.Severity.WARNING,
                    "css-syntax",
                )
            )

        if prop in _DEPRECATED_PROPERTIES:
            diagnostics.append(
                base.at(
                    lineno,
                    1,
                    f"Property '{prop}' is deprecated",
                    base.Severity.WARNING,
                    "css-deprecated",
                )
            )

        if prop.startswith(_VENDOR_PREFIXES):
            standard = _VENDOR_PREFIX_PAT.sub("", prop, count=1)
            if not _has_standard_sibling(lines, lineno, standard):
                diagnostics.append(
                    base.at(
                        lineno,
                        1,
                        f"Consider adding standard property '{standard}' after vendor prefix",
                        base.Severity.INFO,
                        "css-best-practices",
                    )
                )

        if not value:
            return diagnostics

        if (
            ("color" in prop or "background" in prop)
            and value.startswith("#")
            and not _HEX_COLOR_PAT.match(value)
        ):
            diagnostics.append(
                base.at(
                    lineno,
                    value_column,
                    "Invalid hex color format",
                    base.Severity.ERROR,
                    "css-validator",
                )
            )

        if _BARE_INTEGER_PAT.match(value) and not any(
            exempt in prop for exempt in _UNITLESS_EXEMPT
        ):
            diagnostics.append(
                base.at(
                    lineno,
                    value_column,
                    "Numeric value should include a unit (px, em, %, etc.)",
                    base.Severity.WARNING,
                    "css-best-practices",
                )
            )

        if prop == "position" and value == "absolute":
            diagnostics.append(
                base.at(
                    lineno,
                    1,
                    "Consider using flexbox or grid instead of absolute positioning when possible",
                    base.Severity.INFO,
                    "css-performance",
                )
            )

        if prop == "font-size" and "px" in value:
            size = _leading_integer(value)
            if size is not None and size < _MIN_FONT_SIZE_PX:
                diagnostics.append(
                    base.at(
                        lineno,
                        value_column,
                        "Font size below 12px may cause accessibility issues",
                        base.Severity.WARNING,
                        "css-accessibility",
                    )
                )
        return diagnostics

    def _check_selector(self, trimmed: str, lineno: int) -> list[base.Diagnostic]:
        diagnostics: list[base.Diagnostic] = []
        selector = trimmed.replace("{", "", 1).strip()

        if len(_COMBINATOR_PAT.findall(selector)) > _MAX_SELECTOR_COMBINATORS:
            diagnostics.append(
                base.at(
                    lineno,
                    1,
                    "Overly complex selector - consider simplifying",
                    base.Severity.INFO,
                    "css-best-practices",
                )
            )

        if "*" in selector:
            diagnostics.append(
                base.at(
                    lineno,
                    selector.find("*") + 1,
                    "Universal selector (*) can impact performance",
                    base.Severity.INFO,
                    "css-performance",
                )
            )

        if "!important" in selector:
            diagnostics.append(
                base.at(
                    lineno,
                    selector.find("!important") + 1,
                    "Avoid using !important - restructure CSS instead",
                    base.Severity.WARNING,
                    "css-best-practices",
                )
            )
        return diagnostics
