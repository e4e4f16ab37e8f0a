"""Markup rules: document structure, tag balance, attribute checks."""

from __future__ import annotations

import re
from dataclasses import dataclass

from weblint.rules import base

_TAG_PAT = re.compile(r"</?([a-zA-Z][a-zA-Z0-9]*)[^>]*>")

_SELF_CLOSING_TAGS: frozenset[str] = frozenset(
    {
        "img",
        "br",
        "hr",
        "input",
        "meta",
        "link",
        "area",
        "base",
        "col",
        "embed",
        "source",
        "track",
        "wbr",
    }
)

_DEPRECATED_TAGS: frozenset[str] = frozenset(
    {"center", "font", "marquee", "blink", "big", "small", "tt"}
)

_DEPRECATED_ATTRIBUTES: tuple[str, ...] = ("align=", "bgcolor=", "border=")

# Checked on opening tags only, one error per missing attribute.
_REQUIRED_ATTRIBUTES: dict[str, tuple[str, ...]] = {
    "img": ("src", "alt"),
    "a": ("href",),
    "input": ("type",),
    "label": ("for",),
    "form": ("action",),
}


@dataclass
class TagStackEntry:
    """An opened element waiting for its closing tag."""

    tag_name: str
    opened_at_line: int


def _document_checks(html: str) -> list[base.Diagnostic]:
    """Return the whole-buffer structure checks, all reported at 1:1."""
    checks: list[tuple[bool, str, base.Severity, str]] = [
        (
            "<!DOCTYPE html>" not in html,
            "Missing DOCTYPE declaration - add <!DOCTYPE html>",
            base.Severity.WARNING,
            "html-validator",
        ),
        ("<html" not in html, "Missing <html> element", base.Severity.ERROR, "html-structure"),
        ("<head" not in html, "Missing <head> element", base.Severity.ERROR, "html-structure"),
        ("<body" not in html, "Missing <body> element", base.Severity.ERROR, "html-structure"),
        (
            'name="viewport"' not in html,
            "Missing viewport meta tag for mobile responsiveness",
            base.Severity.INFO,
            "html-best-practices",
        ),
        (
            "charset=" not in html,
            "Missing charset declaration",
            base.Severity.WARNING,
            "html-best-practices",
        ),
        ("<title>" not in html, "Missing <title> element", base.Severity.WARNING, "html-seo"),
    ]
    return [
        base.at(1, 1, message, severity, source)
        for is_missing, message, severity, source in checks
        if is_missing
    ]


class MarkupRuleEngine(base.Engine):
    """Validate an HTML buffer line by line.

    Runs the whole-buffer structure checks first, then scans every line for
    inline styles, deprecated attributes and tags, missing required
    attributes, and tag balance. Tags still open at end of input are
    reported last, innermost first.

    The tag matcher is regex based and line local: a tag split across lines
    is not seen, and comments or script bodies are scanned like markup.

    Allowed:
        <div><p>text</p></div>
        <img src="a.png" alt="">

    Flagged:
        <div><span></div>       # unexpected closing tag </div>, unclosed <div>
        <center>old</center>    # deprecated tag
        <img src="a.png">       # missing alt
    """

    language = base.Language.HTML

    def validate(self, source: str) -> list[base.Diagnostic]:
        """Return markup diagnostics in evaluation order."""
        diagnostics = _document_checks(source)
        stack: list[TagStackEntry] = []

        for lineno, line in enumerate(source.split("\n"), start=1):
            self._check_line(line, lineno, stack, diagnostics)

        while stack:
            entry = stack.pop()
            diagnostics.append(
                base.at(
                    entry.opened_at_line,
                    1,
                    f"Unclosed tag <{entry.tag_name}>",
                    base.Severity.ERROR,
                    "html-validator",
                )
            )
        return diagnostics

    def _check_line(
        self,
        line: str,
        lineno: int,
        stack: list[TagStackEntry],
        diagnostics: list[base.Diagnostic],
    ) -> None:
        trimmed = line.strip()

        if "style=" in trimmed:
            diagnostics.append(
                base.at(
                    lineno,
                    line.find("style=") + 1,
                    "Consider using CSS classes instead of inline styles",
                    base.Severity.INFO,
                    "html-best-practices",
                )
            )

        if any(attr in trimmed for attr in _DEPRECATED_ATTRIBUTES):
            diagnostics.append(
                base.at(
                    lineno,
                    1,
                    "Deprecated HTML attribute detected - use CSS instead",
                    base.Severity.WARNING,
                    "html-deprecated",
                )
            )

        for match in _TAG_PAT.finditer(line):
            self._check_tag(match, lineno, stack, diagnostics)

        if "<img" in trimmed and "alt=" not in trimmed:
            diagnostics.append(
                base.at(
                    lineno,
                    line.find("<img") + 1,
                    "Image missing alt attribute for accessibility",
                    base.Severity.WARNING,
                    "html-accessibility",
                )
            )

        if "<a" in trimmed and "href=" not in trimmed:
            diagnostics.append(
                base.at(
                    lineno,
                    line.find("<a") + 1,
                    "Link missing href attribute",
                    base.Severity.WARNING,
                    "html-accessibility",
                )
            )

    def _check_tag(
        self,
        match: re.Match[str],
        lineno: int,
        stack: list[TagStackEntry],
        diagnostics: list[base.Diagnostic],
    ) -> None:
        full_tag = match.group(0)
        tag_name = match.group(1).lower()
        column = match.start() + 1
        is_closing = full_tag.startswith("</")

        if tag_name in _DEPRECATED_TAGS:
            diagnostics.append(
                base.at(
                    lineno,
                    column,
                    f"Deprecated HTML tag <{tag_name}> - consider modern alternatives",
                    base.Severity.WARNING,
                    "html-deprecated",
                )
            )

        if not is_closing:
            diagnostics.extend(
                base.at(
                    lineno,
                    column,
                    f"Missing required attribute '{attr}' for <{tag_name}> tag",
                    base.Severity.ERROR,
                    "html-accessibility",
                )
                for attr in _REQUIRED_ATTRIBUTES.get(tag_name, ())
                if f"{attr}=" not in full_tag
            )

        if is_closing:
            # A mismatched opener stays popped.
            last_open = stack.pop() if stack else None
            if last_open is None or last_open.tag_name != tag_name:
                diagnostics.append(
                    base.at(
                        lineno,
                        column,
                        f"Unexpected closing tag </{tag_name}>",
                        base.Severity.ERROR,
                        "html-validator",
                    )
                )
        elif tag_name not in _SELF_CLOSING_TAGS and not full_tag.endswith("/>"):
            stack.append(TagStackEntry(tag_name=tag_name, opened_at_line=lineno))
