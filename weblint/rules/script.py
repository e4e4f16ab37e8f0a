"""Script rules: syntax probe, line heuristics, unused declarations."""

from __future__ import annotations

import re

from weblint.rules import base, probe

_PROBE_LINE_PAT = re.compile(r"line (\d+)")

_GLOBAL_DECLARATION_PAT = re.compile(r"^(let|const|var)\s+[a-zA-Z_$][a-zA-Z0-9_$]*\s*=")
_BARE_ASSIGNMENT_PAT = re.compile(r"^([a-zA-Z_$][a-zA-Z0-9_$]*)\s*=")
_DECLARATION_PAT = re.compile(r"(let|const|var)\s+([a-zA-Z_$][a-zA-Z0-9_$]*)")

# Prefixes, not whole words: `format = 1` is skipped like `for`.
_STATEMENT_PREFIXES: tuple[str, ...] = ("if", "for", "while", "function", "class")
_DECLARATION_KEYWORDS: tuple[str, ...] = ("let ", "const ", "var ")

_MAX_UNCACHED_LOOKUPS: int = 3


def _probe(source: str) -> list[base.Diagnostic]:
    """Run the syntax probe and convert a failure into one diagnostic."""
    try:
        probe.check_syntax(source)
    except probe.ScriptSyntaxError as exc:
        message = str(exc)
        match = _PROBE_LINE_PAT.search(message)
        line = max(int(match.group(1)), 1) if match else 1
        return [base.at(line, 1, message, base.Severity.ERROR, "js-syntax")]
    return []


def _loose_equality_index(line: str, trimmed: str) -> int | None:
    """Return the index of a bare ``==`` on the line, or None."""
    if "==" not in trimmed or "===" in trimmed or "!==" in trimmed:
        return None
    index = line.find("==")
    if index == -1:
        return None
    before = line[index - 1] if index > 0 else ""
    after = line[index + 2] if index + 2 < len(line) else ""
    if before == "!" or after == "=":
        return None
    return index


def _is_missing_semicolon(trimmed: str) -> bool:
    return (
        not trimmed.endswith((";", "{", "}"))
        and not trimmed.startswith(_STATEMENT_PREFIXES)
        and "//" not in trimmed
        and "=" in trimmed
    )


def _unused_declarations(source: str, lines: list[str]) -> list[base.Diagnostic]:
    """Flag declared names that occur exactly once in the whole buffer.

    Counts raw word-boundary matches, so names mentioned in strings or
    comments count as used and shadowed names share one count.
    """
    diagnostics: list[base.Diagnostic] = []
    for match in _DECLARATION_PAT.finditer(source):
        declaration = match.group(0)
        name = match.group(2)
        usages = re.findall(rf"\b{re.escape(name)}\b", source, flags=re.ASCII)
        if len(usages) != 1:
            continue
        lineno = next(
            (idx for idx, line in enumerate(lines, start=1) if declaration in line),
            None,
        )
        if lineno is None:
            continue
        diagnostics.append(
            base.at(
                lineno,
                1,
                f"Unused variable: {name}",
                base.Severity.WARNING,
                "js-unused",
            )
        )
    return diagnostics


class ScriptRuleEngine(base.Engine):
    """Validate a JavaScript buffer with a syntax probe and line heuristics.

    Three passes run over the same text, appending to one list: the syntax
    probe (at most one error), the per-line heuristics (every matching check
    fires, comment lines are skipped), then the unused-declaration count.
    Several heuristics consult the whole buffer: global declarations are only
    flagged when the buffer has no ``function`` and no ``{``, and async calls
    are only flagged when the buffer has neither ``.catch(`` nor ``try``.

    Allowed:
        const total = items.length;
        if (total === 0) { render(); }

    Flagged:
        var count = 1;          # var usage, global, unused
        if (a == b) {}          # loose equality
        total = 5;              # undeclared assignment
    """

    language = base.Language.JAVASCRIPT

    def validate(self, source: str) -> list[base.Diagnostic]:
        """Return script diagnostics in evaluation order."""
        lines = source.split("\n")
        diagnostics = _probe(source)

        has_scope = "function" in source or "{" in source
        has_error_handling = ".catch(" in source or "try" in source
        lookup_lines = sum(1 for line in lines if "document.getElementById" in line)

        for lineno, line in enumerate(lines, start=1):
            trimmed = line.strip()
            if not trimmed or trimmed.startswith(("//", "/*")):
                continue
            diagnostics.extend(
                self._check_line(
                    line,
                    lineno,
                    has_scope=has_scope,
                    has_error_handling=has_error_handling,
                    has_repeated_lookups=lookup_lines > _MAX_UNCACHED_LOOKUPS,
                )
            )

        diagnostics.extend(_unused_declarations(source, lines))
        return diagnostics

    def _check_line(  # noqa: C901, PLR0912
        self,
        line: str,
        lineno: int,
        *,
        has_scope: bool,
        has_error_handling: bool,
        has_repeated_lookups: bool,
    ) -> list[base.Diagnostic]:
        diagnostics: list[base.Diagnostic] = []
        trimmed = line.strip()

        if "var " in trimmed:
            diagnostics.append(
                base.at(
                    lineno,
                    line.find("var ") + 1,
                    'Use "let" or "const" instead of "var" for better scoping',
                    base.Severity.WARNING,
                    "js-best-practices",
                )
            )

        eq_index = _loose_equality_index(line, trimmed)
        if eq_index is not None:
            diagnostics.append(
                base.at(
                    lineno,
                    eq_index + 1,
                    'Use "===" for strict equality comparison',
                    base.Severity.WARNING,
                    "js-best-practices",
                )
            )

        if "console.log" in trimmed:
            diagnostics.append(
                base.at(
                    lineno,
                    line.find("console.log") + 1,
                    "Remove console.log statements before production",
                    base.Severity.INFO,
                    "js-production",
                )
            )

        if "eval(" in trimmed:
            diagnostics.append(
                base.at(
                    lineno,
                    line.find("eval(") + 1,
                    "Avoid using eval() - it poses security risks",
                    base.Severity.ERROR,
                    "js-security",
                )
            )

        if _GLOBAL_DECLARATION_PAT.match(trimmed) and not has_scope:
            diagnostics.append(
                base.at(
                    lineno,
                    1,
                    "Avoid global variables - use modules or IIFE",
                    base.Severity.WARNING,
                    "js-best-practices",
                )
            )

        if _is_missing_semicolon(trimmed):
            diagnostics.append(
                base.at(
                    lineno,
                    len(line),
                    "Missing semicolon",
                    base.Severity.WARNING,
                    "js-syntax",
                )
            )

        if trimmed.startswith("function "):
            diagnostics.append(
                base.at(
                    lineno,
                    1,
                    "Consider using arrow functions or const function expressions",
                    base.Severity.INFO,
                    "js-modern",
                )
            )

        if "$" in trimmed or "jQuery" in trimmed:
            marker = "$" if "$" in line else "jQuery"
            diagnostics.append(
                base.at(
                    lineno,
                    line.find(marker) + 1,
                    "Consider using modern DOM APIs instead of jQuery",
                    base.Severity.INFO,
                    "js-modern",
                )
            )

        if ".innerHTML =" in trimmed:
            diagnostics.append(
                base.at(
                    lineno,
                    line.find(".innerHTML") + 1,
                    "Consider using textContent or modern DOM methods for security",
                    base.Severity.WARNING,
                    "js-security",
                )
            )

        if ("fetch(" in trimmed or ".then(" in trimmed) and not has_error_handling:
            diagnostics.append(
                base.at(
                    lineno,
                    1,
                    "Add error handling for async operations",
                    base.Severity.WARNING,
                    "js-error-handling",
                )
            )

        if "document.getElementById" in trimmed and has_repeated_lookups:
            diagnostics.append(
                base.at(
                    lineno,
                    line.find("document.getElementById") + 1,
                    "Consider caching DOM queries for better performance",
                    base.Severity.INFO,
                    "js-performance",
                )
            )

        if ".onclick =" in trimmed or "onclick=" in trimmed:
            diagnostics.append(
                base.at(
                    lineno,
                    1,
                    "Use addEventListener instead of onclick for better accessibility",
                    base.Severity.WARNING,
                    "js-accessibility",
                )
            )

        assignment = _BARE_ASSIGNMENT_PAT.match(trimmed)
        if (
            assignment
            and not any(keyword in trimmed for keyword in _DECLARATION_KEYWORDS)
            and "." not in trimmed
            and "this." not in assignment.group(1)
        ):
            diagnostics.append(
                base.at(
                    lineno,
                    1,
                    f'Variable "{assignment.group(1)}" should be declared with let, const, or var',
                    base.Severity.ERROR,
                    "js-variables",
                )
            )
        return diagnostics
