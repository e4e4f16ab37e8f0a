"""Orchestrates engine runs, template profiles, and per-tab aggregation."""

from __future__ import annotations

import logging
import re

from weblint.rules import base, templates

logger = logging.getLogger(__name__)

# Matches:  weblint: noqa                   (suppress every diagnostic on this line)
#           weblint: noqa: css-syntax       (suppress specific source tags on this line)
# Only the marker text is matched, so it works inside <!-- -->, /* */ and //.
_LINE_NOQA_PAT = re.compile(
    r"weblint:\s*noqa(?::\s*([a-z0-9][a-z0-9,\s-]*))?",
    re.IGNORECASE,
)

# Matches:  weblint: disable-file              (suppress everything in this buffer)
#           weblint: disable-file: js-unused   (suppress specific source tags)
_FILE_DISABLE_PAT = re.compile(
    r"weblint:\s*disable-file(?::\s*([a-z0-9][a-z0-9,\s-]*))?",
    re.IGNORECASE,
)

_SOURCE_TAG_PAT = re.compile(r"[a-z0-9]+(?:-[a-z0-9]+)*")

# Template diagnostics shown on a tab when their source contains any marker.
_TAB_SOURCE_MARKERS: dict[base.Language, tuple[str, ...]] = {
    base.Language.HTML: ("template",),
    base.Language.CSS: ("flexbox", "css", "responsive"),
    base.Language.JAVASCRIPT: ("form", "validation"),
}

# Shown on every tab.
_SHARED_SOURCE_MARKERS: tuple[str, ...] = ("template-accessibility", "template-seo")


def is_visible_on_tab(diagnostic: base.Diagnostic, language: base.Language) -> bool:
    """Return True if a template diagnostic belongs on the *language* tab."""
    markers = (*_TAB_SOURCE_MARKERS.get(language, ()), *_SHARED_SOURCE_MARKERS)
    return any(marker in diagnostic.source for marker in markers)


def _source_tags(raw: str | None) -> frozenset[str] | None:
    """Parse source tags from a suppression comment capture group.

    Returns None to indicate every tag is suppressed, or a frozenset of
    specific lowercased source tags.
    """
    if not raw or not raw.strip():
        return None
    tags = frozenset(_SOURCE_TAG_PAT.findall(raw.lower()))
    return tags or None


def _covers(suppressed: frozenset[str] | None, source: str) -> bool:
    """Return True if *source* falls within the suppression set.

    None means every tag is suppressed.
    """
    return suppressed is None or source in suppressed


def _apply_suppressions(
    diagnostics: list[base.Diagnostic],
    source: str,
) -> list[base.Diagnostic]:
    """Remove diagnostics covered by inline weblint suppression comments."""
    file_sup_active = False
    file_sup_tags: frozenset[str] | None = None
    line_sups: dict[int, frozenset[str] | None] = {}

    for lineno, line_text in enumerate(source.split("\n"), start=1):
        file_match = _FILE_DISABLE_PAT.search(line_text)
        if file_match:
            file_sup_active = True
            file_sup_tags = _source_tags(file_match.group(1))

        line_match = _LINE_NOQA_PAT.search(line_text)
        if line_match:
            line_sups[lineno] = _source_tags(line_match.group(1))

    return [
        diag
        for diag in diagnostics
        if not (
            (file_sup_active and _covers(file_sup_tags, diag.source))
            or (diag.line in line_sups and _covers(line_sups[diag.line], diag.source))
        )
    ]


class Analyzer:
    """Runs the language engines and template profiles over buffers.

    Every public method is total: an engine that raises is logged and
    contributes no diagnostics rather than failing the call.
    """

    def __init__(
        self,
        engines: dict[base.Language, base.Engine],
        profiles: templates.TemplateProfileValidator | None = None,
    ) -> None:
        """Initialize with engines keyed by language.

        Args:
            engines: The engine to run for each language.
            profiles: Template profile validator. Defaults to a fresh one.
        """
        self.engines = engines
        self.profiles = (
            profiles if profiles is not None else templates.TemplateProfileValidator()
        )

    def validate(self, language: base.Language, source: str) -> list[base.Diagnostic]:
        """Run the engine for *language* over *source*.

        Args:
            language: Which engine to use.
            source: Raw buffer text.

        Returns:
            The engine's diagnostics in evaluation order, or an empty list if
            no engine is registered for *language* or the engine failed.
        """
        engine = self.engines.get(language)
        if engine is None:
            logger.debug("No engine registered for %s", language.value)
            return []
        try:
            return engine.validate(source)
        except Exception:
            logger.exception("%s engine failed", language.value)
            return []

    def validate_template(
        self,
        template_id: str,
        snapshot: templates.Snapshot,
    ) -> list[base.Diagnostic]:
        """Run the profile selected by *template_id* over all three buffers."""
        try:
            return self.profiles.validate(template_id, snapshot)
        except Exception:
            logger.exception("Template profile %r failed", template_id)
            return []

    def analyze(
        self,
        language: base.Language,
        source: str,
        *,
        template_id: str | None = None,
        snapshot: templates.Snapshot | None = None,
    ) -> list[base.Diagnostic]:
        """Build the diagnostic list shown on the *language* tab.

        The language engine's diagnostics come first, then the template
        diagnostics visible on this tab, each group in its original order.
        Inline suppressions in *source* are applied last.

        Args:
            language: The active tab.
            source: The active buffer.
            template_id: Active template, if any.
            snapshot: All three buffers; required for template checks.

        Returns:
            The merged, ordered diagnostic list.
        """
        diagnostics = self.validate(language, source)
        if template_id and snapshot is not None:
            diagnostics.extend(
                diag
                for diag in self.validate_template(template_id, snapshot)
                if is_visible_on_tab(diag, language)
            )
        return _apply_suppressions(diagnostics, source)
