"""Template profile rules: cross-language checks selected by template id."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from weblint.rules import base

FLEXBOX_LAYOUT = "flexbox-layout"
INTERACTIVE_FORM = "interactive-form"
BLANK = "blank"

_FLEX_PROPERTIES: tuple[str, ...] = (
    "justify-content",
    "align-items",
    "flex-direction",
    "flex-wrap",
)

_MIN_BLANK_CSS_LENGTH: int = 50
_MAX_CSS_LENGTH: int = 5000
_MAX_SCRIPT_LENGTH: int = 10000


@dataclass(frozen=True)
class Snapshot:
    """The three buffers of one project at a point in time."""

    html: str = ""
    css: str = ""
    script: str = ""


@dataclass(frozen=True)
class RuleContext:
    """Read-only input handed to a template profile."""

    template_id: str
    html: str
    css: str
    script: str


def _at_top(message: str, severity: base.Severity, source: str) -> base.Diagnostic:
    # Profiles judge whole buffers, so every finding sits at 1:1.
    return base.at(1, 1, message, severity, source)


def _layout_profile(ctx: RuleContext) -> list[base.Diagnostic]:
    diagnostics: list[base.Diagnostic] = []
    if "display: flex" not in ctx.css and "display:flex" not in ctx.css:
        diagnostics.append(
            _at_top(
                'Flexbox template should use "display: flex"',
                base.Severity.WARNING,
                "template-flexbox",
            )
        )
    if "@media" not in ctx.css:
        diagnostics.append(
            _at_top(
                "Consider adding media queries for responsive design",
                base.Severity.INFO,
                "template-responsive",
            )
        )
    missing = [prop for prop in _FLEX_PROPERTIES if prop not in ctx.css]
    if missing:
        diagnostics.append(
            _at_top(
                f"Consider using flexbox properties: {', '.join(missing)}",
                base.Severity.INFO,
                "template-flexbox",
            )
        )
    return diagnostics


def _form_profile(ctx: RuleContext) -> list[base.Diagnostic]:
    diagnostics: list[base.Diagnostic] = []
    if "<form" not in ctx.html:
        diagnostics.append(
            _at_top(
                "Form template should contain a <form> element",
                base.Severity.ERROR,
                "template-form",
            )
        )
    if "addEventListener" not in ctx.script and "onsubmit" not in ctx.script:
        diagnostics.append(
            _at_top(
                "Form should have JavaScript validation",
                base.Severity.WARNING,
                "template-form",
            )
        )
    has_inputs = "<input" in ctx.html
    if has_inputs and "<label" not in ctx.html:
        diagnostics.append(
            _at_top(
                "Form inputs should have associated labels for accessibility",
                base.Severity.WARNING,
                "template-accessibility",
            )
        )
    if has_inputs and "required" not in ctx.html:
        diagnostics.append(
            _at_top(
                'Consider adding "required" attribute to mandatory form fields',
                base.Severity.INFO,
                "template-form",
            )
        )
    return diagnostics


def _blank_profile(ctx: RuleContext) -> list[base.Diagnostic]:
    diagnostics: list[base.Diagnostic] = []
    if "<!DOCTYPE html>" not in ctx.html:
        diagnostics.append(
            _at_top(
                "Add HTML5 DOCTYPE declaration",
                base.Severity.WARNING,
                "template-structure",
            )
        )
    if "viewport" not in ctx.html:
        diagnostics.append(
            _at_top(
                "Add viewport meta tag for mobile responsiveness",
                base.Severity.INFO,
                "template-mobile",
            )
        )
    if len(ctx.css.strip()) < _MIN_BLANK_CSS_LENGTH:
        diagnostics.append(
            _at_top(
                "Consider adding CSS reset (margin: 0, padding: 0, box-sizing: border-box)",
                base.Severity.INFO,
                "template-css",
            )
        )
    return diagnostics


def _generic_profile(ctx: RuleContext) -> list[base.Diagnostic]:
    diagnostics: list[base.Diagnostic] = []
    if "<title>" not in ctx.html or "<title></title>" in ctx.html:
        diagnostics.append(
            _at_top(
                "Add a descriptive title for SEO",
                base.Severity.WARNING,
                "template-seo",
            )
        )
    if len(ctx.css) > _MAX_CSS_LENGTH:
        diagnostics.append(
            _at_top(
                "Large CSS file - consider splitting or minifying",
                base.Severity.INFO,
                "template-performance",
            )
        )
    if len(ctx.script) > _MAX_SCRIPT_LENGTH:
        diagnostics.append(
            _at_top(
                "Large JavaScript file - consider modularization",
                base.Severity.INFO,
                "template-performance",
            )
        )
    if "lang=" not in ctx.html:
        diagnostics.append(
            _at_top(
                "Add lang attribute to html element for accessibility",
                base.Severity.WARNING,
                "template-accessibility",
            )
        )
    return diagnostics


PROFILES: dict[str, Callable[[RuleContext], list[base.Diagnostic]]] = {
    FLEXBOX_LAYOUT: _layout_profile,
    INTERACTIVE_FORM: _form_profile,
    BLANK: _blank_profile,
}


class TemplateProfileValidator:
    """Run the profile registered for a template id over a snapshot.

    Unknown ids fall back to the generic profile, which checks title, lang,
    and buffer sizes.
    """

    def validate(self, template_id: str, snapshot: Snapshot) -> list[base.Diagnostic]:
        """Return the profile's diagnostics in evaluation order."""
        ctx = RuleContext(
            template_id=template_id,
            html=snapshot.html,
            css=snapshot.css,
            script=snapshot.script,
        )
        profile = PROFILES.get(template_id, _generic_profile)
        return profile(ctx)
