"""All weblint engines."""

from weblint.rules import base, markup, script, style

_ENGINES: list[base.Engine] = [
    markup.MarkupRuleEngine(),
    style.StyleRuleEngine(),
    script.ScriptRuleEngine(),
]

ALL_ENGINES: dict[base.Language, base.Engine] = {
    engine.language: engine for engine in _ENGINES
}

__all__ = ["ALL_ENGINES"]
