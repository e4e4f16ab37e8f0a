"""Static completion vocabularies per language."""

from __future__ import annotations

from dataclasses import dataclass

from weblint.rules import base

_HTML_TAGS: tuple[str, ...] = (
    "div", "span", "p", "h1", "h2", "h3", "h4", "h5", "h6",
    "header", "nav", "main", "section", "article", "aside", "footer",
    "ul", "ol", "li", "dl", "dt", "dd",
    "table", "thead", "tbody", "tr", "th", "td",
    "form", "input", "textarea", "select", "option", "button", "label",
    "img", "figure", "figcaption", "picture", "source",
    "a", "strong", "em", "mark", "small", "del", "ins", "sub", "sup",
)  # fmt: skip

_CSS_PROPERTIES: tuple[str, ...] = (
    "display", "position", "top", "right", "bottom", "left",
    "width", "height", "max-width", "min-width", "max-height", "min-height",
    "margin", "padding", "border", "border-radius",
    "background", "background-color", "background-image", "background-size",
    "color", "font-family", "font-size", "font-weight", "line-height",
    "text-align", "text-decoration", "text-transform",
    "flex", "flex-direction", "justify-content", "align-items", "gap",
    "grid", "grid-template-columns", "grid-template-rows", "grid-gap",
    "transition", "transform", "animation", "opacity", "z-index",
)  # fmt: skip

_JS_KEYWORDS: tuple[str, ...] = (
    "console.log", "document.getElementById", "document.querySelector",
    "document.querySelectorAll", "addEventListener", "removeEventListener",
    "setTimeout", "setInterval", "clearTimeout", "clearInterval",
    "fetch", "async", "await", "Promise", "Array", "Object",
    "function", "const", "let", "var", "if", "else", "for", "while", "switch",
)  # fmt: skip


@dataclass(frozen=True)
class CompletionItem:
    """One completion suggestion.

    ``insert_text`` is a snippet; ``$0`` marks the final cursor position.
    """

    label: str
    insert_text: str
    category: str
    documentation: str


def _html_items() -> list[CompletionItem]:
    return [
        CompletionItem(
            label=tag,
            insert_text=f"<{tag}>$0</{tag}>",
            category="element",
            documentation=f"HTML {tag} element",
        )
        for tag in _HTML_TAGS
    ]


def _css_items() -> list[CompletionItem]:
    return [
        CompletionItem(
            label=prop,
            insert_text=f"{prop}: $0;",
            category="property",
            documentation=f"CSS {prop} property",
        )
        for prop in _CSS_PROPERTIES
    ]


def _js_items() -> list[CompletionItem]:
    return [
        CompletionItem(
            label=keyword,
            insert_text=keyword,
            category="keyword",
            documentation=f"JavaScript {keyword}",
        )
        for keyword in _JS_KEYWORDS
    ]


_PROVIDERS = {
    base.Language.HTML: _html_items,
    base.Language.CSS: _css_items,
    base.Language.JAVASCRIPT: _js_items,
}


def suggest(language: base.Language, context: str = "") -> list[CompletionItem]:  # noqa: ARG001
    """Return the fixed vocabulary for *language*.

    Args:
        language: The buffer's language.
        context: Text around the cursor. Accepted but not yet used to filter.

    Returns:
        Suggestions in vocabulary order.
    """
    provider = _PROVIDERS.get(language)
    return provider() if provider is not None else []
