"""Base abstractions for weblint engines."""

from __future__ import annotations

import pathlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class Language(Enum):
    """Buffer languages understood by the engines."""

    HTML = "html"
    CSS = "css"
    JAVASCRIPT = "javascript"

    @classmethod
    def from_path(cls, path: pathlib.Path | str) -> Language | None:
        """Return the language for a file path, or None for unknown suffixes."""
        return _SUFFIXES.get(pathlib.Path(path).suffix.lower())


_SUFFIXES: dict[str, Language] = {
    ".html": Language.HTML,
    ".htm": Language.HTML,
    ".css": Language.CSS,
    ".js": Language.JAVASCRIPT,
    ".mjs": Language.JAVASCRIPT,
    ".cjs": Language.JAVASCRIPT,
}


class Severity(Enum):
    """Display grouping for diagnostics. Never used for control flow."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Diagnostic:
    """A single finding emitted by an engine."""

    line: int  # 1-indexed
    column: int  # 1-indexed
    message: str
    severity: Severity
    source: str


class Engine(ABC):
    """Abstract base class for the per-language engines."""

    language: Language

    @abstractmethod
    def validate(self, source: str) -> list[Diagnostic]:
        """Scan the raw buffer text and return diagnostics.

        Args:
            source: The full buffer contents.

        Returns:
            Diagnostics in rule evaluation order. Engines never raise; an
            empty list means nothing was found.
        """


def at(
    line: int,
    column: int,
    message: str,
    severity: Severity,
    source: str,
) -> Diagnostic:
    """Build a Diagnostic from positional fields."""
    return Diagnostic(
        line=line, column=column, message=message, severity=severity, source=source
    )
