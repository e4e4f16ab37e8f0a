"""Code formatting through an external formatter."""

from __future__ import annotations

import logging
import subprocess
import typing

from weblint.rules import base

logger = logging.getLogger(__name__)

_PRETTIER_PARSERS: dict[base.Language, str] = {
    base.Language.HTML: "html",
    base.Language.CSS: "css",
    base.Language.JAVASCRIPT: "babel",
}

_PRETTIER_OPTIONS: tuple[str, ...] = (
    "--print-width=80",
    "--tab-width=2",
    "--single-quote",
    "--quote-props=as-needed",
    "--trailing-comma=es5",
    "--arrow-parens=avoid",
    "--html-whitespace-sensitivity=css",
)

_TIMEOUT_SECONDS: float = 30.0


class FormatterError(Exception):
    """Raised when a formatter cannot produce output."""


@typing.runtime_checkable
class Formatter(typing.Protocol):
    """Anything that can reformat a buffer of a given language."""

    def format(self, source: str, language: base.Language) -> str: ...


class PrettierFormatter:
    """Format buffers by piping them through the prettier CLI."""

    def __init__(self, command: typing.Sequence[str] = ("npx", "prettier")) -> None:
        self.command = tuple(command)

    def format(self, source: str, language: base.Language) -> str:
        """Return *source* formatted by prettier.

        Raises:
            FormatterError: If prettier is missing, times out, or rejects
                the input.
        """
        args = [
            *self.command,
            f"--parser={_PRETTIER_PARSERS[language]}",
            *_PRETTIER_OPTIONS,
        ]
        try:
            proc = subprocess.run(  # noqa: S603
                args,
                input=source,
                capture_output=True,
                text=True,
                check=False,
                timeout=_TIMEOUT_SECONDS,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            msg = f"could not run {self.command[0]}: {e}"
            raise FormatterError(msg) from e
        if proc.returncode != 0:
            msg = proc.stderr.strip() or f"prettier exited with code {proc.returncode}"
            raise FormatterError(msg)
        return proc.stdout


def format_code(
    source: str,
    language: base.Language,
    formatter: Formatter | None = None,
) -> str:
    """Format *source*, returning it untouched if formatting fails.

    Args:
        source: The buffer to format.
        language: The buffer's language.
        formatter: Formatter to use. Defaults to ``PrettierFormatter()``.

    Returns:
        The formatted text, or *source* itself on any formatter failure.
    """
    active = formatter if formatter is not None else PrettierFormatter()
    try:
        return active.format(source, language)
    except Exception as e:  # noqa: BLE001
        logger.warning("Formatting error: %s", e)
        return source
