"""Load weblint configuration from pyproject.toml."""

from __future__ import annotations

import dataclasses
import pathlib
import tomllib
import typing

if typing.TYPE_CHECKING:
    from weblint.rules import base

_DEFAULT_PRETTIER: tuple[str, ...] = ("npx", "prettier")


@dataclasses.dataclass(frozen=True)
class Config:
    """Resolved weblint configuration.

    Attributes:
        template: Active template id. ``None`` disables template profiles.
        select: Source tags or tag families to keep. ``None`` keeps everything.
        ignore: Source tags or tag families to drop.
        prettier: Command used to invoke prettier.
    """

    template: str | None = None
    select: frozenset[str] | None = None
    ignore: frozenset[str] = frozenset()
    prettier: tuple[str, ...] = _DEFAULT_PRETTIER


def _find_pyproject(start: pathlib.Path) -> pathlib.Path | None:
    """Walk up from *start* to find the nearest pyproject.toml."""
    for directory in [start, *start.parents]:
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def _tags(raw: object) -> frozenset[str]:
    if not isinstance(raw, list):
        return frozenset()
    return frozenset(tag.strip().lower() for tag in raw if isinstance(tag, str))


def load_config(start: pathlib.Path | None = None) -> Config:
    """Return the Config from the nearest pyproject.toml, or defaults.

    Reads ``[tool.weblint]`` from the first ``pyproject.toml`` found by
    walking up from *start* (defaults to ``Path.cwd()``). Returns a default
    Config if no file is found, the file is not valid TOML, or the section
    is absent. Values of the wrong type are ignored.

    Args:
        start: Directory to begin the upward search. Defaults to cwd.

    Returns:
        A Config reflecting ``template``, ``select``, ``ignore`` and
        ``prettier``, if present.
    """
    search_root = start if start is not None else pathlib.Path.cwd()
    pyproject = _find_pyproject(search_root)
    if pyproject is None:
        return Config()

    try:
        with pyproject.open("rb") as fh:
            data = tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError):
        return Config()

    section = data.get("tool", {}).get("weblint", {})
    template_raw = section.get("template")
    select_raw = section.get("select")
    prettier_raw = section.get("prettier")

    prettier = _DEFAULT_PRETTIER
    if isinstance(prettier_raw, list) and prettier_raw:
        prettier = tuple(str(part) for part in prettier_raw)

    return Config(
        template=template_raw if isinstance(template_raw, str) and template_raw else None,
        select=_tags(select_raw) if select_raw is not None else None,
        ignore=_tags(section.get("ignore", [])),
        prettier=prettier,
    )


def _matches(source: str, tags: frozenset[str]) -> bool:
    """Return True if *source* equals a tag or belongs to a tag family.

    ``css`` matches ``css-syntax``; ``css-syntax`` only matches itself.
    """
    return any(source == tag or source.startswith(f"{tag}-") for tag in tags)


def filter_diagnostics(
    diagnostics: list[base.Diagnostic],
    config: Config,
) -> list[base.Diagnostic]:
    """Return the subset of *diagnostics* allowed by *config*.

    ``select`` is applied first (restricting to those tags), then ``ignore``
    removes any listed tags.

    Args:
        diagnostics: Diagnostics in display order.
        config: The active configuration.

    Returns:
        Filtered list preserving the original order.
    """
    kept = diagnostics
    if config.select is not None:
        kept = [diag for diag in kept if _matches(diag.source, config.select)]
    if config.ignore:
        kept = [diag for diag in kept if not _matches(diag.source, config.ignore)]
    return kept
