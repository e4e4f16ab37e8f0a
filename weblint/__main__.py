"""Entry point: weblint [check <path>... | format <path>... | serve]."""

import logging
import pathlib
import typing

import typer

from weblint.rules import base as rules_base
from weblint.rules import templates as rules_templates

app = typer.Typer()

# Directories that are never interesting to analyse.
_SKIP_DIRS: frozenset[str] = frozenset(
    {".venv", "venv", "__pycache__", ".git", "node_modules", "build", "dist", ".tox"}
)


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _collect_web_files(root: pathlib.Path) -> list[pathlib.Path]:
    """Recursively find html/css/js files under root, skipping non-source directories."""
    return sorted(
        web_file
        for web_file in root.rglob("*")
        if web_file.is_file()
        and rules_base.Language.from_path(web_file) is not None
        and not any(part in _SKIP_DIRS for part in web_file.parts)
    )


def _resolve_files(paths: list[pathlib.Path] | None) -> list[pathlib.Path]:
    """Expand paths into a deduplicated list of files with a known language."""
    candidates: list[pathlib.Path] = []
    for raw_path in paths or []:
        if raw_path.is_dir():
            candidates.extend(_collect_web_files(raw_path))
        elif rules_base.Language.from_path(raw_path) is not None:
            candidates.append(raw_path)
        else:
            typer.echo(f"skipping {raw_path}: unknown file type", err=True)
    seen: set[pathlib.Path] = set()
    unique: list[pathlib.Path] = []
    for file_path in candidates:
        resolved = file_path.resolve()
        if resolved not in seen:
            seen.add(resolved)
            unique.append(file_path)
    return unique


def _snapshot_for(file_path: pathlib.Path) -> rules_templates.Snapshot:
    """Build a snapshot from the first file of each language beside *file_path*."""
    buffers: dict[rules_base.Language, str] = {}
    for sibling in sorted(file_path.parent.iterdir()):
        language = rules_base.Language.from_path(sibling)
        if language is None or language in buffers or not sibling.is_file():
            continue
        try:
            buffers[language] = sibling.read_text()
        except OSError:
            continue
    return rules_templates.Snapshot(
        html=buffers.get(rules_base.Language.HTML, ""),
        css=buffers.get(rules_base.Language.CSS, ""),
        script=buffers.get(rules_base.Language.JAVASCRIPT, ""),
    )


@app.command(no_args_is_help=True)
def check(
    paths: typing.Annotated[
        list[pathlib.Path] | None,
        typer.Argument(help="Files or directories to check."),
    ] = None,
    template: typing.Annotated[
        str | None,
        typer.Option("--template", help="Template profile to apply across buffers."),
    ] = None,
    verbose: typing.Annotated[  # noqa: FBT002
        bool,
        typer.Option("--verbose", help="Log engine activity to stderr."),
    ] = False,
) -> None:
    """Check html, css, and js files for problems.

    Raises:
        typer.Exit: With code 1 if any error-severity diagnostic is reported.
    """
    from weblint import analyzer as weblint_analyzer  # noqa: PLC0415
    from weblint import config as weblint_config  # noqa: PLC0415
    from weblint import rules  # noqa: PLC0415

    _configure_logging(verbose=verbose)
    cfg = weblint_config.load_config()
    template_id = template or cfg.template
    analyzer = weblint_analyzer.Analyzer(engines=rules.ALL_ENGINES)
    found_error = False

    for file_path in _resolve_files(paths):
        language = rules_base.Language.from_path(file_path)
        if language is None:
            continue
        try:
            source = file_path.read_text()
        except OSError as e:
            typer.echo(f"error: {e}", err=True)
            continue

        snapshot = _snapshot_for(file_path) if template_id else None
        diagnostics = weblint_config.filter_diagnostics(
            analyzer.analyze(
                language, source, template_id=template_id, snapshot=snapshot
            ),
            cfg,
        )
        for diag in diagnostics:
            typer.echo(
                f"{file_path}:{diag.line}:{diag.column}:"
                f" {diag.severity.value} {diag.source} {diag.message}"
            )
        if any(diag.severity is rules_base.Severity.ERROR for diag in diagnostics):
            found_error = True

    if found_error:
        raise typer.Exit(code=1)


@app.command(name="format", no_args_is_help=True)
def format_files(
    paths: typing.Annotated[
        list[pathlib.Path] | None,
        typer.Argument(help="Files or directories to format."),
    ] = None,
    check_only: typing.Annotated[  # noqa: FBT002
        bool,
        typer.Option("--check", help="Report files that would change without writing."),
    ] = False,
    verbose: typing.Annotated[  # noqa: FBT002
        bool,
        typer.Option("--verbose", help="Log formatter activity to stderr."),
    ] = False,
) -> None:
    """Format html, css, and js files with prettier.

    Files are left untouched when the formatter fails.

    Raises:
        typer.Exit: With code 1 under ``--check`` if any file would change.
    """
    from weblint import config as weblint_config  # noqa: PLC0415
    from weblint import formatter  # noqa: PLC0415

    _configure_logging(verbose=verbose)
    prettier = formatter.PrettierFormatter(weblint_config.load_config().prettier)
    would_change = False

    for file_path in _resolve_files(paths):
        language = rules_base.Language.from_path(file_path)
        if language is None:
            continue
        try:
            source = file_path.read_text()
        except OSError as e:
            typer.echo(f"error: {e}", err=True)
            continue

        formatted = formatter.format_code(source, language, prettier)
        if formatted == source:
            continue
        if check_only:
            typer.echo(f"would reformat {file_path}")
            would_change = True
        else:
            file_path.write_text(formatted)
            typer.echo(f"reformatted {file_path}")

    if would_change:
        raise typer.Exit(code=1)


@app.command()
def serve() -> None:
    """Run the LSP server over stdio."""
    from weblint import server  # noqa: PLC0415

    server.start()


def main() -> None:
    """Dispatch to the CLI commands."""
    app()


if __name__ == "__main__":
    main()
