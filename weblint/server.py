"""pygls LSP server for weblint."""

from __future__ import annotations

import functools
import logging
import pathlib
import typing

from lsprotocol import types
from pygls import uris
from pygls.lsp import server as pygls_server

from weblint import analyzer as weblint_analyzer
from weblint import completion, formatter, rules
from weblint import config as weblint_config
from weblint.rules import base, templates

if typing.TYPE_CHECKING:
    from pygls.workspace import TextDocument

logger = logging.getLogger(__name__)

server = pygls_server.LanguageServer("weblint", "v0.1.0")
analyzer = weblint_analyzer.Analyzer(engines=rules.ALL_ENGINES)

_SEVERITY_MAP: dict[base.Severity, types.DiagnosticSeverity] = {
    base.Severity.ERROR: types.DiagnosticSeverity.Error,
    base.Severity.WARNING: types.DiagnosticSeverity.Warning,
    base.Severity.INFO: types.DiagnosticSeverity.Information,
}

_COMPLETION_KINDS: dict[str, types.CompletionItemKind] = {
    "element": types.CompletionItemKind.Text,
    "property": types.CompletionItemKind.Property,
    "keyword": types.CompletionItemKind.Keyword,
}


@functools.cache
def _settings() -> weblint_config.Config:
    return weblint_config.load_config()


def _to_lsp(diag: base.Diagnostic) -> types.Diagnostic:
    """Convert a weblint Diagnostic to an LSP Diagnostic."""
    position = types.Position(line=diag.line - 1, character=diag.column - 1)
    return types.Diagnostic(
        range=types.Range(start=position, end=position),
        message=diag.message,
        severity=_SEVERITY_MAP[diag.severity],
        code=diag.source,
        source="weblint",
    )


def _to_lsp_completion(item: completion.CompletionItem) -> types.CompletionItem:
    return types.CompletionItem(
        label=item.label,
        kind=_COMPLETION_KINDS.get(item.category, types.CompletionItemKind.Text),
        insert_text=item.insert_text,
        insert_text_format=types.InsertTextFormat.Snippet,
        documentation=item.documentation,
    )


def _language_of(document: TextDocument) -> base.Language | None:
    """Prefer the client's language id, falling back to the file suffix."""
    try:
        return base.Language(document.language_id)
    except ValueError:
        return base.Language.from_path(document.path)


def _siblings(
    ls: pygls_server.LanguageServer,
    uri: str,
    *,
    include_self: bool = True,
) -> list[TextDocument]:
    """Return open documents in the same directory as *uri*, sorted by uri."""
    directory = pathlib.Path(uris.to_fs_path(uri) or uri).parent
    return sorted(
        (
            doc
            for doc in ls.workspace.text_documents.values()
            if pathlib.Path(doc.path).parent == directory
            and (include_self or doc.uri != uri)
        ),
        key=lambda doc: doc.uri,
    )


def _snapshot(documents: list[TextDocument]) -> templates.Snapshot:
    """Build a snapshot from the first open document of each language."""
    buffers: dict[base.Language, str] = {}
    for doc in documents:
        language = _language_of(doc)
        if language is not None and language not in buffers:
            buffers[language] = doc.source
    return templates.Snapshot(
        html=buffers.get(base.Language.HTML, ""),
        css=buffers.get(base.Language.CSS, ""),
        script=buffers.get(base.Language.JAVASCRIPT, ""),
    )


def _publish(
    ls: pygls_server.LanguageServer,
    document: TextDocument,
    snapshot: templates.Snapshot,
) -> None:
    """Analyze one document and publish its diagnostics to the client."""
    language = _language_of(document)
    if language is None:
        return
    cfg = _settings()
    diagnostics = weblint_config.filter_diagnostics(
        analyzer.analyze(
            language,
            document.source,
            template_id=cfg.template,
            snapshot=snapshot,
        ),
        cfg,
    )
    logger.debug("Publishing %d diagnostics for %s", len(diagnostics), document.uri)
    ls.text_document_publish_diagnostics(
        types.PublishDiagnosticsParams(
            uri=document.uri,
            diagnostics=[_to_lsp(diag) for diag in diagnostics],
        )
    )


def _publish_group(
    ls: pygls_server.LanguageServer,
    uri: str,
    *,
    include_self: bool = True,
) -> None:
    """Re-analyze *uri* and its open siblings, which share template checks."""
    documents = _siblings(ls, uri, include_self=include_self)
    snapshot = _snapshot(documents)
    for document in documents:
        _publish(ls, document, snapshot)


@server.feature(types.TEXT_DOCUMENT_DID_OPEN)
def did_open(
    ls: pygls_server.LanguageServer,
    params: types.DidOpenTextDocumentParams,
) -> None:
    """Analyze a newly opened document."""
    _publish_group(ls, params.text_document.uri)


@server.feature(types.TEXT_DOCUMENT_DID_CHANGE)
def did_change(
    ls: pygls_server.LanguageServer,
    params: types.DidChangeTextDocumentParams,
) -> None:
    """Re-analyze a document after every change."""
    _publish_group(ls, params.text_document.uri)


@server.feature(types.TEXT_DOCUMENT_DID_CLOSE)
def did_close(
    ls: pygls_server.LanguageServer,
    params: types.DidCloseTextDocumentParams,
) -> None:
    """Clear the closed document and re-analyze the siblings left open."""
    uri = params.text_document.uri
    ls.text_document_publish_diagnostics(
        types.PublishDiagnosticsParams(uri=uri, diagnostics=[])
    )
    # The closed buffer must drop out of the siblings' template snapshot.
    _publish_group(ls, uri, include_self=False)


@server.feature(types.TEXT_DOCUMENT_COMPLETION)
def completions(
    ls: pygls_server.LanguageServer,
    params: types.CompletionParams,
) -> types.CompletionList:
    """Offer the static vocabulary for the document's language."""
    document = ls.workspace.get_text_document(params.text_document.uri)
    language = _language_of(document)
    items = completion.suggest(language) if language is not None else []
    return types.CompletionList(
        is_incomplete=False,
        items=[_to_lsp_completion(item) for item in items],
    )


@server.feature(types.TEXT_DOCUMENT_FORMATTING)
def formatting(
    ls: pygls_server.LanguageServer,
    params: types.DocumentFormattingParams,
) -> list[types.TextEdit]:
    """Replace the whole document with its formatted text."""
    document = ls.workspace.get_text_document(params.text_document.uri)
    language = _language_of(document)
    if language is None:
        return []
    source = document.source
    formatted = formatter.format_code(
        source, language, formatter.PrettierFormatter(_settings().prettier)
    )
    if formatted == source:
        return []
    end = types.Position(line=len(source.split("\n")), character=0)
    return [
        types.TextEdit(
            range=types.Range(start=types.Position(line=0, character=0), end=end),
            new_text=formatted,
        )
    ]


def start() -> None:
    """Start the LSP server over stdio."""
    server.start_io()
