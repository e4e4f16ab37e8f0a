"""Tests for the LSP glue in weblint.server."""

import shutil
import types as pytypes

import pytest
from lsprotocol import types

from weblint import config as weblint_config
from weblint import server
from weblint.rules import base


def _doc(uri: str, source: str, language_id: str = "") -> pytypes.SimpleNamespace:
    return pytypes.SimpleNamespace(
        uri=uri,
        path=uri.removeprefix("file://"),
        source=source,
        language_id=language_id,
    )


class _FakeServer:
    """Just enough of a LanguageServer for the feature handlers."""

    def __init__(self, *documents: pytypes.SimpleNamespace) -> None:
        self.published: list[types.PublishDiagnosticsParams] = []
        by_uri = {doc.uri: doc for doc in documents}
        self.workspace = pytypes.SimpleNamespace(
            text_documents=by_uri,
            get_text_document=by_uri.__getitem__,
        )

    def text_document_publish_diagnostics(
        self, params: types.PublishDiagnosticsParams
    ) -> None:
        self.published.append(params)


def _identifier(uri: str) -> types.TextDocumentIdentifier:
    return types.TextDocumentIdentifier(uri=uri)


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> list[weblint_config.Config]:
    holder = [weblint_config.Config()]
    monkeypatch.setattr(server, "_settings", lambda: holder[0])
    return holder


# ---------------------------------------------------------------------------
# Conversion helpers
# ---------------------------------------------------------------------------


class TestToLsp:
    def test_positions_become_zero_based(self) -> None:
        diag = base.at(3, 5, "msg", base.Severity.WARNING, "css-syntax")
        result = server._to_lsp(diag)
        assert result.range.start == types.Position(line=2, character=4)
        assert result.range.end == result.range.start

    def test_source_tag_becomes_code(self) -> None:
        result = server._to_lsp(base.at(1, 1, "msg", base.Severity.INFO, "js-unused"))
        assert result.code == "js-unused"
        assert result.source == "weblint"
        assert result.severity == types.DiagnosticSeverity.Information

    def test_error_severity(self) -> None:
        result = server._to_lsp(base.at(1, 1, "m", base.Severity.ERROR, "js-syntax"))
        assert result.severity == types.DiagnosticSeverity.Error


class TestLanguageOf:
    def test_language_id_preferred(self) -> None:
        doc = _doc("file:///site/page.txt", "", language_id="html")
        assert server._language_of(doc) is base.Language.HTML

    def test_falls_back_to_suffix(self) -> None:
        doc = _doc("file:///site/app.mjs", "", language_id="plaintext")
        assert server._language_of(doc) is base.Language.JAVASCRIPT

    def test_unknown(self) -> None:
        assert server._language_of(_doc("file:///site/notes.md", "")) is None


class TestSnapshot:
    def test_first_document_of_each_language_wins(self) -> None:
        snapshot = server._snapshot(
            [
                _doc("file:///site/a.css", "a {}"),
                _doc("file:///site/b.css", "b {}"),
                _doc("file:///site/index.html", "<p>"),
                _doc("file:///site/readme.md", "# hi"),
            ]
        )
        assert snapshot.html == "<p>"
        assert snapshot.css == "a {}"
        assert snapshot.script == ""


# ---------------------------------------------------------------------------
# Feature handlers
# ---------------------------------------------------------------------------


class TestDiagnosticsPublishing:
    def test_open_publishes_for_document_and_siblings(
        self, settings: list[weblint_config.Config]
    ) -> None:
        ls = _FakeServer(
            _doc("file:///site/style.css", "a {\n  color: #ffff;\n}"),
            _doc("file:///site/index.html", "<p>"),
            _doc("file:///other/app.js", "x = 1;"),
        )
        params = types.DidOpenTextDocumentParams(
            text_document=types.TextDocumentItem(
                uri="file:///site/style.css",
                language_id="css",
                version=1,
                text="a {\n  color: #ffff;\n}",
            )
        )
        server.did_open(ls, params)
        assert [item.uri for item in ls.published] == [
            "file:///site/index.html",
            "file:///site/style.css",
        ]
        css_codes = [diag.code for diag in ls.published[1].diagnostics]
        assert "css-validator" in css_codes
        assert not any(str(code).startswith("template-") for code in css_codes)

    def test_template_findings_follow_config(
        self, settings: list[weblint_config.Config]
    ) -> None:
        settings[0] = weblint_config.Config(template="flexbox-layout")
        ls = _FakeServer(
            _doc("file:///site/style.css", "* { box-sizing: border-box; }"),
        )
        params = types.DidChangeTextDocumentParams(
            text_document=types.VersionedTextDocumentIdentifier(
                uri="file:///site/style.css", version=2
            ),
            content_changes=[],
        )
        server.did_change(ls, params)
        codes = [diag.code for diag in ls.published[0].diagnostics]
        assert codes == ["template-flexbox", "template-responsive", "template-flexbox"]

    def test_close_clears_diagnostics(self) -> None:
        ls = _FakeServer()
        server.did_close(
            ls,
            types.DidCloseTextDocumentParams(
                text_document=_identifier("file:///site/style.css")
            ),
        )
        assert ls.published[0].diagnostics == []

    def test_close_republishes_siblings_without_closed_buffer(
        self, settings: list[weblint_config.Config]
    ) -> None:
        settings[0] = weblint_config.Config(template="blank")
        ls = _FakeServer(
            _doc("file:///site/index.html", '<!DOCTYPE html><meta name="viewport">'),
            _doc("file:///site/style.css", "* { box-sizing: border-box; }" * 3),
            _doc("file:///other/index.html", "<p>"),
        )
        server.did_close(
            ls,
            types.DidCloseTextDocumentParams(
                text_document=_identifier("file:///site/style.css")
            ),
        )
        assert [item.uri for item in ls.published] == [
            "file:///site/style.css",
            "file:///site/index.html",
        ]
        assert ls.published[0].diagnostics == []
        html_codes = [diag.code for diag in ls.published[1].diagnostics]
        assert "template-css" in html_codes


class TestCompletions:
    def test_css_properties_offered(self) -> None:
        ls = _FakeServer(_doc("file:///site/style.css", ""))
        result = server.completions(
            ls,
            types.CompletionParams(
                text_document=_identifier("file:///site/style.css"),
                position=types.Position(line=0, character=0),
            ),
        )
        by_label = {item.label: item for item in result.items}
        assert by_label["display"].insert_text == "display: $0;"
        assert by_label["display"].kind == types.CompletionItemKind.Property
        assert by_label["display"].insert_text_format == types.InsertTextFormat.Snippet

    def test_unknown_language_offers_nothing(self) -> None:
        ls = _FakeServer(_doc("file:///site/notes.md", ""))
        result = server.completions(
            ls,
            types.CompletionParams(
                text_document=_identifier("file:///site/notes.md"),
                position=types.Position(line=0, character=0),
            ),
        )
        assert result.items == []


class TestFormatting:
    def _format(self, ls: _FakeServer, uri: str) -> list[types.TextEdit]:
        return server.formatting(
            ls,
            types.DocumentFormattingParams(
                text_document=_identifier(uri),
                options=types.FormattingOptions(tab_size=2, insert_spaces=True),
            ),
        )

    def test_failing_formatter_returns_no_edits(
        self, settings: list[weblint_config.Config]
    ) -> None:
        settings[0] = weblint_config.Config(prettier=("weblint-no-such-command-xyz",))
        ls = _FakeServer(_doc("file:///site/style.css", "a{}"))
        assert self._format(ls, "file:///site/style.css") == []

    @pytest.mark.skipif(
        shutil.which("sh") is None or shutil.which("tr") is None,
        reason="requires sh and tr",
    )
    def test_changed_text_replaces_whole_document(
        self, settings: list[weblint_config.Config]
    ) -> None:
        settings[0] = weblint_config.Config(
            prettier=("sh", "-c", "tr a-z A-Z", "prettier")
        )
        ls = _FakeServer(_doc("file:///site/style.css", "a{}\nb{}"))
        edits = self._format(ls, "file:///site/style.css")
        assert [edit.new_text for edit in edits] == ["A{}\nB{}"]
        assert edits[0].range.start == types.Position(line=0, character=0)
        assert edits[0].range.end == types.Position(line=2, character=0)
