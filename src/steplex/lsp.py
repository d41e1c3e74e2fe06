"""Minimal LSP server for STEP files — lexical diagnostics only."""

from __future__ import annotations

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from steplex import __version__
from steplex.errors import LexicalError
from steplex.lexer import Lexer
from steplex.positions import LineIndex

server = LanguageServer("steplex-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full)


def _diagnostic(index: LineIndex, item: LexicalError) -> Diagnostic:
    start = index.position(item.start)
    end = index.position(item.end)
    return Diagnostic(
        range=Range(
            start=Position(line=start.line - 1, character=index.utf16_column(item.start)),
            end=Position(line=end.line - 1, character=index.utf16_column(item.end)),
        ),
        message=item.message,
        severity=DiagnosticSeverity.Error,
        source="steplex",
    )


def _validate(ls: LanguageServer, uri: str) -> None:
    """Lex the document and publish one diagnostic per lexical error."""
    doc = ls.workspace.get_text_document(uri)
    lexer = Lexer(doc.source)
    index = LineIndex(lexer.data)
    diagnostics = [
        _diagnostic(index, item) for item in lexer if isinstance(item, LexicalError)
    ]

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
