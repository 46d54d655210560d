from __future__ import annotations

"""
A minimal pygls-based Language Server for Tern.

Features:
- Text synchronization and document store
- Diagnostics: lex and parse errors reported by the interpreter front end
- Hover: builtin signatures, list methods and declared functions/variables
- Completion: keywords, builtins, list methods (after '.') and declarations
- Document Symbols: from indexer

Note: We never evaluate the buffer. Diagnostics come from lexing and parsing only.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from lsprotocol.types import (
    CompletionItem,
    CompletionItemKind,
    CompletionList,
    CompletionOptions,
    CompletionParams,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    DocumentSymbol,
    DocumentSymbolParams,
    Hover,
    HoverParams,
    MarkupContent,
    MarkupKind,
    Position,
    Range,
    SymbolKind,
)
from pygls.server import LanguageServer

from tern.config import get_log_level
from tern.errors import Diagnostic as TernDiagnostic
from tern_lsp.indexer import (
    BUILTIN_SIGNATURES,
    KEYWORD_NAMES,
    LIST_METHOD_SIGNATURES,
    DocumentIndex,
    build_index,
    describe,
)

logger = logging.getLogger(__name__)


@dataclass
class DocumentState:
    text: str
    index: DocumentIndex


class TernLanguageServer(LanguageServer):
    CMD_NAME = "tern-ls"

    def __init__(self):
        super().__init__(self.CMD_NAME, "v0.1")
        self.documents: Dict[str, DocumentState] = {}


ls = TernLanguageServer()


# --- Text sync ---
def _refresh(uri: str, text: str) -> None:
    idx = build_index(text)
    ls.documents[uri] = DocumentState(text=text, index=idx)
    logger.debug("%s: %d symbols, %d diagnostics", uri, len(idx.symbols), len(idx.diagnostics))
    ls.publish_diagnostics(uri, to_lsp_diagnostics(text, idx.diagnostics))


@ls.feature("textDocument/didOpen")
def did_open(params: DidOpenTextDocumentParams):
    _refresh(params.text_document.uri, params.text_document.text or "")


@ls.feature("textDocument/didChange")
def did_change(params: DidChangeTextDocumentParams):
    uri = params.text_document.uri
    if params.content_changes:
        text = params.content_changes[-1].text
    else:
        state = ls.documents.get(uri)
        text = state.text if state else ""
    _refresh(uri, text)


@ls.feature("textDocument/didClose")
def did_close(params: DidCloseTextDocumentParams):
    uri = params.text_document.uri
    ls.documents.pop(uri, None)
    ls.publish_diagnostics(uri, [])


# --- Diagnostics ---
def _line_range(lines: List[str], line: int) -> Range:
    width = len(lines[line]) if 0 <= line < len(lines) else 0
    return Range(start=Position(line=line, character=0), end=Position(line=line, character=width))


def to_lsp_diagnostics(text: str, diagnostics: List[TernDiagnostic]) -> List[Diagnostic]:
    """Map interpreter diagnostics (1-based lines) onto whole-line LSP ranges."""
    lines = text.splitlines()
    result: List[Diagnostic] = []
    for diag in diagnostics:
        line = max((diag.line or 1) - 1, 0)
        result.append(
            Diagnostic(
                range=_line_range(lines, line),
                message=diag.message,
                severity=DiagnosticSeverity.Error,
                source=ls.CMD_NAME,
                code=diag.kind,
            )
        )
    return result


# --- Hover ---
@ls.feature("textDocument/hover")
def on_hover(params: HoverParams) -> Optional[Hover]:
    state = ls.documents.get(params.text_document.uri)
    if not state:
        return None

    word = _extract_word_at(state.text, params.position)
    if not word:
        return None

    contents = describe(word, state.index)
    if contents is None:
        return None
    return Hover(contents=MarkupContent(kind=MarkupKind.PlainText, value=contents))


# --- Completion ---
@ls.feature("textDocument/completion", CompletionOptions(trigger_characters=["."]))
def on_completion(params: CompletionParams) -> CompletionList:
    state = ls.documents.get(params.text_document.uri)
    items: List[CompletionItem] = []
    if not state:
        return CompletionList(is_incomplete=False, items=items)

    # After a '.', only list methods make sense
    if _get_line_prefix(state.text, params.position).rstrip().endswith("."):
        for name, sig in LIST_METHOD_SIGNATURES.items():
            items.append(CompletionItem(label=name, kind=CompletionItemKind.Method, detail=sig))
        return CompletionList(is_incomplete=False, items=items)

    for name in KEYWORD_NAMES:
        items.append(CompletionItem(label=name, kind=CompletionItemKind.Keyword))
    for name, sig in BUILTIN_SIGNATURES.items():
        items.append(CompletionItem(label=name, kind=CompletionItemKind.Function, detail=sig))
    for name, sdef in state.index.symbols.items():
        kind = CompletionItemKind.Function if sdef.kind == "function" else CompletionItemKind.Variable
        items.append(CompletionItem(label=name, kind=kind, detail=sdef.signature))

    return CompletionList(is_incomplete=False, items=items)


# --- Document Symbols ---
@ls.feature("textDocument/documentSymbol")
def on_document_symbols(params: DocumentSymbolParams) -> Optional[List[DocumentSymbol]]:
    state = ls.documents.get(params.text_document.uri)
    if not state:
        return None
    symbols: List[DocumentSymbol] = []
    for name, sdef in state.index.symbols.items():
        rng = Range(
            start=Position(line=sdef.line, character=sdef.col),
            end=Position(line=sdef.line, character=sdef.col + len(name)),
        )
        symbols.append(
            DocumentSymbol(
                name=name,
                detail=sdef.signature,
                kind=SymbolKind.Function if sdef.kind == "function" else SymbolKind.Variable,
                range=rng,
                selection_range=rng,
            )
        )
    return symbols


# --- Helpers ---

def _get_line_prefix(text: str, pos: Position) -> str:
    # Return the text from start of line up to pos
    lines = text.splitlines(True)
    if pos.line >= len(lines):
        return ""
    return lines[pos.line][: pos.character]


def _is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _extract_word_at(text: str, pos: Position) -> Optional[str]:
    lines = text.splitlines(True)
    if pos.line >= len(lines):
        return None
    line = lines[pos.line]
    start = min(pos.character, len(line))
    while start > 0 and _is_word_char(line[start - 1]):
        start -= 1
    end = pos.character
    while end < len(line) and _is_word_char(line[end]):
        end += 1
    return line[start:end] or None


def main() -> None:
    logging.basicConfig(level=get_log_level())
    # Run the language server over stdio
    ls.start_io()


if __name__ == "__main__":
    main()
