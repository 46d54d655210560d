from __future__ import annotations

"""
Static indexer for Tern documents.

The buffer is lexed and parsed but never executed. The parser recovers from
syntax errors, so even a half-typed document yields the declarations that did
parse, alongside the lex/parse diagnostics for the rest. The index powers the
LSP features (document symbols, hover, completion, diagnostics).
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from tern.errors import Diagnostic
from tern.interpreter import Interpreter
from tern.reader.lexer import KEYWORDS
from tern.reader.nodes import Block, FunctionDecl, If, Stmt, VarDecl, While


@dataclass
class SymbolDef:
    name: str
    kind: str  # "var" | "function"
    line: int  # 0-based
    col: int  # 0-based
    params: tuple[str, ...] = ()

    @property
    def signature(self) -> str:
        if self.kind == "function":
            return f"def {self.name}({', '.join(self.params)})"
        return f"var {self.name}"


@dataclass
class DocumentIndex:
    symbols: Dict[str, SymbolDef] = field(default_factory=dict)
    diagnostics: List[Diagnostic] = field(default_factory=list)


def _iter_declarations(statements: Iterable[Stmt]):
    """Yield every FunctionDecl/VarDecl, descending into nested statements."""
    for stmt in statements:
        match stmt:
            case FunctionDecl(body=body):
                yield stmt
                yield from _iter_declarations(body)
            case VarDecl():
                yield stmt
            case Block(statements=inner):
                yield from _iter_declarations(inner)
            case If(then_branch=then_branch, else_branch=else_branch):
                yield from _iter_declarations([then_branch])
                if else_branch is not None:
                    yield from _iter_declarations([else_branch])
            case While(body=body):
                yield from _iter_declarations([body])


def _column_of(lines: List[str], line: int, keyword: str, name: str) -> int:
    if not 0 <= line < len(lines):
        return 0
    m = re.search(rf"\b{keyword}\s+({re.escape(name)})\b", lines[line])
    return m.start(1) if m else 0


def build_index(text: str) -> DocumentIndex:
    idx = DocumentIndex()
    statements, idx.diagnostics = Interpreter(output=lambda _line: None).analyze(text)
    lines = text.splitlines()

    for decl in _iter_declarations(statements):
        line = decl.line - 1
        if isinstance(decl, FunctionDecl):
            col = _column_of(lines, line, "def", decl.name)
            idx.symbols[decl.name] = SymbolDef(decl.name, "function", line, col, decl.params)
        elif decl.name not in idx.symbols:
            # A later `var` must not hide an earlier function of the same name
            col = _column_of(lines, line, "var", decl.name)
            idx.symbols[decl.name] = SymbolDef(decl.name, "var", line, col)
    return idx


# Builtin signatures for quick hover/completion without eval
BUILTIN_SIGNATURES: Dict[str, str] = {
    "hash": "hash(s) -> SHA-256 hex digest of the string s",
}

LIST_METHOD_SIGNATURES: Dict[str, str] = {
    "push": "list.push(v) -> appends v",
    "pop": "list.pop() -> removes and returns the last element",
    "insertAt": "list.insertAt(i, v) -> inserts v before position i",
    "remove": "list.remove(i) -> removes the element at position i",
    "index": "list.index(v) -> first position of v, or -1",
    "len": "list.len() -> number of elements",
    "sort": "list.sort() -> sorts in place and returns the list",
}

KEYWORD_NAMES: List[str] = sorted(KEYWORDS)


def describe(word: str, idx: Optional[DocumentIndex] = None) -> Optional[str]:
    """Hover text for a word: builtins and list methods first, then declarations."""
    if word in BUILTIN_SIGNATURES:
        return BUILTIN_SIGNATURES[word]
    if word in LIST_METHOD_SIGNATURES:
        return LIST_METHOD_SIGNATURES[word]
    if idx is not None and word in idx.symbols:
        sdef = idx.symbols[word]
        return f"{sdef.signature} (defined at {sdef.line + 1}:{sdef.col + 1})"
    return None
