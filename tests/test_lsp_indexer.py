from lsprotocol.types import DiagnosticSeverity, Position

from tern_lsp.indexer import build_index, describe
from tern_lsp.server import _extract_word_at, _get_line_prefix, to_lsp_diagnostics


SOURCE = """def add(a, b) {
  var total = a + b;
  return total;
}
var x = add(1, 2);
"""


def test_index_collects_nested_declarations():
    idx = build_index(SOURCE)
    assert idx.diagnostics == []
    assert set(idx.symbols) == {"add", "total", "x"}

    add = idx.symbols["add"]
    assert (add.kind, add.line, add.col, add.params) == ("function", 0, 4, ("a", "b"))
    assert add.signature == "def add(a, b)"

    total = idx.symbols["total"]
    assert (total.kind, total.line, total.col) == ("var", 1, 6)
    assert idx.symbols["x"].signature == "var x"


def test_index_survives_syntax_errors():
    idx = build_index("var ok = 1;\nprint ;\ndef f() { return 1; }")
    assert set(idx.symbols) == {"ok", "f"}
    assert [d.line for d in idx.diagnostics] == [2]


def test_index_on_lex_error_has_no_symbols():
    idx = build_index("var a = 1;\nvar b = #;")
    assert idx.symbols == {}
    assert len(idx.diagnostics) == 1


def test_later_var_does_not_hide_function():
    idx = build_index("def f() {}\nvar f = 1;")
    assert idx.symbols["f"].kind == "function"


def test_describe():
    idx = build_index(SOURCE)
    assert describe("hash").startswith("hash(s)")
    assert describe("push").startswith("list.push(v)")
    assert describe("add", idx) == "def add(a, b) (defined at 1:5)"
    assert describe("nothing", idx) is None
    assert describe("add") is None


def test_to_lsp_diagnostics_covers_whole_line():
    text = "var ok = 1;\nprint ;\n"
    (diag,) = to_lsp_diagnostics(text, build_index(text).diagnostics)
    assert diag.range.start == Position(line=1, character=0)
    assert diag.range.end == Position(line=1, character=7)
    assert diag.severity == DiagnosticSeverity.Error
    assert diag.code == "ParseError"
    assert diag.source == "tern-ls"


def test_extract_word_at():
    text = "var total = add(1, 2);\nprint total;"
    assert _extract_word_at(text, Position(line=0, character=13)) == "add"
    assert _extract_word_at(text, Position(line=1, character=6)) == "total"
    assert _extract_word_at(text, Position(line=1, character=11)) == "total"
    assert _extract_word_at(text, Position(line=0, character=10)) is None
    assert _extract_word_at(text, Position(line=5, character=0)) is None


def test_get_line_prefix():
    text = "var xs = [1];\nxs."
    assert _get_line_prefix(text, Position(line=1, character=3)) == "xs."
    assert _get_line_prefix(text, Position(line=9, character=0)) == ""


def test_index_survives_excessive_nesting():
    idx = build_index("var deep = " + "[" * 5000 + "]" * 5000 + ";\ndef f() {}")
    assert set(idx.symbols) == {"f"}
    assert [d.message for d in idx.diagnostics] == ["Expression nested too deeply"]
