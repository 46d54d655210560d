import pytest
from hypothesis import given, strategies as st

from tern.errors import LexError
from tern.printer import stringify
from tern.reader.lexer import TokenKind, lex
from tern.reader.nodes import (
    Assign, Binary, Block, Call, ExpressionStmt, FunctionDecl, Grouping,
    Increment, Index, ListLiteral, Literal, Logical, Member, Print, Slice,
    Unary, VarDecl, Variable, While,
)
from tern.reader.parser import parse, parse_source
from tern.types.null import Null


def kinds(source):
    return [tok.kind for tok in lex(source)]


@pytest.mark.parametrize(
    "source,expected",
    [
        ("", [TokenKind.EOF]),
        ("var x = 1;", [TokenKind.VAR, TokenKind.IDENTIFIER, TokenKind.EQUAL, TokenKind.NUMBER, TokenKind.SEMICOLON, TokenKind.EOF]),
        ("a == b != c", [TokenKind.IDENTIFIER, TokenKind.EQUAL_EQUAL, TokenKind.IDENTIFIER, TokenKind.BANG_EQUAL, TokenKind.IDENTIFIER, TokenKind.EOF]),
        ("<= >= < > ! =", [TokenKind.LESS_EQUAL, TokenKind.GREATER_EQUAL, TokenKind.LESS, TokenKind.GREATER, TokenKind.BANG, TokenKind.EQUAL, TokenKind.EOF]),
        ("xs[1:2]", [TokenKind.IDENTIFIER, TokenKind.LBRACK, TokenKind.NUMBER, TokenKind.COLON, TokenKind.NUMBER, TokenKind.RBRACK, TokenKind.EOF]),
        ("xs.push(1)", [TokenKind.IDENTIFIER, TokenKind.DOT, TokenKind.IDENTIFIER, TokenKind.LPAREN, TokenKind.NUMBER, TokenKind.RPAREN, TokenKind.EOF]),
        ("i++ j--", [TokenKind.IDENTIFIER, TokenKind.PLUS_PLUS, TokenKind.IDENTIFIER, TokenKind.MINUS_MINUS, TokenKind.EOF]),
        ("a // comment\n b", [TokenKind.IDENTIFIER, TokenKind.IDENTIFIER, TokenKind.EOF]),
        ("def var for if else print return while and or true false null",
         [TokenKind.DEF, TokenKind.VAR, TokenKind.FOR, TokenKind.IF, TokenKind.ELSE, TokenKind.PRINT,
          TokenKind.RETURN, TokenKind.WHILE, TokenKind.AND, TokenKind.OR, TokenKind.TRUE,
          TokenKind.FALSE, TokenKind.NULL, TokenKind.EOF]),
        ("define _var2 printer", [TokenKind.IDENTIFIER, TokenKind.IDENTIFIER, TokenKind.IDENTIFIER, TokenKind.EOF]),
    ]
)
def test_lexer_kinds(source, expected):
    assert kinds(source) == expected


@pytest.mark.parametrize(
    "source,literal",
    [
        ("123", 123.0),
        ("3.14", 3.14),
        ("0", 0.0),
        ('"hello"', "hello"),
        ('""', ""),
        ('"back\\slash"', "back\\slash"),  # no escape processing
    ]
)
def test_lexer_literals(source, literal):
    tok = next(lex(source))
    assert tok.literal == literal
    assert tok.lexeme == source


def test_number_with_trailing_dot_is_number_then_dot():
    assert kinds("1.") == [TokenKind.NUMBER, TokenKind.DOT, TokenKind.EOF]


def test_lexer_tracks_lines():
    tokens = list(lex('a\n"two\nlines"\nb'))
    assert [t.line for t in tokens] == [1, 2, 4, 4]


def test_lexer_is_lazy_and_restartable():
    source = "a b c"
    first = lex(source)
    assert next(first).lexeme == "a"
    assert [t.lexeme for t in lex(source)] == ["a", "b", "c", ""]


@pytest.mark.parametrize(
    "source,line,fragment",
    [
        ('"never closed', 1, "Unterminated string"),
        ("a\nb @ c", 2, "'@'"),
        ("x = 1 # 2", 1, "'#'"),
        ("print \u0663;", 1, "'\u0663'"),
        ("var n = 1\u0663;", 1, "'\u0663'"),
    ]
)
def test_lexer_errors(source, line, fragment):
    with pytest.raises(LexError) as excinfo:
        list(lex(source))
    assert excinfo.value.line == line
    assert fragment in excinfo.value.message


@given(st.integers(min_value=0, max_value=10**12))
def test_integer_literal_round_trip(n):
    value = float(n)
    tok = next(lex(stringify(value)))
    assert tok.kind is TokenKind.NUMBER
    assert tok.literal == value


@given(st.floats(min_value=5e-324, max_value=1e15, allow_nan=False, allow_infinity=False))
def test_float_literal_round_trip(value):
    tok = next(lex(stringify(value)))
    assert tok.kind is TokenKind.NUMBER
    assert tok.literal == value


@given(st.text(alphabet=st.characters(exclude_characters='"', exclude_categories=("Cs",))))
def test_string_literal_round_trip(text):
    tok = next(lex('"' + stringify(text) + '"'))
    assert tok.kind is TokenKind.STRING
    assert tok.literal == text


# ------------------------
# Parser
# ------------------------
def parse_ok(source):
    statements, errors = parse_source(source)
    assert errors == []
    return statements


def expr_of(source):
    (stmt,) = parse_ok(source)
    assert isinstance(stmt, ExpressionStmt)
    return stmt.expression


def test_factor_binds_tighter_than_term():
    assert expr_of("1 + 2 * 3;") == Binary(
        Literal(1.0, 1), "+", Binary(Literal(2.0, 1), "*", Literal(3.0, 1), 1), 1
    )


def test_binary_operators_are_left_associative():
    expr = expr_of("10 - 4 - 3;")
    assert isinstance(expr.left, Binary)
    assert expr.left.left == Literal(10.0, 1)
    assert expr.right == Literal(3.0, 1)


def test_logical_precedence_or_below_and_below_equality():
    expr = expr_of("a or b and c == d;")
    assert isinstance(expr, Logical) and expr.operator == "or"
    assert isinstance(expr.right, Logical) and expr.right.operator == "and"
    assert isinstance(expr.right.right, Binary) and expr.right.right.operator == "=="


def test_comparison_binds_tighter_than_equality():
    expr = expr_of("1 < 2 == true;")
    assert expr.operator == "=="
    assert expr.left.operator == "<"


def test_unary_nests_and_grouping_is_kept():
    expr = expr_of("-!(x);")
    assert expr == Unary("-", Unary("!", Grouping(Variable("x", 1), 1), 1), 1)


def test_assignment_is_right_associative():
    assert expr_of("a = b = 1;") == Assign("a", Assign("b", Literal(1.0, 1), 1), 1)


def test_increment_and_decrement():
    assert expr_of("i++;") == Increment("i", 1.0, 1)
    assert expr_of("i--;") == Increment("i", -1.0, 1)


def test_call_member_and_accessors_chain():
    expr = expr_of("xs.slice()[0](1, 2);")
    assert isinstance(expr, Call) and len(expr.arguments) == 2
    assert isinstance(expr.callee, Index)
    inner = expr.callee.target
    assert isinstance(inner, Call) and inner.arguments == ()
    assert inner.callee == Member(Variable("xs", 1), "slice", 1)


@pytest.mark.parametrize(
    "source,start,end",
    [
        ("xs[1:2];", Literal(1.0, 1), Literal(2.0, 1)),
        ("xs[:1];", None, Literal(1.0, 1)),
        ("xs[1:];", Literal(1.0, 1), None),
        ("xs[:];", None, None),
    ]
)
def test_slice_forms(source, start, end):
    assert expr_of(source) == Slice(Variable("xs", 1), start, end, 1)


def test_index_without_colon():
    assert expr_of("xs[i + 1];") == Index(
        Variable("xs", 1), Binary(Variable("i", 1), "+", Literal(1.0, 1), 1), 1
    )


def test_list_literal_allows_trailing_comma():
    assert expr_of("[1, \"a\", null,];") == ListLiteral(
        (Literal(1.0, 1), Literal("a", 1), Literal(Null, 1)), 1
    )
    assert expr_of("[];") == ListLiteral((), 1)


def test_function_declaration():
    (decl,) = parse_ok("def add(a, b) { return a + b; }")
    assert isinstance(decl, FunctionDecl)
    assert decl.name == "add"
    assert decl.params == ("a", "b")
    assert len(decl.body) == 1


def test_for_desugars_into_block_with_while():
    (stmt,) = parse_ok("for (var i = 0; i < 3; i = i + 1) print i;")
    assert isinstance(stmt, Block)
    init, loop = stmt.statements
    assert init == VarDecl("i", Literal(0.0, 1), 1)
    assert isinstance(loop, While)
    assert loop.condition == Binary(Variable("i", 1), "<", Literal(3.0, 1), 1)
    body, increment = loop.body.statements
    assert isinstance(body, Print)
    assert increment == ExpressionStmt(Assign("i", Binary(Variable("i", 1), "+", Literal(1.0, 1), 1), 1), 1)


def test_for_without_clauses_loops_on_true():
    (stmt,) = parse_ok("for (;;) print 1;")
    (loop,) = stmt.statements
    assert loop.condition == Literal(True, 1)
    assert len(loop.body.statements) == 1


def test_parser_reports_several_errors_and_keeps_going():
    statements, errors = parse_source("var = 1;\nprint ;\nvar x = 2;")
    assert [e.line for e in errors] == [1, 2]
    assert errors[0].expected == "variable name"
    assert errors[0].found == "'='"
    assert errors[1].expected == "expression"
    assert statements == [VarDecl("x", Literal(2.0, 3), 3)]


def test_error_inside_block_keeps_the_block():
    statements, errors = parse_source("{ print ; print 2; } print 3;")
    assert len(errors) == 1
    block, tail = statements
    assert isinstance(block, Block) and len(block.statements) == 1
    assert isinstance(tail, Print)


def test_error_before_closing_brace_leaves_brace_for_block():
    statements, errors = parse_source("def f() { print } print 1;")
    assert len(errors) == 1
    assert errors[0].found == "'}'"
    assert isinstance(statements[0], FunctionDecl)
    assert isinstance(statements[1], Print)


def test_missing_closing_brace_reports_end_of_input():
    _, errors = parse_source("{ print 1;")
    assert len(errors) == 1
    assert errors[0].found == "end of input"


def test_invalid_assignment_target():
    _, errors = parse_source("1 = 2;")
    assert len(errors) == 1
    assert "assignment target" in errors[0].expected


def test_parse_accepts_stream_without_eof():
    tokens = [tok for tok in lex("print 1;") if tok.kind is not TokenKind.EOF]
    statements, errors = parse(iter(tokens))
    assert errors == []
    assert isinstance(statements[0], Print)


@pytest.mark.parametrize("opening,closing", [("(" * 3000, ")" * 3000), ("!" * 3000, "")])
def test_excessive_nesting_is_a_parse_error(opening, closing):
    source = "print " + opening + "1" + closing + ";\nprint 2;"
    statements, errors = parse_source(source)
    assert len(errors) == 1
    assert errors[0].line == 1
    assert errors[0].message == "Expression nested too deeply"
    assert statements == [Print(Literal(2.0, 2), 2)]
