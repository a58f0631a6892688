"""Tests for the parser: tree shape, error recovery and static checks."""

import pytest

from ast_nodes import (
    BlockStatement, ClassStatement, FunctionStatement, IfStatement,
    VarStatement, WhileStatement,
)
from ast_printer import AstPrinter
from parser import Parser
from scanner import Scanner


def parse(source: str):
    parser = Parser(Scanner(source).scan_tokens())
    program = parser.parse()
    return program, parser.errors


def tree(source: str) -> str:
    program, errors = parse(source)
    assert errors == []
    return AstPrinter().print(program)


def messages(source: str) -> list[str]:
    _, errors = parse(source)
    return [e.diagnostic.message for e in errors]


@pytest.mark.parametrize("source, expected", [
    ("1 + 2 * 3;", "(; (+ 1 (* 2 3)))"),
    ("(1 + 2) * 3;", "(; (* (group (+ 1 2)) 3))"),
    ("1 - 2 - 3;", "(; (- (- 1 2) 3))"),
    ("-a * b;", "(; (* (- a) b))"),
    ("!!true;", "(; (! (! true)))"),
    ("a < b == c >= d;", "(; (== (< a b) (>= c d)))"),
    ("a or b and c;", "(; (or a (and b c)))"),
    ("a = b = 1;", "(; (= a (= b 1)))"),
    ("a.b.c = 2;", "(; (.= c (. b a) 2))"),
    ("f(1)(2);", "(; (call (call f 1) 2))"),
    ("print \"hi\";", "(print \"hi\")"),
    ("var x;", "(var x)"),
    ("var x = nil;", "(var x nil)"),
])
def test_precedence_and_associativity(source, expected):
    assert tree(source) == expected


def test_for_loop_desugars_to_while():
    program, errors = parse("for (var i = 0; i < 3; i = i + 1) print i;")
    assert errors == []
    outer = program.statements[0]
    assert isinstance(outer, BlockStatement)
    assert isinstance(outer.statements[0], VarStatement)
    loop = outer.statements[1]
    assert isinstance(loop, WhileStatement)
    assert isinstance(loop.body, BlockStatement)
    assert AstPrinter().print(program) == (
        "(block (var i 0) (while (< i 3) (block (print i) (; (= i (+ i 1))))))"
    )


def test_for_loop_without_clauses_loops_on_true():
    assert tree("for (;;) print 1;") == "(while true (print 1))"


def test_if_else_binds_to_nearest_if():
    program, _ = parse("if (a) if (b) print 1; else print 2;")
    outer = program.statements[0]
    assert isinstance(outer, IfStatement)
    assert outer.else_branch is None
    assert outer.then_branch.else_branch is not None


def test_class_with_superclass_and_methods():
    program, errors = parse("class B < A { init(x) { this.x = x; } go() { return super.go(); } }")
    assert errors == []
    klass = program.statements[0]
    assert isinstance(klass, ClassStatement)
    assert klass.superclass.name == "A"
    assert [m.name for m in klass.methods] == ["init", "go"]
    assert all(isinstance(m, FunctionStatement) for m in klass.methods)
    assert klass.methods[0].params == ["x"]


def test_function_printing():
    assert tree("fun add(a, b) { return a + b; }") == "(fun add(a b) (return (+ a b)))"


def test_missing_semicolon_message_and_line():
    _, errors = parse("print 1\nprint 2;")
    assert len(errors) == 1
    assert errors[0].diagnostic.message == "Expect ';' after value, found 'print'."
    assert errors[0].line == 2


def test_error_at_end_of_input():
    assert messages("print 1") == ["Expect ';' after value, found end of input."]


def test_recovery_reports_each_broken_statement():
    program, errors = parse("var = 1;\nprint 2;\nvar y = ;\nprint 3;")
    assert [e.line for e in errors] == [1, 3]
    assert messages("var = 1;\nprint 2;\nvar y = ;\nprint 3;") == [
        "Expect variable name, found '='.",
        "Expect expression, found ';'.",
    ]
    # Both good statements survive
    assert AstPrinter().print(program) == "(print 2)\n(print 3)"


def test_recovery_inside_block():
    _, errors = parse("{ print ; print 1; }")
    assert len(errors) == 1


def test_invalid_assignment_target_does_not_unwind():
    program, errors = parse("1 + 2 = 3; print 4;")
    assert [e.diagnostic.message for e in errors] == ["Invalid assignment target."]
    assert len(program.statements) == 2


@pytest.mark.parametrize("source, message", [
    ("return 1;", "Can't return from top-level code."),
    ("class A { init() { return 1; } }", "Can't return a value from an initializer."),
    ("print this;", "Can't use 'this' outside of a class."),
    ("fun f() { return this; }", "Can't use 'this' outside of a class."),
    ("print super.x;", "Can't use 'super' outside of a class."),
    ("class A { f() { super.f(); } }", "Can't use 'super' in a class with no superclass."),
    ("class A < A {}", "A class can't inherit from itself."),
])
def test_static_checks(source, message):
    assert messages(source) == [message]


def test_bare_return_in_initializer_is_allowed():
    assert messages("class A { init() { return; } }") == []


def test_this_in_function_nested_in_method_is_allowed():
    assert messages("class A { m() { fun g() { return this; } return g; } }") == []


def test_too_many_arguments():
    args = ", ".join(["1"] * 256)
    assert messages(f"f({args});") == ["Can't have more than 255 arguments."]


def test_too_many_parameters():
    params = ", ".join(f"p{i}" for i in range(256))
    assert messages(f"fun f({params}) {{}}") == ["Can't have more than 255 parameters."]


def test_exactly_255_arguments_is_fine():
    args = ", ".join(["1"] * 255)
    assert messages(f"f({args});") == []
