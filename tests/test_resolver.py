"""Tests for the scope distances recorded before execution."""

from ast_nodes import VariableExpression
from parser import Parser
from resolver import Resolver
from scanner import Scanner


class Recorder:
    def __init__(self):
        self.locals = {}

    def resolve(self, expr, depth):
        self.locals[expr] = depth


def resolve(source: str):
    program = Parser(Scanner(source).scan_tokens()).parse()
    recorder = Recorder()
    Resolver(recorder).resolve(program.statements)
    return {
        (expr.name if isinstance(expr, VariableExpression) else type(expr).__name__): depth
        for expr, depth in recorder.locals.items()
    }


def test_globals_are_left_unresolved():
    assert resolve("var a = 1; print a;") == {}


def test_block_local_distance():
    assert resolve("{ var a = 1; { print a; } }") == {"a": 1}


def test_parameters_live_in_the_call_scope():
    assert resolve("fun f(x) { print x; }") == {"x": 0}


def test_use_before_local_declaration_is_global():
    assert resolve("{ fun f() { print a; } var a = 1; }") == {}


def test_this_and_super_distances():
    found = resolve("class A {} class B < A { m() { this; super.m(); } }")
    assert found["ThisExpression"] == 1
    assert found["SuperExpression"] == 2
