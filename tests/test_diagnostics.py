"""Tests for diagnostic rendering."""

import io
import json

from diagnostics import ColorMode, DiagnosticFormatter
from errors import LakoTypeError, Phase
from lako import Lako


def render(source: str, max_errors: int = 20) -> str:
    session = Lako(io.StringIO())
    formatter = DiagnosticFormatter(ColorMode.NEVER, max_errors, session.source_map)
    stream = io.StringIO()
    for diagnostic in session.run(source, "<test>"):
        formatter.emit_diagnostic(diagnostic, stream)
    formatter.print_summary(stream)
    return stream.getvalue()


def test_header_location_and_code_frame():
    text = render("var a = 1;\nprint a + \"x\";\n")
    lines = text.splitlines()
    assert lines[0] == (
        "Runtime error [LAK3001]: Operands of '+' must be two numbers or two strings, "
        "got number and string."
    )
    assert lines[1] == "  --> <test>:2:9"
    assert "2 | print a + \"x\";" in text
    assert "^" in text
    assert text.rstrip().endswith("1 error generated")


def test_syntax_error_header():
    text = render("print 1")
    assert text.startswith("Syntax error [LAK2001]: Expect ';' after value, found end of input.")


def test_lexical_error_includes_help():
    text = render("@")
    assert text.startswith("Lexical error [LAK1001]: Unexpected character '@'.")
    assert "= help: check for typos or unsupported characters" in text


def test_diagnostic_without_span_falls_back_to_line():
    formatter = DiagnosticFormatter(ColorMode.NEVER)
    diagnostic = LakoTypeError.invalid_superclass("X", "number", 4).diagnostic
    text = formatter.format_diagnostic(diagnostic)
    assert "  --> line 4" in text


def test_summary_counts_errors():
    text = render("@ # $")
    assert text.rstrip().endswith("3 errors generated")


def test_max_errors_stops_output():
    text = render("@ # $", max_errors=1)
    assert text.count("Lexical error") == 1
    assert "too many errors" in text


def test_colors_only_when_asked():
    formatter = DiagnosticFormatter(ColorMode.ALWAYS)
    assert formatter.colorize("x", "error").startswith("\033[")
    formatter = DiagnosticFormatter(ColorMode.NEVER)
    assert formatter.colorize("x", "error") == "x"


def test_auto_color_is_off_for_non_tty():
    formatter = DiagnosticFormatter(ColorMode.AUTO)
    assert not formatter.should_use_colors(io.StringIO())


def test_auto_color_respects_no_color(monkeypatch):
    class Tty(io.StringIO):
        def isatty(self):
            return True

    formatter = DiagnosticFormatter(ColorMode.AUTO)
    monkeypatch.delenv("NO_COLOR", raising=False)
    assert formatter.should_use_colors(Tty())
    monkeypatch.setenv("NO_COLOR", "1")
    assert not formatter.should_use_colors(Tty())


def test_str_and_json_forms():
    diagnostics = Lako(io.StringIO()).run("print nope;")
    diagnostic = diagnostics[0]
    assert str(diagnostic) == "[line 1] Runtime error [LAK4001]: Undefined variable 'nope'."
    payload = json.loads(json.dumps(diagnostic.to_json()))
    assert payload["phase"] == Phase.RUNTIME.value
    assert payload["line"] == 1
    assert payload["labels"][0]["is_primary"] is True


def test_arity_error_points_at_the_declaration():
    source = "fun add(a, b) {\n  return a + b;\n}\n\n\n\nadd(1);\n"
    text = render(source)
    lines = text.splitlines()
    assert lines[0] == "Runtime error [LAK3003]: Expected 2 arguments but got 1."
    assert lines[1] == "  --> <test>:7:6"
    assert "1 | fun add(a, b) {" in text
    assert "  |     ---" in text
    assert "declared here" in text
    assert "7 | add(1);" in text
    assert "called with 1" in text
    # Lines 3 to 5 are not near either mark
    assert "..." in lines
    assert "4 |" not in text
    assert "   = note: 'add' takes 2 parameters" in text


def test_arity_error_of_a_class_uses_its_initializer():
    diagnostics = Lako(io.StringIO()).run("class P { init(x) {} }\nP();")
    diagnostic = diagnostics[0]
    assert diagnostic.notes == ["'P' takes 1 parameter"]
    assert [label.is_primary for label in diagnostic.labels] == [True, False]


def test_native_arity_error_has_no_declaration():
    diagnostics = Lako(io.StringIO()).run("clock(1);")
    diagnostic = diagnostics[0]
    assert diagnostic.notes == ["'clock' takes 0 parameters"]
    assert len(diagnostic.labels) == 1
