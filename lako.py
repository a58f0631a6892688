#!/usr/bin/env python3
"""
Lako Programming Language Interpreter
Usage: lako [options] [script.lako]
"""

import argparse
import json
import logging
import sys
from typing import List, Optional, TextIO

from scanner import Scanner
from parser import Parser
from interpreter import Interpreter
from ast_printer import AstPrinter
from errors import Diagnostic, LakoRuntimeError, Phase
from diagnostics import ColorMode, DiagnosticFormatter
from source_map import SourceMap
from tokens import TokenType

logger = logging.getLogger("lako")
logger.addHandler(logging.NullHandler())

# sysexits.h
EXIT_OK = 0
EXIT_USAGE = 64
EXIT_DATAERR = 65
EXIT_SOFTWARE = 70
EXIT_IOERR = 74

class Lako:
    """One interpreter session; globals persist across calls to run()"""

    def __init__(self, output: Optional[TextIO] = None):
        self.source_map = SourceMap()
        self.interpreter = Interpreter(output)

    def run(self, source: str, path: str = "<string>") -> List[Diagnostic]:
        """Scan, parse and execute source.

        Returns an empty list on success. Lexical and syntax problems are
        all collected and nothing is executed; a runtime error stops
        execution and is returned on its own.
        """
        scanner = Scanner(source, path, self.source_map)
        parser = Parser(scanner.scan_tokens())
        program = parser.parse()

        # The scanner's error list is complete once the parser has drained it
        static_errors = scanner.errors + parser.errors
        if static_errors:
            diagnostics = sorted((e.diagnostic for e in static_errors), key=lambda d: d.line)
            logger.debug("%s: %d static diagnostic(s), not executing", path, len(diagnostics))
            return diagnostics

        try:
            self.interpreter.interpret(program)
        except LakoRuntimeError as e:
            logger.debug("%s: runtime error on line %d", path, e.line)
            return [e.diagnostic]

        return []

    def tokens(self, source: str, path: str = "<string>") -> List[str]:
        scanner = Scanner(source, path, self.source_map)
        return [repr(token) for token in scanner.scan_tokens()]

    def ast(self, source: str, path: str = "<string>") -> str:
        scanner = Scanner(source, path, self.source_map)
        return AstPrinter().print(Parser(scanner.scan_tokens()).parse())

def exit_code_for(diagnostics: List[Diagnostic]) -> int:
    if not diagnostics:
        return EXIT_OK
    if any(d.phase == Phase.RUNTIME for d in diagnostics):
        return EXIT_SOFTWARE
    return EXIT_DATAERR

class Reporter:
    """Writes diagnostics to stderr in the chosen format"""

    def __init__(self, formatter: DiagnosticFormatter, error_format: str = "human",
                 stream: Optional[TextIO] = None):
        self.formatter = formatter
        self.error_format = error_format
        self.stream = stream if stream is not None else sys.stderr

    def report(self, diagnostics: List[Diagnostic], summary: bool = True):
        if self.error_format == "json":
            for diagnostic in diagnostics:
                self.stream.write(json.dumps(diagnostic.to_json()) + "\n")
            return

        for diagnostic in diagnostics:
            self.formatter.emit_diagnostic(diagnostic, self.stream)
        if summary:
            self.formatter.print_summary(self.stream)
        self.formatter.reset()

def run_file(session: Lako, filename: str, reporter: Reporter) -> int:
    """Run a Lako program from a file"""
    try:
        with open(filename, 'r', encoding='utf-8') as f:
            source = f.read()
    except OSError as e:
        reporter.stream.write(f"Error: Could not read '{filename}': {e.strerror}\n")
        return EXIT_IOERR

    diagnostics = session.run(source, filename)
    reporter.report(diagnostics)
    return exit_code_for(diagnostics)

def needs_terminator(line: str) -> bool:
    """Whether the last real token of a REPL line is neither ';' nor '}'.

    Scanning ignores a trailing comment. The throwaway source map keeps
    this check out of the session's code frames.
    """
    tokens = Scanner(line, "<repl>", SourceMap()).tokenize()[:-1]
    return bool(tokens) and tokens[-1].type not in (TokenType.SEMICOLON, TokenType.RIGHT_BRACE)

def run_prompt(session: Lako, reporter: Reporter, stdin: Optional[TextIO] = None) -> int:
    """Read-eval-print loop; an error only abandons the current line"""
    stdin = stdin if stdin is not None else sys.stdin
    interactive = stdin.isatty()

    while True:
        if interactive:
            sys.stdout.write("> ")
            sys.stdout.flush()

        try:
            line = stdin.readline()
        except KeyboardInterrupt:
            sys.stdout.write("\nUse 'exit' to quit.\n")
            continue

        if line == "":
            break

        line = line.strip()
        if line == 'exit':
            break
        if line == '':
            continue

        # Allow a bare statement without its terminator
        if needs_terminator(line):
            line += '\n;'

        try:
            diagnostics = session.run(line, "<repl>")
        except RecursionError:
            reporter.stream.write("Fatal error: maximum recursion depth exceeded.\n")
            continue
        reporter.report(diagnostics, summary=False)

    return EXIT_OK

def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lako",
        description="Run a Lako script, or start an interactive prompt when no script is given.",
    )
    parser.add_argument("script", nargs="?", help="path of the script to run")
    parser.add_argument("--color", choices=[mode.value for mode in ColorMode], default="auto",
                        help="when to colour diagnostics (default: auto)")
    parser.add_argument("--max-errors", type=int, default=20, metavar="N",
                        help="stop reporting after N errors (default: 20)")
    parser.add_argument("--error-format", choices=["human", "json"], default="human",
                        help="diagnostic output format (default: human)")
    parser.add_argument("--tokens", action="store_true", help="print the token stream and exit")
    parser.add_argument("--ast", action="store_true", help="print the syntax tree and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output to stderr")
    return parser

def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    arg_parser = build_arg_parser()
    try:
        args = arg_parser.parse_args(argv)
    except SystemExit as e:
        # argparse exits with 2 on bad usage, 0 for --help
        return EXIT_USAGE if e.code else EXIT_OK

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr,
                            format="%(name)s %(levelname)s: %(message)s")

    if args.max_errors < 1:
        sys.stderr.write("Error: --max-errors must be at least 1\n")
        return EXIT_USAGE

    session = Lako()
    formatter = DiagnosticFormatter(ColorMode(args.color), args.max_errors, session.source_map)
    reporter = Reporter(formatter, args.error_format)

    if args.tokens or args.ast:
        if args.script is None:
            sys.stderr.write("Error: --tokens and --ast need a script\n")
            return EXIT_USAGE
        try:
            with open(args.script, 'r', encoding='utf-8') as f:
                source = f.read()
        except OSError as e:
            sys.stderr.write(f"Error: Could not read '{args.script}': {e.strerror}\n")
            return EXIT_IOERR
        if args.tokens:
            for token in session.tokens(source, args.script):
                print(token)
        if args.ast:
            print(session.ast(source, args.script))
        return EXIT_OK

    if args.script is None:
        return run_prompt(session, reporter)

    try:
        return run_file(session, args.script, reporter)
    except RecursionError:
        sys.stderr.write("Fatal error: maximum recursion depth exceeded.\n")
        return EXIT_SOFTWARE

if __name__ == "__main__":
    sys.exit(main())
