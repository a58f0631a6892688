"""
Human-readable rendering of Lako diagnostics
Header, location, code frame with underlines, then help and notes
"""

import os
import sys
from enum import Enum
from typing import List, Optional, TextIO, Tuple

from errors import Diagnostic, LabeledSpan
from source_map import Position, SourceFile, SourceMap, get_source_map

class ColorMode(Enum):
    NEVER = "never"
    ALWAYS = "always"
    AUTO = "auto"

RESET = '\033[0m'

# ANSI escape per role in the rendered output
STYLES = {
    'error': '\033[1;91m',
    'gutter': '\033[94m',
    'primary': '\033[91m',
    'secondary': '\033[93m',
    'hint': '\033[36m',
}

# (label, first position, last position) of one span
Mark = Tuple[LabeledSpan, Position, Position]

class DiagnosticFormatter:
    """Renders diagnostics and keeps the running error count.

    Output stops after ``max_errors`` errors with a single notice. Spans are
    resolved through ``source_map``, or the process-wide map when none is given.
    """

    def __init__(self, color_mode: ColorMode = ColorMode.AUTO, max_errors: int = 20,
                 source_map: Optional[SourceMap] = None):
        self.color_mode = color_mode
        self.max_errors = max_errors
        self.source_map = source_map
        self.error_count = 0

    def should_use_colors(self, file: TextIO = sys.stderr) -> bool:
        if self.color_mode != ColorMode.AUTO:
            return self.color_mode == ColorMode.ALWAYS
        if os.getenv('NO_COLOR') is not None:
            return False
        isatty = getattr(file, 'isatty', None)
        return bool(isatty and isatty())

    def colorize(self, text: str, role: str, file: TextIO = sys.stderr) -> str:
        if not text or not self.should_use_colors(file):
            return text
        return STYLES.get(role, '') + text + RESET

    def format_diagnostic(self, diagnostic: Diagnostic, file: TextIO = sys.stderr) -> str:
        """Render one diagnostic, counting it against the error limit"""
        self.error_count += 1

        if self.error_count > self.max_errors:
            if self.error_count == self.max_errors + 1:
                return self.colorize("... (too many errors, stopping)", 'error', file) + "\n"
            return ""

        paint = lambda text, role: self.colorize(text, role, file)

        phase = diagnostic.phase.value.title()
        header = f"{phase} {diagnostic.severity.value} [{diagnostic.code}]: {diagnostic.message}"
        out = [paint(header, 'error')]

        marks, source_file = self._resolve(diagnostic)
        if source_file is None:
            out.append(paint(f"  --> line {diagnostic.line}", 'gutter'))
        else:
            start = next(mark[1] for mark in marks if mark[0].is_primary)
            out.append(paint(f"  --> {self._display_path(source_file.path)}:{start}", 'gutter'))
            out.append(paint("   |", 'gutter'))
            out.extend(self._code_frame(source_file, marks, paint))

        if diagnostic.help:
            out.append(paint(f"   = help: {diagnostic.help}", 'hint'))
        out.extend(paint(f"   = note: {note}", 'hint') for note in diagnostic.notes)

        return "\n".join(out) + "\n\n"

    def _resolve(self, diagnostic: Diagnostic) -> Tuple[List[Mark], Optional[SourceFile]]:
        """Resolve the labels in the primary span's file; unknown spans are dropped"""
        source_map = self.source_map if self.source_map is not None else get_source_map()
        primary = diagnostic.primary_span()
        if primary is None or source_map.get_file(primary.file_id) is None:
            return [], None

        marks = []
        for label in diagnostic.labels:
            if label.span.file_id != primary.file_id:
                continue
            _, start, end = source_map.resolve_span(label.span)
            marks.append((label, start, end))
        return marks, source_map.get_file(primary.file_id)

    @staticmethod
    def _display_path(path: str) -> str:
        if os.path.isabs(path) and os.path.exists(path):
            return os.path.relpath(path)
        return path

    def _code_frame(self, source_file: SourceFile, marks: List[Mark], paint) -> List[str]:
        """Source lines around each mark, one line of context on each side"""
        shown = set()
        for _, start, end in marks:
            shown.update(range(max(1, start.line - 1), min(source_file.line_count(), end.line + 1) + 1))
        width = len(str(max(shown)))
        blank = paint(" " * width + " |", 'gutter')

        frame = []
        previous = None
        for line_num in sorted(shown):
            if previous is not None and line_num > previous + 1:
                frame.append(paint("...", 'gutter'))
            previous = line_num
            text = source_file.get_line(line_num)
            frame.append(f"{paint(f'{line_num:>{width}} |', 'gutter')} {text}")

            starting_here = [mark for mark in marks if mark[1].line == line_num]
            if not starting_here:
                continue

            underline = [' '] * len(text)
            captions = []
            for label, start, end in starting_here:
                stop = end.column if end.line == line_num else len(text)
                char = '^' if label.is_primary else '-'
                for col in range(start.column - 1, max(start.column, stop)):
                    if col >= len(underline):
                        underline.extend(' ' * (col - len(underline) + 1))
                    underline[col] = char
                if label.label:
                    captions.append((start.column - 1, label))

            frame.append(f"{blank} {self._paint_underline(''.join(underline).rstrip(), paint)}")
            for col, label in captions:
                role = 'primary' if label.is_primary else 'secondary'
                frame.append(" " * (width + 3 + col) + paint(label.label, role))

        return frame

    @staticmethod
    def _paint_underline(underline: str, paint) -> str:
        pieces = []
        for char in underline:
            if char == '^':
                pieces.append(paint(char, 'primary'))
            elif char == '-':
                pieces.append(paint(char, 'secondary'))
            else:
                pieces.append(char)
        return ''.join(pieces)

    def emit_diagnostic(self, diagnostic: Diagnostic, file: TextIO = sys.stderr):
        file.write(self.format_diagnostic(diagnostic, file))
        file.flush()

    def print_summary(self, file: TextIO = sys.stderr):
        """Write e.g. ``2 errors generated``; nothing when clean"""
        if self.error_count:
            plural = "" if self.error_count == 1 else "s"
            file.write(self.colorize(f"{self.error_count} error{plural}", 'error', file) + " generated\n")
            file.flush()

    def reset(self):
        self.error_count = 0

