"""
Source registry for the Lako Programming Language
Keeps every scanned text so spans can be turned back into lines and columns
"""

import os
from bisect import bisect_right
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Optional, Tuple

@dataclass(frozen=True)
class Span:
    """Half-open character range ``[start, end)`` inside one registered source"""
    file_id: int
    start: int
    end: int

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Invalid span: start ({self.start}) > end ({self.end})")

class Position(NamedTuple):
    line: int    # 1-based
    column: int  # 1-based

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"

class SourceFile:
    """One registered text plus the offsets where its lines begin"""

    def __init__(self, file_id: int, path: str, content: str):
        self.file_id = file_id
        self.path = path
        self.content = content
        self.line_starts: List[int] = [0]
        self.line_starts.extend(i + 1 for i, char in enumerate(content) if char == '\n')

    def line_count(self) -> int:
        return len(self.line_starts)

    def offset_to_position(self, offset: int) -> Position:
        if not 0 <= offset <= len(self.content):
            raise ValueError(f"Offset {offset} out of bounds for {self.path}")

        index = bisect_right(self.line_starts, offset) - 1
        return Position(index + 1, offset - self.line_starts[index] + 1)

    def span_to_positions(self, span: Span) -> Tuple[Position, Position]:
        """Positions of the first and last character covered by the span.

        A zero-width span resolves to the same position twice.
        """
        if span.file_id != self.file_id:
            raise ValueError(f"Span belongs to file {span.file_id}, not {self.file_id}")

        last = max(span.start, span.end - 1)
        return self.offset_to_position(span.start), self.offset_to_position(last)

    def get_line(self, line_num: int) -> str:
        """Text of a 1-based line without its terminator"""
        if not 1 <= line_num <= self.line_count():
            raise ValueError(f"Line {line_num} out of bounds")

        start = self.line_starts[line_num - 1]
        end = self.line_starts[line_num] if line_num < self.line_count() else len(self.content)
        return self.content[start:end].rstrip('\r\n')

class SourceMap:
    """Every source text registered during a session, keyed by file id.

    Files on disk are registered once per distinct content. Pseudo paths
    such as ``<repl>`` always get a fresh id since every REPL line is a
    separate text.
    """

    def __init__(self):
        self.files: Dict[int, SourceFile] = {}
        self.path_to_id: Dict[str, int] = {}
        self.next_id = 1

    def add_file(self, path: str, content: str) -> int:
        pseudo = path.startswith('<') and path.endswith('>')
        key = path if pseudo else os.path.abspath(path)

        known = None if pseudo else self.path_to_id.get(key)
        if known is not None and self.files[known].content == content:
            return known

        file_id = self.next_id
        self.next_id += 1
        self.files[file_id] = SourceFile(file_id, key, content)
        self.path_to_id[key] = file_id
        return file_id

    def get_file(self, file_id: int) -> Optional[SourceFile]:
        return self.files.get(file_id)

    def resolve_span(self, span: Span) -> Tuple[SourceFile, Position, Position]:
        """Find the file a span belongs to together with its start and end positions"""
        source_file = self.files.get(span.file_id)
        if source_file is None:
            raise ValueError(f"Unknown file ID: {span.file_id}")

        start, end = source_file.span_to_positions(span)
        return source_file, start, end

_source_map = SourceMap()

def get_source_map() -> SourceMap:
    """Process-wide map used when a scanner is not given one"""
    return _source_map

def reset_source_map():
    global _source_map
    _source_map = SourceMap()
