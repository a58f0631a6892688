"""Tests for span resolution."""

import pytest

from source_map import Position, SourceMap, Span


def test_positions_are_one_based():
    source_map = SourceMap()
    file_id = source_map.add_file("<t>", "ab\ncd\n")
    source_file = source_map.get_file(file_id)
    assert source_file.offset_to_position(0) == Position(1, 1)
    assert source_file.offset_to_position(4) == Position(2, 2)
    assert str(source_file.offset_to_position(3)) == "2:1"


def test_resolve_span_gives_first_and_last_character():
    source_map = SourceMap()
    file_id = source_map.add_file("<t>", "var name;")
    source_file, start, end = source_map.resolve_span(Span(file_id, 4, 8))
    assert (start, end) == (Position(1, 5), Position(1, 8))
    assert source_file.get_line(1) == "var name;"


def test_get_line_strips_terminators():
    source_map = SourceMap()
    source_file = source_map.get_file(source_map.add_file("<t>", "one\r\ntwo"))
    assert source_file.line_count() == 2
    assert source_file.get_line(1) == "one"
    assert source_file.get_line(2) == "two"
    with pytest.raises(ValueError):
        source_file.get_line(3)


def test_pseudo_paths_always_get_a_new_id():
    source_map = SourceMap()
    assert source_map.add_file("<repl>", "1;") != source_map.add_file("<repl>", "1;")


def test_real_paths_are_reused_for_identical_content(tmp_path):
    source_map = SourceMap()
    path = str(tmp_path / "a.lako")
    first = source_map.add_file(path, "print 1;")
    assert source_map.add_file(path, "print 1;") == first
    assert source_map.add_file(path, "print 2;") != first


def test_inverted_span_is_rejected():
    with pytest.raises(ValueError):
        Span(1, 5, 4)
