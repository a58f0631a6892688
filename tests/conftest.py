"""Pytest configuration for the Lako test suite."""

import io
import sys
from pathlib import Path

import pytest

# Modules live at the repository root
sys.path.insert(0, str(Path(__file__).parent.parent))

from lako import Lako  # noqa: E402
from source_map import reset_source_map  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_source_map():
    reset_source_map()
    yield


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def session(output):
    return Lako(output)


@pytest.fixture
def run(session, output):
    """Run source in a fresh session; return (printed lines, diagnostics)."""

    def _run(source: str):
        diagnostics = session.run(source)
        return output.getvalue().splitlines(), diagnostics

    return _run
