"""Tests for the environment chain."""

import pytest

from environment import Environment
from errors import UndefinedVariableError


def test_define_and_get():
    env = Environment()
    env.define("a", 1.0)
    assert env.get("a") == 1.0


def test_redefinition_in_same_scope_overwrites():
    env = Environment()
    env.define("a", 1.0)
    env.define("a", "two")
    assert env.get("a") == "two"


def test_lookup_walks_outward():
    outer = Environment()
    outer.define("a", 1.0)
    inner = Environment(Environment(outer))
    assert inner.get("a") == 1.0


def test_shadowing_leaves_outer_binding_untouched():
    outer = Environment()
    outer.define("a", "outer")
    inner = Environment(outer)
    inner.define("a", "inner")
    assert inner.get("a") == "inner"
    assert outer.get("a") == "outer"


def test_assign_updates_nearest_declaration():
    outer = Environment()
    outer.define("a", 1.0)
    inner = Environment(outer)
    inner.assign("a", 2.0)
    assert outer.get("a") == 2.0
    assert not inner.is_defined("a")


def test_get_undefined_raises_with_line():
    with pytest.raises(UndefinedVariableError) as excinfo:
        Environment().get("missing", 7)
    assert excinfo.value.line == 7
    assert excinfo.value.diagnostic.message == "Undefined variable 'missing'."


def test_assign_never_creates_a_binding():
    env = Environment()
    with pytest.raises(UndefinedVariableError):
        env.assign("missing", 1.0)
    assert not env.is_defined("missing")


def test_nil_is_a_real_binding():
    env = Environment()
    env.define("a", None)
    assert env.get("a") is None
    assert env.is_defined("a")
