"""
Environment and object model tests for the Kestrel language
"""

import pytest
from environment import Environment
from objects import (
    FALSE, NULL, TRUE, Boolean, Error, Integer, ObjectType, ReturnValue, String,
    native_bool_to_boolean
)
from utilities import is_truthy, type_name


class TestEnvironment:
  """Scope chain lookup and local-only writes"""

  def test_get_and_set(self, env):
    """Test binding and looking up a name"""
    env.set("a", Integer(1))
    assert env.get("a") == Integer(1)
    assert "a" in env

  def test_missing_name(self, env):
    """Test looking up an unbound name"""
    assert env.get("missing") is None
    assert "missing" not in env

  def test_lookup_falls_through_to_outer(self, env):
    """Test lookup through the outer scope"""
    env.set("a", Integer(1))
    inner = Environment.enclosed(env)
    assert inner.get("a") == Integer(1)
    assert inner.outer is env

  def test_set_never_writes_outer(self, env):
    """Test that set only writes the local scope"""
    env.set("a", Integer(1))
    inner = Environment.enclosed(env)
    inner.set("a", Integer(2))
    assert inner.get("a") == Integer(2)
    assert env.get("a") == Integer(1)

  def test_outer_changes_are_visible(self, env):
    """Test that later outer bindings are visible"""
    inner = Environment.enclosed(env)
    env.set("late", TRUE)
    assert inner.get("late") is TRUE

  def test_depth_and_local_bindings(self, env):
    """Test scope depth and local bindings"""
    env.set("g", NULL)
    inner = Environment.enclosed(Environment.enclosed(env))
    inner.set("x", Integer(3))
    assert inner.depth() == 2
    assert env.depth() == 0
    assert list(inner.local_bindings()) == [("x", Integer(3))]


class TestObjects:
  """kind() tags and inspect() rendering"""

  @pytest.mark.parametrize("value,kind,text", [
      (Integer(-3), ObjectType.INTEGER, "-3"),
      (TRUE, ObjectType.BOOLEAN, "true"),
      (FALSE, ObjectType.BOOLEAN, "false"),
      (String("hi there"), ObjectType.STRING, "hi there"),
      (NULL, ObjectType.NULL, "null"),
      (Error("boom"), ObjectType.ERROR, "ERROR: boom"),
      (ReturnValue(Integer(4)), ObjectType.RETURN_VALUE, "4"),
  ])
  def test_kind_and_inspect(self, value, kind, text):
    """Test kind tags and inspect text"""
    assert value.kind() == kind
    assert value.inspect() == text

  def test_native_bool_uses_singletons(self):
    """Test boolean singletons"""
    assert native_bool_to_boolean(True) is TRUE
    assert native_bool_to_boolean(False) is FALSE
    assert Boolean(True) is not TRUE

  @pytest.mark.parametrize("value,expected", [
      (NULL, False),
      (FALSE, False),
      (TRUE, True),
      (Integer(0), True),
      (String(""), True),
  ])
  def test_truthiness(self, value, expected):
    """Test truthiness rules"""
    assert is_truthy(value) is expected

  def test_type_name(self):
    """Test type names in messages"""
    assert type_name(Integer(1)) == "INTEGER"
    assert type_name(None) == "NULL"
