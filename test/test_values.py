"""
Runtime value tests for FWJS
"""

import pytest

from error_handling import TypeMismatchError, NotCallableError
from environment import make_global_env
from semantics import constant
from values import (
  UNDEFINED, TRUE, FALSE, INT, BOOL, CLOSURE,
  make_int, make_bool, make_closure,
  is_int, is_bool, is_closure, is_undefined, value_type,
  as_int, as_bool, as_closure,
  show_value, describe_value
)


class TestConstructors:

  def test_int_and_bool_are_distinct_kinds(self):
    assert value_type(make_int(1)) == INT
    assert value_type(make_bool(True)) == BOOL
    assert make_int(True)['value'] == 1
    assert make_int(True)['value'] is not True

  def test_closure_shares_env(self):
    env = make_global_env()
    closure = make_closure(["a", "b"], constant(UNDEFINED), env)
    assert value_type(closure) == CLOSURE
    assert closure['params'] == ("a", "b")
    assert closure['closure_env'] is env

  def test_predicates(self):
    assert is_int(make_int(0))
    assert is_bool(FALSE)
    assert is_undefined(UNDEFINED)
    assert not is_closure(make_int(0))
    assert value_type("not a value") is None


class TestExtraction:

  def test_as_int(self):
    assert as_int(make_int(-7)) == -7
    with pytest.raises(TypeMismatchError) as exc_info:
      as_int(TRUE)
    assert exc_info.value.expected == INT
    assert "true" in exc_info.value.message

  def test_as_bool(self):
    assert as_bool(TRUE) is True
    with pytest.raises(TypeMismatchError):
      as_bool(make_int(1))

  def test_as_closure_rejects_other_values(self):
    with pytest.raises(NotCallableError) as exc_info:
      as_closure(make_int(3))
    # NotCallableError is a kind of type mismatch
    assert isinstance(exc_info.value, TypeMismatchError)
    assert exc_info.value.value == make_int(3)


class TestRendering:

  @pytest.mark.parametrize("value, text", [
    (make_int(42), "42"),
    (make_int(-3), "-3"),
    (make_int(10 ** 30), "1" + "0" * 30),
    (TRUE, "true"),
    (FALSE, "false"),
    (UNDEFINED, "undefined"),
  ])
  def test_show_value(self, value, text):
    assert show_value(value) == text

  def test_closures_render_as_function(self):
    closure = make_closure(["n"], constant(UNDEFINED), make_global_env())
    assert show_value(closure) == "function"
    assert describe_value(closure) == "function(n)"
