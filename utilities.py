"""
Utilities module for the FWJS interpreter
Error message builders and binary operation factories
"""

from typing import Callable, Dict

from error_handling import (
  TypeMismatchError,
  ArityMismatchError,
  DivisionByZeroError
)
from values import INT, is_int, make_int, make_bool, show_value


# ==================== ERROR MESSAGE BUILDERS ====================

def arity_error(func_desc: str, expected: int, got: int) -> ArityMismatchError:
  """
  Generate arity mismatch error

  Args:
    func_desc: Description of the called function
    expected: Number of declared parameters
    got: Number of arguments supplied

  Returns:
    ArityMismatchError with formatted message
  """
  return ArityMismatchError(
    f"{func_desc} expects {expected} argument{'s' if expected != 1 else ''}, got {got}",
    expected,
    got
  )


def operation_error(op: str, left: Dict, right: Dict) -> TypeMismatchError:
  """
  Generate operation error for non-integer operands

  Args:
    op: Operation name
    left: Left operand value
    right: Right operand value

  Returns:
    TypeMismatchError naming both operands
  """
  return TypeMismatchError(
    f"Cannot {op}: expected ints, but got {show_value(left)} and {show_value(right)}",
    INT,
    [left, right]
  )


# ==================== INTEGER HELPERS ====================

def truncated_divide(i: int, j: int) -> int:
  """Integer quotient rounded toward zero"""
  quotient = abs(i) // abs(j)
  return -quotient if (i < 0) != (j < 0) else quotient


def truncated_modulo(i: int, j: int) -> int:
  """Remainder whose sign follows the dividend"""
  return i - j * truncated_divide(i, j)


# ==================== BINARY OPERATION FACTORIES ====================

def binary_comparison_op(
  op: Callable[[int, int], bool],
  op_name: str
) -> Callable[[Dict, Dict], Dict]:
  """
  Factory for binary comparison operations

  Args:
    op: Python operator function (e.g., operator.lt)
    op_name: Name for error messages

  Returns:
    Function that compares two Int values and produces a Bool

  Examples:
    fwjs_lt = binary_comparison_op(operator.lt, "compare")
    fwjs_lt(make_int(1), make_int(2)) -> {"type": "Bool", "value": True}
  """
  def comparison(x: Dict, y: Dict) -> Dict:
    if not (is_int(x) and is_int(y)):
      raise operation_error(op_name, x, y)
    return make_bool(op(x['value'], y['value']))

  return comparison


def binary_arithmetic_op(
  op: Callable[[int, int], int],
  op_name: str,
  rejects_zero: bool = False
) -> Callable[[Dict, Dict], Dict]:
  """
  Factory for binary arithmetic operations

  Args:
    op: Python operator function (e.g., operator.add)
    op_name: Name for error messages
    rejects_zero: Raise DivisionByZeroError when the right operand is 0

  Returns:
    Function that combines two Int values into an Int

  Examples:
    fwjs_add = binary_arithmetic_op(operator.add, "add")
    fwjs_add(make_int(1), make_int(2)) -> {"type": "Int", "value": 3}
  """
  def arithmetic(x: Dict, y: Dict) -> Dict:
    if not (is_int(x) and is_int(y)):
      raise operation_error(op_name, x, y)
    if rejects_zero and y['value'] == 0:
      raise DivisionByZeroError(op_name, x['value'])
    return make_int(op(x['value'], y['value']))

  return arithmetic
