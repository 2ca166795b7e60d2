"""
FWJS runtime values
Tagged dictionaries created only through the factories below
"""

from typing import Any, Dict, List, Optional

from error_handling import TypeMismatchError, NotCallableError


INT = "Int"
BOOL = "Bool"
CLOSURE = "Closure"
UNDEFINED_TYPE = "Undefined"


# ============================================================================
# CONSTRUCTORS
# ============================================================================

def make_value(value: Any, type_name: str) -> Dict:
  """Create an immutable runtime value"""
  return {
      'value': value,
      'type': type_name
  }


def make_int(n: int) -> Dict:
  # bool is an int subclass; keep the two kinds apart
  return make_value(int(n), INT)


def make_bool(b: bool) -> Dict:
  return make_value(bool(b), BOOL)


def make_closure(params: List[str], body: Dict, closure_env: Dict) -> Dict:
  """Create a function value sharing (not copying) its defining environment"""
  return {
      'type': CLOSURE,
      'params': tuple(params),
      'body': body,
      'closure_env': closure_env
  }


UNDEFINED = make_value(None, UNDEFINED_TYPE)

TRUE = make_bool(True)
FALSE = make_bool(False)


# ============================================================================
# PREDICATES AND PAYLOAD EXTRACTION
# ============================================================================

def value_type(val: Dict) -> Optional[str]:
  return val.get('type') if isinstance(val, dict) else None


def is_int(val: Dict) -> bool:
  return value_type(val) == INT


def is_bool(val: Dict) -> bool:
  return value_type(val) == BOOL


def is_closure(val: Dict) -> bool:
  return value_type(val) == CLOSURE


def is_undefined(val: Dict) -> bool:
  return value_type(val) == UNDEFINED_TYPE


def as_int(val: Dict) -> int:
  if not is_int(val):
    raise TypeMismatchError(f"Expected int, but got {show_value(val)}", INT, [val])
  return val['value']


def as_bool(val: Dict) -> bool:
  if not is_bool(val):
    raise TypeMismatchError(f"Expected boolean, but got {show_value(val)}", BOOL, [val])
  return val['value']


def as_closure(val: Dict) -> Dict:
  if not is_closure(val):
    raise NotCallableError(f"Cannot call {show_value(val)}: not a function", val)
  return val


# ============================================================================
# RENDERING
# ============================================================================

def show_value(val: Dict) -> str:
  """Text written by print expressions"""
  kind = value_type(val)
  if kind == INT:
    return str(val['value'])
  elif kind == BOOL:
    return "true" if val['value'] else "false"
  elif kind == CLOSURE:
    return "function"
  elif kind == UNDEFINED_TYPE:
    return "undefined"
  return f"<{kind}>"


def describe_value(val: Dict) -> str:
  """Longer rendering used by the REPL and diagnostics"""
  if is_closure(val):
    return f"function({', '.join(val['params'])})"
  return show_value(val)
