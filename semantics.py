"""
FWJS Semantics Analysis
Turns parser output (tagged tuples) into the expression tree the interpreter
walks, and provides the node constructors used to build trees directly
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from error_handling import FWJSSemanticsError
from values import UNDEFINED, make_int, make_bool, describe_value

logger = logging.getLogger(__name__)


OPERATOR_NAMES = {
    '+': 'add',
    '-': 'subtract',
    '*': 'multiply',
    '/': 'divide',
    '%': 'modulo',
    '>': 'greater',
    '>=': 'greater_or_equal',
    '<': 'less',
    '<=': 'less_or_equal',
    '==': 'equal',
}

OPERATOR_SYMBOLS = {name: symbol for symbol, name in OPERATOR_NAMES.items()}


# ============================================================================
# NODE CONSTRUCTORS
# ============================================================================

def make_ast_node(node_type: str, value: Any) -> Dict:
  """Create an immutable AST node dictionary"""
  return {
      'type': node_type,
      'value': value
  }


def constant(value: Dict) -> Dict:
  return make_ast_node("CONSTANT", value)


def print_expr(expr: Dict) -> Dict:
  return make_ast_node("PRINT", expr)


def variable(name: str) -> Dict:
  return make_ast_node("VARIABLE", name)


def binary_op(op: str, left: Dict, right: Dict) -> Dict:
  """op is an operation name such as 'add' or 'less_or_equal'"""
  if op not in OPERATOR_SYMBOLS:
    raise FWJSSemanticsError(f"Unknown binary operation: {op}")
  return make_ast_node("BINARY_OP", {'op': op, 'left': left, 'right': right})


def if_expr(cond: Dict, then: Dict, els: Optional[Dict] = None) -> Dict:
  return make_ast_node("IF", {'cond': cond, 'then': then, 'else': els})


def while_expr(cond: Dict, body: Dict) -> Dict:
  return make_ast_node("WHILE", {'cond': cond, 'body': body})


def sequence(first: Dict, second: Dict) -> Dict:
  return make_ast_node("SEQUENCE", {'first': first, 'second': second})


def var_decl(name: str, expr: Dict) -> Dict:
  return make_ast_node("VAR_DECL", {'name': name, 'expr': expr})


def assign(name: str, expr: Dict) -> Dict:
  return make_ast_node("ASSIGN", {'name': name, 'expr': expr})


def function_decl(params: Sequence[str], body: Dict) -> Dict:
  seen = set()
  for param in params:
    if param in seen:
      raise FWJSSemanticsError(f"Duplicate parameter name '{param}' in function declaration")
    seen.add(param)
  return make_ast_node("FUNCTION_DECL", {'params': tuple(params), 'body': body})


def function_app(function: Dict, args: Sequence[Dict]) -> Dict:
  return make_ast_node("FUNCTION_APP", {'function': function, 'args': tuple(args)})


def sequence_of(exprs: List[Dict]) -> Dict:
  """Right-nested SEQUENCE of exprs; undefined when there are none"""
  if not exprs:
    return constant(UNDEFINED)
  result = exprs[-1]
  for expr in reversed(exprs[:-1]):
    result = sequence(expr, result)
  return result


# ============================================================================
# TUPLE ANALYSIS
# ============================================================================

def analyze_expression(expr: Tuple, debug: bool = False) -> Dict:
  """Analyze a tagged tuple from the parser and return its AST node"""
  if not (isinstance(expr, tuple) and len(expr) == 2):
    raise FWJSSemanticsError(f"Unable to analyze expression: {expr!r}")

  expr_type, expr_data = expr

  if debug:
    logger.debug("Analyzing %s", expr_type)

  handlers = {
      "NUMBER": lambda: constant(make_int(expr_data)),
      "BOOLEAN": lambda: constant(make_bool(expr_data)),
      "IDENTIFIER": lambda: variable(expr_data),
      "PRINT": lambda: print_expr(analyze_expression(expr_data, debug)),
      "BINARY_OP": lambda: analyze_binary_op(expr_data, debug),
      "IF": lambda: if_expr(
          analyze_expression(expr_data['cond'], debug),
          analyze_expression(expr_data['then'], debug),
          analyze_expression(expr_data['else'], debug) if expr_data['else'] is not None else None),
      "WHILE": lambda: while_expr(
          analyze_expression(expr_data['cond'], debug),
          analyze_expression(expr_data['body'], debug)),
      "VAR_DECL": lambda: var_decl(expr_data['name'], analyze_expression(expr_data['value'], debug)),
      "ASSIGN": lambda: assign(expr_data['name'], analyze_expression(expr_data['value'], debug)),
      "FUNCTION": lambda: function_decl(expr_data['params'], analyze_expression(expr_data['body'], debug)),
      "CALL": lambda: function_app(
          analyze_expression(expr_data['function'], debug),
          [analyze_expression(arg, debug) for arg in expr_data['args']]),
      "BLOCK": lambda: analyze_program(expr_data, debug),
  }

  handler = handlers.get(expr_type)
  if handler is None:
    raise FWJSSemanticsError(f"Unknown expression form: {expr_type}")
  return handler()


def analyze_binary_op(op_data: Dict, debug: bool = False) -> Dict:
  symbol = op_data['op']
  if symbol not in OPERATOR_NAMES:
    raise FWJSSemanticsError(f"Unknown operator: {symbol}")
  return binary_op(
      OPERATOR_NAMES[symbol],
      analyze_expression(op_data['left'], debug),
      analyze_expression(op_data['right'], debug))


def analyze_program(statements: Sequence[Tuple], debug: bool = False) -> Dict:
  """Analyze a statement list into a single expression tree"""
  return sequence_of([analyze_expression(stmt, debug) for stmt in statements])


# ============================================================================
# PRETTY PRINTING
# ============================================================================

def pretty_print_ast(node: Dict, indent: int = 0) -> str:
  """Render an expression tree one node per line"""
  pad = "  " * indent
  node_type = node['type']
  value = node['value']

  if node_type == "CONSTANT":
    return f"{pad}CONSTANT({describe_value(value)})\n"
  if node_type == "VARIABLE":
    return f"{pad}VARIABLE({value})\n"
  if node_type == "PRINT":
    return f"{pad}PRINT\n" + pretty_print_ast(value, indent + 1)
  if node_type == "BINARY_OP":
    return (f"{pad}BINARY_OP({OPERATOR_SYMBOLS[value['op']]})\n"
            + pretty_print_ast(value['left'], indent + 1)
            + pretty_print_ast(value['right'], indent + 1))
  if node_type == "IF":
    result = (f"{pad}IF\n" + pretty_print_ast(value['cond'], indent + 1)
              + pretty_print_ast(value['then'], indent + 1))
    if value['else'] is not None:
      result += pretty_print_ast(value['else'], indent + 1)
    return result
  if node_type == "WHILE":
    return (f"{pad}WHILE\n" + pretty_print_ast(value['cond'], indent + 1)
            + pretty_print_ast(value['body'], indent + 1))
  if node_type == "SEQUENCE":
    return (f"{pad}SEQUENCE\n" + pretty_print_ast(value['first'], indent + 1)
            + pretty_print_ast(value['second'], indent + 1))
  if node_type in ("VAR_DECL", "ASSIGN"):
    return f"{pad}{node_type}({value['name']})\n" + pretty_print_ast(value['expr'], indent + 1)
  if node_type == "FUNCTION_DECL":
    return f"{pad}FUNCTION_DECL({', '.join(value['params'])})\n" + pretty_print_ast(value['body'], indent + 1)
  if node_type == "FUNCTION_APP":
    result = f"{pad}FUNCTION_APP\n" + pretty_print_ast(value['function'], indent + 1)
    for arg in value['args']:
      result += pretty_print_ast(arg, indent + 1)
    return result
  return f"{pad}{node_type}({value!r})\n"


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

class FWJSAnalyzer:
  """Builds expression trees from parser output"""

  def __init__(self, debug: bool = False):
    self.debug = debug

  def analyze(self, statements: Sequence[Tuple]) -> Dict:
    try:
      return analyze_program(statements, self.debug)
    except (KeyError, TypeError) as e:
      raise FWJSSemanticsError(f"Malformed parse tree: {e}") from e

  def analyze_expression(self, expr: Tuple) -> Dict:
    try:
      return analyze_expression(expr, self.debug)
    except (KeyError, TypeError) as e:
      raise FWJSSemanticsError(f"Malformed parse tree: {e}") from e


def create_analyzer(debug: bool = False) -> FWJSAnalyzer:
  """Create an FWJS analyzer"""
  return FWJSAnalyzer(debug=debug)


def create_debug_analyzer() -> FWJSAnalyzer:
  """Create an FWJS analyzer with debug enabled"""
  return FWJSAnalyzer(debug=True)
