"""
FWJS Interpreter - direct AST walking
Environments are mutable frames shared by reference; everything else
(values, expression trees) is immutable once built
"""

from typing import Any, Callable, Dict, Optional, Tuple
import logging
import operator
import sys

from error_handling import (
  FWJSRuntimeError,
  ResourceExhaustedError
)
from environment import (
  make_global_env,
  make_call_env,
  resolve_var,
  update_var,
  create_var,
  env_depth
)
from values import (
  UNDEFINED,
  make_closure,
  as_bool,
  as_closure,
  show_value
)
from utilities import (
  binary_arithmetic_op,
  binary_comparison_op,
  arity_error,
  truncated_divide,
  truncated_modulo
)
from parsing import create_parser
from semantics import create_analyzer

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 3000

# Host stack frames one nested FWJS call may use (eval_ast, eval_function_app,
# the body node and its operands)
FRAMES_PER_CALL = 8


# ============================================================================
# EXECUTION CONTEXT
# ============================================================================

def stdout_sink(text: str) -> None:
  """Default destination of print expressions"""
  print(text)


def make_execution_context(
  sink: Optional[Callable[[str], None]] = None,
  max_steps: Optional[int] = None,
  strict: bool = False,
  max_depth: int = DEFAULT_MAX_DEPTH
) -> Dict:
  """Create the mutable per-run evaluation state.

  sink receives the rendered text of every print expression. max_steps
  bounds the number of evaluated nodes (None for no bound). strict turns
  unbound reads and same-scope redeclarations into errors. max_depth bounds
  the number of function applications active at once.
  """
  return {
      'sink': sink if sink is not None else stdout_sink,
      'max_steps': max_steps,
      'steps': 0,
      'strict': strict,
      'max_depth': max_depth,
      'depth': 0
  }


def charge_step(context: Dict) -> None:
  context['steps'] += 1
  limit = context['max_steps']
  if limit is not None and context['steps'] > limit:
    raise ResourceExhaustedError(f"Evaluation exceeded {limit} steps", limit)


def enter_call(context: Dict) -> None:
  limit = context['max_depth']
  if context['depth'] >= limit:
    raise ResourceExhaustedError(f"Maximum call depth of {limit} exceeded", limit)
  context['depth'] += 1


# ============================================================================
# BINARY OPERATIONS
# ============================================================================

BINARY_OPERATIONS: Dict[str, Callable[[Dict, Dict], Dict]] = {
    'add': binary_arithmetic_op(operator.add, "add"),
    'subtract': binary_arithmetic_op(operator.sub, "subtract"),
    'multiply': binary_arithmetic_op(operator.mul, "multiply"),
    'divide': binary_arithmetic_op(truncated_divide, "divide", rejects_zero=True),
    'modulo': binary_arithmetic_op(truncated_modulo, "modulo", rejects_zero=True),
    'greater': binary_comparison_op(operator.gt, "compare"),
    'greater_or_equal': binary_comparison_op(operator.ge, "compare"),
    'less': binary_comparison_op(operator.lt, "compare"),
    'less_or_equal': binary_comparison_op(operator.le, "compare"),
    'equal': binary_comparison_op(operator.eq, "compare"),
}


# ============================================================================
# EVALUATION FUNCTIONS
# ============================================================================

def eval_ast(ast_node: Dict, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """Evaluate an AST node in env and return its value"""
  if context is None:
    context = make_execution_context()

  charge_step(context)

  node_type = ast_node['type']
  if debug:
    logger.debug("Evaluating %s (scope depth %d)", node_type, env_depth(env))

  evaluator = EVALUATORS.get(node_type)
  if evaluator is None:
    raise FWJSRuntimeError(f"Unknown AST node type: {node_type}")
  return evaluator(ast_node, env, debug, context)


def eval_constant(ast_node: Dict, env: Dict, debug: bool, context: Dict) -> Dict:
  return ast_node['value']


def eval_print(ast_node: Dict, env: Dict, debug: bool, context: Dict) -> Dict:
  """Send the rendered value to the sink and pass the value through"""
  value = eval_ast(ast_node['value'], env, debug, context)
  context['sink'](show_value(value))
  return value


def eval_variable(ast_node: Dict, env: Dict, debug: bool, context: Dict) -> Dict:
  return resolve_var(env, ast_node['value'], strict=context['strict'])


def eval_binary_op(ast_node: Dict, env: Dict, debug: bool, context: Dict) -> Dict:
  """Both operands are always evaluated, left first"""
  value_dict = ast_node['value']
  left = eval_ast(value_dict['left'], env, debug, context)
  right = eval_ast(value_dict['right'], env, debug, context)

  operation = BINARY_OPERATIONS.get(value_dict['op'])
  if operation is None:
    raise FWJSRuntimeError(f"Unrecognized operator: {value_dict['op']}")
  return operation(left, right)


def eval_if(ast_node: Dict, env: Dict, debug: bool, context: Dict) -> Dict:
  value_dict = ast_node['value']
  condition = eval_ast(value_dict['cond'], env, debug, context)

  if as_bool(condition):
    return eval_ast(value_dict['then'], env, debug, context)
  elif value_dict['else'] is not None:
    return eval_ast(value_dict['else'], env, debug, context)
  return UNDEFINED


def eval_while(ast_node: Dict, env: Dict, debug: bool, context: Dict) -> Dict:
  value_dict = ast_node['value']
  cond_ast = value_dict['cond']
  body_ast = value_dict['body']

  iterations = 0
  while as_bool(eval_ast(cond_ast, env, debug, context)):
    eval_ast(body_ast, env, debug, context)
    iterations += 1

  if debug:
    logger.debug("Loop finished after %d iterations", iterations)
  return UNDEFINED


def eval_sequence(ast_node: Dict, env: Dict, debug: bool, context: Dict) -> Dict:
  """Evaluate first, then second; right-nested chains are walked in a loop"""
  node = ast_node
  while node['type'] == "SEQUENCE":
    eval_ast(node['value']['first'], env, debug, context)
    node = node['value']['second']
    if node['type'] == "SEQUENCE":
      charge_step(context)
  return eval_ast(node, env, debug, context)


def eval_var_decl(ast_node: Dict, env: Dict, debug: bool, context: Dict) -> Dict:
  value_dict = ast_node['value']
  value = eval_ast(value_dict['expr'], env, debug, context)
  create_var(env, value_dict['name'], value, strict=context['strict'])
  return value


def eval_assign(ast_node: Dict, env: Dict, debug: bool, context: Dict) -> Dict:
  value_dict = ast_node['value']
  value = eval_ast(value_dict['expr'], env, debug, context)
  update_var(env, value_dict['name'], value)
  return value


def eval_function_decl(ast_node: Dict, env: Dict, debug: bool, context: Dict) -> Dict:
  """Create a closure over the current frame; the body is not evaluated"""
  value_dict = ast_node['value']
  return make_closure(value_dict['params'], value_dict['body'], env)


def eval_function_app(ast_node: Dict, env: Dict, debug: bool, context: Dict) -> Dict:
  value_dict = ast_node['value']

  closure = as_closure(eval_ast(value_dict['function'], env, debug, context))

  # Arguments are evaluated in the caller's frame
  args = [eval_ast(arg_ast, env, debug, context) for arg_ast in value_dict['args']]

  params = closure['params']
  if len(args) != len(params):
    raise arity_error(f"function({', '.join(params)})", len(params), len(args))

  call_env = make_call_env(closure['closure_env'])
  for param, arg in zip(params, args):
    create_var(call_env, param, arg)

  if debug:
    logger.debug("Calling function(%s) with %s", ", ".join(params),
                 ", ".join(show_value(arg) for arg in args))

  enter_call(context)
  try:
    return eval_ast(closure['body'], call_env, debug, context)
  finally:
    context['depth'] -= 1


EVALUATORS: Dict[str, Callable[[Dict, Dict, bool, Dict], Dict]] = {
    "CONSTANT": eval_constant,
    "PRINT": eval_print,
    "VARIABLE": eval_variable,
    "BINARY_OP": eval_binary_op,
    "IF": eval_if,
    "WHILE": eval_while,
    "SEQUENCE": eval_sequence,
    "VAR_DECL": eval_var_decl,
    "ASSIGN": eval_assign,
    "FUNCTION_DECL": eval_function_decl,
    "FUNCTION_APP": eval_function_app,
}


# ============================================================================
# PROGRAM EVALUATION
# ============================================================================

def evaluate(root: Dict, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """Evaluate a root expression against a caller-owned global environment.

  The host recursion limit is raised to fit max_depth nested calls for the
  duration of the evaluation and restored afterwards.
  """
  if context is None:
    context = make_execution_context()

  host_limit = sys.getrecursionlimit()
  needed = host_limit + context['max_depth'] * FRAMES_PER_CALL
  sys.setrecursionlimit(needed)
  try:
    return eval_ast(root, env, debug, context)
  except RecursionError as e:
    raise ResourceExhaustedError("Maximum call depth exceeded") from e
  finally:
    sys.setrecursionlimit(host_limit)


def eval_program(root: Dict, debug: bool = False, context: Optional[Dict] = None) -> Tuple[Dict, Dict]:
  """
  Evaluate a whole program in a fresh global environment.
  Returns (result_value, global_env)
  """
  env = make_global_env()
  value = evaluate(root, env, debug, context)
  return value, env


# ============================================================================
# FACTORY FUNCTIONS (for main.py)
# ============================================================================

class FWJSInterpreter:
  """Parser, analyzer and evaluation options bundled for drivers"""

  def __init__(self, debug: bool = False, strict: bool = False,
               max_steps: Optional[int] = None,
               sink: Optional[Callable[[str], None]] = None,
               max_depth: int = DEFAULT_MAX_DEPTH):
    self.debug = debug
    self.strict = strict
    self.max_steps = max_steps
    self.max_depth = max_depth
    self.sink = sink
    self.parser = create_parser(debug)
    self.analyzer = create_analyzer(debug)

  def make_context(self) -> Dict:
    """Fresh context per run so step budgets do not accumulate"""
    return make_execution_context(self.sink, self.max_steps, self.strict, self.max_depth)

  def compile(self, source: str, filename: str = "<input>") -> Dict:
    """Parse and analyze source text into an expression tree"""
    statements = self.parser.parse_string(source, filename)
    return self.analyzer.analyze(statements)

  def compile_file(self, path: str) -> Dict:
    statements = self.parser.parse_file(path)
    return self.analyzer.analyze(statements)

  def run(self, source: str, env: Optional[Dict] = None, filename: str = "<input>") -> Dict:
    """Evaluate source text; env defaults to a fresh global environment"""
    root = self.compile(source, filename)
    if env is None:
      env = make_global_env()
    return evaluate(root, env, self.debug, self.make_context())

  def run_file(self, path: str) -> Tuple[Dict, Dict]:
    root = self.compile_file(path)
    return eval_program(root, self.debug, self.make_context())


def create_interpreter(debug: bool = False, **options: Any) -> FWJSInterpreter:
  """Factory function returning an interpreter"""
  return FWJSInterpreter(debug=debug, **options)


def create_debug_interpreter(**options: Any) -> FWJSInterpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True, **options)
