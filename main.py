"""
FWJS (Featherweight JavaScript) - Main Entry Point
Runs scripts, shows expression trees, and hosts an interactive session
"""

import sys
import argparse
import logging
import os
from pathlib import Path
from typing import Dict, Optional

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from error_handling import FWJSParseError, FWJSSemanticsError, FWJSRuntimeError
from environment import make_global_env, env_snapshot
from interpreter import create_interpreter, evaluate, FWJSInterpreter, DEFAULT_MAX_DEPTH
from parsing import KEYWORDS
from semantics import pretty_print_ast
from values import describe_value, is_undefined

VERSION = "FWJS v0.3.0 (Tree-walking Interpreter)"


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='fwjs',
      description='FWJS - Featherweight JavaScript, where if and while are expressions',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s script.fwjs                  # Run an FWJS script
  %(prog)s -i                           # Interactive mode
  %(prog)s -i script.fwjs               # Load a script, then interactive mode
  %(prog)s --parse script.fwjs          # Parse and show the expression tree
  %(prog)s --debug script.fwjs          # Run with debug logging
  %(prog)s --max-steps 100000 loop.fwjs # Stop runaway loops
  %(prog)s --max-depth 10000 deep.fwjs  # Allow deeper recursion
  %(prog)s --strict script.fwjs         # Unbound reads and redeclarations are errors
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='FWJS script file to execute'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse file and show the expression tree (for debugging)'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug logging for all stages'
  )

  parser.add_argument(
      '--strict',
      action='store_true',
      help='Treat unbound variable reads and redeclarations as errors'
  )

  parser.add_argument(
      '--max-steps',
      type=int,
      default=None,
      metavar='N',
      help='Abort evaluation after N evaluation steps'
  )

  parser.add_argument(
      '--max-depth',
      type=int,
      default=DEFAULT_MAX_DEPTH,
      metavar='N',
      help=f'Abort evaluation when more than N function calls are nested (default {DEFAULT_MAX_DEPTH})'
  )

  parser.add_argument(
      '--show-result',
      action='store_true',
      help='Print the value of the whole program after running it'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def configure_logging(debug: bool = False) -> None:
  logging.basicConfig(
      level=logging.DEBUG if debug else logging.WARNING,
      format="%(levelname)s %(name)s: %(message)s"
  )


def parse_file(script_path: str, debug: bool = False) -> None:
  """Parse an FWJS script file and show its expression tree"""
  interpreter = create_interpreter(debug)
  try:
    root = interpreter.compile_file(script_path)
  except FileNotFoundError:
    print(f"Error: Script file '{script_path}' not found")
    sys.exit(1)
  except (FWJSParseError, FWJSSemanticsError) as e:
    print(f"{e}")
    sys.exit(1)

  print(pretty_print_ast(root), end='')


def run_script_file(script_path: str, debug: bool = False, strict: bool = False,
                    max_steps: Optional[int] = None, show_result: bool = False,
                    max_depth: int = DEFAULT_MAX_DEPTH) -> None:
  """Run an FWJS script file"""
  interpreter = create_interpreter(debug, strict=strict, max_steps=max_steps,
                                   max_depth=max_depth)
  try:
    result, final_env = interpreter.run_file(script_path)

    if show_result:
      print(describe_value(result))
    if debug:
      print(f"\nFinal environment ({len(final_env['bindings'])} bindings):")
      for name, value in final_env['bindings'].items():
        print(f"  {name} = {describe_value(value)}")

  except FileNotFoundError:
    print(f"Error: Script file '{script_path}' not found")
    print("  Hint: Check the file path and make sure the file exists")
    sys.exit(1)
  except PermissionError:
    print(f"Error: Permission denied reading '{script_path}'")
    sys.exit(1)
  except FWJSParseError as e:
    print(f"{e}")
    sys.exit(1)
  except FWJSSemanticsError as e:
    print(f"{e} in '{script_path}'")
    sys.exit(1)
  except FWJSRuntimeError as e:
    print(f"\n{'='*70}")
    print(f"Runtime Error in '{script_path}'")
    print(f"{'='*70}")
    print(f"\n{type(e).__name__}: {e.message}")
    print(f"\n{'='*70}\n")
    sys.exit(1)


def setup_readline() -> None:
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser("~/.fwjs_history")
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First session, no history yet
  readline.set_history_length(1000)

  completions = list(KEYWORDS) + [":env", ":parse", ":reset", ":help", "exit"]

  def completer(text, state):
    options = [cmd for cmd in completions if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(readline.write_history_file, history_file)


def make_session(interpreter: FWJSInterpreter) -> Dict:
  """Interactive state: one global environment shared by every input line"""
  return {
      'interpreter': interpreter,
      'env': make_global_env()
  }


def print_help() -> None:
  print("REPL Commands:")
  print("  :parse <expr>     - Show the expression tree")
  print("  :env              - Show current global bindings")
  print("  :reset            - Discard all bindings")
  print("  :help             - Show this help")
  print("  exit              - Exit REPL")
  print()
  print("Language features:")
  print("  var x = 5;                        - Declaration in the current scope")
  print("  x = 6;                            - Assignment (creates a global if unbound)")
  print("  var sq = function(n) { n * n };   - Functions are closures")
  print("  if (x > 3) { 1 } else { 2 }       - if is an expression")
  print("  while (x > 0) { x = x - 1 }       - while evaluates to undefined")
  print("  print(sq(x))                      - Print a value")
  print()
  print("Semicolons are optional, but a call's '(' must be on the callee's line:")
  print("  a line starting with '(' begins a new statement.")


def process_line(session: Dict, line: str) -> bool:
  """Handle one line of interactive input. Returns False to end the session."""
  code = line.strip()
  interpreter = session['interpreter']

  if not code:
    return True

  if code in ("exit", "exit."):
    return False

  if code == ":help":
    print_help()
    return True

  if code == ":env":
    bindings = env_snapshot(session['env'])
    if bindings:
      for name, value in bindings.items():
        print(f"  {name} = {describe_value(value)}")
    else:
      print("  (no bindings)")
    return True

  if code == ":reset":
    session['env'] = make_global_env()
    print("Environment cleared")
    return True

  try:
    if code.startswith(":parse "):
      root = interpreter.compile(code[len(":parse "):])
      print(pretty_print_ast(root), end='')
      return True

    root = interpreter.compile(code)
    result = evaluate(root, session['env'], interpreter.debug, interpreter.make_context())
    if not is_undefined(result):
      print(f"=> {describe_value(result)}")
  except FWJSParseError as e:
    print(f"{e}")
  except FWJSSemanticsError as e:
    print(f"{e}")
  except FWJSRuntimeError as e:
    print(f"Runtime Error ({type(e).__name__}): {e.message}")

  return True


def load_into_session(session: Dict, script_path: str) -> bool:
  """Run a script in the session's global environment before prompting"""
  interpreter = session['interpreter']
  try:
    root = interpreter.compile_file(script_path)
    evaluate(root, session['env'], interpreter.debug, interpreter.make_context())
  except OSError as e:
    print(f"Error: Cannot load '{script_path}': {e}")
    return False
  except (FWJSParseError, FWJSSemanticsError) as e:
    print(f"{e}")
    return False
  except FWJSRuntimeError as e:
    print(f"Runtime Error ({type(e).__name__}) while loading '{script_path}': {e.message}")
    return False
  print(f"Loaded {script_path}")
  return True


def run_interactive_mode(debug: bool = False, strict: bool = False,
                         max_steps: Optional[int] = None,
                         max_depth: int = DEFAULT_MAX_DEPTH,
                         preload: Optional[str] = None) -> None:
  """Run FWJS in interactive mode, optionally after loading a script"""
  print(f"{VERSION} - Interactive Mode")
  print("Type 'exit' to quit, ':help' for commands")
  if READLINE_AVAILABLE:
    print("Readline enabled: Use ↑/↓ for history, Tab for completion")
  print()

  setup_readline()
  session = make_session(create_interpreter(debug, strict=strict, max_steps=max_steps,
                                             max_depth=max_depth))
  if preload:
    load_into_session(session, preload)

  while True:
    try:
      line = input("fwjs> ")
    except (KeyboardInterrupt, EOFError):
      print("\nGoodbye!")
      break

    if not process_line(session, line):
      break


def main() -> None:
  """Main entry point for FWJS"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args()
  configure_logging(args.debug)

  if args.script and not args.interactive:
    if not Path(args.script).exists():
      print(f"Error: Script file '{args.script}' does not exist")
      sys.exit(1)

    if args.parse:
      parse_file(args.script, debug=args.debug)
    else:
      run_script_file(args.script, debug=args.debug, strict=args.strict,
                      max_steps=args.max_steps, show_result=args.show_result,
                      max_depth=args.max_depth)
  else:
    # No script - interactive mode is the default
    run_interactive_mode(debug=args.debug, strict=args.strict, max_steps=args.max_steps,
                         max_depth=args.max_depth,
                         preload=args.script)


if __name__ == "__main__":
  main()
