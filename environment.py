"""
FWJS lexical environments
A frame is a mutable dictionary of bindings plus a link to its outer frame.
Frames are shared by reference: closures keep their defining frame alive
and observe later updates made to it.
"""

from typing import Dict, Optional

from values import UNDEFINED
from error_handling import UnboundVariableError, DuplicateDeclarationError


# ============================================================================
# DATA STRUCTURES
# ============================================================================

def make_runtime_env(parent: Optional[Dict] = None, bindings: Optional[Dict] = None) -> Dict:
  """Create an environment frame"""
  return {
      'parent': parent,
      'bindings': dict(bindings) if bindings else {}
  }


def make_global_env() -> Dict:
  """The root frame of a program run; the only frame without a parent"""
  return make_runtime_env()


def make_call_env(closure_env: Dict) -> Dict:
  """Frame for one function application, chained to the closure's frame"""
  return make_runtime_env(parent=closure_env)


def is_global_env(env: Dict) -> bool:
  return env['parent'] is None


# ============================================================================
# VARIABLE OPERATIONS
# ============================================================================

def find_owner_env(env: Dict, name: str) -> Optional[Dict]:
  """Nearest frame in the scope chain that binds name, or None"""
  frame = env
  while frame is not None:
    if name in frame['bindings']:
      return frame
    frame = frame['parent']
  return None


def resolve_var(env: Dict, name: str, strict: bool = False) -> Dict:
  """Look name up through the scope chain.

  An unbound name reads as undefined unless strict is set.
  """
  owner = find_owner_env(env, name)
  if owner is None:
    if strict:
      raise UnboundVariableError(name)
    return UNDEFINED
  return owner['bindings'][name]


def update_var(env: Dict, name: str, value: Dict) -> None:
  """Assign to the frame that already binds name.

  If no frame binds it, the binding is created in the global frame.
  """
  owner = find_owner_env(env, name)
  if owner is None:
    owner = env
    while owner['parent'] is not None:
      owner = owner['parent']
  owner['bindings'][name] = value


def create_var(env: Dict, name: str, value: Dict, strict: bool = False) -> None:
  """Bind name in the current frame only, shadowing any outer binding"""
  if strict and name in env['bindings']:
    raise DuplicateDeclarationError(name)
  env['bindings'][name] = value


# ============================================================================
# INSPECTION
# ============================================================================

def env_depth(env: Dict) -> int:
  """Number of frames from env up to and including the global frame"""
  depth = 0
  frame = env
  while frame is not None:
    depth += 1
    frame = frame['parent']
  return depth


def env_snapshot(env: Dict) -> Dict:
  """Every binding visible from env; inner frames win over outer ones"""
  frames = []
  frame = env
  while frame is not None:
    frames.append(frame)
    frame = frame['parent']

  visible = {}
  for frame in reversed(frames):
    visible.update(frame['bindings'])
  return visible
