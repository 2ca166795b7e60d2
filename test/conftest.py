"""
Test configuration for FWJS tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from interpreter import create_interpreter
from parsing import create_parser
from semantics import create_analyzer


@pytest.fixture
def parser():
  return create_parser()


@pytest.fixture
def analyzer():
  return create_analyzer()


@pytest.fixture
def printed():
  """Collects everything print expressions write"""
  return []


@pytest.fixture
def interp(printed):
  """Interpreter whose print output lands in the printed fixture"""
  return create_interpreter(sink=printed.append)
