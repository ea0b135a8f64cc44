"""
Test configuration for Kestrel tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from environment import Environment
from parsing import parse


@pytest.fixture
def env():
  """Provide a fresh global environment for each test"""
  return Environment()


@pytest.fixture
def parse_clean():
  """Parse source and fail the test on any syntax error"""
  def _parse(source):
    result = parse(source)
    assert result.errors == [], f"unexpected parse errors: {result.errors}"
    return result.program
  return _parse
