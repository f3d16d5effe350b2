"""
Pytest configuration for Tyr tests.
"""
import sys
import os

import pytest

# Make `import tyr` work from a source checkout (src/ layout)
_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
_SRC_DIR = os.path.join(_ROOT, 'src')

if _SRC_DIR not in sys.path:
	sys.path.insert(0, _SRC_DIR)

_PROGRAMS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'programs')


@pytest.fixture
def programs_dir():
	"""Directory holding the sample .tyr programs."""
	return _PROGRAMS_DIR


@pytest.fixture
def run_source():
	"""Load and run a source string; returns (vm, status, printed lines)."""
	from tyr.loader import load_source
	from tyr.vm import VM

	def _run(source, config=None):
		printed = []
		vm = VM(load_source(source), config=config, output=printed.append)
		status = vm.run()
		return vm, status, printed

	return _run
