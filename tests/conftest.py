"""Shared fixtures for the circuit compiler tests."""

import sys
from pathlib import Path

import pytest

# tests/ is inside the project, so parent is the project root
project_dir = Path(__file__).parent.parent
if str(project_dir) not in sys.path:
    sys.path.insert(0, str(project_dir))

from compiler.config import CompilerConfig  # noqa: E402
from primitives.field import PrimeField  # noqa: E402

# Small prime for tests that need wrap-around or readable values
SMALL_PRIME = 97


@pytest.fixture
def bn254():
    return PrimeField.bn254()


@pytest.fixture
def small_field():
    return PrimeField(SMALL_PRIME)


@pytest.fixture
def strict_config():
    """Dangling outputs are hard errors."""
    return CompilerConfig(dangling_outputs="error")
