"""Pytest configuration for the circuit compiler tests."""

import sys
from pathlib import Path

# Add the project directory to the path so absolute imports work
project_dir = Path(__file__).parent
if str(project_dir) not in sys.path:
    sys.path.insert(0, str(project_dir))
