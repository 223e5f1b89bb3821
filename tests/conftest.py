"""Pytest configuration shared by all test suites"""

import os
import sys
from pathlib import Path

# Add src/ to path so the package imports without installation
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

# Console-only logging during tests (no logs/ directory)
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("LOG_LEVEL", "WARNING")
