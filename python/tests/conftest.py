"""
Pytest configuration and fixtures for pydev tests.
"""
import sys
from pathlib import Path

import pytest

PYTHON_DIR = Path(__file__).resolve().parents[1]
if str(PYTHON_DIR) not in sys.path:
    sys.path.insert(0, str(PYTHON_DIR))

from pydevkit.sessions import SessionRegistry  # noqa: E402


@pytest.fixture
def registry():
    """Session registry without banners; every session is closed afterwards."""
    sessions = SessionRegistry(close_timeout=2.0, banner=False)
    yield sessions
    sessions.close_all()
