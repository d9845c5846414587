"""
Pytest configuration and fixtures for the kokaq shell tests.
"""
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[2]
PYTHON_SRC = REPO_ROOT / "python"
if str(PYTHON_SRC) not in sys.path:
    sys.path.insert(0, str(PYTHON_SRC))

from kokaq_repl.commands import build_registry  # noqa: E402
from kokaq_stubs import FakeClient  # noqa: E402


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def registry():
    return build_registry()
