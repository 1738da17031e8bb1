"""Pytest configuration for invest-openapi-sdk tests."""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

pytest_plugins = ["pytest_asyncio"]


@pytest.fixture
def logger():
    """Stand-in for a UnifiedLogger; components call logger.log(message, level)."""
    return MagicMock()
