"""
Shared test fixtures and configuration.
"""

import logging
from pathlib import Path

import pytest

from devsetup.adapters.mock import MockHostAdapter
from devsetup.core.config.registry_loader import DEFAULT_TOOLS_FILE
from devsetup.core.services.provisioning.resolver.registry import ToolRegistry


@pytest.fixture
def registry() -> ToolRegistry:
    """The packaged tool table."""
    return ToolRegistry.load(DEFAULT_TOOLS_FILE)


@pytest.fixture
def host() -> MockHostAdapter:
    return MockHostAdapter()


@pytest.fixture
def tools_file() -> Path:
    return DEFAULT_TOOLS_FILE


@pytest.fixture
def restore_logging():
    """Undo setup_logging() changes to the root logger after a test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for h in root.handlers:
        if h not in handlers:
            h.close()
    root.handlers[:] = handlers
    root.setLevel(level)
