"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from uibundle.adapters.mock import MockAdapter
from uibundle.adapters.registry import AdapterRegistry


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def registry(tmp_path: Path) -> AdapterRegistry:
    """A registry whose Node tools are all mocks returning empty output."""
    reg = AdapterRegistry(project_root=str(tmp_path))
    for tool in ("eslint", "stylelint", "prettier", "browserify"):
        reg.register(MockAdapter(adapter_name=tool))
    return reg
