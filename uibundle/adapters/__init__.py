"""Adapters — bindings for the external Node tools.

Public re-exports for convenient access.
"""

from uibundle.adapters.base import Adapter, ExecutionContext
from uibundle.adapters.mock import MockAdapter
from uibundle.adapters.node.tool import NodeToolAdapter
from uibundle.adapters.registry import AdapterRegistry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
    "NodeToolAdapter",
]
