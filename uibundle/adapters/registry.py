"""
Adapter registry — central dispatch for tool invocations.

One registry is built per command invocation and passed to the
services that need external tools, so two builds never share state.
"""

from __future__ import annotations

import logging
import time

from uibundle.adapters.base import Adapter, ExecutionContext
from uibundle.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Registry and dispatcher for tool adapters."""

    def __init__(self, project_root: str = ".", timeout: int = 300):
        self._adapters: dict[str, Adapter] = {}
        self.project_root = project_root
        self.timeout = timeout

    def register(self, adapter: Adapter) -> None:
        name = adapter.name
        if name in self._adapters:
            logger.warning("Overwriting existing adapter: %s", name)
        self._adapters[name] = adapter
        logger.debug("Registered adapter: %s", name)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def execute_action(self, action: Action) -> Receipt:
        """Validate and run ``action`` through its adapter. Never raises."""
        start_time = time.monotonic()

        context = ExecutionContext(
            action=action,
            project_root=self.project_root,
            timeout=self.timeout,
        )

        adapter = self._adapters.get(action.adapter)
        if adapter is None:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"No adapter registered for '{action.adapter}'",
            )

        try:
            is_valid, error_msg = adapter.validate(context)
        except Exception as e:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Validation error: {e}",
            )
        if not is_valid:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Validation failed: {error_msg}",
            )

        try:
            receipt = adapter.execute(context)
        except Exception as e:
            logger.error("Adapter %s raised during execution: %s", action.adapter, e)
            receipt = Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Unexpected error: {e}",
            )

        receipt.duration_ms = int((time.monotonic() - start_time) * 1000)
        return receipt
