"""
Mock adapter — test double for external tools.

Returns success for everything by default. Responses can be set per
action ID, or computed from the action by a responder callable.
"""

from __future__ import annotations

from typing import Callable

from uibundle.adapters.base import Adapter, ExecutionContext
from uibundle.core.models.action import Action, Receipt


class MockAdapter(Adapter):
    """Configurable stand-in for any tool adapter."""

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "",
        responder: Callable[[Action], Receipt | str] | None = None,
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._responder = responder
        self._responses: dict[str, Receipt] = {}
        self._call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ExecutionContext]:
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def is_available(self) -> bool:
        return self._available

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        self._responses[action_id] = receipt

    def set_output(self, action_id: str, output: str, return_code: int = 0) -> None:
        self._responses[action_id] = Receipt.success(
            adapter=self._name, action_id=action_id, output=output, return_code=return_code
        )

    def set_failure(self, action_id: str, error: str = "Mock failure") -> None:
        self._responses[action_id] = Receipt.failure(
            adapter=self._name, action_id=action_id, error=error
        )

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self._call_log.append(context)
        action = context.action

        if action.id in self._responses:
            return self._responses[action.id]

        if self._responder is not None:
            answer = self._responder(action)
            if isinstance(answer, Receipt):
                return answer
            return Receipt.success(adapter=self._name, action_id=action.id, output=answer, return_code=0)

        return Receipt.success(
            adapter=self._name,
            action_id=action.id,
            output=self._default_output,
            return_code=0,
            metadata={"mock": True},
        )

    def reset(self) -> None:
        self._call_log.clear()
        self._responses.clear()
