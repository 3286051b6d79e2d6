"""
Adapter base — the contract between services and external tools.

Services never spawn processes themselves: they build an Action and
hand it to the AdapterRegistry, which dispatches it to the adapter
registered under ``action.adapter`` and returns a Receipt.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel

from uibundle.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """Everything an adapter needs to run an action."""

    action: Action
    project_root: str = "."
    timeout: int = 300

    @property
    def working_dir(self) -> str:
        """Directory the tool runs in."""
        return self.action.cwd or self.project_root


class Adapter(ABC):
    """Abstract base class for all tool adapters.

    Adapters perform external side effects and return receipts.
    They never raise — failures are captured in the Receipt.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g. 'eslint', 'browserify')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether the underlying tool can be launched. Never raises."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Validate that the action can be executed.

        Returns:
            (is_valid, error_message). error_message is empty if valid.
        """

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Run the action and return a receipt. Must never raise."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
