"""
Action and Receipt models — the tool invocation contract.

An Action asks an adapter to run one external tool invocation
(``eslint --format json --stdin …``). A Receipt records what came back.
Adapters always answer with a Receipt; services decide whether a
failed receipt is fatal for their stage.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Action(BaseModel):
    """One requested tool invocation.

    ``args`` are passed to the tool after its own name; ``stdin`` is fed
    to the process when set.
    """

    id: str                         # e.g. "eslint:lint:src/js/01-nav.js"
    adapter: str                    # which adapter handles this
    args: list[str] = Field(default_factory=list)
    stdin: str | None = None
    cwd: str | None = None
    params: dict[str, Any] = Field(default_factory=dict)


class Receipt(BaseModel):
    """Result of running an Action."""

    adapter: str
    action_id: str
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""                # captured stdout
    error: str | None = None
    return_code: int | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(
        cls,
        adapter: str,
        action_id: str,
        output: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a success receipt."""
        return cls(adapter=adapter, action_id=action_id, status="ok", output=output, **kwargs)

    @classmethod
    def failure(
        cls,
        adapter: str,
        action_id: str,
        error: str,
        **kwargs: Any,
    ) -> Receipt:
        """Create a failure receipt."""
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)
