"""
Node tool adapter — run a Node-based CLI (eslint, stylelint, prettier,
browserify) through ``npx`` and capture its output.

Action fields:
    args  (list[str]): Arguments after the tool name.
    stdin (str):       Text piped to the process.
    cwd   (str):       Working directory (default: registry project root).

Many linters exit non-zero simply because they found problems, so each
adapter declares which exit codes still count as a usable answer.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from pathlib import Path

from uibundle.adapters.base import Adapter, ExecutionContext
from uibundle.adapters.registry import AdapterRegistry
from uibundle.core.models.action import Receipt
from uibundle.core.models.config import BuildConfig

logger = logging.getLogger(__name__)

# tool name → exit codes that still carry a parseable report
_TOOLS: dict[str, tuple[int, ...]] = {
    "eslint": (0, 1),
    "stylelint": (0, 2),
    "prettier": (0,),
    "browserify": (0,),
}


class NodeToolAdapter(Adapter):
    """Run ``<npx> --no-install <tool> <args…>``."""

    def __init__(self, tool: str, *, npx: str = "npx", ok_codes: tuple[int, ...] = (0,)):
        self._tool = tool
        self._npx = npx
        self._ok_codes = ok_codes

    @property
    def name(self) -> str:
        return self._tool

    def is_available(self) -> bool:
        return shutil.which(self._npx) is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        if not self.is_available():
            return False, f"'{self._npx}' not found on PATH (is Node.js installed?)"
        cwd = context.working_dir
        if cwd and not Path(cwd).is_dir():
            return False, f"Working directory does not exist: {cwd}"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        action = context.action
        command = [self._npx, "--no-install", self._tool, *action.args]
        cwd = context.working_dir

        logger.debug("Executing: %s (cwd=%s)", " ".join(command), cwd)
        start = time.monotonic()

        try:
            result = subprocess.run(
                command,
                cwd=cwd,
                input=action.stdin,
                capture_output=True,
                text=True,
                timeout=context.timeout,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                adapter=self.name,
                action_id=action.id,
                error=f"{self._tool} timed out after {context.timeout}s",
                metadata={"command": command},
            )
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=action.id,
                error=f"Could not launch {self._tool}: {e}",
                metadata={"command": command},
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stderr = result.stderr.strip()

        if result.returncode in self._ok_codes:
            return Receipt.success(
                adapter=self.name,
                action_id=action.id,
                output=result.stdout,
                return_code=result.returncode,
                duration_ms=elapsed_ms,
                metadata={"command": command, "stderr": stderr},
            )

        return Receipt.failure(
            adapter=self.name,
            action_id=action.id,
            error=stderr or f"{self._tool} exited with code {result.returncode}",
            return_code=result.returncode,
            duration_ms=elapsed_ms,
            metadata={"command": command, "stdout": result.stdout},
        )


def node_registry(config: BuildConfig) -> AdapterRegistry:
    """A registry with every Node tool the pipeline uses."""
    registry = AdapterRegistry(project_root=str(config.root), timeout=config.tool_timeout)
    for tool, ok_codes in _TOOLS.items():
        registry.register(NodeToolAdapter(tool, npx=config.npx, ok_codes=ok_codes))
    return registry
