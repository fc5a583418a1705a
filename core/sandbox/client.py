"""
Sandbox capability interface consumed by the supervisor.
"""

# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass
class ExecResult:
    """Output of a command executed inside a sandbox."""
    stdout: str
    stderr: str = ""
    exit_code: int = 0


@runtime_checkable
class SandboxClient(Protocol):
    """Async operations against a remote isolated environment.

    Every method may raise; callers decide whether a failure is fatal.
    ``timeout_ms`` of ``None`` means the backend default.
    """

    async def exec(
        self,
        sandbox_id: str,
        command: str,
        timeout_ms: int | None = None,
    ) -> ExecResult: ...

    async def read_file(self, sandbox_id: str, path: str) -> str: ...

    async def write_file(self, sandbox_id: str, path: str, content: str) -> None: ...

    async def delete_sandbox(self, sandbox_id: str) -> None: ...
