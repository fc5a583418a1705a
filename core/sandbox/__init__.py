# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0
"""
Sandbox backend access.

The supervision components depend only on the :class:`SandboxClient`
protocol; :class:`HttpSandboxClient` is the REST implementation used in
production.
"""

from __future__ import annotations

from core.sandbox.client import ExecResult, SandboxClient
from core.sandbox.rest import HttpSandboxClient

__all__ = [
    "ExecResult",
    "HttpSandboxClient",
    "SandboxClient",
]
