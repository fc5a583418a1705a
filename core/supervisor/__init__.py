# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0
"""
Child supervision package.

Lifecycle authority, health monitor, sandbox cleanup and constitution
integrity for child automatons running in remote sandboxes.
"""

from __future__ import annotations

from core.supervisor.cleanup import SandboxCleanup
from core.supervisor.constitution import ConstitutionIntegrity
from core.supervisor.health import ChildHealthMonitor
from core.supervisor.lifecycle import ChildLifecycle, can_transition
from core.supervisor.manager import ChildSupervisor

__all__ = [
    "ChildHealthMonitor",
    "ChildLifecycle",
    "ChildSupervisor",
    "ConstitutionIntegrity",
    "SandboxCleanup",
    "can_transition",
]
