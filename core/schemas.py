from __future__ import annotations
# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0
#
# This file is part of Brood core, licensed under Apache-2.0.
# See LICENSE for the full license text.


from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from core.exceptions import IntegrityMismatchError


# ── Lifecycle ─────────────────────────────────────────────

class ChildState(str, Enum):
    """Lifecycle state of a child automaton."""
    REQUESTED = "requested"                # Record created, nothing provisioned
    SANDBOX_CREATED = "sandbox_created"    # Remote sandbox exists
    RUNTIME_READY = "runtime_ready"        # Runtime installed in sandbox
    WALLET_VERIFIED = "wallet_verified"    # Child wallet address confirmed
    FUNDED = "funded"                      # Initial credits transferred
    STARTING = "starting"                  # Process launched, awaiting first probe
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    STOPPED = "stopped"
    FAILED = "failed"
    CLEANED_UP = "cleaned_up"              # Terminal: sandbox reclaimed

    def __str__(self) -> str:
        return self.value


VALID_TRANSITIONS: dict[ChildState, frozenset[ChildState]] = {
    ChildState.REQUESTED: frozenset({ChildState.SANDBOX_CREATED, ChildState.FAILED}),
    ChildState.SANDBOX_CREATED: frozenset({ChildState.RUNTIME_READY, ChildState.FAILED}),
    ChildState.RUNTIME_READY: frozenset({ChildState.WALLET_VERIFIED, ChildState.FAILED}),
    ChildState.WALLET_VERIFIED: frozenset({ChildState.FUNDED, ChildState.FAILED}),
    ChildState.FUNDED: frozenset({ChildState.STARTING, ChildState.FAILED}),
    ChildState.STARTING: frozenset({ChildState.HEALTHY, ChildState.FAILED}),
    ChildState.HEALTHY: frozenset({ChildState.UNHEALTHY, ChildState.STOPPED}),
    ChildState.UNHEALTHY: frozenset({ChildState.HEALTHY, ChildState.STOPPED, ChildState.FAILED}),
    ChildState.STOPPED: frozenset({ChildState.CLEANED_UP}),
    ChildState.FAILED: frozenset({ChildState.CLEANED_UP}),
    ChildState.CLEANED_UP: frozenset(),
}

# States polled by the health monitor
MONITORED_STATES: tuple[ChildState, ...] = (ChildState.HEALTHY, ChildState.UNHEALTHY)

# States from which a child's sandbox may be reclaimed
CLEANABLE_STATES: tuple[ChildState, ...] = (ChildState.STOPPED, ChildState.FAILED)


@dataclass
class ChildRecord:
    """Row of the ``children`` table."""

    id: str
    name: str
    sandbox_id: str | None
    status: ChildState
    created_at: str
    last_checked: str | None = None


@dataclass
class LifecycleEvent:
    """Row of the append-only ``child_lifecycle_events`` table."""

    id: str
    child_id: str
    from_state: str        # "none" for the registration event
    to_state: ChildState
    reason: str | None
    metadata: dict[str, Any]
    created_at: str


# ── Health ────────────────────────────────────────────────

@dataclass
class HealthCheckResult:
    """Outcome of one health probe.  Never persisted."""

    child_id: str
    healthy: bool = False
    last_seen: str | None = None
    uptime: float | None = None
    credit_balance: float | None = None
    issues: list[str] = field(default_factory=list)


# ── Constitution ──────────────────────────────────────────

@dataclass(frozen=True)
class ConstitutionCheck:
    """Result of a constitution integrity verification."""

    sandbox_id: str
    valid: bool
    detail: str

    def raise_for_mismatch(self) -> None:
        """Raise :class:`IntegrityMismatchError` when the check failed."""
        if not self.valid:
            raise IntegrityMismatchError(self.sandbox_id, self.detail)
