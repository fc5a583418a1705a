from __future__ import annotations
# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0
#
# This file is part of Brood core, licensed under Apache-2.0.
# See LICENSE for the full license text.

"""Unified exception hierarchy for Brood.

All domain-specific exceptions derive from :class:`BroodError`,
enabling callers to catch the entire family with a single clause::

    try:
        ...
    except BroodError as e:
        logger.error("Domain error: %s", e)

Only lifecycle and precondition errors are raised across component
boundaries.  Sandbox and integrity failures are normally folded into
result objects by the health monitor and the constitution checker.
"""


class BroodError(Exception):
    """Base exception for all Brood errors."""


# ── Lifecycle ────────────────────────────────────────────────


class LifecycleError(BroodError):
    """Child lifecycle errors."""


class InvalidTransitionError(LifecycleError):
    """Requested lifecycle edge is not permitted."""

    def __init__(self, from_state: str, to_state: str) -> None:
        super().__init__(f"Invalid lifecycle transition: {from_state} → {to_state}")
        self.from_state = from_state
        self.to_state = to_state


class ChildNotFoundError(InvalidTransitionError):
    """Referenced child has no lifecycle record.

    Also an :class:`InvalidTransitionError`: no edge leads out of an
    unknown child.
    """

    def __init__(self, child_id: str, to_state: str | None = None) -> None:
        LifecycleError.__init__(self, f"Child {child_id} not found in lifecycle events")
        self.child_id = child_id
        self.from_state = None
        self.to_state = to_state


# ── Preconditions ────────────────────────────────────────────


class PreconditionError(BroodError):
    """Operation requested in a state that does not allow it."""


class CleanupPreconditionError(PreconditionError):
    """Cleanup requested for a child that is not stopped or failed."""

    def __init__(self, state: str) -> None:
        super().__init__(f"Cannot clean up child in state: {state}")
        self.state = state


# ── Sandbox ──────────────────────────────────────────────────


class SandboxError(BroodError):
    """Sandbox backend errors."""


class SandboxTransportError(SandboxError):
    """Sandbox call failed (network, timeout, non-2xx response)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code


class SandboxNotFoundError(SandboxError):
    """Sandbox backend does not know the referenced sandbox."""


# ── Integrity ────────────────────────────────────────────────


class IntegrityError(BroodError):
    """Constitution integrity errors."""


class IntegrityMismatchError(IntegrityError):
    """Live constitution does not match the stored digest."""

    def __init__(self, sandbox_id: str, detail: str) -> None:
        super().__init__(f"Constitution integrity check failed for {sandbox_id}: {detail}")
        self.sandbox_id = sandbox_id
        self.detail = detail


# ── Configuration ────────────────────────────────────────────


class ConfigError(BroodError):
    """Configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Configuration file not found."""


class ConfigValidationError(ConfigError):
    """Configuration validation failure."""
