"""
Sandbox cleanup for terminal children.

Destroys the remote sandbox of a stopped/failed child and moves it to
``cleaned_up``.  The state check is the only step that may abort;
sandbox destruction is best-effort.
"""

# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone

from core.exceptions import CleanupPreconditionError
from core.sandbox.client import SandboxClient
from core.schemas import CLEANABLE_STATES, ChildRecord, ChildState
from core.supervisor.lifecycle import ChildLifecycle
from core.time_utils import now_utc

logger = logging.getLogger("brood.cleanup")


class SandboxCleanup:
    """Reclaims sandbox resources of stopped and failed children."""

    def __init__(
        self,
        sandbox: SandboxClient,
        lifecycle: ChildLifecycle,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.sandbox = sandbox
        self.lifecycle = lifecycle
        self._clock = clock

    async def cleanup(self, child_id: str) -> None:
        """Clean up a single child's sandbox.

        Raises:
            CleanupPreconditionError: The child is not stopped or failed.
            ChildNotFoundError: The child is unknown.
        """
        state = self.lifecycle.get_current_state(child_id)
        if state not in CLEANABLE_STATES:
            raise CleanupPreconditionError(state.value)

        child = self.lifecycle.get_child(child_id)
        sandbox_id = child.sandbox_id if child else None
        destroyed = False

        if sandbox_id:
            try:
                await self.sandbox.delete_sandbox(sandbox_id)
                destroyed = True
            except Exception as e:
                logger.error(
                    "Failed to destroy sandbox %s for %s: %s", sandbox_id, child_id, e,
                )

        # Recorded even when destruction failed, so the child is not
        # stranded; the metadata keeps the outcome auditable.
        self.lifecycle.transition(
            child_id,
            ChildState.CLEANED_UP,
            "sandbox destroyed",
            {"sandbox_id": sandbox_id, "sandbox_destroyed": destroyed},
        )

    async def cleanup_all(self) -> int:
        """Clean up all stopped and failed children.  Returns the success count."""
        children: list[ChildRecord] = []
        for state in CLEANABLE_STATES:
            children.extend(self.lifecycle.get_children_in_state(state))
        return await self._cleanup_each(children, label="child")

    async def cleanup_stale(self, max_age_hours: float) -> int:
        """Clean up stopped/failed children not checked for *max_age_hours*.

        An age reaching back past ``datetime.min`` matches nothing.
        """
        try:
            cutoff = self._clock() - timedelta(hours=max_age_hours)
        except OverflowError:
            cutoff = datetime.min.replace(tzinfo=timezone.utc)
        stale = self.lifecycle.get_stale_children(CLEANABLE_STATES, cutoff)
        return await self._cleanup_each(stale, label="stale child")

    async def _cleanup_each(self, children: Iterable[ChildRecord], *, label: str) -> int:
        cleaned = 0
        for child in children:
            try:
                await self.cleanup(child.id)
                cleaned += 1
            except Exception as e:
                logger.error("Failed to clean up %s %s: %s", label, child.id, e)
        if cleaned:
            logger.info("Cleaned up %d %s(ren)", cleaned, label)
        return cleaned
