"""
Child lifecycle authority.

Single owner of every child's status.  Each transition is validated
against :data:`core.schemas.VALID_TRANSITIONS`, appended to
``child_lifecycle_events`` and mirrored onto ``children.status``.
"""

# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from core.exceptions import ChildNotFoundError, InvalidTransitionError
from core.schemas import (
    VALID_TRANSITIONS,
    ChildRecord,
    ChildState,
    LifecycleEvent,
)
from core.state.database import SupervisionDB
from core.time_utils import now_iso, to_iso

logger = logging.getLogger("brood.lifecycle")


def can_transition(from_state: ChildState, to_state: ChildState) -> bool:
    """Return whether ``from_state -> to_state`` is a permitted edge."""
    return to_state in VALID_TRANSITIONS.get(from_state, frozenset())


class ChildLifecycle:
    """Validated state machine over the record store."""

    def __init__(self, db: SupervisionDB):
        self.db = db

    def init_child(
        self,
        child_id: str,
        name: str,
        sandbox_id: str | None = None,
    ) -> ChildRecord:
        """Register a new child in ``requested`` and record the first event."""
        ts = now_iso()
        record = ChildRecord(
            id=child_id,
            name=name,
            sandbox_id=sandbox_id,
            status=ChildState.REQUESTED,
            created_at=ts,
        )
        event = LifecycleEvent(
            id=uuid.uuid4().hex,
            child_id=child_id,
            from_state="none",
            to_state=ChildState.REQUESTED,
            reason="child created",
            metadata={},
            created_at=ts,
        )
        self.db.register_child(record, event)
        logger.info("Child registered: %s (%s, sandbox=%s)", child_id, name, sandbox_id)
        return record

    def get_current_state(self, child_id: str) -> ChildState:
        """Return the child's state.

        The latest lifecycle event wins; rows inserted without any event
        fall back to ``children.status``.

        Raises:
            ChildNotFoundError: Neither source knows *child_id*.
        """
        state = self.db.get_latest_state(child_id)
        if state is None:
            state = self.db.get_child_status(child_id)
        if state is None:
            raise ChildNotFoundError(child_id)
        return state

    def get_child(self, child_id: str) -> ChildRecord | None:
        return self.db.get_child(child_id)

    def get_children_in_state(self, state: ChildState | str) -> list[ChildRecord]:
        return self.db.list_children(ChildState(state))

    def get_stale_children(
        self,
        states: Iterable[ChildState],
        older_than: datetime,
    ) -> list[ChildRecord]:
        """Children in *states* last checked before *older_than*."""
        return self.db.list_stale_children(states, to_iso(older_than))

    def get_history(self, child_id: str) -> list[LifecycleEvent]:
        return self.db.get_events(child_id)

    def transition(
        self,
        child_id: str,
        to_state: ChildState | str,
        reason: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Move *child_id* to *to_state*.

        Raises:
            InvalidTransitionError: The edge is not permitted, or the child
                is unknown (raised as :class:`ChildNotFoundError`).
        """
        try:
            current = self.get_current_state(child_id)
        except ChildNotFoundError:
            raise ChildNotFoundError(child_id, str(to_state)) from None
        try:
            target = ChildState(to_state)
        except ValueError:
            raise InvalidTransitionError(current.value, str(to_state)) from None

        if not can_transition(current, target):
            raise InvalidTransitionError(current.value, target.value)

        event = LifecycleEvent(
            id=uuid.uuid4().hex,
            child_id=child_id,
            from_state=current.value,
            to_state=target,
            reason=reason,
            metadata=dict(metadata or {}),
            created_at=now_iso(),
        )
        self.db.record_transition(event)
        logger.info(
            "Child %s: %s -> %s (%s)",
            child_id, current.value, target.value, reason or "-",
        )
