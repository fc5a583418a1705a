# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0
"""Global test fixtures for Brood.

Provides filesystem isolation, config cache management, a temporary
supervision database and an in-memory sandbox client.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tests.helpers.fake_sandbox import FakeSandboxClient

logger = logging.getLogger(__name__)


# ── Fixtures ──────────────────────────────────────────────


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create an isolated Brood runtime data directory.

    - Redirects ``BROOD_DATA_DIR`` to a temp directory
    - Invalidates the config cache before and after the test
    """
    from core.config import invalidate_cache

    d = tmp_path / ".automaton"
    d.mkdir()
    monkeypatch.setenv("BROOD_DATA_DIR", str(d))
    invalidate_cache()

    yield d

    invalidate_cache()


@pytest.fixture
def db(tmp_path: Path):
    """Fresh SQLite supervision database."""
    from core.state.database import SupervisionDB

    return SupervisionDB(tmp_path / "state.db")


@pytest.fixture
def lifecycle(db):
    from core.supervisor.lifecycle import ChildLifecycle

    return ChildLifecycle(db)


@pytest.fixture
def sandbox() -> FakeSandboxClient:
    return FakeSandboxClient()


@pytest.fixture
def make_child(lifecycle):
    """Register a child and walk it to *state* along valid edges."""
    from core.schemas import ChildState

    path = [
        ChildState.SANDBOX_CREATED,
        ChildState.RUNTIME_READY,
        ChildState.WALLET_VERIFIED,
        ChildState.FUNDED,
        ChildState.STARTING,
        ChildState.HEALTHY,
    ]

    def _make(
        child_id: str,
        state: ChildState = ChildState.HEALTHY,
        sandbox_id: str | None = None,
        name: str | None = None,
    ):
        lifecycle.init_child(child_id, name or f"child-{child_id}", sandbox_id)
        if state == ChildState.REQUESTED:
            return lifecycle.get_child(child_id)
        if state == ChildState.FAILED:
            lifecycle.transition(child_id, ChildState.FAILED, "test setup")
            return lifecycle.get_child(child_id)

        for step in path:
            lifecycle.transition(child_id, step, "test setup")
            if step == state:
                return lifecycle.get_child(child_id)

        # Beyond healthy
        if state in (ChildState.UNHEALTHY, ChildState.STOPPED):
            lifecycle.transition(child_id, state, "test setup")
        elif state == ChildState.CLEANED_UP:
            lifecycle.transition(child_id, ChildState.STOPPED, "test setup")
            lifecycle.transition(child_id, ChildState.CLEANED_UP, "test setup")
        return lifecycle.get_child(child_id)

    return _make
