"""Unit tests for core.exceptions — unified exception hierarchy."""
# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import pytest

from core.exceptions import (
    BroodError,
    LifecycleError, InvalidTransitionError, ChildNotFoundError,
    PreconditionError, CleanupPreconditionError,
    SandboxError, SandboxTransportError, SandboxNotFoundError,
    IntegrityError, IntegrityMismatchError,
    ConfigError, ConfigNotFoundError, ConfigValidationError,
)
from core.schemas import ConstitutionCheck

# ── Helpers ──────────────────────────────────────────────────

ALL_EXCEPTIONS = [
    BroodError,
    LifecycleError, InvalidTransitionError, ChildNotFoundError,
    PreconditionError, CleanupPreconditionError,
    SandboxError, SandboxTransportError, SandboxNotFoundError,
    IntegrityError, IntegrityMismatchError,
    ConfigError, ConfigNotFoundError, ConfigValidationError,
]

FAMILY_MAP: dict[type[BroodError], list[type[BroodError]]] = {
    LifecycleError: [InvalidTransitionError, ChildNotFoundError],
    PreconditionError: [CleanupPreconditionError],
    SandboxError: [SandboxTransportError, SandboxNotFoundError],
    IntegrityError: [IntegrityMismatchError],
    ConfigError: [ConfigNotFoundError, ConfigValidationError],
}


# ── 1. All inherit from base ────────────────────────────────


class TestAllInheritFromBase:
    @pytest.mark.parametrize("exc_cls", ALL_EXCEPTIONS, ids=lambda c: c.__name__)
    def test_all_inherit_from_base(self, exc_cls: type) -> None:
        assert issubclass(exc_cls, BroodError)
        assert issubclass(exc_cls, Exception)


# ── 2. Family hierarchy ─────────────────────────────────────


class TestFamilyHierarchy:
    @pytest.mark.parametrize(
        "parent, children",
        list(FAMILY_MAP.items()),
        ids=lambda x: x.__name__ if isinstance(x, type) else None,
    )
    def test_family_hierarchy(
        self, parent: type, children: list[type],
    ) -> None:
        for child in children:
            assert issubclass(child, parent)

    def test_families_are_disjoint(self) -> None:
        parents = list(FAMILY_MAP)
        for p in parents:
            for q in parents:
                if p is not q:
                    assert not issubclass(p, q)


# ── 3. Messages and attributes ──────────────────────────────


class TestMessages:
    def test_invalid_transition_message(self) -> None:
        err = InvalidTransitionError("healthy", "funded")
        assert str(err) == "Invalid lifecycle transition: healthy → funded"
        assert err.from_state == "healthy"
        assert err.to_state == "funded"

    def test_child_not_found_message(self) -> None:
        err = ChildNotFoundError("c9")
        assert str(err) == "Child c9 not found in lifecycle events"
        assert err.child_id == "c9"

    def test_child_not_found_is_invalid_transition(self) -> None:
        err = ChildNotFoundError("c9", "failed")
        assert isinstance(err, InvalidTransitionError)
        assert err.from_state is None
        assert err.to_state == "failed"

    def test_cleanup_precondition_message(self) -> None:
        err = CleanupPreconditionError("healthy")
        assert str(err) == "Cannot clean up child in state: healthy"
        assert err.state == "healthy"

    def test_transport_error_status_code(self) -> None:
        assert SandboxTransportError("boom").status_code is None
        assert SandboxTransportError("boom", status_code=502).status_code == 502

    def test_integrity_mismatch_carries_detail(self) -> None:
        err = IntegrityMismatchError("sb-1", "hash mismatch")
        assert err.sandbox_id == "sb-1"
        assert "hash mismatch" in str(err)


# ── 4. ConstitutionCheck.raise_for_mismatch ─────────────────


class TestRaiseForMismatch:
    def test_valid_check_does_not_raise(self) -> None:
        ConstitutionCheck("sb-1", True, "constitution hash matches").raise_for_mismatch()

    def test_invalid_check_raises(self) -> None:
        check = ConstitutionCheck("sb-1", False, "no stored constitution hash found")
        with pytest.raises(IntegrityMismatchError) as exc_info:
            check.raise_for_mismatch()
        assert exc_info.value.detail == "no stored constitution hash found"
