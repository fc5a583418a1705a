"""
Child health monitor.

Probes each child's sandbox over HTTP (from inside the sandbox) and
classifies the JSON status.  Health checks never raise; every failure
becomes an entry in :attr:`HealthCheckResult.issues`.
"""

# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import asyncio
import json
import logging

from core.config.models import HealthMonitorConfig
from core.logging_config import bind_child_context, clear_child_context
from core.sandbox.client import SandboxClient
from core.schemas import MONITORED_STATES, ChildRecord, ChildState, HealthCheckResult
from core.state.database import SupervisionDB
from core.supervisor.lifecycle import ChildLifecycle
from core.time_utils import now_iso

logger = logging.getLogger("brood.health")

_UP_STATUSES = frozenset({"healthy", "running"})


def build_probe_command(port: int, path: str) -> str:
    """Shell command that always prints a JSON status object.

    An unreachable endpoint yields ``{"status":"offline"}`` rather than a
    command failure.
    """
    return (
        f"curl -sf http://localhost:{port}{path} 2>/dev/null "
        "|| echo '{\"status\":\"offline\"}'"
    )


def _optional_number(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


class ChildHealthMonitor:
    """Polls active children and drives healthy/unhealthy transitions."""

    def __init__(
        self,
        db: SupervisionDB,
        sandbox: SandboxClient,
        lifecycle: ChildLifecycle,
        config: HealthMonitorConfig | None = None,
    ):
        self.db = db
        self.sandbox = sandbox
        self.lifecycle = lifecycle
        self.config = config or HealthMonitorConfig()
        self._probe_command = build_probe_command(
            self.config.probe_port, self.config.probe_path,
        )

    async def check_health(self, child_id: str) -> HealthCheckResult:
        """Check health of a single child.  Never raises."""
        result = HealthCheckResult(child_id=child_id)
        bind_child_context(child_id)
        try:
            try:
                child = self.db.get_child(child_id)
                if child is None:
                    result.issues.append("child not found")
                    return result

                if not child.sandbox_id:
                    result.issues.append("child not found")
                else:
                    exec_result = await self.sandbox.exec(
                        child.sandbox_id,
                        self._probe_command,
                        self.config.probe_timeout_ms,
                    )
                    self._classify(exec_result.stdout, result)
            except Exception as e:
                result.healthy = False
                result.issues.append(f"health check error: {e}")

            try:
                self.db.touch_last_checked(child_id, now_iso())
            except Exception:
                logger.debug("Failed to update last_checked for %s", child_id, exc_info=True)

            return result
        finally:
            clear_child_context()

    def _classify(self, stdout: str, result: HealthCheckResult) -> None:
        try:
            status = json.loads(stdout.strip())
            if not isinstance(status, dict):
                raise ValueError("health response is not a JSON object")
        except ValueError:
            result.issues.append("failed to parse health check response")
            return

        value = status.get("status")
        if value in _UP_STATUSES:
            result.healthy = True
            result.last_seen = now_iso()
            result.uptime = _optional_number(status.get("uptime"))
            result.credit_balance = _optional_number(status.get("creditBalance"))
            return

        result.issues.append(f"status: {value}")
        if status.get("error"):
            result.issues.append(f"error: {status['error']}")

    async def check_all_children(self) -> list[HealthCheckResult]:
        """Check every healthy/unhealthy child and apply state changes.

        Children are processed in sequential batches of
        ``max_concurrent_checks``; each batch is awaited in full before
        the next one starts.
        """
        children: list[ChildRecord] = []
        for state in MONITORED_STATES:
            children.extend(self.lifecycle.get_children_in_state(state))
        if not children:
            return []

        prior = {c.id: c.status for c in children}
        batch_size = self.config.max_concurrent_checks
        results: list[HealthCheckResult] = []

        for i in range(0, len(children), batch_size):
            batch = children[i:i + batch_size]
            batch_results = await asyncio.gather(
                *(self.check_health(c.id) for c in batch)
            )
            for result in batch_results:
                self._apply_result(result, prior.get(result.child_id))
                results.append(result)

        return results

    def _apply_result(
        self,
        result: HealthCheckResult,
        prior_status: ChildState | None,
    ) -> None:
        try:
            if not result.healthy and prior_status == ChildState.HEALTHY:
                self.lifecycle.transition(
                    result.child_id, ChildState.UNHEALTHY, "; ".join(result.issues),
                )
            elif result.healthy and prior_status == ChildState.UNHEALTHY:
                self.lifecycle.transition(
                    result.child_id, ChildState.HEALTHY, "recovered",
                )
        except Exception:
            # State may have changed since the batch was fetched; the next
            # poll cycle converges.
            logger.debug(
                "Transition skipped for %s", result.child_id, exc_info=True,
            )
