"""
Child Supervisor - periodic health sweeps and stale sandbox cleanup.
"""

# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from pathlib import Path

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from core.config.models import BroodConfig, resolve_constitution_config
from core.sandbox.client import SandboxClient
from core.schemas import HealthCheckResult
from core.state.database import SupervisionDB
from core.supervisor.cleanup import SandboxCleanup
from core.supervisor.constitution import ConstitutionIntegrity
from core.supervisor.health import ChildHealthMonitor
from core.supervisor.lifecycle import ChildLifecycle

logger = logging.getLogger("brood.supervisor")


class ChildSupervisor:
    """
    Composition root for child supervision.

    Responsibilities:
    - Wire lifecycle, health monitor, cleanup and constitution checker
      around one record store and one sandbox client
    - Run health sweeps and stale cleanup on an APScheduler interval
    - Keep scheduled jobs alive: a failing tick is logged, never raised
    """

    def __init__(
        self,
        db: SupervisionDB,
        sandbox: SandboxClient,
        config: BroodConfig,
        data_dir: Path,
    ):
        self.db = db
        self.sandbox = sandbox
        self.config = config

        self.lifecycle = ChildLifecycle(db)
        self.health = ChildHealthMonitor(db, sandbox, self.lifecycle, config.health)
        self.cleanup = SandboxCleanup(sandbox, self.lifecycle)
        self.constitution = ConstitutionIntegrity(
            sandbox, db, resolve_constitution_config(config, data_dir),
        )

        self.scheduler: AsyncIOScheduler | None = None
        self._scheduler_running: bool = False

    def is_running(self) -> bool:
        """Return whether the scheduler is running."""
        return self._scheduler_running

    # ── Scheduled jobs ─────────────────────────────────────────────

    async def run_health_sweep(self) -> list[HealthCheckResult]:
        """Check all active children; unhealthy results are logged."""
        try:
            results = await self.health.check_all_children()
        except Exception:
            logger.exception("Child health sweep failed")
            return []

        unhealthy = [r for r in results if not r.healthy]
        for r in unhealthy:
            logger.warning("Child %s unhealthy: %s", r.child_id, ", ".join(r.issues))
        logger.info(
            "Health sweep: %d checked, %d unhealthy", len(results), len(unhealthy),
        )
        return results

    async def run_stale_cleanup(self) -> int:
        """Reclaim sandboxes of children stopped/failed for too long."""
        max_age = self.config.cleanup.stale_max_age_hours
        try:
            cleaned = await self.cleanup.cleanup_stale(max_age)
        except Exception:
            logger.exception("Stale child cleanup failed")
            return 0
        if cleaned:
            logger.info("Stale cleanup: %d child(ren) reclaimed (>%.1fh)", cleaned, max_age)
        return cleaned

    # ── Scheduler ──────────────────────────────────────────────────

    def start(self) -> None:
        """Start the interval scheduler.  Must be called inside a running loop."""
        if self._scheduler_running:
            return
        try:
            self.scheduler = AsyncIOScheduler(timezone="UTC")
            self._setup_jobs()
            self.scheduler.start()
            self._scheduler_running = True
            logger.info("Child supervisor scheduler started")
        except Exception:
            logger.exception("Failed to start child supervisor scheduler")
            self.scheduler = None
            self._scheduler_running = False

    def _setup_jobs(self) -> None:
        if not self.scheduler:
            return

        interval = self.config.health.check_interval_sec
        self.scheduler.add_job(
            self.run_health_sweep,
            IntervalTrigger(seconds=interval),
            id="child_health_sweep",
            name="Supervisor: Child Health Sweep",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        logger.info("Supervisor job: health sweep every %ds", interval)

        if self.config.cleanup.enabled:
            cleanup_interval = self.config.cleanup.interval_sec
            self.scheduler.add_job(
                self.run_stale_cleanup,
                IntervalTrigger(seconds=cleanup_interval),
                id="child_stale_cleanup",
                name="Supervisor: Stale Child Cleanup",
                replace_existing=True,
                max_instances=1,
                coalesce=True,
            )
            logger.info("Supervisor job: stale cleanup every %ds", cleanup_interval)

    def shutdown(self) -> None:
        """Stop the scheduler without waiting for running jobs."""
        if self.scheduler and self._scheduler_running:
            self.scheduler.shutdown(wait=False)
            logger.info("Child supervisor scheduler stopped")
        self.scheduler = None
        self._scheduler_running = False
