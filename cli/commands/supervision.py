"""CLI commands for health checks, sandbox cleanup and the supervisor loop."""

# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import argparse
import asyncio
import logging
import math
import signal
import sys

from cli._runtime import open_supervisor
from core.exceptions import BroodError
from core.schemas import HealthCheckResult

logger = logging.getLogger(__name__)


def _print_result(result: HealthCheckResult) -> None:
    if result.healthy:
        extra = []
        if result.uptime is not None:
            extra.append(f"uptime={result.uptime}")
        if result.credit_balance is not None:
            extra.append(f"credits={result.credit_balance}")
        print(f"  {result.child_id}: healthy {' '.join(extra)}".rstrip())
    else:
        print(f"  {result.child_id}: UNHEALTHY ({'; '.join(result.issues)})")


# ── check ─────────────────────────────────────────────────


def cmd_check(args: argparse.Namespace) -> None:
    """Check a single child, or sweep every healthy/unhealthy child."""
    code = asyncio.run(_check(args))
    if code:
        sys.exit(code)


async def _check(args: argparse.Namespace) -> int:
    async with open_supervisor(args) as supervisor:
        if args.child_id:
            result = await supervisor.health.check_health(args.child_id)
            _print_result(result)
            return 0 if result.healthy else 1

        results = await supervisor.run_health_sweep()
        if not results:
            print("No active children to check.")
            return 0
        print(f"Checked {len(results)} child(ren):")
        for r in results:
            _print_result(r)
    return 0


# ── cleanup ───────────────────────────────────────────────


def cmd_cleanup(args: argparse.Namespace) -> None:
    """Clean up one child, all terminal children, or stale ones."""
    modes = sum([bool(args.child_id), bool(args.all), args.stale is not None])
    if modes != 1:
        print("Error: specify exactly one of CHILD_ID, --all or --stale HOURS", file=sys.stderr)
        sys.exit(2)
    if args.stale is not None and not (math.isfinite(args.stale) and args.stale > 0):
        print("Error: --stale must be a positive number of hours", file=sys.stderr)
        sys.exit(2)
    code = asyncio.run(_cleanup(args))
    if code:
        sys.exit(code)


async def _cleanup(args: argparse.Namespace) -> int:
    async with open_supervisor(args) as supervisor:
        if args.child_id:
            try:
                await supervisor.cleanup.cleanup(args.child_id)
            except BroodError as e:
                print(f"Error: {e}", file=sys.stderr)
                return 1
            print(f"Child '{args.child_id}' cleaned up")
        elif args.all:
            count = await supervisor.cleanup.cleanup_all()
            print(f"Cleaned up {count} child(ren)")
        else:
            count = await supervisor.cleanup.cleanup_stale(args.stale)
            print(f"Cleaned up {count} stale child(ren) (>{args.stale}h)")
    return 0


# ── supervise ─────────────────────────────────────────────


def cmd_supervise(args: argparse.Namespace) -> None:
    """Run the periodic supervisor until SIGINT/SIGTERM."""
    try:
        code = asyncio.run(_supervise(args))
    except KeyboardInterrupt:
        code = 0
    if code:
        sys.exit(code)


async def _supervise(args: argparse.Namespace) -> int:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # Windows: fall back to KeyboardInterrupt
            pass

    async with open_supervisor(args) as supervisor:
        supervisor.start()
        if not supervisor.is_running():
            print("Error: supervisor scheduler failed to start", file=sys.stderr)
            return 1

        print(
            f"Supervising children (health every {supervisor.config.health.check_interval_sec}s, "
            f"cleanup every {supervisor.config.cleanup.interval_sec}s). Ctrl+C to stop."
        )
        # First sweep immediately rather than waiting a full interval
        await supervisor.run_health_sweep()
        try:
            await stop.wait()
        finally:
            supervisor.shutdown()
            logger.info("Supervisor stopped")
    return 0
