# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0

"""CLI subcommands for constitution propagation and verification.

Usage:
    brood constitution propagate SANDBOX_ID
    brood constitution verify SANDBOX_ID
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from cli._runtime import open_supervisor


def cmd_propagate(args: argparse.Namespace) -> None:
    code = asyncio.run(_propagate(args))
    if code:
        sys.exit(code)


async def _propagate(args: argparse.Namespace) -> int:
    async with open_supervisor(args) as supervisor:
        try:
            digest = await supervisor.constitution.propagate(args.sandbox_id)
        except FileNotFoundError as e:
            print(f"Error: local constitution not found: {e.filename}", file=sys.stderr)
            return 1
        except Exception as e:
            print(f"Error: propagation to {args.sandbox_id} failed: {e}", file=sys.stderr)
            return 1
    print(f"Constitution propagated to {args.sandbox_id} (sha256 {digest})")
    return 0


def cmd_verify(args: argparse.Namespace) -> None:
    code = asyncio.run(_verify(args))
    if code:
        sys.exit(code)


async def _verify(args: argparse.Namespace) -> int:
    async with open_supervisor(args) as supervisor:
        check = await supervisor.constitution.verify(args.sandbox_id)
    status = "OK" if check.valid else "FAILED"
    print(f"{args.sandbox_id}: {status} - {check.detail}")
    return 0 if check.valid else 1
