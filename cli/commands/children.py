"""CLI commands for the child registry and lifecycle."""

# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import argparse
import dataclasses
import json
import sys

from cli._runtime import open_db, resolve_config
from core.exceptions import LifecycleError
from core.schemas import ChildState
from core.supervisor.lifecycle import ChildLifecycle


def _lifecycle(args: argparse.Namespace) -> ChildLifecycle:
    return ChildLifecycle(open_db(resolve_config(args)))


def cmd_init_db(args: argparse.Namespace) -> None:
    """Create the database schema (idempotent)."""
    db = open_db(resolve_config(args))
    print(f"Database ready: {db.path}")


def cmd_children(args: argparse.Namespace) -> None:
    """List registered children, optionally filtered by state."""
    db = open_db(resolve_config(args))
    state = ChildState(args.state) if args.state else None
    children = db.list_children(state)

    if getattr(args, "json", False):
        print(json.dumps([dataclasses.asdict(c) for c in children], ensure_ascii=False, indent=2))
        return

    if not children:
        print("No children registered.")
        return

    print(f"{'ID':<20} {'Name':<20} {'State':<16} {'Sandbox':<20} {'Last checked'}")
    print("-" * 100)
    for c in children:
        print(
            f"{c.id:<20} {c.name:<20} {c.status.value:<16} "
            f"{c.sandbox_id or '-':<20} {c.last_checked or '-'}"
        )


def cmd_register(args: argparse.Namespace) -> None:
    """Register a new child in ``requested``."""
    lifecycle = _lifecycle(args)
    if lifecycle.get_child(args.child_id) is not None:
        print(f"Error: child '{args.child_id}' already exists", file=sys.stderr)
        sys.exit(1)
    record = lifecycle.init_child(args.child_id, args.name, args.sandbox_id)
    print(f"Registered child '{record.id}' ({record.name}) in state {record.status.value}")


def cmd_transition(args: argparse.Namespace) -> None:
    """Apply a validated lifecycle transition."""
    lifecycle = _lifecycle(args)
    try:
        lifecycle.transition(args.child_id, args.state, args.reason)
    except LifecycleError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"Child '{args.child_id}' -> {args.state}")


def cmd_history(args: argparse.Namespace) -> None:
    """Print the lifecycle events of a child, oldest first."""
    lifecycle = _lifecycle(args)
    events = lifecycle.get_history(args.child_id)

    if getattr(args, "json", False):
        print(json.dumps([dataclasses.asdict(e) for e in events], ensure_ascii=False, indent=2))
        return

    if not events:
        print(f"No lifecycle events for '{args.child_id}'.")
        return

    for e in events:
        line = f"{e.created_at}  {e.from_state:>14} -> {e.to_state.value:<14}"
        if e.reason:
            line += f"  {e.reason}"
        print(line)
