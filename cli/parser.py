# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import argparse
import os
from pathlib import Path


def build_parser() -> argparse.ArgumentParser:
    from core.schemas import ChildState

    parser = argparse.ArgumentParser(
        prog="brood",
        description="Brood - Child Automaton Supervision",
    )
    parser.add_argument(
        "--data-dir",
        default=None,
        help="Override runtime data directory (default: ~/.automaton or BROOD_DATA_DIR)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.json (default: <data-dir>/config.json)",
    )
    sub = parser.add_subparsers(dest="command")

    # ── Init DB ───────────────────────────────────────────
    p_init = sub.add_parser("init-db", help="Create the supervision database schema")
    p_init.set_defaults(func=_lazy_init_db)

    # ── Children ──────────────────────────────────────────
    p_children = sub.add_parser("children", help="List registered children")
    p_children.add_argument(
        "--state", default=None,
        choices=[s.value for s in ChildState],
        help="Only list children in this state",
    )
    p_children.add_argument("--json", action="store_true", help="Output as JSON")
    p_children.set_defaults(func=_lazy_children)

    # ── Register ──────────────────────────────────────────
    p_register = sub.add_parser("register", help="Register a new child (state: requested)")
    p_register.add_argument("child_id", help="Child ID")
    p_register.add_argument("name", help="Child name")
    p_register.add_argument("--sandbox-id", default=None, help="Sandbox hosting the child")
    p_register.set_defaults(func=_lazy_register)

    # ── Transition ────────────────────────────────────────
    p_transition = sub.add_parser("transition", help="Move a child to a new lifecycle state")
    p_transition.add_argument("child_id", help="Child ID")
    p_transition.add_argument("state", help="Target state")
    p_transition.add_argument("--reason", default=None, help="Reason recorded on the event")
    p_transition.set_defaults(func=_lazy_transition)

    # ── History ───────────────────────────────────────────
    p_history = sub.add_parser("history", help="Show a child's lifecycle events")
    p_history.add_argument("child_id", help="Child ID")
    p_history.add_argument("--json", action="store_true", help="Output as JSON")
    p_history.set_defaults(func=_lazy_history)

    # ── Check ─────────────────────────────────────────────
    p_check = sub.add_parser("check", help="Health-check one child, or sweep all active children")
    p_check.add_argument("child_id", nargs="?", default=None, help="Child ID (omit for full sweep)")
    p_check.set_defaults(func=_lazy_check)

    # ── Cleanup ───────────────────────────────────────────
    p_cleanup = sub.add_parser("cleanup", help="Destroy sandboxes of stopped/failed children")
    p_cleanup.add_argument("child_id", nargs="?", default=None, help="Child ID")
    p_cleanup.add_argument("--all", action="store_true", help="Clean up every stopped/failed child")
    p_cleanup.add_argument(
        "--stale", type=float, default=None, metavar="HOURS",
        help="Clean up children not checked for HOURS",
    )
    p_cleanup.set_defaults(func=_lazy_cleanup)

    # ── Constitution ──────────────────────────────────────
    p_const = sub.add_parser("constitution", help="Constitution integrity")
    const_sub = p_const.add_subparsers(dest="constitution_command")

    p_propagate = const_sub.add_parser("propagate", help="Copy the constitution into a sandbox")
    p_propagate.add_argument("sandbox_id", help="Sandbox ID")
    p_propagate.set_defaults(func=_lazy_constitution_propagate)

    p_verify = const_sub.add_parser("verify", help="Verify a sandbox's constitution digest")
    p_verify.add_argument("sandbox_id", help="Sandbox ID")
    p_verify.set_defaults(func=_lazy_constitution_verify)

    p_const.set_defaults(func=lambda _args: p_const.print_help())

    # ── Supervise ─────────────────────────────────────────
    p_supervise = sub.add_parser("supervise", help="Run periodic health sweeps and stale cleanup")
    p_supervise.set_defaults(func=_lazy_supervise)

    return parser


def cli_main(argv: list[str] | None = None) -> None:
    from dotenv import load_dotenv

    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    # Apply --data-dir override before any command
    if args.data_dir:
        os.environ["BROOD_DATA_DIR"] = args.data_dir

    from core.config.models import BroodConfig, get_config_path, load_config
    from core.exceptions import ConfigError
    from core.logging_config import setup_logging
    from core.paths import get_log_dir

    # An invalid config is reported by the command itself
    try:
        system = load_config(Path(args.config) if args.config else get_config_path()).system
    except ConfigError:
        system = BroodConfig().system

    setup_logging(
        level=os.environ.get("BROOD_LOG_LEVEL", system.log_level),
        log_dir=get_log_dir(),
        json_file=system.json_log_file,
    )

    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


# ── Lazy import wrappers ──────────────────────────────────


def _lazy_init_db(args: argparse.Namespace) -> None:
    from cli.commands.children import cmd_init_db

    cmd_init_db(args)


def _lazy_children(args: argparse.Namespace) -> None:
    from cli.commands.children import cmd_children

    cmd_children(args)


def _lazy_register(args: argparse.Namespace) -> None:
    from cli.commands.children import cmd_register

    cmd_register(args)


def _lazy_transition(args: argparse.Namespace) -> None:
    from cli.commands.children import cmd_transition

    cmd_transition(args)


def _lazy_history(args: argparse.Namespace) -> None:
    from cli.commands.children import cmd_history

    cmd_history(args)


def _lazy_check(args: argparse.Namespace) -> None:
    from cli.commands.supervision import cmd_check

    cmd_check(args)


def _lazy_cleanup(args: argparse.Namespace) -> None:
    from cli.commands.supervision import cmd_cleanup

    cmd_cleanup(args)


def _lazy_constitution_propagate(args: argparse.Namespace) -> None:
    from cli.commands.constitution import cmd_propagate

    cmd_propagate(args)


def _lazy_constitution_verify(args: argparse.Namespace) -> None:
    from cli.commands.constitution import cmd_verify

    cmd_verify(args)


def _lazy_supervise(args: argparse.Namespace) -> None:
    from cli.commands.supervision import cmd_supervise

    cmd_supervise(args)
