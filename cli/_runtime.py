# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from core.config.models import BroodConfig, get_config_path, load_config
from core.exceptions import ConfigError, ConfigNotFoundError
from core.paths import get_data_dir, get_db_path
from core.state.database import SupervisionDB

logger = logging.getLogger(__name__)


# ── Public API ────────────────────────────────────────────


def resolve_config(args: argparse.Namespace) -> BroodConfig:
    """Load configuration from ``--config`` or ``<data_dir>/config.json``.

    An explicit ``--config`` must exist; the default location falls back
    to built-in defaults when absent.

    Raises:
        SystemExit: The config file is missing or invalid.
    """
    explicit = getattr(args, "config", None)
    path = Path(explicit) if explicit else get_config_path()
    try:
        if explicit and not path.is_file():
            raise ConfigNotFoundError(f"Config file not found: {path}")
        return load_config(path)
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


def open_db(config: BroodConfig) -> SupervisionDB:
    """Open (and create if needed) the supervision database."""
    get_data_dir().mkdir(parents=True, exist_ok=True)
    return SupervisionDB(get_db_path(config.database.filename))


def resolve_api_key(config: BroodConfig) -> str:
    """Read the sandbox API key from the configured environment variable."""
    key = os.environ.get(config.sandbox.api_key_env, "")
    if not key:
        logger.warning(
            "%s is not set; sandbox requests will be unauthenticated",
            config.sandbox.api_key_env,
        )
    return key


@asynccontextmanager
async def open_supervisor(args: argparse.Namespace) -> AsyncIterator:
    """Yield a :class:`ChildSupervisor` wired to the REST sandbox client.

    The HTTP client is closed on exit.
    """
    from core.sandbox.rest import HttpSandboxClient
    from core.supervisor.manager import ChildSupervisor

    config = resolve_config(args)
    db = open_db(config)
    client = HttpSandboxClient(
        config.sandbox.api_url,
        resolve_api_key(config),
        timeout_s=config.sandbox.request_timeout_s,
    )
    try:
        yield ChildSupervisor(db, client, config, get_data_dir())
    finally:
        await client.aclose()
