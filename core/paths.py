# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0
#
# This file is part of Brood core, licensed under Apache-2.0.
# See LICENSE for the full license text.

"""Centralized path resolution for Brood.

Only the command line and other composition code import from here;
supervision components receive their paths through configuration.
Runtime data directory can be overridden via BROOD_DATA_DIR environment variable.
"""

from __future__ import annotations

import os
from pathlib import Path

# Default runtime data directory, shared with the parent automaton
_DEFAULT_DATA_DIR = Path.home() / ".automaton"

CONSTITUTION_FILENAME = "constitution.md"


def get_data_dir() -> Path:
    """Return the runtime data directory, respecting BROOD_DATA_DIR env var."""
    env_val = os.environ.get("BROOD_DATA_DIR")
    if env_val:
        return Path(env_val).expanduser().resolve()
    return _DEFAULT_DATA_DIR


def get_log_dir() -> Path:
    return get_data_dir() / "logs"


def get_db_path(filename: str = "state.db") -> Path:
    return get_data_dir() / filename
