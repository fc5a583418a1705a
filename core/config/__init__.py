# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from core.config.models import (
    BroodConfig,
    CleanupConfig,
    ConstitutionConfig,
    DatabaseConfig,
    HealthMonitorConfig,
    SandboxConfig,
    SystemConfig,
    get_config_path,
    invalidate_cache,
    load_config,
    resolve_constitution_config,
    save_config,
)

__all__ = [
    "BroodConfig",
    "CleanupConfig",
    "ConstitutionConfig",
    "DatabaseConfig",
    "HealthMonitorConfig",
    "SandboxConfig",
    "SystemConfig",
    "get_config_path",
    "invalidate_cache",
    "load_config",
    "resolve_constitution_config",
    "save_config",
]
