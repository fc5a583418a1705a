# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0
#
# This file is part of Brood core, licensed under Apache-2.0.
# See LICENSE for the full license text.

"""Central configuration module for Brood.

Defines Pydantic models for config.json and provides load / save helpers
with a module-level singleton cache.  Supervision components never call
:func:`load_config` themselves; they receive the relevant sub-model at
construction.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from core.exceptions import ConfigValidationError

logger = logging.getLogger("brood.config")

# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class SystemConfig(BaseModel):
    log_level: str = "INFO"
    json_log_file: bool = True


class SandboxConfig(BaseModel):
    """Remote sandbox backend connection."""

    api_url: str = "https://api.conway.tech"
    api_key_env: str = "CONWAY_API_KEY"  # name of the env var holding the key
    request_timeout_s: float = 30.0


class DatabaseConfig(BaseModel):
    filename: str = "state.db"


class HealthMonitorConfig(BaseModel):
    """Child health polling configuration."""

    check_interval_sec: int = Field(default=300, ge=1)
    max_concurrent_checks: int = Field(default=3, ge=1)
    probe_timeout_ms: int = 10_000
    probe_port: int = 3000
    probe_path: str = "/health"


class CleanupConfig(BaseModel):
    """Sandbox reclamation configuration."""

    enabled: bool = True
    interval_sec: int = Field(default=3600, ge=1)
    stale_max_age_hours: float = Field(default=24.0, gt=0)


class ConstitutionConfig(BaseModel):
    """Constitution propagation paths.

    ``local_path`` is ``None`` until the composition layer resolves it
    (normally ``<data_dir>/constitution.md``).
    """

    local_path: Path | None = None
    sandbox_path: str = "/root/.automaton/constitution.md"
    sandbox_hash_path: str = "/root/.automaton/constitution.sha256"
    chmod_timeout_ms: int = 5_000


class BroodConfig(BaseModel):
    version: int = 1
    system: SystemConfig = SystemConfig()
    sandbox: SandboxConfig = SandboxConfig()
    database: DatabaseConfig = DatabaseConfig()
    health: HealthMonitorConfig = HealthMonitorConfig()
    cleanup: CleanupConfig = CleanupConfig()
    constitution: ConstitutionConfig = ConstitutionConfig()


# ---------------------------------------------------------------------------
# Singleton cache
# ---------------------------------------------------------------------------

_config: BroodConfig | None = None
_config_path: Path | None = None
_config_mtime: float = 0.0


def invalidate_cache() -> None:
    """Reset the module-level singleton cache."""
    global _config, _config_path, _config_mtime
    _config = None
    _config_path = None
    _config_mtime = 0.0


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def get_config_path(data_dir: Path | None = None) -> Path:
    """Return the path to config.json inside *data_dir*.

    If *data_dir* is not given, it is resolved via ``core.paths.get_data_dir``
    (imported lazily to avoid circular imports).
    """
    if data_dir is None:
        from core.paths import get_data_dir

        data_dir = get_data_dir()
    return data_dir / "config.json"


# ---------------------------------------------------------------------------
# Load / Save
# ---------------------------------------------------------------------------


def load_config(path: Path | None = None) -> BroodConfig:
    """Load configuration from disk, returning cached instance when possible.

    When the file does not exist the default configuration is returned.
    The cache is invalidated when the file's mtime changes.

    Raises:
        ConfigValidationError: The file exists but is not a valid config.
    """
    global _config, _config_path, _config_mtime

    if path is None:
        path = get_config_path()

    if _config is not None and _config_path == path:
        try:
            disk_mtime = path.stat().st_mtime
        except OSError:
            disk_mtime = 0.0
        if disk_mtime == _config_mtime:
            return _config
        logger.debug("Config file changed on disk (mtime %.3f → %.3f); reloading", _config_mtime, disk_mtime)

    if path.is_file():
        logger.debug("Loading config from %s", path)
        try:
            data: dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
            config = BroodConfig.model_validate(data)
        except json.JSONDecodeError as exc:
            logger.error("Failed to parse %s: %s", path, exc)
            raise ConfigValidationError(f"Invalid JSON in {path}: {exc}") from exc
        except ValidationError as exc:
            logger.error("Invalid config in %s: %s", path, exc)
            raise ConfigValidationError(f"Invalid config in {path}: {exc}") from exc
    else:
        logger.info("Config file not found at %s; using defaults", path)
        config = BroodConfig()

    _config = config
    _config_path = path
    try:
        _config_mtime = path.stat().st_mtime
    except OSError:
        _config_mtime = 0.0
    return config


def save_config(config: BroodConfig, path: Path | None = None) -> None:
    """Persist *config* to disk as pretty-printed JSON (mode 0o600)."""
    global _config, _config_path, _config_mtime

    if path is None:
        path = get_config_path()

    path.parent.mkdir(parents=True, exist_ok=True)

    payload = config.model_dump(mode="json")
    text = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
    path.write_text(text, encoding="utf-8")
    os.chmod(path, 0o600)

    logger.debug("Config saved to %s", path)

    _config = config
    _config_path = path
    try:
        _config_mtime = path.stat().st_mtime
    except OSError:
        _config_mtime = 0.0


def resolve_constitution_config(
    config: BroodConfig,
    data_dir: Path,
) -> ConstitutionConfig:
    """Return the constitution config with ``local_path`` filled in."""
    cfg = config.constitution
    if cfg.local_path is not None:
        return cfg
    from core.paths import CONSTITUTION_FILENAME

    return cfg.model_copy(update={"local_path": data_dir / CONSTITUTION_FILENAME})
