"""Unit tests for core.paths module."""
# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pathlib import Path

import pytest

from core.paths import (
    get_data_dir,
    get_db_path,
    get_log_dir,
)


class TestGetDataDir:
    def test_default_is_home_automaton(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("BROOD_DATA_DIR", raising=False)
        assert get_data_dir() == Path.home() / ".automaton"

    def test_env_override(self, tmp_path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("BROOD_DATA_DIR", str(tmp_path / "custom"))
        assert get_data_dir() == (tmp_path / "custom").resolve()

    def test_env_expands_user(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("BROOD_DATA_DIR", "~/brood-data")
        assert get_data_dir() == (Path.home() / "brood-data").resolve()


class TestDerivedPaths:
    def test_paths_live_under_data_dir(self, data_dir: Path):
        assert get_log_dir() == data_dir.resolve() / "logs"
        assert get_db_path() == data_dir.resolve() / "state.db"
        assert get_db_path("other.db").name == "other.db"
