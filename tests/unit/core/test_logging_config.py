"""Unit tests for core/logging_config.py — structlog-based logging setup."""
# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import json
import logging
import sys
from unittest.mock import patch

import pytest
import structlog

from core.logging_config import (
    bind_child_context,
    clear_child_context,
    get_child_context,
    setup_logging,
)


# ── Child context ─────────────────────────────────────────


class TestChildContext:
    def setup_method(self):
        structlog.contextvars.clear_contextvars()

    def test_default_value(self):
        assert get_child_context() == "-"

    def test_bind_and_get(self):
        bind_child_context("c1")
        assert get_child_context() == "c1"

    def test_overwrite(self):
        bind_child_context("c1")
        bind_child_context("c2")
        assert get_child_context() == "c2"

    def test_clear(self):
        bind_child_context("c1")
        clear_child_context()
        assert get_child_context() == "-"

    def test_clear_when_unbound_is_noop(self):
        clear_child_context()
        assert get_child_context() == "-"

    def teardown_method(self):
        structlog.contextvars.clear_contextvars()


# ── setup_logging ─────────────────────────────────────────


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def _reset_logging(self):
        """Reset root logger after each test."""
        yield
        root = logging.getLogger()
        for h in root.handlers:
            h.close()
        root.handlers.clear()
        root.setLevel(logging.WARNING)
        structlog.contextvars.clear_contextvars()

    def test_console_only(self):
        setup_logging(level="DEBUG", log_dir=None)
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)

    def test_with_file_handler_json(self, tmp_path):
        setup_logging(level="INFO", log_dir=tmp_path, json_file=True)
        root = logging.getLogger()
        assert root.level == logging.INFO
        handler_types = [type(h).__name__ for h in root.handlers]
        assert "StreamHandler" in handler_types
        assert "RotatingFileHandler" in handler_types

    def test_with_file_handler_plain(self, tmp_path):
        setup_logging(level="WARNING", log_dir=tmp_path, json_file=False)
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 2

    def test_creates_log_dir(self, tmp_path):
        log_dir = tmp_path / "logs" / "deep"
        assert not log_dir.exists()
        setup_logging(log_dir=log_dir)
        assert log_dir.exists()

    def test_third_party_loggers_suppressed(self):
        setup_logging()
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING
        assert logging.getLogger("apscheduler").level == logging.WARNING

    def test_invalid_level_defaults_to_info(self):
        setup_logging(level="INVALID_LEVEL")
        assert logging.getLogger().level == logging.INFO

    def test_structlog_processor_formatter_used(self):
        setup_logging()
        for handler in logging.getLogger().handlers:
            assert "ProcessorFormatter" in type(handler.formatter).__name__

    def test_child_id_appears_in_json_log(self, tmp_path):
        setup_logging(level="DEBUG", log_dir=tmp_path, json_file=True)
        bind_child_context("c1")

        logging.getLogger("brood.test").info("probing child")

        log_file = tmp_path / "brood.log"
        lines = log_file.read_text(encoding="utf-8").strip().splitlines()
        data = json.loads(lines[-1])
        assert data["event"] == "probing child"
        assert data["child_id"] == "c1"

    def test_json_log_without_orjson(self, tmp_path):
        with patch.dict(sys.modules, {"orjson": None}):
            setup_logging(level="INFO", log_dir=tmp_path, json_file=True)

        logging.getLogger("brood.test").info("stdlib json")

        lines = (tmp_path / "brood.log").read_text(encoding="utf-8").strip().splitlines()
        assert json.loads(lines[-1])["event"] == "stdlib json"
