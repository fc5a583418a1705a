# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from core.state.database import SupervisionDB

__all__ = ["SupervisionDB"]
