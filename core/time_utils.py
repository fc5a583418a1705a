from __future__ import annotations
# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0
#
# This file is part of Brood core, licensed under Apache-2.0.
# See LICENSE for the full license text.

"""Timezone-aware datetime helpers.

All persisted timestamps are UTC ISO-8601 strings with a fixed
microsecond precision, so string comparison in SQL matches
chronological order.
"""

from datetime import datetime, timezone

_DEFAULT_TZ = timezone.utc


def now_utc() -> datetime:
    """Return current time as timezone-aware UTC datetime."""
    return datetime.now(tz=_DEFAULT_TZ)


def to_iso(dt: datetime) -> str:
    """Format *dt* in the canonical storage format."""
    return ensure_aware(dt).astimezone(_DEFAULT_TZ).isoformat(timespec="microseconds")


def now_iso() -> str:
    """Return current time in the canonical storage format."""
    return to_iso(now_utc())


def ensure_aware(dt: datetime) -> datetime:
    """Ensure *dt* is timezone-aware.  Naive datetimes are assumed UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=_DEFAULT_TZ)
    return dt
