# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0
#
# This file is part of Brood core, licensed under Apache-2.0.
# See LICENSE for the full license text.

"""Constitution integrity between parent and child sandboxes.

The parent's constitution is copied into the child sandbox together with
its SHA-256 digest, and the digest is stored in the ``kv`` table under
``constitution_hash:<sandbox_id>``.  Verification re-reads the live file
from the sandbox and compares digests.  A read-only permission flag is
applied after propagation; the digest is the actual check.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from core.config.models import ConstitutionConfig
from core.exceptions import ConfigError
from core.sandbox.client import SandboxClient
from core.schemas import ConstitutionCheck
from core.state.database import SupervisionDB
from core.time_utils import now_iso

logger = logging.getLogger("brood.constitution")

_HASH_KEY_PREFIX = "constitution_hash:"
_DIGEST_PREVIEW_LEN = 16


def sha256_hex(content: str) -> str:
    """Return the hex SHA-256 digest of *content* encoded as UTF-8."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def hash_key(sandbox_id: str) -> str:
    return f"{_HASH_KEY_PREFIX}{sandbox_id}"


class ConstitutionIntegrity:
    """Propagates and verifies the constitution of child sandboxes."""

    def __init__(
        self,
        sandbox: SandboxClient,
        db: SupervisionDB,
        config: ConstitutionConfig,
    ) -> None:
        if config.local_path is None:
            raise ConfigError("constitution.local_path is not configured")
        self.sandbox = sandbox
        self.db = db
        self.config = config
        self._local_path: Path = config.local_path

    def stored_hash(self, sandbox_id: str) -> str | None:
        return self.db.kv_get(hash_key(sandbox_id))

    async def propagate(self, sandbox_id: str) -> str:
        """Copy the local constitution into *sandbox_id* and record its digest.

        Returns the hex digest.  Failures reading the local file or
        writing into the sandbox propagate to the caller.
        """
        constitution = self._local_path.read_text(encoding="utf-8")
        digest = sha256_hex(constitution)

        await self.sandbox.write_file(sandbox_id, self.config.sandbox_path, constitution)
        await self.sandbox.write_file(sandbox_id, self.config.sandbox_hash_path, digest)

        self.db.kv_set(hash_key(sandbox_id), digest, now_iso())
        logger.info(
            "Constitution propagated to %s (sha256 %s...)",
            sandbox_id, digest[:_DIGEST_PREVIEW_LEN],
        )

        try:
            await self.sandbox.exec(
                sandbox_id,
                f"chmod 444 {self.config.sandbox_path}",
                self.config.chmod_timeout_ms,
            )
        except Exception:
            logger.debug("chmod 444 failed in %s (non-critical)", sandbox_id, exc_info=True)

        return digest

    async def verify(self, sandbox_id: str) -> ConstitutionCheck:
        """Compare the live constitution in *sandbox_id* to the stored digest.

        Never raises.  A missing baseline counts as invalid.
        """
        try:
            expected = self.stored_hash(sandbox_id)
        except Exception as e:
            return ConstitutionCheck(
                sandbox_id, False, f"failed to load stored constitution hash: {e}",
            )
        if not expected:
            return ConstitutionCheck(sandbox_id, False, "no stored constitution hash found")

        try:
            live = await self.sandbox.read_file(sandbox_id, self.config.sandbox_path)
            actual = sha256_hex(live)
        except Exception as e:
            return ConstitutionCheck(
                sandbox_id, False, f"failed to read child constitution: {e}",
            )

        if actual == expected:
            return ConstitutionCheck(sandbox_id, True, "constitution hash matches")

        logger.warning("Constitution mismatch in sandbox %s", sandbox_id)
        return ConstitutionCheck(
            sandbox_id,
            False,
            f"hash mismatch: expected {expected[:_DIGEST_PREVIEW_LEN]}..., "
            f"got {actual[:_DIGEST_PREVIEW_LEN]}...",
        )
