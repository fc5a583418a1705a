from __future__ import annotations
# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0

"""REST client for the remote sandbox backend."""

import logging
from typing import Any

import httpx

from core.exceptions import SandboxNotFoundError, SandboxTransportError
from core.sandbox.client import ExecResult

logger = logging.getLogger("brood.sandbox")

# Extra HTTP allowance on top of the in-sandbox command timeout
_EXEC_TIMEOUT_MARGIN_S = 5.0


class HttpSandboxClient:
    """:class:`~core.sandbox.client.SandboxClient` over the sandbox REST API.

    Transport failures and non-2xx responses are raised as
    :class:`SandboxTransportError` (404 as :class:`SandboxNotFoundError`).
    No retries are attempted here.
    """

    def __init__(
        self,
        api_url: str,
        api_key: str = "",
        *,
        timeout_s: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._api_key = api_key
        self._timeout_s = timeout_s
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self._api_key:
                headers["Authorization"] = f"Bearer {self._api_key}"
            self._client = httpx.AsyncClient(
                base_url=self._api_url,
                headers=headers,
                timeout=self._timeout_s,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HttpSandboxClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        client = self._get_client()
        kwargs: dict[str, Any] = {"json": json, "params": params}
        if timeout is not None:
            kwargs["timeout"] = timeout
        try:
            resp = await client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise SandboxTransportError(f"{method} {path} timed out") from e
        except httpx.HTTPError as e:
            raise SandboxTransportError(f"{method} {path} failed: {e}") from e

        if resp.status_code == 404:
            raise SandboxNotFoundError(f"{method} {path}: not found")
        if resp.is_error:
            raise SandboxTransportError(
                f"{method} {path}: HTTP {resp.status_code} {resp.text[:200]}",
                status_code=resp.status_code,
            )
        return resp

    # ── SandboxClient ──────────────────────────────────────────

    async def exec(
        self,
        sandbox_id: str,
        command: str,
        timeout_ms: int | None = None,
    ) -> ExecResult:
        body: dict[str, Any] = {"command": command}
        http_timeout = None
        if timeout_ms is not None:
            body["timeout"] = timeout_ms
            http_timeout = timeout_ms / 1000 + _EXEC_TIMEOUT_MARGIN_S
        resp = await self._request(
            "POST", f"/v1/sandboxes/{sandbox_id}/exec",
            json=body, timeout=http_timeout,
        )
        data = resp.json()
        return ExecResult(
            stdout=data.get("stdout", ""),
            stderr=data.get("stderr", ""),
            exit_code=int(data.get("exit_code", data.get("exitCode", 0)) or 0),
        )

    async def read_file(self, sandbox_id: str, path: str) -> str:
        resp = await self._request(
            "GET", f"/v1/sandboxes/{sandbox_id}/files/read", params={"path": path},
        )
        data = resp.json()
        if isinstance(data, str):
            return data
        return data.get("content", "")

    async def write_file(self, sandbox_id: str, path: str, content: str) -> None:
        await self._request(
            "POST", f"/v1/sandboxes/{sandbox_id}/files/upload/json",
            json={"path": path, "content": content},
        )

    async def delete_sandbox(self, sandbox_id: str) -> None:
        await self._request("DELETE", f"/v1/sandboxes/{sandbox_id}")
        logger.info("Sandbox deleted: %s", sandbox_id)
