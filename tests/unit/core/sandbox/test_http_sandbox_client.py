"""Unit tests for HttpSandboxClient using httpx.MockTransport."""
# Brood - Child Automaton Supervision
# Copyright (C) 2026 Brood Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import json

import httpx
import pytest

from core.exceptions import SandboxNotFoundError, SandboxTransportError
from core.sandbox import SandboxClient
from core.sandbox.rest import HttpSandboxClient
from tests.helpers.fake_sandbox import FakeSandboxClient


def _client(handler, api_key: str = "secret") -> HttpSandboxClient:
    return HttpSandboxClient(
        "https://sandbox.test/", api_key, transport=httpx.MockTransport(handler),
    )


class TestProtocol:
    def test_implementations_satisfy_protocol(self):
        assert isinstance(HttpSandboxClient("https://sandbox.test"), SandboxClient)
        assert isinstance(FakeSandboxClient(), SandboxClient)


class TestExec:
    @pytest.mark.asyncio
    async def test_exec_posts_command_and_parses_result(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"stdout": "ok\n", "stderr": "", "exitCode": 0})

        async with _client(handler) as client:
            result = await client.exec("sb-1", "echo ok", 10_000)

        assert result.stdout == "ok\n"
        assert result.exit_code == 0
        req = seen[0]
        assert req.method == "POST"
        assert req.url.path == "/v1/sandboxes/sb-1/exec"
        assert json.loads(req.content) == {"command": "echo ok", "timeout": 10_000}
        assert req.headers["Authorization"] == "Bearer secret"
        assert req.extensions["timeout"]["read"] == pytest.approx(15.0)

    @pytest.mark.asyncio
    async def test_exec_without_timeout_uses_client_default(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"stdout": "", "exit_code": 2})

        async with _client(handler) as client:
            result = await client.exec("sb-1", "false")

        assert result.exit_code == 2
        assert "timeout" not in json.loads(seen[0].content)
        assert seen[0].extensions["timeout"]["read"] == pytest.approx(30.0)

    @pytest.mark.asyncio
    async def test_no_auth_header_without_key(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"stdout": ""})

        async with _client(handler, api_key="") as client:
            await client.exec("sb-1", "true")
        assert "Authorization" not in seen[0].headers


class TestFiles:
    @pytest.mark.asyncio
    async def test_read_file_json_content(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/v1/sandboxes/sb-1/files/read"
            assert request.url.params["path"] == "/root/.automaton/constitution.md"
            return httpx.Response(200, json={"content": "# Laws"})

        async with _client(handler) as client:
            assert await client.read_file("sb-1", "/root/.automaton/constitution.md") == "# Laws"

    @pytest.mark.asyncio
    async def test_read_file_raw_string(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json="plain body")

        async with _client(handler) as client:
            assert await client.read_file("sb-1", "/x") == "plain body"

    @pytest.mark.asyncio
    async def test_write_file(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        async with _client(handler) as client:
            await client.write_file("sb-1", "/root/a.txt", "hello")

        assert seen[0].method == "POST"
        assert seen[0].url.path == "/v1/sandboxes/sb-1/files/upload/json"
        assert json.loads(seen[0].content) == {"path": "/root/a.txt", "content": "hello"}


class TestDeleteAndErrors:
    @pytest.mark.asyncio
    async def test_delete_sandbox(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(204)

        async with _client(handler) as client:
            await client.delete_sandbox("sb-9")
        assert seen[0].method == "DELETE"
        assert seen[0].url.path == "/v1/sandboxes/sb-9"

    @pytest.mark.asyncio
    async def test_404_raises_not_found(self):
        async with _client(lambda r: httpx.Response(404)) as client:
            with pytest.raises(SandboxNotFoundError):
                await client.delete_sandbox("sb-x")

    @pytest.mark.asyncio
    async def test_5xx_raises_transport_error_with_status(self):
        async with _client(lambda r: httpx.Response(503, text="down")) as client:
            with pytest.raises(SandboxTransportError) as exc_info:
                await client.exec("sb-1", "true")
        assert exc_info.value.status_code == 503
        assert "down" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_connect_error_raises_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(SandboxTransportError, match="failed"):
                await client.read_file("sb-1", "/x")

    @pytest.mark.asyncio
    async def test_timeout_raises_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        async with _client(handler) as client:
            with pytest.raises(SandboxTransportError, match="timed out") as exc_info:
                await client.exec("sb-1", "sleep 100", 1000)
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_aclose_is_idempotent(self):
        client = _client(lambda r: httpx.Response(200, json={}))
        await client.aclose()
        await client.aclose()
