"""Tests for web_fetch tool."""

import socket

import httpx
import pytest

from lumen.tools import ActionExecutor, WebFetchTool
from lumen.tools.web_fetch import is_private_ip, resolve_and_validate


def fake_getaddrinfo(ip: str):
    def getaddrinfo(host, port, family=0, type=0, *args, **kwargs):
        return [(socket.AF_INET, socket.SOCK_STREAM, 6, "", (ip, 0))]

    return getaddrinfo


class TestIsPrivateIp:
    def test_private_ranges(self):
        assert is_private_ip("127.0.0.1") is True
        assert is_private_ip("10.1.2.3") is True
        assert is_private_ip("172.16.0.1") is True
        assert is_private_ip("192.168.1.1") is True
        assert is_private_ip("169.254.169.254") is True
        assert is_private_ip("::1") is True

    def test_public_ips(self):
        assert is_private_ip("8.8.8.8") is False
        assert is_private_ip("172.15.0.1") is False

    def test_invalid_ip(self):
        assert is_private_ip("not-an-ip") is True


class TestResolveAndValidate:
    def test_private_resolution_blocked(self, monkeypatch):
        monkeypatch.setattr(socket, "getaddrinfo", fake_getaddrinfo("10.0.0.5"))

        valid, error = resolve_and_validate("internal.example")

        assert valid is False
        assert "private IP 10.0.0.5" in error

    def test_public_resolution_allowed(self, monkeypatch):
        monkeypatch.setattr(socket, "getaddrinfo", fake_getaddrinfo("93.184.216.34"))

        assert resolve_and_validate("example.com") == (True, None)

    def test_dns_failure(self, monkeypatch):
        def fail(*args, **kwargs):
            raise socket.gaierror("no such host")

        monkeypatch.setattr(socket, "getaddrinfo", fail)

        valid, error = resolve_and_validate("nope.invalid")

        assert valid is False
        assert "DNS resolution failed" in error


def make_executor(tmp_path, handler) -> ActionExecutor:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ActionExecutor(tmp_path, http_client=client)


class TestWebFetchTool:
    @pytest.fixture(autouse=True)
    def public_dns(self, monkeypatch):
        monkeypatch.setattr(socket, "getaddrinfo", fake_getaddrinfo("93.184.216.34"))

    @pytest.mark.asyncio
    async def test_fetch_success(self, tmp_path):
        executor = make_executor(tmp_path, lambda request: httpx.Response(200, text="hello page"))

        result = await WebFetchTool(executor).execute(url="https://example.com/")

        assert result.success is True
        assert result.output.startswith("HTTP 200 OK")
        assert result.output.endswith("hello page")
        assert result.metadata["status_code"] == 200

    @pytest.mark.asyncio
    async def test_http_error_status(self, tmp_path):
        executor = make_executor(tmp_path, lambda request: httpx.Response(404, text="missing"))

        result = await WebFetchTool(executor).execute(url="https://example.com/x")

        assert result.success is False
        assert result.output.startswith("Error: HTTP 404")

    @pytest.mark.asyncio
    async def test_body_truncated(self, tmp_path):
        executor = make_executor(tmp_path, lambda request: httpx.Response(200, text="z" * 100))

        result = await WebFetchTool(executor, max_chars=10).execute(url="https://example.com/")

        assert result.output.endswith("z" * 10 + "\n... (truncated)")

    @pytest.mark.asyncio
    async def test_request_error(self, tmp_path):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        executor = make_executor(tmp_path, handler)

        result = await WebFetchTool(executor).execute(url="https://example.com/")

        assert result.success is False
        assert "Request failed" in result.output

    @pytest.mark.asyncio
    async def test_scheme_rejected(self, tmp_path):
        executor = make_executor(tmp_path, lambda request: httpx.Response(200))

        result = await WebFetchTool(executor).execute(url="file:///etc/passwd")

        assert result.success is False
        assert "Scheme not allowed" in result.output

    @pytest.mark.asyncio
    async def test_private_host_rejected(self, tmp_path, monkeypatch):
        monkeypatch.setattr(socket, "getaddrinfo", fake_getaddrinfo("127.0.0.1"))
        executor = make_executor(tmp_path, lambda request: httpx.Response(200))

        result = await WebFetchTool(executor).execute(url="http://localhost:8080/")

        assert result.success is False
        assert "private IP" in result.output


@pytest.mark.asyncio
async def test_executor_closes_owned_client(tmp_path):
    async with ActionExecutor(tmp_path / "ws") as executor:
        client = executor.http
        assert (tmp_path / "ws").is_dir()

    assert client.is_closed
    with pytest.raises(RuntimeError, match="closed"):
        executor.http
    await executor.aclose()


@pytest.mark.asyncio
async def test_executor_leaves_injected_client_open(tmp_path):
    client = httpx.AsyncClient()
    async with ActionExecutor(tmp_path, http_client=client):
        pass

    assert not client.is_closed
    await client.aclose()
