"""Web fetch tool with SSRF protection."""

import ipaddress
import socket
from typing import Any
from urllib.parse import urlparse

import httpx

from .base import Tool, ToolResult
from .executor import ActionExecutor

# Private/reserved IP ranges to block
BLOCKED_NETWORKS = [
    ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("169.254.0.0/16"),
    ipaddress.ip_network("::1/128"),
    ipaddress.ip_network("fc00::/7"),
    ipaddress.ip_network("fe80::/10"),
    ipaddress.ip_network("0.0.0.0/8"),
    ipaddress.ip_network("100.64.0.0/10"),
]

ALLOWED_SCHEMES = {"http", "https"}


def is_private_ip(ip: str) -> bool:
    """Check if an IP address is in a private/reserved range."""
    try:
        addr = ipaddress.ip_address(ip)
        return any(addr in network for network in BLOCKED_NETWORKS)
    except ValueError:
        return True  # Invalid IP, treat as blocked


def resolve_and_validate(hostname: str) -> tuple[bool, str | None]:
    """Resolve hostname and check that no address is private.

    Returns (valid, error_message).
    """
    try:
        infos = socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except socket.gaierror as e:
        return False, f"DNS resolution failed: {e}"

    if not infos:
        return False, f"Could not resolve hostname: {hostname}"

    for _, _, _, _, sockaddr in infos:
        ip = str(sockaddr[0])
        if is_private_ip(ip):
            return False, f"Blocked: {hostname} resolves to private IP {ip}"

    return True, None


class WebFetchTool(Tool):
    """Fetch a public URL through the session's HTTP client."""

    def __init__(self, executor: ActionExecutor, max_chars: int = 50_000) -> None:
        self._executor = executor
        self._max_chars = max_chars

    @property
    def name(self) -> str:
        return "web_fetch"

    @property
    def description(self) -> str:
        return (
            "Fetch content from a URL. Only HTTP/HTTPS URLs to public hosts are "
            "allowed. Returns the status line and the body (truncated if large)."
        )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "url": {
                    "type": "string",
                    "description": "The URL to fetch. Must be http:// or https://",
                },
            },
            "required": ["url"],
        }

    def _validate_url(self, url: str) -> str | None:
        """Return an error message if the URL may not be fetched."""
        parsed = urlparse(url)

        if parsed.scheme.lower() not in ALLOWED_SCHEMES:
            return f"Scheme not allowed: {parsed.scheme or '(none)'}. Use http or https."

        if not parsed.hostname:
            return "URL must have a hostname"

        valid, error = resolve_and_validate(parsed.hostname)
        return None if valid else error

    async def execute(self, url: str) -> ToolResult:
        error = self._validate_url(url)
        if error:
            return ToolResult.error(error)

        try:
            response = await self._executor.http.get(url)
        except httpx.TimeoutException:
            return ToolResult.error(f"Request timed out after {self._executor.http_timeout}s")
        except httpx.RequestError as e:
            return ToolResult.error(f"Request failed: {e}")

        body = response.text
        if len(body) > self._max_chars:
            body = body[: self._max_chars] + "\n... (truncated)"

        output = f"HTTP {response.status_code} {response.reason_phrase}\nURL: {response.url}\n\n{body}"
        return ToolResult(
            success=response.is_success,
            output=output if response.is_success else f"Error: {output}",
            metadata={
                "status_code": response.status_code,
                "content_type": response.headers.get("content-type"),
            },
        )
