"""Pytest configuration and fixtures for all tests."""

import os
from email.message import EmailMessage
from typing import Callable, Optional, Union

import httpx
import pytest
import pytest_asyncio

# Set test environment variables before importing settings
os.environ["APP_ENV"] = "testing"
os.environ["LOG_FORMAT"] = "console"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["ATTACHMENT_FALLTHROUGH"] = "false"
os.environ.pop("ADMIN_API_KEY", None)
os.environ.pop("SOURCE_ROOT", None)

from email_json.services.http_client import HttpClient  # noqa: E402

ResponseFactory = Callable[[httpx.Request], httpx.Response]


class FakeWeb:
    """
    In-memory web served through ``httpx.MockTransport``.

    Unknown URLs answer 404. Every requested URL is recorded in order.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Union[ResponseFactory, Exception]] = {}
        self.requested: list[str] = []
        self.clients: list[httpx.AsyncClient] = []

    def add(
        self,
        url: str,
        body: Union[str, bytes] = b"",
        *,
        status: int = 200,
        content_type: Optional[str] = "application/json",
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        content = body.encode("utf-8") if isinstance(body, str) else body
        response_headers = dict(headers or {})
        if content_type is not None:
            response_headers["content-type"] = content_type

        def respond(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, headers=response_headers, content=content)

        self.routes[url] = respond

    def add_redirect(self, url: str, location: str, status: int = 302) -> None:
        self.routes[url] = lambda request: httpx.Response(status, headers={"location": location})

    def add_error(self, url: str, error: Exception) -> None:
        self.routes[url] = error

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requested.append(url)
        route = self.routes.get(url)
        if route is None:
            return httpx.Response(404, text="not found")
        if isinstance(route, Exception):
            raise route
        return route(request)

    def client(self, max_response_bytes: Optional[int] = None) -> HttpClient:
        async_client = httpx.AsyncClient(
            transport=httpx.MockTransport(self.handler),
            follow_redirects=True,
        )
        self.clients.append(async_client)
        return HttpClient(async_client, max_response_bytes=max_response_bytes)

    async def aclose(self) -> None:
        for async_client in self.clients:
            await async_client.aclose()


@pytest_asyncio.fixture
async def fake_web():
    """Fresh fake web for each test; its clients are closed afterwards."""
    web = FakeWeb()
    yield web
    await web.aclose()


def build_email(
    *,
    html: Optional[str] = None,
    text: Optional[str] = None,
    attachments: tuple[tuple[str, Optional[str], bytes], ...] = (),
    subject: str = "Monthly export",
) -> bytes:
    """
    Build a raw RFC 822 email.

    Args:
        html: HTML body
        text: Plain-text body
        attachments: (content_type, filename, content) triples, in order
    """
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = "Reports <reports@example.com>"
    msg["To"] = "inbox@example.com"
    msg["Message-ID"] = "<export-001@example.com>"

    if text is not None:
        msg.set_content(text)
    if html is not None:
        if text is not None:
            msg.add_alternative(html, subtype="html")
        else:
            msg.set_content(html, subtype="html")

    for content_type, filename, content in attachments:
        maintype, subtype = content_type.split("/", 1)
        msg.add_attachment(content, maintype=maintype, subtype=subtype, filename=filename)

    return msg.as_bytes()


@pytest.fixture
def make_email() -> Callable[..., bytes]:
    """Factory fixture for raw email bytes."""
    return build_email


@pytest.fixture
def write_email(tmp_path) -> Callable[..., str]:
    """Write raw email bytes to a temp ``.eml`` file and return its path."""
    counter = {"n": 0}

    def _write(raw: bytes) -> str:
        counter["n"] += 1
        path = tmp_path / f"message_{counter['n']}.eml"
        path.write_bytes(raw)
        return str(path)

    return _write
