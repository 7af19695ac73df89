"""
Unit tests for loading raw emails from files and URLs.
"""

import httpx
import pytest

from email_json.config.settings import FetchConfig
from email_json.models.source import FileSource, UrlSource
from email_json.services.content_fetcher import ContentFetcher
from email_json.services.errors import (
    BadInputError,
    SourceFetchError,
    SourceNotFoundError,
    SourceReadError,
)

RAW_EMAIL = b"Subject: hi\r\n\r\nbody\r\n"


@pytest.mark.unit
class TestContentFetcherFiles:
    """Test reading emails from the filesystem."""

    @pytest.fixture
    def fetcher(self, fake_web):
        """Fetcher without a source root."""
        return ContentFetcher(fake_web.client(), config=FetchConfig(SOURCE_ROOT=""))

    @pytest.mark.asyncio
    async def test_reads_file(self, fetcher, tmp_path):
        """Test an existing file is returned byte for byte."""
        path = tmp_path / "message.eml"
        path.write_bytes(RAW_EMAIL)

        raw = await fetcher.fetch(FileSource(path=str(path)))

        assert raw == RAW_EMAIL

    @pytest.mark.asyncio
    async def test_missing_file(self, fetcher, tmp_path):
        """
        Test a path that does not exist

        Given: A path with no file behind it
        When: fetch() is called
        Then: SourceNotFoundError naming the path is raised
        """
        missing = str(tmp_path / "nope.eml")

        with pytest.raises(SourceNotFoundError) as exc_info:
            await fetcher.fetch(FileSource(path=missing))

        assert exc_info.value.status_code == 404
        assert missing in exc_info.value.message

    @pytest.mark.asyncio
    async def test_directory_is_read_error(self, fetcher, tmp_path):
        """Test a directory path is not readable as an email."""
        with pytest.raises(SourceReadError):
            await fetcher.fetch(FileSource(path=str(tmp_path)))

    @pytest.mark.asyncio
    async def test_oversized_file(self, fake_web, tmp_path):
        """Test files above the size cap are refused."""
        path = tmp_path / "huge.eml"
        path.write_bytes(b"x" * (1024 * 1024 + 1))
        fetcher = ContentFetcher(fake_web.client(), config=FetchConfig(MAX_SOURCE_SIZE_MB=1, SOURCE_ROOT=""))

        with pytest.raises(SourceReadError, match="exceeds limit"):
            await fetcher.fetch(FileSource(path=str(path)))


@pytest.mark.unit
class TestContentFetcherSourceRoot:
    """Test confinement of file paths to SOURCE_ROOT."""

    @pytest.fixture
    def root(self, tmp_path):
        root = tmp_path / "mail"
        root.mkdir()
        (root / "inbox.eml").write_bytes(RAW_EMAIL)
        (tmp_path / "secret.eml").write_bytes(b"secret")
        return root

    @pytest.fixture
    def fetcher(self, fake_web, root):
        return ContentFetcher(fake_web.client(), config=FetchConfig(SOURCE_ROOT=str(root)))

    @pytest.mark.asyncio
    async def test_relative_path_inside_root(self, fetcher):
        """Test relative paths resolve under the root."""
        assert await fetcher.fetch(FileSource(path="inbox.eml")) == RAW_EMAIL

    @pytest.mark.asyncio
    async def test_absolute_path_inside_root(self, fetcher, root):
        """Test absolute paths under the root are allowed."""
        assert await fetcher.fetch(FileSource(path=str(root / "inbox.eml"))) == RAW_EMAIL

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["../secret.eml", "/etc/passwd"])
    async def test_escape_rejected(self, fetcher, path):
        """Test traversal outside the root is bad input."""
        with pytest.raises(BadInputError, match="outside"):
            await fetcher.fetch(FileSource(path=path))


@pytest.mark.unit
class TestContentFetcherUrls:
    """Test downloading emails over HTTP."""

    @pytest.fixture
    def fetcher(self, fake_web):
        return ContentFetcher(fake_web.client())

    @pytest.mark.asyncio
    async def test_downloads_email(self, fetcher, fake_web):
        """Test a 200 response body is the raw email."""
        fake_web.add("https://mail.example.com/m.eml", RAW_EMAIL, content_type="message/rfc822")

        raw = await fetcher.fetch(UrlSource(url="https://mail.example.com/m.eml"))

        assert raw == RAW_EMAIL

    @pytest.mark.asyncio
    async def test_error_status(self, fetcher, fake_web):
        """Test non-2xx responses fail the request."""
        fake_web.add("https://mail.example.com/m.eml", b"boom", status=500, content_type="text/plain")

        with pytest.raises(SourceFetchError, match="HTTP 500") as exc_info:
            await fetcher.fetch(UrlSource(url="https://mail.example.com/m.eml"))

        assert exc_info.value.status_code == 400
        assert exc_info.value.error_code == "fetch_error"

    @pytest.mark.asyncio
    async def test_unreachable(self, fetcher, fake_web):
        """Test transport failures fail the request."""
        fake_web.add_error("https://mail.example.com/m.eml", httpx.ConnectError("name resolution failed"))

        with pytest.raises(SourceFetchError, match="Failed to fetch email from URL"):
            await fetcher.fetch(UrlSource(url="https://mail.example.com/m.eml"))


@pytest.mark.unit
class TestContentFetcherUnusablePaths:
    """Test paths the operating system refuses to look up."""

    @pytest.fixture
    def fetcher(self, fake_web):
        return ContentFetcher(fake_web.client(), config=FetchConfig(SOURCE_ROOT=""))

    @pytest.mark.asyncio
    async def test_name_too_long(self, fetcher, tmp_path):
        """Test an over-long file name is a read error."""
        path = str(tmp_path / ("a" * 5000))

        with pytest.raises(SourceReadError) as exc_info:
            await fetcher.fetch(FileSource(path=path))

        assert exc_info.value.error_code == "read_error"
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_embedded_nul_byte(self, fetcher):
        """Test a path containing a NUL byte is a read error."""
        with pytest.raises(SourceReadError):
            await fetcher.fetch(FileSource(path="/tmp/mail\x00.eml"))
