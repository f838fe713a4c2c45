"""Tests for the remote fetcher (httpx streaming into scratch storage)."""

import httpx
import pytest

from docconvert.core.constants import UrlScheme
from docconvert.ingestion.remote_fetcher import RemoteFetcher, parse_scheme
from docconvert.pipeline.errors import FetchError, TransportError


def _fetcher(handler) -> RemoteFetcher:
    return RemoteFetcher(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestParseScheme:
    def test_secure_and_insecure(self):
        assert parse_scheme("https://example.com/a.docx") == UrlScheme.SECURE
        assert parse_scheme("http://example.com/a.docx") == UrlScheme.INSECURE
        assert parse_scheme("HTTPS://example.com/a.docx") == UrlScheme.SECURE

    @pytest.mark.parametrize("url", [
        "ftp://example.com/a.docx",
        "file:///etc/passwd",
        "httpx://example.com/a.docx",
        "example.com/a.docx",
        "https:///a.docx",
    ])
    def test_rejects_everything_else(self, url):
        with pytest.raises(FetchError):
            parse_scheme(url)


class TestFetch:
    @pytest.mark.asyncio
    async def test_streams_body_to_disk(self, tmp_path):
        body = b"x" * 200_000

        def handler(request):
            return httpx.Response(
                200,
                content=body,
                headers={"content-type": "application/msword"},
            )

        dest = tmp_path / "doc.doc"
        fetched = await _fetcher(handler).fetch("https://example.com/doc.doc", dest)

        assert dest.read_bytes() == body
        assert fetched.mime == "application/msword"
        assert fetched.size_bytes == len(body)

    @pytest.mark.asyncio
    async def test_non_200_is_fetch_error_and_leaves_no_file(self, tmp_path):
        dest = tmp_path / "doc.doc"
        fetcher = _fetcher(lambda request: httpx.Response(403, text="denied"))

        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch("https://example.com/doc.doc", dest)

        assert exc_info.value.response_status == 403
        assert "403" in str(exc_info.value)
        assert not dest.exists()

    @pytest.mark.asyncio
    async def test_redirect_is_not_followed(self, tmp_path):
        fetcher = _fetcher(
            lambda request: httpx.Response(302, headers={"location": "https://elsewhere/doc.doc"})
        )
        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch("https://example.com/doc.doc", tmp_path / "doc.doc")
        assert exc_info.value.response_status == 302

    @pytest.mark.asyncio
    async def test_connection_failure_is_transport_error(self, tmp_path):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        dest = tmp_path / "doc.doc"
        with pytest.raises(TransportError):
            await _fetcher(handler).fetch("http://unreachable.invalid/doc.doc", dest)
        assert not dest.exists()

    @pytest.mark.asyncio
    async def test_partial_download_is_removed(self, tmp_path):
        async def broken_body():
            yield b"first chunk"
            raise httpx.ReadError("connection reset")

        dest = tmp_path / "doc.doc"
        fetcher = _fetcher(lambda request: httpx.Response(200, content=broken_body()))

        with pytest.raises(TransportError):
            await fetcher.fetch("https://example.com/doc.doc", dest)
        assert not dest.exists()

    @pytest.mark.asyncio
    async def test_unsupported_scheme_never_hits_network(self, tmp_path):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200)

        with pytest.raises(FetchError):
            await _fetcher(handler).fetch("ftp://example.com/doc.doc", tmp_path / "doc.doc")
        assert calls == []

    @pytest.mark.asyncio
    async def test_malformed_port_is_fetch_error(self, tmp_path):
        fetcher = _fetcher(lambda request: httpx.Response(200))

        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch("https://files.example.com:abc/a.docx", tmp_path / "a.docx")

        assert type(exc_info.value) is FetchError
        assert not (tmp_path / "a.docx").exists()
