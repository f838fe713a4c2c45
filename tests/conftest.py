"""Shared test fixtures for docconvert."""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest
from botocore.exceptions import ClientError

from docconvert.ingestion.remote_fetcher import RemoteFetcher
from docconvert.notification.notifier import Notifier
from docconvert.pipeline.errors import ConversionError
from docconvert.pipeline.flow_resolver import FlowResolver
from docconvert.pipeline.orchestrator import ConversionOrchestrator
from docconvert.storage.blob_store import BlobStore

FIXED_EPOCH = 1700000000.123
DOCX_BYTES = b"PK\x03\x04 fake docx payload"
PDF_BYTES = b"%PDF-1.7\n fake pdf body\n%%EOF"


class FakeS3Client:
    """In-memory stand-in for the two boto3 calls BlobStore makes."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], bytes] = {}
        self.uploads: list[dict] = []
        self.fail_upload: Exception | None = None

    def download_fileobj(self, bucket, key, fh):
        try:
            fh.write(self.objects[(bucket, key)])
        except KeyError:
            raise ClientError(
                {"Error": {"Code": "404", "Message": "Not Found"}},
                "HeadObject",
            ) from None

    def upload_fileobj(self, fh, bucket, key, ExtraArgs=None):
        if self.fail_upload is not None:
            raise self.fail_upload
        body = fh.read()
        self.objects[(bucket, key)] = body
        self.uploads.append({"bucket": bucket, "key": key, "body": body, "extra_args": ExtraArgs})


class FakeConverter:
    """Writes a PDF next to where soffice would, or fails on demand."""

    def __init__(self) -> None:
        self.calls: list[tuple[Path, Path, str]] = []
        self.error: Exception | None = None
        self.output_bytes: bytes | None = PDF_BYTES

    async def convert(self, input_path, output_dir, target_format="pdf"):
        input_path, output_dir = Path(input_path), Path(output_dir)
        self.calls.append((input_path, output_dir, target_format))
        if self.error is not None:
            raise self.error
        output = output_dir / f"{input_path.stem}.{target_format}"
        if self.output_bytes is not None:
            output.write_bytes(self.output_bytes)
        return output


class FakeWeb:
    """httpx.MockTransport router: serves documents and records callbacks."""

    def __init__(self) -> None:
        self.documents: dict[str, httpx.Response] = {}
        self.callback_status = 200
        self.callbacks: list[httpx.Request] = []
        self.fetches: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            self.callbacks.append(request)
            return httpx.Response(self.callback_status, json={"ok": True})
        self.fetches.append(request)
        response = self.documents.get(str(request.url))
        if response is None:
            return httpx.Response(404, text="not found")
        return response

    def serve(self, url: str, body: bytes = DOCX_BYTES, content_type: str = "application/octet-stream"):
        self.documents[url] = httpx.Response(
            200,
            content=body,
            headers={"content-type": content_type},
        )

    def callback_payloads(self) -> list[dict]:
        return [json.loads(r.content) for r in self.callbacks]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_s3():
    return FakeS3Client()


@pytest.fixture
def fake_converter():
    return FakeConverter()


@pytest.fixture
def fake_web():
    return FakeWeb()


@pytest.fixture
def blob_store(fake_s3):
    return BlobStore(client=fake_s3, region="eu-west-1", endpoint="", public_base_url="")


@pytest.fixture
def scratch_dir(tmp_path):
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def orchestrator(blob_store, fake_converter, fake_web, scratch_dir):
    resolver = FlowResolver(
        store=blob_store,
        fetcher=RemoteFetcher(client=fake_web.client()),
        converter=fake_converter,
    )
    return ConversionOrchestrator(
        resolver,
        Notifier(client=fake_web.client()),
        scratch_root=str(scratch_dir),
        keep_scratch=False,
        clock=lambda: FIXED_EPOCH,
    )


@pytest.fixture
def failing_conversion(fake_converter):
    fake_converter.error = ConversionError("source file could not be loaded", returncode=1)
    return fake_converter
