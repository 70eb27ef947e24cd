"""Download and body-decoding tests"""

import gzip
import json

import httpx
import pytest

from manaledger.ingestion.download import ProgressLogger, decode_json, fetch_json, is_gzipped
from manaledger.tests.factories import streamed_response


def make_client(body: bytes, headers=None, status_code: int = 200) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        return streamed_response(body, status_code=status_code, headers=headers)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestGzipSniffing:
    def test_magic_number_detected(self):
        assert is_gzipped(gzip.compress(b"[]"))

    def test_plain_json_not_gzipped(self):
        assert not is_gzipped(b'[{"id": 1}]')
        assert not is_gzipped(b"")

    def test_decode_gzip_and_plain(self):
        payload = [{"id": "a"}, {"id": "b"}]
        raw = json.dumps(payload).encode()
        assert decode_json(raw) == payload
        assert decode_json(gzip.compress(raw)) == payload

    def test_malformed_json_raises(self):
        with pytest.raises(ValueError):
            decode_json(b"{not json")


class TestFetchJson:
    @pytest.mark.asyncio
    async def test_gzip_body_decompressed(self):
        payload = [{"id": 1}, {"id": 2}]
        async with make_client(gzip.compress(json.dumps(payload).encode())) as client:
            assert await fetch_json(client, "https://example.test/cards", "cards") == payload

    @pytest.mark.asyncio
    async def test_plain_body_with_lying_gzip_header(self):
        """Content-Encoding says gzip but the body is plain JSON"""
        payload = {"priceGuides": [{"idProduct": 1}]}
        async with make_client(
            json.dumps(payload).encode(), headers={"Content-Encoding": "gzip"}
        ) as client:
            assert await fetch_json(client, "https://example.test/prices", "prices") == payload

    @pytest.mark.asyncio
    async def test_gzip_body_without_header(self):
        payload = {"priceGuides": []}
        async with make_client(
            gzip.compress(json.dumps(payload).encode()), headers={"Content-Type": "application/octet-stream"}
        ) as client:
            assert await fetch_json(client, "https://example.test/prices", "prices") == payload

    @pytest.mark.asyncio
    async def test_http_error_propagates(self):
        async with make_client(b"oops", status_code=500) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await fetch_json(client, "https://example.test/cards", "cards")

    @pytest.mark.asyncio
    async def test_progress_reported(self):
        seen = []
        body = json.dumps([{"id": i} for i in range(50)]).encode()
        async with make_client(body) as client:
            await fetch_json(client, "https://example.test/cards", "cards", on_progress=lambda r, t: seen.append((r, t)))
        assert seen
        assert seen[-1] == (len(body), len(body))


class TestProgressLogger:
    def test_logs_each_step_once(self, monkeypatch):
        messages = []

        class RecordingLog:
            def info(self, message):
                messages.append(message)

        monkeypatch.setattr("manaledger.ingestion.download.log", RecordingLog())

        progress = ProgressLogger("cards")
        for received in (5, 10, 11, 55, 100):
            progress(received, 100)

        assert len(messages) == 3
