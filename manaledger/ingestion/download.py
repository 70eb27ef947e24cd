"""Whole-body HTTP download with gzip sniffing and JSON decoding.

The body is always buffered in full before parsing. Whether it is gzip is
decided by the magic number, not by Content-Type/Content-Encoding headers:
some providers advertise gzip and serve plain JSON, and the other way round.
Errors propagate; retries belong to the batch loader.
"""

from __future__ import annotations

import gzip
import json
from typing import Any, Callable, Optional

import httpx

from manaledger.core.logging import get_logger

log = get_logger("ingestion.download")

GZIP_MAGIC = b"\x1f\x8b"

ProgressCallback = Callable[[int, Optional[int]], None]


def is_gzipped(buffer: bytes) -> bool:
    return buffer[:2] == GZIP_MAGIC


def decode_json(buffer: bytes) -> Any:
    """Decompress when the buffer carries the gzip magic number, then parse."""
    if is_gzipped(buffer):
        buffer = gzip.decompress(buffer)
    return json.loads(buffer.decode("utf-8"))


class ProgressLogger:
    """Logs download progress in 10% steps (or every 10 MB when size is unknown)."""

    def __init__(self, label: str, step_percent: int = 10, step_bytes: int = 10 * 1024 * 1024):
        self.label = label
        self.step_percent = step_percent
        self.step_bytes = step_bytes
        self._last_mark = 0

    def __call__(self, received: int, total: Optional[int]) -> None:
        mb = received / 1024 / 1024
        if total:
            percent = int(received * 100 / total)
            mark = percent // self.step_percent
            if mark > self._last_mark:
                self._last_mark = mark
                log.info(f"{self.label}: {percent}% ({mb:.2f} MB)")
        else:
            mark = received // self.step_bytes
            if mark > self._last_mark:
                self._last_mark = mark
                log.info(f"{self.label}: {mb:.2f} MB")


async def fetch_bytes(
    client: httpx.AsyncClient,
    url: str,
    on_progress: Optional[ProgressCallback] = None,
) -> bytes:
    """Download the raw (undecoded) response body into memory."""
    buffer = bytearray()
    async with client.stream("GET", url, headers={"Accept-Encoding": "gzip"}) as response:
        response.raise_for_status()
        length = response.headers.get("Content-Length")
        total = int(length) if length and length.isdigit() else None
        async for chunk in response.aiter_raw():
            buffer.extend(chunk)
            if on_progress is not None:
                on_progress(len(buffer), total)
    return bytes(buffer)


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    label: str,
    on_progress: Optional[ProgressCallback] = None,
) -> Any:
    log.info(f"Downloading {label}...")
    buffer = await fetch_bytes(client, url, on_progress=on_progress or ProgressLogger(label))
    compressed = is_gzipped(buffer)
    log.info(
        f"Downloaded {label}: {len(buffer) / 1024 / 1024:.2f} MB "
        f"({'gzip, decompressing' if compressed else 'uncompressed, parsing directly'})"
    )

    payload = decode_json(buffer)
    if isinstance(payload, list):
        log.info(f"Parsed {label}: {len(payload)} records")
    return payload
