"""Helpers for the Azure blob storage backend.

A storage account is a location, a blob container is a container and a
blob is an item.  This module holds the backend's configuration checks,
metadata conversion, ETag cleaning, block upload planning and URL parsing.
"""

from __future__ import annotations

import base64
import struct
from collections.abc import Iterator, Mapping
from typing import Any, BinaryIO
from urllib.parse import SplitResult, urlsplit

from stowage.errors import StowError

KIND = "azure"

CONFIG_ACCOUNT = "account"
CONFIG_KEY = "key"

MAX_PUT_SIZE = 256 * 1024 * 1024
"""Largest object that is uploaded in a single request."""

START_CHUNK_SIZE = 4 * 1024 * 1024
MAX_CHUNK_SIZE = 100 * 1024 * 1024
MAX_PARTS = 50000

TIME_FORMAT = "%a, %d %b %Y %H:%M:%S %Z"


class MultipartUploadTooBigError(StowError):
    """The object is too large for a single multi-part upload."""

    def __init__(self) -> None:
        super().__init__(
            "size exceeds maximum capacity for a single multi-part upload"
        )


def validate_config(config: Mapping[str, str]) -> None:
    """Raise StowError when the account name or the access key is missing."""
    if CONFIG_ACCOUNT not in config:
        raise StowError("missing account id")
    if CONFIG_KEY not in config:
        raise StowError("missing auth key")


def is_azure_url(url: str | SplitResult) -> bool:
    """Return True when the URL belongs to this backend."""
    parts = urlsplit(url) if isinstance(url, str) else url
    return parts.scheme == KIND


def clean_etag(etag: str) -> str:
    """Strip quotes, escaped quotes and weak ``W/`` markers from an ETag."""
    while True:
        if etag.startswith('\\"'):
            etag = etag.strip('\\"')
        elif etag.startswith('"'):
            etag = etag.strip('"')
        elif etag.startswith("W/"):
            etag = etag.replace("W/", "", 1)
        else:
            return etag


def determine_chunk_size(size: int) -> int:
    """Choose the block size for uploading ``size`` bytes in parts."""
    chunk_size = START_CHUNK_SIZE
    while True:
        parts = -(-size // chunk_size)
        if parts <= MAX_PARTS:
            return chunk_size
        if chunk_size == MAX_CHUNK_SIZE:
            raise MultipartUploadTooBigError()
        chunk_size = min(chunk_size * 2, MAX_CHUNK_SIZE)


def encoded_block_id(block_id: int) -> str:
    """Return the base64 form of a block number, as the block API expects."""
    return base64.b64encode(struct.pack("<Q", block_id)).decode("ascii")


def iter_blocks(stream: BinaryIO, size: int) -> Iterator[tuple[str, bytes]]:
    """Split ``stream`` into ``(block_id, chunk)`` pairs for a block upload.

    The chunk size is chosen from ``size`` at once, so an object that is
    too large raises before anything is read.
    """
    chunk_size = determine_chunk_size(size)
    return _blocks(stream, chunk_size)


def _blocks(stream: BinaryIO, chunk_size: int) -> Iterator[tuple[str, bytes]]:
    block_number = 0
    while chunk := stream.read(chunk_size):
        yield encoded_block_id(block_number), chunk
        block_number += 1


def prep_metadata(metadata: Mapping[str, Any] | None) -> dict[str, str]:
    """Check that every metadata value is a string and return a plain dict."""
    prepared: dict[str, str] = {}
    for key, value in (metadata or {}).items():
        if not isinstance(value, str):
            raise StowError(
                f"value of key '{key}' in metadata must be of type string"
            )
        prepared[key] = value
    return prepared


def parse_metadata(metadata: Mapping[str, str] | None) -> dict[str, Any]:
    """Turn blob metadata into the general metadata mapping."""
    return dict(metadata or {})


def blob_name(name: str) -> str:
    """Return the blob name used when storing an item called ``name``."""
    return name.replace(" ", "+")


def parse_item_url(url: str | SplitResult, account: str) -> tuple[str, str]:
    """Split an item URL into its container name and blob name.

    The URL must use the ``azure`` scheme and name ``account`` as the
    first label of its host.
    """
    parts = urlsplit(url) if isinstance(url, str) else url
    if parts.scheme != KIND:
        raise StowError("not valid azure URL")
    if parts.netloc.split(".")[0] != account:
        raise StowError("wrong azure URL")
    pieces = parts.path.lstrip("/").split("/", 1)
    if len(pieces) != 2:
        raise StowError("wrong path")
    return pieces[0], pieces[1]