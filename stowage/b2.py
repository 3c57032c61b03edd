"""Helpers for the Backblaze B2 backend.

An account is a location, a bucket is a container and a file is an item.
This module holds the backend's configuration checks, metadata
conversion, URL parsing, bucket filtering and the prefix-aware paging of
file listings.  The B2 listing call has no prefix support of its own, so
paging fetches further pages until enough matching names are found.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from urllib.parse import SplitResult, unquote_plus, urlsplit

from stowage.errors import NO_PREFIX, StowError

KIND = "b2"

CONFIG_ACCOUNT_ID = "account_id"
CONFIG_APPLICATION_KEY = "application_key"
CONFIG_KEY_ID = "application_key_id"


@dataclass(frozen=True)
class FileEntry:
    """One file as returned by a B2 file listing."""

    id: str
    name: str
    size: int = 0
    upload_timestamp: int = 0
    """Upload time in milliseconds since the epoch."""

    @property
    def last_modified(self) -> datetime:
        """Upload time, truncated to whole seconds, in UTC."""
        return datetime.fromtimestamp(self.upload_timestamp // 1000, tz=timezone.utc)


ListFileNames = Callable[[str, int], "tuple[Sequence[FileEntry], str]"]
"""A listing call: ``(start_name, count) -> (files, next_file_name)``."""


def validate_config(config: Mapping[str, str]) -> None:
    """Raise StowError when the key, or both account and key id, are missing."""
    if CONFIG_APPLICATION_KEY not in config:
        raise StowError("missing application key")
    account_id = config.get(CONFIG_ACCOUNT_ID, "")
    key_id = config.get(CONFIG_KEY_ID, "")
    if not account_id and not key_id:
        raise StowError("account ID or applicaton key ID needs to be set")


def is_b2_url(url: str | SplitResult) -> bool:
    """Return True when the URL belongs to this backend."""
    parts = urlsplit(url) if isinstance(url, str) else url
    return parts.scheme == KIND


def is_not_found_message(message: str) -> bool:
    """Return True when a B2 error message means the file does not exist."""
    lowered = message.lower()
    return ("not" in lowered and "found" in lowered) or (
        "bad" in lowered and "fileid" in lowered
    )


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
    """Turn B2 file info into the general metadata mapping."""
    return dict(metadata or {})


def parse_item_url(url: str | SplitResult) -> tuple[str, str]:
    """Split an item URL into its bucket name and file name.

    The path has the form ``/file/<bucket>/<file name>``; the file name
    is query-unescaped.
    """
    parts = urlsplit(url) if isinstance(url, str) else url
    if parts.scheme != KIND:
        raise StowError("not valid b2 URL")
    pieces = parts.path.split("/", 3)
    if len(pieces) != 4:
        raise StowError("wrong path")
    return pieces[2], unquote_plus(pieces[3])


def page_items(
    list_file_names: ListFileNames,
    prefix: str,
    cursor: str,
    count: int,
) -> tuple[list[FileEntry], str]:
    """Return up to ``count`` files whose names start with ``prefix``.

    ``list_file_names(start_name, count)`` must return the files from
    ``start_name`` on and the name to continue from, empty at the end.
    The returned cursor is empty when the listing is complete.
    """
    items: list[FileEntry] = []
    while True:
        files, next_name = list_file_names(cursor, count)
        for entry in files:
            if prefix != NO_PREFIX and not entry.name.startswith(prefix):
                continue
            items.append(entry)
            if len(items) == count:
                break

        cursor = next_name
        if prefix == "" or cursor == "":
            return items, cursor
        if len(items) == count:
            break
        if not cursor.startswith(prefix):
            return items, ""

    if items and cursor and cursor != items[-1].name:
        # B2 continues after a name when a space is appended to it.
        cursor = items[-1].name + " "
    return items, cursor


def filter_buckets(names: Iterable[str], prefix: str) -> list[str]:
    """Keep the bucket names that start with ``prefix``, in order."""
    return [name for name in names if name.startswith(prefix)]