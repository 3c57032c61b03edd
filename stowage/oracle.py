"""Helpers for the Oracle Storage Cloud (Swift) backend.

A storage service instance is a location, a Swift container is a
container and a Swift object is an item.  This module holds the backend's
configuration checks, credential derivation from the authorization
endpoint, metadata conversion, URL building and parsing, and paging.
"""

from __future__ import annotations

import posixpath
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any
from urllib.parse import SplitResult, quote, unquote, urlsplit, urlunsplit

from stowage.errors import StowError

KIND = "oracle"

CONFIG_USERNAME = "username"
CONFIG_PASSWORD = "password"
CONFIG_AUTH_ENDPOINT = "authorization_endpoint"

METADATA_HEADER_PREFIX = "X-Object-Meta-"

_PATH_SAFE = "/!$&'()*+,;=:@~"


@dataclass(frozen=True)
class SwiftSettings:
    """Connection settings derived from a backend configuration."""

    user_name: str
    api_key: str
    auth_url: str
    tenant: str


def validate_config(config: Mapping[str, str]) -> None:
    """Raise StowError when the username, password or endpoint is missing."""
    if CONFIG_USERNAME not in config:
        raise StowError("missing account username")
    if CONFIG_PASSWORD not in config:
        raise StowError("missing account password")
    if CONFIG_AUTH_ENDPOINT not in config:
        raise StowError("missing authorization endpoint")


def is_oracle_url(url: str | SplitResult) -> bool:
    """Return True when the URL belongs to this backend."""
    parts = urlsplit(url) if isinstance(url, str) else url
    return parts.scheme == KIND


def parse_config(config: Mapping[str, str]) -> SwiftSettings:
    """Derive the Swift user name and tenant from the authorization endpoint.

    Metered endpoints have no dash before the first dot; their instance
    name is ``Storage``.  Unmetered endpoints carry the instance name
    before that dash.
    """
    username = config.get(CONFIG_USERNAME, "")
    endpoint = config.get(CONFIG_AUTH_ENDPOINT, "")

    dot_index = endpoint.find(".")
    if dot_index == -1:
        raise StowError(f"stow: oracle: bad format for {CONFIG_AUTH_ENDPOINT}")
    dash_index = endpoint[:dot_index].find("-")
    slash_index = endpoint.find("//") + 1

    if dash_index == -1:
        start_index = slash_index + 1
        instance_name = "Storage"
    else:
        start_index = dash_index + 1
        instance_name = endpoint[slash_index + 1 : dash_index]

    tenant = endpoint[start_index:dot_index]
    return SwiftSettings(
        user_name=f"{instance_name}-{tenant}:{username}",
        api_key=config.get(CONFIG_PASSWORD, ""),
        auth_url=endpoint,
        tenant=tenant,
    )


def fix_last_modified(value: str) -> str:
    """Rewrite a ``Last-Modified`` header that names UTC so it names GMT."""
    if "UTC" in value:
        return value.replace("UTC", "GMT", 1)
    return value


def prep_metadata(metadata: Mapping[str, Any] | None) -> dict[str, str]:
    """Turn item metadata into Swift object metadata headers.

    Every value must be a string.
    """
    prepared: dict[str, str] = {}
    for key, value in (metadata or {}).items():
        if not isinstance(value, str):
            raise StowError(
                f"value of key '{key}' in metadata must be of type string"
            )
        prepared[METADATA_HEADER_PREFIX + key] = value
    return prepared


def parse_metadata(headers: Mapping[str, str] | None) -> dict[str, Any]:
    """Pick object metadata out of response headers, keys in lower case."""
    prefix = METADATA_HEADER_PREFIX.lower()
    return {
        key[len(prefix) :].lower(): value
        for key, value in (headers or {}).items()
        if key.lower().startswith(prefix)
    }


def _clean_join(*segments: str) -> str:
    joined = "/".join(segment for segment in segments if segment)
    if not joined:
        return ""
    cleaned = posixpath.normpath(joined)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def item_url(storage_url: str, container: str, name: str) -> str:
    """Return the backend URL of object ``name`` in ``container``."""
    parts = urlsplit(storage_url)
    path = _clean_join(parts.path, container, name)
    return urlunsplit(
        (KIND, parts.netloc, quote(path, safe=_PATH_SAFE), parts.query, parts.fragment)
    )


def parse_item_url(url: str | SplitResult) -> tuple[str, str]:
    """Split an item URL into its container name and object name."""
    parts = urlsplit(url) if isinstance(url, str) else url
    if parts.scheme != KIND:
        raise StowError("not valid URL")
    pieces = unquote(parts.path).lstrip("/").split("/", 3)
    if len(pieces) != 4:
        raise StowError("wrong path")
    return pieces[2], pieces[3]


def next_marker(names: Sequence[str], count: int) -> str:
    """Return the cursor for the next page of a listing.

    A full page continues after its last name; a short page ends the
    listing with an empty cursor.
    """
    if names and len(names) == count:
        return names[-1]
    return ""