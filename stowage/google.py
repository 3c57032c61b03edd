"""Helpers for the Google Cloud Storage backend.

A project is a location, a bucket is a container and an object is an
item.  This module holds the backend's configuration checks, scope
selection, metadata conversion, and building and parsing of item URLs.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import SplitResult, unquote, urlsplit, urlunsplit

from stowage.errors import StowError

KIND = "google"

CONFIG_JSON = "json"
"""Key of the service account JSON document."""
CONFIG_PROJECT_ID = "project_id"
CONFIG_SCOPES = "scopes"
CONFIG_LOCATION = "Location"


def validate_config(config: Mapping[str, str]) -> None:
    """Raise StowError when the JSON document or the project id is missing."""
    if CONFIG_JSON not in config:
        raise StowError("missing JSON configuration")
    if CONFIG_PROJECT_ID not in config:
        raise StowError("missing Project ID")


def is_google_url(url: str | SplitResult) -> bool:
    """Return True when the URL belongs to this backend."""
    parts = urlsplit(url) if isinstance(url, str) else url
    return parts.scheme == KIND


def parse_scopes(config: Mapping[str, str]) -> list[str]:
    """Return the comma separated scopes given in the configuration.

    An empty list means no scopes were configured and the full-control
    storage scope applies.
    """
    scopes = config.get(CONFIG_SCOPES, "")
    if not scopes:
        return []
    return scopes.split(",")


def prep_url(media_link: str) -> str:
    """Turn an object's media link into its backend URL.

    The scheme becomes ``google`` and the query string is dropped.
    """
    try:
        parts = urlsplit(media_link)
    except ValueError as exc:
        raise StowError(f"invalid media link: {exc}") from exc
    return urlunsplit((KIND, parts.netloc, parts.path, "", parts.fragment))


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
    """Turn object metadata into the general metadata mapping."""
    return dict(metadata or {})


def parse_item_url(url: str | SplitResult) -> tuple[str, str]:
    """Split an item URL into its bucket name and object name.

    The path has the form
    ``/download/storage/v1/b/<bucket>/o/<object>``, where the object
    name may itself contain slashes.
    """
    parts = urlsplit(url) if isinstance(url, str) else url
    if parts.scheme != KIND:
        raise StowError("not valid google storage URL")
    pieces = unquote(parts.path).split("/", 7)
    if len(pieces) != 8:
        raise StowError("wrong path")
    return pieces[5], pieces[7]