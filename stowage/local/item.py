"""Files of the local filesystem backend, seen as storage items."""

from __future__ import annotations

import os
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, BinaryIO
from urllib.parse import quote, urlunsplit

from stowage.local.filedata import get_file_metadata


def _time_string(ns: int) -> str:
    seconds, nanos = divmod(ns, 1_000_000_000)
    moment = datetime.fromtimestamp(seconds).astimezone()
    text = moment.strftime("%Y-%m-%d %H:%M:%S")
    if nanos:
        text += "." + f"{nanos:09d}".rstrip("0")
    return f"{text} {moment.strftime('%z')} {moment.tzname() or ''}".rstrip()


class LocalItem:
    """A file on disk.

    ``prefix_len`` is the length of the container path plus its trailing
    separator; the item name is the rest of the path.
    """

    def __init__(self, path: str, prefix_len: int) -> None:
        self._path = path
        self._prefix_len = prefix_len
        self._lock = threading.Lock()
        self._loaded = False
        self._info: os.stat_result | None = None
        self._info_error: OSError | None = None
        self._metadata: dict[str, Any] | None = None

    def __repr__(self) -> str:
        return f"LocalItem({self._path!r})"

    @property
    def id(self) -> str:
        """The full path of the file."""
        return self._path

    @property
    def name(self) -> str:
        """The path of the file inside its container, with ``/`` separators."""
        return self._path[self._prefix_len :].replace(os.sep, "/")

    @property
    def url(self) -> str:
        """A ``file`` URL naming the file."""
        path = os.path.normpath(self._path).replace(os.sep, "/")
        return urlunsplit(("file", "", quote(path), "", ""))

    def _ensure_info(self) -> os.stat_result:
        with self._lock:
            if not self._loaded:
                self._loaded = True
                try:
                    self._info = os.lstat(self._path)
                except OSError as exc:
                    self._info_error = exc
                else:
                    self._metadata = get_file_metadata(self._path, self._info)
        if self._info_error is not None:
            raise self._info_error
        assert self._info is not None
        return self._info

    def size(self) -> int:
        """Size of the file in bytes."""
        return self._ensure_info().st_size

    def etag(self) -> str:
        """The modification time as text, or an empty string if unknown."""
        try:
            info = self._ensure_info()
        except OSError:
            return ""
        return _time_string(info.st_mtime_ns)

    def last_mod(self) -> datetime | None:
        """The modification time, or None when the file cannot be read."""
        try:
            info = self._ensure_info()
        except OSError:
            return None
        seconds, nanos = divmod(info.st_mtime_ns, 1_000_000_000)
        return datetime.fromtimestamp(seconds, tz=timezone.utc) + timedelta(
            microseconds=nanos // 1000
        )

    def metadata(self) -> dict[str, Any]:
        """Stat information about the file."""
        self._ensure_info()
        assert self._metadata is not None
        return self._metadata

    def open(self) -> BinaryIO:
        """Open the file for reading."""
        return open(self._path, "rb")