"""Directories of the local filesystem backend, seen as containers."""

from __future__ import annotations

import os
import stat
from collections.abc import Iterator, Mapping
from typing import Any, BinaryIO
from urllib.parse import quote, urlunsplit

from stowage.errors import (
    CURSOR_START,
    BadCursorError,
    NotFoundError,
    NotSupportedError,
    StowError,
)
from stowage.local.item import LocalItem

_CHUNK = 64 * 1024


def _walk(path: str) -> Iterator[tuple[str, os.stat_result]]:
    info = os.lstat(path)
    if not stat.S_ISDIR(info.st_mode):
        yield path, info
        return
    for name in sorted(os.listdir(path)):
        yield from _walk(os.path.join(path, name))


def flat_files(path: str) -> list[tuple[str, os.stat_result]]:
    """List every file under ``path`` in lexical walk order.

    Each entry is the file's path relative to ``path`` and its lstat
    result; directories are not listed.
    """
    return [(os.path.relpath(p, path), info) for p, info in _walk(path)]


class LocalContainer:
    """A directory holding items."""

    def __init__(self, name: str, path: str) -> None:
        self._name = name
        self._path = path

    def __repr__(self) -> str:
        return f"LocalContainer({self._name!r}, {self._path!r})"

    @property
    def id(self) -> str:
        """The path of the directory."""
        return self._path

    @property
    def name(self) -> str:
        """The name of the container."""
        return self._name

    @property
    def url(self) -> str:
        """A ``file`` URL naming the directory."""
        path = os.path.normpath(self._path).replace(os.sep, "/")
        return urlunsplit(("file", "", quote(path), "", ""))

    def _new_item(self, path: str) -> LocalItem:
        return LocalItem(path, len(self._path) + 1)

    def _full_path(self, name: str) -> str:
        return os.path.join(self._path, name.replace("/", os.sep))

    def create_item(self, name: str) -> tuple[LocalItem, BinaryIO]:
        """Create an empty file and return its item and a writable stream."""
        path = self._full_path(name)
        stream = open(path, "wb")
        return self._new_item(path), stream

    def remove_item(self, item_id: str) -> None:
        """Delete the file whose id is ``item_id``."""
        os.remove(item_id)

    def put(
        self,
        name: str,
        stream: BinaryIO,
        size: int,
        metadata: Mapping[str, Any] | None = None,
    ) -> LocalItem:
        """Write ``stream`` to the file ``name``, creating directories as needed.

        Raises StowError when the number of bytes written differs from
        ``size``.  Metadata is not supported.
        """
        if metadata:
            raise NotSupportedError("metadata")
        path = self._full_path(name)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        written = 0
        with open(path, "wb") as target:
            while chunk := stream.read(_CHUNK):
                target.write(chunk)
                written += len(chunk)
        if written != size:
            raise StowError("bad size")
        return self._new_item(path)

    def items(
        self, prefix: str, cursor: str, count: int
    ) -> tuple[list[LocalItem], str]:
        """Return one page of items and the cursor of the next page.

        The cursor is the relative path of the first file of the next
        page, or an empty string after the last page.
        """
        prefix = prefix.replace("/", os.sep)
        files = flat_files(self._path)
        if cursor != CURSOR_START:
            for index, (name, _) in enumerate(files):
                if name == cursor:
                    files = files[index:]
                    break
            else:
                raise BadCursorError()
        if len(files) > count:
            cursor = files[count][0]
            files = files[:count]
        else:
            cursor = ""
        items = [
            self._new_item(os.path.abspath(os.path.join(self._path, name)))
            for name, info in files
            if not stat.S_ISDIR(info.st_mode) and name.startswith(prefix)
        ]
        return items, cursor

    def item(self, item_id: str) -> LocalItem:
        """Return the item with the given absolute path or relative name."""
        path = item_id if os.path.isabs(item_id) else self._full_path(item_id)
        try:
            info = os.stat(path)
        except FileNotFoundError as exc:
            raise NotFoundError() from exc
        if stat.S_ISDIR(info.st_mode):
            raise StowError("unexpected directory")
        return self._new_item(path)