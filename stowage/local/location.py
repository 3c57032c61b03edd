"""The local filesystem backend: a directory whose subdirectories are containers."""

from __future__ import annotations

import os
import shutil
import stat
from collections.abc import Iterable, Mapping
from fnmatch import fnmatchcase
from urllib.parse import SplitResult, unquote, urlsplit

from stowage.errors import (
    CURSOR_START,
    NO_PREFIX,
    BadCursorError,
    NotFoundError,
    StowError,
)
from stowage.local.container import LocalContainer
from stowage.local.item import LocalItem

KIND = "local"

CONFIG_KEY_PATH = "path"


def validate_config(config: Mapping[str, str]) -> None:
    """Raise StowError when the path is missing."""
    if CONFIG_KEY_PATH not in config:
        raise StowError("missing path config")


def is_local_url(url: str | SplitResult) -> bool:
    """Return True when the URL names a local file."""
    parts = urlsplit(url) if isinstance(url, str) else url
    return parts.scheme == "file"


def _glob(pattern: str) -> list[str]:
    directory, base = os.path.split(pattern)
    try:
        names = os.listdir(directory or ".")
    except OSError:
        return []
    return sorted(os.path.join(directory, name) for name in names if fnmatchcase(name, base))


class LocalLocation:
    """A directory on disk whose subdirectories are containers."""

    def __init__(self, config: Mapping[str, str]) -> None:
        validate_config(config)
        info = os.stat(config[CONFIG_KEY_PATH])
        if not stat.S_ISDIR(info.st_mode):
            raise StowError("path must be directory")
        self._config = dict(config)

    def close(self) -> None:
        """Release the location; there is nothing to release."""

    def __enter__(self) -> LocalLocation:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _root(self) -> str:
        try:
            return self._config[CONFIG_KEY_PATH]
        except KeyError:
            raise StowError(f"missing {CONFIG_KEY_PATH} configuration") from None

    def item_by_url(self, url: str | SplitResult) -> LocalItem:
        """Return the item for a ``file`` URL; its name is the last path part."""
        parts = urlsplit(url) if isinstance(url, str) else url
        path = unquote(parts.path)
        separators = [os.sep] + ([os.altsep] if os.altsep else [])
        split_at = max(path.rfind(sep) for sep in separators) + 1
        return LocalItem(path, split_at)

    def remove_container(self, container_id: str) -> None:
        """Delete the container directory and everything in it."""
        if os.path.isdir(container_id) and not os.path.islink(container_id):
            shutil.rmtree(container_id)
        elif os.path.lexists(container_id):
            os.remove(container_id)

    def create_container(self, name: str) -> LocalContainer:
        """Create a new directory called ``name`` under the root."""
        full_path = os.path.join(self._root(), name)
        os.mkdir(full_path)
        return LocalContainer(name, os.path.abspath(full_path))

    def containers(
        self, prefix: str, cursor: str, count: int
    ) -> tuple[list[LocalContainer], str]:
        """Return one page of containers and the cursor of the next page.

        A first page listed with no prefix starts with the ``All``
        container, the root directory itself.
        """
        root = self._root()
        matches = _glob(os.path.join(root, prefix + "*"))

        found: list[LocalContainer] = []
        if prefix == NO_PREFIX and cursor == CURSOR_START:
            found.append(LocalContainer("All", root))
        found.extend(self._files_to_containers(root, matches))

        if cursor != CURSOR_START:
            for index, container in enumerate(found):
                if container.id == cursor:
                    found = found[index:]
                    break
            else:
                raise BadCursorError()

        if len(found) > count:
            cursor = found[count].id
            found = found[:count]
        else:
            cursor = ""
        return found, cursor

    def container(self, container_id: str) -> LocalContainer:
        """Return the container with the given path or name."""
        root = self._root()
        if os.path.isabs(container_id):
            full_path = container_id
        else:
            full_path = os.path.join(root, container_id)
        try:
            found = self._files_to_containers(root, [full_path])
        except FileNotFoundError as exc:
            raise NotFoundError() from exc
        if not found:
            raise NotFoundError()
        return found[0]

    @staticmethod
    def _files_to_containers(root: str, files: Iterable[str]) -> list[LocalContainer]:
        abs_root = os.path.abspath(root)
        result = []
        for file in files:
            if not stat.S_ISDIR(os.stat(file).st_mode):
                continue
            path = os.path.abspath(file)
            result.append(LocalContainer(os.path.relpath(path, abs_root), path))
        return result