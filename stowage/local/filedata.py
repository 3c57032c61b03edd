"""File metadata for items of the local filesystem backend."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from stowage.errors import StowError

METADATA_PATH = "path"
METADATA_IS_DIR = "is_dir"
METADATA_DIR = "dir"
METADATA_NAME = "name"
METADATA_MODE = "mode"
METADATA_MODE_D = "mode_d"
METADATA_PERM = "perm"
METADATA_INODE = "inode"
METADATA_SIZE = "size"
METADATA_IS_HARDLINK = "is_hardlink"
METADATA_IS_SYMLINK = "is_symlink"
METADATA_LINK = "link"

# Portable file mode type bits, highest first, with their letters.
_MODE_DIR = 1 << 31
_MODE_SYMLINK = 1 << 27
_MODE_DEVICE = 1 << 26
_MODE_NAMED_PIPE = 1 << 25
_MODE_SOCKET = 1 << 24
_MODE_SETUID = 1 << 23
_MODE_SETGID = 1 << 22
_MODE_CHAR_DEVICE = 1 << 21
_MODE_STICKY = 1 << 20
_MODE_IRREGULAR = 1 << 19
_MODE_LETTERS = "dalTLDpSugct?"


@dataclass(frozen=True)
class InodeInfo:
    """Inode number and hard link count of a file."""

    nlink: int
    ino: int


def get_inode_info(info: Any) -> InodeInfo:
    """Return the inode number and link count from a stat result."""
    try:
        return InodeInfo(nlink=int(info.st_nlink), ino=int(info.st_ino))
    except AttributeError as exc:
        raise StowError(
            "unable to determine if file is a hardlink (expected stat result)"
        ) from exc


def _file_mode(st_mode: int) -> int:
    mode = st_mode & 0o777
    if stat.S_ISDIR(st_mode):
        mode |= _MODE_DIR
    elif stat.S_ISLNK(st_mode):
        mode |= _MODE_SYMLINK
    elif stat.S_ISFIFO(st_mode):
        mode |= _MODE_NAMED_PIPE
    elif stat.S_ISSOCK(st_mode):
        mode |= _MODE_SOCKET
    elif stat.S_ISBLK(st_mode):
        mode |= _MODE_DEVICE
    elif stat.S_ISCHR(st_mode):
        mode |= _MODE_DEVICE | _MODE_CHAR_DEVICE
    elif not stat.S_ISREG(st_mode):
        mode |= _MODE_IRREGULAR
    if st_mode & stat.S_ISUID:
        mode |= _MODE_SETUID
    if st_mode & stat.S_ISGID:
        mode |= _MODE_SETGID
    if st_mode & stat.S_ISVTX:
        mode |= _MODE_STICKY
    return mode


def _mode_string(mode: int) -> str:
    kind = "".join(
        letter
        for offset, letter in enumerate(_MODE_LETTERS)
        if mode & (1 << (31 - offset))
    )
    perms = "".join(
        letter if mode & (1 << (8 - offset)) else "-"
        for offset, letter in enumerate("rwxrwxrwx")
    )
    return (kind or "-") + perms


def _rfc3339_nano(ns: int) -> str:
    seconds, nanos = divmod(ns, 1_000_000_000)
    moment = datetime.fromtimestamp(seconds).astimezone()
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    if nanos:
        text += "." + f"{nanos:09d}".rstrip("0")
    offset = moment.utcoffset()
    total = int(offset.total_seconds()) if offset else 0
    if total == 0:
        return text + "Z"
    sign = "+" if total > 0 else "-"
    hours, minutes = divmod(abs(total) // 60, 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def _extension(name: str) -> str:
    index = name.rfind(".")
    return name[index:] if index >= 0 else ""


def get_file_metadata(path: str, info: Any) -> dict[str, Any]:
    """Describe the file at ``path`` from its stat result ``info``."""
    mode = _file_mode(info.st_mode)
    is_symlink = bool(mode & _MODE_SYMLINK)
    link_target = ""
    if is_symlink:
        try:
            link_target = os.readlink(path)
        except OSError:
            link_target = ""

    clean_path = os.path.normpath(path)
    name = os.path.basename(clean_path)
    metadata: dict[str, Any] = {
        METADATA_PATH: clean_path,
        METADATA_IS_DIR: bool(mode & _MODE_DIR),
        METADATA_DIR: os.path.normpath(os.path.dirname(path)),
        METADATA_NAME: name,
        METADATA_MODE: f"{mode:o}",
        METADATA_MODE_D: str(mode),
        METADATA_PERM: _mode_string(mode),
        METADATA_SIZE: info.st_size,
        METADATA_IS_HARDLINK: False,
        METADATA_IS_SYMLINK: is_symlink,
        METADATA_LINK: link_target,
    }

    if os.name != "nt":
        try:
            inode = get_inode_info(info)
        except StowError as exc:
            metadata[METADATA_INODE] = {"error": str(exc)}
        else:
            metadata[METADATA_INODE] = inode
            metadata[METADATA_IS_HARDLINK] = inode.nlink > 1

    atime_ns = getattr(info, "st_atime_ns", None)
    mtime_ns = getattr(info, "st_mtime_ns", None)
    if atime_ns is not None and mtime_ns is not None:
        metadata["atime"] = _rfc3339_nano(atime_ns)
        metadata["mtime"] = _rfc3339_nano(mtime_ns)
    if os.name != "nt":
        uid = getattr(info, "st_uid", None)
        gid = getattr(info, "st_gid", None)
        if uid is not None and gid is not None:
            metadata["uid"] = uid
            metadata["gid"] = gid

    ext = _extension(name)
    if ext:
        metadata["ext"] = ext
    return metadata