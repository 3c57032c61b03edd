"""Errors and cursor conventions shared by every storage backend."""

CURSOR_START = ""
"""Cursor value that starts a listing from the beginning."""

NO_PREFIX = ""
"""Prefix value that matches every name."""


class StowError(Exception):
    """Base class for every error raised by a storage backend."""


class NotFoundError(StowError, LookupError):
    """The requested container or item does not exist."""

    def __init__(self, message: str = "not found") -> None:
        super().__init__(message)


class BadCursorError(StowError, ValueError):
    """A listing was asked to continue from a cursor it does not know."""

    def __init__(self, message: str = "bad cursor") -> None:
        super().__init__(message)


class NotSupportedError(StowError, NotImplementedError):
    """The backend has no support for the requested feature."""

    def __init__(self, feature: str) -> None:
        self.feature = feature
        super().__init__(f"not supported: {feature}")


def is_cursor_end(cursor: str) -> bool:
    """Return True when a listing cursor marks the last page."""
    return cursor == ""