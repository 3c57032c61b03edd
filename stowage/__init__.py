"""Local directory storage as containers and items, with cloud storage helpers."""

__version__ = "0.1.0"