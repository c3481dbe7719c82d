"""Shared enums used across the application."""

from enum import Enum


class DatabaseType(str, Enum):
    """Supported storage backends."""

    MEM = "mem"
    FILEDB = "filedb"
    COUCHDB = "couchdb"
