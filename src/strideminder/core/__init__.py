"""Core infrastructure modules."""

from .config import Settings, get_settings, reload_settings
from .database import Base, get_session, init_db
from .errors import (
    DegenerateSignalError,
    InsufficientDataError,
    ProcessingError,
    StorageError,
    StrideMinderError,
)

__all__ = [
    "Base",
    "DegenerateSignalError",
    "InsufficientDataError",
    "ProcessingError",
    "Settings",
    "StorageError",
    "StrideMinderError",
    "get_session",
    "get_settings",
    "init_db",
    "reload_settings",
]
