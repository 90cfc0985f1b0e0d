"""
Exceptions raised by the rule synchronizer.
"""

from enum import Enum


class FailureKind(str, Enum):
    """Kinds of per-file failures collected in an install report."""

    source_unreadable = "source_unreadable"
    destination_write_failed = "destination_write_failed"
    cache_entry_not_found = "cache_entry_not_found"
    decision_missing = "decision_missing"
    layout_collision = "layout_collision"


class RuleSyncError(Exception):
    """Base exception for rule synchronization errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ConfigurationError(RuleSyncError):
    """Raised when settings are invalid."""
    pass


class SourceUnreadableError(RuleSyncError, OSError):
    """Raised when the source directory can't be listed. Fatal for the whole run."""
    pass


class DestinationWriteError(RuleSyncError):
    """Raised when a destination file can't be written or removed."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


class CacheEntryNotFoundError(RuleSyncError):
    """Raised when no cached copy of the entry file can be found."""
    pass


class DecisionMissingError(RuleSyncError):
    """Raised when the decision provider gives no usable answer for a conflict."""
    pass
