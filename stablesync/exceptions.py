"""Synchronization error taxonomy."""


class SyncError(Exception):
    """Base class for synchronization errors."""


class NetworkFailure(SyncError):
    """Timeout, DNS or connection failure. Retried at the next scheduled run."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class BotBlocked(NetworkFailure):
    """The source answered with an anti-automation response."""


class SchemaDrift(SyncError):
    """Expected table or columns were not found on the page."""

    def __init__(self, message: str, page_kind: str | None = None):
        super().__init__(message)
        self.page_kind = page_kind


class DateParseFailure(SyncError, ValueError):
    """A row carried a date that is not ``DD.MM.YYYY``."""


class StorageWriteFailure(SyncError):
    """A storage write failed while reconciling one horse."""


class StatusUpdateUnsupported(SyncError):
    """The stablemate status could not be written (schema not migrated)."""


class InvalidStatusTransition(SyncError):
    """A fetch-status change outside the allowed transition table."""
