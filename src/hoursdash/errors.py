from __future__ import annotations


class SyncError(Exception):
    """Base class for failures that abort a sync run."""


class NotConfiguredError(SyncError):
    """Clockify credentials are missing or still the placeholder value."""


class NoWorkspaceError(SyncError):
    """The Clockify account has no workspace to sync from."""


class ClockifyApiError(SyncError):
    """Transport or HTTP failure talking to the Clockify API."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
