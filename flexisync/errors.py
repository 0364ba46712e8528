# FlexiSync Errors
# Exception hierarchy shared by the configuration, remote and sync layers

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flexisync.sync.results import ObjectSaveResult


class FlexiSyncError(Exception):
    """Base exception for all flexisync errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationError(FlexiSyncError):
    """Raised when configuration is missing, invalid or cannot be resolved."""


class DataShapeError(FlexiSyncError):
    """Raised when a record does not have the shape required to process it."""


class RemoteError(FlexiSyncError):
    """Exception raised for transport or platform errors from the remote connection."""

    def __init__(self, message: str, status_code: int | None = None, detail: str = ""):
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)


class PartialFailureError(FlexiSyncError):
    """Raised when records still fail after all attempts and partial success is not allowed."""

    def __init__(self, message: str, result: ObjectSaveResult | None = None):
        self.result = result
        super().__init__(message)
