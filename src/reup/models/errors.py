"""Error taxonomy and exception hierarchy."""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Categories of failure reported on outcomes and pipeline items."""

    NOT_FOUND = "not_found"
    INVALID_ARGUMENT = "invalid_argument"
    PROCESS_FAILURE = "process_failure"
    CANCELLED = "cancelled"
    NETWORK_FAILURE = "network_failure"
    REMOTE_REJECTED = "remote_rejected"
    PARTIAL_SUCCESS = "partial_success"


class ReupError(Exception):
    """Base error for all Reup errors."""

    def __init__(
        self,
        message: str,
        component: str = "",
        details: dict | None = None,
        kind: ErrorKind | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.component = component
        self.details = details or {}
        self.kind = kind


class NotFoundError(ReupError):
    """Executable, input file or credential file is missing."""

    def __init__(self, message: str, component: str = "", details: dict | None = None):
        super().__init__(message, component=component, details=details, kind=ErrorKind.NOT_FOUND)


class InvalidArgumentError(ReupError):
    """Malformed parameters supplied by the caller."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(
            message, component="validation", details=details, kind=ErrorKind.INVALID_ARGUMENT
        )


class DownloadError(ReupError):
    """Errors raised by a downloader collaborator."""

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        kind: ErrorKind = ErrorKind.NETWORK_FAILURE,
    ):
        super().__init__(message, component="download", details=details, kind=kind)


class UploadError(ReupError):
    """Errors raised while setting up the upload session."""

    def __init__(
        self, message: str, details: dict | None = None, kind: ErrorKind | None = None
    ):
        super().__init__(message, component="upload", details=details, kind=kind)


class OperationCancelledError(ReupError):
    """Cooperative cancellation was observed."""

    def __init__(self, message: str = "Operation was cancelled", component: str = ""):
        super().__init__(message, component=component, kind=ErrorKind.CANCELLED)
